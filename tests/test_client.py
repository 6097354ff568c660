import asyncio
import json

import pytest

from lod_checker.client import GeminiAnalysisClient, build_client
from lod_checker.config import Settings
from lod_checker.errors import ConfigError, ImageDecodeError, SchemaViolationError, ServiceError
from lod_checker.ingest import encode_image
from lod_checker.mock_client import MockAnalysisClient
from lod_checker.backend_client import BackendAnalysisClient
from lod_checker.models import LODLevel


def run(coro):
    return asyncio.run(coro)


def test_request_carries_image_instruction_and_schema(fake_genai, png_bytes, report_dict):
    genai_client = fake_genai(text=json.dumps(report_dict))
    client = GeminiAnalysisClient(genai_client, model="gemini-test", temperature=0.1)
    image = encode_image(png_bytes)

    result = run(client.analyze(image.payload, LODLevel.LOD400, "Steel Beam", None, mime_type=image.mime_type))

    assert result.overall_score == 72
    (call,) = genai_client.models.calls
    assert call["model"] == "gemini-test"
    image_part, text_part = call["contents"]
    assert image_part.inline_data.mime_type == "image/png"
    assert image_part.inline_data.data == png_bytes
    assert "Target LOD: LOD 400." in text_part.text
    assert "Element Type: Steel Beam." in text_part.text
    config = call["config"]
    assert config.response_mime_type == "application/json"
    assert "VDC Coordinator" in config.system_instruction
    assert config.response_schema is not None
    assert config.temperature == 0.1


def test_empty_reply_is_a_service_error(fake_genai, png_bytes):
    client = GeminiAnalysisClient(fake_genai(text=""), model="m")
    with pytest.raises(ServiceError, match="No response"):
        run(client.analyze(encode_image(png_bytes).payload, LODLevel.LOD300))


def test_transport_failure_is_wrapped(fake_genai, png_bytes):
    client = GeminiAnalysisClient(fake_genai(exc=ConnectionError("reset by peer")), model="m")
    with pytest.raises(ServiceError) as info:
        run(client.analyze(encode_image(png_bytes).payload, LODLevel.LOD300))
    assert isinstance(info.value.__cause__, ConnectionError)


def test_schema_violation_is_not_patched(fake_genai, png_bytes, report_dict):
    del report_dict["information"]
    client = GeminiAnalysisClient(fake_genai(text=json.dumps(report_dict)), model="m")
    with pytest.raises(SchemaViolationError):
        run(client.analyze(encode_image(png_bytes).payload, LODLevel.LOD300))


def test_gemini_client_needs_a_key():
    with pytest.raises(ConfigError):
        GeminiAnalysisClient.from_settings(Settings(api_key=None))


def test_build_client_prefers_mock_then_backend():
    assert isinstance(build_client(Settings(use_mock=True, backend_url="http://x")), MockAnalysisClient)
    backend = build_client(Settings(backend_url="http://backend:8000/", backend_timeout=5))
    assert isinstance(backend, BackendAnalysisClient)
    assert backend.base_url == "http://backend:8000"
    assert backend.timeout == 5
    assert isinstance(build_client(Settings(api_key="k")), GeminiAnalysisClient)


def test_mock_client_retargets_report(png_bytes):
    client = MockAnalysisClient()
    result = run(client.analyze(encode_image(png_bytes).payload, LODLevel.LOD500, "Pump"))
    assert result.lod_target == "LOD 500"
    assert result.element_name == "Pump"
    assert client.calls[0]["target_lod"] is LODLevel.LOD500


def test_undecodable_payload_is_a_service_error_before_any_request(fake_genai):
    genai_client = fake_genai(text="{}")
    client = GeminiAnalysisClient(genai_client, model="m")
    with pytest.raises(ServiceError, match="cannot send image") as info:
        run(client.analyze("!!!not base64!!!", LODLevel.LOD300))
    assert isinstance(info.value.__cause__, ImageDecodeError)
    assert genai_client.models.calls == []
