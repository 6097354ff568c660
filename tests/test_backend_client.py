import asyncio

import pytest
import requests

from lod_checker.backend_client import BackendAnalysisClient
from lod_checker.errors import ImageDecodeError, SchemaViolationError, ServiceError
from lod_checker.ingest import encode_image
from lod_checker.models import LODLevel


class FakeResponse:
    def __init__(self, payload=None, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.payload is None:
            raise ValueError("no JSON")
        return self.payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc:
            raise self.exc
        return self.response


def test_posts_multipart_and_parses(png_bytes, report_dict):
    session = FakeSession(FakeResponse(report_dict))
    client = BackendAnalysisClient("http://backend:8000/", timeout=30, session=session)
    image = encode_image(png_bytes)

    result = asyncio.run(client.analyze(image.payload, LODLevel.LOD400, "Beam", "", mime_type=image.mime_type))

    assert result.element_name == report_dict["elementName"]
    url, kwargs = session.calls[0]
    assert url == "http://backend:8000/analyze"
    assert kwargs["data"] == {"target_lod": "LOD 400", "element_type": "Beam"}
    name, data, mime = kwargs["files"]["file"]
    assert (name, data, mime) == ("upload.png", png_bytes, "image/png")
    assert kwargs["timeout"] == 30


def test_http_error_becomes_service_error(png_bytes):
    session = FakeSession(FakeResponse({"error": "x"}, status=502))
    client = BackendAnalysisClient("http://backend", session=session)
    with pytest.raises(ServiceError):
        client.analyze_sync(encode_image(png_bytes).payload, LODLevel.LOD300)


def test_connection_error_becomes_service_error(png_bytes):
    session = FakeSession(exc=requests.ConnectionError("refused"))
    client = BackendAnalysisClient("http://backend", session=session)
    with pytest.raises(ServiceError):
        client.analyze_sync(encode_image(png_bytes).payload, LODLevel.LOD300)


def test_backend_reply_is_validated_again(png_bytes, report_dict):
    report_dict["geometry"]["status"] = "OK"
    client = BackendAnalysisClient("http://backend", session=FakeSession(FakeResponse(report_dict)))
    with pytest.raises(SchemaViolationError):
        client.analyze_sync(encode_image(png_bytes).payload, LODLevel.LOD300)


def test_undecodable_payload_is_a_service_error_before_posting(report_dict):
    session = FakeSession(FakeResponse(report_dict))
    client = BackendAnalysisClient("http://backend", session=session)
    with pytest.raises(ServiceError, match="cannot send image") as info:
        asyncio.run(client.analyze("!!!not base64!!!", LODLevel.LOD300))
    assert isinstance(info.value.__cause__, ImageDecodeError)
    assert session.calls == []


def test_backend_reply_with_nan_score_is_rejected(png_bytes, report_dict):
    report_dict["overallScore"] = float("nan")
    client = BackendAnalysisClient("http://backend", session=FakeSession(FakeResponse(report_dict)))
    with pytest.raises(SchemaViolationError):
        client.analyze_sync(encode_image(png_bytes).payload, LODLevel.LOD300)
