"""
Analysis request clients.

All clients expose the same coroutine:

    await client.analyze(image, target_lod, element_type, context) -> AnalysisResult

where image is the bare base64 payload produced by lod_checker.ingest. A client
either returns a fully validated report or raises an AnalysisError.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from google import genai
from google.genai import types

from lod_checker.config import Settings
from lod_checker.errors import ConfigError, ImageDecodeError, ServiceError
from lod_checker.ingest import DEFAULT_MIME, decode_payload
from lod_checker.models import AnalysisResult, LODLevel
from lod_checker.prompts import SYSTEM_PROMPT, build_instruction
from lod_checker.schema import parse_report, response_schema

logger = logging.getLogger(__name__)


class AnalysisClient(ABC):
    name = "abstract"

    @abstractmethod
    async def analyze(self, image: str, target_lod: LODLevel,
                      element_type: Optional[str] = None,
                      context: Optional[str] = None,
                      mime_type: str = DEFAULT_MIME) -> AnalysisResult:
        """Run one compliance check. Raises AnalysisError on any failure."""
        ...


def make_config(temperature: Optional[float] = None) -> types.GenerateContentConfig:
    kwargs = dict(
        system_instruction=SYSTEM_PROMPT,
        response_mime_type="application/json",
        response_schema=response_schema(),
    )
    if temperature is not None:
        kwargs["temperature"] = temperature
    return types.GenerateContentConfig(**kwargs)


class GeminiAnalysisClient(AnalysisClient):
    """Calls Gemini directly. The genai client is injected so one instance serves the app."""

    name = "gemini"

    def __init__(self, client: genai.Client, model: str, temperature: Optional[float] = None):
        self._client = client
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiAnalysisClient":
        if not settings.api_key:
            raise ConfigError("GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY) is not set")
        return cls(genai.Client(api_key=settings.api_key), settings.model, settings.temperature)

    def build_contents(self, image: str, target_lod: LODLevel, element_type: Optional[str],
                       context: Optional[str], mime_type: str = DEFAULT_MIME) -> list:
        return [
            types.Part.from_bytes(data=decode_payload(image), mime_type=mime_type),
            types.Part.from_text(text=build_instruction(target_lod, element_type, context)),
        ]

    async def analyze(self, image, target_lod, element_type=None, context=None, mime_type=DEFAULT_MIME):
        try:
            contents = self.build_contents(image, target_lod, element_type, context, mime_type)
        except ImageDecodeError as e:
            raise ServiceError(f"cannot send image: {e}") from e
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=make_config(self.temperature),
            )
        except Exception as e:
            raise ServiceError(f"Gemini request failed: {e}") from e

        text = getattr(response, "text", None)
        if not text:
            raise ServiceError("No response from AI")
        result = parse_report(text)
        logger.info("gemini: %s scored %d against %s", result.element_name, result.overall_score,
                    LODLevel(target_lod).value)
        return result


def build_client(settings: Settings) -> AnalysisClient:
    """Pick the client for this deployment: mock, FastAPI backend, or Gemini directly."""
    if settings.use_mock:
        from lod_checker.mock_client import MockAnalysisClient
        return MockAnalysisClient()
    if settings.backend_url:
        from lod_checker.backend_client import BackendAnalysisClient
        return BackendAnalysisClient(settings.backend_url, timeout=settings.backend_timeout)
    return GeminiAnalysisClient.from_settings(settings)
