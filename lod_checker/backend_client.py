import asyncio
import logging
from typing import Optional

import requests

from lod_checker.client import AnalysisClient
from lod_checker.errors import ImageDecodeError, ServiceError
from lod_checker.ingest import DEFAULT_MIME, decode_payload
from lod_checker.models import AnalysisResult, LODLevel
from lod_checker.schema import validate_report

logger = logging.getLogger(__name__)

_EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg", "image/webp": "webp", "image/gif": "gif"}


class BackendAnalysisClient(AnalysisClient):
    """Sends the image to the FastAPI backend (api/main.py), which holds the Gemini key."""

    name = "backend"

    def __init__(self, base_url: str, timeout: Optional[float] = 120.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _post_image(self, endpoint: str, image_bytes: bytes, mime_type: str, data: dict) -> dict:
        filename = f"upload.{_EXTENSIONS.get(mime_type, 'png')}"
        files = {"file": (filename, image_bytes, mime_type)}
        r = self._session.post(f"{self.base_url}/{endpoint.lstrip('/')}", files=files, data=data,
                               timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def analyze_sync(self, image: str, target_lod: LODLevel, element_type: Optional[str] = None,
                     context: Optional[str] = None, mime_type: str = DEFAULT_MIME) -> AnalysisResult:
        data = {"target_lod": LODLevel(target_lod).value}
        if element_type:
            data["element_type"] = element_type
        if context:
            data["context"] = context
        try:
            image_bytes = decode_payload(image)
        except ImageDecodeError as e:
            raise ServiceError(f"cannot send image: {e}") from e
        try:
            payload = self._post_image("/analyze", image_bytes, mime_type, data)
        except (requests.RequestException, ValueError) as e:
            raise ServiceError(f"backend request failed: {e}") from e
        result = AnalysisResult.from_dict(validate_report(payload))
        logger.info("backend: %s scored %d", result.element_name, result.overall_score)
        return result

    async def analyze(self, image, target_lod, element_type=None, context=None, mime_type=DEFAULT_MIME):
        return await asyncio.to_thread(self.analyze_sync, image, target_lod, element_type, context, mime_type)
