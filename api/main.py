# main.py
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Optional

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse

from lod_checker import __version__
from lod_checker.client import AnalysisClient, build_client
from lod_checker.config import Settings, configure_logging, load_settings
from lod_checker.controller import GENERIC_ERROR
from lod_checker.errors import ImageDecodeError
from lod_checker.ingest import encode_image
from lod_checker.models import LODLevel

logger = logging.getLogger(__name__)


def create_app(client: Optional[AnalysisClient] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the backend. The analysis client is created once at startup
    (or injected, e.g. a MockAnalysisClient in tests).
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.analysis_client is None:
            # the backend always talks to Gemini (or the mock), never to itself
            app.state.analysis_client = build_client(replace(settings, backend_url=None))
        logger.info("analysis client: %s", app.state.analysis_client.name)
        yield

    app = FastAPI(title="LOD Checker API", version=__version__, lifespan=lifespan)
    app.state.analysis_client = client
    app.state.settings = settings

    # ----------------------------
    # Health check
    # ----------------------------
    @app.get("/")
    def health():
        active = app.state.analysis_client
        return {
            "status": "ok",
            "model": settings.model,
            "client": active.name if active else None,
        }

    # ----------------------------
    # Analysis endpoint
    # ----------------------------
    @app.post("/analyze")
    async def analyze(
        file: UploadFile = File(...),
        target_lod: str = Form(LODLevel.LOD300.value),
        element_type: Optional[str] = Form(None),
        context: Optional[str] = Form(None),
    ):
        try:
            level = LODLevel.from_label(target_lod)
        except ValueError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})

        try:
            image = encode_image(await file.read(), file.content_type)
        except ImageDecodeError as e:
            return JSONResponse(status_code=400, content={"error": f"Could not read image: {e}"})

        try:
            result = await app.state.analysis_client.analyze(
                image.payload, level, element_type, context, mime_type=image.mime_type,
            )
        except Exception:
            logger.exception("analysis of %s failed", file.filename)
            return JSONResponse(status_code=502, content={"error": GENERIC_ERROR})

        return result.to_dict()

    return app


_settings = load_settings()
configure_logging(_settings.log_level)
app = create_app(settings=_settings)
