# config.py
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_MODEL = "gemini-3-flash-preview"

_API_KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: Optional[float] = None
    # Backend hop only; the Gemini call itself runs without a timeout
    backend_url: Optional[str] = None
    backend_timeout: float = 120.0
    use_mock: bool = False
    history_limit: int = 10
    log_level: str = "INFO"


def _get(source: Mapping[str, str], key: str) -> Optional[str]:
    value = source.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def load_settings(source: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment (or any mapping, e.g. Streamlit secrets merged over env)."""
    env = os.environ if source is None else source

    api_key = next((v for v in (_get(env, k) for k in _API_KEY_VARS) if v), None)
    temperature = _get(env, "LOD_CHECKER_TEMPERATURE")
    timeout = _get(env, "LOD_CHECKER_BACKEND_TIMEOUT")
    history = _get(env, "LOD_CHECKER_HISTORY_LIMIT")
    backend_url = _get(env, "LOD_CHECKER_BACKEND_URL")

    return Settings(
        api_key=api_key,
        model=_get(env, "LOD_CHECKER_MODEL") or DEFAULT_MODEL,
        temperature=float(temperature) if temperature else None,
        backend_url=backend_url.rstrip("/") if backend_url else None,
        backend_timeout=float(timeout) if timeout else 120.0,
        use_mock=(_get(env, "LOD_CHECKER_MOCK") or "").lower() in _TRUTHY,
        history_limit=max(0, int(history)) if history else 10,
        log_level=(_get(env, "LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # httpx (used by google-genai) logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
