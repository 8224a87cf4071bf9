"""Runtime configuration.

Settings are read from environment variables once and cached, after a
``.env`` file in the working directory (or a parent) has been loaded.
Variables already set in the environment win over the file.  Tests that
change the environment call ``get_settings.cache_clear()``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from urllib.parse import unquote, urlparse

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

__all__ = ["Settings", "configure_logging", "get_settings"]

DEFAULT_RENDER_CONCURRENCY = 2
DEFAULT_RENDER_TIMEOUT_MS = 30_000
DEFAULT_PUBLIC_BASE_URL = "http://localhost:8000/assets"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration values."""

    storage_dir: Path
    public_base_url: str
    object_store: str
    render_concurrency: int
    render_timeout_ms: int
    chromium_path: str | None
    log_level: str
    cloudinary_cloud_name: str | None
    cloudinary_api_key: str | None
    cloudinary_api_secret: str | None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _cloudinary_credentials() -> tuple[str | None, str | None, str | None]:
    """Cloud name, key and secret; the separate variables override ``CLOUDINARY_URL``."""
    cloud_name = api_key = api_secret = None
    raw = os.getenv("CLOUDINARY_URL")
    if raw:
        parsed = urlparse(raw)
        if parsed.scheme == "cloudinary" and parsed.hostname:
            cloud_name = parsed.hostname
            api_key = unquote(parsed.username) if parsed.username else None
            api_secret = unquote(parsed.password) if parsed.password else None
        else:
            logger.warning("Ignoring CLOUDINARY_URL without a cloudinary:// scheme and cloud name")
    return (
        os.getenv("CLOUDINARY_CLOUD_NAME") or cloud_name,
        os.getenv("CLOUDINARY_API_KEY") or api_key,
        os.getenv("CLOUDINARY_API_SECRET") or api_secret,
    )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %d", name, raw, default)
        return default
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached :class:`Settings` built from the environment."""
    load_dotenv(find_dotenv(usecwd=True))
    storage_env = os.getenv("RESUMIFY_STORAGE_DIR")
    storage_dir = (
        Path(storage_env).expanduser().resolve()
        if storage_env
        else _project_root() / ".resumify_storage"
    )
    cloud_name, api_key, api_secret = _cloudinary_credentials()

    return Settings(
        storage_dir=storage_dir,
        public_base_url=os.getenv("RESUMIFY_PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL).rstrip("/"),
        object_store=os.getenv("RESUMIFY_OBJECT_STORE", "local").strip().lower(),
        render_concurrency=_int_env("RESUMIFY_RENDER_CONCURRENCY", DEFAULT_RENDER_CONCURRENCY),
        render_timeout_ms=_int_env("RESUMIFY_RENDER_TIMEOUT_MS", DEFAULT_RENDER_TIMEOUT_MS),
        chromium_path=os.getenv("RESUMIFY_CHROMIUM_PATH") or None,
        log_level=os.getenv("RESUMIFY_LOG_LEVEL", "INFO").upper(),
        cloudinary_cloud_name=cloud_name,
        cloudinary_api_key=api_key,
        cloudinary_api_secret=api_secret,
    )


def configure_logging(level: str | None = None) -> None:
    """Attach a single stream handler to the root logger."""
    root = logging.getLogger()
    if not any(getattr(h, "_resumify", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._resumify = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level or get_settings().log_level)
