"""
Application configuration.

Loads variables from .env (if present) and builds a single Settings
object at startup. Components receive this object explicitly instead of
reading the environment on every call.
"""
import os
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={value!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid number for {name}={value!r}, using {default}")
        return default


def _env_log_level(name: str, default: str) -> str:
    value = os.getenv(name, default).strip().upper()
    if not isinstance(logging.getLevelName(value), int):
        logger.warning(f"Unknown log level {name}={value!r}, using {default}")
        return default
    return value


class Settings(BaseModel):
    """Runtime configuration for the video generation service."""

    video_provider: str = "minimax"

    # MiniMax Video API
    minimax_api_key: Optional[str] = None
    minimax_base_url: str = "https://api.minimax.chat"
    minimax_api_version: str = "v1"
    minimax_model: str = "video-01"

    # Submissions can take a long time on the provider side; status checks are cheap
    submit_timeout: float = 600.0
    status_timeout: float = 30.0
    max_attempts: int = 3
    retry_delay: float = 2.0

    # Local storage
    storage_dir: Path = Path.cwd() / "storage" / "videos"
    public_prefix: str = "/api/videos"
    temp_dir: Path = Path.cwd() / "temp"
    max_upload_bytes: int = 10 * 1024 * 1024

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create a Settings object populated from environment variables."""
        cwd = Path.cwd()
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            video_provider=os.getenv("VIDEO_PROVIDER", "minimax").lower(),
            minimax_api_key=os.getenv("MINIMAX_API_KEY") or os.getenv("DEEP_CANVAS_API_KEY"),
            minimax_base_url=os.getenv("MINIMAX_BASE_URL", "https://api.minimax.chat").rstrip("/"),
            minimax_api_version=os.getenv("MINIMAX_API_VERSION", "v1"),
            minimax_model=os.getenv("MINIMAX_MODEL", "video-01"),
            submit_timeout=_env_float("VIDEO_SUBMIT_TIMEOUT", 600.0),
            status_timeout=_env_float("VIDEO_STATUS_TIMEOUT", 30.0),
            max_attempts=max(1, _env_int("VIDEO_RETRIES", 3)),
            retry_delay=max(0.0, _env_float("VIDEO_RETRY_DELAY", 2.0)),
            storage_dir=Path(os.getenv("VIDEO_STORAGE_DIR") or cwd / "storage" / "videos"),
            public_prefix="/" + os.getenv("VIDEO_PUBLIC_PREFIX", "/api/videos").strip("/"),
            temp_dir=Path(os.getenv("VIDEO_TEMP_DIR") or cwd / "temp"),
            max_upload_bytes=_env_int("VIDEO_MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=_env_log_level("LOG_LEVEL", "INFO"),
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings.from_env()
