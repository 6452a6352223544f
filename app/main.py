"""
FastAPI application for the studio video backend.

Wires the video generation router to a provider client and local video
storage built once at startup, and serves saved videos as static files.
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from core.config import Settings, get_settings
from video.base import VideoProvider
from video.factory import get_video_provider
from video.router import router as video_router
from video.service import VideoGenerationService
from video.storage import VideoStorage

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[VideoProvider] = None,
    storage: Optional[VideoStorage] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; read from the environment if omitted
        provider: Video provider; chosen by settings.video_provider if omitted
        storage: Video storage; rooted at settings.storage_dir if omitted
    """
    settings = settings or get_settings()

    app = FastAPI(title="Studio Video API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    storage = storage or VideoStorage(settings.storage_dir, public_prefix=settings.public_prefix)
    storage.ensure_root()
    provider = provider or get_video_provider(settings)

    app.state.settings = settings
    app.state.video_service = VideoGenerationService(provider, storage)

    app.include_router(video_router)

    # Serve saved videos at the same prefix their localVideoUrl uses
    app.mount(storage.public_prefix, StaticFiles(directory=str(storage.root)), name="videos")

    @app.get("/health")
    def health():
        return {"ok": True, "provider": provider.provider_name, "storage": storage.public_prefix}

    logger.info(f"Video provider: {provider.provider_name}, storage root: {storage.root}")
    return app


app = create_app()
