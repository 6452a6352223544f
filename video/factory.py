"""
Video provider factory.

Centralizes provider creation so app/main.py only deals with the
VideoProvider interface.
"""
import logging

from core.config import Settings
from video.base import VideoProvider
from video.minimax import MiniMaxProvider
from video.mock import MockProvider

logger = logging.getLogger(__name__)


def get_video_provider(settings: Settings) -> VideoProvider:
    """
    Get video provider based on settings.video_provider.

    Defaults to 'minimax'. Unknown names fall back to MiniMax with a warning.

    Returns:
        VideoProvider: The configured video provider instance
    """
    provider_name = settings.video_provider.lower()

    if provider_name == "minimax":
        return MiniMaxProvider(settings)
    elif provider_name == "mock":
        logger.warning("Using mock video provider - no real videos will be generated")
        return MockProvider()
    else:
        logger.warning(f"Unknown provider '{provider_name}', defaulting to minimax")
        return MiniMaxProvider(settings)
