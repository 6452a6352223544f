"""
Error types raised by the video generation flow.

The router maps these onto HTTP responses; nothing below the router
knows about status codes other than the upstream one carried by
ProviderError.
"""
from typing import Any, Optional


class VideoGenerationError(Exception):
    """Base class for all video generation failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingFieldError(VideoGenerationError):
    """A required request field was not supplied."""


class ProviderError(VideoGenerationError):
    """The provider answered with an error (or an unusable body)."""

    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.status = status
        self.data = data


class NetworkError(VideoGenerationError):
    """No response was received from the provider."""


class LocalizationError(VideoGenerationError):
    """Saving a finished video to local storage failed."""


class DownloadError(LocalizationError):
    """The remote video could not be fetched."""


class WriteError(LocalizationError):
    """The video could not be written to local storage."""
