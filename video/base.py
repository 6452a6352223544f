from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from video.settings import GenerationSettings

COMPLETED = "completed"
FAILED = "failed"
TERMINAL_STATUSES = {COMPLETED, FAILED}

ImageSource = Union[bytes, str, Path]


@dataclass
class GenerationJob:
    """
    Standardized view of a provider job.

    The provider owns job state; this object is only a snapshot of the
    last payload it returned.
    """
    job_id: str
    status: Optional[str] = None
    estimated_time: str = "unknown"
    result_url: Optional[str] = None
    local_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], job_id: Optional[str] = None) -> "GenerationJob":
        """Build a job snapshot from a provider submission or status payload."""
        result = payload.get("result")
        result_url = result.get("video_url") if isinstance(result, dict) else None
        estimated_time = payload.get("estimated_time")
        return cls(
            job_id=str(payload.get("job_id") or job_id or ""),
            status=payload.get("status"),
            estimated_time=str(estimated_time) if estimated_time else "unknown",
            result_url=result_url,
            raw=payload,
        )

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED and bool(self.result_url)

    @property
    def is_finished(self) -> bool:
        # Unrecognized statuses are treated as still in progress
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> dict:
        """Convert the job to the payload returned by the status endpoint."""
        payload = dict(self.raw)
        if self.local_url:
            payload["localVideoUrl"] = self.local_url
        return payload


class VideoProvider(ABC):
    """
    Abstract interface for video generation providers.
    All providers must implement submit_text_job, submit_image_job and check_status.
    """

    provider_name = "base"

    @abstractmethod
    async def submit_text_job(
        self,
        prompt: str,
        style: Optional[str] = None,
        duration: Optional[int] = None,
        settings: Optional[GenerationSettings] = None,
    ) -> GenerationJob:
        """
        Submit a text-to-video job.

        Returns:
            GenerationJob carrying the provider job_id and estimated_time

        Raises:
            ProviderError: The provider rejected the request
            NetworkError: The provider could not be reached
        """
        pass

    @abstractmethod
    async def submit_image_job(
        self,
        image: ImageSource,
        mime_type: str = "image/png",
        prompt: Optional[str] = None,
        style: Optional[str] = None,
        settings: Optional[GenerationSettings] = None,
    ) -> GenerationJob:
        """
        Submit an image-to-video job.

        Args:
            image: Raw image bytes or a path to an image file
            mime_type: Content type of the image

        Raises:
            ProviderError: The provider rejected the request
            NetworkError: The provider could not be reached
        """
        pass

    @abstractmethod
    async def check_status(self, job_id: str) -> Dict[str, Any]:
        """
        Fetch the current job payload exactly as the provider reports it.

        Raises:
            ProviderError: The provider rejected the request
            NetworkError: The provider could not be reached
        """
        pass
