"""
Video generation orchestration.

Entry points used by the HTTP layer: start a text or image generation job
and check a job's progress. Job state is owned by the provider; a completed
job's video is copied into local storage when its status is polled.
"""
import logging
from typing import Any, Dict, Optional

from video.base import GenerationJob, ImageSource, VideoProvider
from video.errors import LocalizationError, MissingFieldError
from video.settings import resolve_generation_settings
from video.storage import VideoStorage

logger = logging.getLogger(__name__)


class VideoGenerationService:
    """
    Starts provider jobs and localizes their results.

    No retries happen here; the provider client has already retried by the
    time an error reaches this layer.
    """

    def __init__(self, provider: VideoProvider, storage: VideoStorage):
        self.provider = provider
        self.storage = storage

    async def start_from_text(
        self,
        prompt: Optional[str],
        style: Optional[str] = None,
        duration: Optional[int] = None,
        user_id: Optional[str] = None,
        overrides: Any = None,
    ) -> Dict[str, Any]:
        """
        Start a text-to-video job.

        Raises:
            MissingFieldError: If prompt is empty
            ProviderError, NetworkError: If the provider call failed
        """
        if not prompt or not prompt.strip():
            raise MissingFieldError("Prompt is required")

        settings = resolve_generation_settings(overrides)
        logger.info(f"Starting text-to-video generation for user {user_id or 'anonymous'}")

        job = await self.provider.submit_text_job(
            prompt, style=style, duration=duration, settings=settings
        )
        logger.info(f"Video generation job created: {job.job_id}")
        return self._job_created(job)

    async def start_from_image(
        self,
        image: Optional[ImageSource],
        mime_type: str = "image/png",
        prompt: Optional[str] = None,
        style: Optional[str] = None,
        user_id: Optional[str] = None,
        overrides: Any = None,
    ) -> Dict[str, Any]:
        """
        Start an image-to-video job.

        Raises:
            MissingFieldError: If no image was supplied
            ProviderError, NetworkError: If the provider call failed
        """
        if image is None or (isinstance(image, (bytes, bytearray)) and not image):
            raise MissingFieldError("Image file is required")

        settings = resolve_generation_settings(overrides)
        logger.info(f"Starting image-to-video generation for user {user_id or 'anonymous'}")

        job = await self.provider.submit_image_job(
            image, mime_type=mime_type, prompt=prompt or None, style=style, settings=settings
        )
        logger.info(f"Video generation job created: {job.job_id}")
        return self._job_created(job)

    async def poll_status(self, job_id: Optional[str], user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Return the provider's status payload for a job.

        When the job has completed, its video is saved locally and the
        payload gains a localVideoUrl. A failure to save is logged and the
        payload is returned without it.

        Raises:
            MissingFieldError: If job_id is empty
            ProviderError, NetworkError: If the status check failed
        """
        if not job_id or not job_id.strip():
            raise MissingFieldError("Job ID is required")

        payload = await self.provider.check_status(job_id)
        job = GenerationJob.from_payload(payload, job_id=job_id)

        if job.is_completed:
            try:
                video = await self.storage.materialize(job.result_url, user_id=user_id, job_id=job_id)
                job.local_url = video.url
            except LocalizationError as e:
                # The generation itself succeeded; report it without a local copy
                logger.error(f"Error saving generated video for job {job_id}: {e.message}", exc_info=True)

        return job.to_dict()

    @staticmethod
    def _job_created(job: GenerationJob) -> Dict[str, Any]:
        return {
            "success": True,
            "jobId": job.job_id,
            "estimatedTime": job.estimated_time,
        }
