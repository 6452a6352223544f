"""
Mock video provider for development and testing.

Plays the part of the remote provider: accepts submissions, and reports a
job as completed (with a sample video URL) from the second status check on.
Used when VIDEO_PROVIDER=mock so the studio can run without an API key.
"""
import uuid
import logging
from typing import Any, Dict, Optional

from video.base import COMPLETED, GenerationJob, ImageSource, VideoProvider
from video.settings import GenerationSettings

logger = logging.getLogger(__name__)

MOCK_VIDEO_URL = "https://sample-videos.com/video321/mp4/720/big_buck_bunny_720p_1mb.mp4"


class MockProvider(VideoProvider):
    """
    Mock video provider.

    Job state lives in this instance, standing in for the provider's own
    records; the rest of the service still keeps no job ledger.
    """

    provider_name = "mock"

    def __init__(self, video_url: str = MOCK_VIDEO_URL):
        self.video_url = video_url
        self._jobs: Dict[str, Dict[str, Any]] = {}

    def _create(self, kind: str, prompt: Optional[str]) -> GenerationJob:
        job_id = str(uuid.uuid4())
        self._jobs[job_id] = {"job_id": job_id, "status": "starting", "checks": 0}
        logger.info(f"[MOCK] Created {kind} job {job_id} for prompt: {(prompt or '')[:50]}")
        return GenerationJob(job_id=job_id, status="starting", estimated_time="10s")

    async def submit_text_job(
        self,
        prompt: str,
        style: Optional[str] = None,
        duration: Optional[int] = None,
        settings: Optional[GenerationSettings] = None,
    ) -> GenerationJob:
        return self._create("text", prompt)

    async def submit_image_job(
        self,
        image: ImageSource,
        mime_type: str = "image/png",
        prompt: Optional[str] = None,
        style: Optional[str] = None,
        settings: Optional[GenerationSettings] = None,
    ) -> GenerationJob:
        return self._create("image", prompt)

    async def check_status(self, job_id: str) -> Dict[str, Any]:
        """
        Simulates progress: starting -> processing -> completed.

        Unknown ids are reported as failed, as the real provider would.
        """
        job = self._jobs.get(job_id)
        if not job:
            return {"job_id": job_id, "status": "failed", "message": "Job not found"}

        job["checks"] += 1
        if job["checks"] == 1:
            return {"job_id": job_id, "status": "processing"}
        return {"job_id": job_id, "status": COMPLETED, "result": {"video_url": self.video_url}}
