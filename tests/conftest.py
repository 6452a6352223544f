"""Pytest configuration helpers.

Puts the project root on `sys.path` so the top-level packages import
regardless of how pytest is invoked, and points the default application
at throwaway directories before anything reads the environment.
"""
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

_DEFAULT_DIR = tempfile.mkdtemp(prefix="studio-video-tests-")
os.environ.setdefault("VIDEO_PROVIDER", "mock")
os.environ.setdefault("VIDEO_STORAGE_DIR", os.path.join(_DEFAULT_DIR, "storage"))
os.environ.setdefault("VIDEO_TEMP_DIR", os.path.join(_DEFAULT_DIR, "temp"))

from core.config import Settings  # noqa: E402
from video.base import GenerationJob, VideoProvider  # noqa: E402


class RecordingProvider(VideoProvider):
    """In-process provider that records calls and replays scripted answers."""

    provider_name = "recording"

    def __init__(self, status_payload: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.calls: List[tuple] = []
        self.status_payload = status_payload or {"status": "processing"}
        self.error = error

    async def submit_text_job(self, prompt, style=None, duration=None, settings=None):
        self.calls.append(("text", prompt, style, duration, settings))
        if self.error:
            raise self.error
        return GenerationJob(job_id="job-text", estimated_time="30s")

    async def submit_image_job(self, image, mime_type="image/png", prompt=None, style=None, settings=None):
        self.calls.append(("image", image, mime_type, prompt, style, settings))
        if self.error:
            raise self.error
        return GenerationJob(job_id="job-image")

    async def check_status(self, job_id):
        self.calls.append(("status", job_id))
        if self.error:
            raise self.error
        return dict(self.status_payload)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        minimax_api_key="test-key",
        minimax_base_url="https://minimax.test",
        retry_delay=0,
        storage_dir=tmp_path / "storage",
        temp_dir=tmp_path / "temp",
        max_upload_bytes=1024,
    )


@pytest.fixture
def recording_provider() -> RecordingProvider:
    return RecordingProvider()
