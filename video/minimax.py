"""
MiniMax video generation provider implementation.

Handles text-to-video and image-to-video submissions and job status checks
against the MiniMax Video API. Every call is retried a fixed number of times
with a fixed delay; only the final failure reaches the caller.
"""
import asyncio
import json
import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from core.config import Settings
from video.base import GenerationJob, ImageSource, VideoProvider
from video.errors import NetworkError, ProviderError, VideoGenerationError
from video.settings import GenerationSettings

logger = logging.getLogger(__name__)

# Seconds before a second attempt at removing a staged upload
TEMP_CLEANUP_DELAY = 5.0


def _form_value(value: Any) -> str:
    """Multipart fields are text; structured values travel as JSON."""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value)
    return str(value)


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.error(f"Error cleaning up temp file {path.name}: {str(e)}")


class MiniMaxProvider(VideoProvider):
    """
    MiniMax Video API client.

    Configuration is injected once at construction. A missing API key is
    only logged; requests will then fail at the provider.
    """

    provider_name = "minimax"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = settings.minimax_api_key
        self.base_url = settings.minimax_base_url.rstrip("/")
        self.version = settings.minimax_api_version
        self.model_name = settings.minimax_model
        self.submit_timeout = settings.submit_timeout
        self.status_timeout = settings.status_timeout
        self.max_attempts = max(1, settings.max_attempts)
        self.retry_delay = settings.retry_delay
        self.temp_dir = Path(settings.temp_dir)
        self._transport = transport

        if not self.api_key:
            logger.warning("MINIMAX_API_KEY not set - video generation requests will fail")

    # ================================
    # PUBLIC API
    # ================================

    async def submit_text_job(
        self,
        prompt: str,
        style: Optional[str] = None,
        duration: Optional[int] = None,
        settings: Optional[GenerationSettings] = None,
    ) -> GenerationJob:
        payload: Dict[str, Any] = {"model": self.model_name, "prompt": prompt}
        if settings is not None:
            payload.update(settings.to_dict())
        if style:
            payload["style"] = style
        if duration:
            payload["duration"] = duration

        data = await self._request(
            "POST",
            self._endpoint("text_to_video"),
            timeout=self.submit_timeout,
            json_body=payload,
        )
        return self._job_from_submission(data)

    async def submit_image_job(
        self,
        image: ImageSource,
        mime_type: str = "image/png",
        prompt: Optional[str] = None,
        style: Optional[str] = None,
        settings: Optional[GenerationSettings] = None,
    ) -> GenerationJob:
        fields: Dict[str, str] = {"model": self.model_name}
        if prompt:
            fields["prompt"] = prompt
        if style:
            fields["style"] = style
        if settings is not None:
            for key, value in settings.to_dict().items():
                fields[key] = _form_value(value)

        endpoint = self._endpoint("image_to_video")

        if isinstance(image, (bytes, bytearray)):
            staged = self._stage_image(bytes(image), mime_type)
            try:
                data = await self._request(
                    "POST", endpoint, timeout=self.submit_timeout,
                    form_fields=fields, upload=(staged, mime_type),
                )
            finally:
                self._discard_staged(staged)
        elif isinstance(image, (str, Path)):
            data = await self._request(
                "POST", endpoint, timeout=self.submit_timeout,
                form_fields=fields, upload=(Path(image), mime_type),
            )
        else:
            raise TypeError("Image must be a file path or bytes")

        return self._job_from_submission(data)

    async def check_status(self, job_id: str) -> Dict[str, Any]:
        data = await self._request(
            "GET",
            self._endpoint(f"video_jobs/{quote(job_id, safe='')}"),
            timeout=self.status_timeout,
        )
        if not isinstance(data, dict):
            raise ProviderError("MiniMax API Request Error: unexpected status payload", data=data)
        return data

    # ================================
    # HTTP
    # ================================

    def _endpoint(self, path: str) -> str:
        return f"{self.base_url}/{self.version}/{path}"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key or ''}"}

    async def _request(
        self,
        method: str,
        url: str,
        timeout: float,
        json_body: Optional[dict] = None,
        form_fields: Optional[Dict[str, str]] = None,
        upload: Optional[Tuple[Path, str]] = None,
    ) -> Any:
        """Send one logical request, retrying transient failures."""
        attempt = 0
        while True:
            attempt += 1
            try:
                async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                    if upload is not None:
                        path, mime_type = upload
                        # Reopened per attempt; a previous attempt consumed the stream
                        with open(path, "rb") as fh:
                            response = await client.request(
                                method, url, headers=self._headers(),
                                data=form_fields, files={"image": (path.name, fh, mime_type)},
                            )
                    else:
                        response = await client.request(
                            method, url, headers=self._headers(), json=json_body,
                        )
                    response.raise_for_status()
                    return response.json()
            except (httpx.HTTPError, ValueError) as e:
                error = self._format_error(e)
                if attempt >= self.max_attempts:
                    logger.error(f"MiniMax {method} {url} failed after {attempt} attempts: {error.message}")
                    raise error from e
                logger.warning(
                    f"MiniMax {method} {url} failed (attempt {attempt}/{self.max_attempts}): {error.message}"
                )
                await asyncio.sleep(self.retry_delay)

    @staticmethod
    def _format_error(error: Exception) -> VideoGenerationError:
        if isinstance(error, httpx.HTTPStatusError):
            status = error.response.status_code
            try:
                body = error.response.json()
            except ValueError:
                body = None

            message = None
            if isinstance(body, dict):
                nested = body.get("error")
                if isinstance(nested, dict):
                    message = nested.get("message")
                message = message or body.get("message")
            message = message or "Unknown API error"
            return ProviderError(f"MiniMax API Error ({status}): {message}", status=status, data=body)

        if isinstance(error, httpx.TransportError):
            return NetworkError(f"MiniMax API Network Error: No response received - {error}")

        return ProviderError(f"MiniMax API Request Error: {error}")

    def _job_from_submission(self, data: Any) -> GenerationJob:
        if not isinstance(data, dict) or not data.get("job_id"):
            logger.error("No job_id returned from MiniMax API")
            raise ProviderError("No job_id returned from MiniMax API", data=data)
        return GenerationJob.from_payload(data)

    # ================================
    # TEMP FILES
    # ================================

    def _stage_image(self, image: bytes, mime_type: str) -> Path:
        """Write an in-memory image to a temp file so the upload can stream it."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        ext = mimetypes.guess_extension(mime_type or "") or ".png"
        path = self.temp_dir / f"{uuid.uuid4()}{ext}"
        path.write_bytes(image)
        return path

    def _discard_staged(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove temp file {path.name} ({str(e)}), retrying later")
            asyncio.get_running_loop().call_later(TEMP_CLEANUP_DELAY, _unlink_quietly, path)
