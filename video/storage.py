"""
Local video storage.

Downloads finished videos from the provider into a per-user directory
layout under a single storage root, and lists/deletes what is stored there:

    {root}/{user_id?}/{job_id-or-uuid}.mp4

Files are served by the static mount at the public prefix, so every stored
file also has a root-relative URL.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import httpx

from video.errors import DownloadError, WriteError

logger = logging.getLogger(__name__)

VIDEO_EXTENSION = ".mp4"
DOWNLOAD_TIMEOUT = 300.0


@dataclass
class StoredVideo:
    filename: str
    url: str
    path: str
    size: int
    created_at: datetime

    def to_dict(self) -> dict:
        """Convert to the dictionary shape returned by the API."""
        return {
            "filename": self.filename,
            "url": self.url,
            "path": self.path,
            "size": self.size,
            "createdAt": self.created_at.isoformat(),
        }


def _safe_component(value: str, label: str) -> str:
    """
    Validate a single path component taken from caller input.

    Raises:
        ValueError: If the value is empty or could leave its directory
    """
    value = str(value)
    if not value.strip() or value in (".", ".."):
        raise ValueError(f"Invalid {label}")
    if "/" in value or "\\" in value or ".." in value or "\x00" in value:
        raise ValueError(f"Invalid {label}: contains path separators")
    return value


class VideoStorage:
    """Filesystem storage for generated videos."""

    def __init__(
        self,
        root: Union[str, Path],
        public_prefix: str = "/api/videos",
        download_timeout: float = DOWNLOAD_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.root = Path(root)
        self.public_prefix = "/" + public_prefix.strip("/")
        self.download_timeout = download_timeout
        self._transport = transport

    def ensure_root(self) -> None:
        """Create the storage root if it does not exist yet."""
        if not self.root.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created video storage directory: {self.root}")

    def user_dir(self, user_id: Optional[str] = None) -> Path:
        """Directory for a user's videos; anonymous callers share the root."""
        if not user_id:
            return self.root
        return self.root / _safe_component(user_id, "user id")

    def public_url(self, file_path: Path) -> str:
        relative = Path(file_path).relative_to(self.root).as_posix()
        return f"{self.public_prefix}/{relative}"

    def _describe(self, file_path: Path) -> StoredVideo:
        stats = file_path.stat()
        # Files are not modified after the download completes
        return StoredVideo(
            filename=file_path.name,
            url=self.public_url(file_path),
            path=str(file_path),
            size=stats.st_size,
            created_at=datetime.fromtimestamp(stats.st_mtime),
        )

    # ================================
    # MATERIALIZE
    # ================================

    async def materialize(
        self,
        remote_url: str,
        user_id: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> StoredVideo:
        """
        Download a remote video into local storage.

        The same job_id always maps to the same file, so saving a job twice
        overwrites the earlier copy.

        Args:
            remote_url: Provider-hosted video URL
            user_id: Optional owner; selects the per-user subdirectory
            job_id: Optional provider job id; used as the file name

        Returns:
            StoredVideo describing the saved file

        Raises:
            DownloadError: If the remote video could not be fetched
            WriteError: If the file could not be written
        """
        try:
            target_dir = self.user_dir(user_id)
            stem = _safe_component(job_id, "job id") if job_id else str(uuid.uuid4())
            await asyncio.to_thread(target_dir.mkdir, parents=True, exist_ok=True)
        except (ValueError, OSError) as e:
            raise WriteError(f"Failed to save video: {str(e)}") from e

        file_path = target_dir / f"{stem}{VIDEO_EXTENSION}"
        # Streamed beside the final file and moved over it only once complete
        part_path = target_dir / f"{stem}.{uuid.uuid4().hex}.part"

        try:
            async with httpx.AsyncClient(
                timeout=self.download_timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                async with client.stream("GET", remote_url) as response:
                    response.raise_for_status()
                    await self._write_stream(response, part_path)
        except (httpx.HTTPError, httpx.InvalidURL, TypeError) as e:
            await asyncio.to_thread(self._discard_partial, part_path)
            raise DownloadError(f"Failed to download video: {str(e)}") from e
        except WriteError:
            await asyncio.to_thread(self._discard_partial, part_path)
            raise

        try:
            await asyncio.to_thread(part_path.replace, file_path)
            video = await asyncio.to_thread(self._describe, file_path)
        except OSError as e:
            await asyncio.to_thread(self._discard_partial, part_path)
            raise WriteError(f"Failed to save video: {str(e)}") from e

        logger.info(f"Saved video {video.filename} ({video.size} bytes) to {target_dir}")
        return video

    async def _write_stream(self, response: httpx.Response, file_path: Path) -> None:
        """Write the response body chunk by chunk without buffering it whole."""
        try:
            fh = await asyncio.to_thread(open, file_path, "wb")
        except OSError as e:
            raise WriteError(f"Failed to save video: {str(e)}") from e

        try:
            async for chunk in response.aiter_bytes():
                try:
                    await asyncio.to_thread(fh.write, chunk)
                except OSError as e:
                    raise WriteError(f"Failed to save video: {str(e)}") from e
        finally:
            try:
                await asyncio.to_thread(fh.close)
            except OSError as e:
                raise WriteError(f"Failed to save video: {str(e)}") from e

    @staticmethod
    def _discard_partial(file_path: Path) -> None:
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial download {file_path.name}: {str(e)}")

    # ================================
    # INDEX
    # ================================

    def list_for_user(self, user_id: Optional[str] = None) -> List[StoredVideo]:
        """
        List stored videos for a user, newest first.

        Returns an empty list when the user has no directory.
        """
        try:
            directory = self.user_dir(user_id)
        except ValueError:
            logger.warning(f"Rejected video listing for invalid user id {user_id!r}")
            return []

        if not directory.is_dir():
            return []

        try:
            videos = [
                self._describe(p)
                for p in directory.iterdir()
                if p.is_file() and p.suffix == VIDEO_EXTENSION
            ]
        except OSError as e:
            logger.error(f"Error getting user videos: {str(e)}", exc_info=True)
            return []

        videos.sort(key=lambda v: v.created_at, reverse=True)
        return videos

    def resolve_video_path(self, video_id: str) -> Optional[Path]:
        """
        Map a public video id (path relative to the root) to a file path.

        Returns None if the id would point outside the storage root.
        """
        if not video_id or "\x00" in video_id:
            return None
        root = self.root.resolve()
        candidate = (root / video_id).resolve()
        if candidate == root or root not in candidate.parents:
            return None
        return candidate

    def delete(self, file_path: Union[str, Path]) -> bool:
        """
        Delete a stored video.

        Returns:
            True if a file was removed, False otherwise. Never raises.
        """
        try:
            target = Path(file_path)
            if target.is_file():
                target.unlink()
                logger.info(f"Deleted video {target.name}")
                return True
            return False
        except OSError as e:
            logger.error(f"Error deleting video: {str(e)}", exc_info=True)
            return False
