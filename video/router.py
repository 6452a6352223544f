import logging
import re
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from video.errors import MissingFieldError, VideoGenerationError
from video.schemas import (
    DeleteResponse,
    ErrorResponse,
    JobCreatedResponse,
    StoredVideoOut,
    TextToVideoRequest,
)
from video.service import VideoGenerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/video", tags=["video"])

IMAGE_TYPES = re.compile(r"jpeg|jpg|png|gif|webp")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_video_service(request: Request) -> VideoGenerationService:
    """Service instance built once at startup (see app.main.create_app)."""
    return request.app.state.video_service


def _error_response(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "message": message or error},
    )


def _is_allowed_image(upload: UploadFile) -> bool:
    """Both the mimetype and the file extension must name an image type."""
    extension = Path(upload.filename or "").suffix.lower()
    return bool(IMAGE_TYPES.search(upload.content_type or "")) and bool(IMAGE_TYPES.search(extension))


@router.post("/text-to-video", response_model=JobCreatedResponse, responses=ERROR_RESPONSES)
async def text_to_video(
    req: TextToVideoRequest,
    service: VideoGenerationService = Depends(get_video_service),
):
    """
    Start a text-to-video generation job.

    Returns {"success": true, "jobId": ..., "estimatedTime": ...}; poll
    GET /video/status/{jobId} for progress.
    """
    try:
        return await service.start_from_text(
            req.prompt,
            style=req.style,
            duration=req.duration,
            user_id=req.user_id,
            overrides=req.settings_overrides(),
        )
    except MissingFieldError as e:
        return _error_response(400, e.message)
    except VideoGenerationError as e:
        logger.error(f"Error generating video from text: {e.message}")
        return _error_response(500, "Failed to generate video", e.message)
    except Exception as e:
        logger.error(f"Unexpected error generating video from text: {str(e)}", exc_info=True)
        return _error_response(500, "Failed to generate video", "Video generation failed")


@router.post("/image-to-video", response_model=JobCreatedResponse, responses=ERROR_RESPONSES)
async def image_to_video(
    request: Request,
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    style: Optional[str] = Form(None),
    user_id: Optional[str] = Form(None, alias="userId"),
    resolution: Optional[str] = Form(None),
    fps: Optional[str] = Form(None),
    quality: Optional[str] = Form(None),
    video_format: Optional[str] = Form(None, alias="format"),
    service: VideoGenerationService = Depends(get_video_service),
):
    """
    Start an image-to-video generation job from an uploaded image.

    Accepts jpeg, png, gif and webp images up to the configured size limit.
    """
    image_bytes = None
    mime_type = "image/png"
    if image is not None and image.filename:
        if not _is_allowed_image(image):
            return _error_response(400, "Only image files are allowed")

        max_bytes = request.app.state.settings.max_upload_bytes
        try:
            image_bytes = await image.read(max_bytes + 1)
        except Exception as e:
            logger.error(f"Failed to read uploaded image: {str(e)}", exc_info=True)
            return _error_response(400, "Failed to read image file")
        if len(image_bytes) > max_bytes:
            return _error_response(400, "Image file too large")
        mime_type = image.content_type or mime_type

    try:
        return await service.start_from_image(
            image_bytes,
            mime_type=mime_type,
            prompt=prompt,
            style=style,
            user_id=user_id,
            overrides={
                "resolution": resolution,
                "fps": fps,
                "quality": quality,
                "format": video_format,
            },
        )
    except MissingFieldError as e:
        return _error_response(400, e.message)
    except VideoGenerationError as e:
        logger.error(f"Error generating video from image: {e.message}")
        return _error_response(500, "Failed to generate video", e.message)
    except Exception as e:
        logger.error(f"Unexpected error generating video from image: {str(e)}", exc_info=True)
        return _error_response(500, "Failed to generate video", "Video generation failed")


@router.get("/status/{job_id}", responses=ERROR_RESPONSES)
async def video_status(
    job_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: VideoGenerationService = Depends(get_video_service),
):
    """
    Get the provider's status payload for a generation job.

    Completed jobs are saved to local storage and carry a localVideoUrl.
    """
    try:
        return await service.poll_status(job_id, user_id=user_id)
    except MissingFieldError as e:
        return _error_response(400, e.message)
    except VideoGenerationError as e:
        logger.error(f"Error checking video status: {e.message}")
        return _error_response(500, "Failed to check video status", e.message)
    except Exception as e:
        logger.error(f"Unexpected error checking video status: {str(e)}", exc_info=True)
        return _error_response(500, "Failed to check video status", "Status check failed")


@router.get("/user/{user_id}", response_model=List[StoredVideoOut])
def list_user_videos(
    user_id: str,
    service: VideoGenerationService = Depends(get_video_service),
):
    """List a user's saved videos, newest first."""
    return [video.to_dict() for video in service.storage.list_for_user(user_id)]


@router.delete("/{video_id:path}", response_model=DeleteResponse, responses={404: {"model": DeleteResponse}})
def delete_video(
    video_id: str,
    service: VideoGenerationService = Depends(get_video_service),
):
    """Delete a saved video by its path relative to the storage root."""
    path = service.storage.resolve_video_path(video_id)
    if path is not None and service.storage.delete(path):
        return {"success": True, "message": "Video deleted successfully"}

    return JSONResponse(
        status_code=404,
        content={"success": False, "message": "Video not found or could not be deleted"},
    )
