from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
from datetime import datetime


class TextToVideoRequest(BaseModel):
    """
    Request model for text-to-video generation.

    prompt is optional at the schema level so a missing prompt is reported
    as a 400 by the service rather than a validation error. Settings fields
    accept anything; invalid values fall back to defaults.
    """
    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    style: Optional[str] = None
    duration: Optional[int] = None
    user_id: Optional[str] = Field(None, alias="userId")
    resolution: Optional[Any] = None
    fps: Optional[Any] = None
    quality: Optional[Any] = None
    format: Optional[Any] = None

    def settings_overrides(self) -> dict:
        return {
            "resolution": self.resolution,
            "fps": self.fps,
            "quality": self.quality,
            "format": self.format,
        }


class JobCreatedResponse(BaseModel):
    """Response model for a submitted generation job."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    job_id: str = Field(..., alias="jobId")
    estimated_time: str = Field("unknown", alias="estimatedTime")


class StoredVideoOut(BaseModel):
    """Metadata for a video saved in local storage."""
    model_config = ConfigDict(populate_by_name=True)

    filename: str
    url: str
    path: str
    size: int
    created_at: datetime = Field(..., alias="createdAt")


class DeleteResponse(BaseModel):
    success: bool
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: Optional[str] = None
    message: str
