"""DTOs for video upload operations."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from src.domain.models.video import VideoAsset


class UploadStep(str, Enum):
    """Individual steps in the upload pipeline."""

    VALIDATING = "validating"
    BUFFERING = "buffering"
    UPLOADING = "uploading"
    CONFIRMING = "confirming"
    DERIVING = "deriving"
    PERSISTING = "persisting"
    COMPENSATING = "compensating"
    COMPLETED = "completed"


class UploadVideoRequest(BaseModel):
    """Form fields accompanying an uploaded video."""

    title: str = Field(min_length=1, max_length=300, description="Video title")
    description: str = Field(
        default="",
        max_length=5000,
        description="Optional description",
    )
    filename: str | None = Field(
        default=None,
        description="Client-side file name of the payload",
    )
    content_type: str | None = Field(
        default=None,
        description="Declared MIME type of the payload",
    )

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: object) -> object:
        """Reject whitespace-only titles by stripping before length checks."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: object) -> object:
        """Treat a missing description as empty."""
        return "" if v is None else v


class VideoUploadResult(BaseModel):
    """Outcome of a completed upload."""

    video: VideoAsset = Field(description="The persisted record")
    created: bool = Field(
        default=True,
        description="True when a new record was created",
    )
