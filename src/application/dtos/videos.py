"""DTOs for video catalog and deletion operations."""

from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.models.video import VideoAsset


class _CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts either form on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoResponse(_CamelModel):
    """Public representation of a video record."""

    id: str = Field(description="Video identifier")
    title: str = Field(description="Video title")
    description: str = Field(description="Video description")
    video_url: str = Field(description="Playback URL")
    thumbnail_url: str = Field(description="Preview image URL")
    remote_asset_id: str = Field(description="Asset store identifier")
    created_at: datetime = Field(description="When the video was uploaded")
    updated_at: datetime = Field(description="Last edit timestamp")

    @classmethod
    def from_domain(cls, video: VideoAsset) -> Self:
        """Build the response from a persisted record."""
        if video.id is None:
            raise ValueError("Cannot serialize a video without an id")
        return cls(
            id=video.id,
            title=video.title,
            description=video.description,
            video_url=video.video_url,
            thumbnail_url=video.thumbnail_url,
            remote_asset_id=video.remote_asset_id,
            created_at=video.created_at,
            updated_at=video.updated_at,
        )


class UpdateVideoRequest(BaseModel):
    """Partial edit of a video; omitted or blank fields stay unchanged."""

    title: str | None = Field(default=None, max_length=300)
    description: str | None = Field(default=None, max_length=5000)

    model_config = ConfigDict(extra="ignore")

    def changes(self) -> dict[str, Any]:
        """Fields this edit would overwrite."""
        return VideoAsset.edits(title=self.title, description=self.description)


class VideoDeletionResult(BaseModel):
    """Outcome of a completed deletion."""

    video_id: str = Field(description="ID of the deleted record")
    remote_asset_id: str = Field(description="Asset store identifier")
    remote_deleted: bool = Field(
        description="False when the binary was already gone from the store",
    )
    record_deleted: bool = Field(
        description="False when the record vanished before it could be deleted",
    )


class DeleteVideoResponse(_CamelModel):
    """Response for video deletion."""

    message: str = Field(description="Status message")
    video_id: str = Field(description="ID of the deleted video")
    remote_deleted: bool = Field(description="Whether the binary was removed now")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    message: str = Field(description="Human-readable error message")
    code: str = Field(description="Stable error code")
    details: dict[str, Any] = Field(default_factory=dict)
    request_id: str = Field(description="Request correlation ID")
