"""Data Transfer Objects for application layer."""

from src.application.dtos.upload import (
    UploadStep,
    UploadVideoRequest,
    VideoUploadResult,
)
from src.application.dtos.videos import (
    DeleteVideoResponse,
    ErrorResponse,
    UpdateVideoRequest,
    VideoDeletionResult,
    VideoResponse,
)

__all__ = [
    # Upload DTOs
    "UploadStep",
    "UploadVideoRequest",
    "VideoUploadResult",
    # Catalog DTOs
    "VideoResponse",
    "UpdateVideoRequest",
    "VideoDeletionResult",
    "DeleteVideoResponse",
    "ErrorResponse",
]
