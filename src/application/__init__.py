"""Application layer - use cases and orchestration.

This layer contains:
- Services: Upload, deletion and catalog orchestration
- DTOs: Data transfer objects for API boundaries
"""

from src.application.dtos import (
    DeleteVideoResponse,
    UpdateVideoRequest,
    UploadStep,
    UploadVideoRequest,
    VideoDeletionResult,
    VideoResponse,
    VideoUploadResult,
)
from src.application.services import (
    VideoCatalogService,
    VideoDeletionService,
    VideoUploadService,
)

__all__ = [
    # DTOs
    "DeleteVideoResponse",
    "UpdateVideoRequest",
    "UploadStep",
    "UploadVideoRequest",
    "VideoDeletionResult",
    "VideoResponse",
    "VideoUploadResult",
    # Services
    "VideoCatalogService",
    "VideoDeletionService",
    "VideoUploadService",
]
