"""Application services for video upload, deletion and catalog queries."""

from src.application.services.catalog import VideoCatalogService
from src.application.services.deletion import VideoDeletionService
from src.application.services.upload import VideoUploadService

__all__ = [
    "VideoCatalogService",
    "VideoDeletionService",
    "VideoUploadService",
]
