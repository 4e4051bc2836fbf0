"""Infrastructure layer - external service implementations."""

from src.infrastructure.factory import (
    InfrastructureFactory,
    build_mongodb_uri,
    get_factory,
    reset_factory,
)
from src.infrastructure.video import (
    FFmpegThumbnailer,
    ThumbnailRenderError,
    ThumbnailRendererBase,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "build_mongodb_uri",
    "get_factory",
    "reset_factory",
    # Video
    "ThumbnailRendererBase",
    "ThumbnailRenderError",
    "FFmpegThumbnailer",
]
