"""Video processing services."""

from src.infrastructure.video.base import ThumbnailRenderError, ThumbnailRendererBase
from src.infrastructure.video.ffmpeg_thumbnailer import FFmpegThumbnailer

__all__ = [
    "ThumbnailRendererBase",
    "ThumbnailRenderError",
    "FFmpegThumbnailer",
]
