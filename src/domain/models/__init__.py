"""Domain models."""

from src.domain.models.video import VideoAsset

__all__ = [
    "VideoAsset",
]
