"""Domain value objects."""

from src.domain.value_objects.media_transformation import MediaTransformation

__all__ = [
    "MediaTransformation",
]
