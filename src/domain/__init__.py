"""Domain layer - business models and logic."""

from src.domain.exceptions import (
    DomainException,
    PersistenceException,
    RemoteStoreException,
    UnexpectedException,
    UploadException,
    ValidationException,
    VideoNotFoundException,
)
from src.domain.models import VideoAsset
from src.domain.value_objects import MediaTransformation

__all__ = [
    # Exceptions
    "DomainException",
    "ValidationException",
    "VideoNotFoundException",
    "RemoteStoreException",
    "UploadException",
    "PersistenceException",
    "UnexpectedException",
    # Models
    "VideoAsset",
    # Value Objects
    "MediaTransformation",
]
