"""Remote asset store abstractions and implementations."""

from src.commons.infrastructure.assetstore.base import (
    AssetStoreBase,
    AssetStoreError,
    HealthStatus,
    StoredAsset,
)
from src.commons.infrastructure.assetstore.cloudinary_provider import (
    CloudinaryAssetStore,
)
from src.commons.infrastructure.assetstore.minio_provider import MinioAssetStore

__all__ = [
    # Base classes
    "AssetStoreBase",
    "HealthStatus",
    "StoredAsset",
    # Implementations
    "CloudinaryAssetStore",
    "MinioAssetStore",
    # Exceptions
    "AssetStoreError",
]
