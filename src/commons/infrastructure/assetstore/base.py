"""Abstract base class for remote asset store operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class StoredAsset:
    """Result of storing a binary in the asset store.

    ``remote_id`` and ``url`` may be empty when a provider reports success
    without them; callers must check before relying on either.
    """

    remote_id: str
    url: str
    resource_type: str
    format: str | None = None
    size_bytes: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class AssetStoreError(Exception):
    """Raised when the asset store fails an operation.

    Covers transport, authentication and store-side rejections. A missing
    asset on delete is not an error.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Asset store {operation} failed: {reason}")


class AssetStoreBase(ABC):
    """Abstract base class for remote asset stores.

    Implementations should handle:
    - Cloudinary (transformations rendered by the service)
    - MinIO/S3 (derivatives rendered locally at upload time)
    """

    async def initialize(self) -> None:  # noqa: B027
        """Prepare the store for use (create buckets, verify config)."""

    @abstractmethod
    async def store(
        self,
        source: Path,
        *,
        folder: str,
        resource_type: str = "video",
        format: str | None = None,
        transformation: list[dict[str, Any]] | None = None,
        eager: list[dict[str, Any]] | None = None,
    ) -> StoredAsset:
        """Store a local file.

        Args:
            source: Local file to transfer.
            folder: Logical folder for the new asset.
            resource_type: Kind of asset ("video", "image", "raw").
            format: Target container format for the stored asset.
            transformation: Normalization applied to the stored asset.
            eager: Derivatives to render at upload time. Each entry is a
                transformation dict with an optional "format" key.

        Returns:
            Identifier and URL of the stored asset.

        Raises:
            AssetStoreError: If the transfer fails.
        """

    @abstractmethod
    async def delete(self, remote_id: str, *, resource_type: str = "video") -> bool:
        """Delete an asset and its derivatives.

        Args:
            remote_id: Identifier returned by `store`.
            resource_type: Kind of asset.

        Returns:
            True if deleted, False if it didn't exist.

        Raises:
            AssetStoreError: On transport or authentication failure.
        """

    @abstractmethod
    def derive_url(
        self,
        remote_id: str,
        *,
        resource_type: str = "video",
        format: str | None = None,
        transformation: list[dict[str, Any]] | None = None,
    ) -> str:
        """Build the URL of a derived rendition without any network call.

        Args:
            remote_id: Identifier returned by `store`.
            resource_type: Kind of the source asset.
            format: Output format of the rendition.
            transformation: Transformation chain to apply.

        Returns:
            Fully qualified URL.

        Raises:
            AssetStoreError: If the URL cannot be built.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """

    async def close(self) -> None:  # noqa: B027
        """Release client resources."""
