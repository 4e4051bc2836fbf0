"""Cloudinary implementation of the remote asset store."""

import asyncio
import time
from pathlib import Path
from typing import Any

import cloudinary.api
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from cloudinary.utils import cloudinary_url

from src.commons.infrastructure.assetstore.base import (
    AssetStoreBase,
    AssetStoreError,
    HealthStatus,
    StoredAsset,
)


class CloudinaryAssetStore(AssetStoreBase):
    """Cloudinary implementation of the asset store.

    Credentials are passed on every call instead of through
    ``cloudinary.config()``, so several stores can coexist in one process.
    The SDK is synchronous; calls run in the default executor.
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        secure: bool = True,
        chunk_size: int = 20 * 1024 * 1024,
    ) -> None:
        """Initialize the Cloudinary store.

        Args:
            cloud_name: Cloudinary cloud name.
            api_key: API key.
            api_secret: API secret.
            secure: Build https URLs.
            chunk_size: Chunk size for chunked video uploads.
        """
        if not cloud_name:
            raise ValueError("Cloudinary cloud_name is required")
        self._cloud_name = cloud_name
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self._secure = secure
        self._chunk_size = chunk_size

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
        """Upload a file with the chunked upload API."""
        loop = asyncio.get_event_loop()

        options: dict[str, Any] = {
            **self._credentials,
            "folder": folder,
            "resource_type": resource_type,
            "chunk_size": self._chunk_size,
        }
        if format:
            options["format"] = format
        if transformation:
            options["transformation"] = transformation
        if eager:
            options["eager"] = eager
            options["eager_async"] = True

        def _upload() -> dict[str, Any]:
            return dict(cloudinary.uploader.upload_large(str(source), **options))

        try:
            result = await loop.run_in_executor(None, _upload)
        except CloudinaryError as e:
            raise AssetStoreError("upload", str(e)) from e
        except OSError as e:
            raise AssetStoreError("upload", f"transport error: {e}") from e

        return StoredAsset(
            remote_id=result.get("public_id") or "",
            url=result.get("secure_url") or result.get("url") or "",
            resource_type=result.get("resource_type") or resource_type,
            format=result.get("format"),
            size_bytes=result.get("bytes"),
            details={
                key: result[key]
                for key in ("version", "duration", "width", "height")
                if key in result
            },
        )

    async def delete(self, remote_id: str, *, resource_type: str = "video") -> bool:
        """Destroy an asset; a missing asset is reported, not raised."""
        loop = asyncio.get_event_loop()

        def _destroy() -> dict[str, Any]:
            return dict(
                cloudinary.uploader.destroy(
                    remote_id,
                    resource_type=resource_type,
                    invalidate=True,
                    **self._credentials,
                )
            )

        try:
            result = await loop.run_in_executor(None, _destroy)
        except CloudinaryError as e:
            raise AssetStoreError("delete", str(e)) from e
        except OSError as e:
            raise AssetStoreError("delete", f"transport error: {e}") from e

        outcome = result.get("result")
        if outcome == "ok":
            return True
        if outcome == "not found":
            return False
        raise AssetStoreError("delete", f"unexpected result: {outcome!r}")

    def derive_url(
        self,
        remote_id: str,
        *,
        resource_type: str = "video",
        format: str | None = None,
        transformation: list[dict[str, Any]] | None = None,
    ) -> str:
        """Build a delivery URL; Cloudinary renders it on first request."""
        options: dict[str, Any] = {
            "cloud_name": self._cloud_name,
            "resource_type": resource_type,
            "secure": self._secure,
        }
        if format:
            options["format"] = format
        if transformation:
            options["transformation"] = transformation

        try:
            url, _ = cloudinary_url(remote_id, **options)
        except (CloudinaryError, ValueError) as e:
            raise AssetStoreError("derive_url", str(e)) from e

        if not url:
            raise AssetStoreError("derive_url", "empty URL")
        return str(url)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(
                None, lambda: cloudinary.api.ping(**self._credentials)
            )
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="Cloudinary is healthy",
                details={"cloud_name": self._cloud_name},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Cloudinary health check failed: {e}",
                details={"cloud_name": self._cloud_name, "error": str(e)},
            )
