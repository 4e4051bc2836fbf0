"""MinIO implementation of the remote asset store."""

import asyncio
import json
import mimetypes
import tempfile
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from minio import Minio
from minio.error import S3Error

from src.commons.infrastructure.assetstore.base import (
    AssetStoreBase,
    AssetStoreError,
    HealthStatus,
    StoredAsset,
)
from src.commons.telemetry import get_logger

if TYPE_CHECKING:
    from src.infrastructure.video.base import ThumbnailRendererBase

_KEY_ABBREVIATIONS = {"width": "w", "height": "h", "crop": "c"}


def transformation_key(transformation: list[dict[str, Any]]) -> str:
    """Stable object-name fragment for a transformation chain.

    >>> transformation_key([{"width": 300, "height": 200, "crop": "fill"}])
    'w_300-h_200-c_fill'
    """
    parts: list[str] = []
    for step in transformation:
        for name, short in _KEY_ABBREVIATIONS.items():
            if name in step:
                parts.append(f"{short}_{step[name]}")
    return "-".join(parts) or "original"


class MinioAssetStore(AssetStoreBase):
    """MinIO/S3 implementation of the asset store, for local development.

    S3 cannot transform media on request, so derivatives listed in
    ``eager`` are rendered with the thumbnail renderer right after the
    upload and stored next to the video. ``derive_url`` then only builds
    the URL of that object. Stored bytes are not transcoded.

    Objects are laid out as::

        <folder>/<uuid>.<ext>                    the video
        <folder>/<uuid>__<transform>.<format>    each derivative
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        region: str | None = None,
        public_base_url: str | None = None,
        renderer: "ThumbnailRendererBase | None" = None,
        frame_offset_seconds: float = 1.0,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: MinIO/S3 endpoint (e.g., "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            bucket: Bucket holding all assets.
            secure: Use HTTPS connection.
            region: Bucket region; avoids a location lookup per request.
            public_base_url: Base URL objects are served from.
                Defaults to "<scheme>://<endpoint>/<bucket>".
            renderer: Renders eager derivatives. Without one, eager
                derivatives are skipped.
            frame_offset_seconds: Video position the derivative frame is taken at.
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint
        self._bucket = bucket
        scheme = "https" if secure else "http"
        self._public_base_url = (
            public_base_url or f"{scheme}://{endpoint}/{bucket}"
        ).rstrip("/")
        self._renderer = renderer
        self._frame_offset_seconds = frame_offset_seconds
        self._logger = get_logger(__name__)

    async def initialize(self) -> None:
        """Create the bucket with anonymous read access if missing."""
        loop = asyncio.get_event_loop()
        policy = {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{self._bucket}/*"],
                }
            ],
        }

        def _create() -> bool:
            if self._client.bucket_exists(self._bucket):
                return False
            self._client.make_bucket(self._bucket)
            self._client.set_bucket_policy(self._bucket, json.dumps(policy))
            return True

        try:
            created = await loop.run_in_executor(None, _create)
        except S3Error as e:
            raise AssetStoreError("initialize", str(e)) from e
        if created:
            self._logger.info("Created asset bucket", extra={"bucket": self._bucket})

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
        """Upload a file, then render and upload its eager derivatives."""
        loop = asyncio.get_event_loop()

        remote_id = f"{folder.strip('/')}/{uuid4().hex}"
        extension = source.suffix.lstrip(".") or format or "bin"
        object_name = f"{remote_id}.{extension}"
        content_type = mimetypes.guess_type(object_name)[0] or f"{resource_type}/*"

        def _upload() -> int:
            result = self._client.fput_object(
                bucket_name=self._bucket,
                object_name=object_name,
                file_path=str(source),
                content_type=content_type,
                metadata={"resource-type": resource_type},
            )
            self._logger.debug(
                "Stored object",
                extra={"object_name": object_name, "etag": result.etag},
            )
            return source.stat().st_size

        try:
            size_bytes = await loop.run_in_executor(None, _upload)
        except (S3Error, OSError) as e:
            raise AssetStoreError("upload", str(e)) from e

        try:
            for derivative in eager or []:
                await self._store_derivative(source, remote_id, derivative)
        except AssetStoreError:
            try:
                await self.delete(remote_id, resource_type=resource_type)
            except AssetStoreError as cleanup_error:
                self._logger.error(
                    "Failed to remove partially stored asset",
                    extra={"remote_id": remote_id, "error": str(cleanup_error)},
                )
            raise

        return StoredAsset(
            remote_id=remote_id,
            url=f"{self._public_base_url}/{object_name}",
            resource_type=resource_type,
            format=extension,
            size_bytes=size_bytes,
        )

    async def _store_derivative(
        self,
        source: Path,
        remote_id: str,
        derivative: dict[str, Any],
    ) -> None:
        if self._renderer is None:
            self._logger.warning(
                "No renderer configured, skipping derivative",
                extra={"remote_id": remote_id},
            )
            return

        output_format = derivative.get("format", "jpg")
        steps = [{k: v for k, v in derivative.items() if k != "format"}]
        object_name = self._derivative_name(remote_id, steps, output_format)
        step = steps[0]

        with tempfile.TemporaryDirectory(prefix="asset-derivative-") as temp_dir:
            output_path = Path(temp_dir) / f"derivative.{output_format}"
            try:
                await self._renderer.render(
                    source,
                    output_path,
                    width=int(step["width"]),
                    height=int(step["height"]),
                    crop=str(step.get("crop", "fill")),
                    offset_seconds=self._frame_offset_seconds,
                )
            except Exception as e:
                raise AssetStoreError("render", str(e)) from e

            loop = asyncio.get_event_loop()
            content_type = (
                mimetypes.guess_type(object_name)[0] or "application/octet-stream"
            )
            try:
                await loop.run_in_executor(
                    None,
                    lambda: self._client.fput_object(
                        bucket_name=self._bucket,
                        object_name=object_name,
                        file_path=str(output_path),
                        content_type=content_type,
                    ),
                )
            except (S3Error, OSError) as e:
                raise AssetStoreError("upload", str(e)) from e

    async def delete(self, remote_id: str, *, resource_type: str = "video") -> bool:
        """Delete the video object and every derivative stored beside it."""
        loop = asyncio.get_event_loop()

        def _delete() -> bool:
            names = [
                obj.object_name
                for obj in self._client.list_objects(
                    self._bucket, prefix=remote_id, recursive=True
                )
                if obj.object_name
                and obj.object_name[len(remote_id) :].startswith((".", "__"))
            ]
            for name in names:
                self._client.remove_object(self._bucket, name)
            return bool(names)

        try:
            return await loop.run_in_executor(None, _delete)
        except (S3Error, OSError) as e:
            raise AssetStoreError("delete", str(e)) from e

    def derive_url(
        self,
        remote_id: str,
        *,
        resource_type: str = "video",
        format: str | None = None,
        transformation: list[dict[str, Any]] | None = None,
    ) -> str:
        """Build the public URL of a derivative rendered at upload time."""
        if not remote_id:
            raise AssetStoreError("derive_url", "empty remote id")
        object_name = self._derivative_name(
            remote_id, transformation or [], format or "jpg"
        )
        return f"{self._public_base_url}/{object_name}"

    @staticmethod
    def _derivative_name(
        remote_id: str,
        transformation: list[dict[str, Any]],
        output_format: str,
    ) -> str:
        return f"{remote_id}__{transformation_key(transformation)}.{output_format}"

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_event_loop()
            exists = await loop.run_in_executor(
                None, self._client.bucket_exists, self._bucket
            )
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=exists,
                latency_ms=latency_ms,
                message="MinIO is healthy" if exists else "Asset bucket is missing",
                details={"endpoint": self._endpoint, "bucket": self._bucket},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MinIO health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
