"""Video upload orchestration service."""

import asyncio
import logging
import re
import tempfile
from collections.abc import AsyncIterable
from pathlib import Path

from src.application.dtos.upload import (
    UploadStep,
    UploadVideoRequest,
    VideoUploadResult,
)
from src.commons.infrastructure.assetstore.base import (
    AssetStoreBase,
    AssetStoreError,
    StoredAsset,
)
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import Settings
from src.commons.telemetry import LogContext, get_logger, timed
from src.domain.exceptions import (
    PersistenceException,
    UnexpectedException,
    UploadException,
    ValidationException,
)
from src.domain.models.video import VideoAsset
from src.domain.value_objects import MediaTransformation

_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,10}$")


class VideoUploadService:
    """Orchestrates a video upload across the asset store and metadata store.

    Pipeline steps:
    1. Validate the request and buffer the payload to a scoped temp directory
    2. Transfer the file to the asset store (bounded by a timeout)
    3. Confirm the store returned an identifier and a URL
    4. Derive the thumbnail URL from the identifier
    5. Persist the record, deleting the remote asset if that fails

    No record is ever written for an asset that was not stored. A stored
    asset without a record is possible (crash, failed rollback) and is
    tolerated.
    """

    def __init__(
        self,
        asset_store: AssetStoreBase,
        document_db: DocumentDBBase,
        settings: Settings,
    ) -> None:
        """Initialize upload service with dependencies.

        Args:
            asset_store: Remote store for video binaries.
            document_db: Document database for metadata.
            settings: Application settings.
        """
        self._store = asset_store
        self._logger = get_logger(__name__)
        self._document_db = document_db
        self._store_settings = settings.asset_store
        self._upload_settings = settings.upload
        self._videos_collection = settings.document_db.collections.videos
        self._thumbnail = MediaTransformation(
            width=settings.thumbnail.width,
            height=settings.thumbnail.height,
            crop=settings.thumbnail.crop,
            format=settings.thumbnail.format,
        )

    @timed(level=logging.INFO)
    async def upload(
        self,
        request: UploadVideoRequest,
        chunks: AsyncIterable[bytes] | None,
    ) -> VideoUploadResult:
        """Upload a video and create its metadata record.

        Args:
            request: Validated form fields.
            chunks: The binary payload.

        Returns:
            The created record.

        Raises:
            ValidationException: Bad input; nothing was sent anywhere.
            UploadException: The asset store failed; no record was written.
            PersistenceException: The record could not be saved; the stored
                asset was deleted (or the attempt was logged).
            UnexpectedException: Local failure while buffering the payload.
        """
        with LogContext(operation="upload", title=request.title):
            self._validate(request, chunks)
            assert chunks is not None

            self._logger.info(
                "Starting video upload",
                extra={
                    "upload_filename": request.filename,
                    "content_type": request.content_type,
                },
            )

            with self._scratch_dir() as temp_dir:
                source = await self._buffer(
                    chunks, Path(temp_dir) / self._local_name(request)
                )
                stored = await self._transfer(source)
                await self._confirm(stored)
                thumbnail_url = await self._derive_thumbnail_url(stored)

                video = VideoAsset(
                    title=request.title,
                    description=request.description,
                    video_url=stored.url,
                    thumbnail_url=thumbnail_url,
                    remote_asset_id=stored.remote_id,
                )
                video = await self._persist(video)

            self._logger.info(
                "Video upload completed",
                extra={
                    "step": UploadStep.COMPLETED.value,
                    "video_id": video.id,
                    "remote_asset_id": video.remote_asset_id,
                },
            )
            return VideoUploadResult(video=video, created=True)

    def _validate(
        self,
        request: UploadVideoRequest,
        chunks: AsyncIterable[bytes] | None,
    ) -> None:
        if chunks is None:
            raise ValidationException("A video file is required", field="video")
        if not request.title.strip():
            raise ValidationException("A title is required", field="title")

        content_type = request.content_type
        allowed = self._upload_settings.allowed_content_types
        if content_type and allowed and not content_type.startswith(tuple(allowed)):
            raise ValidationException(
                f"Unsupported file type: {content_type}", field="video"
            )

    def _scratch_dir(self) -> tempfile.TemporaryDirectory[str]:
        """Private directory for the buffered payload, removed on exit."""
        try:
            return tempfile.TemporaryDirectory(
                prefix="video-upload-",
                dir=self._upload_settings.temp_dir,
            )
        except OSError as e:
            self._logger.exception(
                "Failed to create upload directory",
                extra={"step": UploadStep.BUFFERING.value},
            )
            raise UnexpectedException(f"cannot create upload directory: {e}") from e

    @staticmethod
    def _local_name(request: UploadVideoRequest) -> str:
        suffix = Path(request.filename or "").suffix.lower()
        if not _SAFE_SUFFIX.match(suffix):
            suffix = ""
        return f"payload{suffix}"

    async def _buffer(self, chunks: AsyncIterable[bytes], target: Path) -> Path:
        """Write the payload to disk, enforcing the size limit."""
        max_bytes = self._upload_settings.max_size_bytes
        written = 0

        self._logger.debug(
            "Buffering upload", extra={"step": UploadStep.BUFFERING.value}
        )
        try:
            with target.open("wb") as f:
                async for chunk in chunks:
                    written += len(chunk)
                    if written > max_bytes:
                        raise ValidationException(
                            f"File exceeds the maximum size of "
                            f"{self._upload_settings.max_size_mb} MB",
                            field="video",
                        )
                    f.write(chunk)
        except OSError as e:
            self._logger.exception(
                "Failed to buffer upload",
                extra={"step": UploadStep.BUFFERING.value},
            )
            raise UnexpectedException(f"buffering failed: {e}") from e

        if written == 0:
            raise ValidationException("The uploaded file is empty", field="video")

        self._logger.debug(
            "Upload buffered",
            extra={"step": UploadStep.BUFFERING.value, "size_bytes": written},
        )
        return target

    async def _transfer(self, source: Path) -> StoredAsset:
        """Send the buffered file to the asset store."""
        timeout = self._store_settings.upload_timeout_seconds
        eager = [
            {**step, "format": self._thumbnail.format}
            for step in self._thumbnail.to_params()
        ]

        self._logger.debug(
            "Transferring to asset store",
            extra={"step": UploadStep.UPLOADING.value, "timeout_seconds": timeout},
        )
        try:
            return await asyncio.wait_for(
                self._store.store(
                    source,
                    folder=self._store_settings.folder,
                    resource_type=self._store_settings.resource_type,
                    format=self._store_settings.format,
                    transformation=[{"quality": self._store_settings.quality}],
                    eager=eager,
                ),
                timeout=timeout,
            )
        except TimeoutError as e:
            # The executor thread may still finish; its asset is then orphaned.
            self._logger.error(
                "Asset store upload timed out",
                extra={"step": UploadStep.UPLOADING.value, "timeout_seconds": timeout},
            )
            raise UploadException(f"timed out after {timeout}s") from e
        except AssetStoreError as e:
            self._logger.error(
                "Asset store rejected upload",
                extra={"step": UploadStep.UPLOADING.value, "error": e.reason},
            )
            raise UploadException(e.reason) from e
        except Exception as e:
            self._logger.exception(
                "Asset store upload failed",
                extra={"step": UploadStep.UPLOADING.value},
            )
            raise UploadException(str(e)) from e

    async def _confirm(self, stored: StoredAsset) -> None:
        """Reject a success report that lacks an identifier or a URL."""
        missing = [
            name
            for name, value in (("remote_id", stored.remote_id), ("url", stored.url))
            if not value
        ]
        if not missing:
            return

        self._logger.error(
            "Asset store reported success without required fields",
            extra={"step": UploadStep.CONFIRMING.value, "missing": missing},
        )
        if stored.remote_id:
            await self._compensate(stored.remote_id)
        raise UploadException(f"store response missing {', '.join(missing)}")

    async def _derive_thumbnail_url(self, stored: StoredAsset) -> str:
        try:
            return self._store.derive_url(
                stored.remote_id,
                resource_type=self._store_settings.resource_type,
                format=self._thumbnail.format,
                transformation=self._thumbnail.to_params(),
            )
        except Exception as e:
            self._logger.error(
                "Failed to derive thumbnail URL",
                extra={"step": UploadStep.DERIVING.value, "error": str(e)},
            )
            await self._compensate(stored.remote_id)
            raise UploadException(f"thumbnail URL derivation failed: {e}") from e

    async def _persist(self, video: VideoAsset) -> VideoAsset:
        try:
            video_id = await self._document_db.insert(
                self._videos_collection,
                video.to_document(),
            )
        except Exception as e:
            self._logger.error(
                "Failed to save video metadata",
                extra={"step": UploadStep.PERSISTING.value, "error": str(e)},
            )
            await self._compensate(video.remote_asset_id)
            raise PersistenceException("save", str(e)) from e

        return video.with_id(video_id)

    async def _compensate(self, remote_id: str) -> None:
        """Delete a stored asset after a later step failed.

        Never raises: the caller's error is the one the client sees.
        """
        self._logger.warning(
            "Rolling back stored asset",
            extra={"step": UploadStep.COMPENSATING.value, "remote_asset_id": remote_id},
        )
        try:
            removed = await self._store.delete(
                remote_id,
                resource_type=self._store_settings.resource_type,
            )
        except Exception as e:
            self._logger.error(
                "Rollback failed, remote asset is orphaned",
                extra={
                    "step": UploadStep.COMPENSATING.value,
                    "remote_asset_id": remote_id,
                    "error": str(e),
                },
            )
            return

        self._logger.info(
            "Rolled back stored asset",
            extra={
                "step": UploadStep.COMPENSATING.value,
                "remote_asset_id": remote_id,
                "removed": removed,
            },
        )
