"""Video deletion orchestration service."""

import logging

from src.application.dtos.videos import VideoDeletionResult
from src.commons.infrastructure.assetstore.base import AssetStoreBase, AssetStoreError
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import Settings
from src.commons.telemetry import LogContext, get_logger, timed
from src.domain.exceptions import (
    PersistenceException,
    RemoteStoreException,
    VideoNotFoundException,
)
from src.domain.models.video import VideoAsset


class VideoDeletionService:
    """Removes a video from the asset store and then its metadata record.

    The remote binary goes first. If that fails the record stays, so the
    client can retry; a record never outlives its binary silently. A binary
    that is already gone counts as deleted.
    """

    def __init__(
        self,
        asset_store: AssetStoreBase,
        document_db: DocumentDBBase,
        settings: Settings,
    ) -> None:
        self._store = asset_store
        self._document_db = document_db
        self._resource_type = settings.asset_store.resource_type
        self._videos_collection = settings.document_db.collections.videos
        self._logger = get_logger(__name__)

    @timed(level=logging.INFO)
    async def delete(self, video_id: str) -> VideoDeletionResult:
        """Delete a video and its record.

        Args:
            video_id: Record identifier.

        Returns:
            What was removed.

        Raises:
            VideoNotFoundException: No record with this id.
            RemoteStoreException: The asset store failed; the record is kept.
            PersistenceException: The metadata store failed.
        """
        with LogContext(operation="delete", video_id=video_id):
            video = await self._load(video_id)

            self._logger.info(
                "Deleting remote asset",
                extra={"remote_asset_id": video.remote_asset_id},
            )
            try:
                remote_deleted = await self._store.delete(
                    video.remote_asset_id,
                    resource_type=self._resource_type,
                )
            except AssetStoreError as e:
                self._logger.error(
                    "Asset store delete failed, keeping record",
                    extra={"remote_asset_id": video.remote_asset_id, "error": e.reason},
                )
                raise RemoteStoreException("delete", e.reason) from e
            except Exception as e:
                self._logger.exception(
                    "Asset store delete failed, keeping record",
                    extra={"remote_asset_id": video.remote_asset_id},
                )
                raise RemoteStoreException("delete", str(e)) from e

            if not remote_deleted:
                self._logger.info(
                    "Remote asset already absent",
                    extra={"remote_asset_id": video.remote_asset_id},
                )

            try:
                record_deleted = await self._document_db.delete(
                    self._videos_collection, video_id
                )
            except Exception as e:
                self._logger.error(
                    "Failed to delete video metadata",
                    extra={"error": str(e)},
                )
                raise PersistenceException("delete", str(e)) from e

            if not record_deleted:
                self._logger.warning("Record was removed concurrently")

            self._logger.info(
                "Video deleted",
                extra={"remote_deleted": remote_deleted},
            )
            return VideoDeletionResult(
                video_id=video_id,
                remote_asset_id=video.remote_asset_id,
                remote_deleted=remote_deleted,
                record_deleted=record_deleted,
            )

    async def _load(self, video_id: str) -> VideoAsset:
        try:
            document = await self._document_db.find_by_id(
                self._videos_collection, video_id
            )
        except Exception as e:
            raise PersistenceException("load", str(e)) from e

        if document is None:
            raise VideoNotFoundException(video_id)
        return VideoAsset.from_document(document)
