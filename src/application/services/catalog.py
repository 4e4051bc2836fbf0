"""Read and edit operations over stored video records."""

from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from src.application.dtos.videos import UpdateVideoRequest
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger
from src.domain.exceptions import (
    PersistenceException,
    UnexpectedException,
    VideoNotFoundException,
)
from src.domain.models.video import VideoAsset

_NEWEST_FIRST = [("created_at", -1)]


class VideoCatalogService:
    """Queries and edits video records in the metadata store.

    Handles:
    - Listing records, newest first
    - Single-record lookup
    - Recommendations (other records, newest first)
    - Partial title/description edits
    """

    def __init__(self, document_db: DocumentDBBase, settings: Settings) -> None:
        """Initialize catalog service.

        Args:
            document_db: Document database provider.
            settings: Application settings.
        """
        self._document_db = document_db
        self._videos_collection = settings.document_db.collections.videos
        self._list_limit = settings.catalog.list_limit
        self._recommendation_limit = settings.catalog.recommendation_limit
        self._logger = get_logger(__name__)

    async def list_videos(self) -> list[VideoAsset]:
        """List all records, newest first."""
        documents = await self._find_newest(self._list_limit)
        return self._to_videos(documents)

    async def get_video(self, video_id: str) -> VideoAsset:
        """Get a record by id.

        Raises:
            VideoNotFoundException: No record with this id.
        """
        try:
            document = await self._document_db.find_by_id(
                self._videos_collection, video_id
            )
        except Exception as e:
            raise PersistenceException("load", str(e)) from e

        if document is None:
            raise VideoNotFoundException(video_id)
        return self._to_video(document)

    async def recommend(self, video_id: str) -> list[VideoAsset]:
        """Other records, newest first, up to the recommendation limit.

        The requested id does not have to exist.
        """
        limit = self._recommendation_limit
        # One extra covers the requested record appearing in a page.
        page_size = limit + 1
        videos: list[VideoAsset] = []
        skip = 0
        while len(videos) < limit:
            documents = await self._find_newest(page_size, skip=skip)
            others = [doc for doc in documents if doc.get("id") != video_id]
            videos.extend(self._to_videos(others))
            if len(documents) < page_size:
                break
            skip += page_size
        return videos[:limit]

    async def update_video(
        self,
        video_id: str,
        request: UpdateVideoRequest,
    ) -> VideoAsset:
        """Apply a partial edit to a record.

        Absent or blank fields are left unchanged. An edit with nothing to
        change returns the record as stored.

        Raises:
            VideoNotFoundException: No record with this id.
            PersistenceException: The store rejected the write.
        """
        changes: dict[str, Any] = request.changes()
        if not changes:
            return await self.get_video(video_id)

        changes["updated_at"] = datetime.now(UTC)
        try:
            document = await self._document_db.find_by_id_and_update(
                self._videos_collection, video_id, changes
            )
        except Exception as e:
            self._logger.error(
                "Failed to update video metadata",
                extra={"video_id": video_id, "error": str(e)},
            )
            raise PersistenceException("update", str(e)) from e

        if document is None:
            raise VideoNotFoundException(video_id)

        self._logger.info(
            "Video updated",
            extra={"video_id": video_id, "fields": sorted(changes)},
        )
        return self._to_video(document)

    async def _find_newest(
        self, limit: int, skip: int = 0
    ) -> list[dict[str, Any]]:
        try:
            return await self._document_db.find(
                self._videos_collection,
                {},
                skip=skip,
                limit=limit,
                sort=_NEWEST_FIRST,
            )
        except Exception as e:
            raise PersistenceException("load", str(e)) from e

    def _to_video(self, document: dict[str, Any]) -> VideoAsset:
        try:
            return VideoAsset.from_document(document)
        except ValidationError as e:
            self._logger.error(
                "Stored video record is malformed",
                extra={"video_id": document.get("id"), "error": str(e)},
            )
            raise UnexpectedException(f"malformed record {document.get('id')}") from e

    def _to_videos(self, documents: list[dict[str, Any]]) -> list[VideoAsset]:
        videos: list[VideoAsset] = []
        for document in documents:
            try:
                videos.append(VideoAsset.from_document(document))
            except ValidationError as e:
                self._logger.warning(
                    "Skipping malformed video record",
                    extra={"video_id": document.get("id"), "error": str(e)},
                )
        return videos
