"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any

from src.commons.infrastructure.assetstore.base import HealthStatus


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Documents cross this boundary with an ``id`` string field; how the
    store keys them internally is up to the implementation.
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document.

        Args:
            collection: Collection name.
            document: Document to insert. An ``id`` field, if present, is
                used as the key; otherwise the store generates one.

        Returns:
            ID of the stored document.
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Args:
            collection: Collection name.
            document_id: Document ID to find.

        Returns:
            Document if found, None otherwise. Malformed IDs are not found.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters.

        Args:
            collection: Collection name.
            filters: Query filters.
            skip: Number of documents to skip.
            limit: Maximum documents to return, 0 for no limit.
            sort: Sort specification [(field, direction)].
                  Direction: 1 for ascending, -1 for descending.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def find_by_id_and_update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Set fields on a document and return it as stored afterwards.

        Args:
            collection: Collection name.
            document_id: Document ID to update.
            updates: Fields to set. Fields not listed are left unchanged.

        Returns:
            Updated document, or None if not found.
        """

    @abstractmethod
    async def delete(
        self,
        collection: str,
        document_id: str,
    ) -> bool:
        """Delete a document.

        Args:
            collection: Collection name.
            document_id: Document ID to delete.

        Returns:
            True if deleted, False if not found.
        """

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection.

        Args:
            collection: Collection name.
            fields: Index fields [(field, direction)].
            unique: Whether index should be unique.
            name: Optional index name.

        Returns:
            Index name.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """

    async def close(self) -> None:  # noqa: B027
        """Close the client connection."""
