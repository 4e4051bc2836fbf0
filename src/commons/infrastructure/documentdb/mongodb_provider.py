"""MongoDB implementation of document database."""

import time
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from src.commons.infrastructure.assetstore.base import HealthStatus
from src.commons.infrastructure.documentdb.base import DocumentDBBase


def _id_filter(document_id: str) -> dict[str, Any]:
    """Match a document whose _id is either the string or its ObjectId form."""
    try:
        obj_id = ObjectId(document_id)
    except (InvalidId, TypeError):
        return {"_id": document_id}
    return {"_id": {"$in": [obj_id, document_id]}}


def _to_domain(doc: dict[str, Any]) -> dict[str, Any]:
    """Restore the 'id' field from '_id' for domain model compatibility."""
    doc["id"] = str(doc.pop("_id"))
    return dict(doc)


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations. Documents inserted without an ``id``
    get a server-generated ObjectId, exposed as its hex string.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string,
            tz_aware=True,
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document, using its 'id' as '_id' when present."""
        doc = document.copy()
        if doc.get("id") is not None:
            doc["_id"] = doc.pop("id")
        else:
            doc.pop("id", None)

        result = await self._db[collection].insert_one(doc)
        return str(result.inserted_id)

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID."""
        doc = await self._db[collection].find_one(_id_filter(document_id))
        if doc:
            return _to_domain(doc)
        return None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters."""
        cursor = self._db[collection].find(filters)

        if sort:
            cursor = cursor.sort(sort)

        # limit(0) is "no limit" for MongoDB
        cursor = cursor.skip(skip).limit(limit)

        return [_to_domain(doc) async for doc in cursor]

    async def find_by_id_and_update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Apply a $set and return the document after the update."""
        update_doc = {k: v for k, v in updates.items() if k not in ("id", "_id")}
        if not update_doc:
            return await self.find_by_id(collection, document_id)

        doc = await self._db[collection].find_one_and_update(
            _id_filter(document_id),
            {"$set": update_doc},
            return_document=ReturnDocument.AFTER,
        )
        if doc:
            return _to_domain(doc)
        return None

    async def delete(
        self,
        collection: str,
        document_id: str,
    ) -> bool:
        """Delete a document."""
        result = await self._db[collection].delete_one(_id_filter(document_id))
        return bool(result.deleted_count > 0)

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection."""
        index_name = await self._db[collection].create_index(
            fields,
            unique=unique,
            name=name,
        )
        return str(index_name)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MongoDB is healthy",
                details={"database": self._database_name},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
