"""In-memory stores and logging setup shared by the unit tests."""

import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

from src.commons.infrastructure.assetstore.base import (
    AssetStoreBase,
    HealthStatus,
    StoredAsset,
)
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import Settings, UploadSettings


class FakeAssetStore(AssetStoreBase):
    """Keeps stored binaries in a dict keyed by remote id."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.store_calls: list[dict[str, Any]] = []
        self.delete_calls: list[str] = []
        self.store_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.derive_error: Exception | None = None
        self.omit_url = False

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
        self.store_calls.append(
            {
                "source": source,
                "folder": folder,
                "resource_type": resource_type,
                "format": format,
                "transformation": transformation,
                "eager": eager,
            }
        )
        if self.store_error:
            raise self.store_error

        remote_id = f"{folder}/{uuid4().hex}"
        self.objects[remote_id] = source.read_bytes()
        return StoredAsset(
            remote_id=remote_id,
            url="" if self.omit_url else f"https://assets.test/{remote_id}.mp4",
            resource_type=resource_type,
            format=format,
            size_bytes=len(self.objects[remote_id]),
        )

    async def delete(self, remote_id: str, *, resource_type: str = "video") -> bool:
        self.delete_calls.append(remote_id)
        if self.delete_error:
            raise self.delete_error
        return self.objects.pop(remote_id, None) is not None

    def derive_url(
        self,
        remote_id: str,
        *,
        resource_type: str = "video",
        format: str | None = None,
        transformation: list[dict[str, Any]] | None = None,
    ) -> str:
        if self.derive_error:
            raise self.derive_error
        step = (transformation or [{}])[0]
        return (
            f"https://assets.test/w_{step.get('width')},h_{step.get('height')}"
            f"/{remote_id}.{format}"
        )

    async def health_check(self) -> HealthStatus:
        return HealthStatus(healthy=True, latency_ms=0.1)


class FakeDocumentDB(DocumentDBBase):
    """Dict-backed document store with MongoDB-like find semantics."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.insert_error: Exception | None = None
        self.update_error: Exception | None = None
        self.delete_error: Exception | None = None

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self.collections.setdefault(name, {})

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        if self.insert_error:
            raise self.insert_error
        doc = document.copy()
        doc_id = doc.pop("id", None) or uuid4().hex[:24]
        self._collection(collection)[doc_id] = doc
        return doc_id

    async def find_by_id(
        self, collection: str, document_id: str
    ) -> dict[str, Any] | None:
        doc = self._collection(collection).get(document_id)
        return {**doc, "id": document_id} if doc is not None else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        docs = [
            {**doc, "id": doc_id}
            for doc_id, doc in self._collection(collection).items()
            if all(doc.get(k) == v for k, v in filters.items())
        ]
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d[field], reverse=direction < 0)
        docs = docs[skip:]
        return docs[:limit] if limit else docs

    async def find_by_id_and_update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        if self.update_error:
            raise self.update_error
        doc = self._collection(collection).get(document_id)
        if doc is None:
            return None
        doc.update(updates)
        return {**doc, "id": document_id}

    async def delete(self, collection: str, document_id: str) -> bool:
        if self.delete_error:
            raise self.delete_error
        return self._collection(collection).pop(document_id, None) is not None

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        return name or "_".join(f"{f}_{d}" for f, d in fields)

    async def health_check(self) -> HealthStatus:
        return HealthStatus(healthy=True, latency_ms=0.1)


@pytest.fixture(autouse=True)
def verbose_app_logging():
    """Emit every application log record, whatever configured the logger before."""
    logger = logging.getLogger("src")
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    yield
    logger.setLevel(previous)


def make_document(title: str, created_at: datetime, **overrides: Any) -> dict[str, Any]:
    """Stored video document with sensible defaults."""
    doc = {
        "title": title,
        "description": f"About {title}",
        "video_url": f"https://assets.test/videos/{title}.mp4",
        "thumbnail_url": f"https://assets.test/videos/{title}.jpg",
        "remote_asset_id": f"videos/{title}",
        "created_at": created_at,
        "updated_at": created_at,
    }
    doc.update(overrides)
    return doc


async def chunks_of(*parts: bytes):
    """Async byte stream over the given parts."""
    for part in parts:
        yield part


@pytest.fixture
def asset_store() -> FakeAssetStore:
    """Empty in-memory asset store."""
    return FakeAssetStore()


@pytest.fixture
def document_db() -> FakeDocumentDB:
    """Empty in-memory document store."""
    return FakeDocumentDB()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Default settings with uploads buffered under the test's temp dir."""
    return Settings(upload=UploadSettings(temp_dir=str(tmp_path), max_size_mb=1))


@pytest.fixture
def base_time() -> datetime:
    """Fixed reference time for ordering tests."""
    return datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def seeded_db(document_db, base_time) -> FakeDocumentDB:
    """Document store holding seven videos, one minute apart (v0 oldest)."""
    videos = document_db._collection("videos")
    for i in range(7):
        videos[f"v{i}"] = make_document(f"video-{i}", base_time + timedelta(minutes=i))
    return document_db


@pytest.fixture
def document_factory():
    """Builder for stored video documents."""
    return make_document


@pytest.fixture
def byte_stream():
    """Builder for async byte streams."""
    return chunks_of
