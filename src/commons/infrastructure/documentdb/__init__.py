"""Metadata store port and its MongoDB implementation."""

from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.infrastructure.documentdb.mongodb_provider import MongoDBDocumentDB

__all__ = [
    "DocumentDBBase",
    "MongoDBDocumentDB",
]
