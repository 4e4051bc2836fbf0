"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from src.commons.infrastructure.assetstore import (
    AssetStoreBase,
    CloudinaryAssetStore,
    MinioAssetStore,
)
from src.commons.infrastructure.documentdb import DocumentDBBase, MongoDBDocumentDB
from src.commons.settings.models import DocumentDBSettings, Settings
from src.commons.telemetry import get_logger
from src.infrastructure.video import FFmpegThumbnailer, ThumbnailRendererBase

logger = get_logger(__name__)


def build_mongodb_uri(doc_settings: DocumentDBSettings) -> str:
    """Build a connection string, preferring an explicit URI."""
    if doc_settings.uri:
        return doc_settings.uri
    if doc_settings.username and doc_settings.password:
        return (
            f"mongodb://{doc_settings.username}:{doc_settings.password}"
            f"@{doc_settings.host}:{doc_settings.port}"
            f"/?authSource={doc_settings.auth_source}"
        )
    return f"mongodb://{doc_settings.host}:{doc_settings.port}"


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings and
    keeps one instance of each for the life of the process.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    def get_asset_store(self) -> AssetStoreBase:
        """Get remote asset store instance.

        Returns:
            Configured asset store provider.

        Raises:
            ValueError: If provider is not supported.
        """
        if "asset_store" not in self._instances:
            store_settings = self._settings.asset_store
            provider = store_settings.provider

            if provider == "cloudinary":
                cld = store_settings.cloudinary
                self._instances["asset_store"] = CloudinaryAssetStore(
                    cloud_name=cld.cloud_name,
                    api_key=cld.api_key,
                    api_secret=cld.api_secret,
                    secure=cld.secure,
                    chunk_size=cld.chunk_size_bytes,
                )
            elif provider == "minio":
                minio = store_settings.minio
                self._instances["asset_store"] = MinioAssetStore(
                    endpoint=minio.endpoint,
                    access_key=minio.access_key,
                    secret_key=minio.secret_key,
                    bucket=minio.bucket,
                    secure=minio.use_ssl,
                    region=minio.region,
                    public_base_url=minio.public_base_url,
                    renderer=self.get_thumbnail_renderer(),
                    frame_offset_seconds=self._settings.thumbnail.frame_offset_seconds,
                )
            else:
                raise ValueError(f"Unsupported asset store provider: {provider}")

        return cast("AssetStoreBase", self._instances["asset_store"])

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=build_mongodb_uri(doc_settings),
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_thumbnail_renderer(self) -> ThumbnailRendererBase:
        """Get thumbnail renderer instance.

        Returns:
            Configured thumbnail renderer.
        """
        if "thumbnail_renderer" not in self._instances:
            self._instances["thumbnail_renderer"] = FFmpegThumbnailer()
        return cast("ThumbnailRendererBase", self._instances["thumbnail_renderer"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                logger.warning(
                    "Failed to close service",
                    extra={"service": name, "error": str(e)},
                )

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
