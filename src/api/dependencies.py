"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.application.services.catalog import VideoCatalogService
from src.application.services.deletion import VideoDeletionService
from src.application.services.upload import VideoUploadService
from src.commons.settings.loader import get_settings as _load_settings
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger
from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers.

    Args:
        settings: Application settings.

    Returns:
        Configured infrastructure factory.
    """
    return get_factory(settings)


def get_upload_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoUploadService:
    """Get video upload service with all dependencies.

    Args:
        factory: Infrastructure factory.
        settings: Application settings.

    Returns:
        Configured video upload service.
    """
    return VideoUploadService(
        asset_store=factory.get_asset_store(),
        document_db=factory.get_document_db(),
        settings=settings,
    )


def get_deletion_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoDeletionService:
    """Get video deletion service with all dependencies."""
    return VideoDeletionService(
        asset_store=factory.get_asset_store(),
        document_db=factory.get_document_db(),
        settings=settings,
    )


def get_catalog_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoCatalogService:
    """Get video catalog service with all dependencies."""
    return VideoCatalogService(
        document_db=factory.get_document_db(),
        settings=settings,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
UploadServiceDep = Annotated[VideoUploadService, Depends(get_upload_service)]
DeletionServiceDep = Annotated[VideoDeletionService, Depends(get_deletion_service)]
CatalogServiceDep = Annotated[VideoCatalogService, Depends(get_catalog_service)]


async def init_services(settings: Settings) -> None:
    """Initialize all infrastructure services on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Pre-initialize critical services to fail fast
    asset_store = factory.get_asset_store()
    document_db = factory.get_document_db()

    await asset_store.initialize()
    try:
        await document_db.create_index(
            settings.document_db.collections.videos,
            [("created_at", -1)],
            name="created_at_desc",
        )
    except Exception as e:
        # The server can still answer; listing is just slower without it.
        logger.warning(
            "Failed to create index",
            extra={"index": "created_at_desc", "error": str(e)},
        )


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
