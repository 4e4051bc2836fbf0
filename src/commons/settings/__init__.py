"""Settings management module."""

from src.commons.settings.loader import SettingsLoader, get_settings, reset_settings
from src.commons.settings.models import (
    AppSettings,
    AssetStoreSettings,
    CatalogSettings,
    CloudinarySettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    MinioSettings,
    ServerSettings,
    Settings,
    TelemetrySettings,
    ThumbnailSettings,
    UploadSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Storage
    "AssetStoreSettings",
    "CloudinarySettings",
    "MinioSettings",
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    # Pipeline
    "ThumbnailSettings",
    "UploadSettings",
    "CatalogSettings",
    # Telemetry
    "TelemetrySettings",
]
