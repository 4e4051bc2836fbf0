"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "video-asset-server"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=5000, ge=1, le=65535)
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = "/api"
    docs_enabled: bool = True


class CloudinarySettings(BaseModel):
    """Cloudinary account credentials."""

    cloud_name: str = ""
    api_key: str = ""
    api_secret: str = ""
    secure: bool = True
    chunk_size_bytes: int = Field(default=20 * 1024 * 1024, ge=5 * 1024 * 1024)


class MinioSettings(BaseModel):
    """MinIO/S3 settings for local development."""

    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    bucket: str = "video-assets"
    public_base_url: str | None = None


class AssetStoreSettings(BaseModel):
    """Remote asset store settings."""

    provider: Literal["cloudinary", "minio"] = "cloudinary"
    folder: str = "videos"
    resource_type: str = "video"
    format: str = "mp4"
    quality: str = "auto"
    upload_timeout_seconds: float = Field(default=600.0, gt=0)
    cloudinary: CloudinarySettings = Field(default_factory=CloudinarySettings)
    minio: MinioSettings = Field(default_factory=MinioSettings)


class ThumbnailSettings(BaseModel):
    """Preview thumbnail derived from every uploaded video."""

    width: int = Field(default=300, ge=1, le=4096)
    height: int = Field(default=200, ge=1, le=4096)
    crop: Literal["fill", "fit", "scale"] = "fill"
    format: str = "jpg"
    frame_offset_seconds: float = Field(default=1.0, ge=0)


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    uri: str | None = None
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "video_assets"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class UploadSettings(BaseModel):
    """Incoming upload handling."""

    max_size_mb: int = Field(default=200, ge=1)
    chunk_size_bytes: int = Field(default=1024 * 1024, ge=1024)
    temp_dir: str | None = None
    allowed_content_types: list[str] = Field(
        default_factory=lambda: ["video/", "application/octet-stream"]
    )

    @property
    def max_size_bytes(self) -> int:
        """Maximum accepted payload size in bytes."""
        return self.max_size_mb * 1024 * 1024


class CatalogSettings(BaseModel):
    """Read-side limits."""

    list_limit: int = Field(default=0, ge=0)  # 0 = unbounded
    recommendation_limit: int = Field(default=5, ge=1, le=100)


class TelemetrySettings(BaseModel):
    """Telemetry and observability settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    asset_store: AssetStoreSettings = Field(default_factory=AssetStoreSettings)
    thumbnail: ThumbnailSettings = Field(default_factory=ThumbnailSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEO_ASSETS__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
