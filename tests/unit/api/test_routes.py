"""Unit tests for API routes."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from src.api.main import create_app, run
from src.application.dtos.upload import UploadVideoRequest, VideoUploadResult
from src.application.dtos.videos import UpdateVideoRequest, VideoDeletionResult
from src.application.services.upload import VideoUploadService
from src.commons.infrastructure.assetstore.base import HealthStatus
from src.commons.settings.models import ServerSettings, Settings
from src.domain.exceptions import (
    PersistenceException,
    RemoteStoreException,
    UnexpectedException,
    UploadException,
    ValidationException,
    VideoNotFoundException,
)
from src.domain.models.video import VideoAsset

VIDEO_ID = "65f0c0ffee0000000000abcd"
SPA_ORIGIN = "http://spa.test"


def _video(video_id: str = VIDEO_ID, title: str = "Launch") -> VideoAsset:
    created = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    return VideoAsset(
        id=video_id,
        title=title,
        description="Keynote",
        video_url=f"https://res.cloudinary.com/demo/video/upload/videos/{video_id}.mp4",
        thumbnail_url=f"https://res.cloudinary.com/demo/video/upload/c_fill,h_200,w_300/videos/{video_id}.jpg",
        remote_asset_id=f"videos/{video_id}",
        created_at=created,
        updated_at=created,
    )


@pytest.fixture
def mock_settings():
    """Create mock settings for the app."""
    settings = MagicMock()
    settings.app.name = "test-app"
    settings.app.version = "0.1.0"
    settings.app.environment = "test"
    settings.server.cors_origins = [SPA_ORIGIN]
    settings.server.api_prefix = "/api"
    settings.server.docs_enabled = True
    settings.upload.chunk_size_bytes = 1024
    settings.upload.max_size_bytes = 64 * 1024
    settings.asset_store.provider = "cloudinary"
    settings.document_db.provider = "mongodb"
    return settings


@pytest.fixture
def mock_factory():
    """Create mock infrastructure factory with healthy stores."""
    factory = MagicMock()
    asset_store = MagicMock()
    asset_store.health_check = AsyncMock(
        return_value=HealthStatus(healthy=True, latency_ms=3.2)
    )
    document_db = MagicMock()
    document_db.health_check = AsyncMock(
        return_value=HealthStatus(healthy=True, latency_ms=1.1)
    )
    factory.get_asset_store.return_value = asset_store
    factory.get_document_db.return_value = document_db
    return factory


@pytest.fixture
def mock_upload_service():
    """Create mock upload service."""
    return AsyncMock()


@pytest.fixture
def mock_deletion_service():
    """Create mock deletion service."""
    return AsyncMock()


@pytest.fixture
def mock_catalog_service():
    """Create mock catalog service."""
    return AsyncMock()


@pytest.fixture
def client(
    mock_settings,
    mock_factory,
    mock_upload_service,
    mock_deletion_service,
    mock_catalog_service,
):
    """Create test client with mocked dependencies."""
    from src.api.dependencies import (
        get_catalog_service,
        get_deletion_service,
        get_infrastructure_factory,
        get_settings,
        get_upload_service,
    )

    with (
        patch("src.api.main.get_settings", return_value=mock_settings),
        patch("src.api.dependencies.init_services", new_callable=AsyncMock),
        patch("src.api.dependencies.shutdown_services", new_callable=AsyncMock),
    ):
        app = create_app()
        app.dependency_overrides[get_settings] = lambda: mock_settings
        app.dependency_overrides[get_infrastructure_factory] = lambda: mock_factory
        app.dependency_overrides[get_upload_service] = lambda: mock_upload_service
        app.dependency_overrides[get_deletion_service] = lambda: mock_deletion_service
        app.dependency_overrides[get_catalog_service] = lambda: mock_catalog_service
        yield TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def wired_client(mock_settings, asset_store, document_db, settings):
    """Test client running the real upload service over in-memory stores."""
    from src.api.dependencies import get_settings, get_upload_service

    with patch("src.api.main.get_settings", return_value=mock_settings):
        app = create_app()
    app.dependency_overrides[get_settings] = lambda: mock_settings
    app.dependency_overrides[get_upload_service] = lambda: VideoUploadService(
        asset_store=asset_store,
        document_db=document_db,
        settings=settings,
    )
    yield TestClient(app, raise_server_exceptions=False)


class TestHealthRoutes:
    """Tests for health check endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert {c["name"] for c in data["components"]} == {
            "asset_store",
            "document_db",
        }
        db = next(c for c in data["components"] if c["name"] == "document_db")
        assert db["message"] == "Provider: mongodb"

    def test_health_degraded_when_one_store_down(self, client, mock_factory):
        mock_factory.get_document_db.return_value.health_check.return_value = (
            HealthStatus(healthy=False, latency_ms=0.0, message="refused")
        )

        data = client.get("/health").json()

        assert data["status"] == "degraded"
        db = next(c for c in data["components"] if c["name"] == "document_db")
        assert db["message"] == "refused"

    def test_health_unhealthy_when_check_raises(self, client, mock_factory):
        mock_factory.get_asset_store.side_effect = RuntimeError("no credentials")
        mock_factory.get_document_db.return_value.health_check.return_value = (
            HealthStatus(healthy=False, latency_ms=0.0)
        )

        data = client.get("/health").json()

        assert data["status"] == "unhealthy"

    def test_liveness_check(self, client):
        response = client.get("/health/live")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}

    def test_readiness_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "ready": True,
            "checks": {"asset_store": True, "document_db": True},
        }

    def test_readiness_not_ready(self, client, mock_factory):
        mock_factory.get_asset_store.return_value.health_check.return_value = (
            HealthStatus(healthy=False, latency_ms=0.0)
        )

        response = client.get("/health/ready")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["checks"]["asset_store"] is False


class TestListVideos:
    """Tests for GET /api/videos."""

    def test_returns_camel_case_records(self, client, mock_catalog_service):
        mock_catalog_service.list_videos.return_value = [_video()]

        response = client.get("/api/videos")

        assert response.status_code == status.HTTP_200_OK
        [item] = response.json()
        assert item["id"] == VIDEO_ID
        assert item["videoUrl"].endswith(f"{VIDEO_ID}.mp4")
        assert item["thumbnailUrl"].endswith(f"{VIDEO_ID}.jpg")
        assert item["remoteAssetId"] == f"videos/{VIDEO_ID}"
        assert "createdAt" in item
        assert "video_url" not in item

    def test_empty(self, client, mock_catalog_service):
        mock_catalog_service.list_videos.return_value = []

        response = client.get("/api/videos")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_persistence_failure(self, client, mock_catalog_service):
        mock_catalog_service.list_videos.side_effect = PersistenceException(
            "load", "connection reset"
        )

        response = client.get("/api/videos")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        data = response.json()
        assert data["code"] == "PERSISTENCE_ERROR"
        assert data["message"] == "Failed to load video metadata"
        assert "connection reset" not in response.text


class TestGetVideo:
    """Tests for GET /api/videos/{id}."""

    def test_found(self, client, mock_catalog_service):
        mock_catalog_service.get_video.return_value = _video()

        response = client.get(f"/api/videos/{VIDEO_ID}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "Launch"
        mock_catalog_service.get_video.assert_awaited_once_with(VIDEO_ID)

    def test_not_found(self, client, mock_catalog_service):
        mock_catalog_service.get_video.side_effect = VideoNotFoundException("nope")

        response = client.get("/api/videos/nope")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        data = response.json()
        assert data["code"] == "VIDEO_NOT_FOUND"
        assert data["details"] == {"video_id": "nope"}
        assert data["request_id"] == response.headers["X-Request-ID"]

    def test_request_id_is_echoed(self, client, mock_catalog_service):
        mock_catalog_service.get_video.side_effect = VideoNotFoundException("nope")

        response = client.get("/api/videos/nope", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json()["request_id"] == "req-42"

    def test_unexpected_error_hides_details(self, client, mock_catalog_service):
        mock_catalog_service.get_video.side_effect = RuntimeError("secret stack")

        response = client.get(f"/api/videos/{VIDEO_ID}")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        data = response.json()
        assert data["code"] == "INTERNAL_ERROR"
        assert "secret stack" not in data["message"]


class TestUploadVideo:
    """Tests for POST /api/videos."""

    def test_created(self, client, mock_upload_service):
        mock_upload_service.upload.return_value = VideoUploadResult(video=_video())

        response = client.post(
            "/api/videos",
            data={"title": "Launch", "description": "Keynote"},
            files={"video": ("launch.mp4", b"\x00" * 10, "video/mp4")},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["id"] == VIDEO_ID

        request, chunks = mock_upload_service.upload.call_args[0]
        assert isinstance(request, UploadVideoRequest)
        assert request.title == "Launch"
        assert request.description == "Keynote"
        assert request.filename == "launch.mp4"
        assert request.content_type == "video/mp4"
        assert chunks is not None

    def test_missing_description_defaults_empty(self, client, mock_upload_service):
        mock_upload_service.upload.return_value = VideoUploadResult(video=_video())

        client.post(
            "/api/videos",
            data={"title": "Launch"},
            files={"video": ("launch.mp4", b"\x00", "video/mp4")},
        )

        request = mock_upload_service.upload.call_args[0][0]
        assert request.description == ""

    def test_missing_file(self, client, mock_upload_service):
        response = client.post("/api/videos", data={"title": "Launch"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["details"] == {"field": "video"}
        mock_upload_service.upload.assert_not_called()

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_missing_title(self, client, mock_upload_service, title):
        data = {} if title is None else {"title": title}

        response = client.post(
            "/api/videos",
            data=data,
            files={"video": ("launch.mp4", b"\x00", "video/mp4")},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "A title is required"
        assert response.json()["details"] == {"field": "title"}
        mock_upload_service.upload.assert_not_called()

    def test_service_validation_error(self, client, mock_upload_service):
        mock_upload_service.upload.side_effect = ValidationException(
            "Unsupported file type: text/plain", field="video"
        )

        response = client.post(
            "/api/videos",
            data={"title": "Notes"},
            files={"video": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["message"] == "Unsupported file type: text/plain"

    def test_upload_failure(self, client, mock_upload_service):
        mock_upload_service.upload.side_effect = UploadException("Invalid Signature")

        response = client.post(
            "/api/videos",
            data={"title": "Launch"},
            files={"video": ("launch.mp4", b"\x00", "video/mp4")},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        data = response.json()
        assert data["code"] == "UPLOAD_ERROR"
        assert data["message"] == "Failed to upload video to the asset store"
        assert "Invalid Signature" not in response.text

    def test_persistence_failure(self, client, mock_upload_service):
        mock_upload_service.upload.side_effect = PersistenceException(
            "save", "duplicate key"
        )

        response = client.post(
            "/api/videos",
            data={"title": "Launch"},
            files={"video": ("launch.mp4", b"\x00", "video/mp4")},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["code"] == "PERSISTENCE_ERROR"

    def test_unexpected_failure(self, client, mock_upload_service):
        mock_upload_service.upload.side_effect = UnexpectedException("disk full")

        response = client.post(
            "/api/videos",
            data={"title": "Launch"},
            files={"video": ("launch.mp4", b"\x00", "video/mp4")},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["code"] == "INTERNAL_ERROR"
        assert response.json()["message"] == "An unexpected error occurred"


class TestUpdateVideo:
    """Tests for PATCH /api/videos/{id}."""

    def test_partial_edit(self, client, mock_catalog_service):
        mock_catalog_service.update_video.return_value = _video(title="Changed")

        response = client.patch(f"/api/videos/{VIDEO_ID}", json={"title": "Changed"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "Changed"
        video_id, request = mock_catalog_service.update_video.call_args[0]
        assert video_id == VIDEO_ID
        assert isinstance(request, UpdateVideoRequest)
        assert request.title == "Changed"
        assert request.description is None

    def test_empty_body(self, client, mock_catalog_service):
        mock_catalog_service.update_video.return_value = _video()

        response = client.patch(f"/api/videos/{VIDEO_ID}", json={})

        assert response.status_code == status.HTTP_200_OK

    def test_title_too_long(self, client, mock_catalog_service):
        response = client.patch(f"/api/videos/{VIDEO_ID}", json={"title": "x" * 301})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["details"] == {"fields": ["title"]}
        mock_catalog_service.update_video.assert_not_called()

    def test_not_found(self, client, mock_catalog_service):
        mock_catalog_service.update_video.side_effect = VideoNotFoundException(
            VIDEO_ID
        )

        response = client.patch(f"/api/videos/{VIDEO_ID}", json={"title": "C"})

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDeleteVideo:
    """Tests for DELETE /api/videos/{id}."""

    def test_deleted(self, client, mock_deletion_service):
        mock_deletion_service.delete.return_value = VideoDeletionResult(
            video_id=VIDEO_ID,
            remote_asset_id=f"videos/{VIDEO_ID}",
            remote_deleted=True,
            record_deleted=True,
        )

        response = client.delete(f"/api/videos/{VIDEO_ID}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "message": "Video deleted successfully",
            "videoId": VIDEO_ID,
            "remoteDeleted": True,
        }

    def test_not_found(self, client, mock_deletion_service):
        mock_deletion_service.delete.side_effect = VideoNotFoundException(VIDEO_ID)

        response = client.delete(f"/api/videos/{VIDEO_ID}")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_remote_store_failure(self, client, mock_deletion_service):
        mock_deletion_service.delete.side_effect = RemoteStoreException(
            "delete", "rate limited"
        )

        response = client.delete(f"/api/videos/{VIDEO_ID}")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["code"] == "REMOTE_STORE_ERROR"


class TestRecommendedVideos:
    """Tests for GET /api/videos/{id}/recommended."""

    def test_returns_others(self, client, mock_catalog_service):
        mock_catalog_service.recommend.return_value = [
            _video("a" * 24, "A"),
            _video("b" * 24, "B"),
        ]

        response = client.get(f"/api/videos/{VIDEO_ID}/recommended")

        assert response.status_code == status.HTTP_200_OK
        assert [v["title"] for v in response.json()] == ["A", "B"]
        mock_catalog_service.recommend.assert_awaited_once_with(VIDEO_ID)


class TestUploadThroughService:
    """POST /api/videos with the real upload pipeline behind it."""

    def test_created_and_stored(self, wired_client, asset_store, document_db):
        response = wired_client.post(
            "/api/videos",
            data={"title": "Clip", "description": "Short one"},
            files={"video": ("clip.mp4", b"\x01" * 64, "video/mp4")},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["title"] == "Clip"
        assert data["description"] == "Short one"
        assert data["remoteAssetId"] in asset_store.objects
        assert data["videoUrl"] == f"https://assets.test/{data['remoteAssetId']}.mp4"
        assert data["thumbnailUrl"].endswith(f"{data['remoteAssetId']}.jpg")
        assert "createdAt" in data
        assert data["id"] in document_db._collection("videos")
        assert asset_store.objects[data["remoteAssetId"]] == b"\x01" * 64

    def test_store_failure_leaves_nothing_behind(
        self, wired_client, asset_store, document_db
    ):
        document_db.insert_error = RuntimeError("write concern timeout")

        response = wired_client.post(
            "/api/videos",
            data={"title": "Clip"},
            files={"video": ("clip.mp4", b"\x01" * 64, "video/mp4")},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["code"] == "PERSISTENCE_ERROR"
        assert asset_store.objects == {}
        assert document_db._collection("videos") == {}


class TestUploadSizeLimit:
    """Declared upload size is checked before the body is parsed."""

    def test_oversized_body_rejected(self, client, mock_upload_service):
        response = client.post(
            "/api/videos",
            data={"title": "Huge"},
            files={"video": ("huge.mp4", b"\x00" * (200 * 1024), "video/mp4")},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["details"] == {"field": "video"}
        mock_upload_service.upload.assert_not_called()

    def test_other_routes_unaffected(self, client, mock_catalog_service):
        mock_catalog_service.update_video.return_value = _video()

        response = client.patch(
            f"/api/videos/{VIDEO_ID}",
            json={"description": "x" * 4000, "title": "T"},
        )

        assert response.status_code == status.HTTP_200_OK


class TestCors:
    """CORS headers on success and error responses."""

    def test_success_response(self, client, mock_catalog_service):
        mock_catalog_service.list_videos.return_value = []

        response = client.get("/api/videos", headers={"Origin": SPA_ORIGIN})

        assert response.headers["access-control-allow-origin"] == SPA_ORIGIN

    def test_error_response(self, client, mock_catalog_service):
        mock_catalog_service.get_video.side_effect = VideoNotFoundException("nope")

        response = client.get("/api/videos/nope", headers={"Origin": SPA_ORIGIN})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.headers["access-control-allow-origin"] == SPA_ORIGIN
        assert "X-Request-ID" in response.headers["access-control-expose-headers"]

    def test_server_error_response(self, client, mock_catalog_service):
        mock_catalog_service.list_videos.side_effect = RuntimeError("boom")

        response = client.get("/api/videos", headers={"Origin": SPA_ORIGIN})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.headers["access-control-allow-origin"] == SPA_ORIGIN


class TestRun:
    """Tests for the uvicorn entry point."""

    def test_uses_server_settings(self):
        settings = Settings(
            server=ServerSettings(host="127.0.0.1", port=8123, workers=2)
        )

        with (
            patch("src.api.main.get_settings", return_value=settings),
            patch("src.api.main.uvicorn.run") as mock_run,
        ):
            run()

        args, kwargs = mock_run.call_args
        assert args == ("src.api.main:app",)
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8123
        assert kwargs["workers"] == 2
        assert kwargs["reload"] is False
