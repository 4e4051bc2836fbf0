"""Video management endpoints."""

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile, status
from pydantic import ValidationError

from src.api.dependencies import (
    CatalogServiceDep,
    DeletionServiceDep,
    SettingsDep,
    UploadServiceDep,
)
from src.application.dtos.upload import UploadVideoRequest
from src.application.dtos.videos import (
    DeleteVideoResponse,
    UpdateVideoRequest,
    VideoResponse,
)
from src.domain.exceptions import ValidationException

router = APIRouter()


async def _read_chunks(file: UploadFile, chunk_size: int) -> AsyncIterator[bytes]:
    """Stream an uploaded file without loading it into memory."""
    while chunk := await file.read(chunk_size):
        yield chunk


def _build_upload_request(
    title: str | None,
    description: str | None,
    video: UploadFile | None,
) -> UploadVideoRequest:
    try:
        return UploadVideoRequest(
            title=title or "",
            description=description,
            filename=video.filename if video else None,
            content_type=video.content_type if video else None,
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ()))
        if field == "title":
            raise ValidationException("A title is required", field=field) from e
        raise ValidationException(f"Invalid {field}", field=field) from e


@router.get(
    "/videos",
    response_model=list[VideoResponse],
    summary="List videos",
    description="List all uploaded videos, newest first.",
)
async def list_videos(service: CatalogServiceDep) -> list[VideoResponse]:
    """List uploaded videos."""
    videos = await service.list_videos()
    return [VideoResponse.from_domain(video) for video in videos]


@router.post(
    "/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload video",
    description=(
        "Upload a video file with a title and optional description. "
        "The file is stored remotely and a metadata record is created."
    ),
)
async def upload_video(
    service: UploadServiceDep,
    settings: SettingsDep,
    video: Annotated[UploadFile | None, File(description="Video file")] = None,
    title: Annotated[str | None, Form(description="Video title")] = None,
    description: Annotated[
        str | None, Form(description="Optional description")
    ] = None,
) -> VideoResponse:
    """Upload a video and create its record."""
    try:
        if video is None:
            raise ValidationException("A video file is required", field="video")

        request = _build_upload_request(title, description, video)
        result = await service.upload(
            request,
            _read_chunks(video, settings.upload.chunk_size_bytes),
        )
    finally:
        if video is not None:
            await video.close()

    return VideoResponse.from_domain(result.video)


@router.get(
    "/videos/{video_id}",
    response_model=VideoResponse,
    summary="Get video",
    description="Get a single video record.",
)
async def get_video(video_id: str, service: CatalogServiceDep) -> VideoResponse:
    """Get a video by ID."""
    video = await service.get_video(video_id)
    return VideoResponse.from_domain(video)


@router.patch(
    "/videos/{video_id}",
    response_model=VideoResponse,
    summary="Update video",
    description="Edit the title and/or description. Omitted fields are kept.",
)
async def update_video(
    video_id: str,
    request: UpdateVideoRequest,
    service: CatalogServiceDep,
) -> VideoResponse:
    """Apply a partial edit to a video."""
    video = await service.update_video(video_id, request)
    return VideoResponse.from_domain(video)


@router.delete(
    "/videos/{video_id}",
    response_model=DeleteVideoResponse,
    summary="Delete video",
    description="Delete the stored file and the video record.",
)
async def delete_video(
    video_id: str,
    service: DeletionServiceDep,
) -> DeleteVideoResponse:
    """Delete a video."""
    result = await service.delete(video_id)
    return DeleteVideoResponse(
        message="Video deleted successfully",
        video_id=result.video_id,
        remote_deleted=result.remote_deleted,
    )


@router.get(
    "/videos/{video_id}/recommended",
    response_model=list[VideoResponse],
    summary="Recommended videos",
    description="Other videos, newest first.",
)
async def recommended_videos(
    video_id: str,
    service: CatalogServiceDep,
) -> list[VideoResponse]:
    """Recommend other videos."""
    videos = await service.recommend(video_id)
    return [VideoResponse.from_domain(video) for video in videos]
