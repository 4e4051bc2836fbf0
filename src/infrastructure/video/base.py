"""Abstract base classes for video processing services."""

from abc import ABC, abstractmethod
from pathlib import Path


class ThumbnailRenderError(Exception):
    """Raised when a preview frame cannot be rendered."""

    def __init__(self, video_path: Path, reason: str) -> None:
        self.video_path = video_path
        self.reason = reason
        super().__init__(f"Thumbnail rendering failed for {video_path.name}: {reason}")


class ThumbnailRendererBase(ABC):
    """Abstract base class for rendering a still preview from a video.

    Implementations should handle:
    - FFmpeg (subprocess)
    """

    @abstractmethod
    async def render(
        self,
        video_path: Path,
        output_path: Path,
        *,
        width: int,
        height: int,
        crop: str = "fill",
        offset_seconds: float = 1.0,
    ) -> Path:
        """Render one frame of a video into an image file.

        Args:
            video_path: Source video file.
            output_path: Image file to write; the extension picks the format.
            width: Target width in pixels.
            height: Target height in pixels.
            crop: "fill" covers the box and crops the overflow, "fit"
                letterboxes inside it, "scale" stretches to it.
            offset_seconds: Position of the frame. Falls back to the first
                frame for shorter videos.

        Returns:
            Path of the written image.

        Raises:
            ThumbnailRenderError: If rendering fails.
        """
