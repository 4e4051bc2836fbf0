"""FFmpeg implementation of thumbnail rendering."""

import asyncio
import subprocess
from pathlib import Path

from src.commons.telemetry import get_logger
from src.infrastructure.video.base import ThumbnailRenderError, ThumbnailRendererBase


def build_scale_filter(width: int, height: int, crop: str) -> str:
    """Build the ffmpeg -vf chain for a crop mode.

    >>> build_scale_filter(300, 200, "fill")
    'scale=300:200:force_original_aspect_ratio=increase,crop=300:200'
    """
    if crop == "fill":
        return (
            f"scale={width}:{height}:force_original_aspect_ratio=increase,"
            f"crop={width}:{height}"
        )
    if crop == "fit":
        return (
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2"
        )
    if crop == "scale":
        return f"scale={width}:{height}"
    raise ValueError(f"Unsupported crop mode: {crop}")


class FFmpegThumbnailer(ThumbnailRendererBase):
    """FFmpeg-based single frame rendering.

    Requires ffmpeg to be installed and available in PATH.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", quality: int = 85) -> None:
        """Initialize FFmpeg thumbnailer.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
            quality: JPEG quality, 1-100.
        """
        self._ffmpeg = ffmpeg_path
        self._quality = quality
        self._logger = get_logger(__name__)

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
        """Render one frame, retrying at the first frame for short videos."""
        try:
            scale_filter = build_scale_filter(width, height, crop)
        except ValueError as e:
            raise ThumbnailRenderError(video_path, str(e)) from e

        output_path.parent.mkdir(parents=True, exist_ok=True)

        offsets = [offset_seconds] if offset_seconds <= 0 else [offset_seconds, 0.0]
        last_error = "no frame written"
        for offset in offsets:
            try:
                await self._run(video_path, output_path, scale_filter, offset)
            except subprocess.CalledProcessError as e:
                stderr = (e.stderr or b"").decode(errors="replace").strip()
                last_error = stderr.splitlines()[-1] if stderr else str(e)
                continue
            except OSError as e:
                raise ThumbnailRenderError(video_path, str(e)) from e

            # ffmpeg exits 0 without output when seeking past the end
            if output_path.exists() and output_path.stat().st_size > 0:
                return output_path
            self._logger.debug(
                "No frame at offset, retrying",
                extra={"video": video_path.name, "offset_seconds": offset},
            )

        raise ThumbnailRenderError(video_path, last_error)

    async def _run(
        self,
        video_path: Path,
        output_path: Path,
        scale_filter: str,
        offset: float,
    ) -> None:
        cmd = [
            self._ffmpeg,
            "-ss",
            str(offset),
            "-i",
            str(video_path),
            "-frames:v",
            "1",
            "-vf",
            scale_filter,
            "-q:v",
            str(max(2, int((100 - self._quality) / 100 * 31))),
            "-y",
            str(output_path),
        ]

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(
            None,
            lambda: subprocess.run(cmd, capture_output=True, check=True),
        )
