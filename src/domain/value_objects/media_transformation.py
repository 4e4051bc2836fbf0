"""Media transformation value object."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class MediaTransformation(BaseModel):
    """A fixed rendition of a stored video, such as a preview thumbnail.

    Asset stores use it both to build derived URLs and, where the store
    cannot transform on the fly, to render the derivative up front.

    Examples:
        >>> thumb = MediaTransformation(width=300, height=200, crop="fill")
        >>> thumb.to_params()
        [{'width': 300, 'height': 200, 'crop': 'fill'}]
        >>> thumb.key
        'w_300-h_200-c_fill'
    """

    width: int = Field(ge=1, le=4096, description="Target width in pixels")
    height: int = Field(ge=1, le=4096, description="Target height in pixels")
    crop: Literal["fill", "fit", "scale"] = Field(
        default="fill",
        description="How the frame is fitted into the target box",
    )
    format: str = Field(default="jpg", description="Output image format")

    model_config = {"frozen": True}

    def to_params(self) -> list[dict[str, Any]]:
        """Render as a transformation chain for the asset store."""
        return [{"width": self.width, "height": self.height, "crop": self.crop}]

    @property
    def key(self) -> str:
        """Stable name for this rendition, usable in object paths."""
        return f"w_{self.width}-h_{self.height}-c_{self.crop}"
