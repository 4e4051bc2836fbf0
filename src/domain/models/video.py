"""Video asset domain model."""

from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, Field


class VideoAsset(BaseModel):
    """Metadata record for one uploaded video.

    The binary lives in the remote asset store; this record points at it
    through ``remote_asset_id``. Identity and URLs never change after
    creation, only ``title`` and ``description`` are editable.
    """

    id: str | None = Field(
        default=None,
        description="Identifier assigned by the metadata store on insert",
    )
    title: str = Field(min_length=1, description="Video title")
    description: str = Field(default="", description="Free-form description")
    video_url: str = Field(description="URL of the binary in the asset store")
    thumbnail_url: str = Field(description="Derived preview image URL")
    remote_asset_id: str = Field(description="Asset store identifier")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When this record was created",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Last edit timestamp",
    )

    def to_document(self) -> dict[str, Any]:
        """Dump the record for the document store, without its identifier."""
        return self.model_dump(exclude={"id"})

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Self:
        """Build a record from a stored document."""
        return cls.model_validate(document)

    def with_id(self, video_id: str) -> Self:
        """Create a new instance carrying the store-assigned identifier."""
        return self.model_copy(update={"id": video_id})

    @staticmethod
    def edits(
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> dict[str, str]:
        """Collect the fields an edit would overwrite.

        Absent or blank values are dropped, so an edit never clears a field
        by omission.

        Args:
            title: New title, if any.
            description: New description, if any.

        Returns:
            Mapping of field name to new value.
        """
        updates: dict[str, str] = {}
        if title is not None and title.strip():
            updates["title"] = title.strip()
        if description is not None and description.strip():
            updates["description"] = description
        return updates
