"""Request/response schemas for layout upload, listing and lifecycle endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from layout_library.models import Layout
from layout_library.schemas.auth import CamelModel

# Listing filter values with special meaning; any other value is a layout type.
FILTER_ALL = "All"
FILTER_ARCHIVE = "Archive"


class CreatorSummary(CamelModel):
    """Owner reference expanded to username and email only."""

    id: int
    username: str
    email: str


class LayoutResponse(CamelModel):
    """A layout as returned by the API. ``created_by`` is an id or an expanded creator."""

    id: int
    title: str
    type: str
    description: str | None = None
    category: str = "General"
    thumbnail: str
    file: list[str] = Field(default_factory=list)
    tech_stack: list[str] = Field(default_factory=list)
    archived: bool = False
    created_by: int | CreatorSummary
    created_at: datetime | None = None

    @classmethod
    def from_layout(cls, layout: Layout, expand_creator: bool = True) -> "LayoutResponse":
        """Build the response, expanding the owner when loaded and requested."""
        created_by: int | CreatorSummary = layout.created_by_id
        if expand_creator and layout.creator is not None:
            created_by = CreatorSummary.model_validate(layout.creator)
        return cls(
            id=layout.id,
            title=layout.title,
            type=layout.type,
            description=layout.description,
            category=layout.category,
            thumbnail=layout.thumbnail,
            file=list(layout.file or []),
            tech_stack=list(layout.tech_stack or []),
            archived=layout.archived,
            created_by=created_by,
            created_at=layout.created_at,
        )


class LayoutEnvelope(BaseModel):
    """Message plus the affected layout."""

    message: str
    data: LayoutResponse
