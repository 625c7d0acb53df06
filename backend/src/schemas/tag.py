"""Pydantic schemas for tag endpoints."""
from pydantic import BaseModel, ConfigDict


class TagRef(BaseModel):
    """A tag as attached to a bookmark."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TagCount(TagRef):
    """Schema for a tag with the number of the user's bookmarks that use it."""

    count: int


class TagListResponse(BaseModel):
    """Schema for the tags list response (count DESC, then name ASC)."""

    tags: list[TagCount]
