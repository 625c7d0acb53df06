"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schemas.tag import TagCount, TagRef
from schemas.validators import (
    parse_tag_csv,
    validate_description_length,
    validate_tag_names,
    validate_title,
    validate_url,
)


class TagSyncStatus(StrEnum):
    """Outcome of reconciling a bookmark's tags."""

    COMPLETE = "complete"  # every requested tag is linked
    PARTIAL = "partial"  # links written, some names could not be resolved
    FAILED = "failed"  # links were not written, previous set kept


class BookmarkWrite(BaseModel):
    """Fields shared by create and update requests."""

    url: str
    title: str
    description: str | None = None
    tags: list[str] = Field(
        default_factory=list,
        description="Tag names. A comma-separated string is also accepted.",
    )

    @field_validator("url", mode="before")
    @classmethod
    def check_url(cls, v: Any) -> Any:
        """Require a well-formed http(s) URL; the trimmed input is what gets stored."""
        if v is None or isinstance(v, str):
            return validate_url(v)
        return v

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Validate title presence and length."""
        return validate_title(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> list[str]:
        """Accept a list or a comma-separated string of tag names."""
        if v is None:
            return []
        if isinstance(v, str):
            v = parse_tag_csv(v)
        return validate_tag_names(list(v))


class BookmarkCreate(BookmarkWrite):
    """Schema for creating a new bookmark."""


class BookmarkUpdate(BookmarkWrite):
    """
    Schema for updating an existing bookmark.

    Updates replace every field, including the full tag set.
    """


class BookmarkEdit(BookmarkUpdate):
    """Update payload as submitted by the edit form (carries the bookmark id)."""

    id: int


class BookmarkResponse(BaseModel):
    """
    Schema for bookmark responses.

    Note: Uses model_validator to flatten the tag_objects relationship into a list
    of {id, name} when it is eagerly loaded.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    title: str
    description: str | None
    tags: list[TagRef]
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def extract_tags(cls, data: Any) -> Any:
        """
        Extract tags from the tag_objects relationship.

        Only accesses tag_objects if it's already loaded (not lazy) to avoid
        triggering database queries outside async context.
        """
        if hasattr(data, "__dict__") and "_sa_instance_state" in data.__dict__:
            data_dict = {
                key: getattr(data, key)
                for key in ("id", "url", "title", "description", "created_at", "updated_at")
            }
            loaded = data.__dict__.get("tag_objects")
            tags = [TagRef.model_validate(tag) for tag in loaded or [] if tag is not None]
            data_dict["tags"] = sorted(tags, key=lambda tag: tag.name)
            return data_dict
        return data


class TagSyncResponse(BaseModel):
    """Summary of the tag synchronization performed by a write."""

    status: TagSyncStatus
    failed_tags: list[str] = []


class BookmarkWriteResponse(BookmarkResponse):
    """Returned by create/update: the bookmark plus how its tags were synchronized."""

    tag_sync: TagSyncResponse


class BookmarkFeed(BaseModel):
    """A user's bookmarks with the tag vocabulary used to filter them."""

    bookmarks: list[BookmarkResponse]
    tags: list[TagCount]  # count DESC, name ASC; zero-count tags excluded
    top_tags: list[TagCount]  # first N of tags, shown as quick filters
    total: int
