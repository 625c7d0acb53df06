"""Result envelope returned by the bookmark form actions."""
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel


class ErrorCode(StrEnum):
    """Category of a failed action."""

    UNAUTHENTICATED = "unauthenticated"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    STORE_FAILURE = "store_failure"


class ActionResult(BaseModel):
    """
    Outcome of a form action.

    Actions never raise for expected failures; presentation code renders `error`.
    `failed_tags` lists tag names that were dropped while saving an otherwise
    successful bookmark.
    """

    status: Literal["success", "error"]
    error: str | None = None
    code: ErrorCode | None = None
    bookmark_id: int | None = None
    failed_tags: list[str] = []

    @classmethod
    def success(
        cls, bookmark_id: int | None = None, failed_tags: list[str] | None = None,
    ) -> "ActionResult":
        """Build a successful result."""
        return cls(status="success", bookmark_id=bookmark_id, failed_tags=failed_tags or [])

    @classmethod
    def failure(cls, code: ErrorCode, error: str) -> "ActionResult":
        """Build a failed result."""
        return cls(status="error", code=code, error=error)


class BookmarkAddForm(BaseModel):
    """Fields posted by the add-bookmark form. Validation happens in the action."""

    url: str | None = None
    title: str | None = None
    description: str | None = None
    tags: str | None = None  # comma-separated
