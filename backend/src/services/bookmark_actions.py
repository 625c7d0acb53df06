"""
Form actions for bookmark pages.

These wrap the bookmark services for presentation code that renders a status
message instead of handling exceptions. Every action takes the caller's identity
explicitly; a missing user short-circuits before the store is touched.
"""
import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.action import ActionResult, ErrorCode
from schemas.bookmark import BookmarkCreate, BookmarkEdit, BookmarkFeed, BookmarkUpdate
from services import bookmark_query_service, bookmark_service
from services.bookmark_service import DuplicateUrlError

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "User not authenticated."
DUPLICATE_BOOKMARK = "You already saved this bookmark!"
NOT_FOUND = "Bookmark not found."
STORE_FAILURE = "Failed to save bookmark. Please try again."


def _validation_message(exc: ValidationError) -> str:
    """Return the first validation error as a sentence for the form."""
    error = exc.errors()[0]
    ctx_error = error.get("ctx", {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {error['msg']}" if field else error["msg"]


async def add_bookmark(
    db: AsyncSession,
    user: User | None,
    url: str | None,
    title: str | None,
    description: str | None = None,
    tags_csv: str | None = None,
) -> ActionResult:
    """Save a new bookmark from the add form. `tags_csv` is a comma-separated string."""
    if user is None:
        return ActionResult.failure(ErrorCode.UNAUTHENTICATED, NOT_AUTHENTICATED)

    try:
        data = BookmarkCreate(
            url=url,
            title=title if title is not None else "",
            description=description,
            tags=tags_csv or "",
        )
    except ValidationError as e:
        return ActionResult.failure(ErrorCode.VALIDATION, _validation_message(e))

    try:
        bookmark, tag_sync = await bookmark_service.create_bookmark(db, user.id, data)
    except DuplicateUrlError:
        return ActionResult.failure(ErrorCode.CONFLICT, DUPLICATE_BOOKMARK)
    except SQLAlchemyError:
        logger.exception("Failed to add bookmark for user %s", user.id)
        await db.rollback()
        return ActionResult.failure(ErrorCode.STORE_FAILURE, STORE_FAILURE)

    return ActionResult.success(bookmark_id=bookmark.id, failed_tags=tag_sync.failed_names)


async def update_bookmark(
    db: AsyncSession,
    user: User | None,
    data: BookmarkEdit | dict,
) -> ActionResult:
    """Save the edit form: replaces title, url, description and the full tag set."""
    if user is None:
        return ActionResult.failure(ErrorCode.UNAUTHENTICATED, NOT_AUTHENTICATED)

    try:
        if isinstance(data, BookmarkEdit):
            edit = data
        else:
            # Missing form fields get the same messages as the add form
            fields = {**data}
            fields.setdefault("url", None)
            if fields.get("title") is None:
                fields["title"] = ""
            edit = BookmarkEdit.model_validate(fields)
    except ValidationError as e:
        return ActionResult.failure(ErrorCode.VALIDATION, _validation_message(e))

    update = BookmarkUpdate.model_validate(edit.model_dump(exclude={"id"}))
    try:
        updated = await bookmark_service.update_bookmark(db, user.id, edit.id, update)
    except DuplicateUrlError:
        return ActionResult.failure(ErrorCode.CONFLICT, DUPLICATE_BOOKMARK)
    except SQLAlchemyError:
        logger.exception("Failed to update bookmark %s for user %s", edit.id, user.id)
        await db.rollback()
        return ActionResult.failure(ErrorCode.STORE_FAILURE, STORE_FAILURE)

    if updated is None:
        return ActionResult.failure(ErrorCode.NOT_FOUND, NOT_FOUND)
    bookmark, tag_sync = updated
    return ActionResult.success(bookmark_id=bookmark.id, failed_tags=tag_sync.failed_names)


async def delete_bookmark(
    db: AsyncSession,
    user: User | None,
    bookmark_id: int,
) -> ActionResult:
    """Delete one of the user's bookmarks (called when an optimistic delete commits)."""
    if user is None:
        return ActionResult.failure(ErrorCode.UNAUTHENTICATED, NOT_AUTHENTICATED)

    try:
        deleted = await bookmark_service.delete_bookmark(db, user.id, bookmark_id)
    except SQLAlchemyError:
        logger.exception("Failed to delete bookmark %s for user %s", bookmark_id, user.id)
        await db.rollback()
        return ActionResult.failure(ErrorCode.STORE_FAILURE, STORE_FAILURE)

    if not deleted:
        return ActionResult.failure(ErrorCode.NOT_FOUND, NOT_FOUND)
    return ActionResult.success(bookmark_id=bookmark_id)


async def load_bookmarks(
    db: AsyncSession,
    user: User | None,
    query: str | None = None,
    tag: str | None = None,
) -> BookmarkFeed:
    """Bookmarks for the list page. Visitors without a session get an empty feed."""
    if user is None:
        return bookmark_query_service.empty_feed()
    return await bookmark_query_service.list_bookmarks(db, user.id, query=query, tag=tag)
