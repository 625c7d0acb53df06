"""Service layer for bookmark create/update/delete operations."""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from services.tag_service import TagSyncResult, reconcile_tags
from services.utils import is_unique_violation

logger = logging.getLogger(__name__)

URL_CONSTRAINT = "uq_bookmarks_user_id_url"


class DuplicateUrlError(Exception):
    """Raised when a bookmark with the same URL already exists for the user."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"A bookmark with URL '{url}' already exists")


async def _check_url_exists(
    db: AsyncSession,
    user_id: int,
    url: str,
    exclude_id: int | None = None,
) -> bool:
    """Check whether the user already saved `url` (optionally ignoring one bookmark)."""
    query = select(Bookmark.id).where(Bookmark.user_id == user_id, Bookmark.url == url)
    if exclude_id is not None:
        query = query.where(Bookmark.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def create_bookmark(
    db: AsyncSession,
    user_id: int,
    data: BookmarkCreate,
) -> tuple[Bookmark, TagSyncResult]:
    """
    Create a new bookmark for a user, then link its tags.

    Tag synchronization is best-effort: names that cannot be saved are reported
    in the returned TagSyncResult and never undo the bookmark itself.

    Args:
        db: Database session.
        user_id: User ID to create the bookmark for.
        data: Bookmark creation data.

    Returns:
        Tuple of (created bookmark with tags loaded, tag sync result).

    Raises:
        DuplicateUrlError: If the user already saved this URL.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    url_str = str(data.url)

    if await _check_url_exists(db, user_id, url_str):
        raise DuplicateUrlError(url_str)

    bookmark = Bookmark(
        user_id=user_id,
        url=url_str,
        title=data.title,
        description=data.description,
    )
    try:
        async with db.begin_nested():
            db.add(bookmark)
            await db.flush()
    except IntegrityError as e:
        # Race condition: the same URL was saved between our check and the insert
        if is_unique_violation(e, URL_CONSTRAINT):
            raise DuplicateUrlError(url_str) from e
        raise

    tag_sync = await reconcile_tags(db, user_id, bookmark.id, data.tags)
    if not tag_sync.complete:
        logger.warning(
            "Bookmark %s saved with tag sync status %s (dropped: %s)",
            bookmark.id,
            tag_sync.status,
            tag_sync.failed_names,
        )

    await db.refresh(bookmark)
    await db.refresh(bookmark, attribute_names=["tag_objects"])
    return bookmark, tag_sync


async def get_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
) -> Bookmark | None:
    """Get a bookmark by ID, scoped to user. Returns None if not found or wrong user."""
    result = await db.execute(
        select(Bookmark)
        .options(selectinload(Bookmark.tag_objects))
        .where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def update_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
    data: BookmarkUpdate,
) -> tuple[Bookmark, TagSyncResult] | None:
    """
    Update a bookmark's fields, then replace its tags. Returns None if not found or wrong user.

    The scalar fields are written (flushed) before tag synchronization starts.

    Raises:
        DuplicateUrlError: If the new URL is already saved in another bookmark.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return None

    url_str = str(data.url)
    if url_str != bookmark.url and await _check_url_exists(
        db, user_id, url_str, exclude_id=bookmark.id,
    ):
        raise DuplicateUrlError(url_str)

    try:
        async with db.begin_nested():
            bookmark.url = url_str
            bookmark.title = data.title
            bookmark.description = data.description
            bookmark.updated_at = func.clock_timestamp()
            await db.flush()
    except IntegrityError as e:
        if is_unique_violation(e, URL_CONSTRAINT):
            raise DuplicateUrlError(url_str) from e
        raise

    tag_sync = await reconcile_tags(db, user_id, bookmark.id, data.tags)
    if not tag_sync.complete:
        logger.warning(
            "Bookmark %s updated with tag sync status %s (dropped: %s)",
            bookmark.id,
            tag_sync.status,
            tag_sync.failed_names,
        )

    await db.refresh(bookmark)
    await db.refresh(bookmark, attribute_names=["tag_objects"])
    return bookmark, tag_sync


async def delete_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
) -> bool:
    """
    Permanently delete a bookmark and its tag links.

    Tags themselves are kept; a tag left without bookmarks is hidden from tag lists.

    Returns:
        True if deleted, False if not found (or owned by someone else).

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return False

    await db.delete(bookmark)
    await db.flush()
    return True
