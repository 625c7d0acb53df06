"""Read side: a user's bookmarks joined with tags, plus tag usage counts."""
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.config import get_settings
from models.bookmark import Bookmark
from models.tag import Tag
from schemas.bookmark import BookmarkFeed, BookmarkResponse
from services.tag_service import get_user_tags_with_counts
from services.utils import escape_ilike


def empty_feed() -> BookmarkFeed:
    """Feed shown to a visitor without a session."""
    return BookmarkFeed(bookmarks=[], tags=[], top_tags=[], total=0)


async def list_bookmarks(
    db: AsyncSession,
    user_id: int,
    query: str | None = None,
    tag: str | None = None,
) -> BookmarkFeed:
    """
    Load the user's bookmarks (newest first) and their tag vocabulary.

    Args:
        db: Database session.
        user_id: Owner whose bookmarks are listed.
        query: Optional case-insensitive text matched against title, url and description.
        tag: Optional exact tag name; only bookmarks carrying it are returned.

    Returns:
        BookmarkFeed. `tags` always reflects all of the user's bookmarks, so the
        filter choices don't shrink while a filter is applied.
    """
    stmt = (
        select(Bookmark)
        .options(selectinload(Bookmark.tag_objects))
        .where(Bookmark.user_id == user_id)
    )

    if query and query.strip():
        pattern = f"%{escape_ilike(query.strip())}%"
        stmt = stmt.where(
            or_(
                Bookmark.title.ilike(pattern),
                Bookmark.url.ilike(pattern),
                Bookmark.description.ilike(pattern),
            ),
        )

    if tag:
        stmt = stmt.where(Bookmark.tag_objects.any(Tag.name == tag))

    stmt = stmt.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
    result = await db.execute(stmt)
    bookmarks = [BookmarkResponse.model_validate(b) for b in result.scalars().unique()]

    tags = await get_user_tags_with_counts(db, user_id)
    top_tag_count = get_settings().top_tag_count

    return BookmarkFeed(
        bookmarks=bookmarks,
        tags=tags,
        top_tags=tags[:top_tag_count],
        total=len(bookmarks),
    )
