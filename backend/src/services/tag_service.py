"""Service layer for tag synchronization and tag usage counts."""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.tag import Tag, bookmark_tags
from schemas.bookmark import TagSyncStatus
from schemas.tag import TagCount

logger = logging.getLogger(__name__)

tags_table = Tag.__table__


@dataclass
class TagSyncResult:
    """
    Outcome of reconcile_tags.

    `tag_ids` are the tags now linked to the bookmark. `failed_names` are the
    requested names that are not linked: the names that could not be resolved for
    a PARTIAL result, every requested name for a FAILED one.
    """

    status: TagSyncStatus
    tag_ids: list[int] = field(default_factory=list)
    failed_names: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every requested tag was linked."""
        return self.status == TagSyncStatus.COMPLETE


def normalize_tag_names(names: Iterable[str]) -> list[str]:
    """
    Trim names, drop empty ones and collapse exact duplicates.

    Matching is case-sensitive. First occurrence order is preserved.
    """
    normalized = []
    seen: set[str] = set()
    for name in names:
        trimmed = name.strip()
        if trimmed and trimmed not in seen:
            seen.add(trimmed)
            normalized.append(trimmed)
    return normalized


async def resolve_tag(db: AsyncSession, user_id: int, name: str) -> int:
    """
    Return the id of the user's tag `name`, creating the tag if needed.

    The insert is idempotent: when the name already exists (including a row just
    inserted by a concurrent request) the existing id is fetched instead of
    failing. Runs in a savepoint so an error leaves the outer transaction usable.

    Raises:
        SQLAlchemyError: If the store rejects the insert or lookup.
    """
    async with db.begin_nested():
        result = await db.execute(
            pg_insert(tags_table)
            .values(user_id=user_id, name=name)
            .on_conflict_do_nothing(constraint="uq_tags_user_id_name")
            .returning(tags_table.c.id),
        )
        tag_id = result.scalar_one_or_none()
        if tag_id is None:
            result = await db.execute(
                select(Tag.id).where(Tag.user_id == user_id, Tag.name == name),
            )
            tag_id = result.scalar_one()
    return tag_id


async def _replace_bookmark_tags(
    db: AsyncSession,
    bookmark_id: int,
    tag_ids: list[int],
) -> None:
    """Swap a bookmark's links for `tag_ids` within one savepoint."""
    async with db.begin_nested():
        # Old links are removed before the new ones are inserted
        await db.execute(
            delete(bookmark_tags).where(bookmark_tags.c.bookmark_id == bookmark_id),
        )
        if tag_ids:
            await db.execute(
                pg_insert(bookmark_tags)
                .values([{"bookmark_id": bookmark_id, "tag_id": tag_id} for tag_id in tag_ids])
                .on_conflict_do_nothing(),
            )


async def reconcile_tags(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
    tag_names: Iterable[str],
) -> TagSyncResult:
    """
    Make the bookmark's tag set equal to `tag_names` (replace-all semantics).

    Each name is resolved to a tag id one at a time. A name that cannot be resolved
    is logged and skipped; the remaining names are still linked and the result is
    PARTIAL. If the links themselves cannot be written the savepoint is rolled back,
    the bookmark keeps its previous tags and the result is FAILED.

    Args:
        db: Database session.
        user_id: Owner of the bookmark and of the tag vocabulary.
        bookmark_id: Bookmark whose tags are replaced.
        tag_names: Desired tag names (raw; may contain blanks and duplicates).

    Returns:
        TagSyncResult describing what was linked.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    names = normalize_tag_names(tag_names)

    owned = await db.execute(
        select(Bookmark.id).where(Bookmark.id == bookmark_id, Bookmark.user_id == user_id),
    )
    if owned.scalar_one_or_none() is None:
        logger.warning(
            "Tag sync skipped: bookmark %s not found for user %s", bookmark_id, user_id,
        )
        return TagSyncResult(status=TagSyncStatus.FAILED, failed_names=names)

    tag_ids: list[int] = []
    failed: list[str] = []
    for name in names:
        try:
            tag_ids.append(await resolve_tag(db, user_id, name))
        except SQLAlchemyError as e:
            logger.warning(
                "Could not resolve tag %r for user %s: %s", name, user_id, e,
            )
            failed.append(name)

    try:
        await _replace_bookmark_tags(db, bookmark_id, tag_ids)
    except SQLAlchemyError:
        logger.warning(
            "Could not write tags for bookmark %s; previous tags kept",
            bookmark_id,
            exc_info=True,
        )
        return TagSyncResult(status=TagSyncStatus.FAILED, failed_names=names)

    status = TagSyncStatus.PARTIAL if failed else TagSyncStatus.COMPLETE
    return TagSyncResult(status=status, tag_ids=tag_ids, failed_names=failed)


async def get_user_tags_with_counts(
    db: AsyncSession,
    user_id: int,
) -> list[TagCount]:
    """
    Get the user's tags that are linked to at least one of their bookmarks.

    Args:
        db: Database session.
        user_id: User ID to scope tags.

    Returns:
        List of TagCount objects sorted by count desc, then name asc. Names are
        compared byte-wise so ties sort the same regardless of database locale.
    """
    # INNER JOINs drop tags without bookmarks
    result = await db.execute(
        select(
            Tag.id,
            Tag.name,
            func.count(bookmark_tags.c.bookmark_id).label("count"),
        )
        .join(bookmark_tags, Tag.id == bookmark_tags.c.tag_id)
        .join(Bookmark, bookmark_tags.c.bookmark_id == Bookmark.id)
        .where(
            Tag.user_id == user_id,
            Bookmark.user_id == user_id,
        )
        .group_by(Tag.id, Tag.name)
        .order_by(
            func.count(bookmark_tags.c.bookmark_id).desc(),
            Tag.name.collate("C").asc(),
        ),
    )
    return [TagCount(id=row.id, name=row.name, count=row.count) for row in result]
