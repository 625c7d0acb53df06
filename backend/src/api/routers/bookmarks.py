"""Bookmark CRUD endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.bookmark import Bookmark
from models.user import User
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkFeed,
    BookmarkResponse,
    BookmarkUpdate,
    BookmarkWriteResponse,
    TagSyncResponse,
)
from services import bookmark_query_service, bookmark_service
from services.bookmark_service import DuplicateUrlError
from services.tag_service import TagSyncResult

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _write_response(bookmark: Bookmark, tag_sync: TagSyncResult) -> BookmarkWriteResponse:
    return BookmarkWriteResponse(
        **BookmarkResponse.model_validate(bookmark).model_dump(),
        tag_sync=TagSyncResponse(status=tag_sync.status, failed_tags=tag_sync.failed_names),
    )


@router.get("/", response_model=BookmarkFeed)
async def list_bookmarks(
    q: str | None = Query(default=None, description="Search title, url and description"),
    tag: str | None = Query(default=None, description="Only bookmarks with this tag"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkFeed:
    """
    List the current user's bookmarks, newest first, with tag usage counts.

    - **q**: Case-insensitive text search across title, url and description
    - **tag**: Exact tag name filter

    `tags` is sorted by count (desc) then name (asc) and only contains tags used by
    at least one bookmark. Filters do not affect `tags`.
    """
    return await bookmark_query_service.list_bookmarks(
        db, current_user.id, query=q, tag=tag,
    )


@router.post("/", response_model=BookmarkWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkWriteResponse:
    """
    Create a new bookmark.

    Returns 409 if the URL is already saved. Tags that could not be saved are
    listed in `tag_sync.failed_tags`; the bookmark is created regardless.
    """
    try:
        bookmark, tag_sync = await bookmark_service.create_bookmark(db, current_user.id, data)
    except DuplicateUrlError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return _write_response(bookmark, tag_sync)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get_bookmark(db, current_user.id, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.put("/{bookmark_id}", response_model=BookmarkWriteResponse)
async def update_bookmark(
    bookmark_id: int,
    data: BookmarkUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkWriteResponse:
    """Replace a bookmark's fields and tags."""
    try:
        updated = await bookmark_service.update_bookmark(
            db, current_user.id, bookmark_id, data,
        )
    except DuplicateUrlError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    if updated is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return _write_response(*updated)


@router.delete("/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bookmark(
    bookmark_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark."""
    deleted = await bookmark_service.delete_bookmark(db, current_user.id, bookmark_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
