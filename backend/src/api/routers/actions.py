"""
Endpoints backing the server-rendered bookmark pages.

Unlike /bookmarks, these always answer 200 with an ActionResult (or a feed)
so forms can render the message; a visitor without a session gets an
"unauthenticated" result or an empty feed instead of a 401.
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_optional_user
from models.user import User
from schemas.action import ActionResult, BookmarkAddForm
from schemas.bookmark import BookmarkFeed
from services import bookmark_actions

router = APIRouter(tags=["pages"])


@router.get("/pages/bookmarks", response_model=BookmarkFeed)
async def bookmarks_page(
    q: str | None = Query(default=None),
    tag: str | None = Query(default=None),
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkFeed:
    """Data for the bookmark list page."""
    return await bookmark_actions.load_bookmarks(db, current_user, query=q, tag=tag)


@router.post("/actions/bookmarks", response_model=ActionResult)
async def add_bookmark(
    form: BookmarkAddForm,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    """Add-bookmark form submission."""
    return await bookmark_actions.add_bookmark(
        db,
        current_user,
        url=form.url,
        title=form.title,
        description=form.description,
        tags_csv=form.tags,
    )


@router.post("/actions/bookmarks/{bookmark_id}/update", response_model=ActionResult)
async def update_bookmark(
    bookmark_id: int,
    payload: dict[str, Any] = Body(...),
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    """Edit-bookmark form submission (title, url, description, tags)."""
    return await bookmark_actions.update_bookmark(
        db, current_user, {**payload, "id": bookmark_id},
    )


@router.post("/actions/bookmarks/{bookmark_id}/delete", response_model=ActionResult)
async def delete_bookmark(
    bookmark_id: int,
    current_user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_session),
) -> ActionResult:
    """Finalize a delete (sent once the undo window has passed)."""
    return await bookmark_actions.delete_bookmark(db, current_user, bookmark_id)
