"""
Security test fixtures.

These fixtures enable testing security scenarios like IDOR (Insecure Direct
Object Reference) by creating multiple users and their associated data.
"""
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.user import User
from schemas.bookmark import BookmarkCreate
from services.bookmark_service import create_bookmark


@pytest.fixture
async def user_a(db_session: AsyncSession) -> User:
    """Create the first test user (User A)."""
    user = User(auth0_id="auth0|user-a", email="user-a@test.com")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def user_b(db_session: AsyncSession) -> User:
    """Create a second test user (User B) for IDOR testing."""
    user = User(auth0_id="auth0|user-b", email="user-b@test.com")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def user_a_bookmark(db_session: AsyncSession, user_a: User) -> Bookmark:
    """Create a tagged bookmark belonging to User A."""
    bookmark, _ = await create_bookmark(
        db_session,
        user_a.id,
        BookmarkCreate(
            url="https://user-a-bookmark.example.com/",
            title="User A's Private Bookmark",
            description="This should only be accessible to User A",
            tags=["private-a"],
        ),
    )
    return bookmark


@pytest.fixture
async def user_b_bookmark(db_session: AsyncSession, user_b: User) -> Bookmark:
    """Create a bookmark belonging to User B."""
    bookmark, _ = await create_bookmark(
        db_session,
        user_b.id,
        BookmarkCreate(
            url="https://user-b-bookmark.example.com/",
            title="User B's Private Bookmark",
            tags=["private-b"],
        ),
    )
    return bookmark


@pytest.fixture
async def client_as_user_b(
    db_session: AsyncSession,
    user_b: User,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client authenticated as User B (API and page endpoints)."""
    from core.config import get_settings

    get_settings.cache_clear()

    from api.main import app
    from core.auth import get_current_user, get_optional_user
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    async def override_get_current_user() -> User:
        return user_b

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_optional_user] = override_get_current_user

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
