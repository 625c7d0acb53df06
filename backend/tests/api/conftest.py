"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession


@pytest.fixture
async def anonymous_client(
    db_session: AsyncSession,
    database_url: str,
) -> AsyncGenerator[AsyncClient]:
    """
    Client without credentials and with DEV_MODE disabled.

    Overrides get_settings so the auth dependencies see a production-like
    configuration and no dev user is created.
    """
    from core.config import Settings, get_settings

    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    def override_get_settings() -> Settings:
        return Settings(_env_file=None, database_url=database_url, DEV_MODE=False)

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = override_get_settings

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
