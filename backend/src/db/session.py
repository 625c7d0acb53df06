"""Async engine and request-scoped sessions for the bookmark store."""
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import Settings, get_settings
from models import Base


def build_engine(settings: Settings, pooled: bool = True) -> AsyncEngine:
    """
    Create an asyncpg engine for `settings.database_url`.

    `pooled=False` keeps SQLAlchemy's default pool, for one-off scripts.
    """
    if not pooled:
        return create_async_engine(settings.database_url, echo=False)
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables (users, bookmarks, tags, bookmark_tags)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = build_engine(get_settings())

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """
    Yield an async database session.

    Services only flush; the commit happens once here at request end, so a
    bookmark and its tag links become visible together. If the request fails,
    everything it wrote is rolled back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
