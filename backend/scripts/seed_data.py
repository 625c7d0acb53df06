"""Seed script to populate the local dev database with realistic bookmarks.

Usage:
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate --force
    PYTHONPATH=backend/src python backend/scripts/seed_data.py clear
"""

import argparse
import asyncio

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.auth import DEV_AUTH0_ID, get_or_create_dev_user
from core.config import get_settings
from db.session import build_engine, create_tables
from models import Bookmark, Tag
from models.user import User
from schemas.bookmark import BookmarkCreate
from services.bookmark_service import create_bookmark


# Oldest first, so the list page shows the last entry on top
BOOKMARKS = [
    {
        'url': 'https://docs.python.org/3/',
        'title': 'Python Official Documentation',
        'description': 'Comprehensive reference for the Python programming language.',
        'tags': ['python', 'reference'],
    },
    {
        'url': 'https://developer.mozilla.org/en-US/docs/Web/JavaScript',
        'title': 'MDN Web Docs - JavaScript',
        'description': 'The definitive resource for JavaScript documentation and web APIs.',
        'tags': ['javascript', 'web-dev', 'reference'],
    },
    {
        'url': 'https://doc.rust-lang.org/book/',
        'title': 'Rust Book - Getting Started',
        'description': 'The official guide to learning Rust programming.',
        'tags': ['rust', 'tutorial'],
    },
    {
        'url': 'https://fastapi.tiangolo.com/',
        'title': 'FastAPI',
        'description': 'Modern, fast web framework for building APIs with Python type hints.',
        'tags': ['python', 'api-design', 'web-dev'],
    },
    {
        'url': 'https://docs.sqlalchemy.org/en/20/',
        'title': 'SQLAlchemy 2.0 Documentation',
        'description': 'ORM and Core reference, including the asyncio extension.',
        'tags': ['python', 'database', 'reference'],
    },
    {
        'url': 'https://www.postgresql.org/docs/current/',
        'title': 'PostgreSQL Documentation',
        'description': None,
        'tags': ['database', 'reference'],
    },
    {
        'url': 'https://docs.pytest.org/',
        'title': 'pytest: helps you write better programs',
        'description': 'Fixtures, parametrization and plugins for Python testing.',
        'tags': ['python', 'testing', 'tools'],
    },
    {
        'url': 'https://owasp.org/www-project-top-ten/',
        'title': 'OWASP Top Ten',
        'description': 'Standard awareness document for web application security risks.',
        'tags': ['security', 'web-dev'],
    },
    {
        'url': 'https://12factor.net/',
        'title': 'The Twelve-Factor App',
        'description': 'Methodology for building software-as-a-service apps.',
        'tags': ['devops', 'api-design'],
    },
    {
        'url': 'https://github.com/',
        'title': 'GitHub',
        'description': '',
        'tags': [],
    },
]


async def get_dev_user(session: AsyncSession) -> User | None:
    """Find the dev mode user, if it exists."""
    result = await session.execute(
        select(User).where(User.auth0_id == DEV_AUTH0_ID)
    )
    return result.scalar_one_or_none()


async def create_bookmarks(session: AsyncSession, user: User) -> None:
    """Create seed bookmarks through the mutation service (tags included)."""
    partial = 0
    for data in BOOKMARKS:
        _, tag_sync = await create_bookmark(session, user.id, BookmarkCreate(**data))
        if not tag_sync.complete:
            partial += 1
            print(f'  Tags not fully saved for {data["url"]}: {tag_sync.failed_names}')
    tag_count = (await session.execute(
        select(func.count()).select_from(Tag).where(Tag.user_id == user.id)
    )).scalar()
    print(f'  Created {len(BOOKMARKS)} bookmarks and {tag_count} tags ({partial} with tag errors)')


async def clear_data(session: AsyncSession) -> None:
    """Clear all data for the dev user."""
    user = await get_dev_user(session)
    if user is None:
        print('No dev user found, nothing to clear.')
        return

    user_id = user.id
    print(f'Clearing data for dev user {user_id}...')

    bm_count = (await session.execute(
        select(func.count()).select_from(Bookmark).where(Bookmark.user_id == user_id)
    )).scalar()
    tag_count = (await session.execute(
        select(func.count()).select_from(Tag).where(Tag.user_id == user_id)
    )).scalar()

    # CASCADE handles the bookmark_tags junction rows
    await session.execute(delete(Bookmark).where(Bookmark.user_id == user_id))
    await session.execute(delete(Tag).where(Tag.user_id == user_id))
    await session.flush()

    print(f'  Deleted {bm_count} bookmarks, {tag_count} tags')
    print('Clear complete.')


async def populate(force: bool = False) -> None:
    """Populate the database with seed data."""
    settings = get_settings()
    engine = build_engine(settings, pooled=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await create_tables(engine)

    async with session_factory() as session:
        try:
            user = await get_or_create_dev_user(session)
            print(f'  Using dev user: {user.id}')

            bm_count = (await session.execute(
                select(func.count()).select_from(Bookmark).where(Bookmark.user_id == user.id)
            )).scalar()

            if bm_count and bm_count > 0:
                if force:
                    print('Existing data found, clearing first (--force)...')
                    await clear_data(session)
                else:
                    print(
                        f'Data already exists ({bm_count} bookmarks). '
                        f'Use --force to clear and re-seed.'
                    )
                    return

            print('Populating seed data...')
            await create_bookmarks(session, user)
            await session.commit()
            print('Seed data created successfully.')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Clear all dev user data."""
    settings = get_settings()
    engine = build_engine(settings, pooled=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            await clear_data(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    if not settings.dev_mode:
        print(
            "ERROR: Seed script requires DEV_MODE=true.\n"
            "This script modifies data directly and must only run against a local dev database."
        )
        raise SystemExit(1)

    parser = argparse.ArgumentParser(description='Seed the dev database with test bookmarks.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    populate_parser = subparsers.add_parser('populate', help='Populate database with test data')
    populate_parser.add_argument(
        '--force', action='store_true',
        help='Clear existing data before populating',
    )

    subparsers.add_parser('clear', help='Remove all dev user data')

    args = parser.parse_args()

    if args.command == 'populate':
        asyncio.run(populate(force=args.force))
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
