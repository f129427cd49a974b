"""Async SQLAlchemy engine, session factory and the ``get_db`` dependency.

PostgreSQL (asyncpg) is the production target. A ``sqlite+aiosqlite`` URL is
accepted for local runs; SQLite's single-connection pool takes no sizing
options, so those are only passed to server databases.
"""

from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tripgo.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.ENVIRONMENT == "development"}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(pool_size=10, max_overflow=20, pool_pre_ping=True)
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

# expire_on_commit=False: routers serialise ORM objects after the commit in get_db
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by every TripGo model."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a request-scoped session; commit on success, roll back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
