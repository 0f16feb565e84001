"""
Async database connection management.

Provides the shared SQLAlchemy async engine and session factory.

Usage:
    from database.connection import get_async_session

    async with get_async_session() as session:
        result = await session.execute(select(Appointment))
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shared.config import get_settings

logger = logging.getLogger(__name__)


def _normalize_database_url(url: str) -> str:
    """Ensure PostgreSQL URLs use the asyncpg driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql+psycopg://"):
        return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
    return url


settings = get_settings()
DATABASE_URL = _normalize_database_url(settings.DATABASE_URL)

_engine_kwargs: dict = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
if DATABASE_URL.startswith("postgresql"):
    _engine_kwargs["pool_size"] = settings.DATABASE_POOL_SIZE

engine = create_async_engine(DATABASE_URL, **_engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    """
    Yield a database session that is rolled back on error and always closed.

    Callers commit explicitly. Exceptions propagate after rollback.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
