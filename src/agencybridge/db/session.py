"""Sessions for the durable key-value store."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agencybridge.db.engine import get_async_engine, reset_engine

_store_sessions: async_sessionmaker[AsyncSession] | None = None


def reset_session_factory() -> None:
    """Drop the engine and session factory (for testing)."""
    global _store_sessions
    reset_engine()
    _store_sessions = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _store_sessions
    if _store_sessions is None:
        _store_sessions = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _store_sessions


@asynccontextmanager
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """One unit of work against ``kv_entries``.

    Commits when the block exits normally and rolls back when it raises, so
    each store operation is atomic on its own.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
