"""Async engine for the durable store."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from agencybridge.settings import get_settings

_engine: AsyncEngine | None = None


def get_async_engine() -> AsyncEngine:
    """Get or create the durable store engine.

    Connection checkout is bounded by the store timeout so a saturated pool
    surfaces as a store failure instead of an unbounded wait. Bound parameters
    are kept out of error messages because secret index keys embed secrets.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url_async,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            pool_timeout=settings.store_timeout_seconds,
            hide_parameters=True,
            echo=settings.debug,
        )
    return _engine


def reset_engine() -> None:
    """Drop the cached engine (for testing)."""
    global _engine
    _engine = None
