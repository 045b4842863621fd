"""Database access layer for the durable store."""

from agencybridge.db.engine import get_async_engine
from agencybridge.db.session import db_session, reset_session_factory

__all__ = ["get_async_engine", "db_session", "reset_session_factory"]
