"""Durable key-value store on Postgres (table ``kv_entries``)."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from agencybridge.db.session import db_session

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _like_prefix(prefix: str) -> str:
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"{escaped}%"


class SqlKeyValueStore:
    """Durable store backed by the ``kv_entries`` table.

    Each operation runs in its own session and commits before returning.
    """

    def __init__(self, session_factory: SessionFactory = db_session) -> None:
        self._session_factory = session_factory

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text("SELECT value FROM kv_entries WHERE key = :key"),
                {"key": key},
            )
            row = result.fetchone()
            return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            await session.execute(
                text("""
                    INSERT INTO kv_entries (key, value, updated_at)
                    VALUES (:key, :value, :now)
                    ON CONFLICT (key) DO UPDATE
                    SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at
                """),
                {"key": key, "value": value, "now": self.now()},
            )

    async def put_if(self, key: str, value: str, expected: str | None) -> bool:
        async with self._session_factory() as session:
            if expected is None:
                result = await session.execute(
                    text("""
                        INSERT INTO kv_entries (key, value, updated_at)
                        VALUES (:key, :value, :now)
                        ON CONFLICT (key) DO NOTHING
                    """),
                    {"key": key, "value": value, "now": self.now()},
                )
            else:
                result = await session.execute(
                    text("""
                        UPDATE kv_entries
                        SET value = :value, updated_at = :now
                        WHERE key = :key AND value = :expected
                    """),
                    {"key": key, "value": value, "expected": expected, "now": self.now()},
                )
            return result.rowcount > 0

    async def delete(self, key: str) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                text("DELETE FROM kv_entries WHERE key = :key"),
                {"key": key},
            )
            return result.rowcount > 0

    async def list_keys(self, prefix: str) -> list[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT key FROM kv_entries
                    WHERE key LIKE :pattern ESCAPE '\\'
                    ORDER BY key
                """),
                {"pattern": _like_prefix(prefix)},
            )
            return [row[0] for row in result.fetchall()]

    async def list_items(self, prefix: str) -> list[tuple[str, str]]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT key, value FROM kv_entries
                    WHERE key LIKE :pattern ESCAPE '\\'
                    ORDER BY key
                """),
                {"pattern": _like_prefix(prefix)},
            )
            return [(row[0], row[1]) for row in result.fetchall()]
