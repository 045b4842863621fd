"""Pytest configuration and fixtures."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from agencybridge.contracts.models import AgencyIdentification, ApplicationRuntimeInfo, Brand
from agencybridge.core.context import RuntimeContext
from agencybridge.core.ledger import InMemoryLedger
from agencybridge.db.session import reset_session_factory
from agencybridge.events.bus import RecordingEventBus
from agencybridge.registry.brand_registry import BrandRegistry
from agencybridge.stores.memory import InMemoryKeyValueStore
from agencybridge.stores.tiered import TieredStore

NAMESPACE = "com.adobe.a2b"


class FailingStore:
    """Store double whose every operation raises, for error-path tests."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or ConnectionError("store unavailable")
        self.calls: list[str] = []

    async def _fail(self, op: str) -> Any:
        self.calls.append(op)
        raise self.error

    async def get(self, key: str) -> str | None:
        return await self._fail("get")

    async def put(self, key: str, value: str) -> None:
        await self._fail("put")

    async def put_if(self, key: str, value: str, expected: str | None) -> bool:
        return await self._fail("put_if")

    async def delete(self, key: str) -> bool:
        return await self._fail("delete")

    async def list_keys(self, prefix: str) -> list[str]:
        return await self._fail("list_keys")

    async def list_items(self, prefix: str) -> list[tuple[str, str]]:
        return await self._fail("list_items")


@pytest.fixture(autouse=True)
def reset_db_state():
    """Reset database engine/session state before each test.

    This prevents event loop conflicts when running multiple async tests.
    """
    reset_session_factory()
    yield
    reset_session_factory()


@pytest.fixture
def context() -> RuntimeContext:
    return RuntimeContext(
        event_namespace=NAMESPACE,
        app_runtime_info=ApplicationRuntimeInfo(
            console_id="12345", project_name="agencyproj", workspace="stage", app_name="agency"
        ),
        agency_identification=AgencyIdentification(agency_id="agency-1", org_id="org-1@AdobeOrg"),
        source_provider_id="3f1c1e8e-7a0f-4b4c-9d5e-2a6f0c9b1d11",
    )


@pytest.fixture
def cache() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def durable() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(cache, durable) -> TieredStore:
    return TieredStore(cache=cache, durable=durable, timeout_seconds=1.0)


@pytest.fixture
def registry(store) -> BrandRegistry:
    return BrandRegistry(store)


@pytest.fixture
def bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def make_brand() -> Callable[..., Brand]:
    """Factory for brands; enabled by default with a secret."""

    def _make(brand_id: str = "brandA", **overrides: Any) -> Brand:
        fields: dict[str, Any] = {
            "brand_id": brand_id,
            "secret": f"secret-{brand_id}",
            "name": f"Brand {brand_id}",
            "end_point_url": f"https://{brand_id.lower()}.example.com/events",
            "enabled": True,
        }
        fields.update(overrides)
        if fields["enabled"]:
            fields.setdefault("enabled_at", datetime(2025, 1, 1, tzinfo=timezone.utc))
        return Brand(**fields)

    return _make


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
async def redis_client():
    """Redis async client for integration tests; skips when Redis is unreachable."""
    import redis.asyncio as redis

    from agencybridge.settings import get_settings

    settings = get_settings()
    client = redis.from_url(settings.redis_url)
    try:
        await asyncio.wait_for(client.ping(), timeout=2.0)
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis not available at {settings.redis_url}: {e!r}")
    yield client
    await client.aclose()


@pytest.fixture
async def kv_table():
    """Ensure ``kv_entries`` exists; skips when Postgres is unreachable."""
    from sqlalchemy import text

    from agencybridge.db.engine import get_async_engine

    engine = get_async_engine()

    async def create() -> None:
        async with engine.begin() as conn:
            await conn.execute(
                text("""
                    CREATE TABLE IF NOT EXISTS kv_entries (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
                    )
                """)
            )

    try:
        await asyncio.wait_for(create(), timeout=5.0)
    except Exception as e:
        await engine.dispose()
        pytest.skip(f"Postgres not available: {e!r}")
    yield
    await engine.dispose()
