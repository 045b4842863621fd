"""Cache-then-durable read path with write-through repair."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from agencybridge.core.errors import PersistenceError
from agencybridge.stores.base import DurableStore, KeyValueStore, loggable_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TieredStore:
    """Compose a volatile cache with a durable store.

    Invariants:
    - Cache failures (including timeouts) never fail an operation; they are logged
    - Durable failures on reads and writes raise PersistenceError
    - A durable hit on a cache miss is written back to the cache before returning
    """

    def __init__(
        self,
        cache: KeyValueStore,
        durable: DurableStore,
        timeout_seconds: float = 5.0,
    ) -> None:
        """Initialize tiered store.

        Args:
            cache: Fast, possibly volatile store
            durable: Store of record
            timeout_seconds: Upper bound for every individual store call
        """
        self.cache = cache
        self.durable = durable
        self.timeout_seconds = timeout_seconds

    async def _bounded(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self.timeout_seconds)

    async def _durable(self, op: str, key: str, call: Awaitable[T]) -> T:
        try:
            return await self._bounded(call)
        except Exception as e:
            logger.error(f"Durable store {op} failed for {loggable_key(key)}: {e!r}")
            raise PersistenceError(f"Durable store {op} failed for {loggable_key(key)}") from e

    async def get(self, key: str) -> str | None:
        """Read through the cache, falling back to the durable store."""
        try:
            value = await self._bounded(self.cache.get(key))
            if value is not None:
                return value
            logger.debug(f"Cache miss for {loggable_key(key)}")
        except Exception as e:
            logger.warning(f"Cache read failed for {loggable_key(key)}, falling back to durable store: {e!r}")

        value = await self._durable("get", key, self.durable.get(key))
        if value is not None:
            await self.repair(key, value)
        return value

    async def durable_get(self, key: str) -> str | None:
        """Read the durable store directly, bypassing the cache."""
        return await self._durable("get", key, self.durable.get(key))

    async def put(self, key: str, value: str) -> bool:
        """Write to the durable store, then the cache.

        Returns:
            True if the cache write also succeeded
        """
        await self._durable("put", key, self.durable.put(key, value))
        return await self.repair(key, value)

    async def put_if(self, key: str, value: str, expected: str | None) -> bool:
        """Compare-and-swap against the durable store, then refresh the cache.

        Returns:
            True if the durable write happened
        """
        written = await self._durable("put_if", key, self.durable.put_if(key, value, expected))
        if written:
            await self.repair(key, value)
        else:
            await self.invalidate(key)
        return written

    async def repair(self, key: str, value: str) -> bool:
        """Write ``value`` to the cache; failures are logged, never raised."""
        try:
            await self._bounded(self.cache.put(key, value))
            return True
        except Exception as e:
            logger.warning(f"Cache write failed for {loggable_key(key)}: {e!r}")
            return False

    async def invalidate(self, key: str) -> None:
        """Drop ``key`` from the cache so the next read goes to the durable store."""
        try:
            await self._bounded(self.cache.delete(key))
        except Exception as e:
            logger.warning(f"Cache invalidate failed for {loggable_key(key)}: {e!r}")

    async def delete(self, key: str) -> None:
        """Best-effort delete from both tiers."""
        await self.invalidate(key)
        try:
            await self._bounded(self.durable.delete(key))
        except Exception as e:
            logger.error(f"Durable store delete failed for {loggable_key(key)}: {e!r}")

    async def durable_items(self, prefix: str) -> list[tuple[str, str]]:
        return await self._durable("list", prefix, self.durable.list_items(prefix))

    async def cached_keys(self, prefix: str) -> set[str] | None:
        """Keys present in the cache, or None if the cache could not be listed."""
        try:
            return set(await self._bounded(self.cache.list_keys(prefix)))
        except Exception as e:
            logger.warning(f"Cache list failed for {prefix}: {e!r}")
            return None
