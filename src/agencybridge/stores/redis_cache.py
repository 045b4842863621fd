"""Redis-backed cache store."""

from redis.asyncio import Redis

CACHE_NAMESPACE = "agencybridge:"


def _decode(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode()
    return value


class RedisKeyValueStore:
    """Cache store on Redis strings, optionally with a TTL per entry."""

    def __init__(
        self,
        redis: Redis,
        namespace: str = CACHE_NAMESPACE,
        ttl_seconds: int | None = None,
    ) -> None:
        """Initialize cache store.

        Args:
            redis: Redis async client
            namespace: Prefix applied to every key
            ttl_seconds: Expiry for written entries; None keeps them until deleted
        """
        self.redis = redis
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    async def get(self, key: str) -> str | None:
        return _decode(await self.redis.get(self._key(key)))

    async def put(self, key: str, value: str) -> None:
        await self.redis.set(self._key(key), value, ex=self.ttl_seconds)

    async def delete(self, key: str) -> bool:
        return bool(await self.redis.delete(self._key(key)))

    async def list_keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        async for raw in self.redis.scan_iter(match=f"{self._key(prefix)}*"):
            keys.append(_decode(raw)[len(self.namespace):])
        return sorted(keys)

    async def list_items(self, prefix: str) -> list[tuple[str, str]]:
        keys = await self.list_keys(prefix)
        if not keys:
            return []
        values = await self.redis.mget([self._key(k) for k in keys])
        return [(k, _decode(v)) for k, v in zip(keys, values) if v is not None]
