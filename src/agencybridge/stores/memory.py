"""In-memory key-value store for tests and local runs."""

import asyncio


class InMemoryKeyValueStore:
    """Dict-backed store implementing both store protocols."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def put(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None

    async def list_keys(self, prefix: str) -> list[str]:
        return sorted(k for k in self.data if k.startswith(prefix))

    async def list_items(self, prefix: str) -> list[tuple[str, str]]:
        return [(k, self.data[k]) for k in await self.list_keys(prefix)]

    async def put_if(self, key: str, value: str, expected: str | None) -> bool:
        async with self._lock:
            if self.data.get(key) != expected:
                return False
            self.data[key] = value
            return True
