"""Key-value store protocols shared by the durable and cache backends.

Keys are prefixed by entity type (``brand:<id>``, ``secret-index:<secret>``,
``product-routing-rules:<event code>``, ``app-routing-rules:<event code>``);
values are JSON strings.
"""

from typing import Protocol

BRAND_PREFIX = "brand:"
SECRET_INDEX_PREFIX = "secret-index:"
PRODUCT_RULES_PREFIX = "product-routing-rules:"
APP_RULES_PREFIX = "app-routing-rules:"


def brand_key(brand_id: str) -> str:
    return f"{BRAND_PREFIX}{brand_id}"


def secret_index_key(secret: str) -> str:
    return f"{SECRET_INDEX_PREFIX}{secret}"


def loggable_key(key: str) -> str:
    """Key safe to log; secret index keys embed the secret."""
    if key.startswith(SECRET_INDEX_PREFIX):
        return f"{SECRET_INDEX_PREFIX}[REDACTED]"
    return key


class KeyValueStore(Protocol):
    """Protocol for a keyed string store."""

    async def get(self, key: str) -> str | None:
        """Return the value for ``key`` or None when absent."""
        ...

    async def put(self, key: str, value: str) -> None:
        """Write ``value`` unconditionally."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete ``key``; return True if it existed."""
        ...

    async def list_keys(self, prefix: str) -> list[str]:
        """Return all keys starting with ``prefix``."""
        ...

    async def list_items(self, prefix: str) -> list[tuple[str, str]]:
        """Return ``(key, value)`` pairs for keys starting with ``prefix``."""
        ...


class DurableStore(KeyValueStore, Protocol):
    """Durable store; additionally supports compare-and-swap writes."""

    async def put_if(self, key: str, value: str, expected: str | None) -> bool:
        """Write ``value`` only if the current value equals ``expected``.

        ``expected=None`` means the key must not exist yet.

        Returns:
            True if the write happened
        """
        ...
