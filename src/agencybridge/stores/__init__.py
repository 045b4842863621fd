"""Key-value stores: durable (Postgres), cache (Redis), in-memory, and the tiered read path."""

from agencybridge.stores.base import (
    APP_RULES_PREFIX,
    BRAND_PREFIX,
    PRODUCT_RULES_PREFIX,
    SECRET_INDEX_PREFIX,
    DurableStore,
    KeyValueStore,
    brand_key,
    loggable_key,
    secret_index_key,
)
from agencybridge.stores.memory import InMemoryKeyValueStore
from agencybridge.stores.redis_cache import RedisKeyValueStore
from agencybridge.stores.sql_store import SqlKeyValueStore
from agencybridge.stores.tiered import TieredStore

__all__ = [
    "APP_RULES_PREFIX",
    "BRAND_PREFIX",
    "PRODUCT_RULES_PREFIX",
    "SECRET_INDEX_PREFIX",
    "DurableStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "SqlKeyValueStore",
    "TieredStore",
    "brand_key",
    "loggable_key",
    "secret_index_key",
]
