"""Request dependencies for the API routers.

Long-lived clients (store, bus, HTTP) are module-level singletons created on
first use; tests replace them with the ``set_*`` functions. The runtime context
and the engine/service built on it are assembled per request.
"""

import httpx
import redis.asyncio as redis
from fastapi import Depends

from agencybridge.core.context import RuntimeContext
from agencybridge.delivery.client import BrandDeliveryClient
from agencybridge.delivery.engine import DeliveryEngine
from agencybridge.events.bus import EventBus, EventPublisher
from agencybridge.events.registry import EventRegistry, get_event_registry
from agencybridge.providers.aem_provider import AssetMetadataProvider, HttpAssetMetadataProvider
from agencybridge.registry.brand_registry import BrandRegistry
from agencybridge.registry.global_rules import GlobalRulesRegistry
from agencybridge.services.brands import BrandService
from agencybridge.settings import get_settings
from agencybridge.stores.redis_cache import RedisKeyValueStore
from agencybridge.stores.sql_store import SqlKeyValueStore
from agencybridge.stores.tiered import TieredStore

_redis: redis.Redis | None = None
_store: TieredStore | None = None
_registry: BrandRegistry | None = None
_global_rules: GlobalRulesRegistry | None = None
_bus: EventPublisher | None = None
_http_client: httpx.AsyncClient | None = None
_metadata_provider: AssetMetadataProvider | None = None


def get_redis() -> redis.Redis:
    """Get Redis client (singleton)."""
    global _redis
    if _redis is None:
        _redis = redis.from_url(get_settings().redis_url)
    return _redis


def get_store() -> TieredStore:
    """Get the Redis cache over Postgres store (singleton)."""
    global _store
    if _store is None:
        settings = get_settings()
        _store = TieredStore(
            cache=RedisKeyValueStore(get_redis(), ttl_seconds=settings.cache_ttl_seconds),
            durable=SqlKeyValueStore(),
            timeout_seconds=settings.store_timeout_seconds,
        )
    return _store


def get_registry() -> BrandRegistry:
    """Get the brand registry (singleton)."""
    global _registry
    if _registry is None:
        _registry = BrandRegistry(get_store())
    return _registry


def set_registry(registry: BrandRegistry | None) -> None:
    """Set the brand registry (for testing)."""
    global _registry
    _registry = registry


def get_global_rules() -> GlobalRulesRegistry:
    """Get the product and app routing rules registry (singleton)."""
    global _global_rules
    if _global_rules is None:
        _global_rules = GlobalRulesRegistry(get_store())
    return _global_rules


def set_global_rules(rules: GlobalRulesRegistry | None) -> None:
    """Set the global routing rules registry (for testing)."""
    global _global_rules
    _global_rules = rules


def get_event_bus() -> EventPublisher:
    """Get the event bus publisher (singleton)."""
    global _bus
    if _bus is None:
        _bus = EventBus(get_redis())
    return _bus


def set_event_bus(bus: EventPublisher | None) -> None:
    """Set the event bus publisher (for testing)."""
    global _bus
    _bus = bus


def set_http_client(client: httpx.AsyncClient | None) -> None:
    """Set the HTTP client used for brand deliveries (for testing)."""
    global _http_client
    _http_client = client


def get_metadata_provider() -> AssetMetadataProvider:
    """Get the asset metadata provider (singleton)."""
    global _metadata_provider
    if _metadata_provider is None:
        settings = get_settings()
        _metadata_provider = HttpAssetMetadataProvider(
            access_token=settings.aem_access_token,
            timeout_seconds=settings.delivery_timeout_seconds,
        )
    return _metadata_provider


def set_metadata_provider(provider: AssetMetadataProvider | None) -> None:
    """Set the asset metadata provider (for testing)."""
    global _metadata_provider
    _metadata_provider = provider


def reset_dependencies() -> None:
    """Drop every cached singleton (for testing)."""
    global _redis, _store, _registry, _global_rules, _bus, _http_client, _metadata_provider
    _redis = None
    _store = None
    _registry = None
    _global_rules = None
    _bus = None
    _http_client = None
    _metadata_provider = None


def get_context() -> RuntimeContext:
    """Runtime context built fresh for each request."""
    return RuntimeContext.from_settings(get_settings())


def get_events(context: RuntimeContext = Depends(get_context)) -> EventRegistry:
    return get_event_registry(context.event_namespace)


def get_delivery_client() -> BrandDeliveryClient:
    settings = get_settings()
    return BrandDeliveryClient(
        http_client=_http_client,
        timeout_seconds=settings.delivery_timeout_seconds,
        agency_id=settings.agency_id,
    )


def get_engine(
    registry: BrandRegistry = Depends(get_registry),
    client: BrandDeliveryClient = Depends(get_delivery_client),
    bus: EventPublisher = Depends(get_event_bus),
    context: RuntimeContext = Depends(get_context),
) -> DeliveryEngine:
    settings = get_settings()
    return DeliveryEngine(
        registry=registry,
        client=client,
        bus=bus,
        context=context,
        concurrency=settings.fanout_concurrency,
        customers_field=settings.customers_field,
        legacy_customers_field=settings.legacy_customers_field,
    )


def get_brand_service(
    registry: BrandRegistry = Depends(get_registry),
    engine: DeliveryEngine = Depends(get_engine),
    context: RuntimeContext = Depends(get_context),
) -> BrandService:
    return BrandService(registry=registry, engine=engine, context=context)
