"""Event definitions, envelope construction and the Redis event bus."""

from agencybridge.events.builder import build_envelope
from agencybridge.events.bus import EventBus, EventPublisher, RecordingEventBus
from agencybridge.events.constants import JSON_CONTENT_TYPE, STREAM_MAIN
from agencybridge.events.envelope import EventEnvelope, normalize_source
from agencybridge.events.product import (
    PRODUCT_EVENT_DEFINITIONS,
    ProductEventDefinition,
    ProductEventRegistry,
    get_product_event_registry,
)
from agencybridge.events.registry import (
    EVENT_DEFINITIONS,
    EventDefinition,
    EventRegistry,
    get_event_registry,
)

__all__ = [
    "EVENT_DEFINITIONS",
    "EventBus",
    "EventDefinition",
    "EventEnvelope",
    "EventPublisher",
    "EventRegistry",
    "JSON_CONTENT_TYPE",
    "PRODUCT_EVENT_DEFINITIONS",
    "ProductEventDefinition",
    "ProductEventRegistry",
    "RecordingEventBus",
    "STREAM_MAIN",
    "build_envelope",
    "get_event_registry",
    "get_product_event_registry",
    "normalize_source",
]
