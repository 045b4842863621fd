"""Build validated envelopes from an event code, raw data and runtime context."""

import logging
from typing import Any

from agencybridge.core.context import RuntimeContext
from agencybridge.events.envelope import EventEnvelope
from agencybridge.events.registry import EventRegistry, get_event_registry

logger = logging.getLogger(__name__)


def build_envelope(
    event_code: str,
    raw_data: dict[str, Any] | None,
    context: RuntimeContext,
    *,
    source: str | None = None,
    registry: EventRegistry | None = None,
) -> EventEnvelope:
    """Build a validated envelope for ``event_code``.

    Context fields declared by the definition are injected without overwriting
    caller-supplied values. The source defaults to the context's source
    provider id. Required fields are checked after injection so injected
    fields can satisfy them.

    Args:
        event_code: Namespace-qualified event code
        raw_data: Event payload
        context: Runtime context for injection and the default source
        source: Explicit source; overrides the context default
        registry: Event registry; defaults to the context namespace registry

    Returns:
        Validated EventEnvelope

    Raises:
        UnknownEventCodeError: If the event code is not registered
        MissingRequiredFieldsError: Naming every missing required field
    """
    registry = registry or get_event_registry(context.event_namespace)
    definition = registry.get(event_code)

    data = dict(raw_data or {})
    available = context.injected_fields()
    for name in definition.injected_fields:
        if name in available and name not in data:
            data[name] = available[name]

    envelope = EventEnvelope(
        type=definition.code,
        data=data,
        required_fields=definition.required_fields,
    )

    chosen_source = source or context.source_provider_id
    if chosen_source:
        envelope.set_source(chosen_source)

    envelope.ensure_valid()
    logger.debug(f"Built envelope {envelope.id} type={envelope.type} source={envelope.source!r}")
    return envelope
