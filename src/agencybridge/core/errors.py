"""Error taxonomy shared by the registry, builder, delivery engine and API.

Every error carries the HTTP-equivalent ``status_code`` the API reports for it.
Only input errors and durable-store failures are expected to reach a caller;
delivery errors are caught at the per-brand boundary.
"""

from typing import Any


class AgencyBridgeError(Exception):
    """Base class for all agencybridge errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputError(AgencyBridgeError):
    """Missing or malformed input; no side effects were performed."""

    status_code = 400


class UnknownEventCodeError(InputError):
    """Event code is not in the event definition registry."""

    def __init__(self, event_code: str) -> None:
        super().__init__(f"Unknown event code: {event_code}")
        self.event_code = event_code


class MissingRequiredFieldsError(InputError):
    """One or more required event fields are absent."""

    def __init__(self, event_code: str, missing: list[str]) -> None:
        super().__init__(
            f"Missing required fields for {event_code}: {', '.join(missing)}"
        )
        self.event_code = event_code
        self.missing = list(missing)


class CustomersFormatError(InputError):
    """Subscriber list is not a list, mapping or comma-separated string."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid customers format: {type(value).__name__}")
        self.value = value


class InvalidEventError(InputError):
    """Inbound event payload is structurally invalid."""


class ImmutableFieldError(InputError):
    """Attempt to change a field that is fixed after registration."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Field {field} cannot be changed after registration")
        self.field = field


class AuthenticationError(AgencyBridgeError):
    """Inbound shared-secret check failed."""

    status_code = 401


class NotFoundError(AgencyBridgeError):
    """Requested entity does not exist."""

    status_code = 404


class BrandNotFoundError(NotFoundError):
    def __init__(self, brand_id: str) -> None:
        super().__init__(f"Brand not found: {brand_id}")
        self.brand_id = brand_id


class RuleNotFoundError(NotFoundError):
    """``owner`` names the rule set, e.g. ``brand brandA`` or ``product rules``."""

    def __init__(self, owner: str, event_code: str, rule_id: str) -> None:
        super().__init__(f"Routing rule {rule_id} not found for {owner} and event {event_code}")
        self.rule_id = rule_id


class ProductEventNotFoundError(NotFoundError):
    def __init__(self, event_code: str, available: list[str]) -> None:
        super().__init__(f"Product event not found: {event_code}")
        self.event_code = event_code
        self.available = list(available)


class ConflictError(AgencyBridgeError):
    """Write conflicts with existing state."""

    status_code = 409


class RuleConflictError(ConflictError):
    def __init__(self, owner: str, event_code: str, rule_id: str) -> None:
        super().__init__(f"Routing rule {rule_id} already exists for {owner} and event {event_code}")
        self.rule_id = rule_id


class ConcurrentModificationError(ConflictError):
    """Compare-and-swap save found a newer record."""


class PersistenceError(AgencyBridgeError):
    """Durable store failure; fatal for the operation that needed it."""

    status_code = 503


class DeliveryError(AgencyBridgeError):
    """Brand endpoint unreachable, non-2xx, or returned an unexpected body."""

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        endpoint: str,
        status_code_received: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code_received = status_code_received
        self.response_body = response_body


class EnvelopeStateError(AgencyBridgeError):
    """Envelope mutated after it was fixed."""


class MetadataFetchError(AgencyBridgeError):
    """Asset system of record could not return asset metadata."""

    status_code = 502
