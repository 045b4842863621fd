"""Core: errors, delivery ledger, log sanitizing."""

from agencybridge.core.errors import (
    AgencyBridgeError,
    AuthenticationError,
    ConflictError,
    DeliveryError,
    InputError,
    NotFoundError,
    PersistenceError,
)
from agencybridge.core.ledger import DeliveryLedger, InMemoryLedger, JsonLogLedger
from agencybridge.core.sanitize import sanitize_for_logging

__all__ = [
    "AgencyBridgeError",
    "AuthenticationError",
    "ConflictError",
    "DeliveryError",
    "DeliveryLedger",
    "InMemoryLedger",
    "InputError",
    "JsonLogLedger",
    "NotFoundError",
    "PersistenceError",
    "sanitize_for_logging",
]
