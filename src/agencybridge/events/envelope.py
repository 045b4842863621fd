"""CloudEvents-shaped envelope sent to brands and the event bus."""

import json
import re
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, PrivateAttr

from agencybridge.core.errors import EnvelopeStateError, MissingRequiredFieldsError
from agencybridge.events.constants import JSON_CONTENT_TYPE

_UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
URN_UUID_PREFIX = "urn:uuid:"


def normalize_source(value: str | None) -> str:
    """Normalize an envelope source to a URI reference.

    A bare UUID becomes ``urn:uuid:<uuid>``; URN-UUIDs, absolute http(s) URLs
    and any other non-empty string pass through unchanged. Empty input gives
    an empty source.
    """
    if not value:
        return ""
    if _UUID_RE.match(value):
        return f"{URN_UUID_PREFIX}{value}"
    return value


class EventEnvelope(BaseModel):
    """Event envelope for brand delivery and the event bus.

    The source may be set once via ``set_source`` and is fixed after that or
    after the first ``to_wire`` call, whichever comes first.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: str = Field(min_length=1)
    source: str = ""
    datacontenttype: str = JSON_CONTENT_TYPE
    data: dict[str, Any] = Field(default_factory=dict)
    required_fields: tuple[str, ...] = Field(default=(), exclude=True, repr=False)

    model_config = {"extra": "forbid", "frozen": False, "validate_assignment": True}

    _source_locked: bool = PrivateAttr(default=False)

    def set_source(self, value: str | None) -> None:
        """Set the normalized source.

        Raises:
            EnvelopeStateError: If the source was already fixed
        """
        if self._source_locked:
            raise EnvelopeStateError(f"Source already set for event {self.id}")
        self.source = normalize_source(value)
        self._source_locked = True

    def validate_fields(self) -> list[str]:
        """Return the required data fields that are absent, in definition order."""
        return [name for name in self.required_fields if name not in self.data]

    def is_valid(self) -> bool:
        return not self.validate_fields()

    def ensure_valid(self) -> None:
        """Raise MissingRequiredFieldsError naming every missing field."""
        missing = self.validate_fields()
        if missing:
            raise MissingRequiredFieldsError(self.type, missing)

    def to_wire(self) -> dict[str, Any]:
        """Canonical JSON form; fixes the source."""
        self._source_locked = True
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return json.dumps(self.to_wire())

    def as_redis_fields(self) -> dict[str, str]:
        """Convert envelope to Redis stream fields (all values as strings).

        Returns:
            Dictionary with string keys and string values suitable for Redis XADD
        """
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "envelope": self.to_json(),
        }
