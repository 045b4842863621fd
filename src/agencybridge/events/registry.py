"""Event definition registry.

Each event code maps to one ``EventDefinition`` record; a single generic
builder is parameterized by that record.
"""

from dataclasses import dataclass, field
from functools import lru_cache

from agencybridge.contracts.enums import EventCategory
from agencybridge.core.errors import UnknownEventCodeError
from agencybridge.events.constants import (
    ASSET_SYNC_DELETE,
    ASSET_SYNC_NEW,
    ASSET_SYNC_UPDATE,
    INJECT_AGENCY_IDENTIFICATION,
    INJECT_APP_RUNTIME_INFO,
    REGISTRATION_DISABLED,
    REGISTRATION_ENABLED,
    REGISTRATION_RECEIVED,
    WORKFRONT_TASK_COMPLETED,
    WORKFRONT_TASK_CREATED,
    WORKFRONT_TASK_UPDATED,
)

DEFAULT_INJECTED = (INJECT_APP_RUNTIME_INFO, INJECT_AGENCY_IDENTIFICATION)


@dataclass(frozen=True)
class EventDefinition:
    """Static description of one event type."""

    suffix: str
    category: EventCategory
    name: str
    description: str
    required_fields: tuple[str, ...]
    optional_fields: tuple[str, ...] = ()
    injected_fields: tuple[str, ...] = DEFAULT_INJECTED
    version: str = "1.0.0"
    send_secret_header: bool = True
    code: str = field(default="", compare=False)

    def qualified(self, namespace: str) -> "EventDefinition":
        """Copy of this definition bound to a namespace-qualified code."""
        return EventDefinition(
            suffix=self.suffix,
            category=self.category,
            name=self.name,
            description=self.description,
            required_fields=self.required_fields,
            optional_fields=self.optional_fields,
            injected_fields=self.injected_fields,
            version=self.version,
            send_secret_header=self.send_secret_header,
            code=f"{namespace}.{self.suffix}",
        )

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "category": self.category.value,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "requiredFields": list(self.required_fields),
            "optionalFields": list(self.optional_fields),
            "injectedObjects": list(self.injected_fields),
            "sendSecretHeader": self.send_secret_header,
        }


EVENT_DEFINITIONS: tuple[EventDefinition, ...] = (
    EventDefinition(
        suffix=REGISTRATION_RECEIVED,
        category=EventCategory.REGISTRATION,
        name="Brand Registration Received",
        description="Emitted when a new brand registration is received",
        required_fields=("name", "endPointUrl"),
        optional_fields=("brandId",),
    ),
    EventDefinition(
        suffix=REGISTRATION_ENABLED,
        category=EventCategory.REGISTRATION,
        name="Brand Registration Enabled",
        description="Emitted when a brand registration is enabled and its secret is issued",
        required_fields=("brandId", "secret", "enabled"),
        optional_fields=("name", "endPointUrl", "enabledAt"),
    ),
    EventDefinition(
        suffix=REGISTRATION_DISABLED,
        category=EventCategory.REGISTRATION,
        name="Brand Registration Disabled",
        description="Emitted when a brand registration is disabled",
        required_fields=("brandId", "enabled", "endPointUrl"),
    ),
    EventDefinition(
        suffix=ASSET_SYNC_NEW,
        category=EventCategory.AGENCY,
        name="Asset Sync New",
        description="Emitted when an asset is synced to a brand for the first time",
        required_fields=("asset_id", "asset_path", "metadata", "brandId", "asset_presigned_url"),
    ),
    EventDefinition(
        suffix=ASSET_SYNC_UPDATE,
        category=EventCategory.AGENCY,
        name="Asset Sync Update",
        description="Emitted when a previously synced asset changes",
        required_fields=("asset_id", "brandId"),
        optional_fields=("asset_path", "metadata", "asset_presigned_url"),
    ),
    EventDefinition(
        suffix=ASSET_SYNC_DELETE,
        category=EventCategory.AGENCY,
        name="Asset Sync Delete",
        description="Emitted when a synced asset is deleted",
        required_fields=("asset_id", "brandId"),
        optional_fields=("asset_path",),
    ),
    EventDefinition(
        suffix=WORKFRONT_TASK_CREATED,
        category=EventCategory.AGENCY,
        name="Workfront Task Created",
        description="Emitted when a task is created in Workfront",
        required_fields=("taskId",),
        optional_fields=("projectId", "assigneeId", "taskName", "dueDate"),
    ),
    EventDefinition(
        suffix=WORKFRONT_TASK_UPDATED,
        category=EventCategory.AGENCY,
        name="Workfront Task Updated",
        description="Emitted when a task is updated in Workfront",
        required_fields=("taskId",),
        optional_fields=("projectId", "assigneeId", "taskName", "dueDate", "status"),
    ),
    EventDefinition(
        suffix=WORKFRONT_TASK_COMPLETED,
        category=EventCategory.AGENCY,
        name="Workfront Task Completed",
        description="Emitted when a task is completed in Workfront",
        required_fields=("taskId",),
        optional_fields=("projectId", "completedDate", "completedBy"),
    ),
)


class EventRegistry:
    """Event definitions keyed by namespace-qualified event code."""

    def __init__(self, namespace: str, definitions: tuple[EventDefinition, ...] = EVENT_DEFINITIONS) -> None:
        self.namespace = namespace
        qualified = [d.qualified(namespace) for d in definitions]
        self._by_code = {d.code: d for d in qualified}

    def get(self, event_code: str) -> EventDefinition:
        """Return the definition for ``event_code``.

        Raises:
            UnknownEventCodeError: If the code is not registered
        """
        definition = self._by_code.get(event_code)
        if definition is None:
            raise UnknownEventCodeError(event_code)
        return definition

    def is_valid(self, event_code: str) -> bool:
        return event_code in self._by_code

    def codes(self) -> list[str]:
        return list(self._by_code)

    def all(self) -> list[EventDefinition]:
        return list(self._by_code.values())

    def by_category(self, category: EventCategory) -> list[EventDefinition]:
        return [d for d in self._by_code.values() if d.category == category]


@lru_cache()
def get_event_registry(namespace: str) -> EventRegistry:
    """Get the event registry for a namespace (cached)."""
    return EventRegistry(namespace)
