"""Pydantic v2 models for brands, routing rules and runtime identity.

Persisted and wire forms use camelCase keys (``brandId``, ``endPointUrl``);
Python code uses snake_case attribute names.
"""

import hmac
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from agencybridge.contracts.enums import ActionType, ConditionOperator, LogicalOperator


def utcnow() -> datetime:
    """Current UTC timestamp."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialising to camelCase keys."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "forbid",
    }


class RuleCondition(CamelModel):
    """Single routing rule condition."""

    field: str = Field(min_length=1)
    operator: ConditionOperator
    value: Any = None
    logical_operator: LogicalOperator | None = None


class RuleAction(CamelModel):
    """Action attached to a routing rule."""

    type: ActionType
    target: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class RoutingRule(CamelModel):
    """Routing rule embedded in a brand under an event code."""

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    priority: int = 0
    enabled: bool = True
    conditions: list[RuleCondition] = Field(default_factory=list)
    actions: list[RuleAction] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Brand(CamelModel):
    """A registered subscriber.

    Instances are immutable snapshots; transitions return new instances that
    are re-validated against the brand invariants.
    """

    brand_id: str = Field(min_length=1)
    secret: str = ""
    name: str = Field(min_length=1)
    end_point_url: str = Field(min_length=1)
    enabled: bool = False
    enabled_at: datetime | None = None
    logo: str | None = None
    ims_org_name: str | None = None
    ims_org_id: str | None = None
    routing_rules: dict[str, list[RoutingRule]] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "ignore",
        "frozen": True,
    }

    @field_validator("created_at", "updated_at", "enabled_at", mode="after")
    @classmethod
    def ensure_timezone(cls, v: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_invariants(self) -> "Brand":
        if self.enabled and not self.secret:
            raise ValueError("secret must be set while the brand is enabled")
        if self.enabled and self.enabled_at is None:
            raise ValueError("enabledAt must be set while the brand is enabled")
        if not self.enabled and self.enabled_at is not None:
            raise ValueError("enabledAt must be null while the brand is disabled")
        return self

    @classmethod
    def from_storage(cls, raw: str) -> "Brand":
        """Parse the persisted JSON form."""
        return cls.model_validate_json(raw)

    def to_storage(self) -> str:
        """Serialize to the persisted JSON form."""
        return self.model_dump_json(by_alias=True)

    def safe_dump(self) -> dict[str, Any]:
        """JSON-ready dict without the secret, for API responses and logs."""
        return self.model_dump(by_alias=True, mode="json", exclude={"secret"})

    def secret_matches(self, candidate: str | None) -> bool:
        """Constant-time comparison against the stored secret."""
        if not candidate or not self.secret:
            return False
        return hmac.compare_digest(self.secret.encode(), candidate.encode())

    def rules_for(self, event_code: str) -> list[RoutingRule]:
        return list(self.routing_rules.get(event_code, []))

    def _replace(self, **changes: Any) -> "Brand":
        data = self.model_dump()
        data.update(changes)
        return Brand.model_validate(data)

    def with_updates(self, now: datetime | None = None, **changes: Any) -> "Brand":
        """Return a copy with ``changes`` applied and ``updated_at`` bumped."""
        return self._replace(updated_at=now or utcnow(), **changes)

    def with_enabled(self, now: datetime | None = None) -> "Brand":
        ts = now or utcnow()
        return self._replace(enabled=True, enabled_at=ts, updated_at=ts)

    def with_disabled(self, now: datetime | None = None) -> "Brand":
        return self._replace(enabled=False, enabled_at=None, updated_at=now or utcnow())

    def with_rules(
        self, event_code: str, rules: list[RoutingRule], now: datetime | None = None
    ) -> "Brand":
        """Return a copy with the rule list for ``event_code`` replaced."""
        routing_rules = {code: list(items) for code, items in self.routing_rules.items()}
        if rules:
            routing_rules[event_code] = list(rules)
        else:
            routing_rules.pop(event_code, None)
        return self._replace(routing_rules=routing_rules, updated_at=now or utcnow())


class ApplicationRuntimeInfo(CamelModel):
    """Runtime isolation metadata injected into event payloads."""

    console_id: str
    project_name: str
    workspace: str
    app_name: str
    action_package_name: str | None = None

    @classmethod
    def from_config(cls, raw: dict[str, Any] | None) -> "ApplicationRuntimeInfo | None":
        """Build from the ``APPLICATION_RUNTIME_INFO`` config object.

        The namespace is expected as ``consoleId-projectName-workspace``; any
        other shape yields None.
        """
        if not raw or not raw.get("namespace") or not raw.get("app_name"):
            return None
        parts = str(raw["namespace"]).split("-")
        if len(parts) != 3:
            return None
        return cls(
            console_id=parts[0],
            project_name=parts[1],
            workspace=parts[2],
            app_name=str(raw["app_name"]),
            action_package_name=raw.get("action_package_name"),
        )

    def serialize(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class AgencyIdentification(CamelModel):
    """Publisher identity included in every event sent to brands."""

    agency_id: str
    org_id: str

    def is_valid(self) -> bool:
        return bool(self.agency_id.strip() and self.org_id.strip())

    def serialize(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class AssetMetadata(BaseModel):
    """Asset fields read from the asset system of record."""

    asset_id: str
    asset_path: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    presigned_url: str | None = None

    model_config = {"extra": "forbid"}

    @classmethod
    def from_aem_json(
        cls, data: dict[str, Any], asset_path: str, presigned_url: str | None = None
    ) -> "AssetMetadata":
        """Read ``jcr:uuid`` and ``jcr:content.metadata`` from an AEM asset document."""
        content = data.get("jcr:content") or {}
        metadata = content.get("metadata") if isinstance(content, dict) else None
        return cls(
            asset_id=str(data.get("jcr:uuid", "")),
            asset_path=asset_path,
            metadata=metadata if isinstance(metadata, dict) else {},
            presigned_url=presigned_url,
        )
