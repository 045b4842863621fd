"""Delivery and routing evaluation result models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, computed_field

from agencybridge.contracts.enums import ActionType, AssetSyncKind, DeliveryStatus
from agencybridge.contracts.models import RuleAction, utcnow


class RuleEvaluationResult(BaseModel):
    """Outcome of evaluating one routing rule."""

    rule_id: str
    matched: bool
    actions: list[RuleAction] = Field(default_factory=list)
    execution_time_ms: float = Field(default=0.0, ge=0)

    model_config = {"extra": "forbid"}

    def has_action(self, action_type: ActionType) -> bool:
        return any(a.type == action_type for a in self.actions)


class BrandDeliveryOutcome(BaseModel):
    """Result of processing one event for one brand."""

    occurred_at: datetime = Field(default_factory=utcnow)
    brand_id: str
    event_type: str
    status: DeliveryStatus
    event_id: str | None = None
    brand_sent: bool = False
    bus_published: bool = False
    bus_message_id: str | None = None
    error: str | None = None
    routing_result: dict[str, Any] | None = None
    rule_results: list[RuleEvaluationResult] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class FanOutResult(BaseModel):
    """Aggregate result of fanning one asset event out to its subscribers.

    ``success`` reflects classification and iteration only; individual
    delivery failures are reported per brand.
    """

    asset_id: str
    success: bool = True
    skipped: bool = False
    reason: str | None = None
    sync_kind: AssetSyncKind | None = None
    event_type: str | None = None
    brands: list[BrandDeliveryOutcome] = Field(default_factory=list)

    # Dumped results include the computed counts; parsing them back drops those keys
    model_config = {"extra": "ignore"}

    @computed_field
    @property
    def delivered_count(self) -> int:
        return sum(1 for b in self.brands if b.brand_sent)

    @computed_field
    @property
    def failed_count(self) -> int:
        return sum(1 for b in self.brands if b.status == DeliveryStatus.FAILED)
