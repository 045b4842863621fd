"""Canonical contracts for brands, routing rules, runtime identity and delivery results."""

from agencybridge.contracts.delivery import BrandDeliveryOutcome, FanOutResult, RuleEvaluationResult
from agencybridge.contracts.enums import (
    ActionType,
    AssetSyncKind,
    ConditionOperator,
    DeliveryStatus,
    EventCategory,
    LogicalOperator,
    RuleScope,
)
from agencybridge.contracts.models import (
    AgencyIdentification,
    ApplicationRuntimeInfo,
    AssetMetadata,
    Brand,
    RoutingRule,
    RuleAction,
    RuleCondition,
    utcnow,
)

__all__ = [
    "ActionType",
    "AgencyIdentification",
    "ApplicationRuntimeInfo",
    "AssetMetadata",
    "AssetSyncKind",
    "Brand",
    "BrandDeliveryOutcome",
    "ConditionOperator",
    "DeliveryStatus",
    "EventCategory",
    "FanOutResult",
    "LogicalOperator",
    "RoutingRule",
    "RuleAction",
    "RuleCondition",
    "RuleEvaluationResult",
    "RuleScope",
    "utcnow",
]
