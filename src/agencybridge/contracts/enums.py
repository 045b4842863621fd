"""Canonical enum definitions for brands, events and routing rules."""

from enum import Enum


class EventCategory(str, Enum):
    """Event definition category."""

    AGENCY = "agency"
    BRAND = "brand"
    PRODUCT = "product"
    REGISTRATION = "registration"


class ConditionOperator(str, Enum):
    """Routing rule condition operator."""

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    REGEX = "regex"
    EXISTS = "exists"
    NOT_EXISTS = "notExists"


class LogicalOperator(str, Enum):
    """How a condition chains to the next one."""

    AND = "AND"
    OR = "OR"


class ActionType(str, Enum):
    """Routing rule action type."""

    ROUTE = "route"
    TRANSFORM = "transform"
    FILTER = "filter"
    LOG = "log"


class AssetSyncKind(str, Enum):
    """Asset sync classification for an asset and brand pair."""

    NEW = "new"
    UPDATE = "update"


class DeliveryStatus(str, Enum):
    """Per-brand delivery outcome."""

    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED_NOT_FOUND = "skipped_not_found"
    SKIPPED_DISABLED = "skipped_disabled"
    SKIPPED_BY_RULE = "skipped_by_rule"
    INVALID_EVENT = "invalid_event"


class RuleScope(str, Enum):
    """Owner of a global (not brand-specific) routing rule set."""

    PRODUCT = "product"
    APP = "app"
