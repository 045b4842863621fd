"""Routing rule evaluation."""

from agencybridge.routing.evaluator import (
    HIGH_PRIORITY_THRESHOLD,
    RuleEvaluationResult,
    RulesEvaluator,
    get_field_value,
)

__all__ = [
    "HIGH_PRIORITY_THRESHOLD",
    "RuleEvaluationResult",
    "RulesEvaluator",
    "get_field_value",
]
