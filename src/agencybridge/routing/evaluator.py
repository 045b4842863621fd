"""Routing rule evaluation against event data."""

import logging
import re
import time
from typing import Any

from agencybridge.contracts.delivery import RuleEvaluationResult
from agencybridge.contracts.enums import ConditionOperator, LogicalOperator
from agencybridge.contracts.models import RoutingRule, RuleCondition

logger = logging.getLogger(__name__)

# A matching rule at or above this priority stops evaluation.
HIGH_PRIORITY_THRESHOLD = 100

_MISSING = object()


def get_field_value(data: Any, path: str) -> Any:
    """Resolve a dot-notation path; returns None when any segment is absent."""
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part, _MISSING)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
        if current is _MISSING:
            return None
    return current


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion; ints and floats share one number type."""
    numbers = (int, float)
    if isinstance(left, numbers) and isinstance(right, numbers):
        if isinstance(left, bool) or isinstance(right, bool):
            return type(left) is type(right) and left == right
        return left == right
    return type(left) is type(right) and left == right


class RulesEvaluator:
    """Evaluates a brand's routing rules for one event."""

    def evaluate(self, rules: list[RoutingRule], event_data: dict[str, Any]) -> list[RuleEvaluationResult]:
        """Evaluate enabled rules in descending priority order.

        Args:
            rules: Rules registered for the event code
            event_data: Event ``data`` payload

        Returns:
            One result per evaluated rule, in evaluation order
        """
        ordered = sorted((r for r in rules if r.enabled), key=lambda r: r.priority, reverse=True)
        results: list[RuleEvaluationResult] = []

        for rule in ordered:
            start = time.perf_counter()
            matched = self.matches(rule, event_data)
            elapsed_ms = (time.perf_counter() - start) * 1000

            results.append(
                RuleEvaluationResult(
                    rule_id=rule.id,
                    matched=matched,
                    actions=list(rule.actions) if matched else [],
                    execution_time_ms=elapsed_ms,
                )
            )
            if matched and rule.priority >= HIGH_PRIORITY_THRESHOLD:
                logger.debug(f"Rule {rule.id} matched at priority {rule.priority}, stopping evaluation")
                break

        return results

    def matches(self, rule: RoutingRule, event_data: dict[str, Any]) -> bool:
        """Chain conditions left to right.

        Each condition's logical operator joins it to the next one; a rule
        without conditions always matches.
        """
        if not rule.conditions:
            return True

        result = True
        joiner = LogicalOperator.AND
        for i, condition in enumerate(rule.conditions):
            outcome = self.check_condition(condition, event_data)
            if i == 0:
                result = outcome
            elif joiner == LogicalOperator.AND:
                result = result and outcome
            else:
                result = result or outcome
            joiner = condition.logical_operator or LogicalOperator.AND
        return result

    def check_condition(self, condition: RuleCondition, event_data: dict[str, Any]) -> bool:
        value = get_field_value(event_data, condition.field)
        op = condition.operator

        if op == ConditionOperator.EXISTS:
            return value is not None
        if op == ConditionOperator.NOT_EXISTS:
            return value is None
        if op == ConditionOperator.EQUALS:
            return strict_equals(value, condition.value)

        # String operators
        if not isinstance(value, str) or condition.value is None:
            return False
        expected = str(condition.value)
        if op == ConditionOperator.CONTAINS:
            return expected in value
        if op == ConditionOperator.STARTS_WITH:
            return value.startswith(expected)
        if op == ConditionOperator.ENDS_WITH:
            return value.endswith(expected)
        if op == ConditionOperator.REGEX:
            try:
                return re.search(expected, value) is not None
            except re.error as e:
                logger.warning(f"Invalid regex in condition on {condition.field}: {e}")
                return False
        return False
