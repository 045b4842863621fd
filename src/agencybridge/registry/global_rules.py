"""Global routing rules for product and app events.

Rules that apply to an event code regardless of brand live under
``product-routing-rules:<code>`` and ``app-routing-rules:<code>``, one JSON
list per event code. Mutations are read-modify-write over that list with no
lock, like brand rules.
"""

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from agencybridge.contracts.delivery import RuleEvaluationResult
from agencybridge.contracts.enums import RuleScope
from agencybridge.contracts.models import RoutingRule, utcnow
from agencybridge.core.errors import RuleConflictError, RuleNotFoundError
from agencybridge.routing.evaluator import RulesEvaluator
from agencybridge.stores.base import APP_RULES_PREFIX, PRODUCT_RULES_PREFIX
from agencybridge.stores.tiered import TieredStore

logger = logging.getLogger(__name__)

SCOPE_PREFIXES = {
    RuleScope.PRODUCT: PRODUCT_RULES_PREFIX,
    RuleScope.APP: APP_RULES_PREFIX,
}

_rule_list = TypeAdapter(list[RoutingRule])


def rules_key(scope: RuleScope, event_code: str) -> str:
    return f"{SCOPE_PREFIXES[scope]}{event_code}"


class GlobalRulesRegistry:
    """Owns persistence of product and app routing rules."""

    def __init__(self, store: TieredStore, evaluator: RulesEvaluator | None = None) -> None:
        self.store = store
        self.evaluator = evaluator or RulesEvaluator()

    async def get_rules(self, scope: RuleScope, event_code: str) -> list[RoutingRule]:
        """Rules for ``event_code``; an absent or malformed list reads as empty.

        Raises:
            PersistenceError: If the durable store cannot be read
        """
        key = rules_key(scope, event_code)
        raw = await self.store.get(key)
        if raw is None:
            logger.debug(f"No {scope.value} routing rules for {event_code}")
            return []
        try:
            return _rule_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Skipping malformed rule list {key}: {e.error_count()} validation errors")
            return []

    async def save_rules(self, scope: RuleScope, event_code: str, rules: list[RoutingRule]) -> None:
        """Replace the rule list; an empty list removes the entry."""
        key = rules_key(scope, event_code)
        if not rules:
            await self.store.delete(key)
        else:
            await self.store.put(key, _rule_list.dump_json(rules, by_alias=True).decode())
        logger.info(f"Saved {len(rules)} {scope.value} routing rules for {event_code}")

    async def delete_rules(self, scope: RuleScope, event_code: str) -> None:
        await self.store.delete(rules_key(scope, event_code))
        logger.info(f"Deleted {scope.value} routing rules for {event_code}")

    async def event_codes_with_rules(self, scope: RuleScope) -> list[str]:
        prefix = SCOPE_PREFIXES[scope]
        items = await self.store.durable_items(prefix)
        return [key[len(prefix):] for key, _ in items]

    async def get_rule(self, scope: RuleScope, event_code: str, rule_id: str) -> RoutingRule:
        """Raises RuleNotFoundError if no rule has ``rule_id``."""
        for rule in await self.get_rules(scope, event_code):
            if rule.id == rule_id:
                return rule
        raise RuleNotFoundError(f"{scope.value} rules", event_code, rule_id)

    async def add_rule(self, scope: RuleScope, event_code: str, rule: RoutingRule) -> RoutingRule:
        """Append a rule.

        Raises:
            RuleConflictError: If a rule with the same id exists for the event code
        """
        rules = await self.get_rules(scope, event_code)
        if any(r.id == rule.id for r in rules):
            raise RuleConflictError(f"{scope.value} rules", event_code, rule.id)
        rules.append(rule)
        await self.save_rules(scope, event_code, rules)
        logger.info(f"Added {scope.value} routing rule {rule.id} for {event_code}")
        return rule

    async def update_rule(
        self, scope: RuleScope, event_code: str, rule_id: str, rule: RoutingRule
    ) -> RoutingRule:
        """Replace rule ``rule_id``, keeping its id and creation time.

        Raises:
            RuleNotFoundError: If no rule has ``rule_id``
        """
        rules = await self.get_rules(scope, event_code)
        for i, existing in enumerate(rules):
            if existing.id == rule_id:
                updated = rule.model_copy(
                    update={"id": rule_id, "created_at": existing.created_at, "updated_at": utcnow()}
                )
                rules[i] = updated
                await self.save_rules(scope, event_code, rules)
                return updated
        raise RuleNotFoundError(f"{scope.value} rules", event_code, rule_id)

    async def delete_rule(self, scope: RuleScope, event_code: str, rule_id: str) -> None:
        """Raises RuleNotFoundError if no rule has ``rule_id``."""
        rules = await self.get_rules(scope, event_code)
        remaining = [r for r in rules if r.id != rule_id]
        if len(remaining) == len(rules):
            raise RuleNotFoundError(f"{scope.value} rules", event_code, rule_id)
        await self.save_rules(scope, event_code, remaining)

    async def evaluate(
        self, scope: RuleScope, event_code: str, event_data: dict[str, Any]
    ) -> list[RuleEvaluationResult]:
        """Evaluate the stored rules for ``event_code`` against ``event_data``."""
        return self.evaluator.evaluate(await self.get_rules(scope, event_code), event_data)
