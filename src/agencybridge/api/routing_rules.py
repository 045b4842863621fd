"""Global product and app routing rule API routes."""

from typing import Any

from fastapi import APIRouter, Body, Depends, status

from agencybridge.api.brands import RoutingRuleRequest
from agencybridge.api.deps import get_events, get_global_rules
from agencybridge.contracts.enums import RuleScope
from agencybridge.contracts.models import RoutingRule
from agencybridge.core.errors import UnknownEventCodeError
from agencybridge.events.product import ProductEventRegistry, get_product_event_registry
from agencybridge.events.registry import EventRegistry
from agencybridge.registry.global_rules import GlobalRulesRegistry
from agencybridge.settings import get_settings

router = APIRouter(prefix=f"{get_settings().api_v1_prefix}/routing-rules", tags=["routing-rules"])


def check_event_code(
    scope: RuleScope,
    event_code: str,
    events: EventRegistry = Depends(get_events),
    product_events: ProductEventRegistry = Depends(get_product_event_registry),
) -> str:
    """Product rules take product event codes; app rules take app event codes."""
    known = product_events.is_valid(event_code) if scope == RuleScope.PRODUCT else events.is_valid(event_code)
    if not known:
        raise UnknownEventCodeError(event_code)
    return event_code


def _rule_json(rule: RoutingRule) -> dict[str, Any]:
    return rule.model_dump(by_alias=True, mode="json")


@router.get("/{scope}")
async def list_event_codes_with_rules(
    scope: RuleScope,
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> dict[str, Any]:
    return {"scope": scope.value, "eventCodes": await rules.event_codes_with_rules(scope)}


@router.get("/{scope}/{event_code}")
async def list_rules(
    scope: RuleScope,
    code: str = Depends(check_event_code),
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> list[dict[str, Any]]:
    return [_rule_json(r) for r in await rules.get_rules(scope, code)]


@router.delete("/{scope}/{event_code}")
async def delete_rules(
    scope: RuleScope,
    code: str = Depends(check_event_code),
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> dict[str, str]:
    await rules.delete_rules(scope, code)
    return {"message": f"Routing rules for {scope.value} event {code} deleted", "eventCode": code}


@router.post("/{scope}/{event_code}", status_code=status.HTTP_201_CREATED)
async def create_rule(
    scope: RuleScope,
    request: RoutingRuleRequest,
    code: str = Depends(check_event_code),
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> dict[str, Any]:
    rule = await rules.add_rule(scope, code, request.to_rule())
    return _rule_json(rule)


@router.post("/{scope}/{event_code}/evaluate")
async def evaluate_rules(
    scope: RuleScope,
    event_data: dict[str, Any] = Body(...),
    code: str = Depends(check_event_code),
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> list[dict[str, Any]]:
    """Dry-run the stored rules against an event ``data`` payload."""
    results = await rules.evaluate(scope, code, event_data)
    return [r.model_dump(mode="json") for r in results]


@router.get("/{scope}/{event_code}/{rule_id}")
async def get_rule(
    scope: RuleScope,
    rule_id: str,
    code: str = Depends(check_event_code),
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> dict[str, Any]:
    return _rule_json(await rules.get_rule(scope, code, rule_id))


@router.put("/{scope}/{event_code}/{rule_id}")
async def replace_rule(
    scope: RuleScope,
    rule_id: str,
    request: RoutingRuleRequest,
    code: str = Depends(check_event_code),
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> dict[str, Any]:
    rule = await rules.update_rule(scope, code, rule_id, request.to_rule(rule_id))
    return _rule_json(rule)


@router.delete("/{scope}/{event_code}/{rule_id}")
async def delete_rule(
    scope: RuleScope,
    rule_id: str,
    code: str = Depends(check_event_code),
    rules: GlobalRulesRegistry = Depends(get_global_rules),
) -> dict[str, str]:
    await rules.delete_rule(scope, code, rule_id)
    return {"message": f"Routing rule {rule_id} deleted", "ruleId": rule_id}
