"""Brand registration and routing rule API routes."""

import logging
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Depends, status
from pydantic import Field

from agencybridge.api.deps import get_brand_service, get_events, get_registry
from agencybridge.contracts.models import CamelModel, RoutingRule, RuleAction, RuleCondition, utcnow
from agencybridge.events.registry import EventRegistry
from agencybridge.registry.brand_registry import BrandRegistry
from agencybridge.services.brands import BrandService
from agencybridge.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{get_settings().api_v1_prefix}/brands", tags=["brands"])


class RegisterBrandRequest(CamelModel):
    """Request to register a new brand."""

    name: str = Field(min_length=1)
    end_point_url: str = Field(min_length=1)
    logo: str | None = None
    ims_org_name: str | None = None
    ims_org_id: str | None = None


class UpdateBrandRequest(CamelModel):
    """Partial brand update; ``endPointUrl`` may only repeat its current value."""

    name: str | None = Field(default=None, min_length=1)
    end_point_url: str | None = None
    logo: str | None = None
    ims_org_name: str | None = None
    ims_org_id: str | None = None
    enabled: bool | None = None


class RoutingRuleRequest(CamelModel):
    """Rule body for create and replace; the id is generated when omitted."""

    id: str | None = None
    name: str = Field(min_length=1)
    description: str = ""
    priority: int = 0
    enabled: bool = True
    conditions: list[RuleCondition] = Field(default_factory=list)
    actions: list[RuleAction] = Field(default_factory=list)

    def to_rule(self, rule_id: str | None = None) -> RoutingRule:
        now = utcnow()
        return RoutingRule(
            id=rule_id or self.id or str(uuid4()),
            name=self.name,
            description=self.description,
            priority=self.priority,
            enabled=self.enabled,
            conditions=self.conditions,
            actions=self.actions,
            created_at=now,
            updated_at=now,
        )


def _rule_json(rule: RoutingRule) -> dict[str, Any]:
    return rule.model_dump(by_alias=True, mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_brand(
    request: RegisterBrandRequest,
    service: BrandService = Depends(get_brand_service),
) -> dict[str, Any]:
    """Register a brand; it starts disabled."""
    brand = await service.register(
        name=request.name,
        end_point_url=request.end_point_url,
        logo=request.logo,
        ims_org_name=request.ims_org_name,
        ims_org_id=request.ims_org_id,
    )
    return {
        "message": f"Brand registration processed successfully for brand id {brand.brand_id}",
        **brand.safe_dump(),
    }


@router.get("")
async def list_brands(registry: BrandRegistry = Depends(get_registry)) -> list[dict[str, Any]]:
    """List all brands without secrets."""
    brands = await registry.list_brands()
    return [b.safe_dump() for b in brands]


@router.delete("")
async def delete_all_brands(registry: BrandRegistry = Depends(get_registry)) -> dict[str, Any]:
    """Delete every brand and its secret index entry."""
    deleted = await registry.delete_all()
    return {"message": "all brands deleted successfully", "deleted": deleted}


@router.get("/{brand_id}")
async def get_brand(brand_id: str, registry: BrandRegistry = Depends(get_registry)) -> dict[str, Any]:
    brand = await registry.require(brand_id)
    return brand.safe_dump()


@router.patch("/{brand_id}")
async def update_brand(
    brand_id: str,
    request: UpdateBrandRequest,
    service: BrandService = Depends(get_brand_service),
) -> dict[str, Any]:
    """Apply a partial update; ``enabled`` changes trigger the registration events."""
    brand = await service.update(brand_id, request.model_dump(exclude_unset=True))
    return brand.safe_dump()


@router.delete("/{brand_id}")
async def delete_brand(
    brand_id: str,
    service: BrandService = Depends(get_brand_service),
) -> dict[str, str]:
    await service.delete(brand_id)
    return {"message": f"Brand {brand_id} deleted", "brandId": brand_id}


@router.get("/{brand_id}/rules/{event_code}")
async def list_rules(
    brand_id: str,
    event_code: str,
    registry: BrandRegistry = Depends(get_registry),
    events: EventRegistry = Depends(get_events),
) -> list[dict[str, Any]]:
    events.get(event_code)
    rules = await registry.get_rules(brand_id, event_code)
    return [_rule_json(r) for r in rules]


@router.post("/{brand_id}/rules/{event_code}", status_code=status.HTTP_201_CREATED)
async def create_rule(
    brand_id: str,
    event_code: str,
    request: RoutingRuleRequest,
    registry: BrandRegistry = Depends(get_registry),
    events: EventRegistry = Depends(get_events),
) -> dict[str, Any]:
    events.get(event_code)
    rule = await registry.add_rule(brand_id, event_code, request.to_rule())
    return _rule_json(rule)


@router.put("/{brand_id}/rules/{event_code}/{rule_id}")
async def replace_rule(
    brand_id: str,
    event_code: str,
    rule_id: str,
    request: RoutingRuleRequest,
    registry: BrandRegistry = Depends(get_registry),
    events: EventRegistry = Depends(get_events),
) -> dict[str, Any]:
    events.get(event_code)
    rule = await registry.update_rule(brand_id, event_code, rule_id, request.to_rule(rule_id))
    return _rule_json(rule)


@router.delete("/{brand_id}/rules/{event_code}/{rule_id}")
async def delete_rule(
    brand_id: str,
    event_code: str,
    rule_id: str,
    registry: BrandRegistry = Depends(get_registry),
    events: EventRegistry = Depends(get_events),
) -> dict[str, str]:
    events.get(event_code)
    await registry.delete_rule(brand_id, event_code, rule_id)
    return {"message": f"Routing rule {rule_id} deleted", "ruleId": rule_id}
