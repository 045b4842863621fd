"""Product event definition API routes."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from agencybridge.events.product import ProductEventRegistry, get_product_event_registry
from agencybridge.settings import get_settings

router = APIRouter(prefix=f"{get_settings().api_v1_prefix}/product-events", tags=["product-events"])


@router.get("")
async def list_product_events(
    product_events: ProductEventRegistry = Depends(get_product_event_registry),
) -> dict[str, Any]:
    """List product event definitions with per-category counts."""
    definitions = product_events.all()
    return {
        "events": [d.as_dict() for d in definitions],
        "count": len(definitions),
        "countByCategory": product_events.count_by_category(),
    }


@router.get("/{event_code}")
async def get_product_event(
    event_code: str,
    product_events: ProductEventRegistry = Depends(get_product_event_registry),
) -> dict[str, Any]:
    return {
        "event": product_events.get(event_code).as_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
