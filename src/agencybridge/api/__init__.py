"""API routes."""

from agencybridge.api.brands import router as brands_router
from agencybridge.api.events import router as events_router
from agencybridge.api.product_events import router as product_events_router
from agencybridge.api.routing_rules import router as routing_rules_router

__all__ = ["brands_router", "events_router", "product_events_router", "routing_rules_router"]
