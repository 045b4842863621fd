"""Event definition and inbound event API routes."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from agencybridge.api.deps import get_engine, get_events, get_metadata_provider, get_registry
from agencybridge.auth.inbound import authenticate_inbound
from agencybridge.contracts.delivery import FanOutResult
from agencybridge.contracts.enums import EventCategory
from agencybridge.contracts.models import AssetMetadata, CamelModel
from agencybridge.core.errors import InvalidEventError
from agencybridge.core.sanitize import sanitize_for_logging
from agencybridge.delivery.engine import DeliveryEngine
from agencybridge.events.registry import EventRegistry
from agencybridge.providers.aem_provider import AssetMetadataProvider
from agencybridge.registry.brand_registry import BrandRegistry
from agencybridge.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{get_settings().api_v1_prefix}/events", tags=["events"])


class AemAssetRequest(CamelModel):
    """Asset change notification identifying the asset by host and path."""

    host: str
    path: str
    presigned_url: str | None = None


@router.get("")
async def list_event_definitions(
    category: EventCategory | None = None,
    events: EventRegistry = Depends(get_events),
) -> list[dict[str, Any]]:
    """List registered event definitions, optionally filtered by category."""
    definitions = events.by_category(category) if category else events.all()
    return [d.as_dict() for d in definitions]


@router.post("/asset-sync", response_model=FanOutResult)
async def asset_sync(
    asset: AssetMetadata,
    engine: DeliveryEngine = Depends(get_engine),
) -> FanOutResult:
    """Fan an asset sync event out to the brands listed in its metadata."""
    return await engine.fan_out_asset_event(asset)


@router.post("/aem-asset", response_model=FanOutResult)
async def aem_asset_sync(
    request: AemAssetRequest,
    engine: DeliveryEngine = Depends(get_engine),
    provider: AssetMetadataProvider = Depends(get_metadata_provider),
) -> FanOutResult:
    """Fetch asset metadata from the system of record, then fan out."""
    asset = await provider.fetch_asset_metadata(request.host, request.path)
    if request.presigned_url:
        asset = asset.model_copy(update={"presigned_url": request.presigned_url})
    return await engine.fan_out_asset_event(asset)


@router.post("/brand")
async def brand_event(
    request: Request,
    payload: dict[str, Any] = Body(...),
    registry: BrandRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Accept an inbound brand event after the shared-secret check."""
    logger.info(f"Received brand event {sanitize_for_logging(payload)}")
    if not payload.get("type") or not isinstance(payload.get("data"), dict):
        raise InvalidEventError("Brand event requires type and data")

    brand = await authenticate_inbound(registry, request.headers, payload)
    brand_id = brand.brand_id if brand is not None else payload["data"]["app_runtime_info"]["consoleId"]
    return {
        "status": "accepted",
        "type": payload["type"],
        "brandId": brand_id,
        "authenticated": brand is not None,
    }
