#!/usr/bin/env python3
"""Demo runner for brand registration and asset event fan-out.

Usage:
    uv run python scripts/demo_run.py

Runs entirely in memory: brand endpoints are served by an httpx mock
transport and the event bus records envelopes instead of writing to Redis.
"""

import asyncio
import logging
import sys

import httpx

from agencybridge.contracts.delivery import FanOutResult
from agencybridge.contracts.models import AssetMetadata
from agencybridge.core import InMemoryLedger
from agencybridge.core.context import RuntimeContext
from agencybridge.delivery import BrandDeliveryClient, DeliveryEngine
from agencybridge.events import RecordingEventBus
from agencybridge.registry import BrandRegistry
from agencybridge.services import BrandService
from agencybridge.settings import get_settings
from agencybridge.stores import InMemoryKeyValueStore, TieredStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

delivery_logger = logging.getLogger("agencybridge.delivery")
delivery_logger.setLevel(logging.INFO)

logger = logging.getLogger(__name__)


def brand_endpoint(request: httpx.Request) -> httpx.Response:
    """Accept every event, except at the flaky brand's endpoint."""
    if request.url.host == "flaky.example.com":
        return httpx.Response(500, text="upstream unavailable")
    event = request.read().decode()
    logger.info(f"Brand endpoint {request.url.host} received {len(event)} bytes")
    return httpx.Response(200, json={"eventType": "accepted", "routingResult": {"queued": True}})


async def main() -> FanOutResult:
    """Register two brands, enable them, and fan out one new asset."""
    settings = get_settings()
    context = RuntimeContext.from_settings(settings)
    registry = BrandRegistry(TieredStore(InMemoryKeyValueStore(), InMemoryKeyValueStore()))
    bus = RecordingEventBus()
    ledger = InMemoryLedger()

    async with httpx.AsyncClient(transport=httpx.MockTransport(brand_endpoint)) as http_client:
        engine = DeliveryEngine(
            registry=registry,
            client=BrandDeliveryClient(http_client=http_client, agency_id=settings.agency_id),
            bus=bus,
            context=context,
            ledger=ledger,
        )
        service = BrandService(registry, engine, context)

        steady = await service.register("Steady Brand", "https://steady.example.com/events")
        flaky = await service.register("Flaky Brand", "https://flaky.example.com/events")
        await service.enable(steady.brand_id)
        await service.enable(flaky.brand_id)

        asset = AssetMetadata(
            asset_id="demo-asset-1",
            asset_path="/content/dam/demo/hero.jpg",
            metadata={
                "a2b__sync_on_change": True,
                "a2b__customers": [steady.brand_id, flaky.brand_id, "unregistered-brand"],
            },
            presigned_url="https://assets.example.com/hero.jpg?sig=demo",
        )
        result = await engine.fan_out_asset_event(asset)

    print("\n" + "=" * 60)
    print("FAN-OUT RESULT")
    print("=" * 60)
    print(f"Asset ID:          {result.asset_id}")
    print(f"Event Type:        {result.event_type}")
    print(f"Success:           {result.success}")
    for outcome in result.brands:
        print(f"  {outcome.brand_id:<40} {outcome.status.value:<18} bus={outcome.bus_published}")
    print(f"Bus Events:        {len(bus.published)}")
    print(f"Ledger Summary:    {ledger.summary()}")
    print("=" * 60)

    return result


if __name__ == "__main__":
    asyncio.run(main())
