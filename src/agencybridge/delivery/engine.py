"""Per-brand event processing and asset event fan-out.

Invariants:
- A brand delivery failure never propagates past the per-brand boundary
- Bus publish failures never fail the brand delivery or the caller
- Only input errors (customers format) escape ``fan_out_asset_event``
- Each delivery reads its own Brand snapshot and builds its own envelope
"""

import asyncio
import logging
from typing import Any

from agencybridge.contracts.delivery import BrandDeliveryOutcome, FanOutResult
from agencybridge.contracts.enums import ActionType, AssetSyncKind, DeliveryStatus
from agencybridge.contracts.models import AssetMetadata, Brand
from agencybridge.core.context import RuntimeContext
from agencybridge.core.errors import DeliveryError, InputError
from agencybridge.core.ledger import DeliveryLedger, JsonLogLedger
from agencybridge.core.sanitize import sanitize_for_logging
from agencybridge.delivery.client import BrandDeliveryClient
from agencybridge.delivery.customers import (
    classify_asset_sync,
    is_sync_enabled,
    normalize_customers,
    read_customers_field,
)
from agencybridge.events.builder import build_envelope
from agencybridge.events.bus import EventPublisher
from agencybridge.events.constants import (
    ASSET_SYNC_NEW,
    ASSET_SYNC_UPDATE,
    REGISTRATION_DISABLED,
)
from agencybridge.events.envelope import EventEnvelope
from agencybridge.events.registry import EventRegistry, get_event_registry
from agencybridge.registry.brand_registry import BrandRegistry
from agencybridge.routing.evaluator import RulesEvaluator

logger = logging.getLogger(__name__)


class DeliveryEngine:
    """Delivers events to brands and forwards copies to the event bus."""

    def __init__(
        self,
        registry: BrandRegistry,
        client: BrandDeliveryClient,
        bus: EventPublisher,
        context: RuntimeContext,
        concurrency: int = 8,
        evaluator: RulesEvaluator | None = None,
        ledger: DeliveryLedger | None = None,
        customers_field: str = "a2b__customers",
        legacy_customers_field: str | None = None,
        event_registry: EventRegistry | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            registry: Brand registry for subscriber lookups
            client: Brand HTTP delivery client
            bus: Internal event bus publisher
            context: Runtime context for envelope construction
            concurrency: Maximum concurrent per-brand deliveries in a fan-out
            evaluator: Routing rule evaluator
            ledger: Delivery outcome ledger (defaults to JSON log lines)
            customers_field: Asset metadata field listing subscriber brand ids
            legacy_customers_field: Fallback field name, read with a warning
            event_registry: Event definitions; defaults to the context namespace
        """
        self.registry = registry
        self.client = client
        self.bus = bus
        self.context = context
        self.concurrency = max(1, concurrency)
        self.evaluator = evaluator or RulesEvaluator()
        self.ledger = ledger or JsonLogLedger()
        self.customers_field = customers_field
        self.legacy_customers_field = legacy_customers_field
        self.event_registry = event_registry or get_event_registry(context.event_namespace)

    def _finish(self, outcome: BrandDeliveryOutcome) -> BrandDeliveryOutcome:
        self.ledger.record(outcome)
        return outcome

    async def _publish(self, envelope: EventEnvelope) -> str | None:
        """Forward envelope to the bus; returns the message id or None on failure."""
        try:
            return await self.bus.publish(envelope)
        except Exception as e:
            logger.error(
                f"Event bus publish failed for {envelope.type} {envelope.id}: {type(e).__name__}: {e}"
            )
            return None

    def _log_delivery_failure(self, brand: Brand, envelope: EventEnvelope, error: DeliveryError) -> None:
        details = {
            "endpoint": error.endpoint,
            "headers": self.client.build_headers(brand),
            "status": error.status_code_received,
            "response_body": error.response_body,
            "event": envelope.to_wire(),
        }
        logger.error(f"Delivery to brand {brand.brand_id} failed: {error.message} {sanitize_for_logging(details)}")

    async def process_event(
        self,
        event_code: str,
        brand: Brand | None,
        data: dict[str, Any],
        brand_id: str | None = None,
    ) -> BrandDeliveryOutcome:
        """Build, deliver and publish one event for one brand.

        Absent brands and disabled brands are skipped, except that the
        registration-disabled notification goes to the now-disabled brand.
        Input errors are recorded on the outcome rather than raised.

        Args:
            event_code: Namespace-qualified event code
            brand: Brand snapshot, or None if the lookup found nothing
            data: Event payload
            brand_id: Id to report when ``brand`` is None
        """
        target_id = brand.brand_id if brand is not None else (brand_id or str(data.get("brandId", "")))

        if brand is None:
            logger.info(f"Brand {target_id} not found, skipping {event_code}")
            return self._finish(
                BrandDeliveryOutcome(
                    brand_id=target_id, event_type=event_code, status=DeliveryStatus.SKIPPED_NOT_FOUND
                )
            )

        if not brand.enabled and event_code != self.context.event_code(REGISTRATION_DISABLED):
            logger.info(f"Brand {target_id} is disabled, skipping {event_code}")
            return self._finish(
                BrandDeliveryOutcome(
                    brand_id=target_id, event_type=event_code, status=DeliveryStatus.SKIPPED_DISABLED
                )
            )

        try:
            envelope = build_envelope(event_code, data, self.context, registry=self.event_registry)
        except InputError as e:
            logger.warning(f"Invalid {event_code} event for brand {target_id}: {e.message}")
            return self._finish(
                BrandDeliveryOutcome(
                    brand_id=target_id,
                    event_type=event_code,
                    status=DeliveryStatus.INVALID_EVENT,
                    error=e.message,
                )
            )

        rule_results = self.evaluator.evaluate(brand.rules_for(event_code), envelope.data)
        filtered = any(r.matched and r.has_action(ActionType.FILTER) for r in rule_results)

        status = DeliveryStatus.DELIVERED
        brand_sent = False
        error: str | None = None
        routing_result: dict[str, Any] | None = None

        if filtered:
            status = DeliveryStatus.SKIPPED_BY_RULE
            logger.info(f"Routing rule filtered {event_code} for brand {target_id}")
        else:
            try:
                response = await self.client.deliver(brand, envelope)
                brand_sent = True
                routing_result = response.routing_result
            except DeliveryError as e:
                self._log_delivery_failure(brand, envelope, e)
                status = DeliveryStatus.FAILED
                error = e.message

        message_id = await self._publish(envelope)

        return self._finish(
            BrandDeliveryOutcome(
                brand_id=target_id,
                event_type=event_code,
                status=status,
                event_id=envelope.id,
                brand_sent=brand_sent,
                bus_published=message_id is not None,
                bus_message_id=message_id,
                error=error,
                routing_result=routing_result,
                rule_results=rule_results,
            )
        )

    async def publish_only(self, event_code: str, data: dict[str, Any]) -> str | None:
        """Build an envelope and forward it to the bus without a brand delivery.

        Returns:
            Bus message id, or None if the publish failed

        Raises:
            UnknownEventCodeError: If the event code is not registered
            MissingRequiredFieldsError: If required fields are missing
        """
        envelope = build_envelope(event_code, data, self.context, registry=self.event_registry)
        return await self._publish(envelope)

    def asset_event_data(self, asset: AssetMetadata, brand_id: str) -> dict[str, Any]:
        return {
            "asset_id": asset.asset_id,
            "asset_path": asset.asset_path,
            "metadata": asset.metadata,
            "brandId": brand_id,
            "asset_presigned_url": asset.presigned_url,
        }

    async def _deliver_asset(
        self,
        brand_id: str,
        event_code: str,
        asset: AssetMetadata,
        overrides: dict[str, Any] | None,
    ) -> BrandDeliveryOutcome:
        try:
            brand = await self.registry.get(brand_id)
            data = self.asset_event_data(asset, brand_id)
            if overrides:
                data.update(overrides)
            return await self.process_event(event_code, brand, data, brand_id=brand_id)
        except Exception as e:
            logger.exception(f"Unexpected error delivering {event_code} to brand {brand_id}")
            return self._finish(
                BrandDeliveryOutcome(
                    brand_id=brand_id,
                    event_type=event_code,
                    status=DeliveryStatus.FAILED,
                    error=f"{type(e).__name__}: {e}",
                )
            )

    async def fan_out_asset_event(
        self,
        asset: AssetMetadata,
        event_data_overrides: dict[str, Any] | None = None,
    ) -> FanOutResult:
        """Deliver an asset sync event to every subscribed brand.

        Brands are processed concurrently, bounded by ``concurrency``; results
        keep the resolved subscriber order. If the calling task is cancelled,
        deliveries already in flight run to completion and queued ones are not
        started.

        Raises:
            CustomersFormatError: If the customers field has an unsupported shape
        """
        metadata = asset.metadata

        if not is_sync_enabled(metadata):
            logger.info(f"Asset {asset.asset_id} does not have sync on change enabled, skipping")
            return FanOutResult(asset_id=asset.asset_id, skipped=True, reason="sync_on_change not enabled")

        raw_customers = read_customers_field(metadata, self.customers_field, self.legacy_customers_field)
        if raw_customers is None:
            logger.info(f"Asset {asset.asset_id} has no subscribed customers, skipping")
            return FanOutResult(asset_id=asset.asset_id, skipped=True, reason="no customers")

        brand_ids = normalize_customers(raw_customers)
        kind = classify_asset_sync(metadata)
        suffix = ASSET_SYNC_UPDATE if kind == AssetSyncKind.UPDATE else ASSET_SYNC_NEW
        event_code = self.context.event_code(suffix)
        logger.info(f"Fanning out {event_code} for asset {asset.asset_id} to {len(brand_ids)} brands")

        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(brand_id: str) -> BrandDeliveryOutcome:
            async with semaphore:
                return await asyncio.shield(
                    self._deliver_asset(brand_id, event_code, asset, event_data_overrides)
                )

        outcomes = await asyncio.gather(*(run(brand_id) for brand_id in brand_ids))

        return FanOutResult(
            asset_id=asset.asset_id,
            sync_kind=kind,
            event_type=event_code,
            brands=list(outcomes),
        )
