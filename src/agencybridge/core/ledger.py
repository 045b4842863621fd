"""Delivery ledger for recording per-brand delivery outcomes."""

import json
import logging
from typing import Any, Protocol

from agencybridge.contracts.delivery import BrandDeliveryOutcome

DELIVERY_LOGGER_NAME = "agencybridge.delivery"


class DeliveryLedger(Protocol):
    """Protocol for recording delivery outcomes."""

    def record(self, outcome: BrandDeliveryOutcome) -> None:
        """Record a delivery outcome."""
        ...


class InMemoryLedger:
    """Ledger that stores outcomes and supports per-event aggregation."""

    def __init__(self) -> None:
        self.entries: list[BrandDeliveryOutcome] = []

    def record(self, outcome: BrandDeliveryOutcome) -> None:
        self.entries.append(outcome)

    def summary(self, event_type: str | None = None) -> dict[str, Any]:
        """Count outcomes by status and by brand. Optional event_type filter."""
        subset = self.entries if event_type is None else [e for e in self.entries if e.event_type == event_type]
        by_status: dict[str, int] = {}
        by_brand: dict[str, int] = {}
        for e in subset:
            by_status[e.status.value] = by_status.get(e.status.value, 0) + 1
            by_brand[e.brand_id] = by_brand.get(e.brand_id, 0) + 1
        return {"by_status": by_status, "by_brand": by_brand}


class JsonLogLedger:
    """Ledger implementation that writes one JSON line to logger agencybridge.delivery."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(DELIVERY_LOGGER_NAME)

    def record(self, outcome: BrandDeliveryOutcome) -> None:
        """Record outcome as a single JSON line to the delivery logger."""
        payload = {
            "occurred_at": outcome.occurred_at.isoformat(),
            "brand_id": outcome.brand_id,
            "event_type": outcome.event_type,
            "event_id": outcome.event_id,
            "status": outcome.status.value,
            "brand_sent": outcome.brand_sent,
            "bus_published": outcome.bus_published,
            "error": outcome.error,
            "matched_rules": [r.rule_id for r in outcome.rule_results if r.matched],
        }
        self._logger.info(json.dumps(payload))
