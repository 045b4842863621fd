"""Brand delivery client and fan-out engine."""

from agencybridge.delivery.client import BrandDeliveryClient, BrandDeliveryResponse
from agencybridge.delivery.customers import (
    classify_asset_sync,
    is_sync_enabled,
    normalize_customers,
    read_customers_field,
)
from agencybridge.delivery.engine import DeliveryEngine

__all__ = [
    "BrandDeliveryClient",
    "BrandDeliveryResponse",
    "DeliveryEngine",
    "classify_asset_sync",
    "is_sync_enabled",
    "normalize_customers",
    "read_customers_field",
]
