"""Tests for the product event registry."""

import pytest

from agencybridge.contracts.enums import EventCategory
from agencybridge.core.errors import ProductEventNotFoundError
from agencybridge.events import ProductEventRegistry, get_product_event_registry

METADATA_UPDATED = "aem.assets.asset.metadata_updated"
PROCESSING_COMPLETED = "aem.assets.asset.processing_completed"


def test_default_product_events() -> None:
    registry = ProductEventRegistry()
    assert registry.codes() == [METADATA_UPDATED, PROCESSING_COMPLETED]
    assert all(d.category == EventCategory.PRODUCT for d in registry.all())
    assert registry.count_by_category() == {"product": 2}


def test_get_definition() -> None:
    definition = ProductEventRegistry().get(METADATA_UPDATED)
    assert definition.required_fields == ("assetId", "repositoryMetadata")
    data = definition.as_dict()
    assert data["code"] == METADATA_UPDATED
    assert data["callBlocking"] is True


def test_unknown_code_lists_available_codes() -> None:
    with pytest.raises(ProductEventNotFoundError) as exc_info:
        ProductEventRegistry().get("aem.assets.asset.deleted")
    assert exc_info.value.status_code == 404
    assert exc_info.value.available == [METADATA_UPDATED, PROCESSING_COMPLETED]


def test_is_valid() -> None:
    registry = get_product_event_registry()
    assert registry.is_valid(PROCESSING_COMPLETED)
    assert not registry.is_valid("com.adobe.a2b.assetsync.new")
