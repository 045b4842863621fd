"""Subscriber resolution and new/update classification for asset metadata."""

import logging
from collections.abc import Mapping
from typing import Any

from agencybridge.contracts.enums import AssetSyncKind
from agencybridge.core.errors import CustomersFormatError

logger = logging.getLogger(__name__)

SYNC_ON_CHANGE_FIELD = "a2b__sync_on_change"
LAST_SYNC_FIELD = "a2b__last_sync"


def normalize_customers(value: Any) -> list[str]:
    """Normalize a customers metadata value to a list of brand ids.

    Accepts a list (items stringified), a mapping (values are the ids) or a
    comma-separated string (trimmed, empty segments dropped). Order is kept.

    Raises:
        CustomersFormatError: For any other shape
    """
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    if isinstance(value, Mapping):
        return [str(item) for item in value.values()]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    raise CustomersFormatError(value)


def is_sync_enabled(metadata: Mapping[str, Any]) -> bool:
    """True when ``a2b__sync_on_change`` is boolean true or the string ``"true"``."""
    flag = metadata.get(SYNC_ON_CHANGE_FIELD)
    return flag is True or flag == "true"


def classify_asset_sync(metadata: Mapping[str, Any]) -> AssetSyncKind:
    """An asset carrying a last-sync marker has been synced before."""
    if metadata.get(LAST_SYNC_FIELD):
        return AssetSyncKind.UPDATE
    return AssetSyncKind.NEW


def read_customers_field(
    metadata: Mapping[str, Any], field: str, legacy_field: str | None = None
) -> Any:
    """Return the raw customers value, falling back to the legacy field name.

    Returns None when neither field carries a value.
    """
    value = metadata.get(field)
    if value:
        return value
    if legacy_field:
        legacy = metadata.get(legacy_field)
        if legacy:
            logger.warning(f"Asset metadata uses legacy customers field {legacy_field}; expected {field}")
            return legacy
    return None
