"""Shared-secret authentication for brand-to-agency events."""

import logging
from collections.abc import Mapping
from typing import Any

from agencybridge.contracts.models import Brand
from agencybridge.core.errors import AuthenticationError, InvalidEventError
from agencybridge.events.constants import INBOUND_REGISTRATION_PREFIX
from agencybridge.registry.brand_registry import BrandRegistry

logger = logging.getLogger(__name__)

AGENCY_SECRET_HEADER = "x-a2b-agency-secret"


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def inbound_brand_id(payload: Mapping[str, Any]) -> str:
    """Brand id from ``data.app_runtime_info.consoleId``.

    Raises:
        InvalidEventError: If the payload has no data, runtime info or consoleId
    """
    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise InvalidEventError("Missing required data in event")
    runtime_info = data.get("app_runtime_info")
    if not isinstance(runtime_info, Mapping):
        raise InvalidEventError("Missing required data.app_runtime_info in event")
    brand_id = runtime_info.get("consoleId")
    if not brand_id:
        raise InvalidEventError("Missing consoleId in app_runtime_info")
    return str(brand_id)


async def authenticate_inbound(
    registry: BrandRegistry,
    headers: Mapping[str, str],
    payload: Mapping[str, Any],
) -> Brand | None:
    """Check the agency secret header against the identified brand.

    Registration events skip the check because the brand does not hold a
    secret yet; they return None.

    Returns:
        The authenticated Brand, or None for registration events

    Raises:
        InvalidEventError: If the payload does not identify a brand
        AuthenticationError: If the header is missing, the brand is unknown
            or the secret does not match
    """
    brand_id = inbound_brand_id(payload)
    event_type = str(payload.get("type") or "")

    if event_type.startswith(INBOUND_REGISTRATION_PREFIX):
        logger.info(f"Skipping secret validation for registration event {event_type}")
        return None

    secret = _header(headers, AGENCY_SECRET_HEADER)
    if not secret:
        logger.error(f"Missing X-A2B-Agency-Secret header for event type {event_type}")
        raise AuthenticationError("Missing X-A2B-Agency-Secret header")

    brand = await registry.get(brand_id)
    if brand is None:
        logger.error(f"Brand not found: {brand_id}")
        raise AuthenticationError("Brand not found or not registered")

    if not brand.secret_matches(secret):
        logger.error(f"Invalid agency secret for brand {brand_id}")
        raise AuthenticationError("Invalid agency secret")

    logger.info(f"Secret validated for brand {brand_id}")
    return brand
