"""Brand registration, update and enable/disable transitions."""

import logging
import secrets
from typing import Any
from uuid import uuid4

from pydantic import BaseModel

from agencybridge.contracts.delivery import BrandDeliveryOutcome
from agencybridge.contracts.models import Brand, utcnow
from agencybridge.core.context import RuntimeContext
from agencybridge.core.errors import ImmutableFieldError, InputError
from agencybridge.delivery.engine import DeliveryEngine
from agencybridge.events.constants import (
    REGISTRATION_DISABLED,
    REGISTRATION_ENABLED,
    REGISTRATION_RECEIVED,
)
from agencybridge.registry.brand_registry import BrandRegistry

logger = logging.getLogger(__name__)

SECRET_LENGTH = 32
UPDATABLE_FIELDS = ("name", "logo", "ims_org_name", "ims_org_id")


def generate_secret() -> str:
    """32 url-safe characters."""
    return secrets.token_urlsafe(SECRET_LENGTH)[:SECRET_LENGTH]


class BrandTransition(BaseModel):
    """Brand after an enable/disable transition and the notification outcome.

    ``outcome`` is None when the brand was already in the target state.
    """

    brand: Brand
    outcome: BrandDeliveryOutcome | None = None

    model_config = {"extra": "forbid"}


class BrandService:
    """Registration lifecycle on top of the registry and delivery engine."""

    def __init__(self, registry: BrandRegistry, engine: DeliveryEngine, context: RuntimeContext) -> None:
        self.registry = registry
        self.engine = engine
        self.context = context

    async def register(
        self,
        name: str,
        end_point_url: str,
        logo: str | None = None,
        ims_org_name: str | None = None,
        ims_org_id: str | None = None,
    ) -> Brand:
        """Create a disabled brand with a generated id and secret.

        The ``registration.received`` notification is published to the bus
        after the save; a failure there is logged and does not undo the
        registration.

        Raises:
            PersistenceError: If the durable store write fails
        """
        now = utcnow()
        brand = Brand(
            brand_id=str(uuid4()),
            secret=generate_secret(),
            name=name,
            end_point_url=end_point_url,
            enabled=False,
            enabled_at=None,
            logo=logo,
            ims_org_name=ims_org_name,
            ims_org_id=ims_org_id,
            created_at=now,
            updated_at=now,
        )
        await self.registry.save(brand)
        logger.info(f"Registered brand {brand.brand_id} ({brand.name})")

        event_data = {
            "brandId": brand.brand_id,
            "name": brand.name,
            "endPointUrl": brand.end_point_url,
            "enabled": brand.enabled,
        }
        try:
            message_id = await self.engine.publish_only(
                self.context.event_code(REGISTRATION_RECEIVED), event_data
            )
        except InputError as e:
            logger.error(f"Registration event for brand {brand.brand_id} not published: {e.message}")
        else:
            if message_id is None:
                logger.warning(f"Registration event for brand {brand.brand_id} was not published")
        return brand

    async def update(self, brand_id: str, changes: dict[str, Any]) -> Brand:
        """Apply a partial update.

        ``end_point_url`` may be repeated with its current value but never
        changed; an ``enabled`` change goes through ``enable``/``disable``.

        Raises:
            BrandNotFoundError: If the brand does not exist
            ImmutableFieldError: If ``end_point_url`` would change
            InputError: If ``changes`` names a field that cannot be updated
        """
        changes = dict(changes)
        brand = await self.registry.require(brand_id)

        if "end_point_url" in changes:
            if changes.pop("end_point_url") != brand.end_point_url:
                raise ImmutableFieldError("endPointUrl")

        enabled = changes.pop("enabled", None)

        unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
        if unknown:
            raise InputError(f"Fields cannot be updated: {', '.join(unknown)}")
        if "name" in changes and not changes["name"]:
            raise InputError("Brand name must be non-empty")

        if changes:
            brand = await self.registry.save(brand.with_updates(**changes))
            logger.info(f"Updated brand {brand_id}: {', '.join(sorted(changes))}")

        if enabled is not None and enabled != brand.enabled:
            transition = await (self.enable(brand_id) if enabled else self.disable(brand_id))
            brand = transition.brand
        return brand

    async def enable(self, brand_id: str) -> BrandTransition:
        """Enable brand and send it ``registration.enabled`` with its secret.

        Raises:
            BrandNotFoundError: If the brand does not exist
            InputError: If the brand has no secret
        """
        brand = await self.registry.require(brand_id)
        if brand.enabled:
            return BrandTransition(brand=brand)
        if not brand.secret:
            raise InputError(f"Brand {brand_id} has no secret and cannot be enabled")

        enabled = await self.registry.save(brand.with_enabled())
        logger.info(f"Enabled brand {brand_id}")
        outcome = await self.engine.process_event(
            self.context.event_code(REGISTRATION_ENABLED),
            enabled,
            {
                "brandId": enabled.brand_id,
                "secret": enabled.secret,
                "enabled": True,
                "name": enabled.name,
                "endPointUrl": enabled.end_point_url,
                "enabledAt": enabled.enabled_at.isoformat() if enabled.enabled_at else None,
            },
        )
        return BrandTransition(brand=enabled, outcome=outcome)

    async def disable(self, brand_id: str) -> BrandTransition:
        """Disable brand and notify it with ``registration.disabled``.

        Raises:
            BrandNotFoundError: If the brand does not exist
        """
        brand = await self.registry.require(brand_id)
        if not brand.enabled:
            return BrandTransition(brand=brand)

        disabled = await self.registry.save(brand.with_disabled())
        logger.info(f"Disabled brand {brand_id}")
        outcome = await self.engine.process_event(
            self.context.event_code(REGISTRATION_DISABLED),
            disabled,
            {
                "brandId": disabled.brand_id,
                "enabled": False,
                "name": disabled.name,
                "endPointUrl": disabled.end_point_url,
            },
        )
        return BrandTransition(brand=disabled, outcome=outcome)

    async def delete(self, brand_id: str) -> None:
        """Delete brand.

        Raises:
            BrandNotFoundError: If the brand does not exist
        """
        await self.registry.require(brand_id)
        await self.registry.delete(brand_id)
