"""Brand registry with two-tier persistence and a secret index.

Invariants:
- Reads go cache first, then durable store, repairing the cache on a durable hit
- Writes must reach the durable store; cache write failures are only logged
- ``secret-index:<secret>`` points at the brand currently holding that secret;
  the entry for a replaced secret is removed on save
- Rule mutations are read-modify-write over the whole Brand record with no
  lock, so concurrent edits are last-writer-wins unless ``optimistic`` is set
"""

import json
import logging
from datetime import datetime

from pydantic import ValidationError

from agencybridge.contracts.models import Brand, RoutingRule, utcnow
from agencybridge.core.errors import (
    BrandNotFoundError,
    ConcurrentModificationError,
    PersistenceError,
    RuleConflictError,
    RuleNotFoundError,
)
from agencybridge.stores.base import BRAND_PREFIX, SECRET_INDEX_PREFIX, brand_key, secret_index_key
from agencybridge.stores.tiered import TieredStore

logger = logging.getLogger(__name__)


class BrandRegistry:
    """Owns persistence of Brand entities."""

    def __init__(self, store: TieredStore, optimistic: bool = False) -> None:
        """Initialize registry.

        Args:
            store: Tiered cache/durable store
            optimistic: Use compare-and-swap on ``updatedAt`` for rule mutations
        """
        self.store = store
        self.optimistic = optimistic

    @staticmethod
    def _parse(key: str, raw: str) -> Brand | None:
        try:
            return Brand.from_storage(raw)
        except ValidationError as e:
            logger.warning(f"Skipping malformed brand record {key}: {e.error_count()} validation errors")
            return None

    async def get(self, brand_id: str) -> Brand | None:
        """Get brand by id, or None if neither store has it."""
        key = brand_key(brand_id)
        try:
            raw = await self.store.get(key)
        except PersistenceError:
            logger.error(f"Brand {brand_id} unavailable from durable store, treating as not found")
            return None
        if raw is None:
            logger.debug(f"Brand {brand_id} not found in cache or durable store")
            return None
        return self._parse(key, raw)

    async def require(self, brand_id: str) -> Brand:
        """Get brand by id.

        Raises:
            BrandNotFoundError: If the brand does not exist
        """
        brand = await self.get(brand_id)
        if brand is None:
            raise BrandNotFoundError(brand_id)
        return brand

    async def save(self, brand: Brand, expected_updated_at: datetime | None = None) -> Brand:
        """Persist brand and update the secret index.

        Args:
            brand: Brand snapshot to write
            expected_updated_at: If given, write only when the stored brand's
                ``updatedAt`` still equals this value

        Returns:
            The saved brand

        Raises:
            PersistenceError: If the durable store write fails
            ConcurrentModificationError: If the compare-and-swap check fails
        """
        key = brand_key(brand.brand_id)
        if expected_updated_at is not None:
            # Compare-and-swap runs against the durable tier
            previous_raw = await self.store.durable_get(key)
        else:
            previous_raw = await self.store.get(key)
        previous = self._parse(key, previous_raw) if previous_raw is not None else None

        if expected_updated_at is not None:
            if previous is None or previous.updated_at != expected_updated_at:
                await self.store.invalidate(key)
                raise ConcurrentModificationError(f"Brand {brand.brand_id} was modified concurrently")
            if not await self.store.put_if(key, brand.to_storage(), previous_raw):
                raise ConcurrentModificationError(f"Brand {brand.brand_id} was modified concurrently")
        else:
            await self.store.put(key, brand.to_storage())

        if brand.secret:
            await self.store.put(
                secret_index_key(brand.secret),
                json.dumps({"brandId": brand.brand_id}),
            )
        if previous is not None and previous.secret and previous.secret != brand.secret:
            await self.store.delete(secret_index_key(previous.secret))

        logger.debug(f"Saved brand {brand.brand_id}")
        return brand

    async def delete(self, brand_id: str) -> None:
        """Best-effort delete of the brand and its secret index entry."""
        brand = await self.get(brand_id)
        await self.store.delete(brand_key(brand_id))
        if brand is None:
            logger.info(f"Brand {brand_id} not resolved before delete, skipping secret index cleanup")
            return
        if brand.secret:
            await self.store.delete(secret_index_key(brand.secret))
        logger.info(f"Deleted brand {brand_id}")

    async def delete_all(self) -> int:
        """Delete every brand, then any secret index entries left behind.

        Returns:
            Number of brand records found in the durable store

        Raises:
            PersistenceError: If the durable store cannot be listed
        """
        keys = [key for key, _ in await self.store.durable_items(BRAND_PREFIX)]
        for key in keys:
            await self.delete(key[len(BRAND_PREFIX):])

        cached = await self.store.cached_keys(BRAND_PREFIX) or set()
        for key in cached:
            await self.store.invalidate(key)
        for key, _ in await self.store.durable_items(SECRET_INDEX_PREFIX):
            await self.store.delete(key)

        logger.info(f"Deleted all brands ({len(keys)} records)")
        return len(keys)

    async def get_by_secret(self, secret: str | None) -> Brand | None:
        """Look up the brand holding ``secret`` via the secret index.

        A stale index entry whose brand no longer holds the secret is treated
        as not found.
        """
        if not secret:
            return None
        key = secret_index_key(secret)
        try:
            raw = await self.store.get(key)
        except PersistenceError:
            logger.error("Secret index unavailable from durable store, treating as not found")
            return None
        if raw is None:
            return None

        try:
            brand_id = json.loads(raw).get("brandId")
        except (json.JSONDecodeError, AttributeError):
            logger.warning("Skipping malformed secret index entry")
            return None
        if not brand_id:
            return None

        brand = await self.get(brand_id)
        if brand is None or not brand.secret_matches(secret):
            logger.warning(f"Stale secret index entry for brand {brand_id}")
            return None
        return brand

    async def list_brands(self) -> list[Brand]:
        """Enumerate all brands from the durable store.

        Entries missing from the cache are written back; malformed entries are
        skipped and logged.

        Raises:
            PersistenceError: If the durable store cannot be listed
        """
        items = await self.store.durable_items(BRAND_PREFIX)
        cached = await self.store.cached_keys(BRAND_PREFIX)
        brands: list[Brand] = []
        for key, raw in items:
            brand = self._parse(key, raw)
            if brand is None:
                continue
            if cached is not None and key not in cached:
                await self.store.repair(key, raw)
            brands.append(brand)
        return brands

    async def get_rules(self, brand_id: str, event_code: str) -> list[RoutingRule]:
        brand = await self.require(brand_id)
        return brand.rules_for(event_code)

    async def _save_rules(self, brand: Brand, event_code: str, rules: list[RoutingRule]) -> Brand:
        updated = brand.with_rules(event_code, rules)
        expected = brand.updated_at if self.optimistic else None
        return await self.save(updated, expected_updated_at=expected)

    async def add_rule(self, brand_id: str, event_code: str, rule: RoutingRule) -> RoutingRule:
        """Append a rule for ``event_code``.

        Raises:
            BrandNotFoundError: If the brand does not exist
            RuleConflictError: If a rule with the same id exists for the event code
        """
        brand = await self.require(brand_id)
        rules = brand.rules_for(event_code)
        if any(r.id == rule.id for r in rules):
            raise RuleConflictError(f"brand {brand_id}", event_code, rule.id)
        rules.append(rule)
        await self._save_rules(brand, event_code, rules)
        logger.info(f"Added routing rule {rule.id} for brand {brand_id} event {event_code}")
        return rule

    async def update_rule(
        self, brand_id: str, event_code: str, rule_id: str, rule: RoutingRule
    ) -> RoutingRule:
        """Replace rule ``rule_id``, keeping its id and creation time.

        Raises:
            BrandNotFoundError: If the brand does not exist
            RuleNotFoundError: If no rule has ``rule_id``
        """
        brand = await self.require(brand_id)
        rules = brand.rules_for(event_code)
        for i, existing in enumerate(rules):
            if existing.id == rule_id:
                updated = rule.model_copy(
                    update={"id": rule_id, "created_at": existing.created_at, "updated_at": utcnow()}
                )
                rules[i] = updated
                await self._save_rules(brand, event_code, rules)
                logger.info(f"Updated routing rule {rule_id} for brand {brand_id} event {event_code}")
                return updated
        raise RuleNotFoundError(f"brand {brand_id}", event_code, rule_id)

    async def delete_rule(self, brand_id: str, event_code: str, rule_id: str) -> None:
        """Remove rule ``rule_id``.

        Raises:
            BrandNotFoundError: If the brand does not exist
            RuleNotFoundError: If no rule has ``rule_id``
        """
        brand = await self.require(brand_id)
        rules = brand.rules_for(event_code)
        remaining = [r for r in rules if r.id != rule_id]
        if len(remaining) == len(rules):
            raise RuleNotFoundError(f"brand {brand_id}", event_code, rule_id)
        await self._save_rules(brand, event_code, remaining)
        logger.info(f"Deleted routing rule {rule_id} for brand {brand_id} event {event_code}")
