"""Adobe product event definitions.

Product events are emitted by Adobe products (AEM Assets) and consumed by the
agency; their codes are fixed and not namespace-qualified.
"""

from collections import Counter
from dataclasses import dataclass
from functools import lru_cache

from agencybridge.contracts.enums import EventCategory
from agencybridge.core.errors import ProductEventNotFoundError

AEM_ASSET_METADATA_UPDATED = "aem.assets.asset.metadata_updated"
AEM_ASSET_PROCESSING_COMPLETED = "aem.assets.asset.processing_completed"


@dataclass(frozen=True)
class ProductEventDefinition:
    """Static description of one product event."""

    code: str
    name: str
    description: str
    required_fields: tuple[str, ...]
    handler_name: str
    category: EventCategory = EventCategory.PRODUCT
    version: str = "1.0.0"
    call_blocking: bool = True

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "category": self.category.value,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "requiredFields": list(self.required_fields),
            "handlerActionName": self.handler_name,
            "callBlocking": self.call_blocking,
        }


PRODUCT_EVENT_DEFINITIONS: tuple[ProductEventDefinition, ...] = (
    ProductEventDefinition(
        code=AEM_ASSET_METADATA_UPDATED,
        name="AEM Asset Metadata Updated",
        description="Emitted when the metadata of an AEM asset is updated",
        required_fields=("assetId", "repositoryMetadata"),
        handler_name="agency-assetsync-internal-handler-metadata-updated",
    ),
    ProductEventDefinition(
        code=AEM_ASSET_PROCESSING_COMPLETED,
        name="AEM Assets Processing Completed",
        description="Emitted when the processing of an AEM asset is completed",
        required_fields=("assetId", "repositoryMetadata"),
        handler_name="agency-assetsync-internal-handler-process-complete",
    ),
)


class ProductEventRegistry:
    """Product event definitions keyed by event code."""

    def __init__(self, definitions: tuple[ProductEventDefinition, ...] = PRODUCT_EVENT_DEFINITIONS) -> None:
        self._by_code = {d.code: d for d in definitions}

    def get(self, event_code: str) -> ProductEventDefinition:
        """Return the definition for ``event_code``.

        Raises:
            ProductEventNotFoundError: If the code is not registered; carries
                the available codes
        """
        definition = self._by_code.get(event_code)
        if definition is None:
            raise ProductEventNotFoundError(event_code, self.codes())
        return definition

    def is_valid(self, event_code: str) -> bool:
        return event_code in self._by_code

    def codes(self) -> list[str]:
        return list(self._by_code)

    def all(self) -> list[ProductEventDefinition]:
        return list(self._by_code.values())

    def count_by_category(self) -> dict[str, int]:
        return dict(Counter(d.category.value for d in self._by_code.values()))


@lru_cache()
def get_product_event_registry() -> ProductEventRegistry:
    return ProductEventRegistry()
