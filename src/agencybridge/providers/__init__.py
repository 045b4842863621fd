"""Provider interfaces and implementations."""

from agencybridge.providers.aem_provider import (
    AssetMetadataProvider,
    HttpAssetMetadataProvider,
    MockAssetMetadataProvider,
)

__all__ = [
    "AssetMetadataProvider",
    "HttpAssetMetadataProvider",
    "MockAssetMetadataProvider",
]
