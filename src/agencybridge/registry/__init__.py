"""Brand registry and global routing rules."""

from agencybridge.registry.brand_registry import BrandRegistry
from agencybridge.registry.global_rules import GlobalRulesRegistry

__all__ = ["BrandRegistry", "GlobalRulesRegistry"]
