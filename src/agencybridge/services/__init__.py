"""Application services."""

from agencybridge.services.brands import SECRET_LENGTH, BrandService, BrandTransition, generate_secret

__all__ = ["SECRET_LENGTH", "BrandService", "BrandTransition", "generate_secret"]
