"""Inbound authentication."""

from agencybridge.auth.inbound import AGENCY_SECRET_HEADER, authenticate_inbound, inbound_brand_id

__all__ = ["AGENCY_SECRET_HEADER", "authenticate_inbound", "inbound_brand_id"]
