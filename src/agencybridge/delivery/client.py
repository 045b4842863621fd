"""Authenticated HTTP delivery of envelopes to brand endpoints."""

import json
import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from agencybridge.contracts.models import Brand
from agencybridge.core.errors import DeliveryError
from agencybridge.events.constants import JSON_CONTENT_TYPE
from agencybridge.events.envelope import EventEnvelope

logger = logging.getLogger(__name__)

MAX_ERROR_BODY_CHARS = 2000


class BrandDeliveryResponse(BaseModel):
    """Accepted brand endpoint response."""

    event_type: str
    routing_result: dict[str, Any] = Field(default_factory=dict)
    status_code: int = 200

    model_config = {"extra": "forbid"}


class BrandDeliveryClient:
    """POSTs envelopes to a brand's endpoint and validates the reply.

    Accepts an injected ``httpx.AsyncClient`` so tests can mount a
    ``MockTransport``; without one a client is opened per delivery.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
        agency_id: str | None = None,
    ) -> None:
        self.http_client = http_client
        self.timeout_seconds = timeout_seconds
        self.agency_id = agency_id

    def build_headers(self, brand: Brand) -> dict[str, str]:
        headers = {
            "Content-Type": JSON_CONTENT_TYPE,
            "X-Brand-Id": brand.brand_id,
            "X-Brand-Secret": brand.secret,
        }
        if self.agency_id:
            headers["X-Agency-Id"] = self.agency_id
        return headers

    async def deliver(self, brand: Brand, envelope: EventEnvelope) -> BrandDeliveryResponse:
        """Deliver ``envelope`` to ``brand.end_point_url``.

        Raises:
            MissingRequiredFieldsError: If the envelope is not valid
            DeliveryError: On transport errors, non-2xx status, non-JSON body
                or a body without string ``eventType`` and object ``routingResult``
        """
        envelope.ensure_valid()
        endpoint = brand.end_point_url
        body = envelope.to_json()
        headers = self.build_headers(brand)

        try:
            if self.http_client is not None:
                response = await self.http_client.post(
                    endpoint, content=body, headers=headers, timeout=self.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(endpoint, content=body, headers=headers)
        except httpx.TimeoutException as e:
            raise DeliveryError(
                f"Delivery to brand {brand.brand_id} timed out after {self.timeout_seconds}s",
                endpoint=endpoint,
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(
                f"Delivery to brand {brand.brand_id} failed: {type(e).__name__}: {e}",
                endpoint=endpoint,
            ) from e

        text = response.text[:MAX_ERROR_BODY_CHARS]
        if not response.is_success:
            raise DeliveryError(
                f"Brand {brand.brand_id} responded with HTTP {response.status_code}",
                endpoint=endpoint,
                status_code_received=response.status_code,
                response_body=text,
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise DeliveryError(
                f"Brand {brand.brand_id} returned a non-JSON body",
                endpoint=endpoint,
                status_code_received=response.status_code,
                response_body=text,
            ) from e

        if (
            not isinstance(payload, dict)
            or not isinstance(payload.get("eventType"), str)
            or not isinstance(payload.get("routingResult"), dict)
        ):
            raise DeliveryError(
                f"Brand {brand.brand_id} returned an unexpected response shape",
                endpoint=endpoint,
                status_code_received=response.status_code,
                response_body=text,
            )

        logger.info(f"Delivered {envelope.type} to brand {brand.brand_id} (HTTP {response.status_code})")
        return BrandDeliveryResponse(
            event_type=payload["eventType"],
            routing_result=payload["routingResult"],
            status_code=response.status_code,
        )
