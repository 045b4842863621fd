"""Tests for inbound brand event authentication."""

import pytest

from agencybridge.auth import authenticate_inbound, inbound_brand_id
from agencybridge.core.errors import AuthenticationError, InvalidEventError


def payload(event_type: str = "com.adobe.b2a.assetsync.update", console_id: str | None = "brandA") -> dict:
    runtime_info = {"consoleId": console_id} if console_id is not None else {}
    return {"type": event_type, "data": {"app_runtime_info": runtime_info}}


class TestInboundBrandId:
    """Test inbound_brand_id."""

    def test_reads_console_id(self) -> None:
        assert inbound_brand_id(payload()) == "brandA"

    @pytest.mark.parametrize(
        "body",
        [
            {"type": "x"},
            {"type": "x", "data": "not-a-dict"},
            {"type": "x", "data": {}},
            {"type": "x", "data": {"app_runtime_info": {}}},
        ],
    )
    def test_invalid_payloads(self, body) -> None:
        with pytest.raises(InvalidEventError):
            inbound_brand_id(body)


class TestAuthenticateInbound:
    """Test authenticate_inbound."""

    @pytest.mark.asyncio
    async def test_valid_secret(self, registry, make_brand) -> None:
        brand = make_brand()
        await registry.save(brand)
        result = await authenticate_inbound(registry, {"X-A2B-Agency-Secret": "secret-brandA"}, payload())
        assert result == brand

    @pytest.mark.asyncio
    async def test_header_lookup_is_case_insensitive(self, registry, make_brand) -> None:
        await registry.save(make_brand())
        result = await authenticate_inbound(registry, {"x-a2b-agency-secret": "secret-brandA"}, payload())
        assert result is not None

    @pytest.mark.asyncio
    async def test_missing_header(self, registry, make_brand) -> None:
        await registry.save(make_brand())
        with pytest.raises(AuthenticationError, match="Missing X-A2B-Agency-Secret header") as exc_info:
            await authenticate_inbound(registry, {}, payload())
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_brand(self, registry) -> None:
        with pytest.raises(AuthenticationError, match="Brand not found"):
            await authenticate_inbound(registry, {"X-A2B-Agency-Secret": "anything"}, payload())

    @pytest.mark.asyncio
    async def test_wrong_secret(self, registry, make_brand) -> None:
        await registry.save(make_brand())
        with pytest.raises(AuthenticationError, match="Invalid agency secret"):
            await authenticate_inbound(registry, {"X-A2B-Agency-Secret": "secret-brandB"}, payload())

    @pytest.mark.asyncio
    async def test_registration_events_skip_check(self, registry) -> None:
        result = await authenticate_inbound(registry, {}, payload("com.adobe.b2a.registration.new"))
        assert result is None

    @pytest.mark.asyncio
    async def test_registration_events_still_need_brand_id(self, registry) -> None:
        with pytest.raises(InvalidEventError):
            await authenticate_inbound(registry, {}, payload("com.adobe.b2a.registration.new", console_id=None))
