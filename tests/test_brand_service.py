"""Tests for BrandService registration lifecycle."""

import json
import logging

import httpx
import pytest

from agencybridge.contracts.enums import DeliveryStatus
from agencybridge.core.errors import BrandNotFoundError, ImmutableFieldError, InputError
from agencybridge.delivery import BrandDeliveryClient, DeliveryEngine
from agencybridge.events import RecordingEventBus
from agencybridge.services import SECRET_LENGTH, BrandService, generate_secret

ENDPOINT = "https://brand.example.com/events"


class Recorder:
    def __init__(self) -> None:
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.bodies.append(body)
        return httpx.Response(200, json={"eventType": body["type"], "routingResult": {}})


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def make_service(registry, bus, context, ledger, recorder) -> BrandService:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    engine = DeliveryEngine(registry, BrandDeliveryClient(http_client=http_client), bus, context, ledger=ledger)
    return BrandService(registry, engine, context)


@pytest.fixture
def service(registry, bus, context, ledger, recorder) -> BrandService:
    return make_service(registry, bus, context, ledger, recorder)


def test_generate_secret() -> None:
    secret = generate_secret()
    assert len(secret) == SECRET_LENGTH
    assert secret != generate_secret()


class TestRegister:
    """Test BrandService.register."""

    @pytest.mark.asyncio
    async def test_register_creates_disabled_brand(self, service, registry, bus, recorder) -> None:
        brand = await service.register("Acme", ENDPOINT, logo="https://cdn.example.com/acme.png")

        assert brand.enabled is False
        assert brand.enabled_at is None
        assert len(brand.secret) == SECRET_LENGTH
        assert await registry.get(brand.brand_id) == brand
        assert await registry.get_by_secret(brand.secret) == brand

        assert len(bus.published) == 1
        published = bus.published[0]
        assert published["type"] == "com.adobe.a2b.registration.received"
        assert published["data"]["brandId"] == brand.brand_id
        assert "secret" not in published["data"]
        assert recorder.bodies == []

    @pytest.mark.asyncio
    async def test_register_survives_bus_failure(self, registry, context, ledger, recorder, caplog) -> None:
        caplog.set_level(logging.WARNING)
        service = make_service(registry, RecordingEventBus(fail=True), context, ledger, recorder)
        brand = await service.register("Acme", ENDPOINT)
        assert await registry.get(brand.brand_id) is not None
        assert any("was not published" in r.message for r in caplog.records)


class TestEnableDisable:
    """Test enable/disable transitions and notifications."""

    @pytest.mark.asyncio
    async def test_enable_sends_secret_to_brand(self, service, recorder) -> None:
        brand = await service.register("Acme", ENDPOINT)
        transition = await service.enable(brand.brand_id)

        assert transition.brand.enabled is True
        assert transition.brand.enabled_at is not None
        assert transition.outcome.status == DeliveryStatus.DELIVERED
        body = recorder.bodies[0]
        assert body["type"] == "com.adobe.a2b.registration.enabled"
        assert body["data"]["secret"] == brand.secret
        assert body["data"]["enabled"] is True

    @pytest.mark.asyncio
    async def test_enable_twice_is_noop(self, service, recorder) -> None:
        brand = await service.register("Acme", ENDPOINT)
        await service.enable(brand.brand_id)
        again = await service.enable(brand.brand_id)
        assert again.outcome is None
        assert len(recorder.bodies) == 1

    @pytest.mark.asyncio
    async def test_disable_notifies_disabled_brand(self, service, registry, recorder) -> None:
        brand = await service.register("Acme", ENDPOINT)
        await service.enable(brand.brand_id)
        transition = await service.disable(brand.brand_id)

        assert transition.brand.enabled is False
        assert transition.brand.enabled_at is None
        assert transition.outcome.status == DeliveryStatus.DELIVERED
        assert recorder.bodies[-1]["type"] == "com.adobe.a2b.registration.disabled"
        assert (await registry.get(brand.brand_id)).enabled is False

    @pytest.mark.asyncio
    async def test_disable_already_disabled(self, service, recorder) -> None:
        brand = await service.register("Acme", ENDPOINT)
        transition = await service.disable(brand.brand_id)
        assert transition.outcome is None
        assert recorder.bodies == []

    @pytest.mark.asyncio
    async def test_enable_unknown_brand(self, service) -> None:
        with pytest.raises(BrandNotFoundError):
            await service.enable("ghost")

    @pytest.mark.asyncio
    async def test_enable_brand_without_secret(self, service, registry, make_brand) -> None:
        await registry.save(make_brand("brandA", enabled=False, secret=""))
        with pytest.raises(InputError):
            await service.enable("brandA")


class TestUpdate:
    """Test BrandService.update."""

    @pytest.mark.asyncio
    async def test_update_mutable_fields(self, service) -> None:
        brand = await service.register("Acme", ENDPOINT)
        updated = await service.update(brand.brand_id, {"name": "Acme Corp", "ims_org_id": "org@AdobeOrg"})
        assert updated.name == "Acme Corp"
        assert updated.ims_org_id == "org@AdobeOrg"
        assert updated.secret == brand.secret
        assert updated.created_at == brand.created_at

    @pytest.mark.asyncio
    async def test_endpoint_is_immutable(self, service) -> None:
        brand = await service.register("Acme", ENDPOINT)
        with pytest.raises(ImmutableFieldError):
            await service.update(brand.brand_id, {"end_point_url": "https://other.example.com"})

    @pytest.mark.asyncio
    async def test_same_endpoint_is_accepted(self, service) -> None:
        brand = await service.register("Acme", ENDPOINT)
        updated = await service.update(brand.brand_id, {"end_point_url": ENDPOINT, "name": "Renamed"})
        assert updated.end_point_url == ENDPOINT
        assert updated.name == "Renamed"

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, service) -> None:
        brand = await service.register("Acme", ENDPOINT)
        with pytest.raises(InputError):
            await service.update(brand.brand_id, {"secret": "mine"})

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, service) -> None:
        brand = await service.register("Acme", ENDPOINT)
        with pytest.raises(InputError):
            await service.update(brand.brand_id, {"name": ""})

    @pytest.mark.asyncio
    async def test_enabled_flag_goes_through_transition(self, service, recorder) -> None:
        brand = await service.register("Acme", ENDPOINT)
        updated = await service.update(brand.brand_id, {"enabled": True})
        assert updated.enabled is True
        assert recorder.bodies[0]["type"] == "com.adobe.a2b.registration.enabled"


class TestDelete:
    """Test BrandService.delete."""

    @pytest.mark.asyncio
    async def test_delete(self, service, registry) -> None:
        brand = await service.register("Acme", ENDPOINT)
        await service.delete(brand.brand_id)
        assert await registry.get(brand.brand_id) is None
        assert await registry.get_by_secret(brand.secret) is None

    @pytest.mark.asyncio
    async def test_delete_unknown(self, service) -> None:
        with pytest.raises(BrandNotFoundError):
            await service.delete("ghost")
