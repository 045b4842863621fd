"""Tests for the brand and event API routes."""

import json

import httpx
import pytest
from httpx import ASGITransport

from agencybridge.api.deps import (
    reset_dependencies,
    set_event_bus,
    set_global_rules,
    set_http_client,
    set_metadata_provider,
    set_registry,
)
from agencybridge.main import app
from agencybridge.providers import MockAssetMetadataProvider
from agencybridge.registry import GlobalRulesRegistry
from agencybridge.stores import brand_key

NEW_CODE = "com.adobe.a2b.assetsync.new"
PRODUCT_CODE = "aem.assets.asset.metadata_updated"


class BrandEndpoint:
    def __init__(self) -> None:
        self.bodies: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.bodies.append(body)
        return httpx.Response(200, json={"eventType": body["type"], "routingResult": {}})


@pytest.fixture
def endpoint() -> BrandEndpoint:
    return BrandEndpoint()


@pytest.fixture
def provider() -> MockAssetMetadataProvider:
    return MockAssetMetadataProvider()


@pytest.fixture
def api(registry, store, bus, endpoint, provider):
    """Wire in-memory dependencies into the app and reset them afterwards."""
    set_registry(registry)
    set_global_rules(GlobalRulesRegistry(store))
    set_event_bus(bus)
    set_http_client(httpx.AsyncClient(transport=httpx.MockTransport(endpoint)))
    set_metadata_provider(provider)
    yield
    reset_dependencies()


@pytest.fixture
async def client(api):
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


class TestBrandRoutes:
    """Test brand CRUD routes."""

    @pytest.mark.asyncio
    async def test_register_and_get(self, client, bus) -> None:
        response = await client.post(
            "/api/v1/brands", json={"name": "Acme", "endPointUrl": "https://acme.example.com/events"}
        )
        assert response.status_code == 201
        data = response.json()
        assert data["enabled"] is False
        assert "secret" not in data
        brand_id = data["brandId"]
        assert brand_id in data["message"]
        assert bus.published[0]["type"] == "com.adobe.a2b.registration.received"

        response = await client.get(f"/api/v1/brands/{brand_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Acme"

        response = await client.get("/api/v1/brands")
        assert [b["brandId"] for b in response.json()] == [brand_id]

    @pytest.mark.asyncio
    async def test_register_rejects_missing_fields(self, client) -> None:
        response = await client.post("/api/v1/brands", json={"name": "Acme"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_unknown_brand(self, client) -> None:
        response = await client.get("/api/v1/brands/ghost")
        assert response.status_code == 404
        assert response.json()["error"] == "BrandNotFoundError"

    @pytest.mark.asyncio
    async def test_patch_enable_sends_secret(self, client, registry, endpoint) -> None:
        created = (
            await client.post("/api/v1/brands", json={"name": "Acme", "endPointUrl": "https://acme.example.com/e"})
        ).json()
        response = await client.patch(f"/api/v1/brands/{created['brandId']}", json={"enabled": True})
        assert response.status_code == 200
        assert response.json()["enabled"] is True
        assert response.json()["enabledAt"] is not None
        stored = await registry.get(created["brandId"])
        assert endpoint.bodies[0]["data"]["secret"] == stored.secret

    @pytest.mark.asyncio
    async def test_patch_endpoint_is_immutable(self, client, registry, make_brand) -> None:
        await registry.save(make_brand("brandA"))
        response = await client.patch("/api/v1/brands/brandA", json={"endPointUrl": "https://other.example.com"})
        assert response.status_code == 400
        assert response.json()["error"] == "ImmutableFieldError"

    @pytest.mark.asyncio
    async def test_delete(self, client, registry, make_brand, durable) -> None:
        await registry.save(make_brand("brandA"))
        response = await client.delete("/api/v1/brands/brandA")
        assert response.status_code == 200
        assert response.json()["brandId"] == "brandA"
        assert brand_key("brandA") not in durable.data
        response = await client.delete("/api/v1/brands/brandA")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_durable_store_failure_maps_to_503(self, client, registry, failing_store) -> None:
        registry.store.durable = failing_store
        response = await client.get("/api/v1/brands")
        assert response.status_code == 503


class TestRuleRoutes:
    """Test routing rule routes."""

    @pytest.mark.asyncio
    async def test_rule_lifecycle(self, client, registry, make_brand) -> None:
        await registry.save(make_brand("brandA"))
        base = f"/api/v1/brands/brandA/rules/{NEW_CODE}"
        rule = {
            "id": "r1",
            "name": "Hero only",
            "priority": 10,
            "conditions": [{"field": "asset_path", "operator": "contains", "value": "hero"}],
            "actions": [{"type": "route"}],
        }

        response = await client.post(base, json=rule)
        assert response.status_code == 201
        assert response.json()["id"] == "r1"

        response = await client.post(base, json=rule)
        assert response.status_code == 409

        response = await client.put(f"{base}/r1", json={"name": "Renamed", "priority": 20})
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["id"] == "r1"

        response = await client.get(base)
        assert [r["priority"] for r in response.json()] == [20]

        response = await client.delete(f"{base}/r1")
        assert response.status_code == 200
        response = await client.delete(f"{base}/r1")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_generated_rule_id(self, client, registry, make_brand) -> None:
        await registry.save(make_brand("brandA"))
        response = await client.post(f"/api/v1/brands/brandA/rules/{NEW_CODE}", json={"name": "No id"})
        assert response.status_code == 201
        assert response.json()["id"]

    @pytest.mark.asyncio
    async def test_unknown_event_code(self, client, registry, make_brand) -> None:
        await registry.save(make_brand("brandA"))
        response = await client.get("/api/v1/brands/brandA/rules/com.adobe.a2b.nope")
        assert response.status_code == 400
        assert response.json()["error"] == "UnknownEventCodeError"


class TestEventRoutes:
    """Test event routes."""

    @pytest.mark.asyncio
    async def test_list_event_definitions(self, client) -> None:
        response = await client.get("/api/v1/events")
        assert response.status_code == 200
        assert NEW_CODE in [d["code"] for d in response.json()]

        response = await client.get("/api/v1/events", params={"category": "registration"})
        assert {d["category"] for d in response.json()} == {"registration"}

    @pytest.mark.asyncio
    async def test_asset_sync_fan_out(self, client, registry, make_brand, endpoint) -> None:
        await registry.save(make_brand("brandA"))
        response = await client.post(
            "/api/v1/events/asset-sync",
            json={
                "asset_id": "uuid-1",
                "asset_path": "/content/dam/a.jpg",
                "metadata": {"a2b__sync_on_change": True, "a2b__customers": "brandA,brandB"},
                "presigned_url": "https://s3.example.com/a.jpg",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["event_type"] == NEW_CODE
        assert data["delivered_count"] == 1
        assert [b["status"] for b in data["brands"]] == ["delivered", "skipped_not_found"]
        assert len(endpoint.bodies) == 1

    @pytest.mark.asyncio
    async def test_asset_sync_bad_customers(self, client) -> None:
        response = await client.post(
            "/api/v1/events/asset-sync",
            json={
                "asset_id": "uuid-1",
                "asset_path": "/p",
                "metadata": {"a2b__sync_on_change": True, "a2b__customers": 7},
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "CustomersFormatError"

    @pytest.mark.asyncio
    async def test_aem_asset_uses_provider(self, client, registry, make_brand, provider, endpoint) -> None:
        await registry.save(make_brand("brandA"))
        provider.set_document_for_path(
            "/content/dam/a.jpg",
            {
                "jcr:uuid": "uuid-9",
                "jcr:content": {"metadata": {"a2b__sync_on_change": "true", "a2b__customers": ["brandA"]}},
            },
        )
        response = await client.post(
            "/api/v1/events/aem-asset",
            json={"host": "author.example.com", "path": "/content/dam/a.jpg", "presignedUrl": "https://s3/x"},
        )
        assert response.status_code == 200
        assert response.json()["asset_id"] == "uuid-9"
        assert provider.get_call_count("/content/dam/a.jpg") == 1
        assert endpoint.bodies[0]["data"]["asset_presigned_url"] == "https://s3/x"

    @pytest.mark.asyncio
    async def test_inbound_brand_event(self, client, registry, make_brand) -> None:
        await registry.save(make_brand("brandA"))
        body = {"type": "com.adobe.b2a.assetsync.update", "data": {"app_runtime_info": {"consoleId": "brandA"}}}

        response = await client.post("/api/v1/events/brand", json=body)
        assert response.status_code == 401

        response = await client.post(
            "/api/v1/events/brand", json=body, headers={"X-A2B-Agency-Secret": "wrong"}
        )
        assert response.status_code == 401

        response = await client.post(
            "/api/v1/events/brand", json=body, headers={"X-A2B-Agency-Secret": "secret-brandA"}
        )
        assert response.status_code == 200
        assert response.json() == {
            "status": "accepted",
            "type": "com.adobe.b2a.assetsync.update",
            "brandId": "brandA",
            "authenticated": True,
        }

    @pytest.mark.asyncio
    async def test_inbound_brand_event_missing_runtime_info(self, client) -> None:
        response = await client.post("/api/v1/events/brand", json={"type": "x", "data": {}})
        assert response.status_code == 400


class TestDeleteAllBrands:
    """Test the delete-all route."""

    @pytest.mark.asyncio
    async def test_delete_all(self, client, registry, make_brand, durable) -> None:
        await registry.save(make_brand("brandA"))
        await registry.save(make_brand("brandB"))

        response = await client.delete("/api/v1/brands")

        assert response.status_code == 200
        assert response.json() == {"message": "all brands deleted successfully", "deleted": 2}
        assert durable.data == {}
        assert (await client.get("/api/v1/brands")).json() == []


class TestProductEventRoutes:
    """Test product event definition routes."""

    @pytest.mark.asyncio
    async def test_list(self, client) -> None:
        response = await client.get("/api/v1/product-events")
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert data["countByCategory"] == {"product": 2}
        assert PRODUCT_CODE in [e["code"] for e in data["events"]]

    @pytest.mark.asyncio
    async def test_get(self, client) -> None:
        response = await client.get(f"/api/v1/product-events/{PRODUCT_CODE}")
        assert response.status_code == 200
        assert response.json()["event"]["name"] == "AEM Asset Metadata Updated"

    @pytest.mark.asyncio
    async def test_get_unknown(self, client) -> None:
        response = await client.get("/api/v1/product-events/aem.assets.asset.deleted")
        assert response.status_code == 404
        assert PRODUCT_CODE in response.json()["availableEventCodes"]


class TestGlobalRuleRoutes:
    """Test product and app routing rule routes."""

    @pytest.mark.asyncio
    async def test_product_rule_lifecycle(self, client) -> None:
        base = f"/api/v1/routing-rules/product/{PRODUCT_CODE}"
        rule = {
            "id": "dam",
            "name": "DAM only",
            "priority": 10,
            "conditions": [{"field": "repositoryMetadata.path", "operator": "startsWith", "value": "/content/dam"}],
            "actions": [{"type": "route", "target": "asset-sync"}],
        }

        response = await client.post(base, json=rule)
        assert response.status_code == 201
        response = await client.post(base, json=rule)
        assert response.status_code == 409

        response = await client.get("/api/v1/routing-rules/product")
        assert response.json() == {"scope": "product", "eventCodes": [PRODUCT_CODE]}

        response = await client.post(f"{base}/evaluate", json={"repositoryMetadata": {"path": "/content/dam/a.jpg"}})
        assert response.status_code == 200
        assert response.json()[0]["matched"] is True

        response = await client.put(f"{base}/dam", json={"name": "Renamed", "priority": 20})
        assert response.status_code == 200
        assert (await client.get(f"{base}/dam")).json()["name"] == "Renamed"

        response = await client.delete(f"{base}/dam")
        assert response.status_code == 200
        response = await client.get(f"{base}/dam")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_app_rules_use_app_event_codes(self, client) -> None:
        response = await client.post(f"/api/v1/routing-rules/app/{NEW_CODE}", json={"name": "Any"})
        assert response.status_code == 201
        assert [r["name"] for r in (await client.get(f"/api/v1/routing-rules/app/{NEW_CODE}")).json()] == ["Any"]

        response = await client.get(f"/api/v1/routing-rules/app/{PRODUCT_CODE}")
        assert response.status_code == 400
        assert response.json()["error"] == "UnknownEventCodeError"

    @pytest.mark.asyncio
    async def test_unknown_scope(self, client) -> None:
        response = await client.get(f"/api/v1/routing-rules/brand/{NEW_CODE}")
        assert response.status_code == 422
