"""
Integration tests for the HTTP adapter.

Tests cover:
- Create routes returning 201 with the stored record
- Error mapping (400 / 404) and the error body shape
- Status, maintenance and temperature routes
- Analytics and health routes
"""

import tempfile

import pytest
from aiohttp import test_utils

from backend.abattoir_server.api import create_http_app, error_status
from backend.abattoir_server.config import StorageConfig
from backend.abattoir_server.context import Ledger
from backend.abattoir_server.errors import (
    InvalidPayloadError,
    LedgerError,
    NotFoundError,
    RecordTooLargeError,
    StorageError,
)

HOUSE = {
    "name": "North Abattoir",
    "location": "Eldoret",
    "contact": "+254700000000",
    "email": "ops@north.example",
}


class TestErrorStatus:
    def test_mapping(self):
        assert error_status(InvalidPayloadError("bad")) == 400
        assert error_status(RecordTooLargeError("animal", 600, 512)) == 400
        assert error_status(NotFoundError("gone", "animal", 1)) == 404
        assert error_status(StorageError("disk")) == 500
        assert error_status(LedgerError("other")) == 500


class TestHttpServer:
    """Tests for the aiohttp application."""

    @pytest.fixture
    def data_dir(self):
        """Create temporary data directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield tmpdir

    @pytest.fixture
    async def ledger(self, data_dir):
        storage = StorageConfig(data_dir=data_dir, wal_mode=False)
        async with Ledger(storage=storage) as ledger:
            yield ledger

    @pytest.fixture
    async def client(self, ledger):
        app = create_http_app(ledger)
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            yield client

    async def _create(self, client, path, body):
        resp = await client.post(path, json=body)
        assert resp.status == 201, await resp.text()
        return await resp.json()

    async def _sale(self, client):
        house = await self._create(client, "/v1/slaughterhouses", HOUSE)
        animal = await self._create(
            client,
            "/v1/animals",
            {"slaughterhouse_id": house["id"], "tag_number": "KE-1", "species": "cow"},
        )
        product = await self._create(
            client,
            "/v1/meat-products",
            {
                "animal_id": animal["id"],
                "slaughterhouse_id": house["id"],
                "product_type": "steak",
                "weight": 5,
                "price_per_kg": 20,
            },
        )
        return house, animal, product

    @pytest.mark.asyncio
    async def test_create_flow(self, client):
        house, animal, product = await self._sale(client)

        assert (house["id"], animal["id"], product["id"]) == (0, 1, 2)
        assert animal["status"] == "received"
        assert product["total_price"] == 100.0

    @pytest.mark.asyncio
    async def test_unknown_reference_is_404(self, client):
        resp = await client.post(
            "/v1/animals", json={"slaughterhouse_id": 5, "tag_number": "X", "species": "pig"}
        )

        assert resp.status == 404
        body = await resp.json()
        assert body["error_code"] == "NOT_FOUND"
        assert body["error"] == "Slaughterhouse not found"
        assert body["details"]["resource_id"] == 5

    @pytest.mark.asyncio
    async def test_invalid_payload_is_400(self, client):
        house = await self._create(client, "/v1/slaughterhouses", HOUSE)

        resp = await client.post(
            "/v1/expenses", json={"slaughterhouse_id": house["id"], "amount": -1}
        )

        assert resp.status == 400
        body = await resp.json()
        assert body["error_code"] == "INVALID_PAYLOAD"
        assert body["error"] == "Invalid expense amount"

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, client):
        resp = await client.post("/v1/slaughterhouses", json={"name": "Only a name"})

        assert resp.status == 400
        assert (await resp.json())["details"]["field"] == "contact"

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, client):
        resp = await client.post(
            "/v1/slaughterhouses", data="{oops", headers={"Content-Type": "application/json"}
        )

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_non_finite_json_is_400(self, client):
        """NaN and Infinity literals in a body are refused, not stored."""
        house, animal, _ = await self._sale(client)
        body = (
            '{"animal_id": %d, "slaughterhouse_id": %d, "product_type": "steak",'
            ' "weight": NaN, "price_per_kg": 5}' % (animal["id"], house["id"])
        )

        resp = await client.post(
            "/v1/meat-products", data=body, headers={"Content-Type": "application/json"}
        )

        assert resp.status == 400
        assert (await resp.json())["details"]["field"] == "weight"

        revenue = await (await client.get(f"/v1/slaughterhouses/{house['id']}/revenue")).json()
        assert revenue["total_revenue"] == 100.0

    @pytest.mark.asyncio
    async def test_non_finite_temperature_is_400(self, client):
        house = await self._create(client, "/v1/slaughterhouses", HOUSE)
        shipment = await self._create(
            client,
            "/v1/shipments",
            {"slaughterhouse_id": house["id"], "destination": "Mombasa", "expected_delivery": 1},
        )

        resp = await client.post(
            f"/v1/shipments/{shipment['id']}/temperature",
            data='{"temperature": Infinity}',
            headers={"Content-Type": "application/json"},
        )

        assert resp.status == 400
        stored = await (await client.get(f"/v1/records/shipment/{shipment['id']}")).json()
        assert stored["temperature_log"] == []

    @pytest.mark.asyncio
    async def test_oversize_record_is_400(self, client):
        resp = await client.post("/v1/slaughterhouses", json={**HOUSE, "name": "N" * 600})

        assert resp.status == 400
        assert (await resp.json())["error_code"] == "RECORD_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_status_update(self, client):
        _, animal, _ = await self._sale(client)

        resp = await client.put(f"/v1/animals/{animal['id']}/status", json={"status": "processed"})
        assert resp.status == 200
        assert (await resp.json())["status"] == "processed"

        resp = await client.get(f"/v1/records/animal/{animal['id']}")
        assert (await resp.json())["status"] == "processed"

    @pytest.mark.asyncio
    async def test_invalid_status_is_400(self, client):
        _, animal, _ = await self._sale(client)

        resp = await client.put(f"/v1/animals/{animal['id']}/status", json={"status": "eaten"})

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_get_missing_record_is_404(self, client):
        resp = await client.get("/v1/records/animal/99")

        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_complete_maintenance(self, client):
        house = await self._create(client, "/v1/slaughterhouses", HOUSE)
        record = await self._create(
            client,
            "/v1/maintenance",
            {
                "slaughterhouse_id": house["id"],
                "equipment_name": "chiller",
                "maintenance_type": "routine",
                "scheduled_date": 1000,
                "estimated_cost": 50,
            },
        )

        resp = await client.post(
            f"/v1/maintenance/{record['id']}/complete",
            json={"performed_by": "Kiprop", "actual_cost": 65.5},
        )

        assert resp.status == 200
        body = await resp.json()
        assert body["status"] == "completed"
        assert body["cost"] == 65.5

    @pytest.mark.asyncio
    async def test_shipment_temperature(self, client):
        house, _, product = await self._sale(client)
        shipment = await self._create(
            client,
            "/v1/shipments",
            {
                "slaughterhouse_id": house["id"],
                "destination": "Mombasa",
                "expected_delivery": 5000,
                "product_ids": [product["id"]],
            },
        )
        assert shipment["tracking_number"] == f"SH{shipment['id']:06d}"

        resp = await client.post(
            f"/v1/shipments/{shipment['id']}/temperature", json={"temperature": 2.5}
        )

        assert resp.status == 200
        assert (await resp.json())["temperature_log"] == [2.5]

    @pytest.mark.asyncio
    async def test_analytics_routes(self, client):
        house, _, _ = await self._sale(client)
        await self._create(
            client,
            "/v1/expenses",
            {"slaughterhouse_id": house["id"], "category": "fuel", "amount": 150},
        )
        base = f"/v1/slaughterhouses/{house['id']}"

        revenue = await (await client.get(f"{base}/revenue")).json()
        assert revenue == {"slaughterhouse_id": house["id"], "total_revenue": 100.0}

        expenses = await (await client.get(f"{base}/expenses")).json()
        assert expenses["total_expenses"] == 150.0

        financials = await (await client.get(f"{base}/financials")).json()
        assert financials["profit_margin"] == 0.0

        inventory = await (await client.get(f"{base}/inventory")).json()
        assert inventory["total_inventory_value"] == 100.0
        assert len(inventory["low_stock_items"]) == 1

        quality = await (await client.get(f"{base}/quality?start=0&end=10")).json()
        assert quality["total_inspections"] == 0

        resp = await client.get(f"{base}/maintenance")
        assert resp.status == 200

    @pytest.mark.asyncio
    async def test_analytics_unknown_slaughterhouse(self, client):
        resp = await client.get("/v1/slaughterhouses/3/financials")

        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_bad_query_parameter(self, client):
        house = await self._create(client, "/v1/slaughterhouses", HOUSE)

        resp = await client.get(f"/v1/slaughterhouses/{house['id']}/quality?start=soon")

        assert resp.status == 400

    @pytest.mark.asyncio
    async def test_health(self, client):
        await self._create(client, "/v1/slaughterhouses", HOUSE)

        resp = await client.get("/v1/health")

        assert resp.status == 200
        body = await resp.json()
        assert body["healthy"] is True
        assert body["stats"]["slaughterhouse"] == 1
        assert body["stats"]["next_id"] == 1
