"""
Integration tests for the aggregation engine.

Tests cover:
- Revenue, expenses and the profit margin
- Financial cost breakdown
- Quality metrics over a date range
- Maintenance spend and equipment reliability
- Inventory value and low-stock detection
- Isolation between slaughterhouses
"""

import tempfile

import pytest

from backend.abattoir_server.analytics import (
    financial_metrics,
    inventory_analytics,
    maintenance_analytics,
    quality_metrics,
    total_expenses,
    total_revenue,
)
from backend.abattoir_server.config import StorageConfig
from backend.abattoir_server.context import Ledger
from backend.abattoir_server.errors import NotFoundError
from backend.abattoir_server.models.payloads import (
    CreateMeatProductPayload,
    CreateSlaughterhousePayload,
    MaintenancePayload,
    QualityInspectionPayload,
    RecordExpensePayload,
    RegisterAnimalPayload,
    WastePayload,
)
from backend.abattoir_server.operations import (
    complete_maintenance,
    create_meat_product,
    create_slaughterhouse,
    perform_quality_inspection,
    record_expense,
    record_waste,
    register_animal,
    schedule_maintenance,
    update_product_status,
)

MAX_TIMESTAMP = 2**63 - 1


class FixedClock:
    def __init__(self, now=1_000):
        self.now = now

    def __call__(self):
        return self.now


class TestAnalytics:
    """Tests for the analytics functions."""

    @pytest.fixture
    def data_dir(self):
        """Create temporary data directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield tmpdir

    @pytest.fixture
    def clock(self):
        return FixedClock()

    @pytest.fixture
    async def ledger(self, data_dir, clock):
        storage = StorageConfig(data_dir=data_dir, wal_mode=False)
        async with Ledger(storage=storage, clock=clock) as ledger:
            yield ledger

    async def _house(self, ledger, name="North"):
        return await create_slaughterhouse(
            ledger,
            CreateSlaughterhousePayload(
                name=name, location="Nakuru", contact="555", email=f"{name.lower()}@example.com"
            ),
        )

    async def _animal(self, ledger, house_id, tag="T1"):
        return await register_animal(
            ledger,
            RegisterAnimalPayload(slaughterhouse_id=house_id, tag_number=tag, species="cow"),
        )

    async def _product(self, ledger, house_id, animal_id, product_type="steak", weight=5.0, price=20.0):
        return await create_meat_product(
            ledger,
            CreateMeatProductPayload(
                animal_id=animal_id,
                slaughterhouse_id=house_id,
                product_type=product_type,
                weight=weight,
                price_per_kg=price,
            ),
        )

    async def _expense(self, ledger, house_id, amount, category="fuel"):
        return await record_expense(
            ledger,
            RecordExpensePayload(slaughterhouse_id=house_id, category=category, amount=amount),
        )

    async def _inspection(self, ledger, animal_id, passed, temperature=4.0, ph=6.0):
        return await perform_quality_inspection(
            ledger,
            QualityInspectionPayload(
                animal_id=animal_id,
                inspector_name="Dr. Mwangi",
                temperature=temperature,
                ph_level=ph,
                visual_inspection="ok",
                passed=passed,
            ),
        )

    async def _maintenance(self, ledger, house_id, equipment, maintenance_type, date, cost=10.0):
        return await schedule_maintenance(
            ledger,
            MaintenancePayload(
                slaughterhouse_id=house_id,
                equipment_name=equipment,
                maintenance_type=maintenance_type,
                scheduled_date=date,
                estimated_cost=cost,
            ),
        )

    @pytest.mark.asyncio
    async def test_revenue_and_inventory_value(self, ledger):
        """One 5kg product at 20/kg gives 100.0 revenue and inventory value."""
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)
        await self._product(ledger, house.id, animal.id)

        assert await total_revenue(ledger, house.id) == 100.0

        inventory = await inventory_analytics(ledger, house.id)
        assert inventory.total_inventory_value == 100.0
        assert inventory.product_counts == {"steak": 1}

    @pytest.mark.asyncio
    async def test_scenario_no_low_stock(self, ledger):
        """20kg at 5/kg: revenue 100.0 and nothing under the threshold."""
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)
        await self._product(ledger, house.id, animal.id, weight=20.0, price=5.0)

        assert await total_revenue(ledger, house.id) == 100.0
        inventory = await inventory_analytics(ledger, house.id)
        assert inventory.total_inventory_value == 100.0
        assert inventory.low_stock_items == []

    @pytest.mark.asyncio
    async def test_empty_slaughterhouse(self, ledger):
        house = await self._house(ledger)

        assert await total_revenue(ledger, house.id) == 0.0
        assert await total_expenses(ledger, house.id) == 0.0

        metrics = await financial_metrics(ledger, house.id)
        assert metrics.profit_margin is None
        assert metrics.labor_costs == 0.0

    @pytest.mark.asyncio
    async def test_unknown_slaughterhouse(self, ledger):
        with pytest.raises(NotFoundError):
            await total_revenue(ledger, 12)
        with pytest.raises(NotFoundError):
            await financial_metrics(ledger, 12)
        with pytest.raises(NotFoundError):
            await quality_metrics(ledger, 12, 0, MAX_TIMESTAMP)
        with pytest.raises(NotFoundError):
            await maintenance_analytics(ledger, 12, 0, MAX_TIMESTAMP)
        with pytest.raises(NotFoundError):
            await inventory_analytics(ledger, 12)

    @pytest.mark.asyncio
    async def test_profit_margin_clamped(self, ledger):
        """Revenue 100 against expenses 150 gives a margin of 0."""
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)
        await self._product(ledger, house.id, animal.id)
        await self._expense(ledger, house.id, 150.0)

        metrics = await financial_metrics(ledger, house.id)

        assert metrics.total_revenue == 100.0
        assert metrics.total_expenses == 150.0
        assert metrics.profit_margin == 0.0

    @pytest.mark.asyncio
    async def test_financial_breakdown(self, ledger):
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)
        await self._product(ledger, house.id, animal.id, "steak", weight=5.0, price=20.0)
        await self._product(ledger, house.id, animal.id, "ribs", weight=10.0, price=10.0)
        await self._product(ledger, house.id, animal.id, "steak", weight=1.0, price=20.0)
        await self._expense(ledger, house.id, 30.0, "fuel")
        await self._expense(ledger, house.id, 20.0, "fuel")
        await self._expense(ledger, house.id, 50.0, "utilities")
        await self._maintenance(ledger, house.id, "saw", "routine", date=0, cost=15.0)
        await record_waste(
            ledger,
            WastePayload(
                slaughterhouse_id=house.id,
                waste_type="blood",
                quantity=20.0,
                disposal_method="composting",
                cost=5.0,
            ),
        )

        metrics = await financial_metrics(ledger, house.id)

        assert metrics.total_revenue == 220.0
        assert metrics.total_expenses == 100.0
        assert metrics.revenue_by_product == {"steak": 120.0, "ribs": 100.0}
        assert metrics.expenses_by_category == {"fuel": 50.0, "utilities": 50.0}
        assert metrics.maintenance_costs == 15.0
        assert metrics.waste_management_costs == 5.0
        assert metrics.operating_costs == 80.0
        assert metrics.profit_margin == pytest.approx(120.0 / 220.0 * 100.0)

    @pytest.mark.asyncio
    async def test_quality_without_inspections(self, ledger):
        house = await self._house(ledger)

        metrics = await quality_metrics(ledger, house.id, 0, MAX_TIMESTAMP)

        assert metrics.total_inspections == 0
        assert metrics.failure_rate == 0.0
        assert metrics.inspections == []

    @pytest.mark.asyncio
    async def test_quality_date_range(self, ledger, clock):
        """Only inspections dated within [start, end] are counted."""
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)

        for now, passed in ((1_000, True), (2_000, False), (3_000, True), (4_000, True)):
            clock.now = now
            await self._inspection(ledger, animal.id, passed)

        metrics = await quality_metrics(ledger, house.id, 2_000, 4_000)

        assert metrics.total_inspections == 3
        assert metrics.passed_inspections == 2
        assert metrics.failure_rate == 33.0
        assert [i.inspection_date for i in metrics.inspections] == [2_000, 3_000, 4_000]

    @pytest.mark.asyncio
    async def test_quality_averages_rounded(self, ledger):
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)
        await self._inspection(ledger, animal.id, True, temperature=4.0, ph=5.5)
        await self._inspection(ledger, animal.id, False, temperature=5.0, ph=5.5)

        metrics = await quality_metrics(ledger, house.id, 0, MAX_TIMESTAMP)

        assert metrics.failure_rate == 50.0
        assert metrics.average_temperature == 5.0
        assert metrics.average_ph_level == 6.0

    @pytest.mark.asyncio
    async def test_quality_scoped_to_slaughterhouse(self, ledger):
        """Inspections reach a slaughterhouse only through its animals."""
        north = await self._house(ledger, "North")
        south = await self._house(ledger, "South")
        north_animal = await self._animal(ledger, north.id, "N1")
        south_animal = await self._animal(ledger, south.id, "S1")
        await self._inspection(ledger, north_animal.id, True)
        await self._inspection(ledger, south_animal.id, False)

        metrics = await quality_metrics(ledger, north.id, 0, MAX_TIMESTAMP)

        assert metrics.total_inspections == 1
        assert metrics.failure_rate == 0.0

    @pytest.mark.asyncio
    async def test_maintenance_reliability(self, ledger):
        house = await self._house(ledger)
        await self._maintenance(ledger, house.id, "saw", "routine", date=100, cost=10.0)
        await self._maintenance(ledger, house.id, "saw", "emergency", date=200, cost=40.0)
        chiller = await self._maintenance(ledger, house.id, "chiller", "routine", date=300, cost=5.0)
        await complete_maintenance(ledger, chiller.id, "Kiprop")

        analytics = await maintenance_analytics(ledger, house.id, 0, MAX_TIMESTAMP)

        assert analytics.total_maintenance_cost == 55.0
        assert analytics.maintenance_by_type == {"routine": 2, "emergency": 1}
        assert analytics.equipment_reliability == {"saw": 50.0, "chiller": 100.0}
        assert [r.equipment_name for r in analytics.pending_maintenance] == ["saw", "saw"]
        assert len(analytics.equipment_history["saw"]) == 2

    @pytest.mark.asyncio
    async def test_maintenance_date_range(self, ledger):
        house = await self._house(ledger)
        await self._maintenance(ledger, house.id, "saw", "routine", date=100)
        await self._maintenance(ledger, house.id, "saw", "emergency", date=900)

        analytics = await maintenance_analytics(ledger, house.id, 0, 500)

        assert analytics.maintenance_by_type == {"routine": 1}
        assert analytics.equipment_reliability == {"saw": 100.0}

    @pytest.mark.asyncio
    async def test_low_stock(self, ledger):
        """Products under the threshold weight are listed as low stock."""
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)
        light = await self._product(ledger, house.id, animal.id, "mince", weight=5.0, price=8.0)
        await self._product(ledger, house.id, animal.id, "brisket", weight=12.0, price=9.0)

        inventory = await inventory_analytics(ledger, house.id)

        assert [p.id for p in inventory.low_stock_items] == [light.id]
        assert inventory.total_inventory_value == 40.0 + 108.0

    @pytest.mark.asyncio
    async def test_products_grouped_by_status(self, ledger):
        house = await self._house(ledger)
        animal = await self._animal(ledger, house.id)
        sold = await self._product(ledger, house.id, animal.id)
        kept = await self._product(ledger, house.id, animal.id)
        await update_product_status(ledger, sold.id, "sold")

        inventory = await inventory_analytics(ledger, house.id)

        assert [p.id for p in inventory.products_by_status["sold"]] == [sold.id]
        assert [p.id for p in inventory.products_by_status["in-stock"]] == [kept.id]

    @pytest.mark.asyncio
    async def test_slaughterhouses_isolated(self, ledger):
        north = await self._house(ledger, "North")
        south = await self._house(ledger, "South")
        north_animal = await self._animal(ledger, north.id, "N1")
        south_animal = await self._animal(ledger, south.id, "S1")
        await self._product(ledger, north.id, north_animal.id)
        await self._product(ledger, south.id, south_animal.id, weight=1.0, price=1.0)
        await self._expense(ledger, south.id, 9.0)

        assert await total_revenue(ledger, north.id) == 100.0
        assert await total_revenue(ledger, south.id) == 1.0
        assert await total_expenses(ledger, north.id) == 0.0
        assert await total_expenses(ledger, south.id) == 9.0
