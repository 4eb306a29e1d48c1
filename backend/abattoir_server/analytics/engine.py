"""
Aggregation engine: derived metrics computed by scanning the entity stores.

All functions are read-only and stateless. Each one checks that the
slaughterhouse exists before scanning anything and raises NotFoundError
otherwise. Results reflect every write committed before the call began;
the ledger lock keeps writes from interleaving with a running scan.

Formulas:
    total_revenue      = sum(MeatProduct.total_price)  for the slaughterhouse
    total_expenses     = sum(Expense.amount)            for the slaughterhouse
    operating_costs    = expenses - maintenance costs - waste costs
    profit_margin      = max(0, (revenue - expenses) / revenue * 100),
                         None when revenue is 0
    failure_rate       = round(100 * failed / total), 0 with no inspections
    reliability[eq]    = round(100 * (n - emergencies) / n)

Rounding is half away from zero.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict

from ..context import Ledger
from ..models.metrics import (
    FinancialMetrics,
    InventoryAnalytics,
    MaintenanceAnalytics,
    QualityMetrics,
)
from ..models.records import EMERGENCY_MAINTENANCE, MaintenanceStatus
from ..operations.writes import require_exists

logger = logging.getLogger(__name__)

PENDING_MAINTENANCE_STATUSES = frozenset(
    {MaintenanceStatus.SCHEDULED.value, MaintenanceStatus.IN_PROGRESS.value}
)


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero (2.5 -> 3.0)."""
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return math.copysign(whole, value)


async def _require_slaughterhouse(ledger: Ledger, slaughterhouse_id: int) -> None:
    await require_exists(ledger.slaughterhouses, slaughterhouse_id, "Slaughterhouse")


async def _sum_revenue(ledger: Ledger, slaughterhouse_id: int) -> float:
    total = 0.0
    async for _, product in ledger.meat_products.scan():
        if product.slaughterhouse_id == slaughterhouse_id:
            total += product.total_price
    return total


async def _sum_expenses(ledger: Ledger, slaughterhouse_id: int) -> float:
    total = 0.0
    async for _, expense in ledger.expenses.scan():
        if expense.slaughterhouse_id == slaughterhouse_id:
            total += expense.amount
    return total


async def total_revenue(ledger: Ledger, slaughterhouse_id: int) -> float:
    """Sum of total_price over the slaughterhouse's meat products."""
    async with ledger.lock:
        await _require_slaughterhouse(ledger, slaughterhouse_id)
        return await _sum_revenue(ledger, slaughterhouse_id)


async def total_expenses(ledger: Ledger, slaughterhouse_id: int) -> float:
    """Sum of amount over the slaughterhouse's expenses."""
    async with ledger.lock:
        await _require_slaughterhouse(ledger, slaughterhouse_id)
        return await _sum_expenses(ledger, slaughterhouse_id)


def profit_margin(revenue: float, expenses: float) -> float | None:
    """Profit as a percentage of revenue, clamped at zero.

    Returns None when revenue is zero, where the ratio is undefined.
    """
    if revenue == 0:
        return None
    margin = (revenue - expenses) / revenue * 100.0
    if not math.isfinite(margin):
        return None
    return max(0.0, margin)


async def financial_metrics(ledger: Ledger, slaughterhouse_id: int) -> FinancialMetrics:
    """Revenue, cost breakdown and profit margin for a slaughterhouse."""
    async with ledger.lock:
        await _require_slaughterhouse(ledger, slaughterhouse_id)

        revenue = await _sum_revenue(ledger, slaughterhouse_id)

        expenses = 0.0
        expenses_by_category: dict[str, float] = defaultdict(float)
        async for _, expense in ledger.expenses.scan():
            if expense.slaughterhouse_id == slaughterhouse_id:
                expenses += expense.amount
                expenses_by_category[expense.category] += expense.amount

        maintenance_costs = 0.0
        async for _, record in ledger.maintenance_records.scan():
            if record.slaughterhouse_id == slaughterhouse_id:
                maintenance_costs += record.cost

        waste_costs = 0.0
        async for _, waste in ledger.waste_records.scan():
            if waste.slaughterhouse_id == slaughterhouse_id:
                waste_costs += waste.cost

        revenue_by_product: dict[str, float] = defaultdict(float)
        async for _, product in ledger.meat_products.scan():
            if product.slaughterhouse_id == slaughterhouse_id:
                revenue_by_product[product.product_type] += product.total_price

    margin = profit_margin(revenue, expenses)
    if margin is None:
        logger.debug(
            "Profit margin undefined without revenue",
            extra={"slaughterhouse_id": slaughterhouse_id},
        )

    return FinancialMetrics(
        total_revenue=revenue,
        total_expenses=expenses,
        profit_margin=margin,
        operating_costs=expenses - maintenance_costs - waste_costs,
        maintenance_costs=maintenance_costs,
        waste_management_costs=waste_costs,
        labor_costs=0.0,
        revenue_by_product=dict(revenue_by_product),
        expenses_by_category=dict(expenses_by_category),
    )


async def quality_metrics(
    ledger: Ledger, slaughterhouse_id: int, start_date: int, end_date: int
) -> QualityMetrics:
    """Inspection outcomes for animals of a slaughterhouse.

    Inspections are joined to the slaughterhouse through their animal and
    filtered to start_date <= inspection_date <= end_date.
    """
    async with ledger.lock:
        await _require_slaughterhouse(ledger, slaughterhouse_id)

        # animal_id -> belongs to this slaughterhouse
        belongs: dict[int, bool] = {}
        metrics = QualityMetrics()
        temperature_sum = 0.0
        ph_sum = 0.0

        async for _, inspection in ledger.quality_inspections.scan():
            if not start_date <= inspection.inspection_date <= end_date:
                continue
            if inspection.animal_id not in belongs:
                animal = await ledger.animals.get(inspection.animal_id)
                belongs[inspection.animal_id] = (
                    animal is not None and animal.slaughterhouse_id == slaughterhouse_id
                )
            if not belongs[inspection.animal_id]:
                continue

            metrics.total_inspections += 1
            if inspection.passed:
                metrics.passed_inspections += 1
            temperature_sum += inspection.temperature
            ph_sum += inspection.ph_level
            metrics.inspections.append(inspection)

    total = metrics.total_inspections
    if total > 0:
        failed = total - metrics.passed_inspections
        metrics.failure_rate = round_half_away(failed / total * 100.0)
        metrics.average_temperature = round_half_away(temperature_sum / total)
        metrics.average_ph_level = round_half_away(ph_sum / total)

    return metrics


async def maintenance_analytics(
    ledger: Ledger, slaughterhouse_id: int, start_date: int, end_date: int
) -> MaintenanceAnalytics:
    """Maintenance spend, pending work and equipment reliability in a date range."""
    async with ledger.lock:
        await _require_slaughterhouse(ledger, slaughterhouse_id)

        analytics = MaintenanceAnalytics()
        by_type: dict[str, int] = defaultdict(int)
        history: dict[str, list] = defaultdict(list)

        async for _, record in ledger.maintenance_records.scan():
            if record.slaughterhouse_id != slaughterhouse_id:
                continue
            if not start_date <= record.date <= end_date:
                continue

            analytics.total_maintenance_cost += record.cost
            by_type[record.maintenance_type] += 1
            history[record.equipment_name].append(record)
            if record.status in PENDING_MAINTENANCE_STATUSES:
                analytics.pending_maintenance.append(record)

    analytics.maintenance_by_type = dict(by_type)
    analytics.equipment_history = dict(history)
    for equipment, records in analytics.equipment_history.items():
        emergencies = sum(1 for r in records if r.maintenance_type == EMERGENCY_MAINTENANCE)
        analytics.equipment_reliability[equipment] = round_half_away(
            (len(records) - emergencies) / len(records) * 100.0
        )

    return analytics


async def inventory_analytics(ledger: Ledger, slaughterhouse_id: int) -> InventoryAnalytics:
    """Product counts, stock value and low-stock items for a slaughterhouse."""
    threshold = ledger.analytics.low_stock_threshold_kg

    async with ledger.lock:
        await _require_slaughterhouse(ledger, slaughterhouse_id)

        analytics = InventoryAnalytics()
        counts: dict[str, int] = defaultdict(int)
        by_status: dict[str, list] = defaultdict(list)

        async for _, product in ledger.meat_products.scan():
            if product.slaughterhouse_id != slaughterhouse_id:
                continue

            counts[product.product_type] += 1
            analytics.total_inventory_value += product.total_price
            by_status[product.status].append(product)
            if product.weight < threshold:
                analytics.low_stock_items.append(product)

    analytics.product_counts = dict(counts)
    analytics.products_by_status = dict(by_status)
    return analytics
