"""
Derived aggregates computed by the analytics engine.

These are never stored; every call recomputes them from the entity stores.
Group-by fields are plain dicts keyed by the grouping value and their key
order carries no meaning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .records import MaintenanceRecord, MeatProduct, QualityInspection


@dataclass
class FinancialMetrics:
    """Revenue and cost breakdown for one slaughterhouse.

    Attributes:
        profit_margin: Percentage clamped at 0, or None when revenue is 0
            (the ratio is undefined there)
        operating_costs: Expenses minus maintenance and waste costs
        labor_costs: Always 0.0; the model holds no payroll data
    """

    total_revenue: float
    total_expenses: float
    profit_margin: float | None
    operating_costs: float
    maintenance_costs: float
    waste_management_costs: float
    labor_costs: float = 0.0
    revenue_by_product: dict[str, float] = field(default_factory=dict)
    expenses_by_category: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_revenue": self.total_revenue,
            "total_expenses": self.total_expenses,
            "profit_margin": self.profit_margin,
            "operating_costs": self.operating_costs,
            "maintenance_costs": self.maintenance_costs,
            "labor_costs": self.labor_costs,
            "waste_management_costs": self.waste_management_costs,
            "revenue_by_product": dict(self.revenue_by_product),
            "expenses_by_category": dict(self.expenses_by_category),
        }


@dataclass
class QualityMetrics:
    """Inspection outcomes for a slaughterhouse over a date range."""

    total_inspections: int = 0
    passed_inspections: int = 0
    failure_rate: float = 0.0
    average_temperature: float = 0.0
    average_ph_level: float = 0.0
    inspections: list[QualityInspection] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_inspections": self.total_inspections,
            "passed_inspections": self.passed_inspections,
            "failure_rate": self.failure_rate,
            "average_temperature": self.average_temperature,
            "average_ph_level": self.average_ph_level,
            "inspections": [i.to_dict() for i in self.inspections],
        }


@dataclass
class MaintenanceAnalytics:
    """Maintenance spend and equipment reliability over a date range.

    Attributes:
        equipment_reliability: Percent of non-emergency records per equipment
        pending_maintenance: Records still scheduled or in progress
        equipment_history: Records grouped by equipment name
    """

    total_maintenance_cost: float = 0.0
    maintenance_by_type: dict[str, int] = field(default_factory=dict)
    equipment_reliability: dict[str, float] = field(default_factory=dict)
    pending_maintenance: list[MaintenanceRecord] = field(default_factory=list)
    equipment_history: dict[str, list[MaintenanceRecord]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_maintenance_cost": self.total_maintenance_cost,
            "maintenance_by_type": dict(self.maintenance_by_type),
            "equipment_reliability": dict(self.equipment_reliability),
            "pending_maintenance": [r.to_dict() for r in self.pending_maintenance],
            "equipment_history": {
                name: [r.to_dict() for r in records]
                for name, records in self.equipment_history.items()
            },
        }


@dataclass
class InventoryAnalytics:
    """Current product inventory of a slaughterhouse."""

    product_counts: dict[str, int] = field(default_factory=dict)
    total_inventory_value: float = 0.0
    products_by_status: dict[str, list[MeatProduct]] = field(default_factory=dict)
    low_stock_items: list[MeatProduct] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_counts": dict(self.product_counts),
            "total_inventory_value": self.total_inventory_value,
            "products_by_status": {
                status: [p.to_dict() for p in products]
                for status, products in self.products_by_status.items()
            },
            "low_stock_items": [p.to_dict() for p in self.low_stock_items],
        }
