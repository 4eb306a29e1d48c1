"""
Analytics module - read-only metrics derived from the entity stores.

Nothing computed here is persisted; every call rescans the stores.
"""

from .engine import (
    financial_metrics,
    inventory_analytics,
    maintenance_analytics,
    profit_margin,
    quality_metrics,
    round_half_away,
    total_expenses,
    total_revenue,
)

__all__ = [
    "financial_metrics",
    "inventory_analytics",
    "maintenance_analytics",
    "profit_margin",
    "quality_metrics",
    "round_half_away",
    "total_expenses",
    "total_revenue",
]
