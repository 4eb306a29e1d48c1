"""
Data model for the abattoir ledger.

- records: persisted record kinds and their status enums
- metrics: derived aggregates, computed on read
- payloads: write-operation inputs and their validation
"""

from .metrics import FinancialMetrics, InventoryAnalytics, MaintenanceAnalytics, QualityMetrics
from .payloads import (
    CreateMeatProductPayload,
    CreateSlaughterhousePayload,
    EmployeePayload,
    MaintenancePayload,
    QualityInspectionPayload,
    RecordExpensePayload,
    RegisterAnimalPayload,
    ShipmentPayload,
    SupplierPayload,
    WastePayload,
)
from .records import (
    EMERGENCY_MAINTENANCE,
    RECORD_TYPES,
    Animal,
    AnimalStatus,
    Employee,
    EmployeeStatus,
    Expense,
    MaintenanceRecord,
    MaintenanceStatus,
    MeatProduct,
    ProductStatus,
    QualityInspection,
    Record,
    Shipment,
    ShipmentStatus,
    Slaughterhouse,
    Supplier,
    WasteRecord,
)

__all__ = [
    "Animal",
    "AnimalStatus",
    "CreateMeatProductPayload",
    "CreateSlaughterhousePayload",
    "EMERGENCY_MAINTENANCE",
    "Employee",
    "EmployeePayload",
    "EmployeeStatus",
    "Expense",
    "FinancialMetrics",
    "InventoryAnalytics",
    "MaintenanceAnalytics",
    "MaintenancePayload",
    "MaintenanceRecord",
    "MaintenanceStatus",
    "MeatProduct",
    "ProductStatus",
    "QualityInspection",
    "QualityInspectionPayload",
    "QualityMetrics",
    "RECORD_TYPES",
    "Record",
    "RecordExpensePayload",
    "RegisterAnimalPayload",
    "Shipment",
    "ShipmentPayload",
    "ShipmentStatus",
    "Slaughterhouse",
    "Supplier",
    "SupplierPayload",
    "WastePayload",
    "WasteRecord",
]
