"""
Operations on the abattoir ledger.

- writes: create operations (validate, check references, mint, insert)
- updates: point lookups and status transitions (full overwrite by ID)

All operations take the Ledger context as their first argument and hold its
lock for the duration of the call.
"""

from .updates import (
    complete_maintenance,
    get_record,
    log_shipment_temperature,
    parse_status,
    update_animal_status,
    update_employee_status,
    update_maintenance_status,
    update_product_status,
    update_shipment_status,
)
from .writes import (
    create_meat_product,
    create_shipment,
    create_slaughterhouse,
    perform_quality_inspection,
    record_expense,
    record_waste,
    register_animal,
    register_employee,
    register_supplier,
    require_exists,
    schedule_maintenance,
    tracking_number,
)

__all__ = [
    "complete_maintenance",
    "create_meat_product",
    "create_shipment",
    "create_slaughterhouse",
    "get_record",
    "log_shipment_temperature",
    "parse_status",
    "perform_quality_inspection",
    "record_expense",
    "record_waste",
    "register_animal",
    "register_employee",
    "register_supplier",
    "require_exists",
    "schedule_maintenance",
    "tracking_number",
    "update_animal_status",
    "update_employee_status",
    "update_maintenance_status",
    "update_product_status",
    "update_shipment_status",
]
