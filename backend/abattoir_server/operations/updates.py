"""
Point lookups and status transitions.

Records are immutable apart from their status/terminal fields. A transition
reads the current record, builds a replacement with dataclasses.replace and
overwrites it under the same ID. No other field can be changed through here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from enum import Enum
from typing import TypeVar

from ..context import Ledger
from ..errors import InvalidPayloadError, NotFoundError
from ..models.payloads import finite_float
from ..models.records import (
    Animal,
    AnimalStatus,
    Employee,
    EmployeeStatus,
    MaintenanceRecord,
    MaintenanceStatus,
    MeatProduct,
    ProductStatus,
    Record,
    Shipment,
    ShipmentStatus,
)
from ..store import EntityStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)
E = TypeVar("E", bound=Enum)


def parse_status(status_type: type[E], value: str) -> E:
    """Convert a status string to its enum member.

    Raises:
        InvalidPayloadError: If value is not a valid status
    """
    for member in status_type:
        if member.value == value:
            return member
    valid = [m.value for m in status_type]
    raise InvalidPayloadError(
        f"Invalid status '{value}'. Valid statuses: {valid}", field_name="status"
    )


async def get_record(ledger: Ledger, kind: str, record_id: int) -> Record:
    """Look up one record of the given kind.

    Raises:
        NotFoundError: If the kind is unknown or the record is absent
    """
    store = ledger.stores.get(kind)
    if store is None:
        raise NotFoundError(f"Unknown record kind '{kind}'", resource_type=kind, resource_id=record_id)
    record = await store.get(record_id)
    if record is None:
        raise NotFoundError(
            f"{kind} {record_id} not found", resource_type=kind, resource_id=record_id
        )
    return record


async def _overwrite(
    ledger: Ledger,
    store: EntityStore[R],
    record_id: int,
    label: str,
    change: Callable[[R], R],
) -> R:
    async with ledger.lock:
        current = await store.get(record_id)
        if current is None:
            raise NotFoundError(f"{label} not found", resource_type=store.kind, resource_id=record_id)
        updated = change(current)
        await store.insert(record_id, updated)

    logger.info("Updated record", extra={"kind": store.kind, "id": record_id})
    return updated


async def update_animal_status(ledger: Ledger, animal_id: int, status: str) -> Animal:
    new_status = parse_status(AnimalStatus, status)
    return await _overwrite(
        ledger,
        ledger.animals,
        animal_id,
        "Animal",
        lambda animal: replace(animal, status=new_status.value),
    )


async def update_product_status(ledger: Ledger, product_id: int, status: str) -> MeatProduct:
    new_status = parse_status(ProductStatus, status)
    return await _overwrite(
        ledger,
        ledger.meat_products,
        product_id,
        "Product",
        lambda product: replace(product, status=new_status.value),
    )


async def update_employee_status(ledger: Ledger, employee_id: int, status: str) -> Employee:
    new_status = parse_status(EmployeeStatus, status)
    return await _overwrite(
        ledger,
        ledger.employees,
        employee_id,
        "Employee",
        lambda employee: replace(employee, status=new_status.value),
    )


async def update_maintenance_status(
    ledger: Ledger, maintenance_id: int, status: str
) -> MaintenanceRecord:
    new_status = parse_status(MaintenanceStatus, status)
    return await _overwrite(
        ledger,
        ledger.maintenance_records,
        maintenance_id,
        "Maintenance record",
        lambda record: replace(record, status=new_status.value),
    )


async def complete_maintenance(
    ledger: Ledger,
    maintenance_id: int,
    performed_by: str,
    actual_cost: float | None = None,
) -> MaintenanceRecord:
    """Mark maintenance as completed, recording who did it and the final cost."""
    if not performed_by:
        raise InvalidPayloadError("performed_by must be non-empty", field_name="performed_by")
    if actual_cost is not None and finite_float(actual_cost, "actual_cost") < 0:
        raise InvalidPayloadError("actual_cost cannot be negative", field_name="actual_cost")

    def complete(record: MaintenanceRecord) -> MaintenanceRecord:
        return replace(
            record,
            status=MaintenanceStatus.COMPLETED.value,
            performed_by=performed_by,
            cost=record.cost if actual_cost is None else actual_cost,
        )

    return await _overwrite(
        ledger, ledger.maintenance_records, maintenance_id, "Maintenance record", complete
    )


async def update_shipment_status(ledger: Ledger, shipment_id: int, status: str) -> Shipment:
    new_status = parse_status(ShipmentStatus, status)
    return await _overwrite(
        ledger,
        ledger.shipments,
        shipment_id,
        "Shipment",
        lambda shipment: replace(shipment, status=new_status.value),
    )


async def log_shipment_temperature(
    ledger: Ledger, shipment_id: int, temperature: float
) -> Shipment:
    """Append a cold-chain reading to a shipment.

    The log lives inside the record, so it is bounded by the store's record
    size; a reading that would overflow it raises RecordTooLargeError and the
    stored shipment is left unchanged.
    """
    temperature = finite_float(temperature, "temperature")
    return await _overwrite(
        ledger,
        ledger.shipments,
        shipment_id,
        "Shipment",
        lambda shipment: replace(
            shipment, temperature_log=[*shipment.temperature_log, temperature]
        ),
    )
