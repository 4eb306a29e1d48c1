"""
Write operations: validate, check references, mint an ID, store the record.

Every operation follows the same order:
1. Validate the payload (InvalidPayloadError)
2. Check each foreign key exists (NotFoundError)
3. Build the record under the ID about to be minted and check it encodes
   within the store's bound (RecordTooLargeError)
4. Mint the ID and insert

Steps 1-3 are side-effect free, so a failed call leaves no trace and can be
retried as a whole. The ledger lock is held for the entire call.

Invariants:
    - No store or counter mutation happens before all checks pass
    - IDs come from the shared allocator, never from a per-kind sequence
    - Shipment tracking numbers are derived from the shipment's ID
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from ..context import Ledger
from ..errors import NotFoundError
from ..models.payloads import (
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
from ..models.records import (
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
from ..store import EntityStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


def tracking_number(shipment_id: int) -> str:
    """Tracking token for a shipment, e.g. 42 -> "SH000042"."""
    return f"SH{shipment_id:06d}"


async def require_exists(store: EntityStore, record_id: int, label: str) -> None:
    """Raise NotFoundError unless record_id is present in store."""
    if not await store.contains(record_id):
        raise NotFoundError(f"{label} not found", resource_type=store.kind, resource_id=record_id)


async def _mint_and_insert(
    ledger: Ledger, store: EntityStore[R], build: Callable[[int], R]
) -> R:
    """Mint the next ID and store the record built for it.

    The record is built and encoded against the upcoming ID first, so an
    oversize record is rejected before the counter moves.
    """
    candidate_id = await ledger.ids.peek()
    store.codec.encode(build(candidate_id))

    record_id = await ledger.ids.next()
    record = build(record_id)
    await store.insert(record_id, record)
    return record


async def create_slaughterhouse(
    ledger: Ledger, payload: CreateSlaughterhousePayload
) -> Slaughterhouse:
    """Create the root entity that every other record references."""
    async with ledger.lock:
        payload.validate()
        now = ledger.clock()

        house = await _mint_and_insert(
            ledger,
            ledger.slaughterhouses,
            lambda record_id: Slaughterhouse(
                id=record_id,
                name=payload.name,
                location=payload.location,
                contact=payload.contact,
                email=payload.email,
                capacity=payload.capacity,
                created_at=now,
            ),
        )

    logger.info("Created slaughterhouse", extra={"slaughterhouse_id": house.id})
    return house


async def register_animal(ledger: Ledger, payload: RegisterAnimalPayload) -> Animal:
    """Register an animal arriving at a slaughterhouse; status starts as received."""
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.slaughterhouses, payload.slaughterhouse_id, "Slaughterhouse")
        now = ledger.clock()

        animal = await _mint_and_insert(
            ledger,
            ledger.animals,
            lambda record_id: Animal(
                id=record_id,
                slaughterhouse_id=payload.slaughterhouse_id,
                tag_number=payload.tag_number,
                species=payload.species,
                weight=payload.weight,
                arrival_time=now,
                status=AnimalStatus.RECEIVED.value,
            ),
        )

    logger.info(
        "Registered animal",
        extra={"animal_id": animal.id, "slaughterhouse_id": animal.slaughterhouse_id},
    )
    return animal


async def create_meat_product(
    ledger: Ledger, payload: CreateMeatProductPayload
) -> MeatProduct:
    """Create a product cut from an animal; total_price is fixed here."""
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.animals, payload.animal_id, "Animal")
        await require_exists(ledger.slaughterhouses, payload.slaughterhouse_id, "Slaughterhouse")
        now = ledger.clock()
        total_price = payload.weight * payload.price_per_kg

        product = await _mint_and_insert(
            ledger,
            ledger.meat_products,
            lambda record_id: MeatProduct(
                id=record_id,
                animal_id=payload.animal_id,
                slaughterhouse_id=payload.slaughterhouse_id,
                product_type=payload.product_type,
                weight=payload.weight,
                price_per_kg=payload.price_per_kg,
                total_price=total_price,
                created_at=now,
                status=ProductStatus.IN_STOCK.value,
            ),
        )

    logger.info(
        "Created meat product",
        extra={"product_id": product.id, "total_price": product.total_price},
    )
    return product


async def record_expense(ledger: Ledger, payload: RecordExpensePayload) -> Expense:
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.slaughterhouses, payload.slaughterhouse_id, "Slaughterhouse")
        now = ledger.clock()

        expense = await _mint_and_insert(
            ledger,
            ledger.expenses,
            lambda record_id: Expense(
                id=record_id,
                slaughterhouse_id=payload.slaughterhouse_id,
                date=now,
                category=payload.category,
                amount=payload.amount,
                description=payload.description,
            ),
        )

    logger.info("Recorded expense", extra={"expense_id": expense.id, "amount": expense.amount})
    return expense


async def perform_quality_inspection(
    ledger: Ledger, payload: QualityInspectionPayload
) -> QualityInspection:
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.animals, payload.animal_id, "Animal")
        now = ledger.clock()

        inspection = await _mint_and_insert(
            ledger,
            ledger.quality_inspections,
            lambda record_id: QualityInspection(
                id=record_id,
                animal_id=payload.animal_id,
                inspector_name=payload.inspector_name,
                inspection_date=now,
                temperature=payload.temperature,
                ph_level=payload.ph_level,
                visual_inspection=payload.visual_inspection,
                passed=payload.passed,
                notes=payload.notes,
            ),
        )

    logger.info(
        "Recorded quality inspection",
        extra={"inspection_id": inspection.id, "passed": inspection.passed},
    )
    return inspection


async def register_employee(ledger: Ledger, payload: EmployeePayload) -> Employee:
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.slaughterhouses, payload.slaughterhouse_id, "Slaughterhouse")
        now = ledger.clock()

        employee = await _mint_and_insert(
            ledger,
            ledger.employees,
            lambda record_id: Employee(
                id=record_id,
                slaughterhouse_id=payload.slaughterhouse_id,
                name=payload.name,
                role=payload.role,
                certification=payload.certification,
                hire_date=now,
                contact=payload.contact,
                status=EmployeeStatus.ACTIVE.value,
            ),
        )

    logger.info("Registered employee", extra={"employee_id": employee.id})
    return employee


async def schedule_maintenance(
    ledger: Ledger, payload: MaintenancePayload
) -> MaintenanceRecord:
    """Schedule maintenance; the follow-up date defaults to one interval later."""
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.slaughterhouses, payload.slaughterhouse_id, "Slaughterhouse")
        next_date = payload.scheduled_date + ledger.analytics.maintenance_interval_ms

        record = await _mint_and_insert(
            ledger,
            ledger.maintenance_records,
            lambda record_id: MaintenanceRecord(
                id=record_id,
                slaughterhouse_id=payload.slaughterhouse_id,
                equipment_name=payload.equipment_name,
                maintenance_type=payload.maintenance_type,
                cost=payload.estimated_cost,
                date=payload.scheduled_date,
                next_maintenance_date=next_date,
                performed_by="",
                status=MaintenanceStatus.SCHEDULED.value,
                notes=payload.notes,
            ),
        )

    logger.info(
        "Scheduled maintenance",
        extra={"maintenance_id": record.id, "equipment": record.equipment_name},
    )
    return record


async def register_supplier(ledger: Ledger, payload: SupplierPayload) -> Supplier:
    async with ledger.lock:
        payload.validate()
        now = ledger.clock()

        supplier = await _mint_and_insert(
            ledger,
            ledger.suppliers,
            lambda record_id: Supplier(
                id=record_id,
                name=payload.name,
                contact=payload.contact,
                email=payload.email,
                supplier_type=payload.supplier_type,
                rating=payload.rating,
                active_since=now,
                last_supply_date=0,
            ),
        )

    logger.info("Registered supplier", extra={"supplier_id": supplier.id})
    return supplier


async def create_shipment(ledger: Ledger, payload: ShipmentPayload) -> Shipment:
    """Create a shipment for existing products; status starts as preparing."""
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.slaughterhouses, payload.slaughterhouse_id, "Slaughterhouse")
        for product_id in payload.product_ids:
            await require_exists(ledger.meat_products, product_id, f"Product {product_id}")
        now = ledger.clock()

        shipment = await _mint_and_insert(
            ledger,
            ledger.shipments,
            lambda record_id: Shipment(
                id=record_id,
                slaughterhouse_id=payload.slaughterhouse_id,
                destination=payload.destination,
                shipping_date=now,
                expected_delivery=payload.expected_delivery,
                tracking_number=tracking_number(record_id),
                product_ids=list(payload.product_ids),
                temperature_log=[],
                status=ShipmentStatus.PREPARING.value,
            ),
        )

    logger.info(
        "Created shipment",
        extra={"shipment_id": shipment.id, "tracking_number": shipment.tracking_number},
    )
    return shipment


async def record_waste(ledger: Ledger, payload: WastePayload) -> WasteRecord:
    """Record a waste disposal and its cost."""
    async with ledger.lock:
        payload.validate()
        await require_exists(ledger.slaughterhouses, payload.slaughterhouse_id, "Slaughterhouse")
        now = ledger.clock()

        record = await _mint_and_insert(
            ledger,
            ledger.waste_records,
            lambda record_id: WasteRecord(
                id=record_id,
                slaughterhouse_id=payload.slaughterhouse_id,
                waste_type=payload.waste_type,
                quantity=payload.quantity,
                disposal_method=payload.disposal_method,
                disposal_date=now,
                handled_by=payload.handled_by,
                cost=payload.cost,
            ),
        )

    logger.info("Recorded waste disposal", extra={"waste_id": record.id, "cost": record.cost})
    return record
