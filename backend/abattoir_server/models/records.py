"""
Persisted record types for the abattoir ledger.

Every record kind is a frozen dataclass with an integer ``id`` drawn from the
shared ID allocator. Foreign keys are plain integer fields, checked once when
the record is created and never again.

Invariants:
    - ``id`` is unique across all record kinds, not only within one kind
    - MeatProduct.total_price == weight * price_per_kg at creation time
    - Records are replaced whole; there is no partial patch
    - Status fields hold the ``value`` of the matching status enum

How to change safely:
    - New fields need defaults so previously stored rows still decode
    - Keep KIND stable, it names the SQLite table holding the rows
    - Append enum values; never rename existing ones
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar


class AnimalStatus(Enum):
    """Lifecycle of an animal in the slaughterhouse."""

    RECEIVED = "received"
    PROCESSED = "processed"
    DISPOSED = "disposed"


class ProductStatus(Enum):
    """Lifecycle of a meat product."""

    IN_STOCK = "in-stock"
    SOLD = "sold"
    DISPOSED = "disposed"


class EmployeeStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class MaintenanceStatus(Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class ShipmentStatus(Enum):
    PREPARING = "preparing"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Maintenance type counted against equipment reliability
EMERGENCY_MAINTENANCE = "emergency"


class Record:
    """Mixin shared by all persisted record dataclasses."""

    KIND: ClassVar[str]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Any:
        """Create from dictionary representation."""
        return cls(**data)


@dataclass(frozen=True)
class Slaughterhouse(Record):
    """Root entity; every other record hangs off a slaughterhouse.

    Attributes:
        capacity: Maximum number of animals handled per day
        created_at: Creation timestamp (Unix ms)
    """

    KIND: ClassVar[str] = "slaughterhouse"

    id: int
    name: str
    location: str
    contact: str
    email: str
    capacity: int
    created_at: int


@dataclass(frozen=True)
class Animal(Record):
    """An animal delivered to a slaughterhouse.

    Attributes:
        species: e.g. cow, sheep, goat, pig
        weight: Live weight in kilograms
        arrival_time: Registration timestamp (Unix ms)
    """

    KIND: ClassVar[str] = "animal"

    id: int
    slaughterhouse_id: int
    tag_number: str
    species: str
    weight: float
    arrival_time: int
    status: str = AnimalStatus.RECEIVED.value


@dataclass(frozen=True)
class MeatProduct(Record):
    """A cut produced from an animal.

    Attributes:
        product_type: e.g. steak, ribs, minced meat
        weight: Weight in kilograms
        total_price: weight * price_per_kg, fixed at creation
    """

    KIND: ClassVar[str] = "meat_product"

    id: int
    animal_id: int
    slaughterhouse_id: int
    product_type: str
    weight: float
    price_per_kg: float
    total_price: float
    created_at: int
    status: str = ProductStatus.IN_STOCK.value


@dataclass(frozen=True)
class Expense(Record):
    KIND: ClassVar[str] = "expense"

    id: int
    slaughterhouse_id: int
    date: int
    category: str
    amount: float
    description: str = ""


@dataclass(frozen=True)
class QualityInspection(Record):
    """Inspection of one animal; joined to a slaughterhouse through the animal."""

    KIND: ClassVar[str] = "quality_inspection"

    id: int
    animal_id: int
    inspector_name: str
    inspection_date: int
    temperature: float
    ph_level: float
    visual_inspection: str
    passed: bool
    notes: str = ""


@dataclass(frozen=True)
class Employee(Record):
    KIND: ClassVar[str] = "employee"

    id: int
    slaughterhouse_id: int
    name: str
    role: str
    certification: str
    hire_date: int
    contact: str
    status: str = EmployeeStatus.ACTIVE.value


@dataclass(frozen=True)
class MaintenanceRecord(Record):
    """Scheduled or performed maintenance on a piece of equipment.

    Attributes:
        maintenance_type: e.g. routine, repair, emergency
        cost: Estimated cost while scheduled, actual cost once completed
        date: Scheduled date (Unix ms)
        next_maintenance_date: Follow-up date (Unix ms)
        performed_by: Empty until the work is completed
    """

    KIND: ClassVar[str] = "maintenance_record"

    id: int
    slaughterhouse_id: int
    equipment_name: str
    maintenance_type: str
    cost: float
    date: int
    next_maintenance_date: int
    performed_by: str = ""
    status: str = MaintenanceStatus.SCHEDULED.value
    notes: str = ""


@dataclass(frozen=True)
class Supplier(Record):
    """Livestock or materials supplier. Not tied to a slaughterhouse.

    Attributes:
        rating: 0 (unrated) to 5
    """

    KIND: ClassVar[str] = "supplier"

    id: int
    name: str
    contact: str
    email: str
    supplier_type: str
    rating: int
    active_since: int
    last_supply_date: int = 0


@dataclass(frozen=True)
class Shipment(Record):
    """Outbound shipment of meat products.

    Attributes:
        product_ids: MeatProduct ids carried by the shipment
        temperature_log: Cold-chain readings in degrees Celsius
        tracking_number: "SH" followed by the zero-padded shipment id
    """

    KIND: ClassVar[str] = "shipment"

    id: int
    slaughterhouse_id: int
    destination: str
    shipping_date: int
    expected_delivery: int
    tracking_number: str
    product_ids: list[int] = field(default_factory=list)
    temperature_log: list[float] = field(default_factory=list)
    status: str = ShipmentStatus.PREPARING.value


@dataclass(frozen=True)
class WasteRecord(Record):
    KIND: ClassVar[str] = "waste_record"

    id: int
    slaughterhouse_id: int
    waste_type: str
    quantity: float
    disposal_method: str
    disposal_date: int
    handled_by: str
    cost: float


RECORD_TYPES: tuple[type[Record], ...] = (
    Slaughterhouse,
    Animal,
    MeatProduct,
    Expense,
    QualityInspection,
    Employee,
    MaintenanceRecord,
    Supplier,
    Shipment,
    WasteRecord,
)
