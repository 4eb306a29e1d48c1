"""
Write-operation payloads and their validation.

Each payload is parsed from a plain dict (``from_dict``) and then checked
(``validate``). Both steps raise InvalidPayloadError and neither touches a
store, so a rejected payload never leaves a partial write behind.

Invariants:
    - from_dict only checks shape (presence and type of fields)
    - validate only checks business preconditions (non-empty, ranges)
    - Foreign-key existence is checked by the operations, not here
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidPayloadError


def _require(data: dict[str, Any], name: str) -> Any:
    if name not in data or data[name] is None:
        raise InvalidPayloadError(f"Field '{name}' is required", field_name=name)
    return data[name]


def _str(data: dict[str, Any], name: str, default: str | None = None) -> str:
    value = data.get(name, default) if default is not None else _require(data, name)
    if not isinstance(value, str):
        raise InvalidPayloadError(f"Field '{name}' must be a string", field_name=name)
    return value


def _int(data: dict[str, Any], name: str, default: int | None = None) -> int:
    value = data.get(name, default) if default is not None else _require(data, name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidPayloadError(f"Field '{name}' must be an integer", field_name=name)
    return value


def finite_float(value: float, name: str) -> float:
    """Return value as a float, rejecting NaN and infinities."""
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise InvalidPayloadError(f"Field '{name}' must be a finite number", field_name=name)
    return number


def _float(data: dict[str, Any], name: str, default: float | None = None) -> float:
    value = data.get(name, default) if default is not None else _require(data, name)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise InvalidPayloadError(f"Field '{name}' must be a number", field_name=name)
    return finite_float(value, name)


def _bool(data: dict[str, Any], name: str) -> bool:
    value = _require(data, name)
    if not isinstance(value, bool):
        raise InvalidPayloadError(f"Field '{name}' must be a boolean", field_name=name)
    return value


def _int_list(data: dict[str, Any], name: str) -> list[int]:
    value = data.get(name, [])
    if not isinstance(value, list) or any(
        not isinstance(v, int) or isinstance(v, bool) for v in value
    ):
        raise InvalidPayloadError(
            f"Field '{name}' must be a list of integers", field_name=name
        )
    return list(value)


def _raise_if(errors: list[str], message: str) -> None:
    if errors:
        raise InvalidPayloadError(message, errors=errors)


@dataclass
class CreateSlaughterhousePayload:
    name: str
    location: str
    contact: str
    email: str
    capacity: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreateSlaughterhousePayload:
        return cls(
            name=_str(data, "name"),
            location=_str(data, "location", ""),
            contact=_str(data, "contact"),
            email=_str(data, "email"),
            capacity=_int(data, "capacity", 0),
        )

    def validate(self) -> None:
        errors = []
        if not self.name or not self.contact or not self.email:
            errors.append("name, contact and email must be non-empty")
        if self.capacity < 0:
            errors.append("capacity cannot be negative")
        _raise_if(errors, "Missing required fields")


@dataclass
class RegisterAnimalPayload:
    slaughterhouse_id: int
    tag_number: str
    species: str
    weight: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegisterAnimalPayload:
        return cls(
            slaughterhouse_id=_int(data, "slaughterhouse_id"),
            tag_number=_str(data, "tag_number"),
            species=_str(data, "species"),
            weight=_float(data, "weight", 0.0),
        )

    def validate(self) -> None:
        errors = []
        if not self.tag_number or not self.species:
            errors.append("tag_number and species must be non-empty")
        if self.weight < 0:
            errors.append("weight cannot be negative")
        _raise_if(errors, "Missing required fields")


@dataclass
class CreateMeatProductPayload:
    animal_id: int
    slaughterhouse_id: int
    product_type: str
    weight: float
    price_per_kg: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CreateMeatProductPayload:
        return cls(
            animal_id=_int(data, "animal_id"),
            slaughterhouse_id=_int(data, "slaughterhouse_id"),
            product_type=_str(data, "product_type"),
            weight=_float(data, "weight"),
            price_per_kg=_float(data, "price_per_kg"),
        )

    def validate(self) -> None:
        errors = []
        if not self.product_type:
            errors.append("product_type must be non-empty")
        if self.weight <= 0:
            errors.append("weight must be positive")
        if self.price_per_kg <= 0:
            errors.append("price_per_kg must be positive")
        _raise_if(errors, "Invalid product data")


@dataclass
class RecordExpensePayload:
    slaughterhouse_id: int
    category: str
    amount: float
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordExpensePayload:
        return cls(
            slaughterhouse_id=_int(data, "slaughterhouse_id"),
            category=_str(data, "category", ""),
            amount=_float(data, "amount"),
            description=_str(data, "description", ""),
        )

    def validate(self) -> None:
        if self.amount <= 0:
            raise InvalidPayloadError("Invalid expense amount", field_name="amount")


@dataclass
class QualityInspectionPayload:
    animal_id: int
    inspector_name: str
    temperature: float
    ph_level: float
    visual_inspection: str
    passed: bool
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QualityInspectionPayload:
        return cls(
            animal_id=_int(data, "animal_id"),
            inspector_name=_str(data, "inspector_name"),
            temperature=_float(data, "temperature"),
            ph_level=_float(data, "ph_level"),
            visual_inspection=_str(data, "visual_inspection", ""),
            passed=_bool(data, "passed"),
            notes=_str(data, "notes", ""),
        )

    def validate(self) -> None:
        errors = []
        if not self.inspector_name:
            errors.append("inspector_name must be non-empty")
        if not 0.0 <= self.ph_level <= 14.0:
            errors.append("ph_level must be between 0 and 14")
        _raise_if(errors, "Invalid inspection data")


@dataclass
class EmployeePayload:
    slaughterhouse_id: int
    name: str
    role: str
    certification: str = ""
    contact: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmployeePayload:
        return cls(
            slaughterhouse_id=_int(data, "slaughterhouse_id"),
            name=_str(data, "name"),
            role=_str(data, "role"),
            certification=_str(data, "certification", ""),
            contact=_str(data, "contact", ""),
        )

    def validate(self) -> None:
        if not self.name or not self.role:
            raise InvalidPayloadError(
                "Missing required fields", errors=["name and role must be non-empty"]
            )


@dataclass
class MaintenancePayload:
    slaughterhouse_id: int
    equipment_name: str
    maintenance_type: str
    scheduled_date: int
    estimated_cost: float = 0.0
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MaintenancePayload:
        return cls(
            slaughterhouse_id=_int(data, "slaughterhouse_id"),
            equipment_name=_str(data, "equipment_name"),
            maintenance_type=_str(data, "maintenance_type"),
            scheduled_date=_int(data, "scheduled_date"),
            estimated_cost=_float(data, "estimated_cost", 0.0),
            notes=_str(data, "notes", ""),
        )

    def validate(self) -> None:
        errors = []
        if not self.equipment_name or not self.maintenance_type:
            errors.append("equipment_name and maintenance_type must be non-empty")
        if self.estimated_cost < 0:
            errors.append("estimated_cost cannot be negative")
        if self.scheduled_date < 0:
            errors.append("scheduled_date cannot be negative")
        _raise_if(errors, "Missing required fields")


@dataclass
class SupplierPayload:
    name: str
    contact: str
    email: str
    supplier_type: str = ""
    rating: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SupplierPayload:
        return cls(
            name=_str(data, "name"),
            contact=_str(data, "contact"),
            email=_str(data, "email"),
            supplier_type=_str(data, "supplier_type", ""),
            rating=_int(data, "rating", 0),
        )

    def validate(self) -> None:
        errors = []
        if not self.name or not self.contact or not self.email:
            errors.append("name, contact and email must be non-empty")
        if not 0 <= self.rating <= 5:
            errors.append("rating must be between 0 and 5")
        _raise_if(errors, "Missing required fields")


@dataclass
class ShipmentPayload:
    slaughterhouse_id: int
    destination: str
    expected_delivery: int
    product_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ShipmentPayload:
        return cls(
            slaughterhouse_id=_int(data, "slaughterhouse_id"),
            destination=_str(data, "destination"),
            expected_delivery=_int(data, "expected_delivery"),
            product_ids=_int_list(data, "product_ids"),
        )

    def validate(self) -> None:
        if not self.destination:
            raise InvalidPayloadError(
                "Invalid shipment data", errors=["destination must be non-empty"]
            )


@dataclass
class WastePayload:
    slaughterhouse_id: int
    waste_type: str
    quantity: float
    disposal_method: str
    cost: float = 0.0
    handled_by: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WastePayload:
        return cls(
            slaughterhouse_id=_int(data, "slaughterhouse_id"),
            waste_type=_str(data, "waste_type"),
            quantity=_float(data, "quantity"),
            disposal_method=_str(data, "disposal_method"),
            cost=_float(data, "cost", 0.0),
            handled_by=_str(data, "handled_by", ""),
        )

    def validate(self) -> None:
        errors = []
        if not self.waste_type or not self.disposal_method:
            errors.append("waste_type and disposal_method must be non-empty")
        if self.quantity <= 0:
            errors.append("quantity must be positive")
        if self.cost < 0:
            errors.append("cost cannot be negative")
        _raise_if(errors, "Invalid waste data")
