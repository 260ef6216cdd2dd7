"""
Domain: Vehicle inventory units.

Lifecycle rules enforced around this entity:
- Only an Available vehicle may be reserved by a marketplace sale.
- Only a Reserved vehicle may be settled (Sold or released to Available).
- Only an Available vehicle may be edited.

This module contains only pure entities and rules: no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from .errors import ConflictError
from .time import require_utc_timestamp


class VehicleStatus(str, Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    SOLD = "Sold"
    IN_MAINTENANCE = "InMaintenance"
    UNAVAILABLE = "Unavailable"


@dataclass(frozen=True, slots=True)
class Vehicle:
    """
    A single unit of inventory offered on the marketplace.

    `sale_price` is the asking price; a marketplace sale charges exactly this
    amount at reservation time.

    `reserved_sale_id` names the sale holding the vehicle while it is
    Reserved (and the sale that bought it once Sold). Settlement only acts on
    the sale that holds the reservation.
    """

    vehicle_id: UUID
    sale_price: Decimal
    status: VehicleStatus
    vin_number: str = ""
    license_plate: str = ""
    mileage: int = 0
    purchase_price: Decimal = Decimal("0.00")
    notes: Optional[str] = None
    model_year_id: Optional[UUID] = None
    reserved_sale_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    @property
    def is_available(self) -> bool:
        return self.status == VehicleStatus.AVAILABLE

    @property
    def is_reserved(self) -> bool:
        return self.status == VehicleStatus.RESERVED


@dataclass(frozen=True, slots=True)
class VehicleUpdate:
    """Editable catalog fields. None means "leave unchanged"."""

    vin_number: Optional[str] = None
    license_plate: Optional[str] = None
    mileage: Optional[int] = None
    purchase_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None
    notes: Optional[str] = None

    def changed_fields(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


def assert_editable(vehicle: Vehicle) -> None:
    """Reject edits to any vehicle that is not Available."""

    if not vehicle.is_available:
        raise ConflictError("Vehicle can only be edited when status is Available")


__all__ = ["VehicleStatus", "Vehicle", "VehicleUpdate", "assert_editable"]
