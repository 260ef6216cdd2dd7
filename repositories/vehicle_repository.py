"""
Vehicle repository (persistence).

Status changes are written as single conditional updates
(`UPDATE ... WHERE vehicle_id = ? AND status = ?`). PostgreSQL applies each
under a row lock, so of two concurrent reservations of the same vehicle
exactly one sees its row updated. Callers distinguish "not found" from
"wrong state" by re-reading the row.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.vehicle import Vehicle, VehicleStatus
from repositories.client import get_supabase
from repositories.rows import optional_utc, optional_uuid, to_decimal, to_iso_utc

_VEHICLES_TABLE: str = "vehicles"
_SALES_TABLE: str = "sales"

# Money columns are written as strings to keep numeric(18,2) exact.
_DECIMAL_COLUMNS = frozenset({"purchase_price", "sale_price"})


def _row_to_vehicle(row: Mapping[str, Any]) -> Vehicle:
    """Convert a Supabase row into a Vehicle."""

    return Vehicle(
        vehicle_id=UUID(str(row["vehicle_id"])),
        vin_number=str(row.get("vin_number") or ""),
        license_plate=str(row.get("license_plate") or ""),
        mileage=int(row.get("mileage") or 0),
        purchase_price=to_decimal(row.get("purchase_price") or 0),
        sale_price=to_decimal(row["sale_price"]),
        status=VehicleStatus(str(row["status"])),
        notes=row.get("notes"),
        model_year_id=optional_uuid(row, "model_year_id"),
        reserved_sale_id=optional_uuid(row, "reserved_sale_id"),
        created_at=optional_utc(row, "created_at_utc"),
        updated_at=optional_utc(row, "updated_at_utc"),
    )


def get_vehicle_by_id(vehicle_id: UUID) -> Optional[Vehicle]:
    """
    Retrieve a single vehicle by its ID.

    Returns:
        Vehicle or None if not found
    """

    response = (
        get_supabase()
        .table(_VEHICLES_TABLE)
        .select("*")
        .eq("vehicle_id", str(vehicle_id))
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get vehicle: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None
    return _row_to_vehicle(rows[0])


def get_vehicle_by_sale_id(sale_id: UUID) -> Optional[Vehicle]:
    """
    Retrieve the vehicle a sale refers to.

    Returns None if the sale or its vehicle does not exist.
    """

    response = (
        get_supabase()
        .table(_SALES_TABLE)
        .select("vehicle_id")
        .eq("sale_id", str(sale_id))
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get sale vehicle: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        return None
    return get_vehicle_by_id(UUID(str(rows[0]["vehicle_id"])))


def _conditional_update(
    vehicle_id: UUID,
    expected_status: VehicleStatus,
    payload: dict[str, Any],
    action: str,
    reserved_sale_id: Optional[UUID] = None,
) -> Optional[Vehicle]:
    query = (
        get_supabase()
        .table(_VEHICLES_TABLE)
        .update(payload)
        .eq("vehicle_id", str(vehicle_id))
        .eq("status", expected_status.value)
    )
    if reserved_sale_id is not None:
        query = query.eq("reserved_sale_id", str(reserved_sale_id))
    response = query.execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")

    updated_rows = getattr(response, "data", None) or []
    if not updated_rows:
        # Either no vehicle exists, or it was not in the expected status.
        return None
    return _row_to_vehicle(updated_rows[0])


def reserve_vehicle(
    vehicle_id: UUID,
    reserved_at: datetime,
    sale_id: Optional[UUID] = None,
) -> Optional[Vehicle]:
    """
    Move a vehicle from Available to Reserved, held by `sale_id`.

    Returns:
        The reserved Vehicle, or None if it does not exist or was not Available.
    """

    payload = {
        "status": VehicleStatus.RESERVED.value,
        "reserved_sale_id": str(sale_id) if sale_id is not None else None,
        "updated_at_utc": to_iso_utc(reserved_at, name="reserved_at"),
    }
    return _conditional_update(vehicle_id, VehicleStatus.AVAILABLE, payload, "reserve vehicle")


def release_vehicle(
    vehicle_id: UUID,
    released_at: datetime,
    sale_id: Optional[UUID] = None,
) -> Optional[Vehicle]:
    """
    Move a vehicle from Reserved back to Available.

    When `sale_id` is given the release only happens if that sale still holds
    the reservation.

    Returns:
        The released Vehicle, or None if it does not exist, was not Reserved,
        or is held by a different sale.
    """

    payload = {
        "status": VehicleStatus.AVAILABLE.value,
        "reserved_sale_id": None,
        "updated_at_utc": to_iso_utc(released_at, name="released_at"),
    }
    return _conditional_update(
        vehicle_id, VehicleStatus.RESERVED, payload, "release vehicle", reserved_sale_id=sale_id
    )


def update_vehicle_if_available(
    vehicle_id: UUID,
    changes: Mapping[str, Any],
    updated_at: datetime,
) -> Optional[Vehicle]:
    """
    Apply catalog edits to a vehicle that is still Available.

    Args:
        vehicle_id: Vehicle identifier
        changes: Column -> new value (only editable catalog columns)
        updated_at: UTC timestamp of the edit

    Returns:
        The updated Vehicle, or None if it does not exist or is no longer Available.
    """

    payload: dict[str, Any] = {
        column: str(value) if column in _DECIMAL_COLUMNS else value
        for column, value in changes.items()
    }
    payload["updated_at_utc"] = to_iso_utc(updated_at, name="updated_at")
    return _conditional_update(vehicle_id, VehicleStatus.AVAILABLE, payload, "update vehicle")


def list_vehicles_by_status(
    status: Optional[VehicleStatus] = None,
    order_by_price: bool = False,
) -> List[Vehicle]:
    """
    List vehicles, optionally filtered by status.

    Args:
        status: Only return vehicles in this status (None = all)
        order_by_price: Sort by sale_price ascending instead of creation time

    Returns:
        List[Vehicle] (possibly empty)
    """

    query = get_supabase().table(_VEHICLES_TABLE).select("*")
    if status is not None:
        query = query.eq("status", status.value)
    query = query.order("sale_price" if order_by_price else "created_at_utc")

    response = query.execute()
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list vehicles: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_vehicle(row) for row in rows]


__all__ = [
    "get_vehicle_by_id",
    "get_vehicle_by_sale_id",
    "reserve_vehicle",
    "release_vehicle",
    "update_vehicle_if_available",
    "list_vehicles_by_status",
]
