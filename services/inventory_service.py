"""
Inventory service: vehicle reservation and catalog edits.

Handles:
- Reserving an Available vehicle for a marketplace sale (at most one winner)
- Releasing a reservation when a sale cannot be completed
- Editing catalog fields of Available vehicles only
- Finding reservations left behind without a pending payment
"""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from domain.errors import ConflictError, NotFoundError, ValidationError
from domain.time import utc_now
from domain.vehicle import Vehicle, VehicleStatus, VehicleUpdate, assert_editable
from repositories import vehicle_repository
from repositories.payment_repository import list_pending_payments_for_vehicle

logger = logging.getLogger(__name__)

NOT_AVAILABLE_MESSAGE = "Vehicle is not available for sale"


def get_vehicle(vehicle_id: UUID) -> Vehicle:
    vehicle = vehicle_repository.get_vehicle_by_id(vehicle_id)
    if vehicle is None:
        raise NotFoundError("Vehicle", vehicle_id)
    return vehicle


def list_vehicles(
    status: Optional[VehicleStatus] = None,
    order_by_price: bool = False,
) -> List[Vehicle]:
    return vehicle_repository.list_vehicles_by_status(status, order_by_price=order_by_price)


def reserve_vehicle(vehicle_id: UUID, sale_id: Optional[UUID] = None) -> Vehicle:
    """
    Atomically move a vehicle from Available to Reserved on behalf of `sale_id`.

    Of any number of concurrent calls for the same vehicle, at most one
    succeeds; the others get ConflictError.

    Returns:
        The reserved Vehicle (its sale_price is the amount to charge)

    Raises:
        NotFoundError: no vehicle with this ID
        ConflictError: vehicle exists but is not Available
    """

    reserved = vehicle_repository.reserve_vehicle(vehicle_id, reserved_at=utc_now(), sale_id=sale_id)
    if reserved is not None:
        logger.info("Vehicle reserved", extra={"vehicle_id": str(vehicle_id)})
        return reserved

    current = vehicle_repository.get_vehicle_by_id(vehicle_id)
    if current is None:
        raise NotFoundError("Vehicle", vehicle_id)

    logger.info(
        "Reservation rejected",
        extra={"vehicle_id": str(vehicle_id), "vehicle_status": current.status.value},
    )
    raise ConflictError(NOT_AVAILABLE_MESSAGE)


def release_reservation(vehicle_id: UUID, sale_id: Optional[UUID] = None) -> bool:
    """
    Return a Reserved vehicle to Available.

    With `sale_id`, only a reservation held by that sale is released.

    Returns:
        True if released, False if the vehicle was not Reserved, is held by
        another sale, or is gone
    """

    released = vehicle_repository.release_vehicle(vehicle_id, released_at=utc_now(), sale_id=sale_id)
    return released is not None


def update_vehicle(vehicle_id: UUID, changes: VehicleUpdate) -> Vehicle:
    """
    Edit catalog fields of an Available vehicle.

    Raises:
        NotFoundError: no vehicle with this ID
        ConflictError: vehicle is not Available (including a reservation
            that lands between the check and the write)
        ValidationError: no fields to change
    """

    fields = changes.changed_fields()
    if not fields:
        raise ValidationError("Vehicle", "No fields to update")

    assert_editable(get_vehicle(vehicle_id))

    updated = vehicle_repository.update_vehicle_if_available(vehicle_id, fields, updated_at=utc_now())
    if updated is None:
        # Re-raise through the same guard against whatever is stored now.
        assert_editable(get_vehicle(vehicle_id))
        raise ConflictError("Vehicle can only be edited when status is Available")
    return updated


def find_orphaned_reservations() -> List[Vehicle]:
    """
    Reserved vehicles with no pending payment on any of their sales.

    These are left behind when a registration died between reservation and
    persisting the sale without running its compensating release.
    """

    orphaned: List[Vehicle] = []
    for vehicle in vehicle_repository.list_vehicles_by_status(VehicleStatus.RESERVED):
        if not list_pending_payments_for_vehicle(vehicle.vehicle_id):
            orphaned.append(vehicle)
    return orphaned


__all__ = [
    "NOT_AVAILABLE_MESSAGE",
    "get_vehicle",
    "list_vehicles",
    "reserve_vehicle",
    "release_reservation",
    "update_vehicle",
    "find_orphaned_reservations",
]
