"""
Vehicles API Endpoints.

Endpoints for browsing the vehicle catalog and editing Available vehicles.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from api.models import ErrorResponse, VehicleListResponse, VehicleResponse, VehicleUpdateRequest
from domain.vehicle import VehicleStatus, VehicleUpdate
from services.inventory_service import get_vehicle, list_vehicles, update_vehicle

router = APIRouter()


@router.get(
    "/vehicles",
    response_model=VehicleListResponse,
    summary="List Vehicles",
    description="Browse vehicles, optionally filtered by status and sorted by price."
)
def list_catalog_vehicles(
    status: Optional[str] = Query(None, description="Filter by status (e.g. 'Available', 'Reserved')"),
    order_by_price: bool = Query(False, description="Sort by sale price ascending"),
):
    """
    List vehicles.

    **Example usage:**
    - All vehicles: `GET /api/v1/vehicles`
    - Only buyable vehicles: `GET /api/v1/vehicles?status=Available`
    - Cheapest first: `GET /api/v1/vehicles?status=Available&order_by_price=true`
    """
    status_filter = None
    if status:
        try:
            status_filter = VehicleStatus(status)
        except ValueError:
            valid = ", ".join(s.value for s in VehicleStatus)
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status. Must be one of {valid}, got '{status}'"
            )

    vehicles = list_vehicles(status_filter, order_by_price=order_by_price)
    return VehicleListResponse(
        items=[VehicleResponse.from_domain(v) for v in vehicles],
        total_count=len(vehicles),
    )


@router.get(
    "/vehicles/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Get Vehicle",
    responses={404: {"model": ErrorResponse, "description": "Vehicle not found"}},
)
def get_catalog_vehicle(vehicle_id: UUID):
    """Return a single vehicle by ID."""
    return VehicleResponse.from_domain(get_vehicle(vehicle_id))


@router.put(
    "/vehicles/{vehicle_id}",
    response_model=VehicleResponse,
    summary="Edit Vehicle",
    responses={
        400: {"model": ErrorResponse, "description": "Nothing to update"},
        404: {"model": ErrorResponse, "description": "Vehicle not found"},
        409: {"model": ErrorResponse, "description": "Vehicle is not Available"},
    },
)
def edit_catalog_vehicle(vehicle_id: UUID, request: VehicleUpdateRequest):
    """
    Edit catalog fields of a vehicle.

    Only vehicles in status **Available** can be edited. Reserved or sold
    vehicles are locked until their sale settles.
    """
    updated = update_vehicle(
        vehicle_id,
        VehicleUpdate(
            vin_number=request.vin_number,
            license_plate=request.license_plate,
            mileage=request.mileage,
            purchase_price=request.purchase_price,
            sale_price=request.sale_price,
            notes=request.notes,
        ),
    )
    return VehicleResponse.from_domain(updated)
