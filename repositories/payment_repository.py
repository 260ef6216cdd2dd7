"""
Payment repository (persistence).

Payments are inserted together with their sale (see sale_repository). The
only status change after that is settlement, which also moves the vehicle
and therefore goes through the `settle_payment_atomic` PostgreSQL function.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping
from uuid import UUID

from domain.payment import Payment, PaymentStatus, PaymentType
from domain.settlement import Settlement
from repositories.client import get_supabase
from repositories.rows import optional_utc, parse_utc_datetime, to_decimal, to_iso_utc
from repositories.rpc import call_atomic
from repositories.sale_repository import list_sales_by_vehicle

_PAYMENTS_TABLE: str = "payments"

# Reported by settle_payment_atomic when a status guard no longer holds.
_STATE_CHANGED = "STATE_CHANGED"


def _row_to_payment(row: Mapping[str, Any]) -> Payment:
    return Payment(
        payment_id=UUID(str(row["payment_id"])),
        sale_id=UUID(str(row["sale_id"])),
        amount=to_decimal(row["amount"]),
        payment_date=parse_utc_datetime(row["payment_date_utc"]),
        payment_type=PaymentType(int(row["payment_type"])),
        status=PaymentStatus(str(row["status"])),
        transaction_id=row.get("transaction_id"),
        notes=row.get("notes"),
        created_at=optional_utc(row, "created_at_utc"),
        updated_at=optional_utc(row, "updated_at_utc"),
    )


def list_payments_by_sale(sale_id: UUID) -> List[Payment]:
    """
    Retrieve all payments recorded against a sale, oldest first.

    Returns:
        List[Payment] (possibly empty)
    """

    response = (
        get_supabase()
        .table(_PAYMENTS_TABLE)
        .select("*")
        .eq("sale_id", str(sale_id))
        .order("payment_date_utc")
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list payments: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_payment(row) for row in rows]


def list_pending_payments_for_vehicle(vehicle_id: UUID) -> List[Payment]:
    """Pending payments across every sale of a vehicle."""

    sale_ids = [str(sale.sale_id) for sale in list_sales_by_vehicle(vehicle_id)]
    if not sale_ids:
        return []

    response = (
        get_supabase()
        .table(_PAYMENTS_TABLE)
        .select("*")
        .in_("sale_id", sale_ids)
        .eq("status", PaymentStatus.PENDING.value)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list pending payments: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_payment(row) for row in rows]


def apply_settlement(
    payment_id: UUID,
    vehicle_id: UUID,
    sale_id: UUID,
    settlement: Settlement,
    settled_at: datetime,
) -> bool:
    """
    Write a settlement to the payment and vehicle rows in one transaction.

    Both updates are guarded by the statuses the settlement was planned
    from, and the vehicle update by its reservation still belonging to
    `sale_id`. If any guard fails, nothing is written.

    Returns:
        True if applied, False if a guard failed (state changed concurrently)
    """

    result = call_atomic(
        "settle_payment_atomic",
        {
            "p_payment_id": str(payment_id),
            "p_vehicle_id": str(vehicle_id),
            "p_sale_id": str(sale_id),
            "p_expected_payment_status": settlement.expected_payment_status.value,
            "p_expected_vehicle_status": settlement.expected_vehicle_status.value,
            "p_payment_status": settlement.payment_status.value,
            "p_vehicle_status": settlement.vehicle_status.value,
            "p_settled_at": to_iso_utc(settled_at, name="settled_at"),
        },
    )

    if result.get("success"):
        return True
    if result.get("error") == _STATE_CHANGED:
        return False
    raise RuntimeError(
        f"Failed to apply settlement: {result.get('error')}: {result.get('message')}"
    )


__all__ = [
    "list_payments_by_sale",
    "list_pending_payments_for_vehicle",
    "apply_settlement",
]
