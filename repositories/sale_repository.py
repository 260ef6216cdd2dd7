"""
Sale repository (persistence).

This module provides *only* persistence operations for the SaleRecord domain
entity. A marketplace sale is never written on its own: the sale and its
initial payment are inserted together by the `register_sale_atomic`
PostgreSQL function so that no sale exists without its payment.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.payment import Payment
from domain.sale import SaleRecord
from repositories.client import get_supabase
from repositories.rows import optional_utc, parse_utc_datetime, to_decimal, to_iso_utc
from repositories.rpc import call_atomic

# Supabase table name for sale records.
# Keep this aligned with sql/schema.sql.
_SALES_TABLE: str = "sales"


def _row_to_sale(row: Mapping[str, Any]) -> SaleRecord:
    """Convert a Supabase row into a SaleRecord."""

    return SaleRecord(
        sale_id=UUID(str(row["sale_id"])),
        vehicle_id=UUID(str(row["vehicle_id"])),
        customer_id=UUID(str(row["customer_id"])),
        salesperson_id=UUID(str(row["salesperson_id"])),
        sale_date=parse_utc_datetime(row["sale_date_utc"]),
        total_amount=to_decimal(row["total_amount"]),
        commission_amount=to_decimal(row.get("commission_amount") or 0),
        notes=row.get("notes"),
        created_at=optional_utc(row, "created_at_utc"),
        updated_at=optional_utc(row, "updated_at_utc"),
    )


def record_sale_with_payment(sale: SaleRecord, payment: Payment) -> None:
    """
    Insert a sale and its initial payment in one transaction.

    Args:
        sale: Sale to insert (sale_id generated by the caller)
        payment: Payment referencing sale.sale_id

    Raises:
        ValueError: payment does not belong to sale
        RuntimeError: the transaction failed; nothing was written
    """

    if payment.sale_id != sale.sale_id:
        raise ValueError("Payment must reference the sale being recorded")

    result = call_atomic(
        "register_sale_atomic",
        {
            "p_sale_id": str(sale.sale_id),
            "p_vehicle_id": str(sale.vehicle_id),
            "p_customer_id": str(sale.customer_id),
            "p_salesperson_id": str(sale.salesperson_id),
            "p_sale_date": to_iso_utc(sale.sale_date, name="sale_date"),
            "p_total_amount": str(sale.total_amount),
            "p_commission_amount": str(sale.commission_amount),
            "p_sale_notes": sale.notes,
            "p_payment_id": str(payment.payment_id),
            "p_payment_amount": str(payment.amount),
            "p_payment_date": to_iso_utc(payment.payment_date, name="payment_date"),
            "p_payment_type": int(payment.payment_type),
            "p_payment_status": payment.status.value,
            "p_transaction_id": payment.transaction_id,
            "p_payment_notes": payment.notes,
        },
    )

    if not result.get("success"):
        raise RuntimeError(
            f"Failed to record sale: {result.get('error')}: {result.get('message')}"
        )


def get_sale_by_id(sale_id: UUID) -> Optional[SaleRecord]:
    """
    Retrieve a single sale record by its ID.

    Args:
        sale_id: Sale identifier

    Returns:
        SaleRecord or None if not found
    """

    response = (
        get_supabase()
        .table(_SALES_TABLE)
        .select("*")
        .eq("sale_id", str(sale_id))
        .limit(1)
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to get sale: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return _row_to_sale(rows[0])


def list_sales_by_vehicle(vehicle_id: UUID) -> List[SaleRecord]:
    """
    Retrieve all sale records for a given vehicle, oldest first.

    Returns:
        List[SaleRecord] (possibly empty)
    """

    response = (
        get_supabase()
        .table(_SALES_TABLE)
        .select("*")
        .eq("vehicle_id", str(vehicle_id))
        .order("sale_date_utc")
        .execute()
    )
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to list sales: {error}")

    rows = getattr(response, "data", None) or []
    return [_row_to_sale(row) for row in rows]


__all__ = [
    "record_sale_with_payment",
    "get_sale_by_id",
    "list_sales_by_vehicle",
]
