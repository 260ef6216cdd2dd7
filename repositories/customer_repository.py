"""
Customer repository for buyer records.

Customers created by the marketplace are keyed by their normalized tax id.
The `customers.document` column carries a partial unique index, so a
concurrent insert for the same document fails with DuplicateRecordError
instead of producing a second row.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import UUID, uuid4

from postgrest.exceptions import APIError

from domain.customer import Customer
from domain.errors import DuplicateRecordError
from repositories.client import get_supabase
from repositories.rows import is_unique_violation, optional_utc, to_iso_utc

_CUSTOMERS_TABLE: str = "customers"


def _row_to_customer(row: Mapping[str, Any]) -> Customer:
    return Customer(
        customer_id=UUID(str(row["customer_id"])),
        name=str(row["name"]),
        email=str(row.get("email") or ""),
        phone=row.get("phone"),
        address=row.get("address"),
        document=row.get("document"),
        is_active=bool(row.get("is_active", True)),
        created_at=optional_utc(row, "created_at_utc"),
        updated_at=optional_utc(row, "updated_at_utc"),
    )


def get_customer_by_document(document: str) -> Optional[Customer]:
    """
    Get a customer by normalized document (digits only).

    Args:
        document: Normalized CPF digits

    Returns:
        Customer domain model or None if not found

    Example:
        customer = get_customer_by_document("12345678909")
    """
    response = (
        get_supabase()
        .table(_CUSTOMERS_TABLE)
        .select("*")
        .eq("document", document)
        .limit(1)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to fetch customer: {error}")

    rows = getattr(response, "data", None) or []

    if not rows:
        return None

    return _row_to_customer(rows[0])


def create_customer(
    name: str,
    email: str,
    document: str,
    created_at: datetime,
    phone: Optional[str] = None,
) -> Customer:
    """
    Insert a new active customer.

    Args:
        name: Display name
        email: Contact email (may be empty)
        document: Normalized CPF digits
        created_at: UTC creation timestamp
        phone: Optional contact phone

    Returns:
        Created Customer domain model

    Raises:
        DuplicateRecordError: a customer with this document already exists
    """
    customer_id = uuid4()
    created_iso = to_iso_utc(created_at, name="created_at")

    payload = {
        "customer_id": str(customer_id),
        "name": name,
        "email": email,
        "phone": phone,
        "document": document,
        "is_active": True,
        "created_at_utc": created_iso,
        "updated_at_utc": created_iso,
    }

    try:
        response = get_supabase().table(_CUSTOMERS_TABLE).insert(payload).execute()
    except APIError as exc:
        if is_unique_violation(exc):
            raise DuplicateRecordError(_CUSTOMERS_TABLE, f"document={document}") from exc
        raise

    error = getattr(response, "error", None)
    if error:
        if is_unique_violation(error):
            raise DuplicateRecordError(_CUSTOMERS_TABLE, f"document={document}") from None
        raise RuntimeError(f"Failed to create customer: {error}")

    return Customer(
        customer_id=customer_id,
        name=name,
        email=email,
        phone=phone,
        document=document,
        is_active=True,
        created_at=created_at,
        updated_at=created_at,
    )


__all__ = [
    "get_customer_by_document",
    "create_customer",
]
