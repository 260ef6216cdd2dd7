"""
Salesperson repository (persistence).

`salespeople.employee_code` is unique, which is what keeps the house
salesperson a singleton when several first sales race to provision it.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional
from uuid import UUID, uuid4

from postgrest.exceptions import APIError

from domain.errors import DuplicateRecordError
from domain.salesperson import Salesperson
from repositories.client import get_supabase
from repositories.rows import is_unique_violation, optional_utc, to_iso_utc

_SALESPEOPLE_TABLE: str = "salespeople"


def _row_to_salesperson(row: Mapping[str, Any]) -> Salesperson:
    return Salesperson(
        salesperson_id=UUID(str(row["salesperson_id"])),
        name=str(row["name"]),
        email=str(row.get("email") or ""),
        phone=row.get("phone"),
        employee_code=row.get("employee_code"),
        commission_rate=Decimal(str(row.get("commission_rate") or 0)),
        is_active=bool(row.get("is_active", True)),
        created_at=optional_utc(row, "created_at_utc"),
        updated_at=optional_utc(row, "updated_at_utc"),
    )


def _first_row(response: Any, action: str) -> Optional[Mapping[str, Any]]:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    rows = getattr(response, "data", None) or []
    return rows[0] if rows else None


def get_first_active_salesperson() -> Optional[Salesperson]:
    """Return the earliest-created active salesperson, or None."""

    response = (
        get_supabase()
        .table(_SALESPEOPLE_TABLE)
        .select("*")
        .eq("is_active", True)
        .order("created_at_utc")
        .limit(1)
        .execute()
    )
    row = _first_row(response, "fetch active salesperson")
    return _row_to_salesperson(row) if row else None


def get_salesperson_by_employee_code(employee_code: str) -> Optional[Salesperson]:
    response = (
        get_supabase()
        .table(_SALESPEOPLE_TABLE)
        .select("*")
        .eq("employee_code", employee_code)
        .limit(1)
        .execute()
    )
    row = _first_row(response, "fetch salesperson")
    return _row_to_salesperson(row) if row else None


def create_salesperson(
    name: str,
    email: str,
    employee_code: str,
    commission_rate: Decimal,
    created_at: datetime,
    phone: Optional[str] = None,
) -> Salesperson:
    """
    Insert an active salesperson.

    Raises:
        DuplicateRecordError: employee_code is already taken
    """

    salesperson_id = uuid4()
    created_iso = to_iso_utc(created_at, name="created_at")

    payload = {
        "salesperson_id": str(salesperson_id),
        "name": name,
        "email": email,
        "phone": phone,
        "employee_code": employee_code,
        "commission_rate": str(commission_rate),
        "is_active": True,
        "created_at_utc": created_iso,
        "updated_at_utc": created_iso,
    }

    try:
        response = get_supabase().table(_SALESPEOPLE_TABLE).insert(payload).execute()
    except APIError as exc:
        if is_unique_violation(exc):
            raise DuplicateRecordError(_SALESPEOPLE_TABLE, f"employee_code={employee_code}") from exc
        raise

    error = getattr(response, "error", None)
    if error:
        if is_unique_violation(error):
            raise DuplicateRecordError(_SALESPEOPLE_TABLE, f"employee_code={employee_code}") from None
        raise RuntimeError(f"Failed to create salesperson: {error}")

    return Salesperson(
        salesperson_id=salesperson_id,
        name=name,
        email=email,
        phone=phone,
        employee_code=employee_code,
        commission_rate=commission_rate,
        is_active=True,
        created_at=created_at,
        updated_at=created_at,
    )


__all__ = [
    "get_first_active_salesperson",
    "get_salesperson_by_employee_code",
    "create_salesperson",
]
