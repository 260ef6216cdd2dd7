"""
Domain: Salesperson records.

Every sale must reference a salesperson. Marketplace sales have none, so they
are attributed to the first active salesperson or, failing that, to a house
salesperson identified by a well-known employee code.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp

HOUSE_SALESPERSON_NAME = "System Sales"
HOUSE_SALESPERSON_EMAIL = "system@mainmotor.com"
HOUSE_EMPLOYEE_CODE = "SYS001"


@dataclass(frozen=True, slots=True)
class Salesperson:
    salesperson_id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    employee_code: Optional[str] = None
    commission_rate: Decimal = Decimal("0.05")
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)
