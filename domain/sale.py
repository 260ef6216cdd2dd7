"""
Domain: Sale records.

Contract excerpts relevant here:
- A sale always references a vehicle, a customer and a salesperson.
- total_amount is the vehicle's sale price at reservation time.
- A sale is created exactly once per registration and is never deleted by the
  marketplace workflow. Payments hang off a sale (one-to-many).

This module captures sale records. Availability decisions and enforcement
live with the inventory service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp

MARKETPLACE_SALE_NOTE = "Sale registered via marketplace"


@dataclass(frozen=True, slots=True)
class SaleRecord:
    """
    Immutable record of a vehicle sale.

    Captures:
    - What was sold (vehicle_id)
    - Who bought it (customer_id) and who is credited (salesperson_id)
    - When it was sold (sale_date)
    - How much it was sold for (total_amount) and the commission owed

    All timestamps must be passed explicitly.
    """

    sale_id: UUID
    vehicle_id: UUID
    customer_id: UUID
    salesperson_id: UUID
    sale_date: datetime
    total_amount: Decimal
    commission_amount: Decimal = Decimal("0.00")
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("sale_date", self.sale_date)
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)
