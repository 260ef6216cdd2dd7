"""
Domain: Customer (buyer) records.

Marketplace customers are identified by their normalized tax id (CPF digits).
The first marketplace purchase by a document creates the record; later
purchases by the same document reuse it unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp

DEFAULT_CUSTOMER_NAME = "Customer"


@dataclass(frozen=True, slots=True)
class Customer:
    """
    Buyer record with contact details.

    `document` holds digits only (see domain.document.normalize_cpf). It is
    nullable for customers entered through the back office, but always set
    for customers created by the marketplace flow.
    """

    customer_id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    document: Optional[str] = None
    is_active: bool = True

    # Timestamps
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate timestamps are UTC-aware."""
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)
