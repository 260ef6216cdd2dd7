"""
Domain: Payments against a sale.

Contract excerpts implemented here:
- A marketplace payment is created Pending, carrying an externally visible
  transaction id derived from the sale id: "PAY_" + 32 lowercase hex digits.
- Only the webhook reconciler moves a payment out of Pending.
- Card, transfer and financing payments are completed on an external page;
  cash and check payments are processed offline and get no URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional
from uuid import UUID

from .time import require_utc_timestamp

TRANSACTION_ID_PREFIX = "PAY_"


class PaymentType(IntEnum):
    CASH = 1
    CREDIT_CARD = 2
    DEBIT_CARD = 3
    BANK_TRANSFER = 4
    FINANCING = 5
    CHECK = 6

    @property
    def label(self) -> str:
        """PascalCase name used in payment notes (e.g. "CreditCard")."""
        return "".join(part.capitalize() for part in self.name.split("_"))


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"


_PAYMENT_URL_TEMPLATES = {
    PaymentType.CREDIT_CARD: "https://payment-gateway.com/credit-card/{transaction_id}",
    PaymentType.DEBIT_CARD: "https://payment-gateway.com/debit-card/{transaction_id}",
    PaymentType.BANK_TRANSFER: "https://payment-gateway.com/bank-transfer/{transaction_id}",
    PaymentType.FINANCING: "https://financing-partner.com/process/{transaction_id}",
}


@dataclass(frozen=True, slots=True)
class Payment:
    """
    Immutable record of a payment for a sale.

    transaction_id is the correlation key echoed back by the external payment
    notifier; (sale_id, transaction_id) identifies the payment in a webhook.
    """

    payment_id: UUID
    sale_id: UUID
    amount: Decimal
    payment_date: datetime
    payment_type: PaymentType
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("payment_date", self.payment_date)
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING


def transaction_id_for(sale_id: UUID) -> str:
    """Deterministic transaction id for a sale's marketplace payment."""

    return f"{TRANSACTION_ID_PREFIX}{sale_id.hex}"


def payment_url_for(payment_type: PaymentType, transaction_id: str) -> Optional[str]:
    """External processing URL for a payment method, or None when processed offline."""

    template = _PAYMENT_URL_TEMPLATES.get(payment_type)
    if template is None:
        return None
    return template.format(transaction_id=transaction_id)


def pending_payment_note(payment_type: PaymentType) -> str:
    return f"Payment pending for marketplace sale - {payment_type.label}"


__all__ = [
    "PaymentType",
    "PaymentStatus",
    "Payment",
    "transaction_id_for",
    "payment_url_for",
    "pending_payment_note",
]
