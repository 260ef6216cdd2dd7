"""
Tests for `domain/sale.py` and `domain/payment.py`.

Covers contract rules:
- SaleRecord.sale_date is required and must be a UTC timestamp.
- SaleRecord and Payment are immutable (frozen).
- Transaction ids are "PAY_" + the sale id's 32 lowercase hex digits.
- Payment URLs depend only on the payment type; cash and check have none.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from domain.payment import (
    Payment,
    PaymentStatus,
    PaymentType,
    payment_url_for,
    pending_payment_note,
    transaction_id_for,
)
from domain.sale import SaleRecord

SALE_ID = UUID("0f8fad5b-d9cb-469f-a165-70867728950e")
VEHICLE_ID = UUID("00000000-0000-0000-0000-000000000010")
CUSTOMER_ID = UUID("00000000-0000-0000-0000-000000000020")
SALESPERSON_ID = UUID("00000000-0000-0000-0000-000000000030")


def _sale(sale_date: datetime) -> SaleRecord:
    return SaleRecord(
        sale_id=SALE_ID,
        vehicle_id=VEHICLE_ID,
        customer_id=CUSTOMER_ID,
        salesperson_id=SALESPERSON_ID,
        sale_date=sale_date,
        total_amount=Decimal("45000.00"),
    )


def test_sale_record_sale_date_must_be_utc() -> None:
    """Verify sale_date enforces UTC timezone-aware timestamp."""

    with pytest.raises(ValueError):
        _sale(datetime(2025, 1, 1, 0, 0, 0))

    with pytest.raises(ValueError):
        _sale(datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone(timedelta(hours=-3))))


def test_sale_record_defaults_and_immutability() -> None:
    sale = _sale(datetime(2025, 1, 1, tzinfo=timezone.utc))

    assert sale.commission_amount == Decimal("0.00")
    assert sale.notes is None

    with pytest.raises(FrozenInstanceError):
        sale.total_amount = Decimal("1.00")  # type: ignore[misc]


def test_transaction_id_is_prefixed_sale_hex() -> None:
    tx = transaction_id_for(SALE_ID)

    assert tx == "PAY_0f8fad5bd9cb469fa16570867728950e"
    assert len(tx) == 36
    assert tx[4:] == tx[4:].lower()


@pytest.mark.parametrize(
    ("payment_type", "expected"),
    [
        (PaymentType.CREDIT_CARD, "https://payment-gateway.com/credit-card/PAY_X"),
        (PaymentType.DEBIT_CARD, "https://payment-gateway.com/debit-card/PAY_X"),
        (PaymentType.BANK_TRANSFER, "https://payment-gateway.com/bank-transfer/PAY_X"),
        (PaymentType.FINANCING, "https://financing-partner.com/process/PAY_X"),
        (PaymentType.CASH, None),
        (PaymentType.CHECK, None),
    ],
)
def test_payment_url_by_type(payment_type: PaymentType, expected: str) -> None:
    assert payment_url_for(payment_type, "PAY_X") == expected


def test_payment_type_codes_and_labels() -> None:
    assert [int(t) for t in PaymentType] == [1, 2, 3, 4, 5, 6]
    assert PaymentType(2).label == "CreditCard"
    assert pending_payment_note(PaymentType.BANK_TRANSFER) == (
        "Payment pending for marketplace sale - BankTransfer"
    )


def test_payment_defaults_to_pending_and_requires_utc() -> None:
    payment = Payment(
        payment_id=UUID("00000000-0000-0000-0000-000000000040"),
        sale_id=SALE_ID,
        amount=Decimal("45000.00"),
        payment_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        payment_type=PaymentType.CASH,
    )
    assert payment.status == PaymentStatus.PENDING
    assert payment.is_pending

    with pytest.raises(ValueError):
        Payment(
            payment_id=UUID("00000000-0000-0000-0000-000000000040"),
            sale_id=SALE_ID,
            amount=Decimal("45000.00"),
            payment_date=datetime(2025, 1, 1),
            payment_type=PaymentType.CASH,
        )
