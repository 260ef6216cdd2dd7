"""
Sale registration service for marketplace purchases.

Handles:
- Tax-id validation before anything is touched
- Reserving the vehicle (at most one concurrent buyer wins)
- Resolving the buyer and the credited salesperson
- Persisting the sale and its pending payment in one transaction
- Releasing the reservation when a later step fails before the sale is
  written

Once a sale is registered the vehicle stays Reserved until the payment
webhook settles it (see payment_webhook_service).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from domain.document import normalize_cpf, validate_cpf
from domain.errors import NotFoundError, ValidationError
from domain.payment import (
    Payment,
    PaymentStatus,
    PaymentType,
    payment_url_for,
    pending_payment_note,
    transaction_id_for,
)
from domain.sale import MARKETPLACE_SALE_NOTE, SaleRecord
from domain.time import as_utc
from repositories.sale_repository import get_sale_by_id, record_sale_with_payment
from services.customer_service import resolve_or_create_customer
from services.inventory_service import release_reservation, reserve_vehicle
from services.salesperson_service import get_default_salesperson_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RegisterSaleRequest:
    """
    Request to buy one vehicle through the marketplace.

    sale_date defaults to now; naive datetimes are taken as UTC.
    """
    customer_cpf: str
    vehicle_id: UUID
    payment_type: PaymentType
    sale_date: Optional[datetime] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RegisterSaleResult:
    """
    Result of a successful registration.

    sale: The persisted sale
    payment: The persisted Pending payment
    transaction_id: Correlation key the payment notifier will echo back
    payment_url: Where the buyer completes payment (None for cash/check)
    """
    sale: SaleRecord
    payment: Payment
    transaction_id: str
    payment_url: Optional[str]


def register_sale(request: RegisterSaleRequest) -> RegisterSaleResult:
    """
    Register a marketplace sale.

    Process:
    1. Validate and normalize the buyer's CPF
    2. Reserve the vehicle (Available -> Reserved)
    3. Resolve or create the customer by document
    4. Resolve the default salesperson
    5. Build the sale (amount = vehicle sale price, no commission)
    6. Build the Pending payment with transaction id "PAY_<sale hex>"
    7. Persist sale + payment atomically
    8. Return the payment URL for the chosen payment type

    Failures in steps 1-2 leave nothing behind. A failure in any later step
    is re-raised unchanged; the reservation is released only when the sale
    is confirmed absent. If the transaction committed but its reply was lost,
    the vehicle stays Reserved for the recorded Pending payment.

    Args:
        request: RegisterSaleRequest

    Returns:
        RegisterSaleResult

    Raises:
        ValidationError: invalid CPF
        NotFoundError: vehicle does not exist
        ConflictError: vehicle is not Available

    Example:
        result = register_sale(RegisterSaleRequest(
            customer_cpf="123.456.789-09",
            vehicle_id=vehicle_id,
            payment_type=PaymentType.CREDIT_CARD,
        ))
        print(result.payment_url)
    """

    # 1. Validate CPF
    if not validate_cpf(request.customer_cpf):
        raise ValidationError("CustomerCpf", "Invalid CPF format")
    document = normalize_cpf(request.customer_cpf)
    payment_type = PaymentType(request.payment_type)

    # 2. Reserve the vehicle for the sale about to be built
    sale_id = uuid4()
    vehicle = reserve_vehicle(request.vehicle_id, sale_id=sale_id)

    try:
        # 3-4. Buyer and salesperson
        customer = resolve_or_create_customer(
            document,
            name=request.customer_name,
            email=request.customer_email,
            phone=request.customer_phone,
        )
        salesperson_id = get_default_salesperson_id()

        # 5. Sale
        sale_date = as_utc(request.sale_date)
        sale = SaleRecord(
            sale_id=sale_id,
            vehicle_id=vehicle.vehicle_id,
            customer_id=customer.customer_id,
            salesperson_id=salesperson_id,
            sale_date=sale_date,
            total_amount=vehicle.sale_price,
            commission_amount=Decimal("0.00"),
            notes=MARKETPLACE_SALE_NOTE,
        )

        # 6. Pending payment
        transaction_id = transaction_id_for(sale_id)
        payment = Payment(
            payment_id=uuid4(),
            sale_id=sale_id,
            amount=vehicle.sale_price,
            payment_date=sale_date,
            payment_type=payment_type,
            status=PaymentStatus.PENDING,
            transaction_id=transaction_id,
            notes=pending_payment_note(payment_type),
        )

        # 7. Persist both rows in one transaction
        record_sale_with_payment(sale, payment)
    except Exception:
        released = _release_unless_recorded(request.vehicle_id, sale_id)
        logger.warning(
            "Sale registration failed after reservation",
            extra={
                "vehicle_id": str(request.vehicle_id),
                "sale_id": str(sale_id),
                "reservation_released": released,
            },
            exc_info=True,
        )
        raise

    logger.info(
        "Sale registered",
        extra={
            "sale_id": str(sale_id),
            "vehicle_id": str(vehicle.vehicle_id),
            "transaction_id": transaction_id,
            "payment_type": payment_type.label,
        },
    )

    # 8. Payment URL
    return RegisterSaleResult(
        sale=sale,
        payment=payment,
        transaction_id=transaction_id,
        payment_url=payment_url_for(payment_type, transaction_id),
    )


def _release_unless_recorded(vehicle_id: UUID, sale_id: UUID) -> bool:
    """
    Undo the reservation made for `sale_id` if the sale never reached storage.

    The reservation is kept when the sale exists (its Pending payment now owns
    the vehicle) or when its existence cannot be confirmed. Reservations kept
    on doubt without a pending payment are picked up by
    scripts/release_orphaned_reservations.py.
    """

    try:
        recorded = get_sale_by_id(sale_id) is not None
    except Exception:
        logger.exception(
            "Could not confirm whether sale was recorded; keeping reservation",
            extra={"vehicle_id": str(vehicle_id), "sale_id": str(sale_id)},
        )
        return False

    if recorded:
        logger.warning(
            "Sale was recorded despite the error; keeping reservation",
            extra={"vehicle_id": str(vehicle_id), "sale_id": str(sale_id)},
        )
        return False

    try:
        return release_reservation(vehicle_id, sale_id=sale_id)
    except Exception:
        logger.exception(
            "Failed to release reservation",
            extra={"vehicle_id": str(vehicle_id), "sale_id": str(sale_id)},
        )
        return False


def get_sale(sale_id: UUID) -> SaleRecord:
    sale = get_sale_by_id(sale_id)
    if sale is None:
        raise NotFoundError("Sale", sale_id)
    return sale


__all__ = [
    "RegisterSaleRequest",
    "RegisterSaleResult",
    "register_sale",
    "get_sale",
]
