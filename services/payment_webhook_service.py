"""
Payment webhook reconciliation.

The external payment notifier reports, per (sale_id, transaction_id), that a
payment was paid or cancelled. Reconciliation moves the payment and the
sold vehicle together:

- paid:      Pending/Reserved -> Completed/Sold
- cancelled: Pending/Reserved -> Cancelled/Available

Notifications are redelivered and may arrive out of order. Anything that
finds the pair in another state, or the vehicle reserved for a different
sale, is acknowledged without changing data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from domain.errors import NotFoundError
from domain.payment import Payment, PaymentStatus
from domain.settlement import WebhookStatus, plan_settlement
from domain.time import utc_now
from domain.vehicle import VehicleStatus
from repositories.payment_repository import apply_settlement, list_payments_by_sale
from repositories.vehicle_repository import get_vehicle_by_sale_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SettlementOutcome:
    """
    Result of processing one notification.

    applied: True if this call changed the payment and vehicle rows
    payment_status / vehicle_status: statuses after the call
    """
    applied: bool
    payment_status: PaymentStatus
    vehicle_status: VehicleStatus


def _find_payment(sale_id: UUID, transaction_id: str) -> Optional[Payment]:
    for payment in list_payments_by_sale(sale_id):
        if payment.transaction_id == transaction_id:
            return payment
    return None


def process_payment_webhook(sale_id: UUID, transaction_id: str, status: str) -> SettlementOutcome:
    """
    Apply a payment notification.

    Args:
        sale_id: Sale the payment belongs to
        transaction_id: Transaction id issued at registration ("PAY_...")
        status: "paid" or "cancelled" (case-insensitive)

    Returns:
        SettlementOutcome (applied=False for redeliveries and stale events)

    Raises:
        ValidationError: status is not paid/cancelled (checked before any lookup)
        NotFoundError: no payment with this transaction id on the sale, or
            the sale has no vehicle
    """

    event = WebhookStatus.parse(status)

    payment = _find_payment(sale_id, transaction_id)
    if payment is None:
        raise NotFoundError("Payment", f"Transaction ID: {transaction_id}")

    vehicle = get_vehicle_by_sale_id(sale_id)
    if vehicle is None:
        raise NotFoundError("Vehicle", f"Sale ID: {sale_id}")

    log_context = {
        "sale_id": str(sale_id),
        "transaction_id": transaction_id,
        "event": event.value,
        "payment_status": payment.status.value,
        "vehicle_status": vehicle.status.value,
    }

    # Reservations written before ownership was recorded carry no sale id.
    holds_reservation = vehicle.reserved_sale_id in (None, sale_id)

    settlement = plan_settlement(
        payment.status, vehicle.status, event, holds_reservation=holds_reservation
    )
    if settlement is None:
        if payment.is_pending and not vehicle.is_reserved:
            # Pending payment but the vehicle is not Reserved: data is out of step.
            logger.warning("Webhook ignored: pending payment on unreserved vehicle", extra=log_context)
        elif payment.is_pending:
            logger.warning(
                "Webhook ignored: vehicle reserved for another sale",
                extra={**log_context, "reserved_sale_id": str(vehicle.reserved_sale_id)},
            )
        else:
            logger.info("Webhook ignored: payment already settled", extra=log_context)
        return SettlementOutcome(
            applied=False,
            payment_status=payment.status,
            vehicle_status=vehicle.status,
        )

    applied = apply_settlement(
        payment_id=payment.payment_id,
        vehicle_id=vehicle.vehicle_id,
        sale_id=sale_id,
        settlement=settlement,
        settled_at=utc_now(),
    )

    if not applied:
        # The pair changed since it was read; report what is stored now.
        logger.info("Webhook ignored: settled concurrently", extra=log_context)
        current_payment = _find_payment(sale_id, transaction_id) or payment
        current_vehicle = get_vehicle_by_sale_id(sale_id) or vehicle
        return SettlementOutcome(
            applied=False,
            payment_status=current_payment.status,
            vehicle_status=current_vehicle.status,
        )

    logger.info(
        "Payment settled",
        extra={
            **log_context,
            "new_payment_status": settlement.payment_status.value,
            "new_vehicle_status": settlement.vehicle_status.value,
        },
    )
    return SettlementOutcome(
        applied=True,
        payment_status=settlement.payment_status,
        vehicle_status=settlement.vehicle_status,
    )


__all__ = ["SettlementOutcome", "process_payment_webhook"]
