"""
Domain: payment settlement state machine.

An external payment notifier reports the outcome of a marketplace payment.
Settlement moves the (Payment, Vehicle) pair together:

    (Pending, Reserved) + PAID      -> (Completed, Sold)
    (Pending, Reserved) + CANCELLED -> (Cancelled, Available)

Any other starting pair is left untouched, as is a Reserved vehicle whose
reservation is held by a different sale. Notifiers redeliver and reorder
events, so a notification for an already-settled payment is a successful
no-op rather than an error.

Pure: the webhook service decides *whether* to write from `plan_settlement`
and persists the result atomically.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ValidationError
from .payment import PaymentStatus
from .vehicle import VehicleStatus


class WebhookStatus(str, Enum):
    PAID = "paid"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, raw: object) -> "WebhookStatus":
        """
        Decode the notifier's status string (case-insensitive, no trimming).

        Raises ValidationError for anything other than "paid"/"cancelled".
        """

        text = raw.lower() if isinstance(raw, str) else ""
        for member in cls:
            if member.value == text:
                return member
        raise ValidationError("Status", f"Invalid payment status: {raw}")


@dataclass(frozen=True, slots=True)
class Settlement:
    """Target statuses for one settlement, plus the statuses they replace."""

    expected_payment_status: PaymentStatus
    expected_vehicle_status: VehicleStatus
    payment_status: PaymentStatus
    vehicle_status: VehicleStatus


_TRANSITIONS = {
    WebhookStatus.PAID: (PaymentStatus.COMPLETED, VehicleStatus.SOLD),
    WebhookStatus.CANCELLED: (PaymentStatus.CANCELLED, VehicleStatus.AVAILABLE),
}


def plan_settlement(
    payment_status: PaymentStatus,
    vehicle_status: VehicleStatus,
    event: WebhookStatus,
    holds_reservation: bool = True,
) -> Optional[Settlement]:
    """
    Return the settlement to apply, or None when the event is a no-op.

    `holds_reservation` is False when the vehicle is reserved for another
    sale; such a payment can no longer move the vehicle.
    """

    if payment_status != PaymentStatus.PENDING or vehicle_status != VehicleStatus.RESERVED:
        return None
    if not holds_reservation:
        return None

    target_payment, target_vehicle = _TRANSITIONS[event]
    return Settlement(
        expected_payment_status=payment_status,
        expected_vehicle_status=vehicle_status,
        payment_status=target_payment,
        vehicle_status=target_vehicle,
    )


__all__ = ["WebhookStatus", "Settlement", "plan_settlement"]
