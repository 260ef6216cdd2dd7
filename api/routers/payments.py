"""
Payments API Endpoints.

Webhook receiver for the payment provider plus read access to a sale's payments.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter

from api.models import ErrorResponse, PaymentResponse, PaymentWebhookRequest, WebhookAckResponse
from domain.time import utc_now
from repositories.payment_repository import list_payments_by_sale
from services.payment_webhook_service import process_payment_webhook
from services.sale_registration_service import get_sale

router = APIRouter()


@router.post(
    "/payments/webhook",
    response_model=WebhookAckResponse,
    summary="Payment Webhook",
    description="Settle a marketplace payment reported as paid or cancelled.",
    responses={
        400: {"model": ErrorResponse, "description": "Unknown status"},
        404: {"model": ErrorResponse, "description": "Payment or vehicle not found"},
    },
)
def receive_payment_webhook(request: PaymentWebhookRequest):
    """
    Process a payment notification.

    **Status values** (case-insensitive):
    - `paid`: payment becomes Completed, vehicle becomes Sold
    - `cancelled`: payment becomes Cancelled, vehicle becomes Available

    Redelivered or out-of-order notifications for a payment that is no
    longer Pending are acknowledged with 200 and change nothing.

    **Example request:**
    ```json
    {
      "transaction_id": "PAY_0f8fad5bd9cb469fa16570867728950e",
      "status": "paid",
      "sale_id": "0f8fad5b-d9cb-469f-a165-70867728950e"
    }
    ```

    **Response:**
    ```json
    {
      "message": "Webhook processed successfully",
      "timestamp": "2025-01-01T12:00:05Z"
    }
    ```
    """
    process_payment_webhook(
        sale_id=request.sale_id,
        transaction_id=request.transaction_id,
        status=request.status,
    )
    return WebhookAckResponse(message="Webhook processed successfully", timestamp=utc_now())


@router.get(
    "/payments/sale/{sale_id}",
    response_model=List[PaymentResponse],
    summary="List Sale Payments",
    responses={404: {"model": ErrorResponse, "description": "Sale not found"}},
)
def list_sale_payments(sale_id: UUID):
    """Return every payment recorded against a sale, oldest first."""
    get_sale(sale_id)
    return [PaymentResponse.from_domain(p) for p in list_payments_by_sale(sale_id)]
