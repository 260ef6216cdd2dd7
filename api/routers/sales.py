"""
Sales API Endpoints.

Endpoints for registering marketplace sales and reading them back.
Domain errors are translated to HTTP responses by the handlers in api.main.
"""

from uuid import UUID

from fastapi import APIRouter, status

from api.models import (
    ErrorResponse,
    PaymentResponse,
    RegisterSaleRequest as APIRegisterSaleRequest,
    RegisterSaleResponse,
    SaleResponse,
)
from services.sale_registration_service import RegisterSaleRequest, get_sale, register_sale

router = APIRouter()


@router.post(
    "/sales/register",
    response_model=RegisterSaleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Marketplace Sale",
    description="Reserve a vehicle and create its sale with a pending payment.",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid CPF"},
        404: {"model": ErrorResponse, "description": "Vehicle not found"},
        409: {"model": ErrorResponse, "description": "Vehicle not available"},
    },
)
def register_marketplace_sale(request: APIRegisterSaleRequest):
    """
    Register a marketplace sale.

    **Process:**
    1. Validates the buyer's CPF (check digits)
    2. Reserves the vehicle (only one concurrent buyer can win)
    3. Finds the customer by CPF, or creates one
    4. Credits the sale to the default salesperson
    5. Creates the sale and a Pending payment in one transaction

    The vehicle stays **Reserved** until the payment webhook reports the
    payment as paid (vehicle becomes Sold) or cancelled (vehicle becomes
    Available again).

    **Example request:**
    ```json
    {
      "customer_cpf": "123.456.789-09",
      "vehicle_id": "123e4567-e89b-12d3-a456-426614174000",
      "customer_name": "Ana Souza",
      "payment_type": 2
    }
    ```

    **Payment URL by payment type:**
    - 2 (credit card), 3 (debit card), 4 (bank transfer): payment gateway page
    - 5 (financing): financing partner page
    - 1 (cash), 6 (check): `null`, processed offline
    """
    result = register_sale(
        RegisterSaleRequest(
            customer_cpf=request.customer_cpf,
            vehicle_id=request.vehicle_id,
            payment_type=request.payment_type,
            sale_date=request.sale_date,
            customer_name=request.customer_name,
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
        )
    )

    return RegisterSaleResponse(
        sale=SaleResponse.from_domain(result.sale),
        payment=PaymentResponse.from_domain(result.payment),
        transaction_id=result.transaction_id,
        payment_url=result.payment_url,
    )


@router.get(
    "/sales/{sale_id}",
    response_model=SaleResponse,
    summary="Get Sale",
    responses={404: {"model": ErrorResponse, "description": "Sale not found"}},
)
def get_sale_details(sale_id: UUID):
    """Return a single sale by ID."""
    return SaleResponse.from_domain(get_sale(sale_id))
