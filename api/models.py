"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.payment import Payment, PaymentType
from domain.sale import SaleRecord
from domain.vehicle import Vehicle, VehicleStatus


# ============================================================================
# Sale Models
# ============================================================================

class RegisterSaleRequest(BaseModel):
    """Request to register a marketplace sale."""
    customer_cpf: str = Field(
        ...,
        min_length=1,
        description="Buyer CPF, with or without punctuation"
    )
    sale_date: Optional[datetime] = Field(
        None,
        description="Sale timestamp (defaults to now; naive values are UTC)"
    )
    vehicle_id: UUID = Field(..., description="Vehicle being bought")
    customer_name: Optional[str] = Field(None, min_length=2, max_length=100)
    customer_email: Optional[str] = Field(None, max_length=100)
    customer_phone: Optional[str] = Field(None, max_length=20)
    payment_type: PaymentType = Field(
        ...,
        description="1=Cash, 2=CreditCard, 3=DebitCard, 4=BankTransfer, 5=Financing, 6=Check"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "customer_cpf": "123.456.789-09",
                "vehicle_id": "123e4567-e89b-12d3-a456-426614174000",
                "customer_name": "Ana Souza",
                "customer_email": "ana@example.com",
                "customer_phone": "+55 11 99999-0000",
                "payment_type": 2
            }
        }


class SaleResponse(BaseModel):
    """Persisted sale."""
    sale_id: UUID
    vehicle_id: UUID
    customer_id: UUID
    salesperson_id: UUID
    sale_date: datetime
    total_amount: Decimal
    commission_amount: Decimal
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, sale: SaleRecord) -> "SaleResponse":
        return cls(
            sale_id=sale.sale_id,
            vehicle_id=sale.vehicle_id,
            customer_id=sale.customer_id,
            salesperson_id=sale.salesperson_id,
            sale_date=sale.sale_date,
            total_amount=sale.total_amount,
            commission_amount=sale.commission_amount,
            notes=sale.notes,
        )


class PaymentResponse(BaseModel):
    """Persisted payment."""
    payment_id: UUID
    sale_id: UUID
    amount: Decimal
    payment_date: datetime
    payment_type: PaymentType
    status: str
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, payment: Payment) -> "PaymentResponse":
        return cls(
            payment_id=payment.payment_id,
            sale_id=payment.sale_id,
            amount=payment.amount,
            payment_date=payment.payment_date,
            payment_type=payment.payment_type,
            status=payment.status.value,
            transaction_id=payment.transaction_id,
            notes=payment.notes,
        )


class RegisterSaleResponse(BaseModel):
    """Response after registering a sale."""
    sale: SaleResponse
    payment: PaymentResponse
    transaction_id: str
    payment_url: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "sale": {
                    "sale_id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                    "vehicle_id": "123e4567-e89b-12d3-a456-426614174000",
                    "customer_id": "123e4567-e89b-12d3-a456-426614174002",
                    "salesperson_id": "123e4567-e89b-12d3-a456-426614174003",
                    "sale_date": "2025-01-01T12:00:00Z",
                    "total_amount": "45000.00",
                    "commission_amount": "0.00",
                    "notes": "Sale registered via marketplace"
                },
                "payment": {
                    "payment_id": "123e4567-e89b-12d3-a456-426614174004",
                    "sale_id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                    "amount": "45000.00",
                    "payment_date": "2025-01-01T12:00:00Z",
                    "payment_type": 2,
                    "status": "Pending",
                    "transaction_id": "PAY_0f8fad5bd9cb469fa16570867728950e",
                    "notes": "Payment pending for marketplace sale - CreditCard"
                },
                "transaction_id": "PAY_0f8fad5bd9cb469fa16570867728950e",
                "payment_url": "https://payment-gateway.com/credit-card/PAY_0f8fad5bd9cb469fa16570867728950e"
            }
        }


# ============================================================================
# Payment Webhook Models
# ============================================================================

class PaymentWebhookRequest(BaseModel):
    """Payment outcome notification from the payment provider."""
    transaction_id: str = Field(..., min_length=1, max_length=100)
    status: str = Field(..., description='"paid" or "cancelled" (case-insensitive)')
    sale_id: UUID

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": "PAY_0f8fad5bd9cb469fa16570867728950e",
                "status": "paid",
                "sale_id": "0f8fad5b-d9cb-469f-a165-70867728950e"
            }
        }


class WebhookAckResponse(BaseModel):
    """Acknowledgement returned to the payment provider."""
    message: str
    timestamp: datetime


# ============================================================================
# Vehicle Models
# ============================================================================

class VehicleResponse(BaseModel):
    """Single vehicle in API response."""
    vehicle_id: UUID
    vin_number: str
    license_plate: str
    mileage: int
    purchase_price: Decimal
    sale_price: Decimal
    status: VehicleStatus
    notes: Optional[str] = None
    model_year_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, vehicle: Vehicle) -> "VehicleResponse":
        return cls(
            vehicle_id=vehicle.vehicle_id,
            vin_number=vehicle.vin_number,
            license_plate=vehicle.license_plate,
            mileage=vehicle.mileage,
            purchase_price=vehicle.purchase_price,
            sale_price=vehicle.sale_price,
            status=vehicle.status,
            notes=vehicle.notes,
            model_year_id=vehicle.model_year_id,
            created_at=vehicle.created_at,
            updated_at=vehicle.updated_at,
        )


class VehicleListResponse(BaseModel):
    """Response for vehicle listing."""
    items: List[VehicleResponse]
    total_count: int


class VehicleUpdateRequest(BaseModel):
    """Catalog edits for an Available vehicle. Omitted fields are unchanged."""
    vin_number: Optional[str] = Field(None, min_length=1, max_length=17)
    license_plate: Optional[str] = Field(None, min_length=1, max_length=10)
    mileage: Optional[int] = Field(None, ge=0)
    purchase_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    sale_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=500)

    class Config:
        json_schema_extra = {
            "example": {
                "mileage": 42000,
                "sale_price": "47500.00",
                "notes": "New tyres"
            }
        }


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    status_code: int
    message: str
    details: Optional[str] = None
    validation_errors: Optional[Dict[str, List[str]]] = None
    timestamp: datetime
    trace_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "status_code": 400,
                "message": "Validation failed for CustomerCpf",
                "details": None,
                "validation_errors": {"CustomerCpf": ["Invalid CPF format"]},
                "timestamp": "2025-01-01T12:00:00Z",
                "trace_id": "5f2b1c0e9a8d4b7c"
            }
        }
