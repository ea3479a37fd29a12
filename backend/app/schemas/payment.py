"""Payment and refund schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.payment import PaymentStatus, RefundStatus


class PaymentProcessRequest(BaseModel):
    sale_id: int
    payment_method: str = Field(min_length=1, max_length=50)
    amount: Decimal = Field(gt=0, decimal_places=2)
    payment_token: str | None = None
    reference: str | None = Field(None, max_length=255)
    notes: str | None = None


class RefundRequest(BaseModel):
    amount: Decimal | None = Field(None, gt=0, decimal_places=2)
    reason: str | None = None


class PaymentMethodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    enabled: bool
    config: dict | None = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sale_id: int
    payment_method: str
    amount: Decimal
    transaction_id: str | None = None
    payment_status: PaymentStatus
    stripe_payment_intent: str | None = None
    notes: str | None = None
    processed_by: int | None = None
    created_at: datetime | None = None


class RefundResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payment_id: int
    sale_id: int
    amount: Decimal
    reason: str | None = None
    refund_status: RefundStatus
    stripe_refund_id: str | None = None
    processed_by: int | None = None
    created_at: datetime | None = None


class PaymentProcessResponse(BaseModel):
    message: str = "Payment processed successfully"
    payment: PaymentResponse
    sale_status: str
    paid_amount: Decimal
    remaining_balance: Decimal


class RefundProcessResponse(BaseModel):
    message: str = "Refund processed successfully"
    refund: RefundResponse
    sale_status: str
    paid_amount: Decimal
