"""Sale schemas."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.sale import DiscountType, SaleStatus
from app.schemas.common import Pagination


class SaleLine(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)
    unit_price: Decimal | None = Field(None, ge=0)


class SaleCreate(BaseModel):
    items: list[SaleLine] = Field(min_length=1)
    customer_id: int | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: EmailStr | None = None
    location_id: int | None = None
    payment_method: str = "cash"
    payment_reference: str | None = None
    tax_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    discount: Decimal = Field(Decimal("0"), ge=0)
    discount_type: DiscountType = DiscountType.FIXED
    paid_amount: Decimal = Field(Decimal("0"), ge=0)
    notes: str | None = None


class SaleStatusUpdate(BaseModel):
    status: SaleStatus


class VoidRequest(BaseModel):
    reason: str | None = None


class SaleItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    item_name: str
    sku: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class SalePaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    payment_method: str
    amount: Decimal
    transaction_id: str | None = None
    payment_status: str
    created_at: dt.datetime | None = None


class SaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice: str
    date: dt.date
    customer_id: int | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    cashier_id: int | None = None
    cashier_name: str | None = None
    location_id: int | None = None
    payment_method: str
    payment_reference: str | None = None
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    discount_type: DiscountType
    total_amount: Decimal
    paid_amount: Decimal
    change_amount: Decimal
    loyalty_points_earned: int
    status: SaleStatus
    notes: str | None = None
    voided: bool = False
    void_reason: str | None = None
    created_at: dt.datetime | None = None


class SaleDetailResponse(SaleResponse):
    items: list[SaleItemResponse] = Field(default_factory=list)
    payments: list[SalePaymentResponse] = Field(default_factory=list)


class SaleListResponse(BaseModel):
    sales: list[SaleResponse]
    pagination: Pagination
