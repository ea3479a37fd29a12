"""Customer schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.customer import CustomerStatus, Gender
from app.models.inventory import AdjustOperation
from app.schemas.common import Pagination


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    notes: str | None = None


class CustomerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    discount_percentage: Decimal | None = Field(None, ge=0, le=100)
    notes: str | None = None
    status: CustomerStatus | None = None


class LoyaltyAdjustRequest(BaseModel):
    points: int = Field(ge=0)
    action: AdjustOperation = AdjustOperation.ADD


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_code: str
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    loyalty_points: int
    total_spent: Decimal
    discount_percentage: Decimal
    notes: str | None = None
    status: CustomerStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CustomerDetailResponse(CustomerResponse):
    recent_sales: list[dict] = Field(default_factory=list)


class CustomerListResponse(BaseModel):
    customers: list[CustomerResponse]
    pagination: Pagination
