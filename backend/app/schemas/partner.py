"""Partner and investment ledger schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.partner import InvestmentType, PartnerType


class PartnerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: PartnerType
    phone_no: str | None = Field(None, max_length=50)


class PartnerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    type: PartnerType | None = None
    phone_no: str | None = Field(None, max_length=50)


class PartnerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: PartnerType
    phone_no: str | None = None
    created_at: datetime | None = None


class InvestmentCreate(BaseModel):
    type: InvestmentType
    amount: Decimal = Field(gt=0, decimal_places=2)
    notes: str | None = None


class InvestmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    partner_id: int
    partner_name: str
    type: InvestmentType
    amount: Decimal
    notes: str | None = None
    created_at: datetime | None = None
