"""Partner (investor / supplier) and investment ledger models."""

import enum
from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import CreatedAtMixin, IntPrimaryKeyMixin, TimestampMixin, str_enum


class PartnerType(str, enum.Enum):
    INVESTOR = "investor"
    SUPPLIER = "supplier"


class InvestmentType(str, enum.Enum):
    INVEST = "invest"
    WITHDRAW = "withdraw"


class Partner(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "partners"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[PartnerType] = mapped_column(str_enum(PartnerType), nullable=False)
    phone_no: Mapped[str | None] = mapped_column(String(50))

    investments = relationship("Investment", back_populates="partner")

    def __repr__(self) -> str:
        return f"<Partner {self.name} ({self.type})>"


class Investment(IntPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "investments"

    partner_id: Mapped[int] = mapped_column(Integer, ForeignKey("partners.id"), nullable=False, index=True)
    partner_name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[InvestmentType] = mapped_column(str_enum(InvestmentType), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)

    partner = relationship("Partner", back_populates="investments")

    def __repr__(self) -> str:
        return f"<Investment {self.type} {self.amount} partner={self.partner_id}>"
