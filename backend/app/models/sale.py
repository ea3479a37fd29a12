"""Sale & SaleItem models."""

import enum
import datetime as dt
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import CreatedAtMixin, IntPrimaryKeyMixin, TimestampMixin, str_enum


class SaleStatus(str, enum.Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class DiscountType(str, enum.Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class Sale(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "sales"
    __table_args__ = (
        Index("ix_sales_date_status", "date", "status"),
    )

    invoice: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    customer_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("customers.id"), index=True)
    customer_name: Mapped[str | None] = mapped_column(String(255))
    customer_phone: Mapped[str | None] = mapped_column(String(50))
    customer_email: Mapped[str | None] = mapped_column(String(255))
    cashier_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    cashier_name: Mapped[str | None] = mapped_column(String(255))
    location_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("locations.id"), index=True)

    payment_method: Mapped[str] = mapped_column(String(50), default="cash", nullable=False)
    payment_reference: Mapped[str | None] = mapped_column(String(255))

    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    discount_type: Mapped[DiscountType] = mapped_column(
        str_enum(DiscountType), default=DiscountType.FIXED, nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    change_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)

    loyalty_points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    loyalty_points_redeemed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[SaleStatus] = mapped_column(str_enum(SaleStatus), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text)

    # Accounting export marker
    synced_at: Mapped[dt.datetime | None] = mapped_column(DateTime)

    voided: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    voided_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    voided_at: Mapped[dt.datetime | None] = mapped_column(DateTime)
    void_reason: Mapped[str | None] = mapped_column(Text)

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="sale", cascade="all, delete-orphan")
    customer = relationship("Customer", back_populates="sales")

    def __repr__(self) -> str:
        return f"<Sale {self.invoice} total={self.total_amount} status={self.status}>"


class SaleItem(IntPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "sales_items"

    sale_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(Integer, ForeignKey("inventory.id"), nullable=False, index=True)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")

    def __repr__(self) -> str:
        return f"<SaleItem sale={self.sale_id} {self.sku} x{self.quantity}>"
