"""Payment, refund and payment-method models."""

import enum
from decimal import Decimal

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import CreatedAtMixin, IntPrimaryKeyMixin, TimestampMixin, str_enum


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class RefundStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Payment(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_status_created", "payment_status", "created_at"),
    )

    sale_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    transaction_id: Mapped[str | None] = mapped_column(String(255), index=True)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        str_enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )
    stripe_payment_intent: Mapped[str | None] = mapped_column(String(255), index=True)
    notes: Mapped[str | None] = mapped_column(Text)
    processed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))

    sale = relationship("Sale", back_populates="payments")
    refunds = relationship("Refund", back_populates="payment", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Payment {self.id} {self.payment_method}={self.amount} status={self.payment_status}>"


class Refund(IntPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "refunds"

    payment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sale_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    refund_status: Mapped[RefundStatus] = mapped_column(
        str_enum(RefundStatus), default=RefundStatus.PENDING, nullable=False
    )
    stripe_refund_id: Mapped[str | None] = mapped_column(String(255))
    processed_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))

    payment = relationship("Payment", back_populates="refunds")

    def __repr__(self) -> str:
        return f"<Refund {self.id} payment={self.payment_id} amount={self.amount}>"


class PaymentMethodConfig(IntPrimaryKeyMixin, CreatedAtMixin, Base):
    """Configured tender types shown at checkout."""

    __tablename__ = "payment_methods"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    config: Mapped[dict | None] = mapped_column(JSON, default=dict)

    def __repr__(self) -> str:
        return f"<PaymentMethodConfig {self.name} ({self.type})>"
