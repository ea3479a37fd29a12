"""Inventory item model."""

import enum
from decimal import Decimal

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import IntPrimaryKeyMixin, TimestampMixin, str_enum


class ItemStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"


class InventoryItem(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "inventory"

    item_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    barcode: Mapped[str | None] = mapped_column(String(255), index=True)
    qr_code: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(255))
    brand: Mapped[str | None] = mapped_column(String(255))
    supplier: Mapped[str | None] = mapped_column(String(255))
    unit: Mapped[str] = mapped_column(String(50), default="pcs", nullable=False)
    buy_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    sell_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_stock: Mapped[int] = mapped_column(Integer, default=1000, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(String(500))
    warranty_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[ItemStatus] = mapped_column(
        str_enum(ItemStatus), default=ItemStatus.ACTIVE, nullable=False, index=True
    )

    location_stock = relationship("LocationInventory", back_populates="item", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<InventoryItem {self.sku}: {self.item_name} qty={self.quantity}>"


class AdjustOperation(str, enum.Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


def apply_adjustment(current: int, amount: int, operation: AdjustOperation) -> int:
    """New counter value after ``operation``; subtraction floors at zero."""
    if operation is AdjustOperation.ADD:
        return current + amount
    if operation is AdjustOperation.SUBTRACT:
        return max(0, current - amount)
    return amount
