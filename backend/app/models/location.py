"""Store locations, per-location stock and the transfer ledger."""

import enum

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import CreatedAtMixin, IntPrimaryKeyMixin, TimestampMixin, str_enum


class LocationStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Location(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(50))
    manager_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    settings: Mapped[dict | None] = mapped_column(JSON, default=dict)
    status: Mapped[LocationStatus] = mapped_column(
        str_enum(LocationStatus), default=LocationStatus.ACTIVE, nullable=False
    )

    manager = relationship("User")
    stock = relationship("LocationInventory", back_populates="location", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Location {self.id}: {self.name}>"


class LocationInventory(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "location_inventory"
    __table_args__ = (UniqueConstraint("location_id", "item_id", name="uq_location_inventory_location_item"),)

    location_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inventory.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_stock: Mapped[int] = mapped_column(Integer, default=1000, nullable=False)

    location = relationship("Location", back_populates="stock")
    item = relationship("InventoryItem", back_populates="location_stock")

    def __repr__(self) -> str:
        return f"<LocationInventory loc={self.location_id} item={self.item_id} qty={self.quantity}>"


class InventoryTransfer(IntPrimaryKeyMixin, CreatedAtMixin, Base):
    """Append-only record of a stock movement between two locations."""

    __tablename__ = "inventory_transfers"

    item_id: Mapped[int] = mapped_column(Integer, ForeignKey("inventory.id"), nullable=False, index=True)
    from_location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), nullable=False)
    to_location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    transferred_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))
    notes: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return (
            f"<InventoryTransfer item={self.item_id} "
            f"{self.from_location_id}->{self.to_location_id} qty={self.quantity}>"
        )
