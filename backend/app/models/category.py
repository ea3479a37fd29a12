"""Category and supplier reference tables."""

import enum

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import IntPrimaryKeyMixin, TimestampMixin, str_enum


class ReferenceStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Category(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ReferenceStatus] = mapped_column(
        str_enum(ReferenceStatus), default=ReferenceStatus.ACTIVE, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Supplier(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_person: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50))
    address: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ReferenceStatus] = mapped_column(
        str_enum(ReferenceStatus), default=ReferenceStatus.ACTIVE, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Supplier {self.name}>"
