"""Shop settings and tax rates."""

import enum
from decimal import Decimal

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.category import ReferenceStatus
from app.models.mixins import CreatedAtMixin, IntPrimaryKeyMixin, TimestampMixin, str_enum

DEFAULT_WARRANTY_TERMS = "Standard warranty terms apply. Items must be returned in original condition."
DEFAULT_RECEIPT_FOOTER = "Thank you for your business!"


class ShopSettings(IntPrimaryKeyMixin, TimestampMixin, Base):
    """Single logical row; the latest row wins."""

    __tablename__ = "settings"

    shop_name: Mapped[str] = mapped_column(String(255), default="My POS Shop", nullable=False)
    shop_phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    shop_email: Mapped[str | None] = mapped_column(String(255), default="")
    shop_address: Mapped[str | None] = mapped_column(Text)
    shop_city: Mapped[str | None] = mapped_column(String(100), default="")
    shop_state: Mapped[str | None] = mapped_column(String(100), default="")
    shop_zip_code: Mapped[str | None] = mapped_column(String(20), default="")
    shop_logo_url: Mapped[str | None] = mapped_column(String(500), default="")
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    country_code: Mapped[str] = mapped_column(String(10), default="+94", nullable=False)
    warranty_period: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    warranty_terms: Mapped[str | None] = mapped_column(Text, default=DEFAULT_WARRANTY_TERMS)
    receipt_footer: Mapped[str | None] = mapped_column(Text, default=DEFAULT_RECEIPT_FOOTER)
    business_registration: Mapped[str | None] = mapped_column(String(255), default="")
    tax_id: Mapped[str | None] = mapped_column(String(255), default="")

    def __repr__(self) -> str:
        return f"<ShopSettings {self.shop_name}>"


class TaxType(str, enum.Enum):
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


class TaxRate(IntPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "tax_rates"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    type: Mapped[TaxType] = mapped_column(str_enum(TaxType), default=TaxType.EXCLUSIVE, nullable=False)
    status: Mapped[ReferenceStatus] = mapped_column(
        str_enum(ReferenceStatus), default=ReferenceStatus.ACTIVE, nullable=False
    )

    def __repr__(self) -> str:
        return f"<TaxRate {self.name} {self.rate}%>"
