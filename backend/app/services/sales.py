"""Sale totals, invoice numbers and payment-status derivation."""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from app.models.sale import DiscountType, SaleStatus

CENT = Decimal("0.01")
_INVOICE_ALPHABET = string.ascii_uppercase + string.digits


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_invoice(now: datetime | None = None) -> str:
    """``INV-YYYYMMDD-XXXXXX``."""
    now = now or datetime.now()
    suffix = "".join(secrets.choice(_INVOICE_ALPHABET) for _ in range(6))
    return f"INV-{now:%Y%m%d}-{suffix}"


def derive_sale_status(total, paid, refunded: bool = False) -> SaleStatus:
    """Status of a sale from what has been paid against its total.

    A sale whose paid amount was brought back to zero by refunds is
    ``refunded`` rather than ``unpaid``.
    """
    total = money(total)
    paid = money(paid)
    if refunded and paid <= 0:
        return SaleStatus.REFUNDED
    if paid >= total:
        return SaleStatus.PAID
    if paid > 0:
        return SaleStatus.PARTIAL
    return SaleStatus.UNPAID


def loyalty_points_for(total) -> int:
    """One point per whole currency unit spent."""
    return max(0, int(money(total)))


@dataclass
class SaleTotals:
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal


def compute_totals(
    line_totals,
    tax_rate=0,
    discount=0,
    discount_type: DiscountType = DiscountType.FIXED,
) -> SaleTotals:
    """Subtotal, tax on the subtotal, then the discount; the total never goes negative."""
    subtotal = money(sum((money(t) for t in line_totals), Decimal("0")))
    tax_amount = money(subtotal * money(tax_rate) / 100)
    if discount_type is DiscountType.PERCENTAGE:
        discount_amount = money(subtotal * money(discount) / 100)
    else:
        discount_amount = money(discount)
    total = max(Decimal("0.00"), subtotal + tax_amount - discount_amount)
    return SaleTotals(subtotal, tax_amount, discount_amount, money(total))
