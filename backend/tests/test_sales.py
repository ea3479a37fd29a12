"""Unit tests for sales: totals, status derivation and checkout."""

import re
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from app.core.exceptions import NotFoundError
from app.models.customer import Customer
from app.models.inventory import InventoryItem
from app.models.sale import DiscountType, Sale, SaleItem, SaleStatus
from app.repositories.sales import SaleRepository
from app.services.sales import compute_totals, derive_sale_status, generate_invoice, loyalty_points_for
from conftest import make_user, scalar_result


# ── Totals ────────────────────────────────────────

def test_totals_with_tax_and_fixed_discount():
    totals = compute_totals([Decimal("40.00"), Decimal("60.00")], tax_rate=10, discount=5)
    assert totals.subtotal == Decimal("100.00")
    assert totals.tax_amount == Decimal("10.00")
    assert totals.discount_amount == Decimal("5.00")
    assert totals.total_amount == Decimal("105.00")


def test_totals_with_percentage_discount():
    totals = compute_totals([Decimal("200.00")], discount=25, discount_type=DiscountType.PERCENTAGE)
    assert totals.discount_amount == Decimal("50.00")
    assert totals.total_amount == Decimal("150.00")


def test_total_never_negative():
    totals = compute_totals([Decimal("10.00")], discount=50)
    assert totals.total_amount == Decimal("0.00")


def test_tax_rounds_half_up():
    totals = compute_totals([Decimal("0.05")], tax_rate=50)
    assert totals.tax_amount == Decimal("0.03")


# ── Status derivation ─────────────────────────────

@pytest.mark.parametrize(
    "total,paid,refunded,expected",
    [
        ("100", "0", False, SaleStatus.UNPAID),
        ("100", "40", False, SaleStatus.PARTIAL),
        ("100", "100", False, SaleStatus.PAID),
        ("100", "120", False, SaleStatus.PAID),
        ("100", "60", True, SaleStatus.PARTIAL),
        ("100", "0", True, SaleStatus.REFUNDED),
    ],
)
def test_derive_sale_status(total, paid, refunded, expected):
    assert derive_sale_status(Decimal(total), Decimal(paid), refunded=refunded) == expected


def test_invoice_format():
    invoice = generate_invoice(datetime(2025, 3, 9, 12, 0))
    assert re.fullmatch(r"INV-20250309-[A-Z0-9]{6}", invoice)


def test_loyalty_points_per_whole_unit():
    assert loyalty_points_for(Decimal("99.99")) == 99
    assert loyalty_points_for(Decimal("0")) == 0


# ── Checkout ──────────────────────────────────────

def _item(quantity: int = 10) -> InventoryItem:
    return InventoryItem(
        id=3, item_name="USB Cable", sku="USB-1", sell_price=Decimal("12.50"),
        buy_price=Decimal("5.00"), quantity=quantity,
    )


@pytest.mark.asyncio
async def test_checkout_decrements_stock_and_credits_customer(session, dialect):
    item = _item()
    customer = Customer(id=8, name="Ada", phone="+94770000000", loyalty_points=5, total_spent=Decimal("10.00"))
    session.execute.side_effect = [scalar_result(item), scalar_result(None)]
    session.get.return_value = customer

    await SaleRepository(session, dialect).create(
        [{"item_id": 3, "quantity": 4, "unit_price": None}],
        customer_id=8,
        paid_amount=Decimal("20.00"),
    )

    sale = session.add.call_args.args[0]
    assert isinstance(sale, Sale)
    assert item.quantity == 6
    assert sale.total_amount == Decimal("50.00")
    assert sale.status == SaleStatus.PARTIAL
    assert sale.customer_name == "Ada"
    assert sale.loyalty_points_earned == 50
    assert customer.loyalty_points == 55
    assert customer.total_spent == Decimal("60.00")
    assert sale.items[0].line_total == Decimal("50.00")
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_checkout_change_when_overpaid(session, dialect):
    session.execute.side_effect = [scalar_result(_item()), scalar_result(None)]

    await SaleRepository(session, dialect).create(
        [{"item_id": 3, "quantity": 1, "unit_price": Decimal("10.00")}],
        paid_amount=Decimal("15.00"),
    )

    sale = session.add.call_args.args[0]
    assert sale.status == SaleStatus.PAID
    assert sale.change_amount == Decimal("5.00")


@pytest.mark.asyncio
async def test_checkout_unknown_item_rolls_back(session, dialect):
    session.execute.side_effect = [scalar_result(None)]

    with pytest.raises(NotFoundError):
        await SaleRepository(session, dialect).create([{"item_id": 99, "quantity": 1}])
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_route_maps_missing_item_to_404():
    from app.api.sales import create_sale
    from app.schemas.sale import SaleCreate

    sales = AsyncMock()
    sales.create.side_effect = NotFoundError("Item 99 not found")

    with pytest.raises(HTTPException) as exc:
        await create_sale(
            SaleCreate(items=[{"item_id": 99, "quantity": 1}]),
            current_user=make_user(),
            sales=sales,
        )
    assert exc.value.status_code == 404
    assert sales.create.await_args.kwargs["cashier_name"] == "Admin User"


@pytest.mark.asyncio
async def test_void_is_idempotent(session, dialect):
    sale = Sale(id=1, invoice="INV-1", total_amount=Decimal("10"), status=SaleStatus.PAID, voided=False)
    session.execute.return_value = scalar_result([])
    repo = SaleRepository(session, dialect)

    await repo.void(sale, voided_by=1, reason="mistake")
    await repo.void(sale, voided_by=2, reason="again")

    assert sale.voided is True
    assert sale.voided_by == 1
    assert sale.status == SaleStatus.CANCELLED
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_void_returns_stock_and_customer_credit(session, dialect):
    item = _item(quantity=6)
    customer = Customer(id=8, name="Ada", loyalty_points=55, total_spent=Decimal("60.00"))
    sale = Sale(
        id=1, invoice="INV-1", customer_id=8, total_amount=Decimal("50.00"),
        loyalty_points_earned=50, status=SaleStatus.PARTIAL, voided=False,
    )
    lines = [SaleItem(sale_id=1, item_id=3, item_name="USB Cable", sku="USB-1", quantity=4)]
    session.execute.return_value = scalar_result(lines)
    session.get.side_effect = lambda model, pk, **kw: {InventoryItem: item, Customer: customer}[model]

    await SaleRepository(session, dialect).void(sale, voided_by=1, reason="customer changed mind")

    assert item.quantity == 10
    assert customer.loyalty_points == 5
    assert customer.total_spent == Decimal("10.00")
    assert sale.status == SaleStatus.CANCELLED
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_void_floors_customer_credit(session, dialect):
    customer = Customer(id=8, name="Ada", loyalty_points=3, total_spent=Decimal("20.00"))
    sale = Sale(
        id=1, invoice="INV-1", customer_id=8, total_amount=Decimal("50.00"),
        loyalty_points_earned=50, status=SaleStatus.PAID, voided=False,
    )
    session.execute.return_value = scalar_result([])
    session.get.return_value = customer

    await SaleRepository(session, dialect).void(sale, voided_by=1)

    assert customer.loyalty_points == 0
    assert customer.total_spent == Decimal("0.00")


@pytest.mark.asyncio
async def test_void_failure_rolls_back(session, dialect):
    sale = Sale(id=1, invoice="INV-1", total_amount=Decimal("10"), status=SaleStatus.PAID, voided=False)
    session.execute.return_value = scalar_result([])
    session.commit.side_effect = RuntimeError("connection lost")

    with pytest.raises(RuntimeError):
        await SaleRepository(session, dialect).void(sale, voided_by=1)
    session.rollback.assert_awaited_once()
