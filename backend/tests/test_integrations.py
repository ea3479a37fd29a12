"""Unit tests for third-party platform projections and the accounting sync flag."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from app.models.inventory import InventoryItem, ItemStatus
from app.models.sale import Sale, SaleItem
from app.repositories.integrations import IntegrationRepository
from app.schemas.integration import MarkSyncedRequest
from app.services.integrations import accounting_sale, catalog_product, mailing_member, storefront_product
from conftest import make_user


def _item(**overrides) -> InventoryItem:
    fields = dict(
        id=3, item_name="USB Cable", sku="USB-1", category="Cables", brand=None, description=None,
        image_url=None, sell_price=Decimal("12.50"), buy_price=Decimal("5.00"), quantity=4,
        status=ItemStatus.ACTIVE,
    )
    fields.update(overrides)
    return InventoryItem(**fields)


def test_storefront_product():
    product = storefront_product(_item())
    assert product["regular_price"] == "12.50"
    assert product["categories"] == [{"name": "Cables"}]
    assert product["images"] == []
    assert product["status"] == "publish"


def test_storefront_product_draft_when_inactive():
    assert storefront_product(_item(status=ItemStatus.DISCONTINUED))["status"] == "draft"


def test_catalog_product_defaults():
    product = catalog_product(_item(category=None))
    assert product["vendor"] == "Default"
    assert product["product_type"] == "General"
    assert product["variants"][0]["cost"] == "5.00"


def test_mailing_member_splits_name():
    member = mailing_member({"name": "Ada King Lovelace", "email": "ada@example.com", "phone": None})
    assert member["merge_fields"]["FNAME"] == "Ada"
    assert member["merge_fields"]["LNAME"] == "King Lovelace"
    assert member["merge_fields"]["PHONE"] == ""
    assert member["status"] == "subscribed"


def test_accounting_sale_lines():
    sale = Sale(
        id=1, invoice="INV-20250101-AAAAAA", date=date(2025, 1, 1),
        total_amount=Decimal("25.00"), tax_amount=Decimal("0.00"),
    )
    sale.items = [
        SaleItem(item_name="USB Cable", quantity=2, unit_price=Decimal("12.50"), line_total=Decimal("25.00")),
    ]
    row = accounting_sale(sale)
    assert row["invoice"] == "INV-20250101-AAAAAA"
    assert row["items"] == [
        {"item_name": "USB Cable", "quantity": 2, "unit_price": Decimal("12.50"), "line_total": Decimal("25.00")}
    ]


# ── Accounting sync ───────────────────────────────

@pytest.mark.asyncio
async def test_mark_synced_stamps_only_unsynced(session, dialect):
    outcome = MagicMock()
    outcome.rowcount = 2
    session.execute.return_value = outcome

    assert await IntegrationRepository(session, dialect).mark_synced([1, 2, 3]) == 2
    statement = session.execute.await_args.args[0]
    assert statement.table.name == "sales"
    assert "synced_at IS NULL" in str(statement)
    session.commit.assert_awaited_once()


def test_mark_synced_requires_ids():
    with pytest.raises(ValidationError):
        MarkSyncedRequest(sale_ids=[])


@pytest.mark.asyncio
async def test_mark_synced_route():
    from app.api.integrations import quickbooks_mark_synced

    integrations = AsyncMock()
    integrations.mark_synced.return_value = 2

    result = await quickbooks_mark_synced(
        MarkSyncedRequest(sale_ids=[1, 2]), current_user=make_user(), integrations=integrations
    )
    assert result == {"message": "Sales marked as synced", "synced": 2}
    integrations.mark_synced.assert_awaited_once_with([1, 2])
