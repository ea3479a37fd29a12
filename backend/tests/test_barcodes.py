"""Unit tests for barcodes, QR codes and scanned-code lookup."""

import base64
import json
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from app.models.inventory import InventoryItem, ItemStatus
from app.services.barcodes import (
    EAN_PREFIX,
    ean13_check_digit,
    generate_ean13,
    is_valid_ean13,
    parse_qr_payload,
    qr_data_url,
)
from conftest import make_user


def _item(**overrides) -> InventoryItem:
    fields = dict(
        id=3, item_name="USB Cable", sku="USB-1", barcode=None, sell_price=Decimal("12.50"),
        buy_price=Decimal("5.00"), quantity=4, status=ItemStatus.ACTIVE,
    )
    fields.update(overrides)
    return InventoryItem(**fields)


# ── EAN-13 ────────────────────────────────────────

def test_known_check_digit():
    assert ean13_check_digit("400638133393") == 1
    assert is_valid_ean13("4006381333931")
    assert not is_valid_ean13("4006381333932")


def test_generated_codes_are_valid():
    for _ in range(20):
        code = generate_ean13()
        assert code.startswith(EAN_PREFIX)
        assert is_valid_ean13(code)


# ── QR ────────────────────────────────────────────

def test_qr_data_url_is_png():
    url = qr_data_url({"type": "inventory_item", "id": 3})
    assert url.startswith("data:image/png;base64,")
    assert base64.b64decode(url.split(",", 1)[1]).startswith(b"\x89PNG")


def test_parse_qr_payload():
    assert parse_qr_payload('{"type": "sale", "id": 1}') == {"type": "sale", "id": 1}
    assert parse_qr_payload("4006381333931") is None
    assert parse_qr_payload("[1, 2]") is None


# ── Routes ────────────────────────────────────────

@pytest.mark.asyncio
async def test_barcode_kept_when_present():
    from app.api.barcodes import generate_item_barcode

    inventory = AsyncMock()
    inventory.get.return_value = _item(barcode="4006381333931")

    result = await generate_item_barcode(3, current_user=make_user(), inventory=inventory)

    assert result["barcode"] == "4006381333931"
    inventory.update.assert_not_awaited()


@pytest.mark.asyncio
async def test_barcode_assigned_when_missing():
    from app.api.barcodes import generate_item_barcode

    item = _item()
    inventory = AsyncMock()
    inventory.get.return_value = item
    inventory.get_by_barcode.return_value = None

    async def _update(target, changes):
        for key, value in changes.items():
            setattr(target, key, value)
        return target

    inventory.update.side_effect = _update

    result = await generate_item_barcode(3, current_user=make_user(), inventory=inventory)

    assert is_valid_ean13(result["barcode"])
    assert item.barcode == result["barcode"]


@pytest.mark.asyncio
async def test_lookup_by_qr_payload():
    from app.api.barcodes import item_qr_payload, lookup_code

    item = _item()
    inventory = AsyncMock()
    inventory.get_by_barcode.return_value = None
    inventory.get_by_sku.return_value = None
    inventory.get.return_value = item

    result = await lookup_code(json.dumps(item_qr_payload(item)), current_user=make_user(), inventory=inventory)

    assert result["item"]["sku"] == "USB-1"
    inventory.get.assert_awaited_once_with(3)


@pytest.mark.asyncio
async def test_lookup_ignores_inactive_items():
    from app.api.barcodes import lookup_code

    inventory = AsyncMock()
    inventory.get_by_barcode.return_value = _item(status=ItemStatus.DISCONTINUED)

    with pytest.raises(HTTPException) as exc:
        await lookup_code("4006381333931", current_user=make_user(), inventory=inventory)
    assert exc.value.status_code == 404
