"""Unit tests for inventory: quantity adjustment and location transfers."""

from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from app.core.exceptions import DomainError, InsufficientStockError, TransferError
from app.models.inventory import AdjustOperation, InventoryItem, apply_adjustment
from app.models.location import InventoryTransfer, Location, LocationInventory
from app.repositories.inventory import InventoryRepository
from conftest import make_user, scalar_result


# ── Quantity adjustment ───────────────────────────

def test_apply_adjustment_operations():
    assert apply_adjustment(10, 5, AdjustOperation.ADD) == 15
    assert apply_adjustment(10, 4, AdjustOperation.SUBTRACT) == 6
    assert apply_adjustment(10, 3, AdjustOperation.SET) == 3


def test_subtract_floors_at_zero():
    assert apply_adjustment(3, 10, AdjustOperation.SUBTRACT) == 0


# ── Transfers ─────────────────────────────────────

def _stock(location_id: int, quantity: int) -> LocationInventory:
    return LocationInventory(item_id=1, location_id=location_id, quantity=quantity, min_stock=5, max_stock=100)


def _added(session, cls):
    return [call.args[0] for call in session.add.call_args_list if isinstance(call.args[0], cls)]


@pytest.mark.asyncio
async def test_transfer_conserves_total(session, dialect):
    source, destination = _stock(1, 10), _stock(2, 4)
    session.execute.side_effect = [scalar_result(source), scalar_result(destination)]

    record = await InventoryRepository(session, dialect).transfer(1, 1, 2, 3, transferred_by=9)

    assert source.quantity == 7
    assert destination.quantity == 7
    assert source.quantity + destination.quantity == 14
    assert record.quantity == 3
    assert record.transferred_by == 9
    session.commit.assert_awaited_once()
    session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_transfer_creates_destination_row(session, dialect):
    source = _stock(1, 10)
    session.execute.side_effect = [scalar_result(source), scalar_result(None)]

    await InventoryRepository(session, dialect).transfer(1, 1, 3, 10)

    assert source.quantity == 0
    created = _added(session, LocationInventory)
    assert len(created) == 1
    assert created[0].location_id == 3
    assert created[0].quantity == 10
    assert len(_added(session, InventoryTransfer)) == 1


@pytest.mark.asyncio
async def test_transfer_same_location_rejected(session, dialect):
    with pytest.raises(TransferError, match="same location"):
        await InventoryRepository(session, dialect).transfer(1, 2, 2, 1)
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_transfer_insufficient_stock_rolls_back(session, dialect):
    source = _stock(1, 2)
    session.execute.side_effect = [scalar_result(source)]

    with pytest.raises(InsufficientStockError) as exc:
        await InventoryRepository(session, dialect).transfer(1, 1, 2, 5)

    assert exc.value.available == 2
    assert exc.value.requested == 5
    assert source.quantity == 2
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_transfer_missing_source_row(session, dialect):
    session.execute.side_effect = [scalar_result(None)]

    with pytest.raises(InsufficientStockError) as exc:
        await InventoryRepository(session, dialect).transfer(1, 1, 2, 1)
    assert exc.value.available == 0


@pytest.mark.asyncio
async def test_transfer_failure_mid_way_rolls_back(session, dialect):
    source = _stock(1, 10)
    session.execute.side_effect = [scalar_result(source), RuntimeError("connection lost")]

    with pytest.raises(RuntimeError):
        await InventoryRepository(session, dialect).transfer(1, 1, 2, 3)

    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
    assert not _added(session, InventoryTransfer)


# ── Transfer route ────────────────────────────────

@pytest.mark.asyncio
async def test_transfer_route_reports_available_and_requested():
    from app.api.inventory import run_transfer

    inventory = AsyncMock()
    inventory.get.return_value = InventoryItem(id=1, item_name="Cable", sku="CBL-1")
    inventory.transfer.side_effect = InsufficientStockError(available=2, requested=5)

    with pytest.raises(HTTPException) as exc:
        await run_transfer(inventory, 1, 1, 2, 5, make_user())

    assert exc.value.status_code == 400
    assert exc.value.detail == {
        "error": "Insufficient inventory at source location",
        "available": 2,
        "requested": 5,
    }


@pytest.mark.asyncio
async def test_transfer_route_unknown_item():
    from app.api.inventory import run_transfer

    inventory = AsyncMock()
    inventory.get.return_value = None

    with pytest.raises(HTTPException) as exc:
        await run_transfer(inventory, 99, 1, 2, 1, make_user())
    assert exc.value.status_code == 404
    inventory.transfer.assert_not_awaited()


@pytest.mark.asyncio
async def test_item_transfer_to_unknown_location(session, dialect):
    from app.api.inventory import transfer_item
    from app.schemas.inventory import TransferRequest

    item = InventoryItem(id=1, item_name="Cable", sku="CBL-1")
    session.get.side_effect = lambda model, pk, **kw: {
        (InventoryItem, 1): item,
        (Location, 1): Location(id=1, name="Main Store"),
    }.get((model, pk))

    with pytest.raises(HTTPException) as exc:
        await transfer_item(
            1,
            TransferRequest(from_location_id=1, to_location_id=77, quantity=2),
            current_user=make_user(),
            inventory=InventoryRepository(session, dialect),
        )
    assert exc.value.status_code == 404
    assert exc.value.detail == "Location 77 not found"
    session.execute.assert_not_awaited()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_location_quantity_subtract_needs_existing_row(session, dialect):
    session.execute.return_value = scalar_result(None)

    with pytest.raises(DomainError, match="non-existent"):
        await InventoryRepository(session, dialect).adjust_location_quantity(
            1, 1, 3, AdjustOperation.SUBTRACT
        )
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_location_quantity_add_upserts(session, dialect):
    await InventoryRepository(session, dialect).adjust_location_quantity(1, 2, 3, AdjustOperation.ADD)

    statement = session.execute.await_args.args[0]
    assert statement.table.name == "location_inventory"
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_rejects_duplicate_sku(session, dialect):
    from app.core.exceptions import DuplicateError

    session.execute.return_value = scalar_result(17)

    with pytest.raises(DuplicateError):
        await InventoryRepository(session, dialect).create(
            {"item_name": "Cable", "sku": "CBL-1", "buy_price": 1, "sell_price": 2}
        )
    session.add.assert_not_called()
