"""Inventory endpoints: items, per-location stock and transfers."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.deps import get_current_user, repository, require_capability
from app.core.exceptions import DomainError, DuplicateError, InsufficientStockError, TransferError
from app.models.inventory import InventoryItem, ItemStatus
from app.models.role import Capability
from app.repositories.inventory import InventoryRepository
from app.repositories.locations import LocationRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import MessageResponse, paginate
from app.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    QuantityAdjustRequest,
    TransferRequest,
    TransferResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])

stock_managers = require_capability(Capability.MANAGE_INVENTORY)


async def _get_or_404(inventory: InventoryRepository, item_id: int) -> InventoryItem:
    item = await inventory.get(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


async def run_transfer(
    inventory: InventoryRepository,
    item_id: int,
    from_location_id: int,
    to_location_id: int,
    quantity: int,
    user: CurrentUser,
    notes: str | None = None,
) -> dict:
    """Shared by the item and location routers; maps transfer failures to 400."""
    await _get_or_404(inventory, item_id)
    for location_id in (from_location_id, to_location_id):
        if await inventory.get_location(location_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Location {location_id} not found",
            )
    try:
        record = await inventory.transfer(
            item_id,
            from_location_id,
            to_location_id,
            quantity,
            transferred_by=user.id,
            notes=notes,
        )
    except InsufficientStockError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Insufficient inventory at source location",
                "available": exc.available,
                "requested": exc.requested,
            },
        )
    except TransferError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"message": "Inventory transferred successfully", "transfer": TransferResponse.model_validate(record)}


@router.get("")
async def list_inventory(
    search: str | None = None,
    category: str | None = None,
    status_filter: ItemStatus | None = Query(None, alias="status"),
    location_id: int | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    """Items with stock totals, or one location's stock when ``location_id`` is set."""
    rows, total = await inventory.list_items(search, category, status_filter, location_id, limit, offset)
    return {"items": rows, "pagination": paginate(total, limit, offset)}


@router.get("/search", response_model=list[InventoryItemResponse])
async def search_inventory(
    q: str = Query(..., min_length=1),
    current_user: CurrentUser = Depends(get_current_user),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    return [InventoryItemResponse.model_validate(i) for i in await inventory.search_by_name(q)]


@router.get("/locations")
async def list_stock_locations(
    current_user: CurrentUser = Depends(get_current_user),
    locations: LocationRepository = Depends(repository(LocationRepository)),
):
    return {"locations": await locations.list_active()}


@router.get("/sku/{sku}", response_model=InventoryItemResponse)
async def get_item_by_sku(
    sku: str,
    current_user: CurrentUser = Depends(get_current_user),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    item = await inventory.get_by_sku(sku)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return InventoryItemResponse.model_validate(item)


@router.get("/{item_id}", response_model=InventoryItemResponse)
async def get_item(
    item_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    return InventoryItemResponse.model_validate(await _get_or_404(inventory, item_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_item(
    body: InventoryItemCreate,
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    """Create an item, optionally with opening stock per location."""
    fields = body.model_dump(exclude={"location_quantities"})
    try:
        item = await inventory.create(fields, body.location_quantities)
    except DuplicateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logger.info("Inventory item %s created by %s", item.sku, current_user.username)
    return {"message": "Item created successfully", "item": InventoryItemResponse.model_validate(item)}


@router.put("/{item_id}")
async def update_item(
    item_id: int,
    body: InventoryItemUpdate,
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    item = await _get_or_404(inventory, item_id)
    try:
        item = await inventory.update(item, changes)
    except DuplicateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"message": "Item updated successfully", "item": InventoryItemResponse.model_validate(item)}


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item(
    item_id: int,
    current_user: CurrentUser = Depends(require_capability(Capability.DELETE_INVENTORY)),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    item = await _get_or_404(inventory, item_id)
    await inventory.delete(item)
    logger.info("Inventory item %s deleted by %s", item.sku, current_user.username)
    return MessageResponse(message="Item deleted successfully")


@router.patch("/{item_id}/quantity")
async def adjust_item_quantity(
    item_id: int,
    body: QuantityAdjustRequest,
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    """add / subtract / set the item-level counter; subtraction floors at zero."""
    item = await _get_or_404(inventory, item_id)
    item = await inventory.adjust_quantity(item, body.quantity, body.operation)
    return {"message": "Quantity updated successfully", "quantity": item.quantity}


@router.get("/{item_id}/locations")
async def item_stock_by_location(
    item_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    item = await _get_or_404(inventory, item_id)
    return {
        "item_id": item.id,
        "item_name": item.item_name,
        "locations": await inventory.stock_by_location(item_id),
    }


@router.patch("/{item_id}/location/{location_id}/quantity")
async def adjust_location_quantity(
    item_id: int,
    location_id: int,
    body: QuantityAdjustRequest,
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    await _get_or_404(inventory, item_id)
    try:
        await inventory.adjust_location_quantity(item_id, location_id, body.quantity, body.operation)
    except DomainError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return MessageResponse(message="Location inventory updated successfully")


@router.post("/{item_id}/transfer")
async def transfer_item(
    item_id: int,
    body: TransferRequest,
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    return await run_transfer(
        inventory,
        item_id,
        body.from_location_id,
        body.to_location_id,
        body.quantity,
        current_user,
        body.notes,
    )
