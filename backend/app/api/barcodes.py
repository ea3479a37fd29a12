"""Barcode and QR code endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.deps import get_current_user, repository, require_capability
from app.models.inventory import InventoryItem, ItemStatus
from app.models.role import Capability
from app.repositories.inventory import InventoryRepository
from app.repositories.sales import SaleRepository
from app.schemas.auth import CurrentUser
from app.services.barcodes import generate_ean13, parse_qr_payload, qr_data_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/barcodes", tags=["barcodes"])

stock_managers = require_capability(Capability.MANAGE_INVENTORY)


async def _get_item_or_404(inventory: InventoryRepository, item_id: int) -> InventoryItem:
    item = await inventory.get(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


async def _unused_barcode(inventory: InventoryRepository) -> str:
    while True:
        code = generate_ean13()
        if await inventory.get_by_barcode(code) is None:
            return code


def item_qr_payload(item: InventoryItem) -> dict:
    return {
        "type": "inventory_item",
        "id": item.id,
        "sku": item.sku,
        "name": item.item_name,
        "price": str(item.sell_price),
    }


@router.post("/barcode/{item_id}")
async def generate_item_barcode(
    item_id: int,
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    """Assign an EAN-13 to the item unless it already has a barcode."""
    item = await _get_item_or_404(inventory, item_id)
    if not item.barcode:
        item = await inventory.update(item, {"barcode": await _unused_barcode(inventory)})
        logger.info("Barcode %s assigned to %s", item.barcode, item.sku)
    return {
        "message": "Barcode generated successfully",
        "barcode": item.barcode,
        "item": {"id": item.id, "sku": item.sku},
    }


@router.post("/qr/{item_id}")
async def generate_item_qr(
    item_id: int,
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    item = await _get_item_or_404(inventory, item_id)
    payload = item_qr_payload(item)
    data_url = qr_data_url(payload)
    await inventory.update(item, {"qr_code": data_url})
    return {"message": "QR code generated successfully", "qr_code": data_url, "data": payload}


@router.post("/sale-qr/{sale_id}")
async def generate_sale_qr(
    sale_id: int,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_SALES)),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    sale = await sales.get(sale_id)
    if sale is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    payload = {
        "type": "sale",
        "id": sale.id,
        "invoice": sale.invoice,
        "total": str(sale.total_amount),
        "date": sale.date.isoformat(),
    }
    return {"message": "Sale QR code generated successfully", "qr_code": qr_data_url(payload), "data": payload}


@router.get("/lookup/{code}")
async def lookup_code(
    code: str,
    current_user: CurrentUser = Depends(get_current_user),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    """Resolve a scanned code: barcode first, then SKU, then an item QR payload."""
    item = await inventory.get_by_barcode(code) or await inventory.get_by_sku(code)
    if item is None:
        payload = parse_qr_payload(code)
        if payload and payload.get("type") == "inventory_item" and payload.get("id") is not None:
            try:
                item = await inventory.get(int(payload["id"]))
            except (TypeError, ValueError):
                item = None
    if item is None or item.status != ItemStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    return {
        "item": {
            "id": item.id,
            "sku": item.sku,
            "barcode": item.barcode,
            "name": item.item_name,
            "sell_price": item.sell_price,
            "buy_price": item.buy_price,
            "quantity": item.quantity,
            "category": item.category,
            "brand": item.brand,
            "unit": item.unit,
            "description": item.description,
        }
    }


@router.post("/bulk-generate")
async def bulk_generate_barcodes(
    current_user: CurrentUser = Depends(stock_managers),
    inventory: InventoryRepository = Depends(repository(InventoryRepository)),
):
    generated = []
    for item in await inventory.items_without_barcode():
        item = await inventory.update(item, {"barcode": await _unused_barcode(inventory)})
        generated.append({"item_id": item.id, "barcode": item.barcode})
    logger.info("Generated %s barcodes for %s", len(generated), current_user.username)
    return {"message": f"Generated barcodes for {len(generated)} items", "generated": generated}
