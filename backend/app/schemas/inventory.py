"""Inventory item and stock movement schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.inventory import AdjustOperation, ItemStatus


class InventoryItemCreate(BaseModel):
    item_name: str = Field(min_length=1, max_length=255)
    sku: str = Field(min_length=1, max_length=100)
    barcode: str | None = Field(None, max_length=255)
    category: str | None = None
    brand: str | None = None
    supplier: str | None = None
    unit: str = "pcs"
    buy_price: Decimal = Field(ge=0)
    sell_price: Decimal = Field(ge=0)
    quantity: int = Field(0, ge=0)
    min_stock: int = Field(0, ge=0)
    max_stock: int = Field(1000, ge=0)
    description: str | None = None
    warranty_days: int = Field(0, ge=0)
    image_url: str | None = None
    status: ItemStatus = ItemStatus.ACTIVE
    # {location_id: opening quantity}
    location_quantities: dict[int, int] = Field(default_factory=dict)


class InventoryItemUpdate(BaseModel):
    item_name: str | None = Field(None, min_length=1, max_length=255)
    sku: str | None = Field(None, min_length=1, max_length=100)
    barcode: str | None = None
    category: str | None = None
    brand: str | None = None
    supplier: str | None = None
    unit: str | None = None
    buy_price: Decimal | None = Field(None, ge=0)
    sell_price: Decimal | None = Field(None, ge=0)
    quantity: int | None = Field(None, ge=0)
    min_stock: int | None = Field(None, ge=0)
    max_stock: int | None = Field(None, ge=0)
    description: str | None = None
    warranty_days: int | None = Field(None, ge=0)
    image_url: str | None = None
    status: ItemStatus | None = None


class InventoryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_name: str
    sku: str
    barcode: str | None = None
    qr_code: str | None = None
    category: str | None = None
    brand: str | None = None
    supplier: str | None = None
    unit: str
    buy_price: Decimal
    sell_price: Decimal
    quantity: int
    min_stock: int
    max_stock: int
    description: str | None = None
    image_url: str | None = None
    warranty_days: int
    status: ItemStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class QuantityAdjustRequest(BaseModel):
    quantity: int = Field(ge=0)
    operation: AdjustOperation = AdjustOperation.SET


class TransferRequest(BaseModel):
    from_location_id: int
    to_location_id: int
    quantity: int = Field(gt=0)
    notes: str | None = None


class TransferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    from_location_id: int
    to_location_id: int
    quantity: int
    transferred_by: int | None = None
    notes: str | None = None
    created_at: datetime | None = None
