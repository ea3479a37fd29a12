"""Inventory items, per-location stock and transfers."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import DomainError, DuplicateError, InsufficientStockError, TransferError
from app.models.inventory import AdjustOperation, InventoryItem, ItemStatus, apply_adjustment
from app.models.location import InventoryTransfer, Location, LocationInventory, LocationStatus
from app.repositories.base import BaseRepository, contains

logger = logging.getLogger(__name__)

# Stock rows created implicitly (item creation, add/set on a new location, transfer target)
DEFAULT_LOCATION_MIN_STOCK = 5
DEFAULT_LOCATION_MAX_STOCK = 100


class InventoryRepository(BaseRepository):
    async def get(self, item_id: int) -> InventoryItem | None:
        return await self.session.get(InventoryItem, item_id)

    async def get_by_sku(self, sku: str) -> InventoryItem | None:
        result = await self.session.execute(select(InventoryItem).where(InventoryItem.sku == sku))
        return result.scalar_one_or_none()

    async def get_by_barcode(self, barcode: str) -> InventoryItem | None:
        result = await self.session.execute(
            select(InventoryItem).where(InventoryItem.barcode == barcode).limit(1)
        )
        return result.scalar_one_or_none()

    async def sku_taken(self, sku: str, exclude_id: int | None = None) -> bool:
        query = select(InventoryItem.id).where(InventoryItem.sku == sku)
        if exclude_id is not None:
            query = query.where(InventoryItem.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def list_items(
        self,
        search: str | None = None,
        category: str | None = None,
        status: ItemStatus | None = None,
        location_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict], int]:
        """Items with stock totals, or with one location's stock when ``location_id`` is given."""
        if location_id is not None:
            query = (
                select(
                    *InventoryItem.__table__.c,
                    LocationInventory.quantity.label("location_quantity"),
                    LocationInventory.min_stock.label("location_min_stock"),
                    LocationInventory.max_stock.label("location_max_stock"),
                    Location.name.label("location_name"),
                )
                .join(LocationInventory, LocationInventory.item_id == InventoryItem.id)
                .join(Location, Location.id == LocationInventory.location_id)
                .where(LocationInventory.location_id == location_id)
            )
        else:
            total_quantity = (
                select(func.coalesce(func.sum(LocationInventory.quantity), 0))
                .where(LocationInventory.item_id == InventoryItem.id)
                .scalar_subquery()
            )
            locations_count = (
                select(func.count(LocationInventory.id))
                .where(LocationInventory.item_id == InventoryItem.id)
                .scalar_subquery()
            )
            query = select(
                *InventoryItem.__table__.c,
                total_quantity.label("total_quantity"),
                locations_count.label("locations_count"),
            )

        if search:
            like = contains(search)
            query = query.where(
                or_(
                    InventoryItem.item_name.ilike(like),
                    InventoryItem.sku.ilike(like),
                    InventoryItem.barcode.ilike(like),
                )
            )
        if category:
            query = query.where(InventoryItem.category == category)
        if status:
            query = query.where(InventoryItem.status == status)

        total = await self.count(query)
        rows = await self.mappings(
            query.order_by(InventoryItem.created_at.desc()).limit(limit).offset(offset)
        )
        return rows, total

    async def search_by_name(self, term: str) -> list[InventoryItem]:
        result = await self.session.execute(
            select(InventoryItem)
            .where(InventoryItem.item_name.ilike(contains(term)))
            .order_by(InventoryItem.item_name)
        )
        return list(result.scalars().all())

    async def create(self, fields: dict, location_quantities: dict[int, int] | None = None) -> InventoryItem:
        """Insert an item and its opening location stock in one transaction."""
        if await self.sku_taken(fields["sku"]):
            raise DuplicateError("SKU already exists")
        item = InventoryItem(**fields)
        try:
            self.session.add(item)
            await self.session.flush()
            for location_id, quantity in (location_quantities or {}).items():
                if quantity and quantity > 0:
                    self.session.add(
                        LocationInventory(
                            item_id=item.id,
                            location_id=int(location_id),
                            quantity=quantity,
                            min_stock=DEFAULT_LOCATION_MIN_STOCK,
                            max_stock=DEFAULT_LOCATION_MAX_STOCK,
                        )
                    )
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateError("SKU already exists") from exc
        except Exception:
            await self.session.rollback()
            raise
        await self.session.refresh(item)
        return item

    async def update(self, item: InventoryItem, changes: dict) -> InventoryItem:
        if "sku" in changes and await self.sku_taken(changes["sku"], exclude_id=item.id):
            raise DuplicateError("SKU already exists")
        return await self.apply_changes(item, changes)

    async def delete(self, item: InventoryItem) -> None:
        await self.session.delete(item)
        await self.session.commit()

    async def adjust_quantity(self, item: InventoryItem, quantity: int, operation: AdjustOperation) -> InventoryItem:
        return await self.apply_changes(
            item, {"quantity": apply_adjustment(item.quantity, quantity, operation)}
        )

    async def items_without_barcode(self) -> list[InventoryItem]:
        result = await self.session.execute(
            select(InventoryItem).where(
                or_(InventoryItem.barcode.is_(None), InventoryItem.barcode == ""),
                InventoryItem.status == ItemStatus.ACTIVE,
            )
        )
        return list(result.scalars().all())

    # -----------------------------------------------------------------
    # Location stock
    # -----------------------------------------------------------------

    async def stock_by_location(self, item_id: int) -> list[dict]:
        """Every active location with this item's quantity (zero where no row exists)."""
        query = (
            select(
                Location.id.label("location_id"),
                Location.name.label("location_name"),
                func.coalesce(LocationInventory.quantity, 0).label("quantity"),
                func.coalesce(LocationInventory.min_stock, 0).label("min_stock"),
                func.coalesce(LocationInventory.max_stock, 0).label("max_stock"),
            )
            .outerjoin(
                LocationInventory,
                (LocationInventory.location_id == Location.id) & (LocationInventory.item_id == item_id),
            )
            .where(Location.status == LocationStatus.ACTIVE)
            .order_by(Location.name)
        )
        return await self.mappings(query)

    async def get_location(self, location_id: int) -> Location | None:
        return await self.session.get(Location, location_id)

    async def get_location_stock(self, item_id: int, location_id: int) -> LocationInventory | None:
        result = await self.session.execute(
            select(LocationInventory).where(
                LocationInventory.item_id == item_id,
                LocationInventory.location_id == location_id,
            )
        )
        return result.scalar_one_or_none()

    async def adjust_location_quantity(
        self, item_id: int, location_id: int, quantity: int, operation: AdjustOperation
    ) -> None:
        """add/set upsert the stock row; subtract needs an existing row and floors at zero."""
        if operation is AdjustOperation.SUBTRACT:
            row = await self.get_location_stock(item_id, location_id)
            if row is None:
                raise DomainError("Cannot subtract from non-existent inventory")
            row.quantity = apply_adjustment(row.quantity, quantity, operation)
        else:
            await self.session.execute(
                self.dialect.upsert_location_stock(
                    location_id,
                    item_id,
                    quantity,
                    increment=operation is AdjustOperation.ADD,
                    min_stock=DEFAULT_LOCATION_MIN_STOCK,
                    max_stock=DEFAULT_LOCATION_MAX_STOCK,
                )
            )
        await self.session.commit()

    async def _locked_stock(self, item_id: int, location_id: int) -> LocationInventory | None:
        result = await self.session.execute(
            select(LocationInventory)
            .where(
                LocationInventory.item_id == item_id,
                LocationInventory.location_id == location_id,
            )
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def transfer(
        self,
        item_id: int,
        from_location_id: int,
        to_location_id: int,
        quantity: int,
        transferred_by: int | None = None,
        notes: str | None = None,
    ) -> InventoryTransfer:
        """Move ``quantity`` of an item between two locations atomically.

        The source row is locked, decremented, the destination row is
        incremented (or created) and a transfer record appended, all in one
        transaction. Any failure rolls everything back.
        """
        if from_location_id == to_location_id:
            raise TransferError("Cannot transfer to the same location")
        if quantity <= 0:
            raise TransferError("Quantity must be positive")

        try:
            source = await self._locked_stock(item_id, from_location_id)
            available = source.quantity if source is not None else 0
            if source is None or available < quantity:
                raise InsufficientStockError(available, quantity)
            source.quantity = available - quantity

            destination = await self._locked_stock(item_id, to_location_id)
            if destination is None:
                self.session.add(
                    LocationInventory(
                        item_id=item_id,
                        location_id=to_location_id,
                        quantity=quantity,
                        min_stock=DEFAULT_LOCATION_MIN_STOCK,
                        max_stock=DEFAULT_LOCATION_MAX_STOCK,
                    )
                )
            else:
                destination.quantity = destination.quantity + quantity

            record = InventoryTransfer(
                item_id=item_id,
                from_location_id=from_location_id,
                to_location_id=to_location_id,
                quantity=quantity,
                transferred_by=transferred_by,
                notes=notes or "",
            )
            self.session.add(record)
            await self.session.commit()
        except Exception as exc:
            await self.session.rollback()
            logger.warning(
                "Transfer of item %s from %s to %s rolled back: %s",
                item_id, from_location_id, to_location_id, exc,
            )
            raise

        await self.session.refresh(record)
        logger.info(
            "Transferred %s of item %s from location %s to %s",
            quantity, item_id, from_location_id, to_location_id,
        )
        return record
