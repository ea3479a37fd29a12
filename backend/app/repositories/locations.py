"""Store locations."""

from datetime import date, timedelta

from sqlalchemy import func, select

from app.models.inventory import InventoryItem
from app.models.location import Location, LocationInventory, LocationStatus
from app.models.sale import Sale, SaleItem
from app.models.user import User
from app.repositories.base import BaseRepository


class LocationRepository(BaseRepository):
    async def get(self, location_id: int) -> Location | None:
        return await self.session.get(Location, location_id)

    async def list_active(self) -> list[dict]:
        query = (
            select(*Location.__table__.c, User.full_name.label("manager_name"))
            .outerjoin(User, User.id == Location.manager_id)
            .where(Location.status == LocationStatus.ACTIVE)
            .order_by(Location.name)
        )
        return await self.mappings(query)

    async def create(self, **fields) -> Location:
        return await self.save(Location(**fields))

    async def update(self, location: Location, changes: dict) -> Location:
        return await self.apply_changes(location, changes)

    async def deactivate(self, location: Location) -> Location:
        if location.status == LocationStatus.INACTIVE:
            return location
        return await self.apply_changes(location, {"status": LocationStatus.INACTIVE})

    async def inventory(self, location_id: int) -> list[dict]:
        query = (
            select(
                *InventoryItem.__table__.c,
                LocationInventory.quantity.label("location_quantity"),
                LocationInventory.min_stock.label("location_min_stock"),
                LocationInventory.max_stock.label("location_max_stock"),
            )
            .join(LocationInventory, LocationInventory.item_id == InventoryItem.id)
            .where(LocationInventory.location_id == location_id)
            .order_by(InventoryItem.item_name)
        )
        return await self.mappings(query)

    async def sales(
        self, location_id: int, start_date: date | None = None, end_date: date | None = None
    ) -> list[dict]:
        """Sales recorded at a location with their line count and line total."""
        lines = (
            select(
                SaleItem.sale_id.label("sale_id"),
                func.count(SaleItem.id).label("item_count"),
                func.coalesce(func.sum(SaleItem.line_total), 0).label("calculated_total"),
            )
            .group_by(SaleItem.sale_id)
            .subquery()
        )
        query = (
            select(
                *Sale.__table__.c,
                func.coalesce(lines.c.item_count, 0).label("item_count"),
                func.coalesce(lines.c.calculated_total, 0).label("calculated_total"),
            )
            .outerjoin(lines, lines.c.sale_id == Sale.id)
            .where(Sale.location_id == location_id)
        )
        if start_date:
            query = query.where(Sale.created_at >= start_date)
        if end_date:
            query = query.where(Sale.created_at < end_date + timedelta(days=1))
        return await self.mappings(query.order_by(Sale.created_at.desc()))
