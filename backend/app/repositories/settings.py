"""Shop settings (single logical row)."""

from sqlalchemy import select

from app.models.setting import ShopSettings
from app.repositories.base import BaseRepository


class SettingsRepository(BaseRepository):
    async def latest(self) -> ShopSettings | None:
        result = await self.session.execute(select(ShopSettings).order_by(ShopSettings.id.desc()).limit(1))
        return result.scalar_one_or_none()

    async def upsert(self, fields: dict) -> ShopSettings:
        current = await self.latest()
        if current is None:
            return await self.save(ShopSettings(**fields))
        return await self.apply_changes(current, fields)
