"""Shared repository plumbing."""

from typing import Any, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.dialects import SqlDialect

T = TypeVar("T")


def escape_like(s: str) -> str:
    """Escape SQL LIKE wildcards in user input."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(term: str) -> str:
    return f"%{escape_like(term)}%"


class BaseRepository:
    def __init__(self, session: AsyncSession, dialect: SqlDialect):
        self.session = session
        self.dialect = dialect

    async def count(self, query: Select) -> int:
        total = await self.session.execute(select(func.count()).select_from(query.order_by(None).subquery()))
        return total.scalar_one()

    async def page(self, query: Select, limit: int, offset: int) -> tuple[list, int]:
        """Run ``query`` for one page of ORM rows plus the unpaged total."""
        total = await self.count(query)
        result = await self.session.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all()), total

    async def mappings(self, query: Select) -> list[dict[str, Any]]:
        result = await self.session.execute(query)
        return [dict(row) for row in result.mappings().all()]

    async def first_mapping(self, query: Select) -> dict[str, Any]:
        result = await self.session.execute(query)
        row = result.mappings().first()
        return dict(row) if row else {}

    async def apply_changes(self, obj: T, changes: dict[str, Any]) -> T:
        """Assign a validated partial-update map to ``obj`` and persist it."""
        for field, value in changes.items():
            setattr(obj, field, value)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def save(self, obj: T) -> T:
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj
