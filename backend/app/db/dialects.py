"""Per-engine SQL differences.

Everything the two supported stores disagree on lives behind ``SqlDialect``;
repositories never branch on the engine name themselves.
"""

from abc import ABC, abstractmethod
from typing import Literal

from sqlalchemy import Integer, cast, extract, func, literal_column
from sqlalchemy.dialects import mysql, postgresql
from sqlalchemy.sql.elements import ColumnElement

from app.models.location import LocationInventory

Period = Literal["day", "week", "month"]


class SqlDialect(ABC):
    name: str

    @abstractmethod
    def period_label(self, column: ColumnElement, group_by: Period) -> ColumnElement:
        """Label a date/timestamp column by report period (YYYY-MM-DD, YYYY-Www, YYYY-MM)."""

    @abstractmethod
    def minutes_between(self, start: ColumnElement, end: ColumnElement) -> ColumnElement:
        """Whole minutes elapsed from ``start`` to ``end``."""

    @abstractmethod
    def upsert_location_stock(
        self,
        location_id: int,
        item_id: int,
        quantity: int,
        *,
        increment: bool,
        min_stock: int = 5,
        max_stock: int = 100,
    ):
        """INSERT a location stock row, or on conflict set/increment its quantity."""


class PostgresDialect(SqlDialect):
    name = "postgresql"

    def period_label(self, column, group_by):
        fmt = {"day": "YYYY-MM-DD", "week": 'IYYY-"W"IW', "month": "YYYY-MM"}[group_by]
        return func.to_char(column, fmt)

    def minutes_between(self, start, end):
        return cast(extract("epoch", end - start) / 60, Integer)

    def upsert_location_stock(self, location_id, item_id, quantity, *, increment, min_stock=5, max_stock=100):
        stmt = postgresql.insert(LocationInventory).values(
            location_id=location_id,
            item_id=item_id,
            quantity=quantity,
            min_stock=min_stock,
            max_stock=max_stock,
        )
        new_quantity = (
            LocationInventory.quantity + stmt.excluded.quantity if increment else stmt.excluded.quantity
        )
        return stmt.on_conflict_do_update(
            index_elements=[LocationInventory.location_id, LocationInventory.item_id],
            set_={"quantity": new_quantity, "updated_at": func.now()},
        )


class MySQLDialect(SqlDialect):
    name = "mysql"

    def period_label(self, column, group_by):
        fmt = {"day": "%Y-%m-%d", "week": "%x-W%v", "month": "%Y-%m"}[group_by]
        return func.date_format(column, fmt)

    def minutes_between(self, start, end):
        return func.timestampdiff(literal_column("MINUTE"), start, end)

    def upsert_location_stock(self, location_id, item_id, quantity, *, increment, min_stock=5, max_stock=100):
        stmt = mysql.insert(LocationInventory).values(
            location_id=location_id,
            item_id=item_id,
            quantity=quantity,
            min_stock=min_stock,
            max_stock=max_stock,
        )
        new_quantity = (
            LocationInventory.quantity + stmt.inserted.quantity if increment else stmt.inserted.quantity
        )
        return stmt.on_duplicate_key_update(quantity=new_quantity, updated_at=func.now())


def dialect_for_url(url: str) -> SqlDialect:
    """Pick the dialect implementation from a SQLAlchemy URL scheme."""
    scheme = url.split("://", 1)[0].split("+", 1)[0].lower()
    if scheme in ("postgresql", "postgres"):
        return PostgresDialect()
    if scheme in ("mysql", "mariadb"):
        return MySQLDialect()
    raise ValueError(f"Unsupported database URL scheme: {scheme!r}")
