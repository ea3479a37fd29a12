"""Unit tests for store plumbing: dialect selection, bootstrap data and background jobs."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import mysql, postgresql

from app.db.dialects import MySQLDialect, PostgresDialect, dialect_for_url
from app.db.seed import DEFAULT_PAYMENT_METHODS, seed_defaults
from app.models.location import Location
from app.models.payment import PaymentMethodConfig
from app.models.role import Role
from app.models.sale import Sale
from app.models.user import User
from conftest import scalar_result


# ── Dialects ──────────────────────────────────────

@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgresql+asyncpg://u:p@h/db", PostgresDialect),
        ("postgres://u:p@h/db", PostgresDialect),
        ("mysql+aiomysql://u:p@h/db", MySQLDialect),
        ("mariadb+aiomysql://u:p@h/db", MySQLDialect),
    ],
)
def test_dialect_for_url(url, expected):
    assert isinstance(dialect_for_url(url), expected)


def test_unsupported_scheme():
    with pytest.raises(ValueError):
        dialect_for_url("sqlite+aiosqlite:///pos.db")


def test_period_labels_compile_per_engine():
    pg = str(PostgresDialect().period_label(Sale.date, "month").compile(dialect=postgresql.dialect()))
    my = str(MySQLDialect().period_label(Sale.date, "week").compile(dialect=mysql.dialect()))
    assert "to_char" in pg
    assert "date_format" in my


def test_upserts_compile_per_engine():
    pg = PostgresDialect().upsert_location_stock(1, 2, 3, increment=True)
    my = MySQLDialect().upsert_location_stock(1, 2, 3, increment=False)
    assert "ON CONFLICT" in str(pg.compile(dialect=postgresql.dialect()))
    assert "ON DUPLICATE KEY UPDATE" in str(my.compile(dialect=mysql.dialect()))


# ── Bootstrap data ────────────────────────────────

@pytest.mark.asyncio
async def test_seed_fills_empty_store(session):
    session.execute.return_value = scalar_result(0)

    seeded = await seed_defaults(session)

    assert seeded == ["users", "payment_methods", "tax_rates", "settings", "locations"]
    admin = next(c.args[0] for c in session.add.call_args_list if isinstance(c.args[0], User))
    assert admin.role == Role.ADMIN
    assert admin.password_hash != "Admin@123"
    methods = list(session.add_all.call_args.args[0])
    assert len(methods) == len(DEFAULT_PAYMENT_METHODS)
    assert all(isinstance(m, PaymentMethodConfig) for m in methods)
    locations = [c.args[0] for c in session.add.call_args_list if isinstance(c.args[0], Location)]
    assert locations[0].name == "Main Store"
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_seed_is_idempotent(session):
    session.execute.return_value = scalar_result(3)

    assert await seed_defaults(session) == []
    session.add.assert_not_called()
    session.commit.assert_not_awaited()


# ── Background jobs ───────────────────────────────

def _database(session):
    @asynccontextmanager
    async def factory():
        yield session

    database = MagicMock()
    database.session_factory = factory
    database.dialect = PostgresDialect()
    return database


@pytest.mark.asyncio
async def test_purge_expired_sessions(session):
    from app.services.scheduler import purge_expired_sessions

    outcome = MagicMock()
    outcome.rowcount = 4
    session.execute.return_value = outcome

    assert await purge_expired_sessions(_database(session)) == 4
    statement = session.execute.await_args.args[0]
    assert statement.table.name == "user_sessions"
    session.commit.assert_awaited_once()


def test_scheduler_registers_session_sweep():
    from app.core.config import settings
    from app.services.scheduler import build_scheduler

    scheduler = build_scheduler(_database(AsyncMock()))
    job = scheduler.get_job("purge_expired_sessions")

    assert job is not None
    assert job.trigger.interval.total_seconds() == settings.SESSION_CLEANUP_INTERVAL_MINUTES * 60
