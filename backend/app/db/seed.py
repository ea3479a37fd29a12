"""Idempotent bootstrap data.

Runs at startup after the tables exist; every step only inserts when its
table is empty, so restarting never duplicates rows.
"""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import hash_password
from app.models.location import Location
from app.models.payment import PaymentMethodConfig
from app.models.role import Role
from app.models.setting import ShopSettings, TaxRate, TaxType
from app.models.user import User, UserStatus

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHODS: list[tuple[str, str]] = [
    ("Cash", "cash"),
    ("Credit Card", "card"),
    ("Debit Card", "card"),
    ("Mobile Payment", "digital"),
    ("Bank Transfer", "transfer"),
]

DEFAULT_TAX_RATE = ("Standard Tax", Decimal("0.00"), TaxType.EXCLUSIVE)

DEFAULT_LOCATION = "Main Store"


async def _is_empty(session: AsyncSession, model) -> bool:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one() == 0


async def seed_defaults(session: AsyncSession) -> list[str]:
    """Insert whatever default rows are missing; returns the tables seeded."""
    seeded = []

    if await _is_empty(session, User):
        session.add(
            User(
                username=settings.DEFAULT_ADMIN_USERNAME,
                email=settings.DEFAULT_ADMIN_EMAIL,
                password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
                full_name="System Administrator",
                role=Role.ADMIN,
                status=UserStatus.ACTIVE,
                permissions={},
            )
        )
        seeded.append("users")

    if await _is_empty(session, PaymentMethodConfig):
        session.add_all(
            PaymentMethodConfig(name=name, type=kind, enabled=True, config={})
            for name, kind in DEFAULT_PAYMENT_METHODS
        )
        seeded.append("payment_methods")

    if await _is_empty(session, TaxRate):
        name, rate, kind = DEFAULT_TAX_RATE
        session.add(TaxRate(name=name, rate=rate, type=kind))
        seeded.append("tax_rates")

    if await _is_empty(session, ShopSettings):
        session.add(ShopSettings())
        seeded.append("settings")

    if await _is_empty(session, Location):
        session.add(Location(name=DEFAULT_LOCATION, address="", settings={}))
        seeded.append("locations")

    if seeded:
        await session.commit()
        logger.info("Seeded default rows: %s", ", ".join(seeded))
        if "users" in seeded:
            logger.warning(
                "Default admin '%s' created; change its password after first login",
                settings.DEFAULT_ADMIN_USERNAME,
            )
    return seeded
