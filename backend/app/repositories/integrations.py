"""Read-only projections for third-party platforms and the inbound webhook log."""

from datetime import datetime, timedelta

from sqlalchemy import Date, cast, select, update

from app.models.customer import Customer, CustomerStatus
from app.models.inventory import InventoryItem, ItemStatus
from app.models.message_log import IntegrationLog
from app.models.payment import Payment
from app.models.sale import Sale
from app.repositories.base import BaseRepository
from app.repositories.users import utcnow
from app.services.payments import CARD_METHODS


class IntegrationRepository(BaseRepository):
    async def active_items(self) -> list[InventoryItem]:
        result = await self.session.execute(
            select(InventoryItem).where(InventoryItem.status == ItemStatus.ACTIVE).order_by(InventoryItem.item_name)
        )
        return list(result.scalars().all())

    async def recent_card_payments(self, days: int = 30) -> list[dict]:
        since = datetime.now() - timedelta(days=days)
        return await self.mappings(
            select(*Payment.__table__.c, Sale.invoice, Sale.total_amount)
            .join(Sale, Sale.id == Payment.sale_id)
            .where(Payment.payment_method.in_(CARD_METHODS), Payment.created_at >= since)
            .order_by(Payment.created_at.desc())
        )

    async def marketing_customers(self) -> list[dict]:
        return await self.mappings(
            select(
                Customer.name,
                Customer.email,
                Customer.phone,
                Customer.total_spent,
                Customer.loyalty_points,
                cast(Customer.created_at, Date).label("signup_date"),
            )
            .where(
                Customer.email.is_not(None),
                Customer.email != "",
                Customer.status == CustomerStatus.ACTIVE,
            )
            .order_by(Customer.created_at.desc())
        )

    async def mark_synced(self, sale_ids: list[int]) -> int:
        if not sale_ids:
            return 0
        result = await self.session.execute(
            update(Sale).where(Sale.id.in_(sale_ids), Sale.synced_at.is_(None)).values(synced_at=utcnow())
        )
        await self.session.commit()
        return result.rowcount or 0

    async def log(self, integration: str, payload: dict | None, event_type: str | None = None, status: str = "received") -> IntegrationLog:
        return await self.save(
            IntegrationLog(integration=integration, event_type=event_type, payload=payload, status=status)
        )
