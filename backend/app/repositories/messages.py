"""Outbound message log."""

from sqlalchemy import select, update

from app.models.customer import Customer
from app.models.location import Location
from app.models.message_log import MessageLog, MessageStatus
from app.models.sale import Sale
from app.repositories.base import BaseRepository


class MessageLogRepository(BaseRepository):
    async def log(
        self,
        recipient: str,
        message: str,
        status: MessageStatus,
        *,
        template_name: str | None = None,
        provider_message_id: str | None = None,
        error: str | None = None,
        sale_id: int | None = None,
        sent_by: int | None = None,
    ) -> MessageLog:
        return await self.save(
            MessageLog(
                recipient=recipient,
                message=message,
                status=status,
                template_name=template_name,
                provider_message_id=provider_message_id,
                error=error,
                sale_id=sale_id,
                sent_by=sent_by,
            )
        )

    async def list_logs(
        self,
        status: MessageStatus | None = None,
        template_name: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[MessageLog], int]:
        query = select(MessageLog)
        if status:
            query = query.where(MessageLog.status == status)
        if template_name:
            query = query.where(MessageLog.template_name == template_name)
        return await self.page(query.order_by(MessageLog.created_at.desc()), limit, offset)

    async def update_status(self, provider_message_id: str, status: MessageStatus, error: str | None = None) -> int:
        values = {"status": status}
        if error:
            values["error"] = error
        result = await self.session.execute(
            update(MessageLog).where(MessageLog.provider_message_id == provider_message_id).values(**values)
        )
        await self.session.commit()
        return result.rowcount or 0

    async def sale_for_confirmation(self, sale_id: int) -> dict:
        """Sale header with the customer's phone and the selling location's address."""
        return await self.first_mapping(
            select(
                Sale.id,
                Sale.invoice,
                Sale.total_amount,
                Sale.customer_id,
                Sale.customer_name.label("sale_customer_name"),
                Sale.customer_phone.label("sale_customer_phone"),
                Customer.name.label("customer_name"),
                Customer.phone.label("customer_phone"),
                Location.name.label("location_name"),
                Location.address.label("location_address"),
            )
            .outerjoin(Customer, Customer.id == Sale.customer_id)
            .outerjoin(Location, Location.id == Sale.location_id)
            .where(Sale.id == sale_id)
        )
