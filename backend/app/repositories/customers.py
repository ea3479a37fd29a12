"""Customers, loyalty points and purchase analytics."""

import secrets
import string
import time
from datetime import date, timedelta

from sqlalchemy import case, func, or_, select

from app.models.customer import Customer, CustomerStatus
from app.models.inventory import AdjustOperation, apply_adjustment
from app.models.sale import Sale, SaleItem, SaleStatus
from app.repositories.base import BaseRepository, contains

_BASE36 = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_customer_code() -> str:
    """``CUST`` + base36 millisecond timestamp + 3 random base36 characters."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(3))
    return f"CUST{to_base36(int(time.time() * 1000))}{suffix}"


class CustomerRepository(BaseRepository):
    async def get(self, customer_id: int) -> Customer | None:
        return await self.session.get(Customer, customer_id)

    async def get_by_code(self, code: str) -> Customer | None:
        result = await self.session.execute(select(Customer).where(Customer.customer_code == code))
        return result.scalar_one_or_none()

    async def get_by_phone(self, phone: str) -> Customer | None:
        result = await self.session.execute(select(Customer).where(Customer.phone == phone).limit(1))
        return result.scalar_one_or_none()

    async def list_customers(
        self,
        search: str | None = None,
        status: CustomerStatus | None = CustomerStatus.ACTIVE,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Customer], int]:
        query = select(Customer)
        if search:
            like = contains(search)
            query = query.where(
                or_(
                    Customer.name.ilike(like),
                    Customer.customer_code.ilike(like),
                    Customer.phone.ilike(like),
                    Customer.email.ilike(like),
                )
            )
        if status:
            query = query.where(Customer.status == status)
        return await self.page(query.order_by(Customer.created_at.desc()), limit, offset)

    async def recent_sales(self, customer_id: int, limit: int = 10) -> list[dict]:
        query = (
            select(Sale.id, Sale.invoice, Sale.date, Sale.total_amount, Sale.status, Sale.created_at)
            .where(Sale.customer_id == customer_id)
            .order_by(Sale.created_at.desc())
            .limit(limit)
        )
        return await self.mappings(query)

    async def phone_taken(self, phone: str, exclude_id: int | None = None) -> bool:
        return await self._taken(Customer.phone == phone, exclude_id)

    async def email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        return await self._taken(Customer.email == email, exclude_id)

    async def _taken(self, condition, exclude_id: int | None) -> bool:
        query = select(Customer.id).where(condition)
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def create(self, **fields) -> Customer:
        fields.setdefault("customer_code", generate_customer_code())
        return await self.save(Customer(**fields))

    async def update(self, customer: Customer, changes: dict) -> Customer:
        return await self.apply_changes(customer, changes)

    async def adjust_loyalty(self, customer: Customer, points: int, operation: AdjustOperation) -> Customer:
        return await self.apply_changes(
            customer, {"loyalty_points": apply_adjustment(customer.loyalty_points or 0, points, operation)}
        )

    async def deactivate(self, customer: Customer) -> Customer:
        if customer.status == CustomerStatus.INACTIVE:
            return customer
        return await self.apply_changes(customer, {"status": CustomerStatus.INACTIVE})

    async def analytics(self, customer_id: int) -> dict:
        summary = await self.first_mapping(
            select(
                func.count(Sale.id).label("total_orders"),
                func.coalesce(func.sum(Sale.total_amount), 0).label("total_spent"),
                func.coalesce(func.avg(Sale.total_amount), 0).label("average_order"),
                func.max(Sale.total_amount).label("highest_order"),
                func.min(Sale.date).label("first_purchase"),
                func.max(Sale.date).label("last_purchase"),
                func.count(case((Sale.status == SaleStatus.PAID, 1))).label("completed_orders"),
            ).where(Sale.customer_id == customer_id)
        )

        month = self.dialect.period_label(Sale.date, "month")
        monthly = await self.mappings(
            select(
                month.label("month"),
                func.sum(Sale.total_amount).label("total"),
                func.count(Sale.id).label("orders"),
            )
            .where(Sale.customer_id == customer_id, Sale.date >= date.today() - timedelta(days=365))
            .group_by(month)
            .order_by(month.desc())
        )

        top_items = await self.mappings(
            select(
                SaleItem.item_name,
                func.sum(SaleItem.quantity).label("total_quantity"),
                func.sum(SaleItem.line_total).label("total_spent"),
            )
            .join(Sale, Sale.id == SaleItem.sale_id)
            .where(Sale.customer_id == customer_id)
            .group_by(SaleItem.item_name)
            .order_by(func.sum(SaleItem.quantity).desc())
            .limit(5)
        )
        return {"analytics": summary, "monthly_spending": monthly, "top_items": top_items}
