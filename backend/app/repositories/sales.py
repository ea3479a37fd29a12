"""Sales, their line items, and the stock/loyalty side effects of a sale."""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.core.exceptions import DomainError, NotFoundError
from app.models.customer import Customer
from app.models.inventory import InventoryItem
from app.models.sale import Sale, SaleItem, SaleStatus
from app.repositories.base import BaseRepository, contains
from app.repositories.users import utcnow
from app.services.sales import compute_totals, derive_sale_status, generate_invoice, loyalty_points_for, money

logger = logging.getLogger(__name__)


class SaleRepository(BaseRepository):
    async def get(self, sale_id: int) -> Sale | None:
        return await self.session.get(Sale, sale_id)

    async def get_with_details(self, sale_id: int) -> Sale | None:
        result = await self.session.execute(
            select(Sale)
            .options(selectinload(Sale.items), selectinload(Sale.payments))
            .where(Sale.id == sale_id)
        )
        return result.scalar_one_or_none()

    async def get_by_invoice(self, invoice: str) -> Sale | None:
        result = await self.session.execute(
            select(Sale).options(selectinload(Sale.items)).where(Sale.invoice == invoice)
        )
        return result.scalar_one_or_none()

    async def list_sales(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        status: SaleStatus | None = None,
        customer_id: int | None = None,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Sale], int]:
        query = select(Sale)
        if start_date:
            query = query.where(Sale.date >= start_date)
        if end_date:
            query = query.where(Sale.date <= end_date)
        if status:
            query = query.where(Sale.status == status)
        if customer_id:
            query = query.where(Sale.customer_id == customer_id)
        if search:
            like = contains(search)
            query = query.where(Sale.invoice.ilike(like) | Sale.customer_name.ilike(like))
        return await self.page(query.order_by(Sale.created_at.desc()), limit, offset)

    async def create(
        self,
        lines: list[dict],
        *,
        customer_id: int | None = None,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        customer_email: str | None = None,
        cashier_id: int | None = None,
        cashier_name: str | None = None,
        location_id: int | None = None,
        payment_method: str = "cash",
        payment_reference: str | None = None,
        tax_rate=0,
        discount=0,
        discount_type=None,
        paid_amount=0,
        notes: str | None = None,
    ) -> Sale:
        """Record a sale, decrement stock and credit the customer, in one transaction.

        ``lines`` are ``{"item_id", "quantity", "unit_price"?}``; a missing unit
        price falls back to the item's sell price.
        """
        try:
            sale_items = []
            for line in lines:
                result = await self.session.execute(
                    select(InventoryItem).where(InventoryItem.id == line["item_id"]).with_for_update()
                )
                item = result.scalar_one_or_none()
                if item is None:
                    raise NotFoundError(f"Item {line['item_id']} not found")
                quantity = int(line["quantity"])
                unit_price = money(line.get("unit_price") if line.get("unit_price") is not None else item.sell_price)
                item.quantity = max(0, (item.quantity or 0) - quantity)
                sale_items.append(
                    SaleItem(
                        item_id=item.id,
                        item_name=item.item_name,
                        sku=item.sku,
                        quantity=quantity,
                        unit_price=unit_price,
                        line_total=money(unit_price * quantity),
                    )
                )
            if not sale_items:
                raise DomainError("Sale must contain at least one item")

            kwargs = {} if discount_type is None else {"discount_type": discount_type}
            totals = compute_totals([si.line_total for si in sale_items], tax_rate, discount, **kwargs)
            paid = money(paid_amount or 0)
            points = 0

            if customer_id is not None:
                customer = await self.session.get(Customer, customer_id)
                if customer is None:
                    raise NotFoundError("Customer not found")
                points = loyalty_points_for(totals.total_amount)
                customer.total_spent = (customer.total_spent or Decimal("0")) + totals.total_amount
                customer.loyalty_points = (customer.loyalty_points or 0) + points
                customer_name = customer_name or customer.name
                customer_phone = customer_phone or customer.phone
                customer_email = customer_email or customer.email

            sale = Sale(
                invoice=generate_invoice(),
                date=date.today(),
                customer_id=customer_id,
                customer_name=customer_name,
                customer_phone=customer_phone,
                customer_email=customer_email,
                cashier_id=cashier_id,
                cashier_name=cashier_name,
                location_id=location_id,
                payment_method=payment_method,
                payment_reference=payment_reference,
                subtotal=totals.subtotal,
                tax_amount=totals.tax_amount,
                discount_amount=totals.discount_amount,
                total_amount=totals.total_amount,
                paid_amount=paid,
                change_amount=max(Decimal("0.00"), paid - totals.total_amount),
                loyalty_points_earned=points,
                status=derive_sale_status(totals.total_amount, paid),
                notes=notes,
                items=sale_items,
                **kwargs,
            )
            self.session.add(sale)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Recorded sale %s total=%s status=%s", sale.invoice, sale.total_amount, sale.status.value)
        return await self.get_with_details(sale.id)

    async def set_status(self, sale: Sale, status: SaleStatus) -> Sale:
        return await self.apply_changes(sale, {"status": status})

    async def void(self, sale: Sale, voided_by: int, reason: str | None = None) -> Sale:
        """Cancel a sale, returning its stock and taking back the customer's credit.

        Everything happens in one transaction; voiding an already voided sale
        changes nothing.
        """
        if sale.voided:
            return sale
        try:
            result = await self.session.execute(select(SaleItem).where(SaleItem.sale_id == sale.id))
            for line in result.scalars().all():
                item = await self.session.get(InventoryItem, line.item_id, with_for_update=True)
                if item is None:
                    logger.warning("Item %s of sale %s no longer exists", line.item_id, sale.invoice)
                    continue
                item.quantity = (item.quantity or 0) + line.quantity

            if sale.customer_id is not None:
                customer = await self.session.get(Customer, sale.customer_id)
                if customer is not None:
                    customer.loyalty_points = max(0, (customer.loyalty_points or 0) - (sale.loyalty_points_earned or 0))
                    customer.total_spent = max(
                        Decimal("0.00"), money(customer.total_spent or 0) - money(sale.total_amount or 0)
                    )

            sale.voided = True
            sale.voided_by = voided_by
            sale.voided_at = utcnow()
            sale.void_reason = reason
            sale.status = SaleStatus.CANCELLED
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(sale)
        return sale

    async def unsynced(self, since: datetime | None = None) -> list[Sale]:
        """Sales not yet exported to accounting, with their line items."""
        query = select(Sale).options(selectinload(Sale.items)).where(Sale.synced_at.is_(None))
        if since:
            query = query.where(Sale.created_at >= since)
        result = await self.session.execute(query.order_by(Sale.created_at.desc()))
        return list(result.scalars().all())

