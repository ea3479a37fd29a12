"""Payments, refunds and configured payment methods."""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, cast, func, select

from app.models.payment import Payment, PaymentMethodConfig, PaymentStatus, Refund, RefundStatus
from app.models.sale import Sale
from app.models.user import User
from app.repositories.base import BaseRepository
from app.services.payments import Tender
from app.services.sales import derive_sale_status, money

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository):
    async def get(self, payment_id: int) -> Payment | None:
        return await self.session.get(Payment, payment_id)

    async def get_sale(self, sale_id: int) -> Sale | None:
        return await self.session.get(Sale, sale_id)

    async def enabled_methods(self) -> list[PaymentMethodConfig]:
        result = await self.session.execute(
            select(PaymentMethodConfig)
            .where(PaymentMethodConfig.enabled.is_(True))
            .order_by(PaymentMethodConfig.name)
        )
        return list(result.scalars().all())

    async def for_sale(self, sale_id: int) -> list[dict]:
        query = (
            select(*Payment.__table__.c, User.full_name.label("processed_by_name"))
            .outerjoin(User, User.id == Payment.processed_by)
            .where(Payment.sale_id == sale_id)
            .order_by(Payment.created_at.desc())
        )
        return await self.mappings(query)

    async def record(
        self,
        sale: Sale,
        payment_method: str,
        amount,
        tender: Tender,
        notes: str | None = None,
        processed_by: int | None = None,
    ) -> Payment:
        """Insert a payment; a completed one is added to the sale's paid amount."""
        amount = money(amount)
        payment = Payment(
            sale_id=sale.id,
            payment_method=payment_method,
            amount=amount,
            transaction_id=tender.transaction_id,
            payment_status=tender.payment_status,
            stripe_payment_intent=tender.stripe_payment_intent,
            notes=notes,
            processed_by=processed_by,
        )
        self.session.add(payment)
        if tender.payment_status == PaymentStatus.COMPLETED:
            self._apply_to_sale(sale, amount)
        await self.session.commit()
        await self.session.refresh(payment)
        return payment

    async def pending_total(self, sale_id: int) -> Decimal:
        """Amount tendered against the sale that is still waiting on settlement."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.sale_id == sale_id,
                Payment.payment_status.in_((PaymentStatus.PENDING, PaymentStatus.PROCESSING)),
            )
        )
        return money(result.scalar_one())

    async def refunded_total(self, payment_id: int) -> Decimal:
        result = await self.session.execute(
            select(func.coalesce(func.sum(Refund.amount), 0)).where(
                Refund.payment_id == payment_id,
                Refund.refund_status != RefundStatus.FAILED,
            )
        )
        return money(result.scalar_one())

    async def record_refund(
        self,
        payment: Payment,
        sale: Sale,
        amount,
        *,
        already_refunded=Decimal("0"),
        reason: str | None = None,
        refund_status: RefundStatus = RefundStatus.COMPLETED,
        stripe_refund_id: str | None = None,
        processed_by: int | None = None,
    ) -> Refund:
        """Insert a refund and reverse it out of the sale's paid amount.

        The payment itself becomes ``refunded`` once its whole amount has been
        given back.
        """
        amount = money(amount)
        refund = Refund(
            payment_id=payment.id,
            sale_id=sale.id,
            amount=amount,
            reason=reason,
            refund_status=refund_status,
            stripe_refund_id=stripe_refund_id,
            processed_by=processed_by,
        )
        self.session.add(refund)
        if refund_status != RefundStatus.FAILED:
            if money(already_refunded) + amount >= money(payment.amount):
                payment.payment_status = PaymentStatus.REFUNDED
            self._apply_to_sale(sale, -amount, refunded=True)
        await self.session.commit()
        await self.session.refresh(refund)
        return refund

    def _apply_to_sale(self, sale: Sale, delta: Decimal, refunded: bool = False) -> None:
        paid = max(Decimal("0.00"), money(sale.paid_amount or 0) + delta)
        sale.paid_amount = paid
        sale.status = derive_sale_status(sale.total_amount, paid, refunded=refunded)

    async def complete_intent(self, intent_id: str) -> Payment | None:
        """Mark the payment behind a succeeded intent completed and credit its sale."""
        result = await self.session.execute(
            select(Payment).where(Payment.stripe_payment_intent == intent_id)
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            logger.warning("No payment found for intent %s", intent_id)
            return None
        if payment.payment_status != PaymentStatus.COMPLETED:
            was_pending = payment.payment_status in (PaymentStatus.PENDING, PaymentStatus.PROCESSING)
            payment.payment_status = PaymentStatus.COMPLETED
            payment.transaction_id = intent_id
            if was_pending:
                sale = await self.session.get(Sale, payment.sale_id)
                if sale is not None:
                    self._apply_to_sale(sale, money(payment.amount))
            await self.session.commit()
        return payment

    async def analytics(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        payment_date = cast(Payment.created_at, Date)
        filters = [Payment.payment_status == PaymentStatus.COMPLETED]
        if start_date:
            filters.append(payment_date >= start_date)
        if end_date:
            filters.append(payment_date <= end_date)

        method_breakdown = await self.mappings(
            select(
                Payment.payment_method,
                func.count(Payment.id).label("transaction_count"),
                func.sum(Payment.amount).label("total_amount"),
                func.avg(Payment.amount).label("average_amount"),
            )
            .where(*filters)
            .group_by(Payment.payment_method)
            .order_by(func.sum(Payment.amount).desc())
        )
        daily_summary = await self.mappings(
            select(
                payment_date.label("payment_date"),
                func.count(Payment.id).label("transaction_count"),
                func.sum(Payment.amount).label("total_amount"),
            )
            .where(*filters)
            .group_by(payment_date)
            .order_by(payment_date.desc())
            .limit(30)
        )
        return {"method_breakdown": method_breakdown, "daily_summary": daily_summary}

    async def transactions(
        self,
        payment_method: str | None = None,
        payment_status: PaymentStatus | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict], int]:
        query = (
            select(
                *Payment.__table__.c,
                Sale.invoice,
                Sale.customer_name,
                Sale.total_amount.label("sale_total"),
                User.full_name.label("processed_by_name"),
            )
            .join(Sale, Sale.id == Payment.sale_id)
            .outerjoin(User, User.id == Payment.processed_by)
        )
        if payment_method:
            query = query.where(Payment.payment_method == payment_method)
        if payment_status:
            query = query.where(Payment.payment_status == payment_status)
        if start_date:
            query = query.where(cast(Payment.created_at, Date) >= start_date)
        if end_date:
            query = query.where(cast(Payment.created_at, Date) <= end_date)
        total = await self.count(query)
        rows = await self.mappings(query.order_by(Payment.created_at.desc()).limit(limit).offset(offset))
        return rows, total

