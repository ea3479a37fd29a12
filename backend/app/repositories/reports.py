"""Aggregate reporting queries."""

from datetime import date

from sqlalchemy import case, distinct, func, literal, select

from app.db.dialects import Period
from app.models.customer import Customer
from app.models.inventory import InventoryItem, ItemStatus
from app.models.payment import Payment
from app.models.sale import Sale, SaleItem, SaleStatus
from app.repositories.base import BaseRepository

EXPORT_COLUMNS = {
    "sales": (
        Sale,
        [
            "invoice", "date", "customer_name", "customer_phone", "subtotal", "tax_amount",
            "discount_amount", "total_amount", "paid_amount", "status", "created_at",
        ],
    ),
    "inventory": (
        InventoryItem,
        [
            "item_name", "sku", "category", "brand", "supplier", "buy_price", "sell_price",
            "quantity", "min_stock", "status", "created_at",
        ],
    ),
    "customers": (
        Customer,
        [
            "customer_code", "name", "email", "phone", "address", "loyalty_points",
            "total_spent", "discount_percentage", "status", "created_at",
        ],
    ),
}


def _pct(part, whole) -> float:
    whole = float(whole or 0)
    return round(float(part or 0) / whole * 100, 2) if whole else 0.0


class ReportRepository(BaseRepository):
    def _date_range(self, start_date: date | None, end_date: date | None) -> list:
        filters = []
        if start_date:
            filters.append(Sale.date >= start_date)
        if end_date:
            filters.append(Sale.date <= end_date)
        return filters

    async def sales(
        self, start_date: date | None = None, end_date: date | None = None, group_by: Period = "day"
    ) -> dict:
        period = self.dialect.period_label(Sale.date, group_by)
        filters = self._date_range(start_date, end_date)

        def status_count(status: SaleStatus):
            return func.count(case((Sale.status == status, 1)))

        rows = await self.mappings(
            select(
                period.label("period"),
                func.count(Sale.id).label("total_transactions"),
                func.sum(Sale.total_amount).label("total_revenue"),
                func.avg(Sale.total_amount).label("average_transaction"),
                func.sum(Sale.tax_amount).label("total_tax"),
                func.sum(Sale.discount_amount).label("total_discounts"),
                func.count(distinct(Sale.customer_id)).label("unique_customers"),
                status_count(SaleStatus.PAID).label("completed_transactions"),
                status_count(SaleStatus.PARTIAL).label("partial_transactions"),
                status_count(SaleStatus.UNPAID).label("unpaid_transactions"),
            )
            .where(*filters)
            .group_by(period)
            .order_by(period.desc())
        )
        totals = await self.first_mapping(
            select(
                func.count(Sale.id).label("total_transactions"),
                func.coalesce(func.sum(Sale.total_amount), 0).label("total_revenue"),
                func.coalesce(func.avg(Sale.total_amount), 0).label("average_transaction"),
                func.count(distinct(Sale.customer_id)).label("unique_customers"),
            ).where(*filters)
        )
        return {"sales_analytics": rows, "totals": totals, "group_by": group_by}

    async def products(self, start_date: date | None = None, end_date: date | None = None, limit: int = 50) -> list[dict]:
        revenue = func.sum(SaleItem.line_total)
        cost = func.sum(SaleItem.quantity * InventoryItem.buy_price)
        rows = await self.mappings(
            select(
                InventoryItem.id,
                InventoryItem.item_name,
                InventoryItem.sku,
                InventoryItem.category,
                func.sum(SaleItem.quantity).label("total_sold"),
                revenue.label("total_revenue"),
                cost.label("total_cost"),
                (revenue - cost).label("profit"),
                func.avg(SaleItem.unit_price).label("average_price"),
                func.count(distinct(Sale.id)).label("transaction_count"),
            )
            .select_from(SaleItem)
            .join(Sale, Sale.id == SaleItem.sale_id)
            .join(InventoryItem, InventoryItem.id == SaleItem.item_id)
            .where(*self._date_range(start_date, end_date))
            .group_by(InventoryItem.id, InventoryItem.item_name, InventoryItem.sku, InventoryItem.category)
            .order_by(func.sum(SaleItem.quantity).desc())
            .limit(limit)
        )
        for row in rows:
            row["profit_margin"] = _pct(row["profit"], row["total_revenue"])
        return rows

    async def customers(self, start_date: date | None = None, end_date: date | None = None, limit: int = 50) -> list[dict]:
        return await self.mappings(
            select(
                Customer.id,
                Customer.name,
                Customer.customer_code,
                Customer.loyalty_points,
                func.count(Sale.id).label("total_orders"),
                func.sum(Sale.total_amount).label("total_spent"),
                func.avg(Sale.total_amount).label("average_order"),
                func.min(Sale.date).label("first_purchase"),
                func.max(Sale.date).label("last_purchase"),
            )
            .join(Sale, Sale.customer_id == Customer.id)
            .where(*self._date_range(start_date, end_date))
            .group_by(Customer.id, Customer.name, Customer.customer_code, Customer.loyalty_points)
            .order_by(func.sum(Sale.total_amount).desc())
            .limit(limit)
        )

    async def inventory(self, status: ItemStatus | None = None, category: str | None = None) -> dict:
        filters = []
        if status:
            filters.append(InventoryItem.status == status)
        if category:
            filters.append(InventoryItem.category == category)

        sold = (
            select(
                SaleItem.item_id.label("item_id"),
                func.sum(SaleItem.quantity).label("total_sold"),
                func.sum(SaleItem.line_total).label("total_revenue"),
            )
            .group_by(SaleItem.item_id)
            .subquery()
        )
        stock_status = case(
            (InventoryItem.quantity <= InventoryItem.min_stock, literal("low_stock")),
            (InventoryItem.quantity >= InventoryItem.max_stock, literal("overstock")),
            else_=literal("normal"),
        )
        items = await self.mappings(
            select(
                *InventoryItem.__table__.c,
                func.coalesce(sold.c.total_sold, 0).label("total_sold"),
                func.coalesce(sold.c.total_revenue, 0).label("total_revenue"),
                (InventoryItem.quantity * InventoryItem.buy_price).label("inventory_value"),
                stock_status.label("stock_status"),
            )
            .outerjoin(sold, sold.c.item_id == InventoryItem.id)
            .where(*filters)
            .order_by(InventoryItem.item_name)
        )
        summary = await self.first_mapping(
            select(
                func.count(InventoryItem.id).label("total_items"),
                func.coalesce(func.sum(InventoryItem.quantity), 0).label("total_quantity"),
                func.coalesce(func.sum(InventoryItem.quantity * InventoryItem.buy_price), 0).label("total_value"),
                func.count(case((InventoryItem.quantity <= InventoryItem.min_stock, 1))).label("low_stock_items"),
                func.count(case((InventoryItem.status == ItemStatus.ACTIVE, 1))).label("active_items"),
                func.count(case((InventoryItem.status == ItemStatus.INACTIVE, 1))).label("inactive_items"),
            ).where(*filters)
        )
        return {"inventory_report": items, "summary": summary}

    async def financial(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        filters = self._date_range(start_date, end_date)
        summary = await self.first_mapping(
            select(
                func.coalesce(func.sum(Sale.total_amount), 0).label("total_revenue"),
                func.coalesce(func.sum(Sale.paid_amount), 0).label("total_collected"),
                func.coalesce(func.sum(Sale.total_amount - Sale.paid_amount), 0).label("outstanding_amount"),
                func.coalesce(func.sum(Sale.tax_amount), 0).label("total_tax_collected"),
                func.coalesce(func.sum(Sale.discount_amount), 0).label("total_discounts_given"),
                func.count(Sale.id).label("total_transactions"),
                func.coalesce(func.avg(Sale.total_amount), 0).label("average_transaction_value"),
            ).where(*filters)
        )
        cogs = await self.session.execute(
            select(func.coalesce(func.sum(SaleItem.quantity * InventoryItem.buy_price), 0))
            .select_from(SaleItem)
            .join(Sale, Sale.id == SaleItem.sale_id)
            .join(InventoryItem, InventoryItem.id == SaleItem.item_id)
            .where(*filters)
        )
        total_cogs = float(cogs.scalar_one() or 0)
        gross_profit = float(summary.get("total_revenue") or 0) - total_cogs
        summary.update(
            total_cogs=total_cogs,
            gross_profit=round(gross_profit, 2),
            profit_margin=_pct(gross_profit, summary.get("total_revenue")),
        )
        payment_methods = await self.mappings(
            select(
                Payment.payment_method,
                func.count(Payment.id).label("transaction_count"),
                func.sum(Payment.amount).label("total_amount"),
            )
            .join(Sale, Sale.id == Payment.sale_id)
            .where(*filters)
            .group_by(Payment.payment_method)
            .order_by(func.sum(Payment.amount).desc())
        )
        return {"financial_summary": summary, "payment_methods": payment_methods}

    async def tax(
        self, start_date: date | None = None, end_date: date | None = None, group_by: Period = "month"
    ) -> dict:
        filters = [*self._date_range(start_date, end_date), Sale.subtotal > 0]
        effective_rate = Sale.tax_amount / Sale.subtotal * 100
        transactions = await self.mappings(
            select(
                Sale.date,
                Sale.invoice,
                Sale.customer_name,
                Sale.subtotal,
                Sale.tax_amount,
                effective_rate.label("tax_rate"),
                Sale.total_amount,
            )
            .where(*filters)
            .order_by(Sale.date.desc())
        )
        period = self.dialect.period_label(Sale.date, group_by)
        by_period = await self.mappings(
            select(
                period.label("period"),
                func.sum(Sale.subtotal).label("taxable_sales"),
                func.sum(Sale.tax_amount).label("tax_collected"),
                func.count(Sale.id).label("transactions"),
            )
            .where(*filters)
            .group_by(period)
            .order_by(period.desc())
        )
        summary = await self.first_mapping(
            select(
                func.coalesce(func.sum(Sale.tax_amount), 0).label("total_tax_collected"),
                func.avg(effective_rate).label("average_tax_rate"),
                func.count(case((Sale.tax_amount > 0, 1))).label("taxable_transactions"),
            ).where(*filters)
        )
        return {"tax_summary": summary, "tax_by_period": by_period, "tax_transactions": transactions}

    async def export_rows(self, export_type: str, start_date: date | None = None, end_date: date | None = None) -> list[dict]:
        """Flat rows for one export type, in a fixed column order."""
        model, columns = EXPORT_COLUMNS[export_type]
        query = select(*(getattr(model, name) for name in columns))
        if model is Sale:
            query = query.where(*self._date_range(start_date, end_date)).order_by(Sale.date.desc())
        elif model is InventoryItem:
            query = query.order_by(InventoryItem.item_name)
        else:
            query = query.order_by(Customer.name)
        return await self.mappings(query)
