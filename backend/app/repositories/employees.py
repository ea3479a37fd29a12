"""Employee listing, sales performance and time tracking."""

from datetime import date

from sqlalchemy import Date, and_, case, cast, distinct, func, select

from app.core.exceptions import DomainError
from app.models.role import Role
from app.models.sale import Sale, SaleStatus
from app.models.user import TimeTracking, User, UserStatus
from app.repositories.base import BaseRepository
from app.repositories.users import utcnow


def hours(minutes) -> float:
    return round(float(minutes or 0) / 60, 2)


class EmployeeRepository(BaseRepository):
    async def list_employees(self, status: UserStatus | None = UserStatus.ACTIVE, role: Role | None = None) -> list[dict]:
        query = select(
            User.id,
            User.username,
            User.email,
            User.full_name,
            User.role,
            User.status,
            User.department,
            User.position,
            User.last_login,
            User.created_at,
            User.updated_at,
        )
        if status:
            query = query.where(User.status == status)
        if role:
            query = query.where(User.role == role)
        return await self.mappings(query.order_by(User.created_at.desc()))

    def _sale_filters(self, user_id: int, start_date: date | None, end_date: date | None) -> list:
        filters = [Sale.cashier_id == user_id]
        if start_date:
            filters.append(Sale.date >= start_date)
        if end_date:
            filters.append(Sale.date <= end_date)
        return filters

    def _clock_filters(self, start_date: date | None, end_date: date | None) -> list:
        work_date = cast(TimeTracking.clock_in, Date)
        filters = []
        if start_date:
            filters.append(work_date >= start_date)
        if end_date:
            filters.append(work_date <= end_date)
        return filters

    async def performance(self, user_id: int, start_date: date | None = None, end_date: date | None = None) -> dict:
        sales_performance = await self.first_mapping(
            select(
                func.count(Sale.id).label("total_sales"),
                func.coalesce(func.sum(Sale.total_amount), 0).label("total_revenue"),
                func.coalesce(func.avg(Sale.total_amount), 0).label("average_sale"),
                func.count(case((Sale.status == SaleStatus.PAID, 1))).label("completed_sales"),
            ).where(*self._sale_filters(user_id, start_date, end_date))
        )
        minutes = self.dialect.minutes_between(TimeTracking.clock_in, TimeTracking.clock_out)
        time_tracking = await self.first_mapping(
            select(
                func.coalesce(func.sum(minutes), 0).label("total_minutes_worked"),
                func.count(distinct(cast(TimeTracking.clock_in, Date))).label("days_worked"),
            ).where(
                TimeTracking.user_id == user_id,
                TimeTracking.clock_out.is_not(None),
                *self._clock_filters(start_date, end_date),
            )
        )
        return {"sales_performance": sales_performance, "time_tracking": time_tracking}

    async def open_record(self, user_id: int) -> TimeTracking | None:
        result = await self.session.execute(
            select(TimeTracking)
            .where(TimeTracking.user_id == user_id, TimeTracking.clock_out.is_(None))
            .order_by(TimeTracking.clock_in.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def clock_in(self, user_id: int) -> TimeTracking:
        if await self.open_record(user_id) is not None:
            raise DomainError("Already clocked in")
        return await self.save(TimeTracking(user_id=user_id, clock_in=utcnow()))

    async def clock_out(self, user_id: int) -> TimeTracking:
        record = await self.open_record(user_id)
        if record is None:
            raise DomainError("Not currently clocked in")
        return await self.apply_changes(record, {"clock_out": utcnow()})

    async def time_records(self, user_id: int, start_date: date | None = None, end_date: date | None = None) -> dict:
        minutes = self.dialect.minutes_between(TimeTracking.clock_in, TimeTracking.clock_out)
        filters = [TimeTracking.user_id == user_id, *self._clock_filters(start_date, end_date)]
        records = await self.mappings(
            select(
                cast(TimeTracking.clock_in, Date).label("work_date"),
                TimeTracking.clock_in,
                TimeTracking.clock_out,
                case((TimeTracking.clock_out.is_not(None), minutes), else_=None).label("minutes_worked"),
            )
            .where(*filters)
            .order_by(TimeTracking.clock_in.desc())
        )
        summary = await self.first_mapping(
            select(
                func.count(distinct(cast(TimeTracking.clock_in, Date))).label("days_worked"),
                func.sum(minutes).label("total_minutes"),
                func.avg(minutes).label("average_daily_minutes"),
            ).where(*filters, TimeTracking.clock_out.is_not(None))
        )
        summary["total_hours"] = hours(summary.get("total_minutes"))
        summary["average_daily_hours"] = hours(summary.get("average_daily_minutes"))
        return {"time_records": records, "summary": summary}

    async def commission(
        self,
        user_id: int,
        commission_rate: float = 5,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict:
        report = await self.first_mapping(
            select(
                func.count(Sale.id).label("total_sales"),
                func.coalesce(func.sum(Sale.total_amount), 0).label("total_sales_amount"),
            ).where(*self._sale_filters(user_id, start_date, end_date))
        )
        report["commission_earned"] = round(float(report.get("total_sales_amount") or 0) * commission_rate / 100, 2)
        report["commission_rate"] = commission_rate
        report["period"] = {"start_date": start_date, "end_date": end_date}
        return report

    async def attendance(self, start_date: date | None = None, end_date: date | None = None) -> list[dict]:
        minutes = self.dialect.minutes_between(TimeTracking.clock_in, TimeTracking.clock_out)
        join_on = [TimeTracking.user_id == User.id, TimeTracking.clock_out.is_not(None)]
        join_on.extend(self._clock_filters(start_date, end_date))
        rows = await self.mappings(
            select(
                User.id,
                User.full_name,
                User.role,
                func.count(distinct(cast(TimeTracking.clock_in, Date))).label("days_present"),
                func.sum(minutes).label("total_minutes_worked"),
                func.avg(minutes).label("average_daily_minutes"),
            )
            .select_from(User)
            .outerjoin(TimeTracking, and_(*join_on))
            .group_by(User.id, User.full_name, User.role)
            .order_by(User.full_name)
        )
        for row in rows:
            row["total_hours_worked"] = hours(row["total_minutes_worked"])
            row["average_daily_hours"] = hours(row["average_daily_minutes"])
        return rows
