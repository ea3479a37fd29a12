"""Partners and their investment ledger."""

from decimal import Decimal

from sqlalchemy import case, func, select

from app.models.partner import Investment, InvestmentType, Partner
from app.repositories.base import BaseRepository


class PartnerRepository(BaseRepository):
    async def get(self, partner_id: int) -> Partner | None:
        return await self.session.get(Partner, partner_id)

    async def list_partners(self) -> list[Partner]:
        result = await self.session.execute(select(Partner).order_by(Partner.name))
        return list(result.scalars().all())

    async def create(self, **fields) -> Partner:
        return await self.save(Partner(**fields))

    async def update(self, partner: Partner, changes: dict) -> Partner:
        return await self.apply_changes(partner, changes)

    async def investments(self, partner_id: int) -> list[Investment]:
        result = await self.session.execute(
            select(Investment).where(Investment.partner_id == partner_id).order_by(Investment.created_at.desc())
        )
        return list(result.scalars().all())

    async def add_investment(self, partner: Partner, type: InvestmentType, amount, notes: str | None = None) -> Investment:
        return await self.save(
            Investment(
                partner_id=partner.id,
                partner_name=partner.name,
                type=type,
                amount=amount,
                notes=notes,
            )
        )

    async def balance(self, partner_id: int) -> dict:
        def total(kind: InvestmentType):
            return func.coalesce(func.sum(case((Investment.type == kind, Investment.amount), else_=0)), 0)

        row = await self.first_mapping(
            select(
                total(InvestmentType.INVEST).label("invested"),
                total(InvestmentType.WITHDRAW).label("withdrawn"),
            ).where(Investment.partner_id == partner_id)
        )
        invested = Decimal(str(row.get("invested") or 0))
        withdrawn = Decimal(str(row.get("withdrawn") or 0))
        return {"invested": invested, "withdrawn": withdrawn, "net": invested - withdrawn}
