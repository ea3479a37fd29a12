"""Partner and investment ledger endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.deps import repository, require_capability
from app.models.partner import Partner
from app.models.role import Capability
from app.repositories.partners import PartnerRepository
from app.schemas.auth import CurrentUser
from app.schemas.partner import (
    InvestmentCreate,
    InvestmentResponse,
    PartnerCreate,
    PartnerResponse,
    PartnerUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/partners", tags=["partners"])

owners = require_capability(Capability.MANAGE_PARTNERS)


async def _get_or_404(partners: PartnerRepository, partner_id: int) -> Partner:
    partner = await partners.get(partner_id)
    if partner is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Partner not found")
    return partner


@router.get("", response_model=list[PartnerResponse])
async def list_partners(
    current_user: CurrentUser = Depends(owners),
    partners: PartnerRepository = Depends(repository(PartnerRepository)),
):
    return [PartnerResponse.model_validate(p) for p in await partners.list_partners()]


@router.post("", response_model=PartnerResponse, status_code=status.HTTP_201_CREATED)
async def create_partner(
    body: PartnerCreate,
    current_user: CurrentUser = Depends(owners),
    partners: PartnerRepository = Depends(repository(PartnerRepository)),
):
    partner = await partners.create(**body.model_dump())
    logger.info("Partner %s created by %s", partner.name, current_user.username)
    return PartnerResponse.model_validate(partner)


@router.put("/{partner_id}", response_model=PartnerResponse)
async def update_partner(
    partner_id: int,
    body: PartnerUpdate,
    current_user: CurrentUser = Depends(owners),
    partners: PartnerRepository = Depends(repository(PartnerRepository)),
):
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    partner = await _get_or_404(partners, partner_id)
    return PartnerResponse.model_validate(await partners.update(partner, changes))


@router.get("/{partner_id}/investments", response_model=list[InvestmentResponse])
async def list_investments(
    partner_id: int,
    current_user: CurrentUser = Depends(owners),
    partners: PartnerRepository = Depends(repository(PartnerRepository)),
):
    await _get_or_404(partners, partner_id)
    return [InvestmentResponse.model_validate(i) for i in await partners.investments(partner_id)]


@router.post(
    "/{partner_id}/investments",
    response_model=InvestmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_investment(
    partner_id: int,
    body: InvestmentCreate,
    current_user: CurrentUser = Depends(owners),
    partners: PartnerRepository = Depends(repository(PartnerRepository)),
):
    """Record money put in or taken out; the partner's name is copied onto the row."""
    partner = await _get_or_404(partners, partner_id)
    investment = await partners.add_investment(partner, body.type, body.amount, body.notes)
    logger.info("%s of %s recorded for partner %s", body.type.value, body.amount, partner.name)
    return InvestmentResponse.model_validate(investment)


@router.get("/{partner_id}/balance")
async def partner_balance(
    partner_id: int,
    current_user: CurrentUser = Depends(owners),
    partners: PartnerRepository = Depends(repository(PartnerRepository)),
):
    partner = await _get_or_404(partners, partner_id)
    return {"partner_id": partner.id, "name": partner.name, **await partners.balance(partner_id)}
