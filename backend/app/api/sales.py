"""Sales endpoints: checkout, lookup, status and void."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.deps import repository, require_capability, require_role
from app.core.exceptions import DomainError, NotFoundError
from app.models.role import Capability, Role
from app.models.sale import Sale, SaleStatus
from app.repositories.sales import SaleRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import paginate
from app.schemas.sale import (
    SaleCreate,
    SaleDetailResponse,
    SaleListResponse,
    SaleResponse,
    SaleStatusUpdate,
    VoidRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["sales"])

cashiers = require_capability(Capability.MANAGE_SALES)


async def _get_or_404(sales: SaleRepository, sale_id: int) -> Sale:
    sale = await sales.get_with_details(sale_id)
    if sale is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return sale


@router.get("", response_model=SaleListResponse)
async def list_sales(
    start_date: date | None = None,
    end_date: date | None = None,
    status_filter: SaleStatus | None = Query(None, alias="status"),
    customer_id: int | None = None,
    search: str | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_SALES, Capability.VIEW_REPORTS)),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    rows, total = await sales.list_sales(start_date, end_date, status_filter, customer_id, search, limit, offset)
    return SaleListResponse(
        sales=[SaleResponse.model_validate(s) for s in rows],
        pagination=paginate(total, limit, offset),
    )


@router.get("/invoice/{invoice}", response_model=SaleDetailResponse)
async def get_sale_by_invoice(
    invoice: str,
    current_user: CurrentUser = Depends(cashiers),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    sale = await sales.get_by_invoice(invoice)
    if sale is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return SaleDetailResponse.model_validate(await sales.get_with_details(sale.id))


@router.get("/{sale_id}", response_model=SaleDetailResponse)
async def get_sale(
    sale_id: int,
    current_user: CurrentUser = Depends(cashiers),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    """Single sale with its line items and payments."""
    return SaleDetailResponse.model_validate(await _get_or_404(sales, sale_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_sale(
    body: SaleCreate,
    current_user: CurrentUser = Depends(cashiers),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    """Checkout: price the lines, decrement stock, credit loyalty and derive the status."""
    try:
        sale = await sales.create(
            [line.model_dump() for line in body.items],
            customer_id=body.customer_id,
            customer_name=body.customer_name,
            customer_phone=body.customer_phone,
            customer_email=body.customer_email,
            cashier_id=current_user.id,
            cashier_name=current_user.full_name,
            location_id=body.location_id,
            payment_method=body.payment_method,
            payment_reference=body.payment_reference,
            tax_rate=body.tax_rate,
            discount=body.discount,
            discount_type=body.discount_type,
            paid_amount=body.paid_amount,
            notes=body.notes,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except DomainError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return {"message": "Sale created successfully", "sale": SaleDetailResponse.model_validate(sale)}


@router.patch("/{sale_id}/status")
async def update_sale_status(
    sale_id: int,
    body: SaleStatusUpdate,
    current_user: CurrentUser = Depends(cashiers),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    sale = await _get_or_404(sales, sale_id)
    sale = await sales.set_status(sale, body.status)
    logger.info("Sale %s set to %s by %s", sale.invoice, body.status.value, current_user.username)
    return {"message": "Sale status updated successfully", "status": sale.status}


@router.delete("/{sale_id}")
async def void_sale(
    sale_id: int,
    body: VoidRequest | None = None,
    current_user: CurrentUser = Depends(require_role(Role.ADMIN, Role.MANAGER)),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    """Void the sale; it stays on record as cancelled. Repeating it is a no-op."""
    sale = await _get_or_404(sales, sale_id)
    sale = await sales.void(sale, voided_by=current_user.id, reason=body.reason if body else None)
    logger.info("Sale %s voided by %s", sale.invoice, current_user.username)
    return {"message": "Sale voided successfully", "sale": SaleResponse.model_validate(sale)}
