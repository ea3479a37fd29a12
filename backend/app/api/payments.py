"""Payment endpoints: tender processing, refunds, analytics and transaction history."""

import logging
from datetime import date
from decimal import Decimal

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.deps import repository, require_capability
from app.models.payment import PaymentStatus, RefundStatus
from app.models.role import Capability
from app.models.sale import SaleStatus
from app.repositories.payments import PaymentRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import paginate
from app.schemas.payment import (
    PaymentMethodResponse,
    PaymentProcessRequest,
    PaymentProcessResponse,
    PaymentResponse,
    RefundProcessResponse,
    RefundRequest,
    RefundResponse,
)
from app.services import stripe
from app.services.payments import UnsupportedPaymentMethod, refund_status_from_processor, settle_tender
from app.services.sales import money

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])

tellers = require_capability(Capability.PROCESS_PAYMENTS)


@router.get("/methods", response_model=list[PaymentMethodResponse])
async def list_payment_methods(
    current_user: CurrentUser = Depends(tellers),
    payments: PaymentRepository = Depends(repository(PaymentRepository)),
):
    return [PaymentMethodResponse.model_validate(m) for m in await payments.enabled_methods()]


@router.post("/process", response_model=PaymentProcessResponse)
async def process_payment(
    body: PaymentProcessRequest,
    current_user: CurrentUser = Depends(tellers),
    payments: PaymentRepository = Depends(repository(PaymentRepository)),
    processor: stripe.StripeClient = Depends(stripe.get_stripe_client),
):
    """Take a payment against a sale and re-derive the sale's status."""
    sale = await payments.get_sale(body.sale_id)
    if sale is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    if sale.voided or sale.status in (SaleStatus.CANCELLED, SaleStatus.REFUNDED):
        state = "voided" if sale.voided else sale.status.value
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot take payment on a {state} sale",
        )

    # unsettled bank transfers and card intents still count against the balance
    remaining = (
        money(sale.total_amount)
        - money(sale.paid_amount or 0)
        - await payments.pending_total(sale.id)
    )
    if money(body.amount) > remaining:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Payment amount exceeds remaining balance of {remaining}",
        )

    try:
        tender = await settle_tender(
            body.payment_method, body.amount, processor, body.payment_token, body.reference
        )
    except UnsupportedPaymentMethod as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except httpx.HTTPStatusError as exc:
        message = stripe.error_message(exc)
        logger.error("Card payment for sale %s declined: %s", sale.id, message)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Payment processing failed: {message}",
        )
    except httpx.RequestError as exc:
        logger.error("Card processor connection error: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Cannot reach payment processor")

    payment = await payments.record(
        sale,
        body.payment_method,
        body.amount,
        tender,
        notes=body.notes,
        processed_by=current_user.id,
    )
    logger.info(
        "Payment %s on sale %s: %s %s (%s)",
        payment.id, sale.invoice, body.payment_method, payment.amount, payment.payment_status.value,
    )
    return PaymentProcessResponse(
        payment=PaymentResponse.model_validate(payment),
        sale_status=sale.status.value,
        paid_amount=sale.paid_amount,
        remaining_balance=max(Decimal("0.00"), money(sale.total_amount) - money(sale.paid_amount)),
    )


@router.get("/sale/{sale_id}")
async def sale_payments(
    sale_id: int,
    current_user: CurrentUser = Depends(tellers),
    payments: PaymentRepository = Depends(repository(PaymentRepository)),
):
    if await payments.get_sale(sale_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    return {"payments": await payments.for_sale(sale_id)}


@router.post("/refund/{payment_id}", response_model=RefundProcessResponse)
async def refund_payment(
    payment_id: int,
    body: RefundRequest,
    current_user: CurrentUser = Depends(require_capability(Capability.PROCESS_REFUNDS)),
    payments: PaymentRepository = Depends(repository(PaymentRepository)),
    processor: stripe.StripeClient = Depends(stripe.get_stripe_client),
):
    """Give back part or all of a completed payment."""
    payment = await payments.get(payment_id)
    if payment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    if payment.payment_status != PaymentStatus.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only completed payments can be refunded",
        )

    already_refunded = await payments.refunded_total(payment_id)
    refundable = money(payment.amount) - already_refunded
    amount = money(body.amount) if body.amount is not None else refundable
    if amount <= 0 or amount > refundable:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Refund amount cannot exceed {refundable}",
        )

    refund_status = RefundStatus.COMPLETED
    stripe_refund_id = None
    if payment.stripe_payment_intent and processor.configured:
        try:
            processed = await processor.create_refund(payment.stripe_payment_intent, amount)
        except httpx.HTTPStatusError as exc:
            message = stripe.error_message(exc)
            logger.error("Refund of payment %s rejected: %s", payment_id, message)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Refund processing failed: {message}",
            )
        except httpx.RequestError as exc:
            logger.error("Card processor connection error: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Cannot reach payment processor",
            )
        stripe_refund_id = processed.get("id")
        refund_status = refund_status_from_processor(processed.get("status"))

    sale = await payments.get_sale(payment.sale_id)
    refund = await payments.record_refund(
        payment,
        sale,
        amount,
        already_refunded=already_refunded,
        reason=body.reason,
        refund_status=refund_status,
        stripe_refund_id=stripe_refund_id,
        processed_by=current_user.id,
    )
    logger.info("Refund %s of %s on payment %s by %s", refund.id, amount, payment_id, current_user.username)
    return RefundProcessResponse(
        refund=RefundResponse.model_validate(refund),
        sale_status=sale.status.value,
        paid_amount=sale.paid_amount,
    )


@router.get("/analytics")
async def payment_analytics(
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(require_capability(Capability.VIEW_REPORTS)),
    payments: PaymentRepository = Depends(repository(PaymentRepository)),
):
    return await payments.analytics(start_date, end_date)


@router.get("/transactions")
async def payment_transactions(
    payment_method: str | None = None,
    payment_status: PaymentStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(require_capability(Capability.PROCESS_PAYMENTS, Capability.VIEW_REPORTS)),
    payments: PaymentRepository = Depends(repository(PaymentRepository)),
):
    rows, total = await payments.transactions(payment_method, payment_status, start_date, end_date, limit, offset)
    return {"transactions": rows, "pagination": paginate(total, limit, offset)}
