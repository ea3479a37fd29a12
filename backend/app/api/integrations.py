"""Third-party integration endpoints: platform projections and inbound webhooks."""

import json
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from app.core.config import settings
from app.core.deps import repository, require_capability
from app.models.role import Capability
from app.repositories.integrations import IntegrationRepository
from app.repositories.payments import PaymentRepository
from app.repositories.sales import SaleRepository
from app.schemas.auth import CurrentUser
from app.schemas.integration import MarkSyncedRequest
from app.services.integrations import accounting_sale, catalog_product, mailing_member, storefront_product
from app.services.stripe import verify_webhook_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/integrations", tags=["integrations"])

integrators = require_capability(Capability.MANAGE_SETTINGS, Capability.VIEW_REPORTS)


@router.get("/quickbooks/sync")
async def quickbooks_sales(
    current_user: CurrentUser = Depends(integrators),
    sales: SaleRepository = Depends(repository(SaleRepository)),
):
    """Sales not yet exported to accounting, with their line items."""
    rows = [accounting_sale(sale) for sale in await sales.unsynced()]
    return {"message": "Sales data ready for QuickBooks sync", "sales": rows, "total_sales": len(rows)}


@router.post("/quickbooks/mark-synced")
async def quickbooks_mark_synced(
    body: MarkSyncedRequest,
    current_user: CurrentUser = Depends(integrators),
    integrations: IntegrationRepository = Depends(repository(IntegrationRepository)),
):
    marked = await integrations.mark_synced(body.sale_ids)
    logger.info("%s sales marked as synced to accounting by %s", marked, current_user.username)
    return {"message": "Sales marked as synced", "synced": marked}


@router.get("/woocommerce/products")
async def woocommerce_products(
    current_user: CurrentUser = Depends(integrators),
    integrations: IntegrationRepository = Depends(repository(IntegrationRepository)),
):
    products = [storefront_product(item) for item in await integrations.active_items()]
    return {"message": "Products ready for WooCommerce sync", "products": products, "total_products": len(products)}


@router.get("/shopify/inventory")
async def shopify_inventory(
    current_user: CurrentUser = Depends(integrators),
    integrations: IntegrationRepository = Depends(repository(IntegrationRepository)),
):
    products = [catalog_product(item) for item in await integrations.active_items()]
    return {"message": "Inventory ready for Shopify sync", "products": products, "total_products": len(products)}


@router.get("/square/payments")
async def square_payments(
    current_user: CurrentUser = Depends(integrators),
    integrations: IntegrationRepository = Depends(repository(IntegrationRepository)),
):
    """Card payments from the last 30 days."""
    rows = await integrations.recent_card_payments(days=30)
    return {"message": "Payment data for Square integration", "payments": rows, "total_payments": len(rows)}


@router.get("/mailchimp/customers")
async def mailchimp_customers(
    current_user: CurrentUser = Depends(integrators),
    integrations: IntegrationRepository = Depends(repository(IntegrationRepository)),
):
    members = [mailing_member(row) for row in await integrations.marketing_customers()]
    return {"message": "Customer data ready for Mailchimp sync", "members": members, "total_members": len(members)}


@router.post("/stripe/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    integrations: IntegrationRepository = Depends(repository(IntegrationRepository)),
    payments: PaymentRepository = Depends(repository(PaymentRepository)),
):
    """Card processor events; a succeeded intent completes its pending payment."""
    raw = await request.body()
    if settings.STRIPE_WEBHOOK_SECRET and not verify_webhook_signature(
        raw, stripe_signature or "", settings.STRIPE_WEBHOOK_SECRET
    ):
        logger.warning("Stripe webhook: invalid signature")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")

    try:
        event = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")

    event_type = event.get("type")
    if event_type != "payment_intent.succeeded":
        await integrations.log("stripe", event, event_type, status="ignored")
        return {"received": True, "ignored": True}

    intent = (event.get("data") or {}).get("object") or {}
    payment = await payments.complete_intent(intent.get("id", ""))
    await integrations.log("stripe", event, event_type, status="processed" if payment else "unmatched")
    logger.info("Stripe intent %s succeeded (payment %s)", intent.get("id"), payment.id if payment else None)
    return {"received": True}


@router.post("/webhook/{integration}")
async def generic_webhook(
    integration: str,
    request: Request,
    integrations: IntegrationRepository = Depends(repository(IntegrationRepository)),
):
    """Accept and record any platform's webhook body."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    event_type = payload.get("type") if isinstance(payload, dict) else None
    await integrations.log(integration, payload if isinstance(payload, dict) else {"body": payload}, event_type)
    logger.info("Webhook received for %s", integration)
    return {
        "message": f"Webhook received for {integration}",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
