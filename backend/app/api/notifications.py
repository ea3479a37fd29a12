"""Customer messaging endpoints (WhatsApp Cloud API)."""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from app.core.config import settings
from app.core.deps import get_current_user, repository, require_capability
from app.models.message_log import MessageStatus
from app.models.role import Capability
from app.repositories.messages import MessageLogRepository
from app.repositories.sales import SaleRepository
from app.repositories.settings import SettingsRepository
from app.schemas.auth import CurrentUser
from app.schemas.common import paginate
from app.schemas.notification import OrderConfirmationRequest, SendMessageRequest, SendTemplateRequest
from app.services import templates
from app.services.whatsapp import WhatsAppClient, error_message, format_phone, get_whatsapp_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

senders = require_capability(Capability.SEND_NOTIFICATIONS)


async def _deliver(
    client: WhatsAppClient,
    logs: MessageLogRepository,
    phone: str,
    message: str,
    user: CurrentUser,
    template_name: str | None = None,
    sale_id: int | None = None,
) -> dict:
    """Send one text and record the outcome either way."""
    if not client.configured:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="WhatsApp API not configured")

    recipient = format_phone(phone)
    try:
        message_id = await client.send_text(recipient, message)
    except httpx.HTTPError as exc:
        reason = error_message(exc)
        logger.error("WhatsApp send to %s failed: %s", recipient, reason)
        await logs.log(
            recipient,
            message,
            MessageStatus.FAILED,
            template_name=template_name,
            error=reason,
            sale_id=sale_id,
            sent_by=user.id,
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Failed to send WhatsApp message", "details": reason},
        )

    await logs.log(
        recipient,
        message,
        MessageStatus.SENT,
        template_name=template_name,
        provider_message_id=message_id,
        sale_id=sale_id,
        sent_by=user.id,
    )
    return {"success": True, "message": "Message sent successfully", "messageId": message_id, "phone": recipient}


async def _shop_context(shop: SettingsRepository) -> dict:
    row = await shop.latest()
    return {
        "shop_name": (row.shop_name if row else None) or settings.BUSINESS_NAME,
        "shop_address": (row.shop_address if row else None) or "Main Store",
    }


@router.post("/whatsapp/send")
async def send_message(
    body: SendMessageRequest,
    current_user: CurrentUser = Depends(senders),
    client: WhatsAppClient = Depends(get_whatsapp_client),
    logs: MessageLogRepository = Depends(repository(MessageLogRepository)),
):
    return await _deliver(client, logs, body.phone, body.message, current_user)


@router.post("/whatsapp/send-template")
async def send_template(
    body: SendTemplateRequest,
    current_user: CurrentUser = Depends(senders),
    client: WhatsAppClient = Depends(get_whatsapp_client),
    logs: MessageLogRepository = Depends(repository(MessageLogRepository)),
    shop: SettingsRepository = Depends(repository(SettingsRepository)),
):
    """Render a named template with ``data`` and send it."""
    data = {**await _shop_context(shop), **body.data}
    try:
        message = templates.render(body.template, data)
    except templates.UnknownTemplateError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid template name")
    return await _deliver(client, logs, body.phone, message, current_user, template_name=body.template)


@router.post("/whatsapp/order-confirmation")
async def send_order_confirmation(
    body: OrderConfirmationRequest,
    current_user: CurrentUser = Depends(senders),
    client: WhatsAppClient = Depends(get_whatsapp_client),
    logs: MessageLogRepository = Depends(repository(MessageLogRepository)),
    sales: SaleRepository = Depends(repository(SaleRepository)),
    shop: SettingsRepository = Depends(repository(SettingsRepository)),
):
    """Send the order confirmation for a sale to its customer's phone."""
    header = await logs.sale_for_confirmation(body.sale_id)
    if not header:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")

    phone = header.get("customer_phone") or header.get("sale_customer_phone")
    if not phone:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Customer phone number not available")

    sale = await sales.get_with_details(body.sale_id)
    data = await _shop_context(shop)
    if header.get("location_address"):
        data["shop_address"] = header["location_address"]
    data.update(
        customer_name=header.get("customer_name") or header.get("sale_customer_name") or "Valued Customer",
        invoice=header["invoice"],
        total_amount=header["total_amount"],
        items=[
            {"name": line.item_name, "quantity": line.quantity, "total": line.line_total}
            for line in sale.items
        ],
    )
    message = templates.render("order_confirmation", data)
    return await _deliver(
        client, logs, phone, message, current_user, template_name="order_confirmation", sale_id=body.sale_id
    )


@router.get("/templates")
async def list_templates(current_user: CurrentUser = Depends(get_current_user)):
    return {"templates": sorted(templates.TEMPLATES)}


@router.get("/logs")
async def message_logs(
    status_filter: MessageStatus | None = Query(None, alias="status"),
    template: str | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(senders),
    logs: MessageLogRepository = Depends(repository(MessageLogRepository)),
):
    rows, total = await logs.list_logs(status_filter, template, limit, offset)
    return {
        "logs": [
            {
                "id": row.id,
                "recipient": row.recipient,
                "template_name": row.template_name,
                "message": row.message,
                "status": row.status,
                "provider_message_id": row.provider_message_id,
                "error": row.error,
                "sale_id": row.sale_id,
                "created_at": row.created_at,
                "updated_at": row.updated_at,
            }
            for row in rows
        ],
        "pagination": paginate(total, limit, offset),
    }


@router.get("/whatsapp/webhook", response_class=PlainTextResponse)
async def verify_webhook(
    mode: str | None = Query(None, alias="hub.mode"),
    token: str | None = Query(None, alias="hub.verify_token"),
    challenge: str = Query("", alias="hub.challenge"),
):
    """Subscription handshake: echo the challenge when the verify token matches."""
    if not mode or not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing verification parameters")
    if mode != "subscribe" or not settings.WHATSAPP_VERIFY_TOKEN or token != settings.WHATSAPP_VERIFY_TOKEN:
        logger.warning("WhatsApp webhook verification failed")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Verification failed")
    logger.info("WhatsApp webhook verified")
    return challenge


@router.post("/whatsapp/webhook", response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    logs: MessageLogRepository = Depends(repository(MessageLogRepository)),
):
    """Apply delivery status updates to the message log."""
    body = await request.json()
    if body.get("object") != "whatsapp_business_account":
        return "EVENT_RECEIVED"

    for entry in body.get("entry") or []:
        for change in entry.get("changes") or []:
            if change.get("field") != "messages":
                continue
            for update in (change.get("value") or {}).get("statuses") or []:
                try:
                    new_status = MessageStatus(update.get("status"))
                except ValueError:
                    logger.info("Ignoring WhatsApp status %s", update.get("status"))
                    continue
                errors = update.get("errors") or []
                error = errors[0].get("title") if errors else None
                updated = await logs.update_status(update.get("id"), new_status, error)
                logger.info("Message %s -> %s (%s rows)", update.get("id"), new_status.value, updated)
    return "EVENT_RECEIVED"


@router.get("/test-config")
async def test_config(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    client: WhatsAppClient = Depends(get_whatsapp_client),
):
    """Report which messaging settings are present, never their values."""
    configured = client.configured
    return {
        "configured": configured,
        "status": "Connected" if configured else "Disconnected",
        "hasAccessToken": bool(client.access_token),
        "hasPhoneNumberId": bool(client.phone_number_id),
        "hasWebhookToken": bool(settings.WHATSAPP_VERIFY_TOKEN),
        "webhookUrl": str(request.url_for("receive_webhook")),
        "message": (
            "WhatsApp Business Cloud API is configured and ready to use"
            if configured
            else "Please configure WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID"
        ),
    }
