"""Unit tests for customer messaging: phone formatting, templates and delivery logging."""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import HTTPException

from app.models.message_log import MessageStatus
from app.services import templates
from app.services.whatsapp import WhatsAppClient, format_phone
from conftest import make_user


def _client(configured: bool = True) -> WhatsAppClient:
    return WhatsAppClient(
        access_token="token" if configured else "",
        phone_number_id="123456" if configured else "",
    )


# ── Phone numbers ─────────────────────────────────

@pytest.mark.parametrize(
    "raw,expected",
    [
        ("+94 77 123 4567", "+94771234567"),
        ("(555) 010-9999", "+5550109999"),
        ("94771234567", "+94771234567"),
    ],
)
def test_format_phone(raw, expected):
    assert format_phone(raw) == expected


def test_messages_url():
    client = _client()
    assert client.messages_url.endswith("/123456/messages")


# ── Templates ─────────────────────────────────────

def test_known_templates():
    assert set(templates.TEMPLATES) == {
        "order_confirmation",
        "payment_reminder",
        "low_stock_alert",
        "welcome_message",
        "promotional",
        "order_ready",
        "birthday_wish",
        "custom",
    }


def test_order_confirmation_lists_items():
    text = templates.render(
        "order_confirmation",
        {
            "shop_name": "TechStore",
            "customer_name": "Ada",
            "invoice": "INV-20250101-AAAAAA",
            "total_amount": "25.5",
            "items": [{"name": "Cable", "quantity": 2, "total": 25.5}],
            "shop_address": "Main Street",
        },
    )
    assert "Order Confirmation - TechStore" in text
    assert "Hi Ada!" in text
    assert "Total: $25.50" in text
    assert "• Cable x2 - $25.50" in text
    assert "Location: Main Street" in text


def test_missing_customer_name_defaults():
    assert "Valued Customer" in templates.render("custom", {"message": "Hello"})


def test_birthday_without_offer_has_no_offer_block():
    text = templates.render("birthday_wish", {"customer_name": "Ada"})
    assert "Special Birthday Offer" not in text


def test_unknown_template():
    with pytest.raises(templates.UnknownTemplateError):
        templates.render("nope", {})


# ── Delivery ──────────────────────────────────────

@pytest.mark.asyncio
async def test_send_logs_sent_message():
    from app.api.notifications import _deliver

    client = _client()
    client.send_text = AsyncMock(return_value="wamid.1")
    logs = AsyncMock()

    result = await _deliver(client, logs, "077 123 4567", "Hi", make_user())

    assert result == {
        "success": True,
        "message": "Message sent successfully",
        "messageId": "wamid.1",
        "phone": "+0771234567",
    }
    assert logs.log.await_args.args[2] == MessageStatus.SENT
    assert logs.log.await_args.kwargs["provider_message_id"] == "wamid.1"


@pytest.mark.asyncio
async def test_send_failure_is_logged_then_502():
    from app.api.notifications import _deliver

    request = httpx.Request("POST", "https://graph.facebook.com/v18.0/123456/messages")
    response = httpx.Response(400, json={"error": {"message": "Invalid recipient"}}, request=request)
    client = _client()
    client.send_text = AsyncMock(side_effect=httpx.HTTPStatusError("bad", request=request, response=response))
    logs = AsyncMock()

    with pytest.raises(HTTPException) as exc:
        await _deliver(client, logs, "+94771234567", "Hi", make_user(), template_name="custom")

    assert exc.value.status_code == 502
    assert exc.value.detail["details"] == "Invalid recipient"
    assert logs.log.await_args.args[2] == MessageStatus.FAILED
    assert logs.log.await_args.kwargs["error"] == "Invalid recipient"


@pytest.mark.asyncio
async def test_send_without_configuration():
    from app.api.notifications import _deliver

    logs = AsyncMock()
    with pytest.raises(HTTPException) as exc:
        await _deliver(_client(configured=False), logs, "+94771234567", "Hi", make_user())
    assert exc.value.status_code == 503
    logs.log.assert_not_awaited()


@pytest.mark.asyncio
async def test_send_template_rejects_unknown_name():
    from app.api.notifications import send_template
    from app.schemas.notification import SendTemplateRequest

    shop = AsyncMock()
    shop.latest.return_value = None

    with pytest.raises(HTTPException) as exc:
        await send_template(
            SendTemplateRequest(phone="+94771234567", template="nope", data={}),
            current_user=make_user(),
            client=_client(),
            logs=AsyncMock(),
            shop=shop,
        )
    assert exc.value.detail == "Invalid template name"


@pytest.mark.asyncio
async def test_order_confirmation_needs_customer_phone():
    from app.api.notifications import send_order_confirmation
    from app.schemas.notification import OrderConfirmationRequest

    logs = AsyncMock()
    logs.sale_for_confirmation.return_value = {"invoice": "INV-1", "total_amount": 10}

    with pytest.raises(HTTPException) as exc:
        await send_order_confirmation(
            OrderConfirmationRequest(sale_id=1),
            current_user=make_user(),
            client=_client(),
            logs=logs,
            sales=AsyncMock(),
            shop=AsyncMock(),
        )
    assert exc.value.detail == "Customer phone number not available"


@pytest.mark.asyncio
async def test_webhook_verification(monkeypatch):
    from app.api import notifications

    monkeypatch.setattr(notifications.settings, "WHATSAPP_VERIFY_TOKEN", "verify-me")

    assert await notifications.verify_webhook(mode="subscribe", token="verify-me", challenge="42") == "42"
    with pytest.raises(HTTPException) as exc:
        await notifications.verify_webhook(mode="subscribe", token="wrong", challenge="42")
    assert exc.value.status_code == 403
    with pytest.raises(HTTPException) as exc:
        await notifications.verify_webhook(mode=None, token=None, challenge="")
    assert exc.value.status_code == 400
