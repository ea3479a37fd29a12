"""Messaging provider adapter (WhatsApp Cloud API over httpx)."""

import logging
import re

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

_NOT_PHONE = re.compile(r"[^\d+]")


def format_phone(phone: str) -> str:
    """Keep digits and ``+`` only, and make sure the number starts with ``+``."""
    cleaned = _NOT_PHONE.sub("", phone or "")
    if not cleaned.startswith("+"):
        cleaned = "+" + cleaned
    return cleaned


def error_message(exc: httpx.HTTPError) -> str:
    response = getattr(exc, "response", None)
    if response is None:
        return str(exc) or exc.__class__.__name__
    try:
        body = response.json()
        return body.get("error", {}).get("message") or body.get("message") or response.text
    except (ValueError, AttributeError):
        return response.text or f"WhatsApp API Error: {response.status_code}"


class WhatsAppClient:
    """Text messages through the Cloud API. Callers handle ``httpx`` errors."""

    def __init__(
        self,
        access_token: str | None = None,
        phone_number_id: str | None = None,
        api_base: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
    ):
        self.access_token = settings.WHATSAPP_ACCESS_TOKEN if access_token is None else access_token
        self.phone_number_id = settings.WHATSAPP_PHONE_NUMBER_ID if phone_number_id is None else phone_number_id
        self.api_base = (api_base or settings.WHATSAPP_API_BASE).rstrip("/")
        self.api_version = api_version or settings.WHATSAPP_API_VERSION
        self.timeout = timeout or settings.OUTBOUND_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.access_token and self.phone_number_id)

    @property
    def messages_url(self) -> str:
        return f"{self.api_base}/{self.api_version}/{self.phone_number_id}/messages"

    async def send_text(self, to: str, body: str) -> str:
        """Send ``body`` to ``to``; returns the provider message id."""
        payload = {
            "messaging_product": "whatsapp",
            "to": format_phone(to),
            "type": "text",
            "text": {"body": body},
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                self.messages_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
            resp.raise_for_status()
            data = resp.json()
        message_id = data["messages"][0]["id"]
        logger.info("WhatsApp message %s sent to %s", message_id, payload["to"])
        return message_id


def get_whatsapp_client() -> WhatsAppClient:
    return WhatsAppClient()
