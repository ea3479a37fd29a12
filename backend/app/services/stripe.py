"""Card processor adapter (Stripe REST API over httpx)."""

import hashlib
import hmac
import logging
import time

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

# Seconds a signed webhook timestamp stays acceptable
SIGNATURE_TOLERANCE = 300


def to_cents(amount) -> int:
    return int(round(float(amount) * 100))


def error_message(exc: httpx.HTTPStatusError) -> str:
    """The processor's human-readable reason for a rejected call."""
    try:
        return exc.response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return exc.response.text or str(exc)


def verify_webhook_signature(payload: bytes, header: str, secret: str, now: float | None = None) -> bool:
    """Verify a ``Stripe-Signature`` header.

    The header carries ``t=<timestamp>`` and one or more ``v1=<hex>`` entries;
    each ``v1`` is HMAC-SHA256 over ``"<timestamp>.<raw body>"``.
    """
    parts = {}
    for item in (header or "").split(","):
        key, _, value = item.strip().partition("=")
        parts.setdefault(key, []).append(value)
    timestamp = (parts.get("t") or [""])[0]
    signatures = parts.get("v1") or []
    if not timestamp or not signatures:
        return False
    try:
        if abs((now or time.time()) - int(timestamp)) > SIGNATURE_TOLERANCE:
            return False
    except ValueError:
        return False

    signed = timestamp.encode("utf-8") + b"." + payload
    expected = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return any(hmac.compare_digest(expected, sig) for sig in signatures)


class StripeClient:
    """Payment intents and refunds. Callers handle ``httpx`` errors."""

    def __init__(
        self,
        secret_key: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
    ):
        self.secret_key = settings.STRIPE_SECRET_KEY if secret_key is None else secret_key
        self.api_base = (api_base or settings.STRIPE_API_BASE).rstrip("/")
        self.timeout = timeout or settings.OUTBOUND_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    async def _post(self, path: str, data: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                f"{self.api_base}{path}",
                data=data,
                headers={"Authorization": f"Bearer {self.secret_key}"},
            )
            resp.raise_for_status()
            return resp.json()

    async def create_payment_intent(self, amount, payment_method: str, currency: str | None = None) -> dict:
        """Create and confirm a payment intent for ``amount`` (major units)."""
        intent = await self._post(
            "/payment_intents",
            {
                "amount": to_cents(amount),
                "currency": currency or settings.STRIPE_CURRENCY,
                "payment_method": payment_method,
                "confirm": "true",
                "automatic_payment_methods[enabled]": "true",
                "automatic_payment_methods[allow_redirects]": "never",
            },
        )
        logger.info("Payment intent %s status=%s", intent.get("id"), intent.get("status"))
        return intent

    async def create_refund(self, payment_intent: str, amount) -> dict:
        refund = await self._post(
            "/refunds",
            {"payment_intent": payment_intent, "amount": to_cents(amount)},
        )
        logger.info("Refund %s for intent %s status=%s", refund.get("id"), payment_intent, refund.get("status"))
        return refund


def get_stripe_client() -> StripeClient:
    return StripeClient()
