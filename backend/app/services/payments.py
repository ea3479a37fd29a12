"""Tender handling: how each payment method is settled."""

import time
from dataclasses import dataclass

from app.core.exceptions import DomainError
from app.models.payment import PaymentStatus, RefundStatus
from app.services.stripe import StripeClient

CARD_METHODS = {"card", "credit_card", "debit_card"}
DIGITAL_METHODS = {"digital", "mobile_payment"}
TRANSFER_METHODS = {"transfer", "bank_transfer"}


class UnsupportedPaymentMethod(DomainError):
    def __init__(self, method: str):
        self.method = method
        super().__init__("Unsupported payment method")


@dataclass
class Tender:
    payment_status: PaymentStatus
    transaction_id: str
    stripe_payment_intent: str | None = None


def _stamp(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}"


async def settle_tender(
    method: str,
    amount,
    stripe: StripeClient,
    payment_token: str | None = None,
    reference: str | None = None,
) -> Tender:
    """Settle ``amount`` by ``method``.

    Cash and digital wallets complete immediately, bank transfers stay
    pending until verified, cards go through the processor when it is
    configured and a card token is supplied. Processor ``httpx`` errors
    propagate to the caller.
    """
    method = method.lower()
    if method == "cash":
        return Tender(PaymentStatus.COMPLETED, _stamp("CASH"))
    if method in CARD_METHODS:
        if stripe.configured and payment_token:
            intent = await stripe.create_payment_intent(amount, payment_token)
            status = (
                PaymentStatus.COMPLETED if intent.get("status") == "succeeded" else PaymentStatus.PROCESSING
            )
            return Tender(status, intent["id"], intent["id"])
        return Tender(PaymentStatus.COMPLETED, _stamp("CARD"))
    if method in DIGITAL_METHODS:
        return Tender(PaymentStatus.COMPLETED, reference or _stamp("DIGITAL"))
    if method in TRANSFER_METHODS:
        return Tender(PaymentStatus.PENDING, reference or _stamp("TRANSFER"))
    raise UnsupportedPaymentMethod(method)


def refund_status_from_processor(status: str | None) -> RefundStatus:
    return {
        "succeeded": RefundStatus.COMPLETED,
        "pending": RefundStatus.PENDING,
        "requires_action": RefundStatus.PROCESSING,
        "failed": RefundStatus.FAILED,
        "canceled": RefundStatus.FAILED,
    }.get(status or "", RefundStatus.PROCESSING)
