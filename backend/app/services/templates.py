"""Outbound message templates.

Each template takes a flat ``data`` mapping; ``shop_name``/``shop_address``
are filled in from shop settings by the caller.
"""

from collections.abc import Callable


def _money(value) -> str:
    try:
        return f"{float(value):.2f}"
    except (TypeError, ValueError):
        return "0.00"


def order_confirmation(data: dict) -> str:
    lines = "\n".join(
        f"• {item.get('name', 'Item')} x{item.get('quantity', 1)} - ${_money(item.get('total'))}"
        for item in data.get("items") or []
    )
    return (
        f"🛍️ *Order Confirmation - {data.get('shop_name', '')}*\n\n"
        f"Hi {data.get('customer_name', 'Valued Customer')}!\n\n"
        "Thank you for your purchase!\n\n"
        "📋 *Order Details:*\n"
        f"Invoice: {data.get('invoice', '')}\n"
        f"Total: ${_money(data.get('total_amount'))}\n\n"
        f"📦 *Items:*\n{lines}\n\n"
        "📍 *Store Information:*\n"
        f"• Location: {data.get('shop_address', '')}\n\n"
        "We appreciate your business! 🙏"
    )


def payment_reminder(data: dict) -> str:
    return (
        f"💳 *Payment Reminder - {data.get('shop_name', '')}*\n\n"
        f"Hi {data.get('customer_name', 'Valued Customer')},\n\n"
        "This is a friendly reminder about your pending payment.\n\n"
        "📋 *Order Details:*\n"
        f"Invoice: {data.get('invoice', '')}\n"
        f"Total Amount: ${_money(data.get('total_amount'))}\n"
        f"Pending Amount: ${_money(data.get('due_amount'))}\n\n"
        "Please complete your payment at your earliest convenience.\n\n"
        "Thank you! 🙏"
    )


def low_stock_alert(data: dict) -> str:
    return (
        f"⚠️ *Low Stock Alert - {data.get('shop_name', '')}*\n\n"
        f"📦 *Item:* {data.get('item_name', '')}\n"
        f"📊 *Current Stock:* {data.get('current_stock', 0)}\n"
        f"📉 *Minimum Required:* {data.get('min_stock', 0)}\n\n"
        "Please restock this item soon to avoid stockouts."
    )


def welcome_message(data: dict) -> str:
    return (
        f"🎉 *Welcome to {data.get('shop_name', '')}!*\n\n"
        f"Hi {data.get('customer_name', 'Valued Customer')}!\n\n"
        f"Thank you for joining us! You've earned {data.get('loyalty_points') or 0} loyalty points.\n\n"
        "We look forward to serving you! 🛍️"
    )


def promotional(data: dict) -> str:
    return (
        f"🎁 *Special Offer - {data.get('shop_name', '')}*\n\n"
        f"Hi {data.get('customer_name', 'Valued Customer')}!\n\n"
        f"✨ *{data.get('offer_title', '')}*\n\n"
        f"{data.get('offer_details', '')}\n\n"
        f"⏰ *Valid until:* {data.get('valid_until', '')}\n\n"
        "Don't miss out! Visit us today! 🛍️"
    )


def order_ready(data: dict) -> str:
    return (
        f"✅ *Order Ready for Pickup - {data.get('shop_name', '')}*\n\n"
        f"Hi {data.get('customer_name', 'Valued Customer')}!\n\n"
        f"Great news! Your order {data.get('invoice', '')} is ready for pickup.\n\n"
        f"📍 *Pickup Location:*\n{data.get('shop_address', '')}\n\n"
        "Please bring this message when collecting your order.\n\n"
        "Thank you! 🙏"
    )


def birthday_wish(data: dict) -> str:
    offer = data.get("special_offer")
    offer_block = f"🎁 *Special Birthday Offer:*\n{offer}" if offer else ""
    return (
        f"🎂 *Happy Birthday - {data.get('shop_name', '')}*\n\n"
        f"Happy Birthday {data.get('customer_name', 'Valued Customer')}! 🎉\n\n"
        "Wishing you a wonderful day filled with joy!\n\n"
        f"{offer_block}\n\n"
        "Celebrate with us! 🛍️"
    )


def custom(data: dict) -> str:
    return (
        f"📢 *{data.get('shop_name', '')}*\n\n"
        f"Hi {data.get('customer_name', 'Valued Customer')},\n\n"
        f"{data.get('message', '')}\n\n"
        "Thank you! 🙏"
    )


TEMPLATES: dict[str, Callable[[dict], str]] = {
    "order_confirmation": order_confirmation,
    "payment_reminder": payment_reminder,
    "low_stock_alert": low_stock_alert,
    "welcome_message": welcome_message,
    "promotional": promotional,
    "order_ready": order_ready,
    "birthday_wish": birthday_wish,
    "custom": custom,
}


class UnknownTemplateError(KeyError):
    pass


def render(name: str, data: dict) -> str:
    try:
        template = TEMPLATES[name]
    except KeyError:
        raise UnknownTemplateError(name) from None
    return template(data)
