"""Shape local rows into the payloads external platforms import."""


def accounting_sale(sale) -> dict:
    return {
        "id": sale.id,
        "invoice": sale.invoice,
        "date": sale.date,
        "total_amount": sale.total_amount,
        "tax_amount": sale.tax_amount,
        "items": [
            {
                "item_name": line.item_name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "line_total": line.line_total,
            }
            for line in sale.items
        ],
    }


def storefront_product(item) -> dict:
    return {
        "id": item.id,
        "name": item.item_name,
        "sku": item.sku,
        "regular_price": str(item.sell_price),
        "stock_quantity": item.quantity,
        "categories": [{"name": item.category}] if item.category else [],
        "description": item.description or "",
        "images": [{"src": item.image_url}] if item.image_url else [],
        "status": "publish" if item.status.value == "active" else "draft",
        "manage_stock": True,
        "type": "simple",
    }


def catalog_product(item) -> dict:
    return {
        "title": item.item_name,
        "vendor": item.brand or "Default",
        "product_type": item.category or "General",
        "variants": [
            {
                "sku": item.sku,
                "price": str(item.sell_price),
                "cost": str(item.buy_price),
                "inventory_quantity": item.quantity,
                "inventory_management": "shopify",
            }
        ],
        "body_html": item.description or "",
        "status": "active",
    }


def mailing_member(row: dict) -> dict:
    """A subscribed list member; the first word of the name is FNAME, the rest LNAME."""
    first, _, last = (row.get("name") or "").strip().partition(" ")
    return {
        "email_address": row["email"],
        "status": "subscribed",
        "merge_fields": {
            "FNAME": first,
            "LNAME": last.strip(),
            "PHONE": row.get("phone") or "",
            "TOTALSPENT": row.get("total_spent") or 0,
            "LOYALPTS": row.get("loyalty_points") or 0,
            "SIGNUPDATE": row.get("signup_date"),
        },
    }
