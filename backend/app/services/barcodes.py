"""EAN-13 barcodes and QR code images."""

import base64
import io
import json
import secrets

import qrcode

EAN_PREFIX = "200"  # in-store numbering range
COMPANY_CODE = "1234"


def ean13_check_digit(first12: str) -> int:
    """Weights alternate 1 and 3 from the left."""
    total = sum(int(d) * (3 if i % 2 else 1) for i, d in enumerate(first12))
    return (10 - total % 10) % 10


def is_valid_ean13(code: str) -> bool:
    return len(code) == 13 and code.isdigit() and ean13_check_digit(code[:12]) == int(code[12])


def generate_ean13() -> str:
    body = EAN_PREFIX + COMPANY_CODE + "".join(secrets.choice("0123456789") for _ in range(5))
    return body + str(ean13_check_digit(body))


def qr_data_url(payload: dict) -> str:
    """PNG data URL of a QR code carrying ``payload`` as JSON."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(json.dumps(payload, default=str))
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffered = io.BytesIO()
    img.save(buffered, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffered.getvalue()).decode()


def parse_qr_payload(code: str) -> dict | None:
    try:
        data = json.loads(code)
    except (ValueError, TypeError):
        return None
    return data if isinstance(data, dict) else None
