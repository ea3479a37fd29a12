"""Report export: CSV, PDF and JSON-safe rows."""

import csv
import enum
import io
from datetime import date, datetime
from decimal import Decimal

from reportlab.lib.pagesizes import landscape, letter
from reportlab.pdfgen import canvas

EXPORT_FORMATS = ("json", "csv", "pdf")


def cell(value) -> str | int | float | None:
    """A scalar as it appears in every export format."""
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def normalize(rows: list[dict]) -> list[dict]:
    return [{key: cell(value) for key, value in row.items()} for row in rows]


def to_csv(rows: list[dict], columns: list[str]) -> str:
    """Header row plus one line per record; the same values as :func:`normalize`."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in normalize(rows):
        writer.writerow(["" if row.get(col) is None else row[col] for col in columns])
    return buffer.getvalue()


def to_pdf(title: str, rows: list[dict], columns: list[str]) -> bytes:
    """A plain landscape table, one text line per record."""
    buffer = io.BytesIO()
    page_size = landscape(letter)
    c = canvas.Canvas(buffer, pagesize=page_size)
    w, h = page_size
    c.setTitle(title)

    margin = 36
    line_h = 12
    col_w = (w - 2 * margin) / max(len(columns), 1)
    max_chars = max(int(col_w / 4.5), 4)

    def draw_row(values, y, bold=False):
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 7)
        for i, value in enumerate(values):
            text = "" if value is None else str(value)
            if len(text) > max_chars:
                text = text[: max_chars - 2] + ".."
            c.drawString(margin + i * col_w, y, text)

    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, h - margin, title)
    y = h - margin - 2 * line_h
    draw_row(columns, y, bold=True)
    y -= line_h

    for row in normalize(rows):
        if y < margin:
            c.showPage()
            y = h - margin
            draw_row(columns, y, bold=True)
            y -= line_h
        draw_row([row.get(col) for col in columns], y)
        y -= line_h

    c.save()
    return buffer.getvalue()
