"""Unit tests for report exports and shop settings."""

import csv
import io
import re
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from app.models.sale import SaleStatus
from app.services.export import cell, normalize, to_csv, to_pdf
from conftest import make_user

SALES_ROWS = [
    {
        "invoice": "INV-20250101-AAAAAA",
        "date": date(2025, 1, 1),
        "customer_name": "Ada",
        "customer_phone": None,
        "subtotal": Decimal("100.00"),
        "tax_amount": Decimal("10.00"),
        "discount_amount": Decimal("0.00"),
        "total_amount": Decimal("110.00"),
        "paid_amount": Decimal("110.00"),
        "status": SaleStatus.PAID,
        "created_at": datetime(2025, 1, 1, 9, 30),
    },
    {
        "invoice": "INV-20250102-BBBBBB",
        "date": date(2025, 1, 2),
        "customer_name": "Grace, Hopper",
        "customer_phone": "+94770000000",
        "subtotal": Decimal("50.00"),
        "tax_amount": Decimal("0.00"),
        "discount_amount": Decimal("5.00"),
        "total_amount": Decimal("45.00"),
        "paid_amount": Decimal("20.00"),
        "status": SaleStatus.PARTIAL,
        "created_at": datetime(2025, 1, 2, 14, 0),
    },
]


def test_cell_scalars():
    assert cell(Decimal("1.50")) == "1.50"
    assert cell(SaleStatus.PAID) == "paid"
    assert cell(date(2025, 1, 1)) == "2025-01-01"
    assert cell(None) is None
    assert cell(3) == 3


@pytest.mark.asyncio
async def test_csv_matches_json_rows():
    from app.api.reports import export_report
    from app.repositories.reports import EXPORT_COLUMNS

    reports = AsyncMock()
    reports.export_rows.return_value = SALES_ROWS

    as_json = await export_report("sales", export_format="json", current_user=make_user(), reports=reports)
    as_csv = await export_report("sales", export_format="csv", current_user=make_user(), reports=reports)

    assert as_csv.media_type == "text/csv"
    assert as_csv.headers["content-disposition"].startswith('attachment; filename="sales-report-')
    parsed = list(csv.DictReader(io.StringIO(as_csv.body.decode())))
    assert as_json["count"] == len(parsed) == 2
    assert as_json["columns"] == EXPORT_COLUMNS["sales"][1]
    for json_row, csv_row in zip(as_json["data"], parsed):
        for column in as_json["columns"]:
            expected = json_row[column]
            assert csv_row[column] == ("" if expected is None else str(expected))


@pytest.mark.asyncio
async def test_pdf_export():
    from app.api.reports import export_report

    reports = AsyncMock()
    reports.export_rows.return_value = SALES_ROWS

    response = await export_report("sales", export_format="pdf", current_user=make_user(), reports=reports)
    assert response.media_type == "application/pdf"
    assert response.body.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_export_unknown_type():
    from app.api.reports import export_report

    with pytest.raises(HTTPException) as exc:
        await export_report("payroll", export_format="json", current_user=make_user(), reports=AsyncMock())
    assert exc.value.detail == "Invalid export type"


@pytest.mark.asyncio
async def test_export_nothing_to_export():
    from app.api.reports import export_report

    reports = AsyncMock()
    reports.export_rows.return_value = []
    with pytest.raises(HTTPException) as exc:
        await export_report("inventory", export_format="csv", current_user=make_user(), reports=reports)
    assert exc.value.status_code == 404


def test_pdf_paginates_long_reports():
    rows = normalize(SALES_ROWS) * 60
    pdf = to_pdf("Sales Report", rows, list(rows[0]))
    assert len(re.findall(rb"/Type /Page\b(?!s)", pdf)) >= 2


def test_csv_header_only_for_selected_columns():
    text = to_csv(SALES_ROWS, ["invoice", "status"])
    assert text.splitlines()[0] == "invoice,status"
    assert text.splitlines()[1] == "INV-20250101-AAAAAA,paid"


# ── Shop settings ─────────────────────────────────

@pytest.mark.asyncio
async def test_settings_defaults_when_unset():
    from app.api.settings import get_settings

    shop = AsyncMock()
    shop.latest.return_value = None

    result = await get_settings(current_user=make_user(), shop=shop)
    assert result.shopName == "My POS Shop"
    assert result.currency == "USD"
    assert result.warrantyPeriod == 30
