"""Reporting endpoints: aggregate analytics and JSON/CSV/PDF export."""

import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.core.deps import repository, require_capability
from app.db.dialects import Period
from app.models.inventory import ItemStatus
from app.models.role import Capability
from app.repositories.reports import EXPORT_COLUMNS, ReportRepository
from app.schemas.auth import CurrentUser
from app.services.export import normalize, to_csv, to_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

analysts = require_capability(Capability.VIEW_REPORTS)
finance = require_capability(Capability.VIEW_FINANCIAL_REPORTS)


@router.get("/sales")
async def sales_report(
    start_date: date | None = None,
    end_date: date | None = None,
    group_by: Period = "day",
    current_user: CurrentUser = Depends(analysts),
    reports: ReportRepository = Depends(repository(ReportRepository)),
):
    return await reports.sales(start_date, end_date, group_by)


@router.get("/products")
async def product_report(
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(50, ge=1, le=500),
    current_user: CurrentUser = Depends(analysts),
    reports: ReportRepository = Depends(repository(ReportRepository)),
):
    return {"product_performance": await reports.products(start_date, end_date, limit)}


@router.get("/customers")
async def customer_report(
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(50, ge=1, le=500),
    current_user: CurrentUser = Depends(analysts),
    reports: ReportRepository = Depends(repository(ReportRepository)),
):
    return {"customer_analytics": await reports.customers(start_date, end_date, limit)}


@router.get("/inventory")
async def inventory_report(
    status_filter: ItemStatus | None = Query(None, alias="status"),
    category: str | None = None,
    current_user: CurrentUser = Depends(analysts),
    reports: ReportRepository = Depends(repository(ReportRepository)),
):
    return await reports.inventory(status_filter, category)


@router.get("/financial")
async def financial_report(
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(finance),
    reports: ReportRepository = Depends(repository(ReportRepository)),
):
    return await reports.financial(start_date, end_date)


@router.get("/tax")
async def tax_report(
    start_date: date | None = None,
    end_date: date | None = None,
    group_by: Period = "month",
    current_user: CurrentUser = Depends(finance),
    reports: ReportRepository = Depends(repository(ReportRepository)),
):
    return await reports.tax(start_date, end_date, group_by)


@router.get("/export/{export_type}")
async def export_report(
    export_type: str,
    export_format: Literal["json", "csv", "pdf"] = Query("json", alias="format"),
    start_date: date | None = None,
    end_date: date | None = None,
    current_user: CurrentUser = Depends(analysts),
    reports: ReportRepository = Depends(repository(ReportRepository)),
):
    """Export sales, inventory or customers as JSON rows, a CSV file or a PDF table."""
    if export_type not in EXPORT_COLUMNS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid export type")

    rows = await reports.export_rows(export_type, start_date, end_date)
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No data to export")

    columns = EXPORT_COLUMNS[export_type][1]
    filename = f"{export_type}-report-{date.today().isoformat()}"
    logger.info("Exporting %s %s rows as %s for %s", len(rows), export_type, export_format, current_user.username)

    if export_format == "csv":
        return Response(
            content=to_csv(rows, columns),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}.csv"'},
        )
    if export_format == "pdf":
        title = f"{export_type.capitalize()} Report"
        return Response(
            content=to_pdf(title, rows, columns),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}.pdf"'},
        )
    return {"type": export_type, "count": len(rows), "columns": columns, "data": normalize(rows)}
