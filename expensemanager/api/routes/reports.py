"""Report export routes (PDF and Excel downloads of the caller's expenses)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from expensemanager.api.dependencies import get_date_filter, get_storage
from expensemanager.auth import require_permission
from expensemanager.core.models import DateFilter
from expensemanager.gate import Principal
from expensemanager.reports.export import (
    EXCEL_MEDIA_TYPE,
    PDF_MEDIA_TYPE,
    render_excel,
    render_pdf,
)
from expensemanager.storage.memory import MemoryStorage

router = APIRouter(prefix="/api/reports", tags=["Reports"])

_export_reports = require_permission("export_reports")


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f"attachment; filename={filename}"}


@router.get("/pdf", response_class=Response)
async def export_pdf(
    principal: Principal = Depends(_export_reports),
    date_filter: DateFilter | None = Depends(get_date_filter),
    storage: MemoryStorage = Depends(get_storage),
):
    expenses = await storage.get_expenses(principal.id, date_filter)
    return Response(
        content=render_pdf(expenses, date_filter),
        media_type=PDF_MEDIA_TYPE,
        headers=_attachment("expense-report.pdf"),
    )


@router.get("/excel", response_class=Response)
async def export_excel(
    principal: Principal = Depends(_export_reports),
    date_filter: DateFilter | None = Depends(get_date_filter),
    storage: MemoryStorage = Depends(get_storage),
):
    expenses = await storage.get_expenses(principal.id, date_filter)
    return Response(
        content=render_excel(expenses),
        media_type=EXCEL_MEDIA_TYPE,
        headers=_attachment("expense-report.xlsx"),
    )
