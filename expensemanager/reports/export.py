"""Render expense reports as downloadable documents.

Provides:
- render_pdf(expenses, date_filter): A4 report with totals and an expense table (ReportLab)
- render_excel(expenses): one-sheet workbook with a bold total row (openpyxl)

Both return the document as bytes, ready to stream back to the client.
"""

from __future__ import annotations

import io
from collections.abc import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from expensemanager.core.models import DateFilter, ExpenseWithCategory

REPORT_TITLE = "Expense Report"
REPORT_AUTHOR = "Expense Manager"
PDF_MEDIA_TYPE = "application/pdf"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_EXCEL_COLUMNS = (
    ("Date", 15),
    ("Category", 20),
    ("Material/Service", 30),
    ("Vendor", 25),
    ("Description", 40),
    ("Payment Method", 20),
    ("Amount (₹)", 15),
)


def _total(expenses: Sequence[ExpenseWithCategory]) -> float:
    return sum(e.amount for e in expenses)


# --- PDF -----------------------------------------------------------------------
def render_pdf(
    expenses: Sequence[ExpenseWithCategory],
    date_filter: DateFilter | None = None,
) -> bytes:
    """Render *expenses* as an A4 PDF report."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=REPORT_TITLE, author=REPORT_AUTHOR)
    styles = getSampleStyleSheet()
    elements = [Paragraph(f"<b>{REPORT_TITLE}</b>", styles["Title"])]

    if date_filter is not None:
        period = (
            f"Period: {date_filter.start_date:%d %b %Y} to {date_filter.end_date:%d %b %Y}"
        )
        elements.append(Paragraph(period, styles["Normal"]))

    elements.append(Paragraph(f"<b>Total Expenses: {_total(expenses):.2f}</b>", styles["Normal"]))
    elements.append(Spacer(1, 12))

    data = [["Date", "Category", "Vendor", "Description", "Payment", "Amount"]]
    for e in expenses:
        data.append(
            [
                f"{e.date:%d/%m/%Y}",
                e.category.name,
                e.vendor_name[:15],
                (e.description or "")[:20],
                e.payment_method.value,
                f"{e.amount:.2f}",
            ]
        )

    table = Table(data, colWidths=[70, 80, 90, 110, 80, 70], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
            ]
        )
    )
    elements.append(table)
    elements.append(Spacer(1, 24))
    elements.append(Paragraph(f"Generated by {REPORT_AUTHOR}", styles["Italic"]))

    doc.build(elements)
    return buffer.getvalue()


# --- Excel ---------------------------------------------------------------------
def render_excel(expenses: Sequence[ExpenseWithCategory]) -> bytes:
    """Render *expenses* as an .xlsx workbook with a summary row."""
    workbook = Workbook()
    workbook.properties.creator = REPORT_AUTHOR
    sheet = workbook.active
    sheet.title = REPORT_TITLE

    sheet.append([header for header, _ in _EXCEL_COLUMNS])
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for index, (_, width) in enumerate(_EXCEL_COLUMNS, start=1):
        sheet.column_dimensions[sheet.cell(row=1, column=index).column_letter].width = width

    for e in expenses:
        sheet.append(
            [
                f"{e.date:%d/%m/%Y}",
                e.category.name,
                e.material_name,
                e.vendor_name,
                e.description or "",
                e.payment_method.value,
                e.amount,
            ]
        )

    sheet.append([])
    sheet.append(["Total", None, None, None, None, None, _total(expenses)])
    for cell in sheet[sheet.max_row]:
        cell.font = Font(bold=True)

    amount_column = len(_EXCEL_COLUMNS)
    for row in sheet.iter_rows(min_row=2, min_col=amount_column, max_col=amount_column):
        for cell in row:
            cell.number_format = "#,##0.00"

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
