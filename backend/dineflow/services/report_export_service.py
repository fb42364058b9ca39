"""Spreadsheet export of the monthly sales report."""

import calendar
import io

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side


def generate_monthly_xlsx(report: dict, business_name: str = "") -> bytes:
    """Generate an Excel workbook from a ``monthly_sales`` projection."""
    wb = Workbook()
    ws = wb.active
    ws.title = f"{report['year']}-{report['month']:02d}"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )

    month_name = calendar.month_name[report["month"]]
    ws["A1"] = f"{business_name} Monthly Sales - {month_name} {report['year']}".strip()
    ws["A1"].font = Font(bold=True, size=14)
    ws.merge_cells("A1:C1")

    headers = ["Date", "Bills", "Sales"]
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=3, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = border
        cell.alignment = Alignment(horizontal="center")

    for idx, day in enumerate(report["days"], 1):
        row = 3 + idx
        data = [day["date"].isoformat(), day["bill_count"], float(day["total_sales"])]
        for col, value in enumerate(data, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = border
        ws.cell(row=row, column=3).number_format = "#,##0.00"

    total_row = 4 + len(report["days"])
    ws.cell(row=total_row, column=1, value="Total").font = Font(bold=True)
    ws.cell(row=total_row, column=2, value=report["bill_count"]).font = Font(bold=True)
    total_cell = ws.cell(row=total_row, column=3, value=float(report["total_sales"]))
    total_cell.font = Font(bold=True)
    total_cell.number_format = "#,##0.00"

    ws.column_dimensions["A"].width = 14
    ws.column_dimensions["B"].width = 10
    ws.column_dimensions["C"].width = 16

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
