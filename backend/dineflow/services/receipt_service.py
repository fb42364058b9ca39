"""Receipt PDF rendering for bills (80 mm thermal-roll layout)."""

import io
from html import escape
from typing import Optional
from zoneinfo import ZoneInfo

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from dineflow.core.config import settings
from dineflow.models.billing import Bill
from dineflow.services.projections import as_utc

RECEIPT_WIDTH = 80 * mm
MARGIN = 4 * mm


def _money(value) -> str:
    return f"{settings.currency_symbol} {value:.2f}"


def receipt_filename(bill: Bill) -> str:
    return f"receipt_table{bill.table_number}_{bill.bill_number}.pdf"


def generate_receipt_pdf(bill: Bill, business: Optional[dict] = None,
                         tz: Optional[ZoneInfo] = None) -> bytes:
    """Render a bill as a narrow receipt PDF."""
    tz = tz or ZoneInfo(settings.timezone)
    items = bill.items or []
    # Height grows with the item count so the receipt prints on one strip.
    height = (110 + 6 * len(items)) * mm

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=(RECEIPT_WIDTH, height),
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=bill.bill_number,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReceiptTitle",
        parent=styles["Heading2"],
        alignment=TA_CENTER,
        fontSize=12,
        spaceAfter=2,
    )
    center_style = ParagraphStyle(
        "ReceiptCenter",
        parent=styles["Normal"],
        alignment=TA_CENTER,
        fontSize=7,
        leading=9,
    )
    small_style = ParagraphStyle("ReceiptSmall", parent=styles["Normal"], fontSize=7, leading=9)

    elements = []

    # Header
    elements.append(Paragraph(escape(business["name"] if business else "Receipt"), title_style))
    if business and business.get("address"):
        elements.append(Paragraph(escape(business["address"]), center_style))
    if business and business.get("phone"):
        elements.append(Paragraph(f"Tel: {escape(business['phone'])}", center_style))
    elements.append(Spacer(1, 2 * mm))

    # Bill info
    issued = as_utc(bill.created_at).astimezone(tz)
    elements.append(Paragraph(
        f"<b>Bill #:</b> {bill.bill_number} &nbsp; <b>Table:</b> {bill.table_number}", small_style
    ))
    elements.append(Paragraph(
        f"<b>Date:</b> {issued.strftime('%d %b %Y')} &nbsp; <b>Time:</b> {issued.strftime('%H:%M')}",
        small_style,
    ))
    elements.append(Spacer(1, 2 * mm))

    # Items table
    table_data = [["Item", "Qty", "Price", "Amt"]]
    for item in items:
        name = item["name"]
        if len(name) > 18:
            name = name[:18] + "."
        table_data.append([name, str(item["quantity"]), item["price"], item["line_total"]])

    table_data.append(["Subtotal", "", "", _money(bill.subtotal)])
    table_data.append([f"GST ({bill.tax_rate.normalize():f}%)", "", "", _money(bill.tax_amount)])
    table_data.append(["TOTAL", "", "", _money(bill.total)])

    usable = RECEIPT_WIDTH - 2 * MARGIN
    table = Table(table_data, colWidths=[usable * 0.42, usable * 0.12, usable * 0.2, usable * 0.26])
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 7),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
        ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.grey),
        ("LINEABOVE", (0, -3), (-1, -3), 0.5, colors.grey),
        ("LINEABOVE", (0, -1), (-1, -1), 0.5, colors.grey),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, -1), (-1, -1), 9),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
        ("TOPPADDING", (0, 0), (-1, -1), 2),
    ]))
    elements.append(table)

    # Footer
    elements.append(Spacer(1, 4 * mm))
    elements.append(Paragraph("Thank you for dining with us!", center_style))
    elements.append(Paragraph("Visit again soon", center_style))

    doc.build(elements)
    return buffer.getvalue()
