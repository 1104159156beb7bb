# =============================================================================
# inventory_core/reports/exporters.py
# Excel and PDF export of inventory tables
# =============================================================================
"""
Export surfaces receive flat rows (DataFrames) only; they never see Records,
sync state or the coordinator.

- dataframe_to_excel_bytes: one styled sheet per table (openpyxl)
- dataframe_to_pdf_bytes: landscape table report (reportlab platypus)
- delivery_note_pdf: printable delivery note for one dispatch
"""

from __future__ import annotations
from datetime import date, datetime
from io import BytesIO
from typing import Any, Dict, Mapping, Optional
import logging

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

COMPANY_NAME = "BENNIMIX FOOD COMPANY LIMITED"
HEADER_COLOR = "1F4E78"

_EXCEL_SHEET_NAME_MAX = 31
_EXCEL_FORBIDDEN = '[]:*?/\\'


def _sheet_title(name: str, used: set) -> str:
    title = "".join("_" if ch in _EXCEL_FORBIDDEN else ch for ch in name)[:_EXCEL_SHEET_NAME_MAX] or "Sheet"
    base, n = title, 2
    while title in used:
        suffix = f" ({n})"
        title = base[:_EXCEL_SHEET_NAME_MAX - len(suffix)] + suffix
        n += 1
    used.add(title)
    return title


def _cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, (list, dict)):
        return str(value)
    return value


def dataframe_to_excel_bytes(frames: Mapping[str, pd.DataFrame]) -> bytes:
    """
    Build an .xlsx workbook with one sheet per table.

    Args:
        frames: Sheet name -> table

    Returns:
        Workbook bytes, ready for st.download_button
    """
    wb = Workbook()
    wb.remove(wb.active)

    # ---------- Styles ----------
    header_fill = PatternFill("solid", fgColor=HEADER_COLOR)
    header_font = Font(bold=True, color="FFFFFF")
    center = Alignment(horizontal="center", vertical="center")
    thin = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin")
    )

    used: set = set()
    for name, df in frames.items():
        ws = wb.create_sheet(_sheet_title(name, used))

        # ---------- Header Row ----------
        for col, title in enumerate(df.columns, start=1):
            cell = ws.cell(row=1, column=col, value=str(title))
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = center
            cell.border = thin
            ws.column_dimensions[get_column_letter(col)].width = max(14, len(str(title)) + 4)

        # ---------- Data Rows ----------
        for i, row in enumerate(df.itertuples(index=False), start=2):
            for col, value in enumerate(row, start=1):
                cell = ws.cell(row=i, column=col, value=_cell_value(value))
                cell.border = thin

        ws.freeze_panes = "A2"

    if not wb.worksheets:
        wb.create_sheet("Empty")

    buffer = BytesIO()
    wb.save(buffer)
    logger.debug(f"Excel export: {len(frames)} sheets")
    return buffer.getvalue()


def _format(value: Any) -> str:
    value = _cell_value(value)
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:,.2f}"
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:,}"
    return str(value)


def _table_style() -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(f"#{HEADER_COLOR}")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F3F4F6")]),
        ]
    )


def dataframe_to_pdf_bytes(title: str, df: pd.DataFrame, subtitle: Optional[str] = None) -> bytes:
    """Landscape A4 table report with the company header."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        leftMargin=1.5 * cm,
        rightMargin=1.5 * cm,
        title=title,
    )
    styles = getSampleStyleSheet()

    story = [
        Paragraph(COMPANY_NAME, styles["Title"]),
        Paragraph(title, styles["Heading2"]),
        Paragraph(subtitle or f"Generated {datetime.now():%d %b %Y %H:%M}", styles["Normal"]),
        Spacer(1, 0.4 * cm),
    ]

    if df.empty:
        story.append(Paragraph("No records.", styles["Normal"]))
    else:
        data = [[str(c) for c in df.columns]]
        data.extend([[_format(v) for v in row] for row in df.itertuples(index=False)])
        table = Table(data, repeatRows=1)
        table.setStyle(_table_style())
        story.append(table)

    doc.build(story)
    return buffer.getvalue()


def delivery_note_pdf(dispatch: Dict[str, Any], reference: Optional[str] = None) -> bytes:
    """
    Delivery note for one dispatch: company header, customer and vehicle,
    the goods line and the three signature lines.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=2.0 * cm,
        bottomMargin=2.0 * cm,
        leftMargin=2.0 * cm,
        rightMargin=2.0 * cm,
        title="Delivery Note",
    )
    styles = getSampleStyleSheet()

    when = dispatch.get("date") or date.today().isoformat()
    details = Table(
        [
            ["Customer:", _format(dispatch.get("customer")), "Date:", _format(when)],
            ["Driver:", _format(dispatch.get("driver")), "Vehicle No:", _format(dispatch.get("vehicle"))],
            ["Reference:", reference or "", "Toll Group:", _format(dispatch.get("vehicleGroup"))],
        ],
        colWidths=[3 * cm, 5.5 * cm, 3 * cm, 5.5 * cm],
    )
    details.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
    ]))

    goods = Table(
        [
            ["S/No", "Description", "Quantity"],
            ["1", _format(dispatch.get("item")), _format(dispatch.get("quantity"))],
        ],
        colWidths=[2 * cm, 11 * cm, 4 * cm],
    )
    goods.setStyle(_table_style())

    signatures = Table(
        [
            ["Authorized by:", "_" * 28],
            ["Delivered by:", "_" * 28],
            ["Received by:", "_" * 28],
        ],
        colWidths=[4 * cm, 9 * cm],
        rowHeights=[1.2 * cm] * 3,
    )
    signatures.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "BOTTOM")]))

    story = [
        Paragraph(COMPANY_NAME, styles["Title"]),
        Paragraph("DELIVERY NOTE", styles["Heading2"]),
        Spacer(1, 0.5 * cm),
        details,
        Spacer(1, 0.6 * cm),
        goods,
        Spacer(1, 1.2 * cm),
        signatures,
    ]

    doc.build(story)
    return buffer.getvalue()
