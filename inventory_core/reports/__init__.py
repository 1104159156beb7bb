"""
Report export (Excel / PDF)
"""

from .exporters import (
    COMPANY_NAME,
    dataframe_to_excel_bytes,
    dataframe_to_pdf_bytes,
    delivery_note_pdf,
)

__all__ = [
    "COMPANY_NAME",
    "dataframe_to_excel_bytes",
    "dataframe_to_pdf_bytes",
    "delivery_note_pdf",
]
