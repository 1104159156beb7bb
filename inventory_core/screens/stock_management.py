# =============================================================================
# inventory_core/screens/stock_management.py
# Stock Management screen - generic stock items with value
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List

from inventory_core.domain import calculations
from inventory_core.domain.resources import STOCKS
from .base import ScreenController

LOW_STOCK_THRESHOLD = 10


class StockManagementScreen(ScreenController):
    """Stock items with quantity, unit price and stock value."""

    resource = STOCKS
    total_columns = ("quantity", "stockValue")
    extra_labels = {"stockValue": "Stock Value"}

    def derive(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(fields)
        row["stockValue"] = calculations.stock_value(row.get("quantity"), row.get("unitPrice"))
        return row

    def low_stock(self, threshold: float = LOW_STOCK_THRESHOLD) -> List[Dict[str, Any]]:
        """Items at or below ``threshold`` units."""
        return [
            row for row in self.rows()
            if calculations.to_number(row.get("quantity")) <= threshold
        ]

    def value_by_category(self) -> Dict[str, Any]:
        """Total stock value per category."""
        groups: Dict[str, List[Dict[str, Any]]] = {}
        for row in self.rows():
            groups.setdefault(row.get("category") or "Uncategorised", []).append(row)
        return {
            category: calculations.column_totals(rows, ["stockValue"])["stockValue"]
            for category, rows in groups.items()
        }
