# =============================================================================
# inventory_core/screens/finished_products.py
# Finished Products screen
# =============================================================================

from __future__ import annotations
from collections import OrderedDict
from typing import Any, Dict, List

from inventory_core.domain import calculations
from inventory_core.domain.resources import FINISHED_PRODUCTS
from .base import ScreenController


class FinishedProductsScreen(ScreenController):
    """Finished goods by product and batch."""

    resource = FINISHED_PRODUCTS
    total_columns = ("quantity",)

    def by_product(self) -> List[Dict[str, Any]]:
        """Quantity per product and unit, in first-seen order."""
        groups: "OrderedDict[tuple, List[Dict[str, Any]]]" = OrderedDict()
        for row in self.rows():
            groups.setdefault((row.get("product"), row.get("unit")), []).append(row)

        return [
            {
                "product": product,
                "unit": unit,
                "batches": len(rows),
                "quantity": calculations.column_totals(rows, ["quantity"])["quantity"],
            }
            for (product, unit), rows in groups.items()
        ]
