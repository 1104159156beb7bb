# =============================================================================
# inventory_core/screens/production.py
# Production screen - batch allocation, department flow and yield
# =============================================================================
"""
A production batch allocates raw materials (base + extra = gross input) and
moves through the departments Store -> Cleaning -> Scorching -> Milling ->
Packaging -> Finished Store. Loss per department and batch yield are
recomputed from the recorded inputs and outputs.
"""

from __future__ import annotations
from typing import Any, Dict

from inventory_core.domain import calculations
from inventory_core.domain.resources import PRODUCTION_BATCHES, PRODUCTION_DEPARTMENTS
from .base import ScreenController

DEFAULT_INGREDIENTS = ("Sorghum", "Sesame", "Sugar", "Pigeon Peas")


class ProductionScreen(ScreenController):
    """Production batches with derived losses and yield."""

    resource = PRODUCTION_BATCHES
    total_columns = ("plannedTons", "grossInput", "finalOutput")
    extra_labels = {
        "grossInput": "Gross Input (kg)",
        "finalOutput": "Final Output (kg)",
        "yieldPercent": "Yield (%)",
    }

    def blank_form(self) -> Dict[str, Any]:
        form = self.schema.blank_form()
        form["plannedTons"] = 1
        form["ingredients"] = [{"name": name, "base": 0, "extra": 0} for name in DEFAULT_INGREDIENTS]
        form["departments"] = [{"name": name, "input": 0, "output": 0} for name in PRODUCTION_DEPARTMENTS]
        return self.derive(form)

    def derive(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(fields)
        ingredients = [
            dict(item, gross=calculations.gross_input(item.get("base"), item.get("extra")))
            for item in row.get("ingredients") or []
        ]
        departments = calculations.department_losses(row.get("departments") or [])

        row["ingredients"] = ingredients
        row["departments"] = departments
        row["grossInput"] = calculations.column_totals(ingredients, ["gross"])["gross"]
        row["finalOutput"] = calculations.final_output(departments)
        row["yieldPercent"] = calculations.yield_percent(row["finalOutput"], row.get("plannedTons"))
        return row
