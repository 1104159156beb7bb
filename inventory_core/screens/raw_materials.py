# =============================================================================
# inventory_core/screens/raw_materials.py
# Raw Materials screen - one tab per material
# =============================================================================
"""
Intake and issue of raw materials (Sorghum, Pigeon Peas, Sesame Seeds, Rice,
Sugar). Each row tracks a store-keeper entry; total stock and balance are
derived from opening balance, new stock and stock out.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from inventory_core.domain import calculations
from inventory_core.domain.records import Record
from inventory_core.domain.resources import MATERIAL_TABS, RAW_MATERIALS
from .base import ScreenController


class RawMaterialsScreen(ScreenController):
    """Raw material ledger filtered to the active material tab."""

    resource = RAW_MATERIALS
    total_columns = ("openingBalance", "newStock", "totalStock", "stockOut", "balance")

    def __init__(self, coordinator, material: str = MATERIAL_TABS[0]):
        super().__init__(coordinator)
        self.material = material

    def set_material(self, material: str) -> None:
        if material not in MATERIAL_TABS:
            raise ValueError(f"Unknown material tab: {material}")
        self.material = material

    def include(self, record: Record) -> bool:
        return record.get("productName") == self.material

    def blank_form(self) -> Dict[str, Any]:
        form = super().blank_form()
        form["productName"] = self.material
        return self.derive(form)

    def derive(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(fields)
        row["totalStock"] = calculations.total_quantity(row.get("openingBalance"), row.get("newStock"))
        row["balance"] = calculations.closing_stock(
            row.get("openingBalance"), row.get("newStock"), row.get("stockOut"),
        )
        return row

    def totals(self, records: Optional[List[Record]] = None) -> Dict[str, Any]:
        """
        Column sums for the tab plus the closing balance computed two ways.

        ``closing_from_rows`` and ``closing_from_columns`` always agree.
        """
        rows = self.rows(records)
        totals = calculations.stock_totals(rows)
        totals["balance"] = totals["closing_from_rows"]
        return totals

    def material_summary(self) -> List[Dict[str, Any]]:
        """Closing balance per material across every tab (dashboard)."""
        everything = self.coordinator.records(self.resource)
        summary = []
        for material in MATERIAL_TABS:
            rows = [self.derive(r.fields) for r in everything if r.get("productName") == material]
            totals = calculations.stock_totals(rows)
            summary.append({
                "material": material,
                "entries": len(rows),
                "stockIn": totals["newStock"],
                "stockOut": totals["stockOut"],
                "balance": totals["closing_from_rows"],
            })
        return summary
