# =============================================================================
# inventory_core/screens/dispatch.py
# Dispatch & Delivery screen
# =============================================================================
"""
Customer deliveries with their transport cost.

Toll fee comes from the vehicle's toll group; total cost adds fuel and the
per-diem of everyone on the trip (at least the driver).
"""

from __future__ import annotations
from typing import Any, Dict, Mapping

from inventory_core.domain import calculations
from inventory_core.domain.records import Record
from inventory_core.domain.resources import DISPATCHES
from .base import ScreenController


class DispatchScreen(ScreenController):
    """Dispatch records, delivery costs and delivery notes."""

    resource = DISPATCHES
    total_columns = ("quantity", "tollFee", "fuelCost", "totalCost")

    def __init__(self, coordinator, toll_table: Mapping[str, Any] = calculations.TOLL_FEES):
        super().__init__(coordinator)
        self.toll_table = toll_table

    def derive(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(fields)
        row["tollFee"] = calculations.toll_fee(row.get("vehicleGroup"), self.toll_table)
        row["totalCost"] = calculations.total_dispatch_cost(
            row["tollFee"], row.get("fuelCost"), row.get("perDiemRate"), row.get("personnelCount"),
        )
        return row

    def delivery_note(self, record: Record) -> bytes:
        """Printable delivery note (PDF) for one dispatch."""
        from inventory_core.reports.exporters import delivery_note_pdf

        return delivery_note_pdf(self.derive(record.fields), reference=record.key)
