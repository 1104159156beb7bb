# =============================================================================
# inventory_core/screens/stock_movements.py
# Stock Movements screen - transfers between departments
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, Optional

from inventory_core.domain.records import Record
from inventory_core.domain.resources import STOCK_MOVEMENTS
from inventory_core.errors import ValidationError
from inventory_core.offline.sync_coordinator import SyncResult, SyncStatus
from .base import ScreenController


class StockMovementsScreen(ScreenController):
    """Item transfers from one department to another."""

    resource = STOCK_MOVEMENTS
    total_columns = ("quantity",)

    def save(self, form: Dict[str, Any], record: Optional[Record] = None) -> SyncResult:
        if form.get("from") and form.get("from") == form.get("to"):
            error = ValidationError(
                "A movement needs different From and To locations.",
                field="to", expected=f"not {form.get('from')}", actual=str(form.get("to")),
            )
            self.last_result = SyncResult(
                status=SyncStatus.FAILED,
                resource=self.resource,
                records=self.coordinator.records(self.resource),
                message=error.message,
                error=error,
            )
            return self.last_result
        return super().save(form, record)
