# =============================================================================
# inventory_core/screens/reports.py
# Reports screen - multi-resource read and export
# =============================================================================
"""
Reports read several resources through the coordinator, optionally narrow
them to a date range, and hand flat tables to the Excel/PDF exporters.
"""

from __future__ import annotations
from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from inventory_core.domain.records import Record
from inventory_core.offline.sync_coordinator import SyncCoordinator, SyncResult
from inventory_core.reports.exporters import dataframe_to_excel_bytes, dataframe_to_pdf_bytes
from .base import ScreenController
from .dispatch import DispatchScreen
from .finished_products import FinishedProductsScreen
from .production import ProductionScreen
from .raw_materials import RawMaterialsScreen
from .stock_management import StockManagementScreen
from .stock_movements import StockMovementsScreen


class _AllMaterials(RawMaterialsScreen):
    """Raw materials across every tab."""

    def include(self, record: Record) -> bool:
        return True


class ReportsScreen:
    """
    Report tabs over every inventory resource.

    Usage:
        reports = ReportsScreen(coordinator)
        results = reports.load()
        frames = reports.frames(start=date(2025, 7, 1))
        xlsx = reports.excel_bytes(frames)
    """

    def __init__(self, coordinator: SyncCoordinator):
        self.coordinator = coordinator
        self.screens: Dict[str, ScreenController] = {
            "Raw Materials": _AllMaterials(coordinator),
            "Finished Products": FinishedProductsScreen(coordinator),
            "Stock Movements": StockMovementsScreen(coordinator),
            "Customer Deliveries": DispatchScreen(coordinator),
            "Stock": StockManagementScreen(coordinator),
            "Production": ProductionScreen(coordinator),
        }

    @property
    def report_names(self) -> List[str]:
        return list(self.screens)

    def load(self, names: Optional[List[str]] = None) -> Dict[str, SyncResult]:
        """Read every report's resource; each result keeps its own signal."""
        names = names or self.report_names
        return {name: self.screens[name].load() for name in names}

    @staticmethod
    def _in_range(record: Record, start: Optional[date], end: Optional[date]) -> bool:
        if start is None and end is None:
            return True
        raw = record.get("date")
        if not raw:
            return False
        try:
            when = date.fromisoformat(str(raw).split("T")[0])
        except ValueError:
            return False
        if start is not None and when < start:
            return False
        if end is not None and when > end:
            return False
        return True

    def frame(self, name: str, start: Optional[date] = None, end: Optional[date] = None) -> pd.DataFrame:
        screen = self.screens[name]
        records = [r for r in screen.records() if self._in_range(r, start, end)]
        return screen.export_frame(records)

    def frames(
        self,
        names: Optional[List[str]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Dict[str, pd.DataFrame]:
        return {name: self.frame(name, start, end) for name in (names or self.report_names)}

    def excel_bytes(self, frames: Dict[str, pd.DataFrame]) -> bytes:
        return dataframe_to_excel_bytes(frames)

    def pdf_bytes(self, name: str, df: pd.DataFrame, start: Optional[date] = None, end: Optional[date] = None) -> bytes:
        period = None
        if start or end:
            period = f"Period: {start.isoformat() if start else '...'} to {end.isoformat() if end else '...'}"
        return dataframe_to_pdf_bytes(f"{name} Report", df, subtitle=period)
