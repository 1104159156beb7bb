# =============================================================================
# inventory_core/screens/base.py
# Base Screen Controller
# =============================================================================
"""
ScreenController - binds one resource's form and table to the sync coordinator.

A controller never talks to the backend or the local storage itself: every
read and write goes through the injected SyncCoordinator, and the SyncResult
it gets back is handed to the page untouched so the page can show the
degraded / saved-offline / not-found signals.

Derived fields are recomputed from base fields every time rows are built.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from inventory_core.domain import calculations
from inventory_core.domain.records import Record, ResourceSchema
from inventory_core.domain.resources import get_schema
from inventory_core.offline.sync_coordinator import SyncCoordinator, SyncResult


STATUS_COLUMN = "Sync Status"
KEY_COLUMN = "_key"


class ScreenController:
    """
    Form-plus-table controller for one resource.

    Usage:
        screen = DispatchScreen(coordinator)
        result = screen.load()
        df = screen.table()
        result = screen.save(form_values)
    """

    resource: str = ""
    total_columns: Sequence[str] = ()
    extra_labels: Dict[str, str] = {}       # derived columns not in the schema

    def __init__(self, coordinator: SyncCoordinator, resource: Optional[str] = None):
        self.coordinator = coordinator
        if resource is not None:
            self.resource = resource
        if not self.resource:
            raise ValueError(f"{type(self).__name__} has no resource")
        self.last_result: Optional[SyncResult] = None

    @property
    def schema(self) -> ResourceSchema:
        return get_schema(self.resource)

    # =========================================================================
    # COORDINATOR CALLS
    # =========================================================================

    def load(self) -> SyncResult:
        """Read through the coordinator (remote first, cache on failure)."""
        self.last_result = self.coordinator.read(self.resource)
        return self.last_result

    def save(self, form: Dict[str, Any], record: Optional[Record] = None) -> SyncResult:
        """Create a record, or update ``record`` when given."""
        values = self.derive(form)
        if record is None:
            self.last_result = self.coordinator.create(self.resource, values)
        else:
            self.last_result = self.coordinator.update(self.resource, record, values)
        return self.last_result

    def delete(self, record: Record) -> SyncResult:
        self.last_result = self.coordinator.delete(self.resource, record)
        return self.last_result

    def records(self) -> List[Record]:
        """Current list as last read or written, pending changes included."""
        return [r for r in self.coordinator.records(self.resource) if self.include(r)]

    def find(self, key: str) -> Optional[Record]:
        for record in self.coordinator.records(self.resource):
            if record.key == key:
                return record
        return None

    # =========================================================================
    # HOOKS
    # =========================================================================

    def include(self, record: Record) -> bool:
        """Filter applied to every list (e.g. the active material tab)."""
        return True

    def derive(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Base fields plus every derived value. Override per screen."""
        return dict(fields)

    def blank_form(self) -> Dict[str, Any]:
        return self.derive(self.schema.blank_form())

    # =========================================================================
    # TABLES
    # =========================================================================

    def rows(self, records: Optional[List[Record]] = None) -> List[Dict[str, Any]]:
        """Derived rows for display, one per record."""
        records = self.records() if records is None else records
        rows = []
        for record in records:
            row = self.derive(record.fields)
            row[STATUS_COLUMN] = record.sync_label
            row[KEY_COLUMN] = record.key
            rows.append(row)
        return rows

    def columns(self) -> List[str]:
        fields = [field_spec.name for field_spec in self.schema.fields if field_spec.kind != "list"]
        return fields + [name for name in self.extra_labels if name not in fields]

    def labels(self) -> Dict[str, str]:
        labels = {field_spec.name: field_spec.title for field_spec in self.schema.fields}
        labels.update(self.extra_labels)
        return labels

    def table(self, records: Optional[List[Record]] = None) -> pd.DataFrame:
        """
        Display table with labelled columns.

        Unsynced rows carry a distinct status so a record without a server
        identifier never looks confirmed.
        """
        rows = self.rows(records)
        columns = self.columns()
        df = pd.DataFrame(rows, columns=columns + [STATUS_COLUMN, KEY_COLUMN])
        return df.rename(columns=self.labels())

    def totals(self, records: Optional[List[Record]] = None) -> Dict[str, Any]:
        """Totals row over ``total_columns``."""
        return calculations.column_totals(self.rows(records), self.total_columns)

    def export_rows(self, records: Optional[List[Record]] = None) -> List[Dict[str, Any]]:
        """Flat records for spreadsheet/PDF export, bookkeeping columns removed."""
        labels = self.labels()
        exported = []
        for row in self.rows(records):
            exported.append({
                labels[name]: row.get(name)
                for name in self.columns()
            })
        return exported

    def export_frame(self, records: Optional[List[Record]] = None) -> pd.DataFrame:
        labels = self.labels()
        return pd.DataFrame(self.export_rows(records), columns=[labels[name] for name in self.columns()])
