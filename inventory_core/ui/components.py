# =============================================================================
# inventory_core/ui/components.py
# Shared Streamlit widgets: sync status, result signals, forms, tables
# =============================================================================
"""
Reusable page pieces.

Every signal the coordinator produces has exactly one rendering here:
- degraded read       -> warning banner with the cache timestamp
- saved offline       -> info box, distinct from the success box
- replay finished     -> toast
- delete              -> explicit confirmation first
- unsynced rows       -> highlighted in tables
"""

from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import streamlit as st

from inventory_core.domain.records import FieldSpec, Record, ResourceSchema
from inventory_core.errors.handlers import show_result
from inventory_core.offline.sync_coordinator import SyncCoordinator, SyncResult
from inventory_core.screens.base import KEY_COLUMN, STATUS_COLUMN, ScreenController
from inventory_core.state.session import flash, pop_flash

SYNCED_LABEL = "✅ Synced"


# =============================================================================
# SYNC STATUS
# =============================================================================

def render_sync_sidebar(coordinator: SyncCoordinator) -> None:
    """Connection pill, pending count and the Check connection / Sync now buttons."""
    if coordinator.connection is not None:
        coordinator.connection.check_if_due()

    status = coordinator.status_display()
    connection = status["connection"]
    css = {"online": "sync-online", "offline": "sync-offline"}.get(connection, "sync-unknown")
    label = {"online": "🟢 Online", "offline": "🔴 Offline"}.get(connection, "🟡 Unknown")

    with st.sidebar:
        st.markdown("### 🔌 Sync Status")
        st.markdown(f'<span class="sync-pill {css}">{label}</span>', unsafe_allow_html=True)

        pending = status["pending"]
        if pending:
            st.caption(f"⏳ {pending} change{'s' if pending != 1 else ''} waiting to sync")
            for resource, count in status["pending_by_resource"].items():
                st.caption(f"• {resource.replace('_', ' ').title()}: {count}")
        else:
            st.caption("All changes synced")

        if status.get("last_online"):
            st.caption(f"Last online: {status['last_online'][:16].replace('T', ' ')}")
        if not status["durable_storage"]:
            st.caption("⚠️ Offline copy kept in memory only")

        col1, col2 = st.columns(2)
        with col1:
            if st.button("🔄 Check", key="sidebar_check_connection", help="Check connection"):
                if coordinator.connection is not None:
                    coordinator.connection.check_connection()
                st.rerun()
        with col2:
            if st.button("⬆️ Sync now", key="sidebar_sync_now", disabled=not pending):
                coordinator.sync_pending()
                st.rerun()

    show_sync_toast(coordinator)


def show_sync_toast(coordinator: SyncCoordinator) -> None:
    """Sync-completion notification after a queue drain."""
    summary = coordinator.pop_sync_summary()
    if summary is None:
        return
    st.toast(summary.message, icon="✅" if not summary.remaining else "⏳")
    for warning in summary.rejected:
        st.warning(warning)


def render_flash() -> None:
    """Messages queued before the last st.rerun()."""
    for kind, message in pop_flash():
        getattr(st, kind, st.info)(message)


def render_result(result: SyncResult, success_message: Optional[str] = None) -> None:
    show_result(result, success_message=success_message)


def flash_result(result: SyncResult) -> None:
    """Keep a write's signal across the rerun that refreshes the table."""
    kinds = {
        "ok": "success",
        "saved_offline": "info",
        "degraded": "warning",
        "not_found": "warning",
        "failed": "error",
    }
    prefix = "💾 " if result.saved_offline else ""
    flash(kinds.get(result.status, "info"), f"{prefix}{result.message}")
    for warning in result.warnings:
        flash("warning", warning)


# =============================================================================
# TABLES
# =============================================================================

def _highlight_unsynced(row: pd.Series) -> List[str]:
    if row.get(STATUS_COLUMN, SYNCED_LABEL) == SYNCED_LABEL:
        return [""] * len(row)
    return ["background-color: rgba(245, 158, 11, 0.15)"] * len(row)


def render_record_table(df: pd.DataFrame, totals: Optional[Dict[str, Any]] = None, labels: Optional[Dict[str, str]] = None) -> None:
    """Record table with unsynced rows highlighted and an optional totals line."""
    if df.empty:
        st.info("No records yet.")
        return

    visible = df.drop(columns=[KEY_COLUMN], errors="ignore")
    st.dataframe(visible.style.apply(_highlight_unsynced, axis=1), use_container_width=True, hide_index=True)

    if totals:
        labels = labels or {}
        parts = [f"**{labels.get(k, k)}:** {v:,}" for k, v in totals.items() if isinstance(v, (int, float))]
        st.markdown("**Totals** · " + " · ".join(parts))


# =============================================================================
# FORMS
# =============================================================================

def _widget(field_spec: FieldSpec, value: Any, key: str) -> Any:
    label = field_spec.title + (" *" if field_spec.required else "")
    if field_spec.kind == "number":
        number = float(value) if value not in (None, "") else 0.0
        if field_spec.minimum is not None:
            number = max(number, float(field_spec.minimum))
        return st.number_input(label, value=number, min_value=float(field_spec.minimum) if field_spec.minimum is not None else None, key=key)
    if field_spec.kind == "date":
        try:
            default = date.fromisoformat(str(value).split("T")[0]) if value else date.today()
        except ValueError:
            default = date.today()
        return st.date_input(label, value=default, key=key)
    if field_spec.kind == "choice":
        options = list(field_spec.choices)
        index = options.index(value) if value in options else 0
        return st.selectbox(label, options, index=index, key=key)
    return st.text_input(label, value=str(value or ""), key=key)


def render_record_form(
    schema: ResourceSchema,
    values: Dict[str, Any],
    form_key: str,
    submit_label: str = "💾 Save",
    hidden: Tuple[str, ...] = (),
    columns: int = 3,
) -> Tuple[bool, Dict[str, Any]]:
    """
    Form with one widget per editable field.

    Derived fields and list fields are not rendered; pages show derived values
    next to the form instead.

    Returns:
        (submitted, values)
    """
    editable = [
        field_spec for field_spec in schema.fields
        if not field_spec.derived and field_spec.kind != "list" and field_spec.name not in hidden
    ]
    result = {name: values.get(name) for name in hidden}

    with st.form(form_key, clear_on_submit=False):
        cols = st.columns(columns)
        for i, field_spec in enumerate(editable):
            with cols[i % columns]:
                result[field_spec.name] = _widget(field_spec, values.get(field_spec.name), key=f"{form_key}_{field_spec.name}")
        submitted = st.form_submit_button(submit_label, use_container_width=True)

    return submitted, result


# =============================================================================
# RECORD ACTIONS
# =============================================================================

def _record_label(record: Record, screen: ScreenController) -> str:
    names = [n for n in screen.schema.required_fields[:3]]
    text = " · ".join(str(record.get(n, "")) for n in names)
    return f"{text}  ({record.sync_label})"


def render_record_actions(screen: ScreenController, records: List[Record]) -> Optional[Record]:
    """
    Pick a record to edit or delete.

    Delete always asks for confirmation first. Returns the record selected for
    editing, if any.
    """
    if not records:
        return None

    resource = screen.resource
    by_key = {r.key: r for r in records}
    key = st.selectbox(
        "Select a record",
        list(by_key),
        format_func=lambda k: _record_label(by_key[k], screen),
        key=f"{resource}_record_select",
    )
    record = by_key[key]

    col1, col2, _ = st.columns([1, 1, 4])
    with col1:
        if st.button("✏️ Edit", key=f"{resource}_edit"):
            st.session_state["editing_key"][resource] = key
            st.rerun()
    with col2:
        if st.button("🗑️ Delete", key=f"{resource}_delete"):
            st.session_state["pending_delete"][resource] = key

    if st.session_state["pending_delete"].get(resource) == key:
        confirm_delete(screen, record)

    editing = st.session_state["editing_key"].get(resource)
    return by_key.get(editing) if editing else None


def confirm_delete(screen: ScreenController, record: Record) -> None:
    """Explicit confirmation before any delete."""
    resource = screen.resource
    if record.id is None:
        st.warning("This record has not been synced yet. Deleting it removes it from this device only.")
    else:
        st.warning("Are you sure you want to delete this record?")

    col1, col2, _ = st.columns([1, 1, 4])
    with col1:
        if st.button("Yes, delete", key=f"{resource}_confirm_delete", type="primary"):
            result = screen.delete(record)
            st.session_state["pending_delete"].pop(resource, None)
            st.session_state["editing_key"].pop(resource, None)
            flash_result(result)
            st.rerun()
    with col2:
        if st.button("Cancel", key=f"{resource}_cancel_delete"):
            st.session_state["pending_delete"].pop(resource, None)
            st.rerun()


def finish_edit(resource: str) -> None:
    st.session_state["editing_key"].pop(resource, None)


# =============================================================================
# FORM + TABLE SECTION
# =============================================================================

def render_crud(
    screen: ScreenController,
    hidden: Tuple[str, ...] = (),
    preview=None,
) -> Optional[Record]:
    """
    Standard form-plus-table body of a screen.

    Args:
        screen: Controller, already loaded
        hidden: Fields fixed by the page (e.g. the active material tab)
        preview: Optional callable(derived_values) rendering derived fields

    Returns:
        The record currently selected in the table, if any
    """
    resource = screen.resource
    records = screen.records()
    editing_key = st.session_state["editing_key"].get(resource)
    editing = screen.find(editing_key) if editing_key else None
    if editing_key and editing is None:
        finish_edit(resource)

    values = screen.derive(editing.fields) if editing else screen.blank_form()
    st.subheader("✏️ Edit record" if editing else "➕ New record")
    submitted, form = render_record_form(
        screen.schema,
        values,
        form_key=f"{resource}_form_{editing.key if editing else 'new'}",
        submit_label="💾 Update" if editing else "💾 Save",
        hidden=hidden,
    )

    if preview is not None:
        preview(screen.derive(form))

    if submitted:
        result = screen.save(form, editing)
        if result:
            finish_edit(resource)
            flash_result(result)
            st.rerun()
        render_result(result)

    if editing and st.button("Cancel edit", key=f"{resource}_cancel_edit"):
        finish_edit(resource)
        st.rerun()

    st.subheader("📋 Records")
    render_record_table(screen.table(records), screen.totals(records), screen.labels())
    return render_record_actions(screen, records)
