# =============================================================================
# 07_Production.py - Production
# Batch setup, raw material allocation, department tracking and yield
# =============================================================================
from __future__ import annotations
import pandas as pd
import streamlit as st

from inventory_core.screens import ProductionScreen
from inventory_core.ui.components import (
    finish_edit,
    flash_result,
    render_record_actions,
    render_record_form,
    render_record_table,
    render_result,
)
from inventory_core.ui.page import setup_page

coordinator = setup_page("Production", "🏭", "Batch flow from store to finished store")

screen = ProductionScreen(coordinator)
render_result(screen.load())

resource = screen.resource
editing_key = st.session_state["editing_key"].get(resource)
editing = screen.find(editing_key) if editing_key else None
values = screen.derive(editing.fields) if editing else screen.blank_form()

# ============================================================================
# BATCH SETUP
# ============================================================================
st.subheader("✏️ Edit batch" if editing else "➕ New batch")

st.markdown("##### Raw Material Allocation")
ingredients = st.data_editor(
    pd.DataFrame(values["ingredients"], columns=["name", "base", "extra", "gross"]),
    column_config={
        "name": "Ingredient",
        "base": st.column_config.NumberColumn("Base (kg)", min_value=0),
        "extra": st.column_config.NumberColumn("Extra (kg)", min_value=0),
        "gross": st.column_config.NumberColumn("Gross Input (kg)", disabled=True),
    },
    num_rows="dynamic",
    hide_index=True,
    key=f"ingredients_{editing_key or 'new'}",
)

st.markdown("##### Department Tracking")
departments = st.data_editor(
    pd.DataFrame(values["departments"], columns=["name", "input", "output", "loss"]),
    column_config={
        "name": "Department",
        "input": st.column_config.NumberColumn("Input (kg)", min_value=0),
        "output": st.column_config.NumberColumn("Output (kg)", min_value=0),
        "loss": st.column_config.NumberColumn("Loss (kg)", disabled=True),
    },
    hide_index=True,
    key=f"departments_{editing_key or 'new'}",
)

lists = {
    "ingredients": ingredients.drop(columns=["gross"]).fillna(0).to_dict("records"),
    "departments": departments.drop(columns=["loss"]).fillna(0).to_dict("records"),
}
preview = screen.derive({**values, **lists})

col1, col2, col3 = st.columns(3)
col1.metric("Gross Input (kg)", f"{preview['grossInput']:,}")
col2.metric("Final Output (kg)", f"{preview['finalOutput']:,}")
col3.metric("Yield", f"{preview['yieldPercent']:.2f}%")

submitted, form = render_record_form(
    screen.schema,
    values,
    form_key=f"{resource}_form_{editing_key or 'new'}",
    submit_label="💾 Update batch" if editing else "💾 Save batch",
)

if submitted:
    result = screen.save({**form, **lists}, editing)
    if result:
        finish_edit(resource)
        flash_result(result)
        st.rerun()
    render_result(result)

# ============================================================================
# BATCHES
# ============================================================================
st.subheader("📋 Batches")
records = screen.records()
render_record_table(screen.table(records), screen.totals(records), screen.labels())
render_record_actions(screen, records)
