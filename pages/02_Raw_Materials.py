# =============================================================================
# 02_Raw_Materials.py - Raw Materials
# Store-keeper ledger per material: intake, issue and balance
# =============================================================================
from __future__ import annotations
import streamlit as st

from inventory_core.domain.resources import MATERIAL_TABS
from inventory_core.screens import RawMaterialsScreen
from inventory_core.ui.components import render_crud, render_result
from inventory_core.ui.page import setup_page

coordinator = setup_page("Raw Materials", "🌾", "Opening balance, new stock, stock out and balance")

screen = RawMaterialsScreen(coordinator, material=st.session_state.get("raw_material_tab", MATERIAL_TABS[0]))
render_result(screen.load())

material = st.radio("Material", MATERIAL_TABS, horizontal=True, key="raw_material_tab")
screen.set_material(material)


def _preview(values):
    col1, col2 = st.columns(2)
    col1.metric("Total Stock", f"{values['totalStock']:,}")
    col2.metric("Balance", f"{values['balance']:,}")


render_crud(screen, hidden=("productName",), preview=_preview)

totals = screen.totals()
st.caption(
    f"Closing balance for {material}: {totals['balance']:,} "
    f"(opening {totals['openingBalance']:,} + in {totals['newStock']:,} - out {totals['stockOut']:,})"
)
