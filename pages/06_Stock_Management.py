# =============================================================================
# 06_Stock_Management.py - Stock Management
# Stock items, unit prices and value
# =============================================================================
from __future__ import annotations
import streamlit as st

from inventory_core.screens import StockManagementScreen
from inventory_core.ui.components import render_crud, render_result
from inventory_core.ui.page import setup_page

coordinator = setup_page("Stock Management", "📦", "Stock items, unit prices and value")

screen = StockManagementScreen(coordinator)
render_result(screen.load())

render_crud(screen)

low = screen.low_stock()
if low:
    st.warning(f"{len(low)} item{'s' if len(low) != 1 else ''} at or below 10 units: "
               + ", ".join(str(r.get("name")) for r in low))
