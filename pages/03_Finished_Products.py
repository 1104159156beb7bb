# =============================================================================
# 03_Finished_Products.py - Finished Products
# Packed product by batch
# =============================================================================
from __future__ import annotations
import streamlit as st

from inventory_core.screens import FinishedProductsScreen
from inventory_core.ui.components import render_crud, render_result
from inventory_core.ui.page import setup_page

coordinator = setup_page("Finished Products", "🏷️", "Packed product by batch")

screen = FinishedProductsScreen(coordinator)
render_result(screen.load())

render_crud(screen)

st.markdown("#### Quantity by Product")
summary = screen.by_product()
if summary:
    st.dataframe(summary, use_container_width=True, hide_index=True)
