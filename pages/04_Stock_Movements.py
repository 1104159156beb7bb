# =============================================================================
# 04_Stock_Movements.py - Stock Movements
# Transfers between raw materials, production and storage
# =============================================================================
from __future__ import annotations
import streamlit as st

from inventory_core.screens import StockMovementsScreen
from inventory_core.ui.components import render_crud, render_result
from inventory_core.ui.page import setup_page

coordinator = setup_page("Stock Movements", "🔁", "Transfers between raw materials, production and storage")

screen = StockMovementsScreen(coordinator)
render_result(screen.load())

render_crud(screen)
