# =============================================================================
# 01_Dashboard.py - Inventory Dashboard
# Stock balances, stock value and delivery costs at a glance
# =============================================================================
from __future__ import annotations
import streamlit as st
import plotly.graph_objects as go
import plotly.express as px

from inventory_core.screens import (
    DispatchScreen,
    RawMaterialsScreen,
    StockManagementScreen,
)
from inventory_core.ui.components import render_result
from inventory_core.ui.page import setup_page
from inventory_core.ui.theme import PRIMARY_COLOR, DANGER_COLOR, render_metric_card

coordinator = setup_page("Dashboard", "📊", "Current balances across the store")

raw = RawMaterialsScreen(coordinator)
stocks = StockManagementScreen(coordinator)
dispatch = DispatchScreen(coordinator)

for screen in (raw, stocks, dispatch):
    result = screen.load()
    if not result:
        render_result(result)
    elif result.is_degraded or result.warnings:
        render_result(result)

# ============================================================================
# KPIs
# ============================================================================
summary = raw.material_summary()
stock_totals = stocks.totals()
dispatch_totals = dispatch.totals()

col1, col2, col3, col4 = st.columns(4)
with col1:
    render_metric_card("Raw material balance (kg)", f"{sum(s['balance'] for s in summary):,}")
with col2:
    render_metric_card("Stock value", f"{stock_totals.get('stockValue', 0):,}")
with col3:
    render_metric_card("Deliveries", str(len(dispatch.records())))
with col4:
    render_metric_card("Delivery cost", f"{dispatch_totals.get('totalCost', 0):,}")

# ============================================================================
# CHARTS
# ============================================================================
left, right = st.columns(2)

with left:
    st.markdown("#### Raw Material Balance")
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[s["material"] for s in summary],
        y=[s["balance"] for s in summary],
        marker_color=[DANGER_COLOR if s["balance"] < 0 else PRIMARY_COLOR for s in summary],
        text=[s["balance"] for s in summary],
        textposition="auto",
    ))
    fig.update_layout(
        xaxis_title="Material",
        yaxis_title="Balance (kg)",
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        height=350,
        showlegend=False,
    )
    st.plotly_chart(fig, use_container_width=True)

with right:
    st.markdown("#### Stock Value by Category")
    by_category = stocks.value_by_category()
    if by_category:
        fig = px.pie(
            names=list(by_category),
            values=list(by_category.values()),
            hole=0.45,
        )
        fig.update_layout(height=350, paper_bgcolor="rgba(0,0,0,0)")
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No stock items yet.")

low = stocks.low_stock()
if low:
    st.markdown("#### ⚠️ Low Stock")
    st.dataframe(
        [{"Name": r.get("name"), "Quantity": r.get("quantity"), "Category": r.get("category")} for r in low],
        use_container_width=True,
        hide_index=True,
    )
