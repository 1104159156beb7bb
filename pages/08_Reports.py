# =============================================================================
# 08_Reports.py - Reports
# Tabular reports with Excel and PDF export
# =============================================================================
from __future__ import annotations
from datetime import date

import streamlit as st

from inventory_core.errors.handlers import ErrorContext
from inventory_core.screens import ReportsScreen
from inventory_core.ui.components import render_result
from inventory_core.ui.page import setup_page

coordinator = setup_page("Reports", "📑", "Export any module to Excel or PDF")

reports = ReportsScreen(coordinator)
for name, result in reports.load().items():
    if result.is_degraded or not result or result.warnings:
        st.caption(f"**{name}**")
        render_result(result)

# ============================================================================
# FILTERS
# ============================================================================
col1, col2, col3 = st.columns([1, 1, 2])
with col1:
    use_range = st.checkbox("Filter by date")
start = end = None
if use_range:
    with col2:
        start = st.date_input("From", value=date.today().replace(day=1))
    with col3:
        end = st.date_input("To", value=date.today())

frames = reports.frames(start=start, end=end)

# ============================================================================
# REPORT TABS
# ============================================================================
tabs = st.tabs(reports.report_names)
for tab, name in zip(tabs, reports.report_names):
    with tab:
        df = frames[name]
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.caption(f"{len(df)} row{'s' if len(df) != 1 else ''}")
        with ErrorContext(f"Exporting {name} report"):
            col_a, col_b = st.columns(2)
            col_a.download_button(
                "⬇️ Excel",
                data=reports.excel_bytes({name: df}),
                file_name=f"{name.lower().replace(' ', '_')}.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                key=f"xlsx_{name}",
            )
            col_b.download_button(
                "⬇️ PDF",
                data=reports.pdf_bytes(name, df, start, end),
                file_name=f"{name.lower().replace(' ', '_')}.pdf",
                mime="application/pdf",
                key=f"pdf_{name}",
            )

st.markdown("---")
with ErrorContext("Exporting all reports"):
    st.download_button(
        "⬇️ Download all reports (Excel)",
        data=reports.excel_bytes(frames),
        file_name=f"bennimix_reports_{date.today().isoformat()}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
