# =============================================================================
# 05_Dispatch_Delivery.py - Dispatch & Delivery
# Customer deliveries, transport cost and delivery notes
# =============================================================================
from __future__ import annotations
import streamlit as st

from inventory_core.domain.calculations import TOLL_FEES
from inventory_core.errors.handlers import ErrorContext
from inventory_core.screens import DispatchScreen
from inventory_core.ui.components import render_crud, render_result
from inventory_core.ui.page import setup_page

coordinator = setup_page("Dispatch & Delivery", "🚚", "Deliveries, toll fees and trip cost")

screen = DispatchScreen(coordinator)
render_result(screen.load())


def _preview(values):
    col1, col2 = st.columns(2)
    col1.metric("Toll Fee", f"{values['tollFee']:,}")
    col2.metric("Total Cost", f"{values['totalCost']:,}")


with st.expander("Toll fee table"):
    st.dataframe(
        [{"Toll Group": group, "Fee": fee} for group, fee in TOLL_FEES.items()],
        use_container_width=True,
        hide_index=True,
    )

selected = render_crud(screen, preview=_preview)

# ============================================================================
# DELIVERY NOTE
# ============================================================================
records = screen.records()
if records:
    st.markdown("#### 🖨️ Delivery Note")
    by_key = {r.key: r for r in records}
    key = st.selectbox(
        "Dispatch",
        list(by_key),
        format_func=lambda k: f"{by_key[k].get('date', '')} · {by_key[k].get('customer', '')} · {by_key[k].get('item', '')}",
        key="delivery_note_select",
    )
    with ErrorContext("Building delivery note"):
        st.download_button(
            "⬇️ Download delivery note (PDF)",
            data=screen.delivery_note(by_key[key]),
            file_name=f"delivery_note_{key}.pdf",
            mime="application/pdf",
        )
