from __future__ import annotations
import streamlit as st

from inventory_core.domain.resources import RESOURCES
from inventory_core.ui.page import setup_page
from inventory_core.ui.theme import render_metric_card

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
coordinator = setup_page(
    "Bennimix Inventory",
    "🌾",
    "Raw materials, production, finished goods and deliveries - online or offline",
)

# ============================================================================
# STATUS OVERVIEW
# ============================================================================
status = coordinator.status_display()

col1, col2, col3 = st.columns(3)
with col1:
    render_metric_card("Backend", status["connection"].title())
with col2:
    render_metric_card("Changes waiting to sync", str(status["pending"]))
with col3:
    render_metric_card("Offline copy", "On disk" if status["durable_storage"] else "Memory only")

st.markdown("### Modules")
cols = st.columns(3)
for i, schema in enumerate(RESOURCES.values()):
    with cols[i % 3]:
        state = status["states"].get(schema.name)
        badge = {"live": "🟢 live", "degraded": "🟠 offline copy"}.get(state, "⚪ not loaded yet")
        render_metric_card(f"{schema.icon} {schema.label}", badge)

st.markdown(
    """
    **How offline mode works**

    - When the backend cannot be reached, each screen shows the last data saved on this device
      and says so in an orange banner.
    - New entries, edits and deletes are saved on this device and marked **⏳ Not yet synced**.
    - As soon as the connection is back they are sent in the order they were made, and a
      notification confirms the sync.
    """
)
