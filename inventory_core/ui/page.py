# =============================================================================
# inventory_core/ui/page.py - Common page bootstrap
# =============================================================================
"""
Call ``setup_page()`` first thing on every page: it sets the page config,
applies the theme, initializes session state and renders the sidebar sync
status. It returns the shared SyncCoordinator.
"""
from __future__ import annotations
import streamlit as st

from inventory_core.errors import ConfigurationError
from inventory_core.errors.handlers import handle_error
from inventory_core.offline.sync_coordinator import SyncCoordinator
from inventory_core.state.session import get_coordinator, init_state
from inventory_core.ui.components import render_flash, render_sync_sidebar
from inventory_core.ui.theme import apply_css, render_header

APP_NAME = "Bennimix Inventory"


def render_sidebar_brand():
    st.sidebar.markdown(
        f"""
        <div style="padding: .5rem 0 1rem 0;">
            <div style="font-size: 1.25rem; font-weight: 800;">🌾 {APP_NAME}</div>
            <div style="font-size: .8rem; opacity: .7;">Bennimix Food Company Limited</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def setup_page(title: str, icon: str, subtitle: str = "") -> SyncCoordinator:
    st.set_page_config(
        page_title=f"{title} - {APP_NAME}",
        page_icon=icon,
        layout="wide",
    )
    apply_css()
    init_state()
    render_sidebar_brand()

    try:
        coordinator = get_coordinator()
    except ConfigurationError as e:
        handle_error(e)
        st.stop()

    render_sync_sidebar(coordinator)
    render_header(title, subtitle, icon)
    render_flash()
    return coordinator
