import logging

import streamlit as st

from inventory_core.config import InventoryConfig, load_config
from inventory_core.logging import setup_logging
from inventory_core.offline.sync_coordinator import SyncCoordinator, build_coordinator

logger = logging.getLogger(__name__)

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "editing_key": {},          # resource -> key of the record being edited
    "pending_delete": {},       # resource -> key of the record awaiting confirmation
    "raw_material_tab": "Sorghum",
    "flash": [],                # (kind, message) shown once after a rerun
    "debug_mode": False,
}


@st.cache_resource
def get_config() -> InventoryConfig:
    """Configuration, resolved once per server process."""
    setup_logging()
    return load_config()


@st.cache_resource
def get_coordinator() -> SyncCoordinator:
    """
    The one SyncCoordinator for this server process.

    Cache and write queue live in a single SQLite file, so every session
    shares the same offline copy.
    """
    config = get_config()
    coordinator = build_coordinator(config)
    logger.info(f"Sync coordinator ready (backend: {config.api_base_url})")
    return coordinator


def init_state():
    """Initialize session state with defaults."""
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v.copy() if isinstance(v, (dict, list)) else v


def flash(kind: str, message: str) -> None:
    """Queue a message for the next script run (survives st.rerun)."""
    st.session_state.setdefault("flash", []).append((kind, message))


def pop_flash() -> list:
    messages = st.session_state.get("flash", [])
    st.session_state["flash"] = []
    return messages
