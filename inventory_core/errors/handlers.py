# =============================================================================
# inventory_core/errors/handlers.py
# Turning errors and sync results into Streamlit messages
# =============================================================================

from __future__ import annotations
import traceback
from typing import Any, Optional
import streamlit as st

from inventory_core.logging import get_logger
from .exceptions import InventoryError, NetworkError, StorageError, ValidationError

logger = get_logger(__name__)

# Status of a SyncResult -> (streamlit call, icon, fallback text)
RESULT_STYLES = {
    "saved_offline": ("info", "💾", "Saved on this device - it will sync when the backend is reachable."),
    "degraded": ("warning", "📴", "Backend unreachable - showing data saved on this device."),
    "not_found": ("warning", "🔎", "This record no longer exists on the server. The list was refreshed."),
    "failed": ("error", "❌", "The change could not be saved."),
}


def user_message(error: Exception) -> str:
    """Short text for a store keeper, without codes or stack traces."""
    if isinstance(error, NetworkError):
        return f"Cannot reach the inventory backend. {error.message}"
    if isinstance(error, StorageError):
        return "Offline storage is not available on this device; unsynced changes will be lost on restart."
    if isinstance(error, ValidationError):
        return error.message
    if isinstance(error, InventoryError):
        return error.message
    return str(error) or type(error).__name__


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    message: Optional[str] = None,
) -> None:
    """
    Log an error and show it on the page.

    Args:
        error: The exception to handle
        show_user_message: Render st.error / st.warning
        message: Text shown instead of the error's own message
    """
    if isinstance(error, InventoryError):
        code, details, recoverable = error.code, error.details, error.recoverable
        logger.error(f"[{code}] {error.message}", extra={"details": details})
    else:
        code, details, recoverable = "UNKNOWN", {"traceback": traceback.format_exc()}, True
        logger.exception(f"Unexpected error: {error}")

    if not show_user_message:
        return

    text = message or user_message(error)
    if isinstance(error, StorageError):
        st.warning(text)
    elif recoverable:
        st.error(text)
    else:
        st.error(f"{text} The dashboard cannot continue until this is fixed.")

    if details and st.session_state.get("debug_mode", False):
        with st.expander(f"Error details ({code})", expanded=False):
            st.json(details)


def show_result(result: Any, success_message: Optional[str] = None) -> None:
    """
    Render the signal carried by a SyncResult.

    "ok" is silent unless ``success_message`` is given, so plain page loads do
    not flash a success box. Attached warnings are always shown.
    """
    status = getattr(result, "status", None)
    message = getattr(result, "message", "") or ""

    if status == "ok":
        if success_message:
            st.success(success_message)
    elif status in RESULT_STYLES:
        kind, icon, fallback = RESULT_STYLES[status]
        getattr(st, kind)(f"{icon} {message or fallback}")

    for warning in getattr(result, "warnings", None) or []:
        st.warning(warning)


class ErrorContext:
    """
    Block whose errors are logged and shown instead of stopping the page.

    Usage:
        with ErrorContext("Building delivery note"):
            pdf = screen.delivery_note(record)
    """

    def __init__(self, operation: str, reraise: bool = False):
        self.operation = operation
        self.reraise = reraise
        self.failed = False

    def __enter__(self) -> ErrorContext:
        logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            return False

        self.failed = True
        if isinstance(exc_val, InventoryError):
            handle_error(exc_val)
        else:
            handle_error(exc_val, message=f"{self.operation} failed: {exc_val}")
        return not self.reraise
