# =============================================================================
# inventory_core/offline/connection_manager.py
# Connection Status Detection and Management
# =============================================================================
"""
ConnectionManager - tracks whether the inventory backend is reachable.

Features:
- Probe-based connection checks (default: GET <backend>/ping)
- Failures reported by the sync coordinator mark the backend offline
  without a separate probe
- Event callbacks on status change; the offline/unknown -> online
  transition is the reconnect signal that replays queued writes

Checks run on the caller's thread (the Streamlit script run); there is no
background monitor. Several sessions may share one manager, so state changes
hold a lock and callbacks are called after it is released.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional
import logging
import threading

logger = logging.getLogger(__name__)


class ConnectionStatus(Enum):
    """Reachability of the inventory backend."""
    ONLINE = "online"           # Backend answered
    OFFLINE = "offline"         # Backend unreachable
    CHECKING = "checking"       # Probe in flight
    UNKNOWN = "unknown"         # Not probed yet


@dataclass
class ConnectionState:
    """Last known reachability plus probe bookkeeping."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    previous_status: ConnectionStatus = ConnectionStatus.UNKNOWN
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None

    @property
    def reconnected(self) -> bool:
        """True right after the backend came back."""
        return (
            self.status == ConnectionStatus.ONLINE
            and self.previous_status in (ConnectionStatus.OFFLINE, ConnectionStatus.UNKNOWN)
        )


class ConnectionManager:
    """
    Connection status for one backend.

    Usage:
        manager = ConnectionManager(probe=client.ping)
        manager.register_callback(on_change)
        manager.check_connection()
    """

    def __init__(self, probe: Callable[[], bool], check_interval: float = 30.0):
        """
        Args:
            probe: Returns True when the backend is reachable. Exceptions
                count as unreachable.
            check_interval: Seconds after which ``check_if_due`` probes again
        """
        self._probe = probe
        self.check_interval = check_interval
        self._state = ConnectionState()
        self._settled = ConnectionStatus.UNKNOWN
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[ConnectionState], None]] = []

    @property
    def state(self) -> ConnectionState:
        """Live state object; callbacks receive the same instance."""
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.status == ConnectionStatus.ONLINE

    @property
    def is_offline(self) -> bool:
        return self._state.status == ConnectionStatus.OFFLINE

    def check_connection(self) -> ConnectionState:
        """
        Probe the backend and update state.

        The probe runs outside the lock; callbacks run after it is released.

        Returns:
            Updated ConnectionState
        """
        with self._lock:
            old_status = self._state.status
            self._state.status = ConnectionStatus.CHECKING
            self._state.last_check = datetime.now()

        try:
            reachable = bool(self._probe())
            error = None if reachable else "Backend did not answer"
        except Exception as e:
            reachable = False
            error = str(e)
            logger.debug(f"Connection probe failed: {e}")

        with self._lock:
            if reachable:
                changed = self._mark_online(old_status)
            else:
                changed = self._mark_offline(old_status, error)
        if changed:
            self._notify_callbacks()
        return self._state

    def check_if_due(self) -> ConnectionState:
        """Probe only when the last check is older than ``check_interval``."""
        last = self._state.last_check
        if last is None or datetime.now() - last >= timedelta(seconds=self.check_interval):
            return self.check_connection()
        return self._state

    def report_success(self) -> None:
        """A backend call succeeded."""
        with self._lock:
            if self._state.status != ConnectionStatus.ONLINE:
                changed = self._mark_online(self._state.status)
            else:
                self._state.last_online = datetime.now()
                changed = False
        if changed:
            self._notify_callbacks()

    def report_failure(self, error: Exception) -> None:
        """A backend call failed on connectivity."""
        with self._lock:
            changed = self._mark_offline(self._state.status, str(error))
        if changed:
            self._notify_callbacks()

    def _mark_online(self, old_status: ConnectionStatus) -> bool:
        self._state.status = ConnectionStatus.ONLINE
        self._state.last_online = datetime.now()
        self._state.consecutive_failures = 0
        self._state.error_message = None
        return self._changed(old_status)

    def _mark_offline(self, old_status: ConnectionStatus, error: Optional[str]) -> bool:
        self._state.status = ConnectionStatus.OFFLINE
        self._state.consecutive_failures += 1
        self._state.error_message = error
        return self._changed(old_status)

    def _changed(self, old_status: ConnectionStatus) -> bool:
        # CHECKING is transient; compare against the last settled status
        if old_status == ConnectionStatus.CHECKING:
            old_status = self._settled
        self._settled = self._state.status
        if old_status == self._state.status:
            return False
        self._state.previous_status = old_status
        logger.info(f"Connection status changed: {old_status.value} -> {self._state.status.value}")
        return True

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """
        Call ``callback(state)`` whenever the status changes.

        The sync coordinator registers here to replay queued writes when
        ``state.reconnected`` is true. Registering twice has no effect.
        """
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """Stop notifying ``callback``."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Connection callback {getattr(callback, '__name__', callback)!r} raised: {e}")

    def force_offline(self) -> None:
        """Mark the backend unreachable without probing it."""
        with self._lock:
            changed = self._mark_offline(self._state.status, "Forced offline")
        logger.info("Backend forced offline")
        if changed:
            self._notify_callbacks()

    def get_status_display(self) -> dict:
        """Plain values for the sidebar badge."""
        state = self._state

        def stamp(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "status": state.status.value,
            "is_online": self.is_online,
            "last_check": stamp(state.last_check),
            "last_online": stamp(state.last_online),
            "failures": state.consecutive_failures,
            "error": state.error_message,
        }
