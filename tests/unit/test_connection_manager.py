# =============================================================================
# tests/unit/test_connection_manager.py
# Unit Tests for ConnectionManager
# =============================================================================

from datetime import datetime, timedelta
from unittest.mock import MagicMock

from inventory_core.offline.connection_manager import ConnectionManager, ConnectionStatus


class TestConnectionChecks:
    """Probe-driven status"""

    def test_initial_status_unknown(self):
        manager = ConnectionManager(probe=lambda: True)
        assert manager.status == ConnectionStatus.UNKNOWN

    def test_probe_success(self):
        manager = ConnectionManager(probe=lambda: True)
        state = manager.check_connection()
        assert state.status == ConnectionStatus.ONLINE
        assert state.last_online is not None

    def test_probe_exception_means_offline(self):
        manager = ConnectionManager(probe=MagicMock(side_effect=OSError("no route")))
        state = manager.check_connection()
        assert manager.is_offline
        assert state.error_message == "no route"
        assert state.consecutive_failures == 1

    def test_check_if_due_respects_interval(self):
        probe = MagicMock(return_value=True)
        manager = ConnectionManager(probe=probe, check_interval=60)

        manager.check_if_due()
        manager.check_if_due()
        assert probe.call_count == 1

        manager.state.last_check = datetime.now() - timedelta(seconds=61)
        manager.check_if_due()
        assert probe.call_count == 2


class TestCallbacks:
    """Status-change notifications"""

    def test_reconnect_after_offline(self):
        online = {"value": False}
        manager = ConnectionManager(probe=lambda: online["value"])
        events = []
        manager.register_callback(lambda state: events.append((state.status, state.reconnected)))

        manager.check_connection()
        online["value"] = True
        manager.check_connection()

        assert events == [
            (ConnectionStatus.OFFLINE, False),
            (ConnectionStatus.ONLINE, True),
        ]

    def test_no_event_without_change(self):
        manager = ConnectionManager(probe=lambda: True)
        callback = MagicMock()
        manager.register_callback(callback)

        manager.check_connection()
        manager.check_connection()
        manager.report_success()

        assert callback.call_count == 1

    def test_reported_failure_and_success(self):
        manager = ConnectionManager(probe=lambda: True)
        manager.report_success()
        callback = MagicMock()
        manager.register_callback(callback)

        manager.report_failure(RuntimeError("timeout"))
        assert manager.is_offline
        manager.report_success()
        assert manager.is_online
        assert manager.state.reconnected
        assert callback.call_count == 2

    def test_failing_callback_does_not_break_others(self):
        manager = ConnectionManager(probe=lambda: True)
        good = MagicMock()
        manager.register_callback(MagicMock(side_effect=ValueError("boom")))
        manager.register_callback(good)

        manager.check_connection()
        good.assert_called_once()

    def test_callback_may_use_the_manager(self):
        """Callbacks run outside the state lock"""
        manager = ConnectionManager(probe=lambda: True)
        seen = []
        manager.register_callback(lambda state: (manager.report_success(), seen.append(manager.status)))

        manager.check_connection()

        assert seen == [ConnectionStatus.ONLINE]

    def test_unregister(self):
        manager = ConnectionManager(probe=lambda: True)
        callback = MagicMock()
        manager.register_callback(callback)
        manager.unregister_callback(callback)
        manager.check_connection()
        callback.assert_not_called()

    def test_status_display(self):
        manager = ConnectionManager(probe=lambda: True)
        manager.force_offline()
        display = manager.get_status_display()
        assert display["status"] == "offline"
        assert display["error"] == "Forced offline"
        assert display["is_online"] is False
