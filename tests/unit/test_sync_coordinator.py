# =============================================================================
# tests/unit/test_sync_coordinator.py
# Unit Tests for SyncCoordinator
# =============================================================================

import threading
from datetime import datetime

import pytest

from inventory_core.domain.records import Record
from inventory_core.domain.resources import PRODUCTION_BATCHES, STOCKS
from inventory_core.errors import NotFoundError
from inventory_core.offline.connection_manager import ConnectionManager
from inventory_core.offline.local_cache import LocalCache
from inventory_core.offline.local_storage import LocalStorage
from inventory_core.offline.sync_coordinator import ResourceState, SyncCoordinator, SyncStatus
from inventory_core.offline.write_queue import OfflineWriteQueue, WriteKind


class TestRead:
    """Read-through cache"""

    def test_state_starts_degraded(self, coordinator):
        assert coordinator.state(STOCKS) == ResourceState.DEGRADED

    def test_online_read(self, coordinator, remote, cache):
        remote.seed(STOCKS, {"name": "Salt", "quantity": 3})

        result = coordinator.read(STOCKS)

        assert result.status == SyncStatus.OK
        assert result
        assert [r.get("name") for r in result.records] == ["Salt"]
        assert coordinator.state(STOCKS) == ResourceState.LIVE
        assert cache.get(STOCKS)[0].get("name") == "Salt"

    def test_offline_read_serves_cache(self, coordinator, remote, cache):
        cache.put(STOCKS, [Record(fields={"name": "Salt"}, id="1")], fetched_at=datetime(2025, 7, 29, 8, 15))
        remote.online = False

        result = coordinator.read(STOCKS)

        assert result.is_degraded
        assert not result
        assert result.records == [Record(fields={"name": "Salt"}, id="1")]
        assert "29 Jul 2025 08:15" in result.message
        assert result.fetched_at == datetime(2025, 7, 29, 8, 15)
        assert coordinator.state(STOCKS) == ResourceState.DEGRADED

    def test_offline_read_without_cache(self, coordinator, remote):
        remote.online = False
        result = coordinator.read(STOCKS)
        assert result.is_degraded
        assert result.records == []
        assert "nothing saved" in result.message

    def test_failed_read_marks_connection_offline(self, coordinator, remote):
        remote.online = False
        coordinator.read(STOCKS)
        assert coordinator.connection.is_offline
        assert coordinator.status_display()["connection"] == "offline"

    def test_unknown_resource_raises(self, coordinator):
        with pytest.raises(KeyError):
            coordinator.read("spaceships")

    def test_missing_endpoint_on_read(self, coordinator, remote, monkeypatch):
        def missing(resource):
            raise NotFoundError("Not found", resource=resource)
        monkeypatch.setattr(remote, "read", missing)

        result = coordinator.read(PRODUCTION_BATCHES)

        assert result.status == SyncStatus.FAILED
        assert "/production-batches not found" in result.message
        assert coordinator.state(PRODUCTION_BATCHES) == ResourceState.DEGRADED


class TestWrites:
    """Create, update and delete"""

    def test_create_online(self, coordinator, remote, stock_form):
        result = coordinator.create(STOCKS, stock_form)

        assert result.status == SyncStatus.OK
        assert result.record.id == "srv-1"
        assert result.record.is_confirmed
        assert remote.rows(STOCKS)[0]["name"] == "Packaging film"
        assert coordinator.state(STOCKS) == ResourceState.LIVE

    def test_invalid_payload_is_never_sent_or_queued(self, coordinator, remote, stock_form):
        del stock_form["name"]

        result = coordinator.create(STOCKS, stock_form)

        assert result.status == SyncStatus.FAILED
        assert result.error.details["field"] == "name"
        assert remote.calls == []
        assert coordinator.pending_count(STOCKS) == 0

    def test_create_offline_is_queued(self, coordinator, remote, stock_form):
        remote.online = False

        result = coordinator.create(STOCKS, stock_form)

        assert result.saved_offline
        assert result
        assert result.pending_count == 1
        assert result.record.id is None
        assert not result.record.is_confirmed
        assert result.records[0].sync_label == "⏳ Not yet synced"
        assert coordinator.state(STOCKS) == ResourceState.DEGRADED

    def test_offline_writes_survive_restart(self, make_coordinator, remote, stock_form):
        remote.online = False
        make_coordinator().create(STOCKS, stock_form)

        restarted = make_coordinator()

        assert restarted.pending_count() == 1
        assert [r.get("name") for r in restarted.records(STOCKS)] == ["Packaging film"]

    def test_write_waits_behind_queued_writes(self, coordinator, remote, stock_form):
        remote.online = False
        coordinator.create(STOCKS, stock_form)
        result = coordinator.create(STOCKS, dict(stock_form, name="Labels"))

        assert result.saved_offline
        assert [e.payload["name"] for e in coordinator.queue.peek(STOCKS)] == ["Packaging film", "Labels"]

    def test_update_online(self, coordinator, remote, stock_form):
        created = coordinator.create(STOCKS, stock_form).record

        result = coordinator.update(STOCKS, created, dict(stock_form, quantity=40))

        assert result.status == SyncStatus.OK
        assert remote.rows(STOCKS)[0]["quantity"] == 40
        assert result.records[0].get("quantity") == 40

    def test_update_of_removed_record(self, coordinator, remote, stock_form):
        created = coordinator.create(STOCKS, stock_form).record
        remote.data[STOCKS] = []

        result = coordinator.update(STOCKS, created, dict(stock_form, quantity=40))

        assert result.status == SyncStatus.NOT_FOUND
        assert result.records == []
        assert any("already removed" in w for w in result.warnings)
        assert coordinator.pending_count(STOCKS) == 0

    def test_update_offline_shows_pending_change(self, coordinator, remote, stock_form):
        created = coordinator.create(STOCKS, stock_form).record
        remote.online = False

        result = coordinator.update(STOCKS, created, dict(stock_form, quantity=40))

        assert result.saved_offline
        assert result.records[0].id == created.id
        assert result.records[0].get("quantity") == 40
        assert result.records[0].sync_label == "⏳ Change pending"

    def test_delete_online(self, coordinator, remote, stock_form):
        created = coordinator.create(STOCKS, stock_form).record
        result = coordinator.delete(STOCKS, created)
        assert result.status == SyncStatus.OK
        assert result.records == []
        assert remote.rows(STOCKS) == []

    def test_delete_unsynced_record_makes_no_remote_call(self, coordinator, remote, stock_form):
        remote.online = False
        pending = coordinator.create(STOCKS, stock_form).record
        remote.online = True
        remote.calls.clear()

        result = coordinator.delete(STOCKS, pending)

        assert result.status == SyncStatus.OK
        assert result.records == []
        assert remote.calls == []
        assert coordinator.pending_count() == 0

    def test_server_rejection_is_not_queued(self, coordinator, remote, stock_form):
        remote.reject_on.append(("create", STOCKS))
        result = coordinator.create(STOCKS, stock_form)
        assert result.status == SyncStatus.FAILED
        assert coordinator.pending_count() == 0

    def test_create_on_missing_endpoint_fails(self, coordinator, remote, stock_form, monkeypatch):
        def missing(resource, record):
            raise NotFoundError("Not found", resource=resource)
        monkeypatch.setattr(remote, "create", missing)

        result = coordinator.create(STOCKS, stock_form)

        assert result.status == SyncStatus.FAILED
        assert "not available on the server" in result.message
        assert not any("already removed" in w for w in result.warnings)
        assert ("read", STOCKS) not in remote.calls
        assert coordinator.pending_count() == 0


class TestReplay:
    """Draining queued writes on reconnect"""

    def test_reconnect_replays_queue(self, coordinator, remote, stock_form):
        remote.online = False
        coordinator.create(STOCKS, stock_form)
        remote.online = True

        coordinator.connection.check_connection()

        assert coordinator.pending_count() == 0
        assert coordinator.state(STOCKS) == ResourceState.LIVE
        records = coordinator.records(STOCKS)
        assert records[0].id == "srv-1"
        assert records[0].is_confirmed
        summary = coordinator.pop_sync_summary()
        assert summary.applied == 1
        assert summary.message == "Synced 1 pending change"
        assert coordinator.pop_sync_summary() is None

    def test_update_of_offline_created_record(self, coordinator, remote, stock_form):
        remote.online = False
        pending = coordinator.create(STOCKS, stock_form).record
        coordinator.update(STOCKS, pending, dict(stock_form, quantity=99))
        remote.online = True

        summary = coordinator.sync_pending()

        assert summary.applied == 2
        assert remote.rows(STOCKS) == [dict(stock_form, quantity=99)]
        assert [c[0] for c in remote.calls if c[0] != "read"] == ["create", "create", "create", "update"]

    def test_next_write_after_reconnect_drains_first(self, coordinator, remote, stock_form):
        remote.online = False
        coordinator.create(STOCKS, stock_form)
        remote.online = True

        result = coordinator.create(STOCKS, dict(stock_form, name="Labels"))

        assert result.status == SyncStatus.OK
        assert [row["name"] for row in remote.rows(STOCKS)] == ["Labels", "Packaging film"]
        assert [r.get("name") for r in coordinator.records(STOCKS)] == ["Labels", "Packaging film"]
        assert coordinator.pending_count() == 0

    def test_rejected_replay_is_dropped_with_warning(self, coordinator, remote, stock_form):
        remote.online = False
        pending = coordinator.create(STOCKS, stock_form).record
        coordinator.update(STOCKS, pending, dict(stock_form, quantity=5))
        remote.online = True
        remote.reject_on.append(("create", STOCKS))

        summary = coordinator.sync_pending()

        assert summary.applied == 0
        assert len(summary.rejected) == 1
        assert "1 later change to the same record was discarded too" in summary.rejected[0]
        assert "rejected by the server" in summary.message
        assert coordinator.pending_count() == 0
        assert remote.rows(STOCKS) == []
        assert coordinator.state(STOCKS) == ResourceState.LIVE

    def test_queued_delete_of_vanished_record_counts_as_done(self, coordinator, remote, stock_form):
        created = coordinator.create(STOCKS, stock_form).record
        remote.online = False
        coordinator.delete(STOCKS, created)
        remote.data[STOCKS] = []
        remote.online = True

        summary = coordinator.sync_pending()

        assert summary.rejected == []
        assert coordinator.pending_count() == 0
        assert coordinator.records(STOCKS) == []

    def test_replay_stops_on_network_failure(self, coordinator, remote, stock_form):
        remote.online = False
        coordinator.create(STOCKS, stock_form)
        coordinator.create(STOCKS, dict(stock_form, name="Labels"))
        remote.online = True
        remote.fail_on.append(("create", STOCKS))

        summary = coordinator.sync_pending()

        assert summary.applied == 0
        assert summary.remaining == 2
        assert coordinator.queue.peek(STOCKS)[0].kind == WriteKind.CREATE
        assert coordinator.state(STOCKS) == ResourceState.DEGRADED

    def test_nothing_to_sync(self, coordinator, remote):
        summary = coordinator.sync_pending()
        assert summary.reports == []
        assert summary.message == "Nothing to sync"
        assert remote.calls == []
        assert coordinator.pop_sync_summary() is None


class TestStorageFailure:
    """Degraded local storage is reported, not fatal"""

    def test_storage_warning_reaches_result(self, remote, tmp_path, stock_form):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        storage = LocalStorage(blocker / "inventory.db")
        coordinator = SyncCoordinator(
            remote=remote,
            cache=LocalCache(storage, namespace="test"),
            queue=OfflineWriteQueue(storage, namespace="test"),
        )

        result = coordinator.create(STOCKS, stock_form)

        assert result.status == SyncStatus.OK
        assert any("memory" in w for w in result.warnings)
        assert coordinator.status_display()["durable_storage"] is False


class TestSharedBetweenSessions:
    """One coordinator used from several session threads"""

    @staticmethod
    def _shared(remote, path):
        storage = LocalStorage(path)
        return SyncCoordinator(
            remote=remote,
            cache=LocalCache(storage, namespace="test"),
            queue=OfflineWriteQueue(storage, namespace="test"),
            connection=ConnectionManager(probe=remote.ping),
        )

    @staticmethod
    def _in_threads(target, count=2):
        errors = []

        def run():
            try:
                target()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=run) for _ in range(count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert errors == []

    def test_offline_creates_are_all_queued(self, remote, tmp_path, stock_form):
        coordinator = self._shared(remote, tmp_path / "inventory.db")
        remote.online = False
        statuses = []

        def session():
            for i in range(100):
                statuses.append(coordinator.create(STOCKS, dict(stock_form, name=f"Item {i}")).status)

        self._in_threads(session)

        assert statuses.count(SyncStatus.SAVED_OFFLINE) == 200
        assert coordinator.pending_count(STOCKS) == 200
        assert len(coordinator.records(STOCKS)) == 200

    def test_concurrent_sync_replays_each_write_once(self, remote, tmp_path, stock_form):
        coordinator = self._shared(remote, tmp_path / "inventory.db")
        remote.online = False
        for i in range(20):
            coordinator.create(STOCKS, dict(stock_form, name=f"Item {i}"))
        remote.online = True

        self._in_threads(coordinator.sync_pending, count=4)

        assert coordinator.pending_count() == 0
        assert sorted(row["name"] for row in remote.rows(STOCKS)) == sorted(f"Item {i}" for i in range(20))
        assert all(r.is_confirmed for r in coordinator.records(STOCKS))
