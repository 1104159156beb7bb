# =============================================================================
# inventory_core/offline/sync_coordinator.py
# Read-through cache, write-with-queue fallback, replay on reconnect
# =============================================================================
"""
SyncCoordinator - the only component that touches the remote store, the local
cache and the offline write queue.

Per resource it keeps:
- the confirmed list (what the backend acknowledged; mirrored to the cache)
- a LIVE/DEGRADED state

What a screen sees is the confirmed list with the pending queue entries laid
over it, so an offline edit stays visible (and flagged) until it is replayed.

One coordinator is shared by every Streamlit session in the process; public
operations hold a re-entrant lock, so they run one at a time.

Every public operation returns a SyncResult instead of raising:
    ok             remote call succeeded
    degraded       backend unreachable, list served from the local cache
    saved_offline  write queued, will be sent on reconnect
    not_found      record no longer exists on the backend, list refreshed
    failed         payload rejected (by the schema or the backend), nothing queued
"""

from __future__ import annotations
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from inventory_core.domain.records import Record, new_local_id
from inventory_core.domain.resources import get_schema
from inventory_core.errors import InventoryError, NetworkError, NotFoundError, ValidationError
from inventory_core.logging import LogContext
from inventory_core.offline.connection_manager import ConnectionManager, ConnectionState
from inventory_core.offline.local_cache import LocalCache
from inventory_core.offline.write_queue import OfflineWriteQueue, QueuedWrite, WriteKind

logger = logging.getLogger(__name__)


class ResourceState(Enum):
    """Sync state of one resource."""
    LIVE = "live"               # Last remote call succeeded and nothing is queued
    DEGRADED = "degraded"       # Backend unreachable, or writes still queued


class SyncStatus:
    """Values of SyncResult.status."""
    OK = "ok"
    DEGRADED = "degraded"
    SAVED_OFFLINE = "saved_offline"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Outcome of one coordinator operation."""
    status: str
    resource: str
    records: List[Record] = field(default_factory=list)
    record: Optional[Record] = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)
    pending_count: int = 0
    fetched_at: Optional[datetime] = None
    error: Optional[InventoryError] = None

    def __bool__(self) -> bool:
        return self.status in (SyncStatus.OK, SyncStatus.SAVED_OFFLINE)

    @property
    def is_degraded(self) -> bool:
        return self.status == SyncStatus.DEGRADED

    @property
    def saved_offline(self) -> bool:
        return self.status == SyncStatus.SAVED_OFFLINE


@dataclass
class SyncReport:
    """Replay outcome for one resource."""
    resource: str
    applied: int = 0
    rejected: List[str] = field(default_factory=list)
    remaining: int = 0
    error: Optional[str] = None


@dataclass
class SyncSummary:
    """Replay outcome over every resource with pending writes."""
    reports: List[SyncReport] = field(default_factory=list)
    finished_at: datetime = field(default_factory=datetime.now)

    @property
    def applied(self) -> int:
        return sum(r.applied for r in self.reports)

    @property
    def rejected(self) -> List[str]:
        return [message for r in self.reports for message in r.rejected]

    @property
    def remaining(self) -> int:
        return sum(r.remaining for r in self.reports)

    @property
    def message(self) -> str:
        if not self.reports:
            return "Nothing to sync"
        parts = [f"Synced {self.applied} pending change{'s' if self.applied != 1 else ''}"]
        if self.rejected:
            parts.append(f"{len(self.rejected)} rejected by the server")
        if self.remaining:
            parts.append(f"{self.remaining} still waiting")
        return ", ".join(parts)


class SyncCoordinator:
    """
    Offline-first access to every inventory resource.

    Usage:
        coordinator = build_coordinator(config)
        result = coordinator.read("dispatches")
        result = coordinator.create("dispatches", form_values)
        if result.saved_offline:
            ...
    """

    def __init__(
        self,
        remote,
        cache: LocalCache,
        queue: OfflineWriteQueue,
        connection: Optional[ConnectionManager] = None,
    ):
        self.remote = remote
        self.cache = cache
        self.queue = queue
        self.connection = connection

        self._confirmed: Dict[str, List[Record]] = {}
        self._states: Dict[str, ResourceState] = {}
        self._fetched_at: Dict[str, Optional[datetime]] = {}
        self._id_map: Dict[str, str] = {}           # local_id -> server id of replayed creates
        self._rejected: List[str] = []              # replay rejections not yet reported
        self._depth = 0
        self._lock = threading.RLock()
        self._reconnect_pending = False
        self._last_summary: Optional[SyncSummary] = None

        if connection is not None:
            connection.register_callback(self._on_connection_change)

    # =========================================================================
    # STATE
    # =========================================================================

    def state(self, resource: str) -> ResourceState:
        """DEGRADED until a remote call for the resource has succeeded."""
        with self._lock:
            return self._states.get(resource, ResourceState.DEGRADED)

    def pending_count(self, resource: Optional[str] = None) -> int:
        if resource is None:
            return self.queue.total_pending()
        return self.queue.count(resource)

    def records(self, resource: str) -> List[Record]:
        """Current list without contacting the backend."""
        with self._lock:
            return self._overlay(resource)

    def pop_sync_summary(self) -> Optional[SyncSummary]:
        """Last replay summary, returned once (for the completion toast)."""
        with self._lock:
            summary, self._last_summary = self._last_summary, None
        return summary

    def status_display(self) -> Dict[str, Any]:
        """Get status information for UI display."""
        connection = self.connection.get_status_display() if self.connection else {}
        with self._lock:
            return {
                "connection": connection.get("status", "unknown"),
                "last_online": connection.get("last_online"),
                "error": connection.get("error"),
                "pending": self.pending_count(),
                "pending_by_resource": {r: self.queue.count(r) for r in self.queue.resources_with_pending()},
                "states": {r: s.value for r, s in self._states.items()},
                "durable_storage": self.cache.storage.is_durable,
            }

    def _set_state(self, resource: str, remote_ok: bool) -> None:
        live = remote_ok and self.queue.is_empty(resource)
        new_state = ResourceState.LIVE if live else ResourceState.DEGRADED
        old_state = self._states.get(resource)
        self._states[resource] = new_state
        if old_state != new_state:
            logger.info(f"{resource}: {old_state.value if old_state else 'new'} -> {new_state.value}")

    def _confirmed_list(self, resource: str) -> List[Record]:
        if resource not in self._confirmed:
            entry = self.cache.get_entry(resource)
            self._confirmed[resource] = list(entry.records) if entry else []
            self._fetched_at[resource] = entry.fetched_at if entry else None
        return self._confirmed[resource]

    def _store_confirmed(self, resource: str, records: List[Record], fetched: bool = False) -> None:
        self._confirmed[resource] = records
        entry = self.cache.put(resource, records)
        if fetched or resource not in self._fetched_at:
            self._fetched_at[resource] = entry.fetched_at

    def _overlay(self, resource: str) -> List[Record]:
        """Confirmed records with queued writes applied, in queue order."""
        records = [Record(fields=dict(r.fields), id=r.id) for r in self._confirmed_list(resource)]

        for entry in self.queue.peek(resource):
            target = entry.record_id or self._id_map.get(entry.local_id or "")
            if entry.kind == WriteKind.CREATE:
                records.insert(0, Record(fields=dict(entry.payload), id=target, local_id=entry.local_id, pending=True))
                continue

            index = self._find(records, target, entry.local_id)
            if index is None:
                continue
            if entry.kind == WriteKind.UPDATE:
                current = records[index]
                records[index] = Record(
                    fields=dict(entry.payload), id=current.id, local_id=current.local_id, pending=True,
                )
            else:
                records.pop(index)
        return records

    @staticmethod
    def _find(records: List[Record], record_id: Optional[str], local_id: Optional[str]) -> Optional[int]:
        for index, record in enumerate(records):
            if record_id is not None and record.id == record_id:
                return index
            if local_id is not None and record.local_id == local_id:
                return index
        return None

    def _result(self, status: str, resource: str, warnings: List[str], **kwargs) -> SyncResult:
        storage_warning = self.cache.storage.pop_warning()
        if storage_warning is not None:
            warnings.append(storage_warning.message)
        return SyncResult(
            status=status,
            resource=resource,
            records=self._overlay(resource),
            warnings=warnings,
            pending_count=self.queue.count(resource),
            fetched_at=self._fetched_at.get(resource),
            **kwargs,
        )

    # =========================================================================
    # CONNECTIVITY
    # =========================================================================

    @contextmanager
    def _operation(self):
        """
        Hold the coordinator lock for one public operation.

        A reconnect seen mid-operation is replayed once the outermost
        operation is done.
        """
        with self._lock:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            if self._depth == 0 and self._reconnect_pending:
                self._reconnect_pending = False
                self.on_reconnected()

    def _on_connection_change(self, state: ConnectionState) -> None:
        if not state.reconnected:
            return
        with self._lock:
            if self._depth:
                self._reconnect_pending = True
                return
        self.on_reconnected()

    def _remote_ok(self) -> None:
        if self.connection is not None:
            self.connection.report_success()

    def _remote_failed(self, resource: str, error: NetworkError) -> None:
        self._set_state(resource, remote_ok=False)
        if self.connection is not None:
            self.connection.report_failure(error)

    # =========================================================================
    # READ
    # =========================================================================

    def read(self, resource: str) -> SyncResult:
        """
        Fetch a resource, falling back to the cache when the backend is down.

        Pending writes for the resource are replayed first, so the fresh list
        already contains them.
        """
        schema = get_schema(resource)
        with self._operation():
            warnings: List[str] = []
            if not self.queue.is_empty(resource):
                warnings.extend(self._drain(resource).rejected)

            try:
                records = self.remote.read(resource)
            except NetworkError as e:
                self._remote_failed(resource, e)
                self._confirmed.pop(resource, None)
                entry = self.cache.get_entry(resource)
                if entry is None or entry.fetched_at is None:
                    message = "Backend unreachable and nothing saved on this device yet"
                else:
                    message = f"Backend unreachable - showing data saved {entry.fetched_at:%d %b %Y %H:%M}"
                logger.warning(f"Read {resource} degraded: {e.message}")
                return self._result(SyncStatus.DEGRADED, resource, warnings, message=message, error=e)
            except NotFoundError as e:
                message = f"{schema.label} is not available on the server (/{schema.endpoint} not found)"
                logger.error(f"Read {resource} failed: {message}")
                return self._result(SyncStatus.FAILED, resource, warnings, message=message, error=e)
            except InventoryError as e:
                logger.error(f"Read {resource} failed: {e}")
                return self._result(SyncStatus.FAILED, resource, warnings, message=e.message, error=e)

            self._store_confirmed(resource, records, fetched=True)
            self._remote_ok()
            self._set_state(resource, remote_ok=True)
            return self._result(SyncStatus.OK, resource, warnings, message=f"Loaded {len(records)} records")

    # =========================================================================
    # WRITES
    # =========================================================================

    def create(self, resource: str, values: Dict[str, Any]) -> SyncResult:
        """Validate and save a new record."""
        return self._write(resource, WriteKind.CREATE, values, None)

    def update(self, resource: str, record: Record, values: Dict[str, Any]) -> SyncResult:
        """Validate and save new field values for an existing record."""
        return self._write(resource, WriteKind.UPDATE, values, record)

    def delete(self, resource: str, record: Record) -> SyncResult:
        """
        Delete a record.

        A record that never reached the backend is dropped from the queue
        without any remote call.
        """
        if record.id is None and record.local_id and record.local_id not in self._id_map:
            with self._operation():
                dropped = self.queue.discard_local(resource, record.local_id)
                return self._result(
                    SyncStatus.OK, resource, [],
                    message="Unsynced record removed" if dropped else "Record was already removed",
                )
        return self._write(resource, WriteKind.DELETE, dict(record.fields), record)

    def _write(
        self,
        resource: str,
        kind: WriteKind,
        values: Dict[str, Any],
        record: Optional[Record],
    ) -> SyncResult:
        schema = get_schema(resource)
        with self._operation():
            warnings: List[str] = []

            payload: Dict[str, Any] = {}
            if kind != WriteKind.DELETE:
                try:
                    payload = schema.validate(values)
                except ValidationError as e:
                    return self._result(SyncStatus.FAILED, resource, warnings, message=e.message, error=e)

            local_id = record.local_id if record else None
            record_id = record.id if record else None

            if not self.queue.is_empty(resource):
                warnings.extend(self._drain(resource).rejected)
            if record_id is None and local_id:
                record_id = self._id_map.get(local_id)

            if kind != WriteKind.CREATE and record_id is None and not self._has_queued(resource, local_id):
                # Its queued create was rejected during replay
                return self._result(
                    SyncStatus.NOT_FOUND, resource, warnings,
                    message="This record was never saved on the server",
                )

            operation = QueuedWrite(
                resource=resource,
                kind=kind,
                payload=payload,
                record_id=record_id,
                local_id=local_id or (new_local_id() if kind == WriteKind.CREATE else None),
            )

            if not self.queue.is_empty(resource) or (kind != WriteKind.CREATE and record_id is None):
                return self._queue(operation, warnings)

            try:
                saved = self._send(operation)
            except NetworkError as e:
                self._remote_failed(resource, e)
                return self._queue(operation, warnings)
            except NotFoundError as e:
                if kind == WriteKind.CREATE:
                    # 404 on the collection itself: nothing to refresh, nothing to queue
                    message = f"{schema.label} is not available on the server (/{schema.endpoint} not found)"
                    logger.error(f"{operation.describe()} failed: {message}")
                    return self._result(SyncStatus.FAILED, resource, warnings, message=message, error=e)
                warnings.append(f"{schema.label}: the record was already removed on the server")
                refreshed = self.read(resource)
                warnings.extend(refreshed.warnings)
                return self._result(SyncStatus.NOT_FOUND, resource, warnings, message=e.message, error=e)
            except ValidationError as e:
                logger.warning(f"{operation.describe()} rejected: {e}")
                return self._result(SyncStatus.FAILED, resource, warnings, message=e.message, error=e)

            self._remote_ok()
            self._set_state(resource, remote_ok=True)
            messages = {
                WriteKind.CREATE: "Saved",
                WriteKind.UPDATE: "Updated",
                WriteKind.DELETE: "Deleted",
            }
            return self._result(SyncStatus.OK, resource, warnings, record=saved, message=messages[kind])

    def _has_queued(self, resource: str, local_id: Optional[str]) -> bool:
        return local_id is not None and any(e.local_id == local_id for e in self.queue.peek(resource))

    def _queue(self, operation: QueuedWrite, warnings: List[str]) -> SyncResult:
        resource = operation.resource
        self.queue.enqueue(resource, operation)
        self._set_state(resource, remote_ok=False)

        records = self._overlay(resource)
        index = self._find(records, operation.record_id, operation.local_id)
        record = records[index] if index is not None else None
        return self._result(
            SyncStatus.SAVED_OFFLINE, resource, warnings,
            record=record,
            message="Saved offline - will sync when the connection is back",
        )

    def _send(self, operation: QueuedWrite) -> Optional[Record]:
        """Apply one write to the backend and merge the answer into the confirmed list."""
        resource = operation.resource
        confirmed = list(self._confirmed_list(resource))

        if operation.kind == WriteKind.CREATE:
            saved = self.remote.create(resource, Record(fields=dict(operation.payload)))
            if operation.local_id:
                self._id_map[operation.local_id] = saved.id
                self.queue.rebind(resource, operation.local_id, saved.id)
            confirmed.insert(0, saved)
        else:
            record_id = operation.record_id or self._id_map.get(operation.local_id or "")
            if record_id is None:
                raise NotFoundError(
                    f"No server identifier for {operation.describe()}",
                    resource=resource, record_id=operation.local_id,
                )
            index = self._find(confirmed, record_id, None)
            if operation.kind == WriteKind.UPDATE:
                saved = self.remote.update(resource, record_id, Record(fields=dict(operation.payload)))
                if index is None:
                    confirmed.insert(0, saved)
                else:
                    confirmed[index] = saved
            else:
                self.remote.delete(resource, record_id)
                saved = None
                if index is not None:
                    confirmed.pop(index)

        self._store_confirmed(resource, confirmed)
        return saved

    # =========================================================================
    # REPLAY
    # =========================================================================

    def _apply_queued(self, operation: QueuedWrite) -> Optional[Record]:
        """
        Replay one queued write.

        Network failures propagate and stop the drain. A write the server
        rejects, or whose record is gone, is dropped with a warning.
        """
        try:
            return self._send(operation)
        except (ValidationError, NotFoundError) as e:
            label = get_schema(operation.resource).label
            if isinstance(e, NotFoundError) and operation.kind == WriteKind.DELETE:
                # Already gone: the delete has nothing left to do
                confirmed = self._confirmed_list(operation.resource)
                index = self._find(confirmed, operation.record_id, None)
                if index is not None:
                    self._store_confirmed(operation.resource, confirmed[:index] + confirmed[index + 1:])
                return None

            followups = []
            if operation.kind == WriteKind.CREATE and operation.local_id:
                # Later edits of a record that was never created cannot be replayed
                followups = [
                    entry for entry in self.queue.discard_local(operation.resource, operation.local_id)
                    if entry.op_id != operation.op_id
                ]

            warning = f"{label}: a change saved offline was rejected by the server and dropped ({e.message})"
            if followups:
                warning += (
                    f"; {len(followups)} later change{'s' if len(followups) != 1 else ''}"
                    f" to the same record {'were' if len(followups) != 1 else 'was'} discarded too"
                )
            logger.warning(f"Dropping {operation.describe()}: {e}")
            self._rejected.append(warning)
            return None

    def _drain(self, resource: str) -> SyncReport:
        rejected_before = len(self._rejected)
        report = self.queue.drain(resource, self._apply_queued)

        # Dropped entries leave the queue like applied ones
        rejected = self._rejected[rejected_before:]
        del self._rejected[rejected_before:]
        summary = SyncReport(
            resource=resource,
            applied=len(report.applied) - len(rejected),
            rejected=rejected,
            remaining=report.remaining,
        )
        if report.error is not None:
            summary.error = str(report.error)
            if isinstance(report.error, NetworkError):
                self._remote_failed(resource, report.error)
            else:
                logger.error(f"Replay of {resource} stopped: {report.error}")
        elif report.applied:
            self._remote_ok()
        return summary

    def sync_pending(self) -> SyncSummary:
        """
        Replay every resource's queue, oldest write first.

        A resource whose queue empties is re-read so it can return to LIVE.
        """
        summary = SyncSummary()
        with self._operation():
            resources = self.queue.resources_with_pending()
            if not resources:
                return summary

            with LogContext(logger, f"Replaying pending writes for {len(resources)} resources"):
                for resource in resources:
                    report = self._drain(resource)
                    if report.remaining == 0:
                        self.read(resource)
                    summary.reports.append(report)

            logger.info(f"Sync finished: {summary.message}")
            self._last_summary = summary
        return summary

    def on_reconnected(self) -> SyncSummary:
        """Backend became reachable again."""
        logger.info("Connection restored - replaying pending writes")
        return self.sync_pending()


def build_coordinator(config, session=None) -> SyncCoordinator:
    """
    Wire a coordinator from configuration.

    Args:
        config: InventoryConfig
        session: Optional requests.Session (tests)
    """
    from inventory_core.api.rest_store import RestStoreClient
    from inventory_core.offline.local_storage import LocalStorage

    remote = RestStoreClient.from_config(config, session=session)
    storage = LocalStorage(config.storage_path)
    storage.initialize()

    return SyncCoordinator(
        remote=remote,
        cache=LocalCache(storage, namespace=config.namespace),
        queue=OfflineWriteQueue(storage, namespace=config.namespace),
        connection=ConnectionManager(probe=remote.ping, check_interval=config.check_interval),
    )
