# =============================================================================
# inventory_core/offline/write_queue.py
# Offline Write Queue - durable FIFO of writes that could not reach the backend
# =============================================================================
"""
OfflineWriteQueue - per-resource ordered list of pending create/update/delete.

Rules:
- Entries are appended and replayed strictly in insertion order
- An entry is removed only after it has been applied
- A drain stops at the first entry that fails; it and everything behind it
  stay queued, in the same order, for the next attempt
- Draining an empty queue does nothing and calls nothing
- Every read-modify-write of a queue, and a whole drain, holds the queue
  lock, so two sessions cannot both replay the same head entry
"""

from __future__ import annotations
import json
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging

from inventory_core.offline.local_storage import LocalStorage

logger = logging.getLogger(__name__)

QUEUE_PURPOSE = "pending"


class WriteKind(str, Enum):
    """Kind of queued operation."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class QueuedWrite:
    """A write waiting for the backend."""
    resource: str
    kind: WriteKind
    payload: Dict[str, Any] = field(default_factory=dict)
    record_id: Optional[str] = None     # server identifier, once known
    local_id: Optional[str] = None      # identifier of a record created offline
    op_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    enqueued_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op_id": self.op_id,
            "resource": self.resource,
            "kind": self.kind.value,
            "payload": self.payload,
            "record_id": self.record_id,
            "local_id": self.local_id,
            "enqueued_at": self.enqueued_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> QueuedWrite:
        return cls(
            resource=data["resource"],
            kind=WriteKind(data["kind"]),
            payload=dict(data.get("payload") or {}),
            record_id=data.get("record_id"),
            local_id=data.get("local_id"),
            op_id=data["op_id"],
            enqueued_at=datetime.fromisoformat(data["enqueued_at"]),
        )

    def describe(self) -> str:
        target = self.record_id or self.local_id or "new record"
        return f"{self.kind.value} {self.resource} ({target})"


@dataclass
class DrainReport:
    """Outcome of one drain pass over a resource queue."""
    resource: str
    applied: List[QueuedWrite] = field(default_factory=list)
    failed: Optional[QueuedWrite] = None
    error: Optional[Exception] = None
    remaining: int = 0

    @property
    def completed(self) -> bool:
        return self.failed is None and self.remaining == 0


class OfflineWriteQueue:
    """
    Durable FIFO of pending writes, one list per resource.

    Usage:
        queue = OfflineWriteQueue(storage, namespace="bennimix")
        queue.enqueue("dispatches", QueuedWrite("dispatches", WriteKind.CREATE, payload))
        report = queue.drain("dispatches", apply)
    """

    def __init__(self, storage: LocalStorage, namespace: str = "bennimix"):
        self.storage = storage
        self.namespace = namespace
        self._lock = threading.RLock()

    def _key(self, resource: str) -> str:
        return f"{self.namespace}:{QUEUE_PURPOSE}:{resource}"

    def _load(self, resource: str) -> List[QueuedWrite]:
        with self._lock:
            text = self.storage.get(self._key(resource))
            if not text:
                return []
            try:
                return [QueuedWrite.from_dict(item) for item in json.loads(text)]
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                # A corrupt queue must not be silently replaced: keep the raw text aside
                logger.error(f"Pending writes for {resource} are unreadable: {e}")
                self.storage.set(self._key(resource) + ":corrupt", text)
                self.storage.delete(self._key(resource))
                return []

    def _save(self, resource: str, entries: List[QueuedWrite]) -> None:
        if entries:
            self.storage.set(self._key(resource), json.dumps([e.to_dict() for e in entries], default=str))
        else:
            self.storage.delete(self._key(resource))

    # =========================================================================
    # QUEUE OPERATIONS
    # =========================================================================

    def enqueue(self, resource: str, operation: QueuedWrite) -> QueuedWrite:
        """Append a write to the end of the resource's queue."""
        with self._lock:
            entries = self._load(resource)
            entries.append(operation)
            self._save(resource, entries)
        logger.info(f"Queued offline: {operation.describe()} (pending: {len(entries)})")
        return operation

    def peek(self, resource: str) -> List[QueuedWrite]:
        """All pending writes for a resource, oldest first."""
        return self._load(resource)

    def is_empty(self, resource: str) -> bool:
        return not self._load(resource)

    def count(self, resource: str) -> int:
        return len(self._load(resource))

    def resources_with_pending(self) -> List[str]:
        prefix = f"{self.namespace}:{QUEUE_PURPOSE}:"
        return [
            key[len(prefix):]
            for key in self.storage.keys(prefix)
            if not key.endswith(":corrupt")
        ]

    def total_pending(self) -> int:
        return sum(self.count(resource) for resource in self.resources_with_pending())

    def drain(self, resource: str, apply: Callable[[QueuedWrite], Any]) -> DrainReport:
        """
        Replay queued writes oldest first.

        Args:
            resource: Resource whose queue is drained
            apply: Called with each entry; raising marks the entry as failed

        Returns:
            DrainReport with the applied entries and the first failure, if any
        """
        report = DrainReport(resource=resource)

        with self._lock:
            while True:
                entries = self._load(resource)
                if not entries:
                    break

                head = entries[0]
                try:
                    apply(head)
                except Exception as e:
                    report.failed = head
                    report.error = e
                    logger.warning(f"Replay stopped at {head.describe()}: {e}")
                    break

                # apply may have rebound later entries; reload before removing the head
                entries = [e for e in self._load(resource) if e.op_id != head.op_id]
                self._save(resource, entries)
                report.applied.append(head)

            report.remaining = self.count(resource)

        if report.applied:
            logger.info(
                f"Drained {len(report.applied)} pending writes for {resource} "
                f"({report.remaining} remaining)"
            )
        return report

    def discard_local(self, resource: str, local_id: str) -> List[QueuedWrite]:
        """Drop every entry of a record that never reached the backend."""
        with self._lock:
            entries = self._load(resource)
            dropped = [e for e in entries if e.local_id == local_id and e.record_id is None]
            if dropped:
                self._save(resource, [e for e in entries if e not in dropped])
        if dropped:
            logger.info(f"Discarded {len(dropped)} pending writes for unsynced record {local_id}")
        return dropped

    def rebind(self, resource: str, local_id: str, record_id: str) -> int:
        """Give queued writes of an offline-created record its new server id."""
        with self._lock:
            entries = self._load(resource)
            changed = 0
            for entry in entries:
                if entry.local_id == local_id and entry.record_id is None:
                    entry.record_id = record_id
                    changed += 1
            if changed:
                self._save(resource, entries)
        return changed

    def remove(self, resource: str, op_id: str) -> bool:
        with self._lock:
            entries = self._load(resource)
            kept = [e for e in entries if e.op_id != op_id]
            if len(kept) == len(entries):
                return False
            self._save(resource, kept)
        return True
