# =============================================================================
# tests/conftest.py
# Pytest Configuration and Shared Fixtures
# =============================================================================

import pytest
from typing import Dict, List, Optional, Tuple
from unittest.mock import MagicMock

from inventory_core.domain.records import Record
from inventory_core.errors import NetworkError, NotFoundError, ValidationError
from inventory_core.offline.connection_manager import ConnectionManager
from inventory_core.offline.local_cache import LocalCache
from inventory_core.offline.local_storage import LocalStorage
from inventory_core.offline.sync_coordinator import SyncCoordinator
from inventory_core.offline.write_queue import OfflineWriteQueue


# =============================================================================
# FAKE BACKEND
# =============================================================================

class FakeRemoteStore:
    """
    In-memory stand-in for RestStoreClient.

    Records are kept in creation order and listed newest first, the way the
    backend sorts them. Every call is logged in ``calls``.
    """

    def __init__(self):
        self.data: Dict[str, List[Tuple[str, dict]]] = {}
        self.online = True
        self.calls: List[Tuple[str, str]] = []
        self.fail_on: List[Tuple[str, Optional[str]]] = []     # one-shot network failures
        self.reject_on: List[Tuple[str, Optional[str]]] = []   # one-shot validation rejections
        self._next_id = 0

    def _take(self, rules, method, resource) -> bool:
        for i, (m, r) in enumerate(rules):
            if m == method and r in (None, resource):
                rules.pop(i)
                return True
        return False

    def _check(self, method: str, resource: str) -> None:
        self.calls.append((method, resource))
        if not self.online or self._take(self.fail_on, method, resource):
            raise NetworkError("Backend unreachable", resource=resource)
        if self._take(self.reject_on, method, resource):
            raise ValidationError("Rejected by backend", actual="400")

    def _index(self, resource: str, record_id: str) -> int:
        for i, (rid, _) in enumerate(self.data.get(resource, [])):
            if rid == record_id:
                return i
        raise NotFoundError("Record not found", resource=resource, record_id=record_id)

    def seed(self, resource: str, *rows: dict) -> List[str]:
        ids = []
        for fields in rows:
            self._next_id += 1
            record_id = f"srv-{self._next_id}"
            self.data.setdefault(resource, []).append((record_id, dict(fields)))
            ids.append(record_id)
        return ids

    def rows(self, resource: str) -> List[dict]:
        """Current backend rows, newest first, without logging a call."""
        return [dict(fields) for _, fields in reversed(self.data.get(resource, []))]

    def read(self, resource: str) -> List[Record]:
        self._check("read", resource)
        return [Record(fields=dict(f), id=rid) for rid, f in reversed(self.data.get(resource, []))]

    def create(self, resource: str, record: Record) -> Record:
        self._check("create", resource)
        record_id = self.seed(resource, record.to_payload())[0]
        return Record(fields=record.to_payload(), id=record_id)

    def update(self, resource: str, record_id: str, record: Record) -> Record:
        self._check("update", resource)
        index = self._index(resource, record_id)
        self.data[resource][index] = (record_id, record.to_payload())
        return Record(fields=record.to_payload(), id=record_id)

    def delete(self, resource: str, record_id: str) -> None:
        self._check("delete", resource)
        index = self._index(resource, record_id)
        self.data[resource].pop(index)

    def ping(self) -> bool:
        return self.online


# =============================================================================
# OFFLINE LAYER FIXTURES
# =============================================================================

@pytest.fixture
def remote():
    """Fake backend, online"""
    return FakeRemoteStore()


@pytest.fixture
def storage():
    """In-memory local storage"""
    return LocalStorage(None)


@pytest.fixture
def cache(storage):
    return LocalCache(storage, namespace="test")


@pytest.fixture
def queue(storage):
    return OfflineWriteQueue(storage, namespace="test")


@pytest.fixture
def make_coordinator(remote, cache, queue):
    """Factory for coordinators sharing one storage (simulates app restarts)"""
    def _make(with_connection: bool = True) -> SyncCoordinator:
        connection = ConnectionManager(probe=remote.ping) if with_connection else None
        return SyncCoordinator(remote=remote, cache=cache, queue=queue, connection=connection)
    return _make


@pytest.fixture
def coordinator(make_coordinator):
    return make_coordinator()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def raw_material_form():
    """A valid raw material entry"""
    return {
        "productName": "Sorghum",
        "date": "2025-07-29",
        "storeKeeper": "A. Kamara",
        "supervisor": "M. Sesay",
        "location": "Warehouse 1",
        "batchNumber": "B-001",
        "openingBalance": 100,
        "newStock": 20,
        "stockOut": 5,
    }


@pytest.fixture
def dispatch_form():
    """A valid dispatch entry"""
    return {
        "item": "Benni Mix 1kg",
        "quantity": 50,
        "date": "2025-07-30",
        "customer": "Freetown Wholesale",
        "driver": "J. Conteh",
        "vehicle": "AKL 123",
        "vehicleGroup": "Group 3: SUVs, Pickup Jeeps, Mini Buses",
        "fuelCost": 200,
        "perDiemRate": 50,
        "personnelCount": 2,
    }


@pytest.fixture
def stock_form():
    return {
        "name": "Packaging film",
        "quantity": 4,
        "category": "Packaging",
        "unitPrice": 2.5,
        "supplier": "PackCo",
    }


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_session():
    """requests.Session whose request() is configured per test"""
    return MagicMock()

