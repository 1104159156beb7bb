# =============================================================================
# inventory_core/offline/local_cache.py
# Local Cache - last good read of every resource
# =============================================================================
"""
LocalCache - per-resource snapshot of the last successful remote read.

A snapshot is always written whole (one JSON document per resource), never
patched record by record. There is no expiry: when the backend is down a
stale list is better than an empty screen.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import logging

from inventory_core.domain.records import Record
from inventory_core.offline.local_storage import LocalStorage

logger = logging.getLogger(__name__)

CACHE_PURPOSE = "cache"


@dataclass
class CacheEntry:
    """Snapshot of one resource."""
    resource: str
    records: List[Record] = field(default_factory=list)
    fetched_at: Optional[datetime] = None


class LocalCache:
    """
    Mirror of the last good read, keyed by resource name.

    Usage:
        cache = LocalCache(storage, namespace="bennimix")
        cache.put("dispatches", records)
        records = cache.get("dispatches")
    """

    def __init__(self, storage: LocalStorage, namespace: str = "bennimix"):
        self.storage = storage
        self.namespace = namespace

    def _key(self, resource: str) -> str:
        return f"{self.namespace}:{CACHE_PURPOSE}:{resource}"

    def get_entry(self, resource: str) -> Optional[CacheEntry]:
        """Full snapshot with its timestamp, or None if never populated."""
        text = self.storage.get(self._key(resource))
        if text is None:
            return None

        try:
            data = json.loads(text)
            return CacheEntry(
                resource=resource,
                records=[Record.from_storage(item) for item in data.get("records", [])],
                fetched_at=datetime.fromisoformat(data["fetched_at"]) if data.get("fetched_at") else None,
            )
        except (json.JSONDecodeError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Discarding unreadable cache for {resource}: {e}")
            self.storage.delete(self._key(resource))
            return None

    def get(self, resource: str) -> List[Record]:
        """Cached records, empty list if never populated."""
        entry = self.get_entry(resource)
        return entry.records if entry else []

    def put(self, resource: str, records: List[Record], fetched_at: Optional[datetime] = None) -> CacheEntry:
        """Replace the whole snapshot for a resource."""
        entry = CacheEntry(
            resource=resource,
            records=[Record(fields=dict(r.fields), id=r.id) for r in records],
            fetched_at=fetched_at or datetime.now(),
        )
        document = {
            "resource": resource,
            "fetched_at": entry.fetched_at.isoformat(),
            "records": [r.to_storage() for r in entry.records],
        }
        self.storage.set(self._key(resource), json.dumps(document, default=str))
        logger.debug(f"Cached {len(records)} records for {resource}")
        return entry

    def clear(self, resource: str) -> None:
        self.storage.delete(self._key(resource))

    def cached_resources(self) -> List[str]:
        prefix = f"{self.namespace}:{CACHE_PURPOSE}:"
        return [key[len(prefix):] for key in self.storage.keys(prefix)]
