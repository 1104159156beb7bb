# =============================================================================
# inventory_core/offline/__init__.py
# Offline-First Architecture for the Bennimix Inventory Dashboard
# =============================================================================
"""
Offline-First Architecture Module

Screens keep working when the backend is unreachable: reads fall back to the
last good copy on this device, writes are queued and replayed in order once
the connection is back.

Architecture:
------------
┌─────────────────────────────────────────────────────────────┐
│                    Screen Controllers                        │
└─────────────────────────────────────────────────────────────┘
                            │
                            ▼
┌─────────────────────────────────────────────────────────────┐
│                     SyncCoordinator                          │
│        (read-through cache, queue on failure, replay)        │
└─────────────────────────────────────────────────────────────┘
      │                │                  │                │
      ▼                ▼                  ▼                ▼
┌───────────┐   ┌────────────┐   ┌────────────────┐  ┌─────────────┐
│ RestStore │   │ LocalCache │   │ OfflineWrite-  │  │ Connection- │
│  Client   │   │            │   │ Queue          │  │ Manager     │
└───────────┘   └────────────┘   └────────────────┘  └─────────────┘
                      │                  │
                      ▼                  ▼
                ┌──────────────────────────┐
                │  LocalStorage (SQLite)   │
                └──────────────────────────┘

Usage:
------
from inventory_core.offline import build_coordinator

coordinator = build_coordinator(config)
result = coordinator.read("raw_materials")
if result.is_degraded:
    ...  # show the degraded banner
"""

from inventory_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)
from inventory_core.offline.local_storage import LocalStorage
from inventory_core.offline.local_cache import CacheEntry, LocalCache
from inventory_core.offline.write_queue import (
    DrainReport,
    OfflineWriteQueue,
    QueuedWrite,
    WriteKind,
)
from inventory_core.offline.sync_coordinator import (
    ResourceState,
    SyncCoordinator,
    SyncReport,
    SyncResult,
    SyncStatus,
    SyncSummary,
    build_coordinator,
)

__all__ = [
    # Connection
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    # Storage
    "LocalStorage",
    "CacheEntry",
    "LocalCache",
    # Queue
    "DrainReport",
    "OfflineWriteQueue",
    "QueuedWrite",
    "WriteKind",
    # Coordinator
    "ResourceState",
    "SyncCoordinator",
    "SyncReport",
    "SyncResult",
    "SyncStatus",
    "SyncSummary",
    "build_coordinator",
]
