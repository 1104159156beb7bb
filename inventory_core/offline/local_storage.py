# =============================================================================
# inventory_core/offline/local_storage.py
# Durable key -> text storage backed by SQLite
# =============================================================================
"""
LocalStorage - the on-device persistence used by the cache and the write queue.

Features:
- Single SQLite file, one ``kv_store`` table
- Keys are ``<namespace>:<purpose>:<resource>``
- Each ``set`` is one committed statement, so a value is replaced atomically
- Safe to share between Streamlit session threads: every operation holds
  one re-entrant lock
- Falls back to an in-memory dict for the rest of the session when the
  database cannot be opened or written; the failure is reported once
"""

from __future__ import annotations
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from inventory_core.errors import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Key/text store that survives restarts.

    Usage:
        storage = LocalStorage(Path("local_data/inventory.db"))
        storage.set("bennimix:cache:stocks", "[...]")
        text = storage.get("bennimix:cache:stocks")
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Initialize local storage.

        Args:
            db_path: Path to the SQLite file. ``None`` or ``":memory:"`` keeps
                everything in memory (tests, or no writable disk).
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None
        self._memory: Optional[Dict[str, str]] = None
        self._warning: Optional[StorageError] = None
        self._initialized = False
        self._lock = threading.RLock()

        if db_path is None or str(db_path) == ":memory:":
            self._memory = {}
            self._initialized = True

    # =========================================================================
    # CONNECTION
    # =========================================================================

    @property
    def is_durable(self) -> bool:
        """False once storage has degraded to memory (or was never on disk)."""
        return self._memory is None

    def initialize(self) -> None:
        """Create the database file and schema."""
        with self._lock:
            if self._initialized:
                return

            try:
                path = Path(self.db_path)
                path.parent.mkdir(parents=True, exist_ok=True)
                self._connection = sqlite3.connect(str(path), check_same_thread=False)
                self._connection.execute(self.SCHEMA)
                self._connection.commit()
                logger.info(f"Local storage initialized at: {path}")
            except (sqlite3.Error, OSError) as e:
                self._degrade(e, key=None)

            self._initialized = True

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self._connection
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def _degrade(self, error: Exception, key: Optional[str]) -> None:
        """Switch to in-memory storage, carrying over whatever is readable."""
        carried: Dict[str, str] = {}
        if self._connection is not None:
            try:
                carried = dict(self._connection.execute("SELECT key, value FROM kv_store").fetchall())
            except sqlite3.Error:
                pass
            try:
                self._connection.close()
            except sqlite3.Error:
                pass
            self._connection = None

        self._memory = carried
        self._warning = StorageError(
            "Local storage unavailable - offline data is kept in memory for this session only",
            path=str(self.db_path),
            key=key,
            details={"reason": str(error)},
        )
        logger.warning(f"Local storage degraded to memory: {error}")

    def pop_warning(self) -> Optional[StorageError]:
        """Return the storage failure once, then None."""
        with self._lock:
            warning, self._warning = self._warning, None
        return warning

    # =========================================================================
    # KEY / VALUE OPERATIONS
    # =========================================================================

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            self.initialize()
            if self._memory is not None:
                return self._memory.get(key)

            try:
                row = self._connection.execute(
                    "SELECT value FROM kv_store WHERE key = ?", [key]
                ).fetchone()
            except sqlite3.Error as e:
                self._degrade(e, key)
                return self._memory.get(key)
            return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.initialize()
            if self._memory is not None:
                self._memory[key] = value
                return

            try:
                with self.transaction() as conn:
                    conn.execute(
                        """
                        INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                        VALUES (?, ?, ?)
                        """,
                        [key, value, datetime.now().isoformat()],
                    )
            except sqlite3.Error as e:
                self._degrade(e, key)
                self._memory[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self.initialize()
            if self._memory is not None:
                self._memory.pop(key, None)
                return

            try:
                with self.transaction() as conn:
                    conn.execute("DELETE FROM kv_store WHERE key = ?", [key])
            except sqlite3.Error as e:
                self._degrade(e, key)
                self._memory.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            self.initialize()
            if self._memory is not None:
                return sorted(k for k in self._memory if k.startswith(prefix))

            try:
                rows = self._connection.execute(
                    "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
                    [prefix.replace("%", r"\%").replace("_", r"\_") + "%"],
                ).fetchall()
            except sqlite3.Error as e:
                self._degrade(e, None)
                return sorted(k for k in self._memory if k.startswith(prefix))
            return [row[0] for row in rows]

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
                self._initialized = False
