"""
client/storage.py -- Persisted key-value stores for client-side state.

The authorized client keeps exactly one value here: the session token, under
the well-known key TOKEN_KEY. Login and register write it, logout removes it,
every other request only reads it.

The store is injected into the client rather than held as a module global, so
tests substitute MemoryStorage and the CLI or desktop app uses SQLiteStorage.

Usage:
    storage = SQLiteStorage(Path("~/.sessiongate/state.db").expanduser())
    storage.set(TOKEN_KEY, token)
    storage.get(TOKEN_KEY)      # returns str or None
    storage.remove(TOKEN_KEY)
"""

import sqlite3
from pathlib import Path
from typing import Optional, Protocol

TOKEN_KEY = "auth-token"

_DDL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key     TEXT PRIMARY KEY,
    value   TEXT NOT NULL
);
"""


class Storage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local store. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteStorage:
    """SQLite-backed store that survives restarts, one row per key."""

    def __init__(self, db_path: Path) -> None:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute(_DDL)
        self._conn.commit()

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for key, or None if absent."""
        row = self._conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row is not None else None

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any existing entry."""
        self._conn.execute(
            "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
            (key, value),
        )
        self._conn.commit()

    def remove(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
