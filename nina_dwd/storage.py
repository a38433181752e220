"""Key/value stores for the translation cache and seen warnings."""

import sqlite3
from pathlib import Path
from typing import Dict, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Interface of a byte-valued key/value store."""

    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def set(self, key: str, value: bytes):
        raise NotImplementedError

    def remove(self, key: str):
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-memory store, used by tests and dry runs."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes):
        self._data[key] = value

    def remove(self, key: str):
        self._data.pop(key, None)


class SqliteStore(KeyValueStore):
    """Manages a SQLite database holding key/value pairs."""

    def __init__(self, db_path: str = "data/nina_dwd.sqlite"):
        """Initialize storage with database path."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize the database schema."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.commit()
        conn.close()
        logger.debug(f"Initialized database at {self.db_path}")

    def get(self, key: str) -> Optional[bytes]:
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
        result = cursor.fetchone()
        conn.close()
        return bytes(result[0]) if result is not None else None

    def set(self, key: str, value: bytes):
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT OR REPLACE INTO kv_store (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            (key, value, datetime.now(timezone.utc).isoformat()),
        )
        conn.commit()
        conn.close()
        logger.debug(f"Stored key {key[:32]}")

    def remove(self, key: str):
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
        conn.close()

    def get_count(self) -> int:
        """Get total count of stored keys."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("SELECT COUNT(*) FROM kv_store")
        count = cursor.fetchone()[0]
        conn.close()
        return count
