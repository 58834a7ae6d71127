from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol

from smartstock.domain.errors import StorageError

log = logging.getLogger("smartstock.storage")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...
    def set(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...


class SqliteKeyValueStore:
    """Durable key/value documents in a single SQLite table.

    Each value is stored as one JSON document and replaced as a whole on
    every write, so a write is atomic per key.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = str(db_path)

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def init_db(self) -> None:
        try:
            conn = self._conn()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open store at {self.db_path}: {exc}") from exc
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not initialise store: {exc}") from exc
        finally:
            conn.close()

    def get(self, key: str) -> Optional[Any]:
        try:
            conn = self._conn()
            try:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            log.exception("store_read_failed key=%s", key)
            raise StorageError(f"Could not read '{key}': {exc}") from exc

        if row is None:
            return None
        try:
            return json.loads(row[0])
        except ValueError as exc:
            raise StorageError(f"Stored value for '{key}' is not valid JSON.") from exc

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Value for '{key}' is not serializable: {exc}") from exc

        try:
            conn = self._conn()
            try:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                    """,
                    (key, payload, datetime.now().replace(microsecond=0).isoformat(sep=" ")),
                )
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise
            finally:
                conn.close()
        except sqlite3.Error as exc:
            log.exception("store_write_failed key=%s", key)
            raise StorageError(f"Could not write '{key}': {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            conn = self._conn()
            try:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            log.exception("store_delete_failed key=%s", key)
            raise StorageError(f"Could not delete '{key}': {exc}") from exc

    def keys(self) -> list[str]:
        try:
            conn = self._conn()
            try:
                rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not list keys: {exc}") from exc
        return [str(r[0]) for r in rows]
