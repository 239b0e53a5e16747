"""
HotelOps Storage - Local Object Store & Session Slots
"""
import sqlite3
import json
import logging
import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

COLLECTIONS = ("audits", "incidents", "users", "sops", "templates", "collections")
SETTINGS_TABLE = "settings"
SLOTS_TABLE = "local_slots"


class UnknownCollectionError(KeyError):
    """Raised for a collection name that has no object table."""


def _ts() -> str:
    return datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class ObjectStore:
    """
    Durable storage of named record collections and scalar settings.

    One table per collection, keyed by the record's ``id``; one ``settings``
    table keyed by name. The schema is created lazily on first access.
    """

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        self._schema_ready = False

    def _get_conn(self):
        conn = sqlite3.connect(self.db_path, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    # ================================================================
    # SCHEMA INITIALIZATION
    # ================================================================

    def _ensure_schema(self):
        if self._schema_ready:
            return
        conn = self._get_conn()
        try:
            c = conn.cursor()
            for name in COLLECTIONS:
                c.execute(f"""
                    CREATE TABLE IF NOT EXISTS {name} (
                        id TEXT PRIMARY KEY,
                        position INTEGER NOT NULL,
                        data TEXT NOT NULL
                    )
                """)
            c.execute(f"""
                CREATE TABLE IF NOT EXISTS {SETTINGS_TABLE} (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TEXT
                )
            """)
            conn.commit()
        finally:
            conn.close()
        self._schema_ready = True
        logger.debug(f"[Store] Schema ready at {self.db_path}")

    @staticmethod
    def _check_collection(name: str):
        if name not in COLLECTIONS:
            raise UnknownCollectionError(name)

    # ================================================================
    # COLLECTIONS
    # ================================================================

    def get_all(self, collection: str) -> List[Dict]:
        """Every record in the collection, in saved order. Empty if never written."""
        self._check_collection(collection)
        self._ensure_schema()
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT data FROM {collection} ORDER BY position"
            ).fetchall()
        finally:
            conn.close()
        return [json.loads(r["data"]) for r in rows]

    def save_all(self, collection: str, records: List[Dict]) -> None:
        """Replace the whole collection: clear, then insert every record."""
        self._check_collection(collection)
        self._ensure_schema()
        rows = []
        for pos, record in enumerate(records):
            rid = record.get("id") if isinstance(record, dict) else None
            if not rid:
                raise ValueError(f"Record at position {pos} in {collection!r} has no id")
            rows.append((str(rid), pos, json.dumps(record)))

        conn = self._get_conn()
        try:
            with conn:
                conn.execute(f"DELETE FROM {collection}")
                conn.executemany(
                    f"INSERT OR REPLACE INTO {collection} (id, position, data) VALUES (?, ?, ?)",
                    rows,
                )
        finally:
            conn.close()

    def count(self, collection: str) -> int:
        self._check_collection(collection)
        self._ensure_schema()
        conn = self._get_conn()
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {collection}").fetchone()[0]
        finally:
            conn.close()

    # ================================================================
    # SETTINGS
    # ================================================================

    def get_setting(self, key: str) -> Optional[Any]:
        """Stored value for a setting, or None if never written."""
        self._ensure_schema()
        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT value FROM {SETTINGS_TABLE} WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()
        return json.loads(row["value"]) if row else None

    def save_setting(self, key: str, value: Any) -> None:
        self._ensure_schema()
        conn = self._get_conn()
        try:
            conn.execute(
                f"""INSERT INTO {SETTINGS_TABLE} (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at""",
                (key, json.dumps(value), _ts()),
            )
            conn.commit()
        finally:
            conn.close()


class SessionSlots:
    """
    Immediate-write key/value slots kept outside the object store.

    Used for the current-session user snapshot and the theme preference.
    """

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        self._schema_ready = False

    def _get_conn(self):
        conn = sqlite3.connect(self.db_path, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self):
        if self._schema_ready:
            return
        conn = self._get_conn()
        try:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {SLOTS_TABLE} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()
        self._schema_ready = True

    def get(self, key: str, default: Any = None) -> Any:
        self._ensure_schema()
        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT value FROM {SLOTS_TABLE} WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()
        if not row:
            return default
        try:
            return json.loads(row["value"])
        except ValueError:
            logger.error(f"[Slots] Unreadable value in slot {key!r}, ignoring")
            return default

    def set(self, key: str, value: Any) -> None:
        self._ensure_schema()
        conn = self._get_conn()
        try:
            conn.execute(
                f"""INSERT INTO {SLOTS_TABLE} (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, json.dumps(value)),
            )
            conn.commit()
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        self._ensure_schema()
        conn = self._get_conn()
        try:
            conn.execute(f"DELETE FROM {SLOTS_TABLE} WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()
