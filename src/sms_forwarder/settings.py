"""SQLite-backed settings store and the sent/hidden SMS id tracker."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path

from .constants import (
    KEY_ACCESS_TOKEN,
    KEY_EMAIL,
    KEY_LAST_FETCH_TIMESTAMP,
    KEY_PASSWORD,
    KEY_SENDER_LIST,
    KEY_SENT_SMS_IDS,
    KEY_SERVER_URL,
    SETTINGS_DB_PATH,
)
from .errors import PersistenceError

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""


class SettingsStore:
    """Persistent key/value settings.

    All reads default to an empty string (or 0) when a key is absent.
    The connection is shared across worker threads, so every access
    goes through a lock.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or SETTINGS_DB_PATH
        self.db_path = Path(self.db_path)
        self._lock = threading.Lock()
        # Held across read-modify-write sequences such as SentSmsTracker.add
        self.update_lock = threading.Lock()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_CREATE_TABLES_SQL)
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Cannot open settings store: {exc}") from exc

    # --- raw access ---

    def get(self, key: str, default: str = "") -> str:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT value FROM settings WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot read {key}: {exc}") from exc
        if row is None or row["value"] is None:
            return default
        return row["value"]

    def set(self, key: str, value: str) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot write {key}: {exc}") from exc

    # --- typed accessors ---

    @property
    def server_url(self) -> str:
        return self.get(KEY_SERVER_URL)

    def save_server_url(self, url: str) -> None:
        self.set(KEY_SERVER_URL, url)

    @property
    def email(self) -> str:
        return self.get(KEY_EMAIL)

    def save_email(self, email: str) -> None:
        self.set(KEY_EMAIL, email)

    @property
    def password(self) -> str:
        return self.get(KEY_PASSWORD)

    def save_password(self, password: str) -> None:
        self.set(KEY_PASSWORD, password)

    @property
    def sender_list(self) -> str:
        return self.get(KEY_SENDER_LIST)

    def save_sender_list(self, sender_list: str) -> None:
        self.set(KEY_SENDER_LIST, sender_list)

    @property
    def access_token(self) -> str:
        return self.get(KEY_ACCESS_TOKEN)

    def save_access_token(self, token: str) -> None:
        self.set(KEY_ACCESS_TOKEN, token)

    @property
    def last_fetch_timestamp(self) -> int:
        value = self.get(KEY_LAST_FETCH_TIMESTAMP)
        try:
            return int(value) if value else 0
        except ValueError:
            return 0

    def save_last_fetch_timestamp(self, timestamp: int) -> None:
        self.set(KEY_LAST_FETCH_TIMESTAMP, str(timestamp))

    def get_info(self) -> dict:
        """Return a summary of stored settings with the password masked."""
        return {
            "server_url": self.server_url,
            "email": self.email,
            "password": "*" * len(self.password),
            "sender_list": self.sender_list,
            "has_token": bool(self.access_token),
            "last_fetch_timestamp": self.last_fetch_timestamp,
            "excluded_count": len(SentSmsTracker(self).read_all()),
        }

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # --- context manager ---

    def __enter__(self) -> SettingsStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()


class SentSmsTracker:
    """Append-only set of SMS ids that were sent or hidden.

    Persisted as a single comma-joined string.
    """

    def __init__(self, store: SettingsStore) -> None:
        self._store = store

    def read_all(self) -> set[str]:
        raw = self._store.get(KEY_SENT_SMS_IDS)
        if not raw:
            return set()
        return set(raw.split(","))

    def add(self, sms_id: str) -> None:
        with self._store.update_lock:
            raw = self._store.get(KEY_SENT_SMS_IDS)
            ids = raw.split(",") if raw else []
            # dict.fromkeys keeps first-seen order
            ids = list(dict.fromkeys([*ids, sms_id]))
            self._store.set(KEY_SENT_SMS_IDS, ",".join(ids))
