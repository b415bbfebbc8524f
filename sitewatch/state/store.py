"""Key/value document store for process-wide detection state.

Documents are JSON-encoded. ``float("inf")`` (permanent suppressions)
survives the round trip because the stdlib encoder writes ``Infinity``
and the decoder reads it back.
"""

from __future__ import annotations

import abc
import copy
import json
import sqlite3
from pathlib import Path
from typing import Any

import structlog

from sitewatch.state.exceptions import StateCorruptError, StateError

logger = structlog.stdlib.get_logger()

# Document keys
WARNINGS_KEY = "sitewatch_assumptions_detected"
SUPPRESSIONS_KEY = "sitewatch_assumptions_ignored"
BASELINE_KEY = "sitewatch_inline_css_baseline"
RUN_STATE_KEY = "sitewatch_assumptions_run_state"


class KeyValueStore(abc.ABC):
    """Persisted JSON documents addressed by name."""

    @abc.abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded document, or *default* when absent."""

    @abc.abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Replace the document stored under *key*."""

    @abc.abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key* if present."""


class MemoryStore(KeyValueStore):
    """In-process store. Values are deep-copied so callers never share state."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteStore(KeyValueStore):
    """SQLite-backed store — a single ``options`` table of JSON values."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
        return self._conn

    def _init_db(self) -> None:
        conn = self._get_conn()
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS options (
                name TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        try:
            row = self._get_conn().execute(
                "SELECT value FROM options WHERE name = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StateError(f"Failed to read {key!r}: {exc}") from exc
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except ValueError as exc:
            raise StateCorruptError(f"Stored document {key!r} is not valid JSON") from exc

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        try:
            conn = self._get_conn()
            conn.execute(
                "INSERT INTO options (name, value) VALUES (?, ?) "
                "ON CONFLICT(name) DO UPDATE SET value = excluded.value",
                (key, payload),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise StateError(f"Failed to write {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            conn = self._get_conn()
            conn.execute("DELETE FROM options WHERE name = ?", (key,))
            conn.commit()
        except sqlite3.Error as exc:
            raise StateError(f"Failed to delete {key!r}: {exc}") from exc

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
