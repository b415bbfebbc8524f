"""Tests for sitewatch/state/store.py — memory and SQLite document stores."""

from __future__ import annotations

import math
import sqlite3
import threading
from pathlib import Path

import pytest

from sitewatch.state.exceptions import StateCorruptError, StateError
from sitewatch.state.store import MemoryStore, SqliteStore


class TestMemoryStore:
    def test_missing_key_returns_default(self) -> None:
        store = MemoryStore()
        assert store.get("nope") is None
        assert store.get("nope", {}) == {}

    def test_set_and_get(self) -> None:
        store = MemoryStore()
        store.set("k", {"a": [1, 2]})
        assert store.get("k") == {"a": [1, 2]}

    def test_values_are_copied(self) -> None:
        store = MemoryStore()
        value = {"a": [1]}
        store.set("k", value)
        value["a"].append(2)
        fetched = store.get("k")
        fetched["a"].append(3)
        assert store.get("k") == {"a": [1]}

    def test_delete(self) -> None:
        store = MemoryStore()
        store.set("k", 1)
        store.delete("k")
        store.delete("k")
        assert store.get("k") is None


class TestSqliteStore:
    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        db = tmp_path / "nested" / "state.db"
        store = SqliteStore(db)
        assert db.parent.exists()
        store.close()

    def test_round_trip(self, tmp_path: Path) -> None:
        store = SqliteStore(tmp_path / "state.db")
        store.set("k", {"history": [{"size_bytes": 10, "timestamp": 1.5}]})
        assert store.get("k") == {"history": [{"size_bytes": 10, "timestamp": 1.5}]}
        store.close()

    def test_overwrite(self, tmp_path: Path) -> None:
        store = SqliteStore(tmp_path / "state.db")
        store.set("k", 1)
        store.set("k", 2)
        assert store.get("k") == 2
        store.close()

    def test_infinity_survives(self, tmp_path: Path) -> None:
        store = SqliteStore(tmp_path / "state.db")
        store.set("k", {"expires_at": math.inf})
        assert math.isinf(store.get("k")["expires_at"])
        store.close()

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "state.db"
        first = SqliteStore(path)
        first.set("k", ["x"])
        first.close()

        second = SqliteStore(path)
        assert second.get("k") == ["x"]
        second.close()

    def test_usable_from_worker_thread(self, tmp_path: Path) -> None:
        store = SqliteStore(tmp_path / "state.db")
        worker = threading.Thread(target=store.set, args=("k", 7))
        worker.start()
        worker.join()
        assert store.get("k") == 7
        store.close()

    def test_delete(self, tmp_path: Path) -> None:
        store = SqliteStore(tmp_path / "state.db")
        store.set("k", 1)
        store.delete("k")
        assert store.get("k", "gone") == "gone"
        store.close()

    def test_corrupt_document_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "state.db"
        store = SqliteStore(path)
        store.close()

        conn = sqlite3.connect(str(path))
        conn.execute("INSERT INTO options (name, value) VALUES ('k', '{not json')")
        conn.commit()
        conn.close()

        store = SqliteStore(path)
        with pytest.raises(StateCorruptError):
            store.get("k")
        store.close()

    def test_corrupt_is_a_state_error(self) -> None:
        assert issubclass(StateCorruptError, StateError)
