"""Persisted detection state — warnings, suppressions, CSS baseline."""

from sitewatch.state.baseline import BaselineTracker
from sitewatch.state.exceptions import StateCorruptError, StateError
from sitewatch.state.identity import warning_identity
from sitewatch.state.results import ResultStore
from sitewatch.state.store import KeyValueStore, MemoryStore, SqliteStore
from sitewatch.state.suppression import SuppressionStore

__all__ = [
    "BaselineTracker",
    "KeyValueStore",
    "MemoryStore",
    "ResultStore",
    "SqliteStore",
    "StateCorruptError",
    "StateError",
    "SuppressionStore",
    "warning_identity",
]
