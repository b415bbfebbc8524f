"""SuppressionStore — ignore / snooze records keyed by warning identity."""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Iterable

import structlog

from sitewatch.core.types import AssumptionWarning, SuppressionEntry
from sitewatch.state.identity import warning_identity
from sitewatch.state.store import SUPPRESSIONS_KEY, KeyValueStore

logger = structlog.stdlib.get_logger()

Clock = Callable[[], float]

DAY_SECS = 86400


class SuppressionStore:
    """Map of warning identity to a time-bounded or permanent suppression.

    Expired entries are never purged; they are simply inactive wherever
    they are consulted.
    """

    def __init__(self, store: KeyValueStore, clock: Clock = time.time) -> None:
        self._store = store
        self._clock = clock

    def entries(self) -> dict[str, SuppressionEntry]:
        raw = self._store.get(SUPPRESSIONS_KEY, {})
        if not isinstance(raw, dict):
            return {}
        entries: dict[str, SuppressionEntry] = {}
        for identity, data in raw.items():
            if isinstance(data, dict):
                entries[identity] = SuppressionEntry.model_validate(data)
        return entries

    def get(self, identity: str) -> SuppressionEntry | None:
        return self.entries().get(identity)

    def is_suppressed(self, identity: str, now: float | None = None) -> bool:
        entry = self.get(identity)
        if entry is None:
            return False
        return entry.is_active(self._clock() if now is None else now)

    def ignore(self, identity: str) -> SuppressionEntry:
        """Suppress *identity* permanently."""
        entry = SuppressionEntry(expires_at=math.inf, ignored_at=self._clock())
        self._put(identity, entry)
        logger.info("assumption_ignored", identity=identity)
        return entry

    def snooze(self, identity: str, days: int = 7) -> SuppressionEntry:
        """Suppress *identity* until *days* from now."""
        now = self._clock()
        entry = SuppressionEntry(expires_at=now + days * DAY_SECS, snoozed_at=now)
        self._put(identity, entry)
        logger.info("assumption_snoozed", identity=identity, days=days)
        return entry

    def filter_active(
        self,
        warnings: Iterable[AssumptionWarning],
        now: float | None = None,
    ) -> list[AssumptionWarning]:
        """Drop warnings whose identity is actively suppressed at *now*."""
        at = self._clock() if now is None else now
        entries = self.entries()
        kept: list[AssumptionWarning] = []
        for warning in warnings:
            entry = entries.get(warning_identity(warning))
            if entry is not None and entry.is_active(at):
                continue
            kept.append(warning)
        return kept

    def _put(self, identity: str, entry: SuppressionEntry) -> None:
        raw = self._store.get(SUPPRESSIONS_KEY, {})
        if not isinstance(raw, dict):
            raw = {}
        raw[identity] = entry.model_dump()
        self._store.set(SUPPRESSIONS_KEY, raw)
