"""ResultStore — the current warning list and the run throttle state."""

from __future__ import annotations

import structlog

from sitewatch.core.types import AssumptionWarning, RunState
from sitewatch.state.identity import warning_identity
from sitewatch.state.store import RUN_STATE_KEY, WARNINGS_KEY, KeyValueStore

logger = structlog.stdlib.get_logger()


class ResultStore:
    """Persists the warnings of the latest run and the scheduler state."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ── Warnings ─────────────────────────────────────────────────

    def warnings(self) -> list[AssumptionWarning]:
        raw = self._store.get(WARNINGS_KEY, [])
        if not isinstance(raw, list):
            return []
        return [AssumptionWarning.model_validate(item) for item in raw if isinstance(item, dict)]

    def replace_warnings(self, warnings: list[AssumptionWarning]) -> None:
        """Store *warnings* as the full current set (no merge)."""
        self._store.set(WARNINGS_KEY, [w.model_dump() for w in warnings])

    def dismiss(self, identity: str) -> int:
        """Remove current warnings matching *identity*; return how many went.

        No suppression is recorded, so the condition reappears on the next
        run if it still holds.
        """
        current = self.warnings()
        kept = [w for w in current if warning_identity(w) != identity]
        removed = len(current) - len(kept)
        if removed:
            self.replace_warnings(kept)
            logger.info("assumption_dismissed", identity=identity, removed=removed)
        return removed

    # ── Run state ────────────────────────────────────────────────

    def run_state(self) -> RunState:
        raw = self._store.get(RUN_STATE_KEY)
        if not isinstance(raw, dict):
            return RunState()
        return RunState.model_validate(raw)

    def save_run_state(self, state: RunState) -> None:
        self._store.set(RUN_STATE_KEY, state.model_dump())
