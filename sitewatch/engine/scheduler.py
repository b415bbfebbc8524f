"""RunScheduler — throttled detection runs with suppression and persistence."""

from __future__ import annotations

import time
from collections.abc import Callable

import httpx
import structlog

from sitewatch.core.config import DetectionConfig
from sitewatch.core.types import AssumptionWarning, RunState
from sitewatch.detectors.base import DetectionContext, Detector
from sitewatch.detectors.registry import DEFAULT_DETECTORS
from sitewatch.host.runtime import HostRuntime
from sitewatch.snapshot.capture import SnapshotCapturer
from sitewatch.state.baseline import BaselineTracker
from sitewatch.state.results import ResultStore
from sitewatch.state.store import KeyValueStore
from sitewatch.state.suppression import SuppressionStore

logger = structlog.stdlib.get_logger()

Clock = Callable[[], float]
DetectorFilter = Callable[[list[Detector]], list[Detector]]
WarningFilter = Callable[[list[AssumptionWarning]], list[AssumptionWarning]]

HOUR_SECS = 3600


class RunScheduler:
    """Decides when a detection pass is due, runs it, and stores the result.

    A run executes iff the sticky due flag is set or the re-run interval
    has elapsed since the last run. Each run builds a fresh
    ``DetectionContext`` (and so a fresh snapshot), concatenates detector
    output, drops suppressed warnings and replaces the stored list.

    Usage::

        scheduler = RunScheduler(config, runtime, store, http)
        scheduler.on_theme_switched("twentytwentyfour")
        warnings = scheduler.maybe_run()   # None when throttled
        warnings = scheduler.force_run()   # always runs
    """

    def __init__(
        self,
        config: DetectionConfig,
        runtime: HostRuntime,
        store: KeyValueStore,
        http: httpx.Client,
        detectors: tuple[Detector, ...] = DEFAULT_DETECTORS,
        watched_options: tuple[str, ...] | list[str] = ("functionalities_snippets",),
        clock: Clock = time.time,
    ) -> None:
        self._config = config
        self._runtime = runtime
        self._store = store
        self._http = http
        self._detectors = tuple(detectors)
        self._watched_options = set(watched_options)
        self._clock = clock
        self._results = ResultStore(store)
        self._suppressions = SuppressionStore(store, clock)
        self._detector_filters: list[DetectorFilter] = []
        self._warning_filters: list[WarningFilter] = []
        self._run_count = 0

    # ── Properties ───────────────────────────────────────────────

    @property
    def config(self) -> DetectionConfig:
        return self._config

    @property
    def results(self) -> ResultStore:
        return self._results

    @property
    def suppressions(self) -> SuppressionStore:
        return self._suppressions

    @property
    def run_count(self) -> int:
        """Runs executed by this scheduler instance."""
        return self._run_count

    @property
    def interval_secs(self) -> float:
        return self._config.rerun_interval_hours * HOUR_SECS

    # ── Filters ──────────────────────────────────────────────────

    def add_detector_filter(self, fn: DetectorFilter) -> None:
        """Register a callable that may rewrite the active detector list."""
        self._detector_filters.append(fn)

    def add_warning_filter(self, fn: WarningFilter) -> None:
        """Register a callable that may rewrite merged warnings before suppression."""
        self._warning_filters.append(fn)

    # ── Lifecycle triggers ───────────────────────────────────────

    def mark_due(self, reason: str = "manual") -> None:
        state = self._results.run_state()
        if not state.due:
            self._results.save_run_state(state.model_copy(update={"due": True}))
        logger.info("detection_marked_due", reason=reason)

    def on_extension_activated(self, name: str) -> None:
        self.mark_due(f"extension_activated:{name}")

    def on_theme_switched(self, slug: str) -> None:
        self.mark_due(f"theme_switched:{slug}")

    def on_option_updated(self, name: str) -> None:
        if name in self._watched_options:
            self.mark_due(f"option_updated:{name}")

    # ── Throttle ─────────────────────────────────────────────────

    def is_due(self, now: float | None = None) -> bool:
        at = self._clock() if now is None else now
        state = self._results.run_state()
        return state.due or (at - state.last_run_at) >= self.interval_secs

    def maybe_run(self) -> list[AssumptionWarning] | None:
        """Run if enabled and due; return the stored warnings, else None."""
        if not self._config.enabled:
            return None
        now = self._clock()
        if not self.is_due(now):
            return None
        return self._run(now)

    def force_run(self) -> list[AssumptionWarning]:
        """Run immediately regardless of throttle or master switch."""
        self._results.save_run_state(RunState(last_run_at=0.0, due=True))
        return self._run(self._clock())

    # ── Queries ──────────────────────────────────────────────────

    def warnings(self) -> list[AssumptionWarning]:
        return self._results.warnings()

    def active_warnings(self) -> list[AssumptionWarning]:
        """Stored warnings that are not suppressed right now."""
        return self._suppressions.filter_active(self._results.warnings(), self._clock())

    def active_warning_count(self) -> int:
        return len(self.active_warnings())

    # ── Execution ────────────────────────────────────────────────

    def _active_detectors(self) -> list[Detector]:
        detectors = [d for d in self._detectors if d.enabled(self._config)]
        for fn in self._detector_filters:
            detectors = fn(detectors)
        return detectors

    def _run(self, now: float) -> list[AssumptionWarning]:
        state = self._results.run_state()
        self._results.save_run_state(state.model_copy(update={"due": False}))

        baseline = BaselineTracker(self._store)
        ctx = DetectionContext(
            config=self._config,
            runtime=self._runtime,
            capturer=SnapshotCapturer(
                self._runtime.hooks,
                log_failures=self._runtime.debug.wp_debug,
            ),
            baseline=baseline,
            http=self._http,
            now=now,
        )

        detected: list[AssumptionWarning] = []
        for detector in self._active_detectors():
            try:
                found = detector.fn(ctx)
            except Exception:
                logger.exception("detector_failed", detector=detector.name)
                continue
            detected.extend(w for w in found if self._config.is_enabled(w.kind))

        for fn in self._warning_filters:
            detected = fn(detected)

        kept = self._suppressions.filter_active(detected, now)
        self._results.replace_warnings(kept)
        baseline.save()
        self._results.save_run_state(RunState(last_run_at=now, due=False))
        self._run_count += 1

        logger.info(
            "detection_run_completed",
            detected=len(detected),
            suppressed=len(detected) - len(kept),
            stored=len(kept),
            kinds=sorted({w.kind.value for w in kept}),
        )
        return kept
