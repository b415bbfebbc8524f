"""Tests for sitewatch/engine/scheduler.py — throttling, suppression, persistence."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import httpx

from sitewatch.core.config import DetectionConfig
from sitewatch.core.types import (
    AssumptionWarning,
    DebugExposureDetails,
    MixedContentDetails,
    SchemaCollisionDetails,
    WarningKind,
)
from sitewatch.detectors.base import DetectionContext, Detector, make_warning
from sitewatch.detectors.registry import DEFAULT_DETECTORS
from sitewatch.detectors.styles import detect_inline_css
from sitewatch.engine.scheduler import RunScheduler
from sitewatch.host.hooks import HEAD_HOOK, HookRegistry
from sitewatch.host.runtime import HostRuntime, SiteInfo
from sitewatch.state.identity import warning_identity
from sitewatch.state.store import BASELINE_KEY, MemoryStore
from sitewatch.state.suppression import DAY_SECS

NOW = 1_700_000_000.0
HOUR = 3600


# ── Helpers ─────────────────────────────────────────────────────


class _Clock:
    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _debug_warning(now: float = NOW) -> AssumptionWarning:
    return make_warning(
        DebugExposureDetails(active_flags=["WP_DEBUG"]),
        message="Debug settings are active: WP_DEBUG.",
        location="Runtime configuration",
        now=now,
    )


def _schema_warning(now: float = NOW) -> AssumptionWarning:
    return make_warning(
        SchemaCollisionDetails(schema_type="Product", sources=["A", "B"], unique_sources=["A", "B"]),
        message="Multiple sources are outputting Product schema (A + B).",
        location="JSON-LD blocks in page head and footer",
        now=now,
    )


def _static(name: str, kind: WarningKind, *warnings: AssumptionWarning) -> Detector:
    return Detector(name, (kind,), lambda ctx: list(warnings))


def _scheduler(
    detectors: tuple[Detector, ...] | None = None,
    config: DetectionConfig | None = None,
    runtime: HostRuntime | None = None,
    store: MemoryStore | None = None,
    clock: _Clock | None = None,
    http: MagicMock | None = None,
) -> RunScheduler:
    return RunScheduler(
        config or DetectionConfig(enabled=True),
        runtime or HostRuntime(),
        store if store is not None else MemoryStore(),
        http or MagicMock(spec=httpx.Client),
        detectors=detectors if detectors is not None else (
            _static("debug", WarningKind.DEBUG_EXPOSURE, _debug_warning()),
        ),
        clock=clock or _Clock(),
    )


# ── Throttle ────────────────────────────────────────────────────


class TestThrottle:
    def test_disabled_never_runs(self) -> None:
        scheduler = _scheduler(config=DetectionConfig(enabled=False))
        assert scheduler.maybe_run() is None
        assert scheduler.run_count == 0

    def test_first_run(self) -> None:
        scheduler = _scheduler()
        warnings = scheduler.maybe_run()
        assert warnings == [_debug_warning()]
        assert scheduler.results.run_state().last_run_at == NOW
        assert scheduler.run_count == 1

    def test_throttled_within_interval(self) -> None:
        clock = _Clock()
        scheduler = _scheduler(clock=clock)
        scheduler.maybe_run()
        clock.now += 6 * HOUR - 1
        assert scheduler.maybe_run() is None
        assert scheduler.run_count == 1

    def test_runs_again_after_interval(self) -> None:
        clock = _Clock()
        scheduler = _scheduler(clock=clock)
        scheduler.maybe_run()
        clock.now += 6 * HOUR
        assert scheduler.maybe_run() is not None
        assert scheduler.run_count == 2

    def test_custom_interval(self) -> None:
        clock = _Clock()
        scheduler = _scheduler(
            config=DetectionConfig(enabled=True, rerun_interval_hours=1), clock=clock
        )
        scheduler.maybe_run()
        clock.now += HOUR
        assert scheduler.maybe_run() is not None

    def test_force_run_ignores_throttle_and_switch(self) -> None:
        scheduler = _scheduler(config=DetectionConfig(enabled=False))
        assert scheduler.force_run() == [_debug_warning()]
        assert scheduler.force_run() == [_debug_warning()]
        assert scheduler.run_count == 2
        assert scheduler.results.run_state().due is False


class TestDueFlag:
    def test_theme_switch_marks_due(self) -> None:
        scheduler = _scheduler()
        scheduler.maybe_run()
        scheduler.on_theme_switched("astra")
        assert scheduler.is_due()
        assert scheduler.maybe_run() is not None
        assert not scheduler.is_due()

    def test_extension_activation_marks_due(self) -> None:
        scheduler = _scheduler()
        scheduler.maybe_run()
        scheduler.on_extension_activated("wordpress-seo/wp-seo.php")
        assert scheduler.maybe_run() is not None

    def test_watched_option_marks_due(self) -> None:
        scheduler = _scheduler()
        scheduler.maybe_run()
        scheduler.on_option_updated("blogname")
        assert not scheduler.is_due()
        scheduler.on_option_updated("functionalities_snippets")
        assert scheduler.is_due()

    def test_due_flag_persists_across_instances(self) -> None:
        store = MemoryStore()
        first = _scheduler(store=store)
        first.maybe_run()
        first.mark_due()
        assert _scheduler(store=store).is_due()

    def test_due_ignored_while_disabled(self) -> None:
        scheduler = _scheduler(config=DetectionConfig(enabled=False))
        scheduler.mark_due()
        assert scheduler.maybe_run() is None


# ── Execution ───────────────────────────────────────────────────


class TestExecution:
    def test_detector_failure_is_isolated(self) -> None:
        def boom(ctx: DetectionContext) -> list[AssumptionWarning]:
            raise RuntimeError("regex exploded")

        scheduler = _scheduler(detectors=(
            Detector("broken", (WarningKind.SCHEMA_COLLISION,), boom),
            _static("debug", WarningKind.DEBUG_EXPOSURE, _debug_warning()),
        ))
        assert scheduler.force_run() == [_debug_warning()]

    def test_disabled_detector_not_called(self) -> None:
        fn = MagicMock(return_value=[_debug_warning()])
        scheduler = _scheduler(
            detectors=(Detector("debug", (WarningKind.DEBUG_EXPOSURE,), fn),),
            config=DetectionConfig(enabled=True, detect_debug_exposure=False),
        )
        assert scheduler.force_run() == []
        fn.assert_not_called()

    def test_warnings_of_disabled_kind_dropped(self) -> None:
        scheduler = _scheduler(
            detectors=(_static("mixed", WarningKind.DEBUG_EXPOSURE, _schema_warning()),),
            config=DetectionConfig(enabled=True, detect_schema_collision=False),
        )
        assert scheduler.force_run() == []

    def test_results_replaced_not_merged(self) -> None:
        state = {"warn": True}

        def flaky(ctx: DetectionContext) -> list[AssumptionWarning]:
            return [_debug_warning()] if state["warn"] else []

        scheduler = _scheduler(detectors=(Detector("debug", (WarningKind.DEBUG_EXPOSURE,), flaky),))
        scheduler.force_run()
        state["warn"] = False
        scheduler.force_run()
        assert scheduler.warnings() == []

    def test_fresh_snapshot_each_run(self) -> None:
        markup = {"head": "first"}
        hooks = HookRegistry()
        hooks.add_action(HEAD_HOOK, lambda: print(markup["head"], end=""))
        seen: list[str] = []

        def record(ctx: DetectionContext) -> list[AssumptionWarning]:
            seen.append(ctx.snapshot.head)
            seen.append(ctx.snapshot.head)
            return []

        scheduler = _scheduler(
            detectors=(Detector("rec", (WarningKind.DEBUG_EXPOSURE,), record),),
            runtime=HostRuntime(hooks=hooks),
        )
        scheduler.force_run()
        markup["head"] = "second"
        scheduler.force_run()
        assert seen == ["first", "first", "second", "second"]

    def test_baseline_persisted_after_run(self) -> None:
        store = MemoryStore()
        hooks = HookRegistry()
        hooks.add_action(HEAD_HOOK, lambda: print("<style>p{}</style>", end=""))
        scheduler = _scheduler(
            detectors=(
                Detector(
                    "inline_css",
                    (WarningKind.INLINE_CSS_GROWTH, WarningKind.INLINE_CSS_SPIKE),
                    detect_inline_css,
                ),
            ),
            runtime=HostRuntime(hooks=hooks),
            store=store,
        )
        scheduler.force_run()
        scheduler.force_run()
        history = store.get(BASELINE_KEY)["history"]
        assert [h["size_bytes"] for h in history] == [3, 3]

    def test_results_survive_json_store_round_trip(self) -> None:
        store = MemoryStore()
        scheduler = _scheduler(store=store)
        scheduler.force_run()
        # Stored documents must be plain JSON
        json.dumps(store.get("sitewatch_assumptions_detected"))
        assert _scheduler(store=store).warnings() == [_debug_warning()]


class TestFilters:
    def test_detector_filter(self) -> None:
        scheduler = _scheduler(detectors=(
            _static("debug", WarningKind.DEBUG_EXPOSURE, _debug_warning()),
            _static("schema", WarningKind.SCHEMA_COLLISION, _schema_warning()),
        ))
        scheduler.add_detector_filter(lambda ds: [d for d in ds if d.name != "debug"])
        assert [w.kind for w in scheduler.force_run()] == [WarningKind.SCHEMA_COLLISION]

    def test_warning_filter(self) -> None:
        extra = make_warning(
            MixedContentDetails(count=1, examples=["script:http://x/a.js"]),
            message="1 insecure resource.",
            location="head",
            now=NOW,
        )
        scheduler = _scheduler()
        scheduler.add_warning_filter(lambda ws: [*ws, extra])
        assert scheduler.force_run() == [_debug_warning(), extra]


# ── Suppression ─────────────────────────────────────────────────


class TestSuppression:
    def test_ignored_never_reported_again(self) -> None:
        clock = _Clock()
        scheduler = _scheduler(clock=clock)
        scheduler.force_run()
        scheduler.suppressions.ignore(warning_identity(_debug_warning()))

        assert scheduler.active_warning_count() == 0
        clock.now += 400 * DAY_SECS
        assert scheduler.force_run() == []
        assert scheduler.active_warning_count() == 0

    def test_snoozed_returns_after_expiry(self) -> None:
        clock = _Clock()
        scheduler = _scheduler(clock=clock)
        scheduler.force_run()
        scheduler.suppressions.snooze(warning_identity(_debug_warning()), days=7)

        assert scheduler.active_warnings() == []
        clock.now += 3 * DAY_SECS
        assert scheduler.force_run() == []

        clock.now += 4 * DAY_SECS + 1
        warnings = scheduler.force_run()
        assert [w.kind for w in warnings] == [WarningKind.DEBUG_EXPOSURE]
        assert scheduler.active_warning_count() == 1

    def test_dismiss_only_until_next_run(self) -> None:
        scheduler = _scheduler()
        scheduler.force_run()
        assert scheduler.results.dismiss(warning_identity(_debug_warning())) == 1
        assert scheduler.warnings() == []
        assert len(scheduler.force_run()) == 1

    def test_suppressing_one_keeps_others(self) -> None:
        scheduler = _scheduler(detectors=(
            _static("debug", WarningKind.DEBUG_EXPOSURE, _debug_warning()),
            _static("schema", WarningKind.SCHEMA_COLLISION, _schema_warning()),
        ))
        scheduler.suppressions.ignore(warning_identity(_schema_warning()))
        assert [w.kind for w in scheduler.force_run()] == [WarningKind.DEBUG_EXPOSURE]


# ── Default detector set ────────────────────────────────────────


class TestDefaultDetectorRun:
    def test_full_pass_over_a_page(self) -> None:
        home = "http://shop.example"
        hooks = HookRegistry()
        hooks.add_action(HEAD_HOOK, lambda: print(
            '<script type="application/ld+json">'
            '{"@type": "Product", "@id": "http://shop.example/#yoast"}</script>'
            '<script type="application/ld+json">{"@type": "Product", "name": "Mug"}</script>'
            "<style>p{margin:0}</style>",
            end="",
        ))
        runtime = HostRuntime(
            site=SiteInfo(home_url=home),
            hooks=hooks,
            scripts={
                "jquery-core": "http://shop.example/wp-includes/js/jquery/jquery.min.js?ver=3.7.1",
                "cdn-jquery": "https://code.jquery.com/jquery-1.12.4.min.js",
            },
        )

        all_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "X-XSS-Protection": "1",
            "Strict-Transport-Security": "max-age=1",
        }

        def head(url: str, **kwargs: object) -> httpx.Response:
            if url == home:
                return httpx.Response(200, headers=all_headers)
            return httpx.Response(401)

        http = MagicMock(spec=httpx.Client)
        http.head.side_effect = head
        http.get.return_value = httpx.Response(404, json={"code": "rest_no_route"})

        scheduler = _scheduler(detectors=DEFAULT_DETECTORS, runtime=runtime, http=http)
        warnings = scheduler.force_run()

        assert sorted(w.kind for w in warnings) == [
            WarningKind.JQUERY_CONFLICT,
            WarningKind.SCHEMA_COLLISION,
        ]
