"""Shared detector plumbing — context, registry entry type, warning factory."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import httpx

from sitewatch.core.config import DetectionConfig
from sitewatch.core.types import AssumptionWarning, Snapshot, WarningDetails, WarningKind
from sitewatch.host.runtime import HostRuntime
from sitewatch.snapshot.capture import SnapshotCapturer
from sitewatch.state.baseline import BaselineTracker

# Why each kind matters, shown alongside every warning of that kind.
REASONS: dict[WarningKind, str] = {
    WarningKind.SCHEMA_COLLISION: (
        "Search engines may ignore or misread structured data when the same "
        "type is declared by more than one source."
    ),
    WarningKind.ANALYTICS_DUPLICATION: (
        "Loading the same tracking ID more than once double-counts page views "
        "and events."
    ),
    WarningKind.FONT_REDUNDANCY: (
        "The same font family loaded from several places wastes bandwidth and "
        "can cause layout shifts."
    ),
    WarningKind.INLINE_CSS_GROWTH: (
        "Large inline CSS is re-sent with every page and cannot be cached by "
        "the browser."
    ),
    WarningKind.INLINE_CSS_SPIKE: (
        "A sudden jump in inline CSS usually means a new plugin or block "
        "started printing styles on every page."
    ),
    WarningKind.JQUERY_CONFLICT: (
        "Multiple jQuery copies or versions break plugins that expect a single "
        "global jQuery."
    ),
    WarningKind.META_DUPLICATION: (
        "Duplicate meta tags send conflicting instructions to browsers, search "
        "engines and social networks."
    ),
    WarningKind.REST_EXPOSURE: (
        "A public user listing reveals login names that can be used for "
        "brute-force attempts."
    ),
    WarningKind.OEMBED_AUTHOR_EXPOSURE: (
        "oEmbed responses reveal author names that map to user accounts."
    ),
    WarningKind.LAZY_LOAD_CONFLICT: (
        "Competing lazy-loading implementations can leave images unloaded or "
        "loaded twice."
    ),
    WarningKind.MIXED_CONTENT: (
        "Insecure resources on a secure page are blocked by browsers or "
        "downgrade the connection warning."
    ),
    WarningKind.MISSING_SECURITY_HEADERS: (
        "Missing security headers leave visitors exposed to clickjacking, "
        "MIME sniffing and protocol downgrade attacks."
    ),
    WarningKind.DEBUG_EXPOSURE: (
        "Debug output on a live site leaks paths, queries and errors to "
        "visitors."
    ),
    WarningKind.CRON_ISSUES: (
        "Scheduled tasks that do not run silently stop publishing, backups "
        "and cleanup."
    ),
}


@dataclass(frozen=True)
class DetectionContext:
    """Everything one detection run hands to each detector.

    Built fresh by the scheduler for every run; detectors only read from
    it (the baseline tracker records samples in memory, the scheduler
    persists them after the run).
    """

    config: DetectionConfig
    runtime: HostRuntime
    capturer: SnapshotCapturer
    baseline: BaselineTracker
    http: httpx.Client
    now: float

    @property
    def snapshot(self) -> Snapshot:
        return self.capturer.capture()


DetectorFn = Callable[[DetectionContext], list[AssumptionWarning]]


@dataclass(frozen=True)
class Detector:
    """Registry entry: a detector function and the warning kinds it emits."""

    name: str
    kinds: tuple[WarningKind, ...]
    fn: DetectorFn

    def enabled(self, config: DetectionConfig) -> bool:
        return any(config.is_enabled(kind) for kind in self.kinds)


def make_warning(
    details: WarningDetails,
    message: str,
    location: str,
    now: float,
) -> AssumptionWarning:
    kind = WarningKind(details.kind)
    return AssumptionWarning(
        message=message,
        location=location,
        reason=REASONS[kind],
        details=details,
        detected_at=now,
    )
