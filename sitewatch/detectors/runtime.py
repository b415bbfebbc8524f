"""Detectors that read host runtime state (debug flags, cron registry)."""

from __future__ import annotations

from sitewatch.core.types import AssumptionWarning, CronIssuesDetails, DebugExposureDetails
from sitewatch.detectors.base import DetectionContext, make_warning
from sitewatch.detectors.patterns import (
    CRON_LOCK_STALE_AFTER_SECS,
    CRON_STUCK_AFTER_SECS,
    DEBUG_FLAGS,
)


def detect_debug_exposure(ctx: DetectionContext) -> list[AssumptionWarning]:
    flags = ctx.runtime.debug
    active = [label for field, label in DEBUG_FLAGS.items() if getattr(flags, field)]
    if not active:
        return []
    return [make_warning(
        DebugExposureDetails(active_flags=active),
        message=f"Debug settings are active: {', '.join(active)}.",
        location="Runtime configuration",
        now=ctx.now,
    )]


def count_stuck_jobs(jobs: dict[float, list[str]], now: float) -> int:
    """Pending jobs scheduled more than an hour before *now*."""
    cutoff = now - CRON_STUCK_AFTER_SECS
    return sum(len(hooks) for scheduled, hooks in jobs.items() if scheduled < cutoff)


def detect_cron_issues(ctx: DetectionContext) -> list[AssumptionWarning]:
    cron = ctx.runtime.cron
    issues: list[str] = []

    stuck = count_stuck_jobs(cron.jobs, ctx.now)
    if stuck:
        issues.append(f"{stuck} scheduled job(s) overdue by more than an hour")

    lock_age: float | None = None
    if cron.lock_acquired_at is not None:
        lock_age = ctx.now - cron.lock_acquired_at
        if lock_age > CRON_LOCK_STALE_AFTER_SECS:
            issues.append(f"cron lock held for {int(lock_age // 60)} minutes")

    if cron.disabled:
        issues.append("the built-in scheduler is disabled")

    if not issues:
        return []
    return [make_warning(
        CronIssuesDetails(
            issues=issues,
            stuck_jobs=stuck,
            lock_age_secs=lock_age,
            disabled=cron.disabled,
        ),
        message=f"Scheduled tasks may not be running: {'; '.join(issues)}.",
        location="Scheduled task registry",
        now=ctx.now,
    )]
