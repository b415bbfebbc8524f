"""Inline CSS growth and spike detection against the rolling baseline."""

from __future__ import annotations

from sitewatch.core.types import (
    AssumptionWarning,
    InlineCssGrowthDetails,
    InlineCssSpikeDetails,
    WarningKind,
)
from sitewatch.detectors.base import DetectionContext, make_warning
from sitewatch.detectors.patterns import (
    INLINE_CSS_BUCKETS,
    INLINE_CSS_OTHER_BUCKET,
    SPIKE_MIN_SAMPLES,
    SPIKE_RATIO,
    STYLE_BLOCK_PATTERN,
)


def measure_inline_css(head: str) -> tuple[int, dict[str, int]]:
    """Total inline ``<style>`` bytes in *head* and their split by bucket.

    The buckets are for reporting only; thresholds use the total.
    """
    total = 0
    buckets: dict[str, int] = {}
    for css in STYLE_BLOCK_PATTERN.findall(head):
        size = len(css.encode("utf-8"))
        total += size
        bucket = INLINE_CSS_OTHER_BUCKET
        for name, markers in INLINE_CSS_BUCKETS:
            if any(marker in css for marker in markers):
                bucket = name
                break
        buckets[bucket] = buckets.get(bucket, 0) + size
    return total, buckets


def detect_inline_css(ctx: DetectionContext) -> list[AssumptionWarning]:
    """Growth (absolute threshold) and spike (vs. moving average) checks.

    Both conditions are independent and may fire in the same run.
    """
    total, buckets = measure_inline_css(ctx.snapshot.head)
    ctx.baseline.record(total, ctx.now)

    average = ctx.baseline.average()
    if average is None:
        average = float(total)
    total_kb = total / 1024
    avg_kb = average / 1024
    threshold_kb = float(ctx.config.inline_css_threshold_kb)

    warnings: list[AssumptionWarning] = []

    if ctx.config.is_enabled(WarningKind.INLINE_CSS_GROWTH) and total_kb > threshold_kb:
        warnings.append(make_warning(
            InlineCssGrowthDetails(
                current_size_kb=round(total_kb, 1),
                threshold_kb=threshold_kb,
                average_size_kb=round(avg_kb, 1),
                sources=buckets,
            ),
            message=(
                f"Inline CSS output is {round(total_kb, 1)} KB "
                f"(threshold: {threshold_kb:g} KB)."
            ),
            location="<style> blocks in page head",
            now=ctx.now,
        ))

    if (
        ctx.config.is_enabled(WarningKind.INLINE_CSS_SPIKE)
        and len(ctx.baseline) >= SPIKE_MIN_SAMPLES
        and average > 0
        and total_kb > avg_kb * SPIKE_RATIO
    ):
        increase = round((total / average - 1) * 100)
        warnings.append(make_warning(
            InlineCssSpikeDetails(
                current_size_kb=round(total_kb, 1),
                average_size_kb=round(avg_kb, 1),
                increase_percent=increase,
                sample_count=len(ctx.baseline),
            ),
            message=(
                f"Inline CSS increased from {round(avg_kb, 1)} KB average "
                f"to {round(total_kb, 1)} KB (+{increase}%)."
            ),
            location="<style> blocks in page head",
            now=ctx.now,
        ))

    return warnings
