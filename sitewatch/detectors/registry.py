"""The detector set, in the order the scheduler runs it.

Order carries no meaning: no detector sees another's output.
"""

from __future__ import annotations

from sitewatch.core.types import WarningKind
from sitewatch.detectors.base import Detector
from sitewatch.detectors.markup import (
    detect_analytics_duplication,
    detect_font_redundancy,
    detect_lazy_load_conflict,
    detect_meta_duplication,
    detect_mixed_content,
    detect_schema_collisions,
)
from sitewatch.detectors.network import detect_missing_security_headers, detect_rest_exposure
from sitewatch.detectors.runtime import detect_cron_issues, detect_debug_exposure
from sitewatch.detectors.scripts import detect_jquery_conflict
from sitewatch.detectors.styles import detect_inline_css

DEFAULT_DETECTORS: tuple[Detector, ...] = (
    Detector("schema_collision", (WarningKind.SCHEMA_COLLISION,), detect_schema_collisions),
    Detector(
        "analytics_duplication",
        (WarningKind.ANALYTICS_DUPLICATION,),
        detect_analytics_duplication,
    ),
    Detector("font_redundancy", (WarningKind.FONT_REDUNDANCY,), detect_font_redundancy),
    Detector(
        "inline_css",
        (WarningKind.INLINE_CSS_GROWTH, WarningKind.INLINE_CSS_SPIKE),
        detect_inline_css,
    ),
    Detector("jquery_conflict", (WarningKind.JQUERY_CONFLICT,), detect_jquery_conflict),
    Detector("meta_duplication", (WarningKind.META_DUPLICATION,), detect_meta_duplication),
    Detector(
        "rest_exposure",
        (WarningKind.REST_EXPOSURE, WarningKind.OEMBED_AUTHOR_EXPOSURE),
        detect_rest_exposure,
    ),
    Detector("lazy_load_conflict", (WarningKind.LAZY_LOAD_CONFLICT,), detect_lazy_load_conflict),
    Detector("mixed_content", (WarningKind.MIXED_CONTENT,), detect_mixed_content),
    Detector(
        "missing_security_headers",
        (WarningKind.MISSING_SECURITY_HEADERS,),
        detect_missing_security_headers,
    ),
    Detector("debug_exposure", (WarningKind.DEBUG_EXPOSURE,), detect_debug_exposure),
    Detector("cron_issues", (WarningKind.CRON_ISSUES,), detect_cron_issues),
)
