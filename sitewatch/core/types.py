"""Domain types for assumption detection — warnings, suppressions, baselines."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class WarningKind(StrEnum):
    """Which detector produced a warning."""

    SCHEMA_COLLISION = "schema_collision"
    ANALYTICS_DUPLICATION = "analytics_duplication"
    FONT_REDUNDANCY = "font_redundancy"
    INLINE_CSS_GROWTH = "inline_css_growth"
    INLINE_CSS_SPIKE = "inline_css_spike"
    JQUERY_CONFLICT = "jquery_conflict"
    META_DUPLICATION = "meta_duplication"
    REST_EXPOSURE = "rest_exposure"
    OEMBED_AUTHOR_EXPOSURE = "oembed_author_exposure"
    LAZY_LOAD_CONFLICT = "lazy_load_conflict"
    MIXED_CONTENT = "mixed_content"
    MISSING_SECURITY_HEADERS = "missing_security_headers"
    DEBUG_EXPOSURE = "debug_exposure"
    CRON_ISSUES = "cron_issues"


# ── Warning details (one shape per kind) ────────────────────────


class _Details(BaseModel):
    model_config = ConfigDict(frozen=True)


class SchemaCollisionDetails(_Details):
    kind: Literal["schema_collision"] = "schema_collision"
    schema_type: str
    sources: list[str] = Field(default_factory=list)
    unique_sources: list[str] = Field(default_factory=list)
    count: int = 0


class AnalyticsDuplicationDetails(_Details):
    kind: Literal["analytics_duplication"] = "analytics_duplication"
    analytics_type: str
    tracking_id: str
    count: int = 0
    locations: list[str] = Field(default_factory=list)


class FontRedundancyDetails(_Details):
    kind: Literal["font_redundancy"] = "font_redundancy"
    font_family: str
    sources: list[str] = Field(default_factory=list)
    unique_sources: list[str] = Field(default_factory=list)
    count: int = 0


class InlineCssGrowthDetails(_Details):
    kind: Literal["inline_css_growth"] = "inline_css_growth"
    current_size_kb: float
    threshold_kb: float
    average_size_kb: float
    sources: dict[str, int] = Field(default_factory=dict)


class InlineCssSpikeDetails(_Details):
    kind: Literal["inline_css_spike"] = "inline_css_spike"
    current_size_kb: float
    average_size_kb: float
    increase_percent: int
    sample_count: int = 0


class JqueryConflictDetails(_Details):
    kind: Literal["jquery_conflict"] = "jquery_conflict"
    script_count: int
    handles: list[str] = Field(default_factory=list)
    versions: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)


class MetaDuplicationDetails(_Details):
    kind: Literal["meta_duplication"] = "meta_duplication"
    duplicates: dict[str, int] = Field(default_factory=dict)


class RestExposureDetails(_Details):
    kind: Literal["rest_exposure"] = "rest_exposure"
    endpoint: str
    status_code: int = 200


class OembedAuthorExposureDetails(_Details):
    kind: Literal["oembed_author_exposure"] = "oembed_author_exposure"
    endpoint: str
    author_name: str


class LazyLoadConflictDetails(_Details):
    kind: Literal["lazy_load_conflict"] = "lazy_load_conflict"
    implementations: list[str] = Field(default_factory=list)


class MixedContentDetails(_Details):
    kind: Literal["mixed_content"] = "mixed_content"
    count: int
    examples: list[str] = Field(default_factory=list)


class MissingSecurityHeadersDetails(_Details):
    kind: Literal["missing_security_headers"] = "missing_security_headers"
    url: str
    missing: list[str] = Field(default_factory=list)


class DebugExposureDetails(_Details):
    kind: Literal["debug_exposure"] = "debug_exposure"
    active_flags: list[str] = Field(default_factory=list)


class CronIssuesDetails(_Details):
    kind: Literal["cron_issues"] = "cron_issues"
    issues: list[str] = Field(default_factory=list)
    stuck_jobs: int = 0
    lock_age_secs: float | None = None
    disabled: bool = False


WarningDetails = Annotated[
    Union[
        SchemaCollisionDetails,
        AnalyticsDuplicationDetails,
        FontRedundancyDetails,
        InlineCssGrowthDetails,
        InlineCssSpikeDetails,
        JqueryConflictDetails,
        MetaDuplicationDetails,
        RestExposureDetails,
        OembedAuthorExposureDetails,
        LazyLoadConflictDetails,
        MixedContentDetails,
        MissingSecurityHeadersDetails,
        DebugExposureDetails,
        CronIssuesDetails,
    ],
    Field(discriminator="kind"),
]


class AssumptionWarning(BaseModel):
    """One detected violation of a site assumption.

    Immutable once produced. Each run replaces the stored list wholesale.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    location: str = ""
    reason: str = ""
    details: WarningDetails
    detected_at: float = 0.0

    @property
    def kind(self) -> WarningKind:
        return WarningKind(self.details.kind)


# ── Suppression / baseline / run state ─────────────────────────


class SuppressionEntry(BaseModel):
    """A user-initiated instruction to stop reporting a warning identity."""

    model_config = ConfigDict(frozen=True)

    expires_at: float
    ignored_at: float | None = None
    snoozed_at: float | None = None

    @property
    def permanent(self) -> bool:
        return math.isinf(self.expires_at)

    def is_active(self, now: float) -> bool:
        """Expired entries are kept but never suppress."""
        return self.expires_at > now


class BaselineSample(BaseModel):
    """Inline CSS size observed by one detection run."""

    model_config = ConfigDict(frozen=True)

    size_bytes: int
    timestamp: float


class RunState(BaseModel):
    """Throttle state consulted before every scheduled run."""

    last_run_at: float = 0.0
    due: bool = False


class Snapshot(BaseModel):
    """Captured head/foot render output for one detection run."""

    model_config = ConfigDict(frozen=True)

    head: str = ""
    foot: str = ""

    @property
    def combined(self) -> str:
        return self.head + self.foot
