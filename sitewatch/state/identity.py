"""Stable warning identity — the join key between warnings and suppressions."""

from __future__ import annotations

import hashlib

from sitewatch.core.types import (
    AnalyticsDuplicationDetails,
    AssumptionWarning,
    FontRedundancyDetails,
    LazyLoadConflictDetails,
    MetaDuplicationDetails,
    MissingSecurityHeadersDetails,
    OembedAuthorExposureDetails,
    RestExposureDetails,
    SchemaCollisionDetails,
)

_SEPARATOR = "|"


def canonical_detail_fields(warning: AssumptionWarning) -> list[str]:
    """Return the subset of *warning* details that defines its identity.

    Counts, timestamps and full source lists are deliberately excluded so
    that the same condition hashes identically across runs. Collections
    are sorted so their iteration order never matters.
    """
    details = warning.details
    if isinstance(details, SchemaCollisionDetails):
        return [details.schema_type]
    if isinstance(details, AnalyticsDuplicationDetails):
        return [details.tracking_id]
    if isinstance(details, FontRedundancyDetails):
        return [details.font_family]
    if isinstance(details, MetaDuplicationDetails):
        return sorted(details.duplicates)
    if isinstance(details, (RestExposureDetails, OembedAuthorExposureDetails)):
        return [details.endpoint]
    if isinstance(details, MissingSecurityHeadersDetails):
        return [details.url]
    if isinstance(details, LazyLoadConflictDetails):
        return sorted(details.implementations)
    return []


def warning_identity(warning: AssumptionWarning) -> str:
    """Deterministic digest of kind plus canonical detail fields."""
    key_parts = [warning.kind.value, *canonical_detail_fields(warning)]
    return hashlib.md5(_SEPARATOR.join(key_parts).encode("utf-8")).hexdigest()
