"""jQuery conflict detection over the registered script registry."""

from __future__ import annotations

from typing import NamedTuple

from sitewatch.core.types import AssumptionWarning, JqueryConflictDetails
from sitewatch.detectors.base import DetectionContext, make_warning
from sitewatch.detectors.patterns import (
    JQUERY_CDN_MARKERS,
    JQUERY_CORE_MARKERS,
    JQUERY_FILE_PATTERN,
    JQUERY_SOURCE_CDN,
    JQUERY_SOURCE_CORE,
    JQUERY_SOURCE_OTHER,
    UNKNOWN_VERSION,
    VERSION_PATH_PATTERN,
    VERSION_QUERY_PATTERN,
)


class JqueryScript(NamedTuple):
    handle: str
    src: str
    version: str
    source: str


def classify_script_source(src: str) -> str:
    lowered = src.lower()
    if any(marker in lowered for marker in JQUERY_CDN_MARKERS):
        return JQUERY_SOURCE_CDN
    if any(marker in lowered for marker in JQUERY_CORE_MARKERS):
        return JQUERY_SOURCE_CORE
    return JQUERY_SOURCE_OTHER


def match_jquery(handle: str, src: str) -> JqueryScript | None:
    """Return a ``JqueryScript`` when *src* names a jQuery-family file.

    The version comes from the file name, then a ``ver=`` query argument,
    then a version-looking path segment.
    """
    match = JQUERY_FILE_PATTERN.search(src)
    if match is None:
        return None
    version = match.group(1)
    if not version:
        fallback = VERSION_QUERY_PATTERN.search(src) or VERSION_PATH_PATTERN.search(src)
        version = fallback.group(1) if fallback else UNKNOWN_VERSION
    return JqueryScript(handle, src, version, classify_script_source(src))


def detect_jquery_conflict(ctx: DetectionContext) -> list[AssumptionWarning]:
    found = [
        script
        for handle, src in ctx.runtime.scripts.items()
        if (script := match_jquery(handle, src)) is not None
    ]
    if len(found) < 2:
        return []

    versions = sorted({s.version for s in found})
    sources = sorted({s.source for s in found})
    if len(versions) < 2 and len(sources) < 2:
        return []

    return [make_warning(
        JqueryConflictDetails(
            script_count=len(found),
            handles=[s.handle for s in found],
            versions=versions,
            sources=sources,
        ),
        message=(
            f"{len(found)} jQuery scripts are registered "
            f"(versions: {', '.join(versions)}; sources: {', '.join(sources)})."
        ),
        location="Registered scripts",
        now=ctx.now,
    )]
