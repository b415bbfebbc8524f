"""Detectors that scan captured page markup."""

from __future__ import annotations

import json
import re
from collections import defaultdict
from typing import Any
from urllib.parse import unquote_plus

import structlog

from sitewatch.core.types import (
    AnalyticsDuplicationDetails,
    AssumptionWarning,
    FontRedundancyDetails,
    LazyLoadConflictDetails,
    MetaDuplicationDetails,
    MixedContentDetails,
    SchemaCollisionDetails,
)
from sitewatch.detectors.base import DetectionContext, make_warning
from sitewatch.detectors.patterns import (
    ANALYTICS_LOCATION_TEMPLATES,
    ANALYTICS_PATTERNS,
    FONT_FACE_PATTERN,
    FONT_FACE_SOURCE,
    FONT_VARIANT_PATTERN,
    GOOGLE_FONTS_SOURCE,
    GOOGLE_FONTS_URL_PATTERN,
    INSECURE_RESOURCE_LABELS,
    INSECURE_RESOURCE_PATTERN,
    LAZY_LOAD_PATTERNS,
    META_TAGS,
    MIXED_CONTENT_MAX_EXAMPLES,
    SCHEMA_SCRIPT_PATTERN,
    SCHEMA_SOURCE_SIGNATURES,
    SCHEMA_THEME_SOURCE,
    SCHEMA_UNKNOWN_SOURCE,
    meta_tag_pattern,
)

logger = structlog.stdlib.get_logger()


# ── Schema collision ─────────────────────────────────────────────


def _schema_items(data: Any) -> list[dict[str, Any]]:
    """Flatten a decoded JSON-LD document into its top-level items."""
    if isinstance(data, list):
        items: list[dict[str, Any]] = []
        for entry in data:
            items.extend(_schema_items(entry))
        return items
    if not isinstance(data, dict):
        return []
    graph = data.get("@graph")
    if isinstance(graph, list):
        return [item for item in graph if isinstance(item, dict)]
    return [data]


def identify_schema_source(item: dict[str, Any], theme_slug: str = "") -> str:
    """Guess which product printed *item* from fingerprints in its JSON."""
    serialized = json.dumps(item)
    for needles, source in SCHEMA_SOURCE_SIGNATURES:
        if any(needle in serialized for needle in needles):
            return source
    if theme_slug and theme_slug in serialized:
        return SCHEMA_THEME_SOURCE
    return SCHEMA_UNKNOWN_SOURCE


def detect_schema_collisions(ctx: DetectionContext) -> list[AssumptionWarning]:
    sources_by_type: dict[str, list[str]] = defaultdict(list)
    theme_slug = ctx.runtime.site.theme_slug

    for body in SCHEMA_SCRIPT_PATTERN.findall(ctx.snapshot.combined):
        try:
            data = json.loads(body)
        except ValueError:
            logger.debug("schema_block_unparseable", length=len(body))
            continue
        for item in _schema_items(data):
            raw_type = item.get("@type")
            if not raw_type:
                continue
            if isinstance(raw_type, list):
                schema_type = ", ".join(str(t) for t in raw_type)
            else:
                schema_type = str(raw_type)
            sources_by_type[schema_type].append(identify_schema_source(item, theme_slug))

    warnings: list[AssumptionWarning] = []
    for schema_type, sources in sources_by_type.items():
        if len(sources) < 2:
            continue
        unique_sources = sorted(set(sources))
        if len(unique_sources) < 2:
            continue
        warnings.append(make_warning(
            SchemaCollisionDetails(
                schema_type=schema_type,
                sources=sources,
                unique_sources=unique_sources,
                count=len(sources),
            ),
            message=(
                f"Multiple sources are outputting {schema_type} schema "
                f"({' + '.join(unique_sources)})."
            ),
            location="JSON-LD blocks in page head and footer",
            now=ctx.now,
        ))
    return warnings


# ── Analytics duplication ───────────────────────────────────────


def find_tracking_locations(output: str, tracking_id: str) -> list[str]:
    """Describe how *tracking_id* is wired into *output*."""
    escaped = re.escape(tracking_id)
    return [
        label
        for label, template in ANALYTICS_LOCATION_TEMPLATES.items()
        if re.search(template.replace("{id}", escaped), output, re.IGNORECASE)
    ]


def detect_analytics_duplication(ctx: DetectionContext) -> list[AssumptionWarning]:
    output = ctx.snapshot.combined
    warnings: list[AssumptionWarning] = []

    for label, pattern in ANALYTICS_PATTERNS.values():
        ids = list(dict.fromkeys(pattern.findall(output)))
        for tracking_id in ids:
            count = len(re.findall(re.escape(tracking_id), output, re.IGNORECASE))
            if count <= 1:
                continue
            warnings.append(make_warning(
                AnalyticsDuplicationDetails(
                    analytics_type=label,
                    tracking_id=tracking_id,
                    count=count,
                    locations=find_tracking_locations(output, tracking_id),
                ),
                message=f"{label} ({tracking_id}) is loaded {count} times from different sources.",
                location="Page head and footer output",
                now=ctx.now,
            ))
    return warnings


# ── Font redundancy ─────────────────────────────────────────────


def google_font_families(query: str) -> list[str]:
    """Family names requested by one Google Fonts URL query string."""
    families: list[str] = []
    for param in query.replace("&amp;", "&").split("&"):
        key, _, value = param.partition("=")
        if key.lower() != "family" or not value:
            continue
        for entry in unquote_plus(value).split("|"):
            name = FONT_VARIANT_PATTERN.sub("", entry).replace("+", " ").strip()
            if name:
                families.append(name)
    return families


def detect_font_redundancy(ctx: DetectionContext) -> list[AssumptionWarning]:
    head = ctx.snapshot.head
    fonts: dict[str, list[str]] = defaultdict(list)

    for query in GOOGLE_FONTS_URL_PATTERN.findall(head):
        for family in google_font_families(query):
            fonts[family].append(GOOGLE_FONTS_SOURCE)

    for family in FONT_FACE_PATTERN.findall(head):
        name = family.strip()
        if name:
            fonts[name].append(FONT_FACE_SOURCE)

    warnings: list[AssumptionWarning] = []
    for family, sources in fonts.items():
        if len(sources) < 2:
            continue
        warnings.append(make_warning(
            FontRedundancyDetails(
                font_family=family,
                sources=sources,
                unique_sources=sorted(set(sources)),
                count=len(sources),
            ),
            message=f'Font family "{family}" is loaded from {len(sources)} different sources.',
            location="Font requests in page head",
            now=ctx.now,
        ))
    return warnings


# ── Meta tag duplication ────────────────────────────────────────


def count_meta_tags(head: str) -> dict[str, int]:
    return {tag: len(meta_tag_pattern(tag).findall(head)) for tag in META_TAGS}


def detect_meta_duplication(ctx: DetectionContext) -> list[AssumptionWarning]:
    duplicates = {
        tag: count for tag, count in count_meta_tags(ctx.snapshot.head).items() if count >= 2
    }
    if not duplicates:
        return []
    listing = ", ".join(f"{tag} ({count}x)" for tag, count in duplicates.items())
    return [make_warning(
        MetaDuplicationDetails(duplicates=duplicates),
        message=f"Duplicate meta tags found: {listing}.",
        location="Meta tags in page head",
        now=ctx.now,
    )]


# ── Lazy-load conflict ──────────────────────────────────────────


def match_lazy_loaders(texts: list[str]) -> list[str]:
    """Names of lazy-loading implementations found in any of *texts*."""
    return [
        name
        for name, pattern in LAZY_LOAD_PATTERNS.items()
        if any(pattern.search(text) for text in texts)
    ]


def detect_lazy_load_conflict(ctx: DetectionContext) -> list[AssumptionWarning]:
    texts = [ctx.snapshot.combined, *ctx.runtime.scripts.values()]
    implementations = match_lazy_loaders(texts)
    if len(implementations) < 2:
        return []
    return [make_warning(
        LazyLoadConflictDetails(implementations=implementations),
        message=(
            f"{len(implementations)} lazy-loading implementations are active: "
            f"{', '.join(implementations)}."
        ),
        location="Page markup and registered scripts",
        now=ctx.now,
    )]


# ── Mixed content ───────────────────────────────────────────────


def detect_mixed_content(ctx: DetectionContext) -> list[AssumptionWarning]:
    if not ctx.runtime.site.is_secure:
        return []
    found = [
        f"{INSECURE_RESOURCE_LABELS[attr.lower()]}:{url}"
        for attr, url in INSECURE_RESOURCE_PATTERN.findall(ctx.snapshot.head)
    ]
    if not found:
        return []
    return [make_warning(
        MixedContentDetails(count=len(found), examples=found[:MIXED_CONTENT_MAX_EXAMPLES]),
        message=f"{len(found)} insecure (http://) resources are referenced on a secure page.",
        location="href/src attributes in page head",
        now=ctx.now,
    )]
