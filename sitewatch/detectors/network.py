"""Detectors that probe the live site over HTTP.

Every probe is best-effort: a transport error or timeout skips that
probe's warning and never fails the run.
"""

from __future__ import annotations

import httpx
import structlog

from sitewatch.core.types import (
    AssumptionWarning,
    MissingSecurityHeadersDetails,
    OembedAuthorExposureDetails,
    RestExposureDetails,
    WarningKind,
)
from sitewatch.detectors.base import DetectionContext, make_warning
from sitewatch.detectors.patterns import OEMBED_ROUTE, SECURITY_HEADERS, USERS_ROUTE

logger = structlog.stdlib.get_logger()


def _probe_users(ctx: DetectionContext) -> AssumptionWarning | None:
    endpoint = ctx.runtime.site.rest_base + USERS_ROUTE
    try:
        resp = ctx.http.head(endpoint)
    except httpx.HTTPError as exc:
        logger.debug("probe_failed", probe="rest_users", endpoint=endpoint, error=str(exc))
        return None
    if resp.status_code != 200:
        return None
    return make_warning(
        RestExposureDetails(endpoint=endpoint, status_code=resp.status_code),
        message="The REST API publicly lists user accounts.",
        location=endpoint,
        now=ctx.now,
    )


def _probe_oembed(ctx: DetectionContext) -> AssumptionWarning | None:
    endpoint = ctx.runtime.site.rest_base + OEMBED_ROUTE
    try:
        resp = ctx.http.get(endpoint, params={"url": ctx.runtime.site.home_url})
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.debug("probe_failed", probe="oembed", endpoint=endpoint, error=str(exc))
        return None
    author = data.get("author_name") if isinstance(data, dict) else None
    if not isinstance(author, str) or not author.strip():
        return None
    return make_warning(
        OembedAuthorExposureDetails(endpoint=endpoint, author_name=author),
        message=f'The oEmbed endpoint exposes the author name "{author}".',
        location=endpoint,
        now=ctx.now,
    )


def detect_rest_exposure(ctx: DetectionContext) -> list[AssumptionWarning]:
    """Users collection and oEmbed author probes; each is independent."""
    warnings: list[AssumptionWarning] = []
    if ctx.config.is_enabled(WarningKind.REST_EXPOSURE):
        users = _probe_users(ctx)
        if users is not None:
            warnings.append(users)
    if ctx.config.is_enabled(WarningKind.OEMBED_AUTHOR_EXPOSURE):
        oembed = _probe_oembed(ctx)
        if oembed is not None:
            warnings.append(oembed)
    return warnings


def detect_missing_security_headers(ctx: DetectionContext) -> list[AssumptionWarning]:
    url = ctx.runtime.site.home_url
    try:
        resp = ctx.http.head(url, follow_redirects=True)
    except httpx.HTTPError as exc:
        logger.debug("probe_failed", probe="security_headers", endpoint=url, error=str(exc))
        return []

    present = {name.lower() for name in resp.headers.keys()}
    missing = [name for name in SECURITY_HEADERS if name not in present]
    if not missing:
        return []
    return [make_warning(
        MissingSecurityHeadersDetails(url=url, missing=missing),
        message=f"Missing security headers: {', '.join(missing)}.",
        location=f"HTTP response headers of {url}",
        now=ctx.now,
    )]
