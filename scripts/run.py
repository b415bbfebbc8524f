#!/usr/bin/env python3
"""One-shot detection pass against a live site — prints warnings as JSON.

Usage::

    # Default config (config/settings.yaml)
    python scripts/run.py

    # Another site, in-memory state only
    python scripts/run.py --url https://example.com --memory

    # Override log level
    python scripts/run.py --log-level DEBUG

Exits 1 when any active warning remains after suppression, 2 when the
site could not be loaded.
"""

from __future__ import annotations

import argparse
import json
import sys

import httpx
import structlog

from sitewatch.admin.actions import serialize_warning
from sitewatch.core.config import load_settings
from sitewatch.core.logging import setup_logging
from sitewatch.engine.scheduler import RunScheduler
from sitewatch.host.exceptions import HostFetchError
from sitewatch.host.remote import fetch_runtime
from sitewatch.state.store import KeyValueStore, MemoryStore, SqliteStore

logger = structlog.get_logger(__name__)


def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    home_url = args.url or settings.site.home_url
    store: KeyValueStore = MemoryStore() if args.memory else SqliteStore(settings.storage.path)

    with httpx.Client(
        timeout=settings.probes.timeout_secs,
        headers={"User-Agent": settings.probes.user_agent},
    ) as http:
        try:
            runtime = fetch_runtime(http, home_url, theme_slug=settings.site.theme_slug)
        except HostFetchError as exc:
            logger.error("site_unavailable", home_url=home_url, error=str(exc))
            return 2

        scheduler = RunScheduler(
            settings.detection,
            runtime,
            store,
            http,
            watched_options=settings.site.watched_options,
        )
        warnings = scheduler.force_run()

    if isinstance(store, SqliteStore):
        store.close()

    print(json.dumps([serialize_warning(w) for w in warnings], indent=2))
    logger.info("detection_pass_finished", home_url=home_url, warnings=len(warnings))
    return 1 if warnings else 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run one assumption detection pass against a site.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Home URL override (default: site.home_url)",
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Keep state in memory instead of the SQLite store",
    )
    args = parser.parse_args()

    sys.exit(run(args))


if __name__ == "__main__":
    main()
