#!/usr/bin/env python3
"""Admin server entrypoint — serves the warning management API.

Usage::

    python scripts/admin_server.py --config config/settings.yaml

The site is loaded once at start-up; ``POST /api/run`` re-renders the
captured markup but does not refetch the page. Restart to pick up
changes to the site itself.
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import httpx
import structlog

from sitewatch.admin.actions import AdminActions
from sitewatch.admin.nonces import NonceManager
from sitewatch.admin.web import start_admin_server
from sitewatch.core.config import load_settings
from sitewatch.core.logging import setup_logging
from sitewatch.engine.scheduler import RunScheduler
from sitewatch.host.exceptions import HostFetchError
from sitewatch.host.remote import fetch_runtime
from sitewatch.state.store import SqliteStore

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    http = httpx.Client(
        timeout=settings.probes.timeout_secs,
        headers={"User-Agent": settings.probes.user_agent},
    )
    try:
        runtime = fetch_runtime(http, settings.site.home_url, theme_slug=settings.site.theme_slug)
    except HostFetchError as exc:
        logger.error("site_unavailable", home_url=settings.site.home_url, error=str(exc))
        http.close()
        return 2

    store = SqliteStore(settings.storage.path)
    scheduler = RunScheduler(
        settings.detection,
        runtime,
        store,
        http,
        watched_options=settings.site.watched_options,
    )
    actions = AdminActions(
        scheduler,
        NonceManager(
            secret=settings.admin.nonce_secret.get_secret_value(),
            lifetime_secs=settings.admin.nonce_lifetime_secs,
        ),
    )

    if not (settings.admin.username and settings.admin.password.get_secret_value()):
        logger.warning("admin_credentials_missing")

    runner = await start_admin_server(
        actions,
        host=settings.admin.host,
        port=settings.admin.port,
        username=settings.admin.username or None,
        password=settings.admin.password.get_secret_value() or None,
    )

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    await runner.cleanup()
    store.close()
    http.close()
    logger.info("admin_server_stopped", runs=scheduler.run_count)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Serve the assumption warning admin API.",
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
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
