"""Admin web surface — JSON endpoints for the maintenance page.

Runs as an ``aiohttp`` web server next to the detection engine.
Exposes:
- ``GET /api/warnings``  → throttled run, then the active warnings
- ``GET /api/nonce``     → request-forgery token for the caller
- ``POST /api/run``      → forced detection run
- ``POST /api/dismiss``  → drop one stored warning
- ``POST /api/snooze``   → suppress one warning for N days
- ``POST /api/ignore``   → suppress one warning permanently

Every action answers ``{"success": bool, "data": {...}}``.

Detection and store access run in a worker thread, one action at a time,
so slow probes never stall the event loop. Snapshot capture swaps the
process-wide ``sys.stdout`` while the worker renders; nothing on the loop
may print to stdout meanwhile (logging goes to stderr).
"""

from __future__ import annotations

import asyncio
import base64
import hmac
from collections.abc import Callable
from typing import Any

import structlog
from aiohttp import web

from sitewatch.admin.actions import ActionResult, AdminActions
from sitewatch.admin.exceptions import AdminError

logger = structlog.stdlib.get_logger()


def _check_basic_auth(request: web.Request, username: str, password: str) -> bool:
    """Validate HTTP Basic Auth credentials."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Basic "):
        return False
    try:
        decoded = base64.b64decode(auth_header[6:]).decode("utf-8")
        req_user, req_pass = decoded.split(":", 1)
    except (ValueError, UnicodeDecodeError):
        return False
    user_ok = hmac.compare_digest(req_user, username)
    pass_ok = hmac.compare_digest(req_pass, password)
    return user_ok and pass_ok


@web.middleware
async def _auth_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
    """Resolve the calling user from Basic Auth.

    With no credentials configured nobody is an administrator, so every
    action is refused downstream.
    """
    username = request.app.get("auth_username")
    password = request.app.get("auth_password")
    request["user"] = None
    if username and password:
        if not _check_basic_auth(request, username, password):
            return web.Response(
                status=401,
                text="Unauthorized",
                headers={"WWW-Authenticate": 'Basic realm="Sitewatch Admin"'},
            )
        request["user"] = username
    return await handler(request)


async def _read_params(request: web.Request) -> dict[str, Any]:
    if request.content_type == "application/json":
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    return dict(await request.post())


def _respond(result: ActionResult) -> web.Response:
    return web.json_response(result.envelope(), status=result.status)


async def _call(
    request: web.Request, action: Callable[..., ActionResult], *args: Any
) -> web.Response:
    """Run a blocking action off the event loop, serialized with the others."""
    async with request.app["action_lock"]:
        result = await asyncio.to_thread(action, *args)
    return _respond(result)


# ── Handlers ────────────────────────────────────────────────────


async def _handle_warnings(request: web.Request) -> web.Response:
    actions: AdminActions = request.app["actions"]
    return await _call(request, actions.list_warnings, request["user"])


async def _handle_nonce(request: web.Request) -> web.Response:
    actions: AdminActions = request.app["actions"]
    try:
        nonce = actions.issue_nonce(request["user"])
    except AdminError as exc:
        return _respond(ActionResult(success=False, data={"message": str(exc)}, status=exc.status))
    return _respond(ActionResult(success=True, data={"nonce": nonce}))


async def _handle_run(request: web.Request) -> web.Response:
    actions: AdminActions = request.app["actions"]
    params = await _read_params(request)
    return await _call(request, actions.run_now, request["user"], params.get("nonce"))


async def _handle_dismiss(request: web.Request) -> web.Response:
    actions: AdminActions = request.app["actions"]
    params = await _read_params(request)
    return await _call(
        request, actions.dismiss, request["user"], params.get("nonce"), params.get("hash")
    )


async def _handle_snooze(request: web.Request) -> web.Response:
    actions: AdminActions = request.app["actions"]
    params = await _read_params(request)
    return await _call(
        request,
        actions.snooze,
        request["user"],
        params.get("nonce"),
        params.get("hash"),
        params.get("days"),
    )


async def _handle_ignore(request: web.Request) -> web.Response:
    actions: AdminActions = request.app["actions"]
    params = await _read_params(request)
    return await _call(
        request, actions.ignore, request["user"], params.get("nonce"), params.get("hash")
    )


# ── App factory ─────────────────────────────────────────────────


def create_admin_app(
    actions: AdminActions,
    username: str | None = None,
    password: str | None = None,
) -> web.Application:
    """Create the aiohttp admin application."""
    app = web.Application(middlewares=[_auth_middleware])
    app["actions"] = actions
    app["action_lock"] = asyncio.Lock()
    app["auth_username"] = username
    app["auth_password"] = password
    app.router.add_get("/api/warnings", _handle_warnings)
    app.router.add_get("/api/nonce", _handle_nonce)
    app.router.add_post("/api/run", _handle_run)
    app.router.add_post("/api/dismiss", _handle_dismiss)
    app.router.add_post("/api/snooze", _handle_snooze)
    app.router.add_post("/api/ignore", _handle_ignore)
    return app


async def start_admin_server(
    actions: AdminActions,
    host: str = "127.0.0.1",
    port: int = 8080,
    username: str | None = None,
    password: str | None = None,
) -> web.AppRunner:
    """Start the admin server. Returns the runner for cleanup."""
    app = create_admin_app(actions, username=username, password=password)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("admin_server_started", host=host, port=port, auth=bool(username and password))
    return runner
