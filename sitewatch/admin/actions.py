"""Administrative actions on detected warnings.

Every action checks the request-forgery token first, then the caller,
and answers with a success/failure envelope rather than raising.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import BaseModel, Field

from sitewatch.admin.exceptions import (
    AdminError,
    InvalidNonceError,
    InvalidRequestError,
    PermissionDeniedError,
)
from sitewatch.admin.nonces import NonceManager
from sitewatch.core.types import AssumptionWarning
from sitewatch.engine.scheduler import RunScheduler
from sitewatch.state.identity import warning_identity

logger = structlog.stdlib.get_logger()

NONCE_ACTION = "sitewatch_assumptions"
DEFAULT_SNOOZE_DAYS = 7
MAX_SNOOZE_DAYS = 365

_IDENTITY_PATTERN = re.compile(r"^[0-9a-f]{32}$")


class ActionResult(BaseModel):
    """Success/failure envelope returned by every action."""

    success: bool
    data: dict[str, Any] = Field(default_factory=dict)
    status: int = 200

    def envelope(self) -> dict[str, Any]:
        return {"success": self.success, "data": self.data}


def serialize_warning(warning: AssumptionWarning) -> dict[str, Any]:
    return {
        "hash": warning_identity(warning),
        "kind": warning.kind.value,
        "message": warning.message,
        "location": warning.location,
        "reason": warning.reason,
        "details": warning.details.model_dump(),
        "detected_at": warning.detected_at,
    }


def _clean_identity(identity: str | None) -> str:
    value = (identity or "").strip().lower()
    if not _IDENTITY_PATTERN.match(value):
        raise InvalidRequestError()
    return value


def _clean_days(days: int | str | None) -> int:
    if days is None or days == "":
        return DEFAULT_SNOOZE_DAYS
    try:
        value = int(days)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError() from exc
    if not 1 <= value <= MAX_SNOOZE_DAYS:
        raise InvalidRequestError()
    return value


class AdminActions:
    """Action handlers behind the administrative surface.

    Usage::

        actions = AdminActions(scheduler, NonceManager(secret))
        nonce = actions.issue_nonce("admin")
        result = actions.snooze("admin", nonce, warning_hash, days=3)
        if not result.success:
            print(result.data["message"])
    """

    def __init__(self, scheduler: RunScheduler, nonces: NonceManager) -> None:
        self._scheduler = scheduler
        self._nonces = nonces

    def issue_nonce(self, user: str | None) -> str:
        if not user:
            raise PermissionDeniedError()
        return self._nonces.create(NONCE_ACTION, user)

    # ── Actions ──────────────────────────────────────────────────

    def list_warnings(self, user: str | None) -> ActionResult:
        """Maintenance-page load: throttled run, then the active warnings."""

        def _list() -> dict[str, Any]:
            if not user:
                raise PermissionDeniedError()
            self._scheduler.maybe_run()
            active = self._scheduler.active_warnings()
            return {
                "count": len(active),
                "last_run_at": self._scheduler.results.run_state().last_run_at,
                "warnings": [serialize_warning(w) for w in active],
            }

        return self._guard("list", _list)

    def run_now(self, user: str | None, nonce: str | None) -> ActionResult:
        def _run() -> dict[str, Any]:
            self._authorize(user, nonce)
            warnings = self._scheduler.force_run()
            return {"count": len(warnings)}

        return self._guard("run", _run)

    def dismiss(self, user: str | None, nonce: str | None, identity: str | None) -> ActionResult:
        def _dismiss() -> dict[str, Any]:
            self._authorize(user, nonce)
            removed = self._scheduler.results.dismiss(_clean_identity(identity))
            return {"removed": removed}

        return self._guard("dismiss", _dismiss)

    def snooze(
        self,
        user: str | None,
        nonce: str | None,
        identity: str | None,
        days: int | str | None = DEFAULT_SNOOZE_DAYS,
    ) -> ActionResult:
        def _snooze() -> dict[str, Any]:
            self._authorize(user, nonce)
            entry = self._scheduler.suppressions.snooze(_clean_identity(identity), _clean_days(days))
            return {"expires_at": entry.expires_at}

        return self._guard("snooze", _snooze)

    def ignore(self, user: str | None, nonce: str | None, identity: str | None) -> ActionResult:
        def _ignore() -> dict[str, Any]:
            self._authorize(user, nonce)
            self._scheduler.suppressions.ignore(_clean_identity(identity))
            return {}

        return self._guard("ignore", _ignore)

    # ── Internal ─────────────────────────────────────────────────

    def _authorize(self, user: str | None, nonce: str | None) -> None:
        if not self._nonces.verify(nonce or "", NONCE_ACTION, user or ""):
            raise InvalidNonceError()
        if not user:
            raise PermissionDeniedError()

    def _guard(self, action: str, fn: Callable[[], dict[str, Any]]) -> ActionResult:
        try:
            data = fn()
        except AdminError as exc:
            logger.warning("admin_action_rejected", action=action, reason=str(exc))
            return ActionResult(success=False, data={"message": str(exc)}, status=exc.status)
        return ActionResult(success=True, data=data)
