"""SnapshotCapturer — runs the head/foot render hooks once per detection run."""

from __future__ import annotations

import contextlib
import io
from typing import Protocol

import structlog

from sitewatch.core.types import Snapshot
from sitewatch.host.hooks import FOOT_HOOK, HEAD_HOOK

logger = structlog.stdlib.get_logger()


class RenderHooks(Protocol):
    """Capability the host provides for emitting page markup."""

    def do_action(self, name: str) -> None: ...


class SnapshotCapturer:
    """Captures rendered head and foot markup into memory.

    The result is cached for the lifetime of the capturer, so every
    detector in a run sees the same text. Create a new capturer for each
    run (including forced re-runs) to avoid serving stale output.
    """

    def __init__(
        self,
        hooks: RenderHooks,
        head_hook: str = HEAD_HOOK,
        foot_hook: str = FOOT_HOOK,
        log_failures: bool = False,
    ) -> None:
        self._hooks = hooks
        self._head_hook = head_hook
        self._foot_hook = foot_hook
        self._log_failures = log_failures
        self._snapshot: Snapshot | None = None
        self._capture_count = 0

    @property
    def captured(self) -> bool:
        return self._snapshot is not None

    @property
    def capture_count(self) -> int:
        """How many times the hooks were actually invoked (0 or 1)."""
        return self._capture_count

    def capture(self) -> Snapshot:
        if self._snapshot is None:
            self._capture_count += 1
            self._snapshot = Snapshot(
                head=self._capture_section(self._head_hook),
                foot=self._capture_section(self._foot_hook),
            )
        return self._snapshot

    def _capture_section(self, hook: str) -> str:
        """Run *hook* with stdout redirected; empty string on any failure.

        ``redirect_stdout`` restores the stream it replaced on exit, which
        also unwinds any redirection a failing callback left open.
        """
        buffer = io.StringIO()
        try:
            with contextlib.redirect_stdout(buffer):
                self._hooks.do_action(hook)
        except Exception as exc:
            if self._log_failures:
                logger.debug("snapshot_capture_failed", hook=hook, error=str(exc))
            return ""
        return buffer.getvalue()
