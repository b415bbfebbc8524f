"""Tests for sitewatch/host/hooks.py — prioritised echo hooks."""

from __future__ import annotations

import contextlib
import io

import pytest

from sitewatch.host.hooks import HEAD_HOOK, HookRegistry


def _run(hooks: HookRegistry, name: str) -> str:
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        hooks.do_action(name)
    return buffer.getvalue()


class TestHookRegistry:
    def test_unknown_hook_is_noop(self) -> None:
        assert _run(HookRegistry(), "nothing") == ""

    def test_priority_order(self) -> None:
        hooks = HookRegistry()
        hooks.add_action(HEAD_HOOK, lambda: print("late", end=""), priority=20)
        hooks.add_action(HEAD_HOOK, lambda: print("early", end=""), priority=1)
        assert _run(hooks, HEAD_HOOK) == "earlylate"

    def test_ties_keep_insertion_order(self) -> None:
        hooks = HookRegistry()
        hooks.add_action(HEAD_HOOK, lambda: print("a", end=""))
        hooks.add_action(HEAD_HOOK, lambda: print("b", end=""))
        assert _run(hooks, HEAD_HOOK) == "ab"

    def test_remove_action(self) -> None:
        hooks = HookRegistry()

        def cb() -> None:
            print("x", end="")

        hooks.add_action(HEAD_HOOK, cb)
        assert hooks.has_action(HEAD_HOOK)
        hooks.remove_action(HEAD_HOOK, cb)
        assert not hooks.has_action(HEAD_HOOK)
        assert _run(hooks, HEAD_HOOK) == ""

    def test_exceptions_propagate(self) -> None:
        hooks = HookRegistry()

        def boom() -> None:
            raise RuntimeError("template error")

        hooks.add_action(HEAD_HOOK, boom)
        with pytest.raises(RuntimeError):
            hooks.do_action(HEAD_HOOK)
