"""HookRegistry — render-lifecycle action hooks with echo semantics.

Callbacks emit markup by printing to stdout, the way a page template
echoes into the response. ``SnapshotCapturer`` redirects that output into
memory.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable

HEAD_HOOK = "wp_head"
FOOT_HOOK = "wp_footer"

ActionCallback = Callable[[], None]


class HookRegistry:
    """Named actions with prioritised callbacks.

    Usage::

        hooks = HookRegistry()
        hooks.add_action(HEAD_HOOK, lambda: print('<meta name="robots" content="index">'))
        hooks.do_action(HEAD_HOOK)
    """

    def __init__(self) -> None:
        self._actions: dict[str, list[tuple[int, int, ActionCallback]]] = defaultdict(list)
        self._seq = 0

    def add_action(self, name: str, callback: ActionCallback, priority: int = 10) -> None:
        """Register *callback*; lower priorities run first, ties in insertion order."""
        self._seq += 1
        self._actions[name].append((priority, self._seq, callback))

    def remove_action(self, name: str, callback: ActionCallback) -> None:
        self._actions[name] = [
            entry for entry in self._actions.get(name, []) if entry[2] is not callback
        ]

    def has_action(self, name: str) -> bool:
        return bool(self._actions.get(name))

    def do_action(self, name: str) -> None:
        """Run every callback registered for *name*. Exceptions propagate."""
        for _priority, _seq, callback in sorted(
            self._actions.get(name, []), key=lambda e: (e[0], e[1])
        ):
            callback()
