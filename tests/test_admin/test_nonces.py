"""Tests for sitewatch/admin/nonces.py — action-bound request tokens."""

from __future__ import annotations

from sitewatch.admin.nonces import NonceManager

DAY = 86400


class _Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestNonceManager:
    def test_round_trip(self) -> None:
        nonces = NonceManager("secret", clock=_Clock())
        token = nonces.create("sitewatch_assumptions", "admin")
        assert len(token) == 20
        assert nonces.verify(token, "sitewatch_assumptions", "admin")

    def test_bound_to_action_and_user(self) -> None:
        nonces = NonceManager("secret", clock=_Clock())
        token = nonces.create("sitewatch_assumptions", "admin")
        assert not nonces.verify(token, "other_action", "admin")
        assert not nonces.verify(token, "sitewatch_assumptions", "editor")

    def test_bound_to_secret(self) -> None:
        clock = _Clock()
        token = NonceManager("secret-a", clock=clock).create("a", "admin")
        assert not NonceManager("secret-b", clock=clock).verify(token, "a", "admin")

    def test_valid_through_next_tick(self) -> None:
        clock = _Clock()
        nonces = NonceManager("secret", lifetime_secs=DAY, clock=clock)
        token = nonces.create("a", "admin")
        clock.now += DAY / 2
        assert nonces.verify(token, "a", "admin")

    def test_expires_after_lifetime(self) -> None:
        clock = _Clock()
        nonces = NonceManager("secret", lifetime_secs=DAY, clock=clock)
        token = nonces.create("a", "admin")
        clock.now += DAY + 1
        assert not nonces.verify(token, "a", "admin")

    def test_empty_or_garbage_rejected(self) -> None:
        nonces = NonceManager("secret", clock=_Clock())
        assert not nonces.verify("", "a", "admin")
        assert not nonces.verify("not-a-token", "a", "admin")

    def test_ephemeral_secret(self) -> None:
        clock = _Clock()
        first = NonceManager(clock=clock)
        token = first.create("a", "admin")
        assert first.verify(token, "a", "admin")
        assert not NonceManager(clock=clock).verify(token, "a", "admin")
