"""Exception hierarchy for persisted state."""

from __future__ import annotations


class StateError(Exception):
    """Base exception for state storage errors."""


class StateCorruptError(StateError):
    """A stored document could not be decoded."""
