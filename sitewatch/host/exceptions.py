"""Exception hierarchy for host integrations."""

from __future__ import annotations


class HostError(Exception):
    """Base exception for host integration errors."""


class HostFetchError(HostError):
    """The live site could not be fetched."""
