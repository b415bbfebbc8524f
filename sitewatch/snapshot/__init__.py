"""Rendered output capture."""

from sitewatch.snapshot.capture import RenderHooks, SnapshotCapturer

__all__ = ["RenderHooks", "SnapshotCapturer"]
