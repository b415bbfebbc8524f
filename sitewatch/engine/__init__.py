"""Detection engine — run throttling and orchestration."""

from sitewatch.engine.scheduler import RunScheduler

__all__ = ["RunScheduler"]
