"""Core module — config, types, logging."""

from sitewatch.core.config import Settings, get_settings, load_settings, reset_settings
from sitewatch.core.logging import setup_logging
from sitewatch.core.types import (
    AssumptionWarning,
    BaselineSample,
    RunState,
    Snapshot,
    SuppressionEntry,
    WarningKind,
)

__all__ = [
    "AssumptionWarning",
    "BaselineSample",
    "RunState",
    "Settings",
    "Snapshot",
    "SuppressionEntry",
    "WarningKind",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
