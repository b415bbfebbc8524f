"""Assumption detectors."""

from sitewatch.detectors.base import REASONS, DetectionContext, Detector, make_warning
from sitewatch.detectors.registry import DEFAULT_DETECTORS

__all__ = [
    "DEFAULT_DETECTORS",
    "REASONS",
    "DetectionContext",
    "Detector",
    "make_warning",
]
