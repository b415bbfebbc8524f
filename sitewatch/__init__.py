"""Sitewatch — assumption detection for rendered sites."""

__version__ = "0.1.0"
