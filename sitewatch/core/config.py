"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr, field_validator

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

# Inline CSS threshold bounds (KB)
_MIN_THRESHOLD_KB = 1
_MAX_THRESHOLD_KB = 10240


class SiteConfig(BaseModel):
    """The site being watched."""

    home_url: str = "http://localhost"
    theme_slug: str = ""
    watched_options: list[str] = ["functionalities_snippets"]


class DetectionConfig(BaseModel):
    """Assumption detection toggles and thresholds.

    One enable flag per warning kind. Loaded once per run and never
    mutated while the run is in progress.
    """

    enabled: bool = False
    detect_schema_collision: bool = True
    detect_analytics_duplication: bool = True
    detect_font_redundancy: bool = True
    detect_inline_css_growth: bool = True
    detect_inline_css_spike: bool = True
    detect_jquery_conflict: bool = True
    detect_meta_duplication: bool = True
    detect_rest_exposure: bool = True
    detect_oembed_author_exposure: bool = True
    detect_lazy_load_conflict: bool = True
    detect_mixed_content: bool = True
    detect_missing_security_headers: bool = True
    detect_debug_exposure: bool = True
    detect_cron_issues: bool = True
    inline_css_threshold_kb: int = 50
    rerun_interval_hours: float = 6.0

    @field_validator("inline_css_threshold_kb", mode="before")
    @classmethod
    def _clamp_threshold(cls, value: Any) -> int:
        kb = int(value)
        return max(_MIN_THRESHOLD_KB, min(kb, _MAX_THRESHOLD_KB))

    def is_enabled(self, kind: str) -> bool:
        """Return the enable flag for a warning kind (unknown kinds are off)."""
        return bool(getattr(self, f"detect_{kind}", False))


class ProbeConfig(BaseModel):
    """Outbound HTTP probe settings."""

    timeout_secs: float = 5.0
    user_agent: str = "sitewatch/0.1"

    @field_validator("timeout_secs", mode="before")
    @classmethod
    def _clamp_timeout(cls, value: Any) -> float:
        return max(0.5, min(float(value), 30.0))


class StorageConfig(BaseModel):
    """Persisted state location."""

    path: str = "data/sitewatch.db"


class AdminConfig(BaseModel):
    """Administrative web surface configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    username: str = ""
    password: SecretStr = SecretStr("")
    nonce_secret: SecretStr = SecretStr("")
    nonce_lifetime_secs: int = 86400


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    site: SiteConfig = SiteConfig()
    detection: DetectionConfig = DetectionConfig()
    probes: ProbeConfig = ProbeConfig()
    storage: StorageConfig = StorageConfig()
    admin: AdminConfig = AdminConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
