"""Runtime registries exposed by the host to the detectors."""

from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from sitewatch.host.hooks import HookRegistry


class SiteInfo(BaseModel):
    """Identity of the site under inspection."""

    home_url: str = "http://localhost"
    theme_slug: str = ""

    @property
    def is_secure(self) -> bool:
        return urlsplit(self.home_url).scheme.lower() == "https"

    @property
    def rest_base(self) -> str:
        return self.home_url.rstrip("/") + "/wp-json"


class CronState(BaseModel):
    """Scheduled-task registry snapshot.

    ``jobs`` maps the scheduled run time (epoch seconds) to the hook names
    still pending at that time.
    """

    jobs: dict[float, list[str]] = Field(default_factory=dict)
    lock_acquired_at: float | None = None
    disabled: bool = False


class DebugFlags(BaseModel):
    """Runtime debug toggles consulted by the debug exposure detector."""

    wp_debug: bool = False
    wp_debug_display: bool = False
    script_debug: bool = False
    display_errors: bool = False


class HostRuntime(BaseModel):
    """Everything a detector may read about the running host."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    site: SiteInfo = Field(default_factory=SiteInfo)
    hooks: HookRegistry = Field(default_factory=HookRegistry)
    scripts: dict[str, str] = Field(default_factory=dict)
    styles: dict[str, str] = Field(default_factory=dict)
    cron: CronState = Field(default_factory=CronState)
    debug: DebugFlags = Field(default_factory=DebugFlags)
