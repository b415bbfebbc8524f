"""Host runtime — render hooks, asset registries, remote page loading."""

from sitewatch.host.exceptions import HostError, HostFetchError
from sitewatch.host.hooks import FOOT_HOOK, HEAD_HOOK, HookRegistry
from sitewatch.host.remote import fetch_runtime, parse_page
from sitewatch.host.runtime import CronState, DebugFlags, HostRuntime, SiteInfo

__all__ = [
    "FOOT_HOOK",
    "HEAD_HOOK",
    "CronState",
    "DebugFlags",
    "HookRegistry",
    "HostError",
    "HostFetchError",
    "HostRuntime",
    "SiteInfo",
    "fetch_runtime",
    "parse_page",
]
