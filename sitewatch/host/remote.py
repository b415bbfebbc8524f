"""Remote host — builds a ``HostRuntime`` from a live site's rendered home page.

The head hook echoes the page's ``<head>`` markup; the foot hook echoes
the trailing asset tags of ``<body>`` (what the footer hook prints on a
typical theme). Script and style registries come from the ``id="…-js"``
and ``id="…-css"`` attributes the platform puts on enqueued assets.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

import httpx
import structlog
from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from sitewatch.host.exceptions import HostFetchError
from sitewatch.host.hooks import FOOT_HOOK, HEAD_HOOK, HookRegistry
from sitewatch.host.runtime import HostRuntime, SiteInfo

logger = structlog.stdlib.get_logger()

_THEME_PATTERN = re.compile(r"/wp-content/themes/([^/\"'?#\s]+)/", re.IGNORECASE)

# Tags that the footer hook typically prints at the end of <body>
_FOOT_TAGS = {"script", "style", "link", "noscript", "template"}


def _handle_from(tag: Tag, attr: str, suffix: str) -> str:
    """Registry handle: the element id minus its suffix, else the file name."""
    tag_id = str(tag.get("id") or "")
    if tag_id.endswith(suffix):
        return tag_id[: -len(suffix)]
    if tag_id:
        return tag_id
    path = urlsplit(str(tag.get(attr) or "")).path
    return path.rsplit("/", 1)[-1] or path


def _foot_markup(body: Tag | None) -> str:
    """Collect the trailing run of asset tags at the end of <body>."""
    if body is None:
        return ""
    trailing: list[str] = []
    for node in reversed(body.contents):
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            if node.strip():
                break
            continue
        if isinstance(node, Tag) and node.name in _FOOT_TAGS:
            trailing.append(str(node))
            continue
        break
    return "\n".join(reversed(trailing))


def parse_page(html: str, home_url: str, theme_slug: str = "") -> HostRuntime:
    """Build a runtime for *home_url* from its rendered HTML."""
    soup = BeautifulSoup(html, "html.parser")
    head_markup = soup.head.decode_contents() if soup.head is not None else ""
    foot_markup = _foot_markup(soup.body)

    scripts: dict[str, str] = {}
    for tag in soup.find_all("script", src=True):
        scripts[_handle_from(tag, "src", "-js")] = str(tag["src"])

    styles: dict[str, str] = {}
    for tag in soup.find_all("link", href=True):
        rel = tag.get("rel") or []
        rels = [rel] if isinstance(rel, str) else list(rel)
        if "stylesheet" in (r.lower() for r in rels):
            styles[_handle_from(tag, "href", "-css")] = str(tag["href"])

    if not theme_slug:
        match = _THEME_PATTERN.search(html)
        theme_slug = match.group(1) if match else ""

    hooks = HookRegistry()
    hooks.add_action(HEAD_HOOK, lambda: print(head_markup, end=""))
    hooks.add_action(FOOT_HOOK, lambda: print(foot_markup, end=""))

    return HostRuntime(
        site=SiteInfo(home_url=home_url, theme_slug=theme_slug),
        hooks=hooks,
        scripts=scripts,
        styles=styles,
    )


def fetch_runtime(
    client: httpx.Client,
    home_url: str,
    theme_slug: str = "",
) -> HostRuntime:
    """GET the home page and parse it into a ``HostRuntime``.

    Raises:
        HostFetchError: the page could not be retrieved.
    """
    try:
        resp = client.get(home_url, follow_redirects=True)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise HostFetchError(f"Failed to fetch {home_url}: {exc}") from exc

    runtime = parse_page(resp.text, home_url, theme_slug=theme_slug)
    logger.info(
        "remote_site_loaded",
        home_url=home_url,
        scripts=len(runtime.scripts),
        styles=len(runtime.styles),
        theme=runtime.site.theme_slug,
    )
    return runtime
