"""Pattern tables for the detectors.

Kept as data so each table can be exercised on its own. Order matters
wherever a table is scanned first-match-wins (schema source signatures).
"""

from __future__ import annotations

import re

# ── Schema collision ─────────────────────────────────────────────

SCHEMA_SCRIPT_PATTERN = re.compile(
    r"<script[^>]*type=[\"']application/ld\+json[\"'][^>]*>(.*?)</script>",
    re.IGNORECASE | re.DOTALL,
)

# Scanned in order against an item's serialized JSON; first hit wins.
# "Product" is a bare value match, so any Product item without an earlier
# vendor fingerprint is attributed to WooCommerce.
SCHEMA_SOURCE_SIGNATURES: list[tuple[tuple[str, ...], str]] = [
    (("rank-math", "rankMath"), "Rank Math"),
    (("yoast",), "Yoast SEO"),
    (("seopress",), "SEOPress"),
    (("aioseo",), "All in One SEO"),
    (("the-seo-framework",), "The SEO Framework"),
    (("schema-pro", "SchemaPro"), "Schema Pro"),
    (("woocommerce", "Product"), "WooCommerce"),
]

SCHEMA_THEME_SOURCE = "Theme"
SCHEMA_UNKNOWN_SOURCE = "Unknown source"

# ── Analytics duplication ───────────────────────────────────────

# name → (label, id pattern with the id in group 1)
ANALYTICS_PATTERNS: dict[str, tuple[str, re.Pattern[str]]] = {
    "ga4": ("Google Analytics 4", re.compile(r"\b(G-[A-Z0-9]{4,})\b")),
    "ua": ("Universal Analytics", re.compile(r"\b(UA-\d{4,}-\d+)\b")),
    "gtm": ("Google Tag Manager", re.compile(r"\b(GTM-[A-Z0-9]{4,})\b")),
    "fb_pixel": (
        "Facebook Pixel",
        re.compile(r"fbq\(\s*['\"]init['\"]\s*,\s*['\"](\d+)['\"]", re.IGNORECASE),
    ),
}

# label → template; ``{id}`` is replaced with the escaped tracking id
ANALYTICS_LOCATION_TEMPLATES: dict[str, str] = {
    "gtag.js (external)": r"googletagmanager\.com/gtag/js\?id={id}",
    "gtag config (inline)": r"gtag\(\s*['\"]config['\"]\s*,\s*['\"]{id}",
    "dataLayer push": r"dataLayer\.push.*{id}",
}

# ── Font redundancy ─────────────────────────────────────────────

GOOGLE_FONTS_URL_PATTERN = re.compile(
    r"fonts\.googleapis\.com/css2?\?([^\"'>\s]+)",
    re.IGNORECASE,
)
FONT_VARIANT_PATTERN = re.compile(r"[:@].*$")
FONT_FACE_PATTERN = re.compile(
    r"@font-face\s*\{[^}]*font-family:\s*['\"]?([^'\";,}]+)",
    re.IGNORECASE,
)
GOOGLE_FONTS_SOURCE = "Google Fonts"
FONT_FACE_SOURCE = "Inline @font-face"

# ── Inline CSS ──────────────────────────────────────────────────

STYLE_BLOCK_PATTERN = re.compile(r"<style[^>]*>(.*?)</style>", re.IGNORECASE | re.DOTALL)

# bucket → content markers; first match wins, anything else is "Other Inline"
INLINE_CSS_BUCKETS: list[tuple[str, tuple[str, ...]]] = [
    ("Block Styles", ("wp-block",)),
    ("Customizer", ("customizer", "custom-css")),
]
INLINE_CSS_OTHER_BUCKET = "Other Inline"

SPIKE_MIN_SAMPLES = 6
SPIKE_RATIO = 1.5

# ── jQuery conflict ─────────────────────────────────────────────

JQUERY_FILE_PATTERN = re.compile(
    r"(?:^|/)jquery(?:[.-](?:min|core|migrate|slim))*"
    r"(?:[.-]v?(\d+(?:\.\d+)+))?"
    r"(?:[.-](?:min|slim))*\.js(?:$|[?#])",
    re.IGNORECASE,
)
VERSION_QUERY_PATTERN = re.compile(r"[?&]ver=(\d+(?:\.\d+)+)", re.IGNORECASE)
VERSION_PATH_PATTERN = re.compile(r"/(\d+\.\d+(?:\.\d+)*)/")
UNKNOWN_VERSION = "unknown"

JQUERY_CDN_MARKERS = (
    "code.jquery.com",
    "ajax.googleapis.com",
    "cdnjs.cloudflare.com",
    "cdn.jsdelivr.net",
    "unpkg.com",
    "ajax.aspnetcdn.com",
    "//cdn.",
)
JQUERY_CORE_MARKERS = ("/wp-includes/",)
JQUERY_SOURCE_CDN = "CDN"
JQUERY_SOURCE_CORE = "WordPress core"
JQUERY_SOURCE_OTHER = "Other"

# ── Meta tag duplication ────────────────────────────────────────

META_TAGS = (
    "viewport",
    "robots",
    "description",
    "og:title",
    "og:description",
    "og:image",
    "twitter:card",
)


def meta_tag_pattern(tag: str) -> re.Pattern[str]:
    """Pattern matching a ``<meta>`` element whose name/property is *tag*."""
    return re.compile(
        r"<meta\b[^>]*\b(?:name|property)\s*=\s*[\"']" + re.escape(tag) + r"[\"'][^>]*>",
        re.IGNORECASE,
    )


# ── REST exposure ───────────────────────────────────────────────

USERS_ROUTE = "/wp/v2/users"
OEMBED_ROUTE = "/oembed/1.0/embed"

# ── Lazy loading ────────────────────────────────────────────────

LAZY_LOAD_PATTERNS: dict[str, re.Pattern[str]] = {
    "Native loading=\"lazy\"": re.compile(r"loading\s*=\s*[\"']?lazy\b", re.IGNORECASE),
    "lazysizes": re.compile(r"lazysizes", re.IGNORECASE),
    "Lozad.js": re.compile(r"\blozad\b", re.IGNORECASE),
    "vanilla-lazyload": re.compile(r"vanilla-lazyload", re.IGNORECASE),
    "a3 Lazy Load": re.compile(r"a3[-_]lazy[-_]load", re.IGNORECASE),
    "WP Rocket LazyLoad": re.compile(r"rocket[-_]lazyload", re.IGNORECASE),
    "Jetpack Lazy Images": re.compile(r"jetpack-lazy-images", re.IGNORECASE),
    "Smush Lazy Load": re.compile(r"smush-lazy-load", re.IGNORECASE),
    "Perfmatters Lazy Load": re.compile(r"perfmatters[-_]lazy", re.IGNORECASE),
}

# ── Mixed content ───────────────────────────────────────────────

INSECURE_RESOURCE_PATTERN = re.compile(
    r"\b(href|src)\s*=\s*[\"'](http://[^\"']+)[\"']",
    re.IGNORECASE,
)
INSECURE_RESOURCE_LABELS = {"href": "stylesheet", "src": "script"}
MIXED_CONTENT_MAX_EXAMPLES = 5

# ── Security headers ────────────────────────────────────────────

SECURITY_HEADERS = (
    "x-content-type-options",
    "x-frame-options",
    "x-xss-protection",
    "strict-transport-security",
)

# ── Debug exposure ──────────────────────────────────────────────

# DebugFlags field → reported name
DEBUG_FLAGS: dict[str, str] = {
    "wp_debug": "WP_DEBUG",
    "wp_debug_display": "WP_DEBUG_DISPLAY",
    "script_debug": "SCRIPT_DEBUG",
    "display_errors": "display_errors",
}

# ── Cron ────────────────────────────────────────────────────────

CRON_STUCK_AFTER_SECS = 3600
CRON_LOCK_STALE_AFTER_SECS = 600
