"""Tests for sitewatch/detectors/registry.py and the pattern tables."""

from __future__ import annotations

from sitewatch.core.config import DetectionConfig
from sitewatch.core.types import WarningKind
from sitewatch.detectors.base import REASONS
from sitewatch.detectors.patterns import ANALYTICS_PATTERNS, LAZY_LOAD_PATTERNS, meta_tag_pattern
from sitewatch.detectors.registry import DEFAULT_DETECTORS


class TestDefaultDetectors:
    def test_every_kind_covered_once(self) -> None:
        kinds = [kind for d in DEFAULT_DETECTORS for kind in d.kinds]
        assert sorted(kinds) == sorted(WarningKind)

    def test_every_kind_has_a_reason(self) -> None:
        assert set(REASONS) == set(WarningKind)

    def test_unique_names(self) -> None:
        names = [d.name for d in DEFAULT_DETECTORS]
        assert len(names) == len(set(names))

    def test_multi_kind_detector_enabled_by_either_flag(self) -> None:
        inline = next(d for d in DEFAULT_DETECTORS if d.name == "inline_css")
        only_spike = DetectionConfig(detect_inline_css_growth=False)
        neither = DetectionConfig(detect_inline_css_growth=False, detect_inline_css_spike=False)
        assert inline.enabled(only_spike)
        assert not inline.enabled(neither)


class TestPatternTables:
    def test_analytics_ids(self) -> None:
        _, ga4 = ANALYTICS_PATTERNS["ga4"]
        _, ua = ANALYTICS_PATTERNS["ua"]
        _, gtm = ANALYTICS_PATTERNS["gtm"]
        assert ga4.findall("id=G-XYZ9876 and G-AB") == ["G-XYZ9876"]
        assert ua.findall("'UA-1234567-1'") == ["UA-1234567-1"]
        assert gtm.findall("GTM-K9ZZ4Q") == ["GTM-K9ZZ4Q"]
        assert ga4.findall("class='svg-icon'") == []

    def test_meta_tag_pattern_name_or_property(self) -> None:
        pattern = meta_tag_pattern("og:image")
        assert pattern.search('<meta property="og:image" content="a.png">')
        assert pattern.search("<META NAME='og:image' content='a.png'>")
        assert not pattern.search('<meta property="og:image:width" content="1200">')

    def test_lazy_load_patterns(self) -> None:
        assert LAZY_LOAD_PATTERNS["WP Rocket LazyLoad"].search("rocket-lazyload.min.js")
        assert LAZY_LOAD_PATTERNS["Lozad.js"].search("lozad.min.js")
        assert not LAZY_LOAD_PATTERNS["Lozad.js"].search("preloaded")
