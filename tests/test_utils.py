#!/usr/bin/env python3

"""
Tests for shared utilities
"""

from iocsift.modules.extractor import IOCExtractor
from iocsift.modules.indicators import IndicatorCategory
from iocsift.modules.utils import count_indicators, merge_results


class TestMergeResults:
    """Test merging results from several inputs."""

    def test_merge_preserves_first_occurrence_order(self):
        first = {IndicatorCategory.IPV4: ["10.0.0.2", "10.0.0.1"]}
        second = {IndicatorCategory.IPV4: ["10.0.0.1", "10.0.0.3"]}

        merged = merge_results([first, second])

        assert merged == {IndicatorCategory.IPV4: ["10.0.0.2", "10.0.0.1", "10.0.0.3"]}

    def test_merge_keeps_empty_requested_categories(self):
        merged = merge_results(
            [
                {IndicatorCategory.URL: []},
                {IndicatorCategory.MD5: ["d41d8cd98f00b204e9800998ecf8427e"]},
            ],
        )

        assert merged == {
            IndicatorCategory.URL: [],
            IndicatorCategory.MD5: ["d41d8cd98f00b204e9800998ecf8427e"],
        }

    def test_merge_uses_canonical_category_order(self):
        merged = merge_results(
            [{IndicatorCategory.MAC_ADDRESS: [], IndicatorCategory.URL: []}],
        )

        assert list(merged) == [IndicatorCategory.URL, IndicatorCategory.MAC_ADDRESS]

    def test_merge_extraction_results(self):
        extractor = IOCExtractor()
        results = [
            extractor.extract("a 10.0.0.1 evil.com", ["ipv4", "domain"]),
            extractor.extract("b evil.com bad.org", ["ipv4", "domain"]),
        ]

        merged = merge_results(results)

        assert merged[IndicatorCategory.DOMAIN] == ["evil.com", "bad.org"]
        assert merged[IndicatorCategory.IPV4] == ["10.0.0.1"]

    def test_merge_nothing(self):
        assert merge_results([]) == {}


class TestCountIndicators:
    """Test indicator totals."""

    def test_count(self):
        results = {
            IndicatorCategory.URL: ["http://a.com"],
            IndicatorCategory.IPV4: ["10.0.0.1", "10.0.0.2"],
            IndicatorCategory.MD5: [],
        }
        assert count_indicators(results) == 3
