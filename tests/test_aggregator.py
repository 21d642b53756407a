#!/usr/bin/env python3
"""
Tests for indicator types, precedence resolution and deduplication
"""

import pytest

from iocsift.modules.exceptions import UnknownCategoryError
from iocsift.modules.extractor_aggregate import (
    ClaimedSpans,
    ResultAggregator,
    deduplicate,
    required_categories,
)
from iocsift.modules.indicators import (
    ExtractionResult,
    Indicator,
    IndicatorCategory,
    Span,
)


def make(category: IndicatorCategory, value: str, start: int) -> Indicator:
    return Indicator(category, value, value.lower(), Span(start, start + len(value)))


class TestIndicatorCategory:
    """Test category names and parsing."""

    def test_wire_names_and_titles(self):
        assert [category.wire_name for category in IndicatorCategory] == [
            "url", "ipv4", "ipv6", "domain", "email",
            "md5", "sha1", "sha256", "sha512", "mac",
        ]
        assert IndicatorCategory.MAC_ADDRESS.title == "MAC Addresses"
        assert str(IndicatorCategory.IPV4) == "ipv4"

    @pytest.mark.parametrize("name", ["mac", "MAC", "mac_address", "MAC_ADDRESS", " mac "])
    def test_parse_accepts_wire_and_member_names(self, name):
        assert IndicatorCategory.parse(name) is IndicatorCategory.MAC_ADDRESS

    def test_parse_unknown_name(self):
        with pytest.raises(UnknownCategoryError) as exc_info:
            IndicatorCategory.parse("ssdeep")
        assert exc_info.value.name == "ssdeep"

    def test_parse_many_canonical_order(self):
        parsed = IndicatorCategory.parse_many(["mac", "url", IndicatorCategory.IPV4, "url"])
        assert parsed == (
            IndicatorCategory.URL,
            IndicatorCategory.IPV4,
            IndicatorCategory.MAC_ADDRESS,
        )

    def test_parse_many_single_name_and_none(self):
        assert IndicatorCategory.parse_many("md5") == (IndicatorCategory.MD5,)
        assert IndicatorCategory.parse_many(None) == tuple(IndicatorCategory)


class TestIndicator:
    """Test indicator value semantics."""

    def test_equality_ignores_span_and_normalized_form(self):
        first = Indicator(IndicatorCategory.DOMAIN, "Evil.com", "evil.com", Span(0, 8))
        second = Indicator(IndicatorCategory.DOMAIN, "Evil.com", "", Span(40, 48))
        assert first == second
        assert hash(first) == hash(second)

    def test_category_is_part_of_identity(self):
        assert Indicator(IndicatorCategory.MD5, "a") != Indicator(IndicatorCategory.SHA1, "a")

    def test_span_contains(self):
        outer = Span(0, 10)
        assert outer.contains(Span(0, 10))
        assert outer.contains(Span(2, 5))
        assert not outer.contains(Span(5, 11))


class TestExtractionResult:
    """Test the result mapping."""

    def test_keys_follow_canonical_order(self):
        result = ExtractionResult(
            {
                IndicatorCategory.MAC_ADDRESS: [],
                IndicatorCategory.URL: [make(IndicatorCategory.URL, "http://a.com", 0)],
            },
        )
        assert list(result) == [IndicatorCategory.URL, IndicatorCategory.MAC_ADDRESS]
        assert result[IndicatorCategory.URL] == ["http://a.com"]
        assert result[IndicatorCategory.MAC_ADDRESS] == []
        assert IndicatorCategory.DOMAIN not in result
        assert len(result) == 2

    def test_to_dict_and_total(self):
        result = ExtractionResult(
            {
                IndicatorCategory.IPV4: [
                    make(IndicatorCategory.IPV4, "10.0.0.1", 0),
                    make(IndicatorCategory.IPV4, "10.0.0.2", 10),
                ],
                IndicatorCategory.EMAIL: [],
            },
        )
        assert result.to_dict() == {"ipv4": ["10.0.0.1", "10.0.0.2"], "email": []}
        assert result.total() == 2

    def test_missing_category_raises_key_error(self):
        result = ExtractionResult({IndicatorCategory.URL: []})
        with pytest.raises(KeyError):
            result[IndicatorCategory.DOMAIN]


class TestRequiredCategories:
    """Test which matchers must run for a request."""

    def test_domain_needs_email_and_url(self):
        assert required_categories([IndicatorCategory.DOMAIN]) == (
            IndicatorCategory.EMAIL,
            IndicatorCategory.URL,
            IndicatorCategory.DOMAIN,
        )

    def test_hash_needs_email_and_url(self):
        assert required_categories([IndicatorCategory.MD5]) == (
            IndicatorCategory.EMAIL,
            IndicatorCategory.URL,
            IndicatorCategory.MD5,
        )

    def test_mac_needs_ipv6(self):
        assert required_categories([IndicatorCategory.MAC_ADDRESS]) == (
            IndicatorCategory.IPV6,
            IndicatorCategory.MAC_ADDRESS,
        )

    def test_ipv4_stands_alone(self):
        assert required_categories([IndicatorCategory.IPV4]) == (IndicatorCategory.IPV4,)


class TestClaimedSpans:
    """Test span containment lookups."""

    def setup_method(self):
        """Set up test fixtures."""
        self.claims = ClaimedSpans([Span(10, 20), Span(0, 5)])

    def test_contained_span_is_covered(self):
        assert self.claims.covers(Span(12, 15))
        assert self.claims.covers(Span(0, 5))

    def test_partial_overlap_is_not_covered(self):
        assert not self.claims.covers(Span(4, 6))
        assert not self.claims.covers(Span(15, 25))

    def test_outside_span_is_not_covered(self):
        assert not self.claims.covers(Span(6, 9))
        assert not self.claims.covers(Span(20, 21))

    def test_empty_claims(self):
        assert not ClaimedSpans([]).covers(Span(0, 1))


class TestResultAggregator:
    """Test cross-category resolution."""

    def setup_method(self):
        """Set up test fixtures."""
        self.aggregator = ResultAggregator()

    def test_deduplicate_keeps_first_occurrence(self):
        indicators = [
            make(IndicatorCategory.DOMAIN, "b.com", 0),
            make(IndicatorCategory.DOMAIN, "a.com", 10),
            make(IndicatorCategory.DOMAIN, "b.com", 20),
        ]
        assert [indicator.value for indicator in deduplicate(indicators)] == ["b.com", "a.com"]
        assert deduplicate(indicators)[0].span == Span(0, 5)

    def test_email_claims_contained_domain(self):
        candidates = {
            IndicatorCategory.EMAIL: [make(IndicatorCategory.EMAIL, "a@b.com", 0)],
            IndicatorCategory.URL: [],
            IndicatorCategory.DOMAIN: [
                make(IndicatorCategory.DOMAIN, "b.com", 2),
                make(IndicatorCategory.DOMAIN, "c.com", 10),
            ],
        }
        result = self.aggregator.aggregate(candidates, [IndicatorCategory.DOMAIN])
        assert result.to_dict() == {"domain": ["c.com"]}

    def test_claimed_duplicate_does_not_hide_standalone_occurrence(self):
        """Overlaps are resolved per occurrence before literals are deduplicated."""
        candidates = {
            IndicatorCategory.EMAIL: [make(IndicatorCategory.EMAIL, "a@b.com", 0)],
            IndicatorCategory.DOMAIN: [
                make(IndicatorCategory.DOMAIN, "b.com", 2),
                make(IndicatorCategory.DOMAIN, "b.com", 20),
            ],
        }
        result = self.aggregator.aggregate(
            candidates,
            [IndicatorCategory.EMAIL, IndicatorCategory.DOMAIN],
        )
        assert result[IndicatorCategory.EMAIL] == ["a@b.com"]
        assert result[IndicatorCategory.DOMAIN] == ["b.com"]
        assert result.indicators(IndicatorCategory.DOMAIN)[0].span == Span(20, 25)

    def test_url_claims_contained_hash(self):
        md5 = "5d41402abc4b2a76b9719d911017c592"
        url = f"http://a.com/{md5}"
        candidates = {
            IndicatorCategory.URL: [make(IndicatorCategory.URL, url, 0)],
            IndicatorCategory.MD5: [make(IndicatorCategory.MD5, md5, 13)],
        }
        result = self.aggregator.aggregate(candidates, [IndicatorCategory.MD5])
        assert result[IndicatorCategory.MD5] == []

    def test_ipv4_is_never_claimed(self):
        candidates = {
            IndicatorCategory.URL: [make(IndicatorCategory.URL, "http://10.0.0.1/", 0)],
            IndicatorCategory.IPV4: [make(IndicatorCategory.IPV4, "10.0.0.1", 7)],
        }
        result = self.aggregator.aggregate(
            candidates,
            [IndicatorCategory.URL, IndicatorCategory.IPV4],
        )
        assert result[IndicatorCategory.IPV4] == ["10.0.0.1"]

    def test_requested_category_without_candidates_is_empty(self):
        result = self.aggregator.aggregate({}, [IndicatorCategory.SHA1])
        assert result.to_dict() == {"sha1": []}
