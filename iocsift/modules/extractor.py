#!/usr/bin/env python3

"""
Extraction engine: runs the category matchers over one text snapshot and
aggregates their matches into an ExtractionResult.

An extractor holds only read-only state (compiled patterns, matchers and
configuration), so a single instance can serve concurrent calls.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from iocsift.modules.config import ExtractorConfig
from iocsift.modules.exceptions import InputTooLargeError, InvalidInputError
from iocsift.modules.extractor_aggregate import ResultAggregator, required_categories
from iocsift.modules.extractor_base import CategoryMatcher, DomainRules, load_tlds
from iocsift.modules.extractor_hashes import (
    Md5Matcher,
    Sha1Matcher,
    Sha256Matcher,
    Sha512Matcher,
)
from iocsift.modules.extractor_network import (
    DomainMatcher,
    EmailMatcher,
    Ipv4Matcher,
    Ipv6Matcher,
    MacAddressMatcher,
    UrlMatcher,
)
from iocsift.modules.extractor_patterns import get_patterns
from iocsift.modules.indicators import ExtractionResult, Indicator, IndicatorCategory
from iocsift.modules.logger import get_logger

logger = get_logger(__name__)


class IOCExtractor:
    """Extract URLs, IP addresses, domains, emails, MAC addresses and hashes from text."""

    def __init__(self, config: ExtractorConfig | None = None) -> None:
        """
        Initialize the extractor.

        Args:
            config: Extraction settings; defaults apply when omitted
        """
        self.config = config or ExtractorConfig()

        patterns = get_patterns(self.config.defanged)
        timeout = self.config.pattern_timeout
        rules = DomainRules(load_tlds(self.config.tlds_file))

        matchers: list[CategoryMatcher] = [
            UrlMatcher(patterns, timeout),
            Ipv4Matcher(patterns, timeout),
            Ipv6Matcher(patterns, timeout),
            DomainMatcher(patterns, timeout, rules),
            EmailMatcher(patterns, timeout, rules),
            Md5Matcher(patterns, timeout),
            Sha1Matcher(patterns, timeout),
            Sha256Matcher(patterns, timeout),
            Sha512Matcher(patterns, timeout),
            MacAddressMatcher(patterns, timeout),
        ]
        self.matchers = MappingProxyType({matcher.category: matcher for matcher in matchers})
        self.aggregator = ResultAggregator()

    def _validate(self, text: object) -> str:
        if not isinstance(text, str):
            raise InvalidInputError(text)
        if len(text) > self.config.max_input_length:
            raise InputTooLargeError(len(text), self.config.max_input_length)
        return text

    def extract(
        self,
        text: str,
        categories: Iterable[IndicatorCategory | str] | None = None,
    ) -> ExtractionResult:
        """
        Extract indicators from text.

        Args:
            text: Complete text snapshot to scan
            categories: Categories (members or names such as "ipv4") to return;
                defaults to the configured categories

        Returns:
            Result containing exactly the requested categories. A category that
            was not requested is absent; a requested category without matches
            maps to an empty list.

        Raises:
            InvalidInputError: If text is not a string
            InputTooLargeError: If text exceeds the configured maximum length
            UnknownCategoryError: If a category name is not recognized
            PatternTimeoutError: If a matcher exceeds the configured timeout
        """
        text = self._validate(text)
        requested = (
            self.config.categories
            if categories is None
            else IndicatorCategory.parse_many(categories)
        )

        candidates: dict[IndicatorCategory, list[Indicator]] = {}
        for category in required_categories(requested):
            candidates[category] = self.matchers[category].scan(text)

        result = self.aggregator.aggregate(candidates, requested)
        logger.debug(
            "Extracted %d indicators from %d characters (%s)",
            result.total(),
            len(text),
            ", ".join(f"{category.wire_name}={len(values)}" for category, values in result.items()),
        )
        return result

    def extract_all(self, text: str) -> dict[str, list[str]]:
        """
        Extract every category and return it keyed by wire name.

        Args:
            text: Text to extract IOCs from

        Returns:
            Dictionary with category names as keys and lists of literals as values
        """
        return self.extract(text, IndicatorCategory).to_dict()

    def _extract_category(self, text: str, category: IndicatorCategory) -> list[str]:
        return self.extract(text, [category])[category]

    def extract_urls(self, text: str) -> list[str]:
        """Extract URLs from text."""
        return self._extract_category(text, IndicatorCategory.URL)

    def extract_ipv4(self, text: str) -> list[str]:
        """Extract IPv4 addresses from text."""
        return self._extract_category(text, IndicatorCategory.IPV4)

    def extract_ipv6(self, text: str) -> list[str]:
        """Extract IPv6 addresses from text."""
        return self._extract_category(text, IndicatorCategory.IPV6)

    def extract_domains(self, text: str) -> list[str]:
        """Extract domain names that are not part of a URL or email address."""
        return self._extract_category(text, IndicatorCategory.DOMAIN)

    def extract_emails(self, text: str) -> list[str]:
        """Extract email addresses from text."""
        return self._extract_category(text, IndicatorCategory.EMAIL)

    def extract_md5(self, text: str) -> list[str]:
        """Extract MD5 hashes from text."""
        return self._extract_category(text, IndicatorCategory.MD5)

    def extract_sha1(self, text: str) -> list[str]:
        """Extract SHA1 hashes from text."""
        return self._extract_category(text, IndicatorCategory.SHA1)

    def extract_sha256(self, text: str) -> list[str]:
        """Extract SHA256 hashes from text."""
        return self._extract_category(text, IndicatorCategory.SHA256)

    def extract_sha512(self, text: str) -> list[str]:
        """Extract SHA512 hashes from text."""
        return self._extract_category(text, IndicatorCategory.SHA512)

    def extract_mac_addresses(self, text: str) -> list[str]:
        """Extract MAC addresses from text."""
        return self._extract_category(text, IndicatorCategory.MAC_ADDRESS)
