#!/usr/bin/env python3

"""
Network-related matchers for IOC extraction.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Mapping
from typing import ClassVar

import regex

from iocsift.modules.extractor_base import (
    AT_SEPARATOR,
    CategoryMatcher,
    DomainRules,
    refang,
)
from iocsift.modules.indicators import Indicator, IndicatorCategory

URL_SCHEME = regex.compile(r"^(?P<scheme>[a-zA-Z]+)(?:://|\[:\]//|\[://\])")
TRAILING_PUNCTUATION = ".,;:!?'\""
CLOSING_BRACKETS = {")": "(", "]": "[", "}": "{"}


def trim_url(url: str) -> str:
    """
    Strip sentence punctuation and unbalanced closing brackets from a URL.

    Args:
        url: Raw URL match

    Returns:
        URL without trailing punctuation
    """
    while url:
        last = url[-1]
        if last in TRAILING_PUNCTUATION:
            url = url[:-1]
        elif last in CLOSING_BRACKETS and url.count(last) > url.count(CLOSING_BRACKETS[last]):
            url = url[:-1]
        else:
            break
    return url


class UrlMatcher(CategoryMatcher):
    """Match http, https and ftp URLs."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.URL

    def to_indicator(self, value: str, start: int, end: int) -> Indicator | None:
        trimmed = trim_url(value)
        scheme = URL_SCHEME.match(trimmed)
        if scheme is None or scheme.end() == len(trimmed):
            return None
        return super().to_indicator(trimmed, start, start + len(trimmed))

    def normalize(self, value: str) -> str | None:
        scheme = URL_SCHEME.match(value)
        if scheme is None:
            return None
        name = scheme.group("scheme").lower().replace("x", "t")
        return f"{name}://{refang(value[scheme.end():])}"


class Ipv4Matcher(CategoryMatcher):
    """Match dotted-quad IPv4 addresses."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.IPV4

    def normalize(self, value: str) -> str | None:
        parts = refang(value).split(".")
        return ".".join(str(int(part)) for part in parts)


class Ipv6Matcher(CategoryMatcher):
    """Match full and compressed IPv6 addresses."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.IPV6

    def normalize(self, value: str) -> str | None:
        try:
            return ipaddress.IPv6Address(value).compressed
        except ValueError:
            return None


class DomainMatcher(CategoryMatcher):
    """Match domain names ending in a plausible top-level label."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.DOMAIN

    def __init__(
        self,
        patterns: Mapping[IndicatorCategory, regex.Pattern[str]],
        timeout: float | None = None,
        rules: DomainRules | None = None,
    ) -> None:
        super().__init__(patterns, timeout)
        self.rules = rules or DomainRules()

    def to_indicator(self, value: str, start: int, end: int) -> Indicator | None:
        domain = self.rules.valid_prefix(value)
        if domain is None:
            return None
        return super().to_indicator(domain, start, start + len(domain))

    def normalize(self, value: str) -> str | None:
        return refang(value).lower()


class EmailMatcher(CategoryMatcher):
    """Match email addresses with a plausible domain part."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.EMAIL

    def __init__(
        self,
        patterns: Mapping[IndicatorCategory, regex.Pattern[str]],
        timeout: float | None = None,
        rules: DomainRules | None = None,
    ) -> None:
        super().__init__(patterns, timeout)
        self.rules = rules or DomainRules()

    def to_indicator(self, value: str, start: int, end: int) -> Indicator | None:
        separator = AT_SEPARATOR.search(value)
        if separator is None:
            return None
        domain = self.rules.valid_prefix(value[separator.end():])
        if domain is None:
            return None
        email = value[: separator.end()] + domain
        return super().to_indicator(email, start, start + len(email))

    def normalize(self, value: str) -> str | None:
        local, _, domain = refang(value).rpartition("@")
        if not local or not domain:
            return None
        return f"{local}@{domain.lower()}"


class MacAddressMatcher(CategoryMatcher):
    """Match six-group MAC addresses with a uniform separator."""

    category: ClassVar[IndicatorCategory] = IndicatorCategory.MAC_ADDRESS

    def normalize(self, value: str) -> str | None:
        return value.lower().replace("-", ":")
