#!/usr/bin/env python3

"""
Core helpers for extracting indicators of compromise (IOCs).

Every category matcher derives from ``CategoryMatcher``: it scans the whole
text with one compiled pattern and turns each match into an ``Indicator``,
or rejects it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import ClassVar

import regex

from iocsift.modules.exceptions import PatternTimeoutError
from iocsift.modules.indicators import Indicator, IndicatorCategory, Span
from iocsift.modules.logger import get_logger

# Constants for validation
MAX_DOMAIN_LENGTH = 253
MAX_DOMAIN_PART_LENGTH = 63
MIN_DOMAIN_PARTS = 2

logger = get_logger(__name__)

COMMON_TLDS: frozenset[str] = frozenset(
    {
        "com", "org", "net", "edu", "gov", "mil", "int", "info",
        "biz", "name", "pro", "museum", "aero", "coop", "jobs",
        "travel", "mobi", "asia", "tel", "xxx", "post", "cat",
        "arpa", "top", "xyz", "club", "online", "site", "shop",
        "app", "blog", "dev", "art", "web", "cloud", "page",
        "store", "host", "tech", "space", "live", "news", "io",
        "co", "me", "tv", "us", "uk", "ru", "fr", "de", "jp",
        "cn", "au", "ca", "in", "it", "nl", "se", "no", "fi",
        "dk", "ch", "at", "be", "es", "pt", "br", "mx", "ar",
        "cl", "pe", "ve", "za", "pl", "cz", "gr", "hu", "ro",
        "ua", "by", "kz", "th", "sg", "my", "ph", "vn", "id",
        "tr", "il", "ae", "sa", "ir", "pk", "eg", "ng", "kr",
        "tw", "hk", "mo", "eu", "nz", "ai", "gg", "im", "je",
        "su", "cc", "ws", "pw", "bz", "to", "ly", "la", "ms",
        "ml", "ga", "cf", "gq", "tk", "ie", "is", "lt", "lv",
        "ee", "sk", "si", "hr", "bg", "rs", "ge", "am", "az",
        "uz", "lk", "bd", "np", "qa", "kw", "om", "ma", "ke",
        "onion", "icu", "work", "link", "click", "fun", "buzz",
        "vip", "win", "bid", "loan", "email", "support", "services",
    }
)

COMMON_FILE_EXTENSIONS: frozenset[str] = frozenset(
    {
        "exe", "dll", "sys", "cmd", "bat", "ps1", "vbs", "js", "pdf",
        "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "jpg",
        "jpeg", "png", "gif", "bmp", "zip", "rar", "7z", "gz", "tar",
        "pif", "scr", "msi", "jar", "py", "pyc", "pyo", "php", "asp",
        "aspx", "jsp", "htm", "html", "css", "json", "xml", "reg",
        "ini", "cfg", "log", "tmp", "dat", "db", "sqlite", "iso",
        "img", "vhd", "vmdk", "md", "sh", "lnk",
    }
)

DOT_SEPARATOR = regex.compile(r"(\[\.\]|\(\.\)|\{\.\}|\[dot\]|\.)")
AT_SEPARATOR = regex.compile(r"\[@\]|\(@\)|\[at\]|@")


def refang(value: str) -> str:
    """
    Replace defanged dot and at-sign notation with the plain characters.

    Args:
        value: Possibly defanged value

    Returns:
        Value with standard dots and at-signs
    """
    value = DOT_SEPARATOR.sub(".", value)
    return AT_SEPARATOR.sub("@", value)


def load_tlds(tlds_file: Path | None = None) -> frozenset[str]:
    """
    Load the set of valid TLDs.

    Args:
        tlds_file: Optional newline-separated TLD list extending the built-in set

    Returns:
        Set of valid, lower-cased TLDs
    """
    if tlds_file is None:
        return COMMON_TLDS

    try:
        with tlds_file.open(encoding="utf-8") as f:
            extra = {
                line.strip().lower().lstrip(".")
                for line in f
                if line.strip() and not line.lstrip().startswith("#")
            }
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to load TLD list from %s: %s", tlds_file, exc)
        return COMMON_TLDS

    logger.debug("Loaded %d extra TLDs from %s", len(extra), tlds_file)
    return COMMON_TLDS | frozenset(extra)


class DomainRules:
    """Plausibility rules shared by the domain and email matchers."""

    def __init__(self, valid_tlds: Iterable[str] = COMMON_TLDS) -> None:
        self.valid_tlds = frozenset(tld.lower() for tld in valid_tlds)

    def is_valid_domain(self, domain: str) -> bool:
        """
        Validate if a refanged string is a plausible domain.

        Args:
            domain: Domain string to validate

        Returns:
            True if valid domain, False otherwise
        """
        if not domain or "." not in domain or len(domain) > MAX_DOMAIN_LENGTH:
            return False

        parts = domain.lower().split(".")
        if len(parts) < MIN_DOMAIN_PARTS:
            return False

        tld = parts[-1]
        if tld not in self.valid_tlds or tld in COMMON_FILE_EXTENSIONS:
            return False

        return all(0 < len(part) <= MAX_DOMAIN_PART_LENGTH for part in parts)

    def valid_prefix(self, host: str) -> str | None:
        """
        Return the longest leading run of labels that forms a valid domain.

        ``evil.com.Next`` (a missing space after a full stop) yields
        ``evil.com``. Defanged separators are kept as written.

        Args:
            host: Matched host text, possibly defanged

        Returns:
            The valid prefix, or None if no prefix of two or more labels is valid
        """
        pieces = DOT_SEPARATOR.split(host)
        # Labels and separators alternate; stop growing once the refanged
        # prefix would exceed the domain length limit.
        longest, length = 1, len(pieces[0])
        while longest + 1 < len(pieces):
            length += 1 + len(pieces[longest + 1])
            if length > MAX_DOMAIN_LENGTH:
                break
            longest += 2
        for count in range(longest, 2, -2):
            candidate = "".join(pieces[:count])
            if self.is_valid_domain(refang(candidate)):
                return candidate
        return None


class CategoryMatcher(ABC):
    """Scan text for one indicator category."""

    category: ClassVar[IndicatorCategory]

    def __init__(
        self,
        patterns: Mapping[IndicatorCategory, regex.Pattern[str]],
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the matcher.

        Args:
            patterns: Compiled pattern set to take this category's pattern from
            timeout: Maximum seconds a single scan may take, None for no limit
        """
        self.pattern = patterns[self.category]
        self.timeout = timeout

    def scan(self, text: str) -> list[Indicator]:
        """
        Return every accepted, non-overlapping match in left-to-right order.

        Raises:
            PatternTimeoutError: If the scan exceeds the timeout
        """
        indicators: list[Indicator] = []
        try:
            for match in self.pattern.finditer(text, timeout=self.timeout):
                indicator = self.to_indicator(match.group(), match.start(), match.end())
                if indicator is not None:
                    indicators.append(indicator)
        except TimeoutError as exc:
            logger.warning("Scan for %s indicators timed out", self.category.wire_name)
            raise PatternTimeoutError(self.category.wire_name, self.timeout or 0.0) from exc
        return indicators

    def to_indicator(self, value: str, start: int, end: int) -> Indicator | None:
        """Build an indicator from a raw match, or None to reject it."""
        normalized = self.normalize(value)
        if normalized is None:
            return None
        return Indicator(self.category, value, normalized, Span(start, end))

    @abstractmethod
    def normalize(self, value: str) -> str | None:
        """
        Canonicalize a matched value.

        Args:
            value: Literal match

        Returns:
            Normalized form, or None if the match is not a valid indicator
        """
