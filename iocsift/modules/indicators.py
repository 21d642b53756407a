#!/usr/bin/env python3

"""
Indicator types shared by the matchers, the aggregator and the formatters.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum

from iocsift.modules.exceptions import UnknownCategoryError


class IndicatorCategory(Enum):
    """Closed set of indicator categories."""

    URL = ("url", "URLs")
    IPV4 = ("ipv4", "IPv4s")
    IPV6 = ("ipv6", "IPv6s")
    DOMAIN = ("domain", "Domains")
    EMAIL = ("email", "Emails")
    MD5 = ("md5", "MD5s")
    SHA1 = ("sha1", "SHA1s")
    SHA256 = ("sha256", "SHA256s")
    SHA512 = ("sha512", "SHA512s")
    MAC_ADDRESS = ("mac", "MAC Addresses")

    def __init__(self, wire_name: str, title: str) -> None:
        self.wire_name = wire_name
        self.title = title

    def __str__(self) -> str:
        return self.wire_name

    @classmethod
    def parse(cls, value: IndicatorCategory | str) -> IndicatorCategory:
        """
        Resolve a category from a member, a wire name or a member name.

        Args:
            value: Category or name such as "ipv4", "mac" or "MAC_ADDRESS"

        Returns:
            The matching category

        Raises:
            UnknownCategoryError: If the name is not a known category
        """
        if isinstance(value, cls):
            return value

        name = str(value).strip()
        for category in cls:
            if name.lower() == category.wire_name or name.upper() == category.name:
                return category
        raise UnknownCategoryError(name)

    @classmethod
    def parse_many(
        cls,
        values: Iterable[IndicatorCategory | str] | None,
    ) -> tuple[IndicatorCategory, ...]:
        """Resolve several categories, keeping canonical order and dropping repeats."""
        if values is None:
            return tuple(cls)
        if isinstance(values, (str, IndicatorCategory)):
            values = [values]
        requested = {cls.parse(value) for value in values}
        return tuple(category for category in cls if category in requested)


@dataclass(frozen=True, order=True)
class Span:
    """Half-open offset range of a match within the source text."""

    start: int
    end: int

    def contains(self, other: Span) -> bool:
        """Return True if other lies entirely inside this span."""
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class Indicator:
    """A single matched indicator. Equality uses category and literal value only."""

    category: IndicatorCategory
    value: str
    normalized: str = field(default="", compare=False)
    span: Span = field(default=Span(0, 0), compare=False)


class ExtractionResult(Mapping[IndicatorCategory, list[str]]):
    """
    Categorized, deduplicated indicators from one extraction call.

    Keys are exactly the requested categories, in canonical order. A category
    that was not requested is absent; a requested category with no matches is
    present and maps to an empty list. Values are the literal matches in
    first-occurrence order.
    """

    def __init__(self, indicators: Mapping[IndicatorCategory, Iterable[Indicator]]) -> None:
        self._indicators: dict[IndicatorCategory, tuple[Indicator, ...]] = {
            category: tuple(indicators[category])
            for category in IndicatorCategory
            if category in indicators
        }

    def __getitem__(self, category: IndicatorCategory) -> list[str]:
        return [indicator.value for indicator in self._indicators[category]]

    def __iter__(self) -> Iterator[IndicatorCategory]:
        return iter(self._indicators)

    def __len__(self) -> int:
        return len(self._indicators)

    def __repr__(self) -> str:
        return f"ExtractionResult({self.to_dict()!r})"

    def indicators(self, category: IndicatorCategory) -> tuple[Indicator, ...]:
        """Return the Indicator objects of one requested category."""
        return self._indicators[category]

    def normalized(self, category: IndicatorCategory) -> list[str]:
        """Return the normalized values of one category, deduplicated in order."""
        return list(dict.fromkeys(indicator.normalized for indicator in self._indicators[category]))

    def total(self) -> int:
        """Total number of indicators across all categories."""
        return sum(len(values) for values in self._indicators.values())

    def to_dict(self) -> dict[str, list[str]]:
        """Map category wire names to literal lists, preserving order."""
        return {category.wire_name: self[category] for category in self._indicators}
