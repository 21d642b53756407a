#!/usr/bin/env python3

"""
Aggregation of per-category candidates into a single result.

Candidates are resolved in precedence order: a candidate whose span lies
entirely inside a span kept for a higher-precedence category is discarded.
Survivors are then deduplicated by literal, keeping first occurrences.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Mapping, Sequence

from iocsift.modules.indicators import (
    ExtractionResult,
    Indicator,
    IndicatorCategory,
    Span,
)
from iocsift.modules.logger import get_logger

logger = get_logger(__name__)

# Categories whose kept spans claim (shadow) a contained candidate of the key category.
PRECEDENCE: Mapping[IndicatorCategory, tuple[IndicatorCategory, ...]] = {
    IndicatorCategory.EMAIL: (),
    IndicatorCategory.URL: (IndicatorCategory.EMAIL,),
    IndicatorCategory.DOMAIN: (IndicatorCategory.EMAIL, IndicatorCategory.URL),
    IndicatorCategory.IPV4: (),
    IndicatorCategory.IPV6: (),
    IndicatorCategory.MAC_ADDRESS: (IndicatorCategory.IPV6,),
    IndicatorCategory.MD5: (IndicatorCategory.EMAIL, IndicatorCategory.URL),
    IndicatorCategory.SHA1: (IndicatorCategory.EMAIL, IndicatorCategory.URL),
    IndicatorCategory.SHA256: (IndicatorCategory.EMAIL, IndicatorCategory.URL),
    IndicatorCategory.SHA512: (IndicatorCategory.EMAIL, IndicatorCategory.URL),
}

# Every claiming category comes before the categories it claims.
RESOLUTION_ORDER: tuple[IndicatorCategory, ...] = tuple(PRECEDENCE)


def required_categories(
    requested: Iterable[IndicatorCategory],
) -> tuple[IndicatorCategory, ...]:
    """
    Return the categories that must be scanned to answer a request.

    Higher-precedence categories are included even when not requested so that
    their claims still apply.

    Args:
        requested: Categories the caller asked for

    Returns:
        Requested categories plus their claiming categories, in resolution order
    """
    needed: set[IndicatorCategory] = set()
    pending = list(requested)
    while pending:
        category = pending.pop()
        if category not in needed:
            needed.add(category)
            pending.extend(PRECEDENCE[category])
    return tuple(category for category in RESOLUTION_ORDER if category in needed)


class ClaimedSpans:
    """Sorted, non-overlapping spans kept for one category."""

    def __init__(self, spans: Sequence[Span]) -> None:
        ordered = sorted(spans)
        self._starts = [span.start for span in ordered]
        self._spans = ordered

    def covers(self, span: Span) -> bool:
        """Return True if span lies inside one of the claimed spans."""
        index = bisect_right(self._starts, span.start) - 1
        return index >= 0 and self._spans[index].contains(span)


def deduplicate(indicators: Iterable[Indicator]) -> list[Indicator]:
    """
    Remove duplicate indicators while preserving first-seen order.

    Args:
        indicators: Indicators of a single category

    Returns:
        Indicators with unique literal values
    """
    unique: list[Indicator] = []
    seen: set[str] = set()
    for indicator in indicators:
        if indicator.value not in seen:
            seen.add(indicator.value)
            unique.append(indicator)
    return unique


class ResultAggregator:
    """Merge per-category candidate lists into an ExtractionResult."""

    def aggregate(
        self,
        candidates: Mapping[IndicatorCategory, Sequence[Indicator]],
        requested: Iterable[IndicatorCategory],
    ) -> ExtractionResult:
        """
        Resolve cross-category overlaps and deduplicate.

        Args:
            candidates: Raw matches per scanned category, in text order
            requested: Categories to include in the result

        Returns:
            Result holding exactly the requested categories
        """
        requested = tuple(requested)
        kept: dict[IndicatorCategory, list[Indicator]] = {}
        claims: dict[IndicatorCategory, ClaimedSpans] = {}

        for category in RESOLUTION_ORDER:
            if category not in candidates:
                continue

            claimers = [claims[other] for other in PRECEDENCE[category] if other in claims]
            survivors = [
                indicator
                for indicator in candidates[category]
                if not any(claimed.covers(indicator.span) for claimed in claimers)
            ]

            dropped = len(candidates[category]) - len(survivors)
            if dropped:
                logger.debug(
                    "Discarded %d %s candidates claimed by higher-precedence matches",
                    dropped,
                    category.wire_name,
                )

            kept[category] = survivors
            claims[category] = ClaimedSpans([indicator.span for indicator in survivors])

        return ExtractionResult(
            {category: deduplicate(kept.get(category, [])) for category in requested},
        )
