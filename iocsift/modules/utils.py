#!/usr/bin/env python3

"""
Shared utilities for iocsift modules.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from iocsift.modules.indicators import IndicatorCategory


def merge_results(
    results: Iterable[Mapping[IndicatorCategory, list[str]]],
) -> dict[IndicatorCategory, list[str]]:
    """
    Merge several extraction results, removing duplicates while preserving order.

    A category appears in the merged output if any input contains it, even
    with an empty list. Categories are emitted in canonical order.

    Args:
        results: Results (or plain mappings) from independent extraction calls

    Returns:
        Dictionary of category to unique literals, first occurrence first
    """
    merged: dict[IndicatorCategory, dict[str, None]] = {}

    for result in results:
        for category, values in result.items():
            bucket = merged.setdefault(category, {})
            for value in values:
                bucket.setdefault(value, None)

    return {
        category: list(merged[category])
        for category in IndicatorCategory
        if category in merged
    }


def count_indicators(results: Mapping[IndicatorCategory, list[str]]) -> int:
    """Total number of literals across categories."""
    return sum(len(values) for values in results.values())
