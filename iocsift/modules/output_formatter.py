#!/usr/bin/env python3

"""
Module for formatting extraction results in different formats
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

from iocsift.modules.indicators import IndicatorCategory

EMPTY_SECTION = "None"


class OutputFormatter(ABC):
    """Abstract base class for all output formatters."""

    def __init__(
        self,
        data: Mapping[IndicatorCategory, list[str]],
        source: str | None = None,
    ) -> None:
        """
        Initialize the output formatter.

        Args:
            data: Extraction result or merged results; key presence means the
                category was searched
            source: Optional description of the scanned input
        """
        self.data = data
        self.source = source

    def _ordered_sections(self) -> list[tuple[IndicatorCategory, list[str]]]:
        return [
            (category, list(self.data[category]))
            for category in IndicatorCategory
            if category in self.data
        ]

    @abstractmethod
    def format(self) -> str:
        """
        Format the data.

        Returns:
            The formatted data
        """

    def save(self, output_file: str) -> None:
        """
        Save the formatted data to a file.

        Args:
            output_file: Path to the output file
        """
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.format(), encoding="utf-8")


class JSONFormatter(OutputFormatter):
    """Format results as a JSON object of category name to literal list."""

    def to_dict(self) -> dict[str, list[str]]:
        """Return the JSON-ready mapping, preserving per-category order."""
        return {category.wire_name: values for category, values in self._ordered_sections()}

    def format(self) -> str:
        return json.dumps(self.to_dict(), indent=4, ensure_ascii=False)


class TextFormatter(OutputFormatter):
    """Format results as Markdown-style sections, one per searched category."""

    def format(self) -> str:
        output = ["# Indicators of Compromise (IOCs) Extracted"]
        if self.source:
            output.append(f"\nSource: {self.source}")

        for category, values in self._ordered_sections():
            output.append(f"\n## {category.title}\n")
            output.extend(values or [EMPTY_SECTION])

        return "\n".join(output) + "\n"
