"""
iocsift - A library for extracting Indicators of Compromise from free-form text
"""

from __future__ import annotations

from collections.abc import Iterable

from iocsift.modules.config import ExtractorConfig, load_config
from iocsift.modules.extractor import IOCExtractor
from iocsift.modules.file_parser import HTMLParser, PDFParser, TextParser, get_parser
from iocsift.modules.indicators import ExtractionResult, Indicator, IndicatorCategory
from iocsift.modules.output_formatter import JSONFormatter, TextFormatter

__version__ = "1.0.0"

# Export main functionality for library use
__all__ = [
    "ExtractionResult",
    "ExtractorConfig",
    "HTMLParser",
    "IOCExtractor",
    "Indicator",
    "IndicatorCategory",
    "JSONFormatter",
    "PDFParser",
    "TextFormatter",
    "TextParser",
    "extract_iocs_from_file",
    "extract_iocs_from_text",
    "get_parser",
    "load_config",
]


def extract_iocs_from_text(
    text_content: str,
    categories: Iterable[IndicatorCategory | str] | None = None,
    defanged: bool = True,
    config: ExtractorConfig | None = None,
) -> ExtractionResult:
    """
    Extract IOCs from text content.

    Args:
        text_content: The text to extract IOCs from
        categories: Categories to extract; None means all
        defanged: Whether to also match defanged notations (ignored when config is given)
        config: Full extractor configuration

    Returns:
        Mapping of category to the literal indicators found, in text order
    """
    extractor = IOCExtractor(config or ExtractorConfig(defanged=defanged))
    return extractor.extract(text_content, categories)


def extract_iocs_from_file(
    file_path: str,
    categories: Iterable[IndicatorCategory | str] | None = None,
    file_type: str | None = None,
    defanged: bool = True,
    config: ExtractorConfig | None = None,
) -> ExtractionResult:
    """
    Extract IOCs from a file.

    Args:
        file_path: Path to the file
        categories: Categories to extract; None means all
        file_type: Force a specific file type (pdf, html, text)
        defanged: Whether to also match defanged notations (ignored when config is given)
        config: Full extractor configuration

    Returns:
        Mapping of category to the literal indicators found, in text order
    """
    text_content = get_parser(file_path, file_type).extract_text()
    return extract_iocs_from_text(text_content, categories, defanged, config)
