#!/usr/bin/env python3

"""
iocsift - extract Indicators of Compromise from logs, reports and artifacts

Command line front end: reads files or stdin, runs the extraction engine and
renders the categorized indicators as text or JSON.
"""

from __future__ import annotations

import argparse
import concurrent.futures
import hashlib
import re
import sys
import time
from collections.abc import Callable, Mapping
from pathlib import Path

from colorama import Fore, Style
from tqdm import tqdm

from iocsift.modules.config import ExtractorConfig, load_config
from iocsift.modules.exceptions import (
    FileParsingError,
    FileProcessingError,
    IOCSiftError,
    ValidationError,
)
from iocsift.modules.extractor import IOCExtractor
from iocsift.modules.file_parser import get_parser
from iocsift.modules.indicators import ExtractionResult, IndicatorCategory
from iocsift.modules.logger import get_logger, level_from_flags, setup_logger
from iocsift.modules.output_formatter import JSONFormatter, OutputFormatter, TextFormatter
from iocsift.modules.utils import count_indicators, merge_results

# Colorama color constants (typed to avoid Any issues with strict mypy)
COLOR_CYAN: str = str(Fore.CYAN)
COLOR_RED: str = str(Fore.RED)
COLOR_GREEN: str = str(Fore.GREEN)
STYLE_RESET: str = str(Style.RESET_ALL)

# Constants
VERSION = "1.0.0"
MAX_WORKERS = 4  # for parallel processing
MAX_FILENAME_LENGTH = 50  # Maximum filename length
DEFAULT_WATCH_INTERVAL = 1.0  # seconds

STDIN_SOURCE = "-"

# Initialize logger
logger = get_logger(__name__)

ResultsByCategory = Mapping[IndicatorCategory, list[str]]


def get_bool_arg(args: argparse.Namespace, name: str) -> bool:
    """Get boolean argument from argparse namespace."""
    value: object = getattr(args, name, False)
    return bool(value)


def get_int_arg(args: argparse.Namespace, name: str, default: int = 0) -> int:
    """Get integer argument from argparse namespace."""
    value: object = getattr(args, name, None)
    return int(str(value)) if value is not None else default


def get_float_arg(args: argparse.Namespace, name: str) -> float | None:
    """Get optional float argument from argparse namespace."""
    value: object = getattr(args, name, None)
    return float(str(value)) if value is not None else None


def get_list_arg(args: argparse.Namespace, name: str) -> list[str]:
    """Get list argument from argparse namespace."""
    value: object = getattr(args, name, None)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def get_optional_str_arg(args: argparse.Namespace, name: str) -> str | None:
    """Get optional string argument from argparse namespace."""
    value: object = getattr(args, name, None)
    return str(value) if value is not None else None


def banner() -> None:
    """Display the tool banner on stderr."""
    print(
        f"{COLOR_CYAN}iocsift v{VERSION} - Indicators of Compromise extractor{STYLE_RESET}",
        file=sys.stderr,
    )


def get_output_filename(input_source: str, is_json: bool = False) -> str:
    """
    Generate an output filename based on the input name.

    Args:
        input_source: The input file path, or "-" for stdin
        is_json: If True, use .json extension, else .txt

    Returns:
        Output filename
    """
    base_name = "stdin" if input_source == STDIN_SOURCE else Path(input_source).stem
    base_name = re.sub(r"[^\w\-\.]", "_", base_name)[:MAX_FILENAME_LENGTH] or "input"
    extension = ".json" if is_json else ".txt"
    return f"{base_name}_iocs{extension}"


def read_source(source: str, file_type: str | None = None) -> str:
    """
    Read the text of one input.

    Args:
        source: File path, or "-" for stdin
        file_type: Force a specific file type (pdf, html, text)

    Returns:
        Text content to scan

    Raises:
        FileParsingError: If the file cannot be parsed
        ValidationError: If the file is missing, too large or of an unknown type
    """
    if source == STDIN_SOURCE:
        return sys.stdin.read()
    return get_parser(source, file_type).extract_text()


def process_file(
    file_path: str,
    extractor: IOCExtractor,
    file_type: str | None = None,
) -> ExtractionResult:
    """
    Read a single input and extract IOCs from it.

    Raises:
        FileProcessingError: If reading or extraction fails
    """
    try:
        text_content = read_source(file_path, file_type)
        logger.info("Scanning %s (%d characters)", file_path, len(text_content))
        return extractor.extract(text_content)
    except (FileParsingError, ValidationError):
        raise
    except (OSError, IOCSiftError) as e:
        logger.debug("Error processing %s", file_path, exc_info=True)
        raise FileProcessingError(file_path, str(e)) from e


def process_multiple_files(
    file_paths: list[str],
    extractor: IOCExtractor,
    file_type: str | None = None,
    max_workers: int = MAX_WORKERS,
) -> tuple[dict[str, ExtractionResult], dict[str, str]]:
    """
    Process multiple files in parallel with one shared extractor.

    Returns:
        Tuple of (results by path in input order, error message by failed path)
    """
    results: dict[str, ExtractionResult] = {}
    failures: dict[str, str] = {}

    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        future_to_file = {
            executor.submit(process_file, file_path, extractor, file_type): file_path
            for file_path in file_paths
        }

        progress = tqdm(
            concurrent.futures.as_completed(future_to_file),
            total=len(future_to_file),
            desc="Extracting IOCs",
            unit="file",
            disable=len(file_paths) < 2,
        )
        for future in progress:
            file_path = future_to_file[future]
            try:
                results[file_path] = future.result()
                logger.info("Successfully processed %s", file_path)
            except IOCSiftError as e:
                logger.error("Failed to process %s: %s", file_path, e)
                failures[file_path] = str(e)

    ordered = {path: results[path] for path in file_paths if path in results}
    return ordered, failures


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="iocsift",
        description="Indicators of Compromise (IOCs) Extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Categories: " + ", ".join(category.wire_name for category in IndicatorCategory),
    )

    input_group = parser.add_mutually_exclusive_group()
    input_group.add_argument("-f", "--file", help="Path to the file to analyze ('-' for stdin)")
    input_group.add_argument("-m", "--multiple", nargs="+", help="Multiple files to analyze")
    input_group.add_argument("source", nargs="?", help="File to analyze ('-' for stdin)")

    parser.add_argument("-o", "--output", help="Output file path (use - for stdout)")
    parser.add_argument(
        "--save", action="store_true", help="Save output next to the input as <name>_iocs.*"
    )
    parser.add_argument(
        "-t", "--type", choices=["pdf", "html", "text"], help="Force specific file type"
    )
    parser.add_argument(
        "-c", "--categories", help="Comma-separated categories to extract (default: all)"
    )
    parser.add_argument("--json", action="store_true", help="Output in JSON format")
    parser.add_argument(
        "--no-defanged",
        action="store_true",
        help="Only match well-formed indicators, not defanged ones (hxxp, [.])",
    )
    parser.add_argument("--max-input-length", type=int, help="Maximum characters per input")
    parser.add_argument(
        "--timeout", type=float, help="Per-category match timeout in seconds (0 disables)"
    )
    parser.add_argument("--config", help="Path to config file (INI)")
    parser.add_argument(
        "--watch",
        type=float,
        nargs="?",
        const=DEFAULT_WATCH_INTERVAL,
        metavar="SECONDS",
        help="Re-scan the file on an interval and re-render when it changes",
    )
    parser.add_argument(
        "--max-refreshes",
        type=int,
        default=0,
        help="Stop watching after this many scans (0 = until interrupted)",
    )
    parser.add_argument(
        "--parallel",
        type=int,
        default=MAX_WORKERS,
        help="Number of parallel workers for multiple files",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--log-file", help="Path to log file")
    parser.add_argument("--version", action="version", version=f"iocsift v{VERSION}")

    return parser


def setup_application(args: argparse.Namespace) -> None:
    """Set up logging and display banner."""
    debug = get_bool_arg(args, "debug")
    verbose = get_bool_arg(args, "verbose")
    log_file_path = get_optional_str_arg(args, "log_file")

    log_file = Path(log_file_path) if log_file_path else None
    setup_logger(level=level_from_flags(verbose, debug), log_file=log_file)

    if not debug and not verbose and sys.stderr.isatty():
        banner()


def resolve_config(args: argparse.Namespace) -> ExtractorConfig:
    """Resolve extraction configuration from CLI/env/config."""
    return load_config(
        cli_defanged=False if get_bool_arg(args, "no_defanged") else None,
        cli_max_input_length=getattr(args, "max_input_length", None),
        cli_pattern_timeout=get_float_arg(args, "timeout"),
        cli_categories=get_optional_str_arg(args, "categories"),
        cli_config_path=get_optional_str_arg(args, "config"),
    )


def input_sources(args: argparse.Namespace) -> list[str]:
    """Return the inputs named on the command line, defaulting to stdin."""
    multiple = get_list_arg(args, "multiple")
    if multiple:
        return multiple
    single = get_optional_str_arg(args, "file") or get_optional_str_arg(args, "source")
    return [single or STDIN_SOURCE]


def build_formatter(
    args: argparse.Namespace,
    data: ResultsByCategory,
    source: str,
) -> OutputFormatter:
    """Choose the output formatter for the requested format."""
    if get_bool_arg(args, "json"):
        return JSONFormatter(data, source=source)
    return TextFormatter(data, source=source)


def display_results(data: ResultsByCategory, failures: Mapping[str, str] | None = None) -> None:
    """Display an extraction summary on stderr."""
    total_iocs = count_indicators(data)
    logger.info("Found %d indicators of compromise", total_iocs)

    for category, values in data.items():
        if values:
            print(f"    {COLOR_CYAN}- {category.title}: {len(values)}{STYLE_RESET}", file=sys.stderr)

    for file_path, reason in (failures or {}).items():
        print(f"    {COLOR_RED}- {file_path}: {reason}{STYLE_RESET}", file=sys.stderr)


def save_output(args: argparse.Namespace, data: ResultsByCategory, source: str) -> None:
    """Format results and write them to stdout and/or a file."""
    formatter = build_formatter(args, data, source)
    output_path = get_optional_str_arg(args, "output")

    if output_path and output_path != STDIN_SOURCE:
        formatter.save(output_path)
        logger.info("Results saved to %s", output_path)
    else:
        print(formatter.format(), end="")

    if get_bool_arg(args, "save"):
        output_filename = get_output_filename(source, is_json=get_bool_arg(args, "json"))
        formatter.save(output_filename)
        logger.info("Results saved to %s", output_filename)


def watch_file(
    args: argparse.Namespace,
    source: str,
    extractor: IOCExtractor,
    interval: float,
    max_refreshes: int = 0,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Re-scan a file on an interval and re-render whenever its content changes.

    Each refresh is an independent extraction over a fresh snapshot.

    Returns:
        Number of renders performed
    """
    file_type = get_optional_str_arg(args, "type")
    last_digest: str | None = None
    renders = 0
    scans = 0

    while max_refreshes <= 0 or scans < max_refreshes:
        text_content = read_source(source, file_type)
        scans += 1

        digest = hashlib.sha256(text_content.encode("utf-8", errors="ignore")).hexdigest()
        if digest != last_digest:
            last_digest = digest
            result = extractor.extract(text_content)
            save_output(args, result, source)
            renders += 1
            logger.info("Rendered %d indicators from %s", result.total(), source)

        if max_refreshes <= 0 or scans < max_refreshes:
            sleep(interval)

    return renders


def run(argv: list[str] | None = None) -> int:
    """
    Run the command line interface.

    Returns:
        Process exit code
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)
    setup_application(args)

    try:
        config = resolve_config(args)
        extractor = IOCExtractor(config)
        sources = input_sources(args)

        watch_interval = get_float_arg(args, "watch")
        if watch_interval is not None:
            if len(sources) != 1 or sources[0] == STDIN_SOURCE:
                logger.error("--watch needs exactly one input file")
                return 1
            watch_file(
                args,
                sources[0],
                extractor,
                interval=watch_interval,
                max_refreshes=get_int_arg(args, "max_refreshes"),
            )
            return 0

        file_type = get_optional_str_arg(args, "type")
        if len(sources) == 1:
            results = {sources[0]: process_file(sources[0], extractor, file_type)}
            failures: dict[str, str] = {}
        else:
            workers = get_int_arg(args, "parallel", default=MAX_WORKERS)
            logger.info("Processing %d files with %d workers", len(sources), workers)
            results, failures = process_multiple_files(sources, extractor, file_type, workers)

        if not results:
            logger.error("No input could be processed")
            return 1

        merged = merge_results(results.values())
        display_name = sources[0] if len(sources) == 1 else f"{len(sources)} files"
        display_results(merged, failures)
        save_output(args, merged, display_name)

    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user")
        return 0
    except IOCSiftError as e:
        logger.error("%s", e)
        logger.debug("Failure details", exc_info=True)
        return 1

    return 1 if failures else 0


def main() -> None:
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
