#!/usr/bin/env python3

"""
Configuration loader for iocsift.

Supports .env, environment variables, and INI config files.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from iocsift.modules.exceptions import ConfigurationError, UnknownCategoryError
from iocsift.modules.indicators import IndicatorCategory

DEFAULT_MAX_INPUT_LENGTH = 50_000_000
DEFAULT_PATTERN_TIMEOUT = 30.0
CONFIG_SECTION = "extraction"
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ExtractorConfig:
    """Resolved extraction configuration."""

    defanged: bool = True
    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH
    pattern_timeout: float | None = DEFAULT_PATTERN_TIMEOUT
    categories: tuple[IndicatorCategory, ...] = tuple(IndicatorCategory)
    tlds_file: Path | None = None
    config_path: Path | None = None


def _find_default_config_paths() -> Iterable[Path]:
    """Return default config locations in priority order."""
    cwd = Path.cwd()
    yield cwd / "iocsift.ini"

    home_config = Path.home() / ".config" / "iocsift" / "config.ini"
    yield home_config


def parse_bool(option: str, raw: str) -> bool:
    """Parse a boolean option value."""
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(option, raw, "expected a boolean")


def parse_max_input_length(option: str, raw: str) -> int:
    """Parse a strictly positive character count."""
    try:
        value = int(raw.strip().replace("_", ""))
    except ValueError as exc:
        raise ConfigurationError(option, raw, "expected an integer") from exc
    if value <= 0:
        raise ConfigurationError(option, raw, "must be greater than zero")
    return value


def parse_timeout(option: str, raw: str) -> float | None:
    """Parse a timeout in seconds; 0 disables it."""
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(option, raw, "expected a number of seconds") from exc
    if value < 0:
        raise ConfigurationError(option, raw, "must not be negative")
    return value or None


def parse_categories(option: str, raw: str) -> tuple[IndicatorCategory, ...]:
    """Parse a comma-separated list of category names."""
    names = [name for name in raw.replace(" ", ",").split(",") if name]
    if not names:
        raise ConfigurationError(option, raw, "no categories given")
    try:
        return IndicatorCategory.parse_many(names)
    except UnknownCategoryError as exc:
        raise ConfigurationError(option, raw, str(exc)) from exc


def _load_ini_config(config_path: Path) -> dict[str, str]:
    """Load raw option values from an INI file."""
    parser = ConfigParser()
    parser.read(config_path, encoding="utf-8")

    if not parser.has_section(CONFIG_SECTION):
        return {}
    return dict(parser.items(CONFIG_SECTION))


def _load_env_config() -> dict[str, str]:
    """Load raw option values from IOCSIFT_* environment variables."""
    values: dict[str, str] = {}
    for option in ("defanged", "max_input_length", "pattern_timeout", "categories", "tlds_file"):
        env_name = f"IOCSIFT_{option.upper()}"
        if env_name in os.environ:
            values[option] = os.environ[env_name]
    return values


def load_config(
    cli_defanged: bool | None = None,
    cli_max_input_length: int | None = None,
    cli_pattern_timeout: float | None = None,
    cli_categories: str | None = None,
    cli_config_path: str | None = None,
) -> ExtractorConfig:
    """
    Load configuration with precedence: CLI > env > config file > defaults.

    Raises:
        ConfigurationError: If any resolved value is invalid
    """
    load_dotenv(override=False)

    config_path: Path | None = None
    file_values: dict[str, str] = {}

    if cli_config_path:
        config_path = Path(cli_config_path)
        if config_path.exists():
            file_values = _load_ini_config(config_path)
    else:
        for path in _find_default_config_paths():
            if path.exists():
                config_path = path
                file_values = _load_ini_config(path)
                break

    raw = {**file_values, **_load_env_config()}

    defanged = parse_bool("defanged", raw["defanged"]) if "defanged" in raw else True
    if cli_defanged is not None:
        defanged = cli_defanged

    max_input_length = (
        parse_max_input_length("max_input_length", raw["max_input_length"])
        if "max_input_length" in raw
        else DEFAULT_MAX_INPUT_LENGTH
    )
    if cli_max_input_length is not None:
        max_input_length = parse_max_input_length("max_input_length", str(cli_max_input_length))

    pattern_timeout = (
        parse_timeout("pattern_timeout", raw["pattern_timeout"])
        if "pattern_timeout" in raw
        else DEFAULT_PATTERN_TIMEOUT
    )
    if cli_pattern_timeout is not None:
        pattern_timeout = parse_timeout("pattern_timeout", str(cli_pattern_timeout))

    categories_raw = cli_categories or raw.get("categories")
    categories = (
        parse_categories("categories", categories_raw)
        if categories_raw
        else tuple(IndicatorCategory)
    )

    tlds_raw = raw.get("tlds_file")
    tlds_file = Path(tlds_raw).expanduser() if tlds_raw else None

    return ExtractorConfig(
        defanged=defanged,
        max_input_length=max_input_length,
        pattern_timeout=pattern_timeout,
        categories=categories,
        tlds_file=tlds_file,
        config_path=config_path,
    )
