#!/usr/bin/env python3

"""
Tests for configuration loading.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from iocsift.modules.config import (
    DEFAULT_MAX_INPUT_LENGTH,
    DEFAULT_PATTERN_TIMEOUT,
    ExtractorConfig,
    load_config,
    parse_bool,
    parse_categories,
    parse_max_input_length,
    parse_timeout,
)
from iocsift.modules.exceptions import ConfigurationError
from iocsift.modules.indicators import IndicatorCategory

ENV_VARS = (
    "IOCSIFT_DEFANGED",
    "IOCSIFT_MAX_INPUT_LENGTH",
    "IOCSIFT_PATTERN_TIMEOUT",
    "IOCSIFT_CATEGORIES",
    "IOCSIFT_TLDS_FILE",
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test without user config files or IOCSIFT_* variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


def write_config(path: Path, **options: str) -> Path:
    lines = ["[extraction]"] + [f"{key} = {value}" for key, value in options.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_defaults() -> None:
    """Without any source, built-in defaults apply."""
    config = load_config()

    assert config == ExtractorConfig()
    assert config.defanged is True
    assert config.max_input_length == DEFAULT_MAX_INPUT_LENGTH
    assert config.pattern_timeout == DEFAULT_PATTERN_TIMEOUT
    assert config.categories == tuple(IndicatorCategory)
    assert config.config_path is None


def test_config_file_values(tmp_path) -> None:
    """Values from the INI file are parsed."""
    config_path = write_config(
        tmp_path / "custom.ini",
        defanged="no",
        max_input_length="1_000",
        pattern_timeout="0",
        categories="url, ipv4",
        tlds_file=str(tmp_path / "tlds.txt"),
    )

    config = load_config(cli_config_path=str(config_path))

    assert config.defanged is False
    assert config.max_input_length == 1000
    assert config.pattern_timeout is None
    assert config.categories == (IndicatorCategory.URL, IndicatorCategory.IPV4)
    assert config.tlds_file == tmp_path / "tlds.txt"
    assert config.config_path == config_path


def test_config_env_fallback(tmp_path, monkeypatch) -> None:
    """Env should override config when CLI is unset."""
    config_path = write_config(tmp_path / "custom.ini", defanged="false", pattern_timeout="5")

    monkeypatch.setenv("IOCSIFT_DEFANGED", "1")
    monkeypatch.setenv("IOCSIFT_CATEGORIES", "mac")

    config = load_config(cli_config_path=str(config_path))

    assert config.defanged is True
    assert config.pattern_timeout == 5.0
    assert config.categories == (IndicatorCategory.MAC_ADDRESS,)


def test_config_precedence(tmp_path, monkeypatch) -> None:
    """CLI should override env, which overrides config."""
    config_path = write_config(
        tmp_path / "custom.ini",
        defanged="true",
        max_input_length="100",
        categories="domain",
    )

    monkeypatch.setenv("IOCSIFT_MAX_INPUT_LENGTH", "200")
    monkeypatch.setenv("IOCSIFT_CATEGORIES", "email")

    config = load_config(
        cli_defanged=False,
        cli_max_input_length=300,
        cli_pattern_timeout=1.5,
        cli_categories="sha1,md5",
        cli_config_path=str(config_path),
    )

    assert config.defanged is False
    assert config.max_input_length == 300
    assert config.pattern_timeout == 1.5
    assert config.categories == (IndicatorCategory.MD5, IndicatorCategory.SHA1)


def test_config_discovered_in_working_directory() -> None:
    """./iocsift.ini is used when no path is given."""
    config_path = write_config(Path.cwd() / "iocsift.ini", max_input_length="42")

    config = load_config()

    assert config.max_input_length == 42
    assert config.config_path == config_path


def test_config_discovered_in_home(monkeypatch) -> None:
    """~/.config/iocsift/config.ini is the last fallback."""
    config_dir = Path.home() / ".config" / "iocsift"
    config_dir.mkdir(parents=True)
    write_config(config_dir / "config.ini", defanged="off")

    assert load_config().defanged is False


def test_missing_explicit_config_uses_defaults(tmp_path) -> None:
    """A --config path that does not exist is not an error."""
    config = load_config(cli_config_path=str(tmp_path / "absent.ini"))

    assert config.max_input_length == DEFAULT_MAX_INPUT_LENGTH


def test_config_without_extraction_section(tmp_path) -> None:
    """Other sections are ignored."""
    config_path = tmp_path / "other.ini"
    config_path.write_text("[database]\npersist = true\n", encoding="utf-8")

    assert load_config(cli_config_path=str(config_path)).defanged is True


def test_invalid_env_value_raises(monkeypatch) -> None:
    """Invalid values are reported with the option name."""
    monkeypatch.setenv("IOCSIFT_PATTERN_TIMEOUT", "soon")

    with pytest.raises(ConfigurationError) as exc_info:
        load_config()

    assert exc_info.value.option == "pattern_timeout"


def test_invalid_cli_category_raises() -> None:
    with pytest.raises(ConfigurationError):
        load_config(cli_categories="url,ssdeep")


class TestValueParsers:
    """Test individual option parsers."""

    @pytest.mark.parametrize("raw", ["1", "true", "Yes", " ON "])
    def test_parse_bool_true(self, raw) -> None:
        assert parse_bool("defanged", raw) is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_parse_bool_false(self, raw) -> None:
        assert parse_bool("defanged", raw) is False

    def test_parse_bool_invalid(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_bool("defanged", "maybe")

    def test_parse_max_input_length(self) -> None:
        assert parse_max_input_length("max_input_length", "50_000") == 50000
        with pytest.raises(ConfigurationError):
            parse_max_input_length("max_input_length", "0")
        with pytest.raises(ConfigurationError):
            parse_max_input_length("max_input_length", "lots")

    def test_parse_timeout(self) -> None:
        assert parse_timeout("pattern_timeout", "2.5") == 2.5
        assert parse_timeout("pattern_timeout", "0") is None
        with pytest.raises(ConfigurationError):
            parse_timeout("pattern_timeout", "-1")

    def test_parse_categories(self) -> None:
        assert parse_categories("categories", "mac, sha256") == (
            IndicatorCategory.SHA256,
            IndicatorCategory.MAC_ADDRESS,
        )
        with pytest.raises(ConfigurationError):
            parse_categories("categories", " , ")
