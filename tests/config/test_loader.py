from __future__ import annotations

import logging
from textwrap import dedent
from typing import TYPE_CHECKING

import pytest

import core.trans.manager  # noqa: F401  # registers the bundled engines
from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)

if TYPE_CHECKING:
    from pathlib import Path


def _write_ini(tmp_path: Path, content: str) -> Path:
    ini_path: Path = tmp_path / "transrelay.ini"
    ini_path.write_text(dedent(content), encoding="utf-8")
    return ini_path


def test_config_loader_raises_for_missing_file(tmp_path: Path) -> None:
    ini_path: Path = tmp_path / "missing.ini"
    with pytest.raises(ConfigFileNotFoundError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_config_loader_reads_typed_values(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = False
        LOG_FILE = "relay.log"

        [TRANSLATION]
        ENGINE = ["gemini", "deepl", "libretranslate"]
        CACHE_EXPIRY_SECONDS = 60
        RATE_LIMIT_MESSAGES = '5'
        RETRY_BACKOFF_SECONDS = 0.5

        [DEEPL]
        FORMALITY = prefer_less

        [LIBRETRANSLATE]
        URL = 'http://lt.local:5000/translate'
        TIMEOUT = 3
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.GENERAL.DEBUG is False
    assert config.GENERAL.LOG_FILE == "relay.log"
    assert config.TRANSLATION.ENGINE == ["gemini", "deepl", "libretranslate"]
    assert config.TRANSLATION.CACHE_EXPIRY_SECONDS == 60
    assert config.TRANSLATION.RATE_LIMIT_MESSAGES == 5
    assert config.TRANSLATION.RETRY_BACKOFF_SECONDS == 0.5
    assert config.TRANSLATION.MAX_RETRIES == 2
    assert config.DEEPL.FORMALITY == "prefer_less"
    assert config.LIBRETRANSLATE.URL == "http://lt.local:5000/translate"
    assert config.LIBRETRANSLATE.TIMEOUT == 3.0


def test_debug_override(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [GENERAL]
        DEBUG = False
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test", debug=True).config

    assert config.GENERAL.DEBUG is True


def test_single_engine_string_becomes_list(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        ENGINE = "deepl"
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.TRANSLATION.ENGINE == ["deepl"]


def test_unknown_engine_and_section_are_warnings(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        ENGINE = ["deepl", "babelfish"]
        MAX_RETRIES = 50

        [TWITCH]
        OWNER_NAME = "someone"
        """,
    )

    config = ConfigLoader(config_filename=str(ini_path), script_name="test").config

    assert config.TRANSLATION.ENGINE == ["deepl", "babelfish"]
    assert config.TRANSLATION.MAX_RETRIES == 50
    messages: list[str] = [record.getMessage() for record in caplog.records]
    assert any("babelfish" in message for message in messages)
    assert any("TWITCH" in message for message in messages)
    assert any("MAX_RETRIES" in message for message in messages)


@pytest.mark.parametrize("key", ["CACHE_EXPIRY_SECONDS", "RATE_LIMIT_MESSAGES", "RATE_LIMIT_WINDOW_SECONDS"])
def test_non_positive_limits_are_rejected(tmp_path: Path, key: str) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        f"""
        [TRANSLATION]
        {key} = 0
        """,
    )

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_invalid_number_is_value_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        MAX_RETRIES = many
        """,
    )

    with pytest.raises(ConfigValueError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_invalid_engine_literal_is_format_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        ENGINE = ["deepl",
        """,
    )

    with pytest.raises(ConfigFormatError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_engine_of_wrong_type_is_type_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        [TRANSLATION]
        ENGINE = 42
        """,
    )

    with pytest.raises(ConfigTypeError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")


def test_broken_file_is_format_error(tmp_path: Path) -> None:
    ini_path: Path = _write_ini(
        tmp_path,
        """
        DEBUG = True
        [GENERAL]
        """,
    )

    with pytest.raises(ConfigFormatError):
        ConfigLoader(config_filename=str(ini_path), script_name="test")
