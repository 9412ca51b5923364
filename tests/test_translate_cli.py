from __future__ import annotations

from textwrap import dedent
from typing import TYPE_CHECKING, ClassVar

import pytest

import translate_cli
from core.trans.interface import TransInterface
from models.translation_models import Failed, NoTranslationNeeded, RateLimited, Success

if TYPE_CHECKING:
    from pathlib import Path

    from config.loader import Config
    from models.translation_models import TranslationOutcome


class EchoEngine(TransInterface):
    calls: ClassVar[list[tuple[str, str, str]]] = []

    @property
    def is_available(self) -> bool:
        return True

    @staticmethod
    def fetch_engine_name() -> str:
        return "cli_echo"

    def initialize(self, config: Config) -> None:
        _ = config

    async def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        EchoEngine.calls.append((text, from_lang, to_lang))
        return f"{to_lang}: {text}"

    async def close(self) -> None:
        pass


def _write_ini(tmp_path: Path, engines: str) -> Path:
    ini_path: Path = tmp_path / "transrelay.ini"
    ini_path.write_text(
        dedent(
            f"""
            [GENERAL]
            DEBUG = False
            LOG_FILE = ""

            [TRANSLATION]
            ENGINE = {engines}
            """
        ),
        encoding="utf-8",
    )
    return ini_path


def test_parse_arguments_defaults() -> None:
    args = translate_cli.parse_arguments(["привіт"])

    assert args.text == "привіт"
    assert args.locales is None
    assert args.config == "transrelay.ini"
    assert args.debug is False


def test_parse_arguments_repeated_locale() -> None:
    args = translate_cli.parse_arguments(["hi", "--locale", "en_US", "--locale", "de_DE", "--debug"])

    assert args.locales == ["en_US", "de_DE"]
    assert args.debug is True


@pytest.mark.parametrize(
    ("outcome", "expected"),
    [
        (Success("hello", "uk_ua", "en_us", backend="deepl"), "hello  (uk_ua > en_us, via deepl)"),
        (Success("hello", "uk_ua", "en_us", from_cache=True), "hello  (uk_ua > en_us, via cache)"),
        (NoTranslationNeeded("No translation needed"), "(not translated: No translation needed)"),
        (RateLimited(), "(not translated: Rate limit exceeded)"),
        (Failed("Translation service unavailable"), "(failed: Translation service unavailable)"),
    ],
)
def test_describe(outcome: TranslationOutcome, expected: str) -> None:
    assert translate_cli.describe(outcome) == expected


@pytest.mark.asyncio
async def test_main_translates_for_each_locale(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    EchoEngine.calls.clear()
    configured: list[Config] = []
    monkeypatch.setattr(translate_cli, "setup_logging", configured.append)
    ini_path: Path = _write_ini(tmp_path, '["cli_echo"]')

    code: int = await translate_cli.main(
        ["привіт усім", "--config", str(ini_path), "--locale", "en_US", "--locale", "de_DE"]
    )

    assert code == 0
    assert len(configured) == 1
    assert configured[0].GENERAL.LOG_FILE == ""
    out: str = capsys.readouterr().out
    assert "Engines: cli_echo" in out
    assert "en_US: English: привіт усім  (uk_ua > en_us, via cli_echo)" in out
    assert "de_DE: German: привіт усім  (uk_ua > de_de, via cli_echo)" in out
    assert sorted(EchoEngine.calls) == [("привіт усім", "Ukrainian", "English"), ("привіт усім", "Ukrainian", "German")]


@pytest.mark.asyncio
async def test_main_missing_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code: int = await translate_cli.main(["привіт", "--config", str(tmp_path / "missing.ini")])

    assert code == 1
    assert "Failed to load configuration file" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_main_without_engines(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(translate_cli, "setup_logging", lambda _config: None)
    ini_path: Path = _write_ini(tmp_path, '["babelfish"]')

    code: int = await translate_cli.main(["привіт", "--config", str(ini_path)])

    assert code == 1
    assert "No translation engine could be initialized" in capsys.readouterr().err
