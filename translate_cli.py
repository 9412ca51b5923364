"""Translate a message from the command line.

Loads ``transrelay.ini``, builds the configured backend chain and prints the outcome for
each requested locale. Useful for checking API keys and fallback order.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from config.loader import ConfigLoader, ConfigLoaderError
from core.trans.manager import TransManager
from models.translation_models import Failed, NoTranslationNeeded, RateLimited, Success
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from models.config_models import Config
    from models.translation_models import Notice, TranslationOutcome

CFG_FILE: Final[str] = "transrelay.ini"


def check_python_version() -> None:
    """Raises RuntimeError below Python 3.12."""
    if sys.version_info < (3, 12):
        msg = "Python 3.12 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = _ArgumentParser(
        description="Translate a chat message through the configured backend chain",
        epilog='Example: python translate_cli.py "привіт усім" --locale en_US --locale de_DE',
    )
    parser.add_argument("text", help="Message to translate")
    parser.add_argument(
        "--locale",
        dest="locales",
        action="append",
        metavar="LOCALE",
        help="Reader locale; repeat for several readers (default: en_US)",
    )
    parser.add_argument("--config", dest="config", default=CFG_FILE, metavar="FILE", help="INI file to load")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file and apply CLI overrides.

    Raises:
        ConfigLoaderError: If the configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).stem
    return ConfigLoader(config_filename=args.config, script_name=script_name, debug=args.debug).config


def setup_logging(config: Config) -> None:
    logger_utils = LoggerUtils(config.GENERAL.LOG_FILE)
    logger_utils.set_level("DEBUG" if config.GENERAL.DEBUG else "INFO")


def print_notice(notice: Notice) -> None:
    print(f"[{notice.severity}] {notice.message}")


def describe(outcome: TranslationOutcome) -> str:
    if isinstance(outcome, Success):
        source: str = "cache" if outcome.from_cache else (outcome.backend or "unknown")
        return f"{outcome.text}  ({outcome.detected_source} > {outcome.target}, via {source})"
    if isinstance(outcome, NoTranslationNeeded):
        return f"(not translated: {outcome.reason})"
    if isinstance(outcome, RateLimited):
        return f"(not translated: {outcome.reason})"
    if isinstance(outcome, Failed):
        return f"(failed: {outcome.reason})"
    return repr(outcome)


async def main(argv: list[str] | None = None) -> int:
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    setup_logging(config)
    locales: list[str] = args.locales or ["en_US"]
    manager = TransManager(config, notice_sink=print_notice)
    await manager.initialize()
    try:
        if not manager.engine_names:
            print("\nError: No translation engine could be initialized.", file=sys.stderr)
            return 1
        print(f"Engines: {', '.join(manager.engine_names)}")
        outcomes: dict[str, TranslationOutcome] = await manager.translate_for_actors(
            args.text, {locale: locale for locale in locales}
        )
        for locale, outcome in outcomes.items():
            print(f"{locale}: {describe(outcome)}")
    finally:
        await manager.shutdown()
    return 0


def run() -> None:
    check_python_version()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n\nCancelled by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
