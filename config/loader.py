"""Configuration file loader and validator.

Reads the INI configuration into the ``Config`` dataclasses, coercing each value to the
type of its default. Unknown engine names and out-of-range numbers are logged as warnings
rather than rejected, so a slightly off configuration still starts.
"""

from __future__ import annotations

import ast
import configparser
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from core.trans.interface import TransInterface
from models.config_models import Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField
else:
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "Config",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# (section, key) -> inclusive (minimum, maximum)
NUMERIC_RANGES: Final[dict[tuple[str, str], tuple[float, float]]] = {
    ("TRANSLATION", "MAX_API_KEYS"): (1, 32),
    ("TRANSLATION", "CACHE_EXPIRY_SECONDS"): (1, 3600),
    ("TRANSLATION", "RATE_LIMIT_MESSAGES"): (1, 100),
    ("TRANSLATION", "RATE_LIMIT_WINDOW_SECONDS"): (1, 300),
    ("TRANSLATION", "MIN_MESSAGE_LENGTH"): (0, 100),
    ("TRANSLATION", "MAX_RETRIES"): (0, 10),
    ("TRANSLATION", "RETRY_BACKOFF_SECONDS"): (0, 60),
    ("TRANSLATION", "SUSPENSION_MINUTES"): (1, 1440),
    ("TRANSLATION", "NOTIFICATION_COOLDOWN_MINUTES"): (0, 1440),
}

# Values that must be strictly positive for the components to work at all.
POSITIVE_VALUES: Final[tuple[tuple[str, str], ...]] = (
    ("TRANSLATION", "CACHE_EXPIRY_SECONDS"),
    ("TRANSLATION", "RATE_LIMIT_MESSAGES"),
    ("TRANSLATION", "RATE_LIMIT_WINDOW_SECONDS"),
)


class ConfigLoaderError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigLoaderError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigLoaderError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messaging.
        **args: Command-line overrides. ``debug=True`` forces ``GENERAL.DEBUG``.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains invalid values/types.
    """

    def __init__(
        self,
        *,
        config_filename: str,
        script_name: str,
        **args,
    ) -> None:
        config_path = Path(config_filename)
        msg: str
        if not config_path.exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        parser: ConfigParser = ConfigParser()

        try:
            parser.read(config_filename, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None

        self.config = Config()
        self._convert_settings(parser)
        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True
        self._validate_settings()

    def _convert_settings(self, parser: ConfigParser) -> None:
        """Copy every known section/key from the parser into the Config object.

        Raises:
            ConfigFormatError: If a value cannot be parsed or coerced to the expected type.
        """
        formatter = _ConfigFormatter(self.config, parser)
        for section in fields(self.config):
            self._convert_section_field(parser, formatter, section)

        known: set[str] = {section.name for section in fields(self.config)}
        for section_name in parser.sections():
            if section_name not in known:
                logger.warning("Unknown configuration section '%s' is ignored", section_name)

    def _convert_section_field(
        self, parser: ConfigParser, formatter: _ConfigFormatter, section: DataclassField[Any]
    ) -> None:
        for key in fields(getattr(self.config, section.name)):
            try:
                parser[section.name][key.name]
            except KeyError:
                logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                continue

            formatted_value = formatter.apply_format(section, key)
            setattr(getattr(self.config, section.name), key.name, formatted_value)

    def _validate_settings(self) -> None:
        """Validate engine names and numeric ranges.

        Raises:
            ConfigFormatError: If validation fails for any setting.
        """
        try:
            self._inspect_defined_item("TRANSLATION", "ENGINE", list(TransInterface.registered))
            self._validate_positive_values()
            for (section_name, key_name), (minimum, maximum) in NUMERIC_RANGES.items():
                self._inspect_range(section_name, key_name, minimum, maximum)
        except (AttributeError, TypeError, ValueError) as err:
            msg: str = f"Invalid configuration value: {err}"
            raise ConfigFormatError(msg) from None

    def _inspect_defined_item(self, section_name: str, key_name: str, defined_list: list[str]) -> None:
        """Verify that configuration values match allowed options.

        Logs warnings for unrecognized values but does not raise exceptions.

        Raises:
            ConfigTypeError: If the configured value is neither list nor str.
        """
        value: str | list[str] = getattr(getattr(self.config, section_name), key_name)
        field_name: str = f"{section_name}.{key_name}"

        if isinstance(value, str):
            # A single engine may be written without list brackets.
            value = [value]
            setattr(getattr(self.config, section_name), key_name, value)

        if not isinstance(value, list):
            msg: str = f"Unsupported type used for '{field_name}': {type(value)}"
            raise ConfigTypeError(msg)

        if not value:
            logger.warning("'%s' is empty; every translation will fail", field_name)
        for val in value:
            if val not in defined_list:
                logger.warning("Unknown value '%s' is set for '%s'", val, field_name)

    def _validate_positive_values(self) -> None:
        """Raises ConfigValueError for values the components cannot work with."""
        for section_name, key_name in POSITIVE_VALUES:
            value: float = getattr(getattr(self.config, section_name), key_name)
            if value <= 0:
                msg: str = f"'{section_name}.{key_name}' must be greater than 0, got {value}"
                raise ConfigValueError(msg)

    def _inspect_range(self, section_name: str, key_name: str, minimum: float, maximum: float) -> None:
        """Warn when a numeric setting lies outside its recommended range."""
        value: float = getattr(getattr(self.config, section_name), key_name)
        if not minimum <= value <= maximum:
            logger.warning(
                "'%s.%s' = %s is outside the recommended range %s-%s",
                section_name,
                key_name,
                value,
                minimum,
                maximum,
            )


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str, list)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert INI value to the type of the field's default value.

        Raises:
            ConfigValueError: If a value cannot be coerced to the expected type.
            ConfigFormatError: If literal evaluation fails due to invalid syntax.
            ConfigTypeError: If an unexpected type is encountered during coercion.
        """
        formatters: dict[
            type[bool | int | float | str],
            Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float | str],
        ] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
            str: self.parse_as_string,
        }

        formatter: Callable[[DataclassField[Any], DataclassField[Any]], bool | int | float | str] | None = (
            formatters.get(type(getattr(getattr(self.config, section.name), key.name)))
        )
        if formatter:
            try:
                return formatter(section, key)
            except ValueError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigValueError(msg) from err
            except TypeError as err:
                msg = f"Invalid value for {section.name}.{key.name}: {err}"
                raise ConfigTypeError(msg) from err

        value_str: str = self.parser[section.name][key.name]
        try:
            return ast.literal_eval(value_str)
        except ValueError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {value_str}"
            raise ConfigFormatError(msg) from err

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"', "%"):
            value = value.removeprefix(char).removesuffix(char)
        return float(value)

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"', "%"):
            value = value.removeprefix(char).removesuffix(char)
        return int(float(value))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        return self.parser.getboolean(section.name, key.name)

    def parse_as_string(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        """Return the raw string, with one pair of surrounding quotes removed."""
        value: str = self.parser.get(section.name, key.name).strip()
        for char in ("'", '"'):
            if len(value) >= 2 and value.startswith(char) and value.endswith(char):
                return value[1:-1]
        return value
