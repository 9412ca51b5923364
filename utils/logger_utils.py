"""Logging setup shared by every module of the translation core.

All modules obtain their logger through ``LoggerUtils.get_logger(__name__)`` so that
records end up below a single namespace which the host application can configure once.
"""

from __future__ import annotations

import logging
import sys
import warnings
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Literal, NamedTuple, Self, TextIO

if TYPE_CHECKING:
    from pathlib import Path

__all__: list[str] = ["LogLevel", "LoggerUtils"]

type LevelType = Literal[
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

_LOG_FILE_SIZE: Final[int] = 1 * 1024 * 1024  # 1MB
_LOG_BACKUP_COUNT: Final[int] = 3

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_NAMESPACE: Final[str] = "TransRelay"


class LogLevel(NamedTuple):
    """Logging level as a (name, numeric value) pair."""

    name: str
    value: int


class LoggerUtils:
    """Singleton that wires console and rotating-file handlers to the namespace logger.

    Constructing it more than once is harmless; only the first call attaches handlers.

    Attributes:
        _LOGGER_NAMESPACE (str): Root namespace for every logger handed out.
        _configured (bool): Whether handlers have already been attached.
        _instance (LoggerUtils | None): The singleton instance.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _instance: ClassVar[Self | None] = None

    def __new__(cls, *args, **kwargs) -> Self:
        _ = args, kwargs
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, filename: str | Path = "", *, use_null_console: bool = False) -> None:
        """Attach handlers to the namespace logger.

        Args:
            filename (str | Path): Absolute path of the log file. Empty disables file logging.
            use_null_console (bool): Use a NullHandler instead of stderr for console output.
        """
        if LoggerUtils._configured:
            return

        self.root_logger: logging.Logger = logging.getLogger(self._LOGGER_NAMESPACE)
        self._use_null_console: bool = bool(use_null_console) or sys.stderr is None
        filename = str(filename)
        # The logger level must not be stricter than the handler levels.
        self.root_logger.setLevel(DEFAULT_LOG_LEVEL)

        self._console_logging()
        if filename.strip():
            self._file_logging(filename)
        else:
            self.root_logger.debug("No log file configured; file logging disabled.")

        warnings.showwarning = self.warning_to_log
        LoggerUtils._configured = True

    def warning_to_log(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        """Route ``warnings.warn`` output into the log (signature of ``warnings.showwarning``)."""
        _ = file, line
        self.root_logger.warning("%s:%d: %s: %s", filename, lineno, category.__name__, message)

    @classmethod
    def initialize(cls, namespace: str) -> None:
        """Change the logger namespace before handlers are configured.

        Raises:
            RuntimeError: If handlers have already been configured.
        """
        if cls._configured:
            msg = "LoggerUtils is already configured. Reinitialization is not allowed."
            raise RuntimeError(msg)

        cls._LOGGER_NAMESPACE = namespace

    def _console_logging(self) -> None:
        """Console output is limited to WARNING and above, message text only."""
        handler_type: type = NullHandler if self._use_null_console else StreamHandler
        if self._has_handler(handler_type):
            self.root_logger.warning("Console logging is already configured.")
            return

        if self._use_null_console:
            self.root_logger.addHandler(NullHandler())
            return

        console_handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(Formatter("%(message)s"))
        self.root_logger.addHandler(console_handler)

    def _file_logging(self, filename: str) -> None:
        """Write DEBUG and above to a UTF-8 rotating log file."""
        if self._has_handler(RotatingFileHandler):
            self.root_logger.warning("File logging is already configured.")
            return

        try:
            file_handler = RotatingFileHandler(
                filename=filename,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except (FileNotFoundError, PermissionError):
            self.root_logger.error("Incorrect log file name: %s\nLogging to the file is not performed.", filename)
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            Formatter("%(asctime)s %(levelname)-8s %(lineno)4d %(name)-40s\t%(funcName)s\t%(message)s")
        )
        self.root_logger.addHandler(file_handler)

    def _has_handler(self, handler_type: type) -> bool:
        return any(isinstance(h, handler_type) for h in self.root_logger.handlers)

    def set_level(self, level: LevelType) -> None:
        """Set the namespace logger level, falling back to INFO on unknown names."""
        level_map: dict[str, int] = logging.getLevelNamesMapping()
        try:
            self.root_logger.setLevel(level_map[level.upper()])
        except KeyError:
            self.root_logger.setLevel(DEFAULT_LOG_LEVEL)
            self.root_logger.warning("Unknown logging level '%s' specified.\nLogging level set to 'INFO'.", level)

    def get_level(self) -> LogLevel:
        """Return the effective level of the namespace logger."""
        level_value: int = self.root_logger.getEffectiveLevel()
        return LogLevel(name=logging.getLevelName(level_value), value=level_value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Return a logger below the configured namespace.

        Args:
            name (str | None): Child logger name, typically ``__name__``.
                               None returns the namespace logger itself.
        """
        full_name: str | None
        if LoggerUtils._LOGGER_NAMESPACE:
            full_name = f"{LoggerUtils._LOGGER_NAMESPACE}.{name}" if name else LoggerUtils._LOGGER_NAMESPACE
        else:
            full_name = name or None
        return logging.getLogger(full_name)
