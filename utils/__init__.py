"""Utility modules for logging and string handling."""

from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

__all__: list[str] = ["LoggerUtils", "StringUtils"]
