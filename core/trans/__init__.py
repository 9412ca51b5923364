"""Translation backends, fallback chain and the top-level request path."""

from core.trans.executor import BackendExecutor
from core.trans.fallback import FallbackOrchestrator
from core.trans.interface import (
    BackendNotConfiguredError,
    NotSupportedLanguagesError,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from core.trans.manager import TransManager
from core.trans.suspension import SuspensionRegistry

__all__: list[str] = [
    "BackendExecutor",
    "BackendNotConfiguredError",
    "FallbackOrchestrator",
    "NotSupportedLanguagesError",
    "SuspensionRegistry",
    "TransInterface",
    "TransManager",
    "TranslateExceptionError",
    "TranslationRateLimitError",
]
