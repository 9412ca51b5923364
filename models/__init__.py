"""Data models for the translation core.

This package contains dataclass definitions for configuration, translation requests and
outcomes, cache entries, and the language tables used by the detection heuristic.
"""

from __future__ import annotations

from models.cache_models import CacheEntry, CacheStatistics
from models.config_models import Config
from models.language_models import UNKNOWN, DetectedLanguage, LocaleRule, ScriptRule
from models.translation_models import (
    AUTO_LANGUAGE,
    BackendAttemptOutcome,
    BackendNotConfigured,
    BackendRateLimited,
    BackendTransientError,
    BackendTranslated,
    Failed,
    NoTranslationNeeded,
    Notice,
    NoticeSeverity,
    RateLimited,
    Success,
    TranslationOutcome,
    TranslationRequest,
    TranslationWithBackend,
)

__all__: list[str] = [
    "AUTO_LANGUAGE",
    "UNKNOWN",
    "BackendAttemptOutcome",
    "BackendNotConfigured",
    "BackendRateLimited",
    "BackendTransientError",
    "BackendTranslated",
    "CacheEntry",
    "CacheStatistics",
    "Config",
    "DetectedLanguage",
    "Failed",
    "LocaleRule",
    "NoTranslationNeeded",
    "Notice",
    "NoticeSeverity",
    "RateLimited",
    "ScriptRule",
    "Success",
    "TranslationOutcome",
    "TranslationRequest",
    "TranslationWithBackend",
]
