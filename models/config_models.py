"""Configuration data models for the translation core.

Each dataclass mirrors one INI section. Field names match the INI keys, and the
default value's type decides how the loader coerces the raw string.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = [
    "Config",
    "Deepl",
    "Gemini",
    "General",
    "LibreTranslate",
    "Translation",
]


@dataclass
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""


@dataclass
class Translation:
    ENGINE: list[str] = field(default_factory=list)  # Ordered by fallback priority.
    MAX_API_KEYS: int = 8
    CACHE_EXPIRY_SECONDS: int = 30
    RATE_LIMIT_MESSAGES: int = 2
    RATE_LIMIT_WINDOW_SECONDS: int = 10
    MIN_MESSAGE_LENGTH: int = 3
    MAX_RETRIES: int = 2
    RETRY_BACKOFF_SECONDS: float = 1.0
    SUSPENSION_MINUTES: int = 5
    NOTIFICATION_COOLDOWN_MINUTES: int = 15


@dataclass
class Deepl:
    FORMALITY: str = "default"


@dataclass
class LibreTranslate:
    URL: str = "http://localhost:5000/translate"
    ALTERNATIVES: int = 0
    FORMAT: str = "text"
    TIMEOUT: float = 10.0


@dataclass
class Gemini:
    MODEL: str = "gemini-2.0-flash"
    URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    TIMEOUT: float = 15.0
    TEMPERATURE: float = 0.1


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    DEEPL: Deepl = field(default_factory=Deepl)
    LIBRETRANSLATE: LibreTranslate = field(default_factory=LibreTranslate)
    GEMINI: Gemini = field(default_factory=Gemini)
