"""Models for translation requests, outcomes and backend attempts.

The outcome returned to callers is a closed union of frozen dataclasses; exactly one
variant describes each call. Backend attempt outcomes are the executor's typed view
of a single call to one backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

__all__: list[str] = [
    "AUTO_LANGUAGE",
    "BackendAttemptOutcome",
    "BackendNotConfigured",
    "BackendRateLimited",
    "BackendTransientError",
    "BackendTranslated",
    "Failed",
    "NoTranslationNeeded",
    "Notice",
    "NoticeSeverity",
    "RateLimited",
    "Success",
    "TranslationOutcome",
    "TranslationRequest",
    "TranslationWithBackend",
]

AUTO_LANGUAGE: Final[str] = "auto"


@dataclass(frozen=True)
class TranslationRequest:
    """A single translation request.

    Attributes:
        text (str): Text to translate.
        source_lang (str): Source language code, or ``"auto"``.
        target_lang (str): Target language code.
        actor_id (str): Identifier of the actor the request is made for.
    """

    text: str
    source_lang: str
    target_lang: str
    actor_id: str = ""


@dataclass(frozen=True)
class Success:
    text: str
    detected_source: str
    target: str
    original: str = ""
    backend: str | None = None
    from_cache: bool = False


@dataclass(frozen=True)
class NoTranslationNeeded:
    reason: str
    original: str = ""


@dataclass(frozen=True)
class RateLimited:
    original: str = ""
    reason: str = "Rate limit exceeded"


@dataclass(frozen=True)
class Failed:
    reason: str
    original: str = ""


type TranslationOutcome = Success | NoTranslationNeeded | RateLimited | Failed


@dataclass(frozen=True)
class BackendTranslated:
    text: str


@dataclass(frozen=True)
class BackendRateLimited:
    status_code: int = 429
    key_id: str | None = None


@dataclass(frozen=True)
class BackendTransientError:
    cause: BaseException


@dataclass(frozen=True)
class BackendNotConfigured:
    pass


type BackendAttemptOutcome = BackendTranslated | BackendRateLimited | BackendTransientError | BackendNotConfigured


@dataclass(frozen=True)
class TranslationWithBackend:
    """Result of a fallback chain: translated text and the backend that produced it.

    Both fields are None when every backend failed.
    """

    text: str | None = None
    backend: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.text is not None


class NoticeSeverity(StrEnum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Notice:
    """Human-readable message for the observer layer (fallback or recovery)."""

    message: str
    severity: NoticeSeverity = NoticeSeverity.INFO
