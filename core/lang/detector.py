"""Script-ratio language heuristic.

Guesses the source language from the share of characters belonging to a script and maps
an actor's locale to the language they should read. Both decisions are table driven and
side-effect free.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from models.language_models import (
    DEFAULT_LOCALE_RULES,
    DEFAULT_SCRIPT_RULES,
    DEFAULT_TARGET_LANGUAGE,
    LANGUAGE_DISPLAY_NAMES,
    UNKNOWN,
    DetectedLanguage,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    import re
    from collections.abc import Sequence

    from models.language_models import LocaleRule, ScriptRule

__all__: list[str] = ["LanguageDetector"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

MIN_DETECTION_LENGTH: Final[int] = 3


class LanguageDetector:
    """Detect source languages and resolve target languages.

    Args:
        script_rules (Sequence[ScriptRule] | None): Ordered detection rules. Defaults to
            Cyrillic (Ukrainian) then Latin (English), both at a 0.3 threshold.
        locale_rules (Sequence[LocaleRule] | None): Ordered locale family rules.
        default_target (str): Target language used when no locale rule matches.
    """

    def __init__(
        self,
        script_rules: Sequence[ScriptRule] | None = None,
        locale_rules: Sequence[LocaleRule] | None = None,
        default_target: str = DEFAULT_TARGET_LANGUAGE,
    ) -> None:
        self.script_rules: tuple[ScriptRule, ...] = tuple(
            DEFAULT_SCRIPT_RULES if script_rules is None else script_rules
        )
        self.locale_rules: tuple[LocaleRule, ...] = tuple(
            DEFAULT_LOCALE_RULES if locale_rules is None else locale_rules
        )
        self.default_target: str = default_target

    def detect(self, text: str | None) -> DetectedLanguage:
        """Guess the language of ``text`` from its script composition.

        Text shorter than three characters (after stripping) is never classified.

        Args:
            text (str | None): Text to analyse.

        Returns:
            DetectedLanguage: The first language whose script share reaches its threshold,
            otherwise UNKNOWN.
        """
        if not text or not text.strip():
            return UNKNOWN

        text = text.strip()
        if len(text) < MIN_DETECTION_LENGTH:
            return UNKNOWN

        total: int = len(text)
        for rule in self.script_rules:
            ratio: float = self._count_matches(text, rule.pattern) / total
            if ratio >= rule.threshold:
                return rule.language
        return UNKNOWN

    def needs_translation(self, text: str | None, actor_locale: str | None) -> bool:
        """Decide whether ``text`` should be translated for an actor.

        Ambiguous text is never translated.
        """
        detected: DetectedLanguage = self.detect(text)
        if detected.is_unknown:
            return False
        return detected.code != self.target_for(actor_locale)

    def target_for(self, locale: str | None) -> str:
        """Map a locale string (e.g. ``"en_US"``) to a target language code."""
        if locale is None:
            return self.default_target

        normalized: str = locale.lower()
        for rule in self.locale_rules:
            if rule.matches(normalized):
                return rule.code
        return self.default_target

    @staticmethod
    def display_name(code: str | None) -> str:
        """Return the human readable name for a language code, or "Unknown"."""
        if code is None:
            return UNKNOWN.display_name
        return LANGUAGE_DISPLAY_NAMES.get(code.lower(), UNKNOWN.display_name)

    @staticmethod
    def _count_matches(text: str, pattern: re.Pattern[str]) -> int:
        return sum(len(match.group()) for match in pattern.finditer(text))
