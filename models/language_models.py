"""Language tables used by the script-ratio language heuristic.

Detection and locale mapping are table driven: adding a language means adding a row,
not a branch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

__all__: list[str] = [
    "DEFAULT_LOCALE_RULES",
    "DEFAULT_SCRIPT_RULES",
    "DEFAULT_TARGET_LANGUAGE",
    "ENGLISH",
    "LANGUAGE_DISPLAY_NAMES",
    "UKRAINIAN",
    "UNKNOWN",
    "DetectedLanguage",
    "LocaleRule",
    "ScriptRule",
]


@dataclass(frozen=True)
class DetectedLanguage:
    """A language the heuristic can report.

    Attributes:
        display_name (str): Human readable name handed to backends (e.g. "Ukrainian").
        code (str | None): Locale-style language code (e.g. "uk_ua"). None for UNKNOWN.
    """

    display_name: str
    code: str | None

    @property
    def is_unknown(self) -> bool:
        return self.code is None


UNKNOWN: Final[DetectedLanguage] = DetectedLanguage("Unknown", None)
UKRAINIAN: Final[DetectedLanguage] = DetectedLanguage("Ukrainian", "uk_ua")
ENGLISH: Final[DetectedLanguage] = DetectedLanguage("English", "en_us")


@dataclass(frozen=True)
class ScriptRule:
    """Classify text as ``language`` when ``pattern`` covers at least ``threshold`` of it."""

    language: DetectedLanguage
    pattern: re.Pattern[str]
    threshold: float = 0.3


@dataclass(frozen=True)
class LocaleRule:
    """Map a locale to ``code`` when it starts with ``prefix`` or contains any of ``contains``."""

    code: str
    prefix: str
    contains: tuple[str, ...] = field(default_factory=tuple)

    def matches(self, locale: str) -> bool:
        return locale.startswith(self.prefix) or any(part in locale for part in self.contains)


# Checked in order; the first rule over its threshold wins.
DEFAULT_SCRIPT_RULES: Final[tuple[ScriptRule, ...]] = (
    ScriptRule(UKRAINIAN, re.compile(r"[\u0400-\u04FF]+"), 0.3),
    ScriptRule(ENGLISH, re.compile(r"[a-zA-Z]+"), 0.3),
)

DEFAULT_TARGET_LANGUAGE: Final[str] = "en_us"

# Order matters: substring checks are loose, so earlier families take precedence.
DEFAULT_LOCALE_RULES: Final[tuple[LocaleRule, ...]] = (
    LocaleRule("uk_ua", "uk", ("ua",)),
    LocaleRule("ru_ru", "ru", ("ru",)),
    LocaleRule("es_es", "es", ("es",)),
    LocaleRule("fr_fr", "fr", ("fr",)),
    LocaleRule("de_de", "de", ("de",)),
    LocaleRule("it_it", "it", ("it",)),
    LocaleRule("pt_pt", "pt", ("pt", "br")),
    LocaleRule("zh_cn", "zh", ("cn",)),
    LocaleRule("ja_jp", "ja", ("jp",)),
    LocaleRule("ko_kr", "ko", ("kr",)),
    LocaleRule("ar_sa", "ar", ("sa",)),
    LocaleRule("hi_in", "hi", ("in",)),
    LocaleRule("pl_pl", "pl", ("pl",)),
    LocaleRule("nl_nl", "nl", ("nl",)),
    LocaleRule("sv_se", "sv", ("se",)),
    LocaleRule("no_no", "no", ("no",)),
    LocaleRule("da_dk", "da", ("dk",)),
    LocaleRule("fi_fi", "fi", ("fi",)),
    LocaleRule("cs_cz", "cs", ("cz",)),
    LocaleRule("hu_hu", "hu", ("hu",)),
    LocaleRule("ro_ro", "ro", ("ro",)),
    LocaleRule("bg_bg", "bg", ("bg",)),
    LocaleRule("el_gr", "el", ("gr",)),
    LocaleRule("tr_tr", "tr", ("tr",)),
    LocaleRule("he_il", "he", ("il",)),
    LocaleRule("th_th", "th", ("th",)),
    LocaleRule("vi_vn", "vi", ("vn",)),
)

LANGUAGE_DISPLAY_NAMES: Final[dict[str, str]] = {
    "uk_ua": "Ukrainian",
    "en_us": "English",
    "ru_ru": "Russian",
    "es_es": "Spanish",
    "fr_fr": "French",
    "de_de": "German",
    "it_it": "Italian",
    "pt_pt": "Portuguese",
    "zh_cn": "Chinese",
    "ja_jp": "Japanese",
    "ko_kr": "Korean",
    "ar_sa": "Arabic",
    "hi_in": "Hindi",
    "pl_pl": "Polish",
    "nl_nl": "Dutch",
    "sv_se": "Swedish",
    "no_no": "Norwegian",
    "da_dk": "Danish",
    "fi_fi": "Finnish",
    "cs_cz": "Czech",
    "hu_hu": "Hungarian",
    "ro_ro": "Romanian",
    "bg_bg": "Bulgarian",
    "el_gr": "Greek",
    "tr_tr": "Turkish",
    "he_il": "Hebrew",
    "th_th": "Thai",
    "vi_vn": "Vietnamese",
}
