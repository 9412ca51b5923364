from __future__ import annotations

import hashlib
import unicodedata

__all__: list[str] = ["StringUtils"]


class StringUtils:
    """Static helpers for text normalisation and cache key derivation."""

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Return the value as a string, or an empty string for None.

        Whitespace is preserved on purpose; callers decide whether to strip.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def normalize_text(text: str) -> str:
        """Normalize text using Unicode NFC normalization."""
        return unicodedata.normalize("NFC", StringUtils.ensure_str(text))

    @staticmethod
    def generate_hash_key(source_text: str, source_lang: str, target_lang: str) -> str:
        """Generate a SHA-256 key for a (text, source language, target language) tuple.

        The text is NFC-normalised first so visually identical input maps to the same key.

        Args:
            source_text (str): Raw text to translate.
            source_lang (str): Source language code.
            target_lang (str): Target language code.

        Returns:
            str: Hex digest identifying the tuple.
        """
        key_data: str = f"{source_lang}|{target_lang}|{StringUtils.normalize_text(source_text)}"
        return hashlib.sha256(key_data.encode("utf-8")).hexdigest()

    @staticmethod
    def truncate(value: str, length: int = 50) -> str:
        """Shorten text for log output."""
        value = StringUtils.ensure_str(value)
        if length <= 0 or len(value) <= length:
            return value
        return value[:length] + "..."
