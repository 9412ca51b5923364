"""Language detection heuristic."""

from __future__ import annotations

from core.lang.detector import LanguageDetector

__all__: list[str] = ["LanguageDetector"]
