"""Translation cache package.

Provides TTL caching for translation results.
"""

from __future__ import annotations

from core.cache.manager import TranslationCacheManager

__all__: list[str] = ["TranslationCacheManager"]
