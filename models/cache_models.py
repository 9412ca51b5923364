"""Models for translation cache data."""

from __future__ import annotations

from dataclasses import dataclass

__all__: list[str] = ["CacheEntry", "CacheStatistics"]


@dataclass(frozen=True)
class CacheEntry:
    """Translation cache entry.

    Attributes:
        key (str): SHA-256 key of the (source language, target language, text) tuple.
        value (str): Translated text.
        inserted_at (float): Monotonic clock reading at insertion.
    """

    key: str
    value: str
    inserted_at: float

    def is_expired(self, now: float, ttl: float) -> bool:
        return (now - self.inserted_at) > ttl


@dataclass
class CacheStatistics:
    """Cache usage statistics.

    Attributes:
        total_entries (int): Entries currently stored, expired ones included until swept.
        hits (int): Lookups answered from the cache.
        misses (int): Lookups that found nothing or an expired entry.
        evicted (int): Entries removed by expiry sweeps.
    """

    total_entries: int = 0
    hits: int = 0
    misses: int = 0
    evicted: int = 0

    @property
    def hit_ratio(self) -> float:
        total: int = self.hits + self.misses
        return self.hits / total if total else 0.0
