"""Tests for TranslationCacheManager.

Covers lookup, TTL expiry, NFC key normalisation, statistics and the background sweep.
"""

from __future__ import annotations

import asyncio

import pytest

from core.cache.manager import TranslationCacheManager
from models.cache_models import CacheStatistics


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now: float = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TranslationCacheManager:
    return TranslationCacheManager(30, clock=clock)


def test_cache_miss_returns_none(cache: TranslationCacheManager) -> None:
    assert cache.get("привіт", "uk_ua", "en_us") is None


def test_cache_hit_returns_exact_value(cache: TranslationCacheManager) -> None:
    cache.put("привіт", "uk_ua", "en_us", "hello")

    assert cache.get("привіт", "uk_ua", "en_us") == "hello"
    assert cache.get("привіт", "uk_ua", "de_de") is None
    assert cache.get("привіт", "ru_ru", "en_us") is None


def test_cache_entry_expires_after_ttl(cache: TranslationCacheManager, clock: FakeClock) -> None:
    cache.put("привіт", "uk_ua", "en_us", "hello")

    clock.now = 30.0
    assert cache.get("привіт", "uk_ua", "en_us") == "hello"

    clock.now = 30.001
    assert cache.get("привіт", "uk_ua", "en_us") is None
    assert cache.size == 0


def test_cache_last_write_wins(cache: TranslationCacheManager, clock: FakeClock) -> None:
    cache.put("привіт", "uk_ua", "en_us", "hello")
    clock.now = 20.0
    cache.put("привіт", "uk_ua", "en_us", "hi")

    clock.now = 40.0
    assert cache.get("привіт", "uk_ua", "en_us") == "hi"
    assert cache.size == 1


def test_cache_key_is_nfc_normalised(cache: TranslationCacheManager) -> None:
    cache.put("café", "fr_fr", "en_us", "coffee")

    assert cache.get("cafe\u0301", "fr_fr", "en_us") == "coffee"


def test_cleanup_expired_entries_removes_only_expired(cache: TranslationCacheManager, clock: FakeClock) -> None:
    cache.put("old", "uk_ua", "en_us", "1")
    clock.now = 20.0
    cache.put("new", "uk_ua", "en_us", "2")

    clock.now = 35.0
    removed: int = cache.cleanup_expired_entries()

    assert removed == 1
    assert cache.size == 1
    assert cache.get("new", "uk_ua", "en_us") == "2"


def test_clear_drops_everything(cache: TranslationCacheManager) -> None:
    cache.put("a", "uk_ua", "en_us", "1")
    cache.put("b", "uk_ua", "en_us", "2")

    cache.clear()

    assert cache.size == 0
    assert cache.get("a", "uk_ua", "en_us") is None


def test_cache_statistics(cache: TranslationCacheManager, clock: FakeClock) -> None:
    cache.put("a", "uk_ua", "en_us", "1")
    cache.get("a", "uk_ua", "en_us")
    cache.get("b", "uk_ua", "en_us")
    clock.now = 100.0
    cache.cleanup_expired_entries()

    stats: CacheStatistics = cache.get_cache_statistics()

    assert stats.total_entries == 0
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.evicted == 1
    assert stats.hit_ratio == pytest.approx(0.5)


def test_cache_rejects_non_positive_ttl() -> None:
    with pytest.raises(ValueError, match="TTL"):
        TranslationCacheManager(0)


@pytest.mark.asyncio
async def test_background_sweep_removes_expired_entries(clock: FakeClock) -> None:
    cache = TranslationCacheManager(0.01, clock=clock)
    cache.put("a", "uk_ua", "en_us", "1")
    clock.now = 1.0

    await cache.component_load()
    try:
        assert cache.is_running is True
        for _ in range(100):
            if cache.size == 0:
                break
            await asyncio.sleep(0.01)
        assert cache.size == 0
    finally:
        await cache.component_teardown()

    assert cache.is_running is False
