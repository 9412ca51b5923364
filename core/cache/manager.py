"""Translation result cache.

In-memory TTL cache keyed by a SHA-256 of (source language, target language, text).
Expiry is enforced on every lookup; a background sweep only bounds memory.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
import time
from typing import TYPE_CHECKING

from models.cache_models import CacheEntry, CacheStatistics
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["TranslationCacheManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslationCacheManager:
    """TTL cache for translated text.

    Safe for concurrent use from many in-flight translation calls; on key collision the
    last write wins.

    Args:
        ttl_seconds (float): Lifetime of an entry. An entry older than this is never returned.
        clock (Callable[[], float]): Monotonic time source, injectable for tests.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds <= 0:
            msg: str = f"Cache TTL must be positive, got {ttl_seconds}"
            raise ValueError(msg)
        self.ttl_seconds: float = float(ttl_seconds)
        self._clock: Callable[[], float] = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock: threading.Lock = threading.Lock()
        self._stats: CacheStatistics = CacheStatistics()
        self._sweep_task: asyncio.Task[None] | None = None
        logger.debug("TranslationCacheManager created (ttl=%.1fs)", self.ttl_seconds)

    @property
    def is_running(self) -> bool:
        """Whether the background sweep is active."""
        return self._sweep_task is not None and not self._sweep_task.done()

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    async def component_load(self) -> None:
        """Start the periodic expiry sweep (period = TTL)."""
        if self.is_running:
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop(), name="translation-cache-sweep")
        logger.info("TranslationCacheManager sweep started (every %.1fs)", self.ttl_seconds)

    async def component_teardown(self) -> None:
        """Stop the periodic sweep. Stored entries are kept."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None
        logger.info("TranslationCacheManager sweep stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.ttl_seconds)
            self.cleanup_expired_entries()

    def get(self, text: str, source_lang: str, target_lang: str) -> str | None:
        """Return the cached translation, or None if absent or expired.

        Lookup and expiry check happen under the same lock, so a single lookup never
        observes an entry that has outlived the TTL.
        """
        key: str = StringUtils.generate_hash_key(text, source_lang, target_lang)
        with self._lock:
            entry: CacheEntry | None = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return None
            if entry.is_expired(self._clock(), self.ttl_seconds):
                del self._entries[key]
                self._stats.misses += 1
                logger.debug("Cache entry expired for key: %s", key[:16])
                return None
            self._stats.hits += 1
        logger.debug("Cache hit for key: %s", key[:16])
        return entry.value

    def put(self, text: str, source_lang: str, target_lang: str, translation: str) -> None:
        """Store a translation, replacing any previous value for the same tuple."""
        key: str = StringUtils.generate_hash_key(text, source_lang, target_lang)
        entry = CacheEntry(key=key, value=translation, inserted_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        logger.debug("Translation cached for key: %s", key[:16])

    def clear(self) -> None:
        """Drop every cached translation."""
        with self._lock:
            count: int = len(self._entries)
            self._entries.clear()
        if count:
            logger.info("Cleared %d translation cache entries", count)

    def cleanup_expired_entries(self) -> int:
        """Remove expired entries.

        Returns:
            int: Number of entries removed.
        """
        now: float = self._clock()
        with self._lock:
            expired: list[str] = [
                key for key, entry in self._entries.items() if entry.is_expired(now, self.ttl_seconds)
            ]
            for key in expired:
                del self._entries[key]
            self._stats.evicted += len(expired)
        if expired:
            logger.debug("Deleted %d expired translation cache entries", len(expired))
        return len(expired)

    def get_cache_statistics(self) -> CacheStatistics:
        """Return a snapshot of cache statistics."""
        with self._lock:
            return CacheStatistics(
                total_entries=len(self._entries),
                hits=self._stats.hits,
                misses=self._stats.misses,
                evicted=self._stats.evicted,
            )
