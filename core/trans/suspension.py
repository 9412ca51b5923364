"""Rate-limit suspension registry.

Backends (or individual API keys of multi-key backends) that answer with HTTP 429 are
suspended for a while and skipped by the fallback chain until the suspension lapses.
Per-key suspensions are stored under ``"<backend>:<key_id>"``.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Final

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["SuspensionRegistry", "key_identifier", "suspension_key"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_SUSPENSION_MINUTES: Final[int] = 5


def key_identifier(index: int) -> str:
    """Return the identifier of the ``index``-th API key (``"key-0"``, ``"key-1"``, ...)."""
    return f"key-{index}"


def suspension_key(backend: str, key_id: str | None = None) -> str:
    return f"{backend}:{key_id}" if key_id else backend


class SuspensionRegistry:
    """Track suspended backends and API keys.

    A suspension is active only while ``now < expires_at``. Expired entries are
    removed lazily by every query.

    Args:
        suspension_minutes (int): Default suspension length.
        clock (Callable[[], float]): Monotonic time source in seconds, injectable for tests.
    """

    def __init__(
        self,
        suspension_minutes: int = DEFAULT_SUSPENSION_MINUTES,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.suspension_minutes: int = suspension_minutes
        self._clock: Callable[[], float] = clock
        self._suspensions: dict[str, float] = {}
        self._key_counts: dict[str, int] = {}
        self._lock: threading.Lock = threading.Lock()

    def set_key_count(self, backend: str, count: int) -> None:
        """Record how many API keys ``backend`` rotates through."""
        with self._lock:
            self._key_counts[backend] = max(count, 0)

    def key_count(self, backend: str) -> int:
        with self._lock:
            return self._key_counts.get(backend, 0)

    def suspend(
        self,
        backend: str,
        key_id: str | None = None,
        duration_minutes: int | None = None,
        status_code: int = 429,
    ) -> None:
        """Suspend a backend, or one of its keys, starting now.

        Suspending an already suspended target refreshes its expiry.
        """
        minutes: int = self.suspension_minutes if duration_minutes is None else duration_minutes
        target: str = suspension_key(backend, key_id)
        with self._lock:
            self._suspensions[target] = self._clock() + minutes * 60
        if key_id:
            logger.warning(
                "Suspended %s (key: %s) for %d minutes due to rate limit (HTTP %d)",
                backend,
                key_id,
                minutes,
                status_code,
            )
        else:
            logger.warning(
                "Suspended %s engine for %d minutes due to rate limit (HTTP %d)", backend, minutes, status_code
            )

    def is_suspended(self, backend: str) -> bool:
        """Return True if ``backend`` must be skipped entirely.

        That is the case when the backend itself is suspended, or when it has known API
        keys and every one of them is suspended.
        """
        with self._lock:
            self._purge_expired()
            if backend in self._suspensions:
                return True
            count: int = self._key_counts.get(backend, 0)
            if count <= 0:
                return False
            return all(suspension_key(backend, key_identifier(i)) in self._suspensions for i in range(count))

    def is_key_suspended(self, backend: str, key_id: str) -> bool:
        with self._lock:
            self._purge_expired()
            return suspension_key(backend, key_id) in self._suspensions

    def first_available_key(self, backend: str, total_keys: int) -> int | None:
        """Return the lowest key index that is not suspended, or None if all are."""
        with self._lock:
            self._purge_expired()
            for index in range(total_keys):
                if suspension_key(backend, key_identifier(index)) not in self._suspensions:
                    return index
        return None

    def remove_suspension(self, backend: str, key_id: str | None = None) -> bool:
        """Lift a suspension before it expires.

        Returns:
            bool: True if a suspension was removed.
        """
        target: str = suspension_key(backend, key_id)
        with self._lock:
            removed: float | None = self._suspensions.pop(target, None)
        if removed is not None:
            logger.info("Manually removed suspension for %s", target)
        return removed is not None

    def suspension_expiry(self, backend: str, key_id: str | None = None) -> float | None:
        """Return the clock reading at which the suspension lapses, or None."""
        with self._lock:
            self._purge_expired()
            return self._suspensions.get(suspension_key(backend, key_id))

    def active_suspension_count(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._suspensions)

    def clear(self) -> None:
        with self._lock:
            count: int = len(self._suspensions)
            self._suspensions.clear()
        if count:
            logger.info("Cleared %d rate limit suspensions", count)

    def _purge_expired(self) -> None:
        # Caller holds the lock.
        now: float = self._clock()
        expired: list[str] = [target for target, expires_at in self._suspensions.items() if now >= expires_at]
        for target in expired:
            del self._suspensions[target]
            logger.info("Rate limit suspension expired for %s, re-enabling", target)
