"""Per-actor sliding window throttle."""

from __future__ import annotations

import asyncio
import contextlib
import threading
import time
from collections import deque
from typing import TYPE_CHECKING

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["ActorRateLimiter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class ActorRateLimiter:
    """Allow at most ``limit`` translations per actor within ``window_seconds``.

    ``can_proceed`` only checks; ``record_usage`` consumes a slot. The two steps are
    separate so a request rejected later in the pipeline does not cost the actor.

    Args:
        limit (int): Maximum recorded usages within the window.
        window_seconds (float): Width of the sliding window.
        clock (Callable[[], float]): Monotonic time source, injectable for tests.
    """

    def __init__(
        self, limit: int, window_seconds: float, *, clock: Callable[[], float] = time.monotonic
    ) -> None:
        if limit <= 0 or window_seconds <= 0:
            msg: str = f"Rate limit and window must be positive, got limit={limit} window={window_seconds}"
            raise ValueError(msg)
        self.limit: int = limit
        self.window_seconds: float = float(window_seconds)
        self._clock: Callable[[], float] = clock
        self._windows: dict[str, deque[float]] = {}
        self._lock: threading.Lock = threading.Lock()
        self._sweep_task: asyncio.Task[None] | None = None

    @property
    def tracked_actors(self) -> int:
        with self._lock:
            return len(self._windows)

    async def component_load(self) -> None:
        """Start pruning idle actor windows every ``window_seconds``."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop(), name="actor-limiter-sweep")
        logger.info("Actor rate limiter started: %d messages per %.0fs", self.limit, self.window_seconds)

    async def component_teardown(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None
        logger.info("Actor rate limiter stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.window_seconds)
            self.prune()

    def can_proceed(self, actor_id: str) -> bool:
        """Return True if the actor has a free slot in the current window."""
        with self._lock:
            window: deque[float] | None = self._windows.get(actor_id)
            if window is None:
                return True
            self._drop_stale(window, self._clock())
            allowed: bool = len(window) < self.limit
        if not allowed:
            logger.debug("Actor '%s' throttled (%d per %.0fs)", actor_id, self.limit, self.window_seconds)
        return allowed

    def record_usage(self, actor_id: str) -> None:
        """Record one translation for the actor at the current instant."""
        now: float = self._clock()
        with self._lock:
            window: deque[float] = self._windows.setdefault(actor_id, deque())
            self._drop_stale(window, now)
            window.append(now)

    def prune(self) -> int:
        """Drop stale timestamps for every actor and forget actors with empty windows.

        Returns:
            int: Number of actors removed.
        """
        now: float = self._clock()
        with self._lock:
            for window in self._windows.values():
                self._drop_stale(window, now)
            idle: list[str] = [actor for actor, window in self._windows.items() if not window]
            for actor in idle:
                del self._windows[actor]
        if idle:
            logger.debug("Removed %d idle actor windows", len(idle))
        return len(idle)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()

    def _drop_stale(self, window: deque[float], now: float) -> None:
        cutoff: float = now - self.window_seconds
        while window and window[0] < cutoff:
            window.popleft()
