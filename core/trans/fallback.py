"""Ordered backend fallback with bounded retries.

The chain walks the configured backends in priority order. Each position is tried until
it succeeds, is rate limited (suspended, then skipped), or runs out of retries for
transient errors. Suspended or unconfigured backends are skipped without counting as
an attempt.
"""

from __future__ import annotations

import asyncio
import threading
import time
from typing import TYPE_CHECKING, Final

from models.translation_models import (
    BackendNotConfigured,
    BackendRateLimited,
    BackendTranslated,
    Notice,
    NoticeSeverity,
    TranslationWithBackend,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Sequence

    from core.trans.executor import BackendExecutor
    from core.trans.suspension import SuspensionRegistry
    from models.translation_models import BackendAttemptOutcome, TranslationRequest

__all__: list[str] = ["FallbackOrchestrator", "NoticeSink"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type NoticeSink = Callable[[Notice], None]

DEFAULT_MAX_RETRIES: Final[int] = 2
DEFAULT_BACKOFF_SECONDS: Final[float] = 1.0
DEFAULT_NOTIFICATION_COOLDOWN_MINUTES: Final[int] = 15


class FallbackOrchestrator:
    """Try backends in order until one produces a translation.

    Args:
        executor (BackendExecutor): Performs single attempts against named backends.
        suspensions (SuspensionRegistry): Suspension state shared with the backends.
        backends (Sequence[str]): Backend names in priority order.
        max_retries (int): Extra attempts per backend after a transient error.
        backoff_seconds (float): Base of the linear backoff between retries.
        notification_cooldown_minutes (float): Minimum gap between two notices.
        notice_sink (NoticeSink | None): Receives fallback and recovery notices.
        clock (Callable[[], float]): Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        executor: BackendExecutor,
        suspensions: SuspensionRegistry,
        backends: Sequence[str],
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        notification_cooldown_minutes: float = DEFAULT_NOTIFICATION_COOLDOWN_MINUTES,
        notice_sink: NoticeSink | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._executor: BackendExecutor = executor
        self._suspensions: SuspensionRegistry = suspensions
        self._backends: tuple[str, ...] = tuple(backends)
        self.max_retries: int = max(max_retries, 0)
        self.backoff_seconds: float = backoff_seconds
        self.notification_cooldown_seconds: float = notification_cooldown_minutes * 60
        self.notice_sink: NoticeSink | None = notice_sink
        self._clock: Callable[[], float] = clock
        self._lock: threading.Lock = threading.Lock()
        self._last_successful: str | None = None
        self._last_notice_at: float | None = None
        # Attempts outlive a cancelled caller; keep references until they finish.
        self._attempts: set[asyncio.Task[BackendAttemptOutcome]] = set()

    @property
    def backends(self) -> tuple[str, ...]:
        return self._backends

    @property
    def last_successful_backend(self) -> str | None:
        with self._lock:
            return self._last_successful

    def update_backends(self, backends: Sequence[str]) -> None:
        """Replace the ordered backend list. Calls already in progress keep their snapshot."""
        self._backends = tuple(backends)
        logger.debug("Updated backend list to: %s", list(self._backends))

    def backoff(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1`` of the same backend."""
        return (attempt + 1) * self.backoff_seconds

    async def translate(self, request: TranslationRequest) -> TranslationWithBackend:
        """Run the fallback chain for one request.

        Returns:
            TranslationWithBackend: The text and the backend that produced it, or an empty
            result when every backend was exhausted.
        """
        backends: tuple[str, ...] = self._backends
        index: int = 0
        attempt: int = 0

        while index < len(backends):
            name: str = backends[index]

            if self._suspensions.is_suspended(name):
                logger.debug("Backend '%s' is suspended due to rate limits, skipping", name)
                self._notify_fallback(backends, index)
                index, attempt = index + 1, 0
                continue

            outcome: BackendAttemptOutcome = await self._attempt(name, request)

            if isinstance(outcome, BackendTranslated):
                self._record_success(name, index)
                return TranslationWithBackend(text=outcome.text, backend=name)

            if isinstance(outcome, BackendNotConfigured):
                logger.debug("Backend '%s' is not configured, skipping", name)
                index, attempt = index + 1, 0
                continue

            if isinstance(outcome, BackendRateLimited):
                logger.debug("Backend '%s' hit rate limit (%d), moving to next backend", name, outcome.status_code)
                self._notify_fallback(backends, index)
                index, attempt = index + 1, 0
                continue

            if attempt < self.max_retries:
                delay: float = self.backoff(attempt)
                logger.debug("Backend '%s' failed (attempt %d), retrying in %.1fs", name, attempt + 1, delay)
                await self._wait(delay)
                attempt += 1
                continue

            logger.debug("Backend '%s' failed after %d attempts, trying next", name, attempt + 1)
            self._notify_fallback(backends, index)
            index, attempt = index + 1, 0

        logger.debug("All translation backends failed")
        return TranslationWithBackend()

    async def _attempt(self, name: str, request: TranslationRequest) -> BackendAttemptOutcome:
        task: asyncio.Task[BackendAttemptOutcome] = asyncio.create_task(
            self._run_attempt(name, request), name=f"translate-{name}"
        )
        self._attempts.add(task)
        task.add_done_callback(self._attempts.discard)
        return await asyncio.shield(task)

    async def _run_attempt(self, name: str, request: TranslationRequest) -> BackendAttemptOutcome:
        outcome: BackendAttemptOutcome = await self._executor.execute(name, request)
        # Applied here so the suspension sticks even if the caller was cancelled.
        if isinstance(outcome, BackendRateLimited):
            self._suspensions.suspend(name, outcome.key_id, status_code=outcome.status_code)
        return outcome

    async def _wait(self, delay: float) -> None:
        await asyncio.sleep(delay)

    def _record_success(self, name: str, index: int) -> None:
        notice: Notice | None = None
        with self._lock:
            previous: str | None = self._last_successful
            self._last_successful = name
            if index == 0 and previous is not None and previous != name and self._claim_cooldown():
                notice = Notice(
                    message=f"Translation engine recovered: now using {name}", severity=NoticeSeverity.INFO
                )
        if notice is not None:
            logger.info("Translation engine recovered: now using primary backend '%s'", name)
            self._emit(notice)

    def _notify_fallback(self, backends: tuple[str, ...], index: int) -> None:
        if index != 0 or index + 1 >= len(backends):
            return
        with self._lock:
            if not self._claim_cooldown():
                return
        failed, following = backends[index], backends[index + 1]
        logger.warning(
            "Primary translation backend '%s' is unavailable. Falling back to '%s'. "
            "Translation quality may be degraded.",
            failed,
            following,
        )
        self._emit(
            Notice(
                message=(
                    f"Primary translation provider {failed} is unavailable. Falling back to {following}. "
                    "Translation quality may be degraded."
                ),
                severity=NoticeSeverity.WARNING,
            )
        )

    def _claim_cooldown(self) -> bool:
        # Caller holds the lock.
        now: float = self._clock()
        if self._last_notice_at is not None and now - self._last_notice_at < self.notification_cooldown_seconds:
            return False
        self._last_notice_at = now
        return True

    def _emit(self, notice: Notice) -> None:
        if self.notice_sink is None:
            return
        try:
            self.notice_sink(notice)
        except Exception as err:  # noqa: BLE001
            logger.error("Notice sink raised: %s", err)
