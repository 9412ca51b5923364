"""Top-level translation request path.

TransManager owns the pipeline every chat message goes through: length and language
checks, per-actor throttling, the result cache and finally the backend fallback chain.
Callers always get a TranslationOutcome back; no exception escapes.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from core.cache.manager import TranslationCacheManager
from core.lang.detector import LanguageDetector
from core.limiter.actor_limiter import ActorRateLimiter
from core.trans.engines import (
    DeeplTranslation,  # noqa: F401
    GeminiTranslation,  # noqa: F401
    LibreTranslateTranslation,  # noqa: F401
)
from core.trans.executor import BackendExecutor
from core.trans.fallback import FallbackOrchestrator
from core.trans.interface import TransInterface, TranslateExceptionError
from core.trans.suspension import SuspensionRegistry
from models.translation_models import (
    Failed,
    NoTranslationNeeded,
    RateLimited,
    Success,
    TranslationRequest,
)
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Mapping, Sequence

    from config.loader import Config
    from core.trans.fallback import NoticeSink
    from models.language_models import DetectedLanguage
    from models.translation_models import TranslationOutcome, TranslationWithBackend

__all__: list[str] = ["TransManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

REASON_TOO_SHORT: str = "Message too short"
REASON_NOT_NEEDED: str = "No translation needed"
REASON_UNAVAILABLE: str = "Translation service unavailable"


class TransManager:
    """Translate chat messages for actors through a chain of backends.

    Args:
        config (Config): Application configuration.
        notice_sink (NoticeSink | None): Receives fallback and recovery notices.
        detector (LanguageDetector | None): Language heuristic. Defaults to the built-in tables.
        clock (Callable[[], float]): Monotonic time source shared by the cache, limiter,
            suspension registry and notice cooldown.
    """

    def __init__(
        self,
        config: Config,
        *,
        notice_sink: NoticeSink | None = None,
        detector: LanguageDetector | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config: Config = config
        settings = config.TRANSLATION
        self.min_message_length: int = settings.MIN_MESSAGE_LENGTH
        self.detector: LanguageDetector = detector or LanguageDetector()
        self.cache: TranslationCacheManager = TranslationCacheManager(settings.CACHE_EXPIRY_SECONDS, clock=clock)
        self.limiter: ActorRateLimiter = ActorRateLimiter(
            settings.RATE_LIMIT_MESSAGES, settings.RATE_LIMIT_WINDOW_SECONDS, clock=clock
        )
        self.suspensions: SuspensionRegistry = SuspensionRegistry(settings.SUSPENSION_MINUTES, clock=clock)
        self.executor: BackendExecutor = BackendExecutor()
        self.orchestrator: FallbackOrchestrator = FallbackOrchestrator(
            self.executor,
            self.suspensions,
            settings.ENGINE,
            max_retries=settings.MAX_RETRIES,
            backoff_seconds=settings.RETRY_BACKOFF_SECONDS,
            notification_cooldown_minutes=settings.NOTIFICATION_COOLDOWN_MINUTES,
            notice_sink=notice_sink,
            clock=clock,
        )
        self._engines: dict[str, TransInterface] = {}
        logger.debug("Registered translation engines: %s", list(TransInterface.registered))

    @property
    def engine_names(self) -> list[str]:
        """Names of the engines that initialized successfully, in priority order."""
        return list(self._engines)

    async def initialize(self) -> None:
        """Create the configured engines and start the background sweeps."""
        logger.info("TransManager initialization started")
        self._build_engines(self.config.TRANSLATION.ENGINE)
        await self.cache.component_load()
        await self.limiter.component_load()

    async def reload_engines(self, engine_names: Sequence[str] | None = None) -> None:
        """Close the current engines and rebuild the chain from ``engine_names``.

        Args:
            engine_names (Sequence[str] | None): New priority order. Defaults to the configured one.
        """
        await self._close_engines()
        self._build_engines(self.config.TRANSLATION.ENGINE if engine_names is None else engine_names)

    def _build_engines(self, engine_names: Sequence[str]) -> None:
        engines: dict[str, TransInterface] = {}
        for _name in engine_names:
            _cls: type[TransInterface] | None = TransInterface.registered.get(_name)
            if _cls is None:
                logger.critical("Translation class not found: '%s'", _name)
                continue
            _instance: TransInterface = _cls()
            try:
                _instance.initialize(self.config)
            except TranslateExceptionError as err:
                logger.critical("Exception in '%s' translation setup: %s", _name, err)
                continue
            _instance.bind_suspension_registry(self.suspensions)
            engines[_name] = _instance
            logger.info("Translation engine initialized: '%s'", _name)

        self._engines = engines
        self.executor.set_backends(engines)
        # Names without an engine stay in the chain and are skipped as not configured.
        self.orchestrator.update_backends(list(engine_names))

    async def _close_engines(self) -> None:
        for _name, _instance in self._engines.items():
            try:
                await _instance.close()
            except Exception as err:  # noqa: BLE001
                logger.error("Failed to close translation engine '%s': %s", _name, err)
        self._engines = {}
        self.executor.set_backends({})

    def clear_caches(self) -> None:
        """Forget cached translations and all per-actor usage."""
        self.cache.clear()
        self.limiter.clear()

    async def shutdown(self) -> None:
        """Stop the background sweeps and close every engine."""
        await self.cache.component_teardown()
        await self.limiter.component_teardown()
        await self._close_engines()
        logger.info("TransManager shut down")

    async def translate_for_actor(self, text: str, actor_id: str, actor_locale: str | None) -> TranslationOutcome:
        """Translate ``text`` into the language an actor reads.

        Args:
            text (str): Message to translate.
            actor_id (str): Identifier used for throttling.
            actor_locale (str | None): Actor's locale, e.g. ``"en_US"``.

        Returns:
            TranslationOutcome: Exactly one of Success, NoTranslationNeeded, RateLimited or Failed.
        """
        try:
            return await self._translate_for_actor(text, actor_id, actor_locale)
        except Exception as err:  # noqa: BLE001
            logger.error("Unexpected error while translating for '%s': %s", actor_id, err)
            return Failed(reason=REASON_UNAVAILABLE, original=text)

    async def _translate_for_actor(self, text: str, actor_id: str, actor_locale: str | None) -> TranslationOutcome:
        if len(text) < self.min_message_length:
            return NoTranslationNeeded(reason=REASON_TOO_SHORT, original=text)

        detected: DetectedLanguage = self.detector.detect(text)
        target: str = self.detector.target_for(actor_locale)
        if detected.code is None or detected.code == target:
            return NoTranslationNeeded(reason=REASON_NOT_NEEDED, original=text)

        if not self.limiter.can_proceed(actor_id):
            return RateLimited(original=text)

        cached: str | None = self.cache.get(text, detected.code, target)
        if cached is not None:
            return Success(text=cached, detected_source=detected.code, target=target, original=text, from_cache=True)

        self.limiter.record_usage(actor_id)
        return await self._run_chain(text, detected.code, target, actor_id)

    async def translate_for_actors(
        self, text: str, actors: Mapping[str, str | None]
    ) -> dict[str, TranslationOutcome]:
        """Translate one message for many actors, one backend chain per target language.

        Args:
            text (str): Message to translate.
            actors (Mapping[str, str | None]): Actor id to locale.

        Returns:
            dict[str, TranslationOutcome]: Outcome per actor id.
        """
        if len(text) < self.min_message_length:
            return {actor_id: NoTranslationNeeded(reason=REASON_TOO_SHORT, original=text) for actor_id in actors}

        results: dict[str, TranslationOutcome] = {}
        detected: DetectedLanguage = self.detector.detect(text)
        pending: dict[str, list[str]] = {}

        for actor_id, locale in actors.items():
            target: str = self.detector.target_for(locale)
            if detected.code is None or detected.code == target:
                results[actor_id] = NoTranslationNeeded(reason=REASON_NOT_NEEDED, original=text)
                continue
            if not self.limiter.can_proceed(actor_id):
                results[actor_id] = RateLimited(original=text)
                continue
            cached: str | None = self.cache.get(text, detected.code, target)
            if cached is not None:
                results[actor_id] = Success(
                    text=cached, detected_source=detected.code, target=target, original=text, from_cache=True
                )
                continue
            self.limiter.record_usage(actor_id)
            pending.setdefault(target, []).append(actor_id)

        if not pending or detected.code is None:
            return results

        source: str = detected.code
        targets: list[str] = list(pending)
        outcomes: list[TranslationOutcome | BaseException] = await asyncio.gather(
            *(self._run_chain(text, source, target, pending[target][0]) for target in targets),
            return_exceptions=True,
        )
        for target, outcome in zip(targets, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.error("Unexpected error while translating to '%s': %s", target, outcome)
                outcome = Failed(reason=REASON_UNAVAILABLE, original=text)
            for actor_id in pending[target]:
                results[actor_id] = outcome
        return results

    async def _run_chain(self, text: str, source: str, target: str, actor_id: str) -> TranslationOutcome:
        request = TranslationRequest(text=text, source_lang=source, target_lang=target, actor_id=actor_id)
        result: TranslationWithBackend = await self.orchestrator.translate(request)
        if result.text is None:
            return Failed(reason=REASON_UNAVAILABLE, original=text)

        self.cache.put(text, source, target, result.text)
        logger.debug(
            "[%s] Translation result: '%s' -> '%s'",
            result.backend,
            StringUtils.truncate(text),
            StringUtils.truncate(result.text),
        )
        return Success(text=result.text, detected_source=source, target=target, original=text, backend=result.backend)
