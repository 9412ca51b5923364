"""Single-attempt backend executor.

Routes one request to one named backend and converts whatever happens into a typed
attempt outcome. Retrying and fallback are the orchestrator's job.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.lang.detector import LanguageDetector
from core.trans.interface import BackendNotConfiguredError, TranslationRateLimitError
from models.translation_models import (
    AUTO_LANGUAGE,
    BackendNotConfigured,
    BackendRateLimited,
    BackendTransientError,
    BackendTranslated,
)
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

    from core.trans.interface import TransInterface
    from models.translation_models import BackendAttemptOutcome, TranslationRequest

__all__: list[str] = ["BackendExecutor"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class BackendExecutor:
    """Execute a translation request against a backend looked up by name.

    Args:
        backends (Mapping[str, TransInterface] | None): Configured backend instances keyed by name.
    """

    def __init__(self, backends: Mapping[str, TransInterface] | None = None) -> None:
        self._backends: dict[str, TransInterface] = dict(backends or {})

    @property
    def backend_names(self) -> list[str]:
        return list(self._backends)

    def get(self, backend_name: str) -> TransInterface | None:
        return self._backends.get(backend_name)

    def set_backends(self, backends: Mapping[str, TransInterface]) -> None:
        """Replace the name to backend table."""
        self._backends = dict(backends)

    async def execute(self, backend_name: str, request: TranslationRequest) -> BackendAttemptOutcome:
        """Make exactly one call to ``backend_name``.

        Args:
            backend_name (str): Distinguished name of the backend.
            request (TranslationRequest): Request carrying language codes; the backend receives
                display names instead.

        Returns:
            BackendAttemptOutcome: Translated text, a rate-limit signal, a transient error, or
            NotConfigured when no usable backend exists under that name.
        """
        backend: TransInterface | None = self._backends.get(backend_name)
        if backend is None or not backend.is_available:
            logger.debug("Backend '%s' is not configured", backend_name)
            return BackendNotConfigured()

        from_lang: str = self._to_display(request.source_lang)
        to_lang: str = self._to_display(request.target_lang)
        try:
            text: str = await backend.translate(request.text, from_lang, to_lang)
        except TranslationRateLimitError as err:
            logger.warning("Backend '%s' rate limited (HTTP %d)", backend_name, err.status_code)
            return BackendRateLimited(status_code=err.status_code, key_id=err.key_id)
        except BackendNotConfiguredError as err:
            logger.debug("Backend '%s' is not configured: %s", backend_name, err)
            return BackendNotConfigured()
        except Exception as err:  # noqa: BLE001
            logger.warning("Backend '%s' failed: %s", backend_name, err)
            return BackendTransientError(cause=err)
        return BackendTranslated(text=text)

    @staticmethod
    def _to_display(code: str) -> str:
        if code == AUTO_LANGUAGE:
            return AUTO_LANGUAGE
        return LanguageDetector.display_name(code)
