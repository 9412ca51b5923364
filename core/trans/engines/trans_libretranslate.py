"""LibreTranslate backend (self-hosted or public instance) over HTTP."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from core.trans.interface import (
    BackendNotConfiguredError,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from handlers.async_comm import AsyncCommError, AsyncHttp
from models.language_models import LANGUAGE_DISPLAY_NAMES
from models.translation_models import AUTO_LANGUAGE
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config

__all__: list[str] = ["LibreTranslateTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS: Final[int] = 429

# "ukrainian" -> "uk", "uk_ua" -> "uk"
_LANGUAGE_CODES: Final[dict[str, str]] = {
    **{name.lower(): code.split("_")[0] for code, name in LANGUAGE_DISPLAY_NAMES.items()},
    **{code: code.split("_")[0] for code in LANGUAGE_DISPLAY_NAMES},
}


class LibreTranslateTranslation(TransInterface):
    """LibreTranslate ``/translate`` client.

    The API key is optional and read from ``LIBRETRANSLATE_API_OAUTH``.
    """

    def __init__(self) -> None:
        super().__init__()
        self._http: AsyncHttp | None = None
        self._url: str = ""
        self._api_key: str = ""
        self._alternatives: int = 0
        self._format: str = "text"
        self._timeout: float = 10.0

    @property
    def is_available(self) -> bool:
        return self._http is not None and bool(self._url)

    @staticmethod
    def fetch_engine_name() -> str:
        return "libretranslate"

    def initialize(self, config: Config) -> None:
        settings = config.LIBRETRANSLATE
        if not settings.URL:
            msg = "LibreTranslate URL is not configured"
            raise BackendNotConfiguredError(msg)
        self._url = settings.URL
        self._alternatives = settings.ALTERNATIVES
        self._format = settings.FORMAT
        self._timeout = settings.TIMEOUT
        self._api_key = self.get_authentication_key()
        self._http = AsyncHttp()
        logger.debug("LibreTranslate endpoint: %s (api key: %s)", self._url, "set" if self._api_key else "none")

    @staticmethod
    def map_language(language: str) -> str:
        """Map a display name or language code to LibreTranslate's two letter code."""
        lowered: str = language.strip().lower()
        if lowered == AUTO_LANGUAGE:
            return AUTO_LANGUAGE
        return _LANGUAGE_CODES.get(lowered, lowered[:2])

    def build_payload(self, text: str, from_lang: str, to_lang: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "q": text,
            "source": self.map_language(from_lang),
            "target": self.map_language(to_lang),
            "format": self._format,
            "alternatives": self._alternatives,
        }
        if self._api_key:
            payload["api_key"] = self._api_key
        return payload

    async def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        if self._http is None:
            msg = "LibreTranslate has not been initialized"
            raise BackendNotConfiguredError(msg)

        try:
            response: Any = await self._http.post(
                url=self._url,
                data=self.build_payload(text, from_lang, to_lang),
                headers={"Content-Type": "application/json"},
                total_timeout=self._timeout,
            )
        except AsyncCommError as err:
            if err.status == HTTP_TOO_MANY_REQUESTS:
                msg = "LibreTranslate rate limit reached"
                raise TranslationRateLimitError(msg, engine_name=self.fetch_engine_name()) from err
            msg = f"LibreTranslate request failed: {err}"
            raise TranslateExceptionError(msg) from err

        return self._extract_text(response)

    @staticmethod
    def _extract_text(response: Any) -> str:
        if isinstance(response, dict):
            translated: Any = response.get("translatedText")
            if isinstance(translated, str):
                return translated
            alternatives: Any = response.get("alternatives")
            if isinstance(alternatives, list) and alternatives:
                return str(alternatives[0])
        msg = "Invalid response format from LibreTranslate"
        raise TranslateExceptionError(msg)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
        self._http = None
        logger.debug("'%s' process termination", self.__class__.__name__)
