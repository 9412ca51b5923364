"""Google Gemini backend using the ``generateContent`` REST endpoint.

Several API keys can be configured (comma separated in ``GEMINI_API_OAUTH``). A key that
is rate limited is suspended on its own, and later requests use the next free key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from core.trans.interface import (
    BackendNotConfiguredError,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from core.trans.suspension import key_identifier
from handlers.async_comm import AsyncCommError, AsyncHttp
from models.translation_models import AUTO_LANGUAGE
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config

__all__: list[str] = ["GeminiTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS: Final[int] = 429

SYSTEM_INSTRUCTION: Final[str] = (
    "You translate short chat messages. Keep the tone, slang and emoji of the original. "
    "Reply with the translation only, without quotes, notes or explanations."
)
TRANSLATION_PROMPT: Final[str] = "Translate the following text from {source} to {target}:\n\n{message}"
AUTO_DETECT_PROMPT: Final[str] = (
    "Detect the language of the following text and translate it to {target}:\n\n{message}"
)


class GeminiTranslation(TransInterface):
    def __init__(self) -> None:
        super().__init__()
        self._http: AsyncHttp | None = None
        self._api_keys: list[str] = []
        self._endpoint: str = ""
        self._timeout: float = 15.0
        self._temperature: float = 0.1

    @property
    def key_count(self) -> int:
        return len(self._api_keys)

    @property
    def is_available(self) -> bool:
        return self._http is not None and bool(self._api_keys)

    @staticmethod
    def fetch_engine_name() -> str:
        return "gemini"

    def initialize(self, config: Config) -> None:
        """Read the API keys and endpoint settings.

        Raises:
            BackendNotConfiguredError: If no API key is set.
        """
        self._api_keys = self.get_authentication_keys(config.TRANSLATION.MAX_API_KEYS)
        if not self._api_keys:
            msg = "GEMINI_API_OAUTH is not set"
            raise BackendNotConfiguredError(msg)

        settings = config.GEMINI
        self._endpoint = f"{settings.URL.rstrip('/')}/{settings.MODEL}:generateContent"
        self._timeout = settings.TIMEOUT
        self._temperature = settings.TEMPERATURE
        self._http = AsyncHttp()
        logger.debug("Gemini client initialized: model=%s keys=%d", settings.MODEL, len(self._api_keys))

    def build_payload(self, text: str, from_lang: str, to_lang: str) -> dict[str, Any]:
        if from_lang == AUTO_LANGUAGE:
            prompt: str = AUTO_DETECT_PROMPT.format(target=to_lang, message=text)
        else:
            prompt = TRANSLATION_PROMPT.format(source=from_lang, target=to_lang, message=text)
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "systemInstruction": {"role": "user", "parts": [{"text": SYSTEM_INSTRUCTION}]},
            "generationConfig": {"temperature": self._temperature, "maxOutputTokens": 500},
        }

    async def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        """Translate with the first API key that is not suspended.

        Raises:
            TranslationRateLimitError: If the key in use answers with HTTP 429; ``key_id`` names it.
            TranslateExceptionError: If every usable key failed or all keys are suspended.
        """
        if self._http is None:
            msg = "Gemini has not been initialized"
            raise BackendNotConfiguredError(msg)

        payload: dict[str, Any] = self.build_payload(text, from_lang, to_lang)
        attempted: int = 0
        suspended: int = 0
        last_error: Exception | None = None

        for index, api_key in enumerate(self._api_keys):
            key_id: str = key_identifier(index)
            if self.suspensions is not None and self.suspensions.is_key_suspended(self.engine_name, key_id):
                logger.debug("Skipping Gemini %s (suspended due to rate limit)", key_id)
                suspended += 1
                continue

            attempted += 1
            try:
                response: Any = await self._http.post(
                    url=self._endpoint,
                    params={"key": api_key},
                    data=payload,
                    headers={"Content-Type": "application/json"},
                    total_timeout=self._timeout,
                )
            except AsyncCommError as err:
                if err.status == HTTP_TOO_MANY_REQUESTS:
                    msg = f"Gemini {key_id} rate limit exceeded (HTTP 429)"
                    raise TranslationRateLimitError(
                        msg, engine_name=self.engine_name, status_code=HTTP_TOO_MANY_REQUESTS, key_id=key_id
                    ) from err
                logger.debug("Gemini %s failed: %s", key_id, err)
                last_error = err
                continue

            try:
                return self._extract_text(response)
            except TranslateExceptionError as err:
                last_error = err

        if suspended == len(self._api_keys):
            msg = f"All {suspended} Gemini API key(s) are currently suspended due to rate limits"
        else:
            msg = f"All available Gemini API keys failed (attempted: {attempted}, suspended: {suspended})"
        raise TranslateExceptionError(msg) from last_error

    @staticmethod
    def _extract_text(response: Any) -> str:
        try:
            return str(response["candidates"][0]["content"]["parts"][0]["text"]).strip()
        except (KeyError, IndexError, TypeError) as err:
            msg = "Failed to extract text from Gemini response"
            raise TranslateExceptionError(msg) from err

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
        self._http = None
        logger.debug("Gemini client closed")
