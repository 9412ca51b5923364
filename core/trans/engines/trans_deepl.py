from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar

from deepl import DeepLClient, Language, TextResult
from deepl.exceptions import (
    AuthorizationException,
    ConnectionException,
    DeepLException,
    QuotaExceededException,
    TooManyRequestsException,
)

from core.trans.interface import (
    BackendNotConfiguredError,
    NotSupportedLanguagesError,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from models.language_models import LANGUAGE_DISPLAY_NAMES
from models.translation_models import AUTO_LANGUAGE
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config


__all__: list[str] = ["DeeplTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# "Ukrainian" -> "uk_ua"
_DISPLAY_TO_CODE: dict[str, str] = {name.lower(): code for code, name in LANGUAGE_DISPLAY_NAMES.items()}


class DeeplTranslation(TransInterface):
    _source_codes: ClassVar[dict[str, str]] = {}  # "uk" -> "UK"
    _target_codes: ClassVar[dict[str, str]] = {}  # "uk" -> "UK", "en-us" -> "EN-US"

    def __init__(self) -> None:
        super().__init__()
        self.__inst: DeepLClient | None = None
        self.__available: bool = False
        self._formality: str = "default"
        self._generate_langcode_mappings()

    def _generate_langcode_mappings(self) -> None:
        """Populate the DeepL source and target code tables from the ``Language`` constants.

        Source languages are keyed by their base code only. Target languages are also keyed
        by their regional form so "en_us" resolves to "EN-US" rather than a bare "EN".
        """
        language_constants: dict[str, str] = self._get_language_constants(Language)

        for code in language_constants.values():
            base_code: str = code.split("-")[0].lower()
            DeeplTranslation._source_codes[base_code] = base_code.upper()
            DeeplTranslation._target_codes.setdefault(base_code, code.upper())
            DeeplTranslation._target_codes[code.lower()] = code.upper()

        logger.debug("Language code mapping generated for DeepL.")

    def _get_language_constants(self, cls) -> dict[str, str]:
        return {name: value for name, value in vars(cls).items() if isinstance(value, str) and name.isupper()}

    @property
    def _inst(self) -> DeepLClient:
        if self.__inst is None:
            msg = "The DeepL instance is not initialised"
            raise BackendNotConfiguredError(msg)
        return self.__inst

    @_inst.setter
    def _inst(self, inst: DeepLClient | None) -> None:
        self.__inst = inst
        self.__available = inst is not None
        logger.debug("'%s': 'set instance'", self.__class__.__name__)

    @property
    def is_available(self) -> bool:
        return self.__available

    @staticmethod
    def fetch_engine_name() -> str:
        return "deepl"

    def initialize(self, config: Config) -> None:
        """Create the DeepL client.

        Args:
            config (Config): Configuration object; ``DEEPL.FORMALITY`` is applied to every request.

        Raises:
            BackendNotConfiguredError: If no authentication key is set.
            TranslateExceptionError: If the client cannot be created.
        """
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self._formality = config.DEEPL.FORMALITY

        auth_key: str = self.get_authentication_key()
        if not auth_key:
            msg = "DEEPL_API_OAUTH is not set"
            raise BackendNotConfiguredError(msg)
        try:
            # Authentication happens on the first API call, not here.
            self._inst = DeepLClient(auth_key)
        except (AttributeError, ValueError) as err:
            msg = "An error occurred while creating the DeepL client instance"
            raise TranslateExceptionError(msg) from err

    def _convert_language(self, display_name: str, *, target: bool) -> str | None:
        if display_name == AUTO_LANGUAGE and not target:
            return None
        code: str | None = _DISPLAY_TO_CODE.get(display_name.lower())
        if code is None:
            return None
        base, _, region = code.partition("_")
        if not target:
            return DeeplTranslation._source_codes.get(base)
        return DeeplTranslation._target_codes.get(f"{base}-{region}") or DeeplTranslation._target_codes.get(base)

    async def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        """Translate ``text`` with DeepL.

        Raises:
            NotSupportedLanguagesError: If DeepL does not support one of the languages.
            TranslationRateLimitError: If DeepL answers with HTTP 429.
            TranslateExceptionError: If the quota is exhausted or any other DeepL error occurs.
        """
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", text, from_lang, to_lang)
        _src_lang: str | None = self._convert_language(from_lang, target=False)
        _tgt_lang: str | None = self._convert_language(to_lang, target=True)
        if _tgt_lang is None or (_src_lang is None and from_lang != AUTO_LANGUAGE):
            msg: str = f"Languages not supported by DeepL. Source language: '{from_lang}'. Target language: '{to_lang}'."
            raise NotSupportedLanguagesError(msg)

        try:
            results: TextResult | list[TextResult] = await asyncio.to_thread(
                self._inst.translate_text,
                text,
                source_lang=_src_lang,
                target_lang=_tgt_lang,
                formality=self._formality,
            )
        except TooManyRequestsException as err:
            msg = "DeepL rate limit reached"
            raise TranslationRateLimitError(msg, engine_name=self.fetch_engine_name(), status_code=429) from err
        except QuotaExceededException:
            msg = "DeepL character quota exceeded"
            raise TranslateExceptionError(msg) from None
        except AuthorizationException:
            msg = "Authorisation failed. Please check your authentication key"
            raise TranslateExceptionError(msg) from None
        except ConnectionException:
            msg = "An error occurred when connecting to the DeepL server"
            raise TranslateExceptionError(msg) from None
        except (DeepLException, ValueError, TypeError):
            msg = "An anomaly occurred during the translation process at DeepL"
            raise TranslateExceptionError(msg) from None

        logger.info("translation completed (%s > %s)", _src_lang, _tgt_lang)
        return self._extract_text(results)

    def _extract_text(self, results: TextResult | list[TextResult]) -> str:
        if isinstance(results, list):
            if not results:
                msg = "DeepL returned no translation"
                raise TranslateExceptionError(msg)
            results = results[0]
        if not isinstance(results, TextResult):
            msg = "An anomaly occurred during the translation process at DeepL"
            raise TranslateExceptionError(msg)
        return results.text

    async def close(self) -> None:
        self._inst = None
        logger.debug("'%s' process termination", self.__class__.__name__)
