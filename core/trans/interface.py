"""Abstract base class for translation backends and the related exceptions.

A backend exposes a single capability: translate text between two languages given by
display name. Rate limiting is reported with TranslationRateLimitError so the caller can
suspend the backend (or the offending API key) and move on.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config
    from core.trans.suspension import SuspensionRegistry

__all__: list[str] = [
    "BackendNotConfiguredError",
    "NotSupportedLanguagesError",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationRateLimitError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class NotSupportedLanguagesError(TranslateExceptionError):
    """An unsupported language was specified."""


class BackendNotConfiguredError(TranslateExceptionError):
    """The backend has no usable credentials or endpoint."""


class TranslationRateLimitError(TranslateExceptionError):
    """The translation request was rate-limited by the API.

    Attributes:
        engine_name (str): Backend that reported the limit.
        status_code (int): HTTP status code of the response (429 unless the API says otherwise).
        key_id (str | None): Identifier of the API key that hit the limit, for multi-key backends.
    """

    def __init__(
        self,
        message: str = "",
        *,
        engine_name: str = "",
        status_code: int = 429,
        key_id: str | None = None,
    ) -> None:
        super().__init__(message or f"Rate limit exceeded (HTTP {status_code})")
        self.engine_name: str = engine_name
        self.status_code: int = status_code
        self.key_id: str | None = key_id

    @property
    def suspension_key(self) -> str:
        """``"<engine>:<key_id>"`` for per-key limits, else the engine name."""
        return f"{self.engine_name}:{self.key_id}" if self.key_id else self.engine_name


class TransInterface(ABC):
    """Abstract base class for translation backends.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): Registered backend classes keyed by
            their distinguished names. Configuration refers to backends by these names.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass under its distinguished name.

        Subclasses returning an empty name are not registered, which lets tests define
        throwaway engines.
        """
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_engine_name") or not callable(cls.fetch_engine_name):
            msg = "Subclasses of TransInterface must implement the static method fetch_engine_name()."
            raise TypeError(msg)

        if not isinstance(cls.fetch_engine_name(), str) or cls.fetch_engine_name() == "":
            return

        if cls.fetch_engine_name() in cls.registered:
            msg: str = f"A translation engine with the name '{cls.fetch_engine_name()}' is already registered."
            raise ValueError(msg)

        cls.registered[cls.fetch_engine_name()] = cls

    def __init__(self) -> None:
        self._suspensions: SuspensionRegistry | None = None

    @property
    def engine_name(self) -> str:
        return self.fetch_engine_name()

    @property
    def key_count(self) -> int:
        """Number of API keys rotated per key; 0 for backends suspended as a whole."""
        return 0

    @property
    def suspensions(self) -> SuspensionRegistry | None:
        return self._suspensions

    def bind_suspension_registry(self, registry: SuspensionRegistry) -> None:
        """Give the backend read access to suspensions so it can skip suspended keys."""
        self._suspensions = registry
        if self.key_count > 0:
            registry.set_key_count(self.engine_name, self.key_count)

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend is configured and can accept requests."""
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the backend.

        Called during class registration in __init_subclass__, so the implementation must be
        available at subclass definition time.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Initialize the backend with the given configuration.

        Args:
            config (Config): Configuration object containing settings for the backend.
        """
        raise NotImplementedError

    @abstractmethod
    async def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        """Translate ``text``.

        Args:
            text (str): Text to be translated.
            from_lang (str): Source language display name (e.g. "Ukrainian"), or "auto".
            to_lang (str): Target language display name (e.g. "English").

        Returns:
            str: Translated text.

        Raises:
            TranslationRateLimitError: If the request is rate-limited by the API.
            BackendNotConfiguredError: If the backend has not been configured.
            NotSupportedLanguagesError: If a language is not supported.
            TranslateExceptionError: If translation fails for any other reason.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release resources held by the backend."""
        raise NotImplementedError

    def get_authentication_key(self) -> str:
        """Retrieve the authentication key from environment variables.

        The variable is named after the backend's distinguished name with the suffix
        "_API_OAUTH"; for "libretranslate" that is "LIBRETRANSLATE_API_OAUTH".

        Returns:
            str: The authentication key, or an empty string if the environment variable is not set.
        """
        return os.getenv(f"{self.fetch_engine_name().upper()}_API_OAUTH", "")

    def get_authentication_keys(self, max_keys: int) -> list[str]:
        """Retrieve up to ``max_keys`` comma-separated authentication keys."""
        keys: list[str] = [key.strip() for key in self.get_authentication_key().split(",") if key.strip()]
        if len(keys) > max_keys:
            logger.warning(
                "%s: %d API keys configured, only the first %d are used", self.engine_name, len(keys), max_keys
            )
        return keys[:max_keys]
