"""Asynchronous HTTP communication for the HTTP-based translation backends.

``AsyncHttp`` wraps a single aiohttp session, decodes responses by content type and
converts transport failures into ``AsyncCommError`` subclasses. HTTP error responses
keep their status code on the raised error so callers can tell a 429 from other failures.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from aiohttp.client import ClientResponse


__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST"]

CONNECT_TIMEOUT: Final[float] = 5.0


class AsyncHttp:
    """Asynchronous HTTP client with content-type based response decoding.

    The session is created lazily so instances can be built outside a running event loop.
    """

    def __init__(self) -> None:
        logger.debug("%s initializing", self.__class__.__name__)
        self.__session: ClientSession | None = None
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {}

        self.add_handler("text/plain", lambda x: x.decode("utf-8"))
        self.add_handler("text/html", lambda x: x.decode("utf-8"))
        self.add_handler("application/json", lambda x: json.loads(x.decode("utf-8")))

    async def __aenter__(self) -> Self:
        self.initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    def initialize_session(self) -> None:
        """Create the aiohttp session if it does not exist or has been closed."""
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession()
            logger.debug("%s session initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """Return the current session, creating one on first use."""
        self.initialize_session()
        if self.__session is None:
            msg = "Session could not be initialized"
            raise RuntimeError(msg)
        return self.__session

    @property
    def is_open(self) -> bool:
        return self.__session is not None and not self.__session.closed

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
            logger.debug("%s session closed", self.__class__.__name__)
        self.__session = None

    async def get(self, *, url: str, params: dict[str, str] | None = None, total_timeout: float = 10.0) -> Any:
        """Perform an asynchronous HTTP GET request and return the decoded body."""
        return await self._request("GET", url=url, params=params, total_timeout=total_timeout)

    async def post(
        self,
        *,
        url: str,
        params: dict[str, str] | None = None,
        data: Any | None = None,
        headers: dict[str, str] | None = None,
        total_timeout: float = 10.0,
    ) -> Any:
        """Perform an asynchronous HTTP POST request with a JSON body.

        Args:
            url (str): Request URL.
            params (dict[str, str] | None): Query parameters.
            data (Any | None): JSON-serialisable request body.
            headers (dict[str, str] | None): Extra request headers.
            total_timeout (float): Total timeout in seconds; 0 or less disables it.

        Returns:
            Any: The decoded response body.
        """
        return await self._request(
            "POST",
            url=url,
            params=params,
            json=data,
            headers=headers,
            total_timeout=total_timeout,
        )

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Decode the response body with the handler registered for its Content-Type.

        Raises:
            AsyncCommInvalidContentTypeError: If no handler matches the content type.
        """
        content_type: str = resp.headers.get("Content-Type", "").split(";")[0].strip()

        raw: bytes = await resp.read()
        if not raw:
            logger.debug("Received empty response")
            return None

        handler: Callable[[bytes], Any] | None = self.content_handlers.get(content_type)
        if handler:
            return handler(raw)

        msg: str = f"Unknown Content-Type '{content_type}'"
        raise AsyncCommInvalidContentTypeError(msg)

    def add_handler(self, content_type: str, handler: Callable[[bytes], Any]) -> None:
        """Register (or replace) the decoder used for a content type."""
        if self.content_handlers.get(content_type):
            logger.warning("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler

    @staticmethod
    def _build_timeout(total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            # A connect timeout longer than the total would never apply.
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    async def _request(self, method: HTTPMethod, *, url: str, total_timeout: float, **kwargs: Any) -> Any:
        logger.debug("[%s] url=%s timeout=%s", method, url, total_timeout)
        try:
            async with self.session.request(
                method=method,
                url=url,
                timeout=self._build_timeout(total_timeout),
                **kwargs,
            ) as resp:
                resp.raise_for_status()
                return await self.decode_response(resp)

        except TimeoutError as err:
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except ConnectionResetError as err:
            msg = "The connection to the server has been disconnected."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientConnectorError as err:
            msg = "The server is not running, or the port is closed."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientResponseError as err:
            msg = "Error response from the server."
            raise AsyncCommError(msg, status=err.status) from err
        except aiohttp.ClientError as err:
            msg = "HTTP client error."
            raise AsyncCommError(msg) from err


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors.

    Attributes:
        msg (str): Human readable message, including the status when known.
        status (int | None): HTTP status code of an error response, if any.
    """

    def __init__(self, msg: str | BaseException, *, status: int | None = None) -> None:
        self.msg: str = str(msg)
        self.status: int | None = status
        if status is not None:
            self.msg = f"{self.msg}: status='{status}'"
        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """A request did not complete within its timeout."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """The response carried a content type without a registered decoder."""
