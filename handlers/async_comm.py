"""Asynchronous HTTP communication utilities.

This module provides the HTTP client used by the chat-completion translation engines.
It includes error handling for common issues such as timeouts, connection errors, and invalid content types.
The `AsyncHttp` class handles HTTP requests with customizable content type handlers.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession
from aiohttp.web_exceptions import HTTPError

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from aiohttp.client import ClientResponse


__all__: list[str] = [
    "AsyncCommConnectionError",
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

CONNECT_TIMEOUT: Final[float] = 1.0


class AsyncHttp:
    """Asynchronous HTTP client for making requests and handling responses.

    This class provides a method for performing JSON POST requests, handling different content types,
    and managing an aiohttp session.
    It supports custom content type handlers, allowing the client to process responses based on their content type.
    """

    def __init__(self) -> None:
        """Initialize the AsyncHttp client.

        This method sets up the aiohttp session and registers default content type handlers.
        It must be called while an event loop is running.

        The default handlers include:
            - "text/plain": Decodes bytes to a UTF-8 string.
            - "text/html": Decodes bytes to a UTF-8 string.
            - "application/json": Parses bytes as JSON.
        """
        logger.info("%s initializing", self.__class__.__name__)
        self.__session: ClientSession | None = None
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {}

        self.add_handler("text/plain", lambda x: x.decode("utf-8"))
        self.add_handler("text/html", lambda x: x.decode("utf-8"))
        self.add_handler("application/json", lambda x: json.loads(x.decode("utf-8")))
        self.initialize_session()

    async def __aenter__(self) -> Self:
        logger.debug("%s entering context", self.__class__.__name__)
        self.initialize_session(suppress_already_log=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        logger.debug("%s exiting context", self.__class__.__name__)
        await self.close()

    def initialize_session(self, *, suppress_already_log: bool = False) -> None:
        """Initialize the aiohttp session.

        Args:
            suppress_already_log (bool): If True, do not log when the session is already initialized.
        """
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession(raise_for_status=True)
            logger.debug("%s session initialized", self.__class__.__name__)
        elif not suppress_already_log:
            logger.debug("%s session already initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """Get the current aiohttp session."""
        if self.__session is None or self.__session.closed:
            msg = "Session is not initialized or has been closed"
            raise RuntimeError(msg)
        return self.__session

    @property
    def closed(self) -> bool:
        """Whether the session has been closed or never opened."""
        return self.__session is None or self.__session.closed

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
        logger.info("%s session closed", self.__class__.__name__)

    async def post(
        self,
        *,
        url: str,
        data: Any | None = None,
        headers: dict[str, str] | None = None,
        total_timeout: float = 10.0,
    ) -> Any:
        """Perform an asynchronous HTTP POST request with a JSON body.

        Args:
            url (str): The URL to send the POST request to.
            data (Any | None): The data to send as the JSON request body.
            headers (dict[str, str] | None): Optional request headers. Never logged.
            total_timeout (float): Total timeout for the request in seconds.
        Returns:
            Any: The response data, parsed as JSON if applicable.
        """
        logger.debug("'url': '%s', 'timeout': '%s'", url, total_timeout)
        return await self._request(
            "POST",
            url=url,
            json=data,
            headers=headers,
            total_timeout=total_timeout,
        )

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Parse the response from an HTTP request.

        This method checks the 'Content-Type' header of the response and uses the appropriate handler
        to parse the response data. If no handler is found for the content type, it raises an error.

        Args:
            resp (ClientResponse): The response object from the aiohttp request.
        Returns:
            Any: The parsed response data, which can be a string, JSON object,
                or other types depending on the content type.
        Raises:
            AsyncCommInvalidContentTypeError: If the content type of the response is not recognized
                or no handler is registered for it.
        """
        content_type: str = resp.headers.get("Content-Type", "").split(";")[0].strip()
        logger.debug("'Content-Type': '%s'", content_type)

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
        """Add a custom handler for a specific content type.

        Args:
            content_type (str): The content type to handle (e.g., "text/plain", "application/json").
            handler (Callable[[bytes], Any]): A function that takes bytes and returns the parsed data.
        """
        if self.content_handlers.get(content_type):
            logger.warning("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler
        logger.debug("Added handler for content type '%s'", content_type)

    async def _request(
        self,
        method: HTTPMethod,
        *,
        url: str,
        total_timeout: float,
        **kwargs: Any,
    ) -> Any:
        """Perform an asynchronous HTTP request.

        Args:
            method (HTTPMethod): The HTTP method to use (GET, POST, etc.).
            url (str): The URL to send the request to.
            total_timeout (float): Total timeout for the request in seconds.
            **kwargs: Additional keyword arguments to pass to the aiohttp request.
        Returns:
            Any: The response data, parsed as JSON if applicable.
        Raises:
            AsyncCommTimeoutError: If the server does not answer in time.
            AsyncCommConnectionError: If the server cannot be reached.
            AsyncCommError: If the server answers with an error status.
        """
        logger.debug("[%s] url=%s timeout=%s", method, url, total_timeout)
        if total_timeout <= 0:
            _timeout = aiohttp.ClientTimeout(total=None)
        elif total_timeout < CONNECT_TIMEOUT:
            # A connect timeout longer than the total would never fire.
            _timeout = aiohttp.ClientTimeout(total=total_timeout)
        else:
            _timeout = aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

        try:
            async with self.session.request(
                method=method,
                url=url,
                timeout=_timeout,
                **kwargs,
            ) as resp:
                resp.raise_for_status()
                return await self.decode_response(resp)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except ConnectionResetError as err:
            logger.debug(err)
            msg = "The connection to the server has been disconnected."
            raise AsyncCommConnectionError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = "The server could not be reached."
            raise AsyncCommConnectionError(msg) from err
        except (HTTPError, aiohttp.ClientResponseError) as err:
            logger.debug(err)
            msg = "Error response from the server."
            raise AsyncCommError(msg, response=err) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = "The request to the server failed."
            raise AsyncCommConnectionError(msg) from err


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors.

    Attributes:
        msg (str): Error message, including the HTTP status when there is one.
        status (int | None): HTTP status of the error response, if any.
    """

    def __init__(self, msg: str | BaseException, **kwargs: Any) -> None:
        self.msg: str = str(msg)
        self.status: int | None = None

        rsp: HTTPError | aiohttp.ClientResponseError | None = kwargs.pop("response", None)
        if isinstance(rsp, (HTTPError, aiohttp.ClientResponseError)):
            self.status = rsp.status
            self.msg = f"{self.msg}: status='{rsp.status}'"

        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """Error raised when an asynchronous communication operation times out."""


class AsyncCommConnectionError(AsyncCommError):
    """Error raised when the server cannot be reached or the connection drops."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """Error raised when the content type of a response is not recognized or no handler is registered for it."""
