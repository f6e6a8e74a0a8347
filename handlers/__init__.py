"""Asynchronous HTTP communication for the translation adapters.

This package provides the aiohttp client wrapper used by the HTTP-based engines, and the
errors it raises for timeouts, connection failures and error responses.
"""

from handlers.async_comm import (
    AsyncCommConnectionError,
    AsyncCommError,
    AsyncCommInvalidContentTypeError,
    AsyncCommTimeoutError,
    AsyncHttp,
)

__all__: list[str] = [
    "AsyncCommConnectionError",
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]
