"""Asynchronous client for the free Google Translate web endpoint.

The endpoint answers a GET request with a nested JSON array:
``[[["translated", "original", null, null, 3], ...], null, "detected-lang", ...]``.
Each element of the first array is one translated segment.
"""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from typing import Any

import aiohttp

from core.trans.engines.const_google import DEFAULT_SERVICE_URL, LANGUAGES, MAX_TEXT_LENGTH
from utils.logger_utils import LoggerUtils

__all__: list[str] = [
    "AsyncTranslator",
    "GoogleError",
    "HTTPConnectionError",
    "HTTPError",
    "HTTPRedirection",
    "HTTPTimeoutError",
    "HTTPTooManyRequests",
    "InvalidLanguageCodeError",
    "ResponseFormatError",
    "TextResult",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)
logger.addHandler(logging.NullHandler())

_USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class GoogleException(Exception):  # noqa: N818
    pass


class GoogleError(GoogleException):
    pass


class ResponseFormatError(GoogleException):
    """An unknown response format from Google

    Response format has changed or response was interrupted for some reason.
    If this exception occurs every time, the format has likely changed.
    """


class InvalidLanguageCodeError(GoogleException):
    """Language Code for languages not listed in Google Translate

    When 'code_sensitive' is 'True', specifying a target language code that does not exist
    in the list will cause an exception.
    Language code is case-insensitive.
    """


class HTTPException(GoogleException):
    def __init__(self, msg: str, *, status: int | None = None) -> None:
        super().__init__(msg)
        self.status: int | None = status


class HTTPConnectionError(HTTPException):
    pass


class HTTPTimeoutError(HTTPException):
    pass


class HTTPRedirection(HTTPException):
    """HTTP 3xx Redirection Exception"""


class HTTPError(HTTPException):
    """HTTP 4xx/5xx Error Exception"""


class HTTPTooManyRequests(HTTPException):
    """HTTP 429 Too Many Requests Exception"""


class TextResult:
    def __init__(
        self,
        text: str,
        detected_source_lang: str | None,
        *,
        metadata: dict[str, str] | None = None,
    ) -> None:
        self.text: str = text
        self.detected_source_lang: str | None = detected_source_lang
        self.metadata: dict[str, str] | None = metadata

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return (
            f"<TextResult text={self.text} detected_source_lang={self.detected_source_lang} metadata={self.metadata}>"
        )


class AsyncTranslator:
    """Thin client for ``translate_a/single?client=gtx``.

    One call to ``translate`` performs exactly one GET request. The aiohttp session is created on
    first use so that the client can be built outside of a running event loop.
    """

    def __init__(
        self,
        url: str = DEFAULT_SERVICE_URL,
        timeout: float = 10.0,
        *,
        code_sensitive: bool = True,
    ) -> None:
        self.url: str = url or DEFAULT_SERVICE_URL
        self.timeout: float = timeout
        self.code_sensitive: bool = code_sensitive
        self.__session: aiohttp.ClientSession | None = None

    @property
    def _session(self) -> aiohttp.ClientSession:
        """Returns current session information

        If the session has not been created or closed, a new session is created.
        """
        if self.__session is None or self.__session.closed:
            self.__session = aiohttp.ClientSession()
        return self.__session

    async def close(self) -> None:
        logger.debug("'%s': 'termination process'", self.__class__.__name__)
        if self.__session is not None and not self.__session.closed:
            await self.__session.close()
        self.__session = None
        logger.debug("'%s': 'finished'", self.__class__.__name__)

    @staticmethod
    def _check_langcode(lang: str, *, sensitive: bool = False) -> str:
        for code in LANGUAGES:
            if lang.lower() == code.lower():
                return code
        if sensitive:
            msg: str = f"Invalid language code passed ({lang})"
            raise InvalidLanguageCodeError(msg)
        return "auto"

    @staticmethod
    def _format_http_error(status: int, reason: str | None, *, location: str | None = None) -> str:
        status_reason: str = f"{status} {reason}".strip() if reason else str(status)
        parts: list[str] = [f"HTTP {status_reason} from Google Translate"]
        if location:
            parts.append(f"Location: {location}")
        return ". ".join(parts)

    async def _get(
        self,
        *,
        url: str,
        params: dict[str, str],
        headers: dict[str, str] | None = None,
        timeout: float = 300.0,  # noqa: ASYNC109
    ) -> str:
        try:
            _timeout = aiohttp.ClientTimeout(total=timeout)
            async with self._session.get(
                url=url,
                params=params,
                headers=headers,
                timeout=_timeout,
            ) as response:
                body: str = await response.text()
                if response.status >= 300:
                    # The body may echo the query; keep it out of the exception message.
                    logger.debug("error response body length: %d", len(body))
                    msg = self._format_http_error(
                        response.status,
                        response.reason,
                        location=response.headers.get("Location") if response.status < 400 else None,
                    )
                    if response.status == 429:
                        raise HTTPTooManyRequests(msg, status=response.status)
                    if response.status >= 400:
                        raise HTTPError(msg, status=response.status)
                    raise HTTPRedirection(msg, status=response.status)

                return body
        except TimeoutError:
            msg = "Timeout occurred for aiohttp.ClientSession"
            raise HTTPTimeoutError(msg) from None
        except ConnectionResetError:
            msg = "connection to host has been disconnected"
            raise HTTPConnectionError(msg) from None
        except aiohttp.ClientConnectorError as err:
            raise HTTPConnectionError(str(err)) from None
        except aiohttp.ClientError as err:
            raise HTTPConnectionError(str(err)) from None

    async def translate(self, text: str, lang_tgt: str, lang_src: str | None = "auto") -> TextResult:
        lang_src, lang_tgt = self._validate_languages(lang_src, lang_tgt)
        self._validate_text_length(text)
        params: dict[str, str] = {
            "client": "gtx",
            "sl": lang_src,
            "tl": lang_tgt,
            "dt": "t",
            "q": text,
        }

        resp: str = await self._get(
            url=self.url,
            params=params,
            headers={"User-Agent": _USER_AGENT},
            timeout=self.timeout,
        )
        return self._process_response(resp, lang_src)

    def _validate_languages(self, lang_src: str | None, lang_tgt: str) -> tuple[str, str]:
        lang_src = self._check_langcode(lang_src or "auto", sensitive=False)
        lang_tgt = self._check_langcode(lang_tgt, sensitive=self.code_sensitive)
        return lang_src, lang_tgt

    def _validate_text_length(self, text: str) -> None:
        if not text:
            msg = "No characters to translate"
            raise GoogleError(msg)
        if len(text) > MAX_TEXT_LENGTH:
            msg = f"Can only translate up to {MAX_TEXT_LENGTH} characters"
            raise GoogleError(msg)

    def _process_response(self, resp: str, lang_src: str) -> TextResult:
        try:
            decoded_data: Any = json.loads(resp)
        except JSONDecodeError as err:
            msg = "failed to decode response"
            raise ResponseFormatError(msg) from err

        if not isinstance(decoded_data, list) or not decoded_data:
            msg = "unknown response format"
            raise ResponseFormatError(msg)

        translated: str = self._extract_translation(decoded_data[0])
        detected: str | None = None
        if len(decoded_data) > 2 and isinstance(decoded_data[2], str):
            detected = decoded_data[2]
        elif lang_src != "auto":
            detected = lang_src

        return TextResult(translated, detected, metadata={"engine": "google", "type": "gtx"})

    @staticmethod
    def _extract_translation(segments: Any) -> str:
        if segments is None:
            return ""
        if not isinstance(segments, list):
            msg = "Invalid response format for sentences"
            raise ResponseFormatError(msg)

        parts: list[str] = []
        for segment in segments:
            if isinstance(segment, list) and segment and isinstance(segment[0], str):
                parts.append(segment[0])
        return "".join(parts)
