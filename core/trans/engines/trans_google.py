"""Google Translate translation engine implementation.

This module provides a translation interface implementation using the free Google Translate
web endpoint through the AsyncTranslator client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.trans.engines.async_google_translate import (
    AsyncTranslator,
    GoogleError,
    HTTPConnectionError,
    HTTPError,
    HTTPRedirection,
    HTTPTimeoutError,
    HTTPTooManyRequests,
    InvalidLanguageCodeError,
    ResponseFormatError,
    TextResult,
)
from core.trans.engines.const_google import MAX_TEXT_LENGTH
from core.trans.interface import (
    EmptyResultError,
    EngineAttributes,
    InvalidInputError,
    NetworkError,
    NotSupportedLanguagesError,
    ProviderError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
    TranslationTimeoutError,
)
from utils.content_security import ContentSecurity
from utils.language_utils import AUTO_LANGUAGE
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

    from models.config_models import EngineSettings

__all__: list[str] = ["GoogleTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class GoogleTranslation(TransInterface):
    def __init__(self) -> None:
        super().__init__()
        self.__inst: AsyncTranslator | None = None

    @property
    def _inst(self) -> AsyncTranslator:
        if self.__inst is None:
            msg = "The google instance is not initialised"
            raise TranslateExceptionError(msg)
        return self.__inst

    @_inst.setter
    def _inst(self, inst: AsyncTranslator | None) -> None:
        self.__inst = inst
        logger.debug("'%s': 'set instance'", self.__class__.__name__)

    @property
    def is_available(self) -> bool:
        return self.__inst is not None  # The free endpoint needs no credentials.

    @staticmethod
    def fetch_engine_name() -> str:
        return "google"

    def initialize(self, settings: EngineSettings) -> None:
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name="Google Translate")
        self._inst = AsyncTranslator(url=settings.ENDPOINT, timeout=settings.TIMEOUT)

    def validate_config(self) -> bool:
        return True

    async def detect_language(self, content: str) -> str:
        logger.debug("'%s': 'detect language'", self.__class__.__name__)
        result: Result = await self.translation(content, tgt_lang="en", src_lang=AUTO_LANGUAGE)
        return result.detected_source_lang or AUTO_LANGUAGE

    async def translation(
        self,
        content: str,
        tgt_lang: str,
        src_lang: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Result:
        _ = options  # The free endpoint has no style support.
        logger.info("'%s': 'start translation'", self.__class__.__name__)
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)

        if not content:
            msg = "No characters to translate"
            raise InvalidInputError(msg)
        if len(content) > MAX_TEXT_LENGTH:
            msg = f"Google Translate accepts up to {MAX_TEXT_LENGTH} characters"
            raise InvalidInputError(msg)

        if src_lang and src_lang != AUTO_LANGUAGE and src_lang == tgt_lang:
            return Result(text=content, detected_source_lang=src_lang, metadata={"engine": "google"})

        try:
            result: TextResult = await self._inst.translate(content, tgt_lang, src_lang)
        except InvalidLanguageCodeError as err:
            raise NotSupportedLanguagesError(str(err)) from err
        except HTTPTooManyRequests as err:
            logger.error(err)
            msg = "Google Translate rate limit reached"
            raise TranslationRateLimitError(msg, status=err.status) from err
        except HTTPTimeoutError as err:
            logger.error(err)
            msg = "Google Translate did not respond in time"
            raise TranslationTimeoutError(msg) from err
        except HTTPConnectionError as err:
            logger.error(err)
            msg = "An error occurred when connecting to Google Translate"
            raise NetworkError(msg) from err
        except (HTTPError, HTTPRedirection) as err:
            logger.error(err)
            msg = "an anomaly occurred during translation at Google"
            raise ProviderError(msg, status=err.status) from err
        except (ResponseFormatError, GoogleError) as err:
            logger.error(err)
            msg = "an anomaly occurred during translation at Google"
            raise ProviderError(msg) from err

        text: str = ContentSecurity.unescape_html(result.text).strip()
        if not text:
            msg = "Google Translate returned an empty translation"
            raise EmptyResultError(msg)

        logger.info("translation completed (%s > %s)", src_lang, tgt_lang)
        _result = Result(
            text=text,
            detected_source_lang=result.detected_source_lang,
            metadata=result.metadata,
        )
        logger.debug("'return': '%s'", _result)
        return _result

    async def close(self) -> None:
        if self.__inst is not None:
            await self.__inst.close()
        logger.info("'%s' process termination", self.__class__.__name__)
