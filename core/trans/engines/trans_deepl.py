from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, ClassVar

from deepl import DeepLClient, Language, TextResult, http_client
from deepl.exceptions import (
    AuthorizationException,
    ConnectionException,
    DeepLException,
    QuotaExceededException,
    TooManyRequestsException,
)

from core.trans.interface import (
    ConfigInvalidError,
    EmptyResultError,
    EngineAttributes,
    NetworkError,
    NotSupportedLanguagesError,
    ProviderError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
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


__all__: list[str] = ["DeeplTranslation"]

# Grace period for the worker thread once the SDK request timeout has passed.
_TIMEOUT_GRACE_SEC: float = 1.0

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class DeeplTranslation(TransInterface):
    _source_codes: ClassVar[dict[str, str]] = {}  # Mapping of source language codes to DeepL's format
    _target_codes: ClassVar[dict[str, str]] = {}  # Mapping of target language codes to DeepL's format

    def __init__(self) -> None:
        super().__init__()
        self.__inst: DeepLClient | None = None
        self.__available: bool = False
        self._timeout: float = 10.0
        self._generate_langcode_mappings()

    def _generate_langcode_mappings(self) -> None:
        """Generate language code mappings for DeepL source and target codes.

        This method populates the _source_codes and _target_codes class variables
        with mappings from the Language constants provided by the DeepL library.
        It maps the base part of each language code to DeepL's format,
        ensuring that the codes are in uppercase as required by DeepL.
        It also handles specific cases for Chinese language variations.
        """
        language_constants: dict[str, str] = self._get_language_constants(Language)

        for code in language_constants.values():
            # Normalize code to base form (e.g., 'en-US' -> 'en')
            base_code: str = code.split("-")[0].lower()
            DeeplTranslation._source_codes[base_code] = base_code.upper()
            DeeplTranslation._target_codes[base_code] = code.upper()

        # DeepL uses a unified 'ZH' source code
        for zh_variant in ("zh-CN", "zh-TW"):
            DeeplTranslation._source_codes[zh_variant] = "ZH"
        DeeplTranslation._target_codes["zh-CN"] = "ZH-HANS"
        DeeplTranslation._target_codes["zh-TW"] = "ZH-HANT"

        logger.debug("Language code mapping generated for DeepL.")

    def _get_language_constants(self, cls) -> dict[str, str]:
        """Get the uppercase string constants of the given class, which DeepL uses for language codes."""
        return {name: value for name, value in vars(cls).items() if isinstance(value, str) and name.isupper()}

    @property
    def _inst(self) -> DeepLClient:
        if self.__inst is None:
            msg = "The DeepL instance is not initialised"
            raise TranslateExceptionError(msg)
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

    def initialize(self, settings: EngineSettings) -> None:
        """Initializes the DeepL translation client with the provided configuration.

        Authentication occurs when the API is used, rather than when the instance is created,
        so no network call is made here. Without an authentication key the engine stays unavailable.

        Args:
            settings (EngineSettings): DeepL section of the configuration.

        Raises:
            ConfigInvalidError: If the DeepL client cannot be created from the key.
        """
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name="DeepL")
        self._timeout = settings.TIMEOUT

        auth_key: str = settings.API_KEY or self.get_authentication_key()
        if not auth_key:
            logger.warning("DeepL authentication key is not set; the engine is unavailable")
            self._inst = None
            return

        # The SDK reads these per request; a timed-out request ends in the worker thread too.
        http_client.min_connection_timeout = self._timeout
        http_client.max_network_retries = 0

        try:
            self._inst = DeepLClient(auth_key)
        except (AttributeError, ValueError) as err:
            logger.critical(ContentSecurity.create_safe_error_message(str(err)))
            msg = "An error occurred while creating the DeepL client instance"
            raise ConfigInvalidError(msg) from err

    def validate_config(self) -> bool:
        return self.__inst is not None

    async def translation(
        self,
        content: str,
        tgt_lang: str,
        src_lang: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Result:
        """Translates the given content from source language to target language using DeepL.

        Args:
            content (str): The text content to be translated.
            tgt_lang (str): The target language code for the translation.
            src_lang (str | None): The source language code. If None or 'auto', DeepL detects it.
            options (Mapping[str, Any] | None): Unused; DeepL has no style presets.

        Returns:
            Result: A Result object containing the translated text and detected source language.

        Raises:
            NotSupportedLanguagesError: If the specified languages are not supported by DeepL.
            TranslationQuotaExceededError: If the translation quota has been exceeded.
            TranslationTimeoutError: If DeepL does not answer in time.
            TranslateExceptionError: If an error occurs during the translation process.
        """
        _ = options
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)
        try:
            _src_lang: str | None = (
                DeeplTranslation._source_codes[src_lang] if src_lang and src_lang != AUTO_LANGUAGE else None
            )
            _tgt_lang: str = DeeplTranslation._target_codes[tgt_lang]
        except KeyError:
            msg: str = (
                f"Languages not supported by DeepL. Source language: '{src_lang}'. Target language: '{tgt_lang}'."
            )
            raise NotSupportedLanguagesError(msg) from None

        try:
            results: TextResult | list[TextResult] = await asyncio.wait_for(
                asyncio.to_thread(
                    self._inst.translate_text,
                    content,
                    source_lang=_src_lang,
                    target_lang=_tgt_lang,
                ),
                timeout=self._timeout + _TIMEOUT_GRACE_SEC,
            )
        except TimeoutError:
            msg = "DeepL did not respond in time"
            raise TranslationTimeoutError(msg) from None
        except QuotaExceededException as err:
            self.__available = False
            msg = "DeepL character quota exceeded"
            raise TranslationQuotaExceededError(msg) from err
        except AuthorizationException:
            msg = "Authorisation failed. Please check your authentication key"
            raise ConfigInvalidError(msg) from None
        except TooManyRequestsException as err:
            msg = "DeepL rate limit reached"
            raise TranslationRateLimitError(msg) from err
        except ConnectionException:
            msg = "An error occurred when connecting to the DeepL server"
            raise NetworkError(msg) from None
        except DeepLException:
            msg = "An anomaly occurred during the translation process at DeepL"
            raise ProviderError(msg) from None
        except (ValueError, TypeError):
            msg = "An anomaly occurred during the translation process at DeepL"
            raise ProviderError(msg) from None

        logger.info("translation completed (%s > %s)", _src_lang, _tgt_lang)
        return self._build_result(results)

    def _build_result(self, results: TextResult | list[TextResult]) -> Result:
        """Builds a Result object from the translation results.

        Args:
            results (TextResult | list[TextResult]):
                The translation results, which can be a single TextResult or a list of TextResults.

        Returns:
            Result: A Result object containing the translated text and detected source language.

        Raises:
            EmptyResultError: If DeepL returned no text.
            ProviderError: If the results are not in the expected format.
        """
        if isinstance(results, TextResult):
            result: TextResult = results
        elif isinstance(results, list) and results:
            logger.debug("The return value is of type list.")
            result: TextResult = results[0]
        else:
            msg = "An anomaly occurred during the translation process at DeepL"
            raise ProviderError(msg)

        text: str = ContentSecurity.unescape_html(result.text or "").strip()
        if not text:
            msg = "DeepL returned an empty translation"
            raise EmptyResultError(msg)

        _result = Result(
            text=text,
            detected_source_lang=(result.detected_source_lang or "").lower() or None,
            metadata={"engine": "deepl"},
        )
        logger.debug("'return': '%s'", _result)
        return _result

    async def close(self) -> None:
        """Release the DeepL client instance; the engine is unavailable afterwards."""
        self._inst = None
        logger.debug("'%s' process termination", self.__class__.__name__)
