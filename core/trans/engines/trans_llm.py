"""Chat-completion translation engines.

GPT-4, Gemini, DeepSeek and user-defined endpoints all accept the OpenAI chat-completion request
format, so they share one implementation and differ only in name and required settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.trans.engines.llm_styles import StylePreset, resolve_style
from core.trans.interface import (
    ConfigInvalidError,
    EmptyResultError,
    EngineAttributes,
    InvalidInputError,
    NetworkError,
    ProviderError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
    TranslationTimeoutError,
)
from handlers.async_comm import (
    AsyncCommConnectionError,
    AsyncCommError,
    AsyncCommInvalidContentTypeError,
    AsyncCommTimeoutError,
    AsyncHttp,
)
from utils.content_security import ContentSecurity
from utils.language_utils import AUTO_LANGUAGE, LanguageUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

    from models.config_models import EngineSettings

__all__: list[str] = [
    "ChatCompletionTranslation",
    "CustomTranslation",
    "DeepSeekTranslation",
    "GPT4Translation",
    "GeminiTranslation",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

MAX_TEXT_LENGTH: Final[int] = 5000
HTTP_TOO_MANY_REQUESTS: Final[int] = 429


class ChatCompletionTranslation(TransInterface):
    """Shared implementation for engines that speak the chat-completion protocol.

    The empty engine name keeps this class out of the engine catalogue; concrete engines
    subclass it and return their own name.

    Attributes:
        DISPLAY_NAME (ClassVar[str]): Human readable engine name.
        REQUIRES_MODEL (ClassVar[bool]): Whether a model name must be configured.
        SYSTEM_PROMPT (ClassVar[str]): System message sent with every request.
    """

    DISPLAY_NAME: ClassVar[str] = "Chat completion"
    REQUIRES_MODEL: ClassVar[bool] = False
    SYSTEM_PROMPT: ClassVar[str] = "You are a professional translator. Translate the text accurately and naturally."

    def __init__(self) -> None:
        super().__init__()
        self._http: AsyncHttp | None = None
        self._api_key: str = ""
        self._endpoint: str = ""
        self._model: str = ""
        self._timeout: float = 30.0
        self._max_tokens: int = 2000
        self._temperature: float = 0.3

    @staticmethod
    def fetch_engine_name() -> str:
        return ""

    @property
    def is_available(self) -> bool:
        return self.validate_config()

    @property
    def _client(self) -> AsyncHttp:
        if self._http is None or self._http.closed:
            self._http = AsyncHttp()
        return self._http

    def initialize(self, settings: EngineSettings) -> None:
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name=self.DISPLAY_NAME, supports_styles=True)
        self._api_key = (settings.API_KEY or self.get_authentication_key()).strip()
        self._endpoint = settings.ENDPOINT.strip()
        self._model = settings.MODEL.strip()
        self._timeout = settings.TIMEOUT
        self._max_tokens = settings.MAX_TOKENS
        self._temperature = settings.TEMPERATURE
        if not self.validate_config():
            logger.warning("'%s' is not fully configured and stays unavailable", self.fetch_engine_name())

    def validate_config(self) -> bool:
        if not self._api_key or not self._endpoint:
            return False
        return not (self.REQUIRES_MODEL and not self._model)

    def build_prompt(
        self, content: str, tgt_lang: str, src_lang: str | None, style: str | None
    ) -> tuple[str, StylePreset, str]:
        """Build the user prompt for a translation.

        Args:
            content (str): Text to translate.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code, or None/'auto'.
            style (str | None): Requested style name or alias.

        Returns:
            tuple[str, StylePreset, str]: Canonical style name, its preset and the prompt text.
        """
        style_name, preset = resolve_style(style)
        lines: list[str] = [preset.instruction.format(target_lang=LanguageUtils.get_language_name(tgt_lang))]
        if src_lang and src_lang != AUTO_LANGUAGE:
            lines.append(f"The source language is {LanguageUtils.get_language_name(src_lang)}.")
        lines.extend(
            [
                "",
                "Source text:",
                content,
                "",
                "Important: output only the translation, without explanations or extra content.",
            ]
        )
        return style_name, preset, "\n".join(lines)

    async def translation(
        self,
        content: str,
        tgt_lang: str,
        src_lang: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Result:
        logger.info("'%s': 'start translation'", self.__class__.__name__)
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)

        if not self.validate_config():
            msg = f"'{self.fetch_engine_name()}' requires an API key and an endpoint"
            raise ConfigInvalidError(msg)
        if not content:
            msg = "No characters to translate"
            raise InvalidInputError(msg)
        if len(content) > MAX_TEXT_LENGTH:
            msg = f"'{self.fetch_engine_name()}' accepts up to {MAX_TEXT_LENGTH} characters"
            raise InvalidInputError(msg)

        requested_style: Any = (options or {}).get("style")
        style_name, preset, prompt = self.build_prompt(
            content, tgt_lang, src_lang, str(requested_style) if requested_style else None
        )
        temperature: float = preset.temperature if requested_style else self._temperature

        answer: str = await self._call_api(prompt, temperature)
        text: str = ContentSecurity.unescape_html(answer).strip()
        if not text:
            msg = f"'{self.fetch_engine_name()}' returned an empty translation"
            raise EmptyResultError(msg)

        detected: str = (
            src_lang if src_lang and src_lang != AUTO_LANGUAGE else LanguageUtils.detect_language_simple(content)
        )
        logger.info("translation completed (%s > %s)", src_lang, tgt_lang)
        return Result(
            text=text,
            detected_source_lang=detected,
            metadata={"engine": self.fetch_engine_name(), "model": self._model, "style": style_name},
        )

    async def _call_api(self, prompt: str, temperature: float) -> str:
        """Send one chat-completion request and return the message content.

        Raises:
            TranslationTimeoutError: If the endpoint does not answer in time.
            NetworkError: If the endpoint cannot be reached.
            TranslationRateLimitError: If the endpoint answers with HTTP 429.
            ProviderError: If the endpoint answers with another error.
            EmptyResultError: If the answer contains no message content.
        """
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self._max_tokens,
            "temperature": temperature,
        }
        headers: dict[str, str] = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        name: str = self.fetch_engine_name()
        try:
            data: Any = await self._client.post(
                url=self._endpoint, data=payload, headers=headers, total_timeout=self._timeout
            )
        except AsyncCommTimeoutError as err:
            msg = f"'{name}' did not respond in time"
            raise TranslationTimeoutError(msg) from err
        except AsyncCommConnectionError as err:
            msg = f"An error occurred when connecting to '{name}'"
            raise NetworkError(msg) from err
        except AsyncCommInvalidContentTypeError as err:
            msg = f"'{name}' answered with an unexpected content type"
            raise ProviderError(msg) from err
        except AsyncCommError as err:
            if err.status == HTTP_TOO_MANY_REQUESTS:
                msg = f"'{name}' rate limit reached"
                raise TranslationRateLimitError(msg, status=err.status) from err
            msg = f"'{name}' answered with an error (status {err.status})"
            raise ProviderError(msg, status=err.status) from err

        return self._extract_content(data)

    def _extract_content(self, data: Any) -> str:
        name: str = self.fetch_engine_name()
        if not isinstance(data, dict):
            msg = f"Unexpected response format from '{name}'"
            raise ProviderError(msg)

        error: Any = data.get("error")
        if error:
            kind: Any = "unknown"
            if isinstance(error, dict):
                kind = error.get("type") or error.get("code") or kind
            msg = f"'{name}' API error: {kind}"
            raise ProviderError(msg)

        try:
            content: Any = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not isinstance(content, str) or not content.strip():
            msg = f"No translation result in the response from '{name}'"
            raise EmptyResultError(msg)
        return content

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
            self._http = None
        logger.info("'%s' process termination", self.__class__.__name__)


class GPT4Translation(ChatCompletionTranslation):
    DISPLAY_NAME: ClassVar[str] = "OpenAI GPT-4"

    @staticmethod
    def fetch_engine_name() -> str:
        return "gpt4"


class GeminiTranslation(ChatCompletionTranslation):
    DISPLAY_NAME: ClassVar[str] = "Google Gemini"

    @staticmethod
    def fetch_engine_name() -> str:
        return "gemini"


class DeepSeekTranslation(ChatCompletionTranslation):
    DISPLAY_NAME: ClassVar[str] = "DeepSeek"

    @staticmethod
    def fetch_engine_name() -> str:
        return "deepseek"


class CustomTranslation(ChatCompletionTranslation):
    """User-defined endpoint; unlike the hosted engines it has no default model."""

    DISPLAY_NAME: ClassVar[str] = "Custom API"
    REQUIRES_MODEL: ClassVar[bool] = True

    @staticmethod
    def fetch_engine_name() -> str:
        return "custom"

    async def test_connection(self) -> bool:
        """Send a minimal request to check the endpoint and credentials.

        Returns:
            bool: True if the endpoint answered with a translation.
        """
        try:
            await self._call_api('Translate "Hello" to Chinese.', self._temperature)
        except TranslateExceptionError as err:
            logger.error("'%s' connection test failed: %s", self.fetch_engine_name(), err.safe_message)
            return False
        return True
