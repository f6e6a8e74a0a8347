"""This module defines the abstract base class for translation engine adapters and the error taxonomy.
It includes the Result data class for adapter results, and the exceptions raised while translating.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from utils.content_security import ContentSecurity
from utils.language_utils import LanguageUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

    from models.config_models import EngineSettings

__all__: list[str] = [
    "ConfigInvalidError",
    "EmptyResultError",
    "EngineAttributes",
    "EngineNotFoundError",
    "EngineUnavailableError",
    "InvalidInputError",
    "NetworkError",
    "NotSupportedLanguagesError",
    "ProviderError",
    "QueueFullError",
    "RequestCancelledError",
    "Result",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
    "TranslationTimeoutError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class EngineAttributes:
    """Engine-specific capabilities and behavior flags.

    Attributes:
        name (str): Display name of translation engine.
            As this name is not used for identification purposes, any name is acceptable.
        supports_dedicated_detection_api (bool): Whether the engine has a dedicated language detection API.
        supports_styles (bool): Whether the engine honors the ``style`` option.
    """

    name: str
    supports_dedicated_detection_api: bool = False
    supports_styles: bool = False


@dataclass
class Result:
    """Data class for adapter results.

    Attributes:
        text (str | None): Translated text. None if translation fails.
        detected_source_lang (str | None): Detected source language code. None if detection fails.
        metadata (dict[str, str] | None): Engine-specific metadata (e.g., model name, style).
    """

    text: str | None = None
    detected_source_lang: str | None = None
    metadata: dict[str, str] | None = None

    def __str__(self) -> str:
        if self.text is None:
            return ""
        return self.text

    def __repr__(self) -> str:
        return (
            f"Result(text={self.text!r}, detected_source_lang={self.detected_source_lang!r}, "
            f"metadata={self.metadata!r})"
        )


class TranslateExceptionError(Exception):
    """An error occurred during the translation process.

    Every error in the taxonomy exposes ``safe_message``, a redacted and truncated form of the
    message that can be shown to users or written to logs.
    """

    @property
    def safe_message(self) -> str:
        """Return the redacted, user-presentable form of the message."""
        return ContentSecurity.create_safe_error_message(str(self) or type(self).__name__)


class InvalidInputError(TranslateExceptionError):
    """The request text or a language code failed validation."""


class EngineNotFoundError(TranslateExceptionError):
    """The requested engine identifier is not registered."""


class EngineUnavailableError(TranslateExceptionError):
    """The requested engine is registered but cannot serve requests."""


class ConfigInvalidError(TranslateExceptionError):
    """An engine configuration is missing required values."""


class NetworkError(TranslateExceptionError):
    """The provider could not be reached."""


class TranslationTimeoutError(TranslateExceptionError):
    """The provider did not answer within the configured timeout."""


class ProviderError(TranslateExceptionError):
    """The provider answered with an error.

    Attributes:
        status (int | None): HTTP status code, when the provider answered over HTTP.
    """

    def __init__(self, message: str = "", *, status: int | None = None) -> None:
        super().__init__(message)
        self.status: int | None = status


class TranslationRateLimitError(ProviderError):
    """The translation request was rate-limited by the API."""


class TranslationQuotaExceededError(ProviderError):
    """The translatable character quota has been exceeded."""


class NotSupportedLanguagesError(ProviderError):
    """An unsupported language code was specified."""


class EmptyResultError(TranslateExceptionError):
    """The provider answered without a usable translation."""


class QueueFullError(TranslateExceptionError):
    """The request queue of the coordinator is full."""


class RequestCancelledError(TranslateExceptionError):
    """The request was cancelled before it produced a result."""


class TransInterface(ABC):
    """Abstract base class for translation engine adapters.

    This class defines the interface for translation engines, including methods for initialization,
    configuration validation, language detection and translation.
    Subclasses must implement these methods to provide specific translation functionality.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): A class variable that holds a dictionary of
            registered translation engine classes, keyed by their distinguished names.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass in the registered dictionary.

        This method is called when a subclass of TransInterface is created.
        Automatically registers the subclass using its distinguished name.

        Args:
            **kwargs: Additional keyword arguments passed to parent class.
        """
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_engine_name") or not callable(cls.fetch_engine_name):
            msg = "Subclasses of TransInterface must implement the static method fetch_engine_name()."
            raise TypeError(msg)

        if not isinstance(cls.fetch_engine_name(), str) or cls.fetch_engine_name() == "":
            return  # Shared base classes use an empty name and stay out of the catalogue.

        if cls.fetch_engine_name() in cls.registered:
            msg: str = f"A translation engine with the name '{cls.fetch_engine_name()}' is already registered."
            raise ValueError(msg)

        cls.registered[cls.fetch_engine_name()] = cls

    def __init__(self) -> None:
        """Initialize the TransInterface base class."""
        self._engine_attributes: EngineAttributes | None = None

    @property
    def engine_attributes(self) -> EngineAttributes:
        """Get the engine attributes.

        Returns:
            EngineAttributes: The engine attributes.
        """
        if self._engine_attributes is None:
            msg = "Engine attributes have not been set."
            raise RuntimeError(msg)
        return self._engine_attributes

    @engine_attributes.setter
    def engine_attributes(self, attributes: EngineAttributes) -> None:
        if self._engine_attributes is not None:
            msg = "Engine attributes can only be set once during initialization."
            raise RuntimeError(msg)
        self._engine_attributes = attributes

    @property
    def engine_name(self) -> str:
        """Get the display name of the translation engine."""
        return self.engine_attributes.name

    @property
    def has_dedicated_detection_api(self) -> bool:
        """Check if the engine has a dedicated language detection API."""
        return self.engine_attributes.supports_dedicated_detection_api

    def is_rate_limit_error(self, err: Exception) -> bool:
        """Check if the given exception indicates rate limiting.

        Args:
            err (Exception): Exception raised during translation or detection.

        Returns:
            bool: True if the exception represents rate limiting.
        """
        return isinstance(err, TranslationRateLimitError)

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the translation engine is available.

        Returns:
            bool: True if the translation engine is available, False otherwise.
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the translation engine.

        Must be implemented by subclasses. This method is called during class registration
        in __init_subclass__, so the implementation must be available at subclass definition time.

        Returns:
            str: The distinguished name of the translation engine.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, settings: EngineSettings) -> None:
        """Initialize the translation engine with its configuration section.

        Args:
            settings (EngineSettings): Settings for this engine.

        Raises:
            ConfigInvalidError: If the settings are unusable.
        """
        raise NotImplementedError

    @abstractmethod
    def validate_config(self) -> bool:
        """Check whether the engine has everything it needs to make calls.

        Returns:
            bool: True if the configuration is complete.
        """
        raise NotImplementedError

    @abstractmethod
    async def translation(
        self,
        content: str,
        tgt_lang: str,
        src_lang: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Result:
        """Translate input text to the target language.

        Args:
            content (str): Text to be translated.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code. If None or 'auto', auto-detect.
            options (Mapping[str, Any] | None): Engine options such as ``style``.

        Returns:
            Result: Translation result with translated text.

        Raises:
            InvalidInputError: If the content cannot be sent to the engine.
            NetworkError: If the engine cannot be reached.
            TranslationTimeoutError: If the engine does not answer in time.
            ProviderError: If the engine answers with an error.
            EmptyResultError: If the engine answers without a translation.
        """
        raise NotImplementedError

    async def detect_language(self, content: str) -> str:
        """Detect the language of the input text.

        Engines without a dedicated detection API fall back to script-based detection.

        Args:
            content (str): Text to analyze for language detection.

        Returns:
            str: Detected language code.
        """
        return LanguageUtils.detect_language_simple(content)

    async def close(self) -> None:  # noqa: B027
        """Perform cleanup and shutdown of the translation engine.

        Subclasses should override this method to clean up resources if needed.
        """

    def get_authentication_key(self) -> str:
        """Retrieve the authentication key from environment variables.

        The key is retrieved from an environment variable named after the engine's distinguished name,
        with the suffix "_API_KEY". For example, if the engine name is "deepl",
        the variable would be "DEEPL_API_KEY".

        Returns:
            str: The authentication key, or an empty string if the environment variable is not set.
        """
        return os.getenv(f"{self.fetch_engine_name().upper()}_API_KEY", "")
