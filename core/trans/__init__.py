"""Translation engine management and interfaces.

This package provides translation functionality through pluggable engine implementations,
including the free Google endpoint, DeepL and chat-completion language models, with fallback,
retry and language detection.
"""

from core.trans.interface import (
    ConfigInvalidError,
    EmptyResultError,
    EngineNotFoundError,
    EngineUnavailableError,
    InvalidInputError,
    NetworkError,
    NotSupportedLanguagesError,
    ProviderError,
    QueueFullError,
    RequestCancelledError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
    TranslationTimeoutError,
)
from core.trans.manager import TransManager
from core.trans.registry import EngineRegistry

__all__: list[str] = [
    "ConfigInvalidError",
    "EmptyResultError",
    "EngineNotFoundError",
    "EngineRegistry",
    "EngineUnavailableError",
    "InvalidInputError",
    "NetworkError",
    "NotSupportedLanguagesError",
    "ProviderError",
    "QueueFullError",
    "RequestCancelledError",
    "Result",
    "TransInterface",
    "TransManager",
    "TranslateExceptionError",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
    "TranslationTimeoutError",
]
