"""Translation engine implementations.

This package contains concrete implementations of the TransInterface for different
translation services (Google Translate, DeepL and chat-completion APIs) and utilities for interfacing with them.
These classes handle the communication with external translation APIs, manage request/response formats,
and map provider failures onto the shared error taxonomy.

Importing this package registers every engine class in ``TransInterface.registered``.

Modules:
- AsyncTranslator: Asynchronous client for the free Google Translate endpoint.
- DeeplTranslation: Implementation for DeepL translation service.
- GoogleTranslation: Implementation for Google Translate service.
- GPT4Translation, GeminiTranslation, DeepSeekTranslation, CustomTranslation: chat-completion engines.
"""

from core.trans.engines.async_google_translate import (
    AsyncTranslator,
    GoogleError,
    HTTPConnectionError,
    HTTPError,
    HTTPTimeoutError,
    InvalidLanguageCodeError,
    ResponseFormatError,
    TextResult,
)
from core.trans.engines.const_google import DEFAULT_SERVICE_URL, LANGUAGES
from core.trans.engines.llm_styles import STYLE_PRESETS, StylePreset, resolve_style
from core.trans.engines.trans_deepl import DeeplTranslation
from core.trans.engines.trans_google import GoogleTranslation
from core.trans.engines.trans_llm import (
    ChatCompletionTranslation,
    CustomTranslation,
    DeepSeekTranslation,
    GeminiTranslation,
    GPT4Translation,
)

__all__: list[str] = [
    "DEFAULT_SERVICE_URL",
    "LANGUAGES",
    "STYLE_PRESETS",
    "AsyncTranslator",
    "ChatCompletionTranslation",
    "CustomTranslation",
    "DeepSeekTranslation",
    "DeeplTranslation",
    "GPT4Translation",
    "GeminiTranslation",
    "GoogleError",
    "GoogleTranslation",
    "HTTPConnectionError",
    "HTTPError",
    "HTTPTimeoutError",
    "InvalidLanguageCodeError",
    "ResponseFormatError",
    "StylePreset",
    "TextResult",
    "resolve_style",
]
