"""Models for translation requests and results.

Both types are immutable: a request is built by the caller for one translation attempt and a
result is handed to the caller after the orchestrator has finished with it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__: list[str] = ["TranslationRequest", "TranslationResult"]


def _frozen_options(options: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(options or {}))


@dataclass(frozen=True)
class TranslationRequest:
    """A single translation request.

    Attributes:
        text (str): Text to translate.
        source_lang (str): Source language code, or 'auto'.
        target_lang (str): Target language code.
        engine (str): Requested translation engine identifier.
        options (Mapping[str, Any]): Engine options such as ``style``. Read-only.
        account_id (str | None): Account scope for caching and statistics.
    """

    text: str
    source_lang: str
    target_lang: str
    engine: str
    options: Mapping[str, Any] = field(default_factory=lambda: _frozen_options(None))
    account_id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.options, MappingProxyType):
            object.__setattr__(self, "options", _frozen_options(self.options))

    @property
    def style(self) -> str | None:
        """Return the requested translation style, if any."""
        style = self.options.get("style")
        return str(style) if style else None


@dataclass(frozen=True)
class TranslationResult:
    """Outcome of a translation request.

    Attributes:
        translated_text (str): Sanitized translated text.
        detected_lang (str): Source language reported by the engine (or the requested one).
        engine_used (str): Engine that produced the text; may differ from the requested one.
        cached (bool): True when the text came from a cache instead of a live call.
        response_time_ms (float | None): Duration of the live call; None for cached results.
    """

    translated_text: str
    detected_lang: str
    engine_used: str
    cached: bool = False
    response_time_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the result as a plain dict using the caller-facing field names."""
        data: dict[str, Any] = {
            "translatedText": self.translated_text,
            "detectedLang": self.detected_lang,
            "engineUsed": self.engine_used,
            "cached": self.cached,
        }
        if self.response_time_ms is not None:
            data["responseTimeMs"] = self.response_time_ms
        return data
