"""Language code helpers shared by the translation engines and the orchestrator."""

from __future__ import annotations

import re
from typing import ClassVar, Final

__all__: list[str] = ["AUTO_LANGUAGE", "LanguageUtils"]

AUTO_LANGUAGE: Final[str] = "auto"


class LanguageUtils:
    """Normalization, display names and offline detection for language codes.

    Attributes:
        LANGUAGE_MAP (ClassVar[dict[str, str]]): Lower-case aliases mapped to canonical codes.
        LANGUAGE_NAMES (ClassVar[dict[str, str]]): Canonical codes mapped to English display names.
    """

    LANGUAGE_MAP: ClassVar[dict[str, str]] = {
        "zh": "zh-CN",
        "zh-cn": "zh-CN",
        "zh-hans": "zh-CN",
        "zh-tw": "zh-TW",
        "zh-hant": "zh-TW",
        "chinese": "zh-CN",
        "en": "en",
        "en-us": "en",
        "en-gb": "en",
        "english": "en",
        "ja": "ja",
        "jp": "ja",
        "japanese": "ja",
        "ko": "ko",
        "kr": "ko",
        "korean": "ko",
        "es": "es",
        "spanish": "es",
        "fr": "fr",
        "french": "fr",
        "de": "de",
        "german": "de",
        "ru": "ru",
        "russian": "ru",
        "ar": "ar",
        "arabic": "ar",
        "pt": "pt",
        "pt-br": "pt",
        "portuguese": "pt",
        "it": "it",
        "italian": "it",
        "nl": "nl",
        "dutch": "nl",
        "pl": "pl",
        "polish": "pl",
        "tr": "tr",
        "turkish": "tr",
        "vi": "vi",
        "vietnamese": "vi",
        "th": "th",
        "thai": "th",
        "id": "id",
        "indonesian": "id",
        "auto": AUTO_LANGUAGE,
        "detect": AUTO_LANGUAGE,
    }

    LANGUAGE_NAMES: ClassVar[dict[str, str]] = {
        "zh-CN": "Simplified Chinese",
        "zh-TW": "Traditional Chinese",
        "en": "English",
        "ja": "Japanese",
        "ko": "Korean",
        "es": "Spanish",
        "fr": "French",
        "de": "German",
        "ru": "Russian",
        "ar": "Arabic",
        "pt": "Portuguese",
        "it": "Italian",
        "nl": "Dutch",
        "pl": "Polish",
        "tr": "Turkish",
        "vi": "Vietnamese",
        "th": "Thai",
        "id": "Indonesian",
        "auto": "Auto detect",
    }

    # Checked in order; the first script found decides the language.
    _SCRIPT_RULES: ClassVar[tuple[tuple[re.Pattern[str], str], ...]] = (
        (re.compile(r"[぀-ゟ゠-ヿ]"), "ja"),
        (re.compile(r"[가-힯]"), "ko"),
        (re.compile(r"[؀-ۿ]"), "ar"),
        (re.compile(r"[฀-๿]"), "th"),
        (re.compile(r"[Ѐ-ӿ]"), "ru"),
    )
    _HAN_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"[一-龥]")
    _TRADITIONAL_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"[繁體爲與臺灣這們國會說]")

    @staticmethod
    def normalize_language_code(lang: str | None) -> str:
        """Map an alias such as 'jp' or 'en-US' to its canonical code.

        Unknown codes are returned unchanged (trimmed). Empty input means auto detection.

        Args:
            lang (str | None): Language code or alias.

        Returns:
            str: Canonical language code.
        """
        if not lang or not lang.strip():
            return AUTO_LANGUAGE
        stripped: str = lang.strip()
        return LanguageUtils.LANGUAGE_MAP.get(stripped.lower(), stripped)

    @staticmethod
    def get_language_name(code: str) -> str:
        """Get the English display name of a language code, or the code itself if unknown."""
        return LanguageUtils.LANGUAGE_NAMES.get(code, code)

    @staticmethod
    def supported_languages() -> list[tuple[str, str]]:
        """List (code, name) pairs of the languages with display names."""
        return list(LanguageUtils.LANGUAGE_NAMES.items())

    @staticmethod
    def detect_language_simple(text: str | None) -> str:
        """Guess the language of text from the scripts it contains.

        Han characters take precedence unless kana is also present, in which case the text is
        Japanese. Text without any recognized script is assumed to be English.

        Args:
            text (str | None): Text to inspect.

        Returns:
            str: Detected language code, or 'auto' for empty text.
        """
        if not text or not text.strip():
            return AUTO_LANGUAGE

        if LanguageUtils._HAN_PATTERN.search(text) and not LanguageUtils._SCRIPT_RULES[0][0].search(text):
            return "zh-TW" if LanguageUtils._TRADITIONAL_PATTERN.search(text) else "zh-CN"

        for pattern, code in LanguageUtils._SCRIPT_RULES:
            if pattern.search(text):
                return code
        return "en"
