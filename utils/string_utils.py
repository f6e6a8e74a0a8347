from __future__ import annotations

import hashlib
import unicodedata
from typing import Final

__all__: list[str] = ["StringUtils"]

KEY_PREVIEW_LENGTH: Final[int] = 16


class StringUtils:
    """Utility class for string manipulation and cache key derivation."""

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Ensure that the value is a string, returning an empty string if None.

        Note: Does not use strip() to preserve significant whitespace.

        Args:
            value (str | None): The value to ensure as a string.

        Returns:
            str: The value as a string, or empty string if None.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def compress_blanks(value: str) -> str:
        """Compress runs of whitespace into a single space and trim both ends.

        Args:
            value (str): The string to compress.

        Returns:
            str: The string with whitespace runs compressed to single spaces.
        """
        value = StringUtils.ensure_str(value)
        return " ".join(value.split())

    @staticmethod
    def normalize_text(text: str) -> str:
        """Normalize text using Unicode NFC normalization.

        Args:
            text (str): Text to normalize.

        Returns:
            str: Normalized text.
        """
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def generate_hash_key(
        source_text: str,
        source_lang: str,
        target_lang: str,
        engine: str,
        account_id: str | None = None,
    ) -> str:
        """Generate a SHA-256 cache key for a translation request.

        The source text is NFC-normalized first so that visually identical input maps to one key.
        When account_id is given the key is scoped to that account.

        Args:
            source_text (str): Text to translate.
            source_lang (str): Source language code (may be 'auto').
            target_lang (str): Target language code.
            engine (str): Translation engine identifier.
            account_id (str | None): Account scope, or None for the shared scope.

        Returns:
            str: Hex digest identifying the request.
        """
        normalized_source: str = StringUtils.normalize_text(source_text)
        parts: list[str] = [source_lang, target_lang, engine, normalized_source]
        if account_id:
            parts.insert(0, account_id)
        key_data: str = "|".join(parts)
        return hashlib.sha256(key_data.encode("utf-8")).hexdigest()

    @staticmethod
    def key_preview(key: str | None) -> str:
        """Return the leading part of a cache key for log output."""
        return (key or "")[:KEY_PREVIEW_LENGTH]
