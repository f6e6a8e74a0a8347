"""Content security helpers for translation input, output and log messages.

Cleans user text before it is sent to a provider, escapes provider output before it reaches
a rendering surface, and redacts credentials and personal data from anything that is logged
or shown as an error message.
"""

from __future__ import annotations

import html
import re
from typing import ClassVar, Final, NamedTuple

__all__: list[str] = ["CleanedText", "ContentSecurity"]

MAX_TEXT_LENGTH: Final[int] = 10000
MAX_DECODE_PASSES: Final[int] = 3
SAFE_ERROR_MESSAGE_LENGTH: Final[int] = 200


class CleanedText(NamedTuple):
    """Result of input cleaning.

    Attributes:
        text (str): Cleaned text. Empty when the input was rejected.
        valid (bool): Whether the input can be translated.
        error (str | None): Reason for rejection, or None when valid.
    """

    text: str
    valid: bool
    error: str | None = None


class ContentSecurity:
    """Static helpers for XSS filtering, HTML escaping and log redaction.

    Attributes:
        DANGEROUS_TAGS (ClassVar[tuple[str, ...]]): Markup elements removed from input.
        DANGEROUS_ATTRS (ClassVar[tuple[str, ...]]): Attributes removed from any remaining markup.
    """

    DANGEROUS_TAGS: ClassVar[tuple[str, ...]] = (
        "script",
        "iframe",
        "object",
        "embed",
        "link",
        "style",
        "meta",
        "base",
        "form",
        "input",
        "button",
        "textarea",
    )
    DANGEROUS_ATTRS: ClassVar[tuple[str, ...]] = ("href", "src")

    _HTML_ESCAPE_MAP: ClassVar[dict[str, str]] = {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "/": "&#x2F;",
    }
    _HTML_ESCAPE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"[&<>\"'/]")

    _PAIRED_TAG_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"<\s*(" + "|".join(DANGEROUS_TAGS) + r")\b[^>]*>.*?<\s*/\s*\1\s*>",
        re.IGNORECASE | re.DOTALL,
    )
    _SINGLE_TAG_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"<\s*/?\s*(?:" + "|".join(DANGEROUS_TAGS) + r")\b[^>]*>",
        re.IGNORECASE,
    )
    _EVENT_ATTR_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"\s(?:on\w+|" + "|".join(DANGEROUS_ATTRS) + r")\s*=\s*(?:\"[^\"]*\"|'[^']*')",
        re.IGNORECASE,
    )
    _SCRIPT_URL_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"javascript\s*:|data:text/html", re.IGNORECASE)

    # Order matters: longer numeric patterns run before the shorter ones that would split them.
    _SENSITIVE_PATTERNS: ClassVar[tuple[tuple[re.Pattern[str], str], ...]] = (
        (re.compile(r"sk-[a-zA-Z0-9_-]{20,}"), "sk-***"),
        (re.compile(r"Bearer\s+[a-zA-Z0-9._~+/=-]{20,}", re.IGNORECASE), "Bearer ***"),
        (re.compile(r"([?&])(key|token|apikey|api_key|secret|auth_key)=[^&\s]+", re.IGNORECASE), r"\1\2=***"),
        (re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "***@***.***"),
        (re.compile(r"\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b"), "****-****-****-****"),
        (re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b"), "*.*.*.*"),
        (re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"), "***-***-****"),
        (re.compile(r"\+\d{1,3}\s?\d{4,14}\b"), "+***"),
    )
    _HOME_PATH_PATTERNS: ClassVar[tuple[tuple[re.Pattern[str], str], ...]] = (
        (re.compile(r"([A-Za-z]):\\Users\\[^\\\s]+", re.IGNORECASE), r"\1:\\Users\\***"),
        (re.compile(r"/home/[^/\s]+"), "/home/***"),
        (re.compile(r"/Users/[^/\s]+"), "/Users/***"),
    )
    _LANGUAGE_CODE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^(auto|[a-z]{2}(-[A-Z]{2})?)$")

    _THREAT_CHECKS: ClassVar[tuple[tuple[re.Pattern[str], str], ...]] = (
        (re.compile(r"<\s*script", re.IGNORECASE), "Contains script tag"),
        (re.compile(r"javascript\s*:", re.IGNORECASE), "Contains javascript: protocol"),
        (re.compile(r"\bon\w+\s*=", re.IGNORECASE), "Contains event handlers"),
        (re.compile(r"<\s*iframe", re.IGNORECASE), "Contains iframe tag"),
        (re.compile(r"data:text/html", re.IGNORECASE), "Contains data URL"),
    )

    @staticmethod
    def clean_input(text: str | None, max_length: int = MAX_TEXT_LENGTH) -> CleanedText:
        """Validate and clean text before translation.

        Never raises: problems are reported through the ``valid`` flag.

        Args:
            text (str | None): Text supplied by the caller.
            max_length (int): Maximum number of characters accepted.

        Returns:
            CleanedText: Cleaned text with validity flag and error reason.
        """
        if not isinstance(text, str):
            return CleanedText(text="", valid=False, error="Text must be a string")
        if not text.strip():
            return CleanedText(text="", valid=False, error="Text is empty")
        if len(text) > max_length:
            msg: str = f"Text exceeds maximum length of {max_length} characters (current: {len(text)})"
            return CleanedText(text="", valid=False, error=msg)

        cleaned: str = " ".join(ContentSecurity.strip_markup(text).split())
        if not cleaned:
            return CleanedText(text="", valid=False, error="Text is empty after sanitization")
        return CleanedText(text=cleaned, valid=True)

    @staticmethod
    def strip_markup(text: str) -> str:
        """Remove active markup, event-handler attributes and script URLs from text."""
        sanitized: str = ContentSecurity._PAIRED_TAG_PATTERN.sub("", text)
        sanitized = ContentSecurity._SINGLE_TAG_PATTERN.sub("", sanitized)
        sanitized = ContentSecurity._EVENT_ATTR_PATTERN.sub("", sanitized)
        return ContentSecurity._SCRIPT_URL_PATTERN.sub("", sanitized)

    @staticmethod
    def clean_output(text: str | None) -> str:
        """Escape provider output before it reaches a rendering surface."""
        if not isinstance(text, str) or not text:
            return ""
        return ContentSecurity.escape_html(text)

    @staticmethod
    def escape_html(text: str) -> str:
        """Escape markup-significant characters (& < > " ' /)."""
        return ContentSecurity._HTML_ESCAPE_PATTERN.sub(lambda m: ContentSecurity._HTML_ESCAPE_MAP[m.group(0)], text)

    @staticmethod
    def unescape_html(text: str, max_passes: int = MAX_DECODE_PASSES) -> str:
        """Decode HTML entities until the text stops changing.

        Providers sometimes return doubly escaped text (``&amp;#39;``). Decoding is repeated up to
        ``max_passes`` times, so already decoded text comes back unchanged and adversarial nesting
        cannot loop forever.

        Args:
            text (str): Text that may contain HTML entities.
            max_passes (int): Upper bound on decode passes.

        Returns:
            str: Decoded text.
        """
        decoded: str = text
        for _ in range(max_passes):
            candidate: str = html.unescape(decoded)
            if candidate == decoded:
                break
            decoded = candidate
        return decoded

    @staticmethod
    def sanitize_log_message(message: str | None) -> str:
        """Redact API keys, bearer tokens, emails, phone numbers, card numbers and IP addresses."""
        if not isinstance(message, str) or not message:
            return ""
        sanitized: str = message
        for pattern, replacement in ContentSecurity._SENSITIVE_PATTERNS:
            sanitized = pattern.sub(replacement, sanitized)
        return sanitized

    @staticmethod
    def create_safe_error_message(message: str | None, max_length: int = SAFE_ERROR_MESSAGE_LENGTH) -> str:
        """Build a short, redacted error string that is safe to show to users.

        Args:
            message (str | None): Raw error message.
            max_length (int): Maximum length of the returned message.

        Returns:
            str: Redacted message with home directory paths masked.
        """
        if not isinstance(message, str) or not message:
            return "Unknown error"
        safe: str = ContentSecurity.sanitize_log_message(message)
        for pattern, replacement in ContentSecurity._HOME_PATH_PATTERNS:
            safe = pattern.sub(replacement, safe)
        return ContentSecurity.truncate_text(safe, max_length)

    @staticmethod
    def validate_language_code(code: str | None) -> bool:
        """Accept only 'auto', 'xx' or 'xx-YY' language codes."""
        if not isinstance(code, str):
            return False
        return ContentSecurity._LANGUAGE_CODE_PATTERN.fullmatch(code) is not None

    @staticmethod
    def detect_threats(text: str | None) -> list[str]:
        """List the kinds of active content found in text.

        Returns:
            list[str]: Human readable threat descriptions. Empty when the text is safe.
        """
        if not isinstance(text, str) or not text:
            return []
        return [label for pattern, label in ContentSecurity._THREAT_CHECKS if pattern.search(text)]

    @staticmethod
    def truncate_text(text: str | None, max_length: int) -> str:
        """Limit text to max_length characters, marking truncation with an ellipsis."""
        if not isinstance(text, str) or not text:
            return ""
        if len(text) <= max_length:
            return text
        if max_length <= 3:
            return text[:max_length]
        return text[: max_length - 3] + "..."
