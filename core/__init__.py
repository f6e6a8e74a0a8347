"""Core components of the chat translator.

This package contains the translation service facade, the engine orchestrator, the
two-tier cache with its request coordinator, and the statistics aggregator.
"""

from core.service import TranslationService
from core.version import VERSION

__all__: list[str] = [
    "VERSION",
    "TranslationService",
]
