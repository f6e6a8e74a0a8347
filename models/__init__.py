"""Data models for the chat translator.

This package contains dataclass definitions for configuration, translation requests and results,
cache entries, lifecycle events, statistics counters and per-account settings.
"""

from __future__ import annotations

from models.account_models import AccountConfig, AdvancedSettings, GlobalSettings, InputBoxSettings
from models.cache_models import CacheSizeReport, CacheStatistics, TranslationCacheEntry
from models.config_models import Config, EngineSettings
from models.event_models import TranslationEvent, TranslationEventListener, TranslationEventType
from models.stats_models import DailyStats, StatsBucket
from models.translation_models import TranslationRequest, TranslationResult

__all__: list[str] = [
    "AccountConfig",
    "AdvancedSettings",
    "CacheSizeReport",
    "CacheStatistics",
    "Config",
    "DailyStats",
    "EngineSettings",
    "GlobalSettings",
    "InputBoxSettings",
    "StatsBucket",
    "TranslationCacheEntry",
    "TranslationEvent",
    "TranslationEventListener",
    "TranslationEventType",
    "TranslationRequest",
    "TranslationResult",
]
