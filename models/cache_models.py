"""Models for translation cache data.

Defines data classes for translation cache entries, cache statistics and the per-account
storage report.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Self

__all__: list[str] = [
    "CacheSizeReport",
    "CacheStatistics",
    "TranslationCacheEntry",
]


@dataclass(frozen=True)
class TranslationCacheEntry:
    """Translation cache entry data.

    Timestamps are POSIX epoch seconds so that entries compare cheaply against the TTL.

    Attributes:
        cache_key (str): Cache key identifier (hash of the request).
        translated_text (str): Translated text.
        source_lang (str): Source language code.
        target_lang (str): Target language code.
        engine (str): Translation engine that produced the text.
        account_id (str | None): Account scope, or None for the shared scope.
        created_at (float): Entry creation time.
        accessed_at (float): Last access time.
        access_count (int): Number of cache hits.
    """

    cache_key: str
    translated_text: str
    source_lang: str
    target_lang: str
    engine: str
    account_id: str | None
    created_at: float
    accessed_at: float
    access_count: int = 0

    def is_expired(self, now: float, ttl_sec: float) -> bool:
        """Check whether the entry has outlived the TTL.

        Args:
            now (float): Current epoch time.
            ttl_sec (float): Time-to-live in seconds.

        Returns:
            bool: True when ``now - created_at`` is not below the TTL.
        """
        return now - self.created_at >= ttl_sec

    def touched(self, now: float) -> Self:
        """Return a copy recording one more access at ``now``."""
        return replace(self, accessed_at=now, access_count=self.access_count + 1)

    def to_record(self) -> dict[str, Any]:
        """Return the persisted record layout of the entry."""
        return {
            "cache_key": self.cache_key,
            "account_id": self.account_id,
            "translated_text": self.translated_text,
            "source_lang": self.source_lang,
            "target_lang": self.target_lang,
            "engine": self.engine,
            "created_at": self.created_at,
            "accessed_at": self.accessed_at,
            "access_count": self.access_count,
        }


@dataclass
class CacheStatistics:
    """Cache usage statistics.

    Attributes:
        hits (int): Lookups answered from either tier.
        misses (int): Lookups that found nothing valid.
        sets (int): Entries written.
        memory_entries (int): Entries currently held in memory.
        durable_entries (int): Entries currently stored on disk.
        engine_distribution (dict[str, int]): Durable entries per engine.
        oldest_entry (datetime | None): Creation time of the oldest durable entry.
        newest_entry (datetime | None): Creation time of the newest durable entry.
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    memory_entries: int = 0
    durable_entries: int = 0
    engine_distribution: dict[str, int] = field(default_factory=dict)
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None

    @property
    def hit_rate(self) -> float:
        """Share of lookups answered from the cache, in percent."""
        total: int = self.hits + self.misses
        if total == 0:
            return 0.0
        return round(self.hits / total * 100, 2)

    @staticmethod
    def epoch_to_datetime(value: float | None) -> datetime | None:
        """Convert an epoch value to an aware local datetime."""
        if value is None:
            return None
        return datetime.fromtimestamp(float(value), tz=UTC).astimezone()

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "hit_rate": self.hit_rate,
            "memory_entries": self.memory_entries,
            "durable_entries": self.durable_entries,
            "engine_distribution": dict(self.engine_distribution),
            "oldest_entry": self.oldest_entry.isoformat() if self.oldest_entry else None,
            "newest_entry": self.newest_entry.isoformat() if self.newest_entry else None,
        }


@dataclass
class CacheSizeReport:
    """Durable cache footprint, used for privacy reporting.

    Attributes:
        total_entries (int): Number of durable entries.
        total_bytes (int): Approximate size of the stored translations in bytes.
        entries_by_account (dict[str, int]): Entry count per account; the shared scope is ''.
    """

    total_entries: int = 0
    total_bytes: int = 0
    entries_by_account: dict[str, int] = field(default_factory=dict)
