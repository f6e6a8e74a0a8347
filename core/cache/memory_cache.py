"""Bounded least-recently-used in-memory tier of the translation cache."""

from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING

from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from models.cache_models import TranslationCacheEntry

__all__: list[str] = ["LRUMemoryCache"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class LRUMemoryCache:
    """Cache entries keyed by cache key, evicting the least recently used beyond capacity.

    Only the event loop thread touches this structure, so operations need no locking.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            msg: str = f"Memory cache capacity must be positive: {capacity}"
            raise ValueError(msg)
        self.capacity: int = capacity
        self._entries: OrderedDict[str, TranslationCacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> TranslationCacheEntry | None:
        """Return the entry and mark it most recently used."""
        entry: TranslationCacheEntry | None = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
        return entry

    def put(self, key: str, entry: TranslationCacheEntry) -> None:
        """Insert or replace an entry, evicting the least recently used one when full."""
        self._entries[key] = entry
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Memory cache evicted key: %s", StringUtils.key_preview(evicted))

    def pop(self, key: str) -> TranslationCacheEntry | None:
        return self._entries.pop(key, None)

    def remove_where(self, predicate: Callable[[TranslationCacheEntry], bool]) -> int:
        """Remove every entry matching the predicate and return how many were removed."""
        keys: list[str] = [key for key, entry in self._entries.items() if predicate(entry)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()
