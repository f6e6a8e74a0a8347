"""Translation cache package.

Provides the two-tier translation cache and the coordinator that deduplicates and bounds
live translation calls.
"""

from __future__ import annotations

from core.cache.manager import TranslationCacheManager
from core.cache.memory_cache import LRUMemoryCache
from core.cache.request_coordinator import RequestCoordinator

__all__: list[str] = ["LRUMemoryCache", "RequestCoordinator", "TranslationCacheManager"]
