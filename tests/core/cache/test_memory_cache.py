"""Tests for LRUMemoryCache."""

from __future__ import annotations

import pytest

from core.cache.memory_cache import LRUMemoryCache
from models.cache_models import TranslationCacheEntry


def make_entry(key: str, account_id: str | None = None) -> TranslationCacheEntry:
    return TranslationCacheEntry(
        cache_key=key,
        translated_text=f"text-{key}",
        source_lang="en",
        target_lang="ja",
        engine="google",
        account_id=account_id,
        created_at=0.0,
        accessed_at=0.0,
    )


def test_least_recently_used_entry_is_evicted() -> None:
    cache = LRUMemoryCache(2)
    cache.put("a", make_entry("a"))
    cache.put("b", make_entry("b"))
    assert cache.get("a") is not None

    cache.put("c", make_entry("c"))

    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache
    assert len(cache) == 2


def test_put_replaces_existing_entry() -> None:
    cache = LRUMemoryCache(2)
    cache.put("a", make_entry("a"))
    cache.put("a", make_entry("a", "acct"))

    entry: TranslationCacheEntry | None = cache.get("a")
    assert entry is not None
    assert entry.account_id == "acct"
    assert len(cache) == 1


def test_remove_where_and_clear() -> None:
    cache = LRUMemoryCache(10)
    cache.put("a", make_entry("a", "alice"))
    cache.put("b", make_entry("b", "bob"))
    cache.put("c", make_entry("c", "alice"))

    assert cache.remove_where(lambda entry: entry.account_id == "alice") == 2
    assert len(cache) == 1
    assert cache.pop("b") is not None
    assert cache.pop("b") is None

    cache.put("d", make_entry("d"))
    cache.clear()
    assert len(cache) == 0


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError, match="capacity"):
        LRUMemoryCache(0)
