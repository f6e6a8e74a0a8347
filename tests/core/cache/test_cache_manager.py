"""Tests for TranslationCacheManager.

Tests lookup order, TTL expiry, cleanup, account isolation, statistics and the memory-only mode.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from core.cache.manager import SECONDS_PER_DAY, TranslationCacheManager
from models.config_models import Config
from utils.logger_utils import DEFAULT_NAMESPACE
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from models.cache_models import CacheSizeReport, CacheStatistics, TranslationCacheEntry


class FakeClock:
    def __init__(self) -> None:
        self.now: float = 1_700_000_000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> Config:
    config = Config()
    config.CACHE.MEMORY_CAPACITY = 2
    config.CACHE.TTL_DAYS = 1.0
    return config


@pytest.fixture
async def cache_manager(config: Config, tmp_path: Path, clock: FakeClock) -> AsyncGenerator[TranslationCacheManager]:
    """Create a TranslationCacheManager instance with temporary database."""
    manager = TranslationCacheManager(config, db_path=tmp_path / "test_cache.db", clock=clock)
    await manager.component_load()
    yield manager
    await manager.component_teardown()


async def store(manager: TranslationCacheManager, text: str, account_id: str | None = None) -> str:
    key: str = manager.generate_key(text, "en", "ja", "google", account_id)
    await manager.set(
        key,
        translated_text=f"{text}-ja",
        source_lang="en",
        target_lang="ja",
        engine="google",
        account_id=account_id,
    )
    return key


@pytest.mark.asyncio
async def test_cache_initialization(cache_manager: TranslationCacheManager) -> None:
    """Test cache manager initialization."""
    assert cache_manager.is_initialized is True
    assert cache_manager._db_conn is not None  # noqa: SLF001


def test_generate_key_is_deterministic() -> None:
    first: str = TranslationCacheManager.generate_key("Hello", "en", "ja", "google")
    second: str = TranslationCacheManager.generate_key("Hello", "en", "ja", "google")
    assert first == second
    assert len(first) == 64
    assert first != TranslationCacheManager.generate_key("Hello", "en", "ja", "deepl")
    assert first != TranslationCacheManager.generate_key("Hello", "en", "ja", "google", "acct")


@pytest.mark.asyncio
async def test_translation_cache_miss(cache_manager: TranslationCacheManager) -> None:
    """Test cache miss returns None."""
    assert await cache_manager.get("missing") is None
    stats: CacheStatistics = await cache_manager.get_statistics()
    assert stats.misses == 1


@pytest.mark.asyncio
async def test_set_then_get_hits_memory(cache_manager: TranslationCacheManager) -> None:
    key: str = await store(cache_manager, "Hello")

    entry: TranslationCacheEntry | None = await cache_manager.get(key)

    assert entry is not None
    assert entry.translated_text == "Hello-ja"
    assert entry.access_count == 1
    stats: CacheStatistics = await cache_manager.get_statistics()
    assert stats.hits == 1
    assert stats.sets == 1
    assert stats.durable_entries == 1


@pytest.mark.asyncio
async def test_durable_hit_is_promoted_to_memory(cache_manager: TranslationCacheManager) -> None:
    """Entries evicted from memory should still be served from the database."""
    first: str = await store(cache_manager, "one")
    await store(cache_manager, "two")
    await store(cache_manager, "three")
    assert first not in cache_manager._memory  # noqa: SLF001

    entry: TranslationCacheEntry | None = await cache_manager.get(first)

    assert entry is not None
    assert entry.translated_text == "one-ja"
    assert first in cache_manager._memory  # noqa: SLF001
    assert len(cache_manager._memory) == 2  # noqa: SLF001


@pytest.mark.asyncio
async def test_expired_entry_is_reported_absent(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    key: str = await store(cache_manager, "Hello")

    clock.now += SECONDS_PER_DAY - 1
    assert await cache_manager.get(key) is not None

    clock.now += 1
    assert await cache_manager.get(key) is None
    stats: CacheStatistics = await cache_manager.get_statistics()
    assert stats.durable_entries == 0


@pytest.mark.asyncio
async def test_cleanup_removes_only_expired_entries(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    old: str = await store(cache_manager, "old")
    clock.now += SECONDS_PER_DAY / 2
    fresh: str = await store(cache_manager, "fresh")
    clock.now += SECONDS_PER_DAY / 2

    removed: int = await cache_manager.cleanup()

    assert removed == 1
    assert await cache_manager.get(old) is None
    assert await cache_manager.get(fresh) is not None


@pytest.mark.asyncio
async def test_clear_by_account_leaves_other_scopes(cache_manager: TranslationCacheManager) -> None:
    mine: str = await store(cache_manager, "Hello", "alice")
    theirs: str = await store(cache_manager, "Hello", "bob")
    assert mine != theirs

    removed: int = await cache_manager.clear_by_account("alice")

    assert removed == 1
    assert await cache_manager.get(mine) is None
    assert await cache_manager.get(theirs) is not None


@pytest.mark.asyncio
async def test_clear_by_account_requires_an_id(cache_manager: TranslationCacheManager) -> None:
    with pytest.raises(ValueError, match="account id"):
        await cache_manager.clear_by_account("")


@pytest.mark.asyncio
async def test_clear_all_resets_counters(cache_manager: TranslationCacheManager) -> None:
    key: str = await store(cache_manager, "Hello")
    await cache_manager.get(key)

    await cache_manager.clear_all()

    stats: CacheStatistics = await cache_manager.get_statistics()
    assert (stats.hits, stats.misses, stats.sets) == (0, 0, 0)
    assert stats.memory_entries == 0
    assert stats.durable_entries == 0


@pytest.mark.asyncio
async def test_statistics_summary(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    await store(cache_manager, "one")
    clock.now += 10
    key: str = cache_manager.generate_key("two", "en", "ja", "deepl")
    await cache_manager.set(key, translated_text="2", source_lang="en", target_lang="ja", engine="deepl")
    await cache_manager.get(key)
    await cache_manager.get("missing")

    stats: CacheStatistics = await cache_manager.get_statistics()

    assert stats.engine_distribution == {"google": 1, "deepl": 1}
    assert stats.hit_rate == 50.0
    assert stats.oldest_entry is not None
    assert stats.newest_entry is not None
    assert (stats.newest_entry - stats.oldest_entry).total_seconds() == 10
    assert stats.to_dict()["hit_rate"] == 50.0


@pytest.mark.asyncio
async def test_cache_size_by_account(cache_manager: TranslationCacheManager) -> None:
    await store(cache_manager, "a")
    await store(cache_manager, "b", "alice")
    await store(cache_manager, "c", "alice")

    report: CacheSizeReport = await cache_manager.get_cache_size()

    assert report.total_entries == 3
    assert report.entries_by_account == {"": 1, "alice": 2}
    assert report.total_bytes == len("a-ja") + len("b-ja") + len("c-ja")


@pytest.mark.asyncio
async def test_export_cache_detailed(cache_manager: TranslationCacheManager, tmp_path: Path) -> None:
    key: str = await store(cache_manager, "Hello")
    await cache_manager.get(key)
    output: Path = tmp_path / "export.txt"

    assert await cache_manager.export_cache_detailed(output) is True

    content: str = output.read_text(encoding="utf-8")
    assert "Translation: Hello-ja" in content
    assert "Languages: en -> ja" in content


@pytest.mark.asyncio
async def test_memory_only_when_database_unavailable(config: Config, tmp_path: Path) -> None:
    """A database that cannot be opened should leave a working memory tier."""
    blocker: Path = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    manager = TranslationCacheManager(config, db_path=blocker / "cache.db")
    await manager.component_load()

    assert manager.is_initialized is False
    key: str = await store(manager, "Hello")
    entry: TranslationCacheEntry | None = await manager.get(key)
    assert entry is not None
    assert entry.translated_text == "Hello-ja"
    assert await manager.export_cache_detailed(tmp_path / "out.txt") is False
    await manager.component_teardown()


@pytest.mark.asyncio
async def test_logs_show_only_key_preview(
    cache_manager: TranslationCacheManager, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.DEBUG, logger=DEFAULT_NAMESPACE)

    key: str = await store(cache_manager, "Hello")
    await cache_manager.get(key)

    assert f"Translation cached for key: {StringUtils.key_preview(key)}" in caplog.text
    assert f"Memory cache hit for key: {StringUtils.key_preview(key)}" in caplog.text
    assert key not in caplog.text
