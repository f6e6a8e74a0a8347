# ruff: noqa: BLE001
"""Translation cache manager.

Two-tier cache for translation results: a bounded LRU tier in memory in front of a durable
SQLite database with WAL mode. Entries expire a fixed time after creation; expired entries are
removed lazily on read and by the periodic cleanup.
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
import time
from typing import TYPE_CHECKING, Any, ClassVar, Final, TypeVar

from core.cache.memory_cache import LRUMemoryCache
from models.cache_models import CacheSizeReport, CacheStatistics, TranslationCacheEntry
from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from pathlib import Path

    from models.config_models import Config

__all__: list[str] = ["TranslationCacheManager"]

T = TypeVar("T")

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SECONDS_PER_DAY: Final[float] = 86400.0

_SELECT_COLUMNS: Final[str] = (
    "cache_key, account_id, translated_text, source_lang, target_lang, engine, created_at, accessed_at, access_count"
)


class TranslationCacheManager:
    """Manager for the two-tier translation cache.

    Memory operations run on the event loop. Database operations run in a worker thread and are
    serialized by a lock around the shared connection.

    Attributes:
        DB_SCHEMA_VERSION (ClassVar[int]): Cache database schema version.
    """

    DB_SCHEMA_VERSION: ClassVar[int] = 1

    def __init__(
        self,
        config: Config,
        *,
        db_path: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache manager.

        Args:
            config (Config): Application configuration.
            db_path (Path | None): Database file; defaults to ``CACHE.DB_FILE`` in the data directory.
            clock (Callable[[], float]): Source of the current epoch time.
        """
        self.config: Config = config
        self._db_path: Path = db_path or FileUtils.resolve_data_path(config.GENERAL.DATA_DIR, config.CACHE.DB_FILE)
        self._clock: Callable[[], float] = clock
        self._db_conn: sqlite3.Connection | None = None
        self._db_lock: threading.Lock = threading.Lock()
        self._is_initialized: bool = False
        self._memory: LRUMemoryCache = LRUMemoryCache(config.CACHE.MEMORY_CAPACITY)
        self._hits: int = 0
        self._misses: int = 0
        self._sets: int = 0
        logger.debug("TranslationCacheManager instance created")

    @property
    def is_initialized(self) -> bool:
        """Check whether the durable tier is open."""
        return self._is_initialized

    @property
    def ttl_sec(self) -> float:
        return max(0.0, float(self.config.CACHE.TTL_DAYS)) * SECONDS_PER_DAY

    async def component_load(self) -> None:
        """Open the database. On failure the cache keeps working from memory only."""
        logger.info("TranslationCacheManager initialization started")
        try:
            await asyncio.to_thread(self._initialize_database)
            self._is_initialized = True
            logger.info("TranslationCacheManager initialized successfully")
        except Exception as err:
            logger.critical("Failed to initialize TranslationCacheManager: %s", err)
            self._is_initialized = False

    async def component_teardown(self) -> None:
        """Close database connection and cleanup resources."""
        logger.info("TranslationCacheManager shutdown started")
        with self._db_lock:
            if self._db_conn is not None:
                try:
                    self._db_conn.close()
                    logger.info("Database connection closed")
                except Exception as err:
                    logger.error("Error closing database connection: %s", err)
                self._db_conn = None
        self._is_initialized = False
        logger.info("TranslationCacheManager shutdown completed")

    def _initialize_database(self) -> None:
        """Initialize SQLite database with WAL mode and create tables."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn: sqlite3.Connection = sqlite3.connect(str(self._db_path), check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS translation_cache (
                    cache_key TEXT PRIMARY KEY,
                    account_id TEXT,
                    translated_text TEXT NOT NULL,
                    source_lang TEXT NOT NULL,
                    target_lang TEXT NOT NULL,
                    engine TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    accessed_at REAL NOT NULL,
                    access_count INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_account ON translation_cache(account_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_created ON translation_cache(created_at)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_engine ON translation_cache(engine)")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "INSERT OR IGNORE INTO cache_metadata (key, value) VALUES (?, ?)",
                ("schema_version", str(self.DB_SCHEMA_VERSION)),
            )
            row = conn.execute("SELECT value FROM cache_metadata WHERE key = ?", ("schema_version",)).fetchone()
            if row is not None and row[0] != str(self.DB_SCHEMA_VERSION):
                logger.warning(
                    "Cache DB schema version mismatch (db: %s, expected: %s)", row[0], self.DB_SCHEMA_VERSION
                )
            conn.commit()
        except (sqlite3.Error, OSError) as err:
            msg: str = f"Database initialization failed: {err}"
            logger.critical(msg)
            raise RuntimeError(msg) from err

        with self._db_lock:
            self._db_conn = conn
        logger.info("Database initialized with WAL mode")

    async def _run_db(self, func: Callable[[sqlite3.Connection], T]) -> T | None:
        """Run a database operation in a worker thread.

        Returns:
            T | None: The operation's result, or None if the database is not open.
        """

        def _locked() -> T | None:
            with self._db_lock:
                if self._db_conn is None:
                    return None
                return func(self._db_conn)

        if not self._is_initialized:
            return None
        return await asyncio.to_thread(_locked)

    @staticmethod
    def generate_key(
        source_text: str,
        source_lang: str,
        target_lang: str,
        engine: str,
        account_id: str | None = None,
    ) -> str:
        """Generate the cache key for a request.

        Returns:
            str: SHA256 hex digest; identical inputs always give the same key.
        """
        return StringUtils.generate_hash_key(source_text, source_lang, target_lang, engine, account_id)

    @staticmethod
    def _row_to_entry(row: Any) -> TranslationCacheEntry:
        return TranslationCacheEntry(
            cache_key=row[0],
            account_id=row[1],
            translated_text=row[2],
            source_lang=row[3],
            target_lang=row[4],
            engine=row[5],
            created_at=float(row[6]),
            accessed_at=float(row[7]),
            access_count=int(row[8]),
        )

    async def get(self, cache_key: str) -> TranslationCacheEntry | None:
        """Look up an entry, memory tier first.

        A durable hit is promoted into the memory tier. Expired entries are deleted and
        reported as absent.

        Args:
            cache_key (str): Cache key from ``generate_key``.

        Returns:
            TranslationCacheEntry | None: The refreshed entry, or None on a miss.
        """
        now: float = self._clock()
        ttl: float = self.ttl_sec

        entry: TranslationCacheEntry | None = self._memory.get(cache_key)
        if entry is not None:
            if not entry.is_expired(now, ttl):
                entry = entry.touched(now)
                self._memory.put(cache_key, entry)
                self._hits += 1
                logger.debug("Memory cache hit for key: %s", StringUtils.key_preview(cache_key))
                return entry
            self._memory.pop(cache_key)
            logger.debug("Memory cache entry expired for key: %s", StringUtils.key_preview(cache_key))

        try:
            entry = await self._run_db(lambda conn: self._get_durable(conn, cache_key, now, ttl))
        except sqlite3.Error as err:
            logger.error("Error searching translation cache: %s", err)
            entry = None

        if entry is None:
            self._misses += 1
            logger.debug("Cache miss for key: %s", StringUtils.key_preview(cache_key))
            return None

        self._memory.put(cache_key, entry)
        self._hits += 1
        logger.debug("Durable cache hit for key: %s (access_count: %d)", StringUtils.key_preview(cache_key), entry.access_count)
        return entry

    def _get_durable(
        self, conn: sqlite3.Connection, cache_key: str, now: float, ttl: float
    ) -> TranslationCacheEntry | None:
        row = conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM translation_cache WHERE cache_key = ?",  # noqa: S608
            (cache_key,),
        ).fetchone()
        if row is None:
            return None

        entry: TranslationCacheEntry = self._row_to_entry(row)
        if entry.is_expired(now, ttl):
            conn.execute("DELETE FROM translation_cache WHERE cache_key = ?", (cache_key,))
            conn.commit()
            logger.debug("Cache entry expired for key: %s", StringUtils.key_preview(cache_key))
            return None

        conn.execute(
            "UPDATE translation_cache SET accessed_at = ?, access_count = access_count + 1 WHERE cache_key = ?",
            (now, cache_key),
        )
        conn.commit()
        return entry.touched(now)

    async def set(
        self,
        cache_key: str,
        *,
        translated_text: str,
        source_lang: str,
        target_lang: str,
        engine: str,
        account_id: str | None = None,
    ) -> bool:
        """Store a translation in both tiers.

        A failure of the durable write is logged and does not raise.

        Returns:
            bool: True if the durable write succeeded.
        """
        now: float = self._clock()
        entry = TranslationCacheEntry(
            cache_key=cache_key,
            translated_text=translated_text,
            source_lang=source_lang,
            target_lang=target_lang,
            engine=engine,
            account_id=account_id,
            created_at=now,
            accessed_at=now,
        )
        self._memory.put(cache_key, entry)
        self._sets += 1

        record: dict[str, Any] = entry.to_record()

        def _write(conn: sqlite3.Connection) -> bool:
            conn.execute(
                f"INSERT OR REPLACE INTO translation_cache ({_SELECT_COLUMNS}) "  # noqa: S608
                "VALUES (:cache_key, :account_id, :translated_text, :source_lang, :target_lang, "
                ":engine, :created_at, :accessed_at, :access_count)",
                record,
            )
            conn.commit()
            return True

        try:
            written: bool | None = await self._run_db(_write)
        except Exception as err:
            logger.error("Error registering translation cache: %s", err)
            return False
        if written:
            logger.debug("Translation cached for key: %s", StringUtils.key_preview(cache_key))
        return bool(written)

    async def cleanup(self) -> int:
        """Remove expired entries from both tiers.

        Returns:
            int: Number of durable entries removed.
        """
        now: float = self._clock()
        ttl: float = self.ttl_sec
        removed_memory: int = self._memory.remove_where(lambda entry: entry.is_expired(now, ttl))

        def _sweep(conn: sqlite3.Connection) -> int:
            cursor: sqlite3.Cursor = conn.execute("DELETE FROM translation_cache WHERE created_at <= ?", (now - ttl,))
            conn.commit()
            return cursor.rowcount

        try:
            deleted: int = await self._run_db(_sweep) or 0
        except sqlite3.Error as err:
            logger.error("Error during cache cleanup: %s", err)
            deleted = 0
        logger.info("Deleted %d expired translation cache entries (%d from memory)", deleted, removed_memory)
        return deleted

    async def clear_by_account(self, account_id: str) -> int:
        """Remove every entry stored for an account from both tiers.

        Args:
            account_id (str): Account whose entries are removed.

        Returns:
            int: Number of durable entries removed.

        Raises:
            ValueError: If the account id is empty.
        """
        if not account_id:
            msg = "An account id is required to clear account cache entries"
            raise ValueError(msg)

        removed_memory: int = self._memory.remove_where(lambda entry: entry.account_id == account_id)

        def _delete(conn: sqlite3.Connection) -> int:
            cursor: sqlite3.Cursor = conn.execute("DELETE FROM translation_cache WHERE account_id = ?", (account_id,))
            conn.commit()
            return cursor.rowcount

        try:
            deleted: int = await self._run_db(_delete) or 0
        except sqlite3.Error as err:
            logger.error("Error clearing account cache: %s", err)
            deleted = 0
        logger.info("Cleared %d cache entries for an account (%d from memory)", deleted, removed_memory)
        return deleted

    async def clear_all(self) -> None:
        """Empty both tiers and reset the hit, miss and set counters."""
        self._memory.clear()
        self._hits = self._misses = self._sets = 0

        def _delete(conn: sqlite3.Connection) -> None:
            conn.execute("DELETE FROM translation_cache")
            conn.commit()

        try:
            await self._run_db(_delete)
        except sqlite3.Error as err:
            logger.error("Error clearing translation cache: %s", err)
        logger.info("Translation cache cleared")

    async def clear_translation_history(self) -> None:
        """Privacy reset of all cached translations."""
        await self.clear_all()

    async def get_statistics(self) -> CacheStatistics:
        """Get cache statistics.

        Returns:
            CacheStatistics: Counters and durable tier summary.
        """
        stats = CacheStatistics(
            hits=self._hits, misses=self._misses, sets=self._sets, memory_entries=len(self._memory)
        )

        def _query(conn: sqlite3.Connection) -> tuple[int, dict[str, int], float | None, float | None]:
            total: int = conn.execute("SELECT COUNT(*) FROM translation_cache").fetchone()[0] or 0
            distribution: dict[str, int] = {
                row[0]: row[1]
                for row in conn.execute("SELECT engine, COUNT(*) FROM translation_cache GROUP BY engine").fetchall()
            }
            oldest, newest = conn.execute("SELECT MIN(created_at), MAX(created_at) FROM translation_cache").fetchone()
            return total, distribution, oldest, newest

        try:
            summary = await self._run_db(_query)
        except sqlite3.Error as err:
            logger.error("Error getting cache statistics: %s", err)
            return stats

        if summary is not None:
            total, distribution, oldest, newest = summary
            stats.durable_entries = total
            stats.engine_distribution = distribution
            stats.oldest_entry = CacheStatistics.epoch_to_datetime(oldest)
            stats.newest_entry = CacheStatistics.epoch_to_datetime(newest)
        return stats

    async def get_cache_size(self) -> CacheSizeReport:
        """Report how much translated text is stored on disk, per account."""

        def _query(conn: sqlite3.Connection) -> CacheSizeReport:
            report = CacheSizeReport()
            rows = conn.execute(
                "SELECT COALESCE(account_id, ''), COUNT(*), COALESCE(SUM(LENGTH(CAST(translated_text AS BLOB))), 0) "
                "FROM translation_cache GROUP BY COALESCE(account_id, '')"
            ).fetchall()
            for account, count, size in rows:
                report.entries_by_account[account] = count
                report.total_entries += count
                report.total_bytes += size
            return report

        try:
            return await self._run_db(_query) or CacheSizeReport()
        except sqlite3.Error as err:
            logger.error("Error getting cache size: %s", err)
            return CacheSizeReport()

    async def export_cache_detailed(self, output_path: Path) -> bool:
        """Export detailed cache data to file sorted by access count.

        Args:
            output_path (Path): Output file path.

        Returns:
            bool: True if export succeeded, False otherwise.
        """
        if not self._is_initialized:
            logger.error("Cache not initialized, cannot export")
            return False

        def _query(conn: sqlite3.Connection) -> list[TranslationCacheEntry]:
            rows = conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM translation_cache "  # noqa: S608
                "ORDER BY access_count DESC, accessed_at DESC"
            ).fetchall()
            return [self._row_to_entry(row) for row in rows]

        try:
            entries: list[TranslationCacheEntry] = await self._run_db(_query) or []
            lines: list[str] = ["Translation Cache Detailed Export", "=" * 80, ""]
            for entry in entries:
                accessed = CacheStatistics.epoch_to_datetime(entry.accessed_at)
                lines.extend(
                    [
                        f"Cache Key: {entry.cache_key}",
                        f"Languages: {entry.source_lang} -> {entry.target_lang}",
                        f"Translation: {entry.translated_text}",
                        f"Engine: {entry.engine}",
                        f"Access Count: {entry.access_count}",
                        f"Last Used: {accessed.isoformat() if accessed else ''}",
                        "-" * 80,
                    ]
                )
            FileUtils.atomic_write_text(output_path, "\n".join(lines) + "\n")
            logger.info("Cache data exported to: %s", output_path)
        except Exception as err:
            logger.error("Error exporting cache data: %s", err)
            return False
        else:
            return True
