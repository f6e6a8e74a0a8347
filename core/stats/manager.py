"""Statistics aggregator fed by translation lifecycle events.

Counters are kept per UTC day (with a per-engine breakdown) and as all-time totals. The whole
state is persisted as one JSON document that is replaced atomically on save.
"""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from models.event_models import TranslationEvent, TranslationEventType
from models.stats_models import DailyStats, StatsBucket
from utils.file_utils import FileUtils, FileUtilsError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from pathlib import Path

    from models.config_models import Config

__all__: list[str] = ["StatsManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

STATS_FORMAT_VERSION: int = 1


class StatsManager:
    """Aggregate translation events into daily, per-engine and total counters.

    Implements the event listener protocol of the orchestrator through ``handle_event``.

    Args:
        config (Config): Application configuration.
        file_path (Path | None): Persistence file; defaults to the configured statistics file.
        clock (Callable[[], float]): Epoch time source used for "today" and retention.
    """

    def __init__(
        self,
        config: Config,
        *,
        file_path: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config: Config = config
        self.file_path: Path = file_path or FileUtils.resolve_data_path(
            config.GENERAL.DATA_DIR, config.STATISTICS.FILE
        )
        self._clock: Callable[[], float] = clock
        self._daily: dict[str, DailyStats] = {}
        self._total: DailyStats = DailyStats()
        self._dirty: bool = False

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @staticmethod
    def _day_key(timestamp: float) -> str:
        return datetime.fromtimestamp(timestamp, UTC).date().isoformat()

    def _today(self) -> str:
        return self._day_key(self._clock())

    async def component_load(self) -> None:
        await self.load()
        logger.info("StatsManager initialized (%d days loaded)", len(self._daily))

    async def component_teardown(self) -> None:
        await self.save()
        logger.info("StatsManager termination process completed.")

    def handle_event(self, event: TranslationEvent) -> None:
        """Fold one lifecycle event into the counters."""
        daily: DailyStats = self._daily.setdefault(self._day_key(event.timestamp), DailyStats())
        buckets: tuple[StatsBucket, ...] = (
            daily,
            daily.engine_bucket(event.engine),
            self._total,
            self._total.engine_bucket(event.engine),
        )

        for bucket in buckets:
            match event.type:
                case TranslationEventType.SUCCESS:
                    bucket.record_success(event.char_count, event.response_time_ms)
                case TranslationEventType.CACHE_HIT:
                    bucket.record_cache_hit(event.char_count)
                case TranslationEventType.ERROR:
                    bucket.record_failure()
        self._dirty = True

    def get_today_stats(self) -> dict[str, Any]:
        daily: DailyStats = self._daily.get(self._today()) or DailyStats()
        return {"date": self._today(), **daily.to_dict()}

    def get_engine_stats(self, engine: str | None = None) -> dict[str, Any]:
        """Return all-time counters of one engine, or of every engine keyed by name."""
        if engine is not None:
            bucket: StatsBucket = self._total.engines.get(engine) or StatsBucket()
            return bucket.to_dict()
        return {name: bucket.to_dict() for name, bucket in self._total.engines.items()}

    def get_total_stats(self) -> dict[str, Any]:
        return self._total.to_dict()

    def get_date_range_stats(self, start: date | str, end: date | str) -> dict[str, Any]:
        """Aggregate the daily counters of an inclusive date range.

        Args:
            start (date | str): First day, as a date or ISO string.
            end (date | str): Last day, as a date or ISO string.

        Returns:
            dict[str, Any]: Merged counters with the per-engine breakdown and the number of
                days that had activity.

        Raises:
            ValueError: If a date string is malformed or start is after end.
        """
        start_day: date = date.fromisoformat(start) if isinstance(start, str) else start
        end_day: date = date.fromisoformat(end) if isinstance(end, str) else end
        if start_day > end_day:
            msg: str = f"Start date {start_day} is after end date {end_day}"
            raise ValueError(msg)

        merged = DailyStats()
        days: int = 0
        for key, daily in self._daily.items():
            if start_day <= date.fromisoformat(key) <= end_day:
                merged.merge(daily)
                days += 1
        return {"start": start_day.isoformat(), "end": end_day.isoformat(), "days": days, **merged.to_dict()}

    def get_stats(self) -> dict[str, Any]:
        """Return today's and all-time counters in one document."""
        return {
            "today": self.get_today_stats(),
            "total": self.get_total_stats(),
            "days_tracked": len(self._daily),
        }

    def cleanup(self, retention_days: int | None = None) -> int:
        """Drop daily buckets older than the retention window.

        Returns:
            int: Number of days removed.
        """
        days: int = self.config.STATISTICS.RETENTION_DAYS if retention_days is None else retention_days
        cutoff: date = datetime.fromtimestamp(self._clock(), UTC).date() - timedelta(days=max(0, days))
        expired: list[str] = [key for key in self._daily if date.fromisoformat(key) < cutoff]
        for key in expired:
            del self._daily[key]
        if expired:
            self._dirty = True
            logger.info("Statistics cleanup removed %d days", len(expired))
        return len(expired)

    def reset(self) -> None:
        self._daily.clear()
        self._total = DailyStats()
        self._dirty = True
        logger.info("Translation statistics reset")

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": STATS_FORMAT_VERSION,
            "daily": {key: daily.to_dict() for key, daily in sorted(self._daily.items())},
            "total": self._total.to_dict(),
        }

    def load_dict(self, data: Any) -> None:
        """Replace the counters with a persisted document. Malformed days are skipped."""
        self._daily.clear()
        self._total = DailyStats()
        if not isinstance(data, dict):
            return
        for key, value in (data.get("daily") or {}).items():
            try:
                date.fromisoformat(key)
                self._daily[key] = DailyStats.from_dict(value)
            except (TypeError, ValueError) as err:
                logger.warning("Skipping malformed statistics day '%s': %s", key, err)
        try:
            self._total = DailyStats.from_dict(data.get("total"))
        except (TypeError, ValueError) as err:
            logger.warning("Skipping malformed statistics totals: %s", err)

    async def load(self) -> None:
        """Load the persisted counters. A missing or unreadable file starts from zero."""
        try:
            data: Any = await asyncio.to_thread(FileUtils.read_json, self.file_path)
        except (OSError, ValueError, FileUtilsError) as err:
            logger.error("Failed to load translation statistics: %s", err)
            data = None
        self.load_dict(data)
        self._dirty = False

    async def save(self, *, force: bool = False) -> bool:
        """Write the counters when they changed since the last save.

        Returns:
            bool: True if the file is up to date.
        """
        if not self._dirty and not force:
            return True
        snapshot: dict[str, Any] = self.to_dict()
        try:
            await asyncio.to_thread(FileUtils.write_json, self.file_path, snapshot)
        except FileUtilsError as err:
            logger.error("Failed to save translation statistics: %s", err)
            return False
        self._dirty = False
        logger.debug("Translation statistics saved: '%s'", self.file_path)
        return True
