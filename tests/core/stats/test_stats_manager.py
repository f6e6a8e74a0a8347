"""Tests for StatsManager."""

from __future__ import annotations

import json
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

import pytest

from core.stats.manager import StatsManager
from models.config_models import Config
from models.event_models import TranslationEvent, TranslationEventType

if TYPE_CHECKING:
    from pathlib import Path

NOW: float = datetime(2026, 1, 15, 12, 0, tzinfo=UTC).timestamp()
DAY: float = 86400.0


class FakeClock:
    def __init__(self) -> None:
        self.now: float = NOW

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stats(tmp_path: Path, clock: FakeClock) -> StatsManager:
    return StatsManager(Config(), file_path=tmp_path / "stats.json", clock=clock)


def success(engine: str = "google", chars: int = 5, ms: float = 100.0, at: float = NOW) -> TranslationEvent:
    return TranslationEvent(
        TranslationEventType.SUCCESS, engine, char_count=chars, response_time_ms=ms, timestamp=at
    )


def cache_hit(engine: str = "google", chars: int = 5, at: float = NOW) -> TranslationEvent:
    return TranslationEvent(TranslationEventType.CACHE_HIT, engine, char_count=chars, timestamp=at)


def failure(engine: str = "google", at: float = NOW) -> TranslationEvent:
    return TranslationEvent(TranslationEventType.ERROR, engine, char_count=5, error="boom", timestamp=at)


def test_events_update_today_and_total(stats: StatsManager) -> None:
    stats.handle_event(success(ms=100.0))
    stats.handle_event(success(ms=300.0, chars=10))
    stats.handle_event(cache_hit())
    stats.handle_event(failure())

    today: dict[str, Any] = stats.get_today_stats()
    assert today["date"] == "2026-01-15"
    assert today["requests"] == 4
    assert today["success"] == 3
    assert today["failure"] == 1
    assert today["chars"] == 20
    assert today["cache_hits"] == 1
    assert today["avg_response_time"] == pytest.approx(200.0)
    assert stats.get_total_stats()["requests"] == 4
    assert stats.is_dirty is True


def test_engine_breakdown(stats: StatsManager) -> None:
    stats.handle_event(success("google"))
    stats.handle_event(success("gpt4", ms=50.0))
    stats.handle_event(failure("gpt4"))

    per_engine: dict[str, Any] = stats.get_engine_stats()
    assert set(per_engine) == {"google", "gpt4"}
    assert per_engine["gpt4"]["requests"] == 2
    assert per_engine["gpt4"]["failure"] == 1
    assert stats.get_engine_stats("gpt4")["avg_response_time"] == 50.0
    assert stats.get_engine_stats("deepl")["requests"] == 0
    assert stats.get_today_stats()["engines"]["google"]["success"] == 1


def test_events_are_bucketed_by_event_day(stats: StatsManager) -> None:
    stats.handle_event(success(at=NOW - DAY))
    stats.handle_event(success())

    assert stats.get_today_stats()["requests"] == 1
    assert stats.get_total_stats()["requests"] == 2
    assert stats.get_stats()["days_tracked"] == 2


def test_date_range_is_inclusive(stats: StatsManager) -> None:
    for offset in range(5):
        stats.handle_event(success(ms=100.0 * (offset + 1), at=NOW - offset * DAY))

    result: dict[str, Any] = stats.get_date_range_stats("2026-01-12", date(2026, 1, 14))

    assert result["start"] == "2026-01-12"
    assert result["end"] == "2026-01-14"
    assert result["days"] == 3
    assert result["requests"] == 3
    assert result["avg_response_time"] == pytest.approx(300.0)
    assert result["engines"]["google"]["requests"] == 3


def test_date_range_rejects_reversed_bounds(stats: StatsManager) -> None:
    with pytest.raises(ValueError, match="after"):
        stats.get_date_range_stats("2026-01-15", "2026-01-14")


def test_cleanup_drops_days_beyond_retention(stats: StatsManager) -> None:
    stats.handle_event(success(at=NOW - 40 * DAY))
    stats.handle_event(success(at=NOW - 30 * DAY))
    stats.handle_event(success())

    assert stats.cleanup() == 1
    assert stats.get_stats()["days_tracked"] == 2
    assert stats.cleanup(retention_days=0) == 1
    assert stats.get_total_stats()["requests"] == 3


def test_reset_clears_everything(stats: StatsManager) -> None:
    stats.handle_event(success())

    stats.reset()

    assert stats.get_total_stats()["requests"] == 0
    assert stats.get_stats()["days_tracked"] == 0


@pytest.mark.asyncio
async def test_save_and_load_round_trip(stats: StatsManager, tmp_path: Path, clock: FakeClock) -> None:
    stats.handle_event(success("gpt4", ms=80.0))
    stats.handle_event(cache_hit("gpt4"))

    assert await stats.save() is True
    assert stats.is_dirty is False
    saved: dict[str, Any] = json.loads((tmp_path / "stats.json").read_text(encoding="utf-8"))
    assert saved["version"] == 1
    assert "2026-01-15" in saved["daily"]

    reloaded = StatsManager(Config(), file_path=tmp_path / "stats.json", clock=clock)
    await reloaded.component_load()
    assert reloaded.get_total_stats() == stats.get_total_stats()
    assert reloaded.get_engine_stats("gpt4")["cache_hits"] == 1


@pytest.mark.asyncio
async def test_save_skips_clean_state(stats: StatsManager, tmp_path: Path) -> None:
    assert await stats.save() is True
    assert not (tmp_path / "stats.json").exists()

    assert await stats.save(force=True) is True
    assert (tmp_path / "stats.json").exists()


@pytest.mark.asyncio
async def test_load_tolerates_bad_files(tmp_path: Path, clock: FakeClock) -> None:
    path: Path = tmp_path / "stats.json"
    path.write_text("{not json", encoding="utf-8")
    stats = StatsManager(Config(), file_path=path, clock=clock)

    await stats.load()

    assert stats.get_total_stats()["requests"] == 0


def test_load_dict_skips_malformed_days(stats: StatsManager) -> None:
    stats.load_dict(
        {
            "daily": {
                "2026-01-14": {"requests": 2, "success": 2, "engines": {"google": {"requests": 2}}},
                "yesterday": {"requests": 9},
                "2026-01-13": {"bogus_field": 1, "requests": 1},
            },
            "total": {"requests": 3},
        }
    )

    assert stats.get_stats()["days_tracked"] == 2
    assert stats.get_date_range_stats("2026-01-13", "2026-01-14")["requests"] == 3
    assert stats.get_total_stats()["requests"] == 3


@pytest.mark.asyncio
async def test_save_failure_keeps_state_dirty(tmp_path: Path, clock: FakeClock) -> None:
    target: Path = tmp_path / "stats_dir"
    target.mkdir()
    stats = StatsManager(Config(), file_path=target, clock=clock)
    stats.handle_event(success())

    assert await stats.save() is False
    assert stats.is_dirty is True
