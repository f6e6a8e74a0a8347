from __future__ import annotations

import pytest

from models.stats_models import DailyStats, StatsBucket


def test_bucket_counters() -> None:
    bucket = StatsBucket()
    bucket.record_success(5, 100.0)
    bucket.record_success(3, 300.0)
    bucket.record_cache_hit(4)
    bucket.record_failure()

    assert bucket.requests == 4
    assert bucket.success == 3
    assert bucket.failure == 1
    assert bucket.chars == 12
    assert bucket.cache_hits == 1
    assert bucket.timed == 2
    assert bucket.avg_response_time == pytest.approx(200.0)


def test_merge_weights_means_by_sample_count() -> None:
    first = StatsBucket()
    first.record_success(1, 100.0)
    second = StatsBucket()
    for _ in range(3):
        second.record_success(1, 500.0)

    first.merge(second)

    assert first.requests == 4
    assert first.timed == 4
    assert first.avg_response_time == pytest.approx(400.0)


def test_merge_with_untimed_bucket_keeps_mean() -> None:
    bucket = StatsBucket()
    bucket.record_success(1, 250.0)
    hits = StatsBucket()
    hits.record_cache_hit(2)

    bucket.merge(hits)

    assert bucket.avg_response_time == pytest.approx(250.0)
    assert bucket.cache_hits == 1


def test_daily_merge_includes_engines() -> None:
    day = DailyStats()
    day.engine_bucket("google").record_success(2, 10.0)
    other = DailyStats()
    other.engine_bucket("google").record_success(3, 30.0)
    other.engine_bucket("deepl").record_failure()

    day.merge(other)

    assert sorted(day.engines) == ["deepl", "google"]
    assert day.engines["google"].chars == 5
    assert day.engines["deepl"].failure == 1


def test_daily_round_trip_ignores_unknown_keys() -> None:
    day = DailyStats()
    day.record_success(7, 120.0)
    day.engine_bucket("gpt4").record_success(7, 120.0)
    data = day.to_dict()
    data["legacy_field"] = 1
    data["engines"]["gpt4"]["legacy_field"] = 2

    restored: DailyStats = DailyStats.from_dict(data)

    assert restored == day
    assert DailyStats.from_dict(None) == DailyStats()
    assert StatsBucket.from_dict({}) == StatsBucket()
