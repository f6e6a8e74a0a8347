"""Counters kept by the statistics aggregator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Self

__all__: list[str] = ["DailyStats", "StatsBucket"]


@dataclass
class StatsBucket:
    """Request counters for one scope (a day, an engine, or the total).

    Attributes:
        requests (int): Translation calls observed.
        success (int): Calls that produced a result, including cache hits.
        failure (int): Calls that ended in an error.
        chars (int): Characters translated by successful calls.
        cache_hits (int): Successful calls answered from the cache.
        avg_response_time (float): Running mean of live call durations in milliseconds.
        timed (int): Number of durations folded into the mean.
    """

    requests: int = 0
    success: int = 0
    failure: int = 0
    chars: int = 0
    cache_hits: int = 0
    avg_response_time: float = 0.0
    timed: int = 0

    def record_success(self, chars: int, response_time_ms: float | None = None) -> None:
        self.requests += 1
        self.success += 1
        self.chars += chars
        if response_time_ms is not None:
            self.timed += 1
            self.avg_response_time += (response_time_ms - self.avg_response_time) / self.timed

    def record_cache_hit(self, chars: int) -> None:
        self.record_success(chars)
        self.cache_hits += 1

    def record_failure(self) -> None:
        self.requests += 1
        self.failure += 1

    def merge(self, other: StatsBucket) -> None:
        """Add another bucket's counters, weighting the means by their sample counts."""
        total_timed: int = self.timed + other.timed
        if total_timed:
            self.avg_response_time = (
                self.avg_response_time * self.timed + other.avg_response_time * other.timed
            ) / total_timed
        self.timed = total_timed
        self.requests += other.requests
        self.success += other.success
        self.failure += other.failure
        self.chars += other.chars
        self.cache_hits += other.cache_hits

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Self:
        """Build a bucket from persisted data, ignoring unknown keys."""
        if not data:
            return cls()
        names: set[str] = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})


@dataclass
class DailyStats(StatsBucket):
    """Counters for one day, with a per-engine breakdown."""

    engines: dict[str, StatsBucket] = field(default_factory=dict)

    def engine_bucket(self, engine: str) -> StatsBucket:
        return self.engines.setdefault(engine, StatsBucket())

    def merge(self, other: StatsBucket) -> None:
        super().merge(other)
        if isinstance(other, DailyStats):
            for engine, bucket in other.engines.items():
                self.engine_bucket(engine).merge(bucket)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = StatsBucket.to_dict(self)
        data["engines"] = {engine: bucket.to_dict() for engine, bucket in self.engines.items()}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Self:
        if not data:
            return cls()
        names: set[str] = {f.name for f in fields(StatsBucket)}
        daily = cls(**{key: value for key, value in data.items() if key in names})
        daily.engines = {
            engine: StatsBucket.from_dict(bucket) for engine, bucket in (data.get("engines") or {}).items()
        }
        return daily
