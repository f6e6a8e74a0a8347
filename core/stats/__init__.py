"""Translation usage statistics.

Aggregates lifecycle events from the orchestrator into per-day and per-engine counters.
"""

from __future__ import annotations

from core.stats.manager import StatsManager

__all__: list[str] = ["StatsManager"]
