"""Lifecycle events emitted by the translation orchestrator."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

__all__: list[str] = ["TranslationEvent", "TranslationEventListener", "TranslationEventType"]


class TranslationEventType(StrEnum):
    SUCCESS = "translation-success"
    ERROR = "translation-error"
    CACHE_HIT = "cache-hit"


@dataclass(frozen=True)
class TranslationEvent:
    """One translation outcome.

    Attributes:
        type (TranslationEventType): Kind of outcome.
        engine (str): Engine that served the request; the requested engine for errors.
        char_count (int): Length of the request text.
        response_time_ms (float | None): Duration of the live call, for successes only.
        account_id (str | None): Account scope of the request.
        error (str | None): Redacted error message, for errors only.
        timestamp (float): Epoch time at which the event was created.
    """

    type: TranslationEventType
    engine: str
    char_count: int = 0
    response_time_ms: float | None = None
    account_id: str | None = None
    error: str | None = None
    timestamp: float = field(default_factory=time.time)


class TranslationEventListener(Protocol):
    def handle_event(self, event: TranslationEvent) -> None: ...
