"""Deduplication and concurrency control for live translation calls.

Identical requests issued at the same time share one call; distinct requests run with at most
``max_concurrent`` calls in flight and wait in a bounded FIFO queue beyond that.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from contextlib import suppress
from dataclasses import replace
from typing import TYPE_CHECKING, Any, TypeAlias

from core.trans.interface import QueueFullError, RequestCancelledError
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable

    from models.translation_models import TranslationResult

__all__: list[str] = ["RequestCoordinator"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

Work: TypeAlias = "Callable[[], Awaitable[TranslationResult]]"


class RequestCoordinator:
    """Admission control in front of the translation engines.

    Admission order for a key:
        1. A result completed for the key within ``result_ttl_sec`` is returned marked as cached.
        2. If a call for the key is already pending, the caller waits for that call.
        3. Otherwise the work runs when a slot is free, queueing in FIFO order when none is.

    State is only touched from the event loop and never modified across an ``await``.

    Args:
        max_concurrent (int): Maximum number of works running at once.
        result_ttl_sec (float): Lifetime of short-lived results; 0 disables them.
        max_queue_size (int): Maximum number of queued works before QueueFullError.
        clock (Callable[[], float]): Monotonic time source.
    """

    def __init__(
        self,
        max_concurrent: int = 5,
        result_ttl_sec: float = 5.0,
        max_queue_size: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_concurrent < 1:
            msg: str = f"max_concurrent must be positive: {max_concurrent}"
            raise ValueError(msg)
        self.max_concurrent: int = max_concurrent
        self.result_ttl_sec: float = max(0.0, result_ttl_sec)
        self.max_queue_size: int = max(0, max_queue_size)
        self._clock: Callable[[], float] = clock

        self._recent: dict[str, tuple[float, TranslationResult]] = {}
        self._pending: dict[str, asyncio.Future[TranslationResult]] = {}
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._active: int = 0

        self._total: int = 0
        self._executed: int = 0
        self._deduplicated: int = 0
        self._recent_hits: int = 0
        self._queued: int = 0
        self._rejected: int = 0
        self._failed: int = 0
        self._peak_active: int = 0

    @property
    def active_count(self) -> int:
        return self._active

    @property
    def queue_length(self) -> int:
        return sum(1 for gate in self._waiters if not gate.done())

    async def component_load(self) -> None:
        logger.info("RequestCoordinator initialized (max_concurrent: %d)", self.max_concurrent)

    async def component_teardown(self) -> None:
        """Cancel queued and pending work and clear the short-lived results."""
        for gate in self._waiters:
            if not gate.done():
                gate.cancel()
        for fut in self._pending.values():
            if not fut.done():
                fut.cancel()
        self._pending.clear()
        self._recent.clear()
        logger.info("RequestCoordinator torn down and pending state cleared")

    def clear_recent(self) -> int:
        """Drop the short-lived results so cleared data is not served again.

        Returns:
            int: Number of results dropped.
        """
        count: int = len(self._recent)
        self._recent.clear()
        logger.debug("Short-lived results cleared: %d", count)
        return count

    async def execute_request(self, key: str, work: Work) -> TranslationResult:
        """Run ``work`` for ``key`` under the admission rules.

        Args:
            key (str): Request key; identical requests must share it.
            work (Work): Coroutine function performing the live call.

        Returns:
            TranslationResult: Result of this or a concurrent identical call.

        Raises:
            QueueFullError: If the request would exceed the queue bound.
            RequestCancelledError: If the pending call was cancelled by teardown.
            Exception: Whatever ``work`` raised, for every caller sharing the call.
        """
        self._total += 1
        now: float = self._clock()
        self._prune_recent(now)

        recent: tuple[float, TranslationResult] | None = self._recent.get(key)
        if recent is not None:
            self._recent_hits += 1
            logger.debug("Short-lived result reused for key: %s", StringUtils.key_preview(key))
            return replace(recent[1], cached=True, response_time_ms=None)

        pending: asyncio.Future[TranslationResult] | None = self._pending.get(key)
        if pending is not None:
            self._deduplicated += 1
            logger.debug("Pending call joined for key: %s", StringUtils.key_preview(key))
            return await asyncio.shield(pending)

        fut: asyncio.Future[TranslationResult] = asyncio.get_running_loop().create_future()
        self._pending[key] = fut

        try:
            await self._acquire_slot()
        except (QueueFullError, RequestCancelledError) as err:
            self._finish_pending(key, fut, error=err)
            raise
        except asyncio.CancelledError:
            self._finish_pending(key, fut, error=RequestCancelledError("Request cancelled while queued"))
            raise

        try:
            self._executed += 1
            result: TranslationResult = await work()
        except asyncio.CancelledError:
            self._finish_pending(key, fut, error=RequestCancelledError("Request cancelled while running"))
            raise
        except Exception as err:
            self._failed += 1
            self._finish_pending(key, fut, error=err)
            raise
        else:
            if self.result_ttl_sec > 0:
                self._recent[key] = (self._clock() + self.result_ttl_sec, result)
            self._finish_pending(key, fut, result=result)
            return result
        finally:
            self._release_slot()

    def _finish_pending(
        self,
        key: str,
        fut: asyncio.Future[TranslationResult],
        *,
        result: TranslationResult | None = None,
        error: BaseException | None = None,
    ) -> None:
        if self._pending.get(key) is fut:
            del self._pending[key]
        if fut.done():
            return
        if error is not None:
            fut.set_exception(error)
            # Mark the exception retrieved; the owner re-raises it itself.
            fut.exception()
        else:
            fut.set_result(result)  # type: ignore[arg-type]

    def _prune_recent(self, now: float) -> None:
        expired: list[str] = [key for key, (expires_at, _) in self._recent.items() if expires_at <= now]
        for key in expired:
            del self._recent[key]

    def _has_live_waiters(self) -> bool:
        while self._waiters and self._waiters[0].done():
            self._waiters.popleft()
        return bool(self._waiters)

    async def _acquire_slot(self) -> None:
        if self._active < self.max_concurrent and not self._has_live_waiters():
            self._active += 1
            self._peak_active = max(self._peak_active, self._active)
            return

        if self.queue_length >= self.max_queue_size:
            self._rejected += 1
            msg: str = f"Translation queue is full ({self.max_queue_size} requests waiting)"
            raise QueueFullError(msg)

        gate: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(gate)
        self._queued += 1
        logger.debug("Request queued (queue length: %d)", self.queue_length)
        try:
            await gate
        except asyncio.CancelledError:
            if gate.done() and not gate.cancelled():
                # The slot was handed over just before the cancellation arrived.
                self._release_slot()
            else:
                with suppress(ValueError):
                    self._waiters.remove(gate)
            task: asyncio.Task[Any] | None = asyncio.current_task()
            if gate.cancelled() and (task is None or task.cancelling() == 0):
                msg = "Request cancelled while queued"
                raise RequestCancelledError(msg) from None
            raise

    def _release_slot(self) -> None:
        while self._waiters:
            gate: asyncio.Future[None] = self._waiters.popleft()
            if not gate.done():
                # Hand the slot over; the active count stays the same.
                gate.set_result(None)
                return
        self._active -= 1

    def get_statistics(self) -> dict[str, int]:
        """Return admission counters and the current load."""
        return {
            "total_requests": self._total,
            "executed": self._executed,
            "deduplicated": self._deduplicated,
            "recent_hits": self._recent_hits,
            "queued": self._queued,
            "rejected": self._rejected,
            "failed": self._failed,
            "active": self._active,
            "peak_active": self._peak_active,
            "queue_length": self.queue_length,
            "pending": len(self._pending),
            "max_concurrent": self.max_concurrent,
        }
