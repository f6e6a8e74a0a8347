"""Unit tests for core.trans.manager module."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from core.cache.manager import TranslationCacheManager
from core.cache.request_coordinator import RequestCoordinator
from core.trans.interface import (
    EngineAttributes,
    EngineNotFoundError,
    EngineUnavailableError,
    InvalidInputError,
    NetworkError,
    ProviderError,
    Result,
    TransInterface,
    TranslationTimeoutError,
)
from core.trans.manager import TransManager
from core.trans.registry import EngineRegistry
from models.config_models import Config
from models.event_models import TranslationEvent, TranslationEventType
from models.translation_models import TranslationRequest, TranslationResult

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Mapping
    from pathlib import Path

    from models.config_models import EngineSettings


class ScriptedEngine(TransInterface):
    """Engine whose answers are scripted per instance."""

    def __init__(self, name: str, outcomes: list[Result | Exception] | None = None, *, available: bool = True) -> None:
        super().__init__()
        self.engine_attributes = EngineAttributes(name=name)
        self.outcomes: list[Result | Exception] = list(outcomes or [])
        self.default: Result | Exception = Result(text="translated", detected_source_lang="en")
        self.available: bool = available
        self.calls: list[tuple[str, str, str | None]] = []
        self.detect_outcome: str | Exception = "en"

    @property
    def is_available(self) -> bool:
        return self.available

    @staticmethod
    def fetch_engine_name() -> str:
        return "scripted_manager_test"

    def initialize(self, settings: EngineSettings) -> None:
        _ = settings

    def validate_config(self) -> bool:
        return True

    async def translation(
        self,
        content: str,
        tgt_lang: str,
        src_lang: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Result:
        _ = options
        self.calls.append((content, tgt_lang, src_lang))
        outcome: Result | Exception = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def detect_language(self, content: str) -> str:
        _ = content
        if isinstance(self.detect_outcome, Exception):
            raise self.detect_outcome
        return self.detect_outcome


class EventCollector:
    def __init__(self) -> None:
        self.events: list[TranslationEvent] = []

    def handle_event(self, event: TranslationEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[TranslationEventType]:
        return [event.type for event in self.events]


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def google() -> ScriptedEngine:
    return ScriptedEngine("google")


@pytest.fixture
def gpt4() -> ScriptedEngine:
    return ScriptedEngine("gpt4")


@pytest.fixture
def registry(google: ScriptedEngine, gpt4: ScriptedEngine) -> EngineRegistry:
    registry = EngineRegistry()
    registry.register("google", google)
    registry.register("gpt4", gpt4)
    return registry


@pytest.fixture
async def cache_manager(config: Config, tmp_path: Path) -> AsyncGenerator[TranslationCacheManager]:
    manager = TranslationCacheManager(config, db_path=tmp_path / "cache.db")
    await manager.component_load()
    yield manager
    await manager.component_teardown()


@pytest.fixture
def collector() -> EventCollector:
    return EventCollector()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def manager(
    config: Config,
    registry: EngineRegistry,
    cache_manager: TranslationCacheManager,
    collector: EventCollector,
    sleeps: list[float],
) -> TransManager:
    manager = TransManager(
        config,
        registry,
        cache_manager=cache_manager,
        coordinator=RequestCoordinator(max_concurrent=3, result_ttl_sec=0),
        listeners=[collector],
    )

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    manager._sleep = fake_sleep  # noqa: SLF001
    return manager


def make_request(text: str = "Hello", engine: str = "google", account_id: str | None = None) -> TranslationRequest:
    return TranslationRequest(text=text, source_lang="en", target_lang="zh-CN", engine=engine, account_id=account_id)


@pytest.mark.asyncio
async def test_translate_then_cache_hit(
    manager: TransManager, google: ScriptedEngine, collector: EventCollector
) -> None:
    """The second identical request should come from the cache without another engine call."""
    google.default = Result(text="你好", detected_source_lang="en")

    first: TranslationResult = await manager.translate(make_request())
    second: TranslationResult = await manager.translate(make_request())

    assert first.translated_text == "你好"
    assert first.detected_lang == "en"
    assert first.engine_used == "google"
    assert first.cached is False
    assert first.response_time_ms is not None
    assert second.translated_text == "你好"
    assert second.cached is True
    assert second.response_time_ms is None
    assert len(google.calls) == 1
    assert collector.types == [TranslationEventType.SUCCESS, TranslationEventType.CACHE_HIT]


@pytest.mark.asyncio
async def test_fallback_uses_next_available_engine(
    manager: TransManager, google: ScriptedEngine, gpt4: ScriptedEngine, sleeps: list[float]
) -> None:
    """A failure of the requested engine should switch to the next engine without waiting."""
    google.default = NetworkError("connection refused")
    gpt4.default = Result(text="你好", detected_source_lang="en")

    result: TranslationResult = await manager.translate(make_request())

    assert result.engine_used == "gpt4"
    assert result.translated_text == "你好"
    assert len(google.calls) == 1
    assert len(gpt4.calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_result_is_cached_under_engine_that_produced_it(
    manager: TransManager, google: ScriptedEngine, gpt4: ScriptedEngine, cache_manager: TranslationCacheManager
) -> None:
    google.default = NetworkError("down")
    gpt4.default = Result(text="bonjour", detected_source_lang="en")

    await manager.translate(make_request())

    gpt4_key: str = TranslationCacheManager.generate_key("Hello", "en", "zh-CN", "gpt4")
    google_key: str = TranslationCacheManager.generate_key("Hello", "en", "zh-CN", "google")
    assert (await cache_manager.get(gpt4_key)) is not None
    assert (await cache_manager.get(google_key)) is None


@pytest.mark.asyncio
async def test_fallback_happens_only_once(
    manager: TransManager, google: ScriptedEngine, gpt4: ScriptedEngine, sleeps: list[float]
) -> None:
    """After the fallback switch, later failures retry the same engine with backoff."""
    google.default = NetworkError("down")
    gpt4.outcomes = [TranslationTimeoutError("slow")]
    gpt4.default = Result(text="ok", detected_source_lang="en")

    result: TranslationResult = await manager.translate(make_request())

    assert result.engine_used == "gpt4"
    assert len(google.calls) == 1
    assert len(gpt4.calls) == 2
    assert sleeps == [2.0]


@pytest.mark.asyncio
async def test_retry_exhaustion_raises_last_error(
    config: Config,
    manager: TransManager,
    google: ScriptedEngine,
    gpt4: ScriptedEngine,
    collector: EventCollector,
    sleeps: list[float],
) -> None:
    """An always failing engine should be tried MAX_RETRIES times and its last error raised."""
    gpt4.available = False
    google.outcomes = [NetworkError("first"), ProviderError("second", status=500)]
    google.default = TranslationTimeoutError("last")

    with pytest.raises(TranslationTimeoutError, match="last"):
        await manager.translate(make_request())

    assert len(google.calls) == config.TRANSLATION.MAX_RETRIES
    assert sleeps == [1.0, 2.0]
    assert collector.types == [TranslationEventType.ERROR]
    assert collector.events[0].engine == "google"
    assert collector.events[0].error == "last"


@pytest.mark.asyncio
async def test_oversize_input_is_rejected_before_any_call(
    config: Config, manager: TransManager, google: ScriptedEngine, collector: EventCollector
) -> None:
    config.TRANSLATION.MAX_TEXT_LENGTH = 10

    with pytest.raises(InvalidInputError):
        await manager.translate(make_request(text="x" * 11))

    assert google.calls == []
    assert collector.types == [TranslationEventType.ERROR]


@pytest.mark.asyncio
async def test_invalid_language_code_is_rejected(manager: TransManager, google: ScriptedEngine) -> None:
    request = TranslationRequest(text="Hello", source_lang="en", target_lang="not a code", engine="google")

    with pytest.raises(InvalidInputError):
        await manager.translate(request)

    assert google.calls == []


@pytest.mark.asyncio
async def test_unknown_engine_raises_not_found(manager: TransManager) -> None:
    with pytest.raises(EngineNotFoundError):
        await manager.translate(make_request(engine="missing"))


@pytest.mark.asyncio
async def test_unconfigured_engine_raises_unavailable(manager: TransManager, gpt4: ScriptedEngine) -> None:
    gpt4.available = False

    with pytest.raises(EngineUnavailableError):
        await manager.translate(make_request(engine="gpt4"))


@pytest.mark.asyncio
async def test_accounts_have_separate_cache_entries(
    manager: TransManager, google: ScriptedEngine, cache_manager: TranslationCacheManager
) -> None:
    await manager.translate(make_request(account_id="A"))
    await manager.translate(make_request(account_id="B"))
    assert len(google.calls) == 2

    removed: int = await cache_manager.clear_by_account("A")
    assert removed == 1

    result_a: TranslationResult = await manager.translate(make_request(account_id="A"))
    result_b: TranslationResult = await manager.translate(make_request(account_id="B"))
    assert result_a.cached is False
    assert result_b.cached is True
    assert len(google.calls) == 3


@pytest.mark.asyncio
async def test_output_is_escaped(manager: TransManager, google: ScriptedEngine) -> None:
    google.default = Result(text="<b>bold</b>", detected_source_lang="en")

    result: TranslationResult = await manager.translate(make_request())

    assert result.translated_text == "&lt;b&gt;bold&lt;&#x2F;b&gt;"


@pytest.mark.asyncio
async def test_output_escaping_can_be_disabled(config: Config, manager: TransManager, google: ScriptedEngine) -> None:
    config.TRANSLATION.ESCAPE_OUTPUT = False
    google.default = Result(text="<b>bold</b>", detected_source_lang="en")

    result: TranslationResult = await manager.translate(make_request())

    assert result.translated_text == "<b>bold</b>"


@pytest.mark.asyncio
async def test_unexpected_engine_exception_is_wrapped(
    manager: TransManager, google: ScriptedEngine, gpt4: ScriptedEngine
) -> None:
    gpt4.available = False
    google.default = RuntimeError("bug")

    with pytest.raises(ProviderError, match="RuntimeError"):
        await manager.translate(make_request())


@pytest.mark.asyncio
async def test_concurrent_identical_requests_make_one_call(manager: TransManager, google: ScriptedEngine) -> None:
    release = asyncio.Event()
    original = google.translation

    async def slow_translation(*args: Any, **kwargs: Any) -> Result:
        await release.wait()
        return await original(*args, **kwargs)

    google.translation = slow_translation  # type: ignore[method-assign]

    tasks = [asyncio.create_task(manager.translate(make_request())) for _ in range(4)]
    coordinator: RequestCoordinator | None = manager.coordinator
    assert coordinator is not None
    async with asyncio.timeout(5):
        while coordinator.get_statistics()["deduplicated"] < 3:
            await asyncio.sleep(0.001)
    release.set()
    results: list[TranslationResult] = await asyncio.gather(*tasks)

    assert len(google.calls) == 1
    assert {result.translated_text for result in results} == {"translated"}


@pytest.mark.asyncio
async def test_detected_language_falls_back_to_request(manager: TransManager, google: ScriptedEngine) -> None:
    google.default = Result(text="ok", detected_source_lang=None)

    result: TranslationResult = await manager.translate(make_request())

    assert result.detected_lang == "en"


@pytest.mark.asyncio
async def test_detect_language_tries_engines_in_order(
    manager: TransManager, google: ScriptedEngine, gpt4: ScriptedEngine
) -> None:
    google.detect_outcome = NetworkError("down")
    gpt4.detect_outcome = "ja"

    assert await manager.detect_language("こんにちは") == "ja"


@pytest.mark.asyncio
async def test_detect_language_returns_auto_when_all_fail(
    manager: TransManager, google: ScriptedEngine, gpt4: ScriptedEngine
) -> None:
    google.detect_outcome = NetworkError("down")
    gpt4.detect_outcome = TranslationTimeoutError("slow")

    assert await manager.detect_language("hello") == "auto"


def test_get_engines_lists_availability(manager: TransManager, gpt4: ScriptedEngine) -> None:
    gpt4.available = False

    engines: list[dict[str, str | bool]] = manager.get_engines()

    assert engines == [
        {"name": "google", "display_name": "google", "available": True},
        {"name": "gpt4", "display_name": "gpt4", "available": False},
    ]


@pytest.mark.asyncio
async def test_listener_errors_do_not_fail_translation(manager: TransManager) -> None:
    class BrokenListener:
        def handle_event(self, event: TranslationEvent) -> None:
            _ = event
            msg = "listener bug"
            raise RuntimeError(msg)

    manager.add_listener(BrokenListener())

    result: TranslationResult = await manager.translate(make_request())

    assert result.translated_text == "translated"
