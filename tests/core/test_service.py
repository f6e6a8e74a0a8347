"""Tests for TranslationService."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from core.service import TranslationService
from core.trans.interface import EngineAttributes, Result, TransInterface
from core.trans.registry import EngineRegistry
from models.account_models import AccountConfig, GlobalSettings
from models.config_models import Config

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Mapping
    from pathlib import Path

    from models.config_models import EngineSettings
    from models.translation_models import TranslationResult


class EchoEngine(TransInterface):
    """Engine that prefixes the text with the target language."""

    def __init__(self) -> None:
        super().__init__()
        self.engine_attributes = EngineAttributes(name="Echo")
        self.calls: int = 0
        self.closed: bool = False

    @property
    def is_available(self) -> bool:
        return True

    @staticmethod
    def fetch_engine_name() -> str:
        return "echo_service_test"

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
        self.calls += 1
        return Result(text=f"[{tgt_lang}] {content}", detected_source_lang=src_lang or "en")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def config(tmp_path: Path) -> Config:
    config = Config()
    config.GENERAL.DATA_DIR = str(tmp_path)
    config.TRANSLATION.SOURCE_LANGUAGE = "en"
    config.TRANSLATION.FALLBACK_ORDER = ["google", "gpt4"]
    config.COORDINATOR.RESULT_TTL_SEC = 0.0
    return config


@pytest.fixture
def google() -> EchoEngine:
    return EchoEngine()


@pytest.fixture
def gpt4() -> EchoEngine:
    return EchoEngine()


@pytest.fixture
async def service(config: Config, google: EchoEngine, gpt4: EchoEngine) -> AsyncGenerator[TranslationService]:
    registry = EngineRegistry()
    registry.register("google", google)
    registry.register("gpt4", gpt4)
    service = TranslationService(config, registry)
    await service.async_init(start_maintenance=False)
    yield service
    await service.shutdown()


def test_components_require_initialization(config: Config) -> None:
    service = TranslationService(config)

    with pytest.raises(RuntimeError, match="not initialized"):
        _ = service.trans_manager
    with pytest.raises(RuntimeError, match="not initialized"):
        _ = service.stats_manager
    assert service.cache_manager is None
    assert service.coordinator is None


@pytest.mark.asyncio
async def test_translate_uses_configured_defaults(service: TranslationService, google: EchoEngine) -> None:
    first: TranslationResult = await service.translate("Hello")
    second: TranslationResult = await service.translate("Hello")

    assert first.translated_text == "[zh-CN] Hello"
    assert first.engine_used == "google"
    assert first.cached is False
    assert second.cached is True
    assert google.calls == 1

    today: dict[str, Any] = service.stats_manager.get_today_stats()
    assert today["requests"] == 2
    assert today["cache_hits"] == 1


@pytest.mark.asyncio
async def test_explicit_parameters_override_defaults(service: TranslationService, gpt4: EchoEngine) -> None:
    result: TranslationResult = await service.translate("Hi", source_lang="en", target_lang="ja", engine="gpt4")

    assert result.translated_text == "[ja] Hi"
    assert result.engine_used == "gpt4"
    assert gpt4.calls == 1


@pytest.mark.asyncio
async def test_account_settings_fill_missing_parameters(service: TranslationService, gpt4: EchoEngine) -> None:
    settings = AccountConfig(global_settings=GlobalSettings(engine="gpt4", source_lang="en", target_lang="fr"))
    await service.save_config("alice", settings)

    result: TranslationResult = await service.translate("Hello", account_id="alice")

    assert result.translated_text == "[fr] Hello"
    assert result.engine_used == "gpt4"
    assert (await service.get_config("alice")).global_settings.target_lang == "fr"
    assert gpt4.calls == 1


@pytest.mark.asyncio
async def test_get_stats_document(service: TranslationService) -> None:
    await service.translate("Hello")

    stats: dict[str, Any] = await service.get_stats()

    assert stats["statistics"]["total"]["requests"] == 1
    assert stats["engines"]["google"]["success"] == 1
    assert stats["available_engines"] == ["google", "gpt4"]
    assert stats["cache"]["durable_entries"] == 1
    assert stats["coordinator"]["executed"] == 1


@pytest.mark.asyncio
async def test_get_engines(service: TranslationService) -> None:
    engines: list[dict[str, str | bool]] = service.get_engines()

    assert [engine["name"] for engine in engines] == ["google", "gpt4"]
    assert all(engine["available"] for engine in engines)


@pytest.mark.asyncio
async def test_clear_account_data(service: TranslationService, google: EchoEngine) -> None:
    await service.save_config("alice", AccountConfig())
    await service.translate("Hello", account_id="alice")
    await service.translate("Hello")

    summary: dict[str, int | bool] = await service.clear_all_user_data("alice")

    assert summary == {"cache_entries": 1, "config_deleted": True}
    shared: TranslationResult = await service.translate("Hello")
    assert shared.cached is True
    again: TranslationResult = await service.translate("Hello", account_id="alice")
    assert again.cached is False
    assert google.calls == 3


@pytest.mark.asyncio
async def test_clear_everything(service: TranslationService, config: Config) -> None:
    await service.translate("Hello")

    summary: dict[str, int | bool] = await service.clear_all_user_data()

    assert summary == {"cache_cleared": True, "statistics_reset": True}
    assert service.stats_manager.get_total_stats()["requests"] == 0
    result: TranslationResult = await service.translate("Hello")
    assert result.cached is False


@pytest.mark.asyncio
async def test_run_maintenance_persists_statistics(service: TranslationService, tmp_path: Path) -> None:
    await service.translate("Hello")

    await service.run_maintenance(force_cleanup=True)

    assert (tmp_path / service.config.STATISTICS.FILE).exists()
    assert service.stats_manager.is_dirty is False


@pytest.mark.asyncio
async def test_cache_can_be_disabled(config: Config, google: EchoEngine) -> None:
    config.CACHE.ENABLED = False
    registry = EngineRegistry()
    registry.register("google", google)
    service = TranslationService(config, registry)
    await service.async_init(start_maintenance=False)
    try:
        await service.translate("Hello")
        result: TranslationResult = await service.translate("Hello")
        stats: dict[str, Any] = await service.get_stats()
    finally:
        await service.shutdown()

    assert result.cached is False
    assert google.calls == 2
    assert "cache" not in stats


@pytest.mark.asyncio
async def test_shutdown_stops_maintenance_and_closes_engines(config: Config, google: EchoEngine) -> None:
    registry = EngineRegistry()
    registry.register("google", google)
    service = TranslationService(config, registry)
    await service.async_init()
    task: asyncio.Task[None] | None = service._maintenance_task  # noqa: SLF001
    assert task is not None

    await service.shutdown()

    assert task.cancelled() is True
    assert google.closed is True


@pytest.fixture
async def reusing_service(config: Config, google: EchoEngine) -> AsyncGenerator[TranslationService]:
    config.COORDINATOR.RESULT_TTL_SEC = 5.0
    registry = EngineRegistry()
    registry.register("google", google)
    service = TranslationService(config, registry)
    await service.async_init(start_maintenance=False)
    yield service
    await service.shutdown()


@pytest.mark.asyncio
async def test_full_clear_drops_short_lived_results(reusing_service: TranslationService, google: EchoEngine) -> None:
    await reusing_service.translate("Hello")

    await reusing_service.clear_all_user_data()
    result: TranslationResult = await reusing_service.translate("Hello")

    assert result.cached is False
    assert google.calls == 2


@pytest.mark.asyncio
async def test_account_clear_drops_short_lived_results(
    reusing_service: TranslationService, google: EchoEngine
) -> None:
    await reusing_service.save_config("alice", AccountConfig())
    await reusing_service.translate("Hello", account_id="alice")

    await reusing_service.clear_all_user_data("alice")
    result: TranslationResult = await reusing_service.translate("Hello", account_id="alice")

    assert result.cached is False
    assert google.calls == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["clear_cache", "clear_translation_history"])
async def test_cache_clears_drop_short_lived_results(
    reusing_service: TranslationService, google: EchoEngine, method: str
) -> None:
    await reusing_service.translate("Hello")

    await getattr(reusing_service, method)()
    await reusing_service.translate("Hello")

    assert google.calls == 2


@pytest.mark.asyncio
async def test_reused_result_without_cache_counts_as_cache_hit(config: Config, google: EchoEngine) -> None:
    config.CACHE.ENABLED = False
    config.COORDINATOR.RESULT_TTL_SEC = 5.0
    registry = EngineRegistry()
    registry.register("google", google)
    service = TranslationService(config, registry)
    await service.async_init(start_maintenance=False)
    try:
        first: TranslationResult = await service.translate("Hello")
        second: TranslationResult = await service.translate("Hello")
    finally:
        await service.shutdown()

    assert google.calls == 1
    assert first.cached is False
    assert first.response_time_ms is not None
    assert second.cached is True
    assert second.response_time_ms is None
    assert "responseTimeMs" not in second.to_dict()

    today: dict[str, Any] = service.stats_manager.get_today_stats()
    assert today["requests"] == 2
    assert today["cache_hits"] == 1
    assert today["timed"] == 1
