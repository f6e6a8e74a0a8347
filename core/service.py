"""Service facade for the translation engine.

Wires the engine registry, cache, coordinator, statistics and account store from the
configuration and exposes the call surface used by the UI layer.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import TYPE_CHECKING, Any

from config.account_store import AccountConfigStore
from core.cache.manager import TranslationCacheManager
from core.cache.request_coordinator import RequestCoordinator
from core.stats.manager import StatsManager
from core.trans.manager import TransManager
from core.trans.registry import EngineRegistry
from models.translation_models import TranslationRequest
from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

    from models.account_models import AccountConfig
    from models.config_models import Config
    from models.translation_models import TranslationResult

__all__: list[str] = ["TranslationService"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

SECONDS_PER_HOUR: int = 3600


class TranslationService:
    """Entry point of the translation engine.

    Call ``async_init`` inside a running event loop before use and ``shutdown`` when done.

    Args:
        config (Config): Application configuration.
        registry (EngineRegistry | None): Prebuilt registry; built from the configuration when None.
    """

    def __init__(self, config: Config, registry: EngineRegistry | None = None) -> None:
        self.config: Config = config
        self._registry: EngineRegistry | None = registry
        self._cache_manager: TranslationCacheManager | None = None
        self._coordinator: RequestCoordinator | None = None
        self._stats_manager: StatsManager | None = None
        self._account_store: AccountConfigStore | None = None
        self._trans_manager: TransManager | None = None
        self._maintenance_task: asyncio.Task[None] | None = None
        self._last_cleanup: float = 0.0

    async def async_init(self, *, start_maintenance: bool = True) -> None:
        """Build and load every component."""
        logger.info("TranslationService initialization started")
        if self._registry is None:
            self._registry = EngineRegistry.from_config(self.config)

        if self.config.CACHE.ENABLED:
            self._cache_manager = TranslationCacheManager(self.config)
            await self._cache_manager.component_load()
        else:
            logger.info("Translation cache disabled in configuration")

        self._coordinator = RequestCoordinator(
            max_concurrent=self.config.COORDINATOR.MAX_CONCURRENT,
            result_ttl_sec=self.config.COORDINATOR.RESULT_TTL_SEC,
            max_queue_size=self.config.COORDINATOR.MAX_QUEUE_SIZE,
        )
        await self._coordinator.component_load()

        self._stats_manager = StatsManager(self.config)
        await self._stats_manager.component_load()

        self._account_store = AccountConfigStore(
            FileUtils.resolve_data_path(self.config.GENERAL.DATA_DIR, self.config.TRANSLATION.ACCOUNTS_FILE)
        )
        await self._account_store.component_load()

        self._trans_manager = TransManager(
            self.config,
            self._registry,
            cache_manager=self._cache_manager,
            coordinator=self._coordinator,
            listeners=[self._stats_manager],
        )
        self._last_cleanup = time.monotonic()

        if start_maintenance and self._maintenance_task is None:
            self._maintenance_task = asyncio.create_task(self._maintenance_loop(), name="translation_maintenance")
        logger.info("TranslationService initialized with engines: %s", self.registry.names())

    @property
    def registry(self) -> EngineRegistry:
        if self._registry is None:
            msg = "TranslationService is not initialized"
            raise RuntimeError(msg)
        return self._registry

    @property
    def trans_manager(self) -> TransManager:
        if self._trans_manager is None:
            msg = "TranslationService is not initialized"
            raise RuntimeError(msg)
        return self._trans_manager

    @property
    def stats_manager(self) -> StatsManager:
        if self._stats_manager is None:
            msg = "TranslationService is not initialized"
            raise RuntimeError(msg)
        return self._stats_manager

    @property
    def account_store(self) -> AccountConfigStore:
        if self._account_store is None:
            msg = "TranslationService is not initialized"
            raise RuntimeError(msg)
        return self._account_store

    @property
    def cache_manager(self) -> TranslationCacheManager | None:
        return self._cache_manager

    @property
    def coordinator(self) -> RequestCoordinator | None:
        return self._coordinator

    async def translate(
        self,
        text: str,
        source_lang: str | None = None,
        target_lang: str | None = None,
        engine: str | None = None,
        options: Mapping[str, Any] | None = None,
        account_id: str | None = None,
    ) -> TranslationResult:
        """Translate text, filling missing parameters from the account or application defaults.

        Raises:
            TranslateExceptionError: See ``TransManager.translate``.
        """
        default_source: str = self.config.TRANSLATION.SOURCE_LANGUAGE
        default_target: str = self.config.TRANSLATION.TARGET_LANGUAGE
        default_engine: str = self.config.TRANSLATION.DEFAULT_ENGINE
        if account_id:
            account: AccountConfig = await self.account_store.get_config(account_id)
            default_source = account.global_settings.source_lang
            default_target = account.global_settings.target_lang
            default_engine = account.global_settings.engine

        request = TranslationRequest(
            text=text,
            source_lang=source_lang or default_source,
            target_lang=target_lang or default_target,
            engine=engine or default_engine,
            options=options,
            account_id=account_id,
        )
        return await self.trans_manager.translate(request)

    async def detect_language(self, text: str) -> str:
        return await self.trans_manager.detect_language(text)

    async def get_config(self, account_id: str) -> AccountConfig:
        return await self.account_store.get_config(account_id)

    async def save_config(self, account_id: str, config: AccountConfig) -> None:
        await self.account_store.save_config(account_id, config)

    def get_engines(self) -> list[dict[str, str | bool]]:
        return self.trans_manager.get_engines()

    async def get_stats(self) -> dict[str, Any]:
        """Return statistics, cache, coordinator and engine summaries in one document."""
        stats: dict[str, Any] = {
            "statistics": self.stats_manager.get_stats(),
            "engines": self.stats_manager.get_engine_stats(),
            "available_engines": self.registry.available_names(),
        }
        if self._cache_manager is not None:
            stats["cache"] = (await self._cache_manager.get_statistics()).to_dict()
        if self._coordinator is not None:
            stats["coordinator"] = self._coordinator.get_statistics()
        return stats

    def _clear_recent_results(self) -> None:
        if self._coordinator is not None:
            self._coordinator.clear_recent()

    async def clear_cache(self) -> None:
        self._clear_recent_results()
        if self._cache_manager is not None:
            await self._cache_manager.clear_all()

    async def clear_translation_history(self) -> None:
        self._clear_recent_results()
        if self._cache_manager is not None:
            await self._cache_manager.clear_translation_history()

    async def clear_all_user_data(self, account_id: str | None = None) -> dict[str, int | bool]:
        """Remove stored user data.

        With an account id, the account's cache entries and settings are removed. Without one,
        every cache entry and all statistics are removed.

        Returns:
            dict[str, int | bool]: Summary of what was removed.
        """
        if account_id:
            self._clear_recent_results()
            removed: int = 0
            if self._cache_manager is not None:
                removed = await self._cache_manager.clear_by_account(account_id)
            deleted: bool = await self.account_store.delete_config(account_id)
            logger.info("User data cleared for account '%s'", account_id)
            return {"cache_entries": removed, "config_deleted": deleted}

        await self.clear_cache()
        self.stats_manager.reset()
        await self.stats_manager.save()
        logger.info("All user data cleared")
        return {"cache_cleared": self._cache_manager is not None, "statistics_reset": True}

    async def run_maintenance(self, *, force_cleanup: bool = False) -> None:
        """Autosave statistics and run the periodic cleanup when it is due."""
        interval: float = self.config.CACHE.CLEANUP_INTERVAL_HOURS * SECONDS_PER_HOUR
        now: float = time.monotonic()
        if force_cleanup or now - self._last_cleanup >= interval:
            self._last_cleanup = now
            if self._cache_manager is not None:
                removed: int = await self._cache_manager.cleanup()
                logger.info("Cache maintenance removed %d expired entries", removed)
            self.stats_manager.cleanup()
        await self.stats_manager.save()

    async def _maintenance_loop(self) -> None:
        while True:
            await asyncio.sleep(max(1.0, self.config.STATISTICS.SAVE_INTERVAL_SEC))
            try:
                await self.run_maintenance()
            except asyncio.CancelledError:
                raise
            except Exception as err:  # noqa: BLE001
                logger.error("Maintenance error: %s", err)

    async def shutdown(self) -> None:
        """Stop maintenance, flush statistics and close every component."""
        logger.info("TranslationService termination process started.")
        if self._maintenance_task is not None:
            self._maintenance_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._maintenance_task
            self._maintenance_task = None
        if self._coordinator is not None:
            await self._coordinator.component_teardown()
        if self._stats_manager is not None:
            await self._stats_manager.component_teardown()
        if self._cache_manager is not None:
            await self._cache_manager.component_teardown()
        if self._registry is not None:
            await self._registry.close_all()
        logger.info("TranslationService termination process completed.")
