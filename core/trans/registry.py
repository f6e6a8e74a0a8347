"""Registry of initialized translation engine instances.

The registry is built once at startup and handed to the orchestrator. It is read-only during
normal operation; tests build their own registry from dummy engines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import core.trans.engines  # noqa: F401  # registers the engine classes
from core.trans.interface import (
    EngineNotFoundError,
    EngineUnavailableError,
    TransInterface,
    TranslateExceptionError,
)
from models.config_models import EngineSettings
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterator

    from models.config_models import Config

__all__: list[str] = ["PRIMARY_ENGINE", "EngineRegistry"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

PRIMARY_ENGINE: str = "google"


class EngineRegistry:
    """Name to engine instance mapping, in registration order."""

    def __init__(self) -> None:
        self._engines: dict[str, TransInterface] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._engines

    def __len__(self) -> int:
        return len(self._engines)

    def __iter__(self) -> Iterator[TransInterface]:
        return iter(self._engines.values())

    def register(self, name: str, engine: TransInterface) -> None:
        """Register an initialized engine under a name.

        Raises:
            ValueError: If the name is already registered.
        """
        if name in self._engines:
            msg: str = f"A translation engine with the name '{name}' is already registered."
            raise ValueError(msg)
        self._engines[name] = engine
        logger.info("Translation engine registered: '%s'", name)

    def get(self, name: str) -> TransInterface | None:
        return self._engines.get(name)

    def require(self, name: str) -> TransInterface:
        """Return a registered engine that can serve requests.

        Raises:
            EngineNotFoundError: If no engine is registered under the name.
            EngineUnavailableError: If the engine is registered but not available.
        """
        engine: TransInterface | None = self._engines.get(name)
        if engine is None:
            msg: str = f"Translation engine not found: '{name}'"
            raise EngineNotFoundError(msg)
        if not engine.is_available:
            msg = f"Translation engine is not available: '{name}'"
            raise EngineUnavailableError(msg)
        return engine

    def names(self) -> list[str]:
        """Return the registered engine names in registration order."""
        return list(self._engines)

    def available_names(self) -> list[str]:
        """Return the names of engines whose availability check currently passes."""
        return [name for name, engine in self._engines.items() if engine.is_available]

    def is_available(self, name: str) -> bool:
        engine: TransInterface | None = self._engines.get(name)
        return engine is not None and engine.is_available

    async def close_all(self) -> None:
        """Close every registered engine. Failures are logged and do not stop the others."""
        logger.info("Class '%s' termination process started.", self.__class__.__name__)
        for name, engine in self._engines.items():
            try:
                await engine.close()
            except Exception as err:  # noqa: BLE001
                logger.error("Failed to close translation engine '%s': %s", name, err)
        logger.info("Class '%s' termination process completed.", self.__class__.__name__)

    @classmethod
    def from_config(cls, config: Config) -> EngineRegistry:
        """Build a registry from the configuration.

        The primary engine is always registered first. Other engines follow in the order of
        ``TRANSLATION.ENGINES`` and are registered only when their section is enabled; enabled
        engines missing from that list are appended in catalogue order.

        Args:
            config (Config): Application configuration.

        Returns:
            EngineRegistry: Registry holding the initialized engines.
        """
        registry = cls()
        logger.debug("Registered translation engine classes: %s", list(TransInterface.registered))

        ordered: list[str] = [PRIMARY_ENGINE]
        for name in [*config.TRANSLATION.ENGINES, *TransInterface.registered]:
            if name not in ordered:
                ordered.append(name)

        for name in ordered:
            settings: EngineSettings = config.engine_settings(name) or EngineSettings()
            if name != PRIMARY_ENGINE and not settings.ENABLED:
                logger.debug("Translation engine disabled in configuration: '%s'", name)
                continue

            engine_cls: type[TransInterface] | None = TransInterface.registered.get(name)
            if engine_cls is None:
                logger.critical("Translation class not found: '%s'", name)
                continue

            instance: TransInterface = engine_cls()
            try:
                instance.initialize(settings)
            except TranslateExceptionError as err:
                logger.critical("Exception in '%s' translation setup: %s", name, err.safe_message)
                continue
            registry.register(name, instance)
            logger.debug("Engine attributes: %s", instance.engine_attributes)

        return registry
