from __future__ import annotations

import asyncio
import time
from functools import partial
from typing import TYPE_CHECKING

from core.trans.interface import (
    InvalidInputError,
    ProviderError,
    Result,
    TransInterface,
    TranslateExceptionError,
)
from models.event_models import TranslationEvent, TranslationEventType
from models.translation_models import TranslationRequest, TranslationResult
from utils.content_security import CleanedText, ContentSecurity
from utils.language_utils import AUTO_LANGUAGE, LanguageUtils
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from core.cache.manager import TranslationCacheManager
    from core.cache.request_coordinator import RequestCoordinator
    from core.trans.registry import EngineRegistry
    from models.cache_models import TranslationCacheEntry
    from models.config_models import Config
    from models.event_models import TranslationEventListener


__all__: list[str] = ["TransManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TransManager:
    """Orchestrator for translation requests.

    A request is validated, looked up in the cache and, on a miss, admitted through the
    coordinator to the engine call loop. The loop switches once to a fallback engine after the
    first failure and retries with exponential backoff until the attempts are exhausted.
    Every call to ``translate`` emits exactly one lifecycle event to the listeners.

    Args:
        config (Config): Application configuration.
        registry (EngineRegistry): Initialized engines.
        cache_manager (TranslationCacheManager | None): Two-tier cache; None disables caching.
        coordinator (RequestCoordinator | None): Admission control; None runs calls directly.
        listeners (Iterable[TranslationEventListener] | None): Receivers of lifecycle events.
    """

    def __init__(
        self,
        config: Config,
        registry: EngineRegistry,
        cache_manager: TranslationCacheManager | None = None,
        coordinator: RequestCoordinator | None = None,
        listeners: Iterable[TranslationEventListener] | None = None,
    ) -> None:
        self.config: Config = config
        self.registry: EngineRegistry = registry
        self.cache_manager: TranslationCacheManager | None = cache_manager
        self.coordinator: RequestCoordinator | None = coordinator
        self._listeners: list[TranslationEventListener] = list(listeners or [])
        # Replaced in tests to avoid real waits.
        self._sleep = asyncio.sleep
        logger.debug("Registered translation engines: %s", self.registry.names())

    def add_listener(self, listener: TranslationEventListener) -> None:
        self._listeners.append(listener)

    @property
    def max_attempts(self) -> int:
        return max(1, self.config.TRANSLATION.MAX_RETRIES)

    @property
    def fallback_order(self) -> list[str]:
        """Return the engine priority order used for fallback."""
        return list(self.config.TRANSLATION.FALLBACK_ORDER) or self.registry.names()

    def _emit(self, event: TranslationEvent) -> None:
        for listener in self._listeners:
            try:
                listener.handle_event(event)
            except Exception as err:  # noqa: BLE001
                logger.error("Translation event listener failed: %s", err)

    def _validate(self, request: TranslationRequest) -> TranslationRequest:
        """Clean the text and normalize the language codes of a request.

        Raises:
            InvalidInputError: If the text or a language code is rejected.
        """
        cleaned: CleanedText = ContentSecurity.clean_input(
            request.text, max_length=self.config.TRANSLATION.MAX_TEXT_LENGTH
        )
        if not cleaned.valid:
            raise InvalidInputError(cleaned.error or "Invalid input text")

        source_lang: str = LanguageUtils.normalize_language_code(request.source_lang or AUTO_LANGUAGE)
        target_lang: str = LanguageUtils.normalize_language_code(request.target_lang)
        if not ContentSecurity.validate_language_code(source_lang):
            msg: str = f"Invalid source language code: '{request.source_lang}'"
            raise InvalidInputError(msg)
        if target_lang == AUTO_LANGUAGE or not ContentSecurity.validate_language_code(target_lang):
            msg = f"Invalid target language code: '{request.target_lang}'"
            raise InvalidInputError(msg)

        return TranslationRequest(
            text=cleaned.text,
            source_lang=source_lang,
            target_lang=target_lang,
            engine=request.engine,
            options=request.options,
            account_id=request.account_id,
        )

    def _cache_key(self, request: TranslationRequest, engine_name: str) -> str:
        return StringUtils.generate_hash_key(
            source_text=request.text,
            source_lang=request.source_lang,
            target_lang=request.target_lang,
            engine=engine_name,
            account_id=request.account_id,
        )

    def _finalize_text(self, text: str) -> str:
        if self.config.TRANSLATION.ESCAPE_OUTPUT:
            return ContentSecurity.clean_output(text)
        return text

    async def _fetch_cache(self, request: TranslationRequest, engine_name: str) -> TranslationResult | None:
        if self.cache_manager is None:
            return None
        entry: TranslationCacheEntry | None = await self.cache_manager.get(self._cache_key(request, engine_name))
        if entry is None:
            return None
        return TranslationResult(
            translated_text=self._finalize_text(entry.translated_text),
            detected_lang=entry.source_lang,
            engine_used=entry.engine,
            cached=True,
        )

    async def translate(self, request: TranslationRequest) -> TranslationResult:
        """Translate a request.

        Args:
            request (TranslationRequest): The request to serve.

        Returns:
            TranslationResult: Sanitized result; ``cached`` tells whether a live call was made.

        Raises:
            InvalidInputError: If sanitization rejects the text or a language code.
            EngineNotFoundError: If the requested engine is not registered.
            EngineUnavailableError: If the requested engine is not configured.
            QueueFullError: If the coordinator queue is full.
            TranslateExceptionError: The last engine error once retries are exhausted.
        """
        char_count: int = len(request.text or "")
        try:
            request = self._validate(request)
            self.registry.require(request.engine)

            result: TranslationResult | None = await self._fetch_cache(request, request.engine)
            if result is None:
                work = partial(self._translate_with_policy, request)
                if self.coordinator is not None:
                    result = await self.coordinator.execute_request(self._cache_key(request, request.engine), work)
                else:
                    result = await work()
        except TranslateExceptionError as err:
            logger.error("Translation failed (engine: '%s'): %s", request.engine, err.safe_message)
            self._emit(
                TranslationEvent(
                    type=TranslationEventType.ERROR,
                    engine=request.engine,
                    char_count=char_count,
                    account_id=request.account_id,
                    error=err.safe_message,
                )
            )
            raise

        if result.cached:
            logger.debug("Translation served from cache (engine: '%s')", result.engine_used)
            self._emit(
                TranslationEvent(
                    type=TranslationEventType.CACHE_HIT,
                    engine=result.engine_used,
                    char_count=char_count,
                    account_id=request.account_id,
                )
            )
        else:
            self._emit(
                TranslationEvent(
                    type=TranslationEventType.SUCCESS,
                    engine=result.engine_used,
                    char_count=char_count,
                    response_time_ms=result.response_time_ms,
                    account_id=request.account_id,
                )
            )
        return result

    def _next_fallback_engine(self, current: str) -> str | None:
        """Return the next available engine after ``current`` in the fallback order.

        When ``current`` is not in the order, the search starts from the beginning.
        """
        order: list[str] = self.fallback_order
        start: int = order.index(current) + 1 if current in order else 0
        for name in order[start:]:
            if name != current and self.registry.is_available(name):
                return name
        return None

    async def _call_engine(self, engine_name: str, request: TranslationRequest) -> Result:
        engine: TransInterface = self.registry.require(engine_name)
        try:
            return await engine.translation(
                content=request.text,
                tgt_lang=request.target_lang,
                src_lang=request.source_lang,
                options=request.options,
            )
        except TranslateExceptionError:
            raise
        except Exception as err:  # noqa: BLE001
            msg: str = f"Unexpected error from '{engine_name}': {type(err).__name__}"
            raise ProviderError(msg) from err

    async def _translate_with_policy(self, request: TranslationRequest) -> TranslationResult:  # noqa: C901
        """Run the engine call loop for a validated request that missed the cache."""
        start: float = time.perf_counter()
        current: str = request.engine
        last_error: TranslateExceptionError | None = None

        for attempt in range(self.max_attempts):
            try:
                if attempt > 0:
                    cached: TranslationResult | None = await self._fetch_cache(request, current)
                    if cached is not None:
                        return cached

                result: Result = await self._call_engine(current, request)
                text: str = StringUtils.ensure_str(result.text)
                detected: str = result.detected_source_lang or request.source_lang
                if self.cache_manager is not None:
                    await self.cache_manager.set(
                        self._cache_key(request, current),
                        translated_text=text,
                        source_lang=detected,
                        target_lang=request.target_lang,
                        engine=current,
                        account_id=request.account_id,
                    )

                elapsed_ms: float = round((time.perf_counter() - start) * 1000, 2)
                logger.info("Translation completed with '%s' in %.2f ms", current, elapsed_ms)
                return TranslationResult(
                    translated_text=self._finalize_text(text),
                    detected_lang=detected,
                    engine_used=current,
                    cached=False,
                    response_time_ms=elapsed_ms,
                )
            except InvalidInputError:
                raise
            except TranslateExceptionError as err:
                last_error = err
                logger.warning("Attempt %d failed with '%s': %s", attempt + 1, current, err.safe_message)

                if attempt == 0:
                    fallback: str | None = self._next_fallback_engine(current)
                    if fallback is not None:
                        logger.info("Falling back from '%s' to '%s'", current, fallback)
                        current = fallback
                        continue

                if attempt < self.max_attempts - 1:
                    delay: float = self.config.TRANSLATION.BACKOFF_BASE_SEC * (2**attempt)
                    logger.debug("Retrying in %.1f sec", delay)
                    await self._sleep(delay)

        if last_error is None:
            msg = "Translation failed without an error"
            raise ProviderError(msg)
        raise last_error

    async def detect_language(self, text: str) -> str:
        """Detect the language of a text with the first engine that succeeds.

        Returns:
            str: Detected language code, or 'auto' when every engine failed.
        """
        cleaned: CleanedText = ContentSecurity.clean_input(text, max_length=self.config.TRANSLATION.MAX_TEXT_LENGTH)
        if not cleaned.valid:
            return AUTO_LANGUAGE

        for name in self.registry.available_names():
            engine: TransInterface | None = self.registry.get(name)
            if engine is None:
                continue
            try:
                detected: str = await engine.detect_language(cleaned.text)
            except Exception as err:  # noqa: BLE001
                logger.warning("Language detection failed with '%s': %s", name, err)
                continue
            if detected and detected != AUTO_LANGUAGE:
                logger.debug("Detected language '%s' with '%s'", detected, name)
                return LanguageUtils.normalize_language_code(detected)
        return AUTO_LANGUAGE

    def get_engines(self) -> list[dict[str, str | bool]]:
        """Return the registered engines and their availability."""
        return [
            {
                "name": name,
                "display_name": engine.engine_name,
                "available": engine.is_available,
            }
            for name in self.registry.names()
            if (engine := self.registry.get(name)) is not None
        ]
