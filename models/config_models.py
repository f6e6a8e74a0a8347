"""Configuration data models for the translation engine.

Each dataclass mirrors one section of the INI configuration file. Field names are UPPERCASE
to match the INI keys, and the declared default type decides how the loader coerces values.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = [
    "Cache",
    "Config",
    "Coordinator",
    "EngineSettings",
    "General",
    "Statistics",
    "Translation",
]


@dataclass
class General:
    DEBUG: bool = False
    VERSION: str = ""
    SCRIPT_NAME: str = ""
    LOG_FILE: str = "translator.log"
    LOG_LEVEL: str = "INFO"
    DATA_DIR: str = "data"


@dataclass
class Translation:
    DEFAULT_ENGINE: str = "google"
    SOURCE_LANGUAGE: str = "auto"
    TARGET_LANGUAGE: str = "zh-CN"
    ENGINES: list[str] = field(default_factory=lambda: ["google"])
    FALLBACK_ORDER: list[str] = field(default_factory=lambda: ["google", "gpt4", "gemini", "deepseek"])
    MAX_RETRIES: int = 3
    BACKOFF_BASE_SEC: float = 1.0
    MAX_TEXT_LENGTH: int = 10000
    ESCAPE_OUTPUT: bool = True
    ACCOUNTS_FILE: str = "accounts.json"


@dataclass
class Cache:
    ENABLED: bool = True
    MEMORY_CAPACITY: int = 1000
    TTL_DAYS: float = 7.0
    DB_FILE: str = "translation_cache.db"
    CLEANUP_INTERVAL_HOURS: float = 24.0


@dataclass
class Coordinator:
    MAX_CONCURRENT: int = 5
    RESULT_TTL_SEC: float = 5.0
    MAX_QUEUE_SIZE: int = 1000


@dataclass
class Statistics:
    FILE: str = "translation_stats.json"
    RETENTION_DAYS: int = 30
    SAVE_INTERVAL_SEC: float = 60.0


@dataclass
class EngineSettings:
    ENABLED: bool = False
    API_KEY: str = ""
    ENDPOINT: str = ""
    MODEL: str = ""
    TIMEOUT: float = 30.0
    MAX_TOKENS: int = 2000
    TEMPERATURE: float = 0.3


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    CACHE: Cache = field(default_factory=Cache)
    COORDINATOR: Coordinator = field(default_factory=Coordinator)
    STATISTICS: Statistics = field(default_factory=Statistics)
    GOOGLE: EngineSettings = field(default_factory=lambda: EngineSettings(ENABLED=True, TIMEOUT=10.0))
    DEEPL: EngineSettings = field(default_factory=lambda: EngineSettings(TIMEOUT=10.0))
    GPT4: EngineSettings = field(
        default_factory=lambda: EngineSettings(
            ENDPOINT="https://api.openai.com/v1/chat/completions",
            MODEL="gpt-4",
        )
    )
    GEMINI: EngineSettings = field(
        default_factory=lambda: EngineSettings(
            ENDPOINT="https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
            MODEL="gemini-1.5-flash",
        )
    )
    DEEPSEEK: EngineSettings = field(
        default_factory=lambda: EngineSettings(
            ENDPOINT="https://api.deepseek.com/v1/chat/completions",
            MODEL="deepseek-chat",
        )
    )
    CUSTOM: EngineSettings = field(default_factory=EngineSettings)

    def engine_settings(self, engine_name: str) -> EngineSettings | None:
        """Return the settings section for an engine name, or None if there is none."""
        settings = getattr(self, engine_name.upper(), None)
        return settings if isinstance(settings, EngineSettings) else None
