"""Configuration loading and per-account settings storage.

This package provides utilities for loading, parsing, and validating settings from the
translator.ini file, and the JSON store for per-account translation settings.
"""

from config.account_store import AccountConfigStore, AccountStoreError
from config.loader import (
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigLoaderError,
    ConfigTypeError,
    ConfigValueError,
)

__all__: list[str] = [
    "AccountConfigStore",
    "AccountStoreError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigLoaderError",
    "ConfigTypeError",
    "ConfigValueError",
]
