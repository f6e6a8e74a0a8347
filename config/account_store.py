"""Persistent per-account translation settings.

All accounts live in one JSON document keyed by account id. The document is rewritten
atomically on every change.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from models.account_models import AccountConfig
from utils.file_utils import FileUtils, FileUtilsError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from pathlib import Path

__all__: list[str] = ["AccountConfigStore", "AccountStoreError"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class AccountStoreError(Exception):
    """The account configuration document could not be read or written."""


class AccountConfigStore:
    """Load and save ``AccountConfig`` objects by account id.

    Args:
        file_path (Path): JSON document holding every account.
    """

    def __init__(self, file_path: Path) -> None:
        self.file_path: Path = file_path
        self._accounts: dict[str, dict[str, Any]] = {}
        self._lock: asyncio.Lock = asyncio.Lock()
        self._loaded: bool = False

    async def component_load(self) -> None:
        await self._ensure_loaded()
        logger.info("AccountConfigStore initialized (%d accounts)", len(self._accounts))

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        try:
            data: Any = await asyncio.to_thread(FileUtils.read_json, self.file_path)
        except (OSError, ValueError, FileUtilsError) as err:
            logger.error("Failed to load account configuration: %s", err)
            data = None
        if isinstance(data, dict):
            self._accounts = {str(key): value for key, value in data.items() if isinstance(value, dict)}
        self._loaded = True

    async def _persist(self) -> None:
        snapshot: dict[str, dict[str, Any]] = dict(self._accounts)
        try:
            await asyncio.to_thread(FileUtils.write_json, self.file_path, snapshot)
        except FileUtilsError as err:
            msg: str = f"Failed to save account configuration: {self.file_path}"
            raise AccountStoreError(msg) from err

    @staticmethod
    def _check_account_id(account_id: str) -> None:
        if not isinstance(account_id, str) or not account_id.strip():
            msg: str = "Account id must be a non-empty string"
            raise ValueError(msg)

    async def get_config(self, account_id: str) -> AccountConfig:
        """Return the settings of an account, or the defaults for an unknown account."""
        self._check_account_id(account_id)
        async with self._lock:
            await self._ensure_loaded()
            return AccountConfig.from_dict(self._accounts.get(account_id))

    async def save_config(self, account_id: str, config: AccountConfig) -> None:
        """Store the settings of an account.

        Raises:
            ValueError: If the account id is empty.
            AccountStoreError: If the document cannot be written.
        """
        self._check_account_id(account_id)
        async with self._lock:
            await self._ensure_loaded()
            self._accounts[account_id] = config.to_dict()
            await self._persist()
        logger.info("Account configuration saved: '%s'", account_id)

    async def delete_config(self, account_id: str) -> bool:
        """Remove the settings of an account.

        Returns:
            bool: True if the account existed.
        """
        self._check_account_id(account_id)
        async with self._lock:
            await self._ensure_loaded()
            if self._accounts.pop(account_id, None) is None:
                return False
            await self._persist()
        logger.info("Account configuration deleted: '%s'", account_id)
        return True

    async def list_accounts(self) -> list[str]:
        async with self._lock:
            await self._ensure_loaded()
            return sorted(self._accounts)
