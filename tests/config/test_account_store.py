from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from config.account_store import AccountConfigStore, AccountStoreError
from models.account_models import AccountConfig, GlobalSettings

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def store(tmp_path: Path) -> AccountConfigStore:
    return AccountConfigStore(tmp_path / "accounts.json")


@pytest.mark.asyncio
async def test_unknown_account_gets_defaults(store: AccountConfigStore) -> None:
    config: AccountConfig = await store.get_config("nobody")

    assert config == AccountConfig()
    assert await store.list_accounts() == []


@pytest.mark.asyncio
async def test_save_and_reload(store: AccountConfigStore, tmp_path: Path) -> None:
    config = AccountConfig(global_settings=GlobalSettings(engine="gpt4", target_lang="ja"))
    config.friend_configs["bob"] = {"target_lang": "ko"}

    await store.save_config("alice", config)

    reopened = AccountConfigStore(tmp_path / "accounts.json")
    await reopened.component_load()
    loaded: AccountConfig = await reopened.get_config("alice")
    assert loaded == config
    assert await reopened.list_accounts() == ["alice"]


@pytest.mark.asyncio
async def test_stored_document_is_merged_over_defaults(tmp_path: Path) -> None:
    path: Path = tmp_path / "accounts.json"
    document: dict[str, Any] = {
        "alice": {"global_settings": {"target_lang": "fr", "removed_setting": 1}, "advanced": "broken"},
        "broken": "not a dict",
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    store = AccountConfigStore(path)

    config: AccountConfig = await store.get_config("alice")

    assert config.global_settings.target_lang == "fr"
    assert config.global_settings.engine == "google"
    assert config.advanced.realtime is False
    assert await store.list_accounts() == ["alice"]


@pytest.mark.asyncio
async def test_delete_config(store: AccountConfigStore) -> None:
    await store.save_config("alice", AccountConfig())
    await store.save_config("bob", AccountConfig())

    assert await store.delete_config("alice") is True
    assert await store.delete_config("alice") is False
    assert await store.list_accounts() == ["bob"]


@pytest.mark.asyncio
async def test_unreadable_file_starts_empty(tmp_path: Path) -> None:
    path: Path = tmp_path / "accounts.json"
    path.write_text("{broken", encoding="utf-8")
    store = AccountConfigStore(path)

    await store.component_load()

    assert await store.list_accounts() == []


@pytest.mark.asyncio
async def test_empty_account_id_is_rejected(store: AccountConfigStore) -> None:
    with pytest.raises(ValueError, match="non-empty"):
        await store.get_config("  ")


@pytest.mark.asyncio
async def test_write_failure_raises(tmp_path: Path) -> None:
    directory: Path = tmp_path / "accounts_dir"
    directory.mkdir()
    store = AccountConfigStore(directory)

    with pytest.raises(AccountStoreError):
        await store.save_config("alice", AccountConfig())
