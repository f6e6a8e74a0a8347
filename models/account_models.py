"""Per-account translation settings.

Stored as JSON by ``config.account_store.AccountConfigStore``. Loading merges the stored
document over the defaults, so fields added in later versions appear with their default values.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Self

__all__: list[str] = ["AccountConfig", "AdvancedSettings", "GlobalSettings", "InputBoxSettings"]


def _known_fields(cls: type, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    names: set[str] = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


@dataclass
class GlobalSettings:
    auto_translate: bool = False
    engine: str = "google"
    source_lang: str = "auto"
    target_lang: str = "zh-CN"
    group_translation: bool = False


@dataclass
class InputBoxSettings:
    enabled: bool = False
    style: str = "general"


@dataclass
class AdvancedSettings:
    friend_independent: bool = False
    block_chinese: bool = False
    realtime: bool = False
    reverse_translation: bool = False


@dataclass
class AccountConfig:
    """Translation settings of one account.

    Attributes:
        global_settings (GlobalSettings): Defaults used to fill missing request parameters.
        input_box (InputBoxSettings): Settings for translating outgoing text.
        advanced (AdvancedSettings): Optional behaviours.
        friend_configs (dict[str, dict[str, Any]]): Overrides keyed by contact id.
    """

    global_settings: GlobalSettings = field(default_factory=GlobalSettings)
    input_box: InputBoxSettings = field(default_factory=InputBoxSettings)
    advanced: AdvancedSettings = field(default_factory=AdvancedSettings)
    friend_configs: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """Build a config from stored data, keeping defaults for missing or unknown keys."""
        if not isinstance(data, dict):
            return cls()
        friends: Any = data.get("friend_configs")
        return cls(
            global_settings=GlobalSettings(**_known_fields(GlobalSettings, data.get("global_settings"))),
            input_box=InputBoxSettings(**_known_fields(InputBoxSettings, data.get("input_box"))),
            advanced=AdvancedSettings(**_known_fields(AdvancedSettings, data.get("advanced"))),
            friend_configs=dict(friends) if isinstance(friends, dict) else {},
        )
