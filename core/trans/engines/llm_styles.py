"""Translation style presets for the chat-completion engines.

A style selects the instruction sent to the model and the sampling temperature.
Unknown or missing styles resolve to ``general``.
"""

from __future__ import annotations

from typing import Final, NamedTuple

__all__: list[str] = ["DEFAULT_STYLE", "STYLE_ALIASES", "STYLE_PRESETS", "StylePreset", "resolve_style"]


class StylePreset(NamedTuple):
    """Instruction template and temperature for one style.

    Attributes:
        instruction (str): Template with a ``{target_lang}`` placeholder.
        temperature (float): Sampling temperature sent with the request.
    """

    instruction: str
    temperature: float


DEFAULT_STYLE: Final[str] = "general"

STYLE_PRESETS: Final[dict[str, StylePreset]] = {
    "general": StylePreset("Translate the following text into {target_lang}, preserving its meaning.", 0.3),
    "formal": StylePreset(
        "Translate the following text into {target_lang}, using a formal and professional tone.", 0.2
    ),
    "casual": StylePreset(
        "Translate the following text into {target_lang}, using casual, relaxed everyday language.", 0.7
    ),
    "friendly": StylePreset("Translate the following text into {target_lang}, using a warm and friendly tone.", 0.6),
    "humorous": StylePreset(
        "Translate the following text into {target_lang}, adding a touch of humor where it fits.", 0.9
    ),
    "polite": StylePreset("Translate the following text into {target_lang}, using a polite and respectful tone.", 0.3),
    "firm": StylePreset("Translate the following text into {target_lang}, using a firm and assertive tone.", 0.3),
    "concise": StylePreset("Translate the following text into {target_lang}, keeping it short and clear.", 0.2),
    "motivational": StylePreset(
        "Translate the following text into {target_lang}, using a positive and encouraging tone.", 0.7
    ),
    "neutral": StylePreset(
        "Translate the following text into {target_lang}, keeping a neutral and objective tone.", 0.2
    ),
    "professional": StylePreset(
        "Translate the following text into {target_lang}, using precise technical terminology.", 0.1
    ),
}

STYLE_ALIASES: Final[dict[str, str]] = {
    "通用": "general",
    "正式": "formal",
    "口语化": "casual",
    "亲切": "friendly",
    "幽默": "humorous",
    "礼貌": "polite",
    "强硬": "firm",
    "简洁": "concise",
    "激励": "motivational",
    "中立": "neutral",
    "专业": "professional",
}


def resolve_style(style: str | None) -> tuple[str, StylePreset]:
    """Resolve a style name or alias to its preset.

    Args:
        style (str | None): Style name (English or alias), case-insensitive.

    Returns:
        tuple[str, StylePreset]: Canonical style name and its preset.
    """
    if style:
        name: str = style.strip()
        name = STYLE_ALIASES.get(name, name.lower())
        if name in STYLE_PRESETS:
            return name, STYLE_PRESETS[name]
    return DEFAULT_STYLE, STYLE_PRESETS[DEFAULT_STYLE]
