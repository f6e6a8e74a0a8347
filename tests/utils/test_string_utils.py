from __future__ import annotations

from utils.string_utils import StringUtils


def test_ensure_str_and_compress_blanks() -> None:
    assert StringUtils.ensure_str(None) == ""
    assert StringUtils.ensure_str("  kept  ") == "  kept  "
    assert StringUtils.compress_blanks("  a \n\t b  ") == "a b"


def test_hash_key_normalizes_unicode() -> None:
    composed: str = StringUtils.generate_hash_key("caf\u00e9", "fr", "en", "google")
    decomposed: str = StringUtils.generate_hash_key("cafe\u0301", "fr", "en", "google")

    assert composed == decomposed


def test_hash_key_distinguishes_every_component() -> None:
    base: str = StringUtils.generate_hash_key("text", "en", "ja", "google")
    variants: list[str] = [
        StringUtils.generate_hash_key("text2", "en", "ja", "google"),
        StringUtils.generate_hash_key("text", "auto", "ja", "google"),
        StringUtils.generate_hash_key("text", "en", "ko", "google"),
        StringUtils.generate_hash_key("text", "en", "ja", "deepl"),
        StringUtils.generate_hash_key("text", "en", "ja", "google", "alice"),
    ]

    assert len({base, *variants}) == len(variants) + 1
    assert StringUtils.generate_hash_key("text", "en", "ja", "google", None) == base


def test_key_preview() -> None:
    key: str = StringUtils.generate_hash_key("text", "en", "ja", "google")

    assert StringUtils.key_preview(key) == key[:16]
    assert StringUtils.key_preview(None) == ""
