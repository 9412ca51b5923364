from __future__ import annotations

import pytest

from utils.string_utils import StringUtils


@pytest.mark.parametrize(("value", "expected"), [(None, ""), ("  text ", "  text "), (42, "42")])
def test_ensure_str(value: object, expected: str) -> None:
    assert StringUtils.ensure_str(value) == expected  # type: ignore[arg-type]


def test_hash_key_ignores_unicode_composition() -> None:
    composed: str = StringUtils.generate_hash_key("café", "fr_fr", "en_us")
    decomposed: str = StringUtils.generate_hash_key("café", "fr_fr", "en_us")

    assert composed == decomposed
    assert len(composed) == 64


def test_hash_key_depends_on_languages() -> None:
    base: str = StringUtils.generate_hash_key("привіт", "uk_ua", "en_us")

    assert base != StringUtils.generate_hash_key("привіт", "uk_ua", "de_de")
    assert base != StringUtils.generate_hash_key("привіт", "ru_ru", "en_us")


def test_truncate() -> None:
    assert StringUtils.truncate("short", 10) == "short"
    assert StringUtils.truncate("a" * 12, 10) == "a" * 10 + "..."
    assert StringUtils.truncate("anything", 0) == "anything"
