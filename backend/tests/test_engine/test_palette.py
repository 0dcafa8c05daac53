"""Tests for the palette catalog."""

from __future__ import annotations

import pytest

from pixelsmith.engine.palette import (
    DEFAULT_MATERIAL,
    MATERIAL_PALETTES,
    Palette,
    get_palette,
    is_known_material,
    material_keys,
    normalize_key,
)
from pixelsmith.engine.surface import parse_color


@pytest.mark.parametrize("key", ["UNKNOWNIUM", "NOT_A_REAL_MATERIAL", "", "   ", "gold leaf", "#FFD700"])
def test_unknown_key_falls_back(key):
    palette = get_palette(key)
    assert palette == MATERIAL_PALETTES[DEFAULT_MATERIAL]
    assert palette.base and palette.shadow and palette.highlight


def test_none_falls_back():
    assert get_palette(None) == MATERIAL_PALETTES["IRON"]


def test_custom_default():
    assert get_palette("UNKNOWNIUM", default="gold") == MATERIAL_PALETTES["GOLD"]
    # A bad default still resolves
    assert get_palette("UNKNOWNIUM", default="ALSO_UNKNOWN") == MATERIAL_PALETTES["IRON"]


def test_keys_are_normalized():
    assert normalize_key("  dark_steel ") == "DARK_STEEL"
    assert get_palette(" gold ") is MATERIAL_PALETTES["GOLD"]
    assert is_known_material("wood")
    assert not is_known_material("UNKNOWNIUM")


def test_aliases_share_colours():
    alias = get_palette("DARK_LEATHER")
    target = get_palette("DARK_BROWN_LEATHER")
    assert alias.name == "Dark Leather"
    assert (alias.base, alias.shadow, alias.highlight) == (target.base, target.shadow, target.highlight)
    assert get_palette("ROSE_GOLD").base == get_palette("COPPER").base
    assert get_palette("DIAMOND").base == get_palette("GEM_WHITE").base


def test_display_names():
    assert get_palette("DARK_STEEL").name == "Dark Steel"
    assert get_palette("GEM_RED").name == "Gem Red"


@pytest.mark.parametrize("key", material_keys())
def test_every_palette_is_valid(key):
    palette = MATERIAL_PALETTES[key]
    for color in (palette.base, palette.shadow, palette.highlight):
        assert color.startswith("#")
        parse_color(color)
    assert palette.outline is not None


def test_without_outline():
    palette = get_palette("STEEL")
    bare = palette.without_outline()
    assert bare.outline is None
    assert bare.base == palette.base
    assert bare.without_outline() is bare


def test_as_dict():
    data = Palette("X", "#000000", "#111111", "#222222").as_dict()
    assert data == {"name": "X", "base": "#000000", "shadow": "#111111", "highlight": "#222222", "outline": None}
