"""Tests for the axe, staff and book generators."""

from __future__ import annotations

import pytest

from pixelsmith.item_api import generate_axe, generate_book, generate_staff
from pixelsmith.items.axe import HEAD_MATERIALS, blade_rows
from pixelsmith.items.book import CLUSTER_GLYPHS, RUNE_GLYPHS, glyph
from pixelsmith.items.staff import MIN_SHAFT_LENGTH, ORGANIC_SHAFTS
from tests.conftest import GRID, SEEDS, rng_for


def _component(item, name):
    return next(c for c in item.components if c.name == name)


def _inside_grid(bbox) -> bool:
    x0, y0, x1, y1 = bbox
    return 0 <= x0 and 0 <= y0 and x1 < GRID.width and y1 < GRID.height


# ── Axe ──


def test_straight_blade_reaches_socket_at_middle_row():
    rows = blade_rows("expanding_straight", "straight_edge", 1.0, 12, 11, 3, 30)
    assert rows[5] == (0, 12)
    assert rows[0] == (9, 3)
    for start, width in rows:
        assert start + width == 12


def test_blade_rows_respect_max_reach():
    rows = blade_rows("flared", "convex_edge", 1.0, 20, 15, 3, 14)
    assert all(start + width <= 14 for start, width in rows)
    assert all(width >= 3 for _, width in rows)


def test_bearded_blade_hangs_lower():
    rows = blade_rows("bearded", "straight_edge", 1.0, 12, 13, 3, 30)
    for i in range(6):
        assert rows[12 - i][1] >= rows[i][1]


@pytest.mark.parametrize("seed", SEEDS)
def test_double_axe_blades_mirror(seed):
    item = generate_axe({"subType": "double_axe"}, rng=rng_for(seed))
    left, right = _component(item, "blade_left"), _component(item, "blade_right")
    assert left.silhouette.bbox[2] < right.silhouette.bbox[0]
    assert len(list(left.silhouette.cells())) == len(list(right.silhouette.cells()))
    assert not item.item_data["head"]["hasSpikePoll"]
    assert "spike_poll" not in [c.name for c in item.components]


@pytest.mark.parametrize("seed", SEEDS)
def test_axe_stays_on_canvas(seed):
    item = generate_axe(rng=rng_for(seed))
    assert item.item_data["head"]["material"].upper() in HEAD_MATERIALS
    for comp in item.components:
        assert _inside_grid(comp.silhouette.bbox), comp.name


def test_axe_alias():
    item = generate_axe({"subType": "double_blade_axe"}, rng=rng_for(5))
    assert item.item_data["axeType"] == "double_axe"
    assert "warnings" not in item.item_data


# ── Staff ──


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("staff_type", ["wand", "scepter", "staff"])
def test_topper_sits_above_shaft(staff_type, seed):
    item = generate_staff({"subType": staff_type}, rng=rng_for(seed))
    shaft, topper = _component(item, "shaft"), _component(item, "topper")
    assert topper.silhouette.bbox[3] < shaft.silhouette.bbox[1]
    assert topper.silhouette.bbox[1] >= 0
    assert item.item_data["shaft"]["length"] >= MIN_SHAFT_LENGTH


@pytest.mark.parametrize("seed", SEEDS)
def test_metal_shafts_are_straight(seed):
    shaft = generate_staff(rng=rng_for(seed)).item_data["shaft"]
    if shaft["material"].upper() not in ORGANIC_SHAFTS:
        assert shaft["shape"] == "straight"


def test_gem_toppers_report_gem():
    for seed in range(20):
        topper = generate_staff(rng=rng_for(seed)).item_data["topper"]
        if topper["shape"] in ("orb_gem", "crystal_shard"):
            assert topper["gemMaterial"]
        else:
            assert topper["gemMaterial"] is None


# ── Book ──


@pytest.mark.parametrize("kind", RUNE_GLYPHS + CLUSTER_GLYPHS)
def test_glyph_fits_its_square(kind):
    cells = list(glyph(kind, 7, 2).at(0, 0).cells())
    assert cells
    assert all(0 <= x < 7 and 0 <= y < 7 for x, y in cells)


def test_unknown_glyph_rejected():
    with pytest.raises(ValueError):
        glyph("omega", 7, 2)


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("book_type", ["tome", "grimoire", "journal"])
def test_spine_only_on_angled_books(book_type, seed):
    item = generate_book({"subType": book_type}, rng=rng_for(seed))
    data = item.item_data
    names = [c.name for c in item.components]
    angled = data["perspectiveAngle"] > 0
    assert ("spine" in names) == angled
    if not angled:
        assert data["decoration"]["type"] != "spine_details"
        assert data["secondaryDecoration"] is None
        assert "spine_details" not in names


@pytest.mark.parametrize("seed", SEEDS)
def test_book_fits_padding(seed):
    item = generate_book(rng=rng_for(seed))
    assert item.item_data["height"] <= GRID.usable_height
    cover = _component(item, "cover")
    _, y0, _, y1 = cover.silhouette.bbox
    assert GRID.padding <= y0 and y1 < GRID.height - GRID.padding


def test_grimoire_is_always_angled():
    for seed in SEEDS:
        assert generate_book({"subType": "grimoire"}, rng=rng_for(seed)).item_data["perspectiveAngle"] > 0


def test_spellbook_alias():
    item = generate_book({"subType": "spellbook"}, rng=rng_for(2))
    assert item.item_data["bookType"] == "grimoire"
    assert item.item_data["subType"] == "spellbook"
