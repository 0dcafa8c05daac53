"""Tests for the sword generator."""

from __future__ import annotations

import pytest

from pixelsmith.engine.curve import CurveAccumulator
from pixelsmith.engine.shapes import Curve
from pixelsmith.item_api import generate_sword
from pixelsmith.items.sword import SWORD_STYLES, blade_body, blade_profile
from tests.conftest import GRID, SEEDS, rng_for


def _component(item, name):
    return next(c for c in item.components if c.name == name)


def test_curved_blade_recentres_hilt():
    blade = blade_body("straight", "pointy", 5, 40, Curve(6, 1, phase=0.7))
    final = blade.trace(CurveAccumulator())
    assert final != 0
    sil = blade.at(GRID.center_x, 4)
    left, right = sil.row_extent(4 + 39)
    # The hilt is placed at cx + final; the drawn last row is centred there
    assert (left + right) // 2 == GRID.center_x + final


@pytest.mark.parametrize("seed", range(12))
def test_pommel_follows_curved_blade(seed):
    item = generate_sword({"subType": "katana"}, rng=rng_for(seed))
    blade = item.item_data["blade"]
    assert blade["curveDirection"] == 1
    assert blade["finalCurveOffset"] != 0
    assert item.item_data["pommel"]["centerX"] == GRID.center_x + blade["finalCurveOffset"]


@pytest.mark.parametrize("seed", SEEDS)
def test_drawn_blade_bottom_matches_pommel(seed):
    item = generate_sword(rng=rng_for(seed))
    sil = _component(item, "blade").silhouette
    bottom = sil.bbox[3]
    left, right = sil.row_extent(bottom)
    assert abs((left + right) / 2 - item.item_data["pommel"]["centerX"]) <= 0.5


def test_longsword_alias():
    item = generate_sword({"subType": "longsword"}, rng=rng_for(2))
    assert item.item_data["swordType"] == "standard"
    assert "warnings" not in item.item_data


@pytest.mark.parametrize("seed", SEEDS)
def test_dagger_dimensions(seed):
    item = generate_sword({"subType": "dagger"}, rng=rng_for(seed))
    blade = item.item_data["blade"]
    lo, hi = SWORD_STYLES["dagger"].length
    assert lo <= blade["logicalLength"] <= hi
    assert blade["curveDirection"] == 0
    assert item.name.startswith(item.item_data["blade"]["material"].replace("_", " ").title())


def test_katana_has_tsuba_and_cap():
    item = generate_sword({"subType": "katana"}, rng=rng_for(8))
    hilt = item.item_data["hilt"]
    assert hilt["crossguardStyle"] == "tsuba"
    assert hilt["gripMaterial"] == "leather"
    assert item.item_data["pommel"]["shape"] == "katana_cap"


def test_component_order():
    item = generate_sword(rng=rng_for(1))
    names = [c.name for c in item.components]
    assert names.index("blade") < names.index("guard") < names.index("grip") < names.index("pommel")


def test_material_options():
    item = generate_sword(
        {"material": "OBSIDIAN", "hiltMaterial": "GOLD", "gripMaterial": "RED_LEATHER", "pommelMaterial": "SILVER"},
        rng=rng_for(6),
    )
    assert item.item_data["blade"]["material"] == "obsidian"
    assert item.item_data["hilt"]["hiltMaterial"] == "gold"
    assert item.item_data["hilt"]["gripMaterial"] == "red_leather"
    assert item.item_data["pommel"]["material"] == "silver"


def test_pointed_profile_narrows_at_tip():
    prof = blade_profile("straight", "pointy", 6, 40)
    assert prof.width(0, 40) < prof.width(39, 40)
    flat = blade_profile("straight", "flat", 6, 40)
    assert flat.width(0, 40) == flat.width(39, 40) == 6


@pytest.mark.parametrize("seed", SEEDS)
def test_curve_amount_is_whole_columns(seed):
    for sub_type in ("katana", "greatsword"):
        item = generate_sword({"subType": sub_type}, rng=rng_for(seed))
        amount = item.item_data["blade"]["curveAmount"]
        assert amount == int(amount)


@pytest.mark.parametrize("seed", SEEDS)
def test_katana_name_omits_curve_suffix(seed):
    item = generate_sword({"subType": "katana"}, rng=rng_for(seed))
    assert item.item_data["blade"]["curveDirection"] == 1
    assert "curved" not in item.name
