"""Tests for the shield, blunt weapon, polearm and bow generators."""

from __future__ import annotations

import pytest

from pixelsmith.item_api import generate_blunt_weapon, generate_bow, generate_polearm, generate_shield
from pixelsmith.items.bow import BOW_TYPES, limb_body
from pixelsmith.items.polearm import AXE_EDGES, MIN_SHAFT_LENGTH, PRONG_STYLES
from tests.conftest import GRID, SEEDS, rng_for


def _component(item, name):
    return next(c for c in item.components if c.name == name)


def _inside_grid(bbox) -> bool:
    x0, y0, x1, y1 = bbox
    return 0 <= x0 and 0 <= y0 and x1 < GRID.width and y1 < GRID.height


# ── Shield ──


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("shape", ["kite", "tower", "heater", "oval"])
def test_shield_shape(shape, seed):
    item = generate_shield({"subType": shape}, rng=rng_for(seed))
    data = item.item_data
    assert data["shape"] == shape
    assert data["logicalWidth"] <= GRID.width - 2 * GRID.padding
    assert data["logicalHeight"] <= GRID.height - 2 * GRID.padding
    assert _inside_grid(_component(item, "body").silhouette.bbox)


def test_round_request_may_become_oval():
    shapes = {generate_shield({"subType": "round"}, rng=rng_for(s)).item_data["shape"] for s in range(30)}
    assert shapes <= {"round", "oval"}
    assert "round" in shapes


@pytest.mark.parametrize("seed", SEEDS)
def test_shield_body_is_outlined(seed):
    item = generate_shield(rng=rng_for(seed))
    body = _component(item, "body")
    assert body.palette.outline is not None
    x0, y0, x1, y1 = body.silhouette.bbox
    # The top row of the body is edge cells and keeps the outline colour
    top_cells = [x for x in range(x0, x1 + 1) if body.silhouette.contains(x, y0)]
    assert top_cells
    assert item.surface.cell(top_cells[0], y0) == body.palette.outline


def test_kite_top_ratio_reported():
    item = generate_shield({"subType": "kite"}, rng=rng_for(3))
    assert 0.40 <= item.item_data["kiteTopRatio"] <= 0.50


# ── Blunt weapons ──


@pytest.mark.parametrize("seed", SEEDS)
def test_mace_head(seed):
    item = generate_blunt_weapon({"subType": "mace"}, rng=rng_for(seed))
    details = item.item_data["head"]["details"]
    assert item.item_data["weaponType"] == "mace"
    if "flanged" in details["shape"]:
        assert 4 <= details["flanges"] <= 8
        assert details["studs"] == 0
    else:
        assert details["flanges"] == 0


@pytest.mark.parametrize("seed", SEEDS)
def test_morningstar_spikes(seed):
    item = generate_blunt_weapon({"subType": "morningstar"}, rng=rng_for(seed))
    details = item.item_data["head"]["details"]
    assert 8 <= details["spikes"] <= 16
    names = [c.name for c in item.components]
    assert names.index("handle") < names.index("spikes") < names.index("ball")


@pytest.mark.parametrize("seed", SEEDS)
def test_handle_fits(seed):
    item = generate_blunt_weapon(rng=rng_for(seed))
    handle = item.item_data["handle"]
    assert handle["length"] >= 12
    assert 2 <= handle["thickness"] <= 4
    assert handle["hasPommel"] == (handle["pommelShape"] is not None)


def test_haft_material_option():
    item = generate_blunt_weapon({"haftMaterial": "BONE", "material": "STONE"}, rng=rng_for(2))
    assert item.item_data["handle"]["material"] == "bone"
    assert item.item_data["head"]["material"] == "stone"


# ── Polearms ──


@pytest.mark.parametrize("seed", SEEDS)
def test_polearm_shaft(seed):
    item = generate_polearm(rng=rng_for(seed))
    shaft = item.item_data["shaft"]
    assert shaft["length"] >= MIN_SHAFT_LENGTH
    if shaft["style"] in ("wrapped", "metal_bands"):
        assert shaft["wrapMaterial"] is not None
    else:
        assert shaft["wrapMaterial"] is None


@pytest.mark.parametrize("seed", SEEDS)
def test_trident_and_poleaxe_details(seed):
    trident = generate_polearm({"subType": "trident_head"}, rng=rng_for(seed))
    assert trident.item_data["head"]["prongStyle"] in PRONG_STYLES
    poleaxe = generate_polearm({"subType": "poleaxe_head"}, rng=rng_for(seed))
    assert poleaxe.item_data["head"]["axeBladeShape"] in AXE_EDGES
    assert poleaxe.item_data["head"]["rearComponentType"] is not None


def test_polearm_materials():
    item = generate_polearm({"haftMaterial": "DARK_STEEL", "material": "BRONZE"}, rng=rng_for(4))
    assert item.item_data["shaft"]["material"] == "dark_steel"
    assert item.item_data["head"]["material"] == "bronze"
    assert item.item_data["visualTheme"].startswith("Bronze ")


# ── Bows ──


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("bow_type", BOW_TYPES)
def test_bow_fits_grid(bow_type, seed):
    item = generate_bow({"subType": bow_type}, rng=rng_for(seed))
    data = item.item_data
    assert data["bowType"] == bow_type
    assert data["limbs"]["length"] <= GRID.height - 2 * GRID.padding


def test_bow_string_options():
    item = generate_bow({"stringMaterial": "GUT_STRING", "gripMaterial": "LEATHER"}, rng=rng_for(1))
    assert item.item_data["stringMaterial"] == "gut_string"
    assert item.item_data["grip"]["wrapped"] is True


def test_arrow_is_common():
    arrows = [generate_bow(rng=rng_for(s)).item_data["arrow"] is not None for s in range(20)]
    assert any(arrows)


def test_limb_bows_away_from_string():
    limbs = limb_body("longbow", 50, 2, 6)
    middle = limbs.row_offset(25)
    assert middle < 0
    assert limbs.row_offset(0) == 0 and limbs.row_offset(49) == 0
