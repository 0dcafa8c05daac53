"""Tests for the boots, gloves, hat and potion generators."""

from __future__ import annotations

import pytest

from pixelsmith.item_api import generate_boots, generate_gloves, generate_hat, generate_potion
from pixelsmith.items.boots import toe_heights
from pixelsmith.items.gloves import fit_heights
from pixelsmith.items.potion import flask_shape
from tests.conftest import GRID, SEEDS, rng_for


def _component(item, name):
    return next(c for c in item.components if c.name == name)


def _cells(comp) -> set:
    return set(comp.silhouette.cells())


# ── Boots ──


@pytest.mark.parametrize("seed", SEEDS)
def test_boots_are_a_mirrored_pair(seed):
    item = generate_boots(rng=rng_for(seed))
    left, right = _component(item, "left_boot"), _component(item, "right_boot")
    assert left.silhouette.bbox[2] < right.silhouette.bbox[0]
    assert len(_cells(left)) == len(_cells(right))
    assert [c.name.startswith("left") for c in item.components].count(True) == len(item.components) // 2


@pytest.mark.parametrize("seed", SEEDS)
def test_boot_heights_follow_type(seed):
    ankle = generate_boots({"subType": "ankle_boot"}, rng=rng_for(seed)).item_data
    knee = generate_boots({"subType": "knee_high"}, rng=rng_for(seed)).item_data
    assert ankle["legHeight"] < knee["legHeight"]
    assert knee["hasLacing"] is False
    assert ankle["cuffStyle"] != "buckled_strap_cuff"


def test_toe_heights():
    assert toe_heights("square", 5, 10) == [9] * 5
    rounded = toe_heights("rounded", 6, 10)
    assert rounded[0] == 10
    assert rounded == sorted(rounded, reverse=True)
    pointed = toe_heights("pointed", 6, 10)
    assert pointed[-1] < rounded[-1]


# ── Gloves ──


@pytest.mark.parametrize("seed", SEEDS)
def test_gloves_are_left_and_right(seed):
    item = generate_gloves(rng=rng_for(seed))
    left, right = _component(item, "left_hand"), _component(item, "right_hand")
    assert left.silhouette.bbox[2] < right.silhouette.bbox[0]
    assert len(_cells(left)) == len(_cells(right))
    assert _component(item, "left_thumb") and _component(item, "right_thumb")


def test_fit_heights():
    assert fit_heights(10, 10, 10, 40, True) == (10, 10, 10)
    assert fit_heights(36, 15, 16, 40, True) == (23, 7, 10)
    assert fit_heights(30, 8, 4, 20, False) == (19, 7, 2)


@pytest.mark.parametrize("seed", SEEDS)
def test_fingerless_gloves_have_stubs(seed):
    data = generate_gloves({"subType": "fingerless"}, rng=rng_for(seed)).item_data
    assert data["hasFingers"] is False
    assert data["fingerBaseHeight"] <= 4


@pytest.mark.parametrize("seed", SEEDS)
def test_only_gauntlets_get_spikes(seed):
    data = generate_gloves({"subType": "armored_leather"}, rng=rng_for(seed)).item_data
    assert data["knuckleStyle"] != "spiked"


# ── Hat ──


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("hat_type", ["wizard_hat", "wide_brim_fedora", "straw_hat", "top_hat"])
def test_brim_stays_in_padding(hat_type, seed):
    item = generate_hat({"subType": hat_type}, rng=rng_for(seed))
    if item.item_data["brimShape"] == "none":
        return
    x0, _, x1, _ = _component(item, "brim").silhouette.bbox
    assert x0 >= GRID.padding
    assert x1 < GRID.width - GRID.padding


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("hat_type", ["simple_helmet", "conical_helmet", "knight_helm_visor", "barbute_helm"])
def test_helmets_are_bare(hat_type, seed):
    item = generate_hat({"subType": hat_type}, rng=rng_for(seed))
    data = item.item_data
    assert data["category"] == "helmet"
    assert data["brimShape"] == "none"
    assert data["decorationType"] == "none"
    assert data["helmetFeatureMaterial"] == data["mainMaterial"]
    assert "brim" not in [c.name for c in item.components]


def test_helmet_features():
    for seed in SEEDS:
        barbute = generate_hat({"subType": "barbute_helm"}, rng=rng_for(seed))
        names = [c.name for c in barbute.components]
        assert "cheek_guard_left" in names and "cheek_guard_right" in names
        knight = generate_hat({"subType": "knight_helm"}, rng=rng_for(seed)).item_data
        assert knight["hatType"] == "knight_helm_visor"
        assert knight["visorType"] in ("t_slit", "horizontal_slit")


@pytest.mark.parametrize("seed", SEEDS)
def test_cap_bill_hangs_from_crown_base(seed):
    item = generate_hat({"subType": "cap"}, rng=rng_for(seed))
    crown, bill = _component(item, "crown"), _component(item, "brim")
    assert bill.silhouette.bbox[1] == crown.silhouette.bbox[3] + 1
    assert item.item_data["dimensions"]["billLength"] > 0


def test_wizard_hat_is_pointed():
    for seed in SEEDS:
        data = generate_hat({"subType": "wizard_hat"}, rng=rng_for(seed)).item_data
        assert data["dimensions"]["crownTopWidth"] == 1
        assert data["crownShape"] == "conical"


# ── Potion ──


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("flask", ["round_flask", "conical_flask", "bulbous_pot", "test_tube"])
def test_liquid_stays_inside_glass(flask, seed):
    item = generate_potion({"subType": flask}, rng=rng_for(seed))
    glass = _cells(_component(item, "flask"))
    for comp in item.components:
        if comp.name.startswith("liquid"):
            assert _cells(comp) <= glass, comp.name


def test_flask_shape_bands():
    p = {
        "flask": "flat_bottom_cylinder", "body_width": 20, "body_height": 24,
        "neck_width": 8, "neck_height": 6, "base_height": 0, "base": "flat",
    }
    shape = flask_shape(p)
    assert shape.height == 30
    assert shape.row_width(0) == 8
    assert shape.row_width(5) == 8
    assert shape.row_width(15) == 20


def test_round_flask_body_never_narrower_than_neck():
    p = {
        "flask": "round_flask", "body_width": 20, "body_height": 20,
        "neck_width": 6, "neck_height": 4, "base_height": 4, "base": "rounded",
    }
    shape = flask_shape(p)
    widths = [shape.row_width(r) for r in range(4, 24)]
    assert all(6 <= w <= 20 for w in widths)
    assert max(widths) == pytest.approx(20, abs=1)


def test_material_selects_liquid():
    data = generate_potion({"material": "gem_blue"}, rng=rng_for(4)).item_data
    assert data["liquidMaterial"] == "gem_blue"
    assert data["liquidColorName"] == "Mana Blue"


@pytest.mark.parametrize("seed", SEEDS)
def test_test_tube_neck_matches_body(seed):
    data = generate_potion({"subType": "vial"}, rng=rng_for(seed)).item_data
    assert data["flaskShape"] == "test_tube"
    assert data["dimensions"]["neckWidth"] == data["dimensions"]["bodyWidth"]
    assert data["baseStyle"] == "test_tube_rounded"


@pytest.mark.parametrize("seed", SEEDS)
def test_potion_fits_grid(seed):
    item = generate_potion(rng=rng_for(seed))
    x0, y0, x1, y1 = _component(item, "flask").silhouette.bbox
    assert 0 <= x0 and 0 <= y0 and x1 < GRID.width and y1 < GRID.height
