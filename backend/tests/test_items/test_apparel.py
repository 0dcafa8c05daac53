"""Tests for the armor, robe and jewelry generators."""

from __future__ import annotations

import pytest

from pixelsmith.engine.attachment import SeamClip
from pixelsmith.engine.palette import get_palette
from pixelsmith.engine.shapes import Rect
from pixelsmith.item_api import generate_armor, generate_jewelry, generate_robe
from pixelsmith.items.armor import NO_PAULDRON_STYLES, PAULDRON_OVERLAP
from pixelsmith.items.jewelry import GemCut, fit_cut
from pixelsmith.items.robe import SEAM_OVERLAP
from tests.conftest import GRID, SEEDS, rng_for


def _inside_grid(bbox) -> bool:
    x0, y0, x1, y1 = bbox
    return 0 <= x0 and 0 <= y0 and x1 < GRID.width and y1 < GRID.height


def _deep_cells(child, parent, overlap: int) -> set:
    """Cells of ``child`` the parent covers further than ``overlap`` columns from its edge."""
    return {
        (x, y) for x, y in child.cells()
        if all(parent.contains(x + d, y) for d in range(-overlap, overlap + 1))
    }


def test_seam_clip_protects_parent_on_surface(ctx):
    parent = Rect(10, 6).at(10, 10)
    ctx.draw("torso", parent, get_palette("STEEL"))
    before = {cell: ctx.surface.cell(*cell) for cell in parent.cells()}
    child = Rect(6, 4).at(16, 12)
    seam = range(12, 16)
    ctx.draw("pauldron", child, get_palette("GOLD"), clip=SeamClip(parent.contains, seam, overlap=1))
    for (x, y), color in before.items():
        if y in seam and child.contains(x, y) and x < 19:
            assert ctx.surface.cell(x, y) == color
    # Within one column of the parent's edge the child may overlap
    assert ctx.surface.cell(19, 13) != before[(19, 13)]
    assert ctx.surface.is_filled(21, 13)


# ── Armor ──


@pytest.mark.parametrize("seed", SEEDS)
def test_armor_components(seed):
    item = generate_armor(rng=rng_for(seed))
    data = item.item_data
    names = [c.name for c in item.components]
    assert names[0] == "torso"
    if data["pauldrons"] is None:
        assert not any(n.startswith("pauldron") for n in names)
    else:
        assert any(n.startswith("pauldron_left") for n in names)
        assert any(n.startswith("pauldron_right") for n in names)


@pytest.mark.parametrize("style", NO_PAULDRON_STYLES)
def test_light_armor_has_no_pauldrons(style):
    for seed in SEEDS:
        assert generate_armor({"subType": style}, rng=rng_for(seed)).item_data["pauldrons"] is None


def test_muscled_plate_is_undecorated():
    for seed in SEEDS:
        item = generate_armor({"subType": "muscled_plate"}, rng=rng_for(seed))
        assert item.item_data["torso"]["decoration"] is None
        assert item.item_data["torso"]["texture"] == "muscle"


@pytest.mark.parametrize("seed", SEEDS)
def test_torso_fits(seed):
    item = generate_armor(rng=rng_for(seed))
    torso = next(c for c in item.components if c.name == "torso")
    assert _inside_grid(torso.silhouette.bbox)


@pytest.mark.parametrize("seed", SEEDS)
def test_pauldrons_only_overlap_torso_edge(seed):
    item = generate_armor({"subType": "smooth_plate"}, rng=rng_for(seed))
    torso = item.components[0].silhouette
    for comp in item.components:
        if not comp.name.startswith("pauldron"):
            continue
        on_grid = {(x, y) for x, y in comp.silhouette.cells() if 0 <= x < GRID.width and 0 <= y < GRID.height}
        deep = _deep_cells(comp.silhouette, torso, PAULDRON_OVERLAP)
        assert comp.cells == len(on_grid - deep), comp.name


# ── Robe ──


def test_robe_sub_type_is_length():
    lengths = {}
    for length in ("short", "medium", "long"):
        item = generate_robe({"subType": length}, rng=rng_for(12))
        assert item.item_data["length"] == length
        lengths[length] = item.item_data["logicalLength"]
    assert lengths["short"] < lengths["medium"] < lengths["long"]


@pytest.mark.parametrize("seed", SEEDS)
def test_robe_parts_stay_in_padding(seed):
    item = generate_robe(rng=rng_for(seed))
    pad = GRID.padding
    for comp in item.components:
        if not comp.name.startswith(("sleeve", "cuff", "hood")):
            continue
        allowed = [
            (x, y) for x, y in comp.silhouette.cells()
            if pad <= x < GRID.width - pad and pad <= y < GRID.height - pad
        ]
        assert comp.cells <= len(allowed)


@pytest.mark.parametrize("seed", SEEDS)
def test_robe_sleeves_drawn(seed):
    item = generate_robe(rng=rng_for(seed))
    names = [c.name for c in item.components]
    assert "body" in names
    assert "sleeve_left" in names and "sleeve_right" in names
    assert item.item_data["hasHood"] == any(n.startswith("hood") for n in names)


@pytest.mark.parametrize("seed", SEEDS)
def test_sleeves_and_hood_only_overlap_body_edge(seed):
    item = generate_robe(rng=rng_for(seed))
    body = item.components[0].silhouette
    pad = GRID.padding
    for comp in item.components:
        if not comp.name.startswith(("sleeve", "cuff", "hood")):
            continue
        padded = {
            (x, y) for x, y in comp.silhouette.cells()
            if pad <= x < GRID.width - pad and pad <= y < GRID.height - pad
        }
        deep = _deep_cells(comp.silhouette, body, SEAM_OVERLAP)
        assert comp.cells == len(padded - deep), comp.name


# ── Jewelry ──


def test_choker_alias():
    item = generate_jewelry({"subType": "choker"}, rng=rng_for(3))
    assert item.item_data["jewelryType"] == "collar"
    assert item.item_data["subType"] == "choker"
    assert "warnings" not in item.item_data


@pytest.mark.parametrize("seed", SEEDS)
def test_ring_stays_on_canvas(seed):
    item = generate_jewelry({"subType": "ring"}, rng=rng_for(seed))
    band = item.item_data["band"]
    assert band["outerRadius"] - band["innerRadius"] == band["thickness"]
    for comp in item.components:
        assert _inside_grid(comp.silhouette.bbox), comp.name


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("kind", ["earring_stud", "earring_dangle", "earring_hoop"])
def test_earring_pair_never_overlaps(kind, seed):
    item = generate_jewelry({"subType": kind}, rng=rng_for(seed))
    assert item.item_data["earrings"]["pairSpacing"] == GRID.width // 4
    left = {cell for c in item.components if c.name.startswith("left") for cell in c.silhouette.cells()}
    right = {cell for c in item.components if c.name.startswith("right") for cell in c.silhouette.cells()}
    assert left and right
    assert not left & right


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("kind", ["pendant", "amulet"])
def test_pendant_gem_fits_plate(kind, seed):
    item = generate_jewelry({"subType": kind}, rng=rng_for(seed))
    data = item.item_data
    assert data["chain"]["material"]
    if data["hasGem"]:
        assert data["gemWidth"] <= data["plate"]["width"]
        assert data["gemHeight"] <= data["plate"]["height"]


@pytest.mark.parametrize("seed", SEEDS)
def test_gem_metadata_consistent(seed):
    data = generate_jewelry(rng=rng_for(seed)).item_data
    if data["hasGem"]:
        assert data["gemMaterial"] and data["gemShape"] and data["gemColors"]
    else:
        assert data["gemMaterial"] is None
        assert data["hasSetting"] is False
    assert (data["decoration"] == "none") == (data["decorationColors"] is None)


def test_fit_cut_shrinks_with_setting():
    cut = GemCut("GEM_RED", "oval", 16, 18, setting="bezel", setting_material="GOLD")
    fitted = fit_cut(cut, 12, 12)
    assert fitted.total_width <= 12 and fitted.total_height <= 12
    assert fitted.material == "GEM_RED" and fitted.setting == "bezel"


def test_fit_cut_floor():
    cut = GemCut("GEM_BLUE", "round", 10, 10, setting="prong", setting_material="SILVER")
    fitted = fit_cut(cut, 1, 1)
    assert (fitted.width, fitted.height) == (3, 3)


def test_rose_gold_metal():
    item = generate_jewelry({"material": "rose_gold"}, rng=rng_for(8))
    assert item.item_data["metal"] == "rose_gold"
    assert item.name.startswith("Rose Gold")
