"""Tests shared by every registered item generator."""

from __future__ import annotations

import pytest

from pixelsmith import item_api
from pixelsmith.engine.palette import get_palette
from pixelsmith.engine.registry import get_registry
from tests.conftest import GRID, ITEM_TYPES, SEEDS, rng_for

# Where each item type reports the material the ``material`` option controls
MAIN_MATERIAL = {
    "sword": lambda d: d["blade"]["material"],
    "shield": lambda d: d["material"],
    "blunt_weapon": lambda d: d["head"]["material"],
    "polearm": lambda d: d["head"]["material"],
    "bow": lambda d: d["limbMaterial"],
    "armor": lambda d: d["material"],
    "robe": lambda d: d["mainMaterial"],
    "jewelry": lambda d: d["metal"],
    "axe": lambda d: d["head"]["material"],
    "staff": lambda d: d["shaft"]["material"],
    "boots": lambda d: d["mainMaterial"],
    "gloves": lambda d: d["mainMaterial"],
    "hat": lambda d: d["mainMaterial"],
    "book": lambda d: d["coverMaterial"],
    "potion": lambda d: d["liquidMaterial"],
}

PUBLIC_FUNCTIONS = {
    "sword": item_api.generate_sword,
    "shield": item_api.generate_shield,
    "blunt_weapon": item_api.generate_blunt_weapon,
    "polearm": item_api.generate_polearm,
    "bow": item_api.generate_bow,
    "armor": item_api.generate_armor,
    "robe": item_api.generate_robe,
    "jewelry": item_api.generate_jewelry,
    "axe": item_api.generate_axe,
    "staff": item_api.generate_staff,
    "boots": item_api.generate_boots,
    "gloves": item_api.generate_gloves,
    "hat": item_api.generate_hat,
    "book": item_api.generate_book,
    "potion": item_api.generate_potion,
}


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_generates_item(item_type, seed):
    item = item_api.generate(item_type, rng=rng_for(seed))
    assert not item.is_error
    assert item.type == item_type
    assert item.name
    assert item.image_data_url.startswith("data:image/png;base64,")
    assert item.surface.width == GRID.width and item.surface.height == GRID.height
    assert item.surface.filled_count > 0
    assert item.components
    assert item.item_data["seedApplied"] is False
    assert "warnings" not in item.item_data


@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_public_function(item_type):
    item = PUBLIC_FUNCTIONS[item_type]({"seed": 123}, rng=rng_for(3))
    assert item.type == item_type
    assert item.seed == 123


@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_fixed_stream_is_deterministic(item_type):
    a = item_api.generate(item_type, rng=rng_for(77))
    b = item_api.generate(item_type, rng=rng_for(77))
    assert a.name == b.name
    assert a.item_data == b.item_data
    assert (a.surface.to_raster() == b.surface.to_raster()).all()
    assert a.image_data_url == b.image_data_url


@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_every_sub_type(item_type):
    for sub_type in get_registry().get(item_type).sub_types:
        item = item_api.generate(item_type, {"subType": sub_type}, rng=rng_for(5))
        assert item.item_data["subType"] == sub_type
        assert "warnings" not in item.item_data


@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_unknown_sub_type_warns(item_type):
    item = item_api.generate(item_type, {"subType": "bogus"}, rng=rng_for(5))
    assert not item.is_error
    assert any("bogus" in w for w in item.item_data["warnings"])


@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_unknown_material_falls_back(item_type):
    item = item_api.generate(item_type, {"material": "UNKNOWNIUM"}, rng=rng_for(9))
    assert not item.is_error
    assert MAIN_MATERIAL[item_type](item.item_data) == "iron"
    assert any("UNKNOWNIUM" in w for w in item.item_data["warnings"])
    assert get_palette("UNKNOWNIUM").name == "Iron"


@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_requested_material_is_used(item_type):
    item = item_api.generate(item_type, {"material": "gold"}, rng=rng_for(9))
    assert MAIN_MATERIAL[item_type](item.item_data) == "gold"


@pytest.mark.parametrize("item_type", ITEM_TYPES)
def test_dict_and_model_options_agree(item_type):
    from pixelsmith.models.options import GenerationOptions

    a = item_api.generate(item_type, {"subType": None, "material": "SILVER"}, rng=rng_for(4))
    b = item_api.generate(item_type, GenerationOptions(material="SILVER"), rng=rng_for(4))
    assert a.name == b.name


def test_unknown_item_type():
    with pytest.raises(KeyError):
        item_api.generate("trebuchet")
