"""Tests for component plans and the item assembler."""

from __future__ import annotations

import random

import pytest

from pixelsmith.engine.assembler import SENTINEL_ERROR, ComponentPlan, ItemAssembler
from pixelsmith.engine.config import GridConfig
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import GeneratorRegistry, GeneratorSpec
from pixelsmith.engine.shapes import Disc, Rect


def _noop(ctx: GenerationContext) -> None:
    pass


def _plan(*steps: tuple[str, tuple[str, ...]]) -> ComponentPlan:
    plan = ComponentPlan("test", [], lambda ctx: "Test", lambda ctx: {})
    for step_id, deps in steps:
        plan.add(step_id, _noop, *deps)
    return plan


def test_independent_steps_keep_declaration_order():
    plan = _plan(("c", ()), ("a", ()), ("b", ()))
    assert [s.id for s in plan.resolve_order()] == ["c", "a", "b"]


def test_dependencies_come_first():
    plan = _plan(("pommel", ("grip",)), ("grip", ("guard",)), ("guard", ("blade",)), ("blade", ()))
    assert [s.id for s in plan.resolve_order()] == ["blade", "guard", "grip", "pommel"]


def test_diamond_dependencies():
    plan = _plan(("torso", ()), ("left", ("torso",)), ("right", ("torso",)), ("belt", ("left", "right")))
    ids = [s.id for s in plan.resolve_order()]
    assert ids[0] == "torso"
    assert ids[-1] == "belt"


def test_duplicate_step_rejected():
    with pytest.raises(ValueError, match="Duplicate"):
        _plan(("a", ()), ("a", ())).resolve_order()


def test_unknown_dependency_rejected():
    with pytest.raises(ValueError, match="unknown"):
        _plan(("a", ("ghost",))).resolve_order()


def test_cycle_rejected():
    with pytest.raises(ValueError, match="Circular"):
        _plan(("a", ("b",)), ("b", ("a",))).resolve_order()


def _dot_planner(ctx: GenerationContext) -> ComponentPlan:
    radius = ctx.sampler.int_in(2, 6)
    ctx.params["radius"] = radius
    material = ctx.sampler.material(ctx.options.material, ["GOLD", "SILVER"])

    def body(ctx: GenerationContext) -> None:
        ctx.draw("body", Disc(radius).at(ctx.grid.center_x, ctx.grid.center_y), ctx.palette(material))
        ctx.anchors.record("top", ctx.grid.center_x, ctx.grid.center_y - radius)

    def cap(ctx: GenerationContext) -> None:
        top = ctx.anchor("top")
        ctx.draw("cap", Rect(1, 1).at(top.x, top.y - 1), ctx.palette("IRON"))

    plan = ComponentPlan("dot", [], lambda ctx: f"{ctx.palette(material).name} Dot", lambda ctx: {"radius": radius})
    plan.add("cap", cap, "body")
    plan.add("body", body)
    return plan


def _assembler(grid: GridConfig | None = None) -> ItemAssembler:
    registry = GeneratorRegistry()
    registry.register(GeneratorSpec(item_type="dot", planner=_dot_planner))
    return ItemAssembler(registry=registry, grid=grid or GridConfig())


def test_generate_item():
    item = _assembler().generate("dot", {"material": "gold", "seed": 42}, rng=random.Random(3))
    assert item.type == "dot"
    assert item.name == "Gold Dot"
    assert item.seed == 42
    assert item.image_data_url.startswith("data:image/png;base64,")
    assert item.item_data["seedApplied"] is False
    assert "warnings" not in item.item_data
    assert [c.name for c in item.components] == ["body", "cap"]
    assert item.surface.is_filled(32, 32)
    assert not item.is_error


def test_record_uses_wire_names():
    record = _assembler().generate("dot", rng=random.Random(3)).to_record()
    assert set(record) == {"type", "name", "seed", "itemData", "imageDataUrl"}


def test_warnings_surface_in_item_data():
    item = _assembler().generate("dot", {"material": "UNKNOWNIUM"}, rng=random.Random(3))
    assert item.name == "Iron Dot"
    assert any("UNKNOWNIUM" in w for w in item.item_data["warnings"])


def test_unknown_item_type():
    with pytest.raises(KeyError):
        _assembler().generate("trebuchet")


def test_sentinel_when_surface_fails():
    item = _assembler(GridConfig(width=0)).generate("dot", {"seed": 7})
    assert item.is_error
    assert item.name == "Error Dot"
    assert item.item_data == {"error": SENTINEL_ERROR}
    assert item.seed == 7
    assert item.image_data_url.startswith("data:image/png;base64,")


def test_fixed_stream_is_deterministic():
    a = _assembler().generate("dot", rng=random.Random(11))
    b = _assembler().generate("dot", rng=random.Random(11))
    assert (a.surface.to_raster() == b.surface.to_raster()).all()
    assert a.item_data == b.item_data


def test_seed_recorded_without_driving_rng_by_default():
    item = _assembler().generate("dot", {"seed": 5})
    assert item.seed == 5
    assert item.item_data["seedApplied"] is False


def test_seed_drives_rng_when_enabled():
    assembler = _assembler(GridConfig(seed_drives_rng=True))
    a = assembler.generate("dot", {"seed": 99})
    b = assembler.generate("dot", {"seed": 99})
    assert a.item_data["seedApplied"] is True
    assert a.item_data["radius"] == b.item_data["radius"]
    assert (a.surface.to_raster() == b.surface.to_raster()).all()


def test_missing_seed_gets_timestamp():
    item = _assembler().generate("dot", rng=random.Random(1))
    assert item.seed > 0


def test_custom_encoder():
    assembler = ItemAssembler(registry=_assembler().registry, encoder=lambda surface: f"cells:{surface.filled_count}")
    item = assembler.generate("dot", rng=random.Random(2))
    assert item.image_data_url == f"cells:{item.surface.filled_count}"
