"""Tests for the generator registry."""

from __future__ import annotations

import pytest

import pixelsmith.item_api  # noqa: F401
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import GeneratorRegistry, GeneratorSpec, get_registry
from tests.conftest import ITEM_TYPES


def _noop(ctx: GenerationContext) -> None:
    pass


def test_register_and_get():
    reg = GeneratorRegistry()
    spec = GeneratorSpec(item_type="lantern", planner=_noop)
    reg.register(spec)
    assert reg.get("lantern") is spec
    assert "lantern" in reg
    assert reg.count == 1


def test_duplicate_rejected():
    reg = GeneratorRegistry()
    reg.register(GeneratorSpec(item_type="lantern", planner=_noop))
    with pytest.raises(ValueError):
        reg.register(GeneratorSpec(item_type="lantern", planner=_noop))


def test_unknown_type():
    with pytest.raises(KeyError):
        GeneratorRegistry().get("lantern")


def test_all_sorted():
    reg = GeneratorRegistry()
    for name in ("staff", "axe", "helm"):
        reg.register(GeneratorSpec(item_type=name, planner=_noop))
    assert [s.item_type for s in reg.all()] == ["axe", "helm", "staff"]


def test_builtin_generators_registered():
    reg = get_registry()
    for item_type in ITEM_TYPES:
        assert item_type in reg
    assert reg.count >= len(ITEM_TYPES)


def test_builtin_sub_types():
    reg = get_registry()
    assert "katana" in reg.get("sword").sub_types
    assert reg.get("sword").aliases == {"longsword": "standard"}
    assert reg.get("robe").sub_types == ["short", "medium", "long"]
    assert reg.get("jewelry").aliases["choker"] == "collar"
