"""Tests for the parameter sampler."""

from __future__ import annotations

import random

import pytest

from pixelsmith.engine.sampler import ParameterSampler


def test_int_in_bounds(rng):
    s = ParameterSampler(rng)
    draws = {s.int_in(2, 4) for _ in range(200)}
    assert draws == {2, 3, 4}


def test_int_in_fractional_and_empty_ranges(rng):
    s = ParameterSampler(rng)
    assert all(2 <= s.int_in(1.2, 3.9) <= 3 for _ in range(50))
    assert s.int_in(5, 3) == 5
    assert s.int_in(2.5, 2.7) == 3


def test_float_and_chance(rng):
    s = ParameterSampler(rng)
    assert all(1.0 <= s.float_in(1.0, 2.0) <= 2.0 for _ in range(50))
    assert not any(s.chance(0.0) for _ in range(50))
    assert all(s.chance(1.0) for _ in range(50))
    assert {s.sign() for _ in range(50)} == {-1, 1}


def test_choose_exclude(rng):
    s = ParameterSampler(rng)
    assert all(s.choose(["a", "b"], exclude=["a"]) == "b" for _ in range(20))
    # Excluding everything falls back to the full set
    assert s.choose(["a"], exclude=["a"]) == "a"


def test_choose_empty(rng):
    s = ParameterSampler(rng)
    with pytest.raises(ValueError):
        s.choose([])
    with pytest.raises(ValueError):
        s.choose_weighted({})


def test_choose_weighted(rng):
    s = ParameterSampler(rng)
    assert all(s.choose_weighted({"x": 1.0, "y": 0.0}) == "x" for _ in range(20))


def test_choose_known(rng):
    s = ParameterSampler(rng)
    known = ["standard", "dagger"]
    aliases = {"longsword": "standard"}
    assert s.choose_known("Dagger ", known, aliases) == "dagger"
    assert s.choose_known("longsword", known, aliases) == "standard"
    assert s.warnings == []
    assert s.choose_known(None, known) in known
    assert s.warnings == []


def test_choose_known_unknown_warns(rng):
    s = ParameterSampler(rng)
    assert s.choose_known("zweihander", ["standard", "dagger"], label="sword type") in ("standard", "dagger")
    assert len(s.warnings) == 1
    assert "zweihander" in s.warnings[0]


def test_material(rng):
    s = ParameterSampler(rng)
    assert s.material("gold", ["IRON"]) == "GOLD"
    assert s.material(None, ["WOOD", "BONE"]) in ("WOOD", "BONE")
    assert s.warnings == []
    assert s.material("UNKNOWNIUM", ["WOOD"]) == "IRON"
    assert "UNKNOWNIUM" in s.warnings[0]


def test_material_custom_default(rng):
    s = ParameterSampler(rng, default_material="STEEL")
    assert s.material("UNKNOWNIUM", ["WOOD"]) == "STEEL"


def test_same_stream_same_draws():
    a = ParameterSampler(random.Random(5))
    b = ParameterSampler(random.Random(5))
    seq_a = [(a.int_in(0, 100), a.choose("abcdef"), a.float_in(0, 1)) for _ in range(20)]
    seq_b = [(b.int_in(0, 100), b.choose("abcdef"), b.float_in(0, 1)) for _ in range(20)]
    assert seq_a == seq_b
