"""Shared test fixtures."""

from __future__ import annotations

import random

import pytest

from pixelsmith.engine.config import GridConfig
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.palette import Palette

# Seeds reused across generator tests
SEEDS = [1, 7, 42, 1234, 99991]

GRID = GridConfig()

# Distinct base/shadow/highlight so every edge rule is observable
TEST_PALETTE = Palette("Test", base="#808080", shadow="#202020", highlight="#E0E0E0", outline="#000000")

ITEM_TYPES = [
    "sword", "shield", "blunt_weapon", "polearm", "bow", "armor", "robe", "jewelry",
    "axe", "staff", "boots", "gloves", "hat", "book", "potion",
]


def rng_for(seed: int) -> random.Random:
    return random.Random(seed)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def grid() -> GridConfig:
    return GRID


@pytest.fixture
def palette() -> Palette:
    return TEST_PALETTE


@pytest.fixture
def ctx(rng: random.Random) -> GenerationContext:
    context = GenerationContext.create("sword", rng=rng, grid=GRID)
    context.acquire_surface()
    return context
