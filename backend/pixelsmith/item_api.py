"""Public generation surface: one ``generate_x(options)`` function per item type.

Each call is independent. Pass ``rng`` for a reproducible draw; otherwise the
call gets a fresh ``random.Random`` (seeded from the ``seed`` option only when
``seed_drives_rng`` is enabled).
"""

from __future__ import annotations

import logging
import random
from typing import Any

from pixelsmith.engine.assembler import ItemAssembler
from pixelsmith.engine.config import GridConfig
from pixelsmith.models.item import Item
from pixelsmith.models.options import GenerationOptions

# Item modules register their planners on import
from pixelsmith.items import (  # noqa: F401
    armor,
    axe,
    blunt,
    book,
    boots,
    bow,
    gloves,
    hat,
    jewelry,
    polearm,
    potion,
    robe,
    shield,
    staff,
    sword,
)

logger = logging.getLogger(__name__)

Options = GenerationOptions | dict[str, Any] | None

_assembler: ItemAssembler | None = None


def get_assembler() -> ItemAssembler:
    global _assembler
    if _assembler is None:
        from pixelsmith.config import settings

        _assembler = ItemAssembler(grid=GridConfig.from_settings(settings))
    return _assembler


def generate(item_type: str, options: Options = None, *, rng: random.Random | None = None) -> Item:
    """Generate one item of a registered type. Unknown types raise KeyError."""
    return get_assembler().generate(item_type, options, rng=rng)


def generate_sword(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("sword", options, rng=rng)


def generate_shield(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("shield", options, rng=rng)


def generate_blunt_weapon(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("blunt_weapon", options, rng=rng)


def generate_polearm(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("polearm", options, rng=rng)


def generate_bow(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("bow", options, rng=rng)


def generate_armor(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("armor", options, rng=rng)


def generate_robe(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("robe", options, rng=rng)


def generate_jewelry(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("jewelry", options, rng=rng)


def generate_axe(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("axe", options, rng=rng)


def generate_staff(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("staff", options, rng=rng)


def generate_boots(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("boots", options, rng=rng)


def generate_gloves(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("gloves", options, rng=rng)


def generate_hat(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("hat", options, rng=rng)


def generate_book(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("book", options, rng=rng)


def generate_potion(options: Options = None, *, rng: random.Random | None = None) -> Item:
    return generate("potion", options, rng=rng)
