"""Palette catalog: material key → base/shadow/highlight/outline colours.

Resolution is total: an unknown or empty key resolves to the default
material (IRON) with a warning, never an exception.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace

from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

DEFAULT_MATERIAL = "IRON"


@dataclass(frozen=True)
class Palette:
    name: str
    base: str
    shadow: str
    highlight: str
    outline: str | None = None

    def without_outline(self) -> Palette:
        """Same colours with edge rule falling through to highlight/shadow."""
        if self.outline is None:
            return self
        return replace(self, outline=None)

    def as_dict(self) -> dict[str, str | None]:
        return asdict(self)


# key: (base, shadow, highlight, outline)
_COLORS: dict[str, tuple[str, str, str, str]] = {
    # Metals
    "IRON": ("#8A8A8A", "#6B6B6B", "#A9A9A9", "#4D4D4D"),
    "STEEL": ("#B0C4DE", "#778899", "#E6E6FA", "#46505A"),
    "DARK_STEEL": ("#5A5A6A", "#3E3E48", "#7E7E8C", "#2C2C33"),
    "GOLD": ("#FFD700", "#B8860B", "#FFFACD", "#806000"),
    "BRONZE": ("#CD7F32", "#8C5A23", "#D2A679", "#5D3A1A"),
    "SILVER": ("#C0C0C0", "#A0A0A0", "#E0E0E0", "#707070"),
    "COPPER": ("#B87333", "#8C5828", "#D9904A", "#5A3A1A"),
    "OBSIDIAN": ("#201A23", "#0D0C0F", "#3A3042", "#000000"),
    "ENCHANTED": ("#7B68EE", "#4B3BA8", "#B0A4FF", "#2A1F66"),
    # Organics
    "WOOD": ("#8B4513", "#5C2E0D", "#A0522D", "#3E1F09"),
    "BONE": ("#F5F5DC", "#D2B48C", "#FFFFF0", "#A08C78"),
    "IVORY": ("#FFFFF0", "#E0E0D1", "#FFFFFF", "#B0B0A1"),
    "STONE": ("#808080", "#5A5A5A", "#A9A9A9", "#404040"),
    "GREEN_LEAF": ("#2E8B57", "#1E5638", "#3CB371", "#143D24"),
    "STRAW": ("#F0E68C", "#DAA520", "#FFFFE0", "#B8860B"),
    "PAPER": ("#FEFDF4", "#EAE8D8", "#FFFFFF", "#C0B8A8"),
    "PARCHMENT": ("#F5EAAA", "#D2B48C", "#FFF8DC", "#A08C78"),
    # Leathers
    "LEATHER": ("#A0522D", "#5F341A", "#CD853F", "#4A2914"),
    "BLACK_LEATHER": ("#3A3A3A", "#202020", "#555555", "#101010"),
    "WHITE_LEATHER": ("#F0EBE0", "#D4CCC0", "#FFFFFF", "#B0A89F"),
    "DARK_BROWN_LEATHER": ("#5D3A1A", "#3E1F09", "#7B4F2E", "#2C1505"),
    "RED_LEATHER": ("#8B0000", "#5E0000", "#B22222", "#400000"),
    "GREEN_LEATHER": ("#006400", "#004D00", "#228B22", "#002A00"),
    "BLUE_LEATHER": ("#00008B", "#00005E", "#4169E1", "#000040"),
    # Paints
    "RED_PAINT": ("#B22222", "#800000", "#DC143C", "#500000"),
    "GREEN_PAINT": ("#228B22", "#006400", "#3CB371", "#003300"),
    "BLUE_PAINT": ("#4682B4", "#2F5A7D", "#6FA3D0", "#1C3650"),
    "BLACK_PAINT": ("#2F4F4F", "#1C3030", "#4A6B6B", "#0F1A1A"),
    "WHITE_PAINT": ("#F5F5F5", "#D0D0D0", "#FFFFFF", "#A0A0A0"),
    "YELLOW_PAINT": ("#FFD700", "#C9A800", "#FFEB66", "#7A6600"),
    "PURPLE_PAINT": ("#8A2BE2", "#5E1D9B", "#B06FF0", "#3A1260"),
    # Gems
    "GEM_RED": ("#FF0000", "#8B0000", "#FFC0CB", "#4D0000"),
    "GEM_BLUE": ("#0000FF", "#00008B", "#ADD8E6", "#00004D"),
    "GEM_GREEN": ("#008000", "#004D00", "#90EE90", "#002600"),
    "GEM_PURPLE": ("#800080", "#4B004B", "#DDA0DD", "#2A002A"),
    "GEM_YELLOW": ("#FFDB58", "#C9A227", "#FFF5C0", "#6E5A10"),
    "GEM_ORANGE": ("#FFA500", "#C06A00", "#FFD699", "#5C3300"),
    "GEM_CYAN": ("#00FFFF", "#008B8B", "#E0FFFF", "#004545"),
    "GEM_WHITE": ("#F0F8FF", "#C0C8D0", "#FFFFFF", "#8090A0"),
    "PEARL": ("#FDF5E6", "#E0D5C0", "#FFFFFF", "#A89C88"),
    "OPAL": ("#E6E6FA", "#B0B0D8", "#FFFFFF", "#7070A0"),
    # Strings, cords, fabrics
    "ROPE": ("#D2B48C", "#8B7355", "#E6CBA5", "#5D4A36"),
    "SILK_STRING": ("#F5F5F5", "#D8D8D8", "#FFFFFF", "#A8A8A8"),
    "GUT_STRING": ("#F0E68C", "#C8BE6A", "#FFF8C0", "#807830"),
    "WIRE_STRING": ("#A9A9A9", "#808080", "#D0D0D0", "#505050"),
    "FUR_WHITE": ("#FFFFFF", "#E0E0E0", "#F8F8F8", "#D0D0D0"),
    "CLOTH": ("#D2B48C", "#A0522D", "#F5DEB3", "#8B4513"),
    "ENCHANTED_SILK": ("#E6E6FA", "#9370DB", "#FFFFFF", "#8A2BE2"),
}

# Alias key → key whose colours it shares
_ALIASES: dict[str, str] = {
    "DARK_LEATHER": "DARK_BROWN_LEATHER",
    "ROPE_BROWN": "WOOD",
    "FUR_BROWN": "LEATHER",
    "CLOTH_FABRIC": "CLOTH",
    "SILK_MAGICAL": "ENCHANTED_SILK",
    "ROSE_GOLD": "COPPER",
    "DIAMOND": "GEM_WHITE",
}


def _build_catalog() -> dict[str, Palette]:
    catalog: dict[str, Palette] = {}
    for key, (base, shadow, highlight, outline) in _COLORS.items():
        catalog[key] = Palette(title_case(key), base, shadow, highlight, outline)
    for alias, target in _ALIASES.items():
        catalog[alias] = replace(catalog[target], name=title_case(alias))
    return catalog


MATERIAL_PALETTES: dict[str, Palette] = _build_catalog()


def normalize_key(key: str | None) -> str:
    return (key or "").strip().upper()


def is_known_material(key: str | None) -> bool:
    return normalize_key(key) in MATERIAL_PALETTES


def material_keys() -> list[str]:
    return sorted(MATERIAL_PALETTES)


def get_palette(key: str | None, default: str = DEFAULT_MATERIAL) -> Palette:
    """Palette for a material key. Total: unknown keys fall back to ``default``."""
    normalized = normalize_key(key)
    palette = MATERIAL_PALETTES.get(normalized)
    if palette is None:
        fallback = normalize_key(default)
        if fallback not in MATERIAL_PALETTES:
            fallback = DEFAULT_MATERIAL
        logger.warning("Unknown material key %r, falling back to %s", key, fallback)
        return MATERIAL_PALETTES[fallback]
    return palette
