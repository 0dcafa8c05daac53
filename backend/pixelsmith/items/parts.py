"""Shared item parts: material pools, gems, rivets and small helpers used by several generators."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pixelsmith.engine.context import Clip, GenerationContext
from pixelsmith.engine.palette import Palette
from pixelsmith.engine.shading import OverlayRule, gem_rule
from pixelsmith.engine.shapes import Disc, Ellipse, Rect, ShapeSpec, Union, WidthProfile
from pixelsmith.utils.math_helpers import round_half_up

GEM_MATERIALS = [
    "GEM_RED",
    "GEM_BLUE",
    "GEM_GREEN",
    "GEM_PURPLE",
    "GEM_YELLOW",
    "GEM_ORANGE",
    "GEM_CYAN",
    "GEM_WHITE",
]

PAINTS = [
    "RED_PAINT",
    "GREEN_PAINT",
    "BLUE_PAINT",
    "BLACK_PAINT",
    "WHITE_PAINT",
    "YELLOW_PAINT",
    "PURPLE_PAINT",
]

ACCENT_METALS = ["GOLD", "SILVER", "BRONZE", "IRON", "STEEL", "OBSIDIAN", "DARK_STEEL", "ENCHANTED", "BONE"]


def draw_gem(
    ctx: GenerationContext,
    name: str,
    cx: int,
    cy: int,
    width: int,
    height: int,
    palette: Palette,
    *,
    shape: ShapeSpec | None = None,
    clip: Clip | None = None,
    overlays: Iterable[OverlayRule] = (),
) -> None:
    """Outlined gem with radial facet shading, centred on (cx, cy)."""
    rx, ry = max(0.5, width / 2), max(0.5, height / 2)
    spec = shape or Ellipse(rx, ry)
    ctx.draw(
        name,
        spec.at(cx, cy),
        palette,
        outlined=width >= 3 and height >= 3,
        overlays=[gem_rule(cx, cy, rx, ry, palette), *overlays],
        clip=clip,
    )


def draw_rivets(
    ctx: GenerationContext,
    points: list[tuple[int, int]],
    palette: Palette,
    size: int = 1,
    clip: Clip | None = None,
) -> None:
    for x, y in points:
        spec = Rect(size, size) if size > 1 else Disc(0.5)
        origin = (x - size // 2, y - size // 2) if size > 1 else (x, y)
        ctx.fill(spec.at(*origin), palette.highlight, clip=clip)


def wood_grain(top: int, period: int = 3) -> Clip:
    """Sparse diagonal grain marks for wooden hafts."""
    return lambda x, y: (x + (y - top) * 2) % (period * 3) == 0


def palette_colors(palette: Palette) -> dict[str, Any]:
    return {"base": palette.base, "shadow": palette.shadow, "highlight": palette.highlight}


def row_strips(widths: list[int], side: int = 1) -> Union:
    """Horizontal strips, one per row, growing right (side=1) or left (side=-1) from column 0."""
    parts = []
    for row, w in enumerate(widths):
        if w <= 0:
            continue
        parts.append((Rect(w, 1), 0 if side > 0 else -w, row))
    return Union(tuple(parts))


def stroke(dx: int, dy: int) -> Union:
    """One-cell line from the origin to (dx, dy), one cell per step along the longer axis."""
    steps = max(abs(dx), abs(dy))
    if steps == 0:
        return Union(((Rect(1, 1), 0, 0),))
    cells = {(round_half_up(dx * i / steps), round_half_up(dy * i / steps)) for i in range(steps + 1)}
    return Union(tuple((Rect(1, 1), x, y) for x, y in sorted(cells)))


def neckline_profile(kind: str, width: int) -> WidthProfile:
    """Opening width down the neckline rows, widest at the top edge."""
    if kind == "v_neck":
        return WidthProfile("linear", start=width, end=0, minimum=0, rounding="floor")
    if kind == "round_neck":
        return WidthProfile("quarter_circle", start=width, minimum=0, rounding="floor")
    if kind == "closed_high":
        return WidthProfile("linear", start=width * 0.5, end=0, minimum=0, rounding="floor")
    return WidthProfile("constant", start=width, minimum=0)
