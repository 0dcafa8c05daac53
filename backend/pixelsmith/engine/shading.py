"""Edge shading: boundary detection over a rasterized membership mask.

Two passes. First the silhouette is rasterized into a boolean mask over its
bounding box plus a one-cell margin; only then are the four axis neighbours
of every inside cell compared, so no neighbour query ever sees a partially
drawn shape.

Colour rule, in priority order:
    1. palette.outline set      → every boundary cell gets the outline colour
    2. exposed top or left      → highlight (wins ties)
       exposed bottom or right  → shadow
    3. interior                 → base, then component overlays
"""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from pixelsmith.engine.palette import Palette
from pixelsmith.engine.shapes import Silhouette
from pixelsmith.engine.surface import LogicalSurface

logger = logging.getLogger(__name__)

Cell = tuple[int, int]
OverlayRule = Callable[[int, int], "str | None"]


class EdgeSide(enum.IntFlag):
    NONE = 0
    TOP = 1
    LEFT = 2
    BOTTOM = 4
    RIGHT = 8


_HIGHLIGHT_SIDES = EdgeSide.TOP | EdgeSide.LEFT
_SHADOW_SIDES = EdgeSide.BOTTOM | EdgeSide.RIGHT


def rasterize(silhouette: Silhouette) -> tuple[NDArray[np.bool_], int, int]:
    """Membership mask with a one-cell empty margin, plus its grid origin."""
    x0, y0, x1, y1 = silhouette.bbox
    if x1 < x0 or y1 < y0:
        return np.zeros((2, 2), dtype=bool), x0 - 1, y0 - 1
    mask = np.zeros((y1 - y0 + 3, x1 - x0 + 3), dtype=bool)
    for x, y in silhouette.cells():
        mask[y - y0 + 1, x - x0 + 1] = True
    return mask, x0 - 1, y0 - 1


def boundary_sides(silhouette: Silhouette) -> dict[Cell, EdgeSide]:
    """Exposed sides of every inside cell (EdgeSide.NONE for interior cells)."""
    mask, ox, oy = rasterize(silhouette)
    inner = mask[1:-1, 1:-1]
    exposed = {
        EdgeSide.TOP: inner & ~mask[:-2, 1:-1],
        EdgeSide.LEFT: inner & ~mask[1:-1, :-2],
        EdgeSide.BOTTOM: inner & ~mask[2:, 1:-1],
        EdgeSide.RIGHT: inner & ~mask[1:-1, 2:],
    }
    sides: dict[Cell, EdgeSide] = {}
    for row, col in zip(*np.nonzero(inner)):
        flags = EdgeSide.NONE
        for side, hits in exposed.items():
            if hits[row, col]:
                flags |= side
        sides[(int(col) + ox + 1, int(row) + oy + 1)] = flags
    return sides


def edge_color(sides: EdgeSide, palette: Palette) -> str:
    if sides == EdgeSide.NONE:
        return palette.base
    if palette.outline is not None:
        return palette.outline
    if sides & _HIGHLIGHT_SIDES:
        return palette.highlight
    return palette.shadow


@dataclass
class ShadedSilhouette:
    colors: dict[Cell, str] = field(default_factory=dict)
    sides: dict[Cell, EdgeSide] = field(default_factory=dict)

    def is_boundary(self, cell: Cell) -> bool:
        return self.sides.get(cell, EdgeSide.NONE) != EdgeSide.NONE

    def interior_cells(self) -> list[Cell]:
        return [c for c, s in self.sides.items() if s == EdgeSide.NONE]

    def overlay(self, rule: OverlayRule) -> ShadedSilhouette:
        """Recolour interior cells where ``rule`` returns a colour."""
        for x, y in self.interior_cells():
            color = rule(x, y)
            if color is not None:
                self.colors[(x, y)] = color
        return self

    def paint(self, surface: LogicalSurface, clip: Callable[[int, int], bool] | None = None) -> int:
        painted = 0
        for (x, y), color in self.colors.items():
            if not surface.in_bounds(x, y):
                continue
            if clip is not None and not clip(x, y):
                continue
            surface.put(x, y, color)
            painted += 1
        return painted

    def __len__(self) -> int:
        return len(self.colors)


def shade(silhouette: Silhouette, palette: Palette) -> ShadedSilhouette:
    sides = boundary_sides(silhouette)
    colors = {cell: edge_color(s, palette) for cell, s in sides.items()}
    return ShadedSilhouette(colors=colors, sides=sides)


# ── Overlay rules: applied to interior cells after the edge pass ──


def sphere_rule(cx: float, cy: float, rx: float, ry: float, palette: Palette, threshold: float = 0.7) -> OverlayRule:
    """Upper-left highlight and lower-right shadow on the outer ring of a ball."""

    def rule(x: int, y: int) -> str | None:
        if rx <= 0 or ry <= 0:
            return None
        dx, dy = x - cx, y - cy
        if (dx / rx) ** 2 + (dy / ry) ** 2 <= threshold:
            return None
        if dx < 0 and dy < 0:
            return palette.highlight
        if dx > 0 and dy > 0:
            return palette.shadow
        return None

    return rule


def boss_rule(cx: float, cy: float, radius: float, palette: Palette) -> OverlayRule:
    """Domed boss: bright centre, lit upper-left rim, dark lower-right rim."""

    def rule(x: int, y: int) -> str | None:
        if radius <= 0:
            return None
        dx, dy = x - cx, y - cy
        f = math.sqrt(dx * dx + dy * dy) / radius
        if f < 0.3:
            return palette.highlight
        if f > 0.7:
            return palette.highlight if (dx < 0 or dy < 0) else palette.shadow
        return None

    return rule


def gem_rule(cx: float, cy: float, rx: float, ry: float, palette: Palette) -> OverlayRule:
    """Faceted gem: glint at the core, lit upper-left and shaded lower-right rim."""

    def rule(x: int, y: int) -> str | None:
        if rx <= 0 or ry <= 0:
            return None
        dx, dy = x - cx, y - cy
        f = math.sqrt((dx / rx) ** 2 + (dy / ry) ** 2)
        if f < 0.4:
            return palette.highlight
        if f > 0.6:
            if dx <= 0 and dy <= 0:
                return palette.highlight
            if dx >= 0 and dy >= 0:
                return palette.shadow
        return None

    return rule


def domed_band_rule(cx: float, cy: float, inner_radius: float, outer_radius: float, palette: Palette) -> OverlayRule:
    """Ring band lit along its crest and shaded toward both edges."""
    mid = (inner_radius + outer_radius) / 2
    half = max(0.5, (outer_radius - inner_radius) / 2)

    def rule(x: int, y: int) -> str | None:
        d = math.hypot(x - cx, y - cy)
        t = abs(d - mid) / half
        if t < 0.35:
            return palette.highlight
        if t > 0.75:
            return palette.shadow
        return None

    return rule


def pattern_rule(predicate: Callable[[int, int], bool], color: str) -> OverlayRule:
    return lambda x, y: color if predicate(x, y) else None


def column_rule(columns: dict[int, str]) -> OverlayRule:
    """Fixed colour per grid column (shaft left-highlight/right-shadow)."""
    return lambda x, y: columns.get(x)


def row_rule(rows: dict[int, str]) -> OverlayRule:
    return lambda x, y: rows.get(y)
