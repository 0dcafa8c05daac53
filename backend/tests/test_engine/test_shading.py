"""Tests for edge shading and overlay rules."""

from __future__ import annotations

import pytest

from pixelsmith.engine.palette import get_palette
from pixelsmith.engine.shading import (
    EdgeSide,
    boundary_sides,
    column_rule,
    pattern_rule,
    rasterize,
    shade,
)
from pixelsmith.engine.shapes import Annulus, Disc, PolarFlanged, Rect, TaperedBody, WidthProfile
from pixelsmith.engine.surface import LogicalSurface
from tests.conftest import TEST_PALETTE


def test_rect_edges(palette):
    shaded = shade(Rect(4, 3).at(0, 0), palette.without_outline())
    c = shaded.colors
    assert c[(0, 0)] == palette.highlight
    assert c[(1, 0)] == palette.highlight
    assert c[(0, 1)] == palette.highlight
    # Highlight wins where a lit and a shaded side meet
    assert c[(0, 2)] == palette.highlight
    assert c[(3, 0)] == palette.highlight
    assert c[(3, 1)] == palette.shadow
    assert c[(1, 2)] == palette.shadow
    assert c[(3, 2)] == palette.shadow
    assert c[(1, 1)] == palette.base
    assert c[(2, 1)] == palette.base


def test_outline_colours_every_boundary_cell(palette):
    shaded = shade(Disc(4).at(10, 10), palette)
    for cell, color in shaded.colors.items():
        if shaded.is_boundary(cell):
            assert color == palette.outline
        else:
            assert color == palette.base


@pytest.mark.parametrize(
    "sil",
    [
        Annulus(10, 6).at(20, 20),
        PolarFlanged(4, 6, 5, 3).at(20, 20),
        TaperedBody(30, WidthProfile("linear", start=6, end=1)).at(20, 2),
        Disc(1).at(3, 3),
    ],
)
def test_boundary_cells_never_base(sil):
    pal = TEST_PALETTE.without_outline()
    shaded = shade(sil, pal)
    assert shaded.colors
    for cell, sides in shaded.sides.items():
        x, y = cell
        exposed = any(not sil.contains(nx, ny) for nx, ny in ((x, y - 1), (x - 1, y), (x, y + 1), (x + 1, y)))
        assert (sides != EdgeSide.NONE) == exposed
        if exposed:
            assert shaded.colors[cell] != pal.base


def test_boundary_sides_flags():
    sides = boundary_sides(Rect(3, 3).at(0, 0))
    assert sides[(0, 0)] == EdgeSide.TOP | EdgeSide.LEFT
    assert sides[(2, 2)] == EdgeSide.BOTTOM | EdgeSide.RIGHT
    assert sides[(1, 1)] == EdgeSide.NONE


def test_single_cell_is_all_edge():
    sides = boundary_sides(Rect(1, 1).at(4, 4))
    assert sides == {(4, 4): EdgeSide.TOP | EdgeSide.LEFT | EdgeSide.BOTTOM | EdgeSide.RIGHT}


def test_empty_silhouette():
    mask, _, _ = rasterize(Disc(0).at(0, 0))
    assert not mask.any()
    assert boundary_sides(Disc(0).at(0, 0)) == {}
    assert len(shade(Disc(0).at(0, 0), TEST_PALETTE)) == 0


def test_overlay_only_touches_interior(palette):
    shaded = shade(Rect(5, 5).at(0, 0), palette.without_outline())
    shaded.overlay(column_rule({0: "#123456", 2: "#123456"}))
    assert shaded.colors[(0, 2)] == palette.highlight
    assert shaded.colors[(2, 2)] == "#123456"
    assert shaded.colors[(1, 2)] == palette.base


def test_pattern_rule():
    rule = pattern_rule(lambda x, y: x == y, "#FFFFFF")
    assert rule(3, 3) == "#FFFFFF"
    assert rule(3, 4) is None


def test_paint_clips_to_surface_and_predicate(palette):
    surface = LogicalSurface(8, 8)
    shaded = shade(Rect(6, 6).at(4, -2), palette)
    painted = shaded.paint(surface, clip=lambda x, y: x < 7)
    assert painted == 3 * 4
    assert surface.is_filled(4, 0)
    assert not surface.is_filled(7, 0)
    assert surface.filled_count == painted


def test_catalog_palette_edges_differ_from_base():
    pal = get_palette("GOLD").without_outline()
    shaded = shade(Disc(5).at(8, 8), pal)
    for cell in shaded.sides:
        if shaded.is_boundary(cell):
            assert shaded.colors[cell] in (pal.highlight, pal.shadow)
