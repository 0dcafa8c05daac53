"""Tests for shape membership predicates."""

from __future__ import annotations

import math

import pytest

from pixelsmith.engine.shapes import (
    Annulus,
    ArcBand,
    Band,
    CompositeSilhouette,
    Curve,
    Diamond,
    Difference,
    Disc,
    Drooped,
    EdgeBand,
    Ellipse,
    PolarFlanged,
    Rect,
    Saltire,
    Sheared,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
    is_inside,
    make_shape,
    shape_families,
)
from pixelsmith.utils.math_helpers import progress_ratio


SPECS = [
    Disc(5),
    Disc(3.5),
    Annulus(10, 6),
    Ellipse(6, 3),
    Ellipse(4, 7, tolerance=1.3),
    Rect(5, 3),
    Diamond(3, 6),
    TaperedBody(20, WidthProfile("linear", start=6, end=1)),
    TaperedBody(30, WidthProfile("constant", start=3), curve=Curve(6, -1, phase=0.7)),
    PolarFlanged(4, 6, 5, 3),
    PolarFlanged(3, 8, 4, 2, style="star", rotation=0.3),
    CompositeSilhouette(
        12,
        20,
        (Band("top", 8, WidthProfile("constant", start=12)), Band("point", 12, WidthProfile("linear", start=12, end=1))),
        corner_radius=2,
    ),
    ArcBand(10, 2, 4),
    ArcBand(10, 2, 4, style="v", inverted=True),
    EdgeBand(Disc(6), 2),
    Saltire(5, 2),
    Union(((Rect(2, 2), -4, 0), (Disc(2), 3, 3))),
    Difference(Disc(6), ((Rect(3, 3), -1, -1),)),
    Window(Annulus(8, 5), -8, 0, 8, 8),
    Sheared(Rect(3, 6), 0.5, side=-1),
    Drooped(Rect(8, 3), 0.55),
]


@pytest.mark.parametrize("spec", SPECS, ids=lambda s: s.family)
def test_nothing_outside_bbox(spec):
    x0, y0, x1, y1 = spec.local_bbox()
    for dy in range(y0 - 4, y1 + 5):
        for dx in range(x0 - 4, x1 + 5):
            if x0 <= dx <= x1 and y0 <= dy <= y1:
                continue
            assert not spec.contains_local(dx, dy), (dx, dy)


@pytest.mark.parametrize("spec", SPECS, ids=lambda s: s.family)
def test_cells_are_contained(spec):
    sil = spec.at(20, 30)
    cells = list(sil.cells())
    assert cells
    assert all(sil.contains(x, y) for x, y in cells)


def test_annulus_hole_and_rim():
    ring = Annulus(outer_radius=10, inner_radius=6)
    assert is_inside((0, 8), ring) is True
    assert is_inside((0, 4), ring) is False
    assert is_inside((0, 11), ring) is False


def test_annulus_translated():
    ring = Annulus(10, 6)
    assert is_inside((32, 40), ring, origin=(32, 32))
    assert not is_inside((32, 36), ring, origin=(32, 32))


def test_degenerate_shapes_are_empty():
    assert list(Disc(0).at(5, 5).cells()) == []
    assert list(Annulus(0, 0).at(5, 5).cells()) == []
    assert list(TaperedBody(0, WidthProfile("constant", start=3)).at(5, 5).cells()) == []
    assert list(Rect(0, 4).at(0, 0).cells()) == []
    assert not Disc(-1).contains_local(0, 0)


@pytest.mark.parametrize("kind", ["s_curve", "bulge"])
def test_peak_at_last_row(kind):
    body = TaperedBody(10, WidthProfile(kind, start=4, peak=6, end=2, split=1.0))
    widths = [body.row_width(r) for r in range(10)]
    assert widths[-1] == 6
    assert widths == sorted(widths)
    for row in range(10):
        assert is_inside((0, row), body)


def test_shoulder_and_bishop_split_extremes():
    shoulder = TaperedBody(8, WidthProfile("shoulder", start=6, split=1.0, amplitude=0.7))
    assert [shoulder.row_width(r) for r in range(8)] == [6] * 8
    bishop = TaperedBody(8, WidthProfile("bishop", start=5, split=0.0, amplitude=2))
    assert [bishop.row_width(r) for r in range(8)] == [3] * 8


def test_single_row_bodies():
    assert progress_ratio(0, 1) == 0.0
    body = TaperedBody(1, WidthProfile("linear", start=6, end=1))
    assert body.row_width(0) == 6
    assert len(list(body.at(10, 10).cells())) == 6
    tip = TaperedBody(1, WidthProfile("kissaki", start=1, peak=5, end=3, tip_rows=3))
    assert tip.row_width(0) == 5
    flat = TaperedBody(1, WidthProfile("kissaki", start=1, peak=5, end=3, tip_rows=0))
    assert flat.row_width(0) == 5


def test_flangeless_mace_is_core_disc():
    mace = PolarFlanged(4, 6, 0, 3)
    assert set(mace.at(0, 0).cells()) == set(Disc(4).at(0, 0).cells())


def test_taper_widths():
    body = TaperedBody(40, WidthProfile("linear", start=6, end=1))
    assert body.row_width(0) == 6
    assert abs(body.row_width(39) - 1) <= 1
    widths = [body.row_width(r) for r in range(40)]
    assert widths == sorted(widths, reverse=True)


def test_taper_rows_are_contiguous():
    body = TaperedBody(12, WidthProfile("linear", start=5, end=2))
    sil = body.at(10, 0)
    for span in body.spans():
        left, right = sil.row_extent(span.row)
        assert right - left + 1 == span.width


def test_reversed_profile_measures_from_bottom():
    prof = WidthProfile("linear", start=6, end=1, reverse=True)
    assert prof.width(0, 40) == 1
    assert prof.width(39, 40) == 6


def test_even_profile():
    prof = WidthProfile("constant", start=7, even=True)
    assert prof.width(0, 10) == 6


def test_unknown_profile_rejected():
    with pytest.raises(ValueError):
        WidthProfile("zigzag")


def test_curved_body_shifts_rows():
    body = TaperedBody(40, WidthProfile("constant", start=3), curve=Curve(6, 1, phase=0.5))
    assert body.row_offset(0) == 0
    assert body.row_offset(39) == 6
    left, right = body.at(0, 0).row_extent(39)
    assert (left + right) / 2 == 6


def test_curve_direction_mirrors():
    right = TaperedBody(30, WidthProfile("constant", start=1), curve=Curve(5, 1))
    left = TaperedBody(30, WidthProfile("constant", start=1), curve=Curve(5, -1))
    for row in range(30):
        assert right.lateral(row) == pytest.approx(-left.lateral(row))


def _mace(rotation: float = 0.0) -> PolarFlanged:
    return PolarFlanged(core_radius=4, flange_count=6, flange_length=5, flange_thickness=3, rotation=rotation)


def test_mace_has_six_flanges():
    mace = _mace()
    assert len(mace.flange_angles()) == 6
    for angle in mace.flange_angles():
        x, y = round(7 * math.cos(angle)), round(7 * math.sin(angle))
        assert mace.contains_local(x, y), angle
    # Halfway between neighbouring flanges there is nothing past the core
    for i in range(6):
        angle = math.pi / 6 + i * math.pi / 3
        x, y = round(7 * math.cos(angle)), round(7 * math.sin(angle))
        assert not mace.contains_local(x, y), angle


def test_mace_rotation_by_one_flange_is_equivalent():
    base = set(_mace(0.3).at(0, 0).cells())
    turned = set(_mace(0.3 + 2 * math.pi / 6).at(0, 0).cells())
    assert base == turned


def test_mace_core_is_solid():
    mace = _mace()
    for dx in range(-2, 3):
        for dy in range(-2, 3):
            assert mace.contains_local(dx, dy)


def test_unknown_flange_style_rejected():
    with pytest.raises(ValueError):
        PolarFlanged(3, 4, 3, 2, style="wavy")


def test_composite_bands():
    shield = CompositeSilhouette(
        10,
        20,
        (Band("top", 10, WidthProfile("constant", start=10)), Band("point", 10, WidthProfile("linear", start=10, end=1))),
    )
    assert shield.contains_local(5, shield.top)
    assert not shield.contains_local(6, shield.top)
    bottom = shield.top + 19
    assert shield.contains_local(0, bottom)
    assert not shield.contains_local(2, bottom)


def test_arc_band_sags_in_the_middle():
    arc = ArcBand(10, 1, 4)
    assert arc.centre_row(0) == 4
    assert arc.centre_row(10) == 0
    inverted = ArcBand(10, 1, 4, inverted=True)
    assert inverted.centre_row(0) == 0
    assert inverted.centre_row(10) == 4


def test_edge_band_is_hollow():
    band = EdgeBand(Rect(10, 10), 2)
    assert band.contains_local(0, 5)
    assert band.contains_local(1, 5)
    assert not band.contains_local(5, 5)


def test_drooped_drops_outer_columns():
    shape = Drooped(Rect(8, 2), 0.5, side=1)
    assert shape.contains_local(0, 0)
    assert not shape.contains_local(6, 0)
    assert shape.contains_local(6, 3)
    mirrored = Drooped(Rect(8, 2), 0.5, side=-1)
    # Mirrored droop leaves columns to the right of the origin alone
    assert mirrored.contains_local(6, 0)


def test_window_and_difference():
    half = Window(Disc(5), -5, 0, 5, 5)
    assert half.contains_local(0, 3)
    assert not half.contains_local(0, -3)
    holed = Difference(Disc(5), ((Disc(2), 0, 0),))
    assert not holed.contains_local(0, 0)
    assert holed.contains_local(0, 4)


def test_make_shape():
    ring = make_shape("annulus", outer_radius=10, inner_radius=6)
    assert isinstance(ring, Annulus)
    assert ring.contains_local(0, 8)
    with pytest.raises(ValueError):
        make_shape("hexagon")


def test_shape_families_registered():
    families = shape_families()
    for name in ("disc", "annulus", "tapered_body", "polar_flanged", "composite", "arc_band", "drooped"):
        assert name in families
