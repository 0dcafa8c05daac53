"""Tests for curve accumulation along elongated bodies."""

from __future__ import annotations

from pixelsmith.engine.curve import CurveAccumulator
from pixelsmith.engine.shapes import Curve, TaperedBody, WidthProfile


def test_empty_accumulator():
    acc = CurveAccumulator()
    assert acc.final_offset() == 0
    assert acc.rows == 0


def test_rounds_half_up():
    acc = CurveAccumulator()
    assert acc.accumulate(0, lambda r: 2.5) == 3
    assert acc.accumulate(1, lambda r: -2.5) == -2
    assert acc.accumulate(2, lambda r: 1.49) == 1


def test_final_offset_is_last_row():
    acc = CurveAccumulator()
    acc.accumulate(5, lambda r: 4.0)
    acc.accumulate(2, lambda r: 9.0)
    assert acc.final_offset() == 4
    assert acc.rows == 2


def test_trace_matches_drawn_last_row():
    body = TaperedBody(40, WidthProfile("linear", start=5, end=3), curve=Curve(6, 1, phase=0.7))
    acc = CurveAccumulator()
    final = body.trace(acc)
    assert acc.rows == 40
    assert final == body.row_offset(39)
    left, right = body.at(0, 0).row_extent(39)
    # Odd width: the drawn centre column is exactly the final offset
    assert (left + right) // 2 == final


def test_straight_body_has_no_offset():
    body = TaperedBody(25, WidthProfile("constant", start=3))
    assert body.trace(CurveAccumulator()) == 0


def test_reverse_curve_starts_at_far_end():
    curve = Curve(4, 1, kind="lean", reverse=True)
    assert curve.lateral(0.0) == 4
    assert curve.lateral(1.0) == 0
