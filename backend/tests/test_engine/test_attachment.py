"""Tests for anchors and seam clipping."""

from __future__ import annotations

import pytest

from pixelsmith.engine.attachment import AnchorRecorder, SeamClip, all_of, within_grid
from pixelsmith.engine.shapes import Rect


def test_first_write_wins():
    anchors = AnchorRecorder()
    first = anchors.record("blade_bottom", 32, 40, final_offset=3)
    second = anchors.record("blade_bottom", 10, 10, final_offset=0)
    assert second is first
    assert anchors.get("blade_bottom").x == 32
    assert anchors.get("blade_bottom")["final_offset"] == 3


def test_missing_anchor():
    anchors = AnchorRecorder()
    assert "collar" not in anchors
    with pytest.raises(KeyError):
        anchors.get("collar")


def test_measurements_are_read_only():
    point = AnchorRecorder().record("left_shoulder", 20, 12, width=8)
    with pytest.raises(TypeError):
        point.measurements["width"] = 9


def test_freeze_is_a_snapshot():
    anchors = AnchorRecorder()
    anchors.record("a", 1, 2)
    frozen = anchors.freeze()
    anchors.record("b", 3, 4)
    assert list(frozen) == ["a"]


def test_coordinates_become_ints():
    point = AnchorRecorder().record("p", 3.0, 4.0)
    assert isinstance(point.x, int) and isinstance(point.y, int)


def test_seam_clip_without_overlap():
    parent = Rect(5, 5).at(0, 0)
    clip = SeamClip(parent, [4], overlap=0)
    assert not clip(2, 4)
    assert not clip(4, 4)
    assert clip(5, 4)
    # Rows off the seam are never clipped
    assert clip(2, 3)


def test_seam_clip_overlap_allowance():
    parent = Rect(5, 5).at(0, 0)
    clip = SeamClip(parent, [4], overlap=1)
    assert clip(4, 4)
    assert clip(0, 4)
    assert not clip(2, 4)
    assert not clip(3, 4)


def test_seam_clip_negative_overlap_is_zero():
    clip = SeamClip(Rect(3, 3).at(0, 0), [1], overlap=-2)
    assert clip.overlap == 0
    assert not clip(2, 1)


def test_within_grid_and_all_of():
    inside = within_grid(8, 8)
    assert inside(0, 0) and inside(7, 7)
    assert not inside(8, 0) and not inside(0, -1)
    combined = all_of(inside, None, lambda x, y: x % 2 == 0)
    assert combined(2, 2)
    assert not combined(3, 2)
    assert not combined(10, 2)
    assert all_of()(99, 99)
