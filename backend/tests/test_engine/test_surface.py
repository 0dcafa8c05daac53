"""Tests for the logical surface and raster export."""

from __future__ import annotations

import base64
import io

import numpy as np
import pytest
from PIL import Image

from pixelsmith.engine.export import FALLBACK_DATA_URL, encode, error_image_data_url
from pixelsmith.engine.surface import LogicalSurface, SurfaceAcquisitionError, parse_color


def _decode(data_url: str) -> Image.Image:
    header, payload = data_url.split(",", 1)
    assert header == "data:image/png;base64"
    return Image.open(io.BytesIO(base64.b64decode(payload)))


@pytest.mark.parametrize("size", [(0, 10, 1), (10, 0, 1), (-3, 4, 1), (4, 4, 0)])
def test_invalid_dimensions(size):
    with pytest.raises(SurfaceAcquisitionError):
        LogicalSurface(*size)


def test_blit_scales_each_cell():
    surface = LogicalSurface(4, 3, scale=4)
    surface.blit(1, 1, 2, 1, "#FF0000")
    raster = surface.to_raster()
    assert raster.shape == (12, 16, 4)
    assert (raster[4:8, 4:12] == [255, 0, 0, 255]).all()
    assert raster[0, 0, 3] == 0
    assert raster[8:, :, 3].sum() == 0


def test_raster_is_exact_multiple():
    surface = LogicalSurface(7, 5, scale=3)
    surface.put(6, 4, "#00FF00")
    image = surface.to_image()
    assert image.size == (21, 15)
    assert image.getpixel((20, 14)) == (0, 255, 0, 255)
    assert image.getpixel((18, 12)) == (0, 255, 0, 255)
    assert image.getpixel((17, 11)) == (0, 0, 0, 0)


def test_blit_clips_instead_of_raising():
    surface = LogicalSurface(4, 4)
    surface.blit(-2, -2, 4, 4, "#FFFFFF")
    assert surface.filled_count == 4
    surface.blit(10, 10, 3, 3, "#FFFFFF")
    surface.put(-1, 0, "#FFFFFF")
    assert surface.filled_count == 4


def test_negative_size_rejected():
    surface = LogicalSurface(4, 4)
    with pytest.raises(ValueError):
        surface.blit(0, 0, -1, 2, "#FFFFFF")


def test_cell_and_clear():
    surface = LogicalSurface(4, 4)
    surface.put(2, 3, "#8a8a8a")
    assert surface.cell(2, 3) == "#8A8A8A"
    assert surface.cell(0, 0) is None
    assert surface.cell(9, 9) is None
    surface.clear(0, 0, 4, 4)
    assert not surface.is_filled(2, 3)


def test_later_blit_overwrites():
    surface = LogicalSurface(2, 2)
    surface.put(0, 0, "#FF0000")
    surface.put(0, 0, "#0000FF")
    assert surface.cell(0, 0) == "#0000FF"


def test_parse_color():
    assert parse_color("#102030") == (16, 32, 48, 255)
    assert parse_color("white") == (255, 255, 255, 255)


def test_encode_round_trip_pixels():
    surface = LogicalSurface(8, 8, scale=2)
    surface.blit(2, 2, 3, 1, "#FFD700")
    image = _decode(encode(surface)).convert("RGBA")
    assert image.size == (16, 16)
    pixels = np.array(image)
    assert (pixels[4:6, 4:10] == [255, 215, 0, 255]).all()
    assert pixels[0, 0, 3] == 0


def test_error_image():
    url = error_image_data_url("CTX Fail")
    assert url != FALLBACK_DATA_URL
    image = _decode(url).convert("RGBA")
    assert image.size == (256, 256)
    assert image.getpixel((0, 0)) == (255, 0, 0, 178)
