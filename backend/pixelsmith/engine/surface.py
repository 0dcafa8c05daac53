"""Logical surface: a W×H grid of colour cells, blitted to an S×S-per-cell raster.

Every visual effect goes through ``blit``/``clear`` so that the output raster is
always an exact integer multiple of the logical grid.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageColor

logger = logging.getLogger(__name__)

# RGBA channel holding coverage: 0 = empty cell
_ALPHA = 3


class SurfaceAcquisitionError(RuntimeError):
    """The drawing surface could not be created."""


@lru_cache(maxsize=512)
def parse_color(color: str) -> tuple[int, int, int, int]:
    """'#8A8A8A' / 'rgb(...)' / named colour → RGBA tuple."""
    rgb = ImageColor.getrgb(color)
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    return rgb  # type: ignore[return-value]


class LogicalSurface:
    """Cell grid with scaled export.

    Coordinates are integers in [0, width) × [0, height). Writes outside
    the grid are clipped, never raised.
    """

    def __init__(self, width: int, height: int, scale: int = 1) -> None:
        if width <= 0 or height <= 0 or scale <= 0:
            raise SurfaceAcquisitionError(
                f"Invalid surface dimensions {width}x{height} at scale {scale}"
            )
        try:
            self._cells: NDArray[np.uint8] = np.zeros((height, width, 4), dtype=np.uint8)
        except MemoryError as e:
            raise SurfaceAcquisitionError(f"Cannot allocate {width}x{height} surface") from e
        self.width = width
        self.height = height
        self.scale = scale

    def _clip(self, x: int, y: int, w: int, h: int) -> tuple[int, int, int, int] | None:
        if w < 0 or h < 0:
            raise ValueError(f"Negative blit size {w}x{h}")
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(self.width, x + w), min(self.height, y + h)
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, y0, x1, y1

    def blit(self, x: int, y: int, w: int, h: int, color: str) -> None:
        """Fill the logical rectangle (x, y, w, h) with ``color``."""
        region = self._clip(int(x), int(y), int(w), int(h))
        if region is None:
            return
        x0, y0, x1, y1 = region
        self._cells[y0:y1, x0:x1] = parse_color(color)

    def clear(self, x: int, y: int, w: int, h: int) -> None:
        """Remove cells in the logical rectangle."""
        region = self._clip(int(x), int(y), int(w), int(h))
        if region is None:
            return
        x0, y0, x1, y1 = region
        self._cells[y0:y1, x0:x1] = 0

    def put(self, x: int, y: int, color: str) -> None:
        self.blit(x, y, 1, 1, color)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_filled(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return bool(self._cells[y, x, _ALPHA])

    def cell(self, x: int, y: int) -> str | None:
        """Colour of one cell as '#RRGGBB', or None when empty."""
        if not self.is_filled(x, y):
            return None
        r, g, b, _ = (int(v) for v in self._cells[y, x])
        return f"#{r:02X}{g:02X}{b:02X}"

    def filled_mask(self) -> NDArray[np.bool_]:
        return self._cells[:, :, _ALPHA] > 0

    @property
    def filled_count(self) -> int:
        return int(np.count_nonzero(self.filled_mask()))

    def to_raster(self) -> NDArray[np.uint8]:
        """Scaled RGBA raster: every cell becomes exactly scale×scale pixels."""
        return np.repeat(np.repeat(self._cells, self.scale, axis=0), self.scale, axis=1)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.to_raster())
