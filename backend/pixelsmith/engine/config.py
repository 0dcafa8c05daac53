"""Grid configuration: logical canvas size, display scale, layout padding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pixelsmith.config import Settings


@dataclass(frozen=True)
class GridConfig:
    """Controls the logical canvas every generator draws onto."""

    # Logical cells per axis
    width: int = 64
    height: int = 64

    # Output pixels per logical cell (64 * 4 = 256px images)
    scale: int = 4

    # Cells generators keep free around the item
    padding: int = 4

    # Palette used when a material key is unknown
    default_material: str = "IRON"

    # When True an explicit seed option seeds the per-call RNG
    seed_drives_rng: bool = False

    @property
    def center_x(self) -> int:
        return self.width // 2

    @property
    def center_y(self) -> int:
        return self.height // 2

    @property
    def usable_height(self) -> int:
        return self.height - 2 * self.padding

    @classmethod
    def from_settings(cls, settings: Settings) -> GridConfig:
        return cls(
            width=settings.grid_width,
            height=settings.grid_height,
            scale=settings.display_scale,
            padding=settings.canvas_padding,
            default_material=settings.default_material,
            seed_drives_rng=settings.seed_drives_rng,
        )
