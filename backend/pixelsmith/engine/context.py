"""Generation context: per-call state threaded through every component step."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from pixelsmith.engine.attachment import AnchorRecorder, AttachmentPoint
from pixelsmith.engine.config import GridConfig
from pixelsmith.engine.palette import Palette, get_palette
from pixelsmith.engine.sampler import ParameterSampler
from pixelsmith.engine.shading import OverlayRule, ShadedSilhouette, shade
from pixelsmith.engine.shapes import Silhouette
from pixelsmith.engine.surface import LogicalSurface
from pixelsmith.models.options import GenerationOptions

logger = logging.getLogger(__name__)

Clip = Callable[[int, int], bool]


@dataclass
class Component:
    """One drawn part of an item."""

    name: str
    palette: Palette | None = None
    silhouette: Silhouette | None = None
    decorations: list[str] = field(default_factory=list)
    cells: int = 0


@dataclass
class GenerationContext:
    """Everything a generation call owns: options, RNG, surface, anchors, parameters."""

    item_type: str
    options: GenerationOptions
    rng: random.Random
    sampler: ParameterSampler
    grid: GridConfig
    seed: int | float
    seed_applied: bool = False
    surface: LogicalSurface | None = None
    anchors: AnchorRecorder = field(default_factory=AnchorRecorder)
    components: list[Component] = field(default_factory=list)

    # Parameters drawn by the planner, read by steps, namer and describer
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        item_type: str,
        options: GenerationOptions | dict[str, Any] | None = None,
        *,
        rng: random.Random | None = None,
        grid: GridConfig | None = None,
    ) -> GenerationContext:
        opts = GenerationOptions.from_any(options)
        grid = grid or GridConfig()
        seed = opts.seed or int(time.time() * 1000)
        seed_applied = False
        if rng is None:
            if grid.seed_drives_rng and opts.seed:
                rng = random.Random(opts.seed)
                seed_applied = True
            else:
                rng = random.Random()
        return cls(
            item_type=item_type,
            options=opts,
            rng=rng,
            sampler=ParameterSampler(rng, grid.default_material),
            grid=grid,
            seed=seed,
            seed_applied=seed_applied,
        )

    def acquire_surface(self) -> LogicalSurface:
        if self.surface is None:
            self.surface = LogicalSurface(self.grid.width, self.grid.height, self.grid.scale)
        return self.surface

    def palette(self, key: str | None) -> Palette:
        return get_palette(key, self.grid.default_material)

    def draw(
        self,
        name: str,
        silhouette: Silhouette,
        palette: Palette,
        *,
        outlined: bool = False,
        overlays: Iterable[OverlayRule] = (),
        clip: Clip | None = None,
        decorations: Iterable[str] = (),
    ) -> ShadedSilhouette:
        """Edge-shade ``silhouette`` and paint it onto the surface.

        Catalog palettes carry an outline colour; it only takes effect when
        the component asks for an outlined edge.
        """
        shaded = shade(silhouette, palette if outlined else palette.without_outline())
        for rule in overlays:
            shaded.overlay(rule)
        painted = shaded.paint(self.acquire_surface(), clip)
        self.components.append(Component(name, palette, silhouette, list(decorations), painted))
        return shaded

    def fill(self, silhouette: Silhouette, color: str, clip: Clip | None = None) -> int:
        """Flat fill without edge shading (fullers, strings, stitching)."""
        surface = self.acquire_surface()
        painted = 0
        for x, y in silhouette.cells():
            if clip is not None and not clip(x, y):
                continue
            if surface.in_bounds(x, y):
                surface.put(x, y, color)
                painted += 1
        return painted

    def anchor(self, name: str) -> AttachmentPoint:
        return self.anchors.get(name)
