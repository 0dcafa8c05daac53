"""Jewelry generator: rings, pendants, amulets, earrings, circlets and collars.

Most pieces carry one gem, optionally held by a bezel or prong setting. The
gem and its setting are described by a :class:`GemCut`, so every sub-type
sizes and places them the same way.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.palette import Palette
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import OverlayRule, domed_band_rule, pattern_rule, row_rule, sphere_rule
from pixelsmith.engine.shapes import (
    Annulus,
    ArcBand,
    Diamond,
    Difference,
    Disc,
    Ellipse,
    Rect,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
)
from pixelsmith.items.parts import GEM_MATERIALS, draw_gem, palette_colors
from pixelsmith.utils.math_helpers import round_half_up, title_case

logger = logging.getLogger(__name__)

JEWELRY_TYPES = [
    "ring",
    "pendant",
    "amulet",
    "earring_stud",
    "earring_dangle",
    "earring_hoop",
    "circlet",
    "collar",
]
JEWELRY_ALIASES = {"choker": "collar"}

METALS = ["GOLD", "SILVER", "BRONZE", "STEEL", "DARK_STEEL", "OBSIDIAN", "ENCHANTED", "COPPER", "ROSE_GOLD"]
JEWELS = [*GEM_MATERIALS, "OBSIDIAN", "ENCHANTED", "PEARL", "OPAL", "DIAMOND"]
GEM_SHAPES = ["round", "square", "rectangle", "oval", "teardrop"]
SQUARE_CUTS = ("round", "square")
SETTING_STYLES = ["bezel", "prong"]
DECORATIONS = ["none", "engraved", "filigree"]
BAND_STYLES = ["plain", "twisted", "channel_set", "domed"]
BAND_THICKNESSES = [5, 6, 7, 8, 9]
PLATE_SHAPES = ["round_disc", "square_plate", "oval_plate", "diamond_shape", "teardrop_shape", "rectangular_bar"]
CHAIN_MATERIALS = ["SILVER", "GOLD", "IRON", "LEATHER", "BRONZE", "DARK_STEEL", "COPPER"]
CHAIN_TYPES = ["chain_links", "cord", "beaded_cord", "thick_chain"]
OPAL_FLECKS = ["GEM_RED", "GEM_GREEN", "GEM_BLUE", "GEM_ORANGE", "GEM_PURPLE"]

GEM_CHANCE = 0.85
SETTING_CHANCE = 0.8
CONTRAST_SETTING_CHANCE = 0.3
OPAL_FLECK_CHANCE = 0.2

# gem family: (width lo, hi, free height lo, hi); None derives the height from the width
GEM_SIZES: dict[str, tuple[int, int, int | None, int | None]] = {
    "ring": (8, 14, 8, 16),
    "earring": (8, 16, 8, 18),
    "crown": (10, 18, 10, 20),
    "plate": (8, 18, None, None),
}
# Earring pair centres sit this fraction of the grid width either side of the middle
PAIR_SPACING = 0.25
EARRING_HEIGHTS = {"earring_stud": 24, "earring_dangle": 50, "earring_hoop": 32}
# Gems on plates keep this fraction of the plate clear around them
PLATE_GEM_FIT = 0.6


@dataclass(frozen=True)
class GemCut:
    """One gem and the setting holding it."""

    material: str
    shape: str
    width: int
    height: int
    setting: str | None = None
    setting_material: str | None = None

    @property
    def setting_thickness(self) -> int:
        if self.setting is None:
            return 0
        return max(1, math.floor(min(self.width, self.height) / 4.5))

    @property
    def prong_size(self) -> int:
        return max(2, self.setting_thickness + 1)

    @property
    def margin(self) -> int:
        if self.setting == "bezel":
            return self.setting_thickness * 2
        if self.setting == "prong":
            return self.prong_size
        return 0

    @property
    def total_width(self) -> int:
        return self.width + self.margin

    @property
    def total_height(self) -> int:
        return self.height + self.margin


def fit_cut(cut: GemCut, max_width: int, max_height: int) -> GemCut:
    """Shrink ``cut`` a cell at a time until it and its setting fit the box."""
    width, height = cut.width, cut.height
    while width > 3 or height > 3:
        trial = replace(cut, width=width, height=height)
        if trial.total_width <= max_width and trial.total_height <= max_height:
            return trial
        width, height = max(3, width - 1), max(3, height - 1)
    return replace(cut, width=width, height=height)


# ── Shapes, all centred on the origin ──


def centred_rect(width: int, height: int) -> Union:
    return Union(((Rect(width, height), -(width // 2), -(height // 2)),))


def teardrop(width: int, height: int, bulb_ratio: float) -> Union:
    """Point at the top swelling into a round bulb at the bottom."""
    rx = max(1, width // 2)
    bulb = max(2, math.floor(height * bulb_ratio))
    top = -(height // 2)
    bulb_cy = height // 2 - bulb // 2
    point = TaperedBody(
        max(1, bulb_cy - top + 1),
        WidthProfile("power_taper", start=rx * 2 + 1, exponent=3.0, rounding="floor", reverse=True),
    )
    return Union(((Ellipse(rx, bulb / 2), 0, bulb_cy), (point, 0, top)))


def gem_spec(shape: str, width: int, height: int) -> ShapeSpec:
    if shape in ("square", "rectangle"):
        return centred_rect(width, height)
    if shape == "teardrop":
        return teardrop(width, height, 0.65)
    return Ellipse(max(0.5, width // 2), max(0.5, height // 2), tolerance=1.05)


def plate_spec(shape: str, width: int, height: int) -> ShapeSpec:
    if shape in ("square_plate", "rectangular_bar"):
        return centred_rect(width, height)
    if shape == "diamond_shape":
        return Diamond(width / 2, height // 2)
    if shape == "teardrop_shape":
        return teardrop(width, height, 0.7)
    return Ellipse(max(1, width // 2), max(1, height // 2))


def ring_band(outer: int, inner: int, cut: GemCut | None) -> ShapeSpec:
    """Ring band with a notch at the top where a set gem sits."""
    band = Annulus(outer, inner)
    if cut is None or cut.setting is None:
        return band
    half = math.ceil(cut.total_width / 2)
    y0 = -outer - cut.total_height // 2
    y1 = math.ceil(-inner * 0.3) - 1
    return Difference(band, ((Rect(half * 2 + 1, y1 - y0 + 1), -half, y0),))


def chain_path(half_width: float, rise: int, step: float) -> list[tuple[int, int]]:
    """Link centres up one side of a hanging chain, from the bail to the top.

    The strand leaves the bail sideways and straightens as it climbs.
    """
    points = [(0, 0)]
    last_x, last_y = 0.0, 0.0
    samples = max(8, int((half_width + rise) * 4))
    for i in range(1, samples + 1):
        u = i / samples
        x, y = half_width * math.sin(u * math.pi / 2), -rise * u
        if math.hypot(x - last_x, y - last_y) >= step:
            points.append((round_half_up(x), round_half_up(y)))
            last_x, last_y = x, y
    return points


# ── Overlay rules ──


def bezel_rule(x0: int, y0: int, width: int, height: int, thickness: int, palette: Palette) -> OverlayRule:
    """Raised rim: top and left walls lit, bottom and right walls shaded."""

    def rule(x: int, y: int) -> str | None:
        if y < y0 + thickness:
            return palette.highlight
        if y >= y0 + height - thickness:
            return palette.shadow
        if x < x0 + thickness:
            return palette.highlight
        if x >= x0 + width - thickness:
            return palette.shadow
        return None

    return rule


def opal_rule(ctx: GenerationContext) -> OverlayRule:
    s = ctx.sampler
    flecks = [ctx.palette(key).highlight for key in OPAL_FLECKS]
    return lambda x, y: s.choose(flecks) if s.chance(OPAL_FLECK_CHANCE) else None


def filigree_rule(cx: int, cy: int, color: str) -> OverlayRule:
    """Fine wire scrollwork: broken rings around (cx, cy)."""

    def wire(x: int, y: int) -> bool:
        dx, dy = x - cx, y - cy
        return round_half_up(math.hypot(dx, dy)) % 4 == 0 and (dx + 2 * dy) % 3 != 0

    return pattern_rule(wire, color)


def band_rules(style: str, cx: int, cy: int, outer: int, inner: int, metal: Palette, stone: Palette) -> list[OverlayRule]:
    if style == "domed":
        return [domed_band_rule(cx, cy, inner, outer, metal)]
    if style == "twisted":

        def twist(x: int, y: int) -> str | None:
            k = (x - cx + y - cy + outer) % 7
            if k < 2:
                return metal.highlight
            if k < 4:
                return metal.shadow
            return None

        return [twist]
    if style == "channel_set":

        def channel(x: int, y: int) -> str | None:
            dx, dy = x - cx, y - cy
            if not (inner * 0.4 < abs(dy) < outer * 0.95 and abs(dx) < inner * 0.6):
                return None
            k = (dx * 3 + dy * 2 + outer) % 9
            if k == 0:
                return stone.highlight
            if k == 1:
                return stone.base
            if k in (2, 3):
                return metal.shadow
            return None

        return [channel]
    return []


def arc_rules(
    arc: ArcBand,
    cx: int,
    top: int,
    metal: Palette,
    *,
    twisted: bool = False,
    lit: float = 0.3,
    shaded: float = 0.7,
    front: float = 0.92,
) -> list[OverlayRule]:
    """Shading across an arc band's thickness, brightest at the front centre."""

    def rule(x: int, y: int) -> str | None:
        dx = x - cx
        if twisted:
            k = (dx + y + arc.half_width) % 9
            if k < 3:
                return metal.highlight
            return metal.shadow if k < 6 else None
        t = y - top - arc.centre_row(dx)
        if t < arc.thickness * lit:
            return metal.highlight
        if t > arc.thickness * shaded:
            return metal.shadow
        if math.sqrt(max(0.0, 1 - (dx / arc.half_width) ** 2)) > front:
            return metal.highlight
        return None

    return [rule]


def arc_engraving(arc: ArcBand, cx: int, top: int, period: int, phase: int, inset: int, color: str) -> OverlayRule:
    """Vertical engraved strokes every ``period`` columns, ``inset`` rows clear of the edges."""

    def stroke(x: int, y: int) -> bool:
        dx = x - cx
        t = y - top - arc.centre_row(dx)
        return (abs(dx) - phase) % period in (0, 1) and inset - 1 < t < arc.thickness - inset

    return pattern_rule(stroke, color)


# ── Drawing helpers ──


def draw_set_gem(ctx: GenerationContext, name: str, cx: int, cy: int, cut: GemCut) -> None:
    """Setting (if any) then the gem, both centred on (cx, cy)."""
    gem_palette = ctx.palette(cut.material)
    x0, y0 = cx - cut.width // 2, cy - cut.height // 2
    if cut.setting is not None:
        setting_palette = ctx.palette(cut.setting_material)
        t = cut.setting_thickness
        if cut.setting == "bezel":
            bw, bh = cut.width + t * 2, cut.height + t * 2
            ctx.draw(
                f"{name}_setting",
                Rect(bw, bh).at(x0 - t, y0 - t),
                setting_palette,
                overlays=[bezel_rule(x0 - t, y0 - t, bw, bh, t, setting_palette)],
                decorations=["bezel"],
            )
        else:
            size = cut.prong_size
            near, far = size // 3, size * 2 // 3
            corners = ((-near, -near), (cut.width - far, -near), (-near, cut.height - far), (cut.width - far, cut.height - far))
            prongs = Union(tuple((Rect(size, size), dx, dy) for dx, dy in corners))
            ctx.draw(f"{name}_setting", prongs.at(x0, y0), setting_palette, decorations=["prong"])

    extra = [opal_rule(ctx)] if cut.material == "OPAL" else []
    spec = gem_spec(cut.shape, cut.width, cut.height)
    if cut.shape in ("square", "rectangle"):
        ctx.draw(
            name,
            spec.at(cx, cy),
            gem_palette,
            outlined=cut.width >= 3 and cut.height >= 3,
            overlays=[row_rule({y0 + 1: gem_palette.highlight}), *extra],
        )
        if cut.width > 4 and cut.height > 4:
            glare = max(1, min(cut.width, cut.height) // 3)
            ctx.fill(Rect(glare, glare).at(cx - glare // 2, cy - glare // 2), gem_palette.highlight)
    else:
        draw_gem(ctx, name, cx, cy, cut.width, cut.height, gem_palette, shape=spec, overlays=extra)


def plate_rules(shape: str, cx: int, cy: int, width: int, height: int, metal: Palette) -> list[OverlayRule]:
    if shape == "diamond_shape":
        half = height // 2
        return [lambda x, y: metal.highlight if y - cy < -half * 0.5 else (metal.shadow if y - cy > half * 0.5 else None)]
    if shape in ("round_disc", "oval_plate", "teardrop_shape"):
        return [sphere_rule(cx, cy, width / 2, height / 2, metal, threshold=0.6)]
    return []


def plate_engraving(shape: str, cx: int, cy: int, width: int, height: int, color: str) -> OverlayRule:
    if shape in ("square_plate", "rectangular_bar"):
        x0, y0 = cx - width // 2, cy - height // 2

        def dots(x: int, y: int) -> bool:
            i, j = x - x0, y - y0
            if not (2 <= i < width - 2 and 2 <= j < height - 2):
                return False
            return (i - 2) % 5 == 0 and (j - 2) % 5 == 0 and (i + j) % 2 == 0

        return pattern_rule(dots, color)
    rx, ry = max(1.0, width / 2), max(1.0, height / 2)

    def cross_hatch(x: int, y: int) -> bool:
        dx, dy = x - cx, y - cy
        f = (dx / rx) ** 2 + (dy / ry) ** 2
        return abs(dx * dy * 3) % 13 <= 1 and 0.1 < f < 0.9

    return pattern_rule(cross_hatch, color)


# ── Sampling ──


def _gem_family(jewelry_type: str) -> str:
    if jewelry_type == "ring":
        return "ring"
    if jewelry_type.startswith("earring"):
        return "earring"
    if jewelry_type in ("circlet", "collar"):
        return "crown"
    return "plate"


def _sample_gem(ctx: GenerationContext, jewelry_type: str, metal: str) -> GemCut | None:
    s = ctx.sampler
    if not s.chance(GEM_CHANCE):
        return None
    material = s.choose(JEWELS)
    shape = s.choose(GEM_SHAPES)
    w_lo, w_hi, h_lo, h_hi = GEM_SIZES[_gem_family(jewelry_type)]
    width = s.int_in(w_lo, w_hi)
    if shape in SQUARE_CUTS:
        height = width
    elif h_lo is None:
        height = max(width, math.floor(width * 1.8)) if shape == "teardrop" else s.int_in(width * 0.5, width * 1.8)
    else:
        height = s.int_in(h_lo, h_hi)

    setting = setting_material = None
    if s.chance(SETTING_CHANCE):
        setting = s.choose(SETTING_STYLES)
        setting_material = metal
        if s.chance(CONTRAST_SETTING_CHANCE):
            setting_material = s.choose(METALS, exclude=(metal, "ROSE_GOLD"))
    return GemCut(material, shape, width, height, setting, setting_material)


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    grid = ctx.grid
    jewelry_type = s.choose_known(opts.sub_type, JEWELRY_TYPES, JEWELRY_ALIASES, label="jewelry type")
    p: dict[str, Any] = {"jewelry_type": jewelry_type, "sub_type": opts.sub_type or jewelry_type}
    p["metal"] = metal = s.material(opts.material, METALS, label="metal")
    cut = _sample_gem(ctx, jewelry_type, metal)
    p["decoration"] = s.choose(DECORATIONS)

    if jewelry_type == "ring":
        p["thickness"] = thick = s.choose(BAND_THICKNESSES)
        outer = s.int_in(20, 28)
        if cut is not None:
            room = grid.height - grid.padding * 2 + thick - cut.total_height
            outer = min(outer, max(thick + 3, room // 2))
        p["outer_radius"] = outer
        p["inner_radius"] = outer - thick
        p["band_style"] = s.choose(BAND_STYLES)
    elif jewelry_type in ("pendant", "amulet"):
        size = s.int_in(28, 42) if jewelry_type == "amulet" else s.int_in(24, 36)
        p["plate_shape"] = shape = s.choose(PLATE_SHAPES)
        width = height = size
        if shape == "oval_plate":
            if s.chance(0.5):
                height = math.floor(size * 0.6)
            else:
                width = math.floor(size * 0.6)
        elif shape == "diamond_shape":
            width = math.floor(size * 0.65)
        elif shape == "teardrop_shape":
            width = math.floor(size * 0.7)
        elif shape == "rectangular_bar":
            width = math.floor(size * 0.45)
        p["plate_width"], p["plate_height"] = width, height
        if cut is not None:
            cut = fit_cut(cut, math.floor(width * PLATE_GEM_FIT), math.floor(height * PLATE_GEM_FIT))
        p["chain_material"] = s.choose(CHAIN_MATERIALS)
        p["chain_type"] = chain = s.choose(CHAIN_TYPES)
        p["link_size"] = 1 if chain == "cord" else (3 if chain == "thick_chain" else s.int_in(2, 3))
        p["bail_height"] = s.int_in(6, 9)
        p["chain_spread"] = s.float_in(0.28, 0.36)
    elif jewelry_type.startswith("earring"):
        spacing = math.floor(grid.width * PAIR_SPACING)
        p["pair_spacing"] = spacing
        if cut is not None:
            cut = fit_cut(cut, spacing * 2 - 2, grid.height)
        else:
            stud = s.int_in(8, 14)
            p["metal_stud"] = GemCut(metal, "round", stud, stud)
        if jewelry_type == "earring_dangle":
            p["hook_size"] = s.int_in(8, 11)
            p["dangle_height"] = s.int_in(18, 28)
            p["dangle_width"] = s.int_in(7, 12)
        elif jewelry_type == "earring_hoop":
            p["hoop_radius"] = min(s.int_in(10, 16), spacing - 1)
            p["hoop_thickness"] = s.int_in(2, 4)
    elif jewelry_type == "circlet":
        p["band_width"] = math.floor(grid.width * s.float_in(0.9, 0.98))
        visual = grid.height * s.float_in(0.35, 0.45)
        p["thickness"] = s.int_in(4, 7)
        p["arc_depth"] = math.floor(visual * 0.35)
        p["draw_centre"] = grid.padding + math.floor(visual * 0.2) + 20
        p["band_style"] = "twisted" if s.chance(0.5) else ("plain" if s.chance(0.8) else "engraved")
        if p["band_style"] == "engraved" and p["decoration"] == "none":
            p["decoration"] = "engraved"
    else:
        p["band_width"] = math.floor(grid.width * s.float_in(0.8, 0.95))
        visual = grid.height * s.float_in(0.3, 0.4)
        p["thickness"] = s.int_in(12, 20)
        p["arc_depth"] = math.floor(visual * 0.25)

    p["gem"] = cut
    p["decoration_material"] = None
    if p["decoration"] != "none":
        p["decoration_material"] = s.choose(METALS, exclude=(metal, "ROSE_GOLD"))
    return p


# ── Plan ──


@item_generator(
    item_type="jewelry",
    sub_types=JEWELRY_TYPES,
    aliases=JEWELRY_ALIASES,
    description="Rings, pendants, amulets, earrings, circlets and collars",
)
def plan_jewelry(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    plan = ComponentPlan("jewelry", [], _name, _describe)
    jewelry_type = p["jewelry_type"]
    if jewelry_type == "ring":
        _plan_ring(ctx, plan, p)
    elif jewelry_type in ("pendant", "amulet"):
        _plan_pendant(ctx, plan, p)
    elif jewelry_type.startswith("earring"):
        _plan_earrings(ctx, plan, p)
    else:
        _plan_arc(ctx, plan, p)
    return plan


def _decoration_rule(ctx: GenerationContext, p: dict[str, Any], engraving: OverlayRule | None, cx: int, cy: int) -> list[OverlayRule]:
    if p["decoration_material"] is None:
        return []
    accent = ctx.palette(p["decoration_material"])
    if p["decoration"] == "filigree":
        return [filigree_rule(cx, cy, accent.highlight)]
    return [engraving] if engraving is not None else []


def _plan_ring(ctx: GenerationContext, plan: ComponentPlan, p: dict[str, Any]) -> None:
    grid = ctx.grid
    cx = grid.center_x
    cut: GemCut | None = p["gem"]
    outer, inner, thick = p["outer_radius"], p["inner_radius"], p["thickness"]
    cy = grid.center_y
    if cut is not None:
        cy = max(cy, grid.padding + outer - thick + cut.total_height)
    metal = ctx.palette(p["metal"])
    stone = ctx.palette(cut.material if cut is not None else "DIAMOND")

    def draw_band(ctx: GenerationContext) -> None:
        overlays = band_rules(p["band_style"], cx, cy, outer, inner, metal, stone)
        if p["decoration_material"] is not None:
            color = ctx.palette(p["decoration_material"]).shadow

            def engraved(x: int, y: int) -> bool:
                dx, dy = x - cx, y - cy
                d2 = dx * dx + dy * dy
                return (abs(dx) % 5 == 2 or abs(dy) % 5 == 2) and (inner + 1) ** 2 < d2 < (outer - 1) ** 2

            overlays += _decoration_rule(ctx, p, pattern_rule(engraved, color), cx, cy)
        ctx.draw("band", ring_band(outer, inner, cut).at(cx, cy), metal, overlays=overlays, decorations=[p["band_style"]])
        ctx.anchors.record("crown", cx, cy - outer + thick, thickness=thick)

    def draw_stone(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("crown")
        gem_cy = anchor.y - cut.total_height // 2 + math.floor(anchor["thickness"] * 0.15)
        draw_set_gem(ctx, "gem", anchor.x, gem_cy, cut)

    plan.add("band", draw_band, description="Ring band, notched for a set gem")
    if cut is not None:
        plan.add("gem", draw_stone, "band")


def _plan_pendant(ctx: GenerationContext, plan: ComponentPlan, p: dict[str, Any]) -> None:
    grid = ctx.grid
    cx = grid.center_x
    cut: GemCut | None = p["gem"]
    shape, width, height = p["plate_shape"], p["plate_width"], p["plate_height"]
    cy = min(grid.center_y + grid.height // 9 + 3, grid.height - grid.padding - (height - height // 2))
    metal = ctx.palette(p["metal"])
    chain_palette = ctx.palette(p["chain_material"])
    link, chain_type = p["link_size"], p["chain_type"]
    bail_width = max(2, link + 2 + (1 if chain_type == "thick_chain" else 0))

    def draw_plate(ctx: GenerationContext) -> None:
        overlays = plate_rules(shape, cx, cy, width, height, metal)
        if p["decoration_material"] is not None:
            color = ctx.palette(p["decoration_material"]).shadow
            overlays += _decoration_rule(ctx, p, plate_engraving(shape, cx, cy, width, height, color), cx, cy)
        sil = plate_spec(shape, width, height).at(cx, cy)
        ctx.draw("plate", sil, metal, overlays=overlays, decorations=[shape])
        ctx.anchors.record("plate_centre", cx, cy)
        ctx.anchors.record("bail_seat", cx, sil.bbox[1])

    def draw_stone(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("plate_centre")
        draw_set_gem(ctx, "gem", anchor.x, anchor.y, cut)

    def draw_bail(ctx: GenerationContext) -> None:
        seat = ctx.anchor("bail_seat")
        bh = p["bail_height"]
        top = seat.y - bh
        ctx.draw("bail", Rect(bail_width, bh).at(seat.x - bail_width // 2, top), chain_palette)
        ctx.anchors.record("chain_start", seat.x, top, height=bh)

    def draw_chain(ctx: GenerationContext) -> None:
        start = ctx.anchor("chain_start")
        rise = start.y - grid.padding
        if rise <= 0:
            return
        path = chain_path(grid.width * p["chain_spread"], rise, max(1.0, link * 0.95))
        if chain_type == "beaded_cord":
            bead: ShapeSpec = Disc(link / 2)
            offset = 0
        else:
            bead = Rect(link, link)
            offset = link // 2
        placed = [(i, bead, side * dx - offset, dy - offset) for side in (-1, 1) for i, (dx, dy) in enumerate(path)]
        bail = Rect(bail_width, start["height"]).at(start.x - bail_width // 2, start.y)
        # The bail stays on top where the first links meet it
        def keep(x: int, y: int) -> bool:
            return not bail.contains(x, y)

        links = Union(tuple((spec, ox, oy) for _, spec, ox, oy in placed))
        ctx.draw("chain", links.at(start.x, start.y), chain_palette, clip=keep, decorations=[chain_type])
        for i, spec, ox, oy in placed:
            color = None
            if chain_type == "chain_links" and i % 4 in (0, 2):
                color = chain_palette.highlight if i % 4 == 0 else chain_palette.shadow
            elif chain_type == "beaded_cord" and i % 5 == 0:
                color = chain_palette.highlight
            elif chain_type == "thick_chain" and i % 2 == 0:
                ctx.fill(Rect(1, 1).at(start.x + ox + 1, start.y + oy + 1), chain_palette.shadow, clip=keep)
            if color is not None:
                ctx.fill(spec.at(start.x + ox, start.y + oy), color, clip=keep)

    plan.add("plate", draw_plate, description=f"{title_case(shape)} pendant plate")
    if cut is not None:
        plan.add("gem", draw_stone, "plate")
    plan.add("bail", draw_bail, "plate")
    plan.add("chain", draw_chain, "bail", description=f"{title_case(chain_type)} hanging from the bail")


def _plan_earrings(ctx: GenerationContext, plan: ComponentPlan, p: dict[str, Any]) -> None:
    grid = ctx.grid
    jewelry_type = p["jewelry_type"]
    spacing = p["pair_spacing"]
    top = grid.center_y - EARRING_HEIGHTS[jewelry_type] // 2 + grid.height // 9
    sides = (("left", grid.center_x - spacing), ("right", grid.center_x + spacing))
    metal = ctx.palette(p["metal"])
    cut: GemCut | None = p["gem"]
    drop = cut or p.get("metal_stud")

    def draw_studs(ctx: GenerationContext) -> None:
        for side, x in sides:
            stud_cy = top + drop.total_height // 2
            draw_set_gem(ctx, f"{side}_stud", x, stud_cy, drop)
            if cut is not None and cut.setting is None:
                ctx.fill(Rect(2, 2).at(x - 1, stud_cy + cut.height // 2 + 1), metal.shadow)

    def draw_hooks(ctx: GenerationContext) -> None:
        hook = p["hook_size"]
        spec = Union(((Rect(1, hook), -1, 0), (Rect(2, 2), 0, hook - 2)))
        for side, x in sides:
            ctx.draw(f"{side}_hook", spec.at(x, top), metal)
            ctx.anchors.record(f"{side}_drop", x, top + hook)

    def draw_drops(ctx: GenerationContext) -> None:
        for side, _ in sides:
            anchor = ctx.anchor(f"{side}_drop")
            if cut is not None:
                connector = max(3, math.floor(cut.height / 3.5))
                ctx.fill(Rect(1, connector).at(anchor.x, anchor.y), metal.base)
                draw_set_gem(ctx, f"{side}_drop", anchor.x, anchor.y + connector + cut.total_height // 2, cut)
            else:
                w, h = p["dangle_width"], p["dangle_height"]
                ctx.draw(f"{side}_drop", Rect(w, h).at(anchor.x - w // 2, anchor.y), metal)

    def draw_hoops(ctx: GenerationContext) -> None:
        radius = p["hoop_radius"]
        hoop = Annulus(radius, radius - p["hoop_thickness"])
        for side, x in sides:
            ctx.draw(f"{side}_hoop", hoop.at(x, top + radius), metal)
            ctx.anchors.record(f"{side}_clasp", x, top)

    def draw_clasps(ctx: GenerationContext) -> None:
        for side, _ in sides:
            anchor = ctx.anchor(f"{side}_clasp")
            ctx.draw(f"{side}_clasp", Rect(3, 3).at(anchor.x - 1, anchor.y - 1), metal)

    if jewelry_type == "earring_stud":
        plan.add("studs", draw_studs, description="Matching pair of studs")
    elif jewelry_type == "earring_dangle":
        plan.add("hooks", draw_hooks)
        plan.add("drops", draw_drops, "hooks", description="Gem or metal drop under each hook")
    else:
        plan.add("hoops", draw_hoops)
        plan.add("clasps", draw_clasps, "hoops")


def _plan_arc(ctx: GenerationContext, plan: ComponentPlan, p: dict[str, Any]) -> None:
    grid = ctx.grid
    cx = grid.center_x
    circlet = p["jewelry_type"] == "circlet"
    cut: GemCut | None = p["gem"]
    thick, depth = p["thickness"], p["arc_depth"]
    half = p["band_width"] // 2
    metal = ctx.palette(p["metal"])
    # Circlets crest in the middle; collars sag around the neck
    arc = ArcBand(half, thick, depth, inverted=circlet)
    top = p["draw_centre"] - depth - math.floor(thick * 0.35) if circlet else grid.padding + 15

    def draw_band(ctx: GenerationContext) -> None:
        if circlet:
            overlays = arc_rules(arc, cx, top, metal, twisted=p["band_style"] == "twisted")
        else:
            overlays = arc_rules(arc, cx, top, metal, lit=0.2, shaded=0.8, front=0.95)
        if p["decoration_material"] is not None:
            color = ctx.palette(p["decoration_material"]).shadow
            engraving = arc_engraving(arc, cx, top, 11, 0, 2, color) if circlet else arc_engraving(arc, cx, top, 12, 6, 3, color)
            overlays += _decoration_rule(ctx, p, engraving, cx, top + arc.centre_row(0))
        ctx.draw("band", arc.at(cx, top), metal, overlays=overlays, decorations=[p.get("band_style", "plain")])
        front_y = top + arc.centre_row(0)
        ctx.anchors.record("front", cx, front_y if circlet else front_y + thick // 2, thickness=thick)

    def draw_stone(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("front")
        half_h = cut.total_height // 2
        if circlet:
            gem_cy = max(anchor.y - half_h + math.floor(cut.height * 0.1), grid.padding + half_h)
        else:
            gem_cy = min(anchor.y, grid.height - grid.padding - half_h - 1)
        draw_set_gem(ctx, "gem", anchor.x, gem_cy, cut)

    plan.add("band", draw_band, description="Circlet arc" if circlet else "Collar band")
    if cut is not None:
        plan.add("gem", draw_stone, "band")


# ── Naming and metadata ──


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['metal']).name} {title_case(p['jewelry_type'])}"
    if p["decoration"] != "none":
        name += f" ({p['decoration']})"
    cut: GemCut | None = p["gem"]
    if cut is not None:
        name += f" with {ctx.palette(cut.material).name} {cut.shape} Gem"
        if cut.setting is not None:
            name += f" ({cut.setting} set)"
    return name


def _details(p: dict[str, Any]) -> dict[str, Any]:
    jewelry_type = p["jewelry_type"]
    if jewelry_type == "ring":
        return {
            "band": {
                "style": p["band_style"],
                "outerRadius": p["outer_radius"],
                "innerRadius": p["inner_radius"],
                "thickness": p["thickness"],
            }
        }
    if jewelry_type in ("pendant", "amulet"):
        return {
            "plate": {"shape": p["plate_shape"], "width": p["plate_width"], "height": p["plate_height"]},
            "chain": {
                "material": p["chain_material"].lower(),
                "type": p["chain_type"],
                "linkSize": p["link_size"],
                "bailHeight": p["bail_height"],
            },
        }
    if jewelry_type.startswith("earring"):
        earrings: dict[str, Any] = {"pairSpacing": p["pair_spacing"]}
        if jewelry_type == "earring_dangle":
            earrings["hookSize"] = p["hook_size"]
        elif jewelry_type == "earring_hoop":
            earrings["hoopRadius"] = p["hoop_radius"]
            earrings["hoopThickness"] = p["hoop_thickness"]
        return {"earrings": earrings}
    return {
        "band": {
            "style": p.get("band_style", "plain"),
            "width": p["band_width"],
            "thickness": p["thickness"],
            "arcDepth": p["arc_depth"],
        }
    }


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    cut: GemCut | None = p["gem"]
    decoration = p["decoration_material"]
    data: dict[str, Any] = {
        "jewelryType": p["jewelry_type"],
        "subType": p["sub_type"],
        "metal": p["metal"].lower(),
        "metalColors": palette_colors(ctx.palette(p["metal"])),
        "decoration": p["decoration"],
        "decorationColors": palette_colors(ctx.palette(decoration)) if decoration else None,
        "hasGem": cut is not None,
        "gemMaterial": cut.material.lower().replace("gem_", "") if cut else None,
        "gemShape": cut.shape if cut else None,
        "gemWidth": cut.width if cut else None,
        "gemHeight": cut.height if cut else None,
        "gemColors": palette_colors(ctx.palette(cut.material)) if cut else None,
        "hasSetting": bool(cut and cut.setting),
        "settingStyle": cut.setting if cut else None,
        "settingColors": palette_colors(ctx.palette(cut.setting_material)) if cut and cut.setting else None,
    }
    data.update(_details(p))
    return data
