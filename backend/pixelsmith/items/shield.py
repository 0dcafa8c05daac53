"""Shield generator: banded body silhouettes with clipped heraldic decorations."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import ShadedSilhouette, boss_rule, pattern_rule
from pixelsmith.engine.shapes import (
    ArcBand,
    Band,
    CompositeSilhouette,
    Diamond,
    Disc,
    EdgeBand,
    Ellipse,
    PolarFlanged,
    Rect,
    Saltire,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import ACCENT_METALS, GEM_MATERIALS, PAINTS, draw_gem, draw_rivets, palette_colors
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

SHIELD_SHAPES = ["round", "kite", "tower", "heater", "oval"]
SHIELD_MATERIALS = ["WOOD", "IRON", "STEEL", "BRONZE", "DARK_STEEL", "BONE"] + PAINTS
DECORATION_MATERIALS = ACCENT_METALS + PAINTS
DECORATION_TYPES = [
    "none", "boss", "stripes", "border", "cross", "triangle", "circle_emblem", "bands", "chevron",
    "diamond", "diamond_outline", "saltire", "half_horizontal", "half_vertical", "quadrants",
    "sunburst", "riveted_edge",
]
# Decorations that cover too much of the face for a centre gem
NO_GEM_DECORATIONS = {
    "stripes", "bands", "border", "half_horizontal", "half_vertical", "cross", "saltire",
    "quadrants", "sunburst", "riveted_edge",
}

MAX_SIZE = 56
MIN_WIDTH, MIN_HEIGHT = 14, 18

# Far enough to cover any shield on the grid
_FAR = 1000


@dataclass(frozen=True)
class ShieldBody:
    shape: str
    width: int
    height: int
    tower_style: str | None = None
    corner_radius: int = 0
    kite_top_ratio: float = 0.45

    def spec(self) -> ShapeSpec:
        w, h = self.width, self.height
        if self.shape == "round":
            return Ellipse(min(w, h) / 2, min(w, h) / 2)
        if self.shape == "oval":
            return Ellipse(w / 2, h / 2, tolerance=1.05)
        if self.shape == "kite":
            top = h * self.kite_top_ratio
            return CompositeSilhouette(w, h, (
                Band("dome", top, WidthProfile("dome", end=w)),
                Band("point", h - top, WidthProfile("power_taper", start=w, exponent=2.5)),
            ))
        if self.shape == "heater":
            top = h * 0.33
            return CompositeSilhouette(w, h, (
                Band("shoulder", top, WidthProfile("shoulder", start=w, split=0.7, amplitude=0.25)),
                Band("point", h - top, WidthProfile("power_taper", start=w * 0.75, exponent=1.7)),
            ))
        if self.tower_style == "rounded_top":
            dome = w / 2
            return CompositeSilhouette(w, h, (
                Band("dome", dome, WidthProfile("dome", end=w)),
                Band("body", h - dome, WidthProfile("constant", start=w)),
            ))
        return CompositeSilhouette(
            w, h, (Band("body", h, WidthProfile("constant", start=w)),), corner_radius=self.corner_radius
        )


def _sample_body(ctx: GenerationContext, shape: str) -> ShieldBody:
    s = ctx.sampler
    tower_style, corner, ratio = None, 0, 0.45
    if shape == "round":
        w = h = s.int_in(26, 48)
    elif shape == "oval":
        w, h = s.int_in(22, 40), s.int_in(34, 52)
        if s.chance(0.5):
            w, h = h, w
    elif shape == "kite":
        w, h = s.int_in(20, 30), s.int_in(45, 58)
        ratio = s.float_in(0.40, 0.50)
    elif shape == "heater":
        w, h = s.int_in(24, 38), s.int_in(30, 48)
    else:
        tower_style = s.choose(["rectangle", "rounded_top", "rounded_corners"])
        w = s.int_in(18, 32 if tower_style == "rounded_top" else 28)
        h = s.int_in(38, 58)
        if tower_style == "rounded_corners":
            corner = s.int_in(3, min(w // 3, h // 3, 7))
        if h < w * 1.4:
            h = math.floor(w * s.float_in(1.4, 2.2))
    limit = min(MAX_SIZE, ctx.grid.width - 2 * ctx.grid.padding)
    w = max(MIN_WIDTH, min(w, limit))
    h = max(MIN_HEIGHT, min(h, ctx.grid.height - 2 * ctx.grid.padding))
    return ShieldBody(shape, w, h, tower_style, corner, ratio)


def decoration_shape(kind: str, body: ShieldBody, p: dict[str, Any]) -> ShapeSpec | None:
    """Decoration spec centred on the shield centre (None for per-cell decorations)."""
    w, h = body.width, body.height
    margin = max(2, math.floor(min(w, h) * 0.15))
    dec_w, dec_h = w - 2 * margin, h - 2 * margin
    smallest = max(2, min(dec_w, dec_h))
    if kind == "boss":
        return Disc(max(3, math.floor(smallest / 2.8)))
    if kind in ("stripes", "bands"):
        horizontal = kind == "stripes" or p["band_orientation"] == "horizontal"
        count = p["num_bands"]
        extent = (h if kind == "bands" else dec_h) if horizontal else (w if kind == "bands" else dec_w)
        span = (w if kind == "bands" else dec_w) if horizontal else (h if kind == "bands" else dec_h)
        thickness = max(1, math.floor(extent / (count * 4 + 1)))
        span = math.floor(span * 0.98)
        step = extent / (count + 1)
        parts = []
        for i in range(count):
            at = math.floor(-extent / 2 + step * (i + 1)) - thickness // 2
            if horizontal:
                parts.append((Rect(span, thickness), -span // 2, at))
            else:
                parts.append((Rect(thickness, span), at, -span // 2))
        return Union(tuple(parts))
    if kind == "cross":
        arm = max(2, math.floor(smallest * 0.5 / 2))
        t = max(1, math.floor(min(w, h) * 0.12))
        return Union(((Rect(2 * arm + 1, t), -arm, -(t // 2)), (Rect(t, 2 * arm + 1), -(t // 2), -arm)))
    if kind == "triangle":
        height, base = max(2, math.floor(dec_h * 0.45)), max(3, math.floor(dec_w * 0.45))
        return Union(((TaperedBody(height, WidthProfile("linear", start=1, end=base)), 0, -(height // 2)),))
    if kind == "chevron":
        height, base = max(2, math.floor(dec_h * 0.35)), max(4, math.floor(dec_w * 0.55))
        band = ArcBand(base // 2, max(1, math.floor(base / 6)), height, style="v", inverted=p["chevron_direction"] == "up")
        return Union(((band, 0, -(height // 2)),))
    if kind == "circle_emblem":
        return Disc(max(2, math.floor(smallest / 3.5)))
    if kind in ("diamond", "diamond_outline"):
        hw, hh = max(2, math.floor(dec_w / 2.5)), max(2, math.floor(dec_h / 2.5))
        if kind == "diamond":
            return Diamond(hw, hh)
        return EdgeBand(Diamond(hw, hh), max(1, math.floor(min(hw, hh) / 4)))
    if kind == "saltire":
        return Saltire(math.floor(smallest / 2.5), max(1, math.floor(smallest / 8)))
    if kind == "half_horizontal":
        return Window(body.spec(), -_FAR, 0, _FAR, _FAR)
    if kind == "half_vertical":
        return Window(body.spec(), 0, -_FAR, _FAR, _FAR)
    if kind == "quadrants":
        inner = body.spec()
        return Union(((Window(inner, -_FAR, -_FAR, -1, -1), 0, 0), (Window(inner, 0, 0, _FAR, _FAR), 0, 0)))
    if kind == "sunburst":
        core = max(1, smallest // 8)
        return PolarFlanged(core, p["rays"], max(1, smallest / 2 * 0.9 - core), 1.0, style="ray")
    if kind == "border":
        return EdgeBand(body.spec(), max(1, math.floor(min(w, h) * 0.08)) + 1)
    return None


@item_generator(
    item_type="shield",
    sub_types=SHIELD_SHAPES,
    description="Round, oval, kite, heater and tower shields with heraldic decorations",
)
def plan_shield(ctx: GenerationContext) -> ComponentPlan:
    s = ctx.sampler
    shape = s.choose_known(ctx.options.sub_type, SHIELD_SHAPES, label="shield shape")
    if ctx.options.sub_type and shape == "round":
        shape = s.choose(["round", "oval"])
    body = _sample_body(ctx, shape)

    material = s.material(ctx.options.material, SHIELD_MATERIALS, label="shield material")
    p: dict[str, Any] = {
        "shape": shape,
        "sub_type": ctx.options.sub_type or shape,
        "body": body,
        "material": material,
        "heater_border": s.choose(["flat", "concave", "v_shaped"]) if shape == "heater" else None,
        "decoration": s.choose(DECORATION_TYPES),
        "decoration_material": None,
        "secondary_material": None,
        "band_orientation": "horizontal",
        "num_bands": 1,
        "chevron_direction": "up",
        "rays": 0,
        "rivet_spacing": 0,
    }
    kind = p["decoration"]
    if kind != "none":
        p["decoration_material"] = s.choose(DECORATION_MATERIALS, exclude=[material])
        if kind == "quadrants":
            p["secondary_material"] = s.choose(
                DECORATION_MATERIALS, exclude=[material, p["decoration_material"]]
            )
        if kind == "bands":
            p["band_orientation"] = s.choose(["horizontal", "vertical"])
            p["num_bands"] = s.int_in(2, 4)
        elif kind == "stripes":
            p["num_bands"] = s.int_in(1, 2)
        elif kind == "chevron":
            p["chevron_direction"] = s.choose(["up", "down"])
        elif kind == "sunburst":
            p["rays"] = s.int_in(10, 20)
        elif kind == "riveted_edge":
            p["rivet_spacing"] = s.int_in(5, 8)
    has_gem = kind not in NO_GEM_DECORATIONS and s.chance(0.20)
    p["gem"] = s.choose(GEM_MATERIALS) if has_gem else None
    ctx.params.update(p)

    cx, cy = ctx.grid.center_x, ctx.grid.center_y
    body_sil = body.spec().at(cx, cy)
    shaded: dict[str, ShadedSilhouette] = {}

    def face(x: int, y: int) -> bool:
        return body_sil.contains(x, y) and not shaded["body"].is_boundary((x, y))

    def draw_body(ctx: GenerationContext) -> None:
        shaded["body"] = ctx.draw("body", body_sil, ctx.palette(material), outlined=True)
        top = cy - body.height // 2
        ctx.anchors.record("face_center", cx, cy, width=body.width, height=body.height)
        ctx.anchors.record("top_edge", cx, top)

    def draw_heater_border(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("top_edge")
        half = body.width // 2
        style = p["heater_border"]
        if style == "flat":
            spec: ShapeSpec = Rect(body.width, 2)
            origin = (anchor.x - half, anchor.y + 1)
        else:
            spec = ArcBand(half, 2, max(1, body.height // 10), style="concave" if style == "concave" else "v")
            origin = (anchor.x, anchor.y + 1)
        trim = ctx.palette(p["decoration_material"] or "IRON")
        ctx.draw("top_border", spec.at(*origin), trim, clip=face)

    def draw_decoration(ctx: GenerationContext) -> None:
        palette = ctx.palette(p["decoration_material"])
        anchor = ctx.anchor("face_center")
        if kind == "riveted_edge":
            ring = EdgeBand(body.spec(), 3)
            spacing = p["rivet_spacing"]
            points = [
                (x, y) for x, y in body_sil.cells()
                if ring.depth_at(x - cx, y - cy) == 3 and (x + y) % spacing == 0
            ]
            draw_rivets(ctx, points, palette, clip=face)
            return
        spec = decoration_shape(kind, body, p)
        if spec is None:
            return
        overlays = []
        if kind == "boss":
            overlays.append(boss_rule(anchor.x, anchor.y, spec.radius, palette))
        elif kind == "sunburst":
            reach = spec.core_radius + spec.flange_length
            overlays.append(
                pattern_rule(lambda x, y: math.hypot(x - cx, y - cy) < reach * 0.3, palette.highlight)
            )
        sil = spec.at(anchor.x, anchor.y)
        ctx.draw(kind, sil, palette, overlays=overlays, clip=face)
        if kind == "circle_emblem":
            ctx.fill(EdgeBand(spec, 1).at(anchor.x, anchor.y), palette.highlight, clip=face)
        if kind == "quadrants":
            secondary = ctx.palette(p["secondary_material"])
            inner = body.spec()
            other = Union(((Window(inner, 0, -_FAR, _FAR, -1), 0, 0), (Window(inner, -_FAR, 0, -1, _FAR), 0, 0)))
            ctx.draw("quadrants_secondary", other.at(anchor.x, anchor.y), secondary, clip=face)

    def draw_gem_step(ctx: GenerationContext) -> None:
        size = max(2, math.floor(min(body.width, body.height) / 4))
        draw_gem(ctx, "gem", cx, cy, size, size, ctx.palette(p["gem"]), clip=face)

    plan = ComponentPlan("shield", [], _name, _describe)
    plan.add("body", draw_body, description="Outlined shield body")
    if p["heater_border"]:
        plan.add("top_border", draw_heater_border, "body")
    if kind != "none":
        plan.add("decoration", draw_decoration, "body")
    if p["gem"]:
        plan.add("gem", draw_gem_step, *(["decoration"] if kind != "none" else ["body"]))
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    body: ShieldBody = p["body"]
    mat = ctx.palette(p["material"]).name
    if body.shape == "tower":
        name = f"{mat} {title_case(body.tower_style or '')} Tower Shield"
    elif body.shape == "heater":
        name = f"{mat} {title_case(p['heater_border'])} Top Border Heater Shield"
    else:
        name = f"{mat} {title_case(body.shape)} Shield"
    kind = p["decoration"]
    if kind != "none":
        dec = ctx.palette(p["decoration_material"]).name
        if kind == "bands":
            name += f" with {dec} {title_case(p['band_orientation'])} Bands"
        elif kind == "chevron":
            name += f" with {dec} {title_case(p['chevron_direction'])}-pointing Chevron"
        else:
            name += f" with {dec} {title_case(kind)}"
        if p["secondary_material"]:
            name += f" & {ctx.palette(p['secondary_material']).name}"
    if p["gem"]:
        name += f" and {title_case(p['gem'].replace('GEM_', ''))} Gem"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    body: ShieldBody = p["body"]
    kind = p["decoration"]
    return {
        "shape": body.shape,
        "subType": p["sub_type"],
        "towerStyle": body.tower_style,
        "heaterTopStyle": "flat" if body.shape == "heater" else None,
        "heaterTopBorderStyle": p["heater_border"],
        "cornerRadius": body.corner_radius,
        "kiteTopRatio": round(body.kite_top_ratio, 3) if body.shape == "kite" else None,
        "material": p["material"].lower(),
        "logicalWidth": body.width,
        "logicalHeight": body.height,
        "colors": palette_colors(ctx.palette(p["material"])),
        "decoration": {
            "type": kind,
            "material": p["decoration_material"].lower() if p["decoration_material"] else None,
            "materialSecondary": p["secondary_material"].lower() if p["secondary_material"] else None,
            "bandOrientation": p["band_orientation"] if kind == "bands" else None,
            "numBands": p["num_bands"] if kind in ("bands", "stripes") else None,
            "chevronDirection": p["chevron_direction"] if kind == "chevron" else None,
            "hasGem": p["gem"] is not None,
            "gemColor": p["gem"].lower() if p["gem"] else None,
        },
    }
