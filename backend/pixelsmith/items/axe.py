"""Axe generator: hand axes, battle axes and double axes on a straight haft.

The shaft is drawn first and records the ``socket`` anchor near its top; the
blades grow sideways from the socket edge, the cutting edge being the column
furthest from the haft. Single-bladed axes may carry a spike poll opposite
the blade.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import pattern_rule, row_rule
from pixelsmith.engine.shapes import Diamond, Disc, Rect, ShapeSpec, TaperedBody, Union, WidthProfile, Window
from pixelsmith.items.parts import palette_colors, wood_grain
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

AXE_TYPES = ["hand_axe", "battle_axe", "double_axe"]
AXE_ALIASES = {"single_blade_battleaxe": "battle_axe", "double_blade_axe": "double_axe"}
HEAD_MATERIALS = ["STEEL", "IRON", "DARK_STEEL"]
SHAFT_MATERIALS = ["WOOD", "DARK_STEEL"]
GRIP_MATERIALS = ["LEATHER", "DARK_STEEL", "IRON"]
RING_MATERIALS = ["IRON", "STEEL", "BRONZE", "GOLD"]
SHAFT_STYLES = ["plain", "wrapped_grip", "ringed_shaft"]
POMMEL_SHAPES = ["round", "square", "disc", "finial", "pointed_pommel", "flared_pommel"]
BLADE_SHAPES = ["expanding_straight", "bearded", "flared", "pointed_taper"]
EDGE_PROFILES = ["straight_edge", "convex_edge", "concave_edge"]

# How sharply the blade narrows toward its top and bottom rows
BLADE_TAPER = {"flared": 0.6, "pointed_taper": 1.7, "expanding_straight": 1.0, "bearded": 1.0}

# axe type: (shaft lo, hi as fractions of the longest shaft, blade reach lo, hi of grid width,
#            blade height lo, hi of reach, spike poll chance)
AXE_SIZES: dict[str, tuple[float, float, float, float, float, float, float]] = {
    "hand_axe": (0.0, 0.60, 0.18, 0.25, 0.7, 1.2, 0.4),
    "battle_axe": (0.75, 1.0, 0.25, 0.40, 0.6, 1.1, 0.6),
    "double_axe": (0.70, 0.96, 0.22, 0.35, 0.75, 1.2, 0.0),
}

MIN_SHAFT_LENGTH = 20
MIN_NECK = 3
MIN_REACH = 8
MIN_BLADE_HEIGHT = 10


def blade_rows(
    shape: str, edge: str, intensity: float, reach: int, height: int, neck: int, max_reach: int
) -> list[tuple[int, int]]:
    """Per-row (start, width) of one blade, measured outward from the socket edge.

    Every row ends at the cutting edge; rows near the top and bottom keep only
    ``neck`` cells behind it, the middle row reaches back to the socket.
    """
    rows = []
    exponent = BLADE_TAPER[shape]
    for row in range(height):
        p = 0.5 if height <= 1 else row / (height - 1)
        d = abs(p - 0.5) * 2
        width = neck + (reach - neck) * (1 - d**exponent)
        outer = reach
        if edge == "convex_edge":
            outer += math.floor(reach * 0.15 * (1 - d) * intensity)
        elif edge == "concave_edge":
            outer -= math.floor(reach * 0.20 * (1 - d) * intensity)
        if shape == "bearded" and p > 0.5:
            beard = math.floor(reach * 0.30 * math.sin((p - 0.5) / 0.5 * math.pi * 0.9))
            width = min(reach * 1.25, width + beard)
        outer = min(max(outer, neck), max_reach)
        width = min(max(neck, math.floor(width)), outer)
        rows.append((outer - width, width))
    return rows


def axe_blade(rows: list[tuple[int, int]], side: int) -> Union:
    """Blade growing right (side=1) or left (side=-1) from column 0, row 0 at its top."""
    parts = []
    for row, (start, width) in enumerate(rows):
        x = start if side > 0 else -(start + width)
        parts.append((Rect(width, 1), x, row))
    return Union(tuple(parts))


def spike_poll(length: int, height: int, side: int) -> ShapeSpec:
    """Half diamond pointing away from the haft, centred on row 0."""
    half = max(1, height) / 2
    if side > 0:
        return Window(Diamond(length, half), 1, -height, length, height)
    return Window(Diamond(length, half), -length, -height, -1, height)


def _pommel_size(s, shape: str | None, thickness: int) -> dict[str, Any]:
    if shape is None:
        return {"height": 0, "width": 0}
    if shape == "pointed_pommel":
        return {"height": s.int_in(3, 5), "width": s.int_in(thickness, thickness + 1)}
    if shape == "flared_pommel":
        return {"height": s.int_in(2, 3), "width": thickness + 2 * s.int_in(1, 2)}
    if shape in ("round", "disc"):
        radius = max(MIN_NECK, thickness + s.int_in(1, 3)) // 2
        return {"height": radius * 2 + 1, "width": radius * 2 + 1, "radius": radius}
    width = max(MIN_NECK, thickness + s.int_in(0, 2))
    return {"height": max(1, math.floor(width * s.float_in(0.5, 1.0))), "width": width}


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    grid = ctx.grid
    axe_type = s.choose_known(opts.sub_type, AXE_TYPES, AXE_ALIASES, label="axe type")
    p: dict[str, Any] = {"axe_type": axe_type, "sub_type": opts.sub_type or axe_type}
    p["head_material"] = s.material(opts.material, HEAD_MATERIALS, label="head material")
    p["shaft_material"] = shaft = s.material(opts.haft_material, SHAFT_MATERIALS, label="haft material")
    p["thickness"] = t = s.int_in(2, 3)
    p["shaft_style"] = style = s.choose(SHAFT_STYLES)
    p["grip_material"] = None
    if style == "wrapped_grip":
        p["grip_material"] = s.material(opts.grip_material, GRIP_MATERIALS, label="grip material")
    p["ring_material"] = s.choose(RING_MATERIALS) if style == "ringed_shaft" else None
    p["rings"] = s.int_in(1, 2)
    p["ring_height"] = s.int_in(1, 2)

    p["pommel"] = pommel = s.choose(POMMEL_SHAPES) if s.chance(0.75) else None
    p["pommel_material"] = s.choose(["IRON", "STEEL", "BRONZE", shaft, "GOLD"]) if pommel else None
    p["pommel_size"] = _pommel_size(s, pommel, t)

    p["blade_shape"] = s.choose(BLADE_SHAPES)
    p["edge_profile"] = s.choose(EDGE_PROFILES)
    p["edge_intensity"] = s.float_in(0.25, 0.85)
    p["neck"] = s.int_in(MIN_NECK, MIN_NECK + 1)

    longest = grid.height - grid.padding * 2 - 10
    sh_lo, sh_hi, r_lo, r_hi, h_lo, h_hi, spike_chance = AXE_SIZES[axe_type]
    shaft_len = s.int_in(max(MIN_SHAFT_LENGTH, longest * sh_lo), longest * sh_hi)
    reach = max(MIN_REACH, s.int_in(grid.width * r_lo, grid.width * r_hi))
    p["blade_reach"] = reach = min(reach, grid.center_x - grid.padding - t // 2)
    p["blade_height"] = max(MIN_BLADE_HEIGHT, s.int_in(reach * h_lo, reach * h_hi))

    p["side"] = s.sign()
    p["spike_length"] = 0
    if s.chance(spike_chance):
        p["spike_length"] = max(1, s.int_in(reach * 0.3, reach * 0.7))

    # Blade rows above the shaft top, shaft, then the pommel below
    bh = p["blade_height"]
    p["socket_drop"] = math.floor(bh * 0.1)
    above = max(0, bh // 2 - p["socket_drop"])
    overrun = above + shaft_len + p["pommel_size"]["height"] - grid.usable_height
    if overrun > 0:
        shaft_len = max(MIN_SHAFT_LENGTH, shaft_len - overrun)
        logger.debug("Axe overran by %d rows, shaft now %d", overrun, shaft_len)
    p["shaft_length"] = shaft_len
    total = above + shaft_len + p["pommel_size"]["height"]
    p["shaft_top"] = max(grid.padding, (grid.height - total) // 2) + above
    return p


@item_generator(
    item_type="axe",
    sub_types=AXE_TYPES,
    aliases=AXE_ALIASES,
    description="Hand axes, battle axes and double axes",
)
def plan_axe(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    cx = ctx.grid.center_x
    t = p["thickness"]
    length = p["shaft_length"]
    top = p["shaft_top"]
    shaft_palette = ctx.palette(p["shaft_material"])
    head_palette = ctx.palette(p["head_material"])
    max_reach = ctx.grid.center_x - ctx.grid.padding - t // 2

    def draw_shaft(ctx: GenerationContext) -> None:
        body = TaperedBody(length, WidthProfile("constant", start=t))
        overlays = []
        if p["shaft_material"] == "WOOD":
            overlays.append(pattern_rule(wood_grain(top), shaft_palette.shadow))
        ctx.draw("shaft", body.at(cx, top), shaft_palette, overlays=overlays, decorations=[p["shaft_style"]])
        ctx.anchors.record("socket", cx, top + p["socket_drop"])
        ctx.anchors.record("shaft_bottom", cx, top + length)

    def draw_grip(ctx: GenerationContext) -> None:
        grip = ctx.palette(p["grip_material"])
        start = top + length // 2
        rows = length - length // 2
        wraps = row_rule({start + r: grip.shadow for r in range(0, rows, 3)})
        ctx.draw("grip", Rect(t, rows).at(cx - t // 2, start), grip, overlays=[wraps])

    def draw_rings(ctx: GenerationContext) -> None:
        ring = ctx.palette(p["ring_material"])
        width = t + 2
        for i in range(p["rings"]):
            y = top + math.floor(length * (0.25 if i == 0 else 0.75)) - 1
            ctx.draw(f"ring_{i}", Rect(width, p["ring_height"]).at(cx - width // 2, y), ring)

    def draw_pommel(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("shaft_bottom")
        palette = ctx.palette(p["pommel_material"])
        size = p["pommel_size"]
        shape = p["pommel"]
        if shape == "pointed_pommel":
            spec: ShapeSpec = TaperedBody(size["height"], WidthProfile("linear", start=size["width"], end=1))
            ctx.draw("pommel", spec.at(anchor.x, anchor.y), palette, decorations=[shape])
        elif shape == "flared_pommel":
            profile = WidthProfile("sine_rise", start=t, end=size["width"], rounding="floor")
            ctx.draw("pommel", TaperedBody(size["height"], profile).at(anchor.x, anchor.y), palette, decorations=[shape])
        elif shape in ("round", "disc"):
            r = size["radius"]
            ctx.draw("pommel", Disc(r).at(anchor.x, anchor.y + r), palette, decorations=[shape])
        else:
            w = size["width"]
            ctx.draw("pommel", Rect(w, size["height"]).at(anchor.x - w // 2, anchor.y), palette, decorations=[shape])

    def draw_blades(ctx: GenerationContext) -> None:
        socket = ctx.anchor("socket")
        bh = p["blade_height"]
        rows = blade_rows(
            p["blade_shape"], p["edge_profile"], p["edge_intensity"], p["blade_reach"], bh, p["neck"], max_reach
        )
        blade_top = socket.y - bh // 2
        sides = [-1, 1] if p["axe_type"] == "double_axe" else [p["side"]]
        for side in sides:
            edge = cx - t // 2 if side < 0 else cx - t // 2 + t
            name = "blade" if len(sides) == 1 else f"blade_{'left' if side < 0 else 'right'}"
            ctx.draw(name, axe_blade(rows, side).at(edge, blade_top), head_palette, decorations=[p["blade_shape"]])
        ctx.anchors.record("blade_top", cx, blade_top, height=bh)

    def draw_spike(ctx: GenerationContext) -> None:
        socket = ctx.anchor("socket")
        side = -p["side"]
        edge = cx - t // 2 - 1 if side < 0 else cx - t // 2 + t - 1
        height = max(1, math.floor(t * 1.2))
        spec = spike_poll(p["spike_length"], height, side)
        ctx.draw("spike_poll", spec.at(edge + (1 if side < 0 else 0), socket.y), head_palette)

    def draw_socket(ctx: GenerationContext) -> None:
        socket = ctx.anchor("socket")
        height = max(3, math.floor(t * 1.7 + p["blade_height"] * 0.1))
        width = t + 3
        ctx.draw("socket", Rect(width, height).at(cx - width // 2, socket.y - height // 2), head_palette)

    plan = ComponentPlan("axe", [], _name, _describe)
    plan.add("shaft", draw_shaft, description="Haft recording the socket anchor")
    if p["grip_material"]:
        plan.add("grip", draw_grip, "shaft")
    if p["ring_material"]:
        plan.add("rings", draw_rings, "shaft")
    if p["pommel"]:
        plan.add("pommel", draw_pommel, "shaft")
    plan.add("blades", draw_blades, "shaft", description=f"{p['axe_type']} blades from the socket edge")
    if p["spike_length"] and p["axe_type"] != "double_axe":
        plan.add("spike_poll", draw_spike, "blades")
    plan.add("socket", draw_socket, "blades")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['head_material']).name} {title_case(p['blade_shape'])} {title_case(p['axe_type'])}"
    if p["edge_profile"] != "straight_edge":
        name += f" ({title_case(p['edge_profile'])})"
    if p["shaft_style"] != "plain":
        name += f" with {title_case(p['shaft_style'])}"
    if p["pommel"]:
        name += f" and {title_case(p['pommel'].replace('_pommel', ''))} Pommel"
    if _has_spike(p):
        name += " with Spike Poll"
    return name + f" (Shaft: {ctx.palette(p['shaft_material']).name})"


def _has_spike(p: dict[str, Any]) -> bool:
    return bool(p["spike_length"]) and p["axe_type"] != "double_axe"


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    head_palette = ctx.palette(p["head_material"])
    return {
        "visualTheme": f"{head_palette.name} {title_case(p['axe_type'])}",
        "axeType": p["axe_type"],
        "subType": p["sub_type"],
        "shaft": {
            "material": p["shaft_material"].lower(),
            "style": p["shaft_style"],
            "length": p["shaft_length"],
            "thickness": p["thickness"],
            "gripMaterial": p["grip_material"].lower() if p["grip_material"] else None,
            "pommelShape": p["pommel"],
            "colors": palette_colors(ctx.palette(p["shaft_material"])),
        },
        "head": {
            "material": p["head_material"].lower(),
            "bladeShape": p["blade_shape"],
            "cuttingEdgeProfile": p["edge_profile"],
            "bladeLength": p["blade_reach"],
            "bladeHeight": p["blade_height"],
            "hasSpikePoll": _has_spike(p),
            "spikeLength": p["spike_length"] if _has_spike(p) else 0,
            "colors": palette_colors(head_palette),
        },
    }
