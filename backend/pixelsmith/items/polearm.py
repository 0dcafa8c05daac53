"""Polearm generator: spear, trident, poleaxe and glaive heads on a long shaft.

The head is drawn first and records the ``mount`` anchor at its base; the
shaft hangs from it. Trident prongs attach to anchors the crossbar records.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.curve import CurveAccumulator
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shapes import (
    Curve,
    Diamond,
    Patterned,
    Rect,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import palette_colors, row_strips
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

HEAD_TYPES = ["spear_point", "trident_head", "poleaxe_head", "leaf_spear", "barbed_spear", "glaive_blade"]
SHAFT_MATERIALS = ["WOOD", "DARK_STEEL"]
HEAD_MATERIALS = ["STEEL", "IRON", "DARK_STEEL"]
SECONDARY_MATERIALS = ["STEEL", "IRON", "BRONZE", "OBSIDIAN", "DARK_STEEL", "SILVER", "GOLD", "ENCHANTED", "BONE"]
METAL_SHAFTS = ("IRON", "STEEL", "DARK_STEEL", "BRONZE")
BUTT_CAP_MATERIALS = ["IRON", "STEEL", "BRONZE", "DARK_STEEL"]

# head type: (height lo, hi)
HEAD_HEIGHTS: dict[str, tuple[int, int]] = {
    "spear_point": (10, 20),
    "leaf_spear": (10, 20),
    "barbed_spear": (10, 20),
    "trident_head": (12, 22),
    "poleaxe_head": (12, 22),
    "glaive_blade": (18, 30),
}
# head type: chance of a secondary material
SECONDARY_CHANCE = {"poleaxe_head": 0.6, "trident_head": 0.4, "glaive_blade": 0.3}

AXE_EDGES = ["straight_edge", "rounded_edge", "bearded_edge", "convex_edge"]
REAR_COMPONENTS = ["rear_spike", "rear_hammer", "rear_hook", "rear_axe_small"]
PRONG_STYLES = ["straight_taper", "leaf_shaped", "barbed_tip", "curved_outward"]
GLAIVE_TIPS = ["sharp_point", "clipped_point", "rounded_tip"]
GLAIVE_BACKS = ["none", "small_spike", "notched_back"]

# glaive curve style: (phase, amount factor, direction factor)
GLAIVE_CURVES: dict[str, tuple[float, float, int]] = {
    "simple_convex": (0.9, 1.0, 1),
    "simple_concave": (0.9, 1.0, -1),
    "s_curve": (1.7, 0.6, 1),
    "subtle_curve": (0.4, 0.4, 1),
    "heavy_chop": (0.3, 0.2, 1),
}

MIN_SHAFT_LENGTH = 25


def spear_body(head_type: str, size: int, shaft: int, peak: float = 0.3) -> TaperedBody:
    """Spear point drawn from its tip (row 0) down to the mount."""
    if head_type == "leaf_spear":
        base = min(max(1, math.floor(size / 1.8)), shaft + 4)
        profile = WidthProfile("bulge", start=shaft, peak=base, split=peak, exponent=1.5, reverse=True)
    else:
        base = min(max(1, math.floor(size / 3.0)), shaft + 4)
        profile = WidthProfile("linear", start=1, end=base)
    return TaperedBody(size, profile)


def glaive_body(p: dict[str, Any]) -> TaperedBody:
    length, width = p["size"], p["glaive_width"]
    tip = p["glaive_tip"]
    if p["glaive_curve"] == "heavy_chop":
        profile = WidthProfile("linear", start=width * 0.8, end=width, minimum=max(1, width - 1))
    elif tip == "clipped_point":
        clipped = max(1, math.floor(width * 0.8))
        profile = WidthProfile(
            "kissaki", start=clipped, peak=clipped, end=width, tip_rows=max(1, math.ceil(length * 0.15))
        )
    elif tip == "rounded_tip":
        profile = WidthProfile("sine_rise", start=max(1, width * 0.5), end=width, rounding="floor")
    else:
        profile = WidthProfile("power_taper", start=width, exponent=1.3, reverse=True)
    phase, factor, flip = GLAIVE_CURVES[p["glaive_curve"]]
    curve = Curve(p["glaive_intensity"] * factor, p["glaive_direction"] * flip, phase)
    return TaperedBody(length, profile, curve=curve)


def axe_blade_reach(edge: str, row: int, span: int, reach: int, straight: float) -> int:
    """Horizontal reach of the poleaxe blade on ``row`` of ``span`` rows."""
    half = span / 2
    centre = abs(row - half) / half if half else 0.0
    if edge == "straight_edge":
        return math.floor(reach * straight)
    if edge in ("rounded_edge", "convex_edge"):
        return math.floor(reach * (1 - centre**1.3 * 0.25))
    out = math.floor(reach * (0.6 + 0.4 * (1 - centre)))
    if row > span * 0.4:
        beard = (row - span * 0.4) / (span * 0.6)
        out = math.floor(out + reach * 0.35 * math.sin(beard * math.pi / 1.8))
    return out


def rear_component(kind: str, length: int, height: int) -> tuple[ShapeSpec, int]:
    """Rear piece growing left from column 0, and its top row offset."""
    if kind == "rear_spike":
        return Window(Diamond(length, height / 2), -length, -height, -1, height), height // 2
    if kind == "rear_hook":
        hook = max(1, math.floor(height / 2.5))
        return Union(((Rect(hook, height), -hook, 0), (Rect(max(1, length - hook + 1), hook), -length, 0))), 0
    return Union(((Rect(length, height), -length, 0),)), 0


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    head_type = s.choose_known(opts.sub_type, HEAD_TYPES, label="polearm head")
    p: dict[str, Any] = {"head_type": head_type, "sub_type": opts.sub_type or head_type}
    p["shaft_material"] = shaft = s.material(opts.haft_material, SHAFT_MATERIALS, label="shaft material")
    p["head_material"] = head = s.material(opts.material, HEAD_MATERIALS, label="head material")
    p["thickness"] = t = s.int_in(1, 2)

    if shaft == "WOOD":
        detail = "grain" if s.chance(0.7) else s.choose(["wrapped", "metal_bands"])
    elif shaft in METAL_SHAFTS:
        detail = s.choose(["none", "rivets", "wrapped", "metal_bands"])
    else:
        detail = "none"
    p["shaft_detail"] = detail
    p["wrap_material"] = None
    if detail == "wrapped":
        p["wrap_material"] = s.choose(["LEATHER", "RED_PAINT", "BLACK_PAINT"])
    elif detail == "metal_bands":
        p["wrap_material"] = s.choose(["IRON", "STEEL", "BRONZE", "GOLD"])
    p["detail_period"] = s.int_in(5, 10) if detail == "rivets" else s.int_in(8, 15)

    p["butt_cap"] = s.choose(BUTT_CAP_MATERIALS) if s.chance(0.6) else None
    p["size"] = size = s.int_in(*HEAD_HEIGHTS[head_type])
    p["secondary"] = None
    if head_type in SECONDARY_CHANCE and s.chance(SECONDARY_CHANCE[head_type]):
        p["secondary"] = s.choose(SECONDARY_MATERIALS, exclude=[head])

    if head_type == "leaf_spear":
        p["leaf_peak"] = s.float_in(0.20, 0.40)
    elif head_type == "barbed_spear":
        p["barb_every"] = s.int_in(2, 4)
        p["barb_ratio"] = s.float_in(0.6, 0.9)
        p["barb_angle"] = s.float_in(0.3, 0.6)
    elif head_type == "trident_head":
        p["prong_style"] = s.choose(PRONG_STYLES)
        main_base = max(1, math.floor(size / 4.0))
        p["main_base"] = main_base
        p["side_height"] = math.floor(size * s.float_in(0.60, 0.90))
        p["side_base"] = side = max(1, math.floor(main_base * s.float_in(0.6, 1.1)))
        splay = s.float_in(0.7, 1.8)
        p["prong_spacing"] = spacing = max(1, math.floor(main_base * splay) + t // 2 + s.int_in(1, 2))
        p["crossbar_height"] = max(1, math.floor(t * s.float_in(0.7, 1.2)))
        p["crossbar_width"] = spacing * 2 + side + s.int_in(-1, 1)
    elif head_type == "poleaxe_head":
        span = size + s.int_in(2, 6)
        p["axe_edge"] = s.choose(AXE_EDGES)
        p["rear"] = s.choose(REAR_COMPONENTS)
        p["rear_height"] = s.int_in(t + 1, t + 4)
        p["spike_height"] = math.floor(span * s.float_in(0.4, 0.60))
        p["spike_base"] = max(1, math.floor(t * s.float_in(0.8, 1.3)))
        p["blade_span"] = max(2, math.floor(span * s.float_in(0.45, 0.65)))
        p["blade_reach"] = math.floor(span * s.float_in(0.3, 0.5))
        p["straight_ratio"] = s.float_in(0.75, 0.95)
        p["rear_length"] = max(1, math.floor(span * s.float_in(0.2, 0.35)))
    elif head_type == "glaive_blade":
        p["glaive_width"] = width = max(3, math.floor(size / s.float_in(3.0, 5.0)))
        p["glaive_direction"] = s.choose([-1, 1])
        p["glaive_intensity"] = width * s.float_in(0.5, 1.0)
        p["glaive_curve"] = s.choose(list(GLAIVE_CURVES))
        p["glaive_tip"] = s.choose(GLAIVE_TIPS)
        p["glaive_back"] = s.choose(GLAIVE_BACKS)
        p["back_spike"] = s.int_in(1, 3)

    p["socket"] = None
    if ("spear" in head_type or head_type == "glaive_blade") and s.chance(0.5):
        p["socket"] = s.choose(["BRONZE", "IRON", "STEEL", "DARK_STEEL" if shaft == "WOOD" else "WOOD"])

    cap_rows = 3 if p["butt_cap"] else 0
    room = ctx.grid.height - size - ctx.grid.padding - cap_rows
    length = s.int_in(max(MIN_SHAFT_LENGTH, room - 5), room)
    p["shaft_length"] = max(MIN_SHAFT_LENGTH, min(length, room))
    return p


@item_generator(
    item_type="polearm",
    sub_types=HEAD_TYPES,
    description="Spears, tridents, poleaxes and glaives",
)
def plan_polearm(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    t = p["thickness"]
    size = p["size"]
    cap_h = max(1, math.floor(t * 1.2)) if p["butt_cap"] else 0
    total = size + p["shaft_length"] + cap_h
    top = max(ctx.grid.padding, math.floor((ctx.grid.height - total) / 2))
    cx = ctx.grid.center_x
    mount_y = top + size

    head_palette = ctx.palette(p["head_material"])
    part_palette = ctx.palette(p["secondary"]) if p["secondary"] else head_palette
    shaft_palette = ctx.palette(p["shaft_material"])
    head_type = p["head_type"]

    def draw_spear(ctx: GenerationContext) -> None:
        body = spear_body(head_type, size, t, p.get("leaf_peak", 0.3))
        ctx.draw("head", body.at(cx, top), head_palette)
        if head_type == "barbed_spear":
            barbs = []
            for row in range(size):
                rel = size - 1 - row
                if not (size * 0.3 < rel < size * 0.7) or row % p["barb_every"]:
                    continue
                length = max(1, math.floor(body.row_width(row) * p["barb_ratio"]))
                drop = math.floor(length * p["barb_angle"])
                left, right = body.row_span(row)
                barbs += [(Rect(length, 1), left - length, row + drop), (Rect(length, 1), right, row + drop)]
            if barbs:
                ctx.draw("barbs", Union(tuple(barbs)).at(cx, top), head_palette)
        ctx.anchors.record("mount", cx, mount_y)

    def draw_crossbar(ctx: GenerationContext) -> None:
        height, width = p["crossbar_height"], p["crossbar_width"]
        bar_y = mount_y - height
        ctx.draw("crossbar", Rect(width, height).at(cx - width // 2, bar_y), part_palette)
        spacing = p["prong_spacing"]
        ctx.anchors.record("prong_centre", cx, bar_y)
        ctx.anchors.record("prong_left", cx - spacing, bar_y)
        ctx.anchors.record("prong_right", cx + spacing, bar_y)
        ctx.anchors.record("mount", cx, mount_y)

    def draw_prongs(ctx: GenerationContext) -> None:
        centre = ctx.anchor("prong_centre")
        main_len = max(1, centre.y - top)
        main = TaperedBody(main_len, WidthProfile("linear", start=1, end=p["main_base"]))
        ctx.draw("prong_centre", main.at(centre.x, centre.y - main_len), head_palette)
        style = p["prong_style"]
        height, base = max(1, p["side_height"]), p["side_base"]
        for name, side in (("prong_left", -1), ("prong_right", 1)):
            anchor = ctx.anchor(name)
            curve = None
            if style == "leaf_shaped" and base > 1:
                profile = WidthProfile("bulge", start=1, peak=base * 1.5, split=0.4, exponent=1.0, reverse=True)
            else:
                profile = WidthProfile("linear", start=1, end=base)
            if style == "curved_outward":
                curve = Curve(base * 0.6, side, 0.6, reverse=True)
            prong = TaperedBody(height, profile, curve=curve)
            spec: ShapeSpec = prong
            if style == "barbed_tip":
                barbs = [(prong, 0, 0)]
                for row in range(height):
                    rel = height - 1 - row
                    if height * 0.1 < rel < height * 0.25 and rel % 2 == 0:
                        left, right = prong.row_span(row)
                        barbs += [(Rect(1, 1), left - 1, row), (Rect(1, 1), right, row)]
                spec = Union(tuple(barbs))
            ctx.draw(name, spec.at(anchor.x, anchor.y - height), head_palette, decorations=[style])

    def draw_poleaxe(ctx: GenerationContext) -> None:
        spike_h = max(1, p["spike_height"])
        spike = TaperedBody(spike_h, WidthProfile("linear", start=1, end=p["spike_base"]))
        ctx.draw("top_spike", spike.at(cx, mount_y - spike_h), head_palette)

        side_y = mount_y + t // 2
        span, reach = p["blade_span"], p["blade_reach"]
        socket_w = max(1, math.floor(t * 0.8))
        widths = [
            max(socket_w + 1, axe_blade_reach(p["axe_edge"], row, span, reach, p["straight_ratio"]))
            for row in range(span)
        ]
        ctx.draw("axe_blade", row_strips(widths).at(cx + t // 2, side_y - span // 2), part_palette)

        rear, dy = rear_component(p["rear"], p["rear_length"], p["rear_height"])
        rear_top = side_y - p["rear_height"] // 2
        ctx.draw("rear", rear.at(cx - t // 2, rear_top + dy), head_palette, decorations=[p["rear"]])
        ctx.anchors.record("mount", cx, mount_y)

    def draw_glaive(ctx: GenerationContext) -> None:
        body = glaive_body(p)
        # Shift the blade so its bottom row sits over the shaft
        final = body.trace(CurveAccumulator())
        origin_x = cx - final
        ctx.draw("blade", body.at(origin_x, top), head_palette, decorations=[p["glaive_curve"], p["glaive_tip"]])
        back = p["glaive_back"]
        back_side = -p["glaive_direction"]
        marks = []
        for row in range(size):
            rel = size - 1 - row
            left, right = body.row_span(row)
            edge = left - 1 if back_side < 0 else right
            if back == "small_spike" and size * 0.55 < rel < size * 0.75 and rel % 3 == 0:
                n = p["back_spike"]
                marks.append((Rect(n, 1), edge - n + 1 if back_side < 0 else edge, row))
            elif back == "notched_back" and size * 0.3 < rel < size * 0.9 and rel % 4 < 2:
                marks.append((Rect(1, 1), edge + (1 if back_side < 0 else -1), row))
        if marks and back == "small_spike":
            ctx.draw("back_spikes", Union(tuple(marks)).at(origin_x, top), part_palette)
        elif marks:
            ctx.fill(Union(tuple(marks)).at(origin_x, top), head_palette.shadow)
        ctx.anchors.record("mount", cx, mount_y, final_offset=final)

    def draw_shaft(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("mount")
        length = p["shaft_length"]
        left = anchor.x - t // 2
        body = TaperedBody(length, WidthProfile("constant", start=t))
        ctx.draw("shaft", body.at(anchor.x, anchor.y), shaft_palette, decorations=[p["shaft_detail"]])
        detail = p["shaft_detail"]
        period = p["detail_period"]
        if detail == "grain":
            grain = Patterned(Rect(t, length), period=6, duty=1, weight_x=1, weight_y=2)
            ctx.fill(grain.at(left, anchor.y), shaft_palette.shadow)
        elif detail == "rivets":
            ctx.fill(Patterned(Rect(1, length), period, 1, 0, 1).at(anchor.x, anchor.y), shaft_palette.shadow)
        elif detail == "wrapped":
            wrap = ctx.palette(p["wrap_material"])
            ctx.fill(Patterned(Rect(t, length), 4, 2, 0, 1).at(left, anchor.y), wrap.base)
        elif detail == "metal_bands":
            start = math.ceil(length * 0.1)
            rows = max(1, math.floor(length * 0.8))
            bands = Patterned(Rect(t + 2, rows), period, 2, 0, 1)
            ctx.draw("shaft_bands", bands.at(left - 1, anchor.y + start), ctx.palette(p["wrap_material"]))
        ctx.anchors.record("shaft_bottom", anchor.x, anchor.y + length)

    def draw_socket(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("mount")
        height = max(2, math.floor(t * 2.5) + 1)
        width = t + 2
        sil = Rect(width, height).at(anchor.x - width // 2, anchor.y - math.floor(height * 0.4))
        ctx.draw("socket", sil, ctx.palette(p["socket"]))

    def draw_butt_cap(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("shaft_bottom")
        width = t + (0 if t == 1 else 2)
        ctx.draw("butt_cap", Rect(width, cap_h).at(anchor.x - width // 2, anchor.y), ctx.palette(p["butt_cap"]))

    plan = ComponentPlan("polearm", [], _name, _describe)
    if head_type == "trident_head":
        plan.add("crossbar", draw_crossbar, description="Crossbar recording the prong anchors")
        plan.add("prongs", draw_prongs, "crossbar")
        head_step = "prongs"
    else:
        builders = {"poleaxe_head": draw_poleaxe, "glaive_blade": draw_glaive}
        plan.add("head", builders.get(head_type, draw_spear), description=f"{head_type} above the mount")
        head_step = "head"
    plan.add("shaft", draw_shaft, head_step)
    if p["socket"]:
        plan.add("socket", draw_socket, "shaft")
    if p["butt_cap"]:
        plan.add("butt_cap", draw_butt_cap, "shaft")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    head_type = p["head_type"]
    name = f"{ctx.palette(p['shaft_material']).name} {title_case(head_type)}"
    if head_type == "poleaxe_head":
        name += f" ({title_case(p['axe_edge'])}, {title_case(p['rear'])})"
        if p["secondary"]:
            name += f" with {ctx.palette(p['secondary']).name} parts"
    elif head_type == "trident_head":
        name += f" ({title_case(p['prong_style'])})"
    elif head_type == "glaive_blade":
        name += f" ({title_case(p['glaive_curve'])}, {title_case(p['glaive_tip'])})"
    if p["socket"]:
        name += " (Reinforced Socket)"
    if p["butt_cap"]:
        name += f" with {ctx.palette(p['butt_cap']).name} Butt Cap"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    head_type = p["head_type"]
    head_palette = ctx.palette(p["head_material"])
    return {
        "visualTheme": f"{head_palette.name} {title_case(head_type)}",
        "subType": p["sub_type"],
        "shaft": {
            "material": p["shaft_material"].lower(),
            "style": p["shaft_detail"],
            "wrapMaterial": p["wrap_material"].lower() if p["wrap_material"] else None,
            "length": p["shaft_length"],
            "thickness": p["thickness"],
            "hasButtCap": p["butt_cap"] is not None,
            "buttCapMaterial": p["butt_cap"].lower() if p["butt_cap"] else None,
            "colors": palette_colors(ctx.palette(p["shaft_material"])),
        },
        "head": {
            "material": p["head_material"].lower(),
            "headType": head_type,
            "logicalSize": p["size"],
            "secondaryMaterial": p["secondary"].lower() if p["secondary"] else None,
            "axeBladeShape": p.get("axe_edge"),
            "rearComponentType": p.get("rear"),
            "prongStyle": p.get("prong_style"),
            "glaiveCurveStyle": p.get("glaive_curve"),
            "glaiveTipStyle": p.get("glaive_tip"),
            "glaiveBackStyle": p.get("glaive_back"),
            "hasReinforcedSocket": p["socket"] is not None,
            "socketMaterial": p["socket"].lower() if p["socket"] else None,
            "colors": palette_colors(head_palette),
        },
    }
