"""Bow generator: longbows, shortbows and recurves with an optional nocked arrow.

The limbs are one tall tapered body bowed to the left of the string. It
records the tip and grip anchors; the string, grip, tips and nocking point
are placed from those.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shapes import Curve, Patterned, Rect, Sheared, ShapeSpec, TaperedBody, WidthProfile
from pixelsmith.items.parts import palette_colors
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

BOW_TYPES = ["longbow", "shortbow", "recurve"]
LIMB_MATERIALS = ["WOOD", "BONE", "DARK_STEEL"]
GRIP_MATERIALS = ["LEATHER", "CLOTH"]
STRING_MATERIALS = ["SILK_STRING", "GUT_STRING"]
TIP_STYLES = ["simple", "nocked"]
WRAPPED_GRIPS = ("LEATHER", "CLOTH")

ARROW_SHAFTS = ["WOOD", "BONE"]
ARROWHEAD_MATERIALS = ["IRON", "STEEL", "OBSIDIAN", "BRONZE"]
ARROWHEAD_SHAPES = ["triangle", "leaf"]
FLETCHING_MATERIALS = ["WHITE_PAINT", "RED_PAINT", "BLUE_PAINT", "GREEN_PAINT", "LEATHER"]
FLETCHING_STYLES = ["classic_angled", "straight"]
ARROW_CHANCE = 0.8

# bow type: (length ratio lo, hi, max curve lo, hi, limb thickness lo, hi)
BOW_SIZES: dict[str, tuple[float, float | None, int, int, int, int]] = {
    "longbow": (0.70, None, 5, 8, 2, 3),
    "shortbow": (0.45, 0.65, 7, 11, 2, 4),
    "recurve": (0.55, 0.75, 8, 13, 2, 3),
}
# Gap between the string and the arrow shaft
ARROW_GAP = 10


def limb_body(bow_type: str, length: int, thickness: int, max_curve: int) -> TaperedBody:
    """Both limbs as one body from the top tip (row 0) to the bottom tip.

    The centre line bows left by ``max_curve`` at the grip; recurves flick
    their last rows back toward the string.
    """
    kind = "recurve" if bow_type == "recurve" else "arc"
    profile = WidthProfile("limb", start=thickness, amplitude=0.85, rounding="ceil")
    return TaperedBody(length, profile, curve=Curve(max_curve, -1, kind=kind))


def arrowhead_body(shape: str, length: int, width: int) -> TaperedBody:
    full = max(1, width * 2 - 1)
    if shape == "leaf":
        profile = WidthProfile("bulge", start=1, peak=full, split=0.5, exponent=1.0, reverse=True)
    else:
        profile = WidthProfile("linear", start=1, end=full)
    return TaperedBody(length, profile)


def fletching_vane(style: str, width: int, length: int, side: int) -> ShapeSpec:
    """One vane growing from column 0; angled vanes drift outward toward the nock."""
    vane = Rect(width, length)
    if style == "classic_angled":
        return Sheared(vane, 0.3, side)
    return vane


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    height = ctx.grid.height
    bow_type = s.choose_known(opts.sub_type, BOW_TYPES, label="bow type")
    p: dict[str, Any] = {"bow_type": bow_type, "sub_type": opts.sub_type or bow_type}
    p["limb_material"] = s.material(opts.material, LIMB_MATERIALS, label="limb material")
    p["grip_material"] = grip = s.material(opts.grip_material, GRIP_MATERIALS, label="grip material")
    p["string_material"] = s.material(opts.string_material, STRING_MATERIALS, label="string material")

    lo, hi, curve_lo, curve_hi, t_lo, t_hi = BOW_SIZES[bow_type]
    top_len = height - ctx.grid.padding * 2.5 if hi is None else height * hi
    length = s.int_in(height * lo, top_len)
    p["length"] = length = min(length, height - ctx.grid.padding * 2)
    p["max_curve"] = s.int_in(curve_lo, curve_hi)
    p["thickness"] = t = s.int_in(t_lo, t_hi)
    p["tip_style"] = s.choose(TIP_STYLES)

    p["grip_length"] = max(2, math.floor(length * s.float_in(0.15, 0.25)))
    p["grip_thickness"] = t + s.int_in(1, 2)
    p["grip_wrapped"] = any(key in grip for key in WRAPPED_GRIPS)

    p["arrow"] = s.chance(ARROW_CHANCE)
    if p["arrow"]:
        p["arrow_shaft"] = s.choose(ARROW_SHAFTS)
        p["arrowhead_material"] = s.choose(ARROWHEAD_MATERIALS)
        p["arrowhead_shape"] = s.choose(ARROWHEAD_SHAPES)
        p["fletching_material"] = s.choose(FLETCHING_MATERIALS)
        p["fletching_style"] = s.choose(FLETCHING_STYLES)
        p["arrowhead_length"] = s.int_in(3, 5)
        p["arrowhead_width"] = s.int_in(2, 3)
        p["fletching_length"] = s.int_in(5, 8)
        p["fletching_width"] = s.int_in(1, 2)
        p["arrow_length"] = math.floor(length * s.float_in(0.65, 0.75))
    return p


@item_generator(
    item_type="bow",
    sub_types=BOW_TYPES,
    description="Longbows, shortbows and recurves",
)
def plan_bow(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    grid = ctx.grid
    cx = grid.width // 3
    cy = grid.center_y
    length = p["length"]
    top = cy - length // 2

    limbs = limb_body(p["bow_type"], length, p["thickness"], p["max_curve"])
    limb_sil = limbs.at(cx, top)
    limb_palette = ctx.palette(p["limb_material"])
    grip_palette = ctx.palette(p["grip_material"])
    string_palette = ctx.palette(p["string_material"])

    def draw_limbs(ctx: GenerationContext) -> None:
        ctx.draw("limbs", limb_sil, limb_palette, decorations=[p["bow_type"]])
        last = length - 1
        ctx.anchors.record("top_tip", cx + limbs.row_offset(0), top, width=limbs.row_width(0))
        ctx.anchors.record("bottom_tip", cx + limbs.row_offset(last), top + last, width=limbs.row_width(last))
        mid = cy - top
        ctx.anchors.record("grip", cx + limbs.row_offset(mid), cy, width=limbs.row_width(mid))

    def draw_string(ctx: GenerationContext) -> None:
        upper, lower = ctx.anchor("top_tip"), ctx.anchor("bottom_tip")
        span = lower.y - upper.y + 1
        string = TaperedBody(span, WidthProfile("constant", start=1), curve=Curve(lower.x - upper.x, kind="lean"))
        # The limbs stay on top where the string meets the tips
        ctx.fill(string.at(upper.x, upper.y), string_palette.base, clip=lambda x, y: not limb_sil.contains(x, y))
        ctx.anchors.record("string_centre", upper.x + string.row_offset(cy - upper.y), cy)

    def draw_grip(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("grip")
        gl, gt = p["grip_length"], p["grip_thickness"]
        left, grip_top = anchor.x - gt // 2, anchor.y - gl // 2
        wrapped = p["grip_wrapped"]
        ctx.draw("grip", Rect(gt, gl).at(left, grip_top), grip_palette, decorations=["wrapped"] if wrapped else [])
        if wrapped:
            ctx.fill(Patterned(Rect(gt, gl), 2, 1, 0, 1).at(left, grip_top), grip_palette.shadow)

    def draw_nocking_point(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("string_centre")
        ctx.fill(Rect(3, 3).at(anchor.x - 1, anchor.y - 1), string_palette.shadow)

    def draw_tips(ctx: GenerationContext) -> None:
        nocked = p["tip_style"] == "nocked"
        rows = 3 if nocked else 2
        for name in ("top_tip", "bottom_tip"):
            anchor = ctx.anchor(name)
            width = anchor["width"] + (2 if nocked else 1)
            y = anchor.y if name == "top_tip" else anchor.y - rows + 1
            tip = Rect(width, rows).at(anchor.x - width // 2, y)
            if nocked:
                ctx.draw(name, tip, limb_palette, outlined=True, decorations=["nocked"])
            else:
                ctx.fill(tip, limb_palette.shadow)

    def draw_arrow(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("string_centre")
        shaft_len = p["arrow_length"]
        fw = p["fletching_width"]
        ax = min(anchor.x + p["max_curve"] + ARROW_GAP, grid.width - grid.padding - fw - 2)
        ay = anchor.y - shaft_len // 2

        head = arrowhead_body(p["arrowhead_shape"], p["arrowhead_length"], p["arrowhead_width"])
        ctx.draw("arrowhead", head.at(ax, ay - head.length), ctx.palette(p["arrowhead_material"]))

        fl = min(p["fletching_length"], shaft_len)
        fy = ay + shaft_len - fl
        feathers = ctx.palette(p["fletching_material"])
        style = p["fletching_style"]
        ctx.draw("fletching_left", fletching_vane(style, fw, fl, -1).at(ax - fw, fy), feathers, decorations=[style])
        ctx.draw("fletching_right", fletching_vane(style, fw, fl, 1).at(ax + 1, fy), feathers, decorations=[style])

        shaft_palette = ctx.palette(p["arrow_shaft"])
        ctx.fill(Rect(1, shaft_len).at(ax, ay), shaft_palette.base)
        ctx.fill(Patterned(Rect(1, shaft_len), 5, 1, 0, 1).at(ax, ay), shaft_palette.highlight)

    plan = ComponentPlan("bow", [], _name, _describe)
    plan.add("limbs", draw_limbs, description="Both limbs bowed away from the string")
    plan.add("string", draw_string, "limbs")
    plan.add("grip", draw_grip, "limbs")
    plan.add("nocking_point", draw_nocking_point, "string", "grip")
    plan.add("tips", draw_tips, "limbs", "string")
    if p["arrow"]:
        plan.add("arrow", draw_arrow, "string")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    limb = ctx.palette(p["limb_material"])
    grip = ctx.palette(p["grip_material"])
    name = f"{limb.name} {title_case(p['bow_type'])}"
    if p["tip_style"] == "nocked":
        name += " (Nocked)"
    if grip.name != limb.name:
        name += f" with {grip.name} Grip"
    return name + f" & {ctx.palette(p['string_material']).name} String"


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    limb = ctx.palette(p["limb_material"])
    arrow = None
    if p["arrow"]:
        arrow = {
            "shaftMaterial": p["arrow_shaft"].lower(),
            "arrowheadMaterial": p["arrowhead_material"].lower(),
            "arrowheadShape": p["arrowhead_shape"],
            "fletchingMaterial": p["fletching_material"].lower(),
            "fletchingStyle": p["fletching_style"],
        }
    return {
        "visualTheme": f"{limb.name} {title_case(p['bow_type'])}",
        "bowType": p["bow_type"],
        "subType": p["sub_type"],
        "limbMaterial": p["limb_material"].lower(),
        "limbTipStyle": p["tip_style"],
        "gripMaterial": p["grip_material"].lower(),
        "stringMaterial": p["string_material"].lower(),
        "limbs": {
            "length": p["length"],
            "maxCurve": p["max_curve"],
            "thickness": p["thickness"],
            "colors": palette_colors(limb),
        },
        "grip": {
            "length": p["grip_length"],
            "thickness": p["grip_thickness"],
            "wrapped": p["grip_wrapped"],
        },
        "arrow": arrow,
    }
