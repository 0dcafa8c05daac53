"""Gloves generator: a mirrored pair seen from the back of the hand, fingers down."""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import row_rule
from pixelsmith.engine.shapes import Curve, Rect, TaperedBody, Union, WidthProfile
from pixelsmith.items.parts import draw_rivets, palette_colors
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

GLOVE_TYPES = ["cloth_simple", "leather_basic", "plate_gauntlet", "fingerless", "armored_leather"]
GLOVE_LENGTHS = ["wrist", "forearm", "elbow"]
CLOTH_MATERIALS = [
    "WHITE_PAINT", "BLACK_PAINT", "RED_PAINT", "BLUE_PAINT", "GREEN_PAINT", "PAPER", "YELLOW_PAINT", "PURPLE_PAINT",
]
PLATE_MATERIALS = ["IRON", "STEEL", "DARK_STEEL", "BRONZE", "OBSIDIAN", "SILVER", "GOLD", "ENCHANTED"]
KNUCKLE_STYLES = ["none", "reinforced", "spiked"]
ARMORED_TYPES = ("plate_gauntlet", "armored_leather")

GLOVE_AREA_WIDTH = 26
PAIR_SPACING = 4
FINGERS = 4
FINGER_GAP = 1

# glove length: (cuff lo, hi, hand lo, hi, finger lo, hi, fingerless stub)
GLOVE_SIZES = {
    "wrist": (5, 9, 9, 13, 10, 14, 3),
    "forearm": (12, 18, 10, 14, 11, 15, 4),
    "elbow": (18, 36, 11, 15, 12, 16, 4),
}


def _main_candidates(glove_type: str) -> list[str]:
    if glove_type == "cloth_simple":
        return CLOTH_MATERIALS
    if glove_type == "plate_gauntlet":
        return PLATE_MATERIALS
    return ["LEATHER"]


def fit_heights(cuff: int, hand: int, fingers: int, limit: int, has_fingers: bool) -> tuple[int, int, int]:
    """Shrink cuff, hand and fingers (half, three tenths, a fifth of the excess) to fit ``limit``."""
    excess = cuff + hand + fingers - limit
    if excess <= 0:
        return cuff, hand, fingers
    cuff = max(3, cuff - math.floor(excess * 0.5))
    hand = max(7, hand - math.floor(excess * 0.3))
    fingers = max(7 if has_fingers else 2, fingers - math.ceil(excess * 0.2))
    return cuff, hand, fingers


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    glove_type = s.choose_known(opts.sub_type, GLOVE_TYPES, label="glove type")
    p: dict[str, Any] = {"glove_type": glove_type, "sub_type": opts.sub_type or glove_type}
    p["main_material"] = main = s.material(opts.material, _main_candidates(glove_type), label="glove material")

    knuckles = "none"
    p["secondary_material"] = None
    if glove_type in ARMORED_TYPES or s.chance(0.3):
        knuckles = s.choose(KNUCKLE_STYLES)
        if knuckles != "none":
            pool = ["IRON", "STEEL", "BRONZE", "GOLD", "SILVER", "BONE" if main == "LEATHER" else "DARK_STEEL", "OBSIDIAN"]
            p["secondary_material"] = s.choose(pool, exclude=[main])
        if knuckles == "spiked" and glove_type != "plate_gauntlet":
            knuckles = "reinforced"
    p["knuckle_style"] = knuckles

    styles = ["none", "cuff_trim", "hand_studs"]
    if glove_type in ARMORED_TYPES:
        styles.append("finger_guards")
    p["decoration_style"] = decoration = s.choose(styles)
    p["decoration_material"] = None
    if decoration != "none":
        pool = ["GOLD", "SILVER", "BRONZE", "STEEL", "IRON" if main == "LEATHER" else "LEATHER", "ENCHANTED"]
        p["decoration_material"] = s.choose(pool, exclude=[main, p["secondary_material"]])
    p["trim_height"] = s.int_in(1, 2)
    p["studs"] = s.int_in(2, 4)

    p["glove_length"] = length = s.choose(GLOVE_LENGTHS)
    p["has_fingers"] = has_fingers = glove_type != "fingerless"
    c_lo, c_hi, h_lo, h_hi, f_lo, f_hi, stub = GLOVE_SIZES[length]
    cuff, hand = s.int_in(c_lo, c_hi), s.int_in(h_lo, h_hi)
    fingers = s.int_in(f_lo, f_hi) if has_fingers else stub
    p["cuff_height"], p["hand_height"], p["finger_height"] = fit_heights(
        cuff, hand, fingers, ctx.grid.usable_height, has_fingers
    )
    p["finger_ratios"] = [s.float_in(0.93, 1.0) if f in (1, 2) else s.float_in(0.78, 0.91) for f in range(FINGERS)]

    p["cuff_base"] = base = math.floor(GLOVE_AREA_WIDTH * s.float_in(0.55, 0.75))
    flare = s.float_in(1.2, 1.7) if glove_type == "plate_gauntlet" else s.float_in(0.9, 1.2)
    p["cuff_top"] = min(math.floor(base * flare), GLOVE_AREA_WIDTH - 2)
    p["palm_base"] = palm = math.floor(base * s.float_in(1.0, 1.15))
    p["palm_top"] = math.floor(palm * s.float_in(0.80, 0.90))
    total = p["cuff_height"] + p["hand_height"] + p["finger_height"]
    p["top"] = ctx.grid.padding + max(0, (ctx.grid.usable_height - total) // 2)
    return p


def finger_body(height: int, width: int) -> TaperedBody:
    """Finger hanging from the knuckle row, rounding off over its last rows."""
    return TaperedBody(height, WidthProfile("shoulder", start=width, split=0.55, amplitude=1.0, rounding="round"))


def thumb_body(height: int, width: int, side: int) -> TaperedBody:
    profile = WidthProfile("shoulder", start=width, split=0.45, amplitude=1.0)
    return TaperedBody(height, profile, curve=Curve(1.0, side, kind="lean"))


@item_generator(
    item_type="gloves",
    sub_types=GLOVE_TYPES,
    description="Pairs of cloth, leather and fingerless gloves and plate gauntlets",
)
def plan_gloves(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    grid = ctx.grid
    main = ctx.palette(p["main_material"])
    padding_x = (grid.width - GLOVE_AREA_WIDTH * 2 - PAIR_SPACING) // 2
    top = p["top"]
    cuff_h, hand_h, finger_h = p["cuff_height"], p["hand_height"], p["finger_height"]
    knuckle_row = top + cuff_h
    finger_row = knuckle_row + hand_h
    palm_top = p["palm_top"]
    fw = max(2, math.floor(palm_top * 0.95 / FINGERS) - 1)
    block = fw * FINGERS + FINGER_GAP * (FINGERS - 1)
    palm = TaperedBody(hand_h, WidthProfile("linear", start=p["palm_base"], end=palm_top, minimum=2))

    def glove_step(label: str, area_x: int, thumb_side: int):
        gx = area_x + GLOVE_AREA_WIDTH // 2
        first_finger = area_x + (GLOVE_AREA_WIDTH - block) // 2

        def finger_x(f: int) -> int:
            return first_finger + f * (fw + FINGER_GAP)

        def draw(ctx: GenerationContext) -> None:
            cuff = TaperedBody(cuff_h, WidthProfile("linear", start=p["cuff_top"], end=p["cuff_base"], minimum=2))
            ctx.draw(f"{label}_cuff", cuff.at(gx, top), main)

            thumb_w = max(2, fw + 1)
            thumb_h = math.floor((hand_h + finger_h) * 0.65)
            attach = math.floor(hand_h * 0.20)
            left, right = palm.row_span(attach)
            if thumb_side > 0:
                thumb_x = right - 1 - thumb_w + round(thumb_w * 0.6) + thumb_w // 2
            else:
                thumb_x = left - round(thumb_w * 0.4) + thumb_w // 2
            thumb = thumb_body(thumb_h, thumb_w, thumb_side)
            ctx.draw(f"{label}_thumb", thumb.at(gx + thumb_x, knuckle_row + attach), main)

            ctx.draw(f"{label}_hand", palm.at(gx, knuckle_row), main)

            fingers = []
            for f in range(FINGERS):
                if p["has_fingers"]:
                    height = math.floor(finger_h * p["finger_ratios"][f])
                    spec = finger_body(height, fw)
                    fingers.append((spec, finger_x(f) + fw // 2 - gx, 0))
                else:
                    stub = max(1, math.floor(finger_h * (0.35 + f * 0.08)))
                    fingers.append((Rect(fw, stub), finger_x(f) - gx, 0))
            overlays = []
            if p["glove_type"] == "plate_gauntlet":
                step = max(2, math.floor(fw * 1.2))
                overlays.append(row_rule({finger_row + r: main.shadow for r in range(step, finger_h - 1, step)}))
            ctx.draw(f"{label}_fingers", Union(tuple(fingers)).at(gx, finger_row), main, overlays=overlays)

            if p["knuckle_style"] != "none":
                _draw_knuckles(ctx, label, gx, finger_x)
            if p["decoration_style"] != "none":
                _draw_decoration(ctx, label, gx, finger_x)
            ctx.anchors.record(f"{label}_knuckles", gx, finger_row, fingers=FINGERS, finger_width=fw)

        return draw

    def _draw_knuckles(ctx: GenerationContext, label: str, gx: int, finger_x) -> None:
        palette = ctx.palette(p["secondary_material"])
        row = math.floor(hand_h * 0.25)
        y = knuckle_row + row
        if p["knuckle_style"] == "reinforced":
            left, right = palm.row_span(row)
            width = right - left - 2
            if width > 0:
                plate = Rect(width, max(2, math.floor(hand_h * 0.4)))
                ctx.draw(f"{label}_knuckle_plate", plate.at(gx + left + 1, y), palette)
            return
        size = max(2, fw)
        spike = TaperedBody(size, WidthProfile("linear", start=size * 0.4, end=size))
        spikes = Union(tuple((spike, finger_x(f) + fw // 2 - gx, 0) for f in range(FINGERS)))
        ctx.draw(f"{label}_knuckle_spikes", spikes.at(gx, y - size), palette, decorations=["spiked"])

    def _draw_decoration(ctx: GenerationContext, label: str, gx: int, finger_x) -> None:
        palette = ctx.palette(p["decoration_material"])
        style = p["decoration_style"]
        if style == "cuff_trim" and cuff_h > 2:
            width = p["cuff_top"]
            ctx.draw(f"{label}_trim", Rect(width, p["trim_height"]).at(gx - width // 2, top), palette)
        elif style == "hand_studs":
            points = []
            for i in range(p["studs"]):
                row = math.floor(hand_h * (0.3 + i * 0.15))
                if row >= hand_h:
                    continue
                left, right = palm.row_span(row)
                points.append((gx + left + math.floor((right - left) * (0.25 + i * 0.2)), knuckle_row + row))
            draw_rivets(ctx, points, palette)
        elif style == "finger_guards" and p["glove_type"] == "plate_gauntlet":
            height = max(1, math.floor(fw * 0.8))
            guards = Union(tuple((Rect(fw, height), finger_x(f) - gx, 0) for f in range(FINGERS)))
            ctx.draw(f"{label}_finger_guards", guards.at(gx, finger_row - 1), palette)

    plan = ComponentPlan("gloves", [], _name, _describe)
    plan.add("left", glove_step("left", padding_x, 1), description="Left glove, thumb toward the centre")
    plan.add("right", glove_step("right", padding_x + GLOVE_AREA_WIDTH + PAIR_SPACING, -1), description="Mirrored right glove")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['main_material']).name} {title_case(p['glove_type'])}"
    if p["glove_length"] != "wrist":
        name += f" ({title_case(p['glove_length'])} Length)"
    if p["knuckle_style"] != "none" and p["secondary_material"]:
        name += f" with {ctx.palette(p['secondary_material']).name} {title_case(p['knuckle_style'])} Knuckles"
    if p["decoration_material"]:
        name += f" ({title_case(p['decoration_style'])} Decoration)"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    secondary, decoration = p["secondary_material"], p["decoration_material"]
    return {
        "gloveType": p["glove_type"],
        "subType": p["sub_type"],
        "mainMaterial": p["main_material"].lower(),
        "gloveLength": p["glove_length"],
        "hasFingers": p["has_fingers"],
        "knuckleStyle": p["knuckle_style"],
        "secondaryMaterial": secondary.lower() if secondary else None,
        "decorationStyle": p["decoration_style"],
        "decorationMaterial": decoration.lower() if decoration else None,
        "cuffHeight": p["cuff_height"],
        "handHeight": p["hand_height"],
        "fingerBaseHeight": p["finger_height"],
        "fingerLengthRatios": [round(r, 3) for r in p["finger_ratios"]],
        "colors": {
            "main": palette_colors(ctx.palette(p["main_material"])),
            "secondary": palette_colors(ctx.palette(secondary)) if secondary else None,
            "decoration": palette_colors(ctx.palette(decoration)) if decoration else None,
        },
    }
