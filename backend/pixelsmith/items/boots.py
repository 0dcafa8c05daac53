"""Boots generator: a mirrored pair of side-on boots.

Each boot is a leg shaft over a foot; the toe points away from the centre
of the pair, so the left boot faces left and the right boot faces right.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import pattern_rule
from pixelsmith.engine.shapes import Curve, Rect, TaperedBody, Union, WidthProfile
from pixelsmith.items.parts import palette_colors, stroke
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

BOOT_TYPES = ["ankle_boot", "calf_high", "knee_high"]
TOE_SHAPES = ["rounded", "square", "pointed"]
HEEL_STYLES = ["none", "low_block", "medium_block"]
LEG_STYLES = ["straight", "subtle_curve"]
CUFF_STYLES = ["none", "simple_fold", "fur_trim", "buckled_strap_cuff"]
MAIN_MATERIALS = ["LEATHER", "DARK_LEATHER", "CLOTH", "STEEL", "IRON", "ENCHANTED", "BONE"]
SOLE_MATERIALS = ["LEATHER", "WOOD", "IRON", "BLACK_PAINT", "DARK_STEEL", "STONE"]
CUFF_MATERIALS = ["LEATHER", "FUR_WHITE", "FUR_BROWN", "CLOTH", "ENCHANTED_SILK", "GOLD", "SILVER"]
BUCKLE_MATERIALS = ["IRON", "STEEL", "BRONZE", "SILVER", "GOLD"]
LACING_MATERIALS = ["LEATHER", "SILK_STRING", "ROPE_BROWN"]
CAP_MATERIALS = ["STEEL", "IRON", "DARK_LEATHER", "BRONZE"]

BOOT_AREA_WIDTH = 26
PAIR_SPACING = 4
BOOT_AREA_HEIGHT = 56
SHAFT_SHIFT = 0.20
LACE_STEP = 3
BUCKLE_WIDTH = 3
BUCKLE_HEIGHT = 2


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    boot_type = s.choose_known(opts.sub_type, BOOT_TYPES, label="boot type")
    p: dict[str, Any] = {"boot_type": boot_type, "sub_type": opts.sub_type or boot_type}
    p["toe_shape"] = s.choose(TOE_SHAPES)
    p["heel_style"] = s.choose(HEEL_STYLES)
    p["leg_style"] = s.choose(LEG_STYLES)
    p["main_material"] = main = s.material(opts.material, MAIN_MATERIALS, label="boot material")
    p["sole_material"] = s.choose(SOLE_MATERIALS)

    cuff = s.choose(CUFF_STYLES) if s.chance(0.6) else "none"
    if boot_type == "ankle_boot" and cuff == "buckled_strap_cuff":
        cuff = "simple_fold"
    p["cuff_style"] = cuff
    p["cuff_material"] = s.choose(CUFF_MATERIALS, exclude=[main]) if cuff != "none" else None

    has_buckles = s.chance(0.55) and cuff != "buckled_strap_cuff"
    p["buckles"] = s.int_in(1, 3 if boot_type == "knee_high" else 2) if has_buckles else 0
    p["buckle_material"] = s.choose(BUCKLE_MATERIALS) if has_buckles else None
    has_lacing = s.chance(0.4) and boot_type != "knee_high"
    p["lacing_material"] = s.choose(LACING_MATERIALS) if has_lacing else None
    p["toe_cap"] = s.choose(CAP_MATERIALS) if s.chance(0.3) else None
    p["heel_counter"] = s.choose(CAP_MATERIALS) if s.chance(0.3) else None

    foot_length = s.int_in(BOOT_AREA_WIDTH * 0.80, BOOT_AREA_WIDTH - 4)
    heel_height = {"low_block": s.int_in(2, 3), "medium_block": s.int_in(3, 4)}.get(p["heel_style"], 0)
    foot_height = s.int_in(6, 9) + heel_height // 2
    leg_width = math.floor(foot_length * s.float_in(0.35, 0.45))
    leg_width = max(5, min(leg_width, BOOT_AREA_WIDTH - 10))
    heel = max(2, math.floor(foot_length * s.float_in(0.15, 0.25)))
    toe = max(math.floor(foot_length * 0.50), foot_length - leg_width - heel)
    overflow = leg_width + heel + toe - foot_length
    if overflow > 0:
        floor_toe = math.floor(foot_length * 0.45)
        if toe - overflow >= floor_toe:
            toe -= overflow
        else:
            heel = max(2, heel - (overflow - (toe - floor_toe)))
            toe = floor_toe

    tallest = BOOT_AREA_HEIGHT - foot_height - 1
    if boot_type == "ankle_boot":
        leg_height = s.int_in(foot_height * 0.9, foot_height + 6)
    elif boot_type == "calf_high":
        leg_height = s.int_in(math.floor(tallest * 0.40), math.floor(tallest * 0.65))
    else:
        leg_height = s.int_in(math.floor(tallest * 0.60), tallest - 1)
    p.update({
        "foot_length": foot_length,
        "foot_height": foot_height,
        "heel_height": heel_height,
        "leg_width": leg_width,
        "leg_top_width": max(4, math.floor(leg_width * s.float_in(0.90, 1.10))),
        "leg_height": max(5, min(leg_height, tallest)),
        "heel_visible": heel,
        "toe_visible": toe,
    })
    p["sole_height"] = max(1, foot_height // 7) + 1
    p["top"] = max(ctx.grid.padding, (ctx.grid.height - p["leg_height"] - foot_height) // 2)
    return p


def toe_heights(shape: str, count: int, rows: int) -> list[int]:
    """Column heights of the toe box, from the instep outward."""
    heights = []
    for i in range(count):
        t = 1.0 if count <= 1 else i / (count - 1)
        if shape == "rounded":
            h = max(1, math.floor(rows * (1 - t**1.5 * 0.60)))
        elif shape == "pointed":
            h = max(1, math.floor(rows * (1 - t**1.2 * 0.80)))
        else:
            h = math.floor(rows * 0.95)
        heights.append(h)
    return heights


def heel_heights(count: int, rows: int) -> list[int]:
    heights = []
    for i in range(count):
        h = rows
        if i > count * 0.2:
            h = max(1, rows - math.floor(rows * 0.50 * ((i - count * 0.2) / (count * 0.8 or 1))))
        heights.append(h)
    return heights


def column_strips(heights: list[int], side: int, rows: int) -> Union:
    """Bottom-aligned one-column strips stepping outward along ``side`` from column 0."""
    return Union(tuple((Rect(1, h), i * side, rows - h) for i, h in enumerate(heights) if h > 0))


def leg_body(p: dict[str, Any], toe_side: int) -> TaperedBody:
    curve = None
    if p["leg_style"] == "subtle_curve" and p["leg_height"] > 8:
        curve = Curve(1.0, -toe_side, 0.8)
    profile = WidthProfile("linear", start=p["leg_top_width"], end=p["leg_width"], minimum=2)
    return TaperedBody(p["leg_height"], profile, curve=curve)


@item_generator(
    item_type="boots",
    sub_types=BOOT_TYPES,
    description="Pairs of ankle, calf-high and knee-high boots",
)
def plan_boots(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    grid = ctx.grid
    main = ctx.palette(p["main_material"])
    padding_x = (grid.width - BOOT_AREA_WIDTH * 2 - PAIR_SPACING) // 2
    shift = math.floor(BOOT_AREA_WIDTH * SHAFT_SHIFT)
    top = p["top"]
    leg_h = p["leg_height"]
    ankle = top + leg_h
    upper = p["foot_height"] - p["sole_height"]
    w0 = p["leg_width"]

    def boot_step(label: str, area_x: int, toe_side: int):
        centre = area_x + BOOT_AREA_WIDTH // 2 - shift * toe_side
        instep_left = centre - w0 // 2
        instep_right = instep_left + w0 - 1
        toe_x = instep_left - 1 if toe_side < 0 else instep_right + 1
        heel_x = instep_right + 1 if toe_side < 0 else instep_left - 1
        heel_start = math.floor(upper * 0.05)
        leg = leg_body(p, toe_side)

        def draw(ctx: GenerationContext) -> None:
            toe_cols = column_strips(toe_heights(p["toe_shape"], p["toe_visible"], upper), toe_side, upper)
            heel_rows = upper - heel_start
            heel_cols = column_strips(heel_heights(p["heel_visible"], heel_rows), -toe_side, heel_rows)
            shell = Union((
                (leg, centre - instep_left, 0),
                (Rect(w0, upper), 0, leg_h),
                (toe_cols, toe_x - instep_left, leg_h),
                (heel_cols, heel_x - instep_left, leg_h + heel_start),
            ))
            ctx.draw(f"{label}_boot", shell.at(instep_left, top), main, decorations=[p["toe_shape"]])
            if p["toe_cap"]:
                ctx.draw(f"{label}_toe_cap", toe_cols.at(toe_x, ankle), ctx.palette(p["toe_cap"]))
            if p["heel_counter"]:
                ctx.draw(f"{label}_heel_counter", heel_cols.at(heel_x, ankle + heel_start), ctx.palette(p["heel_counter"]))
            _draw_sole(ctx, label, toe_side, instep_left, instep_right)
            if p["cuff_style"] != "none":
                _draw_cuff(ctx, label, centre)
            if p["lacing_material"]:
                _draw_lacing(ctx, label, leg, centre)
            if p["buckles"]:
                _draw_buckles(ctx, label, leg, centre, toe_side)
            ctx.anchors.record(f"{label}_ankle", centre, ankle, width=w0)

        return draw

    def _draw_sole(ctx: GenerationContext, label: str, toe_side: int, left: int, right: int) -> None:
        sole = ctx.palette(p["sole_material"])
        toe_tip = left - p["toe_visible"] if toe_side < 0 else right + p["toe_visible"]
        heel_tip = right + p["heel_visible"] if toe_side < 0 else left - p["heel_visible"]
        x0, x1 = min(toe_tip, heel_tip, left), max(toe_tip, heel_tip, right)
        sole_y = ankle + upper
        sole_h = p["sole_height"]
        ctx.draw(f"{label}_sole", Rect(x1 - x0 + 1, sole_h).at(x0, sole_y), sole)
        heel_h = p["heel_height"]
        if heel_h:
            width = max(2, math.floor(w0 * 0.65))
            hx = heel_tip - width + 1 if toe_side < 0 else heel_tip
            hx = max(x0, min(hx, x1 - width + 1))
            ctx.draw(f"{label}_heel", Rect(width, heel_h).at(hx, sole_y + sole_h - heel_h), sole)

    def _draw_cuff(ctx: GenerationContext, label: str, centre: int) -> None:
        style = p["cuff_style"]
        palette = ctx.palette(p["cuff_material"])
        fur = style == "fur_trim"
        height = max(2, math.floor(leg_h * (0.20 if fur else 0.15))) + (1 if fur else 0)
        extra = {"simple_fold": 0, "fur_trim": 2}.get(style, 1)
        width = p["leg_top_width"] + extra
        x = centre - p["leg_top_width"] // 2 - extra // 2
        overlays = [pattern_rule(lambda x, y: (x * 3 + y * 5) % 4 == 0, palette.shadow)] if fur else []
        ctx.draw(f"{label}_cuff", Rect(width, height).at(x, top - (1 if fur else 0)), palette, overlays=overlays, decorations=[style])

    def _draw_lacing(ctx: GenerationContext, label: str, leg: TaperedBody, centre: int) -> None:
        color = ctx.palette(p["lacing_material"]).base
        start = math.floor(leg_h * (0.25 if p["cuff_style"] != "none" else 0.1))
        end = leg_h - math.floor(upper * 0.1)
        crossings = []
        for row in range(start, end - LACE_STEP, LACE_STEP):
            left, right = leg.row_span(row)
            inset = max(1, math.floor((right - left) * 0.20))
            xl, xr = left + inset, right - 1 - inset
            if xl < xr - 1:
                crossings.append((stroke(xr - xl, LACE_STEP), xl, row))
                crossings.append((stroke(xl - xr, LACE_STEP), xr, row))
        if crossings:
            ctx.fill(Union(tuple(crossings)).at(centre, top), color)

    def _draw_buckles(ctx: GenerationContext, label: str, leg: TaperedBody, centre: int, toe_side: int) -> None:
        palette = ctx.palette(p["buckle_material"])
        n = p["buckles"]
        low = (math.floor(leg_h * 0.22) + 3 if p["cuff_style"] != "none" else 3) + BUCKLE_HEIGHT
        high = leg_h - BUCKLE_HEIGHT - 4
        for i in range(n):
            ratio = 0.45 if n == 1 else 0.20 + i * 0.55 / (n - 1)
            row = min(max(low, math.floor(leg_h * ratio)), high)
            if not 0 <= row < leg_h:
                continue
            left, right = leg.row_span(row)
            y = top + row
            ctx.fill(Rect(right - left, 1).at(centre + left, y), palette.shadow)
            bx = centre + (right - 1 if toe_side < 0 else left - BUCKLE_WIDTH + 1)
            ctx.draw(f"{label}_buckle_{i}", Rect(BUCKLE_WIDTH, BUCKLE_HEIGHT).at(bx, y - BUCKLE_HEIGHT // 2), palette)

    plan = ComponentPlan("boots", [], _name, _describe)
    plan.add("left", boot_step("left", padding_x, -1), description="Left boot, toe facing left")
    plan.add("right", boot_step("right", padding_x + BOOT_AREA_WIDTH + PAIR_SPACING, 1), description="Mirrored right boot")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['main_material']).name} {title_case(p['toe_shape'])} {title_case(p['boot_type'])}"
    if p["heel_style"] != "none":
        name += f" ({title_case(p['heel_style'])} Heel)"
    if p["cuff_material"]:
        cuff = p["cuff_material"]
        name += f" with {title_case(cuff.replace('FUR_', ''))} {'Fur ' if 'FUR' in cuff else ''}Cuff"
    if p["buckles"]:
        name += f" with {p['buckles']} Buckle{'s' if p['buckles'] > 1 else ''}"
    if p["lacing_material"]:
        name += " (Laced)"
    if p["toe_cap"]:
        name += f" with {ctx.palette(p['toe_cap']).name} Toe Cap"
    if p["heel_counter"]:
        name += f" and {ctx.palette(p['heel_counter']).name} Heel Counter"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params

    def key(name: str) -> str | None:
        return p[name].lower() if p[name] else None

    def colors(name: str) -> dict[str, Any] | None:
        return palette_colors(ctx.palette(p[name])) if p[name] else None

    return {
        "style": p["boot_type"],
        "subType": p["sub_type"],
        "toeShape": p["toe_shape"],
        "heelStyle": p["heel_style"],
        "legStyle": p["leg_style"],
        "mainMaterial": p["main_material"].lower(),
        "soleMaterial": p["sole_material"].lower(),
        "hasCuff": p["cuff_style"] != "none",
        "cuffStyle": p["cuff_style"],
        "cuffMaterial": key("cuff_material"),
        "hasBuckles": p["buckles"] > 0,
        "numBuckles": p["buckles"],
        "buckleMaterial": key("buckle_material"),
        "hasLacing": p["lacing_material"] is not None,
        "lacingMaterial": key("lacing_material"),
        "hasToeCap": p["toe_cap"] is not None,
        "toeCapMaterial": key("toe_cap"),
        "hasHeelCounter": p["heel_counter"] is not None,
        "heelCounterMaterial": key("heel_counter"),
        "legHeight": p["leg_height"],
        "footLength": p["foot_length"],
        "colors": {
            "main": colors("main_material"),
            "sole": colors("sole_material"),
            "cuff": colors("cuff_material"),
            "buckle": colors("buckle_material"),
            "lacing": colors("lacing_material"),
            "toeCap": colors("toe_cap"),
            "heelCounter": colors("heel_counter"),
        },
    }
