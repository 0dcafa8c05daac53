"""Sword generator: curved or straight blade, guard, grip and pommel.

The blade is traced through a CurveAccumulator; its final offset recentres
the ferrule, guard, grip and pommel so the hilt stays attached to a curved
blade.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.curve import CurveAccumulator
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import pattern_rule, row_rule
from pixelsmith.engine.shapes import (
    Annulus,
    ArcBand,
    Curve,
    Diamond,
    Disc,
    Ellipse,
    Rect,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import GEM_MATERIALS, draw_gem, palette_colors
from pixelsmith.utils.math_helpers import round_half_up, title_case

logger = logging.getLogger(__name__)

MIN_GRIP_LENGTH = 5

BLADE_MATERIALS = ["STEEL", "IRON", "GOLD", "BRONZE", "SILVER", "OBSIDIAN", "DARK_STEEL", "ENCHANTED", "BONE"]
HILT_MATERIALS = ["WOOD", "IRON", "STEEL", "BONE", "DARK_STEEL", "BRONZE", "GOLD"]
POMMEL_MATERIALS = ["GOLD", "SILVER", "BRONZE", "BONE", "DARK_STEEL", "OBSIDIAN"]
POMMEL_GEMS = GEM_MATERIALS + ["ENCHANTED"]

ALL_GUARDS = ("straight_bar", "v_guard", "stubby", "swept_hilt", "crescent_guard", "tsuba")


@dataclass(frozen=True)
class SwordStyle:
    length: tuple[int, int]
    width: tuple[int, int]
    shapes: tuple[str, ...]
    tips: tuple[str, ...]
    fuller_chance: float
    guards: tuple[str, ...] = ALL_GUARDS
    grip_styles: tuple[str, ...] = ("cylinder", "tapered", "wrapped")
    grip_length: tuple[int, int] = (5, 15)
    curve_chance: float = 0.0
    # Curve amount as fractions of blade length
    curve_ratio: tuple[float, float] = (0.0, 0.0)
    curve_directions: tuple[int, ...] = (-1, 1)
    curve_shapes: tuple[str, ...] | None = None
    phase: float = 1.0
    heavy: bool = False


SWORD_STYLES: dict[str, SwordStyle] = {
    "standard": SwordStyle(
        length=(30, 50), width=(3, 6), shapes=("straight", "tapered"),
        tips=("pointy", "pointy", "pointy", "pointy", "flat"), fuller_chance=0.6,
        curve_chance=0.25, curve_ratio=(1 / 12, 1 / 6),
    ),
    "dagger": SwordStyle(
        length=(10, 20), width=(2, 4), shapes=("tapered",), tips=("pointy",), fuller_chance=0.4,
    ),
    "shortsword": SwordStyle(
        length=(18, 28), width=(3, 5), shapes=("straight", "tapered"), tips=("pointy",),
        fuller_chance=0.5, curve_chance=0.15, curve_ratio=(1 / 15, 1 / 8),
    ),
    "rapier": SwordStyle(
        length=(35, 50), width=(1, 2), shapes=("rapier_blade",), tips=("needle",), fuller_chance=0.0,
        guards=("swept_hilt", "crescent_guard", "v_guard"),
    ),
    "katana": SwordStyle(
        length=(35, 48), width=(3, 4), shapes=("katana_blade",), tips=("angled_katana",),
        fuller_chance=0.0, guards=("tsuba",), grip_styles=("katana_grip",), grip_length=(10, 16),
        curve_chance=1.0, curve_ratio=(1 / 18, 1 / 10), curve_directions=(1,), phase=0.7,
    ),
    "greatsword": SwordStyle(
        length=(42, 52), width=(5, 8),
        shapes=("greatsword_straight", "greatsword_tapered", "greatsword_curved"),
        tips=("pointy", "flat"), fuller_chance=0.7, guards=("straight_bar", "v_guard", "stubby"),
        grip_length=(18, 26), curve_chance=0.7, curve_ratio=(1 / 10, 1 / 5),
        curve_shapes=("greatsword_curved",), heavy=True,
    ),
}
SWORD_ALIASES = {"longsword": "standard"}

# guard style: (extra width lo, hi, hi when heavy, height lo, hi, hi when heavy)
GUARD_SIZES: dict[str, tuple[int, int, int, int, int, int]] = {
    "stubby": (2, 4, 6, 2, 4, 5),
    "swept_hilt": (3, 5, 7, 2, 4, 5),
    "v_guard": (6, 14, 18, 3, 5, 7),
    "tsuba": (6, 10, 12, 1, 3, 4),
    "crescent_guard": (7, 15, 20, 3, 5, 6),
    "straight_bar": (4, 12, 16, 2, 4, 5),
}


def blade_profile(shape: str, tip: str, width: int, length: int) -> WidthProfile:
    """Width profile for a blade; row 0 is the tip."""
    pointed = tip in ("pointy", "needle", "angled_katana")
    if shape == "katana_blade":
        tip_rows = min(length, max(3, math.floor(width * 1.8)))
        body = max(2, round_half_up(width * 0.85))
        return WidthProfile("kissaki", start=1, peak=body, end=width, tip_rows=tip_rows)
    if "tapered" in shape or shape == "rapier_blade":
        tip_width = 1 if pointed else max(1, width - 2)
        return WidthProfile("linear", start=tip_width, end=width)
    if pointed:
        tip_rows = max(1, math.floor(width / (0.8 if tip == "needle" else 1.5)))
        return WidthProfile("pointed_tip", start=1, end=width, tip_rows=tip_rows)
    return WidthProfile("constant", start=width)


def blade_body(shape: str, tip: str, width: int, length: int, curve: Curve | None = None) -> TaperedBody:
    return TaperedBody(length, blade_profile(shape, tip, width, length), curve=curve)


def guard_shape(style: str, width: int, height: int, direction: str) -> tuple[ShapeSpec, int, int]:
    """Guard spec and its origin offset from (hilt centre x, guard top y)."""
    half = width // 2
    if style == "tsuba":
        return Ellipse(width / 2, max(0.5, height / 2 + 0.5)), 0, height // 2
    if style == "v_guard":
        thickness = max(1, math.floor(height * 0.6))
        return ArcBand(half, thickness, height, style="v", inverted=direction == "down"), 0, 0
    if style == "crescent_guard":
        radius = max(2, half)
        ring = Annulus(radius, radius - max(2, height))
        if direction == "up":
            return Window(ring, -radius, 0, radius, radius), 0, 0
        return Window(ring, -radius, -radius, radius, 0), 0, height - 1
    if style == "swept_hilt":
        bar = Rect(width, max(1, height - 1))
        bow = ArcBand(max(1, half - 1), 1, height + 3, style="ellipse")
        return Union(((bar, -half, 0), (bow, 0, 0))), 0, 0
    return Rect(width, height), -half, 0


def pommel_shape(shape: str, size: int) -> tuple[ShapeSpec, int, int]:
    """Pommel spec and its origin offset from (hilt centre x, pommel top y)."""
    half = size // 2
    if shape == "round":
        return Disc(size / 2), 0, half
    if shape == "disc":
        ry = max(1.0, size / 3)
        return Ellipse(size / 2, ry), 0, math.floor(ry)
    if shape == "finial":
        return Diamond(size / 2, size), 0, size
    if shape == "katana_cap":
        return Rect(size, 2), -half, 0
    return Rect(size, size), -half, 0


def pommel_height(shape: str, size: int) -> int:
    if shape == "finial":
        return 2 * size + 1
    if shape == "katana_cap":
        return 2
    if shape == "disc":
        return 2 * math.floor(max(1.0, size / 3)) + 1
    return size + (1 if shape == "round" and size % 2 == 0 else 0)


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    sub_type = s.choose_known(opts.sub_type, list(SWORD_STYLES), SWORD_ALIASES, "sword type")
    style = SWORD_STYLES[sub_type]

    p: dict[str, Any] = {"sub_type": sub_type}
    p["material"] = s.material(opts.material, BLADE_MATERIALS, label="blade material")
    p["length"] = length = s.int_in(*style.length)
    p["width"] = width = s.int_in(*style.width)
    p["shape"] = shape = s.choose(style.shapes)
    tip = s.choose(style.tips)
    if shape.endswith("tapered") and sub_type == "standard":
        tip = "pointy"
    p["tip"] = tip

    direction, amount = 0, 0
    curvable = style.curve_shapes is None or shape in style.curve_shapes
    if curvable and s.chance(style.curve_chance):
        direction = s.choose(style.curve_directions)
        amount = s.int_in(length * style.curve_ratio[0], length * style.curve_ratio[1])
    p["curve_direction"] = direction
    p["curve_amount"] = amount
    p["fuller"] = width >= 3 and s.chance(style.fuller_chance)

    p["hilt_material"] = s.material(opts.hilt_material, HILT_MATERIALS, label="hilt material")
    if opts.grip_material:
        p["grip_material"] = s.material(opts.grip_material, [], label="grip material")
    elif sub_type == "katana":
        p["grip_material"] = "LEATHER"
    else:
        p["grip_material"] = s.choose(["LEATHER", "WOOD", p["hilt_material"], "BONE", "IVORY"])

    guard = s.choose(style.guards)
    lo, hi, hi_heavy, h_lo, h_hi, h_hi_heavy = GUARD_SIZES[guard]
    p["guard"] = guard
    p["guard_width"] = width + s.int_in(lo, hi_heavy if style.heavy else hi)
    p["guard_height"] = s.int_in(h_lo, h_hi_heavy if style.heavy else h_hi)
    p["guard_direction"] = s.choose(("up", "down")) if guard in ("v_guard", "crescent_guard") else None

    p["grip_style"] = s.choose(style.grip_styles)
    p["grip_length"] = max(MIN_GRIP_LENGTH, min(s.int_in(*style.grip_length), length - 1))
    grip_lo = width - (0 if sub_type == "katana" else 1)
    grip_hi = width + (1 if sub_type in ("katana", "greatsword") else 0)
    p["grip_width"] = gw = max(2, s.int_in(grip_lo, grip_hi))

    p["pommel_material"] = s.material(
        opts.pommel_material, [p["hilt_material"], p["material"]] + POMMEL_MATERIALS, label="pommel material"
    )
    if sub_type == "katana":
        pommel, size = "katana_cap", gw
    elif sub_type == "greatsword":
        pommel, size = s.choose(("square", "round", "disc")), s.int_in(2, 3)
    else:
        pommel = s.choose(("round", "square", "disc", "finial"))
        if pommel == "finial":
            size = max(1, math.floor(gw * 0.7))
        elif pommel == "disc":
            size = max(2, s.int_in(gw, gw + 2))
        else:
            size = s.int_in(max(2, gw), gw + 1)
    has_gem = pommel != "katana_cap" and s.chance(0.15 if sub_type == "greatsword" else 0.4)
    if has_gem:
        size = max(size, 2 if sub_type == "greatsword" else 3)
    p["pommel"] = pommel
    p["pommel_size"] = size
    p["gem"] = s.choose(POMMEL_GEMS) if has_gem else None
    return p


def _fit_height(ctx: GenerationContext, p: dict[str, Any]) -> None:
    """Shorten blade (up to 60% of the overrun) then grip until the sword fits."""
    style = SWORD_STYLES[p["sub_type"]]
    pommel_h = pommel_height(p["pommel"], p["pommel_size"])
    total = p["length"] + p["guard_height"] + p["grip_length"] + pommel_h
    overrun = total - ctx.grid.usable_height
    if overrun > 0:
        blade_cut = min(p["length"] - style.length[0], math.ceil(overrun * 0.6))
        p["length"] -= max(0, blade_cut)
        rest = overrun - max(0, blade_cut)
        p["grip_length"] = max(MIN_GRIP_LENGTH, p["grip_length"] - rest)
        logger.debug("Sword overran by %d rows, blade -%d, grip now %d", overrun, blade_cut, p["grip_length"])
        total = p["length"] + p["guard_height"] + p["grip_length"] + pommel_h
    p["total_height"] = total
    p["top"] = max(ctx.grid.padding, math.floor((ctx.grid.height - total) / 2))


@item_generator(
    item_type="sword",
    sub_types=list(SWORD_STYLES),
    aliases=SWORD_ALIASES,
    description="Blades from daggers to greatswords with guard, grip and pommel",
)
def plan_sword(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    _fit_height(ctx, p)
    ctx.params.update(p)
    cx = ctx.grid.center_x
    top = p["top"]

    curve = Curve(p["curve_amount"], p["curve_direction"], SWORD_STYLES[p["sub_type"]].phase) if p["curve_direction"] else None
    blade = blade_body(p["shape"], p["tip"], p["width"], p["length"], curve)
    blade_palette = ctx.palette(p["material"])
    hilt_palette = ctx.palette(p["hilt_material"])
    grip_palette = ctx.palette(p["grip_material"])
    pommel_palette = ctx.palette(p["pommel_material"])
    blade_sil = blade.at(cx, top)

    def draw_blade(ctx: GenerationContext) -> None:
        overlays = []
        if p["fuller"]:
            lo, hi = p["length"] * 0.15, p["length"] * 0.85

            def in_fuller(x: int, y: int) -> bool:
                row = y - top
                return lo < row < hi and blade.row_width(row) >= 3 and x == cx + blade.row_offset(row)

            overlays.append(pattern_rule(in_fuller, blade_palette.shadow))
        ctx.draw("blade", blade_sil, blade_palette, overlays=overlays)
        final = blade.trace(CurveAccumulator())
        ctx.anchors.record("blade_bottom", cx + final, top + p["length"] - 1, final_offset=final, width=p["width"])

    def draw_guard(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("blade_bottom")
        ferrule_w = max(1, p["width"] - (1 if p["width"] > 3 else 0))
        ferrule = Rect(ferrule_w, 1).at(anchor.x - ferrule_w // 2, anchor.y + 1)
        ctx.draw("ferrule", ferrule, hilt_palette)
        guard_top = anchor.y + 2
        height = max(1, p["guard_height"] - 1)
        spec, ox, oy = guard_shape(p["guard"], p["guard_width"], height, p["guard_direction"] or "")
        ctx.draw("guard", spec.at(anchor.x + ox, guard_top + oy), hilt_palette, clip=lambda x, y: not blade_sil.contains(x, y))
        ctx.anchors.record("grip_top", anchor.x, anchor.y + 1 + p["guard_height"])

    def draw_grip(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("grip_top")
        gw, glen = p["grip_width"], p["grip_length"]
        style = p["grip_style"]
        if style == "tapered":
            profile = WidthProfile("linear", start=gw, end=max(1, math.floor(gw / 1.5)))
        else:
            profile = WidthProfile("constant", start=gw)
        grip = TaperedBody(glen, profile).at(anchor.x, anchor.y)
        overlays = []
        if style == "wrapped":
            overlays.append(row_rule({anchor.y + r: grip_palette.shadow for r in range(1, glen, 2)}))
        elif style == "katana_grip":
            overlays.append(
                pattern_rule(
                    lambda x, y: (y - anchor.y) % 3 < 2 and (x - anchor.x + y - anchor.y) % 3 == 0,
                    hilt_palette.highlight,
                )
            )
        ctx.draw("grip", grip, grip_palette, overlays=overlays)
        ctx.anchors.record("pommel_top", anchor.x, anchor.y + glen)

    def draw_pommel(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("pommel_top")
        spec, ox, oy = pommel_shape(p["pommel"], p["pommel_size"])
        sil = spec.at(anchor.x + ox, anchor.y + oy)
        ctx.draw("pommel", sil, pommel_palette)
        ctx.params["pommel_center_x"] = anchor.x
        if p["gem"]:
            size = p["pommel_size"]
            gem = min(max(1, math.floor(size / 2.5)), size - 1)
            x0, y0, x1, y1 = sil.bbox
            draw_gem(ctx, "pommel_gem", anchor.x, (y0 + y1) // 2, gem, gem, ctx.palette(p["gem"]), clip=sil.contains)

    plan = ComponentPlan("sword", [], _name, _describe)
    plan.add("blade", draw_blade, description="Blade body, fuller and curve trace")
    plan.add("guard", draw_guard, "blade", description="Ferrule and crossguard under the blade")
    plan.add("grip", draw_grip, "guard")
    plan.add("pommel", draw_pommel, "grip")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['material']).name} {title_case(p['sub_type'])}"
    if p["shape"] not in ("straight", "katana_blade", "rapier_blade"):
        name += f" ({title_case(p['shape'].replace('greatsword_', ''))})"
    if p["curve_direction"] and p["sub_type"] != "katana":
        name += f" {'Right' if p['curve_direction'] > 0 else 'Left'}-curved"
    guard = title_case(p["guard"])
    if p["guard_direction"]:
        guard += f" {title_case(p['guard_direction'])}"
    details = f"{title_case(p['tip'])} tip, {guard} guard, {title_case(p['pommel'])} pommel"
    if p["gem"]:
        details += f" w/ {ctx.palette(p['gem']).name} gem"
    return f"{name} ({details})"


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    bottom = ctx.anchor("blade_bottom")
    return {
        "swordType": p["sub_type"],
        "subType": p["sub_type"],
        "blade": {
            "material": p["material"].lower(),
            "logicalLength": p["length"],
            "initialLogicalWidth": p["width"],
            "shape": p["shape"],
            "tipShape": p["tip"],
            "curveDirection": p["curve_direction"],
            "curveAmount": round(p["curve_amount"], 2),
            "fuller": p["fuller"],
            "finalCurveOffset": bottom["final_offset"],
            "colors": palette_colors(ctx.palette(p["material"])),
        },
        "hilt": {
            "hiltMaterial": p["hilt_material"].lower(),
            "gripMaterial": p["grip_material"].lower(),
            "crossguardStyle": p["guard"],
            "crossguardWidth": p["guard_width"],
            "crossguardHeight": p["guard_height"],
            "vGuardDirection": p["guard_direction"] if p["guard"] == "v_guard" else None,
            "crescentDirection": p["guard_direction"] if p["guard"] == "crescent_guard" else None,
            "gripStyle": p["grip_style"],
            "gripLength": p["grip_length"],
            "gripWidth": p["grip_width"],
        },
        "pommel": {
            "material": p["pommel_material"].lower(),
            "shape": p["pommel"],
            "logicalSize": p["pommel_size"],
            "hasGem": p["gem"] is not None,
            "gemColor": p["gem"].lower() if p["gem"] else None,
            "centerX": p["pommel_center_x"],
        },
    }
