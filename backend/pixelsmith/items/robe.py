"""Robe generator: flowing body, sleeves, hood, trim, belt and chest symbol."""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.attachment import SeamClip, all_of
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import pattern_rule
from pixelsmith.engine.shapes import (
    Annulus,
    Curve,
    Diamond,
    Difference,
    Disc,
    EdgeBand,
    Opening,
    Patterned,
    Rect,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import neckline_profile, palette_colors
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

ROBE_LENGTHS = ["short", "medium", "long"]
BODY_STYLES = ["a_line", "flowing", "gentle_s_curve"]
NECKLINES = ["v_neck", "round_neck", "closed_high"]
SLEEVE_STYLES = ["straight", "flared", "bishop"]
SLEEVE_LENGTHS = ["short", "three_quarter", "long"]
TRIM_STYLES = ["thin_line", "wide_band", "patterned_dots", "runic_border"]
BELT_STYLES = ["simple_sash", "buckle", "wide_sash", "jeweled_belt"]
SYMBOL_SHAPES = ["circle", "single_rune", "diamond", "crescent_moon_symbol", "star_symbol"]

ROBE_MATERIALS = [
    "RED_PAINT",
    "BLUE_PAINT",
    "GREEN_PAINT",
    "PURPLE_PAINT",
    "BLACK_PAINT",
    "WHITE_PAINT",
    "YELLOW_PAINT",
    "ENCHANTED",
    "OBSIDIAN",
    "LEATHER",
    "BONE",
    "DARK_STEEL",
    "IVORY",
    "GEM_PURPLE",
    "GEM_BLUE",
    "STONE",
    "GREEN_LEAF",
    "PAPER",
]
CUFF_MATERIALS = ["LEATHER", "GOLD", "SILVER", "BRONZE", "WHITE_PAINT"]
TRIM_MATERIALS = ["GOLD", "SILVER", "ENCHANTED", "LEATHER", "WHITE_PAINT", "BLACK_PAINT", "COPPER"]
BELT_MATERIALS = ["LEATHER", "DARK_STEEL", "BRONZE", "SILVER", "GOLD", "ROPE_BROWN"]
BUCKLE_MATERIALS = ["SILVER", "GOLD", "BRONZE", "STEEL"]
BELT_GEMS = ["GEM_RED", "GEM_BLUE", "GEM_GREEN"]
SYMBOL_MATERIALS = ["GOLD", "SILVER", "ENCHANTED", "OBSIDIAN", "BONE", "RED_PAINT", "BLUE_PAINT", "PURPLE_PAINT"]

# length: (ratio lo, ratio hi or None for the grid bottom, estimate used for centring)
LENGTH_RATIOS: dict[str, tuple[float, float | None, float]] = {
    "short": (0.45, 0.55, 0.50),
    "medium": (0.65, 0.75, 0.70),
    "long": (0.85, None, 0.90),
}
# neckline: (depth ratio lo, hi of the body length, width ratio of the shoulders)
NECKLINE_SIZES: dict[str, tuple[float, float, float]] = {
    "v_neck": (0.10, 0.18, 0.4),
    "round_neck": (0.08, 0.15, 0.5),
    "closed_high": (0.0, 0.0, 0.3),
}
SLEEVE_RATIOS: dict[str, tuple[float, float]] = {
    "short": (0.5, 0.8),
    "three_quarter": (1.2, 1.8),
    "long": (2.0, 2.8),
}
# Sleeves fall 0.8 rows and drift 0.6 columns per step along the arm
SLEEVE_DRIFT = 0.6 / 0.8
SEAM_OVERLAP = 1
_FAR = 1000


def robe_profile(style: str, shoulder: int, flare: int) -> WidthProfile:
    bottom = shoulder + flare
    if style == "flowing":
        return WidthProfile("flowing", start=shoulder, end=bottom, amplitude=0.3, minimum=2)
    if style == "gentle_s_curve":
        return WidthProfile("s_curve", start=shoulder, peak=shoulder * 0.85, end=bottom, split=0.4, minimum=2)
    return WidthProfile("linear", start=shoulder, end=bottom, minimum=2)


def sleeve_body(style: str, length: int, top_width: int, shoulder: int, side: int) -> TaperedBody:
    """Sleeve hanging from the shoulder, leaning outward on ``side``."""
    if style == "flared":
        profile = WidthProfile("linear", start=top_width, end=top_width + shoulder, minimum=2)
    elif style == "bishop":
        profile = WidthProfile("bishop", start=top_width, amplitude=shoulder * 0.8, split=0.85, minimum=2)
    else:
        profile = WidthProfile("linear", start=top_width, end=top_width * 0.8, minimum=2)
    lean = Curve(SLEEVE_DRIFT * max(0, length - 1), side, kind="lean")
    return TaperedBody(length, profile, curve=lean)


def rune_shape(variant: int, size: int, thickness: int) -> ShapeSpec:
    """One of four abstract runes in a ``size`` square with its top-left at the origin."""
    half = size // 2
    if variant == 1:
        return Union(
            (
                (Rect(thickness, size), half - thickness // 2, 0),
                (Rect(half + thickness - 1, 1), 0, math.floor(size * 0.25)),
                (Rect(half + thickness - 1, 1), half, math.floor(size * 0.75)),
            )
        )
    if variant == 2:
        parts = []
        for r in range(size):
            parts += [(Rect(thickness, 1), r, half - r // 2), (Rect(thickness, 1), r, half + r // 2)]
        return Union(tuple(parts))
    if variant == 3:
        parts = []
        for r in range(size):
            w = max(thickness, math.floor(size * (r / ((size - 1) or 1))))
            parts.append((Rect(w, thickness), (size - w) // 2, r))
        return Union(tuple(parts))
    parts = [(Rect(size + thickness - 1, 1), 0, 0), (Rect(size + thickness - 1, 1), 0, size - thickness)]
    parts += [(Rect(thickness, 1), r, r) for r in range(size)]
    return Union(tuple(parts))


def symbol_shape(shape: str, size: int, variant: int) -> tuple[ShapeSpec, bool]:
    """Symbol centred on the origin, and whether it is drawn in the highlight tone."""
    radius = size // 2
    if shape == "circle":
        return Disc(radius), False
    if shape == "diamond":
        return Diamond(radius, radius), False
    if shape == "crescent_moon_symbol":
        thickness = max(1, radius // 3)
        inner = radius - thickness
        ring = Annulus(radius, inner)
        return Window(ring, -radius, -radius, math.floor(inner * 0.2) - 1, radius), True
    if shape == "star_symbol":
        arm = max(1, size // 5)
        return (
            Union(
                (
                    (Rect(arm, radius * 2 + 1), -(arm // 2), -radius),
                    (Rect(radius * 2 + 1, arm), -radius, -(arm // 2)),
                )
            ),
            False,
        )
    rune = rune_shape(variant, size, max(1, size // 5))
    return Union(((rune, -radius, -radius),)), False


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    gw, gh, pad = ctx.grid.width, ctx.grid.height, ctx.grid.padding
    length_type = s.choose_known(opts.sub_type, ROBE_LENGTHS, label="robe length")
    p: dict[str, Any] = {"length_type": length_type, "sub_type": opts.sub_type or length_type}
    p["material"] = main = s.material(opts.material, ROBE_MATERIALS, label="robe material")
    p["body_style"] = s.choose(BODY_STYLES)
    p["shoulder_width"] = shoulder = s.int_in(math.floor(gw * 0.22), math.floor(gw * 0.35))
    flare = s.int_in(math.floor(shoulder * 0.15), shoulder)
    p["flare"] = max(0, min(flare, math.floor((gw - pad * 2 - shoulder) / 1.3)))

    lo, hi, estimate = LENGTH_RATIOS[length_type]
    top = max(pad, math.floor((gh - math.floor(gh * estimate)) / 2))
    high = gh - pad - 2 if hi is None else math.floor(gh * hi)
    length = s.int_in(math.floor(gh * lo), high)
    length = min(length, gh - top - pad)
    p["top"] = top
    p["length"] = length = max(math.floor(gh * 0.3), length)

    p["neckline"] = neck = s.choose(NECKLINES)
    d_lo, d_hi, w_ratio = NECKLINE_SIZES[neck]
    if neck == "closed_high":
        p["neckline_depth"] = s.int_in(1, 3)
    else:
        p["neckline_depth"] = s.int_in(math.floor(length * d_lo), math.floor(length * d_hi))
    p["neckline_width"] = math.floor(shoulder * w_ratio)

    p["fold_every"] = s.int_in(3, 6)
    p["sleeve_style"] = sleeve = s.choose(SLEEVE_STYLES)
    p["sleeve_length_type"] = sleeve_len = s.choose(SLEEVE_LENGTHS)
    lo_r, hi_r = SLEEVE_RATIOS[sleeve_len]
    p["sleeve_steps"] = s.int_in(math.floor(shoulder * lo_r), math.floor(shoulder * hi_r))
    p["cuff"] = None
    if sleeve == "bishop" or s.chance(0.3):
        cuffs = CUFF_MATERIALS if main != "WHITE_PAINT" else CUFF_MATERIALS[:-1] + ["BLACK_PAINT"]
        p["cuff"] = s.choose(cuffs)

    p["hood"] = s.chance(0.6)
    p["hood_up"] = p["hood"] and s.chance(0.5)
    p["hood_material"] = None
    if p["hood"]:
        if s.chance(0.4):
            p["hood_material"] = s.choose(ROBE_MATERIALS, exclude=[main])
        p["hood_extra"] = s.int_in(4, 8)
        p["hood_folds"] = s.int_in(3, 5)

    p["trim_style"] = None
    if s.chance(0.7):
        p["trim_style"] = trim = s.choose(TRIM_STYLES)
        p["trim_material"] = s.choose(TRIM_MATERIALS, exclude=[main])
        p["trim_width"] = s.int_in(2, 3) if trim == "wide_band" else 1
        p["rune_spacing"] = s.int_in(4, 6)

    p["belt_style"] = None
    if s.chance(0.65):
        p["belt_style"] = belt = s.choose(BELT_STYLES)
        p["belt_material"] = s.choose(BELT_MATERIALS, exclude=[main])
        p["belt_height"] = s.int_in(5, 8) if belt == "wide_sash" else s.int_in(2, 4)
        p["belt_ratio"] = s.float_in(0.35, 0.45)
        if belt == "buckle":
            p["buckle_material"] = s.choose(BUCKLE_MATERIALS)
            p["buckle_extra"] = s.int_in(1, 2)
        elif belt == "jeweled_belt":
            p["belt_gem"] = s.choose(BELT_GEMS)

    p["symbol"] = None
    if s.chance(0.4):
        p["symbol"] = s.choose(SYMBOL_SHAPES)
        p["symbol_material"] = s.choose(SYMBOL_MATERIALS, exclude=[main])
        p["rune_variant"] = s.int_in(1, 4)
    return p


@item_generator(
    item_type="robe",
    sub_types=ROBE_LENGTHS,
    description="Short, medium and long robes with sleeves and optional hood",
)
def plan_robe(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    grid = ctx.grid
    pad = grid.padding
    cx = grid.width // 2
    top, length = p["top"], p["length"]
    shoulder = p["shoulder_width"]
    depth = p["neckline_depth"]

    opening = Opening(0, depth, neckline_profile(p["neckline"], p["neckline_width"]), margin=2)
    body = TaperedBody(length, robe_profile(p["body_style"], shoulder, p["flare"]), opening=opening)
    body_sil = body.at(cx, top)
    on_body = body_sil.contains
    main = ctx.palette(p["material"])

    def inside_padding(x: int, y: int) -> bool:
        return pad <= x < grid.width - pad and pad <= y < grid.height - pad

    def fold_marks() -> dict[tuple[int, int], str]:
        marks: dict[tuple[int, int], str] = {}
        for row in range(length):
            w = body.row_width(row)
            if not (length * 0.3 < row < length * 0.9) or w <= 5 or row % p["fold_every"]:
                continue
            left = cx - w // 2
            x = left + ctx.sampler.int_in(1, w - 2)
            marks[(x, top + row)] = main.shadow
            if x + 1 < left + w - 1:
                marks[(x + 1, top + row)] = main.highlight
        return marks

    def draw_body(ctx: GenerationContext) -> None:
        folds = fold_marks()
        ctx.draw("body", body_sil, main, overlays=[lambda x, y: folds.get((x, y))], decorations=[p["body_style"]])
        # Sleeves hang from the row half-way down the neckline
        row = depth // 2
        w = body.row_width(row)
        left = cx + body.row_offset(row) - w // 2
        ctx.anchors.record("left_shoulder", left, top + row, width=w)
        ctx.anchors.record("right_shoulder", left + w - 1, top + row, width=w)
        collar_y = top + 1 if p["neckline"] == "closed_high" else top + depth
        ctx.anchors.record("collar", cx, collar_y, width=shoulder)
        ctx.anchors.record("hem", cx, top + length - 1, width=body.row_width(length - 1))

    def draw_sleeves(ctx: GenerationContext) -> None:
        steps = p["sleeve_steps"]
        top_width = max(2, math.floor(math.floor(shoulder * 0.35) * 0.8))
        cuff_from = 0.85 if p["sleeve_style"] == "bishop" else 0.92
        for name, side in (("left_shoulder", -1), ("right_shoulder", 1)):
            anchor = ctx.anchor(name)
            rows = math.floor((steps - 1) * 0.8) + 1 if steps > 0 else 0
            rows = min(rows, grid.height - anchor.y - pad - 2)
            if rows <= 0:
                continue
            sleeve = sleeve_body(p["sleeve_style"], rows, top_width, shoulder, side)
            # Inner edge of the first row sits on the shoulder column
            origin_x = anchor.x + top_width // 2 if side > 0 else anchor.x + 1 - (top_width - top_width // 2)
            sil = sleeve.at(origin_x, anchor.y)
            clip = all_of(SeamClip(on_body, range(anchor.y, anchor.y + rows), SEAM_OVERLAP), inside_padding)
            ctx.draw(f"sleeve_{name.split('_')[0]}", sil, main, clip=clip, decorations=[p["sleeve_style"]])
            if p["cuff"]:
                first = math.ceil((rows - 1) * cuff_from) if rows > 1 else 0
                cuff = Window(sleeve, -_FAR, first, _FAR, rows - 1).at(origin_x, anchor.y)
                ctx.draw(f"cuff_{name.split('_')[0]}", cuff, ctx.palette(p["cuff"]), clip=clip)

    def draw_hood(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("collar")
        palette = ctx.palette(p["hood_material"] or p["material"])
        hood_depth = math.floor(anchor["width"] * 0.7)
        base_w = min(anchor["width"] + p["hood_extra"], grid.width - pad * 2)
        if p["hood_up"]:
            hood_top = max(pad, anchor.y - math.floor(hood_depth * 0.8))
            height = anchor.y - hood_top + math.floor(hood_depth * 0.3)
            face_top = math.floor(height * 0.3 * 0.6)
            face_rows = max(1, math.floor(height * 0.7))
            rows = face_top + face_rows + math.floor(hood_depth * 0.2)
            profile = WidthProfile("shoulder", start=base_w, split=0.0, amplitude=0.6, rounding="floor")
            max_face = math.floor(base_w * 0.55)
            face_profile = WidthProfile("bulge", start=math.floor(max_face * 0.7), peak=max_face, split=0.5, exponent=2.0)
            face = Opening(face_top, face_rows, face_profile, margin=2)
            outer = TaperedBody(rows, profile)
            hood = TaperedBody(rows, profile, opening=face)
            crown = math.floor(base_w * 0.2)
            clip = all_of(SeamClip(on_body, range(hood_top, hood_top + rows), SEAM_OVERLAP), inside_padding)
            crown_rule = pattern_rule(lambda x, y: y < hood_top + 3 and cx - crown <= x < cx + crown, palette.highlight)
            ctx.draw("hood", hood.at(cx, hood_top), palette, overlays=[crown_rule], clip=clip, decorations=["hood_up"])
            shadowed = Difference(outer, ((hood, 0, 0),))
            ctx.fill(shadowed.at(cx, hood_top), palette.shadow, clip=clip)
            return
        folds = p["hood_folds"]
        fold_h = max(1, math.floor(hood_depth * 0.8 / folds))
        rest_y = anchor.y - math.floor(hood_depth * 0.1)
        parts = []
        for i in range(folds):
            y = rest_y + i * math.floor(fold_h * 0.7)
            if y + fold_h >= grid.height - pad:
                break
            t = i / ((folds - 1) or 1)
            fold_base = base_w * (1 - t * 0.3)
            w = max(2, math.floor(fold_base - math.sin(t * math.pi * 0.5) * fold_base * 0.15))
            h = max(1, fold_h - ctx.sampler.int_in(0, math.floor(fold_h * 0.3)))
            parts.append((f"hood_fold{i}", Rect(w, h).at(cx - w // 2, y)))
        for name, sil in parts:
            _, y0, _, y1 = sil.bbox
            clip = all_of(SeamClip(on_body, range(y0, y1 + 1), SEAM_OVERLAP), inside_padding)
            ctx.draw(name, sil, palette, clip=clip, decorations=["hood_down"])

    def draw_trim(ctx: GenerationContext) -> None:
        palette = ctx.palette(p["trim_material"])
        width = p["trim_width"]
        style = p["trim_style"]
        hem_top = length - width
        hem = Window(body, -_FAR, hem_top, _FAR, length - 1)
        ctx.draw("hem_trim", hem.at(cx, top), palette, decorations=[style])
        middle = hem_top + width // 2
        if style == "patterned_dots":
            dots = Patterned(Window(body, -_FAR, middle, _FAR, middle), 3, 1, 1, 0)
            ctx.fill(dots.at(cx, top), palette.highlight)
        elif style == "runic_border":
            w = body.row_width(middle)
            left = -(w // 2)
            ticks = [(Rect(1, 3), x, middle - 1) for x in range(left + 1, left + w - 1, p["rune_spacing"])]
            if ticks:
                ctx.fill(Union(tuple(ticks)).at(cx, top), palette.shadow, clip=on_body)
        # Front and collar edging down the upper quarter
        upper = Window(EdgeBand(body, width), -_FAR, 0, _FAR, math.ceil(length * 0.25) - 1)
        ctx.fill(upper.at(cx, top), palette.base)

    def draw_belt(ctx: GenerationContext) -> None:
        palette = ctx.palette(p["belt_material"])
        height = p["belt_height"]
        row = math.floor(length * p["belt_ratio"])
        band = Window(body, -_FAR, row, _FAR, row + height - 1)
        style = p["belt_style"]
        ctx.draw("belt", band.at(cx, top), palette, decorations=[style])
        belt_y = top + row
        if style == "wide_sash":
            folds = Patterned(Window(body, -_FAR, row + 2, _FAR, row + height - 2), 2, 1, 0, 1)
            ctx.fill(folds.at(cx, top), palette.shadow)
        elif style == "jeweled_belt":
            gem = ctx.palette(p["belt_gem"])
            w = body.row_width(row + height // 2)
            y = belt_y + height // 2
            left = cx - w // 2
            for gx in range(left + 2, left + w - 2, 5):
                ctx.fill(Rect(2, 1).at(gx, y), gem.base)
                ctx.fill(Rect(1, 1).at(gx, y), gem.highlight)
        elif style == "buckle" and body.row_width(row) > 5 and height > 1:
            size = height + p["buckle_extra"]
            buckle = Rect(size, size).at(cx - size // 2, belt_y - (size - height) // 2)
            ctx.draw("buckle", buckle, ctx.palette(p["buckle_material"]))

    def draw_symbol(ctx: GenerationContext) -> None:
        palette = ctx.palette(p["symbol_material"])
        chest = math.floor(length * 0.25)
        available = min(body.row_width(chest) * 0.6, length * 0.2, 16)
        size = max(6, math.floor(available))
        spec, lit = symbol_shape(p["symbol"], size, p["rune_variant"])
        centre_y = top + chest + size // 3
        ctx.fill(spec.at(cx, centre_y), palette.highlight if lit else palette.base, clip=on_body)

    plan = ComponentPlan("robe", [], _name, _describe)
    plan.add("body", draw_body, description="Robe body with neckline opening")
    plan.add("sleeves", draw_sleeves, "body")
    if p["hood"]:
        plan.add("hood", draw_hood, "body")
    if p["trim_style"]:
        plan.add("trim", draw_trim, "body")
    if p["belt_style"]:
        plan.add("belt", draw_belt, "body")
    if p["symbol"]:
        plan.add("symbol", draw_symbol, "body")
    return plan


def _spaced(token: str) -> str:
    return token.replace("_", " ", 1)


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['material']).name} {_spaced(p['body_style'])} {p['length_type']} Robe"
    if p["hood"]:
        name += " (Hood Up)" if p["hood_up"] else " (Hood Down)"
    name += f" ({p['sleeve_length_type'].replace('_', '-', 1)} {p['sleeve_style']} sleeves)"
    if p["trim_style"]:
        name += f" with {ctx.palette(p['trim_material']).name} {_spaced(p['trim_style'])} Trim"
    if p["belt_style"]:
        name += f" and {ctx.palette(p['belt_material']).name} {_spaced(p['belt_style'])}"
    if p["symbol"]:
        name += f" with {ctx.palette(p['symbol_material']).name} {p['symbol'].replace('_symbol', '')} Symbol"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params

    def key(name: str) -> str | None:
        value = p.get(name)
        return value.lower() if value else None

    def colors(name: str) -> dict[str, Any] | None:
        value = p.get(name)
        return palette_colors(ctx.palette(value)) if value else None

    return {
        "subType": p["sub_type"],
        "mainMaterial": p["material"].lower(),
        "visualTheme": f"{ctx.palette(p['material']).name} {title_case(p['body_style'])} Robe",
        "robeBodyStyle": p["body_style"],
        "length": p["length_type"],
        "logicalLength": p["length"],
        "shoulderWidth": p["shoulder_width"],
        "sleeveType": p["sleeve_style"],
        "sleeveLength": p["sleeve_length_type"],
        "neckline": p["neckline"],
        "hasHood": p["hood"],
        "hoodUp": p["hood_up"],
        "hoodMaterial": key("hood_material"),
        "hasTrim": p["trim_style"] is not None,
        "trimMaterial": key("trim_material"),
        "trimStyle": p["trim_style"],
        "hasBelt": p["belt_style"] is not None,
        "beltMaterial": key("belt_material"),
        "beltStyle": p["belt_style"],
        "hasSymbol": p["symbol"] is not None,
        "symbolMaterial": key("symbol_material"),
        "symbolShape": p["symbol"],
        "colors": {
            "main": palette_colors(ctx.palette(p["material"])),
            "cuff": colors("cuff"),
            "hood": colors("hood_material"),
            "trim": colors("trim_material"),
            "belt": colors("belt_material"),
            "symbol": colors("symbol_material"),
        },
    }
