"""Potion generator: glass flasks holding one or two layered liquids under a stopper."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.palette import Palette
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import column_rule, pattern_rule, row_rule
from pixelsmith.engine.shapes import (
    Band,
    CompositeSilhouette,
    Difference,
    EdgeBand,
    Ellipse,
    Rect,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import draw_gem, palette_colors
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

GLASS = Palette("Glass", "#ADD8E6", "#87CEFA", "#E0FFFF", "#5F9EA0")

# liquid material: (display name, draw weight)
LIQUIDS: dict[str, tuple[str, float]] = {
    "GEM_RED": ("Healing Red", 3),
    "GEM_BLUE": ("Mana Blue", 3),
    "GEM_GREEN": ("Stamina Green", 2),
    "GEM_PURPLE": ("Mystic Purple", 1),
    "GEM_YELLOW": ("Sun Yellow", 1),
    "OBSIDIAN": ("Shadow Black", 1),
    "GEM_WHITE": ("Pure White", 1),
    "GREEN_LEAF": ("Toxic Slime", 1),
    "GEM_ORANGE": ("Fiery Orange", 1),
    "GEM_CYAN": ("Ethereal Teal", 1),
    "WOOD": ("Murky Brown", 0.5),
}

STOPPERS = ["cork", "glass_stopper", "wax_seal", "metal_cap", "gem_stopper", "cloth_tied_top"]
STOPPER_MATERIALS = {
    "wax_seal": ["GEM_RED", "BLACK_PAINT", "DARK_STEEL", "BLUE_PAINT", "PURPLE_PAINT"],
    "metal_cap": ["IRON", "BRONZE", "SILVER", "DARK_STEEL", "GOLD"],
    "gem_stopper": ["GOLD", "SILVER", "OBSIDIAN", "DARK_STEEL"],
    "cloth_tied_top": ["LEATHER", "WHITE_PAINT", "RED_PAINT", "BLUE_PAINT", "GREEN_PAINT"],
}
STOPPER_GEMS = ["GEM_RED", "GEM_BLUE", "GEM_PURPLE", "GEM_WHITE", "GEM_YELLOW"]
LABELLED_FLASKS = ["flat_bottom_cylinder", "conical_flask", "tall_slender"]


@dataclass(frozen=True)
class FlaskStyle:
    body_width: tuple[int, int]
    body_height: tuple[float, float]  # fractions of the grid height, or of the body width when square
    neck_width: tuple[float, float]  # fractions of the body width
    neck_height: tuple[float, float]  # fractions of the body height
    base: str
    square: bool = False


FLASK_STYLES: dict[str, FlaskStyle] = {
    "round_flask": FlaskStyle((18, 30), (0.85, 1.15), (0.25, 0.4), (0.18, 0.3), "rounded", square=True),
    "flat_bottom_cylinder": FlaskStyle((16, 26), (0.35, 0.6), (0.3, 0.55), (0.25, 0.45), "flat"),
    "conical_flask": FlaskStyle((20, 32), (0.45, 0.65), (0.2, 0.3), (0.22, 0.32), "flat"),
    "bulbous_pot": FlaskStyle((16, 26), (0.35, 0.6), (0.3, 0.55), (0.25, 0.45), "bulb_bottom"),
    "tall_slender": FlaskStyle((10, 16), (0.55, 0.75), (0.5, 0.8), (0.12, 0.22), "flat"),
    "test_tube": FlaskStyle((8, 14), (0.6, 0.8), (1.0, 1.0), (0, 0), "test_tube_rounded"),
}

POTION_ALIASES = {"flask": "round_flask", "vial": "test_tube", "bottle": "flat_bottom_cylinder"}

MIN_BODY_HEIGHT = 8


def base_rows(style: FlaskStyle, body_w: int, body_h: int) -> int:
    if style.base == "test_tube_rounded":
        return body_w // 2 + 1
    if style.base in ("rounded", "bulb_bottom"):
        return min(5, math.floor(body_h * 0.2))
    return 0


def stopper_rows(p: dict[str, Any]) -> int:
    """Rows the stopper rises above the neck."""
    kind = p["stopper"]
    if kind == "cork":
        return math.floor(p["stopper_height"] * 0.6)
    if kind in ("glass_stopper", "gem_stopper"):
        return math.floor(p["stopper_height"] * (0.4 if kind == "gem_stopper" else 0.65))
    if kind == "wax_seal":
        return p["seal_ry"]
    if kind == "metal_cap":
        return max(2, math.floor(p["neck_height"] * 0.6) + 1)
    return math.floor(max(3, p["neck_height"] + 2) * 0.6)


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    grid = ctx.grid
    flask = s.choose_known(opts.sub_type, list(FLASK_STYLES), POTION_ALIASES, "flask shape")
    style = FLASK_STYLES[flask]
    p: dict[str, Any] = {"flask": flask, "sub_type": opts.sub_type or flask, "base": style.base}

    bw = s.int_in(*style.body_width)
    if style.square:
        bh = round(bw * s.float_in(*style.body_height))
    else:
        bh = s.int_in(grid.height * style.body_height[0], grid.height * style.body_height[1])
    if flask == "test_tube":
        neck_w, neck_h = bw, s.int_in(2, 4)
    else:
        neck_w = max(3 if flask == "tall_slender" else 4, math.floor(bw * s.float_in(*style.neck_width)))
        neck_h = s.int_in(bh * style.neck_height[0], bh * style.neck_height[1])
    p["body_width"], p["neck_width"], p["neck_height"] = bw, neck_w, neck_h

    if opts.material:
        p["liquid"] = s.material(opts.material, list(LIQUIDS), label="liquid")
    else:
        p["liquid"] = s.choose_weighted({k: w for k, (_, w) in LIQUIDS.items()})
    p["liquid2"] = s.choose(list(LIQUIDS), exclude=[p["liquid"]]) if s.chance(0.25) else None
    p["fill"] = s.float_in(0.4, 0.9)
    p["bubbles"] = [(s.float_in(0, 1), s.float_in(0, 1)) for _ in range(s.int_in(2, 6))] if s.chance(0.3) else []

    p["stopper"] = kind = "cork" if flask == "test_tube" and s.chance(0.2) else s.choose(STOPPERS)
    p["stopper_material"] = None
    if kind == "cork":
        p["stopper_material"] = "WOOD"
    elif kind in STOPPER_MATERIALS:
        p["stopper_material"] = s.choose(STOPPER_MATERIALS[kind])
    p["stopper_gem"] = s.choose(STOPPER_GEMS) if kind == "gem_stopper" else None
    p["stopper_height"] = s.int_in(5, 9)
    p["stopper_extra"] = s.int_in(3, 6) if kind in ("glass_stopper", "gem_stopper") else s.int_in(0, 1)
    inner = max(1, neck_w - 2)
    p["seal_rx"] = inner // 2 + s.int_in(2, 5)
    p["seal_ry"] = inner // 2 + s.int_in(1, 4)
    p["seal_stamp"] = s.chance(0.65)
    p["tie_material"] = s.choose(["LEATHER", "SILVER", "GOLD"]) if kind == "cloth_tied_top" else None

    p["label_material"] = None
    if flask in LABELLED_FLASKS and s.chance(0.45):
        p["label_material"] = s.choose(["PAPER", "PARCHMENT", "LEATHER"])
        p["label_height"] = s.float_in(0.2, 0.35)
        p["label_width"] = s.float_in(0.6, 0.9)

    head = stopper_rows(p)
    overrun = head + neck_h + bh + base_rows(style, bw, bh) - grid.usable_height
    if overrun > 0:
        bh = max(MIN_BODY_HEIGHT, bh - overrun)
        logger.debug("Potion overran by %d rows, body now %d", overrun, bh)
    p["body_height"] = bh
    p["base_height"] = base_rows(style, bw, bh)
    total = head + neck_h + bh + p["base_height"]
    p["neck_top"] = grid.padding + max(0, (grid.usable_height - total) // 2) + head
    return p


def flask_shape(p: dict[str, Any]) -> CompositeSilhouette:
    """Glass outline from the neck down through the body to the base."""
    flask = p["flask"]
    bw, bh, nw = p["body_width"], p["body_height"], p["neck_width"]
    bands = []
    if p["neck_height"]:
        bands.append(Band("neck", p["neck_height"], WidthProfile("constant", start=nw)))
    if flask == "round_flask":
        bands.append(Band("body", bh, WidthProfile("oval", start=bw, amplitude=0.95, minimum=nw)))
    elif flask == "conical_flask":
        bands.append(Band("body", bh, WidthProfile("linear", start=nw, end=bw)))
    elif flask == "bulbous_pot":
        shoulder = math.ceil(bh * 0.6)
        bands.append(Band("shoulder", shoulder, WidthProfile("sine_rise", start=nw, end=bw)))
        bands.append(Band("body", bh - shoulder, WidthProfile("constant", start=bw)))
    else:
        bands.append(Band("body", bh, WidthProfile("constant", start=bw)))
    if p["base_height"]:
        if p["base"] == "test_tube_rounded":
            profile = WidthProfile("quarter_circle", start=bw)
        else:
            profile = WidthProfile("shoulder", start=bands[-1].profile.raw_at(1.0), split=0, amplitude=0.7)
        bands.append(Band("base", p["base_height"], profile))
    height = p["neck_height"] + bh + p["base_height"]
    return CompositeSilhouette(bw, height, tuple(bands))


@item_generator(
    item_type="potion",
    sub_types=list(FLASK_STYLES),
    aliases=POTION_ALIASES,
    description="Potions in flasks, pots and tubes with layered liquids, stoppers and labels",
)
def plan_potion(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    cx = ctx.grid.center_x
    shape = flask_shape(p)
    neck_top = p["neck_top"]
    centre_y = neck_top + shape.height // 2
    glass = shape.at(cx, centre_y)
    bw = p["body_width"]
    glint_x = cx - bw // 2 + 2
    inner = max(1, p["neck_width"] - 2)

    def draw_flask(ctx: GenerationContext) -> None:
        glint = column_rule({glint_x: GLASS.highlight})
        ctx.draw("flask", glass, GLASS, outlined=True, overlays=[glint], decorations=[p["flask"], p["base"]])
        ctx.anchors.record("neck_top", cx, neck_top, inner_width=inner)

    def draw_liquid(ctx: GenerationContext) -> None:
        top_row, bottom_row = shape.top, shape.top + shape.height - 1
        column = bottom_row - top_row
        surface = bottom_row - math.floor(column * p["fill"])
        hollow = Difference(shape, ((EdgeBand(shape, 1), 0, 0),))
        liquid = ctx.palette(p["liquid"])
        body = Window(hollow, -bw, surface, bw, bottom_row)
        overlays = [column_rule({glint_x: liquid.highlight})]
        if p["liquid2"] is None:
            overlays.append(row_rule({centre_y + surface: liquid.highlight}))
        ctx.draw("liquid", body.at(cx, centre_y), liquid, overlays=overlays, decorations=["single"])
        interface = bottom_row - math.floor(column * p["fill"] * 0.5)
        if p["liquid2"] and interface > surface:
            upper = ctx.palette(p["liquid2"])
            layer = Window(hollow, -bw, surface, bw, interface - 1)
            meniscus = row_rule({centre_y + surface: upper.highlight})
            ctx.draw("liquid_top_layer", layer.at(cx, centre_y), upper, overlays=[meniscus], decorations=["layered"])
        if p["bubbles"]:
            cells = []
            rows = bottom_row - 2 - (surface + 2)
            for fy, fx in p["bubbles"]:
                row = surface + 2 + math.floor(rows * fy)
                half = math.floor(shape.row_width(row - shape.top) / 2) - 2
                if rows > 0 and half > 0:
                    cells.append((Rect(1, 1), math.floor(-half + 2 * half * fx), row))
            if cells:
                ctx.fill(Union(tuple(cells)).at(cx, centre_y), liquid.highlight, clip=body.at(cx, centre_y).contains)

    def draw_label(ctx: GenerationContext) -> None:
        label = ctx.palette(p["label_material"])
        bh = p["body_height"]
        body_top = neck_top + p["neck_height"]
        lh = max(4, min(12, math.floor(bh * p["label_height"])))
        lw = math.floor((bw - 2) * p["label_width"])
        if lw < 3 or lh + 2 >= bh:
            logger.debug("Label %dx%d does not fit the body", lw, lh)
            return
        ly = body_top + (bh - lh) // 2
        lx = cx - lw // 2
        text = ctx.palette("BLACK_PAINT").shadow
        lines = pattern_rule(lambda x, y: (y - ly) % 2 == 1 and lx < x < lx + lw - 1 and y < ly + lh - 1, text)
        ctx.draw("label", Rect(lw, lh).at(lx, ly), label, outlined=True, overlays=[lines] if lw > 4 else [])

    def draw_stopper(ctx: GenerationContext) -> None:
        kind = p["stopper"]
        anchor = ctx.anchor("neck_top")
        nx, ny = anchor.x, anchor.y
        w_in = anchor["inner_width"]
        palette = GLASS if kind == "glass_stopper" else ctx.palette(p["stopper_material"])
        sh = p["stopper_height"]
        if kind == "cork":
            vis = math.floor(sh * 0.6)
            cw = w_in + p["stopper_extra"]
            cork = Union(((Rect(cw, vis), -(cw // 2), -vis), (Rect(w_in, sh - vis), -(w_in // 2), 0)))
            rings = row_rule({ny - vis + r: palette.shadow for r in range(2, sh - 1, 2)})
            ctx.draw("stopper", cork.at(nx, ny), palette, overlays=[rings], decorations=[kind])
        elif kind in ("glass_stopper", "gem_stopper"):
            handle_h = stopper_rows(p)
            plug_h = sh - handle_h
            hw = max(2, w_in + p["stopper_extra"])
            parts = [(Rect(w_in, plug_h), -(w_in // 2), 0)] if plug_h > 0 else []
            if kind == "gem_stopper":
                setting = handle_h // 2
                parts.append((Rect(hw, max(1, setting)), -(hw // 2), -max(1, setting)))
                ctx.draw("stopper", Union(tuple(parts)).at(nx, ny), palette, decorations=[kind])
                gem = min(hw - 2, handle_h - setting - 1)
                if gem > 0:
                    gy = ny - setting - (gem + 1) // 2
                    draw_gem(ctx, "stopper_gem", nx, gy, gem, gem, ctx.palette(p["stopper_gem"]))
            else:
                parts.append((Rect(hw, handle_h), -(hw // 2), -handle_h))
                ctx.draw("stopper", Union(tuple(parts)).at(nx, ny), palette, outlined=True, decorations=[kind])
        elif kind == "wax_seal":
            rx, ry = p["seal_rx"], p["seal_ry"]
            sy = ny - math.floor(ry * 0.2)
            ctx.draw("stopper", Ellipse(rx, ry).at(nx, sy), palette, decorations=[kind])
            if p["seal_stamp"]:
                stamp = max(1, math.floor(min(rx, ry) * 0.4))
                ctx.fill(Rect(stamp, stamp).at(nx - stamp // 2, sy - stamp // 2), palette.shadow)
        elif kind == "metal_cap":
            cap_h = stopper_rows(p)
            cap_w = max(2, w_in + 2)
            ctx.draw("stopper", Rect(cap_w, cap_h).at(nx - cap_w // 2, ny - cap_h), palette, outlined=True, decorations=[kind])
        else:
            rows = stopper_rows(p)
            cloth_w = max(2, w_in + 4)
            cloth = TaperedBody(rows, WidthProfile("power_taper", start=cloth_w, exponent=1.5, rounding="floor"))
            ctx.draw("stopper", cloth.at(nx, ny - rows), palette, decorations=[kind])
            tie = ctx.palette(p["tie_material"])
            ctx.draw("tie", Rect(w_in + 2, 2).at(nx - w_in // 2 - 1, ny - p["stopper_extra"]), tie)

    plan = ComponentPlan("potion", [], _name, _describe)
    plan.add("flask", draw_flask, description="Glass flask recording the neck anchor")
    plan.add("liquid", draw_liquid, "flask")
    if p["label_material"]:
        plan.add("label", draw_label, "liquid")
    plan.add("stopper", draw_stopper, "flask", description=p["stopper"])
    return plan


def liquid_name(key: str | None, ctx: GenerationContext) -> str | None:
    if key is None:
        return None
    return LIQUIDS[key][0] if key in LIQUIDS else ctx.palette(key).name


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = liquid_name(p["liquid"], ctx)
    if p["liquid2"]:
        name += f" & {liquid_name(p['liquid2'], ctx)}"
    name += f" Potion in a {title_case(p['flask'])} with {title_case(p['stopper'])}"
    if p["label_material"]:
        name += " (Labelled)"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    stopper = GLASS if p["stopper"] == "glass_stopper" else ctx.palette(p["stopper_material"])
    return {
        "flaskShape": p["flask"],
        "subType": p["sub_type"],
        "baseStyle": p["base"],
        "liquidMaterial": p["liquid"].lower(),
        "liquidColorName": liquid_name(p["liquid"], ctx),
        "liquidColorName2": liquid_name(p["liquid2"], ctx),
        "liquidMixStyle": "layered" if p["liquid2"] else None,
        "liquidFillLevel": round(p["fill"], 3),
        "hasBubbles": bool(p["bubbles"]),
        "stopperType": p["stopper"],
        "hasLabel": p["label_material"] is not None,
        "dimensions": {
            "bodyWidth": p["body_width"],
            "bodyHeight": p["body_height"],
            "neckWidth": p["neck_width"],
            "neckHeight": p["neck_height"],
            "baseHeight": p["base_height"],
        },
        "colors": {
            "glass": palette_colors(GLASS),
            "liquid": palette_colors(ctx.palette(p["liquid"])),
            "liquid2": palette_colors(ctx.palette(p["liquid2"])) if p["liquid2"] else None,
            "stopper": palette_colors(stopper),
            "stopperGem": palette_colors(ctx.palette(p["stopper_gem"])) if p["stopper_gem"] else None,
            "label": palette_colors(ctx.palette(p["label_material"])) if p["label_material"] else None,
        },
    }
