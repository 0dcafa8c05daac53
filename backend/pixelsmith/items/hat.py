"""Hat generator: cloth hats and metal helmets built from a crown over an optional brim."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import pattern_rule, sphere_rule
from pixelsmith.engine.shapes import (
    ArcBand,
    Curve,
    Disc,
    Ellipse,
    Rect,
    Saltire,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import PAINTS, palette_colors
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

CLOTH_MATERIALS = [
    "RED_PAINT", "BLUE_PAINT", "GREEN_PAINT", "BLACK_PAINT", "WHITE_PAINT", "PURPLE_PAINT", "LEATHER", "PAPER",
]
HELMET_METALS = ["IRON", "STEEL", "BRONZE", "DARK_STEEL", "GOLD", "SILVER"]
DECORATION_MATERIALS = ["LEATHER", "GOLD", "SILVER", "RED_PAINT", "BLUE_PAINT", "BLACK_PAINT", "ENCHANTED", "BONE"]
FEATHER_MATERIALS = [p for p in PAINTS if p not in ("GREEN_PAINT", "YELLOW_PAINT")] + ["GEM_GREEN", "GEM_YELLOW"]
BUCKLE_MATERIALS = ["SILVER", "GOLD", "BRONZE"]


@dataclass(frozen=True)
class HatStyle:
    crown: str
    height: tuple[float, float]  # fractions of the grid height
    width: tuple[float, float]  # fractions of the grid width
    brims: tuple[str, ...]
    extension: tuple[float, float]  # brim reach as a fraction of the crown base width
    materials: tuple[str, ...]
    helmet: bool = False


HAT_STYLES: dict[str, HatStyle] = {
    "wizard_hat": HatStyle(
        "conical", (0.5, 0.8), (0.3, 0.5), ("flat_circular", "downward_curved", "none"), (0.3, 0.8),
        (*CLOTH_MATERIALS, "ENCHANTED", "OBSIDIAN"),
    ),
    "top_hat": HatStyle(
        "cylindrical", (0.35, 0.55), (0.3, 0.45), ("flat_circular",), (0.2, 0.4),
        ("BLACK_PAINT", "DARK_STEEL", "LEATHER"),
    ),
    "beanie": HatStyle("soft_beanie", (0.25, 0.4), (0.35, 0.5), ("none",), (0, 0), tuple(CLOTH_MATERIALS)),
    "wide_brim_fedora": HatStyle(
        "domed", (0.2, 0.3), (0.3, 0.45), ("flat_circular", "downward_curved"), (0.5, 1.2),
        ("LEATHER", "BLACK_PAINT", "PAPER", "WOOD"),
    ),
    "cap": HatStyle("domed", (0.18, 0.28), (0.3, 0.4), ("front_cap_bill",), (0.3, 0.6), tuple(CLOTH_MATERIALS)),
    "simple_helmet": HatStyle("domed", (0.3, 0.5), (0.4, 0.6), ("none",), (0, 0), tuple(HELMET_METALS), helmet=True),
    "straw_hat": HatStyle("flat_top_wide", (0.15, 0.25), (0.25, 0.35), ("flat_circular",), (0.8, 1.5), ("STRAW",)),
    "conical_helmet": HatStyle(
        "conical", (0.35, 0.55), (0.4, 0.55), ("none",), (0, 0), tuple(HELMET_METALS), helmet=True,
    ),
    "knight_helm_visor": HatStyle(
        "conical", (0.35, 0.55), (0.4, 0.55), ("none",), (0, 0), tuple(HELMET_METALS), helmet=True,
    ),
    "barbute_helm": HatStyle("domed", (0.3, 0.5), (0.4, 0.6), ("none",), (0, 0), tuple(HELMET_METALS), helmet=True),
}

HAT_ALIASES = {"fedora": "wide_brim_fedora", "helmet": "simple_helmet", "knight_helm": "knight_helm_visor"}

MIN_CROWN_HEIGHT = 6


def _top_width(s, hat_type: str, base: int) -> int:
    if hat_type == "wizard_hat":
        return 1
    if hat_type == "top_hat":
        return base - s.int_in(0, 2)
    if hat_type == "beanie":
        return math.floor(base * 0.7)
    if hat_type == "straw_hat":
        return base + s.int_in(2, 5)
    if hat_type == "knight_helm_visor":
        return max(3, math.floor(base * 0.5))
    if hat_type == "conical_helmet":
        return max(2, math.floor(base * s.float_in(0.2, 0.4)))
    return base


def brim_rows(p: dict[str, Any]) -> int:
    """Rows the brim or bill hangs below the crown base."""
    if p["brim"] in ("flat_circular", "downward_curved"):
        return p["brim_thickness"] + p["brim_droop"]
    if p["brim"] == "front_cap_bill":
        return p["bill_rows"]
    return 0


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    grid = ctx.grid
    hat_type = s.choose_known(opts.sub_type, list(HAT_STYLES), HAT_ALIASES, "hat type")
    style = HAT_STYLES[hat_type]
    p: dict[str, Any] = {"hat_type": hat_type, "sub_type": opts.sub_type or hat_type, "helmet": style.helmet}
    p["crown"] = style.crown
    p["material"] = s.material(opts.material, list(style.materials), label="hat material")
    crown_h = s.int_in(grid.height * style.height[0], grid.height * style.height[1])
    base = s.int_in(grid.width * style.width[0], grid.width * style.width[1])
    p["base_width"] = base
    p["top_width"] = _top_width(s, hat_type, base)

    p["brim"] = brim = s.choose(list(style.brims))
    ext = 0
    if brim != "none":
        ext = math.floor(base * s.float_in(*style.extension))
        # Brims stop at the padding on either side
        ext = min(ext, grid.width - 1 - grid.padding - grid.center_x - base // 2)
    p["brim_extension"] = ext
    p["brim_thickness"] = s.int_in(1, 3)
    p["brim_droop"] = math.floor(ext * 0.15) if brim == "downward_curved" else 0
    p["bill_length"] = ext + math.floor(base * 0.2) if brim == "front_cap_bill" else 0
    p["bill_rows"] = max(2, p["bill_length"] // 2) if brim == "front_cap_bill" else 0

    overrun = crown_h + brim_rows(p) - grid.usable_height
    if overrun > 0:
        crown_h = max(MIN_CROWN_HEIGHT, crown_h - overrun)
        logger.debug("Hat overran by %d rows, crown now %d", overrun, crown_h)
    p["crown_height"] = crown_h
    p["top"] = grid.padding + (grid.usable_height - crown_h - brim_rows(p)) // 2
    p["bend"] = 0
    if hat_type == "wizard_hat" and crown_h > 15:
        p["bend"] = s.sign() * max(1, round(base * s.float_in(0.08, 0.2)))

    p["visor"] = "none"
    p["cheeks"] = "none"
    if hat_type == "knight_helm_visor":
        p["visor"] = s.choose(["t_slit", "horizontal_slit"])
        if s.chance(0.5):
            p["cheeks"] = "standard_cheeks"
    elif hat_type == "barbute_helm":
        p["cheeks"] = "extended_cheeks"

    p["decoration"] = "none"
    p["decoration_material"] = None
    p["symbol"] = None
    p["feather_material"] = None
    p["buckle_material"] = None
    if not style.helmet and s.chance(0.6):
        p["decoration"] = s.choose(["band", "feather", "symbol"])
        p["decoration_material"] = s.choose(DECORATION_MATERIALS, exclude=[p["material"]])
    if p["decoration"] == "band":
        p["band_height"] = s.int_in(2, 4)
        if s.chance(0.4):
            p["buckle_material"] = s.choose(BUCKLE_MATERIALS, exclude=[p["decoration_material"]])
    elif p["decoration"] == "feather":
        p["feather_material"] = s.choose(FEATHER_MATERIALS)
        p["feather_side"] = s.sign()
        p["feather_length"] = s.int_in(crown_h * 0.6, crown_h + 5)
        p["feather_width"] = s.int_in(2, 3)
    elif p["decoration"] == "symbol":
        p["symbol"] = s.choose(["circle_badge", "simple_star"])
    return p


def crown_body(p: dict[str, Any]) -> TaperedBody:
    h = p["crown_height"]
    base, top_w = p["base_width"], p["top_width"]
    shape = p["crown"]
    curve = None
    if shape == "conical":
        profile = WidthProfile("power_rise", start=top_w, end=base, exponent=0.85)
        if p["bend"]:
            curve = Curve(abs(p["bend"]), 1 if p["bend"] > 0 else -1, kind="lean", reverse=True)
    elif shape == "cylindrical":
        profile = WidthProfile("linear", start=top_w, end=base)
    elif shape == "flat_top_wide":
        profile = WidthProfile("power_rise", start=top_w, end=base, exponent=0.7)
    elif shape == "soft_beanie":
        profile = WidthProfile("sine_rise", start=top_w, end=base)
    else:
        profile = WidthProfile("dome", end=base, rounding="floor")
    return TaperedBody(h, profile, curve=curve)


def cheek_guard(crown: TaperedBody, p: dict[str, Any], side: int) -> Union | None:
    """Plates hanging off one side of the crown, tapering as they drop."""
    h = p["crown_height"]
    extended = p["cheeks"] == "extended_cheeks"
    start = math.floor(h * 0.25)
    rows = min(h - 1 - start, math.floor(h * (0.6 if extended else 0.45)))
    plate = max(2, math.floor(p["base_width"] * 0.28))
    taper = 0.2 if extended else 0.4
    parts = []
    for i in range(rows):
        row = start + i
        w = max(2, math.floor(plate * (1 - i / max(1, rows) * taper)))
        left, right = crown.row_span(row)
        inset = math.floor(w * 0.15)
        x = left - w + inset if side < 0 else right - inset
        parts.append((Rect(w, 1), x, row))
    return Union(tuple(parts)) if parts else None


@item_generator(
    item_type="hat",
    sub_types=list(HAT_STYLES),
    aliases=HAT_ALIASES,
    description="Cloth hats with brims and decorations, and metal helmets with visors and cheek guards",
)
def plan_hat(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    grid = ctx.grid
    cx = grid.center_x
    top = p["top"]
    h = p["crown_height"]
    crown = crown_body(p)
    crown_sil = crown.at(cx, top)
    base_y = top + h
    palette = ctx.palette(p["material"])

    def draw_crown(ctx: GenerationContext) -> None:
        overlays = []
        if p["helmet"]:
            overlays.append(sphere_rule(cx, top + h * 0.4, p["base_width"] / 2, h / 2, palette))
        elif p["material"] == "STRAW":
            overlays.append(pattern_rule(lambda x, y: (x + 2 * y) % 4 == 0, palette.shadow))
        ctx.draw("crown", crown_sil, palette, outlined=p["helmet"], overlays=overlays, decorations=[p["crown"]])
        if p["hat_type"] == "beanie" and h > 6:
            fold = Window(crown, -grid.width, h - 3, grid.width, h - 1)
            ctx.fill(fold.at(cx, top), palette.shadow)
        ctx.anchors.record("crown_base", cx, base_y, width=p["base_width"])

    def draw_brim(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("crown_base")
        half = anchor["width"] // 2
        if p["brim"] == "front_cap_bill":
            bw = anchor["width"] + 2
            bill = Window(Ellipse(bw / 2, p["bill_rows"]), -bw, 0, bw, p["bill_rows"] - 1)
            ctx.draw("brim", bill.at(anchor.x, anchor.y), palette, decorations=[p["brim"]])
            return
        ring = ArcBand(half + p["brim_extension"], p["brim_thickness"], p["brim_droop"], "concave", inverted=True)
        under = pattern_rule(lambda x, y: y == anchor.y and abs(x - anchor.x) <= half, palette.shadow)
        ctx.draw("brim", ring.at(anchor.x, anchor.y), palette, overlays=[under], decorations=[p["brim"]])

    def draw_visor(ctx: GenerationContext) -> None:
        slit = palette.outline or palette.shadow
        row = math.floor(h * 0.4)
        left, right = crown.row_span(row)
        w = max(2, math.floor((right - left) * 0.7))
        parts = [(Rect(w, 1), (left + right - w) // 2, row)]
        if p["visor"] == "t_slit":
            drop = max(2, math.floor(h * 0.25))
            parts.append((Rect(1 if w < 6 else 2, drop), (left + right) // 2 - (0 if w < 6 else 1), row))
        ctx.fill(Union(tuple(parts)).at(cx, top), slit, clip=crown_sil.contains)

    def draw_cheeks(ctx: GenerationContext) -> None:
        for side, label in ((-1, "left"), (1, "right")):
            guard = cheek_guard(crown, p, side)
            if guard is not None:
                ctx.draw(f"cheek_guard_{label}", guard.at(cx, top), palette, outlined=True, decorations=[p["cheeks"]])

    def draw_band(ctx: GenerationContext) -> None:
        deco = ctx.palette(p["decoration_material"])
        bottom = h - 1 - math.floor(h * 0.15)
        first = max(1, bottom - p["band_height"] + 1)
        band = Window(crown, -grid.width, first, grid.width, bottom)
        ctx.draw("hat_band", band.at(cx, top), deco, decorations=["band"])
        left, right = crown.row_span(first)
        size = bottom - first + 1
        if p["buckle_material"] and right - left > 4 and size > 1:
            buckle = ctx.palette(p["buckle_material"])
            ctx.draw("buckle", Rect(size, size).at(cx + left + math.floor((right - left) * 0.1), top + first), buckle)

    def draw_feather(ctx: GenerationContext) -> None:
        side = p["feather_side"]
        fw = p["feather_width"]
        row = math.floor(h * 0.35)
        left, right = crown.row_span(row)
        bx = cx + (right - 1 if side > 0 else left)
        by = top + row
        length = min(p["feather_length"], by - grid.padding)
        room = (grid.width - grid.padding - 1 - bx if side > 0 else bx - grid.padding) - fw // 2 - 1
        lean = max(0, min(math.floor(length * 0.4), room))
        if length < 3:
            logger.debug("No room for a feather above row %d", by)
            return
        profile = WidthProfile("limb", start=fw + 1, amplitude=0.7)
        plume = TaperedBody(length, profile, Curve(lean, side, kind="lean", reverse=True))
        feather = ctx.palette(p["feather_material"])
        barbs = pattern_rule(lambda x, y: (y - side * x) % 3 == 0, feather.shadow)
        ctx.draw("feather", plume.at(bx, by - length), feather, overlays=[barbs], decorations=["feather"])

    def draw_symbol(ctx: GenerationContext) -> None:
        deco = ctx.palette(p["decoration_material"])
        size = max(4, math.floor(p["base_width"] * 0.3))
        sy = top + math.floor(h * 0.55)
        if p["symbol"] == "circle_badge":
            badge = Disc(size / 2)
        else:
            half = size // 2
            badge = Union(
                ((Rect(size, 1), -half, 0), (Rect(1, size), 0, -half), (Saltire(max(1, size // 3), 1), 0, 0))
            )
        ctx.draw("symbol", badge.at(cx, sy), deco, outlined=size >= 5, clip=crown_sil.contains, decorations=[p["symbol"]])

    plan = ComponentPlan("hat", [], _name, _describe)
    plan.add("crown", draw_crown, description=f"{p['crown']} crown recording the base anchor")
    if p["brim"] != "none":
        plan.add("brim", draw_brim, "crown", description=p["brim"])
    if p["cheeks"] != "none":
        plan.add("cheek_guards", draw_cheeks, "crown")
    if p["visor"] != "none":
        plan.add("visor", draw_visor, "crown", *(["cheek_guards"] if p["cheeks"] != "none" else []))
    if p["decoration"] == "band":
        plan.add("band", draw_band, "crown")
    elif p["decoration"] == "feather":
        plan.add("feather", draw_feather, "crown")
    elif p["decoration"] == "symbol":
        plan.add("symbol", draw_symbol, "crown")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['material']).name} {title_case(p['hat_type'])}"
    if p["visor"] != "none":
        name += f" with {title_case(p['visor'])}"
    if p["cheeks"] != "none":
        name += f" ({title_case(p['cheeks'])})"
    if p["decoration"] != "none":
        name += f" with {ctx.palette(p['decoration_material']).name} {title_case(p['decoration'])}"
        if p["symbol"]:
            name += f" ({title_case(p['symbol'])})"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    deco = p["decoration_material"]
    feather = p["feather_material"]
    return {
        "hatType": p["hat_type"],
        "subType": p["sub_type"],
        "category": "helmet" if p["helmet"] else "hat",
        "crownShape": p["crown"],
        "brimShape": p["brim"],
        "mainMaterial": p["material"].lower(),
        "brimMaterial": p["material"].lower() if p["brim"] != "none" else None,
        "visorType": p["visor"],
        "cheekGuardType": p["cheeks"],
        "helmetFeatureMaterial": p["material"].lower() if p["helmet"] else None,
        "decorationType": p["decoration"],
        "decorationMaterial": deco.lower() if deco else None,
        "symbolShape": p["symbol"],
        "dimensions": {
            "crownHeight": p["crown_height"],
            "crownBaseWidth": p["base_width"],
            "crownTopWidth": p["top_width"],
            "brimWidthExtension": p["brim_extension"],
            "billLength": p["bill_length"],
            "featherLength": p.get("feather_length"),
        },
        "colors": {
            "main": palette_colors(ctx.palette(p["material"])),
            "decoration": palette_colors(ctx.palette(deco)) if deco else None,
            "feather": palette_colors(ctx.palette(feather)) if feather else None,
            "buckle": palette_colors(ctx.palette(p["buckle_material"])) if p["buckle_material"] else None,
        },
    }
