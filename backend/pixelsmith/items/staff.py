"""Staff generator: wands, scepters and staves with a topper over the shaft head."""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import gem_rule, pattern_rule, row_rule
from pixelsmith.engine.shapes import (
    Annulus,
    Curve,
    Diamond,
    Disc,
    Patterned,
    Rect,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import GEM_MATERIALS, draw_gem, palette_colors, wood_grain
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

STAFF_TYPES = ["wand", "scepter", "staff"]
SHAFT_MATERIALS = [
    "WOOD", "BONE", "DARK_STEEL", "OBSIDIAN", "SILVER", "GOLD", "ENCHANTED",
    "GEM_RED", "GEM_BLUE", "PURPLE_PAINT", "IVORY", "GREEN_LEAF",
]
ORGANIC_SHAFTS = ["WOOD", "BONE", "IVORY", "GREEN_LEAF"]
DECORATIONS = ["runes", "bands", "spiral_wrap"]
TOPPER_SHAPES = ["orb_gem", "crystal_shard", "crescent_moon", "metal_finial", "twisted_wood"]
TOPPER_GEMS = ["GEM_RED", "GEM_BLUE", "GEM_GREEN", "GEM_PURPLE", "GEM_YELLOW", "GEM_CYAN", "GEM_WHITE", "ENCHANTED", "OBSIDIAN"]
TOPPER_METALS = ["GOLD", "SILVER", "BRONZE", "STEEL", "DARK_STEEL", "OBSIDIAN", "BONE", "IVORY", "GREEN_LEAF"]

# staff type: (shaft length lo, hi as fractions of grid height, thickness lo, hi, topper size lo, hi,
#              decoration chance, grip chance)
STAFF_SIZES: dict[str, tuple[float, float, int, int, int, int, float, float]] = {
    "wand": (0.35, 0.60, 1, 2, 4, 8, 0.4, 0.0),
    "scepter": (0.60, 0.80, 2, 3, 8, 14, 0.6, 0.5),
    "staff": (0.80, 0.875, 2, 4, 6, 12, 0.7, 0.7),
}

MIN_SHAFT_LENGTH = 16


def topper_height(shape: str, size: int, band: int) -> int:
    """Rows a topper occupies above the shaft head."""
    if shape == "orb_gem":
        return max(3, math.floor(size * 0.8)) * 2 + 2
    if shape == "crystal_shard":
        return max(5, size + 1)
    if shape == "crescent_moon":
        return max(4, math.floor(size * 0.8)) + 1 + max(1, math.floor(band * 0.6))
    if shape == "metal_finial":
        return max(5, size + 2)
    return max(6, size + 3)


def _shaft_shape(s, staff_type: str, material: str) -> str:
    if material not in ORGANIC_SHAFTS:
        return "straight"
    if staff_type == "staff":
        return s.choose(["straight", "slightly_curved", "gnarled"])
    if staff_type == "scepter" and material == "BONE":
        return "straight"
    return s.choose(["straight", "slightly_curved"])


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    grid = ctx.grid
    staff_type = s.choose_known(opts.sub_type, STAFF_TYPES, label="staff type")
    len_lo, len_hi, t_lo, t_hi, size_lo, size_hi, deco_chance, grip_chance = STAFF_SIZES[staff_type]
    p: dict[str, Any] = {"staff_type": staff_type, "sub_type": opts.sub_type or staff_type}
    p["shaft_material"] = shaft = s.material(opts.material, SHAFT_MATERIALS, label="shaft material")
    length = s.int_in(grid.height * len_lo, grid.height * len_hi)
    p["thickness"] = s.int_in(t_lo, t_hi)
    p["shape"] = _shaft_shape(s, staff_type, shaft)
    p["curve_phase"] = s.float_in(3, 5) if p["shape"] == "gnarled" else s.float_in(2, 4)
    p["knot_every"] = s.int_in(4, 8)

    p["decoration"] = s.choose(DECORATIONS) if s.chance(deco_chance) else "none"
    p["decoration_material"] = None
    if p["decoration"] != "none":
        p["decoration_material"] = s.choose(
            ["GOLD", "SILVER", "ENCHANTED", "OBSIDIAN" if shaft == "WOOD" else "WOOD", "LEATHER", "BRONZE"]
        )
    p["band_every"] = s.int_in(8, 15)
    p["rune_every"] = s.int_in(7, 12)

    p["has_grip"] = s.chance(grip_chance)
    p["grip_fraction"] = s.float_in(0.2, 0.4)
    p["grip_material"] = None
    if p["has_grip"]:
        p["grip_material"] = s.material(
            opts.grip_material, ["LEATHER", "DARK_STEEL", "IRON", "BONE" if shaft == "WOOD" else "WOOD"],
            label="grip material",
        )

    p["topper"] = topper = s.choose(TOPPER_SHAPES)
    p["topper_size"] = s.int_in(size_lo, size_hi)
    p["crescent_band"] = s.int_in(2, 3)
    p["gem_material"] = None
    p["inset_gem"] = None
    if topper in ("orb_gem", "crystal_shard"):
        p["gem_material"] = p["topper_material"] = s.choose(TOPPER_GEMS)
    else:
        if topper == "twisted_wood" and s.chance(0.8):
            material = "WOOD"
        else:
            material = s.choose(TOPPER_METALS)
        if topper == "twisted_wood" and shaft == "GREEN_LEAF" and s.chance(0.7):
            material = "GREEN_LEAF"
        p["topper_material"] = material
        if s.chance(0.5):
            p["inset_gem"] = s.choose(GEM_MATERIALS[:5])

    head = topper_height(topper, p["topper_size"], p["crescent_band"])
    overrun = head + length - grid.usable_height
    if overrun > 0:
        length = max(MIN_SHAFT_LENGTH, length - overrun)
        logger.debug("Staff overran by %d rows, shaft now %d", overrun, length)
    p["shaft_length"] = length
    p["grip_length"] = math.floor(length * p["grip_fraction"]) if p["has_grip"] else 0
    p["shaft_top"] = max(grid.padding, (grid.height - head - length) // 2) + head
    return p


def shaft_body(p: dict[str, Any]) -> TaperedBody:
    curve = None
    if p["shape"] != "straight":
        amount = 1.5 if p["shape"] == "gnarled" else 1.0
        curve = Curve(amount, 1, p["curve_phase"])
    return TaperedBody(p["shaft_length"], WidthProfile("constant", start=p["thickness"]), curve=curve)


@item_generator(
    item_type="staff",
    sub_types=STAFF_TYPES,
    description="Wands, scepters and staves with gem, crescent, finial or wooden toppers",
)
def plan_staff(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    cx = ctx.grid.center_x
    top = p["shaft_top"]
    length = p["shaft_length"]
    t = p["thickness"]
    body = shaft_body(p)
    shaft_palette = ctx.palette(p["shaft_material"])

    def draw_shaft(ctx: GenerationContext) -> None:
        overlays = []
        if p["shaft_material"] == "WOOD":
            overlays.append(pattern_rule(wood_grain(top, 2), shaft_palette.shadow))
        ctx.draw("shaft", body.at(cx, top), shaft_palette, overlays=overlays, decorations=[p["shape"]])
        if p["shape"] == "gnarled":
            knots = []
            for row in range(p["knot_every"], length - 2, p["knot_every"]):
                _, right = body.row_span(row)
                knots.append((Rect(1, 2), right, row))
            if knots:
                ctx.fill(Union(tuple(knots)).at(cx, top), shaft_palette.shadow)
        ctx.anchors.record("shaft_head", cx, top, thickness=t)

    def draw_decoration(ctx: GenerationContext) -> None:
        palette = ctx.palette(p["decoration_material"])
        kind = p["decoration"]
        inner = range(6, length - 5)
        if kind == "bands":
            parts = []
            for row in inner:
                if row % p["band_every"] < 2:
                    left, right = body.row_span(row)
                    parts.append((Rect(right - left + 2, 1), left - 1, row))
            if parts:
                ctx.draw("bands", Union(tuple(parts)).at(cx, top), palette, decorations=[kind])
        elif kind == "runes" and t > 1:
            parts = []
            for row in inner:
                if row % p["rune_every"] == 0:
                    left, right = body.row_span(row)
                    parts.append((Rect(1, 2), (left + right) // 2 - 1, row))
            if parts:
                ctx.fill(Union(tuple(parts)).at(cx, top), palette.highlight)
        elif kind == "spiral_wrap":
            wrap = Patterned(body, period=max(2, t) + 2, duty=1, weight_x=1, weight_y=1)
            ctx.fill(wrap.at(cx, top), palette.base)

    def draw_grip(ctx: GenerationContext) -> None:
        grip = ctx.palette(p["grip_material"])
        rows = p["grip_length"]
        start = math.floor((length - rows) * 0.7)
        window = Window(body, -ctx.grid.width, start, ctx.grid.width, start + rows - 1)
        wraps = row_rule({top + r: grip.shadow for r in range(start, start + rows, 3)})
        ctx.draw("grip", window.at(cx, top), grip, overlays=[wraps])

    def draw_topper(ctx: GenerationContext) -> None:
        head = ctx.anchor("shaft_head")
        ax, ay = head.x, head.y
        shape = p["topper"]
        size = p["topper_size"]
        palette = ctx.palette(p["topper_material"])
        if shape == "orb_gem":
            r = max(3, math.floor(size * 0.8))
            oy = ay - r - 1
            ctx.draw("topper", Disc(r).at(ax, oy), palette, overlays=[gem_rule(ax, oy, r, r, palette)])
        elif shape == "crystal_shard":
            h = max(5, size + 1)
            w = max(3, math.floor(size * 0.7))
            oy = ay - (h + 1) // 2
            shard = Diamond(w / 2, (h - 1) / 2)
            ctx.draw("topper", shard.at(ax, oy), palette, overlays=[gem_rule(ax, oy, w / 2, h / 2, palette)])
        elif shape == "crescent_moon":
            outer = max(4, math.floor(size * 0.8))
            band = p["crescent_band"]
            inner = max(1, outer - band)
            conn_h = max(1, math.floor(band * 0.6))
            conn_w = max(1, math.floor(band * 0.8))
            ctx.draw("connector", Rect(conn_w, conn_h).at(ax - conn_w // 2, ay - conn_h), palette)
            oy = ay - conn_h - outer - 1
            cup = Window(Annulus(outer, inner), -outer, 0, outer, outer)
            ctx.draw("topper", cup.at(ax, oy), palette, decorations=[shape])
            if p["inset_gem"] and band > 1:
                size = max(1, band - 1)
                draw_gem(ctx, "inset_gem", ax, ay - conn_h - 1, size, size, ctx.palette(p["inset_gem"]))
        elif shape == "metal_finial":
            h = max(5, size + 2)
            base = max(2, math.floor(size * 0.5))
            profile = WidthProfile("bulge", start=t, peak=base + 1, split=0.45, exponent=1.2, reverse=True)
            ctx.draw("topper", TaperedBody(h, profile).at(ax, ay - h), palette, decorations=[shape])
            if p["inset_gem"]:
                gem = max(2, math.floor(base * 0.6))
                draw_gem(ctx, "inset_gem", ax, ay - h + math.floor(h * 0.6), gem, gem, ctx.palette(p["inset_gem"]))
        else:
            h = max(6, size + 3)
            base = max(2, math.floor(size * 0.5))
            profile = WidthProfile("linear", start=max(1, math.ceil(base * 0.25)), end=base)
            twist = TaperedBody(h, profile, curve=Curve(1.0, 1, 1.5))
            strands = pattern_rule(lambda x, y: (x + y) % 3 == 0, palette.shadow)
            ctx.draw("topper", twist.at(ax, ay - h), palette, overlays=[strands], decorations=[shape])
            if p["inset_gem"]:
                draw_gem(ctx, "inset_gem", ax, ay - h // 2, 2, 2, ctx.palette(p["inset_gem"]))

    plan = ComponentPlan("staff", [], _name, _describe)
    plan.add("shaft", draw_shaft, description="Shaft recording the head anchor")
    if p["decoration"] != "none":
        plan.add("decoration", draw_decoration, "shaft")
    if p["has_grip"] and p["grip_length"] > 0:
        plan.add("grip", draw_grip, "shaft")
    plan.add("topper", draw_topper, "shaft", description=f"{p['topper']} over the shaft head")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['shaft_material']).name} {title_case(p['staff_type'])}"
    if p["decoration"] != "none":
        name += f" ({title_case(p['decoration'])})"
    topper = p["topper"]
    if p["gem_material"]:
        gem = title_case(p["gem_material"].replace("GEM_", ""))
        name += f" with {gem} {'Orb' if topper == 'orb_gem' else 'Crystal Shard'}"
    else:
        name += f" with {ctx.palette(p['topper_material']).name} {title_case(topper)}"
        if p["inset_gem"]:
            name += " (Inlaid)"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    deco = p["decoration_material"]
    grip = p["grip_material"]
    return {
        "staffType": p["staff_type"],
        "subType": p["sub_type"],
        "shaft": {
            "material": p["shaft_material"].lower(),
            "length": p["shaft_length"],
            "thickness": p["thickness"],
            "shape": p["shape"],
            "decoration": p["decoration"],
            "hasGrip": p["has_grip"],
            "gripLength": p["grip_length"],
            "colors": palette_colors(ctx.palette(p["shaft_material"])),
            "decorationColors": palette_colors(ctx.palette(deco)) if deco else None,
            "gripColors": palette_colors(ctx.palette(grip)) if grip else None,
        },
        "topper": {
            "shape": p["topper"],
            "material": p["topper_material"].lower(),
            "gemMaterial": p["gem_material"].lower().replace("gem_", "") if p["gem_material"] else None,
            "size": p["topper_size"],
            "hasInsetGem": p["inset_gem"] is not None,
            "colors": palette_colors(ctx.palette(p["topper_material"])),
            "insetGemColors": palette_colors(ctx.palette(p["inset_gem"])) if p["inset_gem"] else None,
        },
    }
