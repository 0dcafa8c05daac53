"""Book generator: closed tomes seen flat or angled, with spine, page edges and cover decorations."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import boss_rule, column_rule, gem_rule, row_rule
from pixelsmith.engine.shapes import (
    Annulus,
    Diamond,
    Difference,
    Disc,
    Ellipse,
    PolarFlanged,
    Rect,
    Saltire,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
)
from pixelsmith.items.parts import draw_gem, palette_colors, stroke
from pixelsmith.utils.math_helpers import round_half_up, title_case

logger = logging.getLogger(__name__)

COVER_MATERIALS = [
    "LEATHER", "WOOD", "DARK_STEEL", "OBSIDIAN", "BONE", "ENCHANTED",
    "RED_PAINT", "BLUE_PAINT", "GREEN_PAINT", "BLACK_PAINT", "PURPLE_PAINT", "IVORY",
]
PAGE_COLORS = {"parchment": "PARCHMENT", "paper": "PAPER", "aged_paper": "IVORY"}
SYMBOLS = [
    "circle", "diamond", "star", "spiral", "eye", "single_rune",
    "magic_circle_symbol", "runes_cluster_symbol", "arcane_scribbles_symbol",
]
RUNE_GLYPHS = ["f", "p", "triangle", "x", "z"]
CLUSTER_GLYPHS = ["corner", "diagonal", "tee", "dots"]
PUPIL_MATERIALS = ["OBSIDIAN", "GEM_RED", "GEM_BLUE", "ENCHANTED", "GEM_PURPLE"]
PLATE_MATERIALS = ["LEATHER", "DARK_STEEL", "BRONZE", "SILVER", "GOLD"]


@dataclass(frozen=True)
class BookStyle:
    height: tuple[float, float]  # fractions of the grid height
    aspect: tuple[float, float]  # width as a fraction of the height
    angled_chance: float
    decorations: dict[str, float]


BOOK_STYLES: dict[str, BookStyle] = {
    "tome": BookStyle(
        (0.7, 0.95), (0.55, 0.8), 0.75,
        {"central_symbol": 1, "corner_accents": 1, "border_frame": 1, "book_clasp": 1, "spine_details": 1, "none": 0.55},
    ),
    "grimoire": BookStyle(
        (0.75, 0.95), (0.6, 0.8), 1.0,
        {"central_symbol": 4, "corner_accents": 1, "border_frame": 1, "book_clasp": 1, "spine_details": 1, "none": 0.2},
    ),
    "journal": BookStyle(
        (0.55, 0.75), (0.6, 0.8), 0.4,
        {"central_symbol": 1, "corner_accents": 1, "border_frame": 1, "book_clasp": 3, "spine_details": 1, "none": 0.6},
    ),
}

BOOK_ALIASES = {"spellbook": "grimoire", "book": "tome", "diary": "journal"}


def glyph(kind: str, size: int, thick: int) -> ShapeSpec:
    """Rune glyph inside a ``size`` square with its origin at the top-left."""
    t = max(1, min(thick, size // 2))
    if kind == "f":
        bar = Rect(max(1, size - t - t // 2 - 1), t)
        return Union(((Rect(t, size), 0, 0), (Rect(size - t, t), t, 0), (bar, t, size // 2 - t // 2)))
    if kind == "p":
        half = size // 2
        bowl = ((Rect(size - t, t), t, 0), (Rect(t, half), size - t, 0), (Rect(size - t, t), t, half - t))
        return Union(((Rect(t, size), 0, 0), *bowl))
    if kind == "triangle":
        return Union(((TaperedBody(size, WidthProfile("linear", start=t, end=size)), size // 2, 0),))
    if kind == "x":
        return Union(((Saltire(size // 2, max(1, t - 1)), size // 2, size // 2),))
    if kind == "z":
        diagonal = tuple((stroke(size - t, -(size - 1)), k, size - 1) for k in range(t))
        return Union(((Rect(size, t), 0, 0), (Rect(size, t), 0, size - t), *diagonal))
    if kind == "corner":
        return Union(((Rect(t, size), 0, 0), (Rect(size - t, t), t, 0)))
    if kind == "diagonal":
        return stroke(size - 1, size - 1)
    if kind == "tee":
        return Union(((Rect(size, t), 0, 0), (Rect(t, size - t), size // 2 - t // 2, t)))
    if kind == "dots":
        far = size - t
        return Union(tuple((Rect(t, t), x, y) for x in (0, far) for y in (0, far)))
    raise ValueError(f"Unknown rune glyph: {kind}")


def spiral(size: int) -> Union:
    """Archimedean spiral out to ``size / 1.8`` from the origin."""
    max_r = size / 1.8
    t = max(1, size // 10)
    cells = set()
    for i in range(math.floor(size * 3.5)):
        a = i * 0.1
        r = max_r * 0.05 * a
        if r >= max_r:
            break
        cells.add((round_half_up(r * math.cos(a)) - t // 2, round_half_up(r * math.sin(a)) - t // 2))
    return Union(tuple((Rect(t, t), x, y) for x, y in sorted(cells)))


def magic_circle(size: int) -> Union:
    outer = size // 2
    inner = math.floor(outer * 0.6)
    core = math.floor(inner * 0.5)
    parts: list = [(Annulus(outer, outer - 2), 0, 0), (Annulus(inner, inner - 2), 0, 0)]
    if core > 0:
        parts.append((Annulus(core, core - 1), 0, 0))
    for i in range(8):
        a = i * math.pi / 4
        sx, sy = round_half_up(outer * math.cos(a)), round_half_up(outer * math.sin(a))
        ex, ey = round_half_up((outer + 2) * math.cos(a)), round_half_up((outer + 2) * math.sin(a))
        parts.append((stroke(ex - sx, ey - sy), sx, sy))
    return Union(tuple(parts))


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    grid = ctx.grid
    book_type = s.choose_known(opts.sub_type, list(BOOK_STYLES), BOOK_ALIASES, "book type")
    style = BOOK_STYLES[book_type]
    p: dict[str, Any] = {"book_type": book_type, "sub_type": opts.sub_type or book_type}
    p["cover_material"] = cover = s.material(opts.material, COVER_MATERIALS, label="cover material")
    p["spine_material"] = spine = s.choose([cover, "LEATHER", "DARK_STEEL", "GOLD", "SILVER", "BRONZE"])
    p["page_color"] = s.choose(list(PAGE_COLORS))
    p["angle"] = s.int_in(1, 5) if s.chance(style.angled_chance) else 0

    drawn = s.int_in(grid.height * style.height[0], grid.height * style.height[1])
    height = min(grid.usable_height, drawn)
    if drawn > height:
        logger.debug("Book height %d clamped to %d", drawn, height)
    width = s.int_in(height * style.aspect[0], height * style.aspect[1])
    p["height"], p["width"] = height, width
    p["spine_width"] = max(3, math.floor(width * 0.15)) if p["angle"] else 0
    p["page_thickness"] = max(2, math.floor(p["spine_width"] * 0.8 if p["spine_width"] else width * 0.08))
    usable_width = grid.width - 2 * grid.padding
    p["left"] = grid.padding + (usable_width - width - p["page_thickness"]) // 2
    p["top"] = grid.padding + (grid.usable_height - height) // 2
    page_lines, y = [], 0
    while y < height - 4:
        page_lines.append(y)
        y += s.int_in(3, 5)
    p["page_lines"] = page_lines

    decoration = s.choose_weighted(style.decorations)
    secondary = "none"
    if p["angle"]:
        if decoration != "spine_details" and s.chance(0.7):
            secondary = "spine_details"
        elif decoration == "none":
            decoration = "spine_details"
    elif decoration == "spine_details":
        decoration = "none"
    p["decoration"], p["secondary"] = decoration, secondary

    p["decoration_material"] = None
    p["symbol"] = p["corner_style"] = p["clasp_style"] = None
    if decoration != "none":
        p["decoration_material"] = s.choose(
            ["GOLD", "SILVER", "BRONZE", "OBSIDIAN", "BONE", "ENCHANTED", "STEEL" if cover == "LEATHER" else "LEATHER", "COPPER"]
        )
    if decoration == "central_symbol":
        p["symbol"] = symbol = s.choose(SYMBOLS)
        _sample_symbol(s, p, symbol)
    elif decoration == "corner_accents":
        p["corner_style"] = s.choose(["metal_caps", "flourish"])
    elif decoration == "book_clasp":
        p["clasp_style"] = s.choose(["simple_strap", "ornate_buckle"])
        p["strap_shift"] = s.int_in(-height * 0.1, height * 0.1)
        p["clasp_extra"] = s.int_in(3, 5)
        p["clasp_gem"] = s.choose(["GEM_RED", "GEM_BLUE", "GEM_GREEN", "GEM_PURPLE"])

    p["secondary_material"] = None
    if secondary == "spine_details":
        p["secondary_material"] = s.choose(["GOLD", "SILVER", "BRONZE", "STEEL" if spine == "LEATHER" else "LEATHER"])
    if "spine_details" in (decoration, secondary):
        p["spine_bands"] = s.int_in(3, 6)
        p["spine_plate"] = None
        if s.chance(0.7):
            plate = s.choose(PLATE_MATERIALS)
            p["spine_plate"] = "IRON" if plate == spine else plate
            p["plate_height"] = math.floor(height * s.float_in(0.2, 0.3))
            p["plate_width"] = math.floor(p["spine_width"] * s.float_in(0.65, 0.85))
            p["plate_shift"] = s.int_in(-height * 0.15, height * 0.15)
    return p


def _sample_symbol(s, p: dict[str, Any], symbol: str) -> None:
    if symbol == "eye":
        p["pupil_material"] = s.choose(PUPIL_MATERIALS)
    elif symbol == "single_rune":
        p["rune"] = s.choose(RUNE_GLYPHS)
    elif symbol == "runes_cluster_symbol":
        count = s.int_in(3, 5)
        p["cluster"] = [(s.choose(CLUSTER_GLYPHS), s.float_in(-0.2, 0.2)) for _ in range(count)]
    elif symbol == "arcane_scribbles_symbol":
        p["scribble_seeds"] = [(s.float_in(0, 2 * math.pi), s.float_in(0, 1)) for _ in range(70)]


@item_generator(
    item_type="book",
    sub_types=list(BOOK_STYLES),
    aliases=BOOK_ALIASES,
    description="Closed books, flat or angled, with symbols, frames, clasps and spine bands",
)
def plan_book(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    left, top = p["left"], p["top"]
    height, width, sw = p["height"], p["width"], p["spine_width"]
    cover_x = left + sw
    cover_w = width - sw
    cover_sil = Rect(cover_w, height).at(cover_x, top)
    cover = ctx.palette(p["cover_material"])

    def draw_cover(ctx: GenerationContext) -> None:
        ctx.draw("cover", cover_sil, cover, decorations=[p["book_type"]])
        ctx.anchors.record("cover", cover_x, top, width=cover_w, height=height)

    def draw_spine(ctx: GenerationContext) -> None:
        spine = ctx.palette(p["spine_material"])
        edges = column_rule({left: spine.highlight, left + sw - 1: spine.shadow})
        ctx.draw("spine", Rect(sw, height).at(left, top), spine, overlays=[edges])
        ctx.anchors.record("spine", left, top, width=sw, height=height)

    def draw_pages(ctx: GenerationContext) -> None:
        pages = ctx.palette(PAGE_COLORS[p["page_color"]])
        t = p["page_thickness"]
        x = cover_x + cover_w
        columns = {x: pages.highlight}
        if t > 1:
            columns[x + t - 1] = pages.shadow
        lines = row_rule({top + 2 + y: pages.shadow for y in p["page_lines"]})
        ctx.draw("pages", Rect(t, height - 4).at(x, top + 2), pages, overlays=[column_rule(columns), lines])

    def draw_symbol(ctx: GenerationContext) -> None:
        deco = ctx.palette(p["decoration_material"])
        area = ctx.anchor("cover")
        cx = area.x + area["width"] // 2
        cy = area.y + area["height"] // 2
        size = max(6, math.floor(min(area["width"], area["height"]) * 0.5))
        symbol = p["symbol"]
        clip = cover_sil.contains
        if symbol == "circle":
            r = size // 2
            ctx.draw("symbol", Disc(r).at(cx, cy), deco, overlays=[boss_rule(cx, cy, r, deco)], clip=clip)
        elif symbol == "diamond":
            half_w, half_h = math.floor(size / 1.4), size // 2
            shape = Diamond(half_w, half_h)
            ctx.draw("symbol", shape.at(cx, cy), deco, overlays=[gem_rule(cx, cy, half_w, half_h, deco)], clip=clip)
        elif symbol == "star":
            outer = size // 2
            core = max(1, math.floor(outer * 0.4))
            star = PolarFlanged(core, 5, outer - core, max(2, round_half_up(outer * 0.8)), "star", -math.pi / 2)
            ctx.draw("symbol", star.at(cx, cy), deco, outlined=size >= 8, clip=clip)
        elif symbol == "spiral":
            ctx.fill(spiral(size).at(cx, cy), deco.base, clip=clip)
        elif symbol == "eye":
            ew, eh = math.floor(size * 0.95), math.floor(size * 0.6)
            rim = Difference(Ellipse(ew / 2, eh / 2), ((Ellipse(ew / 2 - 1, eh / 2 - 1), 0, 0),))
            ctx.draw("symbol", rim.at(cx, cy), deco, clip=clip)
            pupil = ctx.palette(p["pupil_material"])
            pw, ph = math.floor(ew * 0.35), math.floor(eh * 0.75)
            draw_gem(ctx, "pupil", cx, cy, pw, ph, pupil, clip=clip)
        elif symbol == "single_rune":
            rs = max(8, size)
            ctx.fill(glyph(p["rune"], rs, 3).at(cx - rs // 2, cy - rs // 2), deco.base, clip=clip)
        elif symbol == "magic_circle_symbol":
            ctx.fill(magic_circle(size).at(cx, cy), deco.base, clip=clip)
        elif symbol == "runes_cluster_symbol":
            count = len(p["cluster"])
            rs = max(3, math.floor(size / 2.2))
            reach = rs * 0.7
            parts = []
            for i, (kind, jitter) in enumerate(p["cluster"]):
                a = i * 2 * math.pi / count + jitter
                ox = round_half_up(reach * math.cos(a)) - rs // 2
                oy = round_half_up(reach * math.sin(a)) - rs // 2
                parts.append((glyph(kind, rs, max(1, rs // 4)), ox, oy))
            ctx.fill(Union(tuple(parts)).at(cx, cy), deco.base, clip=clip)
        else:
            reach = size * 0.4
            marks = {
                (round_half_up(reach * f * math.cos(a)), round_half_up(reach * f * math.sin(a)))
                for a, f in p["scribble_seeds"]
            }
            scribbles = Union(tuple((Rect(1, 1), x, y) for x, y in sorted(marks)))
            ctx.fill(scribbles.at(cx, cy), deco.shadow, clip=clip)

    def draw_corners(ctx: GenerationContext) -> None:
        deco = ctx.palette(p["decoration_material"])
        cs = max(4, math.floor(min(cover_w, height) * 0.25))
        far_x, far_y = cover_w - cs, height - cs
        if p["corner_style"] == "flourish":
            corners = tuple((Disc(cs - 1), x, y) for x in (0, cover_w - 1) for y in (0, height - 1))
        else:
            corners = tuple((Rect(cs, cs), x, y) for x in (0, far_x) for y in (0, far_y))
        ctx.draw("corner_accents", Union(corners).at(cover_x, top), deco, clip=cover_sil.contains)

    def draw_frame(ctx: GenerationContext) -> None:
        deco = ctx.palette(p["decoration_material"])
        bw = max(3, math.floor(min(cover_w, height) * 0.12))
        frame = Difference(Rect(cover_w, height), ((Rect(cover_w - 2 * bw, height - 2 * bw), bw, bw),))
        ctx.draw("border_frame", frame.at(cover_x, top), deco)

    def draw_clasp(ctx: GenerationContext) -> None:
        deco = ctx.palette(p["decoration_material"])
        strap_w = max(4, math.floor(height * 0.15))
        strap_y = top + height // 2 - strap_w // 2 + p["strap_shift"]
        strap_len = math.floor(cover_w * 0.4)
        strap_x = cover_x + cover_w - strap_len - math.floor(cover_w * 0.1)
        ctx.draw("strap", Rect(strap_len, strap_w).at(strap_x, strap_y), deco)
        size = strap_w + p["clasp_extra"]
        clasp_x = strap_x - math.floor(size * 0.5)
        clasp_y = strap_y - (size - strap_w) // 2
        ctx.draw("clasp", Rect(size, size).at(clasp_x, clasp_y), deco, outlined=True, decorations=[p["clasp_style"]])
        if p["clasp_style"] == "ornate_buckle":
            gem = max(2, size // 3)
            draw_gem(ctx, "clasp_gem", clasp_x + size // 2, clasp_y + size // 2, gem, gem, ctx.palette(p["clasp_gem"]))

    def draw_spine_details(ctx: GenerationContext) -> None:
        key = p["decoration_material"] if p["decoration"] == "spine_details" else p["secondary_material"]
        deco = ctx.palette(key or p["spine_material"])
        area = ctx.anchor("spine")
        n = p["spine_bands"]
        band_h = max(2, math.floor(height * 0.07))
        bands = tuple((Rect(sw, band_h), 0, math.floor(height * (0.05 + i * 0.9 / n))) for i in range(n))
        ctx.draw("spine_bands", Union(bands).at(area.x, area.y), deco)
        if p["spine_plate"]:
            plate = ctx.palette(p["spine_plate"])
            pw, ph = max(1, p["plate_width"]), max(1, p["plate_height"])
            px = area.x + sw // 2 - pw // 2
            py = area.y + height // 2 - ph // 2 + p["plate_shift"]
            ctx.draw("spine_plate", Rect(pw, ph).at(px, py), plate, outlined=pw > 2 and ph > 2)

    plan = ComponentPlan("book", [], _name, _describe)
    plan.add("cover", draw_cover, description="Front cover recording the decoration area")
    if sw:
        plan.add("spine", draw_spine, description="Spine visible on angled books")
    plan.add("pages", draw_pages, "cover")
    cover_steps = {
        "central_symbol": draw_symbol,
        "corner_accents": draw_corners,
        "border_frame": draw_frame,
        "book_clasp": draw_clasp,
    }
    if p["decoration"] in cover_steps:
        plan.add(p["decoration"], cover_steps[p["decoration"]], "cover")
    if sw and "spine_details" in (p["decoration"], p["secondary"]):
        plan.add("spine_details", draw_spine_details, "spine")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['cover_material']).name} {title_case(p['book_type'])}"
    if p["angle"] and p["spine_material"] != p["cover_material"]:
        name += f" (Spine: {ctx.palette(p['spine_material']).name})"
    parts = []
    if p["decoration"] not in ("none", "spine_details"):
        part = f"{ctx.palette(p['decoration_material']).name} {title_case(p['decoration'])}"
        if p["symbol"]:
            part += f" ({title_case(p['symbol'].replace('_symbol', ''))})"
        parts.append(part)
    if "spine_details" in (p["decoration"], p["secondary"]):
        key = p["decoration_material"] if p["decoration"] == "spine_details" else p["secondary_material"]
        parts.append(f"{ctx.palette(key or p['spine_material']).name} Spine Details")
    if parts:
        name += " with " + " and ".join(parts)
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    deco = p["decoration_material"]
    secondary = p["secondary_material"]
    return {
        "bookType": p["book_type"],
        "subType": p["sub_type"],
        "coverMaterial": p["cover_material"].lower(),
        "spineMaterial": p["spine_material"].lower(),
        "pageColor": p["page_color"],
        "isClosed": True,
        "perspectiveAngle": p["angle"],
        "width": p["width"],
        "height": p["height"],
        "decoration": {
            "type": p["decoration"],
            "material": deco.lower() if deco else None,
            "symbol": p["symbol"],
            "cornerStyle": p["corner_style"],
            "claspStyle": p["clasp_style"],
        },
        "secondaryDecoration": {
            "type": p["secondary"],
            "material": secondary.lower() if secondary else None,
        } if p["secondary"] != "none" else None,
        "colors": {
            "cover": palette_colors(ctx.palette(p["cover_material"])),
            "spine": palette_colors(ctx.palette(p["spine_material"])),
            "pages": palette_colors(ctx.palette(PAGE_COLORS[p["page_color"]])),
            "decoration": palette_colors(ctx.palette(deco)) if deco else None,
            "secondaryDecoration": palette_colors(ctx.palette(secondary)) if secondary else None,
        },
    }
