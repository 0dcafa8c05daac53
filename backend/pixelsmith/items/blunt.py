"""Blunt weapon generator: maces, morningstars, clubs and hammers on a shared handle."""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.palette import Palette
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import pattern_rule, row_rule, sphere_rule
from pixelsmith.engine.shapes import (
    ArcBand,
    Diamond,
    Disc,
    Ellipse,
    PolarFlanged,
    Rect,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
    Window,
)
from pixelsmith.items.parts import palette_colors, wood_grain
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

WEAPON_TYPES = ["hammer", "mace", "club", "morningstar"]
HANDLE_MATERIALS = ["WOOD", "IRON", "STEEL", "DARK_STEEL", "BONE"]
HEAD_MATERIALS = ["IRON", "STEEL", "DARK_STEEL", "BRONZE", "OBSIDIAN", "BONE", "STONE"]
STUD_MATERIALS = ["IRON", "STEEL", "OBSIDIAN", "BONE", "GOLD"]
SPIKE_MATERIALS = ["IRON", "STEEL", "BONE", "OBSIDIAN"]
HANDLE_STYLES = ["plain", "wrapped", "banded"]
POMMEL_SHAPES = ["square", "round", "flared"]

MACE_SHAPES = [
    "round_mace", "oval_mace", "blocky_mace", "diamond_flanged_mace", "bladed_flanged_mace", "star_flanged_mace",
]
FACE_STYLES = ["flat_wide", "double_face", "none", "rounded_face"]
PEEN_STYLES = ["none", "pick", "rounded_peen", "flat_peen", "claw_peen", "spherical_peen"]
CLUB_STYLES = ["baseball_bat", "spiked_club"]

MIN_HANDLE_LENGTH = 25
MIN_FITTED_HANDLE = 12


def _max_handle_base(ctx: GenerationContext) -> int:
    return ctx.grid.height - ctx.grid.padding * 2 - 8


def _sample_head(ctx: GenerationContext, kind: str, handle_thickness: int) -> dict[str, Any]:
    s = ctx.sampler
    if kind == "hammer":
        head = {
            "width": s.int_in(10, 18),
            "height": s.int_in(5, 9),
            "face_style": s.choose(FACE_STYLES),
            "peen_style": s.choose(PEEN_STYLES),
            "face_extension": s.int_in(1, 3),
        }
        if head["face_style"] == "double_face":
            head["peen_style"] = "none"
        w = head["width"]
        if head["peen_style"] == "pick":
            head["peen_length"] = s.int_in(w * 0.5, w)
        elif head["peen_style"] == "flat_peen":
            head["peen_length"] = max(1, s.int_in(w * 0.2, w * 0.4))
        elif head["peen_style"] == "claw_peen":
            head["peen_length"] = s.int_in(w * 0.4, w * 0.7)
        head["extent"] = head["height"]
        head["center_offset"] = head["height"] // 2
    elif kind == "mace":
        shape = s.choose(MACE_SHAPES)
        width = s.int_in(9, 16)
        height = s.int_in(11, 18) if shape == "oval_mace" else width + s.int_in(-1, 1)
        flanged = "flanged" in shape
        studs = not flanged and s.chance(0.65)
        head = {
            "shape": shape,
            "width": width,
            "height": height,
            "flanges": s.int_in(4, 8) if flanged else 0,
            "studs": s.int_in(6, 12) if studs else 0,
            "stud_material": s.choose(STUD_MATERIALS) if studs else None,
            "extent": height,
            "center_offset": height // 2,
        }
        if studs:
            head["stud_angles"] = [s.float_in(0, 2 * math.pi) for _ in range(head["studs"])]
            head["stud_radii"] = [s.float_in(0.7, 0.95) for _ in range(head["studs"])]
    elif kind == "club":
        base = _max_handle_base(ctx)
        style = s.choose(CLUB_STYLES)
        length = s.int_in(math.floor(base * 0.40), math.floor(base * 0.60))
        head = {
            "style": style,
            "length": length,
            "tip_width": handle_thickness + s.int_in(5, 10),
            "spike_material": s.choose(SPIKE_MATERIALS) if style == "spiked_club" else None,
            "spike_every": s.int_in(3, 5),
            "spike_length": s.int_in(2, 3),
            "extent": length,
            "center_offset": 0,
        }
    else:
        radius = s.int_in(5, 9)
        spike = s.int_in(3, 5)
        head = {
            "ball_radius": radius,
            "spike_length": spike,
            "spikes": s.int_in(8, 16),
            "extent": radius * 2 + spike,
            "center_offset": radius,
        }
    return head


def hammer_parts(head: dict[str, Any]) -> list[tuple[str, ShapeSpec, int, int]]:
    """Hammer pieces as (name, spec, dx, dy) relative to the head centre."""
    w, h = head["width"], head["height"]
    left, top = -(w // 2), -(h // 2)
    right = left + w
    ext = head["face_extension"]
    parts: list[tuple[str, ShapeSpec, int, int]] = [("head_block", Rect(w, h), left, top)]

    face = head["face_style"]
    if face in ("flat_wide", "double_face"):
        parts.append(("face", Rect(ext, h), left - ext, top))
    if face == "double_face":
        parts.append(("face_right", Rect(ext, h), right, top))
    elif face == "rounded_face":
        r = ext + 1
        parts.append(("face", Window(Ellipse(r, h / 2), -r, -h, -1, h), left, 0))

    peen = head["peen_style"]
    if peen == "pick":
        base = max(1, math.floor(h * 0.4))
        parts.append(("peen", Window(Diamond(head["peen_length"], base / 2), 0, -h, w, h), right, 0))
    elif peen in ("rounded_peen", "spherical_peen"):
        r = max(1, math.floor(h / (2.2 if peen == "spherical_peen" else 3)))
        parts.append(("peen", Window(Disc(r), 0, -r, r, r), right - 1, 0))
    elif peen == "flat_peen":
        ph = max(1, math.floor(h * 0.8))
        parts.append(("peen", Rect(head["peen_length"], ph), right, -(ph // 2)))
    elif peen == "claw_peen":
        length = head["peen_length"]
        thickness = max(1, math.floor(h * 0.2))
        spacing = math.floor(h * 0.3)
        drop = max(1, math.floor(thickness * 1.5))
        claw = Window(ArcBand(length, thickness, drop, style="ellipse", inverted=True), 0, 0, length, drop + thickness)
        for i, dy in enumerate((-(spacing // 2), spacing // 2)):
            parts.append((f"claw_{i}", claw, right, dy - thickness // 2 - drop // 2))
    return parts


def club_body(head: dict[str, Any], handle_thickness: int) -> TaperedBody:
    """Club head drawn downward from its top; widest at the top."""
    profile = WidthProfile(
        "power_rise",
        start=handle_thickness,
        end=head["tip_width"],
        exponent=0.6,
        tip_rows=3 if head["length"] > 3 else 0,
        rounding="floor",
        minimum=handle_thickness,
        reverse=True,
    )
    return TaperedBody(head["length"], profile)


@item_generator(
    item_type="blunt_weapon",
    sub_types=WEAPON_TYPES,
    description="Maces, morningstars, clubs and hammers",
)
def plan_blunt_weapon(ctx: GenerationContext) -> ComponentPlan:
    s = ctx.sampler
    opts = ctx.options
    kind = s.choose_known(opts.sub_type, WEAPON_TYPES, label="blunt weapon type")

    handle_material = s.material(opts.haft_material, HANDLE_MATERIALS, label="handle material")
    thickness = s.int_in(2, 4)
    handle_style = s.choose(HANDLE_STYLES)
    pommel = s.choose(POMMEL_SHAPES) if s.chance(0.65) else None
    pommel_material = s.choose(["IRON", "STEEL", "BRONZE", handle_material]) if pommel else None
    pommel_extra = s.int_in(1, 4)
    pommel_flare = s.int_in(3, 5)

    if opts.material:
        head_material = s.material(opts.material, HEAD_MATERIALS, label="head material")
    elif kind == "club" and s.chance(0.7):
        head_material = handle_material
    else:
        allowed = [m for m in HEAD_MATERIALS if m != "STONE" or kind in ("club", "hammer")]
        head_material = s.choose(allowed)
    if not opts.material and kind == "club" and handle_material != "WOOD" and s.chance(0.5):
        head_material = "WOOD"

    head = _sample_head(ctx, kind, thickness)

    pommel_h = 0
    if pommel == "flared":
        pommel_h = pommel_flare
    elif pommel:
        pommel_h = max(2, math.floor(thickness * 1.3))
    minimum = MIN_HANDLE_LENGTH + (10 if kind in ("hammer", "morningstar") else 5)
    possible = _max_handle_base(ctx) - head["extent"] - pommel_h - ctx.grid.padding
    length = s.int_in(max(minimum, 20), max(minimum + 15, possible))
    overrun = head["extent"] + length + pommel_h - ctx.grid.usable_height
    if overrun > 0:
        length = max(MIN_FITTED_HANDLE, length - overrun)
        logger.debug("Blunt weapon overran by %d rows, handle now %d", overrun, length)

    total = head["extent"] + length + pommel_h
    top = max(ctx.grid.padding, math.floor((ctx.grid.height - total) / 2))
    cx = ctx.grid.center_x
    handle_top = top + head["extent"] if kind == "club" else top + head["center_offset"]

    ctx.params.update({
        "kind": kind,
        "sub_type": opts.sub_type or kind,
        "handle_material": handle_material,
        "handle_length": length,
        "handle_thickness": thickness,
        "handle_style": handle_style,
        "pommel": pommel,
        "pommel_material": pommel_material,
        "head_material": head_material,
        "head": head,
    })

    handle_palette = ctx.palette(handle_material)
    head_palette = ctx.palette(head_material)

    def draw_handle(ctx: GenerationContext) -> None:
        if handle_style != "plain" and length > 10:
            profile = WidthProfile(
                "shoulder", start=thickness, split=0.7, amplitude=1 / thickness, rounding="floor", minimum=2
            )
        else:
            profile = WidthProfile("constant", start=thickness)
        body = TaperedBody(length, profile)
        overlays = []
        if handle_material == "WOOD":
            overlays.append(pattern_rule(wood_grain(handle_top, 2), handle_palette.shadow))
        if handle_style == "wrapped":
            wrap = ctx.palette("LEATHER")
            overlays.append(row_rule({handle_top + r: wrap.shadow for r in range(1, length, 2)}))
        ctx.draw("handle", body.at(cx, handle_top), handle_palette, overlays=overlays, decorations=[handle_style])
        if handle_style == "banded":
            band_palette = ctx.palette(pommel_material or "IRON")
            for r in range(length // 4, length, max(4, length // 4)):
                ctx.draw(f"handle_band_{r}", Rect(thickness + 2, 1).at(cx - (thickness + 2) // 2, handle_top + r), band_palette)
        ctx.anchors.record("handle_top", cx, handle_top, thickness=thickness)
        ctx.anchors.record("handle_bottom", cx, handle_top + length, thickness=thickness)

    def draw_pommel(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("handle_bottom")
        palette = ctx.palette(pommel_material)
        if pommel == "flared":
            spec: ShapeSpec = TaperedBody(
                pommel_flare, WidthProfile("sine_rise", start=thickness, end=thickness + 4, rounding="floor")
            )
            ctx.draw("pommel", spec.at(anchor.x, anchor.y), palette)
            return
        width = thickness + pommel_extra
        if pommel == "round":
            ctx.draw("pommel", Ellipse(width / 2, pommel_h / 2).at(anchor.x, anchor.y + pommel_h // 2), palette)
        else:
            ctx.draw("pommel", Rect(width, pommel_h).at(anchor.x - width // 2, anchor.y), palette)

    def draw_head(ctx: GenerationContext) -> None:
        anchor = ctx.anchor("handle_top")
        ax, ay = anchor.x, anchor.y
        if kind == "hammer":
            for name, spec, dx, dy in hammer_parts(head):
                ctx.draw(name, spec.at(ax + dx, ay + dy), head_palette)
        elif kind == "mace":
            _draw_mace(ctx, head, ax, ay, head_palette)
        elif kind == "morningstar":
            r = head["ball_radius"]
            spikes = PolarFlanged(r - 1, head["spikes"], head["spike_length"], 2.0, style="star")
            ctx.draw("spikes", spikes.at(ax, ay), head_palette)
            ball = Disc(r)
            ctx.draw("ball", ball.at(ax, ay), head_palette, overlays=[sphere_rule(ax, ay, r, r, head_palette)])
        else:
            body = club_body(head, anchor["thickness"])
            club_top = ay - head["length"]
            ctx.draw("club_head", body.at(ax, club_top), head_palette, decorations=[head["style"]])
            if head["spike_material"]:
                parts = []
                spike_len = head["spike_length"]
                for row in range(head["length"]):
                    if not (head["length"] * 0.1 < row < head["length"] * 0.9) or row % head["spike_every"]:
                        continue
                    left, right = body.row_span(row)
                    parts.append((Rect(spike_len, 1), left - spike_len, row))
                    parts.append((Rect(spike_len, 1), right, row))
                if parts:
                    ctx.draw("spikes", Union(tuple(parts)).at(ax, club_top), ctx.palette(head["spike_material"]))

    plan = ComponentPlan("blunt_weapon", [], _name, _describe)
    plan.add("handle", draw_handle, description="Handle with grain, wrap or bands")
    if pommel:
        plan.add("pommel", draw_pommel, "handle")
    plan.add("head", draw_head, "handle", description=f"{kind} head over the handle top")
    return plan


def _draw_mace(ctx: GenerationContext, head: dict[str, Any], ax: int, ay: int, palette: Palette) -> None:
    shape = head["shape"]
    w, h = head["width"], head["height"]
    decorations = ["studs"] if head["studs"] else []
    if shape in ("round_mace", "oval_mace"):
        rx, ry = w // 2, h // 2
        ctx.draw(
            "mace_head",
            Ellipse(rx, ry, tolerance=1.05).at(ax, ay),
            palette,
            overlays=[sphere_rule(ax, ay, rx, ry, palette)],
            decorations=decorations,
        )
    elif "flanged" in shape:
        core = max(2, math.floor(min(w, h) * 0.25))
        length = math.floor((min(w, h) - core * 2) / 2.2)
        flanges = PolarFlanged(
            core, head["flanges"], length, max(1, math.floor(core * 0.8)), style=shape.split("_")[0]
        )
        ctx.draw("mace_head", flanges.at(ax, ay), palette)
    else:
        ctx.draw("mace_head", Rect(w, h).at(ax - w // 2, ay - h // 2), palette, decorations=decorations)

    if head["studs"]:
        stud_palette = ctx.palette(head["stud_material"])
        if shape == "blocky_mace":
            x0, y0 = ax - w // 2, ay - h // 2
            edge = [(x0 + i, y0) for i in range(0, w, 3)] + [(x0 + i, y0 + h - 1) for i in range(1, w, 3)]
            edge += [(x0, y0 + j) for j in range(2, h - 1, 3)] + [(x0 + w - 1, y0 + j) for j in range(2, h - 1, 3)]
            points = edge[: head["studs"]]
        else:
            points = [
                (ax + round(math.cos(a) * w / 2 * k), ay + round(math.sin(a) * h / 2 * k))
                for a, k in zip(head["stud_angles"], head["stud_radii"])
            ]
        for x, y in points:
            ctx.fill(Disc(0.5).at(x, y), stud_palette.highlight)


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    kind, head = p["kind"], p["head"]
    mat = ctx.palette(p["head_material"]).name
    if kind == "hammer":
        name = f"{mat} Hammer"
        if head["face_style"] not in ("none", "flat_wide"):
            name += f" ({title_case(head['face_style'])})"
        if head["peen_style"] != "none":
            name += f" with {title_case(head['peen_style'])} Peen"
    elif kind == "mace":
        shape = head["shape"].replace("_mace", "").replace("_flanged", " flanged")
        name = f"{mat} {title_case(shape.replace(' ', '_'))} Mace"
        if head["studs"]:
            name += " (Studded)"
    elif kind == "club":
        name = f"{mat} Club" + (" (Spiked)" if head["style"] == "spiked_club" else "")
    else:
        name = f"{mat} Morningstar"
    if p["pommel"]:
        name += f" with {title_case(p['pommel'])} Pommel"
    return name


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    head = {k: v for k, v in p["head"].items() if k not in ("stud_angles", "stud_radii")}
    details = {"".join(w.title() if i else w for i, w in enumerate(k.split("_"))): v for k, v in head.items()}
    return {
        "weaponType": p["kind"],
        "subType": p["sub_type"],
        "handle": {
            "material": p["handle_material"].lower(),
            "length": p["handle_length"],
            "thickness": p["handle_thickness"],
            "style": p["handle_style"],
            "hasPommel": p["pommel"] is not None,
            "pommelShape": p["pommel"],
            "colors": palette_colors(ctx.palette(p["handle_material"])),
            "pommelColors": palette_colors(ctx.palette(p["pommel_material"])) if p["pommel"] else None,
        },
        "head": {
            "material": p["head_material"].lower(),
            "details": details,
            "colors": palette_colors(ctx.palette(p["head_material"])),
        },
    }
