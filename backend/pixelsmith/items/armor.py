"""Armor generator: a tapered torso with a neckline, texture, decoration and pauldrons.

The torso records the neckline and shoulder anchors; pauldrons hang from the
shoulders and are clipped at the seam so they cover at most one column of
the torso edge.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pixelsmith.engine.assembler import ComponentPlan
from pixelsmith.engine.attachment import SeamClip, all_of, within_grid
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.palette import Palette
from pixelsmith.engine.registry import item_generator
from pixelsmith.engine.shading import OverlayRule, sphere_rule
from pixelsmith.engine.shapes import (
    Drooped,
    EdgeBand,
    Opening,
    Patterned,
    Rect,
    ShapeSpec,
    TaperedBody,
    Union,
    WidthProfile,
)
from pixelsmith.items.parts import neckline_profile, palette_colors
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

ARMOR_STYLES = [
    "smooth_plate",
    "muscled_plate",
    "leather_vest",
    "chainmail",
    "scale_mail",
    "studded_leather_armor",
    "padded_armor",
]
LEATHER_STYLES = ("leather_vest", "studded_leather_armor", "padded_armor")
MAIL_STYLES = ("chainmail", "scale_mail")
NO_PAULDRON_STYLES = ("leather_vest", "padded_armor")

LEATHER_MATERIALS = [
    "LEATHER",
    "BLACK_LEATHER",
    "WHITE_LEATHER",
    "DARK_BROWN_LEATHER",
    "RED_LEATHER",
    "GREEN_LEATHER",
    "BLUE_LEATHER",
]
CLOTH_MATERIALS = ["CLOTH", "WHITE_PAINT", "BLACK_PAINT"]
MAIL_MATERIALS = ["IRON", "STEEL", "DARK_STEEL", "BRONZE"]
PLATE_MATERIALS = ["STEEL", "IRON", "DARK_STEEL", "BRONZE", "SILVER", "GOLD", "ENCHANTED", "OBSIDIAN"]
PAULDRON_MATERIALS = ["STEEL", "IRON", "DARK_STEEL", "BRONZE"]
DECORATION_MATERIALS = ["GOLD", "SILVER", "BRONZE", "ENCHANTED", "RED_PAINT", "BLUE_PAINT", "BLACK_PAINT", "WHITE_PAINT"]
STUD_MATERIAL = "STEEL"

NECKLINES = ["v_neck", "round_neck", "square_neck"]
PAULDRON_STYLES = ["round_cap", "layered_plate", "spiked_plate"]
DECORATION_TYPES = ["none", "border", "vertical_stripe", "horizontal_band", "cross"]
# style: extra decoration only that style can carry
STYLE_DECORATIONS = {
    "leather_vest": "leather_stitching",
    "studded_leather_armor": "leather_stitching",
    "smooth_plate": "plate_rivets",
    "muscled_plate": "plate_rivets",
    "chainmail": "chainmail_edging",
}
TEXTURES = {
    "muscled_plate": "muscle",
    "chainmail": "chainmail",
    "scale_mail": "scale",
    "studded_leather_armor": "studs",
    "padded_armor": "quilting",
}

PAULDRON_SLOPE = 0.55
PAULDRON_OVERLAP = 1


def torso_body(p: dict[str, Any]) -> TaperedBody:
    """Torso from the shoulders (row 0) to the waist, neckline cut from the top rows."""
    base, taper = p["base_width"], p["waist_taper"]
    profile = WidthProfile("linear", start=base, end=base - taper, minimum=2, even=True)
    depth = p["neckline_depth"]
    opening = Opening(0, depth, neckline_profile(p["neckline"], p["neckline_width"]), margin=2)
    return TaperedBody(p["height"], profile, opening=opening)


# ── Texture overlays, in grid coordinates ──


def muscle_rule(body: TaperedBody, cx: int, top: int, depth: int, palette: Palette) -> OverlayRule:
    """Pectoral outlines above, ab ridges and a centre line below."""
    length = body.length
    pecs_top = top + depth + 2
    pecs_end = top + math.floor(length / 1.8)
    abs_start = pecs_end + 1
    abs_end = top + length - math.floor(length / 6)
    ab_step = max(2, math.floor((abs_end - abs_start + 1) // 3 * 0.8))

    def rule(x: int, y: int) -> str | None:
        w = body.row_width(y - top)
        left = cx - w // 2
        right = left + w - 1
        if pecs_top <= y <= pecs_end:
            outer, inner = math.floor(w * 0.15), math.floor(w * 0.4)
            on_left = x < cx
            edge = x - left if on_left else right - x
            if not outer <= edge < inner:
                return None
            if y in (pecs_top, pecs_end):
                return palette.highlight
            if edge == outer:
                return palette.highlight if on_left else palette.shadow
            if edge == inner - 1:
                return palette.shadow if on_left else palette.highlight
            return None
        if abs_start <= y <= abs_end:
            if w > 4 and x == cx - 1:
                return palette.shadow
            if w > 4 and x == cx:
                return palette.highlight
            if not left + 2 <= x <= right - 2:
                return None
            k = (y - abs_start) % ab_step
            if k == 0 and y < abs_end - 1:
                return palette.shadow
            if k == 1 and y - 1 < abs_end - 1:
                return palette.highlight
        return None

    return rule


def chainmail_rule(first_row: int, palette: Palette) -> OverlayRule:
    def rule(x: int, y: int) -> str | None:
        if y < first_row:
            return None
        link = (x + y * 2) % 5
        if link == 0:
            return palette.shadow
        if link == 2:
            return palette.highlight
        return None

    return rule


def scale_rule(first_row: int, left: int, shoulder_width: int, palette: Palette) -> OverlayRule:
    """Staggered rows of overlapping scales, lit from the top-left."""
    height = max(2, math.floor(shoulder_width * 0.15))
    width = max(2, math.floor(height * 1.2))
    step = max(1, height - math.floor(height * 0.4))
    stride = max(1, math.floor(width * 0.8))

    def rule(x: int, y: int) -> str | None:
        if y < first_row:
            return None
        row, within = divmod(y - first_row, step)
        col = (x - left + (stride // 2 if row % 2 else 0)) % stride
        if within == 0 or col == 0:
            return palette.highlight
        if within == step - 1 or col == stride - 1:
            return palette.shadow
        return None

    return rule


def stud_rule(body: TaperedBody, cx: int, top: int, depth: int, period: int, spacing: int, color: str) -> OverlayRule:
    def rule(x: int, y: int) -> str | None:
        row = y - top
        w = body.row_width(row)
        left = cx - w // 2
        if row < depth or row % period != 2 or w <= 4:
            return None
        if left + 2 <= x < left + w - 2 and (x - left - 2) % spacing == 0:
            return color
        return None

    return rule


def quilt_rule(body: TaperedBody, cx: int, top: int, depth: int, period: int, palette: Palette) -> OverlayRule:
    """Horizontal quilt seams with short vertical stitches between them."""
    length = body.length

    def rule(x: int, y: int) -> str | None:
        row = y - top
        if row < depth:
            return None
        if row % period == 0 and row < length - 2:
            return palette.shadow
        if row % period == 1 and row - 1 < length - 2:
            return palette.highlight
        w = body.row_width(row)
        if w <= 6:
            return None
        left = cx - w // 2
        step = max(1, math.floor(w * 0.3))
        qx = left + math.floor(w * 0.2)
        while qx < left + w * 0.8:
            if (y + qx // 2) % period == 0:
                if x == qx:
                    return palette.shadow
                if x == qx + 1:
                    return palette.highlight
            qx += step
        return None

    return rule


# ── Pauldrons ──


def pauldron_parts(
    style: str, width: int, height: int, layers: int, spike: int, side: int
) -> list[tuple[str, ShapeSpec]]:
    """Pauldron pieces with the origin on the inner edge column at the top row.

    The guard extends away from the torso on ``side`` and droops toward
    its outer edge.
    """
    left = 0 if side > 0 else -(width - 1)
    centre = left + width // 2
    parts: list[tuple[str, ShapeSpec]] = []
    if style == "round_cap":
        cap = TaperedBody(height, WidthProfile("shoulder", start=width, split=0.25, amplitude=0.7, rounding="floor"))
        parts.append(("cap", Drooped(Union(((cap, centre, 0),)), PAULDRON_SLOPE, side)))
        return parts
    layer_h = max(1, height // layers)
    overlap = max(0, math.floor(layer_h * 0.15))
    for i in range(layers):
        reduction = math.floor(i * (width / (layers * 1.8)))
        layer_w = max(2, width - reduction)
        x = reduction if side > 0 else left
        layer = Union(((Rect(layer_w, layer_h), x, i * (layer_h - overlap)),))
        parts.append((f"layer{i}", Drooped(layer, PAULDRON_SLOPE, side)))
    if style == "spiked_plate" and spike > 0:
        body = TaperedBody(spike, WidthProfile("linear", start=1, end=max(1, width // 5)))
        parts.append(("spike", Drooped(Union(((body, centre, -spike),)), PAULDRON_SLOPE, side)))
    return parts


def _sample(ctx: GenerationContext) -> dict[str, Any]:
    s = ctx.sampler
    opts = ctx.options
    gw, gh = ctx.grid.width, ctx.grid.height
    style = s.choose_known(opts.sub_type, ARMOR_STYLES, label="armor style")
    p: dict[str, Any] = {"style": style, "sub_type": opts.sub_type or style}

    if style in LEATHER_STYLES:
        pool = CLOTH_MATERIALS if style == "padded_armor" and s.chance(0.6) else LEATHER_MATERIALS
    elif style in MAIL_STYLES:
        pool = MAIL_MATERIALS
    else:
        pool = PLATE_MATERIALS
    p["material"] = main = s.material(opts.material, pool, label="armor material")

    p["neckline"] = s.choose(NECKLINES)
    p["neckline_depth"] = s.int_in(math.floor(gh * 0.08), math.floor(gh * 0.15))
    p["neckline_width"] = s.int_in(math.floor(gw * 0.2), math.floor(gw * 0.35))
    p["height"] = s.int_in(math.floor(gh * 0.6), math.floor(gh * 0.85))
    p["base_width"] = base = s.int_in(math.floor(gw * 0.45), math.floor(gw * 0.65))
    p["waist_taper"] = s.int_in(math.floor(base * 0.15), math.floor(base * 0.30))

    p["texture"] = texture = TEXTURES.get(style, "none")
    if texture in ("studs", "quilting"):
        p["texture_period"] = s.int_in(4, 6)
        p["stud_spacing"] = s.int_in(3, 5)

    pauldron = "none"
    if style not in NO_PAULDRON_STYLES:
        pauldron = s.choose(["none"] + PAULDRON_STYLES)
        if pauldron == "none" and s.chance(0.7):
            pauldron = s.choose(PAULDRON_STYLES)
    p["pauldron_style"] = pauldron
    p["pauldron_material"] = None
    if pauldron != "none":
        p["pauldron_material"] = s.choose(PAULDRON_MATERIALS, exclude=[main])
        p["pauldron_size"] = s.float_in(0.25, 0.40)
        p["pauldron_layers"] = s.int_in(2, 3) if pauldron == "layered_plate" else 1
        spike = s.int_in(math.floor(gh * 0.05), math.floor(gh * 0.10))
        p["spike_size"] = spike if pauldron == "spiked_plate" else 0

    decoration = "none"
    if style != "muscled_plate":
        types = DECORATION_TYPES + ([STYLE_DECORATIONS[style]] if style in STYLE_DECORATIONS else [])
        decoration = s.choose(types)
    p["decoration"] = decoration
    p["decoration_material"] = None
    if decoration != "none":
        p["decoration_material"] = s.choose(DECORATION_MATERIALS, exclude=[main])
        p["decoration_thickness"] = s.int_in(2, 4)
        p["rivet_step"] = s.int_in(5, 8)
    return p


@item_generator(
    item_type="armor",
    sub_types=ARMOR_STYLES,
    description="Plate, mail, leather and padded body armor",
)
def plan_armor(ctx: GenerationContext) -> ComponentPlan:
    p = _sample(ctx)
    ctx.params.update(p)
    grid = ctx.grid
    cx = grid.width // 2
    height = p["height"]
    top = min((grid.height - height) // 2 + grid.padding, grid.height - height)
    depth = p["neckline_depth"]

    body = torso_body(p)
    torso_sil = body.at(cx, top)
    main = ctx.palette(p["material"])
    on_torso = torso_sil.contains

    def texture_rules() -> list[OverlayRule]:
        texture = p["texture"]
        first_row = top + depth
        if texture == "muscle":
            return [muscle_rule(body, cx, top, depth, main)]
        if texture == "chainmail":
            return [chainmail_rule(first_row, main)]
        if texture == "scale":
            shoulder = body.row_width(0)
            return [scale_rule(first_row, cx - shoulder // 2, shoulder, main)]
        if texture == "studs":
            stud = ctx.palette(STUD_MATERIAL).highlight
            return [stud_rule(body, cx, top, depth, p["texture_period"], p["stud_spacing"], stud)]
        if texture == "quilting":
            return [quilt_rule(body, cx, top, depth, p["texture_period"], main)]
        return []

    def draw_torso(ctx: GenerationContext) -> None:
        ctx.draw("torso", torso_sil, main, overlays=texture_rules(), decorations=[p["texture"]])
        ctx.anchors.record("neckline", cx, top, width=p["neckline_width"], depth=depth)
        # Shoulders sit on the first full row under the neckline
        row = min(depth, height - 1)
        w = body.row_width(row)
        left = cx + body.row_offset(row) - w // 2
        ctx.anchors.record("left_shoulder", left, top + row, width=w, torso_top=top)
        ctx.anchors.record("right_shoulder", left + w - 1, top + row, width=w, torso_top=top)
        ctx.anchors.record("waist", cx, top + height - 1, width=body.row_width(height - 1))

    def draw_decoration(ctx: GenerationContext) -> None:
        kind = p["decoration"]
        palette = ctx.palette(p["decoration_material"])
        thickness = p["decoration_thickness"]
        shoulder = body.row_width(0)
        if kind == "border":
            ctx.fill(EdgeBand(body, 1).at(cx, top), palette.base)
        elif kind == "vertical_stripe":
            w = max(2, thickness)
            stripe = Rect(w, height - depth).at(cx - w // 2, top + depth)
            ctx.draw("decoration", stripe, palette, clip=on_torso, decorations=[kind])
        elif kind == "horizontal_band":
            h = max(2, thickness)
            band = Rect(grid.width, h).at(0, top + (height - h) // 2)
            ctx.draw("decoration", band, palette, clip=on_torso, decorations=[kind])
        elif kind == "cross":
            arm = max(2, thickness)
            vertical = math.floor((height - 1) * 0.5)
            horizontal = math.floor(shoulder * 0.4)
            cross = Union(
                (
                    (Rect(arm, vertical), -(arm // 2), (height - vertical) // 2),
                    (Rect(horizontal, arm), -(horizontal // 2), (height - arm) // 2),
                )
            )
            ctx.fill(cross.at(cx, top), palette.base, clip=on_torso)
        elif kind == "leather_stitching":
            stitches = []
            for row in range(1, height - 2, 3):
                if row < depth:
                    continue
                w = body.row_width(row)
                left = cx - w // 2
                if w > 2:
                    stitches += [(Rect(1, 1), left + 1 - cx, row), (Rect(1, 1), left + w - 2 - cx, row)]
                if w > 6 and ctx.sampler.chance(0.3):
                    length = ctx.sampler.int_in(2, 4)
                    x = left + ctx.sampler.int_in(2, w - length - 2)
                    stitches.append((Rect(length, 1), x - cx, row))
            if stitches:
                ctx.fill(Union(tuple(stitches)).at(cx, top), palette.shadow, clip=on_torso)
        elif kind == "plate_rivets":
            rivets = []
            for row in range(2, height - 2, p["rivet_step"]):
                w = body.row_width(row)
                if row < depth or w <= 4:
                    continue
                left = cx - w // 2
                rivets += [(Rect(1, 1), left + 1 - cx, row), (Rect(1, 1), left + w - 2 - cx, row)]
                if w > 8 and ctx.sampler.chance(0.4):
                    rivets.append((Rect(1, 1), 0, row))
            if rivets:
                ctx.fill(Union(tuple(rivets)).at(cx, top), palette.highlight, clip=on_torso)
        elif kind == "chainmail_edging":
            edge = EdgeBand(body, 2)
            ctx.fill(edge.at(cx, top), palette.base)
            ctx.fill(Patterned(edge, 2, 1, 1, 1).at(cx, top), palette.shadow)

    def draw_pauldrons(ctx: GenerationContext) -> None:
        palette = ctx.palette(p["pauldron_material"])
        style = p["pauldron_style"]
        for name, side in (("left_shoulder", -1), ("right_shoulder", 1)):
            anchor = ctx.anchor(name)
            ph = max(3, math.floor(anchor["width"] * p["pauldron_size"] * 0.8))
            pw = max(4, math.floor(ph * 1.3))
            y = anchor["torso_top"] - math.floor(ph * 0.30)
            for part, spec in pauldron_parts(style, pw, ph, p["pauldron_layers"], p["spike_size"], side):
                sil = spec.at(anchor.x, y)
                x0, y0, x1, y1 = sil.bbox
                clip = all_of(
                    SeamClip(on_torso, range(y0, y1 + 1), PAULDRON_OVERLAP),
                    within_grid(grid.width, grid.height),
                )
                overlays = []
                if part == "cap":
                    overlays.append(sphere_rule((x0 + x1) / 2, y0 + ph / 3, pw / 2, ph / 2, palette))
                ctx.draw(f"pauldron_{name.split('_')[0]}_{part}", sil, palette, overlays=overlays, clip=clip)

    plan = ComponentPlan("armor", [], _name, _describe)
    plan.add("torso", draw_torso, description="Torso with neckline opening and texture")
    if p["decoration"] != "none":
        plan.add("decoration", draw_decoration, "torso")
    if p["pauldron_style"] != "none":
        plan.add("pauldrons", draw_pauldrons, "torso")
    return plan


def _name(ctx: GenerationContext) -> str:
    p = ctx.params
    name = f"{ctx.palette(p['material']).name} {title_case(p['sub_type'])}"
    if p["sub_type"].lower() != p["style"]:
        name += f" ({p['style'].replace('_', ' ')})"
    if p["decoration"] != "none":
        name += f" with {ctx.palette(p['decoration_material']).name} {p['decoration'].replace('_', ' ')}"
    if p["pauldron_style"] != "none":
        pauldron = ctx.palette(p["pauldron_material"]).name
        name += f" and {pauldron} {p['pauldron_style'].replace('_', ' ')} pauldrons"
    return name + f" ({p['neckline'].replace('_', ' ')})"


def _describe(ctx: GenerationContext) -> dict[str, Any]:
    p = ctx.params
    decoration = None
    if p["decoration"] != "none":
        palette = ctx.palette(p["decoration_material"])
        decoration = {
            "type": p["decoration"],
            "material": p["decoration_material"].lower(),
            "colors": palette_colors(palette),
        }
    pauldrons = None
    if p["pauldron_style"] != "none":
        pauldrons = {
            "style": p["pauldron_style"],
            "material": p["pauldron_material"].lower(),
            "sizeRatio": p["pauldron_size"],
            "layers": p["pauldron_layers"],
            "spikeSize": p["spike_size"],
            "colors": palette_colors(ctx.palette(p["pauldron_material"])),
        }
    return {
        "subType": p["sub_type"],
        "style": p["style"],
        "material": p["material"].lower(),
        "colors": palette_colors(ctx.palette(p["material"])),
        "torso": {
            "height": p["height"],
            "baseWidth": p["base_width"],
            "waistTaper": p["waist_taper"],
            "neckline": p["neckline"],
            "necklineDepth": p["neckline_depth"],
            "necklineWidth": p["neckline_width"],
            "texture": p["texture"],
            "decoration": decoration,
        },
        "pauldrons": pauldrons,
    }
