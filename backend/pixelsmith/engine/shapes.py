"""Shape membership: pure inside/outside predicates for every silhouette family.

A ``ShapeSpec`` holds the numeric parameters of one family and answers
``contains_local(dx, dy)`` relative to its own origin. Binding it to an origin
with ``spec.at(x, y)`` yields a ``Silhouette`` that the edge shader rasterizes.

Usage:
    ring = Annulus(outer_radius=10, inner_radius=6).at(32, 32)
    ring.contains(32, 40)  # True

Membership is total over all integers: degenerate parameters (radius 0,
zero-length bodies) answer False instead of raising, and every query
outside the reported bounding box answers False.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, NamedTuple

from pixelsmith.utils.math_helpers import make_even, progress_ratio, round_half_up

if TYPE_CHECKING:
    from pixelsmith.engine.curve import CurveAccumulator

logger = logging.getLogger(__name__)

# Inclusive (x0, y0, x1, y1). x1 < x0 means the shape covers no cells.
BBox = tuple[int, int, int, int]
EMPTY_BBOX: BBox = (0, 0, -1, -1)

# Decimal places kept from rotated coordinates so equal angles reached by
# different float paths classify cells identically.
_ROTATION_PRECISION = 9


def union_bbox(boxes: list[BBox]) -> BBox:
    boxes = [b for b in boxes if b[2] >= b[0] and b[3] >= b[1]]
    if not boxes:
        return EMPTY_BBOX
    return (
        min(b[0] for b in boxes),
        min(b[1] for b in boxes),
        max(b[2] for b in boxes),
        max(b[3] for b in boxes),
    )


def offset_bbox(box: BBox, dx: int, dy: int) -> BBox:
    if box[2] < box[0]:
        return EMPTY_BBOX
    return (box[0] + dx, box[1] + dy, box[2] + dx, box[3] + dy)


# ── Width profiles ──

ProfileFn = Callable[["WidthProfile", float, int, int], float]
_PROFILE_KINDS: dict[str, ProfileFn] = {}


def width_profile(kind: str):
    """Register a width function ``fn(profile, progress, row, length) -> float``."""

    def decorator(fn: ProfileFn) -> ProfileFn:
        if kind in _PROFILE_KINDS:
            raise ValueError(f"Duplicate width profile: {kind}")
        _PROFILE_KINDS[kind] = fn
        return fn

    return decorator


@dataclass(frozen=True)
class WidthProfile:
    """Row width as a function of progress along a body.

    Row 0 is the top of the body. ``reverse`` measures progress from the
    bottom instead, for bodies drawn upward from a mount point.
    """

    kind: str = "linear"
    start: float = 1.0
    end: float = 1.0
    peak: float = 0.0
    split: float = 0.5
    exponent: float = 1.0
    amplitude: float = 0.0
    tip_rows: int = 0
    minimum: float = 1.0
    even: bool = False
    rounding: str = "round"  # round | floor | ceil
    reverse: bool = False

    def __post_init__(self) -> None:
        if self.kind not in _PROFILE_KINDS:
            raise ValueError(f"Unknown width profile: {self.kind}")

    def raw_width(self, row: int, length: int) -> float:
        p = progress_ratio(row, length)
        if self.reverse:
            p = 1.0 - p
            row = length - 1 - row
        return self.raw_at(p, row, length)

    def raw_at(self, progress: float, row: int = 0, length: int = 1) -> float:
        return max(self.minimum, _PROFILE_KINDS[self.kind](self, progress, row, length))

    def width(self, row: int, length: int) -> int:
        raw = self.raw_width(row, length)
        if self.rounding == "floor":
            w = math.floor(raw)
        elif self.rounding == "ceil":
            w = math.ceil(raw)
        else:
            w = round_half_up(raw)
        w = max(math.ceil(self.minimum), w)
        return make_even(w) if self.even else w


@width_profile("constant")
def _constant(prof: WidthProfile, p: float, row: int, length: int) -> float:
    return prof.start


@width_profile("linear")
def _linear(prof: WidthProfile, p: float, row: int, length: int) -> float:
    return prof.start + (prof.end - prof.start) * p


@width_profile("flowing")
def _flowing(prof: WidthProfile, p: float, row: int, length: int) -> float:
    delta = prof.end - prof.start
    return prof.start + delta * p + math.sin(p * math.pi) * delta * prof.amplitude


@width_profile("s_curve")
def _s_curve(prof: WidthProfile, p: float, row: int, length: int) -> float:
    if p < prof.split:
        return prof.start + (prof.peak - prof.start) * (p / prof.split)
    if prof.split >= 1:
        return prof.peak
    rest = (p - prof.split) / (1 - prof.split)
    return prof.peak + (prof.end - prof.peak) * rest


@width_profile("kissaki")
def _kissaki(prof: WidthProfile, p: float, row: int, length: int) -> float:
    """Angled tip over ``tip_rows`` reaching ``peak``, then body to ``end``."""
    tip = min(prof.tip_rows, length)
    if row < tip:
        t = 1.0 if tip <= 1 else row / (tip - 1)
        return prof.start + (prof.peak - prof.start) * t
    body = length - tip
    t = (row - tip) / ((body - 1) or 1)
    return prof.peak + (prof.end - prof.peak) * t


@width_profile("pointed_tip")
def _pointed_tip(prof: WidthProfile, p: float, row: int, length: int) -> float:
    if row >= prof.tip_rows or prof.tip_rows <= 0:
        return prof.end
    return prof.start + (prof.end - prof.start) * (row / prof.tip_rows)


@width_profile("dome")
def _dome(prof: WidthProfile, p: float, row: int, length: int) -> float:
    return prof.end * math.sqrt(max(0.0, 1 - (p - 1) ** 2))


@width_profile("oval")
def _oval(prof: WidthProfile, p: float, row: int, length: int) -> float:
    """Widest at the middle row, narrowing toward both ends; ``amplitude`` sets the pinch."""
    n = 2 * p - 1
    return prof.start * math.sqrt(max(0.0, 1 - n * n * prof.amplitude))


@width_profile("quarter_circle")
def _quarter_circle(prof: WidthProfile, p: float, row: int, length: int) -> float:
    return prof.start * math.sqrt(max(0.0, 1 - p * p))


@width_profile("power_taper")
def _power_taper(prof: WidthProfile, p: float, row: int, length: int) -> float:
    return prof.start * (1 - p**prof.exponent)


@width_profile("power_rise")
def _power_rise(prof: WidthProfile, p: float, row: int, length: int) -> float:
    """Swells from ``start`` to ``end``; the last ``tip_rows`` rows round off."""
    w = prof.start + (prof.end - prof.start) * p**prof.exponent
    if 0 < prof.tip_rows < length and row >= length - prof.tip_rows:
        t = (row - (length - prof.tip_rows) + 1) / prof.tip_rows
        w = max(prof.start + 1, prof.end - (prof.end - prof.start - 1) * t**1.5)
    return w


@width_profile("shoulder")
def _shoulder(prof: WidthProfile, p: float, row: int, length: int) -> float:
    if p <= prof.split or prof.split >= 1:
        return prof.start
    t = (p - prof.split) / (1 - prof.split)
    return prof.start * (1 - t * t * prof.amplitude)


@width_profile("sine_rise")
def _sine_rise(prof: WidthProfile, p: float, row: int, length: int) -> float:
    return prof.start + (prof.end - prof.start) * math.sin(p * math.pi / 2)


@width_profile("bulge")
def _bulge(prof: WidthProfile, p: float, row: int, length: int) -> float:
    """Widens from ``start`` to ``peak`` at ``split``, then tapers to a point."""
    if p < prof.split:
        return prof.start + (prof.peak - prof.start) * (p / prof.split)
    if prof.split >= 1:
        return prof.peak
    q = (p - prof.split) / (1 - prof.split)
    return prof.peak * (1 - q**prof.exponent)


@width_profile("bishop")
def _bishop(prof: WidthProfile, p: float, row: int, length: int) -> float:
    if prof.split <= 0:
        return prof.start * 0.6
    if p < prof.split:
        return prof.start + prof.amplitude * math.sin(p / prof.split * math.pi)
    return prof.start * 0.6


@width_profile("limb")
def _limb(prof: WidthProfile, p: float, row: int, length: int) -> float:
    """Thickest at the middle of the run, thinning toward both ends."""
    n = abs(2 * p - 1)
    return prof.start * (1 - n * prof.amplitude)


# ── Lateral curves ──

CurveFn = Callable[[float, float], float]

_CURVE_KINDS: dict[str, CurveFn] = {
    "sine": lambda p, phase: math.sin(p * math.pi * phase),
    "lean": lambda p, phase: p,
    "arc": lambda p, phase: math.sqrt(max(0.0, 1 - (2 * p - 1) ** 2)),
    "recurve": lambda p, phase: _recurve(p),
}


def _recurve(p: float) -> float:
    n = abs(2 * p - 1)
    bend = math.sqrt(max(0.0, 1 - n * n))
    if n > 0.7:
        bend -= 0.5 * math.sin((n - 0.7) / 0.3 * math.pi / 2)
    return bend


@dataclass(frozen=True)
class Curve:
    """Lateral centre-line displacement along an elongated body."""

    amount: float
    direction: int = 1
    phase: float = 1.0
    kind: str = "sine"
    # Measure progress from the far end (bodies mounted at their last row)
    reverse: bool = False

    def __post_init__(self) -> None:
        if self.kind not in _CURVE_KINDS:
            raise ValueError(f"Unknown curve kind: {self.kind}")

    def lateral(self, progress: float) -> float:
        if self.direction == 0 or self.amount == 0:
            return 0.0
        if self.reverse:
            progress = 1.0 - progress
        return _CURVE_KINDS[self.kind](progress, self.phase) * self.amount * self.direction


# ── Shape families ──

_FAMILIES: dict[str, type[ShapeSpec]] = {}


def shape_family(name: str):
    """Class decorator registering a ShapeSpec subclass under ``name``."""

    def decorator(cls: type[ShapeSpec]) -> type[ShapeSpec]:
        if name in _FAMILIES:
            raise ValueError(f"Duplicate shape family: {name}")
        cls.family = name
        _FAMILIES[name] = cls
        return cls

    return decorator


def make_shape(family: str, **params) -> ShapeSpec:
    cls = _FAMILIES.get(family)
    if cls is None:
        raise ValueError(f"Unknown shape family: {family}")
    return cls(**params)


def shape_families() -> list[str]:
    return sorted(_FAMILIES)


class ShapeSpec:
    """Base of all shape families: local membership plus local bounding box."""

    family: ClassVar[str] = "shape"

    def contains_local(self, dx: int, dy: int) -> bool:
        raise NotImplementedError

    def local_bbox(self) -> BBox:
        raise NotImplementedError

    def at(self, x: int, y: int) -> Silhouette:
        return Silhouette(self, int(x), int(y))


@dataclass(frozen=True)
class Silhouette:
    """A shape bound to an origin on the logical grid."""

    spec: ShapeSpec
    origin_x: int = 0
    origin_y: int = 0

    @property
    def bbox(self) -> BBox:
        return offset_bbox(self.spec.local_bbox(), self.origin_x, self.origin_y)

    def contains(self, x: int, y: int) -> bool:
        x0, y0, x1, y1 = self.bbox
        if x < x0 or x > x1 or y < y0 or y > y1:
            return False
        return self.spec.contains_local(x - self.origin_x, y - self.origin_y)

    __call__ = contains

    def cells(self) -> Iterator[tuple[int, int]]:
        x0, y0, x1, y1 = self.bbox
        for y in range(y0, y1 + 1):
            for x in range(x0, x1 + 1):
                if self.spec.contains_local(x - self.origin_x, y - self.origin_y):
                    yield x, y

    def row_extent(self, y: int) -> tuple[int, int] | None:
        """Leftmost and rightmost inside columns on row ``y``."""
        xs = [x for x in range(self.bbox[0], self.bbox[2] + 1) if self.contains(x, y)]
        if not xs:
            return None
        return xs[0], xs[-1]


def is_inside(point: tuple[int, int], spec: ShapeSpec, origin: tuple[int, int] = (0, 0)) -> bool:
    return spec.at(*origin).contains(*point)


@shape_family("disc")
@dataclass(frozen=True)
class Disc(ShapeSpec):
    radius: float

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.radius <= 0:
            return False
        return dx * dx + dy * dy <= self.radius * self.radius

    def local_bbox(self) -> BBox:
        if self.radius <= 0:
            return EMPTY_BBOX
        r = math.floor(self.radius)
        return (-r, -r, r, r)


@shape_family("annulus")
@dataclass(frozen=True)
class Annulus(ShapeSpec):
    outer_radius: float
    inner_radius: float

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.outer_radius <= 0:
            return False
        d2 = dx * dx + dy * dy
        return d2 <= self.outer_radius**2 and d2 > max(0.0, self.inner_radius) ** 2

    def local_bbox(self) -> BBox:
        return Disc(self.outer_radius).local_bbox()


@shape_family("ellipse")
@dataclass(frozen=True)
class Ellipse(ShapeSpec):
    radius_x: float
    radius_y: float
    tolerance: float = 1.0

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.radius_x <= 0 or self.radius_y <= 0:
            return False
        return (dx / self.radius_x) ** 2 + (dy / self.radius_y) ** 2 <= self.tolerance

    def local_bbox(self) -> BBox:
        if self.radius_x <= 0 or self.radius_y <= 0:
            return EMPTY_BBOX
        k = math.sqrt(self.tolerance)
        rx, ry = math.floor(self.radius_x * k), math.floor(self.radius_y * k)
        return (-rx, -ry, rx, ry)


@shape_family("rect")
@dataclass(frozen=True)
class Rect(ShapeSpec):
    """Axis-aligned block with its origin at the top-left cell."""

    width: int
    height: int

    def contains_local(self, dx: int, dy: int) -> bool:
        return 0 <= dx < self.width and 0 <= dy < self.height

    def local_bbox(self) -> BBox:
        if self.width <= 0 or self.height <= 0:
            return EMPTY_BBOX
        return (0, 0, self.width - 1, self.height - 1)


@shape_family("diamond")
@dataclass(frozen=True)
class Diamond(ShapeSpec):
    half_width: float
    half_height: float

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.half_width < 0 or self.half_height < 0:
            return False
        if abs(dy) > self.half_height:
            return False
        if self.half_height == 0:
            return abs(dx) <= self.half_width
        return abs(dx) <= math.floor(self.half_width * (1 - abs(dy) / self.half_height))

    def local_bbox(self) -> BBox:
        if self.half_width < 0 or self.half_height < 0:
            return EMPTY_BBOX
        hw, hh = math.floor(self.half_width), math.floor(self.half_height)
        return (-hw, -hh, hw, hh)


class RowSpan(NamedTuple):
    row: int
    left: int
    width: int
    offset: int


@dataclass(frozen=True)
class Opening:
    """Cut-out through the top rows of a tapered body (necklines)."""

    start_row: int
    depth: int
    profile: WidthProfile
    margin: int = 2

    def cut_width(self, body_width: int, row: int) -> int:
        local = row - self.start_row
        if local < 0 or local >= self.depth:
            return 0
        w = min(self.profile.width(local, self.depth), body_width - self.margin)
        return make_even(max(0, w))

    def cuts(self, body: TaperedBody, dx: int, dy: int) -> bool:
        cut = self.cut_width(body.row_width(dy), dy)
        if cut <= 0:
            return False
        left = body.row_offset(dy) - cut // 2
        return left <= dx < left + cut


@shape_family("tapered_body")
@dataclass(frozen=True)
class TaperedBody(ShapeSpec):
    """Row-wise body (blade, torso, robe, limb) with origin at its top centre.

    Row ``r`` spans ``[c - w//2, c - w//2 + w)`` where ``c`` is the curve
    offset at that row and ``w`` the profile width.
    """

    length: int
    profile: WidthProfile
    curve: Curve | None = None
    opening: Opening | None = None

    def row_width(self, row: int) -> int:
        return self.profile.width(row, self.length)

    def lateral(self, row: int) -> float:
        if self.curve is None:
            return 0.0
        return self.curve.lateral(progress_ratio(row, self.length))

    def row_offset(self, row: int) -> int:
        return round_half_up(self.lateral(row))

    def row_span(self, row: int) -> tuple[int, int]:
        w = self.row_width(row)
        left = self.row_offset(row) - w // 2
        return left, left + w

    def contains_local(self, dx: int, dy: int) -> bool:
        if dy < 0 or dy >= self.length:
            return False
        left, right = self.row_span(dy)
        if not left <= dx < right:
            return False
        if self.opening is not None and self.opening.cuts(self, dx, dy):
            return False
        return True

    def local_bbox(self) -> BBox:
        if self.length <= 0:
            return EMPTY_BBOX
        spans = [self.row_span(r) for r in range(self.length)]
        return (min(s[0] for s in spans), 0, max(s[1] for s in spans) - 1, self.length - 1)

    def spans(self) -> Iterator[RowSpan]:
        for row in range(self.length):
            w = self.row_width(row)
            off = self.row_offset(row)
            yield RowSpan(row, off - w // 2, w, off)

    def trace(self, accumulator: CurveAccumulator) -> int:
        """Feed every row's lateral offset to ``accumulator``; return the final one."""
        for row in range(self.length):
            accumulator.accumulate(row, self.lateral)
        return accumulator.final_offset()


# Flange half-width as a fraction of thickness, given progress along the flange
_FLANGE_STYLES: dict[str, Callable[[float], float]] = {
    "diamond": lambda p: 0.3 + (2 * p if p < 0.5 else 2 * (1 - p)),
    "bladed": lambda p: 1 - p * 0.7,
    "star": lambda p: 1 - p,
    "ray": lambda p: 1.0,
}


@shape_family("polar_flanged")
@dataclass(frozen=True)
class PolarFlanged(ShapeSpec):
    """Core disc plus ``flange_count`` radial tapered flanges at 2πi/N + rotation."""

    core_radius: float
    flange_count: int
    flange_length: float
    flange_thickness: float
    style: str = "diamond"
    rotation: float = 0.0

    def __post_init__(self) -> None:
        if self.style not in _FLANGE_STYLES:
            raise ValueError(f"Unknown flange style: {self.style}")

    def flange_angles(self) -> list[float]:
        n = max(0, self.flange_count)
        return [(2 * math.pi * i / n + self.rotation) % (2 * math.pi) for i in range(n)]

    def flange_width(self, along: float) -> float:
        p = along / self.flange_length if self.flange_length > 0 else 1.0
        return max(1.0, self.flange_thickness * _FLANGE_STYLES[self.style](p))

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.core_radius > 0 and dx * dx + dy * dy <= self.core_radius**2:
            return True
        if self.flange_length <= 0:
            return False
        for angle in self.flange_angles():
            c, s = math.cos(angle), math.sin(angle)
            along = round(dx * c + dy * s, _ROTATION_PRECISION) - self.core_radius
            perp = round(-dx * s + dy * c, _ROTATION_PRECISION)
            if -0.5 <= along < self.flange_length - 0.5:
                if abs(perp) <= self.flange_width(along) / 2:
                    return True
        return False

    def local_bbox(self) -> BBox:
        reach = max(0.0, self.core_radius) + max(0.0, self.flange_length) + self.flange_thickness
        if reach <= 0:
            return EMPTY_BBOX
        r = math.ceil(reach)
        return (-r, -r, r, r)


@dataclass(frozen=True)
class Band:
    """One named vertical band of a composite silhouette."""

    name: str
    height: float
    profile: WidthProfile


@shape_family("composite")
@dataclass(frozen=True)
class CompositeSilhouette(ShapeSpec):
    """Vertically banded outline (shields) with its origin at the centre.

    Rows run from ``-(height // 2)``; each row dispatches to the band whose
    cumulative extent contains it and tests ``|dx| <= width / 2``.
    """

    width: int
    height: int
    bands: tuple[Band, ...]
    corner_radius: int = 0

    @property
    def top(self) -> int:
        return -(self.height // 2)

    def band_at(self, row: int) -> tuple[Band, float] | None:
        """Band containing local ``row`` and the progress through it."""
        start = 0.0
        for i, band in enumerate(self.bands):
            last = i == len(self.bands) - 1
            if row < start + band.height or last:
                local = row - start
                p = local / (band.height - 1) if band.height > 1 else 0.0
                return band, min(1.0, max(0.0, p))
            start += band.height
        return None

    def row_width(self, row: int) -> float:
        found = self.band_at(row)
        if found is None:
            return 0.0
        band, p = found
        return band.profile.raw_at(p, row, self.height)

    def _outside_corner(self, dx: int, row: int) -> bool:
        r = self.corner_radius
        hw = self.width / 2
        if r <= 0 or abs(dx) <= hw - r:
            return False
        if row < r:
            cy = r
        elif row > self.height - 1 - r:
            cy = self.height - 1 - r
        else:
            return False
        cx = hw - r
        return (abs(dx) - cx) ** 2 + (row - cy) ** 2 > r * r

    def contains_local(self, dx: int, dy: int) -> bool:
        row = dy - self.top
        if row < 0 or row >= self.height or not self.bands:
            return False
        if abs(dx) > self.row_width(row) / 2:
            return False
        return not self._outside_corner(dx, row)

    def local_bbox(self) -> BBox:
        if self.height <= 0 or self.width <= 0 or not self.bands:
            return EMPTY_BBOX
        widest = max(self.row_width(r) for r in range(self.height))
        hw = math.floor(widest / 2)
        return (-hw, self.top, hw, self.top + self.height - 1)


@shape_family("edge_band")
@dataclass(frozen=True)
class EdgeBand(ShapeSpec):
    """Cells of ``inner`` within ``thickness`` axis steps of its boundary."""

    inner: ShapeSpec
    thickness: int

    def depth_at(self, dx: int, dy: int) -> int:
        """Axis distance to the nearest outside cell, capped at thickness + 1."""
        for k in range(1, self.thickness + 1):
            for nx, ny in ((dx, dy - k), (dx - k, dy), (dx, dy + k), (dx + k, dy)):
                if not self.inner.contains_local(nx, ny):
                    return k
        return self.thickness + 1

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.thickness <= 0 or not self.inner.contains_local(dx, dy):
            return False
        return self.depth_at(dx, dy) <= self.thickness

    def local_bbox(self) -> BBox:
        return self.inner.local_bbox()


_ARC_STYLES: dict[str, Callable[[float], float]] = {
    "ellipse": lambda n: math.sqrt(max(0.0, 1 - n * n)),
    "concave": lambda n: 1 - abs(n) ** 2.2,
    "v": lambda n: 1 - abs(n),
}


@shape_family("arc_band")
@dataclass(frozen=True)
class ArcBand(ShapeSpec):
    """Band of ``thickness`` rows sagging ``depth`` rows below its ends (collars).

    ``inverted`` flips it so the middle sits at the top and the ends hang down.
    """

    half_width: int
    thickness: int
    depth: int
    style: str = "ellipse"
    inverted: bool = False

    def __post_init__(self) -> None:
        if self.style not in _ARC_STYLES:
            raise ValueError(f"Unknown arc style: {self.style}")

    def centre_row(self, dx: int) -> int:
        sag = self.depth * _ARC_STYLES[self.style](dx / self.half_width)
        return round_half_up(self.depth - sag if self.inverted else sag)

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.half_width <= 0 or self.thickness <= 0 or abs(dx) > self.half_width:
            return False
        return 0 <= dy - self.centre_row(dx) < self.thickness

    def local_bbox(self) -> BBox:
        if self.half_width <= 0 or self.thickness <= 0:
            return EMPTY_BBOX
        return (-self.half_width, 0, self.half_width, self.depth + self.thickness - 1)


@shape_family("saltire")
@dataclass(frozen=True)
class Saltire(ShapeSpec):
    arm_length: int
    thickness: int

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.arm_length <= 0 or self.thickness <= 0:
            return False
        if abs(dx) > self.arm_length or abs(dy) > self.arm_length:
            return False
        return abs(dx - dy) < self.thickness or abs(dx + dy) < self.thickness

    def local_bbox(self) -> BBox:
        if self.arm_length <= 0 or self.thickness <= 0:
            return EMPTY_BBOX
        a = self.arm_length
        return (-a, -a, a, a)


@shape_family("patterned")
@dataclass(frozen=True)
class Patterned(ShapeSpec):
    """Periodic stripes of ``inner``: kept where (wx·dx + wy·dy + phase) mod period < duty."""

    inner: ShapeSpec
    period: int
    duty: int
    weight_x: int = 1
    weight_y: int = 2
    phase: int = 0

    def contains_local(self, dx: int, dy: int) -> bool:
        if self.period <= 0 or not self.inner.contains_local(dx, dy):
            return False
        return (self.weight_x * dx + self.weight_y * dy + self.phase) % self.period < self.duty

    def local_bbox(self) -> BBox:
        return self.inner.local_bbox()


Placed = tuple[ShapeSpec, int, int]


@shape_family("union")
@dataclass(frozen=True)
class Union(ShapeSpec):
    """Several shapes, each at its own offset from the shared origin."""

    parts: tuple[Placed, ...]

    def contains_local(self, dx: int, dy: int) -> bool:
        return any(spec.contains_local(dx - ox, dy - oy) for spec, ox, oy in self.parts)

    def local_bbox(self) -> BBox:
        return union_bbox([offset_bbox(s.local_bbox(), ox, oy) for s, ox, oy in self.parts])


@shape_family("difference")
@dataclass(frozen=True)
class Difference(ShapeSpec):
    """``base`` minus each placed hole."""

    base: ShapeSpec
    holes: tuple[Placed, ...]

    def contains_local(self, dx: int, dy: int) -> bool:
        if not self.base.contains_local(dx, dy):
            return False
        return not any(s.contains_local(dx - ox, dy - oy) for s, ox, oy in self.holes)

    def local_bbox(self) -> BBox:
        return self.base.local_bbox()


@shape_family("window")
@dataclass(frozen=True)
class Window(ShapeSpec):
    """``inner`` restricted to an inclusive local rectangle (half discs, halves)."""

    inner: ShapeSpec
    x0: int
    y0: int
    x1: int
    y1: int

    def contains_local(self, dx: int, dy: int) -> bool:
        if not (self.x0 <= dx <= self.x1 and self.y0 <= dy <= self.y1):
            return False
        return self.inner.contains_local(dx, dy)

    def local_bbox(self) -> BBox:
        ix0, iy0, ix1, iy1 = self.inner.local_bbox()
        box = (max(ix0, self.x0), max(iy0, self.y0), min(ix1, self.x1), min(iy1, self.y1))
        if box[2] < box[0] or box[3] < box[1]:
            return EMPTY_BBOX
        return box


@shape_family("sheared")
@dataclass(frozen=True)
class Sheared(ShapeSpec):
    """``inner`` with row ``dy`` shifted ``side * floor(dy * slope)`` columns."""

    inner: ShapeSpec
    slope: float
    side: int = 1

    def shift(self, dy: int) -> int:
        return self.side * math.floor(dy * self.slope)

    def contains_local(self, dx: int, dy: int) -> bool:
        return self.inner.contains_local(dx - self.shift(dy), dy)

    def local_bbox(self) -> BBox:
        x0, y0, x1, y1 = self.inner.local_bbox()
        if x1 < x0:
            return EMPTY_BBOX
        shifts = [self.shift(y) for y in range(y0, y1 + 1)]
        return (x0 + min(shifts), y0, x1 + max(shifts), y1)


@shape_family("drooped")
@dataclass(frozen=True)
class Drooped(ShapeSpec):
    """``inner`` with columns on ``side`` of the origin dropped ``floor(|dx| * slope)`` rows.

    Column 0 stays put, so a shoulder guard anchored at its inner edge
    slopes down and away from the body.
    """

    inner: ShapeSpec
    slope: float
    side: int = 1

    def drop(self, dx: int) -> int:
        return math.floor(max(0, self.side * dx) * self.slope)

    def contains_local(self, dx: int, dy: int) -> bool:
        return self.inner.contains_local(dx, dy - self.drop(dx))

    def local_bbox(self) -> BBox:
        x0, y0, x1, y1 = self.inner.local_bbox()
        if x1 < x0:
            return EMPTY_BBOX
        drops = [self.drop(x) for x in range(x0, x1 + 1)]
        return (x0, y0 + min(drops), x1, y1 + max(drops))
