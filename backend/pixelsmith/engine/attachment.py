"""Component attachment: named anchors and seam clipping between parent and child.

A parent records anchors while it lays out its rows; dependents receive a
frozen view. Seam clipping re-queries the parent's membership so a child
never double-covers the parent beyond its documented overlap.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

Membership = Callable[[int, int], bool]


@dataclass(frozen=True)
class AttachmentPoint:
    name: str
    x: int
    y: int
    measurements: Mapping[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.measurements[key]


class AnchorRecorder:
    """First-write-wins anchor map."""

    def __init__(self) -> None:
        self._points: dict[str, AttachmentPoint] = {}

    def record(self, name: str, x: int, y: int, **measurements: Any) -> AttachmentPoint:
        existing = self._points.get(name)
        if existing is not None:
            return existing
        point = AttachmentPoint(name, int(x), int(y), MappingProxyType(dict(measurements)))
        self._points[name] = point
        logger.debug("Anchor %s at (%d, %d)", name, point.x, point.y)
        return point

    def get(self, name: str) -> AttachmentPoint:
        try:
            return self._points[name]
        except KeyError:
            raise KeyError(f"Anchor not recorded: {name}") from None

    def __contains__(self, name: str) -> bool:
        return name in self._points

    def freeze(self) -> Mapping[str, AttachmentPoint]:
        return MappingProxyType(dict(self._points))


class SeamClip:
    """Clip predicate for a child drawn against ``parent`` on the seam rows.

    Off the seam every cell is allowed. On a seam row a cell is allowed when
    the parent does not cover it, or when it lies within ``overlap`` columns
    of a cell the parent leaves uncovered.
    """

    def __init__(self, parent: Membership, seam_rows: Iterable[int], overlap: int = 0) -> None:
        self.parent = parent
        self.seam_rows = frozenset(seam_rows)
        self.overlap = max(0, overlap)

    def __call__(self, x: int, y: int) -> bool:
        if y not in self.seam_rows:
            return True
        if not self.parent(x, y):
            return True
        return any(
            not self.parent(x + d, y)
            for d in range(-self.overlap, self.overlap + 1)
            if d != 0
        )


def within_grid(width: int, height: int) -> Membership:
    return lambda x, y: 0 <= x < width and 0 <= y < height


def all_of(*clips: Membership | None) -> Membership:
    active = [c for c in clips if c is not None]
    return lambda x, y: all(c(x, y) for c in active)
