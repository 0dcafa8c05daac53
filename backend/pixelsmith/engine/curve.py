"""Curve accumulation: per-row lateral offsets of an elongated component.

The per-row history stays private to the component that traced it; only
``final_offset()`` is handed to dependents (hilt and pommel under a curved
blade, string under a bent limb).
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pixelsmith.utils.math_helpers import round_half_up

logger = logging.getLogger(__name__)


class CurveAccumulator:
    def __init__(self) -> None:
        self._offsets: dict[int, int] = {}

    def accumulate(self, row: int, lateral_offset: Callable[[int], float]) -> int:
        """Evaluate the lateral offset at ``row``, round half-up, record and return it."""
        offset = round_half_up(lateral_offset(row))
        self._offsets[row] = offset
        return offset

    def final_offset(self) -> int:
        """Offset at the last (highest-index) accumulated row, 0 when nothing ran."""
        if not self._offsets:
            return 0
        return self._offsets[max(self._offsets)]

    @property
    def rows(self) -> int:
        return len(self._offsets)
