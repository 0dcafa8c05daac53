"""Math helpers: rounding, progress ratios, widths and names. No engine imports."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 → 3, -2.5 → -2).

    Python's round() uses banker's rounding, which makes symmetric shapes
    lopsided on half-cell widths.
    """
    return math.floor(value + 0.5)


def progress_ratio(index: int | float, length: int) -> float:
    """Fraction of the way through a run of ``length`` rows.

    A run of one row (or none) has progress 0 everywhere.
    """
    if length <= 1:
        return 0.0
    return index / (length - 1)


def make_even(value: int) -> int:
    """Floor an integer width down to the nearest even number."""
    return value - (value % 2)


def title_case(token: str) -> str:
    """DARK_STEEL → 'Dark Steel', rounded_top → 'Rounded Top'."""
    return " ".join(part.capitalize() for part in token.replace("_", " ").split())
