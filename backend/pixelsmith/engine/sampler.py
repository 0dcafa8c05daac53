"""Parameter sampler: constrained random draws over an explicit RNG.

Every draw goes through the ``random.Random`` handed in at construction, so
a generation call replays exactly when given the same RNG state.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Iterable, Mapping, Sequence
from typing import TypeVar

from pixelsmith.engine.palette import DEFAULT_MATERIAL, is_known_material, normalize_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ParameterSampler:
    def __init__(self, rng: random.Random | None = None, default_material: str = DEFAULT_MATERIAL) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.default_material = default_material
        self.warnings: list[str] = []

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    # ── Numeric draws ──

    def int_in(self, lo: float, hi: float) -> int:
        """Uniform integer in [ceil(lo), floor(hi)]; an empty range yields ceil(lo)."""
        low, high = math.ceil(lo), math.floor(hi)
        if high < low:
            return low
        return self.rng.randint(low, high)

    def float_in(self, lo: float, hi: float) -> float:
        return lo + self.rng.random() * (hi - lo)

    def chance(self, probability: float) -> bool:
        return self.rng.random() < probability

    def sign(self) -> int:
        return self.rng.choice((-1, 1))

    # ── Categorical draws ──

    def choose(self, candidates: Sequence[T], exclude: Iterable[T] = ()) -> T:
        """Uniform pick, skipping ``exclude`` unless that would leave nothing."""
        if not candidates:
            raise ValueError("Cannot choose from an empty candidate set")
        excluded = set(exclude)
        pool = [c for c in candidates if c not in excluded]
        return self.rng.choice(pool or list(candidates))

    def choose_weighted(self, weights: Mapping[T, float]) -> T:
        options = list(weights)
        if not options:
            raise ValueError("Cannot choose from an empty candidate set")
        return self.rng.choices(options, weights=[weights[o] for o in options])[0]

    def choose_known(
        self,
        requested: str | None,
        known: Sequence[str],
        aliases: Mapping[str, str] | None = None,
        label: str = "option",
    ) -> str:
        """Validate a caller-specified option against ``known``.

        Absent → random member. Unknown → random member plus a warning.
        """
        if requested:
            key = requested.strip().lower()
            key = (aliases or {}).get(key, key)
            if key in known:
                return key
            choice = self.choose(known)
            self._warn(f"Unknown {label} {requested!r}, using random {label} {choice!r}")
            return choice
        choice = self.choose(known)
        logger.info("No %s requested, picked %r", label, choice)
        return choice

    def material(
        self,
        requested: str | None,
        candidates: Sequence[str],
        exclude: Iterable[str] = (),
        label: str = "material",
    ) -> str:
        """Material key: the requested one if known, else a fallback.

        An unknown requested key resolves to the default material with a
        warning; an absent one is drawn from ``candidates``.
        """
        if requested:
            key = normalize_key(requested)
            if is_known_material(key):
                return key
            self._warn(f"Unknown {label} {requested!r}, falling back to {self.default_material}")
            return self.default_material
        return self.choose(candidates, exclude=exclude)
