"""Generator registry: every item type is a planner function registered via decorator.

Usage:
    @item_generator(item_type="sword", sub_types=["dagger", "katana"], aliases={"longsword": "standard"})
    def plan_sword(ctx: GenerationContext) -> ComponentPlan:
        ...

Adding a new item type = creating one module under ``pixelsmith.items``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from pixelsmith.engine.assembler import ComponentPlan
    from pixelsmith.engine.context import GenerationContext

logger = logging.getLogger(__name__)

Planner = Callable[["GenerationContext"], "ComponentPlan"]


@dataclass
class GeneratorSpec:
    item_type: str
    planner: Planner
    sub_types: list[str] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)
    description: str = ""


class GeneratorRegistry:
    """Registry of item generators keyed by item type."""

    def __init__(self) -> None:
        self._generators: dict[str, GeneratorSpec] = {}

    def register(self, spec: GeneratorSpec) -> None:
        if spec.item_type in self._generators:
            raise ValueError(f"Duplicate item type: {spec.item_type}")
        self._generators[spec.item_type] = spec
        logger.debug("Registered generator %s (%d sub-types)", spec.item_type, len(spec.sub_types))

    def get(self, item_type: str) -> GeneratorSpec:
        return self._generators[item_type]

    def __contains__(self, item_type: str) -> bool:
        return item_type in self._generators

    def all(self) -> list[GeneratorSpec]:
        return sorted(self._generators.values(), key=lambda s: s.item_type)

    @property
    def count(self) -> int:
        return len(self._generators)


# Module-level singleton
_registry = GeneratorRegistry()


def get_registry() -> GeneratorRegistry:
    return _registry


def item_generator(
    *,
    item_type: str,
    sub_types: list[str] | None = None,
    aliases: dict[str, str] | None = None,
    description: str = "",
):
    """Decorator to register an item planner."""

    def decorator(fn: Planner):
        spec = GeneratorSpec(
            item_type=item_type,
            planner=fn,
            sub_types=sub_types or [],
            aliases=aliases or {},
            description=description,
        )
        _registry.register(spec)
        return fn

    return decorator
