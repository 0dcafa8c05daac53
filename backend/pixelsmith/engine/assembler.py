"""Item assembler: runs component steps in dependency order and finalizes the Item."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pixelsmith.engine.config import GridConfig
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.export import encode, error_image_data_url
from pixelsmith.engine.registry import GeneratorRegistry, get_registry
from pixelsmith.engine.surface import LogicalSurface, SurfaceAcquisitionError
from pixelsmith.models.item import Item
from pixelsmith.models.options import GenerationOptions
from pixelsmith.utils.math_helpers import title_case

logger = logging.getLogger(__name__)

SENTINEL_ERROR = "Canvas context failed"


@dataclass
class ComponentStep:
    id: str
    build: Callable[[GenerationContext], None]
    dependencies: list[str] = field(default_factory=list)
    description: str = ""


@dataclass
class ComponentPlan:
    """Steps for one item plus how to name and describe the result."""

    item_type: str
    steps: list[ComponentStep]
    namer: Callable[[GenerationContext], str]
    describer: Callable[[GenerationContext], dict[str, Any]]

    def add(self, id: str, build: Callable[[GenerationContext], None], *dependencies: str, description: str = "") -> None:
        self.steps.append(ComponentStep(id, build, list(dependencies), description))

    def resolve_order(self) -> list[ComponentStep]:
        """Topological sort of the steps. Independent steps keep declaration order."""
        pool = {s.id: s for s in self.steps}
        if len(pool) != len(self.steps):
            raise ValueError(f"Duplicate step ID in {self.item_type} plan")
        for step in self.steps:
            for dep in step.dependencies:
                if dep not in pool:
                    raise ValueError(f"Step {step.id} depends on unknown step {dep}")

        # Kahn's algorithm
        in_degree = {s.id: len(set(s.dependencies)) for s in self.steps}
        position = {s.id: i for i, s in enumerate(self.steps)}
        queue = [s.id for s in self.steps if in_degree[s.id] == 0]
        ordered: list[ComponentStep] = []

        while queue:
            sid = queue.pop(0)
            ordered.append(pool[sid])
            for other in self.steps:
                if sid in other.dependencies:
                    in_degree[other.id] -= 1
                    if in_degree[other.id] == 0:
                        queue.append(other.id)
                        queue.sort(key=position.__getitem__)

        if len(ordered) != len(pool):
            missing = set(pool) - {s.id for s in ordered}
            raise ValueError(f"Circular dependency detected among: {missing}")

        return ordered


class ItemAssembler:
    """Orchestrates one generation call: surface, plan, steps, name, metadata, export."""

    def __init__(
        self,
        registry: GeneratorRegistry | None = None,
        grid: GridConfig | None = None,
        encoder: Callable[[LogicalSurface], str] = encode,
    ) -> None:
        self.registry = registry or get_registry()
        self.grid = grid or GridConfig()
        self.encoder = encoder

    def generate(
        self,
        item_type: str,
        options: GenerationOptions | dict[str, Any] | None = None,
        *,
        rng: random.Random | None = None,
    ) -> Item:
        spec = self.registry.get(item_type)
        ctx = GenerationContext.create(spec.item_type, options, rng=rng, grid=self.grid)
        try:
            ctx.acquire_surface()
        except SurfaceAcquisitionError as e:
            return self.sentinel(ctx, e)
        plan = spec.planner(ctx)
        return self.assemble(plan, ctx)

    def assemble(self, plan: ComponentPlan, ctx: GenerationContext) -> Item:
        start = time.perf_counter()
        if ctx.surface is None:
            try:
                ctx.acquire_surface()
            except SurfaceAcquisitionError as e:
                return self.sentinel(ctx, e)

        ordered = plan.resolve_order()
        logger.info("Assembler: %s with %d component steps", plan.item_type, len(ordered))

        for step in ordered:
            t0 = time.perf_counter()
            step.build(ctx)
            elapsed = (time.perf_counter() - t0) * 1000
            logger.debug("  %s drawn in %.1fms", step.id, elapsed)

        name = plan.namer(ctx)
        item_data = plan.describer(ctx)
        item_data["seedApplied"] = ctx.seed_applied
        if ctx.sampler.warnings:
            item_data["warnings"] = list(ctx.sampler.warnings)

        item = Item(
            type=plan.item_type,
            name=name,
            seed=ctx.seed,
            item_data=item_data,
            image_data_url=self.encoder(ctx.surface),
            surface=ctx.surface,
            components=list(ctx.components),
        )
        total = (time.perf_counter() - start) * 1000
        logger.info("Assembled %r (%d components) in %.0fms", name, len(ctx.components), total)
        return item

    def sentinel(self, ctx: GenerationContext, error: Exception) -> Item:
        """Visible placeholder Item returned when no surface can be acquired."""
        logger.error("Surface acquisition failed for %s: %s", ctx.item_type, error)
        return Item(
            type=ctx.item_type,
            name=f"Error {title_case(ctx.item_type)}",
            seed=ctx.seed,
            item_data={"error": SENTINEL_ERROR},
            image_data_url=error_image_data_url("CTX Fail"),
        )
