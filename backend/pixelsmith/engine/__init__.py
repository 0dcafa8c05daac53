"""Pixelsmith sprite engine: silhouettes, edge shading, attachment, assembly."""

from pixelsmith.engine.assembler import ComponentPlan, ComponentStep, ItemAssembler
from pixelsmith.engine.context import GenerationContext
from pixelsmith.engine.palette import Palette, get_palette
from pixelsmith.engine.registry import get_registry, item_generator
from pixelsmith.engine.shapes import Silhouette, is_inside
from pixelsmith.engine.surface import LogicalSurface, SurfaceAcquisitionError

__all__ = [
    "ComponentPlan",
    "ComponentStep",
    "ItemAssembler",
    "GenerationContext",
    "Palette",
    "get_palette",
    "get_registry",
    "item_generator",
    "Silhouette",
    "is_inside",
    "LogicalSurface",
    "SurfaceAcquisitionError",
]
