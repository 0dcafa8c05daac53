"""Item endpoints: list the registered generators and generate one sprite."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from pixelsmith.engine.registry import get_registry
from pixelsmith.models.options import GenerationOptions
from pixelsmith.models.responses import GeneratorInfo, GeneratorListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/items", response_model=GeneratorListResponse)
async def list_items() -> GeneratorListResponse:
    return GeneratorListResponse(
        generators=[
            GeneratorInfo(
                item_type=spec.item_type,
                sub_types=list(spec.sub_types),
                aliases=dict(spec.aliases),
                description=spec.description,
            )
            for spec in get_registry().all()
        ]
    )


@router.post("/generate/{item_type}")
async def generate_item(item_type: str, options: GenerationOptions | None = None) -> dict[str, Any]:
    from pixelsmith.item_api import generate

    if item_type not in get_registry():
        raise HTTPException(status_code=404, detail=f"Unknown item type: {item_type}")

    item = generate(item_type, options)

    if item.is_error:
        logger.warning("Generation of %s returned the error sentinel", item_type)
    else:
        logger.info("Generated %s: %s", item_type, item.name)
    return item.to_record()
