"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from pixelsmith.config import Settings
from pixelsmith.dependencies import get_grid_config, get_settings
from pixelsmith.engine.config import GridConfig
from pixelsmith.engine.registry import get_registry
from pixelsmith.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    settings: Settings = Depends(get_settings),
    grid: GridConfig = Depends(get_grid_config),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        env=settings.pixelsmith_env,
        grid=f"{grid.width}x{grid.height}",
        generators_registered=get_registry().count,
    )
