"""GET /api/materials: the palette catalog."""

from __future__ import annotations

from fastapi import APIRouter

from pixelsmith.engine.palette import MATERIAL_PALETTES, material_keys
from pixelsmith.models.responses import MaterialInfo, MaterialListResponse

router = APIRouter()


@router.get("/materials", response_model=MaterialListResponse)
async def list_materials() -> MaterialListResponse:
    materials = []
    for key in material_keys():
        palette = MATERIAL_PALETTES[key]
        materials.append(
            MaterialInfo(
                key=key,
                name=palette.name,
                base=palette.base,
                shadow=palette.shadow,
                highlight=palette.highlight,
                outline=palette.outline,
            )
        )
    return MaterialListResponse(materials=materials)
