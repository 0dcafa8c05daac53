"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    env: str = "development"
    grid: str = ""
    generators_registered: int = 0


class GeneratorInfo(BaseModel):
    item_type: str
    sub_types: list[str] = Field(default_factory=list)
    aliases: dict[str, str] = Field(default_factory=dict)
    description: str = ""


class GeneratorListResponse(BaseModel):
    generators: list[GeneratorInfo] = Field(default_factory=list)


class MaterialInfo(BaseModel):
    key: str
    name: str
    base: str
    shadow: str
    highlight: str
    outline: str | None = None


class MaterialListResponse(BaseModel):
    materials: list[MaterialInfo] = Field(default_factory=list)
