"""FastAPI dependency injection."""

from __future__ import annotations

from pixelsmith.config import Settings, settings
from pixelsmith.engine.config import GridConfig


def get_settings() -> Settings:
    return settings


def get_grid_config() -> GridConfig:
    return GridConfig.from_settings(settings)
