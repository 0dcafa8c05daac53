"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    pixelsmith_env: str = "development"
    pixelsmith_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Logical grid
    grid_width: int = 64
    grid_height: int = 64
    display_scale: int = 4
    canvas_padding: int = 4

    # Palette fallback for unknown material keys
    default_material: str = "IRON"

    # Historical behaviour records the seed without seeding the RNG
    seed_drives_rng: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
