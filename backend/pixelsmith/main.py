"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pixelsmith.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.pixelsmith_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Pixelsmith",
        description="Procedural pixel-art item sprites for games",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Import all item modules to trigger registration
    _register_generators()

    from pixelsmith.api.router import api_router

    app.include_router(api_router)

    return app


def _register_generators() -> None:
    """Import all item modules so @item_generator decorators fire."""
    import importlib
    import pkgutil

    package_name = "pixelsmith.items"
    try:
        package = importlib.import_module(package_name)
    except ModuleNotFoundError as e:
        logger.warning("Item generators not found: %s", e)
        return
    # A generator module that fails to import raises; only a missing package is tolerated
    for _, module_name, _ in pkgutil.iter_modules(package.__path__):
        importlib.import_module(f"{package_name}.{module_name}")


app = create_app()
