"""Raster export: finished surface → base64 PNG data URL."""

from __future__ import annotations

import base64
import io
import logging

from PIL import Image, ImageDraw, ImageFont

from pixelsmith.engine.surface import LogicalSurface

logger = logging.getLogger(__name__)

# 1x1 transparent GIF, used when even the error placeholder cannot be drawn
FALLBACK_DATA_URL = (
    "data:image/gif;base64,R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7"
)

_ERROR_FILL = (255, 0, 0, 178)
_ERROR_TEXT = (255, 255, 255, 255)


def image_to_data_url(image: Image.Image) -> str:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def encode(surface: LogicalSurface) -> str:
    return image_to_data_url(surface.to_image())


def error_image_data_url(message: str = "CTX Fail", size: int = 256) -> str:
    """Translucent red square with a white caption: the sentinel error image."""
    try:
        image = Image.new("RGBA", (size, size), _ERROR_FILL)
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()
        left, top, right, bottom = draw.textbbox((0, 0), message, font=font)
        origin = ((size - (right - left)) // 2 - left, (size - (bottom - top)) // 2 - top)
        draw.text(origin, message, fill=_ERROR_TEXT, font=font)
        return image_to_data_url(image)
    except (OSError, ValueError) as e:
        logger.error("Error placeholder could not be drawn: %s", e)
        return FALLBACK_DATA_URL
