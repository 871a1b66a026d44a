# FILE: pcr_app/services/pdfs/images.py
from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from reportlab.lib.utils import ImageReader

from pcr_app.services.pdfs.surface import DrawingSurface

logger = logging.getLogger(__name__)

# injury diagram box: height = width * DIAGRAM_ASPECT
DIAGRAM_ASPECT = 0.4


def decode_annotation(serialized: Optional[str]) -> Optional[bytes]:
    """
    Raster bytes from the drawing surface's serialized state.

    Supports:
    - JSON {"imageData": "data:image/png;base64,...", ...strokes}
    - data:image/...;base64,...
    - bare base64
    """
    if not serialized or not serialized.strip():
        return None

    value = serialized.strip()
    if value.startswith("{"):
        try:
            obj = json.loads(value)
        except ValueError:
            logger.warning("Injury canvas is not valid JSON; treating it as image data")
        else:
            value = (obj.get("imageData") or "").strip() if isinstance(obj, dict) else ""
            if not value:
                logger.warning("Injury canvas JSON carries no imageData")
                return None

    if value.startswith("data:"):
        if "base64," not in value:
            logger.warning("Injury canvas data URL is not base64 encoded")
            return None
        value = value.split("base64,", 1)[1]

    try:
        return base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Injury canvas image data is not valid base64")
        return None


def read_image(raw: bytes) -> Optional[ImageReader]:
    try:
        img = ImageReader(BytesIO(raw))
        img.getSize()  # forces the decode
        return img
    except Exception:
        logger.exception("Failed to decode injury canvas image")
        return None


async def load_annotation(serialized: Optional[str]) -> Optional[ImageReader]:
    """Decode off the event loop; ``None`` means "leave the diagram blank"."""
    raw = decode_annotation(serialized)
    if raw is None:
        return None
    return await asyncio.to_thread(read_image, raw)


def img_reader(path: Optional[str]) -> Optional[ImageReader]:
    if not path:
        return None
    p = Path(path)
    if not p.exists():
        logger.warning("PDF image not found: %s", path)
        return None
    try:
        return ImageReader(str(p))
    except Exception:
        logger.exception("Failed to load image: %s", path)
        return None


def image_scale(native_w: float, native_h: float, box_width: float, aspect: float = DIAGRAM_ASPECT) -> float:
    """Largest aspect-preserving scale inside a ``box_width`` x ``box_width*aspect`` box."""
    return min(box_width / native_w, box_width * aspect / native_h)


def draw_image(
    surface: DrawingSurface,
    img: ImageReader,
    x: float,
    top: float,
    box_width: float,
    *,
    aspect: float = DIAGRAM_ASPECT,
    align: str = "left",
) -> float:
    """Draw ``img`` scaled into the box; returns the height it occupies."""
    native_w, native_h = img.getSize()
    if not native_w or not native_h:
        return 0.0
    scale = image_scale(native_w, native_h, box_width, aspect)
    w, h = native_w * scale, native_h * scale
    if align == "center":
        x += (box_width - w) / 2
    elif align == "right":
        x += box_width - w
    surface.image(img, x, top, w, h)
    return h
