"""Dominant colour extraction for uploaded garment photos."""

from __future__ import annotations

import asyncio
import io
import logging
from collections import Counter
from pathlib import Path
from typing import List

import requests
from PIL import Image, UnidentifiedImageError

from models.color_classifier import classify_rgb
from models.taxonomy import Color

LOGGER = logging.getLogger(__name__)

SAMPLE_SIZE = (100, 100)
PIXEL_STRIDE = 4
ALPHA_THRESHOLD = 128
TOP_COLORS = 3


class ImageAnalysisError(ValueError):
    """Raised when an image cannot be fetched or decoded."""


def load_image_bytes(image_ref: str, timeout_seconds: float = 5.0) -> bytes:
    """Read an image from an http(s) URL or a local path."""

    if image_ref.startswith(("http://", "https://")):
        try:
            response = requests.get(image_ref, timeout=timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ImageAnalysisError(f"Could not fetch image: {exc}") from exc
        return response.content
    # Opaque storage keys and overlong refs surface as OSError/ValueError here.
    try:
        return Path(image_ref).read_bytes()
    except (OSError, ValueError) as exc:
        raise ImageAnalysisError(f"Could not read image {image_ref[:80]!r}: {exc}") from exc


def _dominant_colors(data: bytes, top_n: int) -> List[Color]:
    try:
        with Image.open(io.BytesIO(data)) as image:
            pixels = list(image.convert("RGBA").resize(SAMPLE_SIZE).getdata())
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageAnalysisError(f"Could not decode image: {exc}") from exc

    counts: Counter = Counter()
    for r, g, b, a in pixels[::PIXEL_STRIDE]:
        if a > ALPHA_THRESHOLD:
            counts[classify_rgb(r, g, b)] += 1
    # Counter.most_common keeps first-seen order for equal counts.
    return [color for color, _ in counts.most_common(top_n)]


async def dominant_colors(data: bytes, top_n: int = TOP_COLORS) -> List[Color]:
    """Return up to ``top_n`` palette colours by frequency among opaque sampled pixels.

    The image is scaled to 100x100 and every fourth pixel is classified.
    Fully transparent images yield an empty list.
    """

    colors = await asyncio.to_thread(_dominant_colors, data, top_n)
    LOGGER.debug("Extracted dominant colours %s", [color.value for color in colors])
    return colors


__all__ = ["ImageAnalysisError", "dominant_colors", "load_image_bytes"]
