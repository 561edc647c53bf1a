"""Nearest-neighbour colour naming for sampled pixels and free-text labels."""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

from models.taxonomy import Color, normalize_color_name

logger = logging.getLogger(__name__)

# Order matters: on equal distance the earlier entry wins.
REFERENCE_COLORS: List[Tuple[Color, Tuple[int, int, int]]] = [
    (Color.BLACK, (0, 0, 0)),
    (Color.WHITE, (255, 255, 255)),
    (Color.RED, (255, 0, 0)),
    (Color.GREEN, (0, 255, 0)),
    (Color.BLUE, (0, 0, 255)),
    (Color.YELLOW, (255, 255, 0)),
    (Color.PURPLE, (128, 0, 128)),
    (Color.ORANGE, (255, 165, 0)),
    (Color.PINK, (255, 192, 203)),
    (Color.BROWN, (165, 42, 42)),
    (Color.GREY, (128, 128, 128)),
    (Color.NAVY, (0, 0, 128)),
    (Color.BEIGE, (245, 245, 220)),
]


def _check_channel(name: str, value: int) -> int:
    if not 0 <= int(value) <= 255:
        raise ValueError(f"Channel {name}={value} outside 0-255")
    return int(value)


def classify_rgb(r: int, g: int, b: int) -> Color:
    """Return the palette colour closest to ``(r, g, b)`` in Euclidean RGB space."""

    rgb = (_check_channel("r", r), _check_channel("g", g), _check_channel("b", b))
    closest = REFERENCE_COLORS[0][0]
    min_distance = math.inf
    for color, reference in REFERENCE_COLORS:
        distance = math.dist(rgb, reference)
        if distance < min_distance:
            min_distance = distance
            closest = color
    return closest


def classify_label(label: str | None) -> Optional[Color]:
    """Resolve a user supplied colour label; ``None`` when the label is blank."""

    color = normalize_color_name(label)
    logger.debug("classified label %r -> %s", label, color)
    return color


__all__ = ["REFERENCE_COLORS", "classify_label", "classify_rgb"]
