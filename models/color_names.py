"""Named-color classification for hex swatches.

Colors are matched against a small reference table by Euclidean distance in
RGB space. Desaturated swatches short-circuit to white, black or gray using
their HSL lightness so that hue noise on near-neutral pixels never produces a
hued name.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

_HEX_PATTERN = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)

ACHROMATIC_SATURATION = 0.1


class ColorName(str, Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    ORANGE = "orange"
    PURPLE = "purple"
    PINK = "pink"
    BLACK = "black"
    WHITE = "white"
    GRAY = "gray"
    BROWN = "brown"
    BEIGE = "beige"

    @property
    def label(self) -> str:
        """Japanese color word used in descriptions and search queries."""

        return _JAPANESE_LABELS[self]


_JAPANESE_LABELS = {
    ColorName.RED: "赤",
    ColorName.GREEN: "緑",
    ColorName.BLUE: "青",
    ColorName.YELLOW: "黄色",
    ColorName.ORANGE: "オレンジ",
    ColorName.PURPLE: "紫",
    ColorName.PINK: "ピンク",
    ColorName.BLACK: "黒",
    ColorName.WHITE: "白",
    ColorName.GRAY: "グレー",
    ColorName.BROWN: "茶色",
    ColorName.BEIGE: "ベージュ",
}

REFERENCE_SWATCHES: List[Tuple[str, ColorName]] = [
    ("#FF0000", ColorName.RED),
    ("#DC143C", ColorName.RED),
    ("#B22222", ColorName.RED),
    ("#00FF00", ColorName.GREEN),
    ("#008000", ColorName.GREEN),
    ("#228B22", ColorName.GREEN),
    ("#0000FF", ColorName.BLUE),
    ("#0066CC", ColorName.BLUE),
    ("#4169E1", ColorName.BLUE),
    ("#FFFF00", ColorName.YELLOW),
    ("#FFD700", ColorName.YELLOW),
    ("#FFA500", ColorName.ORANGE),
    ("#FF4500", ColorName.ORANGE),
    ("#800080", ColorName.PURPLE),
    ("#9370DB", ColorName.PURPLE),
    ("#FF1493", ColorName.PINK),
    ("#FFB6C1", ColorName.PINK),
    ("#FFC0CB", ColorName.PINK),
    ("#FF69B4", ColorName.PINK),
    ("#000000", ColorName.BLACK),
    ("#2F2F2F", ColorName.BLACK),
    ("#FFFFFF", ColorName.WHITE),
    ("#F5F5F5", ColorName.WHITE),
    ("#808080", ColorName.GRAY),
    ("#A9A9A9", ColorName.GRAY),
    ("#696969", ColorName.GRAY),
    ("#D3D3D3", ColorName.GRAY),
    ("#8B4513", ColorName.BROWN),
    ("#A0522D", ColorName.BROWN),
    ("#D2691E", ColorName.BROWN),
    ("#F0E68C", ColorName.BEIGE),
    ("#DEB887", ColorName.BEIGE),
    ("#F5DEB3", ColorName.BEIGE),
]


@dataclass(frozen=True)
class HSL:
    """Hue in [0, 1), saturation and lightness in [0, 1]."""

    h: float
    s: float
    l: float  # noqa: E741


def rgb_to_hex(red: int, green: int, blue: int) -> str:
    """Format an RGB triple as ``#RRGGBB``, clamping each channel to 0-255."""

    channels = [max(0, min(255, int(value))) for value in (red, green, blue)]
    return "#{:02X}{:02X}{:02X}".format(*channels)


def hex_to_rgb(hex_value: str) -> Optional[Tuple[int, int, int]]:
    match = _HEX_PATTERN.match(hex_value.strip()) if isinstance(hex_value, str) else None
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]


def rgb_to_hsl(red: int, green: int, blue: int) -> HSL:
    r, g, b = red / 255, green / 255, blue / 255
    high = max(r, g, b)
    low = min(r, g, b)
    lightness = (high + low) / 2

    if high == low:
        return HSL(h=0.0, s=0.0, l=lightness)

    delta = high - low
    saturation = delta / (2 - high - low) if lightness > 0.5 else delta / (high + low)
    if high == r:
        hue = (g - b) / delta + (6 if g < b else 0)
    elif high == g:
        hue = (b - r) / delta + 2
    else:
        hue = (r - g) / delta + 4
    return HSL(h=hue / 6, s=saturation, l=lightness)


def _distance(first: Tuple[int, int, int], second: Tuple[int, int, int]) -> float:
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(first, second)))


def name_of(hex_value: str) -> ColorName:
    """Return the closest named color for ``hex_value``.

    Malformed input yields :attr:`ColorName.GRAY`; the function never raises.
    """

    rgb = hex_to_rgb(hex_value)
    if rgb is None:
        logger.debug("Unparseable hex %r, defaulting to gray", hex_value)
        return ColorName.GRAY

    hsl = rgb_to_hsl(*rgb)
    if hsl.s < ACHROMATIC_SATURATION:
        if hsl.l > 0.9:
            return ColorName.WHITE
        if hsl.l < 0.1:
            return ColorName.BLACK
        return ColorName.GRAY

    closest = ColorName.GRAY
    best = math.inf
    for reference_hex, name in REFERENCE_SWATCHES:
        distance = _distance(rgb, hex_to_rgb(reference_hex))  # type: ignore[arg-type]
        if distance < best:
            best = distance
            closest = name
    return closest


__all__ = [
    "ColorName",
    "HSL",
    "REFERENCE_SWATCHES",
    "hex_to_rgb",
    "name_of",
    "rgb_to_hex",
    "rgb_to_hsl",
]
