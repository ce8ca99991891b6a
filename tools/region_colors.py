"""Crop-then-reanalyze color extraction for a detected item's region."""

from __future__ import annotations

import logging
import math
from io import BytesIO
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from models.fashion_item import BoundingRegion
from models.vision import DominantColor

logger = logging.getLogger(__name__)

ColorAnalyzer = Callable[[bytes], Sequence[DominantColor]]

MAX_REGION_COLORS = 3


def pixel_box(region: BoundingRegion, width: int, height: int) -> Optional[Tuple[int, int, int, int]]:
    """Convert a normalized region into a pixel rectangle.

    Returns ``None`` when the floored rectangle is empty or falls outside the
    image, in which case callers analyse the whole image instead.
    """

    left = math.floor(region.x * width)
    top = math.floor(region.y * height)
    right = math.floor((region.x + region.width) * width)
    bottom = math.floor((region.y + region.height) * height)

    if left < 0 or top < 0 or right > width or bottom > height:
        return None
    if right <= left or bottom <= top:
        return None
    return left, top, right, bottom


class RegionColorExtractor:
    """Narrows dominant-color extraction to an item's bounding region.

    The crop is handed to ``analyzer`` (normally the vision client's image
    properties call). Every failure is absorbed and reported as an empty list,
    which callers read as "color unknown".
    """

    def __init__(self, analyzer: ColorAnalyzer | None = None) -> None:
        self.analyzer = analyzer

    def extract_colors(self, image_bytes: bytes | None, region: BoundingRegion | None) -> List[str]:
        if not image_bytes or self.analyzer is None:
            return []

        try:
            crop_bytes = self._crop(image_bytes, region)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            logger.warning("Could not decode image for region colors", extra={"error": str(exc)})
            return []

        try:
            colors = list(self.analyzer(crop_bytes))
        except Exception as exc:  # noqa: BLE001 - analyzer is a remote collaborator
            logger.warning("Region color analysis failed", extra={"error": str(exc)})
            return []

        ordered = sorted(colors, key=lambda color: color.pixel_fraction, reverse=True)
        return [color.hex for color in ordered[:MAX_REGION_COLORS]]

    def _crop(self, image_bytes: bytes, region: BoundingRegion | None) -> bytes:
        with Image.open(BytesIO(image_bytes)) as image:
            width, height = image.size
            box = pixel_box(region, width, height) if region else None
            if box is None:
                logger.debug(
                    "Region unusable, analysing full image",
                    extra={"region": region.to_dict() if region else None, "size": [width, height]},
                )
                target = image.convert("RGB")
            else:
                target = image.convert("RGB").crop(box)
            buffer = BytesIO()
            target.save(buffer, format="PNG")
        return buffer.getvalue()


__all__ = ["ColorAnalyzer", "RegionColorExtractor", "pixel_box"]
