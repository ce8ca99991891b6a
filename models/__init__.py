"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.fashion_item import BoundingRegion, DetectedItem, ItemAttributes
from models.product import Product, SearchQuery
from models.vision import DominantColor, LocalizedObject, VisionLabel, VisionObservation

__all__ = [
    "BoundingRegion",
    "DetectedItem",
    "DominantColor",
    "ItemAttributes",
    "LocalizedObject",
    "Product",
    "SearchQuery",
    "VisionLabel",
    "VisionObservation",
]
