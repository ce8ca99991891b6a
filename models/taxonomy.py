"""Canonical taxonomy for detected fashion items.

This module centralises the closed vocabularies used for item categories and
inferred attributes, together with the keyword tables that map free-form
vision labels onto them. Optional attributes carry an explicit ``UNKNOWN``
member so that "not applicable" never collides with a concrete value.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple


class Category(str, Enum):
    TOPS = "tops"
    BOTTOMS = "bottoms"
    DRESS = "dress"
    SHOES = "shoes"
    ACCESSORIES = "accessories"
    OUTER = "outer"

    @property
    def label(self) -> str:
        """Japanese catalog name for the category."""

        return CATEGORY_LABELS[self]


class Style(str, Enum):
    CASUAL = "casual"
    FORMAL = "formal"
    SPORTY = "sporty"
    ELEGANT = "elegant"
    STREET = "street"


class Length(str, Enum):
    UNKNOWN = "unknown"
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class Sleeve(str, Enum):
    UNKNOWN = "unknown"
    SLEEVELESS = "sleeveless"
    SHORT = "short"
    LONG = "long"


class Pattern(str, Enum):
    SOLID = "solid"
    STRIPED = "striped"
    FLORAL = "floral"
    GEOMETRIC = "geometric"
    ANIMAL = "animal"


class Season(str, Enum):
    UNKNOWN = "unknown"
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


CATEGORY_LABELS: Dict[Category, str] = {
    Category.TOPS: "トップス",
    Category.BOTTOMS: "ボトムス",
    Category.DRESS: "ワンピース",
    Category.SHOES: "靴",
    Category.ACCESSORIES: "アクセサリー",
    Category.OUTER: "アウター",
}

# Iteration order is the detection order for label matching.
CATEGORY_KEYWORDS: Dict[Category, List[str]] = {
    Category.TOPS: ["shirt", "blouse", "top", "sweater", "hoodie", "jacket", "coat", "cardigan", "t-shirt", "tank top"],
    Category.BOTTOMS: ["pants", "jeans", "trousers", "shorts", "skirt", "leggings", "bottom"],
    Category.DRESS: ["dress", "gown", "robe", "frock"],
    Category.SHOES: ["shoe", "boot", "sneaker", "sandal", "heel", "footwear", "loafer"],
    Category.ACCESSORIES: [
        "bag",
        "purse",
        "handbag",
        "backpack",
        "hat",
        "cap",
        "sunglasses",
        "watch",
        "jewelry",
        "necklace",
        "bracelet",
    ],
    Category.OUTER: ["jacket", "coat", "blazer", "cardigan", "outerwear"],
}

# Localized object names use a smaller, coarser vocabulary.
OBJECT_KEYWORDS: List[Tuple[Category, Tuple[str, ...]]] = [
    (Category.TOPS, ("clothing", "shirt", "top")),
    (Category.BOTTOMS, ("pants", "jeans", "bottom")),
    (Category.DRESS, ("dress",)),
    (Category.SHOES, ("shoe", "footwear")),
    (Category.ACCESSORIES, ("bag", "accessory")),
    (Category.OUTER, ("jacket", "coat")),
]


def categories_for_label(label: str) -> List[Category]:
    """Return every category whose keywords occur in ``label``."""

    text = label.lower()
    return [
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if any(keyword in text for keyword in keywords)
    ]


def categorize_object(name: str) -> Optional[Category]:
    """Classify a localized object name, or ``None`` when it is not apparel."""

    text = name.lower()
    for category, keywords in OBJECT_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return None


def parse_category(value: str | Category | None, default: Category = Category.TOPS) -> Category:
    """Coerce loose category strings into :class:`Category`."""

    if isinstance(value, Category):
        return value
    try:
        return Category(str(value or "").strip().lower())
    except ValueError:
        return default


__all__ = [
    "Category",
    "Style",
    "Length",
    "Sleeve",
    "Pattern",
    "Season",
    "CATEGORY_LABELS",
    "CATEGORY_KEYWORDS",
    "OBJECT_KEYWORDS",
    "categories_for_label",
    "categorize_object",
    "parse_category",
]
