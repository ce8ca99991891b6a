"""Placeholder products shown when every catalog search comes back empty."""

from __future__ import annotations

import random
from typing import List, Sequence

from logic.query_synthesis import fallback_query
from models.color_names import name_of
from models.fashion_item import DetectedItem
from models.product import Product

MOCKS_PER_ITEM = 2
MAX_MOCK_PRODUCTS = 6
PLACEHOLDER_IMAGE = "/images/placeholder.svg"
PLACEHOLDER_SHOP = "サンプルブランド"
UNKNOWN_COLOR_WORD = "カラー"


def create_mock_products(items: Sequence[DetectedItem], rng: random.Random | None = None) -> List[Product]:
    """Two clearly labelled sample listings per item, at most six in total."""

    rng = rng or random.Random()
    products: List[Product] = []
    for item in items:
        color_word = name_of(item.primary_color).label if item.primary_color else UNKNOWN_COLOR_WORD
        category_word = fallback_query(item)
        for index in range(MOCKS_PER_ITEM):
            products.append(
                Product(
                    id=f"mock_{item.id}_{index}",
                    name=f"{color_word}{category_word} - サンプル商品{index + 1}",
                    price=1980 + rng.randrange(3000),
                    original_price=2980 + rng.randrange(3000),
                    image_url=PLACEHOLDER_IMAGE,
                    shop_name=PLACEHOLDER_SHOP,
                    shop_url="#",
                    category=item.category,
                    tags=[category_word, color_word],
                    rating=round(4.0 + rng.random(), 1),
                    review_count=rng.randint(10, 209),
                )
            )
    return products[:MAX_MOCK_PRODUCTS]


__all__ = ["MAX_MOCK_PRODUCTS", "MOCKS_PER_ITEM", "create_mock_products"]
