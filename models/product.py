"""Catalog product and search query schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.taxonomy import Category


@dataclass(frozen=True)
class SearchQuery:
    text: str
    confidence: float
    reasoning: str
    inferred_category: Category

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.text,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "category": self.inferred_category.value,
        }


@dataclass
class Product:
    """A normalized catalog listing."""

    id: str
    name: str
    price: int
    image_url: str
    shop_name: str
    shop_url: str
    category: Category
    tags: List[str] = field(default_factory=list)
    original_price: Optional[int] = None
    similarity: Optional[float] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None

    def add_tags(self, *tags: str) -> None:
        for tag in tags:
            if tag and tag not in self.tags:
                self.tags.append(tag)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "originalPrice": self.original_price,
            "imageUrl": self.image_url,
            "shopName": self.shop_name,
            "shopUrl": self.shop_url,
            "category": self.category.value,
            "tags": list(self.tags),
            "similarity": self.similarity,
            "rating": self.rating,
            "reviewCount": self.review_count,
        }


__all__ = ["Product", "SearchQuery"]
