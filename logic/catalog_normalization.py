"""Normalize raw catalog listings from either search API schema into :class:`Product`."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.product import Product
from models.taxonomy import Category

logger = logging.getLogger(__name__)

UNKNOWN_SHOP_NAME = "ブランド名不明"


def _parse_price(value: Any) -> int:
    """Accept ints, floats and numeric strings such as ``"3,980"``."""

    if isinstance(value, bool):
        raise ValueError("price must be numeric")
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).replace(",", "").replace("円", "").strip()
    if not text:
        raise ValueError("price is empty")
    return int(float(text))


def _optional_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _optional_int(value: Any) -> Optional[int]:
    try:
        return int(float(value)) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


class _V3Image(BaseModel):
    small: Optional[str] = None
    medium: Optional[str] = None


class _V3Named(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None


class _V3Review(BaseModel):
    rate: Optional[float] = None
    count: Optional[int] = None


class _V3PriceLabel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    default_price: Optional[int] = Field(default=None, alias="defaultPrice")


class V3Listing(BaseModel):
    """Current item search schema with lowercase keys."""

    name: str = Field(min_length=1)
    price: int
    url: str
    code: Optional[Any] = None
    image: _V3Image = Field(default_factory=_V3Image)
    brand: _V3Named = Field(default_factory=_V3Named)
    review: _V3Review = Field(default_factory=_V3Review)
    seller: _V3Named = Field(default_factory=_V3Named)
    price_label: Optional[_V3PriceLabel] = Field(default=None, alias="priceLabel")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> int:
        return _parse_price(value)

    @field_validator("image", "brand", "review", "seller", mode="before")
    @classmethod
    def _empty_sections(cls, value: Any) -> Any:
        return value if value is not None else {}

    def to_product(self, category: Category) -> Product:
        original = self.price_label.default_price if self.price_label else None
        return Product(
            id=f"yahoo_{self.code}" if self.code else _random_id(),
            name=self.name,
            price=self.price,
            original_price=original if original is not None else self.price,
            image_url=self.image.medium or self.image.small or "",
            shop_name=self.brand.name or self.seller.name or UNKNOWN_SHOP_NAME,
            shop_url=self.url,
            category=category,
            tags=[category.value],
            rating=self.review.rate,
            review_count=self.review.count,
        )


class _LegacyImage(BaseModel):
    Small: Optional[str] = None
    Medium: Optional[str] = None


class _LegacyReview(BaseModel):
    Rate: Any = None
    Count: Any = None


class LegacyListing(BaseModel):
    """Older ``ResultSet`` schema with capitalized keys and string prices."""

    Name: str = Field(min_length=1)
    Price: int
    Url: str
    Image: _LegacyImage = Field(default_factory=_LegacyImage)
    Brand: Optional[str] = None
    Review: _LegacyReview = Field(default_factory=_LegacyReview)

    @field_validator("Price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> int:
        return _parse_price(value)

    @field_validator("Brand", mode="before")
    @classmethod
    def _brand(cls, value: Any) -> Optional[str]:
        # Some responses nest the brand as {"Name": ...}.
        if isinstance(value, dict):
            return value.get("Name") or None
        return value or None

    @field_validator("Image", "Review", mode="before")
    @classmethod
    def _empty_sections(cls, value: Any) -> Any:
        return value if value is not None else {}

    def to_product(self, category: Category) -> Product:
        return Product(
            id=_random_id(),
            name=self.Name,
            price=self.Price,
            original_price=self.Price,
            image_url=self.Image.Medium or self.Image.Small or "",
            shop_name=self.Brand or UNKNOWN_SHOP_NAME,
            shop_url=self.Url,
            category=category,
            tags=[category.value],
            rating=_optional_float(self.Review.Rate),
            review_count=_optional_int(self.Review.Count),
        )


def _random_id() -> str:
    return f"yahoo_{uuid.uuid4().hex[:9]}"


ListingParser = Callable[[Dict[str, Any]], BaseModel]

PARSERS: Sequence[ListingParser] = (V3Listing.model_validate, LegacyListing.model_validate)


def to_product(raw: Dict[str, Any], category: Category) -> Optional[Product]:
    """Try each schema in order; ``None`` when neither accepts the record."""

    errors: List[str] = []
    for parser in PARSERS:
        try:
            listing = parser(raw)
        except ValidationError as exc:
            errors.append(f"{exc.title}: {exc.error_count()} errors")
            continue
        return listing.to_product(category)

    keys = sorted(raw)[:10] if isinstance(raw, dict) else []
    logger.warning("Skipping catalog record with unknown schema", extra={"keys": keys, "errors": errors})
    return None


def to_products(records: Sequence[Dict[str, Any]], category: Category) -> List[Product]:
    products = []
    for raw in records:
        product = to_product(raw, category)
        if product is not None:
            products.append(product)
    return products


__all__ = ["LegacyListing", "PARSERS", "UNKNOWN_SHOP_NAME", "V3Listing", "to_product", "to_products"]
