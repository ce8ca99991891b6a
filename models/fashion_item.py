"""Detected fashion item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from models.taxonomy import Category, Length, Pattern, Season, Sleeve, Style, parse_category
from models.vision import NormalizedVertex


def _optional_value(value: Any) -> Optional[str]:
    """Serialise an attribute enum, mapping ``UNKNOWN`` to ``None``."""

    if value is None or getattr(value, "value", value) == "unknown":
        return None
    return getattr(value, "value", value)


@dataclass(frozen=True)
class BoundingRegion:
    """Axis-aligned box in normalized ``[0, 1]`` image coordinates."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_vertices(cls, vertices: Sequence[NormalizedVertex]) -> Optional["BoundingRegion"]:
        if not vertices:
            return None
        xs = [vertex.x for vertex in vertices]
        ys = [vertex.y for vertex in vertices]
        return cls(x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class ItemAttributes:
    colors: Tuple[str, ...] = ()
    style: Style = Style.CASUAL
    length: Length = Length.UNKNOWN
    sleeve: Sleeve = Sleeve.UNKNOWN
    pattern: Pattern = Pattern.SOLID
    season: Season = Season.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "colors": list(self.colors),
            "style": self.style.value,
            "length": _optional_value(self.length),
            "sleeve": _optional_value(self.sleeve),
            "pattern": self.pattern.value,
            "season": _optional_value(self.season),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemAttributes":
        return cls(
            colors=tuple(str(color) for color in (data.get("colors") or [])[:3]),
            style=_coerce(Style, data.get("style"), Style.CASUAL),
            length=_coerce(Length, data.get("length"), Length.UNKNOWN),
            sleeve=_coerce(Sleeve, data.get("sleeve"), Sleeve.UNKNOWN),
            pattern=_coerce(Pattern, data.get("pattern"), Pattern.SOLID),
            season=_coerce(Season, data.get("season"), Season.UNKNOWN),
        )


def _coerce(enum_type, value, default):
    try:
        return enum_type(value) if value is not None else default
    except ValueError:
        return default


@dataclass(frozen=True)
class DetectedItem:
    """A fashion item found in one analysed image."""

    id: str
    category: Category
    description: str
    confidence: float
    attributes: ItemAttributes = field(default_factory=ItemAttributes)
    bounding_region: Optional[BoundingRegion] = None
    label: str = ""

    @property
    def primary_color(self) -> Optional[str]:
        return self.attributes.colors[0] if self.attributes.colors else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.category.value,
            "label": self.label,
            "description": self.description,
            "confidence": self.confidence,
            "boundingBox": self.bounding_region.to_dict() if self.bounding_region else None,
            "attributes": self.attributes.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectedItem":
        """Rebuild an item posted back by a client between detection and search."""

        box = data.get("boundingBox")
        region = (
            BoundingRegion(
                x=float(box["x"]), y=float(box["y"]), width=float(box["width"]), height=float(box["height"])
            )
            if box
            else None
        )
        return cls(
            id=str(data["id"]),
            category=parse_category(data.get("type") or data.get("category")),
            description=str(data.get("description") or ""),
            confidence=float(data.get("confidence") or 0.0),
            attributes=ItemAttributes.from_dict(data.get("attributes") or {}),
            bounding_region=region,
            label=str(data.get("label") or ""),
        )


__all__ = ["BoundingRegion", "DetectedItem", "ItemAttributes"]
