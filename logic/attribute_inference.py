"""Keyword and color heuristics that infer item attributes from vision text."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from models.color_names import name_of
from models.fashion_item import DetectedItem, ItemAttributes
from models.taxonomy import Length, Pattern, Season, Sleeve, Style
from models.vision import VisionLabel, VisionObservation

logger = logging.getLogger(__name__)

MAX_ITEM_COLORS = 3

# Checked in order; the first matching style wins.
STYLE_KEYWORDS: List[Tuple[Style, Tuple[str, ...]]] = [
    (Style.FORMAL, ("suit", "blazer", "formal")),
    (Style.SPORTY, ("sport", "athletic", "sneaker")),
    (Style.ELEGANT, ("elegant", "dress", "gown")),
    (Style.STREET, ("street", "urban", "denim")),
]

LENGTH_KEYWORDS: List[Tuple[Length, Tuple[str, ...]]] = [
    (Length.SHORT, ("short", "mini")),
    (Length.LONG, ("long", "maxi")),
    (Length.MEDIUM, ("midi", "knee")),
]

SLEEVE_KEYWORDS: List[Tuple[Sleeve, Tuple[str, ...]]] = [
    (Sleeve.SLEEVELESS, ("sleeveless", "tank")),
    (Sleeve.SHORT, ("short sleeve", "t-shirt")),
    (Sleeve.LONG, ("long sleeve", "sweater")),
]

# (pattern, terms matched in the item label, terms matched in any vision label)
PATTERN_KEYWORDS: List[Tuple[Pattern, Tuple[str, ...], Tuple[str, ...]]] = [
    (Pattern.STRIPED, ("stripe",), ("stripe",)),
    (Pattern.FLORAL, ("floral",), ("flower",)),
    (Pattern.GEOMETRIC, ("geometric",), ("pattern",)),
    (Pattern.ANIMAL, ("animal",), ("leopard", "zebra")),
]

SEASON_KEYWORDS: List[Tuple[Season, Tuple[str, ...]]] = [
    (Season.WINTER, ("coat", "sweater")),
    (Season.SUMMER, ("shorts", "tank")),
]

# Literal hex-string prefixes, not hue ranges. Approximate by nature.
WARM_HEX_PREFIXES = ("#FF", "#FFA", "#FF6", "#FF9")
COOL_HEX_PREFIXES = ("#00", "#66", "#99", "#CC")

OVERALL_STYLE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "ガーリーカジュアル": ("cute", "sweet", "girly", "casual"),
    "エレガント": ("elegant", "sophisticated", "formal", "classy"),
    "ストリート": ("street", "urban", "edgy", "hip"),
    "スポーティ": ("sport", "athletic", "active", "sporty"),
    "フェミニン": ("feminine", "soft", "delicate", "romantic"),
}
DEFAULT_OVERALL_STYLE = "カジュアル"


def _first_match(text: str, table, default):
    for value, keywords in table:
        if any(keyword in text for keyword in keywords):
            return value
    return default


def infer_style(label: str) -> Style:
    return _first_match(label.lower(), STYLE_KEYWORDS, Style.CASUAL)


def infer_length(label: str) -> Length:
    return _first_match(label.lower(), LENGTH_KEYWORDS, Length.UNKNOWN)


def infer_sleeve(label: str) -> Sleeve:
    return _first_match(label.lower(), SLEEVE_KEYWORDS, Sleeve.UNKNOWN)


def infer_pattern(label: str, vision_labels: Iterable[VisionLabel | str] = ()) -> Pattern:
    """Infer a print pattern from the label, corroborated by every vision label."""

    name = label.lower()
    all_labels = " ".join(
        (entry.description if isinstance(entry, VisionLabel) else str(entry)).lower() for entry in vision_labels
    )
    for pattern, label_terms, context_terms in PATTERN_KEYWORDS:
        if any(term in name for term in label_terms) or any(term in all_labels for term in context_terms):
            return pattern
    return Pattern.SOLID


def infer_season(colors: Sequence[str], label: str) -> Season:
    """Guess a season from lexical cues, then from hex-prefix color temperature.

    The color step compares literal hex prefixes rather than computing hue, so
    it is only a coarse approximation of warm and cool palettes.
    """

    lexical = _first_match(label.lower(), SEASON_KEYWORDS, None)
    if lexical is not None:
        return lexical

    upper = [color.upper() for color in colors]
    if any(color.startswith(prefix) for color in upper for prefix in WARM_HEX_PREFIXES):
        return Season.AUTUMN
    if any(color.startswith(prefix) for color in upper for prefix in COOL_HEX_PREFIXES):
        return Season.WINTER
    return Season.SPRING


def infer_attributes(
    label: str, colors: Sequence[str], vision_labels: Iterable[VisionLabel | str] = ()
) -> ItemAttributes:
    """Derive the full attribute bundle for one item label."""

    item_colors = tuple(colors[:MAX_ITEM_COLORS])
    attributes = ItemAttributes(
        colors=item_colors,
        style=infer_style(label),
        length=infer_length(label),
        sleeve=infer_sleeve(label),
        pattern=infer_pattern(label, vision_labels),
        season=infer_season(item_colors, label),
    )
    logger.debug("Inferred attributes", extra={"label": label, "attributes": attributes.to_dict()})
    return attributes


def describe(label: str, attributes: ItemAttributes) -> str:
    """Human-readable description: Japanese color names followed by the label."""

    names = [name_of(color).label for color in attributes.colors]
    prefix = "・".join(names) + "の" if names else ""
    return f"{prefix}{label}"


def infer_overall_style(labels: Iterable[VisionLabel]) -> str:
    label_text = " ".join(label.description.lower() for label in labels)
    for style, keywords in OVERALL_STYLE_KEYWORDS.items():
        if any(keyword in label_text for keyword in keywords):
            return style
    return DEFAULT_OVERALL_STYLE


def color_palette(observation: VisionObservation, limit: int = 5) -> List[Dict[str, object]]:
    """Top colors of the whole image with their share of the covered area."""

    palette = []
    for color in observation.dominant_colors()[:limit]:
        palette.append(
            {
                "hex": color.hex,
                "name": name_of(color.hex).value,
                "percentage": round(color.pixel_fraction * 100, 1),
                "rgb": {"r": color.red, "g": color.green, "b": color.blue},
            }
        )
    return palette


def overall_confidence(items: Sequence[DetectedItem]) -> float:
    if not items:
        return 0.0
    return round(sum(item.confidence for item in items) / len(items), 2)


__all__ = [
    "color_palette",
    "describe",
    "infer_attributes",
    "infer_length",
    "infer_overall_style",
    "infer_pattern",
    "infer_season",
    "infer_sleeve",
    "infer_style",
    "overall_confidence",
]
