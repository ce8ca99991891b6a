"""Attribute heuristics for detected item labels."""

from __future__ import annotations

from logic.attribute_inference import (
    color_palette,
    describe,
    infer_attributes,
    infer_overall_style,
    infer_pattern,
    infer_season,
    infer_sleeve,
    infer_style,
    overall_confidence,
)
from models.fashion_item import DetectedItem, ItemAttributes
from models.taxonomy import Category, Length, Pattern, Season, Sleeve, Style
from models.vision import DominantColor, VisionLabel, VisionObservation


def test_style_keywords_checked_in_order() -> None:
    assert infer_style("Formal suit") is Style.FORMAL
    assert infer_style("Running sneaker") is Style.SPORTY
    assert infer_style("Evening dress") is Style.ELEGANT
    assert infer_style("Denim jacket") is Style.STREET
    assert infer_style("Sweater") is Style.CASUAL


def test_optional_attributes_default_to_unknown() -> None:
    attributes = infer_attributes("Handbag", [])
    assert attributes.length is Length.UNKNOWN
    assert attributes.sleeve is Sleeve.UNKNOWN
    assert attributes.to_dict()["length"] is None
    assert attributes.to_dict()["sleeve"] is None


def test_sleeve_and_length_cues() -> None:
    assert infer_sleeve("Tank top") is Sleeve.SLEEVELESS
    assert infer_sleeve("T-shirt") is Sleeve.SHORT
    assert infer_sleeve("Sweater") is Sleeve.LONG
    assert infer_attributes("Mini skirt", []).length is Length.SHORT
    assert infer_attributes("Maxi dress", []).length is Length.LONG
    assert infer_attributes("Midi skirt", []).length is Length.MEDIUM


def test_pattern_uses_any_vision_label() -> None:
    labels = [VisionLabel("Shirt", 0.9), VisionLabel("Stripe", 0.7)]
    assert infer_pattern("Shirt", labels) is Pattern.STRIPED
    assert infer_pattern("Floral blouse") is Pattern.FLORAL
    assert infer_pattern("Blouse", ["Flower"]) is Pattern.FLORAL
    assert infer_pattern("Shirt", [VisionLabel("Shirt", 0.9)]) is Pattern.SOLID


def test_season_prefers_lexical_cues_then_hex_prefix() -> None:
    assert infer_season(["#FF0000"], "Wool coat") is Season.WINTER
    assert infer_season(["#000000"], "Denim shorts") is Season.SUMMER
    assert infer_season(["#FF0000"], "Shirt") is Season.AUTUMN
    assert infer_season(["#0066CC"], "Shirt") is Season.WINTER
    assert infer_season(["#336633"], "Shirt") is Season.SPRING
    assert infer_season(["#ff8800"], "Shirt") is Season.AUTUMN


def test_attributes_keep_at_most_three_colors() -> None:
    attributes = infer_attributes("Sweater", ["#FF0000", "#FFFFFF", "#000000", "#0000FF"])
    assert attributes.colors == ("#FF0000", "#FFFFFF", "#000000")


def test_describe_uses_japanese_color_names() -> None:
    attributes = ItemAttributes(colors=("#FF0000", "#FFFFFF"))
    assert describe("Sweater", attributes) == "赤・白のSweater"
    assert describe("Sweater", ItemAttributes()) == "Sweater"


def test_overall_style_and_confidence() -> None:
    assert infer_overall_style([VisionLabel("Street fashion", 0.8)]) == "ストリート"
    assert infer_overall_style([VisionLabel("Shirt", 0.8)]) == "カジュアル"

    items = [
        DetectedItem(id="tops_0", category=Category.TOPS, description="", confidence=0.9),
        DetectedItem(id="bottoms_0", category=Category.BOTTOMS, description="", confidence=0.7),
    ]
    assert overall_confidence(items) == 0.8
    assert overall_confidence([]) == 0.0


def test_color_palette_orders_by_area() -> None:
    observation = VisionObservation(
        colors=(
            DominantColor(0, 0, 255, score=0.2, pixel_fraction=0.1),
            DominantColor(255, 0, 0, score=0.5, pixel_fraction=0.6),
        )
    )
    palette = color_palette(observation)
    assert [entry["hex"] for entry in palette] == ["#FF0000", "#0000FF"]
    assert palette[0]["name"] == "red"
    assert palette[0]["percentage"] == 60.0
