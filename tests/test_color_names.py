"""Color naming and conversion tests."""

from __future__ import annotations

import pytest

from models.color_names import ColorName, hex_to_rgb, name_of, rgb_to_hex, rgb_to_hsl


@pytest.mark.parametrize(
    "hex_value, expected",
    [
        ("#FF0000", ColorName.RED),
        ("#0000FF", ColorName.BLUE),
        ("#FFB6C1", ColorName.PINK),
        ("#8B4513", ColorName.BROWN),
        ("#F5DEB3", ColorName.BEIGE),
        ("#ffa500", ColorName.ORANGE),
    ],
)
def test_reference_swatches_map_to_their_names(hex_value: str, expected: ColorName) -> None:
    assert name_of(hex_value) is expected


def test_achromatic_colors_use_lightness() -> None:
    assert name_of("#FFFFFF") is ColorName.WHITE
    assert name_of("#FAFAFA") is ColorName.WHITE
    assert name_of("#000000") is ColorName.BLACK
    assert name_of("#101010") is ColorName.BLACK
    assert name_of("#7F7F7F") is ColorName.GRAY


def test_near_neutral_never_gets_a_hue() -> None:
    # Slight red cast but saturation well under the achromatic threshold.
    assert name_of("#858080") is ColorName.GRAY


def test_malformed_hex_defaults_to_gray() -> None:
    assert name_of("not-a-color") is ColorName.GRAY
    assert name_of("#12345") is ColorName.GRAY
    assert hex_to_rgb("#GGGGGG") is None


def test_hex_conversion_is_uppercase_and_clamped() -> None:
    assert rgb_to_hex(255, 0, 128) == "#FF0080"
    assert rgb_to_hex(300, -5, 10) == "#FF000A"
    assert hex_to_rgb("ff0080") == (255, 0, 128)


def test_rgb_to_hsl_for_primary_red() -> None:
    hsl = rgb_to_hsl(255, 0, 0)
    assert hsl.h == pytest.approx(0.0)
    assert hsl.s == pytest.approx(1.0)
    assert hsl.l == pytest.approx(0.5)


def test_japanese_labels() -> None:
    assert ColorName.RED.label == "赤"
    assert ColorName.BEIGE.label == "ベージュ"
