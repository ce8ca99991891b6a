"""Shopper personas that bias search query generation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PERSONA = "kurisu"


@dataclass(frozen=True)
class PersonaProfile:
    """Vocabulary, price tier and age framing for one character persona."""

    name: str
    display_name: str
    fashion_style: str
    preferences: List[str]
    priorities: List[str]
    keywords: List[str]
    query_guideline: str
    age_group: str
    price_range: str
    examples: List[Tuple[str, float, str]]


_PERSONAS: Dict[str, PersonaProfile] = {
    "kurisu": PersonaProfile(
        name="kurisu",
        display_name="クリス（AI研究員）",
        fashion_style="知的で合理性のあるファッション",
        preferences=["機能性", "シンプル", "上品", "知的"],
        priorities=["品質", "着心地", "実用性", "コストパフォーマンス"],
        keywords=["ベーシック", "シンプル", "きれいめ", "オフィス", "大人", "上品"],
        query_guideline="機能性と実用性を重視し、知的で洗練された印象のアイテムを優先する",
        age_group="25-35歳の大人女性",
        price_range="中価格帯〜高価格帯",
        examples=[
            ("ベージュ テーラードジャケット きれいめ", 0.95, "知的単品検索"),
            ("ネイビー センタープレスパンツ オフィス", 0.90, "合理的スタイル検索"),
            ("大人 ベーシック トレンチコート", 0.85, "上品アウター検索"),
        ],
    ),
    "marin": PersonaProfile(
        name="marin",
        display_name="マリン（若者向けトレンド）",
        fashion_style="若者が好むカジュアルで流行性の高いファッション",
        preferences=["カジュアル", "トレンド", "プチプラ", "着回し", "リラックス"],
        priorities=["トレンド感", "着心地", "コスパ", "日常使い", "親しみやすさ"],
        keywords=["カジュアル", "プチプラ", "トレンド", "韓国", "ストリート", "ナチュラル"],
        query_guideline=(
            "カジュアルで親しみやすく、トレンド感のある日常使いしやすいアイテムを優先する。"
            "ギャル系に限らず幅広いカジュアルスタイルに対応"
        ),
        age_group="16-25歳の若い女性",
        price_range="低価格帯〜中価格帯",
        examples=[
            ("ベージュ オーバーサイズ Tシャツ", 0.95, "カジュアル単品検索"),
            ("デニム ワイドパンツ ストリート", 0.90, "ボトムス単品検索"),
            ("カーキ ミリタリージャケット カジュアル", 0.85, "アウター単品検索"),
        ],
    ),
}

PERSONA_NAMES = tuple(_PERSONAS)


def get_persona(persona: str | None) -> PersonaProfile:
    """Return a :class:`PersonaProfile` for the given identifier.

    Defaults to the ``kurisu`` profile when an unsupported persona is provided.
    """

    normalized = (persona or "").strip().lower()
    if normalized not in _PERSONAS:
        logger.info("Unknown persona '%s', defaulting to %s", persona, DEFAULT_PERSONA)
        normalized = DEFAULT_PERSONA
    return _PERSONAS[normalized]


__all__ = ["DEFAULT_PERSONA", "PERSONA_NAMES", "PersonaProfile", "get_persona"]
