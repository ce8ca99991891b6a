"""Search query synthesis: generator path, guardrails and deterministic fallback."""

from __future__ import annotations

import json
from typing import List

import pytest

from logic.query_synthesis import (
    QuerySynthesizer,
    build_prompt,
    fallback_query,
    infer_query_category,
    item_search_query,
    parse_generated,
    season_word,
)
from models.color_names import ColorName
from models.fashion_item import DetectedItem, ItemAttributes
from models.personas import get_persona
from models.taxonomy import Category
from models.vision import DominantColor, VisionLabel, VisionObservation
from tools.query_generator import QueryGenerationError, QueryGenerator


class FakeGenerator(QueryGenerator):
    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.text


def _observation(*labels: tuple, color: tuple = (255, 0, 0)) -> VisionObservation:
    return VisionObservation(
        labels=tuple(VisionLabel(description, score) for description, score in labels),
        colors=(DominantColor(*color, pixel_fraction=0.6),),
    )


def _item(label: str, category: Category, colors: tuple = ("#FF0000",), confidence: float = 0.9) -> DetectedItem:
    return DetectedItem(
        id=f"{category.value}_0",
        category=category,
        description=f"{label}",
        confidence=confidence,
        attributes=ItemAttributes(colors=colors),
        label=label,
    )


def _answer(*queries: tuple) -> str:
    payload = {"queries": [{"query": q, "confidence": c, "reasoning": "test"} for q, c in queries]}
    return "了解しました。\n```json\n" + json.dumps(payload, ensure_ascii=False) + "\n```"


def test_generator_queries_sorted_filtered_and_capped() -> None:
    generator = FakeGenerator(
        _answer(
            ("赤 ニット セーター", 0.8),
            ("赤 コーデ", 0.99),
            ("ベージュ テーラードジャケット", 0.9),
            ("黒 スカート", 0.7),
            ("白 ブラウス", 0.6),
            ("デニム パンツ", 0.5),
            ("ネイビー セットアップ", 0.95),
        )
    )
    queries = QuerySynthesizer(generator).synthesize(
        [_item("Sweater", Category.TOPS)], _observation(("Sweater", 0.9)), "kurisu"
    )

    assert len(queries) == 5
    assert [query.confidence for query in queries] == sorted((q.confidence for q in queries), reverse=True)
    assert all("コーデ" not in query.text and "セット" not in query.text for query in queries)
    assert queries[0].text == "ベージュ テーラードジャケット"
    assert queries[0].inferred_category is Category.OUTER


def test_prompt_embeds_persona_and_observation() -> None:
    generator = FakeGenerator(_answer(("赤 セーター", 0.9)))
    QuerySynthesizer(generator).synthesize([], _observation(("Sweater", 0.9)), "marin")

    prompt = generator.prompts[0]
    assert "マリン" in prompt
    assert "Sweater" in prompt
    assert "コーデ" in prompt  # listed as a forbidden word
    assert '"queries"' in prompt


def test_unparseable_generator_output_falls_back() -> None:
    generator = FakeGenerator("ごめんなさい、今は答えられません。")
    queries = QuerySynthesizer(generator).synthesize(
        [_item("Sweater", Category.TOPS)], _observation(("Sweater", 0.92)), "kurisu"
    )

    assert [query.text for query in queries] == ["赤 セーター", "セーター レディース おしゃれ"]
    assert queries[0].confidence == pytest.approx(0.92 * 0.9)


@pytest.mark.parametrize(
    "generator",
    [
        FakeGenerator(error=QueryGenerationError("timeout")),
        FakeGenerator(error=RuntimeError("connection reset")),
        FakeGenerator('{"queries": [{"query": "", "confidence": 0.9}]}'),
        FakeGenerator(_answer(("白 コーデ", 0.9), ("黒 セット", 0.8))),
    ],
)
def test_generator_failures_use_deterministic_queries(generator: FakeGenerator) -> None:
    queries = QuerySynthesizer(generator).synthesize([], _observation(("Skirt", 0.9)), None)
    assert queries and queries[0].text == "赤 スカート"


def test_generator_not_consulted_without_observation() -> None:
    generator = FakeGenerator(_answer(("赤 セーター", 0.9)))
    queries = QuerySynthesizer(generator).synthesize([_item("Sweater", Category.TOPS)], None, "kurisu")

    assert generator.prompts == []
    assert [query.text for query in queries] == ["赤 セーター"]


def test_multi_category_fallback_adds_seasonal_query() -> None:
    observation = _observation(("Jacket", 0.95), ("Jeans", 0.9), ("Sweater", 0.85), color=(0, 0, 0))
    queries = QuerySynthesizer().synthesize([], observation)

    texts = [query.text for query in queries]
    assert texts == ["黒 ジャケット", "黒 ジーンズ", "冬 セーター 黒", "ジャケット レディース おしゃれ"]
    assert [query.confidence for query in queries][2] == pytest.approx(0.8)


def test_low_confidence_labels_are_ignored() -> None:
    observation = _observation(("Shirt", 0.6), ("Dress", 0.75))
    texts = [query.text for query in QuerySynthesizer().synthesize([], observation)]
    # 0.75 * 0.9 ranks below the fixed 0.7 popularity query.
    assert texts == ["ワンピース レディース おしゃれ", "赤 ワンピース"]


def test_untranslatable_labels_fall_back_to_items() -> None:
    items = [
        _item("Handbag", Category.ACCESSORIES, colors=("#000000",), confidence=0.8),
        _item("Loafer", Category.SHOES, colors=(), confidence=0.7),
    ]
    queries = QuerySynthesizer().synthesize(items, _observation(("Handbag", 0.8), ("Loafer", 0.7)))

    assert [query.text for query in queries] == ["黒 バッグ", "ローファー"]
    assert [query.inferred_category for query in queries] == [Category.ACCESSORIES, Category.SHOES]


def test_no_translatable_labels_and_no_items_gives_no_queries() -> None:
    assert QuerySynthesizer().synthesize([], _observation(("Sky", 0.99))) == []


def test_item_and_fallback_search_terms() -> None:
    sweater = _item("Sweater", Category.TOPS)
    assert item_search_query(sweater) == "赤 セーター"
    assert fallback_query(sweater) == "セーター"

    sneaker = _item("Sneaker", Category.SHOES, colors=())
    assert item_search_query(sneaker) == "スニーカー"
    assert fallback_query(sneaker) == "靴"


def test_query_category_inference() -> None:
    assert infer_query_category("ネイビー ワイドパンツ") is Category.BOTTOMS
    assert infer_query_category("大人 きれいめ", [_item("Dress", Category.DRESS)]) is Category.DRESS
    assert infer_query_category("大人 きれいめ") is Category.TOPS
    assert infer_query_category("白 靴下 レディース") is Category.ACCESSORIES
    assert infer_query_category("黒 ショートパンツ") is Category.BOTTOMS


def test_season_words() -> None:
    assert season_word(ColorName.PINK) == "春"
    assert season_word(ColorName.WHITE) == "夏"
    assert season_word(ColorName.BEIGE) == "秋"
    assert season_word(ColorName.GRAY) == "冬"
    assert season_word(ColorName.GREEN) == "秋冬"
    assert season_word(None) == "秋冬"


def test_parse_generated_requires_json_object() -> None:
    with pytest.raises(QueryGenerationError):
        parse_generated("no json here")
    with pytest.raises(QueryGenerationError):
        parse_generated('{"queries": "not a list"}')
    parsed = parse_generated('answer: {"queries": [{"query": " 白 シャツ ", "confidence": 1.4}]}')
    assert parsed[0].query == "白 シャツ"
    assert parsed[0].confidence == 1.0


def test_build_prompt_lists_persona_examples() -> None:
    prompt = build_prompt(_observation(("Shirt", 0.9)), get_persona("kurisu"))
    assert "ベージュ テーラードジャケット きれいめ" in prompt
    assert "25-35歳" in prompt
