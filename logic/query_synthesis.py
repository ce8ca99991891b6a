"""Search query synthesis from detected items and vision observations.

Queries are produced by an injected :class:`QueryGenerator` when one is
configured and the observation has something to describe. Any failure on that
path (transport error, no JSON in the answer, schema mismatch, or every query
rejected by the guardrails) falls back to a deterministic, lexicon based
strategy so callers always get usable queries for translatable input.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from logic.safety import BANNED_QUERY_TERMS, contains_banned_term, system_instruction
from logic.validation import GeneratedQuery, QueryGenerationResponse
from models.color_names import ColorName, name_of
from models.fashion_item import DetectedItem
from models.personas import PersonaProfile, get_persona
from models.product import SearchQuery
from models.taxonomy import CATEGORY_LABELS, Category
from models.vision import VisionLabel, VisionObservation
from tools.query_generator import QueryGenerationError, QueryGenerator
from trendgal_app.logging_config import get_logger, log_event

logger = get_logger(__name__)

MAX_QUERIES = 5
LABEL_SCORE_THRESHOLD = 0.7
POPULARITY_QUALIFIER = "レディース おしゃれ"

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

# English vision label -> (Japanese catalog term, category).
LEXICON: Dict[str, Tuple[str, Category]] = {
    "shirt": ("シャツ", Category.TOPS),
    "dress": ("ワンピース", Category.DRESS),
    "pants": ("パンツ", Category.BOTTOMS),
    "skirt": ("スカート", Category.BOTTOMS),
    "jacket": ("ジャケット", Category.OUTER),
    "coat": ("コート", Category.OUTER),
    "sweater": ("セーター", Category.TOPS),
    "bag": ("バッグ", Category.ACCESSORIES),
    "shoes": ("靴", Category.SHOES),
    "hat": ("帽子", Category.ACCESSORIES),
    "t-shirt": ("Tシャツ", Category.TOPS),
    "jeans": ("ジーンズ", Category.BOTTOMS),
    "blouse": ("ブラウス", Category.TOPS),
    "cardigan": ("カーディガン", Category.OUTER),
    "sneakers": ("スニーカー", Category.SHOES),
    "boots": ("ブーツ", Category.SHOES),
    "scarf": ("スカーフ", Category.ACCESSORIES),
    "gloves": ("手袋", Category.ACCESSORIES),
    "accessory": ("アクセサリー", Category.ACCESSORIES),
    "watch": ("時計", Category.ACCESSORIES),
    "sunglasses": ("サングラス", Category.ACCESSORIES),
    "backpack": ("リュック", Category.ACCESSORIES),
    "purse": ("財布", Category.ACCESSORIES),
    "wallet": ("財布", Category.ACCESSORIES),
    "belt": ("ベルト", Category.ACCESSORIES),
    "tie": ("ネクタイ", Category.ACCESSORIES),
    "socks": ("靴下", Category.ACCESSORIES),
    "underwear": ("下着", Category.TOPS),
    "swimsuit": ("水着", Category.DRESS),
    "pajamas": ("パジャマ", Category.TOPS),
    "suit": ("スーツ", Category.OUTER),
    "uniform": ("制服", Category.TOPS),
    "hoodie": ("パーカー", Category.OUTER),
    "vest": ("ベスト", Category.TOPS),
    "shorts": ("ショートパンツ", Category.BOTTOMS),
    "leggings": ("レギンス", Category.BOTTOMS),
    "stockings": ("ストッキング", Category.ACCESSORIES),
    "heels": ("ヒール", Category.SHOES),
    "sandals": ("サンダル", Category.SHOES),
    "necklace": ("ネックレス", Category.ACCESSORIES),
    "bracelet": ("ブレスレット", Category.ACCESSORIES),
    "earrings": ("イヤリング", Category.ACCESSORIES),
    "ring": ("指輪", Category.ACCESSORIES),
}

# Ordered: the first English term found in an item's label wins.
ITEM_SEARCH_TERMS: List[Tuple[str, str]] = [
    ("tops", "トップス"),
    ("bottoms", "ボトムス"),
    ("dress", "ワンピース"),
    ("shoes", "靴"),
    ("accessories", "アクセサリー"),
    ("outer", "アウター"),
    ("sweater", "セーター"),
    ("shirt", "シャツ"),
    ("blouse", "ブラウス"),
    ("top", "トップス"),
    ("hoodie", "パーカー"),
    ("jacket", "ジャケット"),
    ("coat", "コート"),
    ("cardigan", "カーディガン"),
    ("t-shirt", "Tシャツ"),
    ("tank top", "タンクトップ"),
    ("pants", "パンツ"),
    ("jeans", "ジーンズ"),
    ("trousers", "パンツ"),
    ("shorts", "ショートパンツ"),
    ("skirt", "スカート"),
    ("leggings", "レギンス"),
    ("active pants", "スポーツパンツ"),
    ("shoe", "靴"),
    ("boot", "ブーツ"),
    ("sneaker", "スニーカー"),
    ("sandal", "サンダル"),
    ("heel", "ヒール"),
    ("footwear", "靴"),
    ("loafer", "ローファー"),
    ("bag", "バッグ"),
    ("purse", "バッグ"),
    ("handbag", "ハンドバッグ"),
    ("backpack", "リュック"),
    ("hat", "帽子"),
    ("cap", "キャップ"),
    ("sunglasses", "サングラス"),
    ("watch", "時計"),
    ("jewelry", "アクセサリー"),
    ("necklace", "ネックレス"),
    ("bracelet", "ブレスレット"),
    ("blazer", "ジャケット"),
    ("outerwear", "アウター"),
]

# Broader vocabulary used when the specific search comes back empty.
FALLBACK_SEARCH_TERMS: List[Tuple[str, str]] = [
    ("tops", "トップス"),
    ("bottoms", "ボトムス"),
    ("dress", "ワンピース"),
    ("shoes", "靴"),
    ("accessories", "アクセサリー"),
    ("outer", "アウター"),
    ("sweater", "セーター"),
    ("shirt", "シャツ"),
    ("pants", "パンツ"),
    ("jeans", "ジーンズ"),
    ("trousers", "パンツ"),
]

SEASON_BY_COLOR: Dict[ColorName, str] = {
    ColorName.PINK: "春",
    ColorName.YELLOW: "春",
    ColorName.WHITE: "夏",
    ColorName.BLUE: "夏",
    ColorName.BROWN: "秋",
    ColorName.BEIGE: "秋",
    ColorName.ORANGE: "秋",
    ColorName.RED: "秋",
    ColorName.BLACK: "冬",
    ColorName.GRAY: "冬",
}
DEFAULT_SEASON_WORD = "秋冬"

# Longest first so compound words (靴下) win over their prefixes (靴).
_CATEGORY_TERMS: List[Tuple[str, Category]] = sorted(
    [(term, category) for term, category in LEXICON.values()]
    + [(label, category) for category, label in CATEGORY_LABELS.items()],
    key=lambda entry: len(entry[0]),
    reverse=True,
)


def translate_label(description: str) -> Optional[Tuple[str, Category]]:
    return LEXICON.get(description.strip().lower())


def season_word(color: Optional[ColorName]) -> str:
    if color is None:
        return DEFAULT_SEASON_WORD
    return SEASON_BY_COLOR.get(color, DEFAULT_SEASON_WORD)


def _item_name(item: DetectedItem, terms: Sequence[Tuple[str, str]]) -> str:
    text = f"{item.label} {item.description}".lower()
    for english, japanese in terms:
        if english in text:
            return japanese
    return item.category.label


def item_search_query(item: DetectedItem) -> str:
    """``"{color} {item name}"`` for one item, or just the name when its color is unknown."""

    name = _item_name(item, ITEM_SEARCH_TERMS)
    if item.primary_color is None:
        return name
    return f"{name_of(item.primary_color).label} {name}"


def fallback_query(item: DetectedItem) -> str:
    """Broader color-free query used when the specific item search is empty."""

    return _item_name(item, FALLBACK_SEARCH_TERMS)


def infer_query_category(text: str, items: Sequence[DetectedItem] = ()) -> Category:
    for term, category in _CATEGORY_TERMS:
        if term in text:
            return category
    if items:
        return max(items, key=lambda item: item.confidence).category
    return Category.TOPS


def build_prompt(observation: VisionObservation, persona: PersonaProfile) -> str:
    """Japanese prompt describing the observation, the persona and the answer schema."""

    payload = observation.to_payload()
    labels = json.dumps(payload["labelAnnotations"], ensure_ascii=False)
    colors = json.dumps(payload["imagePropertiesAnnotation"]["dominantColors"]["colors"], ensure_ascii=False)
    objects = json.dumps(
        [{"name": obj.name, "score": obj.score} for obj in observation.objects], ensure_ascii=False
    )
    examples = "\n".join(
        f'- "{query}" (信頼度: {confidence:.2f}) - {kind}' for query, confidence, kind in persona.examples
    )
    banned = "「" + "」「".join(BANNED_QUERY_TERMS) + "」"

    return f"""{system_instruction("ファッションECサイトの検索クエリ生成の専門家")}

Google Vision APIの解析結果から、Yahoo!ショッピングで効果的に商品を検索するための日本語クエリを生成してください。

【キャラクター設定】
現在のキャラクター: {persona.display_name}
ファッション志向: {persona.fashion_style}
好みの傾向: {"、".join(persona.preferences)}
重視するポイント: {"、".join(persona.priorities)}

Vision API解析結果:
- 検出されたラベル: {labels}
- 検出された色: {colors}
- 検出されたオブジェクト: {objects}

【重要な要件】
1. 信頼度スコアが高い順に{MAX_QUERIES}つの検索クエリを生成してください
2. キャラクターの性格に合わせたクエリ生成を必須とする:
   - {persona.display_name}の場合: {persona.query_guideline}
   - 検索キーワードに{"、".join(persona.keywords)}などを含める
3. 検索クエリは必ず単品パーツ部位で生成する:
   - {banned}などのワードは使用禁止
   - 必ず具体的なアイテム名（シャツ、パンツ、ジャケット、スカート等）で検索
4. クエリ生成の具体的な考慮点:
   - {persona.age_group}をターゲットとした商品を重視
   - {persona.price_range}の価格帯を想定
   - 各アイテムが単体で購入・着用できることを前提とする

【キャラクター別例】
{examples}

以下のJSON形式で回答してください:
{{
  "queries": [
    {{
      "query": "検索クエリ",
      "confidence": 0.95,
      "reasoning": "クエリ選定理由"
    }}
  ]
}}
"""


def parse_generated(text: str) -> List[GeneratedQuery]:
    """Extract and validate the JSON object embedded in a generator answer."""

    match = _JSON_BLOCK.search(text or "")
    if not match:
        raise QueryGenerationError("Failed to extract JSON from generator response")
    try:
        return QueryGenerationResponse.model_validate_json(match.group(0)).queries
    except ValidationError as exc:
        raise QueryGenerationError(f"Generator response did not match the query schema: {exc}") from exc


def _finalize(queries: List[SearchQuery]) -> List[SearchQuery]:
    allowed = [query for query in queries if not contains_banned_term(query.text)]
    dropped = len(queries) - len(allowed)
    if dropped:
        logger.info("Dropped queries containing banned terms", extra={"dropped": dropped})
    allowed.sort(key=lambda query: query.confidence, reverse=True)
    return allowed[:MAX_QUERIES]


class QuerySynthesizer:
    """Produce at most five single-item search queries for detected items."""

    def __init__(self, generator: QueryGenerator | None = None) -> None:
        self.generator = generator

    def synthesize(
        self,
        items: Sequence[DetectedItem],
        observation: VisionObservation | None = None,
        persona: str | PersonaProfile | None = None,
    ) -> List[SearchQuery]:
        observation = observation or VisionObservation()
        profile = persona if isinstance(persona, PersonaProfile) else get_persona(persona)

        if self.generator is not None and not observation.is_empty():
            generated = self._generate(items, observation, profile)
            if generated:
                log_event(logger, logging.INFO, "queries_synthesized", source="generator", count=len(generated))
                return generated

        queries = self.fallback(items, observation)
        log_event(logger, logging.INFO, "queries_synthesized", source="fallback", count=len(queries))
        return queries

    def _generate(
        self, items: Sequence[DetectedItem], observation: VisionObservation, persona: PersonaProfile
    ) -> List[SearchQuery]:
        try:
            text = self.generator.generate(build_prompt(observation, persona))
            proposals = parse_generated(text)
        except Exception as exc:  # noqa: BLE001 - any generator failure falls back
            logger.warning("Query generation failed; using fallback", extra={"error": str(exc)})
            return []

        queries = _finalize(
            [
                SearchQuery(
                    text=proposal.query,
                    confidence=proposal.confidence,
                    reasoning=proposal.reasoning,
                    inferred_category=infer_query_category(proposal.query, items),
                )
                for proposal in proposals
            ]
        )
        if not queries:
            logger.warning("Generator produced no usable queries; using fallback")
        return queries

    def fallback(self, items: Sequence[DetectedItem], observation: VisionObservation) -> List[SearchQuery]:
        """Deterministic queries built from high-confidence labels and the dominant color."""

        dominant = observation.dominant_colors()
        color = name_of(dominant[0].hex) if dominant else None
        color_word = color.label if color else ""

        top_labels = [label for label in observation.labels if label.score > LABEL_SCORE_THRESHOLD][:3]
        translated: List[Tuple[VisionLabel, str, Category]] = []
        for label in top_labels:
            entry = translate_label(label.description)
            if entry:
                translated.append((label, entry[0], entry[1]))

        queries: List[SearchQuery] = []
        for label, term, category in translated[:2]:
            queries.append(
                SearchQuery(
                    text=" ".join(part for part in (color_word, term) if part),
                    confidence=label.score * 0.9,
                    reasoning=f"単品検索: Vision APIで{label.description}が検出されました",
                    inferred_category=category,
                )
            )

        if len({category for _, _, category in translated}) >= 2:
            season = season_word(color)
            for index, (_, term, category) in enumerate(translated[2:]):
                queries.append(
                    SearchQuery(
                        text=" ".join(part for part in (season, term, color_word) if part),
                        confidence=0.8 - index * 0.05,
                        reasoning=f"追加単品検索: 複数カテゴリから{term}を個別検索",
                        inferred_category=category,
                    )
                )

        if translated:
            _, term, category = translated[0]
            queries.append(
                SearchQuery(
                    text=f"{term} {POPULARITY_QUALIFIER}",
                    confidence=0.7,
                    reasoning="特徴検索: メインアイテムに「おしゃれ」を追加して幅広い結果を取得",
                    inferred_category=category,
                )
            )
        else:
            for item in list(items)[:3]:
                queries.append(
                    SearchQuery(
                        text=item_search_query(item),
                        confidence=item.confidence * 0.9,
                        reasoning=f"アイテム検索: {item.description}",
                        inferred_category=item.category,
                    )
                )

        return _finalize(queries)


__all__ = [
    "FALLBACK_SEARCH_TERMS",
    "ITEM_SEARCH_TERMS",
    "LEXICON",
    "MAX_QUERIES",
    "QuerySynthesizer",
    "build_prompt",
    "fallback_query",
    "infer_query_category",
    "item_search_query",
    "parse_generated",
    "season_word",
    "translate_label",
]
