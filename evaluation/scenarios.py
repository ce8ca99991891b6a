"""Evaluation scenarios covering common photos and catalog conditions."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class EvaluationScenario:
    name: str
    description: str
    vision_payload: Dict[str, object]
    catalog_mode: str
    expectations: Dict[str, object]
    persona: str = "kurisu"
    generator_text: Optional[str] = None
    catalog_records: List[Dict[str, object]] = field(default_factory=list)


def _label(description: str, score: float) -> Dict[str, object]:
    return {"description": description, "score": score}


def _color(red: int, green: int, blue: int, fraction: float) -> Dict[str, object]:
    return {"color": {"red": red, "green": green, "blue": blue}, "score": fraction, "pixelFraction": fraction}


def _object(name: str, score: float, box: tuple) -> Dict[str, object]:
    x0, y0, x1, y1 = box
    return {
        "name": name,
        "score": score,
        "boundingPoly": {
            "normalizedVertices": [
                {"x": x0, "y": y0},
                {"x": x1, "y": y0},
                {"x": x1, "y": y1},
                {"x": x0, "y": y1},
            ]
        },
    }


def _v3_hits(count: int) -> List[Dict[str, object]]:
    return [
        {
            "name": f"ニット セーター {index}",
            "price": 3980 + index * 100,
            "url": f"https://store.shopping.yahoo.co.jp/sample/item{index}.html",
            "code": f"sample_item{index}",
            "image": {"small": f"https://item-shopping.c.yimg.jp/i/c/{index}_s", "medium": f"https://item-shopping.c.yimg.jp/i/g/{index}"},
            "brand": {"name": "サンプルニット"},
            "review": {"rate": 4.2, "count": 12},
            "seller": {"name": "サンプルストア", "url": "https://store.shopping.yahoo.co.jp/sample/"},
        }
        for index in range(count)
    ]


def _legacy_results(count: int) -> List[Dict[str, object]]:
    return [
        {
            "Name": f"デニムジャケット {index}",
            "Price": str(5980 + index * 500),
            "Url": f"https://store.shopping.yahoo.co.jp/denim/item{index}.html",
            "Image": {"Small": f"https://item-shopping.c.yimg.jp/i/c/d{index}_s", "Medium": f"https://item-shopping.c.yimg.jp/i/g/d{index}"},
            "Brand": "デニムワークス",
            "Review": {"Rate": "3.9", "Count": "41"},
        }
        for index in range(count)
    ]


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="red_sweater",
        description="Single red sweater, deterministic queries, current catalog schema.",
        vision_payload={
            "labelAnnotations": [_label("Sweater", 0.92), _label("Clothing", 0.9), _label("Red", 0.85)],
            "imagePropertiesAnnotation": {"dominantColors": {"colors": [_color(255, 0, 0, 0.6), _color(250, 250, 250, 0.3)]}},
            "localizedObjectAnnotations": [],
        },
        catalog_mode="v3",
        catalog_records=_v3_hits(5),
        expectations={
            "categories": ["tops"],
            "description_contains": "赤",
            "min_products": 1,
            "max_products": 10,
            "query_contains": "セーター",
        },
    ),
    EvaluationScenario(
        name="denim_outfit",
        description="Jacket, jeans and shoes; generator output includes a banned outfit query.",
        vision_payload={
            "labelAnnotations": [_label("Jeans", 0.91), _label("Jacket", 0.88), _label("Shoe", 0.8)],
            "imagePropertiesAnnotation": {"dominantColors": {"colors": [_color(40, 60, 120, 0.5)]}},
            "localizedObjectAnnotations": [
                _object("Jeans", 0.9, (0.3, 0.5, 0.7, 0.95)),
                _object("Jacket", 0.87, (0.2, 0.1, 0.8, 0.5)),
            ],
        },
        catalog_mode="legacy",
        catalog_records=_legacy_results(4),
        persona="marin",
        generator_text="回答です:\n"
        + json.dumps(
            {
                "queries": [
                    {"query": "デニム ワイドパンツ ストリート", "confidence": 0.9, "reasoning": "ジーンズ検出"},
                    {"query": "デニム コーデ", "confidence": 0.95, "reasoning": "全身"},
                    {"query": "カーキ ミリタリージャケット カジュアル", "confidence": 0.85, "reasoning": "ジャケット検出"},
                ]
            },
            ensure_ascii=False,
        ),
        expectations={
            "categories": ["bottoms", "outer", "shoes"],
            "min_products": 1,
            "max_products": 10,
            "query_count": 2,
        },
    ),
    EvaluationScenario(
        name="catalog_unavailable",
        description="Every catalog call fails; clearly labelled sample products are returned.",
        vision_payload={
            "labelAnnotations": [_label("Dress", 0.95), _label("Handbag", 0.82)],
            "imagePropertiesAnnotation": {"dominantColors": {"colors": [_color(255, 182, 193, 0.55)]}},
            "localizedObjectAnnotations": [],
        },
        catalog_mode="error",
        expectations={
            "categories": ["dress", "accessories"],
            "min_products": 2,
            "max_products": 6,
            "mock_only": True,
        },
    ),
    EvaluationScenario(
        name="no_fashion_content",
        description="Landscape photo with no apparel labels.",
        vision_payload={
            "labelAnnotations": [_label("Sky", 0.97), _label("Mountain", 0.9)],
            "imagePropertiesAnnotation": {"dominantColors": {"colors": [_color(120, 170, 230, 0.7)]}},
            "localizedObjectAnnotations": [],
        },
        catalog_mode="v3",
        catalog_records=_v3_hits(3),
        expectations={"categories": [], "min_products": 0, "max_products": 0},
    ),
]


__all__ = ["EvaluationScenario", "SCENARIOS"]
