"""Lightweight evaluation harness for deterministic scenarios."""

from __future__ import annotations

import random
from typing import Dict, List

from evaluation.scenarios import EvaluationScenario, SCENARIOS
from logic.safety import contains_banned_term
from models.fashion_item import DetectedItem
from models.product import Product, SearchQuery
from models.vision import VisionObservation
from tools.catalog_search import CatalogSearch, CatalogSearchError, extract_records
from tools.query_generator import QueryGenerator
from trendgal_app.app import TrendGalApp
from trendgal_app.config import AppConfig


class ScenarioCatalog(CatalogSearch):
    """Serves canned records wrapped in the envelope the scenario asks for."""

    def __init__(self, mode: str, records: List[Dict[str, object]]) -> None:
        self.mode = mode
        self.records = records
        self.calls: List[str] = []

    def search(self, query: str, results: int = 5, sort: str = "-score") -> List[Dict[str, object]]:
        self.calls.append(query)
        if self.mode == "error":
            raise CatalogSearchError("Yahoo Shopping APIサーバーエラーが発生しました。しばらく後に再試行してください。")
        if self.mode == "legacy":
            envelope = {"ResultSet": {"totalResultsReturned": len(self.records), "Result": self.records[:results]}}
        else:
            envelope = {"totalResultsAvailable": len(self.records), "hits": self.records[:results]}
        return extract_records(envelope)


class ScriptedGenerator(QueryGenerator):
    def __init__(self, text: str) -> None:
        self.text = text

    def generate(self, prompt: str) -> str:
        return self.text


def _evaluate_expectations(
    expectations: Dict[str, object],
    items: List[DetectedItem],
    queries: List[SearchQuery],
    products: List[Product],
) -> Dict[str, bool]:
    checks: Dict[str, bool] = {}
    categories = {item.category.value for item in items}
    expected_categories = set(expectations.get("categories", []))
    checks["categories"] = expected_categories <= categories if expected_categories else not items
    checks["one_item_per_category"] = len(categories) == len(items)
    checks["min_products"] = len(products) >= int(expectations.get("min_products", 0))
    checks["max_products"] = len(products) <= int(expectations.get("max_products", 10))
    checks["no_banned_terms"] = not any(contains_banned_term(query.text) for query in queries)
    if "description_contains" in expectations:
        checks["description_contains"] = any(expectations["description_contains"] in item.description for item in items)
    if "query_contains" in expectations:
        checks["query_contains"] = any(expectations["query_contains"] in query.text for query in queries)
    if "query_count" in expectations:
        checks["query_count"] = len(queries) == int(expectations["query_count"])
    if expectations.get("mock_only"):
        checks["mock_only"] = bool(products) and all(product.id.startswith("mock_") for product in products)
    return checks


def run_scenario(scenario: EvaluationScenario) -> Dict[str, object]:
    catalog = ScenarioCatalog(scenario.catalog_mode, scenario.catalog_records)
    generator = ScriptedGenerator(scenario.generator_text) if scenario.generator_text else None
    app = TrendGalApp(config=AppConfig(), catalog=catalog, generator=generator, rng=random.Random(7))

    observation = VisionObservation.from_payload(scenario.vision_payload)
    items = app.detect_items(observation)
    queries = app.synthesize_queries(items, observation, scenario.persona)
    products = app.recommend_products(items, observation, scenario.persona)

    checks = _evaluate_expectations(scenario.expectations, items, queries, products)
    return {
        "scenario": scenario.name,
        "passed": all(checks.values()),
        "checks": checks,
        "item_count": len(items),
        "product_count": len(products),
        "catalog_calls": list(catalog.calls),
    }


def run_evaluation_suite() -> List[Dict[str, object]]:
    return [run_scenario(scenario) for scenario in SCENARIOS]


def run_smoke_checks() -> List[str]:
    results = run_evaluation_suite()
    return [f"{result['scenario']}: {'passed' if result['passed'] else 'failed'}" for result in results]


__all__ = ["ScenarioCatalog", "ScriptedGenerator", "run_evaluation_suite", "run_scenario", "run_smoke_checks"]
