"""Catalog product matching for synthesized queries and detected items."""

from __future__ import annotations

import logging
import random
from typing import List, Sequence

from logic.catalog_normalization import to_products
from logic.mock_products import create_mock_products
from logic.query_synthesis import MAX_QUERIES, fallback_query, item_search_query
from models.fashion_item import DetectedItem
from models.product import Product, SearchQuery
from tools.catalog_search import CatalogSearch, CatalogSearchError
from trendgal_app.logging_config import get_logger, log_event

logger = get_logger(__name__)

MAX_PRODUCTS = 10
MAX_SEARCHED_ITEMS = 3
QUERY_RESULTS = 5
ITEM_RESULTS = 5
FALLBACK_RESULTS = 3
DEFAULT_SORT = "-score"
# Item-path results have no real similarity signal; this range is a placeholder.
PLACEHOLDER_SIMILARITY = (0.70, 0.95)


class ProductSearchError(RuntimeError):
    """Raised when neither the catalog nor the mock fallback produced products."""

    def __init__(self, failures: Sequence[str]) -> None:
        self.failures = list(failures)
        if self.failures:
            message = (
                "商品検索に失敗しました:\n"
                + "\n".join(self.failures)
                + "\n\nYahoo Shopping APIの設定を確認してください。"
            )
        else:
            message = "検出されたアイテムに対する商品が見つかりませんでした。Yahoo Shopping APIの接続を確認してください。"
        super().__init__(message)


def _unique(products: Sequence[Product]) -> List[Product]:
    """Drop repeated catalog listings, keeping the first (higher-confidence) copy."""

    seen: set[str] = set()
    unique: List[Product] = []
    for product in products:
        if product.id in seen:
            continue
        seen.add(product.id)
        unique.append(product)
    return unique


class ProductMatcher:
    """Search the catalog with queries first, then per item, then fall back to mocks."""

    def __init__(self, catalog: CatalogSearch, rng: random.Random | None = None) -> None:
        self.catalog = catalog
        self.rng = rng or random.Random()

    def match(self, queries: Sequence[SearchQuery], items: Sequence[DetectedItem]) -> List[Product]:
        if not queries and not items:
            return []

        failures: List[str] = []
        products: List[Product] = []
        source = "query"
        if queries:
            products = self._match_queries(queries, failures)
        if not products and items:
            source = "item"
            products = self._match_items(items, failures)
        products = _unique(products)[:MAX_PRODUCTS]

        if not products:
            logger.warning("All catalog searches failed; using mock products", extra={"failures": failures})
            products = create_mock_products(items, self.rng)
            if not products:
                raise ProductSearchError(failures)
            source = "mock"
        elif failures:
            logger.warning("Some product searches failed", extra={"failures": failures})

        log_event(logger, logging.INFO, "products_matched", source=source, count=len(products))
        return products

    def _search(self, query: str, results: int) -> List[dict]:
        return self.catalog.search(query=query, results=results, sort=DEFAULT_SORT)

    def _match_queries(self, queries: Sequence[SearchQuery], failures: List[str]) -> List[Product]:
        products: List[Product] = []
        for query in list(queries)[:MAX_QUERIES]:
            try:
                records = self._search(query.text, QUERY_RESULTS)
            except CatalogSearchError as exc:
                failures.append(f"「{query.text}」の検索でエラーが発生しました: {exc}")
                continue
            if not records:
                failures.append(f"「{query.text}」の商品が見つかりませんでした")
                continue
            for product in to_products(records, query.inferred_category):
                product.similarity = query.confidence
                product.add_tags(query.inferred_category.value, *query.text.split())
                products.append(product)
        return products

    def _match_items(self, items: Sequence[DetectedItem], failures: List[str]) -> List[Product]:
        products: List[Product] = []
        for item in list(items)[:MAX_SEARCHED_ITEMS]:
            query = item_search_query(item)
            try:
                records = self._search(query, ITEM_RESULTS)
                if not records:
                    broader = fallback_query(item)
                    if broader != query:
                        logger.info("Retrying with broader query", extra={"query": query, "fallback": broader})
                        records = self._search(broader, FALLBACK_RESULTS)
            except CatalogSearchError as exc:
                failures.append(f"「{item.description}」の検索でエラーが発生しました: {exc}")
                continue
            if not records:
                failures.append(f"「{query}」の商品が見つかりませんでした")
                continue
            for product in to_products(records, item.category):
                product.similarity = round(self.rng.uniform(*PLACEHOLDER_SIMILARITY), 2)
                products.append(product)
        return products


__all__ = ["MAX_PRODUCTS", "ProductMatcher", "ProductSearchError"]
