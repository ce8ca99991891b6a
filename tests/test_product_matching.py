"""Product matching against a fake catalog."""

from __future__ import annotations

import random
from typing import Callable, Dict, List, Tuple

import pytest

from logic.mock_products import create_mock_products
from logic.product_matching import ProductMatcher, ProductSearchError
from models.fashion_item import DetectedItem, ItemAttributes
from models.product import SearchQuery
from models.taxonomy import Category
from tools.catalog_search import CatalogSearch, CatalogSearchError


def _hit(index: int, price: int = 2980, prefix: str = "item") -> Dict[str, object]:
    return {"name": f"商品{index}", "price": price, "url": f"https://shop.test/{prefix}/{index}", "code": f"{prefix}{index}"}


class FakeCatalog(CatalogSearch):
    def __init__(self, responder: Callable[[str, int], List[Dict[str, object]]]) -> None:
        self.responder = responder
        self.calls: List[Tuple[str, int, str]] = []

    def search(self, query: str, results: int = 5, sort: str = "-score") -> List[Dict[str, object]]:
        self.calls.append((query, results, sort))
        return self.responder(query, results)


def _always(count: int) -> Callable[[str, int], List[Dict[str, object]]]:
    """Distinct listings per query, so results never collapse as duplicates."""

    return lambda query, results: [_hit(i, prefix=query) for i in range(min(count, results))]


def _failing(query: str, results: int) -> List[Dict[str, object]]:
    raise CatalogSearchError("Yahoo Shopping APIサーバーエラーが発生しました。")


def _item(item_id: str, label: str, category: Category, colors: tuple = ("#FF0000",)) -> DetectedItem:
    return DetectedItem(
        id=item_id,
        category=category,
        description=label,
        confidence=0.9,
        attributes=ItemAttributes(colors=colors),
        label=label,
    )


def _query(text: str, confidence: float, category: Category = Category.TOPS) -> SearchQuery:
    return SearchQuery(text=text, confidence=confidence, reasoning="", inferred_category=category)


def test_nothing_to_match_makes_no_calls() -> None:
    catalog = FakeCatalog(_always(5))
    assert ProductMatcher(catalog).match([], []) == []
    assert catalog.calls == []


def test_query_path_sets_similarity_and_tags() -> None:
    catalog = FakeCatalog(_always(5))
    products = ProductMatcher(catalog).match([_query("赤 セーター", 0.83)], [])

    assert len(products) == 5
    assert catalog.calls == [("赤 セーター", 5, "-score")]
    assert all(product.similarity == 0.83 for product in products)
    assert products[0].tags == ["tops", "赤", "セーター"]


def test_results_are_truncated_to_ten() -> None:
    catalog = FakeCatalog(_always(5))
    queries = [_query(f"クエリ{i}", 0.9 - i * 0.1) for i in range(7)]

    products = ProductMatcher(catalog).match(queries, [])

    assert len(products) == 10
    assert len(catalog.calls) == 5
    assert products[0].similarity == pytest.approx(0.9)


def test_item_path_used_when_queries_find_nothing() -> None:
    def responder(query: str, results: int) -> List[Dict[str, object]]:
        return [_hit(1), _hit(2)] if query == "赤 セーター" else []

    catalog = FakeCatalog(responder)
    products = ProductMatcher(catalog, rng=random.Random(1)).match(
        [_query("ニット ベスト", 0.9)], [_item("tops_0", "Sweater", Category.TOPS)]
    )

    assert [call[0] for call in catalog.calls] == ["ニット ベスト", "赤 セーター"]
    assert len(products) == 2
    assert all(0.70 <= product.similarity <= 0.95 for product in products)
    assert all(product.category is Category.TOPS for product in products)


def test_item_path_retries_broader_query() -> None:
    def responder(query: str, results: int) -> List[Dict[str, object]]:
        return [_hit(i) for i in range(results)] if query == "靴" else []

    catalog = FakeCatalog(responder)
    products = ProductMatcher(catalog).match([], [_item("shoes_0", "Sneaker", Category.SHOES)])

    assert catalog.calls == [("赤 スニーカー", 5, "-score"), ("靴", 3, "-score")]
    assert len(products) == 3


def test_item_path_searches_at_most_three_items() -> None:
    catalog = FakeCatalog(_always(1))
    items = [
        _item("tops_0", "Shirt", Category.TOPS),
        _item("bottoms_0", "Skirt", Category.BOTTOMS),
        _item("shoes_0", "Boot", Category.SHOES),
        _item("accessories_0", "Hat", Category.ACCESSORIES),
    ]
    products = ProductMatcher(catalog).match([], items)
    assert len(catalog.calls) == 3
    assert len(products) == 3


def test_total_failure_returns_mock_products() -> None:
    items = [_item(f"item_{i}", "Shirt", Category.TOPS) for i in range(4)]
    products = ProductMatcher(FakeCatalog(_failing), rng=random.Random(3)).match([_query("赤 シャツ", 0.9)], items)

    assert len(products) == 6
    assert all(product.id.startswith("mock_") for product in products)
    assert all(product.shop_name == "サンプルブランド" for product in products)


def test_failure_without_items_raises_with_all_messages() -> None:
    with pytest.raises(ProductSearchError) as excinfo:
        ProductMatcher(FakeCatalog(_failing)).match([_query("赤 シャツ", 0.9), _query("黒 パンツ", 0.8)], [])

    assert len(excinfo.value.failures) == 2
    assert "赤 シャツ" in excinfo.value.failures[0]
    assert "商品検索に失敗しました" in str(excinfo.value)


def test_empty_results_recorded_as_failures() -> None:
    with pytest.raises(ProductSearchError) as excinfo:
        ProductMatcher(FakeCatalog(_always(0))).match([_query("白 ブラウス", 0.9)], [])
    assert excinfo.value.failures == ["「白 ブラウス」の商品が見つかりませんでした"]


def test_mock_products_are_labelled_samples() -> None:
    items = [_item("tops_0", "Sweater", Category.TOPS), _item("bottoms_0", "Jeans", Category.BOTTOMS, colors=())]
    products = create_mock_products(items, random.Random(0))

    assert [product.name for product in products] == [
        "赤セーター - サンプル商品1",
        "赤セーター - サンプル商品2",
        "カラージーンズ - サンプル商品1",
        "カラージーンズ - サンプル商品2",
    ]
    for product in products:
        assert 1980 <= product.price <= 4979
        assert 2980 <= product.original_price <= 5979
        assert 10 <= product.review_count <= 209
        assert 4.0 <= product.rating <= 5.0
        assert product.image_url == "/images/placeholder.svg"
        assert product.shop_url == "#"
    assert products[0].tags == ["セーター", "赤"]


def test_same_listing_from_two_queries_is_kept_once() -> None:
    catalog = FakeCatalog(lambda query, results: [_hit(i, prefix="c") for i in range(results)])
    products = ProductMatcher(catalog).match([_query("赤 セーター", 0.9), _query("赤 ニット", 0.8)], [])

    assert len(catalog.calls) == 2
    assert [product.id for product in products] == [f"yahoo_c{i}" for i in range(5)]
    assert all(product.similarity == 0.9 for product in products)


def test_duplicates_do_not_use_up_result_slots() -> None:
    def responder(query: str, results: int) -> List[Dict[str, object]]:
        shared = [_hit(0, prefix="shared")]
        return shared + [_hit(i, prefix=query) for i in range(1, results)]

    queries = [_query(f"クエリ{i}", 0.9 - i * 0.1) for i in range(3)]
    products = ProductMatcher(FakeCatalog(responder)).match(queries, [])

    ids = [product.id for product in products]
    assert len(ids) == len(set(ids)) == 10
    assert ids.count("yahoo_shared0") == 1


def test_unexpected_catalog_errors_propagate() -> None:
    def broken(query: str, results: int) -> List[Dict[str, object]]:
        raise KeyError("hits")

    with pytest.raises(KeyError):
        ProductMatcher(FakeCatalog(broken)).match([_query("赤 シャツ", 0.9)], [_item("tops_0", "Shirt", Category.TOPS)])
