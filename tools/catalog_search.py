"""Catalog search collaborator backed by the Yahoo! Shopping item search API."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

import requests

from logic.validation import CatalogSearchInput
from tools.observability import instrument_tool

logger = logging.getLogger(__name__)

YAHOO_ITEM_SEARCH_URL = "https://shopping.yahooapis.jp/ShoppingWebService/V3/itemSearch"


class CatalogSearchError(RuntimeError):
    """Raised when the catalog backend is unreachable or rejects a query."""


class CatalogSearch(ABC):
    """Abstract catalog search interface returning raw listing records.

    Implementations report transport and API failures as
    :class:`CatalogSearchError`; the matcher records those and moves on to the
    next query. Any other exception is treated as a bug and propagates.
    """

    @abstractmethod
    def search(self, query: str, results: int = 5, sort: str = "-score") -> List[Dict[str, Any]]:
        """Return raw records for ``query``; an empty list means no hits."""


def _records_from_v3(payload: Mapping[str, Any]) -> List[Dict[str, Any]] | None:
    hits = payload.get("hits")
    if isinstance(hits, list):
        return [hit for hit in hits if isinstance(hit, dict)]
    return None


def _records_from_result_set(payload: Mapping[str, Any]) -> List[Dict[str, Any]] | None:
    result_set = payload.get("ResultSet")
    if not isinstance(result_set, Mapping):
        return None
    results = result_set.get("Result")
    if isinstance(results, list):
        return [record for record in results if isinstance(record, dict)]
    if isinstance(results, Mapping):
        # Older responses key results by position ("0", "1", ...) next to metadata keys.
        ordered = sorted((key for key in results if str(key).isdigit()), key=int)
        return [results[key] for key in ordered if isinstance(results[key], dict)]
    return []


def extract_records(payload: Any) -> List[Dict[str, Any]]:
    """Pull listing records out of either known response envelope."""

    if not isinstance(payload, Mapping):
        logger.warning("Catalog payload is not an object", extra={"payload_type": type(payload).__name__})
        return []
    for parser in (_records_from_v3, _records_from_result_set):
        records = parser(payload)
        if records is not None:
            return records
    logger.warning("Catalog payload matched no known envelope", extra={"keys": sorted(payload)[:10]})
    return []


def _status_message(status_code: int, query: str) -> str:
    if status_code == 400:
        return f"不正なリクエストです。クエリ: \"{query}\""
    if status_code == 401:
        return "Yahoo Shopping APIの認証に失敗しました。Client IDを確認してください。"
    if status_code == 403:
        return "Yahoo Shopping APIへのアクセスが拒否されました。API制限を確認してください。"
    if status_code >= 500:
        return "Yahoo Shopping APIサーバーエラーが発生しました。しばらく後に再試行してください。"
    return f"Yahoo Shopping API error: HTTP {status_code}"


class YahooShoppingClient(CatalogSearch):
    """Yahoo! Shopping V3 item search over ``requests``."""

    def __init__(self, client_id: str, timeout_seconds: float = 10.0, base_url: str = YAHOO_ITEM_SEARCH_URL) -> None:
        self.client_id = client_id
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url

    @instrument_tool("catalog_search", input_model=CatalogSearchInput, service="yahoo_shopping")
    def search(
        self,
        query: str,
        results: int = 5,
        sort: str = "-score",
        price_from: int | None = None,
        price_to: int | None = None,
    ) -> List[Dict[str, Any]]:
        params = {
            "appid": self.client_id,
            "query": query,
            "results": str(results),
            "sort": sort,
            "image_size": "medium",
        }
        if price_from is not None:
            params["price_from"] = str(price_from)
        if price_to is not None:
            params["price_to"] = str(price_to)
        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            logger.error("Catalog search unreachable", extra={"query": query, "error": str(exc)})
            raise CatalogSearchError(f"Yahoo Shopping API request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Non-success status from catalog search",
                extra={"query": query, "status_code": response.status_code},
            )
            raise CatalogSearchError(_status_message(response.status_code, query))

        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogSearchError(f"Yahoo Shopping API returned invalid JSON for \"{query}\"") from exc

        records = extract_records(payload)
        if not records:
            logger.warning("Catalog search returned no results", extra={"query": query})
        else:
            logger.info("Catalog search returned results", extra={"query": query, "count": len(records)})
        return records


__all__ = [
    "CatalogSearch",
    "CatalogSearchError",
    "YAHOO_ITEM_SEARCH_URL",
    "YahooShoppingClient",
    "extract_records",
]
