"""HTTP surface tests using FastAPI's TestClient."""

from __future__ import annotations

import base64
import random
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from models.vision import DominantColor, VisionLabel, VisionObservation
from server.api import create_app
from tools.catalog_search import CatalogSearch, CatalogSearchError
from trendgal_app.app import TrendGalApp
from trendgal_app.config import AppConfig


class StaticVision:
    def analyze(self, image_bytes: bytes) -> VisionObservation:
        return VisionObservation(
            labels=(VisionLabel("Skirt", 0.88),),
            colors=(DominantColor(0, 0, 0, pixel_fraction=0.7),),
        )

    def dominant_colors(self, image_bytes: bytes) -> List[DominantColor]:
        return []


class StaticCatalog(CatalogSearch):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    def search(self, query: str, results: int = 5, sort: str = "-score") -> List[Dict[str, object]]:
        if self.fail:
            raise CatalogSearchError("Yahoo Shopping APIの認証に失敗しました。Client IDを確認してください。")
        return [{"name": "黒 プリーツスカート", "price": 3480, "url": "https://shop.test/skirt", "code": "skirt-1"}]


def _client(catalog: CatalogSearch | None = None, config: AppConfig | None = None) -> TestClient:
    pipeline = TrendGalApp(
        config=config or AppConfig(environment="test"),
        vision_client=StaticVision(),
        catalog=catalog,
        rng=random.Random(0),
    )
    return TestClient(create_app(pipeline))


ITEM = {
    "id": "bottoms_0",
    "type": "bottoms",
    "label": "Skirt",
    "description": "黒のSkirt",
    "confidence": 0.88,
    "attributes": {"colors": ["#000000"], "style": "casual", "pattern": "solid"},
}


def test_healthcheck() -> None:
    response = _client().get("/healthz")
    assert response.status_code == 200
    assert response.json()["environment"] == "test"


def test_analyze_returns_detected_items() -> None:
    image = base64.b64encode(b"fake-jpeg").decode()
    response = _client().post("/analyze", json={"imageBase64": f"data:image/jpeg;base64,{image}"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [item["type"] for item in data["detectedItems"]] == ["bottoms"]
    assert data["detectedItems"][0]["attributes"]["colors"] == ["#000000"]


def test_analyze_rejects_invalid_base64() -> None:
    response = _client().post("/analyze", json={"imageBase64": "***"})
    assert response.status_code == 400


def test_recommendations_return_products() -> None:
    response = _client(StaticCatalog()).post(
        "/recommendations", json={"detectedItems": [ITEM], "characterPersonality": "marin"}
    )
    assert response.status_code == 200
    products = response.json()["data"]["recommendations"]
    assert products[0]["id"] == "yahoo_skirt-1"
    assert products[0]["price"] == 3480
    assert products[0]["category"] == "bottoms"


@pytest.mark.parametrize("body", [{"detectedItems": []}, {"detectedItems": [{"type": "tops"}]}])
def test_recommendations_reject_bad_items(body: dict) -> None:
    response = _client(StaticCatalog()).post("/recommendations", json=body)
    assert response.status_code == 400


def test_recommendations_missing_body_field_is_unprocessable() -> None:
    response = _client(StaticCatalog()).post("/recommendations", json={"persona": "kurisu"})
    assert response.status_code == 422


def test_catalog_failure_falls_back_to_samples() -> None:
    response = _client(StaticCatalog(fail=True)).post("/recommendations", json={"detectedItems": [ITEM]})
    assert response.status_code == 200
    products = response.json()["data"]["recommendations"]
    assert products and all(product["id"].startswith("mock_") for product in products)


def test_missing_catalog_credentials_is_server_error() -> None:
    response = _client(catalog=None).post("/recommendations", json={"detectedItems": [ITEM]})
    assert response.status_code == 500
    assert "YAHOO_CLIENT_ID" in response.json()["detail"]
