"""Application facade wiring collaborators into the recommendation pipeline."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from logic.attribute_inference import color_palette, infer_overall_style, overall_confidence
from logic.item_detection import ItemDetector, ProgressSink
from logic.product_matching import ProductMatcher
from logic.query_synthesis import QuerySynthesizer
from models.fashion_item import DetectedItem
from models.product import Product, SearchQuery
from models.vision import DominantColor, VisionObservation
from tools.catalog_search import CatalogSearch, YahooShoppingClient
from tools.query_generator import GeminiQueryGenerator, QueryGenerator
from tools.region_colors import RegionColorExtractor
from tools.vision_client import GoogleVisionClient
from trendgal_app.config import AppConfig
from trendgal_app.logging_config import get_logger, log_event, operation_context

LOGGER = get_logger(__name__)


@dataclass
class AnalysisResult:
    """Items and whole-image summary returned before any catalog search runs."""

    detected_items: List[DetectedItem]
    color_palette: List[Dict[str, Any]]
    overall_style: str
    confidence: float
    observation: VisionObservation = field(default_factory=VisionObservation)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detectedItems": [item.to_dict() for item in self.detected_items],
            "colorPalette": self.color_palette,
            "overallStyle": self.overall_style,
            "confidence": self.confidence,
            "visionResult": self.observation.to_payload(),
        }


class TrendGalApp:
    """Detection, query synthesis and product matching behind one object.

    Collaborators may be injected; otherwise they are built from ``config`` on
    first use, so a deployment without catalog credentials can still detect
    items and only fails when products are requested.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        vision_client: GoogleVisionClient | None = None,
        catalog: CatalogSearch | None = None,
        generator: QueryGenerator | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        self._vision_client = vision_client
        self._catalog = catalog
        self.rng = rng or random.Random()

        if generator is None and self.config.gemini_api_key:
            generator = GeminiQueryGenerator.from_config(self.config)
        self.synthesizer = QuerySynthesizer(generator=generator)

        analyzer = self._analyze_region if self._has_vision_backend() else None
        self.detector = ItemDetector(region_extractor=RegionColorExtractor(analyzer=analyzer))

    def _has_vision_backend(self) -> bool:
        return self._vision_client is not None or bool(
            self.config.google_api_key or self.config.google_credentials_path
        )

    @property
    def vision_client(self) -> GoogleVisionClient:
        if self._vision_client is None:
            self._vision_client = GoogleVisionClient.from_config(self.config)
        return self._vision_client

    @property
    def catalog(self) -> CatalogSearch:
        if self._catalog is None:
            self._catalog = YahooShoppingClient(
                client_id=self.config.require_yahoo_client_id(),
                timeout_seconds=self.config.search_timeout_seconds,
            )
        return self._catalog

    def _analyze_region(self, image_bytes: bytes) -> Sequence[DominantColor]:
        return self.vision_client.dominant_colors(image_bytes)

    def analyze_image(self, image_bytes: bytes, progress: ProgressSink | None = None) -> AnalysisResult:
        """Run vision analysis on raw image bytes and detect items in the result."""

        with operation_context("app:analyze_image") as correlation_id:
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_started",
                method="analyze_image",
                correlation_id=correlation_id,
                image_size=len(image_bytes),
            )
            observation = self.vision_client.analyze(image_bytes)
            items = self.detect_items(observation, image_bytes=image_bytes, progress=progress)
            result = AnalysisResult(
                detected_items=items,
                color_palette=color_palette(observation),
                overall_style=infer_overall_style(observation.labels),
                confidence=overall_confidence(items),
                observation=observation,
            )
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_completed",
                method="analyze_image",
                correlation_id=correlation_id,
                item_count=len(items),
                overall_style=result.overall_style,
            )
            return result

    def detect_items(
        self,
        observation: VisionObservation,
        image_bytes: bytes | None = None,
        progress: ProgressSink | None = None,
    ) -> List[DetectedItem]:
        return self.detector.detect(observation, image_bytes=image_bytes, progress=progress)

    def synthesize_queries(
        self,
        items: Sequence[DetectedItem],
        observation: VisionObservation | None = None,
        persona: Optional[str] = None,
    ) -> List[SearchQuery]:
        return self.synthesizer.synthesize(items, observation, persona or self.config.default_persona)

    def recommend_products(
        self,
        items: Sequence[DetectedItem],
        observation: VisionObservation | None = None,
        persona: Optional[str] = None,
    ) -> List[Product]:
        """Synthesize queries for the items and match them against the catalog."""

        with operation_context("app:recommend_products") as correlation_id:
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_started",
                method="recommend_products",
                correlation_id=correlation_id,
                item_count=len(items),
                persona=persona or self.config.default_persona,
            )
            queries = self.synthesize_queries(items, observation, persona)
            if not queries and not items:
                return []

            products = ProductMatcher(self.catalog, rng=self.rng).match(queries, items)
            log_event(
                LOGGER,
                level=logging.INFO,
                event="app_call_completed",
                method="recommend_products",
                correlation_id=correlation_id,
                query_count=len(queries),
                product_count=len(products),
            )
            return products


__all__ = ["AnalysisResult", "TrendGalApp"]
