"""Turn a vision observation into a deduplicated set of typed fashion items."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from logic.attribute_inference import describe, infer_attributes
from models.fashion_item import BoundingRegion, DetectedItem
from models.taxonomy import Category, categories_for_label, categorize_object
from models.vision import LocalizedObject, VisionObservation
from tools.region_colors import RegionColorExtractor
from trendgal_app.logging_config import get_logger, log_event

logger = get_logger(__name__)

MAX_DETECTED_ITEMS = 6


@dataclass(frozen=True)
class DetectionProgress:
    current: int
    total: int
    current_item: str

    @property
    def percentage(self) -> int:
        return round(self.current / self.total * 100) if self.total else 100


ProgressSink = Callable[[DetectionProgress], None]


@dataclass(frozen=True)
class _Candidate:
    id: str
    category: Category
    label: str
    confidence: float
    region: Optional[BoundingRegion]


def find_region(label: str, objects: Sequence[LocalizedObject]) -> Optional[BoundingRegion]:
    """Region of the first object whose name and the label contain one another."""

    text = label.lower()
    for obj in objects:
        name = obj.name.lower()
        if name and (name in text or text in name):
            return BoundingRegion.from_vertices(obj.vertices)
    return None


class ItemDetector:
    """Merges label and object-localization signals into at most six items.

    Items are deduplicated per category by descending confidence, then each
    survivor gets its attributes. Colors come from the item's own region when
    both a region and the source image are available, otherwise from the
    whole image.
    """

    def __init__(
        self,
        region_extractor: RegionColorExtractor | None = None,
        max_items: int = MAX_DETECTED_ITEMS,
    ) -> None:
        self.region_extractor = region_extractor
        self.max_items = max_items

    def detect(
        self,
        observation: VisionObservation,
        image_bytes: bytes | None = None,
        progress: ProgressSink | None = None,
    ) -> List[DetectedItem]:
        candidates = self._select(self._candidates(observation))
        whole_image_colors = observation.dominant_hex()

        items: List[DetectedItem] = []
        for position, candidate in enumerate(candidates, start=1):
            colors = self._colors_for(candidate, image_bytes, whole_image_colors)
            attributes = infer_attributes(candidate.label, colors, observation.labels)
            items.append(
                DetectedItem(
                    id=candidate.id,
                    category=candidate.category,
                    description=describe(candidate.label, attributes),
                    confidence=candidate.confidence,
                    attributes=attributes,
                    bounding_region=candidate.region,
                    label=candidate.label,
                )
            )
            self._report(progress, DetectionProgress(position, len(candidates), candidate.label))

        log_event(
            logger,
            logging.INFO,
            "items_detected",
            labels=len(observation.labels),
            objects=len(observation.objects),
            detected=len(items),
            categories=[item.category.value for item in items],
        )
        return items

    def _candidates(self, observation: VisionObservation) -> List[_Candidate]:
        candidates: List[_Candidate] = []
        per_category: Dict[Category, int] = {}

        for category in Category:
            for label in observation.labels:
                if category not in categories_for_label(label.description):
                    continue
                index = per_category.get(category, 0)
                per_category[category] = index + 1
                candidates.append(
                    _Candidate(
                        id=f"{category.value}_{index}",
                        category=category,
                        label=label.description,
                        confidence=label.score,
                        region=find_region(label.description, observation.objects),
                    )
                )

        label_texts = [candidate.label.lower() for candidate in candidates]
        for index, obj in enumerate(observation.objects):
            name = obj.name.lower()
            if not name or any(name in text for text in label_texts):
                continue
            category = categorize_object(obj.name)
            if category is None:
                continue
            candidates.append(
                _Candidate(
                    id=f"object_{index}",
                    category=category,
                    label=obj.name,
                    confidence=obj.score,
                    region=BoundingRegion.from_vertices(obj.vertices),
                )
            )
        return candidates

    def _select(self, candidates: List[_Candidate]) -> List[_Candidate]:
        """Keep the most confident candidate per category, capped."""

        seen: set[Category] = set()
        selected: List[_Candidate] = []
        for candidate in sorted(candidates, key=lambda c: c.confidence, reverse=True):
            if candidate.category in seen:
                continue
            seen.add(candidate.category)
            selected.append(candidate)
        return selected[: self.max_items]

    def _colors_for(
        self, candidate: _Candidate, image_bytes: bytes | None, whole_image_colors: List[str]
    ) -> List[str]:
        if candidate.region is None or image_bytes is None or self.region_extractor is None:
            return whole_image_colors
        colors = self.region_extractor.extract_colors(image_bytes, candidate.region)
        if not colors:
            logger.info("Region colors unknown", extra={"item_id": candidate.id})
        return colors

    @staticmethod
    def _report(progress: ProgressSink | None, event: DetectionProgress) -> None:
        if progress is None:
            return
        try:
            progress(event)
        except Exception:  # noqa: BLE001 - progress is advisory only
            logger.warning("Progress sink raised; ignoring", exc_info=True)


__all__ = ["DetectionProgress", "ItemDetector", "MAX_DETECTED_ITEMS", "ProgressSink", "find_region"]
