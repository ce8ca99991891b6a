"""Google Cloud Vision adapter producing :class:`VisionObservation` values."""

from __future__ import annotations

import logging
from typing import Any, List

from google.cloud import vision

from models.vision import DominantColor, LocalizedObject, NormalizedVertex, VisionLabel, VisionObservation
from tools.observability import instrument_tool
from trendgal_app.config import AppConfig

LOGGER = logging.getLogger(__name__)

ANALYSIS_FEATURES = (
    (vision.Feature.Type.LABEL_DETECTION, 20),
    (vision.Feature.Type.IMAGE_PROPERTIES, 10),
    (vision.Feature.Type.OBJECT_LOCALIZATION, 10),
)


class VisionAnalysisError(RuntimeError):
    """Raised when the vision backend rejects or fails an annotation request."""


def _colors_from_response(response: Any) -> tuple[DominantColor, ...]:
    colors = response.image_properties_annotation.dominant_colors.colors
    return tuple(
        DominantColor(
            red=int(color.color.red),
            green=int(color.color.green),
            blue=int(color.color.blue),
            score=float(color.score),
            pixel_fraction=float(color.pixel_fraction),
        )
        for color in colors
    )


def observation_from_response(response: Any) -> VisionObservation:
    """Convert an ``AnnotateImageResponse`` into a plain observation."""

    labels = tuple(
        VisionLabel(description=label.description, score=float(label.score))
        for label in response.label_annotations
    )
    objects = tuple(
        LocalizedObject(
            name=obj.name,
            score=float(obj.score),
            vertices=tuple(
                NormalizedVertex(x=float(vertex.x), y=float(vertex.y))
                for vertex in obj.bounding_poly.normalized_vertices
            ),
        )
        for obj in response.localized_object_annotations
    )
    return VisionObservation(labels=labels, colors=_colors_from_response(response), objects=objects)


class GoogleVisionClient:
    """Label, color and object analysis through ``ImageAnnotatorClient``.

    ``dominant_colors`` doubles as the color analyzer for region crops.
    """

    def __init__(self, client: Any | None = None, api_key: str | None = None, credentials_path: str | None = None) -> None:
        if client is not None:
            self.client = client
        elif api_key:
            self.client = vision.ImageAnnotatorClient(client_options={"api_key": api_key})
        elif credentials_path:
            self.client = vision.ImageAnnotatorClient.from_service_account_file(credentials_path)
        else:
            self.client = vision.ImageAnnotatorClient()

    @classmethod
    def from_config(cls, config: AppConfig) -> "GoogleVisionClient":
        config.require_vision_credentials()
        return cls(api_key=config.google_api_key, credentials_path=config.google_credentials_path)

    @instrument_tool("analyze_image", service="google_vision")
    def analyze(self, image_bytes: bytes) -> VisionObservation:
        request = {
            "image": {"content": image_bytes},
            "features": [{"type_": feature, "max_results": limit} for feature, limit in ANALYSIS_FEATURES],
        }
        response = self.client.annotate_image(request)
        self._raise_for_error(response)
        observation = observation_from_response(response)
        LOGGER.info(
            "Vision analysis complete",
            extra={
                "labels": len(observation.labels),
                "colors": len(observation.colors),
                "objects": len(observation.objects),
            },
        )
        return observation

    def dominant_colors(self, image_bytes: bytes) -> List[DominantColor]:
        response = self.client.image_properties(image=vision.Image(content=image_bytes))
        self._raise_for_error(response)
        return list(_colors_from_response(response))

    @staticmethod
    def _raise_for_error(response: Any) -> None:
        error = getattr(response, "error", None)
        message = getattr(error, "message", "") if error is not None else ""
        if message:
            raise VisionAnalysisError(f"Vision API error: {message}")


__all__ = ["ANALYSIS_FEATURES", "GoogleVisionClient", "VisionAnalysisError", "observation_from_response"]
