"""FastAPI server exposing detection and recommendation endpoints."""

import base64
import binascii
import logging

from fastapi import FastAPI, HTTPException
from pydantic import ValidationError

from logic.product_matching import ProductSearchError
from logic.validation import AnalyzeRequest, RecommendationRequest, validation_failure
from models.fashion_item import DetectedItem
from models.vision import VisionObservation
from tools.vision_client import VisionAnalysisError
from trendgal_app.app import TrendGalApp
from trendgal_app.config import ConfigurationError
from trendgal_app.logging_config import configure_logging, get_logger, log_event

LOGGER = get_logger(__name__)


def _decode_image(payload: str) -> bytes:
    # Browsers post data URLs; keep only the base64 body.
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail="imageBase64 is not valid base64") from exc


def create_app(trendgal: TrendGalApp | None = None) -> FastAPI:
    """Build the FastAPI application around a pipeline instance."""

    pipeline = trendgal or TrendGalApp()
    api = FastAPI(title="TrendGal", version="0.1.0")

    @api.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "trendgal",
            "environment": pipeline.config.environment or "local",
            "model": pipeline.config.model,
        }

    @api.post("/analyze")
    def analyze(request: AnalyzeRequest) -> dict:
        """Detect fashion items in a base64 encoded image."""

        image_bytes = _decode_image(request.image_base64)
        try:
            result = pipeline.analyze_image(image_bytes)
        except ConfigurationError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except VisionAnalysisError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return {"success": True, "data": result.to_dict()}

    @api.post("/recommendations")
    def recommendations(request: RecommendationRequest) -> dict:
        """Return catalog products for items detected earlier."""

        if not request.detected_items:
            raise HTTPException(status_code=400, detail="Detected items are required")
        try:
            items = [DetectedItem.from_dict(raw) for raw in request.detected_items]
        except (KeyError, TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid detected item: {exc}") from exc
        observation = VisionObservation.from_payload(request.vision_result) if request.vision_result else None

        try:
            products = pipeline.recommend_products(items, observation, request.persona)
        except ConfigurationError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except ValidationError as exc:
            log_event(LOGGER, logging.WARNING, "recommendation_input_invalid", details=str(exc))
            raise HTTPException(status_code=400, detail=validation_failure("Invalid search input", exc)) from exc
        except ProductSearchError as exc:
            raise HTTPException(status_code=502, detail={"message": str(exc), "failures": exc.failures}) from exc
        return {"success": True, "data": {"recommendations": [product.to_dict() for product in products]}}

    return api


def get_app() -> FastAPI:
    """Application factory for ASGI servers (``uvicorn --factory``)."""

    configure_logging()
    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=8080, reload=False)
