"""Generative collaborator that turns a prompt into free-text search queries."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from google import generativeai as genai

from tools.observability import instrument_tool
from trendgal_app.config import DEFAULT_GEMINI_MODEL, AppConfig, ConfigurationError

LOGGER = logging.getLogger(__name__)


class QueryGenerationError(RuntimeError):
    """Raised when the generative backend fails to answer a prompt."""


class QueryGenerator(ABC):
    """Abstract text generator used for search query synthesis.

    Implementations should raise :class:`QueryGenerationError`, but the
    synthesizer falls back to deterministic queries on any exception.
    """

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the raw text answer for ``prompt``."""


class GeminiQueryGenerator(QueryGenerator):
    """Gemini backed generator using ``google-generativeai``."""

    def __init__(self, api_key: str, model: str = DEFAULT_GEMINI_MODEL) -> None:
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set in environment variables")
        genai.configure(api_key=api_key)
        self.model_name = model
        self.model = genai.GenerativeModel(model)

    @classmethod
    def from_config(cls, config: AppConfig) -> "GeminiQueryGenerator":
        return cls(api_key=config.gemini_api_key or "", model=config.model)

    @instrument_tool("generate_search_queries", service="gemini")
    def generate(self, prompt: str) -> str:
        try:
            response = self.model.generate_content(prompt)
            text = response.text
        except Exception as exc:  # noqa: BLE001 - SDK raises a wide range of transport errors
            LOGGER.warning("Gemini generation failed", extra={"model": self.model_name, "error": str(exc)})
            raise QueryGenerationError(f"Gemini generation failed: {exc}") from exc
        if not text:
            raise QueryGenerationError("Gemini returned an empty response")
        return text


__all__ = ["GeminiQueryGenerator", "QueryGenerationError", "QueryGenerator"]
