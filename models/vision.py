"""Immutable value objects for image-understanding results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from models.color_names import rgb_to_hex


@dataclass(frozen=True)
class VisionLabel:
    description: str
    score: float


@dataclass(frozen=True)
class DominantColor:
    red: int
    green: int
    blue: int
    score: float = 0.0
    pixel_fraction: float = 0.0

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.red, self.green, self.blue)


@dataclass(frozen=True)
class NormalizedVertex:
    x: float
    y: float


@dataclass(frozen=True)
class LocalizedObject:
    name: str
    score: float
    vertices: Tuple[NormalizedVertex, ...] = ()


@dataclass(frozen=True)
class VisionObservation:
    """Labels, dominant colors and localized objects for one image."""

    labels: Tuple[VisionLabel, ...] = ()
    colors: Tuple[DominantColor, ...] = ()
    objects: Tuple[LocalizedObject, ...] = field(default_factory=tuple)

    def dominant_colors(self) -> List[DominantColor]:
        """Colors ordered by covered area, largest first."""

        return sorted(self.colors, key=lambda color: color.pixel_fraction, reverse=True)

    def dominant_hex(self, limit: int = 3) -> List[str]:
        return [color.hex for color in self.dominant_colors()[:limit]]

    def is_empty(self) -> bool:
        return not self.labels and not self.colors and not self.objects

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "VisionObservation":
        """Build an observation from a Google Vision style JSON payload.

        Accepts both the raw API shape (colors nested under ``color``) and the
        flattened shape the web client posts back. Missing sections are
        treated as empty.
        """

        payload = payload or {}
        labels = tuple(
            VisionLabel(description=str(label.get("description") or ""), score=float(label.get("score") or 0.0))
            for label in payload.get("labelAnnotations") or []
        )

        properties = payload.get("imagePropertiesAnnotation") or {}
        raw_colors = (properties.get("dominantColors") or {}).get("colors") or []
        colors = tuple(_color_from_payload(color) for color in raw_colors)

        objects = tuple(
            LocalizedObject(
                name=str(obj.get("name") or ""),
                score=float(obj.get("score") or 0.0),
                vertices=tuple(
                    NormalizedVertex(x=float(vertex.get("x") or 0.0), y=float(vertex.get("y") or 0.0))
                    for vertex in (obj.get("boundingPoly") or {}).get("normalizedVertices") or []
                ),
            )
            for obj in payload.get("localizedObjectAnnotations") or []
        )
        return cls(labels=labels, colors=colors, objects=objects)

    def to_payload(self) -> Dict[str, Any]:
        """Serialise back into the flattened Google Vision shape."""

        return {
            "labelAnnotations": [
                {"description": label.description, "score": label.score} for label in self.labels
            ],
            "imagePropertiesAnnotation": {
                "dominantColors": {
                    "colors": [
                        {
                            "red": color.red,
                            "green": color.green,
                            "blue": color.blue,
                            "score": color.score,
                            "pixelFraction": color.pixel_fraction,
                        }
                        for color in self.colors
                    ]
                }
            },
            "localizedObjectAnnotations": [
                {
                    "name": obj.name,
                    "score": obj.score,
                    "boundingPoly": {"normalizedVertices": [{"x": v.x, "y": v.y} for v in obj.vertices]},
                }
                for obj in self.objects
            ],
        }


def _color_from_payload(raw: Mapping[str, Any]) -> DominantColor:
    rgb = raw.get("color") if isinstance(raw.get("color"), Mapping) else raw
    return DominantColor(
        red=int(rgb.get("red") or 0),
        green=int(rgb.get("green") or 0),
        blue=int(rgb.get("blue") or 0),
        score=float(raw.get("score") or 0.0),
        pixel_fraction=float(raw.get("pixelFraction") or raw.get("pixel_fraction") or 0.0),
    )


__all__ = [
    "DominantColor",
    "LocalizedObject",
    "NormalizedVertex",
    "VisionLabel",
    "VisionObservation",
]
