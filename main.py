"""Simple entrypoint to run the TrendGal pipeline on a local image."""

import argparse
import json
from pathlib import Path

from trendgal_app.app import TrendGalApp
from trendgal_app.logging_config import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Detect fashion items in an image and suggest products.")
    parser.add_argument("image", type=Path, help="Path to a JPEG or PNG image")
    parser.add_argument("--persona", default=None, help="Persona id (kurisu or marin)")
    parser.add_argument("--detect-only", action="store_true", help="Skip the catalog search")
    args = parser.parse_args()

    configure_logging()
    app = TrendGalApp()
    analysis = app.analyze_image(
        args.image.read_bytes(),
        progress=lambda event: print(f"[{event.percentage:3d}%] {event.current_item}"),
    )
    output = analysis.to_dict()
    if not args.detect_only:
        products = app.recommend_products(analysis.detected_items, analysis.observation, args.persona)
        output["recommendations"] = [product.to_dict() for product in products]
    print(json.dumps(output, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
