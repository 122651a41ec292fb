"""Inpaint a design using strokes recorded in a JSON file.

Stroke file format::

    {
      "canvas": [1024, 1024],
      "brush_width": 50,
      "paths": [[[x, y], [x, y], ...], ...]
    }

``canvas`` is the size of the surface the strokes were drawn on; when it is
omitted the strokes are taken to be in display-image coordinates.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mockup_studio.adapters import GeminiAdapter
from mockup_studio.config import MaskConfig, PipelineConfig, StrokeScalePolicy, StudioSettings
from mockup_studio.studios import RedesignStudio
from mockup_studio.types import Point, Status
from mockup_studio.utils.encoding import load_image, save_image


def _load_strokes(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload.get("paths"), list):
        raise ValueError(f"Stroke file has no 'paths' list: {path}")
    return payload


def _draw(studio: RedesignStudio, payload: dict) -> None:
    if "brush_width" in payload:
        studio.set_brush_width(float(payload["brush_width"]))
    for path in payload["paths"]:
        if not path:
            continue
        (x, y), rest = path[0], path[1:]
        studio.begin_stroke(Point(float(x), float(y)))
        for x, y in rest:
            studio.continue_stroke(Point(float(x), float(y)))
        studio.end_stroke()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Masked redesign of a print design.")
    parser.add_argument("--image", required=True)
    parser.add_argument("--strokes", required=True, help="JSON stroke file")
    parser.add_argument("--instructions", required=True)
    parser.add_argument("--outdir", default="outputs/redesign")
    parser.add_argument("--stroke-policy", default="min", choices=[p.value for p in StrokeScalePolicy])
    parser.add_argument("--settings", default=None)
    parser.add_argument("--api-key", default=None)
    parser.add_argument("--save-mask", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = StudioSettings.load(args.settings)
    if args.api_key:
        settings.gemini_api_key = args.api_key
    config = PipelineConfig(mask=MaskConfig(stroke_policy=StrokeScalePolicy(args.stroke_policy)))
    studio = RedesignStudio(GeminiAdapter(settings.gemini()), config)
    studio.load(load_image(args.image))

    payload = _load_strokes(args.strokes)
    _draw(studio, payload)
    canvas = tuple(payload["canvas"]) if payload.get("canvas") else None

    name = os.path.splitext(os.path.basename(args.image))[0]
    outdir = os.path.join(args.outdir, name)
    if args.save_mask:
        save_image(os.path.join(outdir, "mask.png"), studio.build_mask(canvas).to_image())

    result = asyncio.run(studio.generate(args.instructions, canvas))
    if result.status is not Status.SUCCESS:
        print(f"Redesign failed: {result.error}")
        sys.exit(1)
    out_path = os.path.join(outdir, "redesign_print.png")
    save_image(out_path, result.image)
    print(f"Done. Redesign saved to {out_path}")


if __name__ == "__main__":
    main()
