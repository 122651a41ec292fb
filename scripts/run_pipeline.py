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
from mockup_studio.config import PipelineConfig, StudioSettings
from mockup_studio.pipeline import GenerationMode, MockupPipeline, PipelineRun
from mockup_studio.products import PRODUCTS
from mockup_studio.types import Status
from mockup_studio.utils.encoding import load_image, save_image


def _write_metadata(path: str, payload: dict) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=True)


def _print_progress(run: PipelineRun) -> None:
    if run.progress:
        print(run.progress)


async def _run(args: argparse.Namespace) -> PipelineRun:
    settings = StudioSettings.load(args.settings)
    if args.api_key:
        settings.gemini_api_key = args.api_key
    client = GeminiAdapter(settings.gemini(timeout=args.timeout))
    config = PipelineConfig(max_mockups=args.max_mockups)
    pipeline = MockupPipeline(client, config, listener=_print_progress)

    run = await pipeline.generate(load_image(args.image), GenerationMode(args.mode), args.instructions)
    if run.primary.status is not Status.SUCCESS:
        return run
    await pipeline.process_design(args.products)
    if args.details and run.secondary.status is Status.SUCCESS:
        await pipeline.generate_details()
    return run


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Upload -> print-ready design -> product mockups.")
    parser.add_argument("--image", required=True, help="Uploaded product photo or design")
    parser.add_argument("--outdir", default="outputs/pipeline")
    parser.add_argument("--mode", default="clone", choices=[mode.value for mode in GenerationMode])
    parser.add_argument("--instructions", default="", help="Custom transform/redesign instructions")
    parser.add_argument(
        "--products",
        nargs="*",
        default=[],
        choices=sorted(PRODUCTS),
        help="Mockup products to render",
    )
    parser.add_argument("--max-mockups", type=int, default=6)
    parser.add_argument("--details", action="store_true", help="Also generate title/description/tags")
    parser.add_argument("--settings", default=None, help="Path to a studio settings JSON file")
    parser.add_argument("--api-key", default=None, help="Gemini API key (overrides settings)")
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    run = asyncio.run(_run(args))

    name = os.path.splitext(os.path.basename(args.image))[0]
    outdir = os.path.join(args.outdir, name)
    os.makedirs(outdir, exist_ok=True)
    outputs = {}
    if run.primary.image is not None:
        outputs["primary"] = os.path.join(outdir, "primary.png")
        save_image(outputs["primary"], run.primary.image)
    if run.secondary.image is not None:
        outputs["design"] = os.path.join(outdir, "design_print.png")
        save_image(outputs["design"], run.secondary.image)
    mockups = []
    for item in run.mockups.items:
        entry = {"id": item.id, "name": item.name, "status": item.status.value, "error": item.error}
        if item.image is not None:
            entry["path"] = os.path.join(outdir, "mockups", f"{item.id}.png")
            save_image(entry["path"], item.image)
        mockups.append(entry)

    details = run.details.details
    metadata = {
        "mode": run.mode.value,
        "instructions": run.instructions,
        "stages": {
            state.name: {"status": state.status.value, "error": state.error}
            for state in (run.primary, run.secondary, run.color, run.mockups, run.details)
        },
        "color": run.color.color,
        "mockups": mockups,
        "details": None
        if details is None
        else {"title": details.title, "description": details.description, "tags": details.tags},
        "outputs": outputs,
    }
    _write_metadata(os.path.join(outdir, "metadata.json"), metadata)

    if run.primary.status is Status.FAILED:
        print(f"Generation failed: {run.primary.error}")
        sys.exit(1)
    print(f"Done. Outputs saved to {outdir}")


if __name__ == "__main__":
    main()
