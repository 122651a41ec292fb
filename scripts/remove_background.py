import argparse
import glob
import logging
import os
import sys
from typing import List, Optional

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from mockup_studio.canvas import letterbox_resize
from mockup_studio.config import PRINT_SIZE, SegmentationConfig
from mockup_studio.segmentation import BackgroundSegmenter
from mockup_studio.utils.encoding import load_image, save_image

logger = logging.getLogger("remove_background")


def _collect_inputs(pattern: str) -> List[str]:
    if os.path.isdir(pattern):
        pattern = os.path.join(pattern, "*")
    exts = (".png", ".jpg", ".jpeg", ".webp")
    return sorted(path for path in glob.glob(pattern) if path.lower().endswith(exts))


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Remove flat backdrops and letterbox designs for print.")
    parser.add_argument("--input", required=True, help="Image path, directory or glob pattern")
    parser.add_argument("--outdir", default="outputs/cleaned")
    parser.add_argument("--width", type=int, default=PRINT_SIZE[0])
    parser.add_argument("--height", type=int, default=PRINT_SIZE[1])
    parser.add_argument("--no-letterbox", action="store_true", help="Only rewrite alpha, keep the size")
    parser.add_argument("--edge-threshold", type=int, default=30)
    parser.add_argument("--edge-metric", default="sum", choices=["sum", "max"])
    parser.add_argument("--soft-band", type=float, default=60.0)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    paths = _collect_inputs(args.input)
    if not paths:
        raise FileNotFoundError(f"No images matched: {args.input}")

    segmenter = BackgroundSegmenter(
        SegmentationConfig(
            edge_threshold=args.edge_threshold,
            edge_metric=args.edge_metric,
            soft_band=args.soft_band,
        )
    )
    for path in paths:
        image = segmenter(load_image(path))
        if not args.no_letterbox:
            image = letterbox_resize(image, args.width, args.height)
        name = os.path.splitext(os.path.basename(path))[0]
        out_path = os.path.join(args.outdir, f"{name}.png")
        save_image(out_path, image)
        logger.info("%s -> %s (%dx%d)", path, out_path, image.width, image.height)

    print(f"Done. {len(paths)} image(s) saved to {args.outdir}")


if __name__ == "__main__":
    main()
