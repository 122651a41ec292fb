"""Canvas transforms: upload downscaling and print letterboxing."""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from mockup_studio.errors import ContextError, ValidationError
from mockup_studio.config import PRINT_SIZE, SegmentationConfig
from mockup_studio.segmentation import BackgroundSegmenter
from mockup_studio.types import Image
from mockup_studio.utils.vision import resize_rgba


def _check_target(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise ValidationError(f"Target size must be at least 1x1, got {width}x{height}.")


def fit_ratio(src_w: int, src_h: int, max_w: int, max_h: int) -> float:
    return min(max_w / src_w, max_h / src_h)


def downscale_if_larger(image: Image, max_w: int, max_h: int) -> Image:
    """Shrink ``image`` uniformly to fit within ``max_w`` x ``max_h``.

    Images already inside the box are returned as-is. The output canvas is
    exactly the scaled size; nothing is padded.
    """

    _check_target(max_w, max_h)
    if image.width <= max_w and image.height <= max_h:
        return image
    ratio = fit_ratio(image.width, image.height, max_w, max_h)
    width = max(1, int(round(image.width * ratio)))
    height = max(1, int(round(image.height * ratio)))
    return Image(resize_rgba(image.pixels, (height, width)))


def letterbox_geometry(src_w: int, src_h: int, target_w: int, target_h: int) -> Tuple[int, int, int, int]:
    """Return (x_offset, y_offset, width, height) of the content box."""

    ratio = fit_ratio(src_w, src_h, target_w, target_h)
    width = min(target_w, max(1, int(round(src_w * ratio))))
    height = min(target_h, max(1, int(round(src_h * ratio))))
    return (target_w - width) // 2, (target_h - height) // 2, width, height


def letterbox_resize(image: Image, target_w: int, target_h: int) -> Image:
    """Scale ``image`` to fit ``target_w`` x ``target_h`` and centre it.

    Unlike :func:`downscale_if_larger` this always scales, enlarging small
    sources. The uncovered border is fully transparent.
    """

    _check_target(target_w, target_h)
    x, y, width, height = letterbox_geometry(image.width, image.height, target_w, target_h)
    if (width, height) == (target_w, target_h) and image.size == (target_w, target_h):
        return image
    content = resize_rgba(image.pixels, (height, width))
    try:
        canvas = np.zeros((target_h, target_w, 4), dtype=np.uint8)
    except MemoryError as exc:
        raise ContextError(f"Could not allocate a {target_w}x{target_h} canvas.") from exc
    canvas[y : y + height, x : x + width] = content
    return Image(canvas)


def prepare_for_print(
    image: Image,
    print_size: Tuple[int, int] = PRINT_SIZE,
    segmentation: Optional[SegmentationConfig] = None,
) -> Image:
    """Background removal followed by letterboxing onto the print canvas."""

    cleaned = BackgroundSegmenter(segmentation).segment(image)
    return letterbox_resize(cleaned, *print_size)
