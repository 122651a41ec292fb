"""Freehand stroke rasterization for inpainting masks."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Tuple

import cv2
import numpy as np

from mockup_studio.config import MaskConfig, StrokeScalePolicy
from mockup_studio.errors import ContextError, ValidationError
from mockup_studio.types import MaskImage, MaskSpec, Point

_WHITE = 255
_MAX_THICKNESS = 32767


class MaskRasterizer:
    """Render strokes drawn on a display canvas into a mask at target size.

    Points are mapped per axis (``target / display``); the brush width is
    scaled by the configured :class:`StrokeScalePolicy`. Strokes are drawn
    with round caps and joins, white on black.
    """

    def __init__(self, config: Optional[MaskConfig] = None) -> None:
        self.config = config or MaskConfig()

    def scales(self, display_size: Tuple[float, float], target_size: Tuple[int, int]) -> Tuple[float, float]:
        display_w, display_h = display_size
        target_w, target_h = target_size
        if display_w <= 0 or display_h <= 0:
            raise ValidationError("Display size must be positive.")
        if target_w < 1 or target_h < 1:
            raise ValidationError("Target size must be at least 1x1.")
        return target_w / display_w, target_h / display_h

    def stroke_width(self, brush_width: float, scale_x: float, scale_y: float) -> float:
        return brush_width * StrokeScalePolicy(self.config.stroke_policy).combine(scale_x, scale_y)

    def rasterize(
        self,
        paths: Iterable[Sequence[Point]],
        brush_width: float,
        display_size: Tuple[float, float],
        target_size: Tuple[int, int],
    ) -> MaskImage:
        scale_x, scale_y = self.scales(display_size, target_size)
        target_w, target_h = target_size
        try:
            canvas = np.zeros((target_h, target_w), dtype=np.uint8)
        except MemoryError as exc:
            raise ContextError(f"Could not allocate a {target_w}x{target_h} mask.") from exc
        width = self.stroke_width(brush_width, scale_x, scale_y)
        for path in paths:
            if not path:
                continue
            scaled = [point.scaled(scale_x, scale_y) for point in path]
            _stroke(canvas, scaled, width)
        return MaskImage(canvas)

    def rasterize_spec(
        self,
        spec: MaskSpec,
        display_size: Tuple[float, float],
        target_size: Tuple[int, int],
    ) -> MaskImage:
        return self.rasterize(spec.paths, spec.brush_width, display_size, target_size)


def _stroke(canvas: np.ndarray, points: Sequence[Point], width: float) -> None:
    # cv2 thick lines are already round-capped; the discs make joins and
    # single-point taps explicit and keep small brushes symmetric.
    height, canvas_w = canvas.shape[:2]
    # strokes wider than twice the diagonal paint the same pixels
    width = min(width, 2.0 * math.hypot(canvas_w, height))
    thickness = min(_MAX_THICKNESS, max(1, int(round(width))))
    radius = max(0, int(math.floor(width / 2.0)))
    pixel_points = [(int(round(p.x)), int(round(p.y))) for p in points]
    for start, end in zip(pixel_points, pixel_points[1:]):
        cv2.line(canvas, start, end, _WHITE, thickness=thickness, lineType=cv2.LINE_8)
    for center in pixel_points:
        cv2.circle(canvas, center, radius, _WHITE, thickness=-1, lineType=cv2.LINE_8)


def rasterize(
    paths: Iterable[Sequence[Point]],
    brush_width: float,
    display_size: Tuple[float, float],
    target_size: Tuple[int, int],
    policy: StrokeScalePolicy = StrokeScalePolicy.MIN,
) -> MaskImage:
    """Functional entry point around :class:`MaskRasterizer`."""

    return MaskRasterizer(MaskConfig(stroke_policy=policy)).rasterize(
        paths, brush_width, display_size, target_size
    )
