"""Heuristic background removal.

Generated designs are requested on a flat, near-white backdrop. The remover
estimates that backdrop from a handful of border samples and clears every
pixel that is close to it in colour, keeping pixels on strong local edges and
feathering alpha in a narrow band around the threshold.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np

from mockup_studio.config import SegmentationConfig
from mockup_studio.types import Image

_NEIGHBOURS = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


class BackgroundSegmenter:
    """Rewrite alpha so the sampled backdrop becomes transparent."""

    def __init__(self, config: Optional[SegmentationConfig] = None) -> None:
        self.config = config or SegmentationConfig()
        if self.config.edge_metric not in ("sum", "max"):
            raise ValueError(f"Unknown edge metric: {self.config.edge_metric}")

    @staticmethod
    def anchor_points(width: int, height: int) -> List[Tuple[int, int]]:
        """The eight (x, y) samples used to estimate the backdrop colour."""

        return [
            (0, 0),
            (width - 1, 0),
            (0, height - 1),
            (width - 1, height - 1),
            (width // 4, 0),
            (3 * width // 4, 0),
            (0, height // 4),
            (width - 1, height // 4),
        ]

    def estimate_background(self, rgb: np.ndarray) -> np.ndarray:
        height, width = rgb.shape[:2]
        samples = np.array([rgb[y, x] for x, y in self.anchor_points(width, height)], dtype="float64")
        return samples.mean(axis=0)

    def edge_map(self, rgb: np.ndarray) -> np.ndarray:
        """Boolean map of interior pixels whose strongest neighbour difference
        exceeds ``edge_threshold``. The outermost ring is never an edge."""

        height, width = rgb.shape[:2]
        edges = np.zeros((height, width), dtype=bool)
        if height < 3 or width < 3:
            return edges
        values = rgb.astype("int16")
        center = values[1:-1, 1:-1]
        strongest = np.zeros(center.shape[:2], dtype="int16")
        for dy, dx in _NEIGHBOURS:
            neighbour = values[1 + dy : height - 1 + dy, 1 + dx : width - 1 + dx]
            diff = np.abs(center - neighbour)
            if self.config.edge_metric == "max":
                strength = diff.max(axis=-1)
            else:
                strength = diff.sum(axis=-1)
            np.maximum(strongest, strength, out=strongest)
        edges[1:-1, 1:-1] = strongest > self.config.edge_threshold
        return edges

    def border_band(self, width: int, height: int) -> np.ndarray:
        ys, xs = np.mgrid[0:height, 0:width]
        distance = np.minimum(np.minimum(xs, ys), np.minimum(width - xs - 1, height - ys - 1))
        return distance < min(width, height) * self.config.border_fraction

    def __call__(self, image: Image) -> Image:
        return self.segment(image)

    def segment(self, image: Image) -> Image:
        cfg = self.config
        rgb = image.rgb
        height, width = rgb.shape[:2]

        background = self.estimate_background(rgb)
        distance = np.sqrt(((rgb.astype("float64") - background) ** 2).sum(axis=-1))
        edges = self.edge_map(rgb)
        near_border = self.border_band(width, height)

        near_white = (rgb > cfg.near_white_floor).all(axis=-1) & (distance < cfg.near_white_distance)
        flat = (distance < cfg.flat_distance) & ~edges
        border = near_border & (distance < cfg.border_distance)
        bright = (distance < cfg.bright_distance) & (rgb.astype("float64").mean(axis=-1) > cfg.bright_mean)
        is_background = near_white | flat | border | bright

        soft = ~is_background & (distance < cfg.soft_band)
        pixels = image.to_array()
        alpha = pixels[..., 3]
        alpha[is_background] = 0
        feathered = np.clip(np.rint(distance / cfg.soft_band * 255.0), 0, 255).astype("uint8")
        alpha[soft] = feathered[soft]
        return Image(pixels)


def segment(image: Image, config: Optional[SegmentationConfig] = None) -> Image:
    """Functional entry point around :class:`BackgroundSegmenter`."""

    return BackgroundSegmenter(config).segment(image)
