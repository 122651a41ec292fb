"""Array helpers for alpha-aware resizing."""

from typing import Tuple

import cv2
import numpy as np

from mockup_studio.errors import ContextError


def premultiply(rgba: np.ndarray) -> np.ndarray:
    """Scale colour by alpha so transparent pixels do not bleed when resampled."""

    alpha = rgba[..., 3:4].astype("uint16")
    out = np.empty_like(rgba)
    out[..., :3] = ((rgba[..., :3].astype("uint16") * alpha + 127) // 255).astype("uint8")
    out[..., 3] = rgba[..., 3]
    return out


def unpremultiply(rgba: np.ndarray) -> np.ndarray:
    """Inverse of :func:`premultiply`; fully transparent pixels become (0, 0, 0, 0)."""

    alpha = rgba[..., 3:4].astype("uint32")
    safe = np.maximum(alpha, 1)
    color = (rgba[..., :3].astype("uint32") * 255 + safe // 2) // safe
    out = np.empty_like(rgba)
    out[..., :3] = np.where(alpha > 0, np.minimum(color, 255), 0).astype("uint8")
    out[..., 3] = rgba[..., 3]
    return out


def resize(image: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """High-quality resize to ``size`` given as (height, width).

    Area averaging when shrinking, Lanczos when enlarging. A request for the
    current size returns an unmodified copy.
    """

    height, width = size
    if image.shape[:2] == (height, width):
        return image.copy()
    shrinking = height * width < image.shape[0] * image.shape[1]
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LANCZOS4
    try:
        return cv2.resize(image, (width, height), interpolation=interpolation)
    except (cv2.error, MemoryError) as exc:
        raise ContextError(f"Could not allocate a {width}x{height} surface.") from exc


def resize_rgba(rgba: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Resize an RGBA array in premultiplied space."""

    if rgba.shape[:2] == tuple(size):
        return rgba.copy()
    if (rgba[..., 3] == 255).all():
        rgb = resize(np.ascontiguousarray(rgba[..., :3]), size)
        alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([rgb, alpha], axis=-1)
    return unpremultiply(resize(premultiply(rgba), size))
