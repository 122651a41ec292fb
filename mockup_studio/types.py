"""Shared type definitions for the mockup pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from mockup_studio.errors import DecodeError, ValidationError

Size = Tuple[int, int]


def _as_rgba(array: np.ndarray) -> np.ndarray:
    if array.ndim == 2:
        array = np.repeat(array[..., None], 3, axis=-1)
    if array.ndim != 3:
        raise DecodeError(f"Expected an HxWxC pixel array, got shape {array.shape}.")
    channels = array.shape[-1]
    if channels == 1:
        array = np.repeat(array, 3, axis=-1)
        channels = 3
    if channels == 3:
        alpha = np.full(array.shape[:2] + (1,), 255, dtype=array.dtype)
        array = np.concatenate([array, alpha], axis=-1)
    elif channels != 4:
        raise DecodeError(f"Unsupported channel count: {channels}.")
    return array


@dataclass(frozen=True, eq=False)
class Image:
    """Immutable RGBA pixel buffer.

    ``pixels`` has shape (H, W, 4), dtype uint8, and is marked read-only;
    transforms build new Images instead of writing into an existing one.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if not isinstance(self.pixels, np.ndarray):
            raise DecodeError("Image pixels must be a numpy array.")
        array = _as_rgba(self.pixels)
        if array.shape[0] < 1 or array.shape[1] < 1:
            raise DecodeError(f"Image must be at least 1x1, got {array.shape[1]}x{array.shape[0]}.")
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        array = np.ascontiguousarray(array)
        if array is self.pixels:
            array = array.copy()
        array.setflags(write=False)
        object.__setattr__(self, "pixels", array)

    @classmethod
    def blank(cls, width: int, height: int, color: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> "Image":
        if width < 1 or height < 1:
            raise DecodeError(f"Image must be at least 1x1, got {width}x{height}.")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = color
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Size:
        return self.width, self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Return the RGBA sample at column ``x``, row ``y``."""

        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def to_array(self) -> np.ndarray:
        """Writable copy of the pixel data."""

        return self.pixels.copy()

    def with_pixel(self, x: int, y: int, rgba: Tuple[int, int, int, int]) -> "Image":
        pixels = self.to_array()
        pixels[y, x] = rgba
        return Image(pixels)


@dataclass(frozen=True, eq=False)
class MaskImage:
    """Single-channel edit mask: 255 where the model may edit, 0 elsewhere."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        array = np.ascontiguousarray(self.pixels, dtype=np.uint8).copy()
        if array.ndim != 2 or array.shape[0] < 1 or array.shape[1] < 1:
            raise DecodeError(f"Mask must be a non-empty HxW array, got shape {array.shape}.")
        array.setflags(write=False)
        object.__setattr__(self, "pixels", array)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Size:
        return self.width, self.height

    @property
    def coverage(self) -> float:
        """Fraction of pixels marked editable."""

        return float((self.pixels > 0).mean())

    def to_image(self) -> Image:
        """Opaque black/white RGBA rendering used when sending the mask out."""

        return Image(self.pixels)


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def scaled(self, scale_x: float, scale_y: float) -> "Point":
        return Point(self.x * scale_x, self.y * scale_y)


Path = Tuple[Point, ...]


@dataclass(frozen=True)
class MaskSpec:
    """Append-only log of freehand strokes.

    Every edit returns a new MaskSpec. ``open_index`` points at the path
    currently being drawn, or is None when no stroke is in progress.
    """

    paths: Tuple[Path, ...] = ()
    brush_width: float = 50.0
    open_index: Optional[int] = None

    def begin_path(self, point: Point) -> "MaskSpec":
        paths = self.paths + ((point,),)
        return MaskSpec(paths=paths, brush_width=self.brush_width, open_index=len(paths) - 1)

    def extend(self, point: Point) -> "MaskSpec":
        if self.open_index is None:
            return self
        current = self.paths[self.open_index] + (point,)
        paths = self.paths[: self.open_index] + (current,) + self.paths[self.open_index + 1 :]
        return MaskSpec(paths=paths, brush_width=self.brush_width, open_index=self.open_index)

    def end_path(self) -> "MaskSpec":
        return MaskSpec(paths=self.paths, brush_width=self.brush_width)

    def with_brush_width(self, brush_width: float) -> "MaskSpec":
        if brush_width <= 0:
            raise ValidationError("Brush width must be positive.")
        return MaskSpec(paths=self.paths, brush_width=brush_width, open_index=self.open_index)

    def cleared(self) -> "MaskSpec":
        return MaskSpec(brush_width=self.brush_width)

    @property
    def is_empty(self) -> bool:
        return not self.paths


class Status(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Status.SUCCESS, Status.FAILED)


@dataclass
class StageState:
    """Status and result of one pipeline stage."""

    name: str
    status: Status = Status.IDLE
    image: Optional[Image] = None
    error: Optional[str] = None


@dataclass
class PipelineItem:
    """One independently tracked unit of mockup work."""

    id: str
    name: str
    prompt: str
    status: Status = Status.IDLE
    image: Optional[Image] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class Product:
    name: str
    prompt: str


@dataclass(frozen=True)
class ProductDetails:
    title: str
    description: str
    tags: str
