"""Configuration dataclasses for the mockup pipeline."""

from __future__ import annotations

import enum
import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

PRINT_SIZE: Tuple[int, int] = (4500, 5400)


class StrokeScalePolicy(str, enum.Enum):
    """How the brush width follows a non-uniform display-to-target scale."""

    MIN = "min"
    MAX = "max"

    def combine(self, scale_x: float, scale_y: float) -> float:
        if self is StrokeScalePolicy.MAX:
            return max(scale_x, scale_y)
        return min(scale_x, scale_y)


@dataclass
class SegmentationConfig:
    """Thresholds for the heuristic background remover.

    Attributes:
        edge_threshold: Neighbour colour difference above which a pixel is
            treated as an edge.
        edge_metric: "sum" adds the absolute channel differences to a
            neighbour, "max" takes the largest single channel difference.
        near_white_floor: Every channel above this value counts as near-white.
        near_white_distance: Background distance accepted for near-white pixels.
        flat_distance: Background distance accepted for non-edge pixels.
        border_fraction: Border band width, as a fraction of the smaller side.
        border_distance: Background distance accepted inside the border band.
        bright_distance: Background distance accepted for bright pixels.
        bright_mean: Mean channel value above which a pixel counts as bright.
        soft_band: Distance below which kept pixels get partial alpha.
    """

    edge_threshold: int = 30
    edge_metric: str = "sum"
    near_white_floor: int = 240
    near_white_distance: float = 25.0
    flat_distance: float = 35.0
    border_fraction: float = 0.05
    border_distance: float = 50.0
    bright_distance: float = 20.0
    bright_mean: float = 200.0
    soft_band: float = 60.0


@dataclass
class CanvasConfig:
    """Canvas sizes used across the studios.

    Attributes:
        print_size: Final print-ready canvas (width, height).
        studio_upload_max: Cap applied to uploads in the mockup studio.
        display_max: Cap for the redesign studio's drawing copy and remix uploads.
        seedream_upload_max: Cap applied to uploads sent to Seedream.
        redesign_upload_max: Cap applied to uploads in the redesign studio.
        remix_display_size: Side-by-side remix canvas (width, height).
    """

    print_size: Tuple[int, int] = PRINT_SIZE
    studio_upload_max: Tuple[int, int] = (1536, 1536)
    display_max: Tuple[int, int] = (1024, 1024)
    seedream_upload_max: Tuple[int, int] = (2048, 2048)
    redesign_upload_max: Tuple[int, int] = PRINT_SIZE
    remix_display_size: Tuple[int, int] = (1024, 512)


@dataclass
class MaskConfig:
    """Settings for mask rasterization.

    Attributes:
        stroke_policy: Scale combination applied to the brush width in every
            studio.
        default_brush_width: Brush width for the redesign studio.
        remix_brush_width: Brush width for the remix studio.
    """

    stroke_policy: StrokeScalePolicy = StrokeScalePolicy.MIN
    default_brush_width: float = 50.0
    remix_brush_width: float = 20.0


@dataclass
class GeminiConfig:
    """Settings for the Gemini generation adapter.

    Attributes:
        api_key: Gemini API key; empty means not configured.
        image_model: Model used for every image-producing capability.
        text_model: Model used for structured product details.
        timeout: Per-request timeout in seconds, or None for the client default.
    """

    api_key: str = ""
    image_model: str = "gemini-2.5-flash-image-preview"
    text_model: str = "gemini-2.5-flash"
    timeout: Optional[float] = None


@dataclass
class SeedreamConfig:
    """Settings for the fal.ai Seedream v4 edit endpoint."""

    api_key: str = ""
    endpoint: str = "https://fal.run/fal-ai/bytedance/seedream/v4/edit"
    image_size: Tuple[int, int] = PRINT_SIZE
    num_images: int = 1
    enable_safety_checker: bool = True
    timeout: float = 300.0


@dataclass
class PipelineConfig:
    """Top-level configuration for the mockup pipeline."""

    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    mask: MaskConfig = field(default_factory=MaskConfig)
    max_mockups: int = 6
    fallback_color: str = "#F3F4F6"
    offload_pixel_work: bool = True


@dataclass
class StudioSettings:
    """User settings that outlive a session.

    ``load`` and ``save`` replace the browser storage of the web app; the
    object is passed explicitly to whatever needs a credential.
    """

    gemini_api_key: str = ""
    fal_api_key: str = ""
    background_color: str = "#0D1117"

    _ENV_KEYS = {"gemini_api_key": "GEMINI_API_KEY", "fal_api_key": "FAL_KEY"}

    @classmethod
    def load(cls, path: Union[str, Path, None] = None, use_env: bool = True) -> "StudioSettings":
        values: Dict[str, str] = {}
        if path is not None:
            path = Path(path)
            if path.is_file():
                try:
                    payload = json.loads(path.read_text(encoding="utf-8"))
                    if not isinstance(payload, dict):
                        raise ValueError("settings file must contain a JSON object")
                    known = {f.name for f in fields(cls)}
                    values = {k: str(v) for k, v in payload.items() if k in known}
                except ValueError as exc:
                    logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
                    values = {}
        settings = cls(**values)
        if use_env:
            for name, env_key in cls._ENV_KEYS.items():
                if not getattr(settings, name) and os.environ.get(env_key):
                    setattr(settings, name, os.environ[env_key])
        return settings

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
        logger.info("Saved studio settings to %s", path)

    @property
    def needs_setup(self) -> bool:
        return not self.gemini_api_key or not self.fal_api_key

    def gemini(self, **overrides) -> GeminiConfig:
        return GeminiConfig(api_key=self.gemini_api_key, **overrides)

    def seedream(self, **overrides) -> SeedreamConfig:
        return SeedreamConfig(api_key=self.fal_api_key, **overrides)
