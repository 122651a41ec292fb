"""AI mockup studio core.

Local pixel work (background removal, letterboxing, mask rasterization) and
the asynchronous pipeline that sequences it around remote image generation.
Remote backends are reached through the :class:`GenerationClient` protocol so
that tests and alternative services can be slotted in.
"""

from mockup_studio.pipeline import GenerationMode, MockupPipeline, PipelineRun
from mockup_studio.config import (
    CanvasConfig,
    GeminiConfig,
    MaskConfig,
    PipelineConfig,
    SeedreamConfig,
    SegmentationConfig,
    StrokeScalePolicy,
    StudioSettings,
)
from mockup_studio.studios import RedesignStudio, RemixStudio, SeedreamStudio
from mockup_studio.types import (
    Image,
    MaskImage,
    MaskSpec,
    PipelineItem,
    Point,
    ProductDetails,
    StageState,
    Status,
)

__all__ = [
    "GenerationMode",
    "MockupPipeline",
    "PipelineRun",
    "CanvasConfig",
    "GeminiConfig",
    "MaskConfig",
    "PipelineConfig",
    "SeedreamConfig",
    "SegmentationConfig",
    "StrokeScalePolicy",
    "StudioSettings",
    "RedesignStudio",
    "RemixStudio",
    "SeedreamStudio",
    "Image",
    "MaskImage",
    "MaskSpec",
    "PipelineItem",
    "Point",
    "ProductDetails",
    "StageState",
    "Status",
]
