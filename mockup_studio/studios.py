"""Editing studios built on top of the generation client.

* :class:`RedesignStudio` edits a masked region of a single design.
* :class:`RemixStudio` blends part of a reference image into a masked
  region of a base image.
* :class:`SeedreamStudio` clones a design with the Seedream backend.

Loading a new image starts a new session; results requested by an older
session are dropped when they arrive.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple

from mockup_studio.adapters.base import GenerationClient
from mockup_studio.canvas import downscale_if_larger, prepare_for_print
from mockup_studio.config import PipelineConfig
from mockup_studio.errors import ValidationError
from mockup_studio.masking import MaskRasterizer
from mockup_studio.pipeline import transition
from mockup_studio.segmentation import BackgroundSegmenter
from mockup_studio.types import Image, MaskImage, MaskSpec, Point, StageState, Status

logger = logging.getLogger(__name__)


class _Studio:
    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = config or PipelineConfig()
        self.rasterizer = MaskRasterizer(self.config.mask)
        self._session = 0

    def _new_session(self) -> int:
        self._session += 1
        return self._session

    async def _pixel_work(self, func, *args):
        if self.config.offload_pixel_work:
            return await asyncio.to_thread(func, *args)
        return func(*args)

    def _print_ready(self, image: Image) -> Image:
        return prepare_for_print(image, self.config.canvas.print_size, self.config.segmentation)

    async def _run_stage(
        self,
        state: StageState,
        holder: Callable[[], StageState],
        work: Callable[[], Awaitable[Image]],
        default_error: str,
    ) -> StageState:
        """Drive ``state`` through PENDING to a terminal status.

        ``holder`` returns the state object currently installed on the
        studio; a result is only committed while it is still ``state``.
        """

        state.status = transition(state.status, Status.PENDING)
        try:
            image = await work()
        except Exception as exc:
            if holder() is state:
                state.error = str(exc).strip() or default_error
                state.status = transition(state.status, Status.FAILED)
                logger.warning("%s failed: %s", state.name, state.error)
            return state
        if holder() is not state:
            logger.info("Discarding %s result from a previous session", state.name)
            return state
        state.image = image
        state.status = transition(state.status, Status.SUCCESS)
        return state


class RedesignStudio(_Studio):
    """Inpaint a hand-marked region of one design, then prepare it for print."""

    def __init__(self, client: GenerationClient, config: Optional[PipelineConfig] = None) -> None:
        super().__init__(config)
        self.client = client
        self.source: Optional[Image] = None
        self.display: Optional[Image] = None
        self.mask = MaskSpec(brush_width=self.config.mask.default_brush_width)
        self.result = StageState("redesign")

    def load(self, image: Image) -> None:
        """Load an upload or a design handed over from another studio."""

        self._new_session()
        self.source = downscale_if_larger(image, *self.config.canvas.redesign_upload_max)
        self.display = downscale_if_larger(self.source, *self.config.canvas.display_max)
        self.mask = self.mask.cleared()
        self.result = StageState("redesign")
        logger.info("Redesign studio loaded %dx%d design", self.source.width, self.source.height)

    def clear(self) -> None:
        self._new_session()
        self.source = None
        self.display = None
        self.mask = self.mask.cleared()
        self.result = StageState("redesign")

    def begin_stroke(self, point: Point) -> None:
        if self.display is None:
            return
        self.mask = self.mask.begin_path(point)

    def continue_stroke(self, point: Point) -> None:
        self.mask = self.mask.extend(point)

    def end_stroke(self) -> None:
        self.mask = self.mask.end_path()

    def set_brush_width(self, width: float) -> None:
        self.mask = self.mask.with_brush_width(width)

    def clear_mask(self) -> None:
        self.mask = self.mask.cleared()

    def build_mask(self, canvas_size: Optional[Tuple[float, float]] = None) -> MaskImage:
        """Mask at the resolution of the display image sent for editing."""

        if self.display is None:
            raise ValidationError("Please load an image first.")
        return self.rasterizer.rasterize_spec(self.mask, canvas_size or self.display.size, self.display.size)

    async def generate(self, instructions: str, canvas_size: Optional[Tuple[float, float]] = None) -> StageState:
        if self.source is None or self.display is None:
            raise ValidationError("Please load an image first.")
        if self.mask.is_empty:
            raise ValidationError("Please draw on the image to mark an area to change.")
        if not instructions or not instructions.strip():
            raise ValidationError("Please enter a prompt to describe your changes.")
        self.client.check_credentials()

        mask = self.build_mask(canvas_size)
        display = self.display
        state = StageState("redesign")
        self.result = state

        async def work() -> Image:
            edited = await self.client.inpaint(display, mask, instructions)
            return await self._pixel_work(self._print_ready, edited)

        return await self._run_stage(state, lambda: self.result, work, "Failed to generate redesign.")


class RemixStudio(_Studio):
    """Blend a reference into a masked region of a base image.

    Both images are shown side by side on one canvas; strokes are only
    accepted on the left half, which holds the base image.
    """

    def __init__(self, client: GenerationClient, config: Optional[PipelineConfig] = None) -> None:
        super().__init__(config)
        self.client = client
        self.base: Optional[Image] = None
        self.reference: Optional[Image] = None
        self.mask = MaskSpec(brush_width=self.config.mask.remix_brush_width)
        self.raw = StageState("remix")
        self.processed = StageState("remix_processing")

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.config.canvas.remix_display_size

    def _reset_results(self) -> None:
        self._new_session()
        self.raw = StageState("remix")
        self.processed = StageState("remix_processing")

    def load_base(self, image: Image) -> None:
        self.base = downscale_if_larger(image, *self.config.canvas.display_max)
        self.mask = self.mask.cleared()
        self._reset_results()

    def load_reference(self, image: Image) -> None:
        self.reference = downscale_if_larger(image, *self.config.canvas.display_max)
        self._reset_results()

    def _on_base(self, point: Point) -> bool:
        return point.x <= self.canvas_size[0] / 2

    def begin_stroke(self, point: Point) -> bool:
        if self.base is None or not self._on_base(point):
            return False
        self.mask = self.mask.begin_path(point)
        return True

    def continue_stroke(self, point: Point) -> bool:
        if not self._on_base(point):
            self.mask = self.mask.end_path()
            return False
        self.mask = self.mask.extend(point)
        return True

    def end_stroke(self) -> None:
        self.mask = self.mask.end_path()

    def clear_mask(self) -> None:
        self.mask = self.mask.cleared()

    def build_mask(self) -> MaskImage:
        if self.base is None:
            raise ValidationError("Please provide both a base and reference image.")
        canvas_w, canvas_h = self.canvas_size
        return self.rasterizer.rasterize_spec(self.mask, (canvas_w / 2, canvas_h), self.base.size)

    async def remix(self, instructions: str) -> StageState:
        if self.base is None or self.reference is None:
            raise ValidationError("Please provide both a base and reference image.")
        if not instructions or not instructions.strip():
            raise ValidationError("Please provide instructions for the remix.")
        if self.mask.is_empty:
            raise ValidationError("Please draw on the left image to indicate the area to change.")
        self.client.check_credentials()

        mask = self.build_mask()
        base, reference = self.base, self.reference
        self.processed = StageState("remix_processing")
        state = StageState("remix")
        self.raw = state

        async def work() -> Image:
            return await self.client.remix(base, reference, mask, instructions)

        return await self._run_stage(state, lambda: self.raw, work, "Failed to generate the remix.")

    async def process(self) -> StageState:
        """Remove the backdrop of the remix and letterbox it for print."""

        if self.raw.status is not Status.SUCCESS or self.raw.image is None:
            raise ValidationError("No raw image to process.")
        raw_image = self.raw.image
        state = StageState("remix_processing")
        self.processed = state

        async def work() -> Image:
            return await self._pixel_work(self._print_ready, raw_image)

        return await self._run_stage(state, lambda: self.processed, work, "Failed to process the remixed image.")

    def export_design(self) -> Optional[Image]:
        return self.processed.image or self.raw.image


class SeedreamStudio(_Studio):
    """Clone a design through Seedream and optionally clear its backdrop."""

    def __init__(self, client, config: Optional[PipelineConfig] = None) -> None:
        super().__init__(config)
        self.client = client
        self.segmenter = BackgroundSegmenter(self.config.segmentation)
        self.upload: Optional[Image] = None
        self.result = StageState("seedream")
        self.cleaned = StageState("seedream_cleanup")

    def load(self, image: Image) -> None:
        self._new_session()
        self.upload = downscale_if_larger(image, *self.config.canvas.seedream_upload_max)
        self.result = StageState("seedream")
        self.cleaned = StageState("seedream_cleanup")

    async def generate(self) -> StageState:
        if self.upload is None:
            raise ValidationError("Please upload a design image to start!")
        self.client.check_credentials()
        upload = self.upload
        self.cleaned = StageState("seedream_cleanup")
        state = StageState("seedream")
        self.result = state

        async def work() -> Image:
            return await self.client.clone(upload)

        return await self._run_stage(
            state, lambda: self.result, work, "Could not generate the design with Seedream V4."
        )

    async def remove_background(self) -> StageState:
        if self.result.status is not Status.SUCCESS or self.result.image is None:
            raise ValidationError("There is no generated image to process.")
        generated = self.result.image
        state = StageState("seedream_cleanup")
        self.cleaned = state

        async def work() -> Image:
            return await self._pixel_work(self.segmenter.segment, generated)

        return await self._run_stage(state, lambda: self.cleaned, work, "Background removal failed.")

    def export_design(self) -> Optional[Image]:
        """Design to hand over to :meth:`RedesignStudio.load`."""

        return self.cleaned.image or self.result.image
