"""Mockup pipeline orchestrator.

Flow:
    1) Primary: clone, transform or redesign the uploaded graphic remotely.
    2) Secondary: remove the backdrop locally and letterbox the design onto
       the print canvas.
    3) Mockups: one colour analysis of the upload, then one remote mockup per
       selected product, strictly one after another. A failing product only
       fails its own item.
    4) Details: optional marketing copy for the print-ready design.

Each call to :meth:`MockupPipeline.generate` starts a new run and retires the
previous one. Every result is committed only if its run is still current and
the stage attempt that requested it has not been replaced; anything else is
dropped.
"""

from __future__ import annotations

import asyncio
import enum
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence

from mockup_studio.adapters.base import GenerationClient
from mockup_studio.canvas import downscale_if_larger, letterbox_resize
from mockup_studio.config import PipelineConfig
from mockup_studio.errors import PartialFailure, StateTransitionError, ValidationError
from mockup_studio.products import select_products
from mockup_studio.segmentation import BackgroundSegmenter
from mockup_studio.types import Image, PipelineItem, Product, ProductDetails, StageState, Status
from mockup_studio.validation import normalize_hex, parse_product_details

logger = logging.getLogger(__name__)


class GenerationMode(str, enum.Enum):
    CLONE = "clone"
    REDESIGN = "redesign"


_FORWARD: Dict[Status, FrozenSet[Status]] = {
    Status.IDLE: frozenset({Status.PENDING}),
    Status.PENDING: frozenset({Status.SUCCESS, Status.FAILED}),
    Status.SUCCESS: frozenset(),
    Status.FAILED: frozenset(),
}
_RETRY: Dict[Status, FrozenSet[Status]] = {
    Status.SUCCESS: frozenset({Status.PENDING}),
    Status.FAILED: frozenset({Status.PENDING}),
}


def transition(current: Status, target: Status, *, retry: bool = False) -> Status:
    """Validate a status change and return the new status.

    Terminal states are left only when ``retry`` is set, and only for
    PENDING.
    """

    allowed = _FORWARD[current]
    if retry:
        allowed = allowed | _RETRY.get(current, frozenset())
    if target not in allowed:
        raise StateTransitionError(f"Cannot move from {current.value} to {target.value}.")
    return target


@dataclass
class ColorState(StageState):
    color: Optional[str] = None
    raw_response: Optional[str] = None


@dataclass
class DetailsState(StageState):
    details: Optional[ProductDetails] = None


@dataclass
class MockupStage(StageState):
    items: List[PipelineItem] = field(default_factory=list)
    partial_failure: Optional[PartialFailure] = None

    @property
    def complete(self) -> bool:
        return bool(self.items) and all(item.status.is_terminal for item in self.items)

    def item(self, item_id: str) -> PipelineItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise ValidationError(f"Unknown mockup item: {item_id}")


@dataclass
class PipelineRun:
    """State of one generation run, owned by the pipeline."""

    token: int
    source: Image
    mode: GenerationMode
    instructions: str = ""
    primary: StageState = field(default_factory=lambda: StageState("primary"))
    secondary: StageState = field(default_factory=lambda: StageState("secondary"))
    color: ColorState = field(default_factory=lambda: ColorState("color_analysis"))
    mockups: MockupStage = field(default_factory=lambda: MockupStage("mockups"))
    details: DetailsState = field(default_factory=lambda: DetailsState("details"))
    progress: str = ""
    cancelled: bool = False


def _advance(state, target: Status, *, retry: bool = False) -> None:
    state.status = transition(state.status, target, retry=retry)


def _message(exc: BaseException, default: str) -> str:
    text = str(exc).strip()
    return text or default


class MockupPipeline:
    """Sequences remote generation and local processing for one studio."""

    def __init__(
        self,
        client: GenerationClient,
        config: Optional[PipelineConfig] = None,
        catalogue: Optional[Mapping[str, Product]] = None,
        listener: Optional[Callable[[PipelineRun], None]] = None,
    ) -> None:
        self.client = client
        self.config = config or PipelineConfig()
        self.catalogue = catalogue
        self.listener = listener
        self.segmenter = BackgroundSegmenter(self.config.segmentation)
        self._tokens = itertools.count(1)
        self._run: Optional[PipelineRun] = None

    @property
    def run(self) -> Optional[PipelineRun]:
        return self._run

    def is_current(self, run: PipelineRun) -> bool:
        return run is self._run and not run.cancelled

    def reset(self) -> None:
        """Drop the current run; results still in flight will be discarded."""

        if self._run is not None:
            self._run.cancelled = True
            logger.info("Run %d reset", self._run.token)
        self._run = None

    def export_design(self) -> Optional[Image]:
        """Best available design of the current run, for hand-off to another studio."""

        run = self._run
        if run is None:
            return None
        if run.secondary.status is Status.SUCCESS:
            return run.secondary.image
        if run.primary.status is Status.SUCCESS:
            return run.primary.image
        return None

    def _notify(self, run: PipelineRun) -> None:
        if self.listener is not None and self.is_current(run):
            self.listener(run)

    def _set_progress(self, run: PipelineRun, message: str) -> None:
        if self.is_current(run):
            run.progress = message
            self._notify(run)

    def _stale(self, run: PipelineRun, live: bool, what: str) -> bool:
        if self.is_current(run) and live:
            return False
        logger.info("Discarding %s result from superseded run %d", what, run.token)
        return True

    async def _pixel_work(self, func, *args):
        if self.config.offload_pixel_work:
            return await asyncio.to_thread(func, *args)
        return func(*args)

    def _require_run(self) -> PipelineRun:
        if self._run is None:
            raise ValidationError("Please upload a design image to start!")
        return self._run

    # Primary ---------------------------------------------------------------

    async def generate(
        self,
        source: Optional[Image],
        mode: GenerationMode = GenerationMode.CLONE,
        instructions: str = "",
    ) -> PipelineRun:
        """Start a new run with the primary generation stage."""

        if source is None:
            raise ValidationError("Please upload a design image to start!")
        self.client.check_credentials()
        mode = GenerationMode(mode)
        upload = downscale_if_larger(source, *self.config.canvas.studio_upload_max)

        self.reset()
        run = PipelineRun(token=next(self._tokens), source=upload, mode=mode, instructions=instructions or "")
        self._run = run
        state = run.primary
        _advance(state, Status.PENDING)

        custom = bool(run.instructions.strip())
        if mode is GenerationMode.REDESIGN:
            label, call = "Redesigning with AI...", self.client.redesign(upload, run.instructions)
        elif custom:
            label, call = "Transforming design with AI...", self.client.transform(upload, run.instructions)
        else:
            label, call = "Cloning design...", self.client.clone(upload)
        logger.info("Run %d: primary stage started (%s)", run.token, label)
        self._set_progress(run, label)

        try:
            image = await call
        except Exception as exc:
            if not self._stale(run, True, "primary"):
                state.error = _message(exc, "Could not process the design. Please try another image.")
                _advance(state, Status.FAILED)
                logger.warning("Run %d: primary stage failed: %s", run.token, state.error)
                self._set_progress(run, "")
            return run

        if self._stale(run, True, "primary"):
            return run
        state.image = image
        _advance(state, Status.SUCCESS)
        logger.info("Run %d: primary stage succeeded (%dx%d)", run.token, image.width, image.height)
        self._set_progress(run, "")
        return run

    # Secondary + mockups ---------------------------------------------------

    async def process_design(self, product_ids: Sequence[str] = ()) -> PipelineRun:
        """Prepare the primary result for print and render the selected mockups."""

        run = self._require_run()
        if run.primary.status is not Status.SUCCESS:
            raise ValidationError("Generate a design before processing it.")
        if run.secondary.status is Status.PENDING or run.mockups.status is Status.PENDING:
            raise ValidationError("The design is already being processed.")
        items = select_products(product_ids, self.config.max_mockups, self.catalogue)
        if items:
            self.client.check_credentials()

        secondary = StageState("secondary")
        run.secondary = secondary
        run.color = ColorState("color_analysis")
        run.mockups = MockupStage("mockups", items=items)
        run.details = DetailsState("details")
        _advance(secondary, Status.PENDING)
        if items:
            _advance(run.mockups, Status.PENDING)
            for item in items:
                _advance(item, Status.PENDING)
        logger.info("Run %d: secondary stage started with %d mockups", run.token, len(items))

        def live() -> bool:
            return run.secondary is secondary

        try:
            self._set_progress(run, "Removing background...")
            cleaned = await self._pixel_work(self.segmenter.segment, run.primary.image)
            if self._stale(run, live(), "background removal"):
                return run
            self._set_progress(run, "Resizing for print...")
            resized = await self._pixel_work(letterbox_resize, cleaned, *self.config.canvas.print_size)
        except Exception as exc:
            if not self._stale(run, live(), "secondary"):
                secondary.error = _message(exc, "Could not process the design.")
                _advance(secondary, Status.FAILED)
                self._fail_queued(run.mockups, "Design processing failed.")
                logger.warning("Run %d: secondary stage failed: %s", run.token, secondary.error)
                self._set_progress(run, "")
            return run

        if self._stale(run, live(), "secondary"):
            return run
        secondary.image = resized
        _advance(secondary, Status.SUCCESS)
        logger.info("Run %d: secondary stage succeeded", run.token)
        self._notify(run)

        if items:
            await self._render_mockups(run, run.mockups)
        self._set_progress(run, "")
        return run

    def _fail_queued(self, stage: MockupStage, reason: str) -> None:
        if not stage.items:
            return
        for item in stage.items:
            if item.status is Status.PENDING:
                item.error = reason
                _advance(item, Status.FAILED)
        self._settle(stage)

    def _settle(self, stage: MockupStage) -> None:
        failed = [item.name for item in stage.items if item.status is Status.FAILED]
        total = len(stage.items)
        if not failed:
            stage.partial_failure = None
            stage.error = None
            _advance(stage, Status.SUCCESS)
        elif len(failed) == total:
            stage.partial_failure = None
            stage.error = f"All {total} mockups failed."
            _advance(stage, Status.FAILED)
        else:
            stage.partial_failure = PartialFailure(failed, total)
            stage.error = str(stage.partial_failure)
            _advance(stage, Status.SUCCESS)

    async def _render_mockups(self, run: PipelineRun, stage: MockupStage) -> None:
        color_state = run.color
        _advance(color_state, Status.PENDING)
        self._set_progress(run, "Analyzing color...")

        def live() -> bool:
            return run.mockups is stage and run.color is color_state

        try:
            raw = await self.client.analyze_color(run.source)
        except Exception as exc:
            if not self._stale(run, live(), "color analysis"):
                color_state.error = _message(exc, "Color analysis failed.")
                _advance(color_state, Status.FAILED)
                self._fail_queued(stage, "Color analysis failed.")
                logger.warning("Run %d: color analysis failed: %s", run.token, color_state.error)
            return
        if self._stale(run, live(), "color analysis"):
            return
        color_state.raw_response = raw if isinstance(raw, str) else repr(raw)
        color_state.color = normalize_hex(raw, self.config.fallback_color)
        if color_state.raw_response.strip() != color_state.color:
            logger.info("Run %d: colour answer %r is not a hex code, using %s", run.token, raw, color_state.color)
        _advance(color_state, Status.SUCCESS)

        total = len(stage.items)
        for index, item in enumerate(stage.items, start=1):
            self._set_progress(run, f"Creating mockup {index} of {total}...")
            await self._render_item(run, stage, item)
            if self._stale(run, live(), "mockup queue"):
                return
        self._settle(stage)
        logger.info("Run %d: mockups stage complete (%s)", run.token, stage.status.value)

    async def _render_item(self, run: PipelineRun, stage: MockupStage, item: PipelineItem) -> None:
        def live() -> bool:
            return run.mockups is stage and item.status is Status.PENDING

        try:
            image = await self.client.create_mockup(run.secondary.image, item.prompt, run.color.color)
        except Exception as exc:
            if not self._stale(run, live(), f"mockup {item.id}"):
                item.error = f"Failed mockup for {item.name}."
                _advance(item, Status.FAILED)
                logger.warning("Run %d: mockup %s failed: %s", run.token, item.id, exc)
                self._notify(run)
            return
        if self._stale(run, live(), f"mockup {item.id}"):
            return
        item.image = image
        item.error = None
        _advance(item, Status.SUCCESS)
        logger.info("Run %d: mockup %s succeeded", run.token, item.id)
        self._notify(run)

    async def retry_mockup(self, item_id: str) -> PipelineRun:
        """Re-issue the remote call of one failed mockup item."""

        run = self._require_run()
        stage = run.mockups
        item = stage.item(item_id)
        if item.status is not Status.FAILED:
            raise ValidationError(f"Only failed mockups can be retried ({item.name} is {item.status.value}).")
        if stage.status is Status.PENDING:
            raise ValidationError("Wait for the current mockups to finish before retrying.")
        if run.secondary.status is not Status.SUCCESS or run.color.status is not Status.SUCCESS:
            raise ValidationError("The design must be processed and its colour analysed before retrying.")
        self.client.check_credentials()

        _advance(item, Status.PENDING, retry=True)
        item.error = None
        _advance(stage, Status.PENDING, retry=True)
        logger.info("Run %d: retrying mockup %s", run.token, item.id)
        self._set_progress(run, f"Retrying mockup {item.name}...")
        await self._render_item(run, stage, item)
        if self.is_current(run) and run.mockups is stage and stage.complete:
            self._settle(stage)
            self._set_progress(run, "")
        return run

    # Details ---------------------------------------------------------------

    async def generate_details(self) -> PipelineRun:
        """Generate title, description and tags for the print-ready design."""

        run = self._require_run()
        if run.secondary.status is not Status.SUCCESS:
            raise ValidationError("Process the design before generating product details.")
        if run.details.status is Status.PENDING:
            raise ValidationError("Product details are already being generated.")
        self.client.check_credentials()

        state = DetailsState("details")
        run.details = state
        _advance(state, Status.PENDING)
        design = run.secondary.image

        def live() -> bool:
            return run.details is state

        try:
            raw = await self.client.generate_details(design)
            details = parse_product_details(raw)
        except Exception as exc:
            if not self._stale(run, live(), "details"):
                state.error = _message(exc, "Could not generate product details. Please try again.")
                _advance(state, Status.FAILED)
                logger.warning("Run %d: details stage failed: %s", run.token, state.error)
                self._notify(run)
            return run
        if self._stale(run, live(), "details"):
            return run
        state.details = details
        _advance(state, Status.SUCCESS)
        logger.info("Run %d: details stage succeeded", run.token)
        self._notify(run)
        return run
