"""Contract between the pipeline and a remote generation backend."""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable

from mockup_studio.types import Image, MaskImage


@runtime_checkable
class GenerationClient(Protocol):
    """Asynchronous, fallible image/metadata generation.

    Every coroutine may take arbitrarily long and may raise for any reason;
    callers isolate failures per stage or item. ``analyze_color`` returns
    the raw colour answer and ``generate_details`` the raw JSON text (or a
    mapping): both are validated by the caller.
    """

    def check_credentials(self) -> None:
        """Raise :class:`~mockup_studio.errors.ValidationError` when unusable."""

    async def clone(self, image: Image) -> Image: ...

    async def transform(self, image: Image, instructions: str) -> Image: ...

    async def redesign(self, image: Image, instructions: str) -> Image: ...

    async def analyze_color(self, image: Image) -> str: ...

    async def create_mockup(self, image: Image, product_prompt: str, color: str) -> Image: ...

    async def generate_details(self, image: Image) -> Union[str, dict, Any]: ...

    async def inpaint(self, image: Image, mask: MaskImage, instructions: str) -> Image: ...

    async def remix(self, base: Image, reference: Image, mask: MaskImage, instructions: str) -> Image: ...
