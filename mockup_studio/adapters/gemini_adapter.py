"""Gemini adapter implementing every generation capability."""

from __future__ import annotations

import base64
import logging
from typing import Any, List, Optional

from mockup_studio import prompts
from mockup_studio.config import GeminiConfig
from mockup_studio.errors import RemoteError, ValidationError
from mockup_studio.types import Image, MaskImage
from mockup_studio.utils.encoding import decode_image, encode_png
from mockup_studio.validation import ProductDetailsSchema

logger = logging.getLogger(__name__)


class GeminiAdapter:
    """Thin wrapper around the ``google-genai`` async client."""

    def __init__(self, config: GeminiConfig) -> None:
        self.config = config
        self._loaded = False
        self._client = None
        self._types = None

    def check_credentials(self) -> None:
        if not self.config.api_key:
            raise ValidationError("Gemini API key is not set.")

    def load(self) -> None:
        """Create the client lazily so importing the package stays cheap."""

        if self._loaded:
            return
        self.check_credentials()
        try:
            from google import genai
            from google.genai import types as genai_types
        except Exception as exc:  # pragma: no cover - depends on external libs
            raise RuntimeError("Failed to import google-genai; install the 'google-genai' package.") from exc

        http_options = None
        if self.config.timeout:
            http_options = genai_types.HttpOptions(timeout=int(self.config.timeout * 1000))
        self._client = genai.Client(api_key=self.config.api_key, http_options=http_options)
        self._types = genai_types
        self._loaded = True

    def _image_part(self, image: Image):
        return self._types.Part.from_bytes(data=encode_png(image), mime_type="image/png")

    async def _generate(self, model: str, parts: List[Any], config: Optional[Any] = None):
        self.load()
        try:
            return await self._client.aio.models.generate_content(model=model, contents=parts, config=config)
        except Exception as exc:
            raise RemoteError(f"Gemini request failed: {exc}") from exc

    @staticmethod
    def _extract_image(response) -> Image:
        candidates = getattr(response, "candidates", None) or []
        for candidate in candidates[:1]:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and inline.data:
                    data = inline.data
                    if isinstance(data, str):
                        data = base64.b64decode(data)
                    return decode_image(data)
        raise RemoteError("API did not return an image.")

    async def _generate_image(self, parts: List[Any]) -> Image:
        self.load()
        config = self._types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        response = await self._generate(self.config.image_model, parts, config)
        return self._extract_image(response)

    async def _edit(self, prompt: str, image: Image) -> Image:
        self.load()
        return await self._generate_image([self._image_part(image), prompt])

    async def clone(self, image: Image) -> Image:
        return await self._edit(prompts.CLONE, image)

    async def transform(self, image: Image, instructions: str) -> Image:
        return await self._edit(prompts.transform_prompt(instructions), image)

    async def redesign(self, image: Image, instructions: str) -> Image:
        return await self._edit(prompts.redesign_prompt(instructions), image)

    async def create_mockup(self, image: Image, product_prompt: str, color: str) -> Image:
        return await self._edit(prompts.mockup_prompt(product_prompt, color), image)

    async def analyze_color(self, image: Image) -> str:
        self.load()
        response = await self._generate(self.config.image_model, [prompts.ANALYZE_COLOR, self._image_part(image)])
        return (getattr(response, "text", None) or "").strip()

    async def generate_details(self, image: Image) -> str:
        self.load()
        config = self._types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=ProductDetailsSchema,
        )
        response = await self._generate(self.config.text_model, [prompts.DETAILS, self._image_part(image)], config)
        text = getattr(response, "text", None)
        if not text:
            raise RemoteError("API did not return product details.")
        return text

    async def inpaint(self, image: Image, mask: MaskImage, instructions: str) -> Image:
        self.load()
        if mask.size != image.size:
            logger.warning("Mask size %s differs from image size %s", mask.size, image.size)
        parts = [prompts.inpaint_prompt(instructions), self._image_part(image), self._image_part(mask.to_image())]
        return await self._generate_image(parts)

    async def remix(self, base: Image, reference: Image, mask: MaskImage, instructions: str) -> Image:
        self.load()
        parts = [
            prompts.remix_prompt(instructions),
            self._image_part(base),
            self._image_part(reference),
            self._image_part(mask.to_image()),
        ]
        return await self._generate_image(parts)
