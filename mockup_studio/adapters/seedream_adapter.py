"""fal.ai Seedream v4 adapter (clone only)."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests

from mockup_studio import prompts
from mockup_studio.config import SeedreamConfig
from mockup_studio.errors import RemoteError, ValidationError
from mockup_studio.types import Image
from mockup_studio.utils.encoding import decode_image, from_data_url, to_data_url

logger = logging.getLogger(__name__)


class SeedreamAdapter:
    """Alternate clone backend returning print-sized designs."""

    def __init__(self, config: SeedreamConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self._session = session or requests.Session()

    def check_credentials(self) -> None:
        if not self.config.api_key:
            raise ValidationError("Fal AI API key is not set.")

    def _build_payload(self, image: Image) -> dict:
        width, height = self.config.image_size
        return {
            "prompt": prompts.SEEDREAM_CLONE,
            "image_size": {"height": height, "width": width},
            "num_images": self.config.num_images,
            "enable_safety_checker": self.config.enable_safety_checker,
            "image_urls": [to_data_url(image)],
        }

    def _fetch(self, url: str) -> Image:
        if url.startswith("data:"):
            return from_data_url(url)
        response = self._session.get(url, timeout=self.config.timeout)
        if not response.ok:
            raise RemoteError(f"Failed to fetch image from URL: {response.status_code} {response.reason}")
        return decode_image(response.content)

    def _clone_sync(self, image: Image) -> Image:
        self.check_credentials()
        try:
            response = self._session.post(
                self.config.endpoint,
                json=self._build_payload(image),
                headers={"Authorization": f"Key {self.config.api_key}"},
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteError(f"Seedream request failed: {exc}") from exc
        if not response.ok:
            raise RemoteError(f"Seedream API error: {response.status_code} {response.text}")
        try:
            result = response.json()
        except ValueError as exc:
            raise RemoteError("Seedream API returned invalid JSON.") from exc
        images = result.get("images") or []
        if not images or not images[0].get("url"):
            raise RemoteError("Seedream API did not return an image URL.")
        try:
            return self._fetch(images[0]["url"])
        except requests.RequestException as exc:
            raise RemoteError(f"Failed to fetch Seedream result: {exc}") from exc

    async def clone(self, image: Image) -> Image:
        logger.info("Submitting %dx%d image to Seedream", image.width, image.height)
        return await asyncio.to_thread(self._clone_sync, image)
