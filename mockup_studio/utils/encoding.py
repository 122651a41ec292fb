"""PNG and data-URL conversion for Images."""

from __future__ import annotations

import base64
import binascii
import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from mockup_studio.errors import DecodeError
from mockup_studio.types import Image


def decode_image(data: bytes) -> Image:
    """Decode PNG/JPEG/WebP bytes into an RGBA Image."""

    if not data:
        raise DecodeError("Empty image payload.")
    try:
        with PILImage.open(io.BytesIO(data)) as pil_image:
            pil_image.load()
            rgba = pil_image.convert("RGBA")
    except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError(f"Could not decode image: {exc}") from exc
    return Image(np.asarray(rgba))


def encode_png(image: Image) -> bytes:
    buffer = io.BytesIO()
    PILImage.fromarray(np.ascontiguousarray(image.pixels)).save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(image: Image) -> str:
    return "data:image/png;base64," + base64.b64encode(encode_png(image)).decode("ascii")


def from_data_url(url: str) -> Image:
    """Decode a ``data:<mime>;base64,<payload>`` string (or bare base64)."""

    payload = url.split(",", 1)[1] if url.startswith("data:") else url
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("Invalid base64 image payload.") from exc
    return decode_image(data)


def load_image(path: Union[str, Path]) -> Image:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {path}")
    return decode_image(path.read_bytes())


def save_image(path: Union[str, Path], image: Image) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_png(image))
