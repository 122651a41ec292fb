"""Validation of remote responses before they enter the pipeline."""

from __future__ import annotations

import json
import re
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from mockup_studio.errors import ValidationError
from mockup_studio.types import ProductDetails

HEX_COLOR = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)


class ProductDetailsSchema(BaseModel):
    """Response schema for generated marketing copy."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = Field(min_length=1, description="A short, catchy, and descriptive title (max 20 words).")
    description: str = Field(
        min_length=1,
        description=(
            "A compelling 2-3 sentence product description that highlights the style, "
            "mood, and potential appeal of the design."
        ),
    )
    tags: str = Field(
        min_length=1,
        description="A single comma-separated string of 10-15 relevant SEO keywords or tags, before tags add #.",
    )


def normalize_hex(text: Any, fallback: str) -> str:
    """Return ``text`` as a ``#RRGGBB`` colour, or ``fallback`` when it is not one."""

    if not isinstance(text, str):
        return fallback
    candidate = text.strip()
    if HEX_COLOR.match(candidate):
        return candidate
    return fallback


def parse_product_details(payload: Union[str, bytes, dict]) -> ProductDetails:
    """Validate a details response (JSON text or decoded mapping)."""

    try:
        if isinstance(payload, (str, bytes)):
            data = json.loads(payload)
        else:
            data = payload
        schema = ProductDetailsSchema.model_validate(data)
    except (ValueError, PydanticValidationError) as exc:
        raise ValidationError(f"Invalid product details response: {exc}") from exc
    return ProductDetails(title=schema.title, description=schema.description, tags=schema.tags)
