"""Catalogue of mockup products."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from mockup_studio.errors import ValidationError
from mockup_studio.types import PipelineItem, Product

PRODUCTS: Dict[str, Product] = {
    "tshirt": Product(
        name="T-Shirt",
        prompt="A classic crew-neck cotton t-shirt laid flat on a clean studio surface, design printed centered on the chest",
    ),
    "hoodie": Product(
        name="Hoodie",
        prompt="A pullover hoodie worn by a model in soft studio lighting, design printed on the front",
    ),
    "sweatshirt": Product(
        name="Sweatshirt",
        prompt="A folded crew-neck sweatshirt on a wooden table, design printed on the front",
    ),
    "mug": Product(
        name="Mug",
        prompt="A glossy 11oz ceramic mug on a kitchen counter, design wrapped on the side facing the camera",
    ),
    "tote": Product(
        name="Tote Bag",
        prompt="A canvas tote bag hanging on a hook against a plain wall, design printed in the middle",
    ),
    "poster": Product(
        name="Poster",
        prompt="A framed poster on a living-room wall, the design filling the print area",
    ),
    "phone_case": Product(
        name="Phone Case",
        prompt="A slim phone case held in a hand, design printed across the back",
    ),
    "cap": Product(
        name="Cap",
        prompt="A structured baseball cap on a display stand, design embroidered on the front panel",
    ),
}


def select_products(
    product_ids: Sequence[str],
    max_items: int,
    catalogue: Optional[Mapping[str, Product]] = None,
) -> List[PipelineItem]:
    """Turn a selection into fresh mockup items, preserving order.

    Duplicates are ignored; unknown ids and selections above ``max_items``
    raise :class:`ValidationError`.
    """

    catalogue = PRODUCTS if catalogue is None else catalogue
    seen = []
    for product_id in product_ids:
        if product_id not in catalogue:
            raise ValidationError(f"Unknown product: {product_id}")
        if product_id not in seen:
            seen.append(product_id)
    if len(seen) > max_items:
        raise ValidationError(f"You can select a maximum of {max_items} mockups.")
    return [
        PipelineItem(id=product_id, name=catalogue[product_id].name, prompt=catalogue[product_id].prompt)
        for product_id in seen
    ]
