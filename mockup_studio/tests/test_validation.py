import json
import unittest

from mockup_studio.errors import ValidationError
from mockup_studio.products import PRODUCTS, select_products
from mockup_studio.types import Status
from mockup_studio.validation import normalize_hex, parse_product_details

FALLBACK = "#F3F4F6"


class NormalizeHexTest(unittest.TestCase):
    def test_valid_hex_is_kept(self) -> None:
        self.assertEqual(normalize_hex("#a1B2c3", FALLBACK), "#a1B2c3")

    def test_surrounding_whitespace_is_stripped(self) -> None:
        self.assertEqual(normalize_hex("  #FFFFFF\n", FALLBACK), "#FFFFFF")

    def test_invalid_answers_fall_back(self) -> None:
        for answer in ("FFFFFF", "#FFF", "The color is #FFFFFF", "#GGGGGG", "", None, 123):
            with self.subTest(answer=answer):
                self.assertEqual(normalize_hex(answer, FALLBACK), FALLBACK)


class ProductDetailsTest(unittest.TestCase):
    def test_parses_json_text(self) -> None:
        payload = json.dumps({"title": " Sunset Cat ", "description": "A cat.", "tags": "#cat, #sunset"})

        details = parse_product_details(payload)

        self.assertEqual(details.title, "Sunset Cat")
        self.assertEqual(details.tags, "#cat, #sunset")

    def test_accepts_mapping_and_ignores_extra_keys(self) -> None:
        details = parse_product_details({"title": "T", "description": "D", "tags": "x", "price": 10})

        self.assertEqual(details.description, "D")

    def test_missing_field_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            parse_product_details({"title": "T", "description": "D"})

    def test_blank_field_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            parse_product_details({"title": "  ", "description": "D", "tags": "x"})

    def test_invalid_json_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            parse_product_details("{not json")


class SelectProductsTest(unittest.TestCase):
    def test_selection_keeps_order_and_drops_duplicates(self) -> None:
        items = select_products(["mug", "tshirt", "mug"], 6)

        self.assertEqual([item.id for item in items], ["mug", "tshirt"])
        self.assertEqual(items[0].name, PRODUCTS["mug"].name)
        self.assertEqual(items[0].prompt, PRODUCTS["mug"].prompt)
        self.assertTrue(all(item.status is Status.IDLE for item in items))

    def test_unknown_product(self) -> None:
        with self.assertRaises(ValidationError):
            select_products(["spaceship"], 6)

    def test_too_many_products(self) -> None:
        ids = list(PRODUCTS)[:7]

        with self.assertRaises(ValidationError):
            select_products(ids, 6)

    def test_custom_catalogue(self) -> None:
        catalogue = {"sticker": PRODUCTS["mug"]}

        items = select_products(["sticker"], 1, catalogue)

        self.assertEqual(items[0].id, "sticker")


if __name__ == "__main__":
    unittest.main()
