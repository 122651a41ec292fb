import unittest

import numpy as np

from mockup_studio.canvas import (
    downscale_if_larger,
    letterbox_geometry,
    letterbox_resize,
    prepare_for_print,
)
from mockup_studio.errors import DecodeError, ValidationError
from mockup_studio.types import Image, MaskImage
from mockup_studio.utils.vision import premultiply, resize_rgba, unpremultiply


class DownscaleTest(unittest.TestCase):
    def test_wide_upload_is_capped(self) -> None:
        image = Image.blank(3000, 1500, (10, 20, 30, 255))

        result = downscale_if_larger(image, 1536, 1536)

        self.assertEqual(result.size, (1536, 768))

    def test_small_image_is_returned_unchanged(self) -> None:
        image = Image.blank(300, 200, (1, 2, 3, 255))

        result = downscale_if_larger(image, 1024, 1024)

        self.assertIs(result, image)

    def test_aspect_ratio_is_preserved(self) -> None:
        image = Image.blank(1000, 3000, (0, 0, 0, 255))

        result = downscale_if_larger(image, 1024, 1024)

        self.assertEqual(result.size, (341, 1024))

    def test_opaque_input_stays_opaque(self) -> None:
        pixels = np.random.default_rng(0).integers(0, 256, size=(200, 300, 4), dtype=np.uint8)
        pixels[..., 3] = 255

        result = downscale_if_larger(Image(pixels), 100, 100)

        self.assertTrue((result.alpha == 255).all())

    def test_invalid_target(self) -> None:
        with self.assertRaises(ValidationError):
            downscale_if_larger(Image.blank(10, 10), 0, 10)


class LetterboxTest(unittest.TestCase):
    def test_square_design_on_print_canvas(self) -> None:
        image = Image.blank(1000, 1000, (200, 10, 10, 255))

        result = letterbox_resize(image, 4500, 5400)

        self.assertEqual(result.size, (4500, 5400))
        alpha = result.alpha
        self.assertTrue((alpha[:450] == 0).all())
        self.assertTrue((alpha[4950:] == 0).all())
        self.assertTrue((alpha[450:4950] == 255).all())
        r, g, b, _ = result.pixel(2250, 2700)
        self.assertLessEqual(abs(r - 200), 1)
        self.assertLessEqual(abs(g - 10), 1)
        self.assertLessEqual(abs(b - 10), 1)

    def test_small_source_is_enlarged(self) -> None:
        image = Image.blank(20, 10, (0, 0, 255, 255))

        result = letterbox_resize(image, 450, 540)

        self.assertEqual(result.size, (450, 540))
        self.assertEqual(result.pixel(225, 270)[3], 255)
        self.assertEqual(result.pixel(225, 0)[3], 0)

    def test_geometry_centres_content(self) -> None:
        self.assertEqual(letterbox_geometry(200, 100, 450, 540), (0, 157, 450, 225))
        self.assertEqual(letterbox_geometry(100, 200, 450, 540), (90, 0, 270, 540))

    def test_letterbox_is_idempotent(self) -> None:
        image = Image.blank(30, 20, (5, 6, 7, 255))

        once = letterbox_resize(image, 90, 108)
        twice = letterbox_resize(once, 90, 108)

        self.assertEqual(twice.size, (90, 108))
        self.assertTrue(np.array_equal(once.pixels, twice.pixels))

    def test_transparent_pixels_do_not_darken_edges(self) -> None:
        pixels = np.zeros((20, 20, 4), dtype=np.uint8)
        pixels[:, :10] = (255, 255, 255, 255)

        result = letterbox_resize(Image(pixels), 80, 80)

        visible = result.alpha > 0
        self.assertTrue(visible.any())
        self.assertGreaterEqual(int(result.rgb[visible].min()), 250)

    def test_invalid_target(self) -> None:
        with self.assertRaises(ValidationError):
            letterbox_resize(Image.blank(4, 4), 10, 0)

    def test_prepare_for_print(self) -> None:
        pixels = np.full((40, 40, 4), 255, dtype=np.uint8)
        pixels[10:30, 10:30, :3] = 0

        result = prepare_for_print(Image(pixels), (90, 108))

        self.assertEqual(result.size, (90, 108))
        self.assertEqual(result.pixel(45, 54)[3], 255)
        self.assertEqual(result.pixel(2, 20)[3], 0)


class ImageTest(unittest.TestCase):
    def test_zero_sized_image_is_rejected(self) -> None:
        with self.assertRaises(DecodeError):
            Image(np.zeros((0, 5, 4), dtype=np.uint8))
        with self.assertRaises(DecodeError):
            Image.blank(0, 3)

    def test_rgb_input_gets_opaque_alpha(self) -> None:
        image = Image(np.zeros((2, 3, 3), dtype=np.uint8))

        self.assertEqual(image.size, (3, 2))
        self.assertTrue((image.alpha == 255).all())

    def test_pixels_are_read_only_copies(self) -> None:
        source = np.zeros((2, 2, 4), dtype=np.uint8)
        image = Image(source)
        source[0, 0] = (9, 9, 9, 9)

        self.assertEqual(image.pixel(0, 0), (0, 0, 0, 0))
        with self.assertRaises(ValueError):
            image.pixels[0, 0] = (1, 1, 1, 1)

    def test_with_pixel_returns_new_image(self) -> None:
        image = Image.blank(2, 2)

        edited = image.with_pixel(1, 0, (1, 2, 3, 4))

        self.assertEqual(edited.pixel(1, 0), (1, 2, 3, 4))
        self.assertEqual(image.pixel(1, 0), (0, 0, 0, 0))

    def test_equality_is_identity_and_hashable(self) -> None:
        first = Image.blank(2, 2)
        second = Image.blank(2, 2)
        mask = MaskImage(np.zeros((2, 2), dtype=np.uint8))

        self.assertEqual(first, first)
        self.assertNotEqual(first, second)
        self.assertEqual(len({first, second, first}), 2)
        self.assertNotEqual(mask, MaskImage(np.zeros((2, 2), dtype=np.uint8)))
        self.assertIn(mask, {mask})


class PremultiplyTest(unittest.TestCase):
    def test_unpremultiply_restores_opaque_colour(self) -> None:
        rgba = np.array([[[120, 60, 30, 255], [120, 60, 30, 0]]], dtype=np.uint8)

        restored = unpremultiply(premultiply(rgba))

        self.assertEqual(tuple(restored[0, 0]), (120, 60, 30, 255))
        self.assertEqual(tuple(restored[0, 1]), (0, 0, 0, 0))

    def test_same_size_resize_is_a_copy(self) -> None:
        rgba = np.zeros((3, 4, 4), dtype=np.uint8)

        result = resize_rgba(rgba, (3, 4))

        self.assertIsNot(result, rgba)
        self.assertTrue(np.array_equal(result, rgba))


if __name__ == "__main__":
    unittest.main()
