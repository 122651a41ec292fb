import unittest

import numpy as np

from mockup_studio.config import SegmentationConfig
from mockup_studio.segmentation import BackgroundSegmenter, segment
from mockup_studio.types import Image


def _solid(width: int, height: int, rgb, alpha: int = 255) -> np.ndarray:
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = rgb
    pixels[..., 3] = alpha
    return pixels


class BackgroundSegmenterTest(unittest.TestCase):
    def test_all_white_image_becomes_transparent(self) -> None:
        image = Image(_solid(20, 20, (255, 255, 255)))

        result = segment(image)

        self.assertEqual(result.size, (20, 20))
        self.assertTrue((result.alpha == 0).all())

    def test_dark_design_is_kept_opaque(self) -> None:
        pixels = _solid(20, 20, (255, 255, 255))
        pixels[6:14, 6:14, :3] = (10, 20, 30)

        result = segment(Image(pixels))

        self.assertEqual(result.pixel(10, 10), (10, 20, 30, 255))
        self.assertEqual(result.pixel(0, 0)[3], 0)
        self.assertEqual(result.pixel(3, 10)[3], 0)

    def test_colour_channels_are_untouched(self) -> None:
        pixels = _solid(12, 12, (250, 250, 250))
        pixels[4:8, 4:8, :3] = (200, 0, 0)
        image = Image(pixels)

        result = segment(image)

        self.assertTrue(np.array_equal(result.rgb, image.rgb))

    def test_kept_pixels_preserve_original_alpha(self) -> None:
        pixels = _solid(20, 20, (255, 255, 255))
        pixels[6:14, 6:14] = (0, 0, 0, 128)

        result = segment(Image(pixels))

        self.assertEqual(result.pixel(10, 10)[3], 128)

    def test_soft_band_feathers_alpha_by_distance(self) -> None:
        pixels = _solid(40, 40, (255, 255, 255))
        pixels[10:30, 10:30, :3] = (225, 225, 225)

        result = segment(Image(pixels))

        # distance sqrt(3 * 30^2) ~= 51.96 -> round(51.96 / 60 * 255)
        self.assertEqual(result.pixel(20, 20)[3], 221)

    def test_flat_interior_cleared_but_edges_feathered(self) -> None:
        pixels = _solid(40, 40, (255, 255, 255))
        pixels[10:30, 10:30, :3] = (235, 235, 235)

        result = segment(Image(pixels))

        self.assertEqual(result.pixel(20, 20)[3], 0)
        # distance sqrt(3 * 20^2) ~= 34.64 on the block outline
        self.assertEqual(result.pixel(10, 20)[3], 147)
        self.assertEqual(result.pixel(9, 20)[3], 0)

    def test_input_is_not_modified(self) -> None:
        image = Image(_solid(8, 8, (255, 255, 255)))

        segment(image)

        self.assertTrue((image.alpha == 255).all())

    def test_anchor_points(self) -> None:
        points = BackgroundSegmenter.anchor_points(8, 4)

        self.assertEqual(
            points,
            [(0, 0), (7, 0), (0, 3), (7, 3), (2, 0), (6, 0), (0, 1), (7, 1)],
        )

    def test_estimate_background_averages_anchors(self) -> None:
        rgb = np.zeros((4, 8, 3), dtype=np.uint8)
        rgb[0, 0] = (80, 80, 80)
        segmenter = BackgroundSegmenter()

        background = segmenter.estimate_background(rgb)

        self.assertTrue(np.allclose(background, (10.0, 10.0, 10.0)))

    def test_edge_map_ignores_outer_ring(self) -> None:
        rgb = np.zeros((5, 5, 3), dtype=np.uint8)
        rgb[0, 0] = (255, 255, 255)
        rgb[2, 2] = (40, 0, 0)
        segmenter = BackgroundSegmenter()

        edges = segmenter.edge_map(rgb)

        self.assertFalse(edges[0, 0])
        self.assertTrue(edges[2, 2])
        self.assertTrue(edges[1, 1])
        self.assertFalse(edges[0, 2])

    def test_edge_metric_sum_and_max(self) -> None:
        rgb = np.zeros((3, 3, 3), dtype=np.uint8)
        rgb[0, 0] = (20, 20, 20)

        summed = BackgroundSegmenter(SegmentationConfig(edge_metric="sum")).edge_map(rgb)
        strongest = BackgroundSegmenter(SegmentationConfig(edge_metric="max")).edge_map(rgb)

        self.assertTrue(summed[1, 1])
        self.assertFalse(strongest[1, 1])

    def test_tiny_images_have_no_edges(self) -> None:
        rgb = np.zeros((2, 2, 3), dtype=np.uint8)
        rgb[0, 0] = (255, 255, 255)

        edges = BackgroundSegmenter().edge_map(rgb)

        self.assertFalse(edges.any())

    def test_border_band_width(self) -> None:
        band = BackgroundSegmenter().border_band(100, 40)

        # min side 40 * 0.05 = 2 pixels
        self.assertTrue(band[1, 50])
        self.assertFalse(band[2, 50])
        self.assertTrue(band[20, 98])
        self.assertFalse(band[20, 97])

    def test_unknown_edge_metric(self) -> None:
        with self.assertRaises(ValueError):
            BackgroundSegmenter(SegmentationConfig(edge_metric="mean"))


if __name__ == "__main__":
    unittest.main()
