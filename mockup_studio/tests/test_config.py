import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from mockup_studio.config import (
    PRINT_SIZE,
    CanvasConfig,
    PipelineConfig,
    StrokeScalePolicy,
    StudioSettings,
)


class ConfigDefaultsTest(unittest.TestCase):
    def test_pipeline_defaults(self) -> None:
        config = PipelineConfig()

        self.assertEqual(config.canvas.print_size, (4500, 5400))
        self.assertEqual(config.canvas.studio_upload_max, (1536, 1536))
        self.assertEqual(config.max_mockups, 6)
        self.assertEqual(config.fallback_color, "#F3F4F6")
        self.assertEqual(config.segmentation.edge_threshold, 30)
        self.assertIs(config.mask.stroke_policy, StrokeScalePolicy.MIN)

    def test_nested_configs_are_not_shared(self) -> None:
        first = PipelineConfig()
        second = PipelineConfig()

        first.canvas.print_size = (10, 10)

        self.assertEqual(second.canvas.print_size, PRINT_SIZE)
        self.assertEqual(CanvasConfig().redesign_upload_max, PRINT_SIZE)

    def test_stroke_policy_combine(self) -> None:
        self.assertEqual(StrokeScalePolicy.MIN.combine(2.0, 3.0), 2.0)
        self.assertEqual(StrokeScalePolicy("max").combine(2.0, 3.0), 3.0)


class StudioSettingsTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "settings.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_file_gives_defaults(self) -> None:
        settings = StudioSettings.load(self.path, use_env=False)

        self.assertEqual(settings.gemini_api_key, "")
        self.assertEqual(settings.background_color, "#0D1117")
        self.assertTrue(settings.needs_setup)

    def test_save_then_load(self) -> None:
        StudioSettings(gemini_api_key="g", fal_api_key="f", background_color="#112233").save(self.path)

        settings = StudioSettings.load(self.path, use_env=False)

        self.assertEqual(settings.gemini_api_key, "g")
        self.assertEqual(settings.fal_api_key, "f")
        self.assertEqual(settings.background_color, "#112233")
        self.assertFalse(settings.needs_setup)

    def test_corrupt_file_falls_back_to_defaults(self) -> None:
        self.path.write_text("{broken", encoding="utf-8")

        with self.assertLogs("mockup_studio.config", level="WARNING"):
            settings = StudioSettings.load(self.path, use_env=False)

        self.assertEqual(settings, StudioSettings())

    def test_unknown_keys_are_ignored(self) -> None:
        self.path.write_text(json.dumps({"gemini_api_key": "g", "theme": "dark"}), encoding="utf-8")

        settings = StudioSettings.load(self.path, use_env=False)

        self.assertEqual(settings.gemini_api_key, "g")

    def test_environment_fills_empty_keys(self) -> None:
        self.path.write_text(json.dumps({"gemini_api_key": "from-file"}), encoding="utf-8")
        env = {"GEMINI_API_KEY": "from-env", "FAL_KEY": "fal-env"}

        with mock.patch.dict(os.environ, env):
            settings = StudioSettings.load(self.path)

        self.assertEqual(settings.gemini_api_key, "from-file")
        self.assertEqual(settings.fal_api_key, "fal-env")

    def test_adapter_configs_carry_keys(self) -> None:
        settings = StudioSettings(gemini_api_key="g", fal_api_key="f")

        gemini = settings.gemini(timeout=5.0)
        seedream = settings.seedream()

        self.assertEqual(gemini.api_key, "g")
        self.assertEqual(gemini.timeout, 5.0)
        self.assertEqual(seedream.api_key, "f")
        self.assertEqual(seedream.image_size, PRINT_SIZE)


if __name__ == "__main__":
    unittest.main()
