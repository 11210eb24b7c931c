import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import config


class TestConfigLoading(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.temp_dir.cleanup)
        env_patch = mock.patch.dict(os.environ, {}, clear=False)
        env_patch.start()
        self.addCleanup(env_patch.stop)
        for name in list(os.environ):
            if name.startswith("GRIDBEAT_"):
                del os.environ[name]

    def _write(self, payload):
        path = Path(self.temp_dir.name) / "gridbeat_config.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_defaults(self):
        app_config = config.AppConfig()

        self.assertEqual(app_config.timing.growth_duration_ms, 1000)
        self.assertEqual(app_config.timing.hit_window_early_ms, 150)
        self.assertEqual(app_config.timing.hit_window_late_ms, 200)
        self.assertEqual(app_config.timing.miss_grace_ms, 50)
        self.assertEqual(app_config.timing.feedback_grace_ms, 100)
        self.assertEqual(app_config.harness.completion_check_interval_ms, 100)
        self.assertEqual(app_config.logging.level, "INFO")

    def test_load_from_file(self):
        path = self._write({"timing": {"growth_duration_ms": 800}, "logging": {"level": "debug"}})

        app_config, resolved_path = config.load_config(path)

        self.assertEqual(resolved_path, path)
        self.assertEqual(app_config.timing.growth_duration_ms, 800)
        self.assertEqual(app_config.logging.level, "DEBUG")

    def test_environment_overrides(self):
        path = self._write({"timing": {"growth_duration_ms": 800}})
        os.environ["GRIDBEAT_GROWTH_DURATION_MS"] = "1200"
        os.environ["GRIDBEAT_SAMPLE_BPM"] = "120.5"
        os.environ["GRIDBEAT_MISS_GRACE_MS"] = "not-a-number"

        app_config, _ = config.load_config(path)

        self.assertEqual(app_config.timing.growth_duration_ms, 1200)
        self.assertEqual(app_config.harness.sample_bpm, 120.5)
        self.assertEqual(app_config.timing.miss_grace_ms, 50)

    def test_missing_search_paths_fall_back_to_defaults(self):
        with mock.patch.object(config, "_default_config_candidates", return_value=[Path(self.temp_dir.name) / "nope.json"]):
            app_config, resolved_path = config.load_config()

        self.assertIsNone(resolved_path)
        self.assertEqual(app_config.timing.growth_duration_ms, 1000)

    def test_invalid_json_raises_value_error(self):
        path = Path(self.temp_dir.name) / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(ValueError):
            config.load_config(path)

    def test_non_object_root_raises_value_error(self):
        path = self._write([1, 2, 3])

        with self.assertRaises(ValueError):
            config.load_config(path)

    def test_rating_windows_must_be_ordered(self):
        path = self._write({"timing": {"perfect_window_ms": 60, "great_window_ms": 50}})

        with self.assertRaises(ValueError):
            config.load_config(path)

    def test_unknown_log_level_rejected(self):
        path = self._write({"logging": {"level": "chatty"}})

        with self.assertRaises(ValueError):
            config.load_config(path)

    def test_to_json_round_trips_values(self):
        payload = json.loads(config.to_json(config.AppConfig()))

        self.assertEqual(payload["timing"]["perfect_window_ms"], 25)
        self.assertEqual(payload["harness"]["tick_interval_ms"], 16)


if __name__ == "__main__":
    unittest.main()
