"""
Tests for persisted user settings and the interactive editor.
"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from aiacs_dashboard.settings import (
    AppSettings,
    load_settings,
    run_settings_editor,
    save_settings,
)


def answers(*values):
    """Mock questionary prompt whose .ask() returns the given values in order."""
    prompt = mock.Mock()
    prompt.return_value.ask.side_effect = list(values)
    return prompt


class TestLoadSettings(unittest.TestCase):
    """Test loading with fallbacks."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "settings.json"

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_gives_defaults(self):
        settings = load_settings(self.path)
        self.assertTrue(settings.radar_enabled)
        self.assertTrue(settings.weather_enabled)
        self.assertTrue(settings.alert_sound_enabled)
        self.assertEqual(settings.language, "ko")
        self.assertTrue(settings.is_initialized)

    def test_corrupt_file_gives_defaults(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("aiacs_dashboard.settings", level="WARNING"):
            settings = load_settings(self.path)
        self.assertEqual(settings.language, "ko")
        self.assertTrue(settings.is_initialized)

    def test_non_object_gives_defaults(self):
        self.path.write_text("[1, 2]", encoding="utf-8")
        with self.assertLogs("aiacs_dashboard.settings", level="WARNING"):
            settings = load_settings(self.path)
        self.assertTrue(settings.radar_enabled)

    def test_partial_file(self):
        self.path.write_text(json.dumps({"radar_enabled": False, "extra": 1}), encoding="utf-8")
        settings = load_settings(self.path)
        self.assertFalse(settings.radar_enabled)
        self.assertTrue(settings.weather_enabled)

    def test_unknown_language(self):
        self.path.write_text(json.dumps({"language": "fr"}), encoding="utf-8")
        with self.assertLogs("aiacs_dashboard.settings", level="WARNING"):
            settings = load_settings(self.path)
        self.assertEqual(settings.language, "ko")

    def test_is_initialized_not_read_from_disk(self):
        settings = AppSettings.from_dict({"is_initialized": True, "language": "en"})
        self.assertFalse(settings.is_initialized)
        self.assertEqual(settings.language, "en")


class TestSaveSettings(unittest.TestCase):
    def test_save_then_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "settings.json"
            save_settings(AppSettings(weather_enabled=False, language="en"), path)

            stored = json.loads(path.read_text(encoding="utf-8"))
            self.assertNotIn("is_initialized", stored)
            self.assertEqual(stored["language"], "en")

            loaded = load_settings(path)
            self.assertFalse(loaded.weather_enabled)
            self.assertEqual(loaded.language, "en")
            self.assertEqual(list(Path(tmp, "nested").iterdir()), [path])

    def test_to_dict(self):
        self.assertEqual(
            AppSettings().to_dict(),
            {
                "radar_enabled": True,
                "weather_enabled": True,
                "alert_sound_enabled": True,
                "language": "ko",
            },
        )


class TestSettingsEditor(unittest.TestCase):
    """Test the questionary-driven editor."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "settings.json"

    def tearDown(self):
        self.tmp.cleanup()

    def test_saves_answers(self):
        confirm = answers(False, True, False)
        select = answers("en")
        with mock.patch("aiacs_dashboard.settings.questionary.confirm", confirm), \
                mock.patch("aiacs_dashboard.settings.questionary.select", select):
            settings = run_settings_editor(self.path)

        self.assertFalse(settings.radar_enabled)
        self.assertTrue(settings.weather_enabled)
        self.assertFalse(settings.alert_sound_enabled)
        self.assertEqual(settings.language, "en")
        self.assertEqual(load_settings(self.path).language, "en")

    def test_cancel_does_not_save(self):
        confirm = answers(True, None)
        with mock.patch("aiacs_dashboard.settings.questionary.confirm", confirm):
            self.assertIsNone(run_settings_editor(self.path))
        self.assertFalse(self.path.exists())


if __name__ == "__main__":
    unittest.main()
