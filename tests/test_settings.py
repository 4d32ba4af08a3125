import os
import sys
import logging
import unittest

import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig, configure_logging
from db import SettingsRepository
from settings_schema import DEFAULT_SETTINGS, validate_settings


class SettingsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_settings.db"
        self.yaml_path = "test_settings.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_defaults_written_to_yaml(self) -> None:
        settings = SettingsRepository(self.db_path, self.yaml_path)
        self.assertEqual(settings.get_int("sets_per_exercise", 0), 5)
        self.assertEqual(settings.get_text("weight_unit", ""), "lb")
        self.assertEqual(settings.get_text("program_name", ""), "StrongLifts 5×5")
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        for key, value in DEFAULT_SETTINGS.items():
            self.assertEqual(data[key], value)

    def test_setters_round_trip_through_yaml(self) -> None:
        settings = SettingsRepository(self.db_path, self.yaml_path)
        settings.set_int("target_reps", 3)
        settings.set_float("bar_weight", 20.0)
        settings.set_bool("show_tips", True)
        self.assertEqual(settings.get_int("target_reps", 0), 3)
        self.assertEqual(settings.get_float("bar_weight", 0.0), 20.0)
        self.assertTrue(settings.get_bool("show_tips", False))
        reopened = SettingsRepository(self.db_path, self.yaml_path)
        self.assertEqual(reopened.get_int("target_reps", 0), 3)
        self.assertEqual(reopened.all_settings()["target_reps"], 3)

    def test_yaml_edits_are_picked_up(self) -> None:
        settings = SettingsRepository(self.db_path, self.yaml_path)
        data = YamlConfig(self.yaml_path).load()
        data["rest_seconds"] = 180
        YamlConfig(self.yaml_path).save(data)
        self.assertEqual(settings.get_int("rest_seconds", 0), 180)

    def test_invalid_values_rejected(self) -> None:
        settings = SettingsRepository(self.db_path, self.yaml_path)
        with self.assertRaises(ValueError):
            settings.set_int("sets_per_exercise", 0)
        with self.assertRaises(ValueError):
            settings.set_text("weight_unit", "stone")
        self.assertEqual(settings.get_int("sets_per_exercise", 0), 5)

    def test_invalid_yaml_rejected(self) -> None:
        with open(self.yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"target_reps": -2}, f)
        with self.assertRaises(ValueError):
            SettingsRepository(self.db_path, self.yaml_path)

    def test_non_mapping_yaml_rejected(self) -> None:
        with open(self.yaml_path, "w", encoding="utf-8") as f:
            f.write("- just\n- a list\n")
        with self.assertRaises(ValueError):
            YamlConfig(self.yaml_path).load()

    def test_missing_key_returns_default(self) -> None:
        settings = SettingsRepository(self.db_path, self.yaml_path)
        self.assertEqual(settings.get_text("nope", "fallback"), "fallback")
        self.assertEqual(settings.get_int("nope", 7), 7)

    def test_validate_settings(self) -> None:
        validate_settings({"weight_unit": "kg", "log_level": "DEBUG"})
        with self.assertRaises(ValueError):
            validate_settings({"log_level": "LOUD"})

    def test_configure_logging(self) -> None:
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging("debug")
            self.assertEqual(root.level, logging.DEBUG)
            configure_logging("not-a-level")
            self.assertEqual(root.level, logging.INFO)
        finally:
            root.setLevel(previous)


if __name__ == "__main__":
    unittest.main()
