"""Tests for config loading and display formatting."""

import json

import pytest

from drawing_trainer.config import DEFAULT_CONFIG, load_config, save_config
from drawing_trainer.ui.formatting import format_duration, format_timer_text


class TestConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.json") == DEFAULT_CONFIG

    def test_partial_file_merges(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"tick_interval_ms": 250}))
        cfg = load_config(path)
        assert cfg["tick_interval_ms"] == 250
        assert cfg["log_level"] == DEFAULT_CONFIG["log_level"]

    def test_corrupt_file_falls_back(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        assert load_config(path) == DEFAULT_CONFIG

    def test_non_object_falls_back(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        assert load_config(path) == DEFAULT_CONFIG

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / "sub" / "settings.json"
        cfg = load_config(path)
        cfg["log_level"] = "DEBUG"
        save_config(cfg, path)
        assert load_config(path)["log_level"] == "DEBUG"

    def test_defaults_not_mutated(self, tmp_path):
        cfg = load_config(tmp_path / "nope.json")
        cfg["tick_interval_ms"] = 1
        assert DEFAULT_CONFIG["tick_interval_ms"] == 100


class TestFormatting:
    @pytest.mark.parametrize("seconds, text", [
        (0, "00:00"), (5, "00:05"), (59.9, "00:59"), (60, "01:00"),
        (90.4, "01:30"), (3599, "59:59"), (-3, "00:00"),
    ])
    def test_timer_text(self, seconds, text):
        assert format_timer_text(seconds) == text

    @pytest.mark.parametrize("seconds, text", [
        (0, ""), (-10, ""), (45, "45s"), (60, "1m"), (90, "1m 30s"), (600, "10m"),
    ])
    def test_duration(self, seconds, text):
        assert format_duration(seconds) == text
