import json

import pytest

from GazeWarp.control.warp import WarpConfig
from GazeWarp.core.settings import ENV_VAR, SettingsError, SettingsManager


def test_defaults_when_file_missing(tmp_path):
    s = SettingsManager(str(tmp_path / "settings.json"))
    assert s.warp_config() == WarpConfig()
    assert s.write_log() is True
    assert s.draw_images() is False
    assert s.detector_names() == ["Center Detector", "Contrast Detector"]
    assert s.log_level() == "INFO"


def test_round_trip(tmp_path):
    path = str(tmp_path / "cfg" / "settings.json")
    s = SettingsManager(path)
    cfg = WarpConfig(angle_threshold_deg=15, distance_threshold=120, duration_threshold_ms=250, home_radius=40, set_radius=10)
    s.set_warp_config(cfg)
    s.set_data_path("/data")
    s.set_draw_images(True)
    s.set_detector_names(["Center Detector"])
    s.save()

    again = SettingsManager(path)
    assert again.warp_config() == cfg
    assert again.data_path() == "/data"
    assert again.draw_images() is True
    assert again.detector_names() == ["Center Detector"]


def test_partial_file_falls_back_per_key(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"warp": {"home_radius": 75}}), encoding="utf-8")
    s = SettingsManager(str(path))
    assert s.warp_config().home_radius == 75.0
    assert s.warp_config().angle_threshold_deg == 10.0
    assert s.data_path() == "."


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsError):
        SettingsManager(str(path))
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SettingsError):
        SettingsManager(str(path))


def test_env_var_location(tmp_path, monkeypatch):
    path = tmp_path / "env.json"
    path.write_text(json.dumps({"logging": {"level": "debug"}}), encoding="utf-8")
    monkeypatch.setenv(ENV_VAR, str(path))
    s = SettingsManager()
    assert s.path == str(path)
    assert s.log_level() == "DEBUG"
