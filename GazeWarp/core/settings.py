"""
Settings manager for GazeWarp.

Loads/saves JSON settings and exposes typed helpers. The file is looked up
at an explicit path, then $GAZEWARP_SETTINGS, then GazeWarp/settings.json.
"""
from __future__ import annotations

import copy
import json
import os
from typing import Any, Dict, List, Optional

from GazeWarp.control.warp import WarpConfig

ENV_VAR = "GAZEWARP_SETTINGS"

DEFAULTS: Dict[str, Any] = {
    "warp": {
        "angle_threshold_deg": 10.0,
        "distance_threshold": 200.0,
        "duration_threshold_ms": 200,
        "home_radius": 200.0,
        "set_radius": 0.0,
    },
    "evaluation": {
        "data_path": ".",
        "draw_images": False,
        "write_log": True,
        "detectors": ["Center Detector", "Contrast Detector"],
    },
    "logging": {"level": "INFO"},
}


class SettingsError(RuntimeError):
    pass


class SettingsManager:
    def __init__(self, path: Optional[str] = None) -> None:
        if path is None:
            path = os.environ.get(ENV_VAR) or None
        if path is None:
            here = os.path.dirname(os.path.abspath(__file__))
            path = os.path.join(os.path.dirname(here), "settings.json")
        self.path = path
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        if not os.path.exists(self.path):
            self.data = copy.deepcopy(DEFAULTS)
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SettingsError(f"cannot read settings {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsError(f"settings {self.path} must hold a JSON object")
        self.data = data

    def save(self) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2)

    def _section(self, name: str) -> Dict[str, Any]:
        sec = self.data.get(name)
        if not isinstance(sec, dict):
            sec = {}
            self.data[name] = sec
        return sec

    def _get(self, section: str, key: str) -> Any:
        v = self._section(section).get(key)
        if v is None:
            v = DEFAULTS[section][key]
        return v

    # Warp --------------------------------------------------------------
    def warp_config(self) -> WarpConfig:
        return WarpConfig(
            angle_threshold_deg=float(self._get("warp", "angle_threshold_deg")),
            distance_threshold=float(self._get("warp", "distance_threshold")),
            duration_threshold_ms=int(self._get("warp", "duration_threshold_ms")),
            home_radius=float(self._get("warp", "home_radius")),
            set_radius=float(self._get("warp", "set_radius")),
        )

    def set_warp_config(self, config: WarpConfig) -> None:
        self._section("warp").update(
            {
                "angle_threshold_deg": float(config.angle_threshold_deg),
                "distance_threshold": float(config.distance_threshold),
                "duration_threshold_ms": int(config.duration_threshold_ms),
                "home_radius": float(config.home_radius),
                "set_radius": float(config.set_radius),
            }
        )

    # Evaluation ----------------------------------------------------------
    def data_path(self) -> str:
        return str(self._get("evaluation", "data_path"))

    def set_data_path(self, path: str) -> None:
        self._section("evaluation")["data_path"] = str(path)

    def draw_images(self) -> bool:
        return bool(self._get("evaluation", "draw_images"))

    def set_draw_images(self, on: bool) -> None:
        self._section("evaluation")["draw_images"] = bool(on)

    def write_log(self) -> bool:
        return bool(self._get("evaluation", "write_log"))

    def set_write_log(self, on: bool) -> None:
        self._section("evaluation")["write_log"] = bool(on)

    def detector_names(self) -> List[str]:
        names = self._get("evaluation", "detectors")
        return [str(n) for n in names] if isinstance(names, list) else []

    def set_detector_names(self, names: List[str]) -> None:
        self._section("evaluation")["detectors"] = [str(n) for n in names]

    # Logging -----------------------------------------------------------
    def log_level(self) -> str:
        return str(self._get("logging", "level")).upper()
