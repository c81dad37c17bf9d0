"""
Recorded ground-truth samples and the screenshots they refer to.

A recorded sample is one training step: the fixation at the time, the point
the user actually clicked (relative to the stored screenshot) and the pupil
sizes. Screenshots live under `<data>/data/<user>/<user>_<timestamp>.png`.

CSV columns: timestamp,fixation_x,fixation_y,mouse_x,mouse_y[,pupil_left,pupil_right]
"""
from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2  # type: ignore
import numpy as np  # type: ignore

from GazeWarp.utils.geometry import Point2D

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedSample:
    timestamp: int
    fixation: Point2D
    mouse_point: Point2D
    pupils: Tuple[float, float] = (0.0, 0.0)


def load_samples(path: str) -> List[RecordedSample]:
    """Read recorded samples; raises ValueError naming the offending row."""
    out: List[RecordedSample] = []
    with open(path, newline="", encoding="utf-8") as f:
        r = csv.DictReader(f)
        for line_no, row in enumerate(r, start=2):
            try:
                ts = int(float(row["timestamp"]))
                fix = Point2D(float(row["fixation_x"]), float(row["fixation_y"]))
                mouse = Point2D(float(row["mouse_x"]), float(row["mouse_y"]))
                pupils = (float(row.get("pupil_left") or 0.0), float(row.get("pupil_right") or 0.0))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: malformed sample row ({e})") from e
            out.append(RecordedSample(timestamp=ts, fixation=fix, mouse_point=mouse, pupils=pupils))
    return out


def save_samples(path: str, samples: List[RecordedSample]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["timestamp", "fixation_x", "fixation_y", "mouse_x", "mouse_y", "pupil_left", "pupil_right"])
        for s in samples:
            w.writerow([s.timestamp, s.fixation.x, s.fixation.y, s.mouse_point.x, s.mouse_point.y, s.pupils[0], s.pupils[1]])


class ScreenshotStore:
    def __init__(self, data_path: str) -> None:
        self.root = os.path.join(data_path, "data")

    def path_for(self, user: str, timestamp: int) -> str:
        return os.path.join(self.root, user, f"{user}_{timestamp}.png")

    def load(self, user: str, timestamp: int) -> Optional[np.ndarray]:
        """Return the BGR screenshot, or None if missing or undecodable."""
        path = self.path_for(user, timestamp)
        if not os.path.exists(path):
            logger.warning("screenshot not found: %s", path)
            return None
        image = cv2.imread(path, cv2.IMREAD_COLOR)
        if image is None:
            logger.warning("screenshot could not be decoded: %s", path)
            return None
        return image
