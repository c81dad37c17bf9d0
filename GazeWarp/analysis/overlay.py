"""
Diagnostic overlays for evaluated screenshots.

One PNG per (user, sample timestamp) and evaluation run. The first detector
to be drawn also lays down the fixation (screenshot centre) and the mouse
target; later detectors are composed onto the existing file so repeated runs
accumulate markers on one image.
"""
from __future__ import annotations

import logging
import os
import random
from typing import Optional, Tuple

import cv2  # type: ignore
import numpy as np  # type: ignore

from GazeWarp.utils.geometry import Point2D

logger = logging.getLogger(__name__)

# BGR
FIXATION_COLOR = (0, 255, 255)
TARGET_COLOR = (0, 0, 255)
MARKER_RADIUS = 5
FILL_ALPHA = 32 / 255.0
FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.35


def overlay_path(data_path: str, user: str, run_timestamp: int, sample_timestamp: int) -> str:
    return os.path.join(
        data_path,
        "evaluation",
        f"{user}_{run_timestamp}",
        f"{user}_{sample_timestamp}_evaluated.png",
    )


def detector_color(rng: Optional[random.Random] = None) -> Tuple[int, int, int]:
    """BGR colour for a detector marker: green-to-blue, never red or yellow."""
    r = rng or random
    c = (50 + r.randint(0, 254)) % 256
    return (c, 255 - c, 0)


def draw_marker(canvas: np.ndarray, point: Point2D, color: Tuple[int, int, int], label: str) -> None:
    x, y = point.as_int()
    fill = canvas.copy()
    cv2.circle(fill, (x, y), MARKER_RADIUS, color, thickness=-1)
    cv2.addWeighted(fill, FILL_ALPHA, canvas, 1.0 - FILL_ALPHA, 0, dst=canvas)
    cv2.circle(canvas, (x, y), MARKER_RADIUS, color, thickness=1)
    cv2.putText(canvas, label, (x + 12, y + 12), FONT, FONT_SCALE, color, 1, cv2.LINE_AA)


def draw_evaluation(
    path: str,
    screenshot: np.ndarray,
    estimate: Point2D,
    mouse_point: Point2D,
    label: str,
    color: Tuple[int, int, int],
) -> bool:
    """Draw (or compose) the overlay at `path`; returns False if it could not be written."""
    existing = None
    if os.path.exists(path):
        existing = cv2.imread(path, cv2.IMREAD_COLOR)
        if existing is None:
            logger.warning("existing overlay unreadable, redrawing: %s", path)

    if existing is not None:
        canvas = existing
    else:
        canvas = screenshot.copy()
        h, w = canvas.shape[:2]
        center = Point2D(w / 2.0, h / 2.0)
        draw_marker(canvas, center, FIXATION_COLOR, "fixation point")
        draw_marker(canvas, mouse_point, TARGET_COLOR, "mouse target")

    draw_marker(canvas, estimate, color, label)

    os.makedirs(os.path.dirname(path), exist_ok=True)
    if not cv2.imwrite(path, canvas):
        logger.warning("could not write overlay: %s", path)
        return False
    return True
