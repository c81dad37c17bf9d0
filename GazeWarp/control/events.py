"""
Event dataclasses emitted by the control layer.
"""
from __future__ import annotations

from dataclasses import dataclass

from GazeWarp.utils.geometry import Point2D


@dataclass(frozen=True)
class TimedSample:
    timestamp_ms: int
    position: Point2D


@dataclass(frozen=True)
class WarpEvent:
    """Decision to move the cursor to `target`.

    `target` equals `fixation` unless a set radius pulls it back towards the
    gesture's end point.
    """
    target: Point2D
    fixation: Point2D
    angle_deg: float
    timestamp_ms: int
