"""
Screen-space geometry shared by the warp engine and the evaluator.

Coordinates are screen pixels with the origin top-left; angles are computed
as in a standard cartesian system (atan2 of the raw deltas).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def distance_to(self, other: "Point2D") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_int(self) -> Tuple[int, int]:
        return int(round(self.x)), int(round(self.y))


def heading_deg(start: Point2D, stop: Point2D) -> float:
    """Direction of the vector start->stop in degrees, range (-180, 180]."""
    return math.degrees(math.atan2(stop.y - start.y, stop.x - start.x))


def angle_between_deg(origin: Point2D, a: Point2D, b: Point2D) -> float:
    """Unsigned angle at `origin` between the rays towards `a` and `b`.

    The raw heading difference is folded into [0, 180] so that two rays either
    side of the +/-180 degree seam compare as neighbours.
    """
    diff = abs(heading_deg(origin, b) - heading_deg(origin, a)) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def point_towards(origin: Point2D, target: Point2D, distance: float) -> Point2D:
    """Point `distance` pixels from origin along origin->target.

    Returns origin unchanged when both points coincide.
    """
    span = origin.distance_to(target)
    if span <= 0.0:
        return origin
    phi = math.atan2(target.y - origin.y, target.x - origin.x)
    return Point2D(origin.x + distance * math.cos(phi), origin.y + distance * math.sin(phi))
