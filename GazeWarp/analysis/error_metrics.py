from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import math
import numpy as np  # type: ignore

from GazeWarp.utils.geometry import Point2D


@dataclass(frozen=True)
class PointError:
    detector_id: int
    true_xy: Point2D
    pred_xy: Point2D
    dist_px: float


def compute_point_error(detector_id: int, true_xy: Point2D, pred_xy: Point2D) -> PointError:
    return PointError(detector_id=detector_id, true_xy=true_xy, pred_xy=pred_xy, dist_px=pred_xy.distance_to(true_xy))


def compute_rms_error(dists: Sequence[float]) -> float:
    if not dists:
        return float("nan")
    return float(math.sqrt(sum(d * d for d in dists) / float(len(dists))))


def compute_error_distribution(dists: Sequence[float], bin_width_px: float = 10.0) -> Tuple[np.ndarray, np.ndarray]:
    if not dists:
        return np.array([0.0]), np.array([0.0, 0.0])
    arr = np.asarray(dists, dtype=float)
    max_d = max(1.0, float(arr.max()))
    bins = int(math.ceil(max_d / bin_width_px))
    bins = max(5, min(100, bins))
    hist, edges = np.histogram(arr, bins=bins, range=(0.0, max_d))
    return hist.astype(float), edges.astype(float)
