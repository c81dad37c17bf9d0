"""
Reference detectors.

These are baselines for the evaluator, not target-finding algorithms:
- CenterDetector trusts the fixation (screenshots are taken around it)
- ContrastDetector picks the strongest blurred Laplacian response
"""
from __future__ import annotations

from typing import List

import cv2  # type: ignore
import numpy as np  # type: ignore

from GazeWarp.detectors.base import Detector, DetectorInfo
from GazeWarp.utils.geometry import Point2D


class CenterDetector:
    def __init__(self) -> None:
        self.info = DetectorInfo("Center Detector", "returns the fixation, i.e. the screenshot centre")

    def analyse(self, image: np.ndarray) -> Point2D:
        h, w = image.shape[:2]
        return Point2D(w / 2.0, h / 2.0)


class ContrastDetector:
    def __init__(self, blur_ksize: int = 15, center_weight: float = 0.5) -> None:
        self.info = DetectorInfo("Contrast Detector", "peak of blurred Laplacian magnitude")
        # odd kernel size for GaussianBlur
        self.blur_ksize = max(1, int(blur_ksize)) | 1
        self.center_weight = float(max(0.0, min(1.0, center_weight)))

    def analyse(self, image: np.ndarray) -> Point2D:
        if image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image
        h, w = gray.shape[:2]
        lap = np.abs(cv2.Laplacian(gray.astype(np.float32), cv2.CV_32F))
        response = cv2.GaussianBlur(lap, (self.blur_ksize, self.blur_ksize), 0)
        peak = float(response.max())
        if peak <= 0.0:
            return Point2D(w / 2.0, h / 2.0)
        # Prefer responses near the centre: the fixation is rarely far off
        ys, xs = np.mgrid[0:h, 0:w]
        dx = (xs - w / 2.0) / max(1.0, w / 2.0)
        dy = (ys - h / 2.0) / max(1.0, h / 2.0)
        falloff = 1.0 - self.center_weight * np.clip(np.sqrt(dx * dx + dy * dy), 0.0, 1.0)
        iy, ix = np.unravel_index(int(np.argmax(response / peak * falloff)), response.shape)
        return Point2D(float(ix), float(iy))


def builtin_detectors() -> List[Detector]:
    return [CenterDetector(), ContrastDetector()]
