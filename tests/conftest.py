import os

import cv2
import numpy as np
import pytest

from GazeWarp.detectors.base import DetectorInfo
from GazeWarp.utils.geometry import Point2D


class FixedDetector:
    """Always reports the same point."""

    def __init__(self, name, point):
        self.info = DetectorInfo(name, "test detector")
        self.point = point
        self.calls = 0

    def analyse(self, image):
        self.calls += 1
        return self.point


@pytest.fixture
def fixed_detector():
    return lambda name, x, y: FixedDetector(name, Point2D(x, y))


@pytest.fixture
def write_screenshot():
    def _write(data_path, user, timestamp, size=(200, 200)):
        folder = os.path.join(str(data_path), "data", user)
        os.makedirs(folder, exist_ok=True)
        path = os.path.join(folder, f"{user}_{timestamp}.png")
        assert cv2.imwrite(path, np.zeros((size[1], size[0], 3), dtype=np.uint8))
        return path

    return _write


AREA_TEMPLATE = "<area><number>{n}</number><start><x>{sx}</x><y>{sy}</y></start><stop><x>{ex}</x><y>{ey}</y></stop></area>"


@pytest.fixture
def write_record():
    def _write(folder, areas, companions=None, raw=None):
        folder = str(folder)
        os.makedirs(folder, exist_ok=True)
        body = raw if raw is not None else "".join(
            AREA_TEMPLATE.format(n=n, sx=sx, sy=sy, ex=ex, ey=ey) for n, (sx, sy), (ex, ey) in areas
        )
        path = os.path.join(folder, "PreparedText.xml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(f'<?xml version="1.0" encoding="UTF-8"?>\n<areas>{body}</areas>\n')
        if companions is None:
            companions = [a[0] for a in areas]
        for n in companions:
            for kind in ("normal", "highlighted"):
                with open(os.path.join(folder, f"Text{n}_{kind}.html"), "w", encoding="utf-8") as f:
                    f.write("<html></html>")
        return path

    return _write
