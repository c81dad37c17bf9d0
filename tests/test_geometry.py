import math

import pytest

from GazeWarp.utils.geometry import Point2D, angle_between_deg, heading_deg, point_towards


def test_distance_is_euclidean():
    assert Point2D(0, 0).distance_to(Point2D(3, 4)) == 5.0


def test_heading_uses_cartesian_atan2():
    assert heading_deg(Point2D(0, 0), Point2D(1, 0)) == 0.0
    assert heading_deg(Point2D(0, 0), Point2D(0, 1)) == 90.0
    assert heading_deg(Point2D(0, 0), Point2D(-1, 0)) == 180.0


def test_angle_between_rays():
    o = Point2D(0, 0)
    assert angle_between_deg(o, Point2D(10, 0), Point2D(10, 10)) == pytest.approx(45.0)
    assert angle_between_deg(o, Point2D(10, 10), Point2D(10, 0)) == pytest.approx(45.0)


def test_angle_folds_across_seam():
    # headings of about +174.3 and -174.3 degrees are only ~11.4 degrees apart
    o = Point2D(0, 0)
    angle = angle_between_deg(o, Point2D(-10, 1), Point2D(-10, -1))
    assert angle == pytest.approx(2 * (180.0 - math.degrees(math.atan2(1, -10))), abs=1e-9)
    assert angle < 12.0


def test_point_towards():
    p = point_towards(Point2D(100, 100), Point2D(200, 100), 30)
    assert p.x == pytest.approx(130.0)
    assert p.y == pytest.approx(100.0)
    assert point_towards(Point2D(5, 5), Point2D(5, 5), 30) == Point2D(5, 5)


def test_as_int_rounds():
    assert Point2D(1.6, 2.4).as_int() == (2, 2)
