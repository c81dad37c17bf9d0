import os
import random

import cv2
import pytest

from GazeWarp.analysis import overlay, report
from GazeWarp.analysis.evaluator import NO_DATA_NAME, EvaluationRunner
from GazeWarp.analysis.samples import RecordedSample
from GazeWarp.detectors.base import DetectorRegistry
from GazeWarp.utils.geometry import Point2D

RUN_TS = 1700000000000


def _sample(ts, x, y):
    return RecordedSample(timestamp=ts, fixation=Point2D(100, 100), mouse_point=Point2D(x, y))


@pytest.fixture
def setup(tmp_path, fixed_detector, write_screenshot):
    registry = DetectorRegistry()
    near = fixed_detector("Near", 130, 100)
    far = fixed_detector("Far", 100, 100)
    registry.register(far)
    registry.register(near)
    write_screenshot(tmp_path, "anna", 1000)
    write_screenshot(tmp_path, "anna", 1001)
    runner = EvaluationRunner(registry, str(tmp_path), run_timestamp=RUN_TS, rng=random.Random(7))
    return runner, registry, near, far


def test_scores_distance_to_mouse_target(setup):
    runner, _, near, far = setup
    err = runner.evaluate("s1", "anna", near, _sample(1000, 120, 100))
    assert err.dist_px == pytest.approx(10.0)
    err = runner.evaluate("s1", "anna", far, _sample(1000, 120, 100))
    assert err.dist_px == pytest.approx(20.0)
    stats = runner.results.session("s1")
    assert stats.average(near.info.id) == pytest.approx(10.0)
    assert runner.results.global_stats.size == 2


def test_missing_screenshot_skips_sample(setup):
    runner, _, near, far = setup
    samples = [_sample(1000, 120, 100), _sample(9999, 0, 0), _sample(1001, 140, 100)]
    scored = runner.evaluate_session("s1", "anna", samples, [far, near])
    assert scored == 4
    assert near.calls == 2
    assert runner.results.global_stats.size == 4


def test_unregistered_detector_is_rejected(setup, fixed_detector):
    runner = setup[0]
    with pytest.raises(ValueError):
        runner.evaluate("s1", "anna", fixed_detector("Stranger", 0, 0), _sample(1000, 0, 0))


def test_finalize_returns_best_and_writes_report(setup, tmp_path):
    runner, _, near, far = setup
    runner.evaluate_session("s1", "anna", [_sample(1000, 120, 100), _sample(1001, 125, 100)], [far, near])
    assert runner.finalize(write_log=True) == "Near"

    with open(report.log_path(str(tmp_path)), encoding="utf-8") as f:
        text = f.read()
    assert text.startswith("Session: s1 - User: anna, Timestamp: %d, Number of DataSets: 4\n" % RUN_TS)
    assert "Far: 22.5 Pixel distance averaged.\n" in text
    assert "Near: 7.5 Pixel distance averaged.\n" in text
    assert "-> best result for Near\n" in text
    assert "- over all results for the session above -" in text
    assert text.rstrip("\n").endswith("-" * 54)


def test_finalize_without_data(setup, tmp_path):
    runner = setup[0]
    runner.evaluate_session("s1", "anna", [_sample(5, 0, 0)], [setup[2]])
    assert runner.finalize(write_log=True) == NO_DATA_NAME
    assert not os.path.exists(report.log_path(str(tmp_path)))


def test_finalize_can_skip_log_and_write_plots(setup, tmp_path):
    runner, _, near, far = setup
    runner.evaluate_session("s1", "anna", [_sample(1000, 120, 100)], [far, near])
    plot = tmp_path / "plots" / "ranking.png"
    assert runner.finalize(write_log=False, plot_path=str(plot)) == "Near"
    assert not os.path.exists(report.log_path(str(tmp_path)))
    assert plot.exists()
    assert (tmp_path / "plots" / "ranking_histogram.png").exists()


def test_overlays_accumulate_markers(setup, tmp_path, fixed_detector):
    runner, registry, _, _ = setup
    left = fixed_detector("Left", 40, 40)
    right = fixed_detector("Right", 160, 40)
    registry.register(left)
    registry.register(right)
    sample = _sample(1000, 150, 150)

    runner.evaluate("s1", "anna", left, sample, draw_image=True)
    path = overlay.overlay_path(str(tmp_path), "anna", RUN_TS, 1000)
    assert os.path.exists(path)
    first = cv2.imread(path)
    assert list(first[100, 105]) == list(overlay.FIXATION_COLOR)
    assert list(first[150, 155]) == list(overlay.TARGET_COLOR)
    assert first[40, 45].any()

    # a second runner with the same run timestamp composes onto the same file
    again = EvaluationRunner(registry, str(tmp_path), run_timestamp=RUN_TS)
    again.evaluate("s1", "anna", right, sample, draw_image=True)
    second = cv2.imread(path)
    assert second[40, 45].any()
    assert second[40, 165].any()
    assert list(second[100, 105]) == list(overlay.FIXATION_COLOR)


def test_detector_colors_avoid_marker_palette():
    rng = random.Random(0)
    for _ in range(500):
        b, g, r = overlay.detector_color(rng)
        assert r == 0
        assert (b, g, r) not in (overlay.FIXATION_COLOR, overlay.TARGET_COLOR)
