import pytest

from GazeWarp.analysis.samples import RecordedSample, ScreenshotStore, load_samples, save_samples
from GazeWarp.utils.geometry import Point2D


def test_csv_round_trip(tmp_path):
    path = str(tmp_path / "samples.csv")
    samples = [
        RecordedSample(1000, Point2D(100, 100), Point2D(120, 90), (3.1, 3.3)),
        RecordedSample(1001, Point2D(100, 100), Point2D(80, 110)),
    ]
    save_samples(path, samples)
    assert load_samples(path) == samples


def test_optional_pupil_columns(tmp_path):
    path = tmp_path / "samples.csv"
    path.write_text("timestamp,fixation_x,fixation_y,mouse_x,mouse_y\n5,1,2,3,4\n", encoding="utf-8")
    (s,) = load_samples(str(path))
    assert s.pupils == (0.0, 0.0)
    assert s.mouse_point == Point2D(3, 4)


def test_malformed_row_names_line(tmp_path):
    path = tmp_path / "samples.csv"
    path.write_text("timestamp,fixation_x,fixation_y,mouse_x,mouse_y\n5,1,2,3,4\n6,1,x,3,4\n", encoding="utf-8")
    with pytest.raises(ValueError, match=":3:"):
        load_samples(str(path))


def test_screenshot_store(tmp_path, write_screenshot):
    write_screenshot(tmp_path, "bob", 42, size=(64, 32))
    store = ScreenshotStore(str(tmp_path))
    assert store.path_for("bob", 42).endswith("bob_42.png")
    img = store.load("bob", 42)
    assert img.shape == (32, 64, 3)
    assert store.load("bob", 43) is None


def test_undecodable_screenshot(tmp_path):
    store = ScreenshotStore(str(tmp_path))
    path = store.path_for("bob", 1)
    (tmp_path / "data" / "bob").mkdir(parents=True)
    with open(path, "wb") as f:
        f.write(b"not a png")
    assert store.load("bob", 1) is None
