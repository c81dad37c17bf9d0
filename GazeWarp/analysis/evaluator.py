"""
Evaluation session runner.

Runs detectors over recorded samples, scores each estimate by its pixel
distance to the recorded mouse target, feeds the aggregator and, on request,
draws diagnostic overlays. `finalize` ranks the detectors per session and over
the whole run, writes the report and returns the overall winner's name.

Samples are processed strictly in order. A sample whose screenshot is missing
or unreadable is skipped with a warning.
"""
from __future__ import annotations

import logging
import os
import random
import time
from typing import Dict, Iterable, List, Optional, Sequence

from GazeWarp.analysis import overlay, report
from GazeWarp.analysis.aggregator import NO_DATA, ResultAggregator
from GazeWarp.analysis.error_metrics import PointError, compute_point_error, compute_rms_error
from GazeWarp.analysis.samples import RecordedSample, ScreenshotStore
from GazeWarp.detectors.base import Detector, DetectorRegistry

logger = logging.getLogger(__name__)

NO_DATA_NAME = "...nothing"


class EvaluationRunner:
    def __init__(
        self,
        registry: DetectorRegistry,
        data_path: str,
        run_timestamp: Optional[int] = None,
        screenshots: Optional[ScreenshotStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.registry = registry
        self.data_path = data_path
        self.run_timestamp = int(run_timestamp if run_timestamp is not None else time.time() * 1000)
        self.screenshots = screenshots or ScreenshotStore(data_path)
        self.rng = rng or random.Random()
        self.results = ResultAggregator()

    def evaluate(
        self,
        identifier: str,
        user: str,
        detector: Detector,
        sample: RecordedSample,
        draw_image: bool = False,
    ) -> Optional[PointError]:
        """Score one detector on one sample; None if the sample was skipped."""
        det_id = detector.info.id
        if det_id not in self.registry:
            raise ValueError(f"detector {detector.info.display_name!r} is not registered")

        screenshot = self.screenshots.load(user, sample.timestamp)
        if screenshot is None:
            logger.warning("skipping sample %d of %s", sample.timestamp, user)
            return None

        estimate = detector.analyse(screenshot)
        error = compute_point_error(det_id, sample.mouse_point, estimate)

        if draw_image:
            path = overlay.overlay_path(self.data_path, user, self.run_timestamp, sample.timestamp)
            overlay.draw_evaluation(
                path,
                screenshot,
                estimate,
                sample.mouse_point,
                detector.info.display_name,
                overlay.detector_color(self.rng),
            )

        self.results.record(identifier, det_id, error.dist_px, user=user, timestamp=self.run_timestamp)
        return error

    def evaluate_session(
        self,
        identifier: str,
        user: str,
        samples: Iterable[RecordedSample],
        detectors: Sequence[Detector],
        draw_image: bool = False,
    ) -> int:
        scored = 0
        for sample in samples:
            for det in detectors:
                if self.evaluate(identifier, user, det, sample, draw_image=draw_image) is not None:
                    scored += 1
        logger.info("session %s: %d detector results scored", identifier, scored)
        return scored

    def finalize(self, write_log: bool = True, plot_path: Optional[str] = None) -> str:
        """Rank, optionally report, and return the overall best detector's name."""
        sessions, overall = self.results.rankings()
        if overall is None or overall.best is NO_DATA:
            logger.info("evaluation finished without data")
            return NO_DATA_NAME

        name_of = self.registry.name_of
        if write_log:
            path = report.log_path(self.data_path)
            report.append_report(path, report.format_report(sessions, overall, name_of))
            logger.info("evaluation report appended to %s", path)

        for det_id, avg in overall.averages:
            logger.info(
                "%s: mean %.2f px, rms %.2f px over %d results",
                name_of(det_id),
                avg,
                compute_rms_error(overall.stats.distances(det_id)),
                overall.stats.count(det_id),
            )

        if plot_path:
            self.save_plots(plot_path)

        best = name_of(overall.best)
        logger.info("best result: %s with %d datasets", best, overall.stats.size)
        return best

    def save_plots(self, path: str) -> None:
        from GazeWarp.analysis import plots

        stats = self.results.global_stats
        if stats is None:
            return
        averages: Dict[str, float] = {self.registry.name_of(k): stats.average(k) for k in stats.ids()}
        errors: Dict[str, List[float]] = {self.registry.name_of(k): stats.distances(k) for k in stats.ids()}
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        plots.save_figure(plots.fig_ranking(averages), path)
        root, ext = os.path.splitext(path)
        plots.save_figure(plots.fig_histogram(errors), f"{root}_histogram{ext or '.png'}")
