"""
Command line entry point.

    gazewarp evaluate --data DIR --user NAME (--samples CSV | --record XML)
    gazewarp validate RECORD [--schema XSD]
    gazewarp areas RECORD
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from GazeWarp.analysis.evaluator import NO_DATA_NAME, EvaluationRunner
from GazeWarp.analysis.ground_truth import AreaRecordReader, samples_from_areas
from GazeWarp.analysis.samples import RecordedSample, load_samples
from GazeWarp.core.settings import SettingsError, SettingsManager
from GazeWarp.detectors.base import Detector, DetectorRegistry
from GazeWarp.detectors.reference import builtin_detectors

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gazewarp", description="Gaze-assisted pointing: detector evaluation tools")
    parser.add_argument("--settings", default=None, help="Path to settings.json")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    sub = parser.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", help="Score detectors against recorded ground truth")
    ev.add_argument("--data", default=None, help="Directory holding data/ and evaluation/")
    ev.add_argument("--user", required=True, help="User whose recordings are evaluated")
    src = ev.add_mutually_exclusive_group(required=True)
    src.add_argument("--samples", help="CSV of recorded samples")
    src.add_argument("--record", help="XML ground-truth area record")
    ev.add_argument("--identifier", default=None, help="Session identifier (default: user)")
    ev.add_argument("--detector", action="append", default=None, help="Detector display name (repeatable)")
    ev.add_argument("--draw", action="store_true", help="Write diagnostic overlays")
    ev.add_argument("--no-log", action="store_true", help="Do not append to evaluation.log")
    ev.add_argument("--plot", default=None, help="Write a ranking chart to this PNG")

    va = sub.add_parser("validate", help="Validate a ground-truth record against its schema")
    va.add_argument("record")
    va.add_argument("--schema", default=None)

    ar = sub.add_parser("areas", help="Print the areas read from a ground-truth record")
    ar.add_argument("record")
    return parser


def _select_detectors(registry: DetectorRegistry, names: List[str]) -> List[Detector]:
    selected: List[Detector] = []
    for name in names:
        det = registry.find(name)
        if det is None:
            raise KeyError(name)
        selected.append(det)
    return selected


def _cmd_evaluate(args: argparse.Namespace, settings: SettingsManager) -> int:
    registry = DetectorRegistry()
    for det in builtin_detectors():
        registry.register(det)
    try:
        detectors = _select_detectors(registry, args.detector or settings.detector_names())
    except KeyError as e:
        logger.error("unknown detector %s (available: %s)", e, ", ".join(registry.names()))
        return 1
    if not detectors:
        logger.error("no detectors selected")
        return 1

    samples: List[RecordedSample]
    if args.samples:
        try:
            samples = load_samples(args.samples)
        except (OSError, ValueError) as e:
            logger.error("%s", e)
            return 1
    else:
        reader = AreaRecordReader()
        if not reader.is_valid(args.record):
            return 1
        samples = samples_from_areas(reader.read(args.record))
    if not samples:
        logger.error("no ground-truth samples to evaluate")
        return 1

    data_path = args.data or settings.data_path()
    runner = EvaluationRunner(registry, data_path)
    runner.evaluate_session(
        args.identifier or args.user,
        args.user,
        samples,
        detectors,
        draw_image=args.draw or settings.draw_images(),
    )
    best = runner.finalize(write_log=settings.write_log() and not args.no_log, plot_path=args.plot)
    print(best)
    return 0 if best != NO_DATA_NAME else 1


def _cmd_validate(args: argparse.Namespace) -> int:
    ok = AreaRecordReader().is_valid(args.record, schema_path=args.schema)
    print(f"{args.record}: {'valid' if ok else 'invalid'}")
    return 0 if ok else 1


def _cmd_areas(args: argparse.Namespace) -> int:
    areas = AreaRecordReader().read(args.record)
    for a in areas:
        print(f"{a.index}: start=({a.start.x:g},{a.start.y:g}) stop=({a.end.x:g},{a.end.y:g})")
    return 0 if areas else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        settings = SettingsManager(args.settings)
    except SettingsError as e:
        configure_logging(args.log_level or "INFO")
        logger.error("%s", e)
        return 1
    configure_logging(args.log_level or settings.log_level())

    if args.command == "evaluate":
        return _cmd_evaluate(args, settings)
    if args.command == "validate":
        return _cmd_validate(args)
    return _cmd_areas(args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
