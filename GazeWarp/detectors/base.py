"""
Detector contract and registry.

A detector estimates the on-screen target inside a screenshot. Detectors are
opaque to the evaluator: it only needs `analyse`, a display name and the id
the registry assigned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Protocol

import numpy as np  # type: ignore

from GazeWarp.utils.geometry import Point2D

logger = logging.getLogger(__name__)


@dataclass
class DetectorInfo:
    display_name: str
    description: str = ""
    id: int = -1  # set once by DetectorRegistry.register


class Detector(Protocol):
    info: DetectorInfo

    def analyse(self, image: np.ndarray) -> Point2D:
        """Return the estimated target in image pixel coordinates."""
        ...


def display_name(detector: Detector) -> str:
    return detector.info.display_name


def stable_id(detector: Detector) -> int:
    return detector.info.id


class DetectorRegistry:
    """Assigns sequential ids; an id is never handed out twice."""

    def __init__(self) -> None:
        self._detectors: Dict[int, Detector] = {}
        self._next_id = 0

    def register(self, detector: Detector) -> int:
        if detector.info.id in self._detectors and self._detectors[detector.info.id] is detector:
            return detector.info.id
        detector.info.id = self._next_id
        self._detectors[self._next_id] = detector
        self._next_id += 1
        logger.debug("registered detector %r as id %d", detector.info.display_name, detector.info.id)
        return detector.info.id

    def unregister(self, detector_id: int) -> None:
        self._detectors.pop(detector_id, None)

    def get(self, detector_id: int) -> Detector:
        return self._detectors[detector_id]

    def find(self, name: str) -> Optional[Detector]:
        for det in self:
            if det.info.display_name.lower() == name.strip().lower():
                return det
        return None

    def name_of(self, detector_id: int) -> str:
        return self._detectors[detector_id].info.display_name

    def __contains__(self, detector_id: object) -> bool:
        return detector_id in self._detectors

    def __iter__(self) -> Iterator[Detector]:
        for key in sorted(self._detectors):
            yield self._detectors[key]

    def __len__(self) -> int:
        return len(self._detectors)

    def names(self) -> List[str]:
        return [d.info.display_name for d in self]
