"""
Running error statistics per evaluation identifier and over the whole run.

Each identifier (usually one recorded session) gets its own DetectorStats the
first time an observation arrives for it; the global stats are created the
same way on the first observation of the run. Averages are pooled sums over
observations, never averages of per-session averages.

Ties on the average go to the lowest detector id.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# Sentinel for "no observations"; deliberately not a valid detector id.
NO_DATA = None


@dataclass
class _Accumulator:
    total: float = 0.0
    count: int = 0
    distances: List[float] = field(default_factory=list)

    def add(self, distance: float) -> None:
        self.total += float(distance)
        self.count += 1
        self.distances.append(float(distance))


class DetectorStats:
    def __init__(self, user: str = "", timestamp: int = 0) -> None:
        self.user = user
        self.timestamp = int(timestamp)
        self._acc: Dict[int, _Accumulator] = {}

    @classmethod
    def seeded(cls, detector_id: int, distance: float, user: str = "", timestamp: int = 0) -> "DetectorStats":
        stats = cls(user=user, timestamp=timestamp)
        stats.add(detector_id, distance)
        return stats

    def add(self, detector_id: int, distance: float) -> None:
        acc = self._acc.get(detector_id)
        if acc is None:
            acc = _Accumulator()
            self._acc[detector_id] = acc
        acc.add(distance)

    def has(self, detector_id: int) -> bool:
        acc = self._acc.get(detector_id)
        return acc is not None and acc.count > 0

    def average(self, detector_id: int) -> float:
        """Mean distance for `detector_id`; KeyError if it has no data."""
        acc = self._acc[detector_id]
        if acc.count == 0:
            raise KeyError(detector_id)
        return acc.total / acc.count

    def count(self, detector_id: int) -> int:
        acc = self._acc.get(detector_id)
        return acc.count if acc is not None else 0

    def distances(self, detector_id: int) -> List[float]:
        acc = self._acc.get(detector_id)
        return list(acc.distances) if acc is not None else []

    def ids(self) -> List[int]:
        return sorted(k for k, acc in self._acc.items() if acc.count > 0)

    @property
    def size(self) -> int:
        return sum(acc.count for acc in self._acc.values())

    def is_empty(self) -> bool:
        return self.size == 0


def best_detector(stats: Optional[DetectorStats]) -> Optional[int]:
    if stats is None or stats.is_empty():
        return NO_DATA
    best_key: Optional[int] = NO_DATA
    best_value = float("inf")
    for key in stats.ids():
        value = stats.average(key)
        if value < best_value:
            best_key = key
            best_value = value
    return best_key


def rank(stats: Optional[DetectorStats]) -> List[Tuple[int, float]]:
    """(detector_id, average) pairs, best first; ties by ascending id."""
    if stats is None:
        return []
    return sorted(((k, stats.average(k)) for k in stats.ids()), key=lambda kv: (kv[1], kv[0]))


@dataclass
class Ranking:
    identifier: str
    stats: DetectorStats
    averages: List[Tuple[int, float]]
    best: Optional[int]


class ResultAggregator:
    def __init__(self) -> None:
        self._sessions: Dict[str, DetectorStats] = {}
        self._global: Optional[DetectorStats] = None
        self._lock = threading.Lock()

    def record_session(self, session_id: str, detector_id: int, distance: float, user: str = "", timestamp: int = 0) -> None:
        with self._lock:
            stats = self._sessions.get(session_id)
            if stats is None:
                self._sessions[session_id] = DetectorStats.seeded(detector_id, distance, user=user, timestamp=timestamp)
            else:
                stats.add(detector_id, distance)

    def record_global(self, detector_id: int, distance: float, user: str = "", timestamp: int = 0) -> None:
        with self._lock:
            if self._global is None:
                self._global = DetectorStats.seeded(detector_id, distance, user=user, timestamp=timestamp)
            else:
                self._global.add(detector_id, distance)

    def record(self, session_id: str, detector_id: int, distance: float, user: str = "", timestamp: int = 0) -> None:
        self.record_global(detector_id, distance, user=user, timestamp=timestamp)
        self.record_session(session_id, detector_id, distance, user=user, timestamp=timestamp)

    def session(self, session_id: str) -> Optional[DetectorStats]:
        return self._sessions.get(session_id)

    def session_ids(self) -> List[str]:
        return list(self._sessions)

    @property
    def global_stats(self) -> Optional[DetectorStats]:
        return self._global

    def is_empty(self) -> bool:
        return self._global is None or self._global.is_empty()

    def rankings(self) -> Tuple[List[Ranking], Optional[Ranking]]:
        """Per-session rankings in first-seen order, then the pooled one."""
        with self._lock:
            sessions = [
                Ranking(sid, stats, rank(stats), best_detector(stats))
                for sid, stats in self._sessions.items()
            ]
            overall = None
            if self._global is not None:
                overall = Ranking("", self._global, rank(self._global), best_detector(self._global))
        return sessions, overall
