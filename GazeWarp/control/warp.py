"""
Mouse warp decision engine.

Watches the recent mouse trace and the latest fixation and decides whether the
user is performing a deliberate gesture towards the gaze target. If so, a
WarpEvent tells the caller to place the cursor at the fixation.

Gates, evaluated in ascending cost:
  1. cursor already inside the home radius of the fixation -> no warp
  2. the trace does not approach the fixation -> no warp
  3. the trace is shorter than the distance threshold -> no warp
  4. the trace direction deviates from start->fixation by more than the
     angle threshold -> no warp

The engine core is a pure function over an immutable WarpState; MouseWarper
wraps it for callers that prefer a stateful object.
"""
from __future__ import annotations

import bisect
import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from GazeWarp.control.events import TimedSample, WarpEvent
from GazeWarp.utils.geometry import Point2D, angle_between_deg, point_towards

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WarpConfig:
    angle_threshold_deg: float = 10.0
    distance_threshold: float = 200.0
    duration_threshold_ms: int = 200
    home_radius: float = 200.0
    # distance from the fixation to the actual warp target, 0 = on the fixation
    set_radius: float = 0.0


@dataclass(frozen=True)
class WarpWindow:
    """Timestamp-ordered mouse trace, oldest first."""
    samples: Tuple[TimedSample, ...] = ()

    def __len__(self) -> int:
        return len(self.samples)

    def is_empty(self) -> bool:
        return not self.samples

    @property
    def oldest(self) -> TimedSample:
        return self.samples[0]

    @property
    def newest(self) -> TimedSample:
        return self.samples[-1]

    def span_ms(self) -> int:
        if not self.samples:
            return 0
        return self.newest.timestamp_ms - self.oldest.timestamp_ms

    def insert(self, sample: TimedSample) -> "WarpWindow":
        # keyed by timestamp: a sample at an existing timestamp replaces it
        keys = [s.timestamp_ms for s in self.samples]
        i = bisect.bisect_left(keys, sample.timestamp_ms)
        items = list(self.samples)
        if i < len(items) and items[i].timestamp_ms == sample.timestamp_ms:
            items[i] = sample
        else:
            items.insert(i, sample)
        return WarpWindow(tuple(items))

    def pruned(self, duration_ms: int) -> "WarpWindow":
        if not self.samples:
            return self
        cutoff = self.newest.timestamp_ms - int(duration_ms)
        kept = tuple(s for s in self.samples if s.timestamp_ms >= cutoff)
        return WarpWindow(kept)


@dataclass(frozen=True)
class WarpState:
    fixation: Optional[Point2D] = None
    window: WarpWindow = field(default_factory=WarpWindow)
    # start of the current unbroken trace; re-armed whenever pruning leaves a
    # single sample. The engine is warm once the trace spans a full duration
    # threshold
    armed_since_ms: Optional[int] = None


def set_fixation(state: WarpState, fixation: Optional[Point2D]) -> WarpState:
    """Latest fixation wins; the mouse trace is untouched."""
    return replace(state, fixation=fixation)


def reset(state: WarpState) -> WarpState:
    return WarpState()


def step(
    config: WarpConfig,
    state: WarpState,
    timestamp_ms: int,
    position: Point2D,
) -> Tuple[WarpState, Optional[WarpEvent]]:
    """Feed one mouse sample; return the next state and an optional decision."""
    timestamp_ms = int(timestamp_ms)
    window = state.window.insert(TimedSample(timestamp_ms, position)).pruned(config.duration_threshold_ms)
    armed = state.armed_since_ms
    if armed is None or len(window) == 1:
        # fresh trace or everything older fell out after a pause
        armed = window.oldest.timestamp_ms
    else:
        armed = min(armed, window.oldest.timestamp_ms)
    state = replace(state, window=window, armed_since_ms=armed)

    fixation = state.fixation
    if fixation is None:
        return state, None
    if window.newest.timestamp_ms - armed < config.duration_threshold_ms:
        return state, None

    start = window.oldest.position
    stop = window.newest.position

    distance_stop_fix = stop.distance_to(fixation)
    if distance_stop_fix < config.home_radius:
        return state, None

    distance_start_fix = start.distance_to(fixation)
    if distance_start_fix <= distance_stop_fix:
        return state, None

    if stop.distance_to(start) < config.distance_threshold:
        return state, None

    angle = angle_between_deg(start, stop, fixation)
    if angle > config.angle_threshold_deg:
        return state, None

    target = fixation
    if config.set_radius > 0:
        target = point_towards(fixation, stop, config.set_radius)

    event = WarpEvent(target=target, fixation=fixation, angle_deg=angle, timestamp_ms=timestamp_ms)
    logger.debug("warp to %s (angle %.2f deg, trace %d samples)", target, angle, len(window))
    return WarpState(), event


class MouseWarper:
    """Stateful wrapper around `step` for a single input-sampling loop.

    Updates are serialized with a lock so the sampling loop and a fixation
    callback on another thread cannot interleave.
    """

    def __init__(self, config: Optional[WarpConfig] = None) -> None:
        self.config = config or WarpConfig()
        self._state = WarpState()
        self._lock = threading.Lock()

    @property
    def state(self) -> WarpState:
        return self._state

    def set_fixation_point(self, fixation: Optional[Point2D]) -> None:
        with self._lock:
            self._state = set_fixation(self._state, fixation)

    def add_mouse_position(self, timestamp_ms: int, position: Point2D) -> Optional[WarpEvent]:
        with self._lock:
            self._state, event = step(self.config, self._state, timestamp_ms, position)
        return event

    def reset(self) -> None:
        with self._lock:
            self._state = reset(self._state)
