"""
Plain-text evaluation report.

One block per session followed by one block for the whole run, appended to
`<data>/evaluation/evaluation.log`. Averages are rounded to two decimals.
`parse_report` reads the blocks back so a ranking can be recomputed from the
log alone.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from GazeWarp.analysis.aggregator import Ranking

SEPARATOR = "-" * 54
GLOBAL_HEADER = "- over all results for the session above -"

_SESSION_RE = re.compile(r"^Session: (?P<identifier>.*?) - User: (?P<user>.*), Timestamp: (?P<ts>-?\d+), Number of DataSets: (?P<n>\d+)$")
_GLOBAL_RE = re.compile(r"^Timestamp: (?P<ts>-?\d+), Number of DataSets overall: (?P<n>\d+)$")
_AVERAGE_RE = re.compile(r"^(?P<name>.+): (?P<avg>-?\d+(?:\.\d+)?) Pixel distance averaged\.$")
_BEST_RE = re.compile(r"^-> best result for (?P<name>.+)$")


def log_path(data_path: str) -> str:
    return os.path.join(data_path, "evaluation", "evaluation.log")


def _avg_line(name: str, average: float) -> str:
    return f"{name}: {round(average, 2)} Pixel distance averaged.\n"


def format_session(ranking: Ranking, name_of: Callable[[int], str]) -> str:
    stats = ranking.stats
    lines = [f"Session: {ranking.identifier} - User: {stats.user}, Timestamp: {stats.timestamp}, Number of DataSets: {stats.size}\n"]
    for det_id in stats.ids():
        lines.append(_avg_line(name_of(det_id), stats.average(det_id)))
    if ranking.best is not None:
        lines.append(f"-> best result for {name_of(ranking.best)}\n")
    lines.append("\n")
    return "".join(lines)


def format_global(ranking: Ranking, name_of: Callable[[int], str]) -> str:
    stats = ranking.stats
    lines = [
        f"{GLOBAL_HEADER}\n",
        f"Timestamp: {stats.timestamp}, Number of DataSets overall: {stats.size}\n",
    ]
    for det_id in stats.ids():
        lines.append(_avg_line(name_of(det_id), stats.average(det_id)))
    if ranking.best is not None:
        lines.append(f"-> best result for {name_of(ranking.best)}\n")
    lines.append(f"{SEPARATOR}\n\n\n")
    return "".join(lines)


def format_report(sessions: Sequence[Ranking], overall: Optional[Ranking], name_of: Callable[[int], str]) -> str:
    text = "".join(format_session(r, name_of) for r in sessions)
    if overall is not None:
        text += format_global(overall, name_of)
    return text


def append_report(path: str, text: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


@dataclass
class ReportBlock:
    kind: str  # "session" | "global"
    identifier: str
    user: str
    timestamp: int
    size: int
    averages: Dict[str, float] = field(default_factory=dict)
    best: Optional[str] = None

    def ranking(self) -> List[str]:
        """Detector names, best first.

        Averages are rounded in the log, so the recorded best wins a tie on the
        rounded value; other ties keep report order.
        """
        order = list(self.averages)
        return sorted(order, key=lambda n: (self.averages[n], n != self.best, order.index(n)))


def parse_report(text: str) -> List[ReportBlock]:
    blocks: List[ReportBlock] = []
    current: Optional[ReportBlock] = None
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line == SEPARATOR or line == GLOBAL_HEADER:
            continue
        m = _SESSION_RE.match(line)
        if m:
            current = ReportBlock("session", m.group("identifier"), m.group("user"), int(m.group("ts")), int(m.group("n")))
            blocks.append(current)
            continue
        m = _GLOBAL_RE.match(line)
        if m:
            current = ReportBlock("global", "", "", int(m.group("ts")), int(m.group("n")))
            blocks.append(current)
            continue
        if current is None:
            raise ValueError(f"report line outside a block: {line!r}")
        m = _BEST_RE.match(line)
        if m:
            current.best = m.group("name")
            continue
        m = _AVERAGE_RE.match(line)
        if m:
            current.averages[m.group("name")] = float(m.group("avg"))
            continue
        raise ValueError(f"unrecognised report line: {line!r}")
    return blocks
