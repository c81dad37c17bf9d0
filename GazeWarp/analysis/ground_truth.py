"""
Ground-truth area records.

A record lists numbered areas, each with the start and stop point of the
mouse gesture that marked it:

    <areas>
      <area>
        <number>3</number>
        <start><x>10</x><y>20</y></start>
        <stop><x>30</x><y>40</y></stop>
      </area>
    </areas>

Every area needs two companion files beside the record,
`Text<n>_normal.html` and `Text<n>_highlighted.html`. Areas without them are
skipped. Any malformed value aborts the whole read and yields an empty list,
so a truncated ground truth is never evaluated.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from lxml import etree  # type: ignore

from GazeWarp.analysis.samples import RecordedSample
from GazeWarp.utils.geometry import Point2D

logger = logging.getLogger(__name__)

SCHEMA_FILENAME = "PreparedTextPattern.xsd"
BUNDLED_SCHEMA = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schema", "areas.xsd")


@dataclass(frozen=True)
class GroundTruthArea:
    index: int
    start: Point2D
    end: Point2D

    @property
    def point(self) -> Point2D:
        return self.end


class Expect(Enum):
    NOTHING = "nothing"
    INDEX = "index"
    START = "start"
    STOP = "stop"


class RecordFormatError(ValueError):
    pass


def companion_paths(record_path: str, index: int) -> List[str]:
    folder = os.path.dirname(os.path.abspath(record_path))
    return [
        os.path.join(folder, f"Text{index}_normal.html"),
        os.path.join(folder, f"Text{index}_highlighted.html"),
    ]


class _AreaBuilder:
    """Forward state machine fed with element start/end events."""

    def __init__(self, record_path: str) -> None:
        self.record_path = record_path
        self.areas: List[GroundTruthArea] = []
        self._seen: set = set()
        self._reset()

    def _reset(self) -> None:
        self.expect = Expect.NOTHING
        self.index: Optional[int] = None
        self.coords: Dict[Expect, Dict[str, int]] = {Expect.START: {}, Expect.STOP: {}}

    def start(self, tag: str) -> None:
        if tag == "area":
            self._reset()
        elif tag == "number":
            self.expect = Expect.INDEX
        elif tag == "start":
            self.expect = Expect.START
        elif tag == "stop":
            self.expect = Expect.STOP

    def end(self, tag: str, text: Optional[str]) -> None:
        value = (text or "").strip()
        if tag == "number":
            index = _parse_int(value, self.record_path)
            if index < 0:
                raise RecordFormatError(f"negative area number {index}")
            self.index = index
            self.expect = Expect.NOTHING
        elif tag in ("x", "y"):
            if self.expect not in (Expect.START, Expect.STOP):
                raise RecordFormatError(f"coordinate <{tag}> outside <start>/<stop>")
            self.coords[self.expect][tag] = _parse_int(value, self.record_path)
        elif tag == "start":
            self.expect = Expect.NOTHING
        elif tag == "stop":
            self._complete()

    def _complete(self) -> None:
        start = self.coords[Expect.START]
        stop = self.coords[Expect.STOP]
        if self.index is None or len(start) != 2 or len(stop) != 2:
            raise RecordFormatError(f"incomplete area (number={self.index}, start={start}, stop={stop})")
        if self.index in self._seen:
            raise RecordFormatError(f"duplicate area number {self.index}")
        self._seen.add(self.index)

        missing = [p for p in companion_paths(self.record_path, self.index) if not os.path.exists(p)]
        if missing:
            logger.warning("area %d skipped, companion file(s) not found: %s", self.index, ", ".join(missing))
        else:
            self.areas.append(
                GroundTruthArea(
                    index=self.index,
                    start=Point2D(start["x"], start["y"]),
                    end=Point2D(stop["x"], stop["y"]),
                )
            )
        self._reset()


def _parse_int(value: str, record_path: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise RecordFormatError(f"parsing failed on {value!r} in {record_path}") from None


class AreaRecordReader:
    def read(self, path: str) -> List[GroundTruthArea]:
        """Read all areas of a record; [] if the record is malformed."""
        builder = _AreaBuilder(path)
        try:
            for event, elem in etree.iterparse(path, events=("start", "end")):
                tag = etree.QName(elem).localname
                if event == "start":
                    builder.start(tag)
                else:
                    builder.end(tag, elem.text)
                    if tag == "area":
                        elem.clear()
        except RecordFormatError as e:
            logger.warning("%s: %s", path, e)
            return []
        except (etree.XMLSyntaxError, OSError) as e:
            logger.warning("could not read %s: %s", path, e)
            return []
        return builder.areas

    def is_valid(self, path: str, schema_path: Optional[str] = None) -> bool:
        """Check the record against an XSD without reading its areas.

        Schema lookup: explicit path, then PreparedTextPattern.xsd beside the
        record, then the bundled schema.
        """
        if schema_path is None:
            sibling = os.path.join(os.path.dirname(os.path.abspath(path)), SCHEMA_FILENAME)
            schema_path = sibling if os.path.exists(sibling) else BUNDLED_SCHEMA
        if not os.path.exists(schema_path):
            logger.warning("schema not found: %s", schema_path)
            return False
        try:
            schema = etree.XMLSchema(etree.parse(schema_path))
            doc = etree.parse(path)
        except (etree.XMLSyntaxError, etree.XMLSchemaParseError, OSError) as e:
            logger.warning("%s could not be validated: %s", path, e)
            return False
        if not schema.validate(doc):
            logger.warning("%s is not valid: %s", path, schema.error_log.last_error)
            return False
        return True


def samples_from_areas(areas: List[GroundTruthArea], fixation: Optional[Point2D] = None) -> List[RecordedSample]:
    """One sample per area: screenshot keyed by area number, target = stop point."""
    return [
        RecordedSample(timestamp=a.index, fixation=fixation or a.start, mouse_point=a.end)
        for a in areas
    ]
