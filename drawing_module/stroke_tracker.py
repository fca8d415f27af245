"""Freehand stroke accumulator fed by a noisy, intermittent point stream.

Each processed frame produces at most one detection: a normalized point, or
``None`` when nothing was found. The tracker scales detections to the render
surface and turns them into path instructions:

  - first point after a gap (or ever)  -> MoveTo  (pen down, new subpath)
  - point after a point                -> LineTo  (pen continues)
  - no detection                       -> None    (pen lifted)

The tracker is not thread-safe; feed it from one thread.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Union


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class MoveTo:
    """Start a new disjoint subpath at (x, y)."""

    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    """Extend the current subpath to (x, y)."""

    x: float
    y: float


Segment = Union[MoveTo, LineTo]
StrokeDelta = Union[MoveTo, LineTo, None]


class Stroke:
    """Append-only sequence of path segments."""

    def __init__(self, segments: Iterable[Segment] = ()) -> None:
        self._segments: list[Segment] = list(segments)

    def append(self, segment: Segment) -> None:
        self._segments.append(segment)

    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    def subpaths(self) -> list[list[tuple[float, float]]]:
        """Split the stroke into point lists, one per MoveTo."""
        paths: list[list[tuple[float, float]]] = []
        for seg in self._segments:
            if isinstance(seg, MoveTo) or not paths:
                paths.append([(seg.x, seg.y)])
            else:
                paths[-1].append((seg.x, seg.y))
        return paths

    def move_count(self) -> int:
        return sum(1 for seg in self._segments if isinstance(seg, MoveTo))

    def is_empty(self) -> bool:
        return not self._segments

    def copy(self) -> "Stroke":
        return Stroke(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(tuple(self._segments))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stroke):
            return NotImplemented
        return self._segments == other._segments

    def __repr__(self) -> str:
        return f"Stroke({self._segments!r})"


def _clamp_unit(value: float) -> float:
    return min(1.0, max(0.0, value))


def _valid_extent(value: float) -> bool:
    return math.isfinite(value) and value > 0


class StrokeTracker:
    """Turns per-frame optional detections into MoveTo/LineTo instructions."""

    def __init__(self) -> None:
        self._last_point: Point | None = None
        self._stroke = Stroke()

    @property
    def last_point(self) -> Point | None:
        """Last scaled point, or None while the pen is up."""
        return self._last_point

    @property
    def pen_down(self) -> bool:
        return self._last_point is not None

    def update(
        self, detection: Point | None, view_width: float, view_height: float
    ) -> StrokeDelta:
        """Feed one frame's detection; return what was appended to the stroke."""
        if (
            detection is None
            or not detection.is_finite()
            or not (_valid_extent(view_width) and _valid_extent(view_height))
        ):
            # Malformed input counts as a gap.
            self._last_point = None
            return None

        x = _clamp_unit(detection.x) * view_width
        y = _clamp_unit(detection.y) * view_height

        delta: Segment = MoveTo(x, y) if self._last_point is None else LineTo(x, y)
        self._stroke.append(delta)
        self._last_point = Point(x, y)
        return delta

    def reset(self) -> None:
        self._last_point = None
        self._stroke = Stroke()

    def current_stroke(self) -> Stroke:
        """Snapshot of the whole accumulated path, for a full repaint."""
        return self._stroke.copy()
