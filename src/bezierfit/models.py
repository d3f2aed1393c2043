"""
Pydantic data models for bezierfit.

Points, segments and curves are immutable values. Geometry and fitting code
works on raw (n, 2) numpy arrays; these models are the typed surface that
callers, the CLI and the text-format adapters exchange.
"""

import math
from typing import Annotated, List, Literal, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from bezierfit.constants import FLOAT_TOLERANCE, MERGE_TOLERANCE
from bezierfit.errors import UnsupportedSegmentError
from bezierfit.geometry.evaluation import evaluate_bezier, tangent_at
from bezierfit.geometry.merge import merge_sequential
from bezierfit.geometry.nearest import nearest_point
from bezierfit.geometry.split import split_bezier_at


class Point(BaseModel):
    """
    A 2D point / vector.

    Equality is approximate: two points are equal when both coordinates
    differ by less than FLOAT_TOLERANCE. Points are therefore not hashable.
    """
    x: float
    y: float

    model_config = ConfigDict(frozen=True)

    __hash__ = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_pair(cls, data):
        if isinstance(data, (list, tuple, np.ndarray)):
            if len(data) != 2:
                raise ValueError(f"Point needs exactly 2 coordinates, got {len(data)}")
            return {"x": float(data[0]), "y": float(data[1])}
        return data

    @classmethod
    def from_array(cls, arr):
        return cls(x=float(arr[0]), y=float(arr[1]))

    def as_array(self):
        return np.array([self.x, self.y], dtype=float)

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return self.is_close(other)

    def is_close(self, other, tol=FLOAT_TOLERANCE):
        return abs(self.x - other.x) < tol and abs(self.y - other.y) < tol

    def __add__(self, other):
        return Point(x=self.x + other.x, y=self.y + other.y)

    def __sub__(self, other):
        return Point(x=self.x - other.x, y=self.y - other.y)

    def __mul__(self, scalar):
        return Point(x=self.x * scalar, y=self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Point(x=self.x / scalar, y=self.y / scalar)

    def __neg__(self):
        return Point(x=-self.x, y=-self.y)

    def dot(self, other):
        return self.x * other.x + self.y * other.y

    def cross(self, other):
        """2D cross product (z component of the 3D cross product)."""
        return self.x * other.y - self.y * other.x

    def length_squared(self):
        return self.x * self.x + self.y * self.y

    def length(self):
        return math.hypot(self.x, self.y)

    def normalize(self):
        """Unit vector in the same direction. The zero vector stays zero."""
        length = self.length()
        if length == 0.0:
            return Point(x=0.0, y=0.0)
        return Point(x=self.x / length, y=self.y / length)

    def lerp(self, other, t):
        return Point(x=self.x + (other.x - self.x) * t, y=self.y + (other.y - self.y) * t)

    def angle(self):
        return math.atan2(self.y, self.x)

    def distance(self, other):
        return math.hypot(self.x - other.x, self.y - other.y)

    def distance_squared(self, other):
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def __str__(self):
        return f"({self.x:.2f}, {self.y:.2f})"


class _Segment(BaseModel):
    """Shared behaviour of the polynomial segment kinds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def first_point(self):
        return self.points[0]

    @property
    def last_point(self):
        return self.points[-1]

    def control_array(self):
        """Control points as an (n, 2) float array."""
        return np.array([(p.x, p.y) for p in self.points], dtype=float)

    def evaluate(self, t):
        return Point.from_array(evaluate_bezier(self.control_array(), t))

    point_at = evaluate

    def tangent(self, t):
        return Point.from_array(tangent_at(self.control_array(), t))

    def split_at(self, t):
        """De Casteljau split at t. Returns (left, right) of the same kind."""
        left, right = split_bezier_at(self.control_array(), t)
        return type(self).from_array(left), type(self).from_array(right)

    def nearest_point(self, target, **kwargs):
        """Closest point on the segment to target, as (Point, t)."""
        target = Point.model_validate(target)
        point, t = nearest_point(self.control_array(), target.as_array(), **kwargs)
        return Point.from_array(point), t

    def sample_points(self, num_points):
        """num_points points at uniformly spaced t in [0, 1]."""
        if num_points <= 0:
            return []
        if num_points == 1:
            return [self.first_point]
        t_values = np.linspace(0.0, 1.0, num_points)
        return [Point.from_array(p) for p in evaluate_bezier(self.control_array(), t_values)]

    def sample_at_t_values(self, t_values):
        t_values = [float(t) for t in t_values]
        if not t_values:
            return [], []
        points = evaluate_bezier(self.control_array(), np.array(t_values))
        return [Point.from_array(p) for p in points], t_values

    def reversed(self):
        return type(self)(points=tuple(reversed(self.points)))

    @classmethod
    def from_array(cls, arr):
        return cls(points=tuple(Point.from_array(p) for p in arr))

    def __str__(self):
        return f"{type(self).__name__}[" + " -> ".join(str(p) for p in self.points) + "]"


class Line(_Segment):
    """Straight segment between two points."""
    kind: Literal["line"] = "line"
    points: Tuple[Point, Point]


class Quadratic(_Segment):
    """Quadratic Bezier: start, control, end."""
    kind: Literal["quadratic"] = "quadratic"
    points: Tuple[Point, Point, Point]


class Cubic(_Segment):
    """Cubic Bezier: start, two controls, end."""
    kind: Literal["cubic"] = "cubic"
    points: Tuple[Point, Point, Point, Point]


class Arc(BaseModel):
    """
    SVG elliptical arc.

    Arcs are stored and exported but have no geometry: evaluate, tangent,
    split and nearest-point raise UnsupportedSegmentError.
    """
    kind: Literal["arc"] = "arc"
    start: Point
    end: Point
    rx: float
    ry: float
    angle: float = 0.0
    large_arc: bool = False
    sweep: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def points(self):
        return (self.start, self.end)

    @property
    def first_point(self):
        return self.start

    @property
    def last_point(self):
        return self.end

    def _unsupported(self, operation):
        return UnsupportedSegmentError(f"Arc segments do not support {operation}")

    def evaluate(self, t):
        raise self._unsupported("evaluate")

    point_at = evaluate

    def tangent(self, t):
        raise self._unsupported("tangent")

    def split_at(self, t):
        raise self._unsupported("split")

    def nearest_point(self, target, **kwargs):
        raise self._unsupported("nearest point")

    def sample_points(self, num_points):
        raise self._unsupported("sampling")

    def sample_at_t_values(self, t_values):
        raise self._unsupported("sampling")

    def reversed(self):
        return self.model_copy(update={"start": self.end, "end": self.start, "sweep": not self.sweep})

    def __str__(self):
        return (
            f"Arc[{self.start} -> {self.end}, rx={self.rx:g}, ry={self.ry:g}, "
            f"angle={self.angle:g}, large_arc={self.large_arc}, sweep={self.sweep}]"
        )


BezierSegment = Annotated[Union[Line, Quadratic, Cubic, Arc], Field(discriminator="kind")]

_KIND_BY_COUNT = {2: Line, 3: Quadratic, 4: Cubic}


def segment_from_points(points):
    """Build a Line, Quadratic or Cubic from 2, 3 or 4 control points."""
    points = [Point.model_validate(p) for p in points]
    kind = _KIND_BY_COUNT.get(len(points))
    if kind is None:
        raise UnsupportedSegmentError(f"Unsupported number of control points: {len(points)}")
    return kind(points=tuple(points))


class BezierCurve(BaseModel):
    """An ordered sequence of segments, possibly empty."""
    segments: Tuple[BezierSegment, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def new(cls, segments):
        return cls(segments=tuple(segments))

    @classmethod
    def new_closed(cls, segments):
        """
        Build a closed curve, appending a closing line if needed.

        Returns None for an empty segment list.
        """
        segments = list(segments)
        if not segments:
            return None

        first = segments[0].first_point
        last = segments[-1].last_point
        if first != last:
            segments.append(Line(points=(last, first)))

        return cls(segments=tuple(segments))

    @property
    def is_closed(self):
        if not self.segments:
            return False
        return self.segments[0].first_point == self.segments[-1].last_point

    @property
    def first_point(self) -> Optional[Point]:
        return self.segments[0].first_point if self.segments else None

    @property
    def last_point(self) -> Optional[Point]:
        return self.segments[-1].last_point if self.segments else None

    def __len__(self):
        return len(self.segments)

    def split_segment(self, index, t):
        """New curve with segments[index] replaced by its two halves at t."""
        if not 0 <= index < len(self.segments):
            raise IndexError(f"Segment index {index} out of range for {len(self.segments)} segments")

        left, right = self.segments[index].split_at(t)
        segments = list(self.segments)
        segments[index:index + 1] = [left, right]
        return BezierCurve(segments=tuple(segments))

    def merged(self, tolerance=MERGE_TOLERANCE):
        """
        Rejoin adjacent segments that are halves of one split segment.

        Runs of polynomial segments are merged independently; arcs are kept
        in place and never merged.
        """
        result: List = []
        run: List = []

        for segment in self.segments:
            if isinstance(segment, Arc):
                result.extend(_merge_run(run, tolerance))
                run = []
                result.append(segment)
            else:
                run.append(segment)
        result.extend(_merge_run(run, tolerance))

        return BezierCurve(segments=tuple(result))

    def __str__(self):
        lines = [f"BezierCurve ({len(self.segments)} segments{', closed' if self.is_closed else ''})"]
        for i, segment in enumerate(self.segments):
            lines.append(f"  {i}: {segment}")
        return "\n".join(lines)


def _merge_run(segments, tolerance):
    if len(segments) < 2:
        return list(segments)
    merged = merge_sequential([s.control_array() for s in segments], tolerance=tolerance)
    return [segment_from_points(arr) for arr in merged]


def pt(x, y):
    return Point(x=x, y=y)


def line(p0, p1):
    return Line(points=(p0, p1))


def quad(p0, p1, p2):
    return Quadratic(points=(p0, p1, p2))


def cubic(p0, p1, p2, p3):
    return Cubic(points=(p0, p1, p2, p3))


def arc(start, end, rx, ry, angle=0.0, large_arc=False, sweep=False):
    return Arc(start=start, end=end, rx=rx, ry=ry, angle=angle, large_arc=large_arc, sweep=sweep)
