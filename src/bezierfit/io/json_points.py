"""
JSON point-list format.

A curve is a flat list of points, each {"x": .., "y": .., "on": bool} with
"on" defaulting to true. Reading left to right, every segment is an on-curve
point, zero to two off-curve points, then an on-curve point shared with the
next segment:

    on, on             quadratic with its control at the midpoint
    on, off, on        quadratic
    on, off, off, on   cubic
"""

import json
from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from bezierfit.errors import ParseError
from bezierfit.models import Arc, BezierCurve, Point, cubic, quad


class JsonPoint(BaseModel):
    """One entry of the JSON point list."""
    x: float
    y: float
    on: bool = Field(default=True)

    model_config = ConfigDict(extra="ignore")


_POINT_LIST = TypeAdapter(List[JsonPoint])


def parse_json_points(text):
    """
    Parse a JSON point list into a curve.

    Raises:
        ParseError: invalid JSON, an empty list, a list that starts or ends
            off-curve, or three off-curve points in a row
    """
    try:
        entries = _POINT_LIST.validate_json(text)
    except ValidationError as e:
        raise ParseError(f"JSON parse error: {e}") from e

    if not entries:
        raise ParseError("Empty points array")
    if not entries[0].on:
        raise ParseError("First point must be on-curve")
    if not entries[-1].on:
        raise ParseError("Last point must be on-curve")

    segments = []
    anchor = Point(x=entries[0].x, y=entries[0].y)
    controls = []

    for index, entry in enumerate(entries[1:], start=1):
        point = Point(x=entry.x, y=entry.y)
        if not entry.on:
            controls.append(point)
            if len(controls) > 2:
                raise ParseError(f"Too many consecutive off-curve points at index {index}")
            continue

        if not controls:
            segments.append(quad(anchor, anchor.lerp(point, 0.5), point))
        elif len(controls) == 1:
            segments.append(quad(anchor, controls[0], point))
        else:
            segments.append(cubic(anchor, controls[0], controls[1], point))

        anchor = point
        controls = []

    return BezierCurve.new(segments)


def _entry(point, on=True):
    return {"x": point.x, "y": point.y, "on": on}


def to_json_points(curve):
    """
    Export a curve as a JSON point list.

    Shared endpoints are written once and interior control points are
    marked off-curve. Lines and arcs contribute only their endpoints.
    """
    entries = []
    previous_end = None

    for segment in curve.segments:
        if previous_end is None or segment.first_point != previous_end:
            entries.append(_entry(segment.first_point))

        if not isinstance(segment, Arc):
            entries.extend(_entry(p, on=False) for p in segment.points[1:-1])

        entries.append(_entry(segment.last_point))
        previous_end = segment.last_point

    return json.dumps(entries)
