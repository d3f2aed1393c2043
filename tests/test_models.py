"""Tests for the Point, segment and curve models."""

import math

import numpy as np
import pytest
from pydantic import ValidationError

from bezierfit.errors import UnsupportedSegmentError
from bezierfit.models import (
    Arc, BezierCurve, Cubic, Line, Point, Quadratic,
    arc, cubic, line, pt, quad, segment_from_points,
)


class TestPoint:
    """Tests for Point arithmetic and equality."""

    def test_epsilon_equality(self):
        """Points closer than 1e-10 per axis compare equal."""
        assert pt(1.0, 2.0) == pt(1.0 + 1e-12, 2.0 - 1e-12)
        assert pt(1.0, 2.0) != pt(1.001, 2.0)

    def test_is_close_with_tolerance(self):
        """is_close takes an explicit distance tolerance."""
        assert pt(0, 0).is_close(pt(0.05, 0.05), tol=0.1)
        assert not pt(0, 0).is_close(pt(0.05, 0.2), tol=0.1)

    def test_not_hashable(self):
        """Approximate equality rules out hashing."""
        with pytest.raises(TypeError):
            hash(pt(1, 2))

    def test_coerce_from_pair(self):
        """Pairs and arrays validate into points; triples do not."""
        assert Point.model_validate((3, 4)) == pt(3, 4)
        assert Point.model_validate(np.array([3.0, 4.0])) == pt(3, 4)
        with pytest.raises(ValidationError):
            Point.model_validate((1, 2, 3))

    def test_arithmetic(self):
        """Points support the vector operators."""
        a = pt(1, 2)
        b = pt(3, 4)
        assert a + b == pt(4, 6)
        assert b - a == pt(2, 2)
        assert a * 2 == pt(2, 4)
        assert 2 * a == pt(2, 4)
        assert b / 2 == pt(1.5, 2)
        assert -a == pt(-1, -2)

    def test_products_and_length(self):
        """Dot, cross, length and distance helpers."""
        assert pt(1, 2).dot(pt(3, 4)) == 11
        assert pt(1, 0).cross(pt(0, 1)) == 1
        assert pt(3, 4).length() == 5
        assert pt(3, 4).length_squared() == 25
        assert pt(0, 0).distance(pt(3, 4)) == 5
        assert pt(0, 0).distance_squared(pt(3, 4)) == 25

    def test_normalize(self):
        """Normalizing the zero vector gives the zero vector."""
        assert pt(3, 4).normalize() == pt(0.6, 0.8)
        assert pt(0, 0).normalize() == pt(0, 0)

    def test_lerp_and_angle(self):
        """lerp interpolates; angle is measured from the x axis."""
        assert pt(0, 0).lerp(pt(10, 20), 0.25) == pt(2.5, 5)
        assert pt(0, 1).angle() == pytest.approx(math.pi / 2)
        assert pt(-1, 0).angle() == pytest.approx(math.pi)

    def test_array_conversion(self):
        """Points convert to and from numpy arrays."""
        arr = pt(1.5, -2).as_array()
        assert arr.tolist() == [1.5, -2.0]
        assert Point.from_array(arr) == pt(1.5, -2)

    def test_str(self):
        """Points print with two decimals."""
        assert str(pt(1, 2.346)) == "(1.00, 2.35)"


class TestSegments:
    """Tests for the segment kinds."""

    def test_point_count_enforced(self):
        """Each kind accepts exactly its number of control points."""
        with pytest.raises(ValidationError):
            Line(points=((0, 0), (1, 1), (2, 2)))
        with pytest.raises(ValidationError):
            Cubic(points=((0, 0), (1, 1), (2, 2)))

    def test_endpoints_evaluate_exactly(self):
        """evaluate(0) is the first control point and evaluate(1) the last."""
        segments = [
            line((0, 0), (3, 4)),
            quad((0, 0), (1, 2), (2, 0)),
            cubic((0, 0), (1, 2), (2, 2), (3, 0)),
        ]
        for segment in segments:
            assert segment.evaluate(0.0) == segment.first_point
            assert segment.evaluate(1.0) == segment.last_point
            assert segment.point_at(1.0) == segment.last_point

    def test_tangent(self):
        """Segment tangents return points."""
        segment = cubic((0, 0), (1, 2), (2, 2), (3, 0))
        assert segment.tangent(0.0) == pt(3, 6)
        assert segment.tangent(1.0) == pt(3, -6)

    def test_split_returns_same_kind(self):
        """Splitting a quadratic gives two quadratics sharing the split point."""
        left, right = quad((0, 0), (1, 2), (2, 0)).split_at(0.5)
        assert isinstance(left, Quadratic)
        assert isinstance(right, Quadratic)
        assert left.last_point == right.first_point == pt(1, 1)

    def test_sampling(self):
        """Sampling at counts and at explicit t values."""
        segment = line((0, 0), (10, 0))
        points = segment.sample_points(3)
        assert points == [pt(0, 0), pt(5, 0), pt(10, 0)]
        assert segment.sample_points(0) == []
        assert segment.sample_points(1) == [pt(0, 0)]

        points, ts = segment.sample_at_t_values([0.2, 0.4])
        assert points == [pt(2, 0), pt(4, 0)]
        assert ts == [0.2, 0.4]

    def test_reversed(self):
        """Reversing a cubic reverses its control points."""
        segment = cubic((0, 0), (1, 2), (2, 2), (3, 0)).reversed()
        assert segment.points == (pt(3, 0), pt(2, 2), pt(1, 2), pt(0, 0))

    def test_nearest_point(self):
        """Segments delegate nearest-point queries."""
        point, t = line((0, 0), (10, 0)).nearest_point(pt(4, 3))
        assert point == pt(4, 0)
        assert t == pytest.approx(0.4)

    def test_str(self):
        """Segments print their points joined by arrows."""
        assert str(line((0, 0), (1, 1))) == "Line[(0.00, 0.00) -> (1.00, 1.00)]"

    def test_segment_from_points(self):
        """The control-point count chooses the segment kind."""
        assert isinstance(segment_from_points([(0, 0), (1, 1)]), Line)
        assert isinstance(segment_from_points([(0, 0), (1, 1), (2, 0)]), Quadratic)
        assert isinstance(segment_from_points(np.zeros((4, 2))), Cubic)
        with pytest.raises(UnsupportedSegmentError):
            segment_from_points([(0, 0)] * 5)


class TestArc:
    """Arcs are stored but have no geometry."""

    def test_math_is_unsupported(self):
        """Evaluation, tangents, splits and nearest points all refuse arcs."""
        segment = arc((0, 0), (10, 0), 5, 5, sweep=True)
        with pytest.raises(UnsupportedSegmentError):
            segment.evaluate(0.5)
        with pytest.raises(UnsupportedSegmentError):
            segment.tangent(0.5)
        with pytest.raises(UnsupportedSegmentError):
            segment.split_at(0.5)
        with pytest.raises(UnsupportedSegmentError):
            segment.nearest_point(pt(5, 5))

    def test_unsupported_is_value_error(self):
        """Unsupported operations are also ValueErrors."""
        with pytest.raises(ValueError):
            arc((0, 0), (10, 0), 5, 5).evaluate(0.0)

    def test_points_and_reversed(self):
        """An arc's points are its ends; reversing flips the sweep."""
        segment = arc((0, 0), (10, 0), 5, 5, sweep=True)
        assert segment.points == (pt(0, 0), pt(10, 0))
        flipped = segment.reversed()
        assert flipped.start == pt(10, 0)
        assert flipped.end == pt(0, 0)
        assert flipped.sweep is False


class TestBezierCurve:
    """Tests for curves."""

    def test_discriminated_union(self):
        """Segments validate into the kind named by their tag."""
        curve = BezierCurve.model_validate({
            "segments": [
                {"kind": "line", "points": [[0, 0], [1, 1]]},
                {"kind": "cubic", "points": [[1, 1], [2, 2], [3, 2], [4, 1]]},
                {"kind": "arc", "start": [4, 1], "end": [6, 1], "rx": 1, "ry": 1},
            ]
        })
        assert [type(s) for s in curve.segments] == [Line, Cubic, Arc]

    def test_empty_curve(self):
        """An empty curve has no end points and is open."""
        curve = BezierCurve.new([])
        assert len(curve) == 0
        assert not curve.is_closed
        assert curve.first_point is None
        assert curve.last_point is None

    def test_is_closed(self):
        """A curve is closed when it ends where it starts."""
        open_curve = BezierCurve.new([line((0, 0), (1, 0)), line((1, 0), (1, 1))])
        closed_curve = BezierCurve.new([
            line((0, 0), (1, 0)), line((1, 0), (1, 1)), line((1, 1), (0, 0)),
        ])
        assert not open_curve.is_closed
        assert closed_curve.is_closed

    def test_new_closed_appends_closing_line(self):
        """new_closed adds a line back to the start."""
        curve = BezierCurve.new_closed([line((0, 0), (1, 0)), line((1, 0), (1, 1))])
        assert len(curve) == 3
        assert curve.segments[-1] == line((1, 1), (0, 0))
        assert curve.is_closed

    def test_new_closed_keeps_closed_input(self):
        """new_closed leaves an already closed curve alone."""
        segments = [quad((0, 0), (1, 1), (2, 0)), quad((2, 0), (1, -1), (0, 0))]
        assert len(BezierCurve.new_closed(segments)) == 2

    def test_new_closed_empty(self):
        """new_closed returns None for no segments."""
        assert BezierCurve.new_closed([]) is None

    def test_split_segment(self):
        """split_segment replaces one segment with its halves."""
        curve = BezierCurve.new([line((0, 0), (10, 0)), line((10, 0), (10, 10))])
        split = curve.split_segment(0, 0.3)
        assert len(split) == 3
        assert split.segments[0].last_point == pt(3, 0)
        assert split.segments[1].first_point == pt(3, 0)
        with pytest.raises(IndexError):
            curve.split_segment(5, 0.5)

    def test_merged_undoes_splits(self):
        """merged rebuilds a cubic split twice."""
        original = cubic((0, 0), (1, 3), (3, 1), (4, 2))
        curve = BezierCurve.new([original]).split_segment(0, 0.3).split_segment(1, 0.6)
        assert len(curve) == 3

        merged = curve.merged()
        assert len(merged) == 1
        assert isinstance(merged.segments[0], Cubic)
        for got, expected in zip(merged.segments[0].points, original.points):
            assert got.is_close(expected, tol=1e-6)

    def test_merged_leaves_arcs_alone(self):
        """Arcs break a run of mergeable segments."""
        curve = BezierCurve.new([
            line((0, 0), (1, 0)),
            line((1, 0), (2, 0)),
            arc((2, 0), (4, 0), 1, 1),
            line((4, 0), (5, 0)),
            line((5, 0), (6, 0)),
        ])
        merged = curve.merged()
        assert [type(s) for s in merged.segments] == [Line, Arc, Line]
        assert merged.segments[0] == line((0, 0), (2, 0))
        assert merged.segments[2] == line((4, 0), (6, 0))

    def test_str_lists_segments(self):
        """A curve prints its segment count and each segment."""
        text = str(BezierCurve.new([line((0, 0), (1, 0))]))
        assert "1 segments" in text
        assert "Line[" in text
