"""Tests for Bezier evaluation, tangents and De Casteljau splitting."""

import numpy as np
import pytest

from bezierfit.errors import UnsupportedSegmentError
from bezierfit.fitting.least_squares import BERNSTEIN_MATRIX, polynomial_basis
from bezierfit.geometry.evaluation import (
    control_point_array, evaluate_bezier, evaluate_cubic, evaluate_quadratic,
    sample_uniform, tangent_at,
)
from bezierfit.geometry.split import split_bezier_at
from bezierfit.models import pt


class TestEvaluation:
    """Tests for Bernstein evaluation."""

    def test_endpoints(self, arch_cubic, simple_quadratic):
        """evaluate(0) and evaluate(1) hit the end control points."""
        for control in ([[0, 0], [3, 4]], simple_quadratic, arch_cubic):
            control = np.asarray(control, dtype=float)
            assert np.allclose(evaluate_bezier(control, 0.0), control[0], atol=1e-10)
            assert np.allclose(evaluate_bezier(control, 1.0), control[-1], atol=1e-10)

    def test_known_midpoints(self, arch_cubic, simple_quadratic):
        """Midpoints of simple line, quadratic and cubic segments."""
        assert np.allclose(evaluate_bezier([[0, 0], [4, 2]], 0.5), [2, 1])
        assert np.allclose(evaluate_quadratic(simple_quadratic, 0.5), [1, 1])
        assert np.allclose(evaluate_cubic(arch_cubic, 0.5), [1.5, 1.5])

    def test_array_of_t(self, arch_cubic):
        """An array of t values gives one point per row."""
        result = evaluate_bezier(arch_cubic, np.linspace(0, 1, 5))
        assert result.shape == (5, 2)
        assert np.allclose(result[2], [1.5, 1.5])

    def test_extrapolation_is_not_clamped(self, wavy_cubic):
        """t outside [0, 1] follows the polynomial."""
        assert np.allclose(evaluate_bezier([[0, 0], [1, 1]], 2.0), [2, 2])

        for t in (-1.0, -0.25, 1.5, 3.0):
            expected = polynomial_basis([t]) @ BERNSTEIN_MATRIX @ wavy_cubic
            assert np.allclose(evaluate_bezier(wavy_cubic, t), expected[0])

    def test_accepts_point_models(self):
        """Point models are accepted as control points."""
        result = evaluate_bezier([pt(0, 0), pt(2, 2)], 0.5)
        assert np.allclose(result, [1, 1])

    def test_unsupported_counts(self):
        """Counts outside {2, 3, 4} fail loudly."""
        with pytest.raises(UnsupportedSegmentError):
            evaluate_bezier([[0, 0]], 0.5)
        with pytest.raises(UnsupportedSegmentError):
            evaluate_bezier(np.zeros((5, 2)), 0.5)
        with pytest.raises(UnsupportedSegmentError):
            tangent_at(np.zeros((5, 2)), 0.5)
        with pytest.raises(UnsupportedSegmentError):
            evaluate_cubic(np.zeros((3, 2)), 0.5)

    def test_bad_shape(self):
        """Control points must be two-dimensional."""
        with pytest.raises(ValueError):
            control_point_array(np.zeros((4, 3)))

    def test_sample_uniform(self, arch_cubic):
        """Uniform sampling handles n of 4, 1 and 0."""
        points, ts = sample_uniform(arch_cubic, 4)
        assert ts.tolist() == pytest.approx([0, 1 / 3, 2 / 3, 1])
        assert points.shape == (4, 2)

        points, ts = sample_uniform(arch_cubic, 1)
        assert ts.tolist() == [0.0]
        assert np.allclose(points[0], arch_cubic[0])

        points, ts = sample_uniform(arch_cubic, 0)
        assert len(points) == 0


class TestTangent:
    """Tests for first derivatives."""

    def test_end_tangents(self, arch_cubic, simple_quadratic):
        """End tangents are n times the first and last control legs."""
        assert np.allclose(tangent_at([[0, 0], [3, 4]], 0.7), [3, 4])
        assert np.allclose(tangent_at(simple_quadratic, 0.0), [2, 4])
        assert np.allclose(tangent_at(simple_quadratic, 1.0), [2, -4])
        assert np.allclose(tangent_at(arch_cubic, 0.0), [3, 6])
        assert np.allclose(tangent_at(arch_cubic, 1.0), [3, -6])

    def test_matches_finite_difference(self, wavy_cubic, simple_quadratic):
        """Analytic tangents agree with central differences."""
        h = 1e-6
        for control in (wavy_cubic, simple_quadratic):
            for t in (0.1, 0.45, 0.8):
                numeric = (evaluate_bezier(control, t + h) - evaluate_bezier(control, t - h)) / (2 * h)
                assert np.allclose(tangent_at(control, t), numeric, atol=1e-5)


class TestSplit:
    """Tests for De Casteljau splitting."""

    @pytest.mark.parametrize("t", [0.1, 0.25, 0.5, 0.9])
    def test_halves_share_split_point(self, t, wavy_cubic, simple_quadratic):
        """left's last point is exactly right's first point."""
        for control in ([[0, 0], [6, 8]], simple_quadratic, wavy_cubic):
            left, right = split_bezier_at(control, t)
            assert np.array_equal(left[-1], right[0])
            assert np.array_equal(left[0], np.asarray(control, dtype=float)[0])
            assert np.array_equal(right[-1], np.asarray(control, dtype=float)[-1])

    def test_split_point_on_curve(self, wavy_cubic):
        """The split point lies on the original curve."""
        left, _ = split_bezier_at(wavy_cubic, 0.3)
        assert np.allclose(left[-1], evaluate_bezier(wavy_cubic, 0.3))

    def test_halves_trace_the_original(self, wavy_cubic):
        """Each half reparameterizes its part of the original curve."""
        t = 0.35
        left, right = split_bezier_at(wavy_cubic, t)
        for s in np.linspace(0, 1, 7):
            assert np.allclose(evaluate_bezier(left, s), evaluate_bezier(wavy_cubic, s * t))
            assert np.allclose(evaluate_bezier(right, s), evaluate_bezier(wavy_cubic, t + s * (1 - t)))

    def test_degree_preserved(self, simple_quadratic):
        """A quadratic splits into two quadratics with known controls."""
        left, right = split_bezier_at(simple_quadratic, 0.5)
        assert left.shape == (3, 2)
        assert right.shape == (3, 2)
        assert np.allclose(left, [[0, 0], [0.5, 1], [1, 1]])
        assert np.allclose(right, [[1, 1], [1.5, 1], [2, 0]])

    def test_unsupported_split(self):
        """Five control points cannot be split."""
        with pytest.raises(UnsupportedSegmentError):
            split_bezier_at(np.zeros((5, 2)), 0.5)
