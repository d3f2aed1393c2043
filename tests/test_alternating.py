"""Tests for the alternating least squares fit."""

import numpy as np
import pytest

from bezierfit.errors import FitError
from bezierfit.fitting.alternating import (
    TUpdateMethod, fit_cubic_bezier_alternating, fit_cubic_bezier_alternating_default,
    update_t_values_gauss_newton, update_t_values_nearest_point,
)
from bezierfit.fitting.least_squares import (
    fit_cubic_bezier_default, residual_norm, solve_control_points,
)
from bezierfit.fitting.t_heuristic import estimate_t_values_chord_length
from bezierfit.geometry.nearest import nearest_distances
from bezierfit.models import Cubic


def initial_residual(samples):
    t_values = estimate_t_values_chord_length(samples)
    return residual_norm(samples, t_values, solve_control_points(samples, t_values))


def squared_error(control, samples, distances):
    return float(np.sum(distances(control, samples) ** 2))


class TestTUpdates:
    """Tests for the two t update rules."""

    def test_nearest_point_update(self, arch_cubic):
        """Each sample takes the t of its nearest point on the curve."""
        samples = [[0.0, 0.0], [1.5, 1.5], [3.0, 0.0]]
        t = update_t_values_nearest_point(samples, arch_cubic)
        assert t.tolist() == pytest.approx([0.0, 0.5, 1.0], abs=1e-3)

    def test_gauss_newton_update_pins_ends(self):
        """Interior t values move by the Newton step; the ends are pinned to 0 and 1."""
        control = np.array([[0, 0], [1, 0], [2, 0], [3, 0]], dtype=float)
        samples = [[0.3, 0.0], [1.5, 0.0], [2.4, 0.0], [2.7, 0.0]]
        t = update_t_values_gauss_newton(samples, np.array([0.2, 0.4, 0.7, 0.95]), control)
        assert t.tolist() == pytest.approx([0.0, 0.5, 0.8, 1.0])

    def test_gauss_newton_update_clamps(self):
        """Steps that overshoot the unit interval are clamped."""
        control = np.array([[0, 0], [1, 0], [2, 0], [3, 0]], dtype=float)
        samples = [[0, 0], [-3.0, 0.0], [6.0, 0.0], [3, 0]]
        t = update_t_values_gauss_newton(samples, np.array([0.0, 0.5, 0.5, 1.0]), control)
        assert t.tolist() == pytest.approx([0.0, 0.0, 1.0, 1.0])


class TestAlternatingFit:
    """Tests for the iterative fit."""

    @pytest.mark.parametrize("method", list(TUpdateMethod))
    def test_zero_iterations_is_least_squares(self, method, wavy_cubic, sampler):
        """With no iterations the initial chord-length fit is returned."""
        samples = sampler(wavy_cubic, 20)
        fitted = fit_cubic_bezier_alternating(samples, 0, 1e-3, method)
        assert fitted == fit_cubic_bezier_default(samples)

    def test_bounded_by_initial_residual(self, wavy_cubic, sampler, distances):
        """No sample ends up farther from the curve than the starting residual."""
        samples = sampler(wavy_cubic, 20)
        fitted = fit_cubic_bezier_alternating(samples, 20, 1e-6, TUpdateMethod.NEAREST_POINT)
        assert isinstance(fitted, Cubic)
        assert np.max(distances(fitted.control_array(), samples)) <= initial_residual(samples) + 1e-4

    def test_gauss_newton_stays_near_samples(self, wavy_cubic, sampler, distances):
        """Gauss-Newton updates keep the curve finite and close to the samples."""
        samples = sampler(wavy_cubic, 20)
        fitted = fit_cubic_bezier_alternating(samples, 20, 1e-6, TUpdateMethod.GAUSS_NEWTON)
        control = fitted.control_array()
        assert np.all(np.isfinite(control))
        assert np.max(distances(control, samples)) < 0.5

    def test_nearest_point_improves_fit(self, wavy_cubic, sampler, distances):
        """Any number of nearest-point rounds beats the initial fit."""
        samples = sampler(wavy_cubic, 20)
        initial = squared_error(fit_cubic_bezier_default(samples).control_array(), samples, distances)
        for iterations in (1, 5, 20):
            fitted = fit_cubic_bezier_alternating_default(samples, iterations, 1e-6)
            error = squared_error(fitted.control_array(), samples, distances)
            assert error < initial

    @pytest.mark.parametrize("method", list(TUpdateMethod))
    def test_error_never_increases_with_iterations(self, method, wavy_cubic, sampler):
        """Summed nearest-point error is non-increasing over 1..20 iterations."""
        samples = sampler(wavy_cubic, 20)
        errors = []
        for iterations in range(1, 21):
            fitted = fit_cubic_bezier_alternating(samples, iterations, 1e-6, method)
            errors.append(float(np.sum(nearest_distances(fitted.control_array(), samples))))

        for previous, current in zip(errors, errors[1:]):
            assert current <= previous

    def test_converged_input_returns_initial_fit(self, sampler):
        """Samples already within tolerance stop the loop before any update."""
        control = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])
        samples = sampler(control, 8)
        fitted = fit_cubic_bezier_alternating(samples, 10, 0.1)
        assert fitted == fit_cubic_bezier_default(samples)

    def test_method_by_name(self, rising_cubic, sampler):
        """The update method can be given by its string value."""
        samples = sampler(rising_cubic, 10)
        fitted = fit_cubic_bezier_alternating(samples, 3, 1e-3, "gauss_newton")
        assert isinstance(fitted, Cubic)

    def test_unknown_method(self, rising_cubic, sampler):
        """An unknown update method name raises ValueError."""
        with pytest.raises(ValueError):
            fit_cubic_bezier_alternating(sampler(rising_cubic, 10), 3, 1e-3, "newton")

    def test_too_few_points(self):
        """Three samples cannot determine a cubic."""
        with pytest.raises(FitError):
            fit_cubic_bezier_alternating([[0, 0], [1, 1], [2, 0]], 5, 1e-3)
