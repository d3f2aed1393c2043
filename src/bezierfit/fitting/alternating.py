"""
Alternating least-squares fit of one cubic Bezier segment.

1. Initialize t with chord-length parameterization.
2. Solve the control points for fixed t (closed-form least squares).
3. Update t for the fixed control points, either by projecting every sample
   onto the curve or by one diagonal Gauss-Newton step.
4. Repeat until every sample lies within tolerance of the curve or the
   iteration budget is spent.

Neither update rule consistently converges faster than the other, so both
are kept and selected explicitly.
"""

from enum import Enum

import numpy as np

from bezierfit.errors import FitError
from bezierfit.fitting.least_squares import (
    adjust_t_values,
    gauss_newton_direction,
    residual_norm,
    solve_control_points,
)
from bezierfit.fitting.t_heuristic import estimate_t_values_chord_length
from bezierfit.geometry.evaluation import control_point_array
from bezierfit.geometry.nearest import all_points_within_tolerance, nearest_point
from bezierfit.models import Cubic
from bezierfit.tracer import get_tracer, trace


class TUpdateMethod(str, Enum):
    """How t values are re-estimated between control point solves."""
    NEAREST_POINT = "nearest_point"
    GAUSS_NEWTON = "gauss_newton"


def update_t_values_nearest_point(points, control_points):
    """t_i = parameter of the point on the curve closest to sample i."""
    return np.array([nearest_point(control_points, p)[1] for p in points])


def update_t_values_gauss_newton(points, t_values, control_points):
    """One Gauss-Newton step, clamped to [0, 1], ends pinned to 0 and 1."""
    delta_t = gauss_newton_direction(points, t_values, control_points)
    return adjust_t_values(np.clip(t_values + delta_t, 0.0, 1.0))


@trace(label="fit_cubic_bezier_alternating")
def fit_cubic_bezier_alternating(points, max_iterations, tolerance, update_method=TUpdateMethod.NEAREST_POINT):
    """
    Fit one cubic by alternating control point and t updates.

    Args:
        points: (n, 2) samples, n >= 4
        max_iterations: update rounds; 0 returns the initial least-squares fit
        tolerance: stop once every sample is this close to the curve
        update_method: TUpdateMethod or its string value

    Returns:
        Cubic segment

    Raises:
        FitError: too few points, singular solve or zero Gauss-Newton derivative
    """
    tracer = get_tracer()
    points = control_point_array(points)
    update_method = TUpdateMethod(update_method)

    if len(points) < 4:
        raise FitError(f"At least 4 points are required for cubic bezier fitting, got {len(points)}")

    t_values = estimate_t_values_chord_length(points)
    control = solve_control_points(points, t_values)

    if max_iterations == 0:
        return Cubic.from_array(control)

    iterations = 0
    converged = False
    for _ in range(max_iterations):
        if all_points_within_tolerance(control, points, tolerance):
            converged = True
            break

        if update_method == TUpdateMethod.NEAREST_POINT:
            t_values = update_t_values_nearest_point(points, control)
        else:
            t_values = update_t_values_gauss_newton(points, t_values, control)

        control = solve_control_points(points, t_values)
        iterations += 1

        tracer.event(
            f"iteration {iterations}",
            level="DEBUG",
            loss=residual_norm(points, t_values, control),
        )

    tracer.event(
        "Alternating fit finished",
        method=update_method.value,
        iterations=iterations,
        converged=converged,
    )
    return Cubic.from_array(control)


def fit_cubic_bezier_alternating_default(points, max_iterations, tolerance):
    """Alternating fit with nearest-point t updates."""
    return fit_cubic_bezier_alternating(points, max_iterations, tolerance, TUpdateMethod.NEAREST_POINT)
