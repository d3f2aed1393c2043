"""
Closed-form least-squares fitting of one cubic Bezier segment.

With the sample parameters t fixed, the control points P minimizing
sum ||B(t_i; P) - p_i||^2 solve the normal equations (A^T A) P = A^T D,
where A = C(t) M, C(t) is the n x 4 power basis [1, t, t^2, t^3] and M is the
cubic Bernstein coefficient matrix. x and y are solved independently.

This module also holds the pieces shared by the iterative fits: the residual
vector, the Gauss-Newton direction for t and the endpoint adjustment of t.
"""

import numpy as np

from bezierfit.errors import FitError
from bezierfit.fitting.t_heuristic import THeuristic, estimate_t_values
from bezierfit.geometry.evaluation import control_point_array
from bezierfit.models import Cubic
from bezierfit.tracer import get_tracer, trace

# Rows are the power-basis coefficients of the four Bernstein polynomials
BERNSTEIN_MATRIX = np.array([
    [1.0, 0.0, 0.0, 0.0],
    [-3.0, 3.0, 0.0, 0.0],
    [3.0, -6.0, 3.0, 0.0],
    [-1.0, 3.0, -3.0, 1.0],
])


def polynomial_basis(t_values):
    """n x 4 matrix with rows [1, t, t^2, t^3]."""
    t = np.asarray(t_values, dtype=float)
    return np.column_stack([np.ones_like(t), t, t * t, t * t * t])


def polynomial_basis_derivative(t_values):
    """n x 4 matrix with rows [0, 1, 2t, 3t^2]."""
    t = np.asarray(t_values, dtype=float)
    return np.column_stack([np.zeros_like(t), np.ones_like(t), 2.0 * t, 3.0 * t * t])


def _check_inputs(points, t_values):
    if len(points) < 4:
        raise FitError(f"At least 4 points are required for cubic bezier fitting, got {len(points)}")
    if len(points) != len(t_values):
        raise FitError(f"Number of points ({len(points)}) must match number of t values ({len(t_values)})")


def solve_control_points(points, t_values):
    """
    Solve for the four cubic control points given fixed t values.

    If the solved end point is closer to the first sample than the solved
    start point, the control points are reversed so the segment runs in the
    same direction as the samples.

    Args:
        points: (n, 2) samples, n >= 4
        t_values: n curve parameters

    Returns:
        (4, 2) array of control points

    Raises:
        FitError: too few points, count mismatch or singular normal matrix
    """
    points = control_point_array(points)
    t_values = np.asarray(t_values, dtype=float)
    _check_inputs(points, t_values)

    a = polynomial_basis(t_values) @ BERNSTEIN_MATRIX
    ata = a.T @ a

    if np.linalg.matrix_rank(ata) < 4:
        raise FitError("Could not compute matrix inverse for least squares solve: A^T A is singular")
    try:
        ata_inv = np.linalg.inv(ata)
    except np.linalg.LinAlgError as e:
        raise FitError(f"Could not compute matrix inverse for least squares solve: {e}") from e

    control = ata_inv @ (a.T @ points)

    start = points[0]
    if np.linalg.norm(start - control[3]) < np.linalg.norm(start - control[0]):
        control = control[::-1].copy()

    return control


def compute_residual(points, t_values, control_points):
    """
    Residual vector [B_x(t_0) - x_0, B_y(t_0) - y_0, B_x(t_1) - x_1, ...].

    Returns a vector of length 2n.
    """
    points = control_point_array(points)
    control = control_point_array(control_points)
    predicted = polynomial_basis(t_values) @ BERNSTEIN_MATRIX @ control
    return (predicted - points).reshape(-1)


def residual_norm(points, t_values, control_points):
    return float(np.linalg.norm(compute_residual(points, t_values, control_points)))


def gauss_newton_direction(points, t_values, control_points):
    """
    Gauss-Newton step for the t values with the control points held fixed.

    Each t_i only moves its own residual pair, so J^T J is diagonal with
    entries |B'(t_i)|^2 and the step is solved per sample.

    Raises:
        FitError: B'(t_i) is zero for some sample
    """
    points = control_point_array(points)
    control = control_point_array(control_points)

    derivative = polynomial_basis_derivative(t_values) @ BERNSTEIN_MATRIX @ control
    residual = compute_residual(points, t_values, control).reshape(-1, 2)

    jtj = np.sum(derivative * derivative, axis=1)
    jtr = np.sum(derivative * residual, axis=1)

    if np.any(jtj == 0.0):
        raise FitError("Failed to solve linear system for the Gauss-Newton delta t: zero derivative")

    return -jtr / jtj


def adjust_t_values(t_values):
    """Copy of t_values with the first forced to 0 and the last to 1."""
    adjusted = np.array(t_values, dtype=float)
    if len(adjusted) == 0:
        return adjusted
    adjusted[0] = 0.0
    adjusted[-1] = 1.0
    return adjusted


@trace(label="fit_cubic_bezier_with_heuristic")
def fit_cubic_bezier_with_heuristic(points, heuristic=THeuristic.CHORD_LENGTH):
    """
    Fit one cubic to the samples with t estimated by a heuristic.

    Returns:
        Cubic segment
    """
    points = control_point_array(points)
    if len(points) < 4:
        raise FitError(f"At least 4 points are required for cubic bezier fitting, got {len(points)}")

    t_values = estimate_t_values(points, heuristic)
    control = solve_control_points(points, t_values)

    get_tracer().event(
        "Least squares fit",
        level="DEBUG",
        heuristic=THeuristic(heuristic).value,
        loss=residual_norm(points, t_values, control),
    )
    return Cubic.from_array(control)


def fit_cubic_bezier_default(points):
    """Least squares fit with chord-length t values."""
    return fit_cubic_bezier_with_heuristic(points, THeuristic.CHORD_LENGTH)
