"""
Bezier evaluation and differentiation on raw control points.

All functions take control points as an (n, 2) array-like, or as a sequence
of Point models, and accept either a scalar t or an array of t values. With
a scalar t the result has shape (2,). With m t values it has shape (m, 2).
t is never clamped, so values outside [0, 1] extrapolate the polynomial.

Only lines (2 points), quadratics (3) and cubics (4) are defined. Any other
count raises UnsupportedSegmentError.
"""

import numpy as np

from bezierfit.errors import UnsupportedSegmentError


def control_point_array(control_points):
    """
    Convert control points to a float array of shape (n, 2).

    Accepts numpy arrays, sequences of [x, y] pairs, or objects with x and y
    attributes (Point models).
    """
    if isinstance(control_points, np.ndarray):
        arr = control_points.astype(float)
    else:
        arr = np.array(
            [(p.x, p.y) if hasattr(p, "x") else p for p in control_points],
            dtype=float,
        )

    if arr.size == 0:
        return arr.reshape(0, 2)

    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected control points of shape (n, 2), got {arr.shape}")

    return arr


def _unsupported(n):
    return UnsupportedSegmentError(f"Unsupported number of control points: {n}")


def _column(t):
    # (..., 1) so that t broadcasts against a (2,) point
    return np.asarray(t, dtype=float)[..., np.newaxis]


def evaluate_bezier(control_points, t):
    """
    Evaluate a line, quadratic or cubic Bezier segment at t.

    Args:
        control_points: 2, 3 or 4 control points
        t: scalar or array of curve parameters

    Returns:
        point(s) on the curve as a numpy array
    """
    p = control_point_array(control_points)
    n = len(p)

    if n == 2:
        return evaluate_linear(p, t)
    elif n == 3:
        return evaluate_quadratic(p, t)
    elif n == 4:
        return evaluate_cubic(p, t)

    raise _unsupported(n)


def evaluate_linear(control_points, t):
    """Linear interpolation p0 + t * (p1 - p0)."""
    p = control_point_array(control_points)
    if len(p) != 2:
        raise _unsupported(len(p))

    t = _column(t)
    return p[0] + t * (p[1] - p[0])


def evaluate_quadratic(control_points, t):
    """B(t) = (1-t)^2 p0 + 2(1-t)t p1 + t^2 p2"""
    p = control_point_array(control_points)
    if len(p) != 3:
        raise _unsupported(len(p))

    t = _column(t)
    mt = 1.0 - t
    return mt * mt * p[0] + 2.0 * mt * t * p[1] + t * t * p[2]


def evaluate_cubic(control_points, t):
    """B(t) = (1-t)^3 p0 + 3(1-t)^2 t p1 + 3(1-t) t^2 p2 + t^3 p3"""
    p = control_point_array(control_points)
    if len(p) != 4:
        raise _unsupported(len(p))

    t = _column(t)
    mt = 1.0 - t
    mt2 = mt * mt
    t2 = t * t
    return mt2 * mt * p[0] + 3.0 * mt2 * t * p[1] + 3.0 * mt * t2 * p[2] + t2 * t * p[3]


def tangent_at(control_points, t):
    """
    First derivative dB/dt of a line, quadratic or cubic segment.

    The result is not normalized. A line has a constant tangent p1 - p0.
    """
    p = control_point_array(control_points)
    n = len(p)
    t = _column(t)

    if n == 2:
        return (p[1] - p[0]) + 0.0 * t
    elif n == 3:
        return 2.0 * ((1.0 - t) * (p[1] - p[0]) + t * (p[2] - p[1]))
    elif n == 4:
        mt = 1.0 - t
        return 3.0 * (
            mt * mt * (p[1] - p[0])
            + 2.0 * mt * t * (p[2] - p[1])
            + t * t * (p[3] - p[2])
        )

    raise _unsupported(n)


def sample_uniform(control_points, num_points):
    """
    Sample num_points points at uniformly spaced t in [0, 1].

    Returns (points, t_values) as numpy arrays.
    """
    if num_points <= 0:
        return np.zeros((0, 2)), np.zeros(0)

    if num_points == 1:
        t_values = np.zeros(1)
    else:
        t_values = np.linspace(0.0, 1.0, num_points)

    return evaluate_bezier(control_points, t_values), t_values
