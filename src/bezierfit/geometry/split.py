"""De Casteljau splitting of line, quadratic and cubic segments."""

import numpy as np

from bezierfit.errors import UnsupportedSegmentError
from bezierfit.geometry.evaluation import control_point_array


def _lerp(a, b, t):
    return a + (b - a) * t


def split_linear(control_points, t):
    p = control_point_array(control_points)
    mid = _lerp(p[0], p[1], t)
    return np.array([p[0], mid]), np.array([mid, p[1]])


def split_quadratic(control_points, t):
    p = control_point_array(control_points)
    p01 = _lerp(p[0], p[1], t)
    p12 = _lerp(p[1], p[2], t)
    mid = _lerp(p01, p12, t)
    return np.array([p[0], p01, mid]), np.array([mid, p12, p[2]])


def split_cubic(control_points, t):
    p = control_point_array(control_points)
    p01 = _lerp(p[0], p[1], t)
    p12 = _lerp(p[1], p[2], t)
    p23 = _lerp(p[2], p[3], t)
    p012 = _lerp(p01, p12, t)
    p123 = _lerp(p12, p23, t)
    mid = _lerp(p012, p123, t)
    return np.array([p[0], p01, p012, mid]), np.array([mid, p123, p23, p[3]])


def split_bezier_at(control_points, t):
    """
    Split a segment at t with De Casteljau's algorithm.

    The split point is computed once and shared, so left[-1] and right[0]
    are identical. The original endpoints are copied through unchanged.

    Returns:
        (left, right) control point arrays of the same degree
    """
    p = control_point_array(control_points)
    n = len(p)

    if n == 2:
        return split_linear(p, t)
    elif n == 3:
        return split_quadratic(p, t)
    elif n == 4:
        return split_cubic(p, t)

    raise UnsupportedSegmentError(f"Unsupported number of control points: {n}")
