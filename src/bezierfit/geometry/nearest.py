"""
Nearest-point queries against a single segment.

nearest_point is the search used by fitting: a uniform lookup table followed
by ternary refinement around the best sample. It finds a local minimum near
the best table entry, which is not guaranteed to be global on curves that
pass close to the target more than once.

closest_t_bisection is the cheaper interactive search used for snapping and
the perpendicular guide line.
"""

import numpy as np

from bezierfit.constants import (
    BISECTION_MAX_ITERATIONS,
    BISECTION_TOLERANCE,
    NEAREST_LUT_SIZE,
    NEAREST_REFINE_TOLERANCE,
)
from bezierfit.errors import SettingError
from bezierfit.geometry.evaluation import control_point_array, evaluate_bezier, tangent_at


def nearest_point(control_points, target, lut_size=NEAREST_LUT_SIZE, refine_tolerance=NEAREST_REFINE_TOLERANCE):
    """
    Find the point on the segment closest to target.

    Args:
        control_points: 2, 3 or 4 control points
        target: [x, y]
        lut_size: number of lookup table intervals (lut_size + 1 samples)
        refine_tolerance: refinement stops once the bracket is this narrow

    Returns:
        (point, t) with point as a (2,) array
    """
    if lut_size < 1:
        raise SettingError(f"Nearest-point lut_size must be at least 1, got {lut_size}")
    if not refine_tolerance > 0:
        raise SettingError(f"Nearest-point refine_tolerance must be positive, got {refine_tolerance}")

    p = control_point_array(control_points)
    target = np.asarray(target, dtype=float)

    table_t = np.arange(lut_size + 1) / lut_size
    distances = np.linalg.norm(evaluate_bezier(p, table_t) - target, axis=1)

    # argmin keeps the first minimum, matching a strict-less scan from t=0
    best_index = int(np.argmin(distances))
    best_t = float(table_t[best_index])
    best_distance = float(distances[best_index])

    left = max(best_t - 1.0 / lut_size, 0.0)
    right = min(best_t + 1.0 / lut_size, 1.0)

    while right - left > refine_tolerance:
        mid1 = left + (right - left) / 3.0
        mid2 = right - (right - left) / 3.0

        dist1 = float(np.linalg.norm(evaluate_bezier(p, mid1) - target))
        dist2 = float(np.linalg.norm(evaluate_bezier(p, mid2) - target))

        if dist1 < best_distance:
            best_distance = dist1
            best_t = mid1
            right = mid2
        elif dist2 < best_distance:
            best_distance = dist2
            best_t = mid2
            left = mid1
        else:
            left = mid1
            right = mid2

    return evaluate_bezier(p, best_t), best_t


def nearest_distances(control_points, samples, **kwargs):
    """Distance from each sample to its nearest point on the segment."""
    p = control_point_array(control_points)
    samples = control_point_array(samples)
    distances = np.empty(len(samples))
    for i, sample in enumerate(samples):
        point, _ = nearest_point(p, sample, **kwargs)
        distances[i] = np.linalg.norm(point - sample)
    return distances


def all_points_within_tolerance(control_points, samples, tolerance, **kwargs):
    """True when every sample lies within tolerance of the segment."""
    p = control_point_array(control_points)
    for sample in control_point_array(samples):
        point, _ = nearest_point(p, sample, **kwargs)
        if np.linalg.norm(point - sample) > tolerance:
            return False
    return True


def closest_t_bisection(control_points, target, max_iterations=BISECTION_MAX_ITERATIONS, tolerance=BISECTION_TOLERANCE):
    """
    Approximate the closest t by repeatedly halving [0, 1].

    Each step compares the points at one third and two thirds of the
    bracket and keeps the half on the closer side.
    """
    p = control_point_array(control_points)
    target = np.asarray(target, dtype=float)

    t_min = 0.0
    t_max = 1.0

    for _ in range(max_iterations):
        t_mid = (t_min + t_max) * 0.5
        if t_max - t_min < tolerance:
            return t_mid

        t1 = t_min + (t_max - t_min) * 0.333
        t2 = t_min + (t_max - t_min) * 0.667
        dist1 = float(np.sum((evaluate_bezier(p, t1) - target) ** 2))
        dist2 = float(np.sum((evaluate_bezier(p, t2) - target) ** 2))

        if dist1 < dist2:
            t_max = t_mid
        else:
            t_min = t_mid

    return (t_min + t_max) * 0.5


def perpendicular_line(control_points, target, length):
    """
    Endpoints of a guide line of the given length, centred on the closest
    point and perpendicular to the segment there.

    A zero tangent gives a degenerate line at the closest point.
    """
    p = control_point_array(control_points)
    t = closest_t_bisection(p, target)
    closest = evaluate_bezier(p, t)

    tangent = tangent_at(p, t)
    normal = np.array([-tangent[1], tangent[0]])
    norm = np.linalg.norm(normal)
    if norm > 0.0:
        normal = normal / norm

    half = length * 0.5
    return closest - normal * half, closest + normal * half
