"""
Inverse of De Casteljau splitting.

Given two same-degree segments that are presumed to be the halves of one
split segment, recover the split parameter and the original control points.
Merging is a question, not a command: when the pair is not a clean split of
one segment the functions return None and emit a DEBUG event that names the
failed check.
"""

import math

import numpy as np

from bezierfit.constants import MERGE_TOLERANCE
from bezierfit.geometry.evaluation import control_point_array
from bezierfit.tracer import get_tracer, trace


def _angle(v):
    return math.atan2(v[1], v[0])


def _angle_difference(a, b):
    """Difference of two angles wrapped to [-pi, pi]."""
    diff = a - b
    return (diff + math.pi) % (2.0 * math.pi) - math.pi


def _reject(reason, **meta):
    get_tracer().event(f"merge rejected: {reason}", level="DEBUG", **meta)
    return None


def merge_split_beziers(left, right, tolerance=MERGE_TOLERANCE):
    """
    Reconstruct the segment that split into left and right.

    Args:
        left: control points of the first half
        right: control points of the second half
        tolerance: C0 gap, slope, angle and control-point agreement tolerance

    Returns:
        (n, 2) array of the original control points, or None
    """
    a = control_point_array(left)
    b = control_point_array(right)

    if len(a) != len(b):
        return _reject("degree mismatch", left=len(a), right=len(b))

    n = len(a)
    if n not in (2, 3, 4):
        return _reject("unsupported degree", points=n)

    gap = float(np.linalg.norm(a[-1] - b[0]))
    if gap > tolerance:
        return _reject("C0 gap", gap=gap)

    if n == 2:
        return _merge_linear(a, b, tolerance)
    elif n == 3:
        return _merge_quadratic(a, b, tolerance)
    return _merge_cubic(a, b, tolerance)


def _slope(leg):
    dx = float(leg[1][0] - leg[0][0])
    return float(leg[1][1] - leg[0][1]) / dx if dx != 0.0 else math.inf


def _merge_linear(a, b, tolerance):
    # both halves vertical
    if abs(a[1][0] - a[0][0]) < tolerance and abs(b[1][0] - b[0][0]) < tolerance:
        return np.array([a[0], b[1]])

    slope_a = _slope(a)
    slope_b = _slope(b)
    if not abs(slope_a - slope_b) <= tolerance:
        return _reject("slope mismatch", left=slope_a, right=slope_b)

    return np.array([a[0], b[1]])


def _split_parameter(inner_left, inner_right, tolerance):
    """
    Recover t from the two control legs that meet at the split point.

    inner_left is the last leg of the left half, inner_right the first leg
    of the right half. Both are parallel to the original tangent at t and
    their lengths are in ratio t : (1 - t).
    """
    diff = _angle_difference(_angle(inner_left), _angle(inner_right))
    if abs(diff) > tolerance:
        return _reject("angle mismatch", diff=diff)

    len_left = float(np.linalg.norm(inner_left))
    len_right = float(np.linalg.norm(inner_right))
    total = len_left + len_right
    if total == 0.0:
        return _reject("zero-length control legs")

    t = len_left / total
    if t <= 0.0 or t >= 1.0:
        return _reject("degenerate split parameter", t=t)

    return t


def _merge_quadratic(a, b, tolerance):
    t = _split_parameter(a[2] - a[1], b[1] - b[0], tolerance)
    if t is None:
        return None

    p1 = a[0] + (a[1] - a[0]) / t
    return np.array([a[0], p1, b[2]])


def _merge_cubic(a, b, tolerance):
    t = _split_parameter(a[3] - a[2], b[1] - b[0], tolerance)
    if t is None:
        return None

    # the middle control of the original, once from each side
    from_left = a[1] + (a[2] - a[1]) / t
    from_right = b[2] + (b[1] - b[2]) / (1.0 - t)
    disagreement = float(np.linalg.norm(from_left - from_right))
    if disagreement > tolerance:
        return _reject("control points disagree", diff=disagreement)

    p1 = a[0] + (a[1] - a[0]) / t
    p2 = b[3] + (b[2] - b[3]) / (1.0 - t)
    return np.array([a[0], p1, p2, b[3]])


@trace(label="merge_sequential")
def merge_sequential(segments, tolerance=MERGE_TOLERANCE):
    """
    Repeatedly merge adjacent segments until no pair merges.

    Each pass scans adjacent pairs of equal degree. A pair is tried in
    order when left's end meets right's start, or reversed when right's end
    meets left's start. The first successful merge replaces the pair and the
    scan restarts. Worst case O(n^2) merge attempts.

    Args:
        segments: list of control point sequences

    Returns:
        list of (n, 2) control point arrays
    """
    curves = [control_point_array(s) for s in segments]
    merges = 0

    while len(curves) >= 2:
        merged_any = False

        for i in range(len(curves) - 1):
            c1, c2 = curves[i], curves[i + 1]
            if len(c1) != len(c2):
                continue

            if np.linalg.norm(c1[-1] - c2[0]) < tolerance:
                merged = merge_split_beziers(c1, c2, tolerance)
            elif np.linalg.norm(c2[-1] - c1[0]) < tolerance:
                merged = merge_split_beziers(c2, c1, tolerance)
            else:
                merged = None

            if merged is not None:
                curves[i:i + 2] = [merged]
                merges += 1
                merged_any = True
                break

        if not merged_any:
            break

    get_tracer().event(f"Merged {merges} segment pairs", level="DEBUG", remaining=len(curves))
    return curves
