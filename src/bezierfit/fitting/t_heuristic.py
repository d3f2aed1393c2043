"""
Initial curve-parameter estimates for ordered sample points.

Every estimator returns one t per point, non-decreasing, starting at 0 and
ending at 1. Zero points give an empty array and one point gives [0.0]. When
all points coincide the total length is zero and every t is 0.
"""

from enum import Enum

import numpy as np

from bezierfit.geometry.evaluation import control_point_array


class THeuristic(str, Enum):
    """How sample points are mapped to initial t values."""
    CHORD_LENGTH = "chord_length"
    UNIFORM = "uniform"
    CENTRIPETAL = "centripetal"


def _trivial(n):
    if n == 0:
        return np.zeros(0)
    return np.zeros(1)


def _normalized_cumulative(step_lengths):
    cumulative = np.concatenate([[0.0], np.cumsum(step_lengths)])
    total = cumulative[-1]
    if total <= 0.0:
        return np.zeros(len(cumulative))
    return cumulative / total


def estimate_t_values_uniform(points):
    """t_i = i / (n - 1)"""
    points = control_point_array(points)
    n = len(points)
    if n < 2:
        return _trivial(n)
    return np.arange(n) / (n - 1)


def estimate_t_values_chord_length(points):
    """Cumulative polyline length, normalized to [0, 1]."""
    points = control_point_array(points)
    if len(points) < 2:
        return _trivial(len(points))
    steps = np.linalg.norm(np.diff(points, axis=0), axis=1)
    return _normalized_cumulative(steps)


def estimate_t_values_centripetal(points):
    """
    Cumulative square root of the chord lengths, normalized to [0, 1].

    Damps the parameter spacing across long chords, which tends to avoid
    overshoot around sharp turns.
    """
    points = control_point_array(points)
    if len(points) < 2:
        return _trivial(len(points))
    steps = np.sqrt(np.linalg.norm(np.diff(points, axis=0), axis=1))
    return _normalized_cumulative(steps)


_ESTIMATORS = {
    THeuristic.CHORD_LENGTH: estimate_t_values_chord_length,
    THeuristic.UNIFORM: estimate_t_values_uniform,
    THeuristic.CENTRIPETAL: estimate_t_values_centripetal,
}


def estimate_t_values(points, heuristic=THeuristic.CHORD_LENGTH):
    return _ESTIMATORS[THeuristic(heuristic)](points)
