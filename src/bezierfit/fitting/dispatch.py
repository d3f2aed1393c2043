"""Config-driven selection of a cubic fitting algorithm."""

from enum import Enum

from bezierfit.config import FitConfig, GradientConfig
from bezierfit.fitting.alternating import fit_cubic_bezier_alternating
from bezierfit.fitting.least_squares import fit_cubic_bezier_with_heuristic
from bezierfit.fitting.weak_varpro import GradientParams, fit_cubic_bezier_weak_varpro
from bezierfit.tracer import trace


class FitMethod(str, Enum):
    LEAST_SQUARES = "least_squares"
    ALTERNATING = "alternating"
    WEAK_VARPRO = "weak_varpro"


def gradient_params_from_config(gradient_config):
    return GradientParams(
        min_step_size=gradient_config.min_step_size,
        max_step_size=gradient_config.max_step_size,
        num_random_samples=gradient_config.num_random_samples,
        random_scale=gradient_config.random_scale,
        line_search_steps=gradient_config.line_search_steps,
        seed=gradient_config.seed,
    )


@trace(label="fit_points")
def fit_points(points, fit_config=None, gradient_config=None, rng=None):
    """
    Fit one cubic to the samples with the algorithm named in fit_config.

    The least squares method uses fit_config.heuristic for t. The iterative
    methods always start from chord-length t.

    Args:
        points: (n, 2) samples, n >= 4
        fit_config: FitConfig, defaults when None
        gradient_config: GradientConfig for weak_varpro, defaults when None
        rng: numpy Generator for weak_varpro

    Returns:
        Cubic segment
    """
    fit_config = fit_config or FitConfig()
    method = FitMethod(fit_config.method)

    if method == FitMethod.LEAST_SQUARES:
        return fit_cubic_bezier_with_heuristic(points, fit_config.heuristic)

    if method == FitMethod.ALTERNATING:
        return fit_cubic_bezier_alternating(
            points,
            fit_config.max_iterations,
            fit_config.tolerance,
            fit_config.t_update,
        )

    params = gradient_params_from_config(gradient_config or GradientConfig())
    return fit_cubic_bezier_weak_varpro(
        points,
        fit_config.max_iterations,
        fit_config.tolerance,
        params,
        rng,
    )
