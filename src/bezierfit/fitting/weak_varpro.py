"""
Weak variable projection fit of one cubic Bezier segment.

Like the alternating fit, but each t update searches along the Gauss-Newton
direction: a golden-section line search picks the step size, then a handful
of Gaussian perturbations around that step compete with it. The best
candidate is kept only if it lowers the residual norm; a non-improving round
ends the fit.

All randomness comes from the numpy Generator passed in (or seeded from
GradientParams.seed), so fits are reproducible.
"""

from dataclasses import dataclass

import numpy as np

from bezierfit.constants import GOLDEN_RATIO, LINE_SEARCH_STEPS
from bezierfit.errors import FitError
from bezierfit.fitting.least_squares import (
    adjust_t_values,
    gauss_newton_direction,
    residual_norm,
    solve_control_points,
)
from bezierfit.fitting.t_heuristic import estimate_t_values_chord_length
from bezierfit.geometry.evaluation import control_point_array
from bezierfit.geometry.nearest import all_points_within_tolerance
from bezierfit.models import Cubic
from bezierfit.tracer import get_tracer, trace


@dataclass
class GradientParams:
    """Search parameters for the weak variable projection update."""
    min_step_size: float = 1e-6
    max_step_size: float = 10.0
    num_random_samples: int = 10
    random_scale: float = 0.01
    line_search_steps: int = LINE_SEARCH_STEPS
    seed: int = 0


def _loss(points, t_values):
    # a singular re-solve is an unusable candidate, not a failed fit
    try:
        control = solve_control_points(points, t_values)
    except FitError:
        return float("inf")
    return residual_norm(points, t_values, control)


def compute_step_loss(points, t_values, delta_t, step_size):
    """Residual norm of the re-solved curve at clamp(t + step * delta_t)."""
    return _loss(points, np.clip(t_values + step_size * delta_t, 0.0, 1.0))


def find_best_step_size(points, t_values, delta_t, min_step, max_step, num_steps=LINE_SEARCH_STEPS):
    """
    Golden-section search for the step size in [min_step, max_step].

    Returns the midpoint of the final bracket.
    """
    a = min_step
    b = max_step
    c = b - GOLDEN_RATIO * (b - a)
    d = a + GOLDEN_RATIO * (b - a)
    fc = compute_step_loss(points, t_values, delta_t, c)
    fd = compute_step_loss(points, t_values, delta_t, d)

    for _ in range(num_steps):
        if fc < fd:
            b = d
            d = c
            fd = fc
            c = b - GOLDEN_RATIO * (b - a)
            fc = compute_step_loss(points, t_values, delta_t, c)
        else:
            a = c
            c = d
            fc = fd
            d = a + GOLDEN_RATIO * (b - a)
            fd = compute_step_loss(points, t_values, delta_t, d)

    return (a + b) / 2.0


def generate_t_variations(base_t_values, delta_t, params, rng):
    """
    The base t vector followed by num_random_samples perturbations of it.

    Each perturbation moves t_i by N(0, random_scale) * delta_t_i, then is
    clamped and has its ends pinned to 0 and 1.
    """
    variations = [np.array(base_t_values, dtype=float)]
    for _ in range(params.num_random_samples):
        factors = rng.normal(0.0, params.random_scale, size=len(base_t_values))
        variations.append(adjust_t_values(np.clip(base_t_values + factors * delta_t, 0.0, 1.0)))
    return variations


def find_best_t_values(points, variations):
    """(t_values, loss) of the lowest-loss candidate; ties keep the earlier one."""
    best_t_values = variations[0]
    best_loss = float("inf")
    for t_values in variations:
        loss = _loss(points, t_values)
        if loss < best_loss:
            best_loss = loss
            best_t_values = t_values
    return best_t_values, best_loss


def update_t_values_weak_varpro(points, t_values, control_points, params, rng):
    """
    One search round from the current t values.

    Returns:
        (candidate t values, candidate loss); the caller decides acceptance
    """
    delta_t = gauss_newton_direction(points, t_values, control_points)

    step = find_best_step_size(
        points,
        t_values,
        delta_t,
        params.min_step_size,
        params.max_step_size,
        params.line_search_steps,
    )
    base_t_values = adjust_t_values(np.clip(t_values + step * delta_t, 0.0, 1.0))

    variations = generate_t_variations(base_t_values, delta_t, params, rng)
    best_t_values, best_loss = find_best_t_values(points, variations)

    get_tracer().event("line search", level="DEBUG", step=step, loss=best_loss)
    return best_t_values, best_loss


@trace(label="fit_cubic_bezier_weak_varpro")
def fit_cubic_bezier_weak_varpro(points, max_iterations, tolerance, gradient_params=None, rng=None):
    """
    Fit one cubic with weak variable projection.

    Args:
        points: (n, 2) samples, n >= 4
        max_iterations: search rounds; 0 returns the initial least-squares fit
        tolerance: stop once every sample is this close to the curve
        gradient_params: GradientParams, defaults when None
        rng: numpy Generator; default_rng(gradient_params.seed) when None

    Returns:
        Cubic segment
    """
    tracer = get_tracer()
    points = control_point_array(points)
    params = gradient_params or GradientParams()
    if rng is None:
        rng = np.random.default_rng(params.seed)

    if len(points) < 4:
        raise FitError(f"At least 4 points are required for cubic bezier fitting, got {len(points)}")

    t_values = estimate_t_values_chord_length(points)
    control = solve_control_points(points, t_values)
    prev_loss = residual_norm(points, t_values, control)

    iterations = 0
    for _ in range(max_iterations):
        if all_points_within_tolerance(control, points, tolerance):
            tracer.event("converged", level="DEBUG", iterations=iterations)
            break

        new_t_values, new_loss = update_t_values_weak_varpro(points, t_values, control, params, rng)
        if new_loss >= prev_loss:
            tracer.event("loss did not improve, stopping", level="DEBUG", loss=new_loss, prev_loss=prev_loss)
            break

        t_values = new_t_values
        prev_loss = new_loss
        control = solve_control_points(points, t_values)
        iterations += 1

    tracer.event("Weak varpro fit finished", iterations=iterations, loss=prev_loss)
    return Cubic.from_array(control)
