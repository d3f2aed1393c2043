"""Pytest fixtures for bezierfit tests."""

import tempfile

import numpy as np
import pytest

from bezierfit.geometry.evaluation import evaluate_bezier
from bezierfit.tracer import configure_tracer


@pytest.fixture(autouse=True)
def tracer_disabled():
    """Every test starts and ends with tracing switched off."""
    configure_tracer(enabled=False)
    yield
    configure_tracer(enabled=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def arch_cubic():
    """Symmetric arch from (0, 0) to (3, 0)."""
    return np.array([[0.0, 0.0], [1.0, 2.0], [2.0, 2.0], [3.0, 0.0]])


@pytest.fixture
def wavy_cubic():
    """S-shaped cubic with an inflection."""
    return np.array([[0.0, 0.0], [1.0, 3.0], [2.0, -1.0], [3.0, 2.0]])


@pytest.fixture
def rising_cubic():
    return np.array([[0.0, 0.0], [1.0, 2.0], [3.0, 1.0], [4.0, 3.0]])


@pytest.fixture
def simple_quadratic():
    return np.array([[0.0, 0.0], [1.0, 2.0], [2.0, 0.0]])


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(1234)


def sample_curve(control_points, num_points):
    """num_points samples at uniformly spaced t, as an (n, 2) array."""
    return evaluate_bezier(control_points, np.linspace(0.0, 1.0, num_points))


@pytest.fixture
def sampler():
    return sample_curve


def curve_distances(control_points, samples, resolution=20001):
    """Distance from each sample to a dense polyline sampling of the curve."""
    dense = evaluate_bezier(control_points, np.linspace(0.0, 1.0, resolution))
    samples = np.asarray(samples, dtype=float)
    return np.min(np.linalg.norm(dense[np.newaxis, :, :] - samples[:, np.newaxis, :], axis=2), axis=1)


@pytest.fixture
def distances():
    return curve_distances
