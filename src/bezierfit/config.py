"""
Configuration management for bezierfit.

Loads YAML configuration with defaults for geometry tolerances, fitting and
tracing. Library functions never read this module; the CLI and fit dispatch
pass the values down explicitly.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml

from bezierfit.constants import (
    MERGE_TOLERANCE,
    NEAREST_LUT_SIZE,
    NEAREST_REFINE_TOLERANCE,
)


@dataclass
class GeometryConfig:
    """Tolerances for geometry operations."""
    merge_tolerance: float = MERGE_TOLERANCE
    nearest_lut_size: int = NEAREST_LUT_SIZE
    nearest_refine_tolerance: float = NEAREST_REFINE_TOLERANCE


@dataclass
class FitConfig:
    """Configuration for single-segment cubic fitting."""
    method: str = "alternating"  # "least_squares", "alternating" or "weak_varpro"
    heuristic: str = "chord_length"  # "chord_length", "uniform" or "centripetal"
    max_iterations: int = 20
    tolerance: float = 1e-3
    t_update: str = "nearest_point"  # "nearest_point" or "gauss_newton"


@dataclass
class GradientConfig:
    """Configuration for the weak variable projection search."""
    min_step_size: float = 1e-6
    max_step_size: float = 10.0
    num_random_samples: int = 10
    random_scale: float = 0.01
    line_search_steps: int = 10
    seed: int = 0


@dataclass
class TracingConfig:
    """Tracer settings used when --trace is not given."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class AppConfig:
    """Complete bezierfit configuration."""
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    fit: FitConfig = field(default_factory=FitConfig)
    gradient: GradientConfig = field(default_factory=GradientConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


def load_config(config_path=None):
    """
    Build an AppConfig from defaults overlaid with the YAML file, if any.

    Falls back to defaults for any missing values. Unknown keys are ignored.
    """
    config = AppConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Copy known keys of each YAML section onto the matching dataclass."""
    for section in fields(config):
        values = yaml_data.get(section.name)
        if not isinstance(values, dict):
            continue

        target = getattr(config, section.name)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Dump every default setting to path as YAML."""
    yaml_data = asdict(AppConfig())

    # file_path has no useful default
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
