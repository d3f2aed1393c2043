"""
Format detection, format-agnostic parse/export, and sample point loading.
"""

import json
import os
import re
from enum import Enum

import numpy as np

from bezierfit.errors import ParseError
from bezierfit.io.json_points import parse_json_points, to_json_points
from bezierfit.io.svg_path import parse_svg_path, to_svg_path

_SVG_LEADING = "MLCQHVZ"


class Format(str, Enum):
    """Text formats a curve can be read from and written to."""
    SVG_PATH = "svg"
    JSON = "json"

    @classmethod
    def detect(cls, text):
        """
        Guess the format of text, or return None.

        JSON must start with '[' and parse. SVG path data must start with
        one of the absolute commands M L C Q H V Z.
        """
        stripped = text.strip()
        if stripped.startswith("["):
            try:
                json.loads(stripped)
            except ValueError:
                pass
            else:
                return cls.JSON
        if stripped and stripped[0] in _SVG_LEADING:
            return cls.SVG_PATH
        return None

    @classmethod
    def from_name(cls, name):
        key = name.lower()
        if key in ("svg", "svgpath", "path"):
            return cls.SVG_PATH
        if key == "json":
            return cls.JSON
        raise ValueError(f"Unknown format: {name}. Expected 'svg' or 'json'")


def parse(text, format=None):
    """
    Parse text into a BezierCurve, detecting the format when not given.

    Raises:
        ParseError: undetectable format or malformed input
    """
    if format is None:
        format = Format.detect(text)
        if format is None:
            raise ParseError("Could not detect input format. Please specify format explicitly.")

    if Format(format) == Format.JSON:
        return parse_json_points(text)
    return parse_svg_path(text)


def export(curve, format):
    if Format(format) == Format.JSON:
        return to_json_points(curve)
    return to_svg_path(curve)


def load_points(path):
    """
    Load sample points from a file.

    Accepts a JSON list of [x, y] pairs or {"x": .., "y": ..} objects, or
    plain text with one "x y" or "x,y" pair per line. Blank lines and lines
    starting with '#' are skipped.

    Returns:
        (n, 2) float array
    """
    if not os.path.exists(path):
        raise ParseError(f"Points file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    if text.lstrip().startswith("["):
        return _points_from_json(text, path)
    return _points_from_text(text, path)


def _points_from_json(text, path):
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ParseError(f"Invalid JSON in {path}: {e}") from e

    points = []
    for i, item in enumerate(data):
        if isinstance(item, dict) and "x" in item and "y" in item:
            points.append((item["x"], item["y"]))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            points.append((item[0], item[1]))
        else:
            raise ParseError(f"Entry {i} in {path} is not a point: {item!r}")

    try:
        return np.array(points, dtype=float).reshape(-1, 2)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Non-numeric coordinates in {path}: {e}") from e


def _points_from_text(text, path):
    points = []
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        fields = [f for f in re.split(r"[\s,]+", line) if f]
        if len(fields) != 2:
            raise ParseError(f"{path}:{line_no}: expected 2 coordinates, got {len(fields)}")
        try:
            points.append((float(fields[0]), float(fields[1])))
        except ValueError as e:
            raise ParseError(f"{path}:{line_no}: {e}") from e

    return np.array(points, dtype=float).reshape(-1, 2)
