"""
Standalone SVG documents for fitted curves.

Draws the curve as a single path and, optionally, the fitted samples as
small markers, on a canvas sized to the padded bounding box.
"""

import numpy as np
import svgwrite

from bezierfit.io.svg_path import to_svg_path
from bezierfit.tracer import get_tracer, trace


def _bounds(curve, samples):
    coords = [(p.x, p.y) for s in curve.segments for p in s.points]
    if samples is not None:
        coords.extend((float(x), float(y)) for x, y in np.asarray(samples, dtype=float).reshape(-1, 2))
    if not coords:
        return 0.0, 0.0, 1.0, 1.0

    arr = np.array(coords)
    min_x, min_y = arr.min(axis=0)
    max_x, max_y = arr.max(axis=0)
    return float(min_x), float(min_y), float(max_x), float(max_y)


def build_svg_document(curve, samples=None, padding=10.0, stroke_width=1.5, stroke_color="black", marker_radius=2.0):
    """
    Create an svgwrite Drawing for a curve.

    Args:
        curve: BezierCurve
        samples: optional (n, 2) points drawn as circles
        padding: margin around the bounding box in user units

    Returns:
        svgwrite.Drawing object
    """
    min_x, min_y, max_x, max_y = _bounds(curve, samples)
    width = max(max_x - min_x, 1.0) + 2 * padding
    height = max(max_y - min_y, 1.0) + 2 * padding

    dwg = svgwrite.Drawing(size=(f"{width:g}px", f"{height:g}px"))
    dwg.viewbox(min_x - padding, min_y - padding, width, height)

    path_data = to_svg_path(curve)
    if path_data:
        dwg.add(dwg.path(d=path_data, id="curve", fill="none", stroke=stroke_color, stroke_width=stroke_width))

    if samples is not None:
        markers = dwg.g(id="samples", fill="red")
        for x, y in np.asarray(samples, dtype=float).reshape(-1, 2):
            markers.add(dwg.circle(center=(float(x), float(y)), r=marker_radius))
        dwg.add(markers)

    return dwg


@trace(label="write_svg_document")
def write_svg_document(path, curve, samples=None, **kwargs):
    """Write the curve (and samples) to an SVG file at path."""
    dwg = build_svg_document(curve, samples, **kwargs)
    dwg.saveas(path, pretty=True)
    get_tracer().event(f"SVG written to {path}", segments=len(curve.segments))
    return path
