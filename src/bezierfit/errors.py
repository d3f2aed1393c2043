"""
Exception types for bezierfit.

Fitting and parsing report failures by raising these. Merge failures are
not errors: merge functions return None when no reconstruction exists.
"""


class BezierError(Exception):
    """Base class for all bezierfit errors."""


class FitError(BezierError):
    """A curve fit could not be computed (too few points, singular system)."""


class ParseError(BezierError):
    """Text input could not be turned into points or a curve."""


class UnsupportedSegmentError(BezierError, ValueError):
    """
    A geometry operation was called on a segment it is not defined for.

    Raised for control-point counts outside {2, 3, 4} and for any math on
    elliptical arcs. This is a caller bug, never a recoverable condition.
    """


class SettingError(BezierError, ValueError):
    """A numeric setting is outside the range an operation can work with."""
