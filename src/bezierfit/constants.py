"""
Named numerical tolerances for bezierfit.

These are defaults only. Every function that uses one takes it as a keyword
argument, so tests and callers can tighten or relax precision per call.
"""

# Point equality: |dx| < eps and |dy| < eps
FLOAT_TOLERANCE = 1e-10

# C0 gap, slope and angle tolerance when reconstructing a split segment
MERGE_TOLERANCE = 1e-3

# Nearest-point search: LUT of NEAREST_LUT_SIZE + 1 uniform samples, then
# ternary refinement until the bracket is narrower than the refine tolerance
NEAREST_LUT_SIZE = 100
NEAREST_REFINE_TOLERANCE = 1e-3

# Editor-side bisection search for the closest t
BISECTION_MAX_ITERATIONS = 50
BISECTION_TOLERANCE = 1e-6

# (sqrt(5) - 1) / 2
GOLDEN_RATIO = 0.618033988749895
LINE_SEARCH_STEPS = 10
