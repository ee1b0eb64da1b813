"""
Small numeric helpers shared by the particle animator and the scroll
mapping.

None of the easing curves clamp their input: callers are expected to feed
values already in [0, 1]. Outside that range the polynomials simply
extrapolate.
"""

from __future__ import annotations

import math


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in for the first half, ease-out for the second half."""
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0


def ease_out_cubic(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


def round_half_up(x: float) -> int:
    """Round like a browser does (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(x + 0.5))
