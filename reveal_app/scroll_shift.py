"""
Scroll position -> visual parameters.

While the page scrolls through the "shift zone", a normalized progress p
drives a set of derived values (color flood v, crack, depth, impact) that
the page uses to tint its background. The curve holds a calm plateau
before the color flood.
"""

from __future__ import annotations

from dataclasses import dataclass

from reveal_app.easing import clamp, ease_in_out_cubic, ease_out_cubic


@dataclass(frozen=True)
class ShiftVariables:
    p: float       # progress through the shift zone
    v: float       # color flood amount
    crack: float   # peaks in the middle of the zone
    depth: float
    impact: float  # short pulse around the flood point
    scroll: float  # progress through the whole page
    proof: bool    # flood is past the "proof" threshold


def map_shift_v(progress: float) -> float:
    """Three-segment curve: slow build, short plateau, then the flood."""
    p = clamp(progress, 0.0, 1.0)
    if p < 0.44:
        return ease_in_out_cubic(p / 0.44) * 0.48
    if p < 0.56:
        return 0.48 + ease_in_out_cubic((p - 0.44) / 0.12) * 0.06
    return 0.54 + ease_out_cubic((p - 0.56) / 0.44) * 0.46


def compute_shift_variables(
    scroll_y: float,
    zone_top: float,
    zone_height: float,
    viewport_height: float,
    document_height: float,
) -> ShiftVariables:
    """
    Derive every shift variable for the current scroll position.

    The zone spans from its top until its bottom reaches the bottom of the
    viewport; the span never drops below one pixel.
    """
    shift_start = zone_top
    shift_end = zone_top + zone_height - viewport_height
    if shift_end <= shift_start + 1.0:
        shift_end = shift_start + 1.0

    p = clamp((scroll_y - shift_start) / (shift_end - shift_start), 0.0, 1.0)
    v = map_shift_v(p)
    crack = clamp(1.0 - abs(p - 0.5) * 2.0, 0.0, 1.0)
    depth = clamp(ease_out_cubic(clamp((v - 0.16) / 0.84, 0.0, 1.0)), 0.0, 1.0)
    impact = ease_out_cubic(clamp(1.0 - abs(p - 0.56) / 0.14, 0.0, 1.0))

    scrollable = document_height - viewport_height
    if scrollable > 0:
        page = clamp(scroll_y / scrollable, 0.0, 1.0)
    else:
        page = 0.0

    return ShiftVariables(
        p=p,
        v=v,
        crack=crack,
        depth=depth,
        impact=impact,
        scroll=page,
        proof=v > 0.6,
    )
