"""
Staggered reveal of the static page sections.

Each revealed node fades in while sliding from a small offset. The
offset direction alternates between neighbours (and between sections);
"split" sections push their later nodes further sideways. Delays grow with
the vertical position of the node on the page, plus a small per-index
micro-stagger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from reveal_app.easing import round_half_up

REVEAL_EASE = (0.30, 0.00, 0.20, 1.00)  # cubic-bezier control points


@dataclass(frozen=True)
class RevealMotion:
    travel_x: float
    travel_y: float
    duration_ms: int


def compute_reveal_motion(section_id: str, count: int, directional: str = "") -> List[RevealMotion]:
    """Return the entrance motion of the *count* nodes of a section, in order."""
    section_sign = 1 if len(section_id) % 2 == 0 else -1
    motions: List[RevealMotion] = []
    for i in range(count):
        pair_sign = 1 if i % 2 == 0 else -1
        if directional == "split" and i >= 2:
            travel_x = 140.0 * pair_sign
        else:
            travel_x = 62.0 * section_sign * pair_sign
        motions.append(
            RevealMotion(
                travel_x=travel_x,
                travel_y=54.0 - min(i, 3) * 6.0,
                duration_ms=860 + (i % 2) * 90,
            )
        )
    return motions


def compute_reveal_delays(tops: Sequence[float], indices: Sequence[int]) -> List[int]:
    """
    Return the reveal delay (ms) of each node given its page top and its
    index inside its section.
    """
    if not tops:
        return []
    min_top = min(tops)
    span = max(1.0, max(tops) - min_top)

    delays: List[int] = []
    for top, index in zip(tops, indices):
        y_norm = (top - min_top) / span
        y_delay = round_half_up(30.0 + y_norm * 420.0)
        micro_stagger = min(140, index * 26)
        delays.append(y_delay + micro_stagger)
    return delays
