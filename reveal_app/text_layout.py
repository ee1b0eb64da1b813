"""
Text layout for the particle title reveal.

The title is split into units (characters or word tokens), each measured
with the surface's current font, and laid out on a single centered line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from reveal_app.easing import clamp
from reveal_app.surface import DrawingSurface, FontSpec


# Font fitting: nominal size is a fraction of the canvas width, reduced
# one pixel at a time until the title fits in FIT_WIDTH_RATIO of the width.
NOMINAL_SIZE_RATIO = 0.078
NOMINAL_SIZE_MIN = 30.0
NOMINAL_SIZE_MAX = 84.0
MIN_FONT_SIZE = 24.0
FIT_WIDTH_RATIO = 0.86

_WORD_TOKENS = re.compile(r"\S+|\s+")


@dataclass(frozen=True)
class TextUnit:
    """A character or word token, the atomic element of the reveal."""

    text: str
    start_x: float
    width: float
    is_whitespace: bool


@dataclass(frozen=True)
class TextLayout:
    """Units of the title laid out left to right, centered on the canvas."""

    x: float
    width: float
    font: FontSpec
    units: Tuple[TextUnit, ...] = field(default_factory=tuple)

    @property
    def end_x(self) -> float:
        return self.x + self.width


def split_units(text: str, mode: str) -> List[str]:
    """
    Split *text* into reveal units.

    "word" mode yields runs of non-space characters and runs of whitespace
    as separate tokens; any other mode yields one unit per character.
    """
    if mode == "word":
        return _WORD_TOKENS.findall(text) or [text]
    return list(text)


def fit_font_size(surface: DrawingSurface, text: str, canvas_width: float) -> float:
    """
    Return the largest font size (in px) that keeps *text* within the
    canvas, never going below MIN_FONT_SIZE.

    Leaves the surface font set to the last size tried.
    """
    max_width = canvas_width * FIT_WIDTH_RATIO
    size = clamp(canvas_width * NOMINAL_SIZE_RATIO, NOMINAL_SIZE_MIN, NOMINAL_SIZE_MAX)

    while size > MIN_FONT_SIZE:
        surface.set_font(FontSpec(size_px=size))
        if surface.measure_text(text) <= max_width:
            break
        size -= 1.0
    return max(size, MIN_FONT_SIZE)


def build_layout(
    surface: DrawingSurface,
    text: str,
    font: FontSpec,
    canvas_width: float,
    mode: str = "letter",
) -> TextLayout:
    """
    Measure every unit of *text* with *font* and place them on one line,
    horizontally centered in *canvas_width*.
    """
    surface.set_font(font)
    total_width = surface.measure_text(text)
    x = (canvas_width - total_width) * 0.5

    units: List[TextUnit] = []
    cursor = x
    for part in split_units(text, mode):
        width = surface.measure_text(part)
        units.append(
            TextUnit(
                text=part,
                start_x=cursor,
                width=width,
                is_whitespace=bool(part) and part.isspace(),
            )
        )
        cursor += width

    return TextLayout(x=x, width=total_width, font=font, units=tuple(units))
