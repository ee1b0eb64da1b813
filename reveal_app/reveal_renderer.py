"""
Progressive text reveal.

Each unit of the title owns a reveal window [start, end] inside the global
progress range [0, 1]. Windows are evenly spaced and overlap by the
configured fraction; the last window always ends at 1.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np

from reveal_app.easing import clamp
from reveal_app.reveal_config import RevealConfig
from reveal_app.surface import DrawingSurface
from reveal_app.text_layout import TextLayout


# Vertical settle distance (px) of a unit that just started to fade in.
SETTLE_OFFSET_PX = 4.0
# Baseline of the title as a fraction of the canvas height.
BASELINE_RATIO = 0.58

TEXT_INK_STOPS = (
    (0.0, (255, 255, 255, 0.97)),
    (0.5, (237, 228, 255, 0.95)),
    (1.0, (255, 248, 237, 0.92)),
)
BACKDROP_STOPS = (
    (0.0, (255, 255, 255, 0.03)),
    (1.0, (255, 255, 255, 0.0)),
)


@dataclass(frozen=True)
class LeadPoint:
    """Revealing edge of the text: where particles are emitted."""

    x: float
    y: float


def _effective_span(count: int, spacing: float) -> float:
    return 1.0 + max(0, count - 1) * spacing


def reveal_windows(count: int, overlap: float) -> np.ndarray:
    """
    Return a (count, 2) array with the [start, end] window of every unit.

    Computed once per drawn frame by RevealRenderer.
    """
    spacing = 1.0 - overlap
    span = _effective_span(count, spacing)
    offsets = np.arange(count, dtype=float) * spacing
    return np.column_stack((offsets / span, (offsets + 1.0) / span))


def local_progress(start: float, end: float, progress: float) -> float:
    """Reveal fraction in [0, 1] of the unit owning window [start, end]."""
    return clamp((progress - start) / (end - start), 0.0, 1.0)


class RevealRenderer:
    """Draws the backdrop and the partially revealed title on a surface."""

    def __init__(self, surface: DrawingSurface) -> None:
        self.surface = surface

    def draw_backdrop(self) -> None:
        s = self.surface
        s.set_fill_gradient(0.0, 0.0, s.width, s.height, BACKDROP_STOPS)
        s.fill_rect(0.0, 0.0, s.width, s.height)

    def draw_revealed_text(
        self,
        layout: TextLayout,
        progress: float,
        config: RevealConfig,
        baseline_y: float,
    ) -> LeadPoint:
        """
        Draw every unit whose window has started at *progress*.

        With fade_in, a unit is drawn with alpha equal to its local reveal
        fraction and settles down into place; without it, a unit only
        appears once fully revealed. Returns the lead point for emission.
        """
        s = self.surface
        units = layout.units
        count = len(units)
        windows = reveal_windows(count, config.overlap).tolist()
        lead_x = layout.x

        s.save()
        s.set_font(layout.font)
        font_px = layout.font.size_px
        s.set_fill_gradient(
            layout.x,
            baseline_y - font_px * 0.6,
            layout.x + layout.width,
            baseline_y,
            TEXT_INK_STOPS,
        )

        for i, unit in enumerate(units):
            start, end = windows[i]
            local = local_progress(start, end, progress)
            # Windows are ordered, so every later unit is hidden too.
            if local <= 0.0:
                break

            lead_x = unit.start_x + unit.width * local

            if config.fade_in:
                s.save()
                s.set_alpha(local)
                s.fill_text(unit.text, unit.start_x, baseline_y + (1.0 - local) * SETTLE_OFFSET_PX)
                s.restore()
            elif local >= 1.0:
                s.fill_text(unit.text, unit.start_x, baseline_y)

        s.restore()
        return LeadPoint(x=lead_x, y=baseline_y)
