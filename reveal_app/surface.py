"""
Drawing surface used by the particle title animator.

The animator only needs a handful of 2D operations: text measurement,
text / rectangle fills with a linear gradient, global alpha, and filled
circles. DrawingSurface describes that contract; QPainterSurface implements
it on top of an off-screen QImage (see qt_backend).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence, Tuple

# (r, g, b, a) with r/g/b in 0..255 and a in 0..1
RGBA = Tuple[int, int, int, float]
GradientStops = Sequence[Tuple[float, RGBA]]

TITLE_FONT_FAMILIES: Tuple[str, ...] = (
    "Segoe UI",
    "Roboto",
    "Helvetica",
    "Arial",
)


@dataclass(frozen=True)
class FontSpec:
    """Font used to draw and measure the title."""

    size_px: float
    weight: int = 700
    families: Tuple[str, ...] = TITLE_FONT_FAMILIES


@dataclass(frozen=True)
class HslaColor:
    """Color in CSS hsla() terms: hue in degrees, s/l/a in [0, 1]."""

    hue: float
    saturation: float
    lightness: float
    alpha: float


class DrawingSurface(ABC):
    """
    2D drawing target of the animator.

    Coordinates are logical pixels; mapping to device pixels (device pixel
    ratio) is the surface's job. Drawing calls are only valid inside a
    frame() session.
    """

    @property
    @abstractmethod
    def width(self) -> float:
        raise NotImplementedError

    @property
    @abstractmethod
    def height(self) -> float:
        raise NotImplementedError

    @property
    @abstractmethod
    def pixel_ratio(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def is_ready(self) -> bool:
        """Return False when no drawing context can be obtained."""
        raise NotImplementedError

    @abstractmethod
    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        raise NotImplementedError

    @abstractmethod
    def frame(self):
        """Context manager wrapping all the drawing of one frame."""
        raise NotImplementedError

    @abstractmethod
    def save(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def restore(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_font(self, font: FontSpec) -> None:
        raise NotImplementedError

    @abstractmethod
    def measure_text(self, text: str) -> float:
        """Horizontal advance of *text* with the current font."""
        raise NotImplementedError

    @abstractmethod
    def set_fill_gradient(
        self, x0: float, y0: float, x1: float, y1: float, stops: GradientStops
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_alpha(self, alpha: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def fill_text(self, text: str, x: float, y: float) -> None:
        """Draw *text* with its left edge at x and its vertical middle at y."""
        raise NotImplementedError

    @abstractmethod
    def fill_circle(self, x: float, y: float, radius: float, color: HslaColor) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError
