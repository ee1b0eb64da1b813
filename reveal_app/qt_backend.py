"""
Qt implementations of the animator's drawing surface and frame scheduler.

QPainterSurface renders into an off-screen QImage that the stage widget
blits in its paintEvent(); QtFrameScheduler drives frames from a
single-shot QTimer in the GUI event loop.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from PyQt6.QtCore import QObject, QPointF, QRectF, Qt, QTimer
from PyQt6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetricsF,
    QImage,
    QLinearGradient,
    QPainter,
    QPen,
)

from reveal_app.scheduler import (
    DEFAULT_FRAME_INTERVAL_MS,
    Clock,
    FrameCallback,
    FrameScheduler,
    monotonic_ms,
)
from reveal_app.surface import RGBA, DrawingSurface, FontSpec, GradientStops, HslaColor

logger = logging.getLogger(__name__)


def build_qfont(font: FontSpec) -> QFont:
    """Return a QFont for *font*, sized in pixels."""
    qfont = QFont()
    qfont.setFamilies(list(font.families))
    qfont.setPixelSize(max(1, int(round(font.size_px))))
    qfont.setWeight(QFont.Weight(int(font.weight)))
    return qfont


def _rgba_to_qcolor(rgba: RGBA) -> QColor:
    r, g, b, a = rgba
    color = QColor(int(r), int(g), int(b))
    color.setAlphaF(max(0.0, min(1.0, float(a))))
    return color


def _hsla_to_qcolor(color: HslaColor) -> QColor:
    return QColor.fromHslF(
        (color.hue % 360.0) / 360.0,
        max(0.0, min(1.0, color.saturation)),
        max(0.0, min(1.0, color.lightness)),
        max(0.0, min(1.0, color.alpha)),
    )


class QPainterSurface(DrawingSurface):
    """
    Off-screen QImage surface.

    The image is allocated at device resolution and tagged with the device
    pixel ratio, so QPainter works in logical coordinates.
    """

    def __init__(self, width: float = 1.0, height: float = 1.0, pixel_ratio: float = 1.0) -> None:
        self._width: float = 1.0
        self._height: float = 1.0
        self._pixel_ratio: float = 1.0
        self._image: QImage = QImage()
        self._painter: Optional[QPainter] = None

        self._font: FontSpec = FontSpec(size_px=62)
        self._qfont: QFont = build_qfont(self._font)
        self._metrics: QFontMetricsF = QFontMetricsF(self._qfont)
        self._fill: QBrush = QBrush(QColor(255, 255, 255))

        self.resize(width, height, pixel_ratio)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def pixel_ratio(self) -> float:
        return self._pixel_ratio

    @property
    def image(self) -> QImage:
        """The backing image, for blitting in a paintEvent()."""
        return self._image

    def is_ready(self) -> bool:
        return not self._image.isNull()

    def resize(self, width: float, height: float, pixel_ratio: float = 1.0) -> None:
        if self._painter is not None:
            raise RuntimeError("Cannot resize a surface while a frame is open")

        self._width = max(1.0, float(width))
        self._height = max(1.0, float(height))
        self._pixel_ratio = max(1.0, float(pixel_ratio))

        device_w = int(self._width * self._pixel_ratio)
        device_h = int(self._height * self._pixel_ratio)
        image = QImage(max(1, device_w), max(1, device_h), QImage.Format.Format_ARGB32_Premultiplied)
        if image.isNull():
            logger.warning("Could not allocate a %dx%d canvas image", device_w, device_h)
        else:
            image.setDevicePixelRatio(self._pixel_ratio)
            image.fill(Qt.GlobalColor.transparent)
        self._image = image

    # ------------------------------------------------------------------
    # Frame session
    # ------------------------------------------------------------------
    @contextmanager
    def frame(self) -> Iterator["QPainterSurface"]:
        painter = QPainter()
        if not painter.begin(self._image):
            raise RuntimeError("QPainter could not open the canvas image")
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        painter.setFont(self._qfont)
        self._painter = painter
        try:
            yield self
        finally:
            self._painter = None
            painter.end()

    def _active(self) -> QPainter:
        if self._painter is None:
            raise RuntimeError("Drawing outside of a frame() session")
        return self._painter

    def save(self) -> None:
        self._active().save()

    def restore(self) -> None:
        self._active().restore()

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------
    def set_font(self, font: FontSpec) -> None:
        if font != self._font:
            self._font = font
            self._qfont = build_qfont(font)
            self._metrics = QFontMetricsF(self._qfont)
        if self._painter is not None:
            self._painter.setFont(self._qfont)

    def measure_text(self, text: str) -> float:
        return float(self._metrics.horizontalAdvance(text))

    def fill_text(self, text: str, x: float, y: float) -> None:
        painter = self._active()
        # Middle baseline: center the ascent/descent box on y.
        baseline = y + (self._metrics.ascent() - self._metrics.descent()) * 0.5
        painter.setPen(QPen(self._fill, 1.0))
        painter.drawText(QPointF(x, baseline), text)

    # ------------------------------------------------------------------
    # Fills
    # ------------------------------------------------------------------
    def set_fill_gradient(
        self, x0: float, y0: float, x1: float, y1: float, stops: GradientStops
    ) -> None:
        gradient = QLinearGradient(float(x0), float(y0), float(x1), float(y1))
        for position, rgba in stops:
            gradient.setColorAt(float(position), _rgba_to_qcolor(rgba))
        self._fill = QBrush(gradient)

    def set_alpha(self, alpha: float) -> None:
        self._active().setOpacity(max(0.0, min(1.0, float(alpha))))

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        self._active().fillRect(QRectF(x, y, w, h), self._fill)

    def fill_circle(self, x: float, y: float, radius: float, color: HslaColor) -> None:
        painter = self._active()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(_hsla_to_qcolor(color))
        painter.drawEllipse(QPointF(x, y), radius, radius)

    def clear(self) -> None:
        painter = self._active()
        painter.save()
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Clear)
        painter.fillRect(QRectF(0.0, 0.0, self._width, self._height), Qt.GlobalColor.transparent)
        painter.restore()


class QtFrameScheduler(FrameScheduler):
    """
    Frame scheduler backed by a single-shot QTimer.

    The timer lives in the Qt event loop of *parent*'s thread; callbacks
    receive the time from *clock* when the timer fires.
    """

    def __init__(
        self,
        parent: Optional[QObject] = None,
        interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
        clock: Clock = monotonic_ms,
    ) -> None:
        self._clock = clock
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(1, int(interval_ms)))
        self._timer.timeout.connect(self._on_timeout)

        self._next_handle: int = 0
        self._handle: Optional[int] = None
        self._callback: Optional[FrameCallback] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: FrameCallback) -> int:
        if self._handle is not None:
            raise RuntimeError("A frame is already scheduled; cancel it first")
        self._next_handle += 1
        self._handle = self._next_handle
        self._callback = callback
        self._timer.start()
        return self._handle

    def cancel(self, handle: int) -> None:
        if handle != self._handle:
            return
        self._timer.stop()
        self._handle = None
        self._callback = None

    def _on_timeout(self) -> None:
        callback = self._callback
        self._handle = None
        self._callback = None
        if callback is not None:
            callback(self._clock())
