from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QBrush, QColor, QGuiApplication, QLinearGradient, QPainter
from PyQt6.QtWidgets import QSizePolicy, QWidget

from reveal_app.animation_driver import ParticleRevealDriver
from reveal_app.particles import max_particles_for_device
from reveal_app.qt_backend import QPainterSurface, QtFrameScheduler
from reveal_app.reveal_config import RevealConfig

logger = logging.getLogger(__name__)


class ParticleStageWidget(QWidget):
    """
    Stage that hosts the particle title animator.

    The animator draws into an off-screen QPainterSurface; this widget
    paints the stage background and blits the surface in paintEvent().

    Qt events are translated into driver calls:
      * resizeEvent        -> driver.resize()
      * hideEvent / app hidden or suspended -> driver.suspend()
      * showEvent / app active              -> driver.resume()
    """

    # True while a reveal is running (hosts disable their Play button).
    runningChanged = pyqtSignal(bool)
    # Emitted when a run reaches its final state.
    finished = pyqtSignal()

    def __init__(
        self,
        config: Optional[RevealConfig] = None,
        text: str = "",
        reduced_motion: bool = False,
        mobile: Optional[bool] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)

        self._surface: Optional[QPainterSurface] = None
        self._driver: Optional[ParticleRevealDriver] = None
        self._initial_config = config or RevealConfig()
        self._initial_text = text
        self._reduced_motion = bool(reduced_motion)
        self._max_particles = max_particles_for_device(mobile)

        self.setMinimumSize(480, 220)
        self.setSizePolicy(
            QSizePolicy.Policy.Expanding,
            QSizePolicy.Policy.Expanding,
        )

        app = QGuiApplication.instance()
        if app is not None:
            app.applicationStateChanged.connect(self._on_application_state_changed)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def driver(self) -> Optional[ParticleRevealDriver]:
        """The animator, or None when the stage could not be mounted."""
        return self._driver

    def is_running(self) -> bool:
        return self._driver is not None and self._driver.state.running

    def apply_config(self, config: RevealConfig) -> None:
        """Live control changes: picked up by the next play()."""
        self._initial_config = config
        if self._driver is not None:
            self._driver.set_config(config)

    def play(self, config: Optional[RevealConfig] = None, text: Optional[str] = None) -> None:
        if self._driver is None:
            return
        self._driver.start(config=config, text=text)

    def current_text(self) -> str:
        if self._driver is None:
            return self._initial_text
        return self._driver.text

    # ------------------------------------------------------------------
    # Mounting
    # ------------------------------------------------------------------
    def _mount(self) -> None:
        """Create the surface and the driver the first time the stage is shown."""
        if self._driver is not None:
            return

        try:
            surface = QPainterSurface(self.width(), self.height(), self.devicePixelRatioF())
        except Exception as exc:
            logger.warning("Could not create the particle canvas: %s", exc)
            return
        if not surface.is_ready():
            logger.warning("Particle canvas unavailable; the animator is disabled")
            return

        driver = ParticleRevealDriver(
            surface=surface,
            scheduler=QtFrameScheduler(self),
            config=self._initial_config,
            text=self._initial_text,
            reduced_motion=self._reduced_motion,
            max_particles=self._max_particles,
            on_running_changed=self.runningChanged.emit,
            on_finished=self.finished.emit,
            on_render=self.update,
        )
        self._surface = surface
        self._driver = driver
        driver.resize(self.width(), self.height(), self.devicePixelRatioF())
        driver.mount()

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def showEvent(self, event) -> None:  # type: ignore[override]
        super().showEvent(event)
        if self._driver is None:
            self._mount()
        else:
            self._driver.resume()

    def hideEvent(self, event) -> None:  # type: ignore[override]
        if self._driver is not None:
            self._driver.suspend()
        super().hideEvent(event)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        if self._driver is not None:
            self._driver.resize(self.width(), self.height(), self.devicePixelRatioF())

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if self._driver is not None:
            self._driver.stop()
        super().closeEvent(event)

    def _on_application_state_changed(self, state: Qt.ApplicationState) -> None:
        if self._driver is None:
            return
        if state in (Qt.ApplicationState.ApplicationHidden, Qt.ApplicationState.ApplicationSuspended):
            self._driver.suspend()
        elif state == Qt.ApplicationState.ApplicationActive and self.isVisible():
            self._driver.resume()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        try:
            rect = QRectF(self.rect())

            # Stage background: deep violet vertical gradient.
            gradient = QLinearGradient(rect.topLeft(), rect.bottomLeft())
            gradient.setColorAt(0.0, QColor(14, 12, 24))
            gradient.setColorAt(1.0, QColor(34, 22, 52))
            painter.fillRect(rect, QBrush(gradient))

            if self._surface is not None and self._surface.is_ready():
                painter.drawImage(QPointF(0.0, 0.0), self._surface.image)
        finally:
            painter.end()
