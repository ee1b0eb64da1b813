from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from PyQt6.QtCore import (
    QEasingCurve,
    QParallelAnimationGroup,
    QPoint,
    QPointF,
    QPropertyAnimation,
    QSettings,
    Qt,
    QTimer,
)
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QApplication,
    QFrame,
    QGraphicsOpacityEffect,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QProgressBar,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from reveal_app.controls_panel import RevealControlsPanel, open_settings
from reveal_app.reveal_config import RevealConfig, config_to_values
from reveal_app.scroll_shift import ShiftVariables, compute_shift_variables
from reveal_app.section_motion import REVEAL_EASE, compute_reveal_delays, compute_reveal_motion
from reveal_app.stage_widget import ParticleStageWidget

logger = logging.getLogger(__name__)

# Page background before / after the color flood.
CALM_COLOR = QColor(18, 18, 22)
FLOOD_COLOR = QColor(58, 30, 92)
# Resolution of the page-progress strip.
PAGE_PROGRESS_STEPS = 1000


def _mix(a: QColor, b: QColor, t: float) -> QColor:
    t = max(0.0, min(1.0, t))
    return QColor(
        int(a.red() + (b.red() - a.red()) * t),
        int(a.green() + (b.green() - a.green()) * t),
        int(a.blue() + (b.blue() - a.blue()) * t),
    )


def _reveal_easing() -> QEasingCurve:
    x1, y1, x2, y2 = REVEAL_EASE
    curve = QEasingCurve(QEasingCurve.Type.BezierSpline)
    curve.addCubicBezierSegment(QPointF(x1, y1), QPointF(x2, y2), QPointF(1.0, 1.0))
    return curve


class MainWindow(QMainWindow):
    """
    Single scrolling page: heading, the particle stage with its controls
    (the "shift zone" whose scroll progress tints the page), and a closing
    line.
    """

    def __init__(
        self,
        settings: Optional[QSettings] = None,
        reduced_motion: bool = False,
        text: Optional[str] = None,
        mobile: Optional[bool] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("From Presentation to Proof")

        self._reduced_motion = reduced_motion
        self._sections_revealed = False
        self._animations: List[QParallelAnimationGroup] = []

        central = QWidget(self)
        central_layout = QVBoxLayout(central)
        central_layout.setContentsMargins(0, 0, 0, 0)
        central_layout.setSpacing(0)

        # Thin page-progress strip above the scrolling page.
        self.page_progress = QProgressBar(central)
        self.page_progress.setRange(0, PAGE_PROGRESS_STEPS)
        self.page_progress.setTextVisible(False)
        self.page_progress.setFixedHeight(3)
        self.page_progress.setStyleSheet(
            "QProgressBar { border: none; background: #121216; }"
            "QProgressBar::chunk { background: #b28cff; }"
        )
        central_layout.addWidget(self.page_progress)

        self._scroll = QScrollArea(central)
        self._scroll.setWidgetResizable(True)
        self._scroll.setFrameShape(QFrame.Shape.NoFrame)
        central_layout.addWidget(self._scroll, stretch=1)
        self.setCentralWidget(central)

        self._page = QWidget()
        self._page.setObjectName("page")
        page_layout = QVBoxLayout(self._page)
        page_layout.setContentsMargins(48, 48, 48, 96)
        page_layout.setSpacing(36)

        heading = QLabel("From Presentation to Proof", self._page)
        heading.setStyleSheet("font-size: 34px; font-weight: 700; color: #f4f0ff;")
        lede = QLabel(
            "Type a title, tune the particles, press Play.",
            self._page,
        )
        lede.setStyleSheet("font-size: 16px; color: #bdb6d0;")
        page_layout.addWidget(heading)
        page_layout.addWidget(lede)

        # ---- Shift zone: stage + controls --------------------------------
        self.controls = RevealControlsPanel(settings=settings, parent=self._page)
        if text:
            self.controls.text_edit.setText(text)

        self._shift_zone = QWidget(self._page)
        self._shift_zone.setObjectName("shiftZone")
        self._shift_zone.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self._shift_zone.setMinimumHeight(900)
        zone_layout = QHBoxLayout(self._shift_zone)
        zone_layout.setContentsMargins(0, 0, 0, 0)

        self.stage = ParticleStageWidget(
            config=self.controls.config(),
            text=self.controls.text(),
            reduced_motion=reduced_motion,
            mobile=mobile,
            parent=self._shift_zone,
        )
        zone_layout.addWidget(self.stage, stretch=3)
        zone_layout.addWidget(self.controls, stretch=1)
        page_layout.addWidget(self._shift_zone)

        closing = QLabel("Proof beats presentation.", self._page)
        closing.setStyleSheet("font-size: 22px; color: #f4f0ff;")
        page_layout.addWidget(closing)

        self._sections: List[QWidget] = [heading, lede, self._shift_zone, closing]
        self._scroll.setWidget(self._page)

        # ---- Wiring ------------------------------------------------------
        self.controls.configChanged.connect(self.stage.apply_config)
        self.controls.playRequested.connect(self._on_play_requested)
        self.stage.runningChanged.connect(self.controls.set_running)
        self.stage.finished.connect(lambda: self.controls.set_running(False))
        self._scroll.verticalScrollBar().valueChanged.connect(self._on_scrolled)

        self._apply_shift(self._current_shift())
        self.resize(1200, 800)

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------
    def _on_play_requested(self) -> None:
        config: RevealConfig = self.controls.config()
        text = self.controls.commit_text()
        logger.debug("Play requested: %r %s", text, config_to_values(config))
        self.stage.play(config=config, text=text)

    # ------------------------------------------------------------------
    # Scroll shift
    # ------------------------------------------------------------------
    def _current_shift(self) -> ShiftVariables:
        return compute_shift_variables(
            scroll_y=float(self._scroll.verticalScrollBar().value()),
            zone_top=float(self._shift_zone.y()),
            zone_height=float(self._shift_zone.height()),
            viewport_height=float(self._scroll.viewport().height()),
            document_height=float(self._page.height()),
        )

    def _on_scrolled(self, _value: int) -> None:
        self._apply_shift(self._current_shift())

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._apply_shift(self._current_shift())

    def _apply_shift(self, shift: ShiftVariables) -> None:
        self.current_shift = shift

        color = _mix(CALM_COLOR, FLOOD_COLOR, shift.v)
        if shift.proof:
            color = color.lighter(100 + int(12 * shift.impact))
        self._page.setStyleSheet(f"QWidget#page {{ background-color: {color.name()}; }}")

        # The zone panel deepens with the flood; its border flares mid-zone.
        panel = _mix(CALM_COLOR, FLOOD_COLOR, shift.depth).darker(100 + int(40 * shift.depth))
        border_alpha = int(40 + 160 * shift.crack)
        self._shift_zone.setStyleSheet(
            f"QWidget#shiftZone {{ background-color: {panel.name()};"
            f" border: 1px solid rgba(178, 140, 255, {border_alpha}); border-radius: 12px; }}"
        )

        self.page_progress.setValue(int(round(shift.scroll * PAGE_PROGRESS_STEPS)))

    # ------------------------------------------------------------------
    # Section reveal
    # ------------------------------------------------------------------
    def showEvent(self, event) -> None:  # type: ignore[override]
        super().showEvent(event)
        if not self._sections_revealed:
            self._sections_revealed = True
            # Wait for the layout to assign final geometries.
            QTimer.singleShot(0, self._reveal_sections)

    def _reveal_sections(self) -> None:
        if self._reduced_motion:
            return

        motions = compute_reveal_motion("page", len(self._sections))
        delays = compute_reveal_delays(
            [float(w.y()) for w in self._sections],
            list(range(len(self._sections))),
        )
        easing = _reveal_easing()

        for widget, motion, delay in zip(self._sections, motions, delays):
            effect = QGraphicsOpacityEffect(widget)
            effect.setOpacity(0.0)
            widget.setGraphicsEffect(effect)

            final_pos = widget.pos()
            start_pos = final_pos + QPoint(int(motion.travel_x), int(motion.travel_y))
            widget.move(start_pos)

            fade = QPropertyAnimation(effect, b"opacity")
            fade.setStartValue(0.0)
            fade.setEndValue(1.0)
            fade.setDuration(motion.duration_ms)
            fade.setEasingCurve(easing)

            slide = QPropertyAnimation(widget, b"pos")
            slide.setStartValue(start_pos)
            slide.setEndValue(final_pos)
            slide.setDuration(motion.duration_ms)
            slide.setEasingCurve(easing)

            group = QParallelAnimationGroup(self)
            group.addAnimation(fade)
            group.addAnimation(slide)
            group.finished.connect(lambda w=widget: w.setGraphicsEffect(None))
            self._animations.append(group)
            QTimer.singleShot(delay, group.start)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Particle title reveal: canvas text unveiled by a live particle system."
    )
    parser.add_argument(
        "--reduced-motion",
        action="store_true",
        help="Skip the animation and show the final title (also read from settings).",
    )
    parser.add_argument(
        "--text",
        default=None,
        help="Title to reveal (defaults to the last one used).",
    )
    parser.add_argument(
        "--mobile",
        action="store_true",
        help="Use the lower particle cap of mobile devices.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    return parser


def reduced_motion_preference(settings: QSettings, forced: bool = False) -> bool:
    """Return the reduced-motion preference: CLI flag or stored setting."""
    if forced:
        return True
    try:
        return bool(settings.value("accessibility/reduced_motion", False, type=bool))
    except Exception:
        return False


def main(argv: Optional[List[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv[:1])
    settings = open_settings()

    win = MainWindow(
        settings=settings,
        reduced_motion=reduced_motion_preference(settings, args.reduced_motion),
        text=args.text,
        mobile=True if args.mobile else None,
    )
    win.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
