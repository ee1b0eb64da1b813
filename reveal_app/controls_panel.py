from __future__ import annotations

from typing import Any, Dict, Optional

from PyQt6.QtCore import QSettings, Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from reveal_app.control_api import ControlParameter
from reveal_app.reveal_config import (
    DEFAULT_TITLE,
    RevealConfig,
    config_from_values,
    control_parameters,
    format_readouts,
    sanitize_text,
)

SETTINGS_ORG = "RevealApp"
SETTINGS_APP = "ParticleReveal"


def open_settings() -> QSettings:
    """QSettings store shared by the controls panel and the launcher."""
    return QSettings(SETTINGS_ORG, SETTINGS_APP)


def load_control_values(settings: QSettings) -> Dict[str, Any]:
    """
    Read persisted control values. Unreadable entries are skipped so the
    parameter defaults apply.
    """
    values: Dict[str, Any] = {}
    for name, param in control_parameters().items():
        key = f"controls/{name}"
        if not settings.contains(key):
            continue
        try:
            values[name] = param.coerce(settings.value(key))
        except Exception:
            continue
    return values


class RevealControlsPanel(QWidget):
    """
    Live controls for the particle title animator.

    Widgets are generated from control_parameters(): numeric parameters get
    a slider and a readout label, booleans a checkbox, enums a combo box.
    Every change is persisted and re-emitted as a RevealConfig snapshot.
    """

    # Emitted with a RevealConfig whenever a control changes.
    configChanged = pyqtSignal(object)
    # Emitted when the user asks for a new run (Play button or Enter).
    playRequested = pyqtSignal()

    def __init__(self, settings: Optional[QSettings] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self._settings = settings if settings is not None else open_settings()
        self._params: Dict[str, ControlParameter] = control_parameters()
        self._values: Dict[str, Any] = {
            name: p.default for name, p in self._params.items()
        }
        self._values.update(load_control_values(self._settings))

        self.parameter_widgets: Dict[str, QWidget] = {}
        self.readout_labels: Dict[str, QLabel] = {}

        self._build_ui()
        self._refresh_readouts()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def config(self) -> RevealConfig:
        return config_from_values(self._values)

    def text(self) -> str:
        return sanitize_text(self.text_edit.text())

    def commit_text(self) -> str:
        """Sanitize the title field in place, persist it and return it."""
        text = self.text()
        self.text_edit.setText(text)
        self._settings.setValue("controls/text", text)
        return text

    def set_running(self, running: bool) -> None:
        """Disable the Play button while a reveal is running."""
        self.play_button.setEnabled(not running)

    def _on_return_pressed(self) -> None:
        # Enter acts as the Play button, including while it is disabled.
        if self.play_button.isEnabled():
            self.playRequested.emit()

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)

        text_group = QGroupBox("Title", self)
        text_row = QHBoxLayout(text_group)
        self.text_edit = QLineEdit(text_group)
        stored_text = self._settings.value("controls/text", DEFAULT_TITLE, type=str)
        self.text_edit.setText(sanitize_text(stored_text))
        self.text_edit.setPlaceholderText(DEFAULT_TITLE)
        self.text_edit.returnPressed.connect(self._on_return_pressed)
        text_row.addWidget(self.text_edit, stretch=1)

        self.play_button = QPushButton("Play", text_group)
        self.play_button.clicked.connect(self.playRequested.emit)
        text_row.addWidget(self.play_button)
        layout.addWidget(text_group)

        self.parameters_group = QGroupBox("Animation", self)
        self.parameter_form_layout = QFormLayout(self.parameters_group)
        for name, param in self._params.items():
            widget = self._create_widget_for_parameter(param, self._values.get(name, param.default))
            self.parameter_widgets[name] = widget
            label = QLabel(param.label or name, self.parameters_group)
            label.setToolTip(param.description)
            self.parameter_form_layout.addRow(label, widget)
            self._connect_parameter_widget(name, param, widget)
        layout.addWidget(self.parameters_group)
        layout.addStretch(1)

    def _create_widget_for_parameter(self, param: ControlParameter, current_value: Any) -> QWidget:
        """
        Create a Qt widget for a given ControlParameter and initial value.
        """
        if param.type == "bool":
            w = QCheckBox(self.parameters_group)
            w.setChecked(bool(param.coerce(current_value)))
            return w

        if param.type == "enum" and param.choices:
            w = QComboBox(self.parameters_group)
            for choice in param.choices:
                w.addItem(str(choice).capitalize(), choice)
            index_to_select = 0
            for i in range(w.count()):
                if w.itemData(i) == current_value:
                    index_to_select = i
                    break
            w.setCurrentIndex(index_to_select)
            return w

        # Numeric parameters: integer slider indexing discrete steps + readout.
        container = QWidget(self.parameters_group)
        row = QHBoxLayout(container)
        row.setContentsMargins(0, 0, 0, 0)

        slider = QSlider(Qt.Orientation.Horizontal, container)
        slider.setTickPosition(QSlider.TickPosition.NoTicks)

        value_label = QLabel(container)
        value_label.setMinimumWidth(60)
        value_label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self.readout_labels[param.name] = value_label

        min_v = float(param.minimum if param.minimum is not None else 0.0)
        max_v = float(param.maximum if param.maximum is not None else 1.0)
        step = float(param.step) if param.step else (max_v - min_v) / 100.0 or 0.01

        num_steps = max(1, int(round((max_v - min_v) / step)))
        slider.setMinimum(0)
        slider.setMaximum(num_steps)

        value = float(param.coerce(current_value))
        index = max(0, min(num_steps, int(round((value - min_v) / step))))
        slider.setValue(index)

        setattr(container, "_slider", slider)
        setattr(container, "_min", min_v)
        setattr(container, "_step", step)

        row.addWidget(slider, stretch=1)
        row.addWidget(value_label)
        return container

    def _connect_parameter_widget(self, name: str, param: ControlParameter, widget: QWidget) -> None:
        if isinstance(widget, QCheckBox):
            widget.toggled[bool].connect(
                lambda checked, n=name: self._on_parameter_changed(n, checked)
            )
            return

        if isinstance(widget, QComboBox):
            def _on_index_changed(
                index: int,
                combo: QComboBox = widget,
                param_name: str = name,
            ) -> None:
                self._on_parameter_changed(param_name, combo.itemData(index))

            widget.currentIndexChanged.connect(_on_index_changed)
            return

        slider = getattr(widget, "_slider", None)
        if isinstance(slider, QSlider):
            slider.valueChanged.connect(
                lambda idx, n=name, w=widget: self._on_slider_moved(n, w, idx)
            )

    def _on_slider_moved(self, name: str, container: QWidget, index: int) -> None:
        min_v = float(getattr(container, "_min", 0.0))
        step = float(getattr(container, "_step", 1.0))
        self._on_parameter_changed(name, round(min_v + index * step, 6))

    def _on_parameter_changed(self, name: str, value: Any) -> None:
        param = self._params[name]
        self._values[name] = param.coerce(value)
        self._settings.setValue(f"controls/{name}", self._values[name])
        self._refresh_readouts()
        self.configChanged.emit(self.config())

    def _refresh_readouts(self) -> None:
        readouts = format_readouts(self.config())
        for name, label in self.readout_labels.items():
            label.setText(readouts.get(name, ""))
